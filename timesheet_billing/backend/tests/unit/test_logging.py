"""Tests for the JSON logging setup."""

from __future__ import annotations

import json
import logging

from timesheet_billing.backend.src.core.logging import configure_logging


def test_stdlib_records_render_as_json() -> None:
    configure_logging()
    handler = logging.getLogger().handlers[0]
    record = logging.LogRecord(
        "sqlalchemy.engine", logging.WARNING, __file__, 1, 'SELECT "name" FROM clients', None, None
    )

    payload = json.loads(handler.format(record))

    assert payload["event"] == 'SELECT "name" FROM clients'
    assert payload["logger"] == "sqlalchemy.engine"
    assert payload["level"] == "warning"
    assert "_record" not in payload

"""Keep ``TimeEntry.is_written_off`` in step with line-item waive modes.

A time entry may be copied into several service descriptions. It counts as
written off while at least one of those line items, in any document, carries
a waive mode, so the flag is always recomputed from every referencing row
rather than derived from the item that just changed.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.models import ServiceDescriptionLineItem, TimeEntry

from .metrics import write_off_reconciliations_total

LOGGER = structlog.get_logger(__name__)


def has_waived_reference(session: Session, time_entry_id: int) -> bool:
    return (
        session.query(ServiceDescriptionLineItem.id)
        .filter(
            ServiceDescriptionLineItem.time_entry_id == time_entry_id,
            ServiceDescriptionLineItem.waive_mode.is_not(None),
        )
        .first()
        is not None
    )


def recompute_written_off(session: Session, time_entry_id: int) -> bool:
    """Recompute the flag of one entry and return its new value.

    Pending changes are flushed first so the scan sees the caller's edits
    and deletions. Does not commit.
    """

    session.flush()
    entry = session.get(TimeEntry, time_entry_id)
    if entry is None:
        write_off_reconciliations_total.labels(outcome="missing").inc()
        LOGGER.warning("write_off_entry_missing", time_entry_id=time_entry_id)
        return False

    written_off = has_waived_reference(session, time_entry_id)
    if entry.is_written_off == written_off:
        write_off_reconciliations_total.labels(outcome="unchanged").inc()
        return written_off

    entry.is_written_off = written_off
    session.add(entry)
    write_off_reconciliations_total.labels(
        outcome="written_off" if written_off else "restored"
    ).inc()
    LOGGER.info(
        "time_entry_write_off_updated",
        time_entry_id=time_entry_id,
        is_written_off=written_off,
    )
    return written_off


def reconcile_written_off(session: Session, time_entry_ids: Iterable[int | None]) -> None:
    """Recompute the flag for every distinct, non-null id in ``time_entry_ids``."""

    for time_entry_id in sorted({entry_id for entry_id in time_entry_ids if entry_id is not None}):
        recompute_written_off(session, time_entry_id)


def waived_time_entry_ids(items: Iterable[ServiceDescriptionLineItem]) -> list[int]:
    """Time entries referenced by waived items among ``items``."""

    return [
        item.time_entry_id
        for item in items
        if item.waive_mode is not None and item.time_entry_id is not None
    ]


__all__ = [
    "has_waived_reference",
    "recompute_written_off",
    "reconcile_written_off",
    "waived_time_entry_ids",
]

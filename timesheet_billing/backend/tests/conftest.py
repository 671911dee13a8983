"""Shared fixtures for the billing test suite."""

from __future__ import annotations

import os
from datetime import date
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_billing.db")

import pytest

from timesheet_billing.backend.src.db import Base, get_engine, session_scope
from timesheet_billing.backend.src.models import Client, TimeEntry, User


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def billing_data() -> dict[str, object]:
    """A partner, an associate, one client, and four unbilled time entries."""

    with session_scope() as session:
        partner = User(email="partner@example.com", name="Paula Partner", role="partner")
        associate = User(email="associate@example.com", name="Alex Associate", role="associate")
        client = Client(name="Acme Holdings", hourly_rate=Decimal("150.00"), status="ACTIVE")
        session.add_all([partner, associate, client])
        session.flush()

        entries = [
            TimeEntry(
                user_id=associate.id,
                client_id=client.id,
                date=date(2026, 2, 10),
                hours=Decimal("2.50"),
                description="Draft share purchase agreement",
                topic_name="Corporate",
            ),
            TimeEntry(
                user_id=associate.id,
                client_id=client.id,
                date=date(2026, 2, 3),
                hours=Decimal("1.00"),
                description="Call with client",
                topic_name="Corporate",
            ),
            TimeEntry(
                user_id=partner.id,
                client_id=client.id,
                date=date(2026, 2, 12),
                hours=Decimal("0.50"),
                description="Review correspondence",
                topic_name="",
            ),
            TimeEntry(
                user_id=partner.id,
                client_id=client.id,
                date=date(2026, 1, 20),
                hours=Decimal("3.00"),
                description="Pre-engagement meeting",
                topic_name="Corporate",
            ),
        ]
        session.add_all(entries)

    return {
        "partner": partner,
        "associate": associate,
        "client": client,
        "entries": entries,
    }

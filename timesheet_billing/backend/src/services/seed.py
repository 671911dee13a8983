"""Utilities for seeding development data."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.config import get_settings
from timesheet_billing.backend.src.models import Client, TimeEntry, User

DEFAULT_CLIENT_NAME = "Demo Client Ltd"
DEFAULT_CLIENT_RATE = Decimal("180.00")
DEFAULT_USER_EMAIL = "demo.partner@firm.example"
DEFAULT_USER_NAME = "Demo Partner"
DEFAULT_USER_ROLE = "admin"

# (day offset from the billing start, hours, topic, description)
DEMO_ENTRIES: tuple[tuple[int, str, str, str], ...] = (
    (1, "1.50", "Corporate", "Board minutes review"),
    (3, "2.00", "Corporate", "Draft shareholder resolution"),
    (4, "0.75", "Employment", "Advice on notice periods"),
    (8, "3.25", "Litigation", "Prepare statement of claim"),
    (9, "0.50", "", "Client call"),
)


@dataclass
class SeedResult:
    """Information about the seeded records."""

    user: User
    client: Client
    user_created: bool
    client_created: bool
    entries: list[TimeEntry] = field(default_factory=list)


def seed_development_data(
    session: Session,
    *,
    user_email: str = DEFAULT_USER_EMAIL,
    user_name: str = DEFAULT_USER_NAME,
    user_role: str = DEFAULT_USER_ROLE,
    client_name: str = DEFAULT_CLIENT_NAME,
    auth0_sub: str | None = None,
) -> SeedResult:
    """Ensure a demo billing user, a client, and unbilled time exist.

    Time entries are only added when the client is created, so running the
    seed twice does not duplicate hours.
    """

    user = session.query(User).filter(User.email == user_email).one_or_none()
    user_created = False
    if user is None:
        user = User(email=user_email, name=user_name, role=user_role, auth0_sub=auth0_sub)
        session.add(user)
        session.flush()
        user_created = True
    else:
        if user.role != user_role:
            user.role = user_role
        if auth0_sub and user.auth0_sub != auth0_sub:
            user.auth0_sub = auth0_sub

    client = session.query(Client).filter(Client.name == client_name).one_or_none()
    client_created = False
    entries: list[TimeEntry] = []
    if client is None:
        client = Client(name=client_name, hourly_rate=DEFAULT_CLIENT_RATE)
        session.add(client)
        session.flush()
        client_created = True

        start = get_settings().billing_start_date
        for offset, hours, topic_name, description in DEMO_ENTRIES:
            entries.append(
                TimeEntry(
                    user_id=user.id,
                    client_id=client.id,
                    date=start + dt.timedelta(days=offset),
                    hours=Decimal(hours),
                    description=description,
                    topic_name=topic_name,
                )
            )
        session.add_all(entries)
        session.flush()

    return SeedResult(
        user=user,
        client=client,
        user_created=user_created,
        client_created=client_created,
        entries=entries,
    )


__all__ = ["seed_development_data", "SeedResult"]

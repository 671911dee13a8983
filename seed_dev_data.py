"""Seed the development database with a demo partner, client, and unbilled time."""

import os

from timesheet_billing.backend.src.db import Base, get_engine, session_scope
from timesheet_billing.backend.src.services.seed import seed_development_data


def main() -> None:
    """Create tables (if needed) and ensure demo billing data exists."""

    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    with session_scope() as session:
        auth0_sub = os.environ.get("AUTH0_DEMO_SUB")
        result = seed_development_data(session, auth0_sub=auth0_sub)
        session.flush()

        print("Development data ready!")
        user_status = "created" if result.user_created else "unchanged"
        client_status = "created" if result.client_created else "unchanged"
        print(
            f"User ({user_status}): {result.user.name} <{result.user.email}> "
            f"[id={result.user.id}, role={result.user.role}]"
        )
        print(f"Client ({client_status}): {result.client.name} [id={result.client.id}]")
        print(f"Time entries added: {len(result.entries)}")
        print()
        if auth0_sub:
            print(f"Linked Auth0 subject: {auth0_sub}")
        else:
            print("Set AUTH0_DEMO_SUB to automatically link an Auth0 subject during seeding.")


if __name__ == "__main__":
    main()

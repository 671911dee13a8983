from timesheet_billing.backend.src import models  # noqa: F401
from timesheet_billing.backend.src.db import Base, get_engine


def init_db():
    engine = get_engine()
    print(f"Connecting to {engine.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=engine)
    print("Billing tables created successfully!")

if __name__ == "__main__":
    init_db()

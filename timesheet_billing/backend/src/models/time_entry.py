"""Time entry model."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_billing.backend.src.db.base import Base


class TimeEntry(Base):
    """Hours an employee logged against a client.

    ``is_written_off`` is denormalized: it is true exactly when some line item,
    in any service description, references this entry with a waive mode set.
    The billing services keep it in sync.
    """

    __tablename__ = "time_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    hours: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    topic_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_written_off: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="time_entries")
    client: Mapped["Client"] = relationship("Client", back_populates="time_entries")
    billing_line_items: Mapped[list["ServiceDescriptionLineItem"]] = relationship(
        "ServiceDescriptionLineItem", back_populates="time_entry"
    )


__all__ = ["TimeEntry"]

"""Service description line item model."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_billing.backend.src.db.base import Base


class ServiceDescriptionLineItem(Base):
    """A billable row of a topic, copied from a time entry or added by hand."""

    __tablename__ = "service_description_line_items"
    __table_args__ = (
        CheckConstraint(
            "(waive_mode IS NULL) OR (waive_mode IN ('EXCLUDED','ZERO'))",
            name="ck_line_item_waive_mode_valid",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    topic_id: Mapped[int] = mapped_column(
        ForeignKey("service_description_topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    time_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("time_entries.id"), nullable=True, index=True
    )
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    hours: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    fixed_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    waive_mode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    topic: Mapped["ServiceDescriptionTopic"] = relationship(
        "ServiceDescriptionTopic", back_populates="line_items"
    )
    time_entry: Mapped["TimeEntry | None"] = relationship(
        "TimeEntry", back_populates="billing_line_items"
    )

    @property
    def is_waived(self) -> bool:
        return self.waive_mode is not None


__all__ = ["ServiceDescriptionLineItem"]

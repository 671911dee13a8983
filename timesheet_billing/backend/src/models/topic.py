"""Service description topic model."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_billing.backend.src.db.base import Base

from .enums import PricingMode


class ServiceDescriptionTopic(Base):
    """A priced grouping of line items inside a service description."""

    __tablename__ = "service_description_topics"
    __table_args__ = (
        CheckConstraint("pricing_mode IN ('HOURLY','FIXED')", name="ck_topic_pricing_mode_valid"),
        CheckConstraint(
            "(discount_type IS NULL) OR (discount_type IN ('PERCENTAGE','AMOUNT'))",
            name="ck_topic_discount_type_valid",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_description_id: Mapped[int] = mapped_column(
        ForeignKey("service_descriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    topic_name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pricing_mode: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PricingMode.HOURLY.value
    )
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    fixed_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    cap_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    discount_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    discount_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    service_description: Mapped["ServiceDescription"] = relationship(
        "ServiceDescription", back_populates="topics"
    )
    line_items: Mapped[list["ServiceDescriptionLineItem"]] = relationship(
        "ServiceDescriptionLineItem",
        back_populates="topic",
        cascade="all, delete-orphan",
        order_by="ServiceDescriptionLineItem.display_order",
    )


__all__ = ["ServiceDescriptionTopic"]

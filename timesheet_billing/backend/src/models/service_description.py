"""Service description (draft invoice) model."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_billing.backend.src.db.base import Base

from .enums import DocumentStatus


class ServiceDescription(Base):
    """A client's billing document for one period, built from its time entries."""

    __tablename__ = "service_descriptions"
    __table_args__ = (
        CheckConstraint("status IN ('DRAFT','FINALIZED')", name="ck_sd_status_valid"),
        CheckConstraint(
            "(discount_type IS NULL) OR (discount_type IN ('PERCENTAGE','AMOUNT'))",
            name="ck_sd_discount_type_valid",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False, index=True)
    period_start: Mapped[dt.date] = mapped_column(Date, nullable=False)
    period_end: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=DocumentStatus.DRAFT.value
    )
    finalized_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    finalized_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    discount_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    discount_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    retainer_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    retainer_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    retainer_overage_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    client: Mapped["Client"] = relationship("Client", back_populates="service_descriptions")
    finalized_by: Mapped["User | None"] = relationship("User")
    topics: Mapped[list["ServiceDescriptionTopic"]] = relationship(
        "ServiceDescriptionTopic",
        back_populates="service_description",
        cascade="all, delete-orphan",
        order_by="ServiceDescriptionTopic.display_order",
    )

    @property
    def is_finalized(self) -> bool:
        return self.status == DocumentStatus.FINALIZED.value


__all__ = ["ServiceDescription"]

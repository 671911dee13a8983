"""Client model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_billing.backend.src.db.base import Base

from .enums import ClientStatus


class Client(Base):
    """A firm client that time is logged against and billed to."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    invoiced_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    invoice_attn: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ClientStatus.ACTIVE.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    time_entries: Mapped[list["TimeEntry"]] = relationship(
        "TimeEntry", back_populates="client"
    )
    service_descriptions: Mapped[list["ServiceDescription"]] = relationship(
        "ServiceDescription", back_populates="client"
    )


__all__ = ["Client"]

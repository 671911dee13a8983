"""Request and response schemas for service description billing."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from timesheet_billing.backend.src.models import (
    ServiceDescription,
    ServiceDescriptionLineItem,
    ServiceDescriptionTopic,
)
from timesheet_billing.backend.src.services.aggregation import (
    DocumentTotals,
    RetainerBreakdown,
    calculate_document_totals,
)
from timesheet_billing.backend.src.services.money import serialize_decimal
from timesheet_billing.backend.src.services.pricing import TopicTotals


class ServiceDescriptionCreate(BaseModel):
    """Payload for creating a draft from a client's unbilled time."""

    client_id: int
    period_start: dt.date
    period_end: dt.date


class ServiceDescriptionUpdate(BaseModel):
    """Partial update of a service description.

    Only the fields present in the request body are applied; an explicit
    ``null`` clears a setting.
    """

    status: str | None = None
    discount_type: str | None = None
    discount_value: Decimal | None = None
    retainer_fee: Decimal | None = None
    retainer_hours: Decimal | None = None
    retainer_overage_rate: Decimal | None = None


class TopicCreate(BaseModel):
    topic_name: str
    pricing_mode: str | None = None
    hourly_rate: Decimal | None = None
    fixed_fee: Decimal | None = None
    cap_hours: Decimal | None = None
    discount_type: str | None = None
    discount_value: Decimal | None = None


class TopicUpdate(BaseModel):
    topic_name: str | None = None
    pricing_mode: str | None = None
    hourly_rate: Decimal | None = None
    fixed_fee: Decimal | None = None
    cap_hours: Decimal | None = None
    discount_type: str | None = None
    discount_value: Decimal | None = None


class LineItemCreate(BaseModel):
    date: dt.date | None = None
    description: str
    hours: Decimal | None = None
    fixed_amount: Decimal | None = None


class LineItemUpdate(BaseModel):
    """Edit of a line item; ``waive_mode`` waives or restores it."""

    date: dt.date | None = None
    description: str | None = None
    hours: Decimal | None = None
    fixed_amount: Decimal | None = None
    waive_mode: str | None = None


class TopicOrderEntry(BaseModel):
    id: int
    display_order: int = Field(ge=0)


class TopicReorder(BaseModel):
    items: list[TopicOrderEntry]


class LineItemOrderEntry(BaseModel):
    id: int
    topic_id: int
    display_order: int = Field(ge=0)


class LineItemReorder(BaseModel):
    items: list[LineItemOrderEntry]


class SuccessResponse(BaseModel):
    success: bool = True


class CreatedResponse(BaseModel):
    id: int


class ClientSummary(BaseModel):
    id: int
    name: str
    invoiced_name: str | None
    invoice_attn: str | None
    hourly_rate: float | None


class LineItemOut(BaseModel):
    """A line item with the source time entry's values for audit display."""

    id: int
    topic_id: int
    time_entry_id: int | None
    date: dt.date | None
    description: str
    hours: float | None
    fixed_amount: float | None
    display_order: int
    waive_mode: str | None
    original_description: str | None = None
    original_hours: float | None = None
    employee_name: str | None = None


class TopicOut(BaseModel):
    id: int
    topic_name: str
    display_order: int
    pricing_mode: str
    hourly_rate: float | None
    fixed_fee: float | None
    cap_hours: float | None
    discount_type: str | None
    discount_value: float | None
    hours_worked: float
    billed_hours: float
    base_total: float
    discount_amount: float
    total: float
    line_items: list[LineItemOut]


class RetainerSummary(BaseModel):
    total_hourly_hours: float
    retainer_hours: float
    retainer_fee: float
    overage_hours: float
    overage_rate: float
    overage_amount: float
    fixed_topic_fees: float
    fixed_line_item_fees: float


class ServiceDescriptionOut(BaseModel):
    """Full document graph with computed totals."""

    id: int
    client: ClientSummary
    period_start: dt.date
    period_end: dt.date
    status: str
    finalized_at: dt.datetime | None
    finalized_by_name: str | None
    discount_type: str | None
    discount_value: float | None
    retainer_fee: float | None
    retainer_hours: float | None
    retainer_overage_rate: float | None
    subtotal: float
    discount_amount: float
    grand_total: float
    retainer: RetainerSummary | None
    topics: list[TopicOut]
    created_at: dt.datetime | None
    updated_at: dt.datetime | None


class ServiceDescriptionListItem(BaseModel):
    id: int
    client_id: int
    client_name: str
    period_start: dt.date
    period_end: dt.date
    status: str
    finalized_at: dt.datetime | None
    total_amount: float
    updated_at: dt.datetime | None


class ServiceDescriptionUpdateOut(BaseModel):
    id: int
    status: str
    finalized_at: dt.datetime | None
    discount_type: str | None
    discount_value: float | None
    retainer_fee: float | None
    retainer_hours: float | None
    retainer_overage_rate: float | None

    model_config = ConfigDict(from_attributes=True)


class DraftReference(BaseModel):
    id: int
    period_start: dt.date
    period_end: dt.date


class UnbilledClientSummary(BaseModel):
    client_id: int
    client_name: str
    hourly_rate: float | None
    total_unbilled_hours: float
    estimated_value: float | None
    oldest_entry_date: dt.date | None
    newest_entry_date: dt.date | None
    existing_draft: DraftReference | None


def build_line_item(item: ServiceDescriptionLineItem) -> LineItemOut:
    entry = item.time_entry
    return LineItemOut(
        id=item.id,
        topic_id=item.topic_id,
        time_entry_id=item.time_entry_id,
        date=item.date,
        description=item.description,
        hours=serialize_decimal(item.hours),
        fixed_amount=serialize_decimal(item.fixed_amount),
        display_order=item.display_order,
        waive_mode=item.waive_mode,
        original_description=entry.description if entry is not None else None,
        original_hours=serialize_decimal(entry.hours) if entry is not None else None,
        employee_name=entry.user.name if entry is not None and entry.user is not None else None,
    )


def build_topic(topic: ServiceDescriptionTopic, totals: TopicTotals) -> TopicOut:
    return TopicOut(
        id=topic.id,
        topic_name=topic.topic_name,
        display_order=topic.display_order,
        pricing_mode=topic.pricing_mode,
        hourly_rate=serialize_decimal(topic.hourly_rate),
        fixed_fee=serialize_decimal(topic.fixed_fee),
        cap_hours=serialize_decimal(topic.cap_hours),
        discount_type=topic.discount_type,
        discount_value=serialize_decimal(topic.discount_value),
        hours_worked=float(totals.hours_worked),
        billed_hours=float(totals.billed_hours),
        base_total=float(totals.base_total),
        discount_amount=float(totals.discount_amount),
        total=float(totals.final_total),
        line_items=[build_line_item(item) for item in topic.line_items],
    )


def build_retainer(breakdown: RetainerBreakdown | None) -> RetainerSummary | None:
    if breakdown is None:
        return None
    return RetainerSummary(
        total_hourly_hours=float(breakdown.total_hourly_hours),
        retainer_hours=float(breakdown.retainer_hours),
        retainer_fee=float(breakdown.retainer_fee),
        overage_hours=float(breakdown.overage_hours),
        overage_rate=float(breakdown.overage_rate),
        overage_amount=float(breakdown.overage_amount),
        fixed_topic_fees=float(breakdown.fixed_topic_fees),
        fixed_line_item_fees=float(breakdown.fixed_line_item_fees),
    )


def serialize_service_description(
    document: ServiceDescription, totals: DocumentTotals | None = None
) -> ServiceDescriptionOut:
    """Build the response for ``GET /billing/{id}``."""

    totals = totals or calculate_document_totals(document)
    client = document.client
    return ServiceDescriptionOut(
        id=document.id,
        client=ClientSummary(
            id=client.id,
            name=client.name,
            invoiced_name=client.invoiced_name,
            invoice_attn=client.invoice_attn,
            hourly_rate=serialize_decimal(client.hourly_rate),
        ),
        period_start=document.period_start,
        period_end=document.period_end,
        status=document.status,
        finalized_at=document.finalized_at,
        finalized_by_name=document.finalized_by.name if document.finalized_by else None,
        discount_type=document.discount_type,
        discount_value=serialize_decimal(document.discount_value),
        retainer_fee=serialize_decimal(document.retainer_fee),
        retainer_hours=serialize_decimal(document.retainer_hours),
        retainer_overage_rate=serialize_decimal(document.retainer_overage_rate),
        subtotal=float(totals.subtotal),
        discount_amount=float(totals.discount_amount),
        grand_total=float(totals.grand_total),
        retainer=build_retainer(totals.retainer),
        topics=[
            build_topic(topic, topic_totals)
            for topic, topic_totals in zip(document.topics, totals.topics)
        ],
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


def serialize_list_item(document: ServiceDescription) -> ServiceDescriptionListItem:
    return ServiceDescriptionListItem(
        id=document.id,
        client_id=document.client_id,
        client_name=document.client.name,
        period_start=document.period_start,
        period_end=document.period_end,
        status=document.status,
        finalized_at=document.finalized_at,
        total_amount=float(calculate_document_totals(document).grand_total),
        updated_at=document.updated_at,
    )


def serialize_update(document: ServiceDescription) -> ServiceDescriptionUpdateOut:
    return ServiceDescriptionUpdateOut(
        id=document.id,
        status=document.status,
        finalized_at=document.finalized_at,
        discount_type=document.discount_type,
        discount_value=serialize_decimal(document.discount_value),
        retainer_fee=serialize_decimal(document.retainer_fee),
        retainer_hours=serialize_decimal(document.retainer_hours),
        retainer_overage_rate=serialize_decimal(document.retainer_overage_rate),
    )


__all__ = [
    "ClientSummary",
    "CreatedResponse",
    "DraftReference",
    "LineItemCreate",
    "LineItemOrderEntry",
    "LineItemOut",
    "LineItemReorder",
    "LineItemUpdate",
    "RetainerSummary",
    "ServiceDescriptionCreate",
    "ServiceDescriptionListItem",
    "ServiceDescriptionOut",
    "ServiceDescriptionUpdate",
    "ServiceDescriptionUpdateOut",
    "SuccessResponse",
    "TopicCreate",
    "TopicOrderEntry",
    "TopicOut",
    "TopicReorder",
    "TopicUpdate",
    "UnbilledClientSummary",
    "build_line_item",
    "build_topic",
    "serialize_list_item",
    "serialize_service_description",
    "serialize_update",
]

"""Service description lifecycle: create, list, update settings, finalize, delete."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from decimal import Decimal
from itertools import groupby

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from timesheet_billing.backend.src.core.config import get_settings
from timesheet_billing.backend.src.core.errors import (
    BillingError,
    CannotDeleteFinalized,
    DocumentFinalized,
    InvalidPeriod,
    InvalidRetainer,
    InvalidStatus,
    NotFound,
)
from timesheet_billing.backend.src.models import (
    Client,
    ClientStatus,
    DocumentStatus,
    PricingMode,
    ServiceDescription,
    ServiceDescriptionLineItem,
    ServiceDescriptionTopic,
    TimeEntry,
    User,
)
from timesheet_billing.backend.src.schemas.billing import DraftReference, UnbilledClientSummary

from .discounts import apply_discount_changes
from .lookups import get_document, require_draft
from .metrics import document_transitions_total
from .money import ZERO, optional_decimal, quantize_money, serialize_decimal, to_decimal
from .write_offs import reconcile_written_off, waived_time_entry_ids

LOGGER = structlog.get_logger(__name__)

DEFAULT_TOPIC_NAME = "Other"
RETAINER_FIELDS = ("retainer_fee", "retainer_hours", "retainer_overage_rate")
SETTING_FIELDS = ("discount_type", "discount_value", *RETAINER_FIELDS)


def _finalized_time_entry_ids():
    """Subquery of time entries already billed in a finalized document."""

    return (
        select(ServiceDescriptionLineItem.time_entry_id)
        .join(ServiceDescriptionTopic, ServiceDescriptionLineItem.topic_id == ServiceDescriptionTopic.id)
        .join(ServiceDescription, ServiceDescriptionTopic.service_description_id == ServiceDescription.id)
        .where(
            ServiceDescription.status == DocumentStatus.FINALIZED.value,
            ServiceDescriptionLineItem.time_entry_id.is_not(None),
        )
    )


def _unbilled_entries(
    session: Session, client_id: int, period_start: dt.date, period_end: dt.date
) -> list[TimeEntry]:
    start = max(period_start, get_settings().billing_start_date)
    return (
        session.query(TimeEntry)
        .filter(
            TimeEntry.client_id == client_id,
            TimeEntry.date >= start,
            TimeEntry.date <= period_end,
            TimeEntry.id.not_in(_finalized_time_entry_ids()),
        )
        .order_by(TimeEntry.date.asc(), TimeEntry.id.asc())
        .all()
    )


def _topic_key(entry: TimeEntry) -> str:
    return (entry.topic_name or "").strip() or DEFAULT_TOPIC_NAME


def list_service_descriptions(session: Session) -> list[ServiceDescription]:
    """Return every document with its graph loaded, most recently updated first."""

    return (
        session.query(ServiceDescription)
        .options(
            selectinload(ServiceDescription.client),
            selectinload(ServiceDescription.topics).selectinload(ServiceDescriptionTopic.line_items),
        )
        .order_by(ServiceDescription.updated_at.desc(), ServiceDescription.id.desc())
        .all()
    )


def get_service_description(session: Session, document_id: int) -> ServiceDescription:
    return get_document(session, document_id, with_entries=True)


def create_service_description(
    session: Session,
    client_id: int,
    period_start: dt.date,
    period_end: dt.date,
) -> ServiceDescription:
    """Build a draft from the client's unbilled time in the period.

    Entries already on a finalized document are skipped. Entries are grouped
    into HOURLY topics by topic name at the client's rate, one line item per
    entry in date order.
    """

    if period_start > period_end:
        raise InvalidPeriod()

    client = session.get(Client, client_id)
    if client is None:
        raise NotFound("Client not found")

    document = ServiceDescription(
        client_id=client.id,
        period_start=period_start,
        period_end=period_end,
        status=DocumentStatus.DRAFT.value,
    )

    entries = _unbilled_entries(session, client.id, period_start, period_end)
    grouped = sorted(entries, key=lambda entry: (_topic_key(entry), entry.date, entry.id))
    for topic_index, (topic_name, topic_entries) in enumerate(groupby(grouped, key=_topic_key)):
        topic = ServiceDescriptionTopic(
            topic_name=topic_name,
            display_order=topic_index,
            pricing_mode=PricingMode.HOURLY.value,
            hourly_rate=client.hourly_rate,
        )
        for item_index, entry in enumerate(topic_entries):
            topic.line_items.append(
                ServiceDescriptionLineItem(
                    time_entry_id=entry.id,
                    date=entry.date,
                    description=entry.description,
                    hours=entry.hours,
                    display_order=item_index,
                )
            )
        document.topics.append(topic)

    session.add(document)
    session.commit()
    session.refresh(document)
    LOGGER.info(
        "service_description_created",
        document_id=document.id,
        client_id=client.id,
        topics=len(document.topics),
        entries=len(entries),
    )
    return document


def _finalize(document: ServiceDescription, actor: User | None) -> None:
    if document.is_finalized:
        LOGGER.warning("service_description_already_finalized", document_id=document.id)
        raise DocumentFinalized("Service description is already finalized")
    document.status = DocumentStatus.FINALIZED.value
    document.finalized_at = dt.datetime.now(dt.timezone.utc)
    document.finalized_by_id = actor.id if actor is not None else None


def _unlock(document: ServiceDescription) -> None:
    if not document.is_finalized:
        LOGGER.warning("service_description_not_finalized", document_id=document.id)
        raise InvalidStatus("Service description is not finalized")
    document.status = DocumentStatus.DRAFT.value
    document.finalized_at = None
    document.finalized_by_id = None


def _validate_retainer_value(raw: object | None) -> Decimal | None:
    value = optional_decimal(raw)
    if value is not None and value <= ZERO:
        raise InvalidRetainer()
    return value


def update_service_description(
    session: Session,
    document_id: int,
    changes: Mapping[str, object],
    actor: User | None = None,
) -> ServiceDescription:
    """Change the status or the billing settings of a document.

    A ``status`` change finalizes or unlocks the document and cannot be mixed
    with setting changes. Discount and retainer changes require a DRAFT.
    """

    settings_changes = [field for field in SETTING_FIELDS if field in changes]
    if "status" not in changes and not settings_changes:
        raise BillingError("No update fields provided")
    if "status" in changes and settings_changes:
        raise InvalidStatus("Status changes cannot be combined with other updates")

    document = get_document(session, document_id, for_update=True)

    if "status" in changes:
        status_value = changes["status"]
        if status_value == DocumentStatus.FINALIZED.value:
            _finalize(document, actor)
            action = "finalize"
        elif status_value == DocumentStatus.DRAFT.value:
            _unlock(document)
            action = "unlock"
        else:
            raise InvalidStatus()
        session.add(document)
        session.commit()
        session.refresh(document)
        document_transitions_total.labels(action=action).inc()
        LOGGER.info(
            "service_description_status_changed",
            document_id=document.id,
            status=document.status,
            actor_id=actor.id if actor is not None else None,
        )
        return document

    require_draft(document)
    apply_discount_changes(document, changes)
    for field in RETAINER_FIELDS:
        if field in changes:
            setattr(document, field, _validate_retainer_value(changes[field]))

    session.add(document)
    session.commit()
    session.refresh(document)
    LOGGER.info(
        "service_description_settings_updated",
        document_id=document.id,
        fields=settings_changes,
    )
    return document


def finalize_service_description(
    session: Session, document_id: int, actor: User | None = None
) -> ServiceDescription:
    return update_service_description(
        session, document_id, {"status": DocumentStatus.FINALIZED.value}, actor
    )


def unlock_service_description(
    session: Session, document_id: int, actor: User | None = None
) -> ServiceDescription:
    return update_service_description(
        session, document_id, {"status": DocumentStatus.DRAFT.value}, actor
    )


def delete_service_description(session: Session, document_id: int) -> None:
    """Delete a draft and clear write-offs that only this document held."""

    document = get_document(session, document_id, for_update=True)
    if document.is_finalized:
        LOGGER.warning("finalized_document_delete_rejected", document_id=document_id)
        raise CannotDeleteFinalized()

    affected_entries = waived_time_entry_ids(
        item for topic in document.topics for item in topic.line_items
    )
    session.delete(document)
    session.flush()
    reconcile_written_off(session, affected_entries)

    session.commit()
    document_transitions_total.labels(action="delete").inc()
    LOGGER.info(
        "service_description_deleted",
        document_id=document_id,
        reconciled_entries=len(set(affected_entries)),
    )


def unbilled_summary(session: Session) -> list[UnbilledClientSummary]:
    """Summarize unbilled time per active client, largest estimated value first."""

    billing_start = get_settings().billing_start_date
    rows = session.execute(
        select(
            Client.id,
            Client.name,
            Client.hourly_rate,
            func.sum(TimeEntry.hours),
            func.min(TimeEntry.date),
            func.max(TimeEntry.date),
        )
        .join(TimeEntry, TimeEntry.client_id == Client.id)
        .where(
            Client.status == ClientStatus.ACTIVE.value,
            TimeEntry.date >= billing_start,
            TimeEntry.id.not_in(_finalized_time_entry_ids()),
        )
        .group_by(Client.id, Client.name, Client.hourly_rate)
    ).all()

    drafts: dict[int, ServiceDescription] = {}
    for draft in (
        session.query(ServiceDescription)
        .filter(ServiceDescription.status == DocumentStatus.DRAFT.value)
        .order_by(ServiceDescription.updated_at.desc(), ServiceDescription.id.desc())
    ):
        drafts.setdefault(draft.client_id, draft)

    summaries: list[UnbilledClientSummary] = []
    for client_id, client_name, hourly_rate, total_hours, oldest, newest in rows:
        hours = to_decimal(total_hours)
        estimated = quantize_money(hours * to_decimal(hourly_rate)) if hourly_rate is not None else None
        draft = drafts.get(client_id)
        summaries.append(
            UnbilledClientSummary(
                client_id=client_id,
                client_name=client_name,
                hourly_rate=serialize_decimal(hourly_rate),
                total_unbilled_hours=float(hours),
                estimated_value=serialize_decimal(estimated),
                oldest_entry_date=oldest,
                newest_entry_date=newest,
                existing_draft=(
                    DraftReference(
                        id=draft.id,
                        period_start=draft.period_start,
                        period_end=draft.period_end,
                    )
                    if draft is not None
                    else None
                ),
            )
        )

    summaries.sort(
        key=lambda summary: (summary.estimated_value is None, -(summary.estimated_value or 0))
    )
    return summaries


__all__ = [
    "create_service_description",
    "delete_service_description",
    "finalize_service_description",
    "get_service_description",
    "list_service_descriptions",
    "unbilled_summary",
    "unlock_service_description",
    "update_service_description",
]

"""Topic management within a draft service description."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.errors import (
    BillingError,
    EmptyDescription,
    InvalidCapHours,
    InvalidPricingMode,
    ReorderConflict,
)
from timesheet_billing.backend.src.models import PricingMode, ServiceDescriptionTopic
from timesheet_billing.backend.src.schemas.billing import TopicOrderEntry

from .discounts import apply_discount_changes
from .lookups import get_topic, load_draft
from .money import ZERO, optional_decimal
from .ordering import apply_order, renumber
from .write_offs import reconcile_written_off, waived_time_entry_ids

LOGGER = structlog.get_logger(__name__)


def _clean_name(raw: object | None) -> str:
    name = str(raw or "").strip()
    if not name:
        raise EmptyDescription("Topic name is required")
    return name


def parse_pricing_mode(raw: object | None) -> PricingMode:
    try:
        return PricingMode(raw)
    except ValueError as exc:
        raise InvalidPricingMode() from exc


def _validate_cap_hours(raw: object | None) -> Decimal | None:
    cap = optional_decimal(raw)
    if cap is not None and cap <= ZERO:
        raise InvalidCapHours()
    return cap


def add_topic(
    session: Session,
    document_id: int,
    changes: Mapping[str, object],
) -> ServiceDescriptionTopic:
    """Append a topic to the document.

    Any pricing mode other than FIXED means HOURLY. The hourly rate defaults
    to the client's rate.
    """

    document = load_draft(session, document_id)

    if changes.get("pricing_mode") == PricingMode.FIXED.value:
        mode = PricingMode.FIXED
    else:
        mode = PricingMode.HOURLY
    hourly_rate = optional_decimal(changes.get("hourly_rate"))
    if hourly_rate is None and mode is PricingMode.HOURLY:
        hourly_rate = document.client.hourly_rate

    topic = ServiceDescriptionTopic(
        topic_name=_clean_name(changes.get("topic_name")),
        display_order=len(document.topics),
        pricing_mode=mode.value,
        hourly_rate=hourly_rate,
        fixed_fee=optional_decimal(changes.get("fixed_fee")),
        cap_hours=None,
    )
    if mode is PricingMode.HOURLY:
        topic.cap_hours = _validate_cap_hours(changes.get("cap_hours"))
    apply_discount_changes(topic, changes)

    document.topics.append(topic)
    session.commit()
    session.refresh(topic)
    LOGGER.info(
        "topic_added",
        document_id=document_id,
        topic_id=topic.id,
        pricing_mode=topic.pricing_mode,
    )
    return topic


def update_topic(
    session: Session,
    document_id: int,
    topic_id: int,
    changes: Mapping[str, object],
) -> ServiceDescriptionTopic:
    """Apply a partial update to a topic's name, pricing, or discount."""

    if not changes:
        raise BillingError("No update fields provided")

    document = load_draft(session, document_id)
    topic = get_topic(document, topic_id)

    if "topic_name" in changes:
        topic.topic_name = _clean_name(changes["topic_name"])
    if "pricing_mode" in changes:
        topic.pricing_mode = parse_pricing_mode(changes["pricing_mode"]).value
    if "hourly_rate" in changes:
        topic.hourly_rate = optional_decimal(changes["hourly_rate"])
    if "fixed_fee" in changes:
        topic.fixed_fee = optional_decimal(changes["fixed_fee"])
    if "cap_hours" in changes:
        topic.cap_hours = _validate_cap_hours(changes["cap_hours"])
    if topic.pricing_mode == PricingMode.FIXED.value:
        topic.cap_hours = None
    apply_discount_changes(topic, changes)

    session.add(topic)
    session.commit()
    session.refresh(topic)
    LOGGER.info("topic_updated", document_id=document_id, topic_id=topic_id, fields=sorted(changes))
    return topic


def delete_topic(session: Session, document_id: int, topic_id: int) -> None:
    """Delete a topic with its line items and resync affected time entries."""

    document = load_draft(session, document_id)
    topic = get_topic(document, topic_id)
    affected_entries = waived_time_entry_ids(topic.line_items)

    document.topics.remove(topic)
    renumber(document.topics)
    session.flush()
    reconcile_written_off(session, affected_entries)

    session.commit()
    LOGGER.info(
        "topic_deleted",
        document_id=document_id,
        topic_id=topic_id,
        reconciled_entries=len(set(affected_entries)),
    )


def reorder_topics(
    session: Session, document_id: int, entries: Sequence[TopicOrderEntry]
) -> None:
    """Apply a batch of topic positions and renumber densely."""

    if not entries:
        raise BillingError("Items array is required")

    document = load_draft(session, document_id)
    topic_ids = {topic.id for topic in document.topics}

    requested: dict[int, int] = {}
    for entry in entries:
        if entry.id not in topic_ids or entry.id in requested:
            LOGGER.warning("topic_reorder_rejected", document_id=document_id, topic_id=entry.id)
            raise ReorderConflict("Topic does not belong to this service description")
        requested[entry.id] = entry.display_order

    apply_order(document.topics, requested)
    session.commit()
    session.expire(document, ["topics"])
    LOGGER.info("topics_reordered", document_id=document_id, count=len(entries))


__all__ = [
    "add_topic",
    "delete_topic",
    "parse_pricing_mode",
    "reorder_topics",
    "update_topic",
]

"""Line-item lifecycle: add, edit, waive or restore, delete, and reorder.

Every mutation runs against a locked DRAFT document and commits once, so a
failure anywhere leaves the stored document untouched.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping, Sequence
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.errors import (
    BillingError,
    EmptyDescription,
    InvalidAmount,
    InvalidHours,
    InvalidWaiveMode,
    ReorderConflict,
)
from timesheet_billing.backend.src.models import (
    ServiceDescriptionLineItem,
    ServiceDescriptionTopic,
    WaiveMode,
)
from timesheet_billing.backend.src.schemas.billing import LineItemOrderEntry

from .lookups import get_line_item, get_topic, load_draft
from .metrics import line_item_waives_total
from .money import ZERO, optional_decimal
from .ordering import apply_order, renumber
from .write_offs import recompute_written_off

LOGGER = structlog.get_logger(__name__)

MAX_HOURS = Decimal("24")


def _clean_description(raw: str | None) -> str:
    description = (raw or "").strip()
    if not description:
        raise EmptyDescription()
    return description


def _validate_hours(raw: object | None) -> Decimal:
    hours = optional_decimal(raw)
    if hours is None or hours <= ZERO or hours > MAX_HOURS:
        raise InvalidHours()
    return hours


def _validate_fixed_amount(raw: object | None) -> Decimal | None:
    amount = optional_decimal(raw)
    if amount is not None and amount <= ZERO:
        raise InvalidAmount()
    return amount


def parse_waive_mode(raw: object | None) -> WaiveMode | None:
    if raw is None:
        return None
    try:
        return WaiveMode(raw)
    except ValueError as exc:
        raise InvalidWaiveMode() from exc


def _set_waive_mode(
    session: Session, item: ServiceDescriptionLineItem, mode: WaiveMode | None
) -> None:
    item.waive_mode = mode.value if mode is not None else None
    line_item_waives_total.labels(mode=item.waive_mode or "RESTORED").inc()
    LOGGER.info(
        "line_item_waive_mode_set",
        line_item_id=item.id,
        waive_mode=item.waive_mode,
        time_entry_id=item.time_entry_id,
    )
    if item.time_entry_id is not None:
        recompute_written_off(session, item.time_entry_id)


def add_line_item(
    session: Session,
    document_id: int,
    topic_id: int,
    *,
    description: str,
    date: dt.date | None = None,
    hours: object | None = None,
    fixed_amount: object | None = None,
) -> ServiceDescriptionLineItem:
    """Append a manual line item at the end of ``topic_id``."""

    document = load_draft(session, document_id)
    topic = get_topic(document, topic_id)

    item = ServiceDescriptionLineItem(
        date=date,
        description=_clean_description(description),
        hours=_validate_hours(hours) if hours is not None else None,
        fixed_amount=_validate_fixed_amount(fixed_amount),
        display_order=len(topic.line_items),
        waive_mode=None,
    )
    topic.line_items.append(item)
    session.commit()
    session.refresh(item)
    LOGGER.info(
        "line_item_added",
        document_id=document_id,
        topic_id=topic_id,
        line_item_id=item.id,
    )
    return item


def update_line_item(
    session: Session,
    document_id: int,
    topic_id: int,
    item_id: int,
    changes: Mapping[str, object],
) -> ServiceDescriptionLineItem:
    """Apply a partial edit.

    ``changes`` holds only the submitted fields. Editing the description or
    hours leaves the waive mode and fixed amount alone; a ``waive_mode`` key
    waives or restores the item in the same transaction.
    """

    if not changes:
        raise BillingError("No update fields provided")

    document = load_draft(session, document_id)
    item = get_line_item(document, topic_id, item_id)

    if "description" in changes:
        item.description = _clean_description(changes["description"])  # type: ignore[arg-type]
    if "hours" in changes:
        raw_hours = changes["hours"]
        item.hours = _validate_hours(raw_hours) if raw_hours is not None else None
    if "date" in changes:
        item.date = changes["date"]  # type: ignore[assignment]
    if "fixed_amount" in changes:
        item.fixed_amount = _validate_fixed_amount(changes["fixed_amount"])
    if "waive_mode" in changes:
        _set_waive_mode(session, item, parse_waive_mode(changes["waive_mode"]))

    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def waive_line_item(
    session: Session,
    document_id: int,
    topic_id: int,
    item_id: int,
    mode: str | None,
) -> ServiceDescriptionLineItem:
    """Set or clear the waive mode and resync the source time entry."""

    return update_line_item(session, document_id, topic_id, item_id, {"waive_mode": mode})


def delete_line_item(session: Session, document_id: int, topic_id: int, item_id: int) -> None:
    """Remove one item, close the gap in its topic, and resync write-offs."""

    document = load_draft(session, document_id)
    item = get_line_item(document, topic_id, item_id)
    topic = item.topic
    was_waived = item.is_waived
    time_entry_id = item.time_entry_id

    topic.line_items.remove(item)
    renumber(topic.line_items)
    session.flush()
    if was_waived and time_entry_id is not None:
        recompute_written_off(session, time_entry_id)

    session.commit()
    LOGGER.info(
        "line_item_deleted",
        document_id=document_id,
        topic_id=topic_id,
        line_item_id=item_id,
    )


def reorder_line_items(
    session: Session, document_id: int, entries: Sequence[LineItemOrderEntry]
) -> None:
    """Move and reorder items across the document's topics as one batch.

    Each entry names the item, its target topic, and its target index. Every
    topic that loses or gains an item is renumbered densely. Any id outside
    the document rejects the whole batch.
    """

    if not entries:
        raise BillingError("Items array is required")

    document = load_draft(session, document_id)
    topics: dict[int, ServiceDescriptionTopic] = {topic.id: topic for topic in document.topics}
    items: dict[int, ServiceDescriptionLineItem] = {
        item.id: item for topic in document.topics for item in topic.line_items
    }

    seen: set[int] = set()
    for entry in entries:
        if entry.topic_id not in topics:
            LOGGER.warning("line_item_reorder_rejected", document_id=document_id, topic_id=entry.topic_id)
            raise ReorderConflict("Invalid topic_id - does not belong to this service description")
        if entry.id not in items or entry.id in seen:
            LOGGER.warning("line_item_reorder_rejected", document_id=document_id, line_item_id=entry.id)
            raise ReorderConflict("Line item does not belong to this service description")
        seen.add(entry.id)

    affected: set[int] = set()
    requested: dict[int, dict[int, int]] = {}
    for entry in entries:
        item = items[entry.id]
        affected.add(item.topic_id)
        affected.add(entry.topic_id)
        if item.topic_id != entry.topic_id:
            item.topic = topics[entry.topic_id]
        requested.setdefault(entry.topic_id, {})[entry.id] = entry.display_order

    for topic_id in sorted(affected):
        topic = topics[topic_id]
        apply_order(topic.line_items, requested.get(topic_id, {}))

    session.commit()
    for topic_id in affected:
        session.expire(topics[topic_id], ["line_items"])
    LOGGER.info(
        "line_items_reordered",
        document_id=document_id,
        topics=sorted(affected),
        count=len(entries),
    )


__all__ = [
    "add_line_item",
    "delete_line_item",
    "parse_waive_mode",
    "reorder_line_items",
    "update_line_item",
    "waive_line_item",
]

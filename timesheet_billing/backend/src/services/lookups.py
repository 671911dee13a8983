"""Loaders and guards shared by the billing services."""

from __future__ import annotations

import structlog
from sqlalchemy.orm import Session, selectinload

from timesheet_billing.backend.src.core.errors import DocumentFinalized, NotFound
from timesheet_billing.backend.src.models import (
    ServiceDescription,
    ServiceDescriptionLineItem,
    ServiceDescriptionTopic,
    TimeEntry,
)

LOGGER = structlog.get_logger(__name__)


def get_document(
    session: Session,
    document_id: int,
    *,
    for_update: bool = False,
    with_entries: bool = False,
) -> ServiceDescription:
    """Load a service description with its topics and line items.

    ``for_update`` locks the document row so concurrent lifecycle changes to
    the same document are serialized by the database.
    """

    items_loader = selectinload(ServiceDescription.topics).selectinload(
        ServiceDescriptionTopic.line_items
    )
    if with_entries:
        items_loader = items_loader.selectinload(
            ServiceDescriptionLineItem.time_entry
        ).selectinload(TimeEntry.user)

    query = (
        session.query(ServiceDescription)
        .options(selectinload(ServiceDescription.client), items_loader)
        .filter(ServiceDescription.id == document_id)
    )
    if for_update:
        query = query.with_for_update()

    document = query.one_or_none()
    if document is None:
        raise NotFound("Service description not found")
    return document


def require_draft(document: ServiceDescription) -> None:
    if document.is_finalized:
        LOGGER.warning("finalized_document_mutation_rejected", document_id=document.id)
        raise DocumentFinalized()


def get_topic(document: ServiceDescription, topic_id: int) -> ServiceDescriptionTopic:
    for topic in document.topics:
        if topic.id == topic_id:
            return topic
    raise NotFound("Topic not found")


def get_line_item(
    document: ServiceDescription, topic_id: int, item_id: int
) -> ServiceDescriptionLineItem:
    for topic in document.topics:
        if topic.id != topic_id:
            continue
        for item in topic.line_items:
            if item.id == item_id:
                return item
    raise NotFound("Line item not found")


def load_draft(session: Session, document_id: int) -> ServiceDescription:
    """Lock a document for mutation, rejecting finalized ones."""

    document = get_document(session, document_id, for_update=True)
    require_draft(document)
    return document


__all__ = ["get_document", "get_line_item", "get_topic", "load_draft", "require_draft"]

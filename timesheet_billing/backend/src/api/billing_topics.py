"""Topic endpoints nested under a service description."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.security import require_billing_user
from timesheet_billing.backend.src.db import get_session_dependency
from timesheet_billing.backend.src.schemas.billing import (
    SuccessResponse,
    TopicCreate,
    TopicOut,
    TopicReorder,
    TopicUpdate,
    build_topic,
)
from timesheet_billing.backend.src.services import topics as topic_service
from timesheet_billing.backend.src.services.pricing import calculate_topic_totals

router = APIRouter(
    prefix="/billing/{document_id}/topics",
    tags=["Billing Topics"],
    dependencies=[Depends(require_billing_user)],
)


@router.post("", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
def add_topic(
    document_id: int,
    payload: TopicCreate,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> TopicOut:
    topic = topic_service.add_topic(session, document_id, payload.model_dump(exclude_unset=True))
    return build_topic(topic, calculate_topic_totals(topic))


# Declared before "/{topic_id}" so "reorder" is not parsed as an id.
@router.patch("/reorder", response_model=SuccessResponse)
def reorder_topics(
    document_id: int,
    payload: TopicReorder,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> SuccessResponse:
    """Apply a batch of topic positions in one transaction."""

    topic_service.reorder_topics(session, document_id, payload.items)
    return SuccessResponse()


@router.patch("/{topic_id}", response_model=TopicOut)
def update_topic(
    document_id: int,
    topic_id: int,
    payload: TopicUpdate,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> TopicOut:
    topic = topic_service.update_topic(
        session, document_id, topic_id, payload.model_dump(exclude_unset=True)
    )
    return build_topic(topic, calculate_topic_totals(topic))


@router.delete("/{topic_id}", response_model=SuccessResponse)
def delete_topic(
    document_id: int,
    topic_id: int,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> SuccessResponse:
    """Delete a topic and its line items."""

    topic_service.delete_topic(session, document_id, topic_id)
    return SuccessResponse()

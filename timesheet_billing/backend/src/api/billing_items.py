"""Line item endpoints nested under a service description."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.security import require_billing_user
from timesheet_billing.backend.src.db import get_session_dependency
from timesheet_billing.backend.src.schemas.billing import (
    LineItemCreate,
    LineItemOut,
    LineItemReorder,
    LineItemUpdate,
    SuccessResponse,
    build_line_item,
)
from timesheet_billing.backend.src.services import line_items as line_item_service

router = APIRouter(
    prefix="/billing/{document_id}",
    tags=["Billing Line Items"],
    dependencies=[Depends(require_billing_user)],
)


@router.post(
    "/topics/{topic_id}/items",
    response_model=LineItemOut,
    status_code=status.HTTP_201_CREATED,
)
def add_line_item(
    document_id: int,
    topic_id: int,
    payload: LineItemCreate,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> LineItemOut:
    """Append a manual line item to a topic."""

    item = line_item_service.add_line_item(
        session,
        document_id,
        topic_id,
        description=payload.description,
        date=payload.date,
        hours=payload.hours,
        fixed_amount=payload.fixed_amount,
    )
    return build_line_item(item)


@router.patch("/topics/{topic_id}/items/{item_id}", response_model=LineItemOut)
def update_line_item(
    document_id: int,
    topic_id: int,
    item_id: int,
    payload: LineItemUpdate,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> LineItemOut:
    """Edit fields of a line item, or waive or restore it via ``waive_mode``."""

    item = line_item_service.update_line_item(
        session,
        document_id,
        topic_id,
        item_id,
        payload.model_dump(exclude_unset=True),
    )
    return build_line_item(item)


@router.delete("/topics/{topic_id}/items/{item_id}", response_model=SuccessResponse)
def delete_line_item(
    document_id: int,
    topic_id: int,
    item_id: int,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> SuccessResponse:
    line_item_service.delete_line_item(session, document_id, topic_id, item_id)
    return SuccessResponse()


@router.patch("/line-items/reorder", response_model=SuccessResponse)
def reorder_line_items(
    document_id: int,
    payload: LineItemReorder,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> SuccessResponse:
    """Reorder and move line items across topics as one batch."""

    line_item_service.reorder_line_items(session, document_id, payload.items)
    return SuccessResponse()

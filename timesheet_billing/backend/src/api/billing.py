"""Service description endpoints: list, create, read, update, delete."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.security import get_current_user, require_billing_user
from timesheet_billing.backend.src.db import get_session_dependency
from timesheet_billing.backend.src.models import User
from timesheet_billing.backend.src.schemas.billing import (
    CreatedResponse,
    ServiceDescriptionCreate,
    ServiceDescriptionListItem,
    ServiceDescriptionOut,
    ServiceDescriptionUpdate,
    ServiceDescriptionUpdateOut,
    SuccessResponse,
    UnbilledClientSummary,
    serialize_list_item,
    serialize_service_description,
    serialize_update,
)
from timesheet_billing.backend.src.services import service_descriptions as service_description_service

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.get(
    "",
    response_model=list[ServiceDescriptionListItem],
    dependencies=[Depends(get_current_user)],
)
def list_service_descriptions(
    session: Annotated[Session, Depends(get_session_dependency)],
) -> list[ServiceDescriptionListItem]:
    """Return every service description with its grand total."""

    documents = service_description_service.list_service_descriptions(session)
    return [serialize_list_item(document) for document in documents]


@router.get(
    "/unbilled-summary",
    response_model=list[UnbilledClientSummary],
    dependencies=[Depends(get_current_user)],
)
def unbilled_summary(
    session: Annotated[Session, Depends(get_session_dependency)],
) -> list[UnbilledClientSummary]:
    return service_description_service.unbilled_summary(session)


@router.post(
    "",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_billing_user)],
)
def create_service_description(
    payload: ServiceDescriptionCreate,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> CreatedResponse:
    """Create a draft from the client's unbilled time in the period."""

    document = service_description_service.create_service_description(
        session,
        payload.client_id,
        payload.period_start,
        payload.period_end,
    )
    return CreatedResponse(id=document.id)


@router.get(
    "/{document_id}",
    response_model=ServiceDescriptionOut,
    dependencies=[Depends(get_current_user)],
)
def get_service_description(
    document_id: int,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> ServiceDescriptionOut:
    """Return the full document graph with computed totals."""

    document = service_description_service.get_service_description(session, document_id)
    return serialize_service_description(document)


@router.patch("/{document_id}", response_model=ServiceDescriptionUpdateOut)
def update_service_description(
    document_id: int,
    payload: ServiceDescriptionUpdate,
    session: Annotated[Session, Depends(get_session_dependency)],
    user: Annotated[User, Depends(require_billing_user)],
) -> ServiceDescriptionUpdateOut:
    """Finalize, unlock, or change the discount and retainer settings."""

    document = service_description_service.update_service_description(
        session,
        document_id,
        payload.model_dump(exclude_unset=True),
        actor=user,
    )
    return serialize_update(document)


@router.delete(
    "/{document_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_billing_user)],
)
def delete_service_description(
    document_id: int,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> SuccessResponse:
    service_description_service.delete_service_description(session, document_id)
    return SuccessResponse()

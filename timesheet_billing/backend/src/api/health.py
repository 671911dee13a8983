"""Liveness, readiness, and Prometheus endpoints for the billing service."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..db import get_session_dependency

router = APIRouter(tags=["health"])

LOGGER = structlog.get_logger(__name__)


@router.get("/health/live")
def liveness() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health/ready")
def readiness(
    session: Annotated[Session, Depends(get_session_dependency)],
) -> dict[str, str]:
    """Ping the billing database and report which backend answered."""

    session.execute(text("SELECT 1"))
    dialect = session.get_bind().dialect.name
    LOGGER.debug("readiness_checked", database=dialect)
    return {"status": "ready", "database": dialect}


@router.get("/metrics")
def metrics() -> Response:
    """Expose the billing counters in Prometheus text format."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

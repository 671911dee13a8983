"""Security helpers for Auth0 integration."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterable

import httpx
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from timesheet_billing.backend.src.core.config import get_settings
from timesheet_billing.backend.src.core.errors import Forbidden
from timesheet_billing.backend.src.db import get_session_dependency
from timesheet_billing.backend.src.models import User
from timesheet_billing.backend.src.models.enums import BILLING_ROLES

LOGGER = structlog.get_logger(__name__)

ALGORITHMS = ["RS256"]
_scheme = HTTPBearer(auto_error=False)


# -------------------------------------------------------
# JWKS + Token Utilities
# -------------------------------------------------------

@lru_cache()
def _fetch_jwks(domain: str) -> dict[str, Any]:
    """Fetch (and cache) the JWKS for the given Auth0 domain."""
    jwks_url = f"https://{domain}/.well-known/jwks.json"
    try:
        with httpx.Client(timeout=5.0) as client:
            response = client.get(jwks_url)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPError as exc:
        LOGGER.error("jwks_fetch_failed", domain=domain, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to retrieve JWKS",
        ) from exc


def _get_rsa_key(token: str, domain: str) -> dict[str, str] | None:
    """Return the RSA key that matches the token header."""
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        ) from exc

    if "kid" not in unverified_header:
        return None

    jwks = _fetch_jwks(domain)
    for key in jwks.get("keys", []):
        if key.get("kid") == unverified_header["kid"]:
            return {
                "kty": key.get("kty"),
                "kid": key.get("kid"),
                "use": key.get("use"),
                "n": key.get("n"),
                "e": key.get("e"),
            }
    return None


def _collect_audience_values(raw_value: str | None) -> list[str]:
    """Split the configured audience string into individual values, with and without a trailing slash."""
    if not raw_value:
        return []
    audiences: list[str] = []
    for part in raw_value.replace(",", " ").split():
        trimmed = part.strip().rstrip("/")
        for option in (trimmed, f"{trimmed}/"):
            if trimmed and option not in audiences:
                audiences.append(option)
    return audiences


def _token_audiences(payload: dict[str, Any]) -> list[str]:
    claim = payload.get("aud")
    if isinstance(claim, str):
        return [claim]
    if isinstance(claim, (list, tuple, set)):
        return [entry for entry in claim if isinstance(entry, str)]
    return []


def _decode_token(token: str, *, domain: str, audiences: list[str]) -> dict[str, Any]:
    """Decode and validate an Auth0 access token."""
    rsa_key = _get_rsa_key(token, domain)
    if not rsa_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unable to validate token",
        )

    try:
        payload = jwt.decode(
            token,
            rsa_key,
            algorithms=ALGORITHMS,
            issuer=f"https://{domain}/",
            options={"verify_aud": False},
        )
    except JWTError as exc:
        LOGGER.warning("token_rejected", reason=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc

    token_audiences = {value.rstrip("/") for value in _token_audiences(payload)}
    if not token_audiences:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing audience",
        )
    if not token_audiences & {value.rstrip("/") for value in audiences}:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token audience",
        )

    return payload


# -------------------------------------------------------
# User Resolution
# -------------------------------------------------------

def _resolve_user(session: Session, payload: dict[str, Any]) -> User:
    """Map a verified Auth0 payload to a provisioned employee."""
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject",
        )

    user = session.query(User).filter(User.auth0_sub == subject).one_or_none()
    if user:
        return user

    email = payload.get("email")
    if email:
        user = session.query(User).filter(User.email == email).one_or_none()
    if user is None:
        LOGGER.warning("unknown_user_rejected", subject=subject)
        raise Forbidden("User record not found")

    user.auth0_sub = subject
    session.add(user)
    session.commit()
    LOGGER.info("user_linked_to_auth0", user_id=user.id)
    return user


# -------------------------------------------------------
# Current User + Role Enforcement
# -------------------------------------------------------

def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_scheme),
    session: Session = Depends(get_session_dependency),
) -> User:
    """Resolve the authenticated user from the Auth0 bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
        )

    settings = get_settings()
    configured_audiences = _collect_audience_values(settings.auth0_audience)
    if not settings.auth0_domain or not configured_audiences:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Auth0 configuration is incomplete",
        )

    payload = _decode_token(
        credentials.credentials,
        domain=settings.auth0_domain,
        audiences=configured_audiences,
    )
    user = _resolve_user(session, payload)

    if not user.is_active:
        raise Forbidden("Account is deactivated")

    return user


def _enforce_roles(user: User, allowed_roles: set[str], *, allow_admin: bool = True) -> User:
    """Ensure the authenticated user has one of the allowed roles."""
    role = (user.role or "").lower()
    if role in allowed_roles or (allow_admin and role == "admin"):
        return user
    LOGGER.warning("role_rejected", user_id=user.id, role=role)
    raise Forbidden()


def require_role(
    roles: Iterable[str],
    *,
    allow_admin: bool = True,
):
    """Return a dependency that enforces one of the provided roles."""
    normalized_roles = {value.lower() for value in roles}

    def dependency(user: User = Depends(get_current_user)) -> User:
        return _enforce_roles(user, normalized_roles, allow_admin=allow_admin)

    return dependency


require_billing_user = require_role(BILLING_ROLES)


__all__ = [
    "get_current_user",
    "require_billing_user",
    "require_role",
]

"""Enumerations shared by billing models and services."""

from __future__ import annotations

from enum import Enum


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    FINALIZED = "FINALIZED"


class PricingMode(str, Enum):
    HOURLY = "HOURLY"
    FIXED = "FIXED"


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    AMOUNT = "AMOUNT"


class WaiveMode(str, Enum):
    """How a waived line item is billed.

    ``EXCLUDED`` drops the item from hours and money; ``ZERO`` keeps its
    hours on display but bills it at zero.
    """

    EXCLUDED = "EXCLUDED"
    ZERO = "ZERO"


class ClientStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


ROLES: frozenset[str] = frozenset(
    {"admin", "partner", "senior_associate", "associate", "consultant"}
)
BILLING_ROLES: frozenset[str] = frozenset({"admin", "partner"})


__all__ = [
    "BILLING_ROLES",
    "ClientStatus",
    "DiscountType",
    "DocumentStatus",
    "PricingMode",
    "ROLES",
    "WaiveMode",
]

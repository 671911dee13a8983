"""Billing error kinds surfaced to API callers.

Every error is an :class:`~fastapi.HTTPException` so the service layer can
raise it directly and routers let it propagate unchanged. Each class fixes
the status code; the detail defaults to the message shown to users.
"""

from __future__ import annotations

from fastapi import HTTPException, status


class BillingError(HTTPException):
    """Base class for billing validation and state errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Invalid billing request"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
        )


class NotFound(BillingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Forbidden(BillingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"


class DocumentFinalized(BillingError):
    """Raised for any topic, line item, or discount change on a finalized document."""

    default_detail = "Cannot modify finalized service description"


class CannotDeleteFinalized(BillingError):
    default_detail = "Cannot delete finalized service description"


class InvalidStatus(BillingError):
    default_detail = "Invalid status"


class InvalidDiscount(BillingError):
    default_detail = "discountValue requires a discountType"


class NonPositiveDiscount(BillingError):
    default_detail = "discountValue must be a positive number"


class DiscountTooLarge(BillingError):
    default_detail = "Percentage discount cannot exceed 100"


class InvalidCapHours(BillingError):
    default_detail = "capHours must be a positive number"


class InvalidPricingMode(BillingError):
    default_detail = "pricingMode must be HOURLY or FIXED"


class InvalidRetainer(BillingError):
    default_detail = "Retainer values must be positive numbers"


class EmptyDescription(BillingError):
    default_detail = "Description is required"


class InvalidHours(BillingError):
    default_detail = "Hours must be greater than 0 and at most 24"


class InvalidAmount(BillingError):
    default_detail = "fixedAmount must be a positive number"


class InvalidWaiveMode(BillingError):
    default_detail = "waiveMode must be EXCLUDED, ZERO, or null"


class ReorderConflict(BillingError):
    default_detail = "Reorder references an item outside this service description"


class InvalidPeriod(BillingError):
    default_detail = "Period start must be before end"


__all__ = [
    "BillingError",
    "CannotDeleteFinalized",
    "DiscountTooLarge",
    "DocumentFinalized",
    "EmptyDescription",
    "Forbidden",
    "InvalidAmount",
    "InvalidCapHours",
    "InvalidDiscount",
    "InvalidHours",
    "InvalidPeriod",
    "InvalidPricingMode",
    "InvalidRetainer",
    "InvalidStatus",
    "InvalidWaiveMode",
    "NonPositiveDiscount",
    "NotFound",
    "ReorderConflict",
]

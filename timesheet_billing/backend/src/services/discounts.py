"""Discount descriptor validation, merging, and application.

The same rules apply at topic level and at document level. A discount is a
``(type, value)`` pair where the type is ``PERCENTAGE`` or ``AMOUNT``.
AMOUNT discounts are not capped: a large one can drive a total negative.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from timesheet_billing.backend.src.core.errors import (
    DiscountTooLarge,
    InvalidDiscount,
    NonPositiveDiscount,
)
from timesheet_billing.backend.src.models.enums import DiscountType

from .money import HUNDRED, ZERO, optional_decimal, quantize_money


@dataclass(frozen=True)
class Discount:
    type: DiscountType | None = None
    value: Decimal | None = None

    @classmethod
    def from_columns(cls, discount_type: str | None, discount_value: object | None) -> "Discount":
        """Build a descriptor from the nullable columns of a topic or document."""

        return cls(
            type=DiscountType(discount_type) if discount_type else None,
            value=optional_decimal(discount_value),
        )

    @property
    def is_active(self) -> bool:
        return self.type is not None and bool(self.value)


def parse_discount_type(raw: object | None) -> DiscountType | None:
    if raw is None or raw == "":
        return None
    try:
        return DiscountType(raw)
    except ValueError as exc:
        raise InvalidDiscount("discountType must be PERCENTAGE or AMOUNT") from exc


def resolve_discount(current: Discount, incoming: Mapping[str, object]) -> Discount:
    """Merge a partial update into the stored discount.

    ``incoming`` holds only the keys the caller sent (``"type"`` and/or
    ``"value"``). An explicit null type clears both fields, even when a value
    was sent alongside it; an omitted key keeps the stored field.
    """

    if "type" in incoming:
        new_type = parse_discount_type(incoming["type"])
        if new_type is None:
            return Discount()
    else:
        new_type = current.type

    if "value" in incoming:
        new_value = optional_decimal(incoming["value"])
    else:
        new_value = current.value

    return Discount(type=new_type, value=new_value)


def validate_discount(discount_type: object | None, value: object | None) -> None:
    """Raise when the pair cannot be persisted."""

    parsed_type = parse_discount_type(discount_type)
    amount = optional_decimal(value)
    if amount is not None:
        if amount <= ZERO:
            raise NonPositiveDiscount()
        if parsed_type is DiscountType.PERCENTAGE and amount > HUNDRED:
            raise DiscountTooLarge()
    if parsed_type is None and amount is not None:
        raise InvalidDiscount()


def apply_discount(base: Decimal, discount_type: object | None, value: object | None) -> Decimal:
    """Return ``base`` reduced by the discount, rounded to cents."""

    parsed_type = parse_discount_type(discount_type)
    amount = optional_decimal(value)
    if parsed_type is None or not amount:
        return quantize_money(base)
    if parsed_type is DiscountType.PERCENTAGE:
        return quantize_money(base * (1 - amount / HUNDRED))
    return quantize_money(base - amount)


def apply(base: Decimal, discount: Discount) -> Decimal:
    return apply_discount(base, discount.type, discount.value)


def apply_discount_changes(target: object, changes: Mapping[str, object]) -> bool:
    """Merge ``discount_type``/``discount_value`` from ``changes`` into ``target``.

    ``target`` is a topic or a service description. Returns whether either
    key was present.
    """

    incoming: dict[str, object] = {}
    if "discount_type" in changes:
        incoming["type"] = changes["discount_type"]
    if "discount_value" in changes:
        incoming["value"] = changes["discount_value"]
    if not incoming:
        return False

    current = Discount.from_columns(target.discount_type, target.discount_value)  # type: ignore[attr-defined]
    resolved = resolve_discount(current, incoming)
    validate_discount(resolved.type, resolved.value)
    target.discount_type = resolved.type.value if resolved.type else None  # type: ignore[attr-defined]
    target.discount_value = resolved.value  # type: ignore[attr-defined]
    return True


__all__ = [
    "Discount",
    "apply",
    "apply_discount",
    "apply_discount_changes",
    "parse_discount_type",
    "resolve_discount",
    "validate_discount",
]

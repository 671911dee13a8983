"""Unit tests for discount validation, merging, and application."""

from __future__ import annotations

from decimal import Decimal

import pytest

from timesheet_billing.backend.src.core.errors import (
    DiscountTooLarge,
    InvalidDiscount,
    NonPositiveDiscount,
)
from timesheet_billing.backend.src.models import DiscountType
from timesheet_billing.backend.src.services.discounts import (
    Discount,
    apply_discount,
    resolve_discount,
    validate_discount,
)


def test_zero_percentage_leaves_base_unchanged() -> None:
    base = Decimal("1234.56")
    assert apply_discount(base, "PERCENTAGE", Decimal("0")) == base


def test_percentage_discount_rounds_half_up_to_cents() -> None:
    assert apply_discount(Decimal("33.33"), "PERCENTAGE", Decimal("10")) == Decimal("30.00")


def test_amount_discount_can_drive_total_negative() -> None:
    assert apply_discount(Decimal("100"), "AMOUNT", Decimal("150")) == Decimal("-50.00")


def test_missing_type_or_value_means_no_discount() -> None:
    assert apply_discount(Decimal("80"), None, None) == Decimal("80.00")
    assert apply_discount(Decimal("80"), "AMOUNT", None) == Decimal("80.00")


def test_percentage_over_one_hundred_is_rejected() -> None:
    with pytest.raises(DiscountTooLarge):
        validate_discount("PERCENTAGE", Decimal("150"))


def test_value_without_type_is_rejected() -> None:
    with pytest.raises(InvalidDiscount) as exc_info:
        validate_discount(None, Decimal("10"))
    assert exc_info.value.detail == "discountValue requires a discountType"


def test_non_positive_value_is_rejected() -> None:
    with pytest.raises(NonPositiveDiscount):
        validate_discount("AMOUNT", Decimal("0"))
    with pytest.raises(NonPositiveDiscount):
        validate_discount("PERCENTAGE", Decimal("-5"))


def test_unknown_type_is_rejected() -> None:
    with pytest.raises(InvalidDiscount) as exc_info:
        validate_discount("BOGUS", Decimal("5"))
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "discountType must be PERCENTAGE or AMOUNT"


def test_large_amount_discount_is_accepted() -> None:
    validate_discount("AMOUNT", Decimal("1000000"))


def test_resolve_with_explicit_null_type_clears_both_fields() -> None:
    current = Discount(type=DiscountType.PERCENTAGE, value=Decimal("10"))
    assert resolve_discount(current, {"type": None}) == Discount()


def test_resolve_with_null_type_and_a_value_still_clears_both_fields() -> None:
    current = Discount(type=DiscountType.AMOUNT, value=Decimal("50"))
    assert resolve_discount(current, {"type": None, "value": Decimal("10")}) == Discount()


def test_resolve_value_only_keeps_stored_type() -> None:
    current = Discount(type=DiscountType.AMOUNT, value=Decimal("10"))
    resolved = resolve_discount(current, {"value": Decimal("25")})
    assert resolved == Discount(type=DiscountType.AMOUNT, value=Decimal("25"))


def test_resolve_value_without_any_type_is_caught_by_validation() -> None:
    resolved = resolve_discount(Discount(), {"value": Decimal("25")})
    with pytest.raises(InvalidDiscount):
        validate_discount(resolved.type, resolved.value)

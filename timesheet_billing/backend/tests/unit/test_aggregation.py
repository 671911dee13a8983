"""Unit tests for document-level totals in standard and retainer mode."""

from __future__ import annotations

from decimal import Decimal

from timesheet_billing.backend.src.models import (
    ServiceDescription,
    ServiceDescriptionLineItem,
    ServiceDescriptionTopic,
)
from timesheet_billing.backend.src.services.aggregation import (
    RetainerPricing,
    StandardPricing,
    calculate_document_totals,
    pricing_model_for,
)


def _item(hours: str | None = None, fixed_amount: str | None = None) -> ServiceDescriptionLineItem:
    return ServiceDescriptionLineItem(
        description="Work",
        hours=Decimal(hours) if hours else None,
        fixed_amount=Decimal(fixed_amount) if fixed_amount else None,
        display_order=0,
    )


def _hourly(rate: str, *items: ServiceDescriptionLineItem, **extra: object) -> ServiceDescriptionTopic:
    return ServiceDescriptionTopic(
        topic_name="Hourly",
        display_order=0,
        pricing_mode="HOURLY",
        hourly_rate=Decimal(rate),
        line_items=list(items),
        **extra,
    )


def _fixed(fee: str) -> ServiceDescriptionTopic:
    return ServiceDescriptionTopic(
        topic_name="Fixed",
        display_order=1,
        pricing_mode="FIXED",
        fixed_fee=Decimal(fee),
        line_items=[],
    )


def test_standard_document_applies_topic_then_document_discounts() -> None:
    topic_a = _hourly(
        "200",
        _item("30"),
        _item("30"),
        cap_hours=Decimal("50"),
        discount_type="PERCENTAGE",
        discount_value=Decimal("10"),
    )
    document = ServiceDescription(
        topics=[topic_a, _fixed("1500")],
        discount_type="AMOUNT",
        discount_value=Decimal("500"),
    )

    totals = calculate_document_totals(document)

    assert totals.topics[0].billed_hours == Decimal("50")
    assert totals.topics[0].base_total == Decimal("10000.00")
    assert totals.topics[0].final_total == Decimal("9000.00")
    assert totals.topics[1].final_total == Decimal("1500.00")
    assert totals.subtotal == Decimal("10500.00")
    assert totals.grand_total == Decimal("10000.00")
    assert totals.retainer is None


def test_retainer_document_bills_fee_overage_and_fixed_fees() -> None:
    document = ServiceDescription(
        topics=[
            _hourly("100", _item("25"), _item(fixed_amount="40")),
            _fixed("300"),
        ],
        retainer_fee=Decimal("2000"),
        retainer_hours=Decimal("20"),
        retainer_overage_rate=Decimal("50"),
    )

    totals = calculate_document_totals(document)

    assert totals.retainer is not None
    assert totals.retainer.total_hourly_hours == Decimal("25")
    assert totals.retainer.overage_hours == Decimal("5")
    assert totals.retainer.overage_amount == Decimal("250.00")
    assert totals.retainer.fixed_topic_fees == Decimal("300.00")
    assert totals.retainer.fixed_line_item_fees == Decimal("40.00")
    assert totals.subtotal == Decimal("2590.00")
    assert totals.grand_total == Decimal("2590.00")


def test_retainer_hours_within_allowance_have_no_overage() -> None:
    document = ServiceDescription(
        topics=[_hourly("100", _item("12"))],
        retainer_fee=Decimal("2000"),
        retainer_hours=Decimal("20"),
        discount_type="PERCENTAGE",
        discount_value=Decimal("10"),
    )

    totals = calculate_document_totals(document)

    assert totals.retainer is not None
    assert totals.retainer.overage_amount == Decimal("0.00")
    assert totals.grand_total == Decimal("1800.00")


def test_retainer_mode_requires_fee_and_hours() -> None:
    assert isinstance(pricing_model_for(ServiceDescription(retainer_fee=Decimal("2000"))), StandardPricing)
    assert isinstance(
        pricing_model_for(
            ServiceDescription(retainer_fee=Decimal("2000"), retainer_hours=Decimal("10"))
        ),
        RetainerPricing,
    )


def test_empty_document_totals_zero() -> None:
    totals = calculate_document_totals(ServiceDescription(topics=[]))

    assert totals.subtotal == Decimal("0.00")
    assert totals.grand_total == Decimal("0.00")

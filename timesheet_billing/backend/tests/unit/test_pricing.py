"""Unit tests for per-topic pricing."""

from __future__ import annotations

from decimal import Decimal

from timesheet_billing.backend.src.models import ServiceDescriptionLineItem, ServiceDescriptionTopic
from timesheet_billing.backend.src.services.pricing import calculate_topic_totals


def make_item(
    hours: str | None = None,
    *,
    waive_mode: str | None = None,
    fixed_amount: str | None = None,
) -> ServiceDescriptionLineItem:
    return ServiceDescriptionLineItem(
        description="Work",
        hours=Decimal(hours) if hours is not None else None,
        fixed_amount=Decimal(fixed_amount) if fixed_amount is not None else None,
        waive_mode=waive_mode,
        display_order=0,
    )


def make_topic(
    *items: ServiceDescriptionLineItem,
    mode: str = "HOURLY",
    rate: str | None = None,
    fee: str | None = None,
    cap: str | None = None,
    discount_type: str | None = None,
    discount_value: str | None = None,
) -> ServiceDescriptionTopic:
    return ServiceDescriptionTopic(
        topic_name="Advisory",
        display_order=0,
        pricing_mode=mode,
        hourly_rate=Decimal(rate) if rate is not None else None,
        fixed_fee=Decimal(fee) if fee is not None else None,
        cap_hours=Decimal(cap) if cap is not None else None,
        discount_type=discount_type,
        discount_value=Decimal(discount_value) if discount_value is not None else None,
        line_items=list(items),
    )


def test_cap_limits_billed_hours_but_not_displayed_hours() -> None:
    topic = make_topic(make_item("4"), make_item("2"), rate="100", cap="5")

    totals = calculate_topic_totals(topic)

    assert totals.hours_worked == Decimal("6")
    assert totals.billed_hours == Decimal("5")
    assert totals.base_total == Decimal("500.00")
    assert totals.is_capped is True


def test_uncapped_hourly_topic_bills_every_hour() -> None:
    totals = calculate_topic_totals(make_topic(make_item("1.5"), make_item("2.25"), rate="200"))

    assert totals.billed_hours == Decimal("3.75")
    assert totals.final_total == Decimal("750.00")
    assert totals.is_capped is False


def test_excluded_item_contributes_nothing() -> None:
    totals = calculate_topic_totals(make_topic(make_item("3", waive_mode="EXCLUDED"), rate="100"))

    assert totals.hours_worked == Decimal("0")
    assert totals.final_total == Decimal("0.00")


def test_zero_rated_item_shows_hours_but_bills_nothing() -> None:
    totals = calculate_topic_totals(make_topic(make_item("3", waive_mode="ZERO"), rate="100"))

    assert totals.hours_worked == Decimal("3")
    assert totals.waived_hours == Decimal("3")
    assert totals.billed_hours == Decimal("0")
    assert totals.final_total == Decimal("0.00")


def test_zero_rated_hours_do_not_count_against_the_cap() -> None:
    topic = make_topic(
        make_item("4"),
        make_item("3", waive_mode="ZERO"),
        rate="100",
        cap="5",
    )

    totals = calculate_topic_totals(topic)

    assert totals.hours_worked == Decimal("7")
    assert totals.billed_hours == Decimal("4")
    assert totals.base_total == Decimal("400.00")


def test_missing_rate_bills_zero() -> None:
    assert calculate_topic_totals(make_topic(make_item("2"))).final_total == Decimal("0.00")


def test_fixed_amounts_ride_alongside_hourly_billing() -> None:
    topic = make_topic(make_item("2"), make_item(fixed_amount="75"), rate="100")

    assert calculate_topic_totals(topic).base_total == Decimal("275.00")


def test_waived_items_do_not_bill_their_fixed_amount() -> None:
    topic = make_topic(
        make_item(fixed_amount="75", waive_mode="ZERO"),
        make_item(fixed_amount="40", waive_mode="EXCLUDED"),
        rate="100",
    )

    assert calculate_topic_totals(topic).base_total == Decimal("0.00")


def test_fixed_topic_ignores_hours_and_adds_fixed_amounts() -> None:
    topic = make_topic(
        make_item("10"),
        make_item(fixed_amount="200"),
        mode="FIXED",
        rate="300",
        fee="1500",
        cap="2",
    )

    totals = calculate_topic_totals(topic)

    assert totals.hours_worked == Decimal("10")
    assert totals.billed_hours == Decimal("0")
    assert totals.cap_hours is None
    assert totals.base_total == Decimal("1700.00")


def test_topic_discount_applies_to_base_total() -> None:
    topic = make_topic(
        make_item("10"),
        rate="100",
        discount_type="PERCENTAGE",
        discount_value="15",
    )

    totals = calculate_topic_totals(topic)

    assert totals.base_total == Decimal("1000.00")
    assert totals.final_total == Decimal("850.00")
    assert totals.discount_amount == Decimal("150.00")

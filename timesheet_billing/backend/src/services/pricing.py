"""Per-topic pricing.

A topic is billed either by the hour (optionally capped) or at a fixed fee.
Manual ``fixed_amount`` charges on line items are added in both modes.
Waived items follow :class:`~timesheet_billing.backend.src.models.enums.WaiveMode`:
EXCLUDED items vanish from hours and money, ZERO items keep their hours on
display but bill nothing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from timesheet_billing.backend.src.models import ServiceDescriptionLineItem, ServiceDescriptionTopic
from timesheet_billing.backend.src.models.enums import PricingMode, WaiveMode

from .discounts import Discount, apply
from .money import ZERO, optional_decimal, quantize_money, to_decimal


@dataclass(frozen=True)
class TopicTotals:
    """Figures shown for one topic."""

    pricing_mode: PricingMode
    hours_worked: Decimal
    waived_hours: Decimal
    billable_hours: Decimal
    billed_hours: Decimal
    cap_hours: Decimal | None
    fixed_amounts: Decimal
    base_total: Decimal
    final_total: Decimal

    @property
    def is_capped(self) -> bool:
        return self.billed_hours < self.billable_hours

    @property
    def discount_amount(self) -> Decimal:
        return self.base_total - self.final_total


def pricing_mode_of(topic: ServiceDescriptionTopic) -> PricingMode:
    if topic.pricing_mode == PricingMode.FIXED.value:
        return PricingMode.FIXED
    return PricingMode.HOURLY


def _counted(items: Iterable[ServiceDescriptionLineItem]) -> list[ServiceDescriptionLineItem]:
    return [item for item in items if item.waive_mode != WaiveMode.EXCLUDED.value]


def displayed_hours(items: Iterable[ServiceDescriptionLineItem]) -> Decimal:
    """Hours worked as displayed: everything except EXCLUDED items."""

    return sum((to_decimal(item.hours) for item in _counted(items)), ZERO)


def zero_rated_hours(items: Iterable[ServiceDescriptionLineItem]) -> Decimal:
    return sum(
        (to_decimal(item.hours) for item in items if item.waive_mode == WaiveMode.ZERO.value),
        ZERO,
    )


def fixed_amount_total(items: Iterable[ServiceDescriptionLineItem]) -> Decimal:
    """Sum of manual flat charges on items that are not waived."""

    return sum(
        (to_decimal(item.fixed_amount) for item in items if item.waive_mode is None),
        ZERO,
    )


def billed_hours_for(topic: ServiceDescriptionTopic) -> Decimal:
    """Billable hours of an hourly topic after the cap; zero for fixed topics."""

    if pricing_mode_of(topic) is PricingMode.FIXED:
        return ZERO
    items = list(topic.line_items)
    billable = displayed_hours(items) - zero_rated_hours(items)
    cap = optional_decimal(topic.cap_hours)
    if cap is not None and cap > ZERO:
        return min(billable, cap)
    return billable


def calculate_topic_totals(topic: ServiceDescriptionTopic) -> TopicTotals:
    """Compute the base (pre-discount) and final totals of ``topic``."""

    items = list(topic.line_items)
    mode = pricing_mode_of(topic)
    hours_worked = displayed_hours(items)
    waived = zero_rated_hours(items)
    billable = hours_worked - waived
    fixed_amounts = fixed_amount_total(items)

    if mode is PricingMode.FIXED:
        billed = ZERO
        cap = None
        base = to_decimal(topic.fixed_fee) + fixed_amounts
    else:
        billed = billed_hours_for(topic)
        cap = optional_decimal(topic.cap_hours)
        base = billed * to_decimal(topic.hourly_rate) + fixed_amounts

    base = quantize_money(base)
    discount = Discount.from_columns(topic.discount_type, topic.discount_value)
    return TopicTotals(
        pricing_mode=mode,
        hours_worked=hours_worked,
        waived_hours=waived,
        billable_hours=billable,
        billed_hours=billed,
        cap_hours=cap,
        fixed_amounts=fixed_amounts,
        base_total=base,
        final_total=apply(base, discount),
    )


def calculate_topic_base_total(topic: ServiceDescriptionTopic) -> Decimal:
    return calculate_topic_totals(topic).base_total


def calculate_topic_total(topic: ServiceDescriptionTopic) -> Decimal:
    return calculate_topic_totals(topic).final_total


__all__ = [
    "TopicTotals",
    "billed_hours_for",
    "calculate_topic_base_total",
    "calculate_topic_total",
    "calculate_topic_totals",
    "displayed_hours",
    "fixed_amount_total",
    "pricing_mode_of",
    "zero_rated_hours",
]

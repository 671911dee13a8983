"""Document-level totals.

A service description is priced either as the sum of its topic totals
(standard) or as a retainer: a flat fee covering an hour allowance, plus
overage, plus whatever is billed outside hourly work. The model is chosen
from the stored retainer columns by :func:`pricing_model_for`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from timesheet_billing.backend.src.models import ServiceDescription
from timesheet_billing.backend.src.models.enums import PricingMode

from .discounts import Discount, apply
from .money import ZERO, optional_decimal, quantize_money, to_decimal
from .pricing import TopicTotals, calculate_topic_totals, fixed_amount_total


@dataclass(frozen=True)
class StandardPricing:
    pass


@dataclass(frozen=True)
class RetainerPricing:
    fee: Decimal
    hours: Decimal
    overage_rate: Decimal


PricingModel = StandardPricing | RetainerPricing


@dataclass(frozen=True)
class RetainerBreakdown:
    total_hourly_hours: Decimal
    retainer_hours: Decimal
    retainer_fee: Decimal
    overage_hours: Decimal
    overage_rate: Decimal
    overage_amount: Decimal
    fixed_topic_fees: Decimal
    fixed_line_item_fees: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    grand_total: Decimal
    topics: list[TopicTotals] = field(default_factory=list)
    retainer: RetainerBreakdown | None = None

    @property
    def discount_amount(self) -> Decimal:
        return self.subtotal - self.grand_total


def pricing_model_for(document: ServiceDescription) -> PricingModel:
    """Retainer pricing applies only when both the fee and the hours are set."""

    fee = optional_decimal(document.retainer_fee)
    hours = optional_decimal(document.retainer_hours)
    if fee is None or hours is None:
        return StandardPricing()
    return RetainerPricing(
        fee=fee,
        hours=hours,
        overage_rate=to_decimal(document.retainer_overage_rate),
    )


def _retainer_breakdown(
    document: ServiceDescription,
    model: RetainerPricing,
    topic_totals: list[TopicTotals],
) -> RetainerBreakdown:
    total_hourly_hours = ZERO
    fixed_topic_fees = ZERO
    fixed_line_item_fees = ZERO
    for topic, totals in zip(document.topics, topic_totals):
        if totals.pricing_mode is PricingMode.FIXED:
            fixed_topic_fees += totals.final_total
            continue
        total_hourly_hours += totals.billed_hours
        fixed_line_item_fees += fixed_amount_total(topic.line_items)

    overage_hours = max(ZERO, total_hourly_hours - model.hours)
    return RetainerBreakdown(
        total_hourly_hours=total_hourly_hours,
        retainer_hours=model.hours,
        retainer_fee=model.fee,
        overage_hours=overage_hours,
        overage_rate=model.overage_rate,
        overage_amount=quantize_money(overage_hours * model.overage_rate),
        fixed_topic_fees=quantize_money(fixed_topic_fees),
        fixed_line_item_fees=quantize_money(fixed_line_item_fees),
    )


def calculate_document_totals(document: ServiceDescription) -> DocumentTotals:
    """Compute subtotal and grand total of ``document``. Pure; no writes."""

    topic_totals = [calculate_topic_totals(topic) for topic in document.topics]
    discount = Discount.from_columns(document.discount_type, document.discount_value)
    model = pricing_model_for(document)

    breakdown: RetainerBreakdown | None = None
    if isinstance(model, RetainerPricing):
        breakdown = _retainer_breakdown(document, model, topic_totals)
        subtotal = (
            breakdown.retainer_fee
            + breakdown.overage_amount
            + breakdown.fixed_topic_fees
            + breakdown.fixed_line_item_fees
        )
    elif isinstance(model, StandardPricing):
        subtotal = sum((totals.final_total for totals in topic_totals), ZERO)
    else:  # pragma: no cover
        raise TypeError(f"Unknown pricing model: {model!r}")

    subtotal = quantize_money(subtotal)
    return DocumentTotals(
        subtotal=subtotal,
        grand_total=apply(subtotal, discount),
        topics=topic_totals,
        retainer=breakdown,
    )


def calculate_grand_total(document: ServiceDescription) -> Decimal:
    return calculate_document_totals(document).grand_total


__all__ = [
    "DocumentTotals",
    "PricingModel",
    "RetainerBreakdown",
    "RetainerPricing",
    "StandardPricing",
    "calculate_document_totals",
    "calculate_grand_total",
    "pricing_model_for",
]

"""Prometheus metric definitions for billing operations."""

from __future__ import annotations

from prometheus_client import Counter

document_transitions_total = Counter(
    "billing_document_transitions_total",
    "Service description lifecycle transitions by action.",
    labelnames=["action"],
)

line_item_waives_total = Counter(
    "billing_line_item_waives_total",
    "Line item waive mode changes by resulting mode.",
    labelnames=["mode"],
)

write_off_reconciliations_total = Counter(
    "billing_write_off_reconciliations_total",
    "Time entry write-off flag reconciliations by outcome.",
    labelnames=["outcome"],
)

__all__ = [
    "document_transitions_total",
    "line_item_waives_total",
    "write_off_reconciliations_total",
]

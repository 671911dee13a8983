"""Public API routers exposed by the FastAPI application."""

from . import billing, billing_items, billing_topics, health

__all__ = [
    "billing",
    "billing_items",
    "billing_topics",
    "health",
]

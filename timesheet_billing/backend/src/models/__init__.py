"""ORM models exposed for easy imports."""

from .client import Client
from .enums import ClientStatus, DiscountType, DocumentStatus, PricingMode, WaiveMode
from .line_item import ServiceDescriptionLineItem
from .service_description import ServiceDescription
from .time_entry import TimeEntry
from .topic import ServiceDescriptionTopic
from .user import User

__all__ = [
    "Client",
    "ClientStatus",
    "DiscountType",
    "DocumentStatus",
    "PricingMode",
    "ServiceDescription",
    "ServiceDescriptionLineItem",
    "ServiceDescriptionTopic",
    "TimeEntry",
    "User",
    "WaiveMode",
]

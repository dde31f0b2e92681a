from __future__ import annotations

__all__ = [
    "AddOn",
    "AddOnSelection",
    "LineItem",
    "PricedQuote",
    "PropertySize",
    "ServiceType",
    "calculate_quote",
    "normalize_service_type",
]

from angicleans.catalog.models import (
    AddOn,
    AddOnSelection,
    LineItem,
    PricedQuote,
    PropertySize,
    ServiceType,
)
from angicleans.catalog.pricing import calculate_quote, normalize_service_type

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class ServiceType(enum.Enum):
    STANDARD = "Standard Clean (FURNISHED)"
    DEEP = "Deep Clean (FURNISHED)"
    TENANCY = "Pre and Post Tenancy Deposit Clean (UNFURNISHED)"


class PropertySize(enum.Enum):
    ONE_BED = "1-bed/1-bath"
    TWO_BED = "2-bed/1-bath"
    THREE_BED = "3-bed/2-bath"
    FOUR_BED = "4-bed/2+-bath"
    FIVE_BED = "5-bed/2+-bath"


class AddOn(enum.Enum):
    IRONING = "Ironing Standard Basket"
    WINDOWS = "Int/Ext Window Cleaning"
    SMALL_PATIO = "Small Patio/Balcony (10-20 sqm)"
    MEDIUM_PATIO = "Medium Patio/Balcony (20-40 sqm)"
    LARGE_PATIO = "Large Patio/Balcony (40+ sqm)"
    CUPBOARD_SORTING = "Cupboard Sorting and Repacking"


@dataclass(frozen=True)
class AddOnSelection:
    name: str
    quantity: int | None = None

    @property
    def effective_quantity(self) -> int:
        if self.quantity is None or self.quantity < 1:
            return 1
        return self.quantity


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int
    unit_price: int
    total: int


@dataclass(frozen=True)
class PricedQuote:
    """Server-side price breakdown. Recomputed for every request, never stored."""

    service_type: str
    property_size: str
    base_price: int
    line_items: tuple[LineItem, ...] = ()
    unknown_keys: tuple[str, ...] = field(default=())

    @property
    def add_ons_total(self) -> int:
        return sum(item.total for item in self.line_items)

    @property
    def total(self) -> int:
        return self.base_price + self.add_ons_total

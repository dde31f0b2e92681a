from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from angicleans.catalog.models import (
    AddOn,
    AddOnSelection,
    LineItem,
    PricedQuote,
    PropertySize,
    ServiceType,
)

logger = logging.getLogger(__name__)

BASE_PRICES: Mapping[ServiceType, Mapping[PropertySize, int]] = MappingProxyType(
    {
        ServiceType.STANDARD: MappingProxyType(
            {
                PropertySize.ONE_BED: 450,
                PropertySize.TWO_BED: 600,
                PropertySize.THREE_BED: 800,
                PropertySize.FOUR_BED: 1000,
                PropertySize.FIVE_BED: 1200,
            }
        ),
        ServiceType.DEEP: MappingProxyType(
            {
                PropertySize.ONE_BED: 800,
                PropertySize.TWO_BED: 1200,
                PropertySize.THREE_BED: 1600,
                PropertySize.FOUR_BED: 2000,
                PropertySize.FIVE_BED: 2400,
            }
        ),
        ServiceType.TENANCY: MappingProxyType(
            {
                PropertySize.ONE_BED: 1000,
                PropertySize.TWO_BED: 1500,
                PropertySize.THREE_BED: 2000,
                PropertySize.FOUR_BED: 2500,
                PropertySize.FIVE_BED: 3000,
            }
        ),
    }
)

ADD_ON_PRICES: Mapping[AddOn, int] = MappingProxyType(
    {
        AddOn.IRONING: 150,
        AddOn.WINDOWS: 50,  # per window
        AddOn.SMALL_PATIO: 200,
        AddOn.MEDIUM_PATIO: 500,
        AddOn.LARGE_PATIO: 800,
        AddOn.CUPBOARD_SORTING: 250,  # per hour
    }
)

# The quote form labels the tenancy clean without the word "Deposit".
SERVICE_TYPE_ALIASES: Mapping[str, ServiceType] = MappingProxyType(
    {
        "Pre and Post Tenancy Clean (UNFURNISHED)": ServiceType.TENANCY,
    }
)

SERVICE_DESCRIPTIONS: Mapping[ServiceType, str] = MappingProxyType(
    {
        ServiceType.STANDARD: (
            "Regular maintenance cleaning including dusting, vacuuming, mopping, "
            "and basic bathroom/kitchen cleaning. Perfect for furnished properties."
        ),
        ServiceType.DEEP: (
            "Thorough cleaning including inside appliances, detailed scrubbing, "
            "and areas not covered in standard cleaning. Ideal for furnished "
            "properties needing intensive cleaning."
        ),
        ServiceType.TENANCY: (
            "Comprehensive end-of-lease or pre-tenancy cleaning to ensure property "
            "standards. Includes all areas, detailed cleaning, and internal "
            "cupboard/appliance cleaning for unfurnished properties."
        ),
    }
)


def _check_catalog() -> None:
    for service_type in ServiceType:
        missing = set(PropertySize) - set(BASE_PRICES.get(service_type, {}))
        if missing:
            raise RuntimeError(
                f"{service_type.value} has no price for "
                + ", ".join(sorted(size.value for size in missing))
            )
    missing_add_ons = set(AddOn) - set(ADD_ON_PRICES)
    if missing_add_ons:
        raise RuntimeError(
            "Add-ons without a price: "
            + ", ".join(sorted(a.value for a in missing_add_ons))
        )
    canonical = {s.value for s in ServiceType}
    for alias in SERVICE_TYPE_ALIASES:
        if alias in canonical:
            raise RuntimeError(f"Alias {alias!r} shadows a canonical service type")


_check_catalog()


def normalize_service_type(label: str) -> str:
    """Map an alternate service-type label to its canonical label."""
    target = SERVICE_TYPE_ALIASES.get(label)
    return target.value if target is not None else label


def parse_service_type(label: str) -> ServiceType | None:
    try:
        return ServiceType(normalize_service_type(label))
    except ValueError:
        return None


def parse_property_size(label: str) -> PropertySize | None:
    try:
        return PropertySize(label)
    except ValueError:
        return None


def parse_add_on(name: str) -> AddOn | None:
    try:
        return AddOn(name)
    except ValueError:
        return None


def calculate_quote(
    service_type: str,
    property_size: str,
    selections: Sequence[AddOnSelection] = (),
) -> PricedQuote:
    """
    Price a cleaning from the catalog.

    Lookup misses price as zero and are listed in `unknown_keys`, so callers
    can decide whether a zero line is acceptable.
    """
    normalized = normalize_service_type(service_type)
    unknown: list[str] = []

    base_price = 0
    service = parse_service_type(normalized)
    size = parse_property_size(property_size)
    if service is None:
        unknown.append(normalized)
    if size is None:
        unknown.append(property_size)
    if service is not None and size is not None:
        base_price = BASE_PRICES[service][size]
    else:
        logger.warning(
            "Base price lookup failed for service type %r (normalized %r), size %r",
            service_type,
            normalized,
            property_size,
        )

    line_items: list[LineItem] = []
    for selection in selections:
        add_on = parse_add_on(selection.name)
        if add_on is None:
            unknown.append(selection.name)
            unit_price = 0
        else:
            unit_price = ADD_ON_PRICES[add_on]
        quantity = selection.effective_quantity
        line_items.append(
            LineItem(
                name=selection.name,
                quantity=quantity,
                unit_price=unit_price,
                total=unit_price * quantity,
            )
        )

    return PricedQuote(
        service_type=normalized,
        property_size=property_size,
        base_price=base_price,
        line_items=tuple(line_items),
        unknown_keys=tuple(unknown),
    )

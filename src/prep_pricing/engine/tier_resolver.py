"""
Tier Resolver - Maps an ordered quantity to the package tier for a service.

Callers never choose the package; it is derived from quantity here and used
as part of the catalog key. Boundaries are tested from the highest tier down,
lower bound inclusive, so every quantity lands in exactly one tier.
"""
from typing import Optional

from .errors import InvalidQuantityOrPackOf
from .models import Package, QuantityRange, ServiceType


# Highest tier first. Range labels match the ones stored in the catalog.
TIER_TABLE: dict[ServiceType, tuple[tuple[Package, QuantityRange], ...]] = {
    ServiceType.FBA_WFS_TFS: (
        (Package.PREMIUM, QuantityRange("1001+", 1001, None)),
        (Package.SMALL_BUSINESS, QuantityRange("501-1000", 501, 1000)),
        (Package.STANDARD, QuantityRange("50-500", 50, 500)),
        (Package.STARTER, QuantityRange("<50", 0, 49)),
    ),
    ServiceType.FBM: (
        (Package.PREMIUM, QuantityRange("101+", 101, None)),
        (Package.SMALL_BUSINESS, QuantityRange("50+", 50, 100)),
        (Package.STANDARD, QuantityRange("25+", 25, 49)),
        (Package.STARTER, QuantityRange("<25", 0, 24)),
    ),
}

# Catalog range label → range, for parsing stored rows
RANGES_BY_LABEL: dict[str, QuantityRange] = {
    rng.label: rng
    for tiers in TIER_TABLE.values()
    for _, rng in tiers
}


def validate_quantity(quantity, field_name: str = "quantity") -> int:
    """
    Check a quantity/pack size at the input boundary.

    Returns the value as int. Raises InvalidQuantityOrPackOf for anything that
    is not a positive whole number (bools and fractional values included).
    """
    if isinstance(quantity, bool):
        raise InvalidQuantityOrPackOf(f"{field_name} must be a positive integer, got {quantity!r}")
    if isinstance(quantity, float):
        if not quantity.is_integer():
            raise InvalidQuantityOrPackOf(f"{field_name} must be a whole number, got {quantity!r}")
        quantity = int(quantity)
    elif not isinstance(quantity, int):
        try:
            quantity = int(str(quantity).strip())
        except ValueError:
            raise InvalidQuantityOrPackOf(
                f"{field_name} must be a positive integer, got {quantity!r}"
            ) from None
    if quantity <= 0:
        raise InvalidQuantityOrPackOf(f"{field_name} must be positive, got {quantity}")
    return quantity


def resolve_tier(service: ServiceType, quantity: int) -> tuple[Package, QuantityRange]:
    """
    Resolve the (package, quantity range) pair for a service and quantity.

    Quantities of zero fall into the Starter tier; negative quantities never
    reach here (see ``validate_quantity``).
    """
    service = ServiceType.parse(service)
    if quantity < 0:
        raise InvalidQuantityOrPackOf(f"quantity must not be negative, got {quantity}")

    for package, quantity_range in TIER_TABLE[service]:
        if quantity >= quantity_range.lower:
            return package, quantity_range

    # Unreachable: the lowest tier starts at 0
    raise InvalidQuantityOrPackOf(f"No tier for quantity {quantity}")


def resolve_package(service: ServiceType, quantity: int) -> Package:
    """Resolve only the package label for a service and quantity."""
    package, _ = resolve_tier(service, quantity)
    return package


def range_for(service: ServiceType, package: Package) -> QuantityRange:
    """Quantity range paired with a package for a service."""
    for tier_package, quantity_range in TIER_TABLE[ServiceType.parse(service)]:
        if tier_package is package:
            return quantity_range
    raise ValueError(f"No range for {package} under {service}")


# Rows an administrator prices by hand; matches every quantity
CUSTOM_RANGE = QuantityRange("Custom", 0, None)


def parse_quantity_range(label: str) -> Optional[QuantityRange]:
    """Parse a stored range label ("50-500", "101+", "<25", "Custom"); None if unknown."""
    label = str(label).strip()
    if label == CUSTOM_RANGE.label:
        return CUSTOM_RANGE
    return RANGES_BY_LABEL.get(label)


def quantity_in_range(quantity: int, label: str) -> bool:
    """
    Check whether a quantity falls inside a stored range label.

    The "Custom" label always matches; administrators price those by hand.
    Unknown labels never match.
    """
    quantity_range = parse_quantity_range(label)
    if quantity_range is None:
        return False
    return quantity_range.contains(quantity)

"""
Line Item Calculator - Charge for a single shipment line.

    total = rate × quantity + pack_surcharge × max(0, pack_of − 1)

The rate applies per ordered unit however the units are packed. The first
pack is free of surcharge; each additional pack is charged once.
"""
from decimal import Decimal

from .errors import InvalidQuantityOrPackOf, PricingError
from .money import round_money, to_decimal


def _non_negative_amount(value, field_name: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise PricingError(f"{field_name}: {e}") from None
    if amount < 0:
        raise PricingError(f"{field_name} must not be negative, got {amount}")
    return amount


def _non_negative_count(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityOrPackOf(f"{field_name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidQuantityOrPackOf(f"{field_name} must not be negative, got {value}")
    return value


def compute_line_total(rate, pack_surcharge, quantity: int, pack_of: int = 1) -> Decimal:
    """
    Compute the charge for one line, rounded to cents.

    Args:
        rate: Unit rate per ordered unit
        pack_surcharge: Charge per pack beyond the first
        quantity: Ordered count (also what the rate tier was resolved from)
        pack_of: Units per pack

    Returns:
        Non-negative Decimal rounded half-up to 2 places
    """
    rate = _non_negative_amount(rate, "rate")
    pack_surcharge = _non_negative_amount(pack_surcharge, "pack_surcharge")
    quantity = _non_negative_count(quantity, "quantity")
    pack_of = _non_negative_count(pack_of, "pack_of")

    base = rate * quantity
    pack_charge = pack_surcharge * max(0, pack_of - 1)
    return round_money(base + pack_charge)


def compute_flat_total(price, quantity: int) -> Decimal:
    """Flat per-unit kinds (box, pallet, container): no pack surcharge."""
    return compute_line_total(price, 0, quantity, 1)

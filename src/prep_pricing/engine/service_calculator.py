"""
Additional Service Calculator - Bubble wrap, sticker removal, warning labels.

Each service is charged quantity × unit price independently. Services with no
quantity are left out of the result entirely.
"""
from decimal import Decimal
from typing import Mapping, Optional

from loguru import logger

from .errors import InvalidQuantityOrPackOf, PricingError
from .models import AdditionalServiceCharge, AdditionalServiceKind, AdditionalServicePricing
from .money import round_money, to_decimal


def _service_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise InvalidQuantityOrPackOf(f"Service quantity must be a non-negative integer, got {quantity!r}")
    return quantity


def compute_service_charge(quantity: int, unit_price) -> Decimal:
    """Charge for one service: quantity × unit price, rounded to cents."""
    quantity = _service_quantity(quantity)
    price = to_decimal(unit_price)
    if price < 0:
        raise PricingError(f"Service unit price must not be negative, got {price}")
    return round_money(price * quantity)


def build_service_charges(
    quantities: Mapping,
    pricing: Optional[AdditionalServicePricing],
) -> list[AdditionalServiceCharge]:
    """
    Build the invoice's additional-service entries.

    Args:
        quantities: Service kind (or its name/value) → admin-assigned quantity
        pricing: Owner's per-unit service prices; None prices everything at 0

    Returns:
        Charges in a fixed kind order, omitting zero/absent quantities

    Raises:
        InvalidQuantityOrPackOf: a negative or fractional quantity
    """
    pricing = pricing or AdditionalServicePricing()
    normalized: dict[AdditionalServiceKind, int] = {}
    for key, qty in (quantities or {}).items():
        kind = AdditionalServiceKind.parse(key)
        qty = 0 if qty is None else _service_quantity(qty)
        normalized[kind] = normalized.get(kind, 0) + qty

    charges = []
    for kind in AdditionalServiceKind:
        qty = normalized.get(kind, 0)
        if qty <= 0:
            continue
        unit_price = pricing.unit_price_for(kind)
        amount = compute_service_charge(qty, unit_price)
        logger.debug("Service {} × {} @ {} = {}", kind.value, qty, unit_price, amount)
        charges.append(AdditionalServiceCharge(
            kind=kind,
            quantity=qty,
            unit_price=round_money(unit_price),
            amount=amount,
        ))
    return charges

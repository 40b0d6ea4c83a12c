"""
Storage charges - Monthly product-base or pallet-base storage lines.

Product base bills every in-stock unit, except units added during the billing
month (the first month is free). Pallet base bills the configured pallet
count. A missing/zero price or a zero total produces no line at all.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Union

from loguru import logger

from .line_calculator import compute_flat_total
from .models import FlatRateKind, FlatRatePricing, Resolved, ShipmentLineItem
from .money import format_money


@dataclass
class InventoryRecord:
    """Inventory row as far as storage billing is concerned."""
    quantity: int
    status: str = "In Stock"
    date_added: Optional[Union[date, datetime]] = None


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def billable_item_count(
    inventory: Iterable[InventoryRecord],
    period_start: date,
    period_end: date,
) -> int:
    """
    Count in-stock units billable for a storage period.

    Units added inside [period_start, period_end] are free this month. Rows
    without a date are treated as just added.
    """
    total = 0
    for record in inventory:
        if record.status != "In Stock":
            continue
        if record.date_added is None:
            continue
        added = _as_date(record.date_added)
        if period_start <= added <= period_end:
            continue
        total += max(0, int(record.quantity or 0))
    return total


def storage_line(
    pricing: Optional[FlatRatePricing],
    item_count: int = 0,
) -> Optional[ShipmentLineItem]:
    """Build the monthly storage line, or None when there is nothing to bill."""
    if pricing is None or pricing.price <= 0:
        logger.debug("Storage skipped: no valid price")
        return None

    if pricing.kind is FlatRateKind.STORAGE_PRODUCT_BASE:
        quantity = item_count
        description = "Storage - Product Base"
    elif pricing.kind is FlatRateKind.STORAGE_PALLET_BASE:
        quantity = pricing.pallet_count or 1
        description = f"Storage - Pallet Base ({quantity} pallet{'s' if quantity > 1 else ''})"
    else:
        raise ValueError(f"{pricing.kind.value} is not a storage rate")

    if quantity <= 0:
        return None

    total = compute_flat_total(pricing.price, quantity)
    line = ShipmentLineItem(
        description=description,
        quantity=quantity,
        unit_price=pricing.price,
        total_price=total,
        price_state=Resolved(rate=pricing.price, source="Storage"),
    )
    line.add_trace("Storage", f"{quantity} × ${format_money(pricing.price)}", f"${format_money(total)}")
    return line

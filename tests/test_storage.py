from datetime import date, datetime
from decimal import Decimal

import pytest

from prep_pricing.engine.models import FlatRateKind, FlatRatePricing, Resolved
from prep_pricing.engine.storage import InventoryRecord, billable_item_count, storage_line

PERIOD = (date(2025, 3, 1), date(2025, 3, 31))


def test_billable_count_skips_new_and_shipped_stock():
    inventory = [
        InventoryRecord(quantity=100, date_added=date(2025, 1, 15)),
        InventoryRecord(quantity=40, date_added=datetime(2025, 3, 10, 14, 30)),
        InventoryRecord(quantity=25, status="Shipped", date_added=date(2025, 1, 2)),
        InventoryRecord(quantity=7),
        InventoryRecord(quantity=5, date_added=date(2025, 2, 28)),
    ]
    assert billable_item_count(inventory, *PERIOD) == 105


def test_product_base_storage_line():
    pricing = FlatRatePricing("acme", FlatRateKind.STORAGE_PRODUCT_BASE, Decimal("0.05"))
    line = storage_line(pricing, item_count=105)
    assert line.description == "Storage - Product Base"
    assert line.total_price == Decimal("5.25")
    assert isinstance(line.price_state, Resolved)
    assert line.price_state.source == "Storage"


def test_pallet_base_storage_line():
    pricing = FlatRatePricing("acme", FlatRateKind.STORAGE_PALLET_BASE, Decimal("30.00"), pallet_count=2)
    line = storage_line(pricing)
    assert line.description == "Storage - Pallet Base (2 pallets)"
    assert line.quantity == 2
    assert line.total_price == Decimal("60.00")


def test_pallet_base_defaults_to_one_pallet():
    pricing = FlatRatePricing("acme", FlatRateKind.STORAGE_PALLET_BASE, Decimal("30.00"))
    line = storage_line(pricing)
    assert line.description == "Storage - Pallet Base (1 pallet)"
    assert line.total_price == Decimal("30.00")


@pytest.mark.parametrize("pricing,count", [
    (None, 10),
    (FlatRatePricing("acme", FlatRateKind.STORAGE_PRODUCT_BASE, Decimal("0")), 10),
    (FlatRatePricing("acme", FlatRateKind.STORAGE_PRODUCT_BASE, Decimal("0.05")), 0),
])
def test_nothing_to_bill(pricing, count):
    assert storage_line(pricing, item_count=count) is None


def test_non_storage_rate_rejected():
    pricing = FlatRatePricing("acme", FlatRateKind.BOX_FORWARDING, Decimal("3.50"))
    with pytest.raises(ValueError):
        storage_line(pricing, item_count=1)

"""
Line pricing: rate × quantity plus pack surcharge, placeholders and unpriced lines.
"""
from decimal import Decimal

import pytest

from prep_pricing.catalog import PricingCatalog
from prep_pricing.engine import PricingEngine, ShipmentItemInput, ShipmentRequest, compute_line_total
from prep_pricing.engine.errors import InvalidQuantityOrPackOf, PricingError
from prep_pricing.engine.line_calculator import compute_flat_total
from prep_pricing.engine.models import (
    ADMIN_REVIEW_NOTE,
    Package,
    Placeholder,
    Resolved,
    Unpriced,
)
from prep_pricing.engine.money import format_money

OWNER = "acme"


def product_request(qty, pack_of=1, service="FBA/WFS/TFS", product_type="Standard", owner=OWNER):
    return ShipmentRequest(
        owner_id=owner,
        kind="product",
        service=service,
        product_type=product_type,
        items=[ShipmentItemInput(description="Widget", quantity=qty, pack_of=pack_of)],
    )


def test_line_total_single_pack():
    assert compute_line_total(Decimal("0.10"), Decimal("1.00"), 10, 1) == Decimal("1.00")


def test_line_total_multi_pack():
    """Each pack beyond the first is surcharged once."""
    assert compute_line_total(Decimal("0.10"), Decimal("1.00"), 10, 3) == Decimal("3.00")


def test_line_total_rounds_half_up():
    assert compute_line_total("0.125", 0, 1) == Decimal("0.13")
    assert format_money(compute_line_total("0.10", "1.00", 1)) == "0.10"


def test_line_total_monotonic_in_pack_of():
    totals = [compute_line_total("0.85", "0.25", 120, pack_of) for pack_of in range(1, 25)]
    assert totals == sorted(totals)


@pytest.mark.parametrize("rate,surcharge", [("-0.10", "1.00"), ("0.10", "-1"), ("abc", "0")])
def test_line_total_rejects_bad_amounts(rate, surcharge):
    with pytest.raises(PricingError):
        compute_line_total(rate, surcharge, 10, 1)


@pytest.mark.parametrize("qty,pack_of", [(-1, 1), (10, -2), (2.5, 1), (True, 1)])
def test_line_total_rejects_bad_counts(qty, pack_of):
    with pytest.raises(InvalidQuantityOrPackOf):
        compute_line_total("0.10", "1.00", qty, pack_of)


def test_flat_total_ignores_packs():
    assert compute_flat_total("3.50", 4) == Decimal("14.00")


def test_engine_prices_product_line(engine):
    line = engine.price_shipment(product_request(10, pack_of=3))[0]
    assert line.package is Package.STARTER
    assert line.unit_price == Decimal("0.10")
    assert line.pack_surcharge == Decimal("1.00")
    assert line.total_price == Decimal("3.00")
    assert isinstance(line.price_state, Resolved)
    assert not line.needs_admin_pricing
    assert "Tier" in line.get_trace_text()


def test_engine_uses_tier_rate(engine):
    line = engine.price_shipment(product_request(120, service="FBM"))[0]
    assert line.package is Package.PREMIUM
    assert line.total_price == Decimal("210.00")


def test_engine_rejects_zero_quantity(engine):
    with pytest.raises(InvalidQuantityOrPackOf):
        engine.price_shipment(product_request(0))


def test_engine_rejects_zero_pack_of(engine):
    with pytest.raises(InvalidQuantityOrPackOf):
        engine.price_shipment(product_request(10, pack_of=0))


@pytest.mark.parametrize("qty,pack_of", [(1, 1), (49, 5), (5000, 12)])
def test_custom_product_is_placeholder(engine, qty, pack_of):
    line = engine.price_shipment(product_request(qty, pack_of=pack_of, product_type="Custom"))[0]
    assert isinstance(line.price_state, Placeholder)
    assert line.unit_price == Decimal("1.00")
    assert line.total_price == Decimal("1.00")
    assert line.needs_admin_pricing
    assert line.package is None
    assert line.warnings == []


def test_missing_rate_is_unpriced(engine):
    line = engine.price_shipment(product_request(10, product_type="Large", service="FBM"))[0]
    assert isinstance(line.price_state, Unpriced)
    assert line.total_price == Decimal("0.00")
    assert any(ADMIN_REVIEW_NOTE in w for w in line.warnings)


def test_unknown_owner_is_unpriced(engine):
    line = engine.price_shipment(product_request(10, owner="nobody"))[0]
    assert isinstance(line.price_state, Unpriced)
    assert line.total_price == 0


def test_product_needs_product_type(engine):
    with pytest.raises(PricingError):
        engine.price_shipment(product_request(10, product_type=None))


def test_box_forwarding_flat_rate(engine):
    request = ShipmentRequest(
        owner_id=OWNER,
        kind="box",
        items=[ShipmentItemInput(description="Boxes", quantity=4, pack_of=6)],
    )
    line = engine.price_shipment(request)[0]
    assert line.pack_of == 1
    assert line.total_price == Decimal("14.00")


def test_pallet_forwarding_flat_rate(engine):
    request = ShipmentRequest(
        owner_id=OWNER,
        kind="pallet",
        pallet_sub_kind="forwarding",
        items=[ShipmentItemInput(description="Pallets", quantity=2)],
    )
    assert engine.price_shipment(request)[0].total_price == Decimal("50.00")


def test_existing_inventory_pallet_placeholder(engine):
    request = ShipmentRequest(
        owner_id=OWNER,
        kind="pallet",
        pallet_sub_kind="existing_inventory",
        items=[ShipmentItemInput(description="Stored pallets", quantity=3)],
    )
    line = engine.price_shipment(request)[0]
    assert isinstance(line.price_state, Placeholder)
    assert line.total_price == Decimal("0.00")
    assert line.needs_admin_pricing
    assert line.warnings == []


def test_pallet_needs_sub_kind(engine):
    request = ShipmentRequest(owner_id=OWNER, kind="pallet", items=[ShipmentItemInput("P", 1)])
    with pytest.raises(PricingError):
        engine.price_shipment(request)


@pytest.mark.parametrize("size,expected", [("20 feet", "450.00"), ("FT40", "750.00")])
def test_container_flat_rate(engine, size, expected):
    request = ShipmentRequest(
        owner_id=OWNER,
        kind="container",
        container_size=size,
        items=[ShipmentItemInput(description="Container", quantity=1)],
    )
    assert format_money(engine.price_shipment(request)[0].total_price) == expected


def test_missing_flat_rate_is_unpriced(engine):
    request = ShipmentRequest(
        owner_id="nobody",
        kind="box",
        items=[ShipmentItemInput(description="Boxes", quantity=1)],
    )
    line = engine.price_shipment(request)[0]
    assert isinstance(line.price_state, Unpriced)
    assert line.warnings


def test_admin_pricing_replaces_placeholder(engine):
    original = engine.price_shipment(product_request(10, pack_of=3, product_type="Custom"))[0]
    priced = engine.apply_admin_pricing(original, "2.00", "0.50")

    assert priced.total_price == Decimal("21.00")
    assert isinstance(priced.price_state, Resolved)
    assert priced.price_state.source == "Admin"
    assert not priced.needs_admin_pricing
    assert "Admin Pricing" in priced.get_trace_text()

    # Original line untouched
    assert original.total_price == Decimal("1.00")
    assert "Admin Pricing" not in original.get_trace_text()


def test_admin_pricing_clears_review_warning(engine):
    original = engine.price_shipment(product_request(10, owner="nobody"))[0]
    priced = engine.apply_admin_pricing(original, "0.20")
    assert priced.warnings == []
    assert priced.total_price == Decimal("2.00")


def test_zero_rate_is_unpriced(rules_df, settings):
    """A configured rate of 0 is treated like a missing rate, as flat rates are."""
    rules_df.loc[0, 'rate'] = "0.00"
    engine = PricingEngine(PricingCatalog.from_frames(rules_df), settings)
    line = engine.price_shipment(product_request(10, pack_of=3))[0]
    assert isinstance(line.price_state, Unpriced)
    assert line.total_price == Decimal("0.00")
    assert line.needs_admin_pricing
    assert any(ADMIN_REVIEW_NOTE in w for w in line.warnings)

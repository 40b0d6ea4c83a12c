import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from prep_pricing.engine import PricingEngine, DiscountSpec, ShipmentItemInput, ShipmentRequest
from prep_pricing.engine.models import AdditionalServiceKind, ProductType, ServiceType, ShipmentKind

def debug():
    engine = PricingEngine()

    print("Catalog:")
    print(engine.catalog.stats())

    # Test Case: FBA Standard, 10 units, pack of 3
    print("\n--- Testing FBA/WFS/TFS Standard, qty 10, pack of 3 ---")
    req = ShipmentRequest(
        owner_id="demo",
        kind=ShipmentKind.PRODUCT,
        service=ServiceType.FBA_WFS_TFS,
        product_type=ProductType.STANDARD,
        items=[ShipmentItemInput(description="Widget", quantity=10, pack_of=3)],
        selected_services=frozenset({AdditionalServiceKind.BUBBLE_WRAP}),
        service_quantities={AdditionalServiceKind.BUBBLE_WRAP: 5},
    )

    for line in engine.price_shipment(req):
        print(f"{line.description}: {line.total_price}")
        print(line.get_trace_text())

    invoice = engine.build_invoice(req, discount=DiscountSpec.percent(15))
    print("\nFinal Invoice:")
    print(invoice.to_dict())

if __name__ == "__main__":
    debug()

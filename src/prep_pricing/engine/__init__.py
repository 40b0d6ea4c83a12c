"""Engine subpackage - tier resolution, line pricing and invoice aggregation."""
from .pricing_engine import PricingEngine
from .invoice_aggregator import InvoiceDraft, aggregate, resolve_discount
from .line_calculator import compute_line_total
from .service_calculator import build_service_charges, compute_service_charge
from .tier_resolver import resolve_package, resolve_tier
from .models import (
    DiscountSpec,
    Invoice,
    ShipmentItemInput,
    ShipmentLineItem,
    ShipmentRequest,
)

__all__ = [
    'PricingEngine', 'InvoiceDraft', 'aggregate', 'resolve_discount',
    'compute_line_total', 'build_service_charges', 'compute_service_charge',
    'resolve_package', 'resolve_tier',
    'DiscountSpec', 'Invoice', 'ShipmentItemInput', 'ShipmentLineItem', 'ShipmentRequest',
]

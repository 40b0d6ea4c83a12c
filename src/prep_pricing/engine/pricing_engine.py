"""
Pricing Engine - Shipment line pricing and invoice assembly with traceability.

Resolution order for each line:
1. Validate quantity and pack size at the boundary
2. Custom products → $1.00 placeholder (admin sets the real price later)
3. Product lines → Service + Quantity → Package tier → catalog rate
4. Box / pallet forwarding / container → latest flat rate
5. Existing-inventory pallets → $0.00 placeholder (admin prices after review)
6. Nothing configured (or a zero rate) → unpriced at $0.00 with an admin note
"""
import copy
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from loguru import logger

from ..config.settings import Settings, get_settings
from .errors import PricingError
from .invoice_aggregator import InvoiceDraft, aggregate
from .line_calculator import compute_flat_total, compute_line_total
from .models import (
    ADMIN_REVIEW_NOTE,
    CUSTOM_PENDING_NOTE,
    EXISTING_INVENTORY_NOTE,
    AdditionalServiceCharge,
    AdditionalServiceKind,
    ContainerSize,
    DiscountSpec,
    FlatRateKind,
    Invoice,
    InvoiceStatus,
    PalletSubKind,
    Placeholder,
    PriceState,
    ProductType,
    Resolved,
    ServiceType,
    ShipmentItemInput,
    ShipmentKind,
    ShipmentLineItem,
    ShipmentRequest,
    Unpriced,
)
from .money import ZERO, format_money, to_decimal
from .service_calculator import build_service_charges
from .tier_resolver import resolve_tier, validate_quantity

if TYPE_CHECKING:
    from ..catalog.pricing_catalog import PricingCatalog

CONTAINER_KINDS = {
    ContainerSize.FT20: FlatRateKind.CONTAINER_20FT,
    ContainerSize.FT40: FlatRateKind.CONTAINER_40FT,
}


class PricingEngine:
    """
    Prices shipment requests against a catalog snapshot and builds invoices.

    Every method is a pure function of the request and the catalog: calling it
    again with the same inputs gives the same lines and totals, so the live
    preview and the issued invoice always agree.
    """

    def __init__(self, catalog: Optional["PricingCatalog"] = None, settings: Optional[Settings] = None):
        """Initialize engine with a catalog snapshot (loaded from disk if omitted)."""
        self.settings = settings or get_settings()
        if catalog is None:
            from ..catalog.pricing_catalog import PricingCatalog
            catalog = PricingCatalog.from_csv_dir(self.settings.data_dir)
        self.catalog = catalog

    def reload_data(self):
        """Swap in a fresh catalog snapshot from disk."""
        self.catalog = self.catalog.reload()

    # ------------------------------------------------------------------
    # Price resolution
    # ------------------------------------------------------------------

    def resolve_price(self, request: ShipmentRequest, quantity: int) -> PriceState:
        """Resolve the pricing state for a line of the given request."""
        kind = ShipmentKind.parse(request.kind)

        if kind is ShipmentKind.PRODUCT:
            if request.product_type is None:
                raise PricingError("Product shipments need a product type")
            product_type = ProductType.parse(request.product_type)
            if product_type is ProductType.CUSTOM:
                return Placeholder(self.settings.custom_placeholder_price, CUSTOM_PENDING_NOTE)
            if request.service is None:
                raise PricingError("Product shipments need a service")
            service = ServiceType.parse(request.service)
            rule = self.catalog.lookup(request.owner_id, service, product_type, quantity)
            if rule is None or rule.rate <= 0:
                return Unpriced(ADMIN_REVIEW_NOTE)
            return Resolved(rate=rule.rate, pack_surcharge=rule.pack_surcharge, package=rule.package)

        if kind is ShipmentKind.BOX:
            flat_kind = FlatRateKind.BOX_FORWARDING
        elif kind is ShipmentKind.PALLET:
            if request.pallet_sub_kind is None:
                raise PricingError("Pallet shipments need a sub-type (forwarding or existing inventory)")
            sub_kind = PalletSubKind.parse(request.pallet_sub_kind)
            if sub_kind is PalletSubKind.EXISTING_INVENTORY:
                return Placeholder(ZERO, EXISTING_INVENTORY_NOTE)
            flat_kind = FlatRateKind.PALLET_FORWARDING
        else:
            if request.container_size is None:
                raise PricingError("Container shipments need a container size")
            flat_kind = CONTAINER_KINDS[ContainerSize.parse(request.container_size)]

        flat = self.catalog.lookup_flat(request.owner_id, flat_kind)
        if flat is None or flat.price <= 0:
            return Unpriced(ADMIN_REVIEW_NOTE)
        return Resolved(rate=flat.price)

    def price_line(self, request: ShipmentRequest, item: ShipmentItemInput) -> ShipmentLineItem:
        """
        Price one line of a shipment request.

        Raises:
            InvalidQuantityOrPackOf: quantity or pack_of is not a positive integer
        """
        kind = ShipmentKind.parse(request.kind)
        quantity = validate_quantity(item.quantity, "quantity")
        pack_of = validate_quantity(item.pack_of, "pack_of") if kind is ShipmentKind.PRODUCT else 1

        line = ShipmentLineItem(
            description=item.description,
            quantity=quantity,
            pack_of=pack_of,
            selected_services=frozenset(
                AdditionalServiceKind.parse(s) for s in request.selected_services
            ),
        )
        line.add_trace("Input", f"{kind.value} line, quantity {quantity}, pack of {pack_of}")

        if (
            kind is ShipmentKind.PRODUCT
            and request.service is not None
            and request.product_type is not None
            and ProductType.parse(request.product_type) is not ProductType.CUSTOM
        ):
            package, quantity_range = resolve_tier(request.service, quantity)
            line.package = package
            line.add_trace("Tier", f"Quantity {quantity} falls in {quantity_range.label}", package.value)

        state = self.resolve_price(request, quantity)
        line.price_state = state
        logger.debug("{} ({} × {}) resolved to {}", item.description, kind.value, quantity, state)

        if isinstance(state, Resolved):
            line.unit_price = state.rate
            line.pack_surcharge = state.pack_surcharge
            if kind is ShipmentKind.PRODUCT:
                line.total_price = compute_line_total(state.rate, state.pack_surcharge, quantity, pack_of)
                line.add_trace(
                    "Rate",
                    f"${format_money(state.rate)}/unit, pack surcharge ${format_money(state.pack_surcharge)}",
                )
                line.add_trace(
                    "Extension",
                    f"{quantity} × ${format_money(state.rate)} + "
                    f"{max(0, pack_of - 1)} × ${format_money(state.pack_surcharge)}",
                    f"${format_money(line.total_price)}",
                )
            else:
                line.total_price = compute_flat_total(state.rate, quantity)
                line.add_trace(
                    "Extension",
                    f"{quantity} × ${format_money(state.rate)} flat rate",
                    f"${format_money(line.total_price)}",
                )
        elif isinstance(state, Placeholder):
            line.unit_price = state.value
            line.total_price = state.value
            line.add_trace("Placeholder", state.reason, f"${format_money(state.value)}")
        else:
            line.add_trace("Unpriced", state.reason, "$0.00")
            line.add_warning(f"{item.description}: {state.reason}")
            logger.warning(
                "Unpriced line for owner {}: {} ({} × {})",
                request.owner_id, item.description, kind.value, quantity,
            )

        return line

    def price_shipment(self, request: ShipmentRequest) -> list[ShipmentLineItem]:
        """Price every line of a request independently."""
        return [self.price_line(request, item) for item in request.items]

    def service_charges(self, request: ShipmentRequest) -> list[AdditionalServiceCharge]:
        """Charges for the admin-assigned add-on service quantities."""
        if not request.service_quantities:
            return []
        pricing = self.catalog.additional_services(request.owner_id)
        return build_service_charges(request.service_quantities, pricing)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def draft_invoice(
        self,
        request: ShipmentRequest,
        discount: Optional[DiscountSpec] = None,
        discount_amount=None,
    ) -> InvoiceDraft:
        """Start an invoice draft pre-filled from a shipment request."""
        draft = InvoiceDraft(tax_notice=self.settings.tax_notice)
        for line in self.price_shipment(request):
            draft.add_line(line)
        draft.add_service_charges(self.service_charges(request))
        draft.set_discount(discount, discount_amount)
        return draft

    def build_invoice(
        self,
        request: ShipmentRequest,
        discount: Optional[DiscountSpec] = None,
        discount_amount=None,
        finalize: bool = True,
    ) -> Invoice:
        """Price a request and aggregate it (FINALIZED, or DRAFT for previews)."""
        return aggregate(
            self.price_shipment(request),
            self.service_charges(request),
            discount,
            discount_amount,
            status=InvoiceStatus.FINALIZED if finalize else InvoiceStatus.DRAFT,
            tax_notice=self.settings.tax_notice,
        )

    def apply_admin_pricing(
        self,
        line: ShipmentLineItem,
        unit_price,
        pack_surcharge=0,
    ) -> ShipmentLineItem:
        """
        Replace a line's price with one set by an administrator at approval.

        Returns a new line; the original (e.g. the customer's placeholder) is
        left as it was.
        """
        rate = to_decimal(unit_price)
        surcharge = to_decimal(pack_surcharge)
        total = compute_line_total(rate, surcharge, line.quantity, line.pack_of)

        priced = replace(
            line,
            unit_price=rate,
            pack_surcharge=surcharge,
            total_price=total,
            price_state=Resolved(rate=rate, pack_surcharge=surcharge, package=line.package, source="Admin"),
            warnings=[w for w in line.warnings if ADMIN_REVIEW_NOTE not in w],
            trace=copy.deepcopy(line.trace),
        )
        priced.add_trace(
            "Admin Pricing",
            f"{line.quantity} × ${format_money(rate)} + "
            f"{max(0, line.pack_of - 1)} × ${format_money(surcharge)}",
            f"${format_money(total)}",
        )
        return priced

"""
Invoice Aggregator - Subtotal → gross → discount → grand total.

Missing rates never reach here as errors (they are zero-priced lines). A
discount that cannot be interpreted is dropped with a warning so the invoice
can still be issued. Sales tax is never computed; the invoice carries a
labelled "excluded" notice instead of a zero tax line.
"""
import copy
from decimal import Decimal
from typing import Iterable, Optional

from loguru import logger

from .errors import InvalidDiscount, PricingError
from .models import (
    AdditionalServiceCharge,
    DiscountSpec,
    DiscountType,
    Invoice,
    InvoiceStatus,
    ShipmentLineItem,
)
from .money import ZERO, round_money, to_decimal

TAX_EXCLUDED_NOTICE = "Sales Tax - Excluded"


def _discount_value(value, what: str) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError:
        raise InvalidDiscount(f"{what} is not a number: {value!r}") from None


def resolve_discount(
    discount: Optional[DiscountSpec],
    gross_total: Decimal,
    explicit_amount=None,
) -> Decimal:
    """
    Resolve the discount amount for a gross total.

    Order: an explicit amount wins; otherwise a percent of gross, a fixed
    amount, or nothing. The result is clamped to [0, gross_total].

    Raises:
        InvalidDiscount: unknown discount type or a non-numeric value
    """
    gross_total = to_decimal(gross_total)

    if explicit_amount is not None and explicit_amount != '':
        amount = _discount_value(explicit_amount, "Discount amount")
    elif discount is None or discount.type in (None, ''):
        amount = ZERO
    else:
        kind = str(discount.type).strip().lower()
        value = _discount_value(discount.value, "Discount value")
        if kind == DiscountType.PERCENT.value:
            amount = gross_total * (value / Decimal(100))
        elif kind == DiscountType.AMOUNT.value:
            amount = value
        else:
            raise InvalidDiscount(f"Unknown discount type: {discount.type!r}")

    amount = min(max(amount, ZERO), gross_total)
    return round_money(amount)


def aggregate(
    lines: Iterable[ShipmentLineItem],
    service_charges: Iterable[AdditionalServiceCharge] = (),
    discount: Optional[DiscountSpec] = None,
    discount_amount=None,
    status: InvoiceStatus = InvoiceStatus.FINALIZED,
    tax_notice: str = TAX_EXCLUDED_NOTICE,
) -> Invoice:
    """
    Aggregate priced lines and service charges into an invoice.

    Args:
        lines: Priced shipment lines (``total_price`` already computed)
        service_charges: Additional-service charges (zero quantities omitted)
        discount: Discount as entered ({type: amount|percent, value})
        discount_amount: Explicit discount amount; overrides ``discount``
        status: DRAFT for live previews, FINALIZED for the issued invoice
        tax_notice: Label printed in place of a tax line

    Returns:
        Invoice with subtotal, services total, gross, clamped discount and
        grand total, all rounded to cents
    """
    lines = tuple(lines)
    service_charges = tuple(service_charges)
    discount = discount or DiscountSpec()
    warnings = []

    items_subtotal = round_money(sum((to_decimal(line.total_price) for line in lines), ZERO))
    services_total = round_money(sum((to_decimal(c.amount) for c in service_charges), ZERO))
    gross_total = round_money(items_subtotal + services_total)

    try:
        resolved_discount = resolve_discount(discount, gross_total, discount_amount)
    except InvalidDiscount as e:
        logger.warning("Ignoring discount: {}", e)
        warnings.append(f"Discount ignored: {e}")
        resolved_discount = ZERO

    grand_total = round_money(gross_total - resolved_discount)

    for line in lines:
        for warning in line.warnings:
            if warning not in warnings:
                warnings.append(warning)

    return Invoice(
        lines=lines,
        service_charges=service_charges,
        discount=discount,
        items_subtotal=items_subtotal,
        additional_services_total=services_total,
        gross_total=gross_total,
        discount_amount=resolved_discount,
        grand_total=grand_total,
        status=status,
        tax_notice=tax_notice,
        warnings=tuple(warnings),
    )


class InvoiceDraft:
    """
    Invoice being assembled: recomputed on every ``preview`` until finalized.

    ``finalize`` aggregates once over a snapshot of the lines; the draft then
    refuses further changes. Corrections produce a new draft.
    """

    def __init__(self, tax_notice: str = TAX_EXCLUDED_NOTICE):
        self.tax_notice = tax_notice
        self.lines: list[ShipmentLineItem] = []
        self.service_charges: list[AdditionalServiceCharge] = []
        self.discount = DiscountSpec()
        self.discount_amount = None
        self.invoice: Optional[Invoice] = None

    @property
    def finalized(self) -> bool:
        return self.invoice is not None

    def _check_open(self):
        if self.finalized:
            raise PricingError("Invoice already finalized; start a new draft to correct it")

    def add_line(self, line: ShipmentLineItem) -> 'InvoiceDraft':
        self._check_open()
        self.lines.append(line)
        return self

    def add_service_charges(self, charges: Iterable[AdditionalServiceCharge]) -> 'InvoiceDraft':
        self._check_open()
        self.service_charges.extend(charges)
        return self

    def set_discount(self, discount: Optional[DiscountSpec], amount=None) -> 'InvoiceDraft':
        self._check_open()
        self.discount = discount or DiscountSpec()
        self.discount_amount = amount
        return self

    def preview(self) -> Invoice:
        """Live totals for the current inputs."""
        if self.finalized:
            return self.invoice
        return aggregate(
            self.lines,
            self.service_charges,
            self.discount,
            self.discount_amount,
            status=InvoiceStatus.DRAFT,
            tax_notice=self.tax_notice,
        )

    def finalize(self) -> Invoice:
        """Aggregate once and freeze; repeated calls return the same invoice."""
        if not self.finalized:
            self.invoice = aggregate(
                copy.deepcopy(self.lines),
                self.service_charges,
                self.discount,
                self.discount_amount,
                status=InvoiceStatus.FINALIZED,
                tax_notice=self.tax_notice,
            )
        return self.invoice

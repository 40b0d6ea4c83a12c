"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation. Catalog rows,
price states, charges and invoices are frozen; shipment lines collect a trace
and warnings while they are priced, like quote lines do.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from .money import ZERO, format_money

ADMIN_REVIEW_NOTE = "No pricing configured - admin can review and charge"
CUSTOM_PENDING_NOTE = "Custom product - pending admin pricing"
EXISTING_INVENTORY_NOTE = "Existing inventory pallet - admin prices after review"


def _parse_enum(enum_cls, value):
    """Look up an enum member by member, value or name (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text == member.value or text.upper() == member.name:
            return member
    lowered = text.lower()
    for member in enum_cls:
        if lowered == member.value.lower():
            return member
    raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}")


class ServiceType(str, Enum):
    """Tiered product prep services."""
    FBA_WFS_TFS = "FBA/WFS/TFS"
    FBM = "FBM"

    @classmethod
    def parse(cls, value) -> 'ServiceType':
        return _parse_enum(cls, value)


class Package(str, Enum):
    """Pricing tier label, derived from quantity."""
    PREMIUM = "Premium"
    SMALL_BUSINESS = "Small Business"
    STANDARD = "Standard"
    STARTER = "Starter"

    @classmethod
    def parse(cls, value) -> 'Package':
        return _parse_enum(cls, value)


class ProductType(str, Enum):
    STANDARD = "Standard"
    LARGE = "Large"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value) -> 'ProductType':
        return _parse_enum(cls, value)


class FlatRateKind(str, Enum):
    """Non-tiered pricing categories, one authoritative price each."""
    BOX_FORWARDING = "box_forwarding"
    PALLET_FORWARDING = "pallet_forwarding"
    CONTAINER_20FT = "container_20ft"
    CONTAINER_40FT = "container_40ft"
    STORAGE_PRODUCT_BASE = "storage_product_base"
    STORAGE_PALLET_BASE = "storage_pallet_base"

    @classmethod
    def parse(cls, value) -> 'FlatRateKind':
        return _parse_enum(cls, value)


class AdditionalServiceKind(str, Enum):
    """Per-unit add-on services requested on a shipment."""
    BUBBLE_WRAP = "bubble_wrap"
    STICKER_REMOVAL = "sticker_removal"
    WARNING_LABEL = "warning_label"

    @classmethod
    def parse(cls, value) -> 'AdditionalServiceKind':
        return _parse_enum(cls, value)

    @property
    def unit(self) -> str:
        return {
            AdditionalServiceKind.BUBBLE_WRAP: "ft",
            AdditionalServiceKind.STICKER_REMOVAL: "item",
            AdditionalServiceKind.WARNING_LABEL: "label",
        }[self]

    @property
    def label(self) -> str:
        return {
            AdditionalServiceKind.BUBBLE_WRAP: "Bubble Wrap",
            AdditionalServiceKind.STICKER_REMOVAL: "Sticker Removal",
            AdditionalServiceKind.WARNING_LABEL: "Warning Labels",
        }[self]


class DiscountType(str, Enum):
    AMOUNT = "amount"
    PERCENT = "percent"


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    FINALIZED = "Finalized"


@dataclass(frozen=True)
class QuantityRange:
    """Inclusive quantity bracket; ``upper`` of None means unbounded."""
    label: str
    lower: int
    upper: Optional[int] = None

    def contains(self, quantity: int) -> bool:
        if quantity < self.lower:
            return False
        return self.upper is None or quantity <= self.upper


# ============================================================================
# CATALOG ROWS
# ============================================================================

@dataclass(frozen=True)
class PricingRule:
    """One tiered rate entry for a (service, package, range, product type)."""
    owner_id: str
    service: ServiceType
    package: Package
    quantity_range: QuantityRange
    product_type: ProductType
    rate: Decimal
    pack_surcharge: Decimal = ZERO
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class FlatRatePricing:
    """Single non-tiered rate (forwarding, container handling, storage)."""
    owner_id: str
    kind: FlatRateKind
    price: Decimal
    pallet_count: Optional[int] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdditionalServicePricing:
    """Per-unit prices for the three add-on services."""
    price_per_foot: Decimal = ZERO
    price_per_item: Decimal = ZERO
    price_per_label: Decimal = ZERO
    updated_at: Optional[datetime] = None

    def unit_price_for(self, kind: AdditionalServiceKind) -> Decimal:
        if kind is AdditionalServiceKind.BUBBLE_WRAP:
            return self.price_per_foot
        if kind is AdditionalServiceKind.STICKER_REMOVAL:
            return self.price_per_item
        return self.price_per_label


# ============================================================================
# PRICE STATES
# ============================================================================

@dataclass(frozen=True)
class Resolved:
    """A real rate taken from the catalog (or set by an administrator)."""
    rate: Decimal
    pack_surcharge: Decimal = ZERO
    package: Optional[Package] = None
    source: str = "Catalog"


@dataclass(frozen=True)
class Placeholder:
    """A provisional price shown until an administrator sets the real one."""
    value: Decimal
    reason: str


@dataclass(frozen=True)
class Unpriced:
    """No rate configured; priced at zero and flagged for review."""
    reason: str = ADMIN_REVIEW_NOTE


PriceState = Union[Resolved, Placeholder, Unpriced]


# ============================================================================
# SHIPMENT LINES & INVOICE
# ============================================================================

@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class ShipmentLineItem:
    """One priced product line inside a shipment request."""
    description: str
    quantity: int
    pack_of: int = 1
    unit_price: Decimal = ZERO
    pack_surcharge: Decimal = ZERO
    total_price: Decimal = ZERO
    price_state: PriceState = field(default_factory=Unpriced)
    package: Optional[Package] = None
    selected_services: frozenset = frozenset()
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def needs_admin_pricing(self) -> bool:
        return not isinstance(self.price_state, Resolved)

    @property
    def pricing_note(self) -> Optional[str]:
        if isinstance(self.price_state, Resolved):
            return None
        return self.price_state.reason

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line item."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a warning for this line item."""
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "pack_of": self.pack_of,
            "package": self.package.value if self.package else None,
            "unit_price": format_money(self.unit_price),
            "pack_surcharge": format_money(self.pack_surcharge),
            "total_price": format_money(self.total_price),
            "needs_admin_pricing": self.needs_admin_pricing,
            "pricing_note": self.pricing_note,
            "selected_services": sorted(s.value for s in self.selected_services),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class AdditionalServiceCharge:
    """Charge for one add-on service with an admin-assigned quantity."""
    kind: AdditionalServiceKind
    quantity: int
    unit_price: Decimal
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "label": self.kind.label,
            "quantity": self.quantity,
            "unit": self.kind.unit,
            "unit_price": format_money(self.unit_price),
            "amount": format_money(self.amount),
        }


@dataclass(frozen=True)
class DiscountSpec:
    """Discount as entered: ``type`` is "amount", "percent" or None."""
    type: Optional[str] = None
    value: Any = None

    @classmethod
    def none(cls) -> 'DiscountSpec':
        return cls()

    @classmethod
    def percent(cls, value) -> 'DiscountSpec':
        return cls(type=DiscountType.PERCENT.value, value=value)

    @classmethod
    def amount(cls, value) -> 'DiscountSpec':
        return cls(type=DiscountType.AMOUNT.value, value=value)


@dataclass(frozen=True)
class Invoice:
    """Aggregated, immutable result handed to the invoice renderer."""
    lines: tuple[ShipmentLineItem, ...]
    service_charges: tuple[AdditionalServiceCharge, ...]
    discount: DiscountSpec
    items_subtotal: Decimal
    additional_services_total: Decimal
    gross_total: Decimal
    discount_amount: Decimal
    grand_total: Decimal
    status: InvoiceStatus
    tax_notice: str
    warnings: tuple[str, ...] = ()

    # Lines are mutable dataclasses: invoices compare by value but are not hashable
    __hash__ = None

    @property
    def needs_admin_pricing(self) -> bool:
        return any(line.needs_admin_pricing for line in self.lines)

    def to_dict(self) -> dict:
        """Plain structure consumed by PDF/HTML renderers."""
        return {
            "status": self.status.value,
            "lines": [line.to_dict() for line in self.lines],
            "additional_services": [c.to_dict() for c in self.service_charges],
            "discount": {"type": self.discount.type, "value": self.discount.value},
            "items_subtotal": format_money(self.items_subtotal),
            "additional_services_total": format_money(self.additional_services_total),
            "gross_total": format_money(self.gross_total),
            "discount_amount": format_money(self.discount_amount),
            "grand_total": format_money(self.grand_total),
            "tax_notice": self.tax_notice,
            "needs_admin_pricing": self.needs_admin_pricing,
            "warnings": list(self.warnings),
        }


# ============================================================================
# SHIPMENT REQUESTS
# ============================================================================

class ShipmentKind(str, Enum):
    PRODUCT = "product"
    BOX = "box"
    PALLET = "pallet"
    CONTAINER = "container"

    @classmethod
    def parse(cls, value) -> 'ShipmentKind':
        return _parse_enum(cls, value)


class PalletSubKind(str, Enum):
    FORWARDING = "forwarding"
    EXISTING_INVENTORY = "existing_inventory"

    @classmethod
    def parse(cls, value) -> 'PalletSubKind':
        return _parse_enum(cls, value)


class ContainerSize(str, Enum):
    FT20 = "20 feet"
    FT40 = "40 feet"

    @classmethod
    def parse(cls, value) -> 'ContainerSize':
        return _parse_enum(cls, value)


@dataclass
class ShipmentItemInput:
    """A line as entered by the customer, before pricing."""
    description: str
    quantity: int
    pack_of: int = 1


@dataclass
class ShipmentRequest:
    """A shipment request with its owner context and lines."""
    owner_id: str
    kind: ShipmentKind
    items: list[ShipmentItemInput]
    service: Optional[ServiceType] = None
    product_type: Optional[ProductType] = None
    pallet_sub_kind: Optional[PalletSubKind] = None
    container_size: Optional[ContainerSize] = None

    # Services the customer asked for; quantities are assigned by an admin
    selected_services: frozenset = frozenset()
    service_quantities: dict = field(default_factory=dict)

"""
Pydantic request/response models for the API.

Quantity and pack size constraints are enforced here, at the boundary, so
the engine never sees a non-positive count from HTTP callers.
"""
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..engine.models import (
    DiscountSpec,
    ShipmentItemInput,
    ShipmentKind,
    ShipmentRequest,
)


class ItemIn(BaseModel):
    """A shipment line as entered by the customer."""
    description: str = "Item"
    quantity: int = Field(gt=0)
    pack_of: int = Field(default=1, gt=0)


class DiscountIn(BaseModel):
    """Discount as entered: type "amount" or "percent"."""
    type: Optional[str] = None
    value: Optional[Union[float, str]] = None


class ShipmentIn(BaseModel):
    """Request model for quoting or invoicing a shipment."""
    owner_id: str
    kind: str = ShipmentKind.PRODUCT.value
    service: Optional[str] = None
    product_type: Optional[str] = None
    pallet_sub_kind: Optional[str] = None
    container_size: Optional[str] = None
    items: list[ItemIn] = Field(min_length=1)
    selected_services: list[str] = Field(default_factory=list)
    service_quantities: dict[str, int] = Field(default_factory=dict)
    discount: Optional[DiscountIn] = None
    discount_amount: Optional[Union[float, str]] = None

    def to_request(self) -> ShipmentRequest:
        return ShipmentRequest(
            owner_id=self.owner_id,
            kind=ShipmentKind.parse(self.kind),
            items=[
                ShipmentItemInput(description=i.description, quantity=i.quantity, pack_of=i.pack_of)
                for i in self.items
            ],
            service=self.service,
            product_type=self.product_type,
            pallet_sub_kind=self.pallet_sub_kind,
            container_size=self.container_size,
            selected_services=frozenset(self.selected_services),
            service_quantities=dict(self.service_quantities),
        )

    def to_discount(self) -> Optional[DiscountSpec]:
        if self.discount is None:
            return None
        return DiscountSpec(type=self.discount.type, value=self.discount.value)


class RuleCreate(BaseModel):
    """Request model for saving a tiered rate."""
    owner_id: str
    service: str
    package: str
    product_type: str
    rate: float = Field(ge=0)
    pack_surcharge: float = Field(default=0, ge=0)


class RuleResponse(BaseModel):
    """Response model for a stored tiered rate."""
    owner_id: str
    service: str
    package: str
    quantity_range: str
    product_type: str
    rate: str
    pack_surcharge: str
    updated_at: Optional[str]


class FlatRateCreate(BaseModel):
    """Request model for saving a flat rate."""
    owner_id: str
    kind: str
    price: float = Field(ge=0)
    pallet_count: Optional[int] = Field(default=None, gt=0)


class FlatRateResponse(BaseModel):
    owner_id: str
    kind: str
    price: str
    pallet_count: Optional[int]
    updated_at: Optional[str]


class ServicePricingIn(BaseModel):
    """Request model for the owner's add-on service prices."""
    owner_id: str
    price_per_foot: float = Field(default=0, ge=0)
    price_per_item: float = Field(default=0, ge=0)
    price_per_label: float = Field(default=0, ge=0)


class ServicePricingResponse(BaseModel):
    owner_id: str
    price_per_foot: str
    price_per_item: str
    price_per_label: str
    updated_at: Optional[str]

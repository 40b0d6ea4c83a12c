"""
Domain errors raised by the pricing engine.

None of these block invoice generation: unpriced tiers and bad discounts are
recovered inside the engine, invalid quantities are rejected before pricing.
"""


class PricingError(ValueError):
    """Base class for pricing engine errors."""


class UnpricedTier(PricingError):
    """No pricing rule matches a service/product type/quantity combination."""

    def __init__(self, owner_id: str, service: str, product_type: str, quantity: int):
        self.owner_id = owner_id
        self.service = service
        self.product_type = product_type
        self.quantity = quantity
        super().__init__(
            f"No rate configured for {service} / {product_type} / qty {quantity} "
            f"(owner {owner_id})"
        )


class InvalidDiscount(PricingError):
    """A discount type/value combination that cannot be interpreted."""


class InvalidQuantityOrPackOf(PricingError):
    """Quantity or pack size is non-positive or not a whole number."""

"""
Rates API - FastAPI router for catalog management and lookups.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException

from ..engine.errors import UnpricedTier
from ..engine.models import FlatRateKind, FlatRatePricing, PricingRule
from ..engine.money import format_money
from .schemas import (
    FlatRateCreate,
    FlatRateResponse,
    RuleCreate,
    RuleResponse,
    ServicePricingIn,
    ServicePricingResponse,
)
from .state import engine, store

router = APIRouter(prefix="/api/rates", tags=["rates"])


def _rule_response(rule: PricingRule) -> RuleResponse:
    return RuleResponse(
        owner_id=rule.owner_id,
        service=rule.service.value,
        package=rule.package.value,
        quantity_range=rule.quantity_range.label,
        product_type=rule.product_type.value,
        rate=format_money(rule.rate),
        pack_surcharge=format_money(rule.pack_surcharge),
        updated_at=rule.updated_at.isoformat() if rule.updated_at else None,
    )


def _flat_response(flat: FlatRatePricing) -> FlatRateResponse:
    return FlatRateResponse(
        owner_id=flat.owner_id,
        kind=flat.kind.value,
        price=format_money(flat.price),
        pallet_count=flat.pallet_count,
        updated_at=flat.updated_at.isoformat() if flat.updated_at else None,
    )


# Endpoints

@router.get("", response_model=list[RuleResponse])
async def list_rules(owner_id: str):
    """List every stored rate row for an owner, history included."""
    return [_rule_response(rule) for rule in engine.catalog.rules_for(owner_id)]


@router.post("", response_model=RuleResponse)
async def save_rule(rule_data: RuleCreate):
    """Save a tiered rate; the newest row for a key is the one used."""
    engine.catalog = store.upsert_rule(
        owner_id=rule_data.owner_id,
        service=rule_data.service,
        product_type=rule_data.product_type,
        package=rule_data.package,
        rate=rule_data.rate,
        pack_surcharge=rule_data.pack_surcharge,
    )
    saved = engine.catalog.rules_for(rule_data.owner_id)[-1]
    return _rule_response(saved)


@router.get("/lookup", response_model=RuleResponse)
async def lookup_rule(owner_id: str, service: str, product_type: str, quantity: int):
    """Resolve the rate that would apply to a product line."""
    try:
        rule = engine.catalog.require_rule(owner_id, service, product_type, quantity)
    except UnpricedTier as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _rule_response(rule)


@router.get("/flat/{kind}", response_model=FlatRateResponse)
async def get_flat_rate(kind: str, owner_id: str):
    """Current flat rate of a kind for an owner."""
    flat = engine.catalog.lookup_flat(owner_id, FlatRateKind.parse(kind))
    if flat is None:
        raise HTTPException(status_code=404, detail=f"No {kind} pricing for owner '{owner_id}'")
    return _flat_response(flat)


@router.post("/flat", response_model=FlatRateResponse)
async def save_flat_rate(flat_data: FlatRateCreate):
    """Save a flat rate (forwarding, container handling or storage)."""
    engine.catalog = store.upsert_flat(
        owner_id=flat_data.owner_id,
        kind=flat_data.kind,
        price=flat_data.price,
        pallet_count=flat_data.pallet_count,
    )
    return _flat_response(engine.catalog.lookup_flat(flat_data.owner_id, flat_data.kind))


@router.get("/services", response_model=ServicePricingResponse)
async def get_service_pricing(owner_id: str):
    """Current add-on service prices for an owner."""
    pricing = engine.catalog.additional_services(owner_id)
    if pricing is None:
        raise HTTPException(status_code=404, detail=f"No service pricing for owner '{owner_id}'")
    return ServicePricingResponse(
        owner_id=owner_id,
        price_per_foot=format_money(pricing.price_per_foot),
        price_per_item=format_money(pricing.price_per_item),
        price_per_label=format_money(pricing.price_per_label),
        updated_at=pricing.updated_at.isoformat() if pricing.updated_at else None,
    )


@router.put("/services", response_model=ServicePricingResponse)
async def save_service_pricing(pricing_data: ServicePricingIn):
    """Save the owner's bubble wrap / sticker removal / warning label prices."""
    engine.catalog = store.set_additional_services(
        owner_id=pricing_data.owner_id,
        price_per_foot=pricing_data.price_per_foot,
        price_per_item=pricing_data.price_per_item,
        price_per_label=pricing_data.price_per_label,
    )
    return await get_service_pricing(pricing_data.owner_id)


@router.post("/reload")
async def reload_catalog(owner_id: Optional[str] = None):
    """Reload the catalog snapshot from disk."""
    engine.catalog = store.load()
    stats = engine.catalog.stats()
    if owner_id:
        stats["owner_rules"] = len(engine.catalog.rules_for(owner_id))
    return {"success": True, "stats": stats}

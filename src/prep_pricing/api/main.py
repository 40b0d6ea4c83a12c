from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from ..engine.errors import InvalidQuantityOrPackOf, UnpricedTier
from ..engine.models import ServiceType
from ..engine.tier_resolver import resolve_tier
from .rates_api import router as rates_router
from .schemas import ShipmentIn
from .state import engine, settings

app = FastAPI(
    title="Prep Pricing API",
    description="Tiered shipment pricing and invoice totals",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include rate management API
app.include_router(rates_router)


@app.exception_handler(InvalidQuantityOrPackOf)
async def invalid_quantity_handler(request: Request, exc: InvalidQuantityOrPackOf):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(UnpricedTier)
async def unpriced_handler(request: Request, exc: UnpricedTier):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    # PricingError and unknown enum values (service, product type, ...)
    logger.info("Rejected {} {}: {}", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/")
async def root():
    return {"status": "online", "message": "Prep Pricing API Active"}


@app.post("/quote")
async def quote_shipment(req: ShipmentIn):
    """Live preview: a DRAFT invoice for the current inputs."""
    invoice = engine.build_invoice(
        req.to_request(),
        discount=req.to_discount(),
        discount_amount=req.discount_amount,
        finalize=False,
    )
    return invoice.to_dict()


@app.post("/invoice")
async def invoice_shipment(req: ShipmentIn):
    """Issue the FINALIZED invoice for a shipment."""
    invoice = engine.build_invoice(
        req.to_request(),
        discount=req.to_discount(),
        discount_amount=req.discount_amount,
        finalize=True,
    )
    logger.info(
        "Invoice finalized for owner {}: {} lines, grand total {}",
        req.owner_id, len(invoice.lines), invoice.grand_total,
    )
    return invoice.to_dict()


@app.get("/tiers/{service}/{quantity}")
async def get_tier(service: str, quantity: int):
    """Package tier for a quantity. Use the service name in the path, e.g. FBA_WFS_TFS."""
    if quantity <= 0:
        raise HTTPException(status_code=422, detail="quantity must be positive")
    package, quantity_range = resolve_tier(ServiceType.parse(service), quantity)
    return {
        "service": ServiceType.parse(service).value,
        "quantity": quantity,
        "package": package.value,
        "quantity_range": quantity_range.label,
    }


@app.get("/system/status")
async def get_status():
    return {
        "engine_active": True,
        "data_dir": str(settings.data_dir),
        "catalog": engine.catalog.stats(),
    }

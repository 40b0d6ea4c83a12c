"""
Catalog Store - Admin write path for the pricing CSV files.

Writes never edit rows in place: each save appends a new timestamped row, so
the history is kept and the catalog's "latest wins" rule picks it up. Every
write returns a fresh PricingCatalog snapshot.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd
from loguru import logger

from ..engine.errors import PricingError
from ..engine.models import FlatRateKind, Package, ProductType, ServiceType
from ..engine.money import format_money, to_decimal
from ..engine.tier_resolver import range_for
from .pricing_catalog import (
    FLAT_COLUMNS,
    FLAT_FILE,
    RULE_COLUMNS,
    RULES_FILE,
    SERVICE_COLUMNS,
    SERVICES_FILE,
    PricingCatalog,
    _read_frame,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _amount(value, field_name: str) -> str:
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise PricingError(f"{field_name}: {e}") from None
    if amount < 0:
        raise PricingError(f"{field_name} must not be negative")
    return format_money(amount)


class CatalogStore:
    """Append-only writer for the three catalog files in a data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def load(self) -> PricingCatalog:
        return PricingCatalog.from_csv_dir(self.data_dir)

    def _append(self, filename: str, columns: list[str], row: dict) -> PricingCatalog:
        path = self.data_dir / filename
        self.data_dir.mkdir(parents=True, exist_ok=True)
        df = _read_frame(path, columns)
        df = pd.concat([df, pd.DataFrame([row], columns=columns)], ignore_index=True)
        df.to_csv(path, index=False)
        logger.info("Saved {} row for owner {}", filename, row.get('owner_id'))
        return self.load()

    def upsert_rule(
        self,
        owner_id: str,
        service: ServiceType,
        product_type: ProductType,
        package: Package,
        rate,
        pack_surcharge=0,
        updated_at: Optional[str] = None,
    ) -> PricingCatalog:
        """
        Save a tiered rate. The quantity range is always the one paired with
        the package for that service, so the two can never disagree.
        """
        service = ServiceType.parse(service)
        package = Package.parse(package)
        product_type = ProductType.parse(product_type)
        if product_type is ProductType.CUSTOM:
            raise PricingError("Custom products are priced per request, not in the catalog")

        row = {
            'owner_id': str(owner_id).strip(),
            'service': service.value,
            'package': package.value,
            'quantity_range': range_for(service, package).label,
            'product_type': product_type.value,
            'rate': _amount(rate, 'rate'),
            'pack_surcharge': _amount(pack_surcharge, 'pack_surcharge'),
            'updated_at': updated_at or _now_iso(),
        }
        return self._append(RULES_FILE, RULE_COLUMNS, row)

    def upsert_flat(
        self,
        owner_id: str,
        kind: FlatRateKind,
        price,
        pallet_count: Optional[int] = None,
        updated_at: Optional[str] = None,
    ) -> PricingCatalog:
        """Save a flat rate (forwarding, container handling or storage)."""
        kind = FlatRateKind.parse(kind)
        if pallet_count is not None and pallet_count <= 0:
            raise PricingError("pallet_count must be positive")
        row = {
            'owner_id': str(owner_id).strip(),
            'kind': kind.value,
            'price': _amount(price, 'price'),
            'pallet_count': '' if pallet_count is None else str(pallet_count),
            'updated_at': updated_at or _now_iso(),
        }
        return self._append(FLAT_FILE, FLAT_COLUMNS, row)

    def set_additional_services(
        self,
        owner_id: str,
        price_per_foot=0,
        price_per_item=0,
        price_per_label=0,
        updated_at: Optional[str] = None,
    ) -> PricingCatalog:
        """Save the owner's bubble wrap / sticker removal / warning label prices."""
        row = {
            'owner_id': str(owner_id).strip(),
            'price_per_foot': _amount(price_per_foot, 'price_per_foot'),
            'price_per_item': _amount(price_per_item, 'price_per_item'),
            'price_per_label': _amount(price_per_label, 'price_per_label'),
            'updated_at': updated_at or _now_iso(),
        }
        return self._append(SERVICES_FILE, SERVICE_COLUMNS, row)

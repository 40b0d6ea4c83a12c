"""
Pricing Catalog - Read-only snapshot of an owner's configured rates.

Rows are loaded with pandas from the admin-maintained CSV files. Each owner
may have many historical rows for the same key; the newest by ``updated_at``
is authoritative. A lookup that finds nothing returns None - "no rate
configured" is a valid state, never an error for the caller.
"""
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping, Optional

import pandas as pd
from loguru import logger

from ..engine.errors import UnpricedTier
from ..engine.models import (
    AdditionalServicePricing,
    FlatRateKind,
    FlatRatePricing,
    PricingRule,
    ProductType,
    ServiceType,
    Package,
)
from ..engine.money import to_decimal
from ..engine.tier_resolver import parse_quantity_range, quantity_in_range, resolve_tier

RULES_FILE = 'pricing_rules.csv'
FLAT_FILE = 'flat_pricing.csv'
SERVICES_FILE = 'additional_services.csv'

RULE_COLUMNS = [
    'owner_id', 'service', 'package', 'quantity_range', 'product_type',
    'rate', 'pack_surcharge', 'updated_at',
]
FLAT_COLUMNS = ['owner_id', 'kind', 'price', 'pallet_count', 'updated_at']
SERVICE_COLUMNS = [
    'owner_id', 'price_per_foot', 'price_per_item', 'price_per_label', 'updated_at',
]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a stored timestamp to an aware UTC datetime; blank/invalid → None."""
    if value is None or str(value).strip() == '':
        return None
    ts = pd.to_datetime(str(value).strip(), utc=True, errors='coerce')
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _sort_time(value: Optional[datetime]) -> datetime:
    if value is None:
        return _OLDEST
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _latest(rows: list):
    """Newest row by updated_at; later rows win ties and undated rows."""
    if not rows:
        return None
    ranked = sorted(
        enumerate(rows),
        key=lambda pair: (_sort_time(pair[1].updated_at), pair[0]),
        reverse=True,
    )
    return ranked[0][1]


def _read_frame(path: Path, columns: list[str]) -> pd.DataFrame:
    if not path.exists():
        return pd.DataFrame(columns=columns)
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def _positive_int_or_none(value) -> Optional[int]:
    if value is None or str(value).strip() == '':
        return None
    number = float(str(value).strip())
    if not math.isfinite(number) or not number.is_integer():
        raise ValueError(f"pallet_count must be a whole number, got {value!r}")
    number = int(number)
    return number if number > 0 else None


class PricingCatalog:
    """
    Immutable lookup table of pricing rules, flat rates and service prices.

    Build one with ``from_csv_dir`` or ``from_frames``; ``reload`` returns a
    fresh snapshot rather than changing this one.
    """

    def __init__(
        self,
        rules: Iterable[PricingRule] = (),
        flat_rates: Iterable[FlatRatePricing] = (),
        services: Optional[Mapping[str, Iterable[AdditionalServicePricing]]] = None,
        source_dir: Optional[Path] = None,
    ):
        self.source_dir = source_dir
        self._rules: dict[str, tuple[PricingRule, ...]] = {}
        self._flat: dict[str, tuple[FlatRatePricing, ...]] = {}
        self._services: dict[str, tuple[AdditionalServicePricing, ...]] = {}

        grouped: dict[str, list] = {}
        for rule in rules:
            grouped.setdefault(rule.owner_id, []).append(rule)
        self._rules = {owner: tuple(rows) for owner, rows in grouped.items()}

        grouped = {}
        for flat in flat_rates:
            grouped.setdefault(flat.owner_id, []).append(flat)
        self._flat = {owner: tuple(rows) for owner, rows in grouped.items()}

        for owner, rows in (services or {}).items():
            self._services[str(owner)] = tuple(rows)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_frames(
        cls,
        rules_df: Optional[pd.DataFrame] = None,
        flat_df: Optional[pd.DataFrame] = None,
        services_df: Optional[pd.DataFrame] = None,
        source_dir: Optional[Path] = None,
    ) -> 'PricingCatalog':
        """Build a catalog from DataFrames shaped like the CSV files."""
        rules = []
        if rules_df is not None:
            for idx, row in rules_df.fillna('').iterrows():
                rule = cls._rule_from_row(row, idx)
                if rule:
                    rules.append(rule)

        flat_rates = []
        if flat_df is not None:
            for idx, row in flat_df.fillna('').iterrows():
                flat = cls._flat_from_row(row, idx)
                if flat:
                    flat_rates.append(flat)

        services: dict[str, list] = {}
        if services_df is not None:
            for idx, row in services_df.fillna('').iterrows():
                owner = str(row.get('owner_id', '')).strip()
                if not owner:
                    logger.warning("Skipping service pricing row {}: missing owner_id", idx)
                    continue
                try:
                    pricing = AdditionalServicePricing(
                        price_per_foot=to_decimal(row.get('price_per_foot')),
                        price_per_item=to_decimal(row.get('price_per_item')),
                        price_per_label=to_decimal(row.get('price_per_label')),
                        updated_at=parse_timestamp(row.get('updated_at')),
                    )
                except ValueError as e:
                    logger.warning("Skipping service pricing row {}: {}", idx, e)
                    continue
                services.setdefault(owner, []).append(pricing)

        logger.debug(
            "Catalog loaded: {} rules, {} flat rates, {} service price sets",
            len(rules), len(flat_rates), sum(len(v) for v in services.values()),
        )
        return cls(rules, flat_rates, services, source_dir=source_dir)

    @classmethod
    def from_csv_dir(cls, data_dir: Path) -> 'PricingCatalog':
        """Load the three catalog CSV files from a directory (missing = empty)."""
        data_dir = Path(data_dir)
        return cls.from_frames(
            _read_frame(data_dir / RULES_FILE, RULE_COLUMNS),
            _read_frame(data_dir / FLAT_FILE, FLAT_COLUMNS),
            _read_frame(data_dir / SERVICES_FILE, SERVICE_COLUMNS),
            source_dir=data_dir,
        )

    def reload(self) -> 'PricingCatalog':
        """Fresh snapshot from the same directory."""
        if self.source_dir is None:
            return self
        return PricingCatalog.from_csv_dir(self.source_dir)

    @staticmethod
    def _rule_from_row(row, idx) -> Optional[PricingRule]:
        try:
            owner = str(row.get('owner_id', '')).strip()
            if not owner:
                raise ValueError("missing owner_id")
            quantity_range = parse_quantity_range(row.get('quantity_range', ''))
            if quantity_range is None:
                raise ValueError(f"unknown quantity range {row.get('quantity_range')!r}")
            rate = to_decimal(row.get('rate'))
            pack_surcharge = to_decimal(row.get('pack_surcharge'))
            if rate < 0 or pack_surcharge < 0:
                raise ValueError("negative rate")
            return PricingRule(
                owner_id=owner,
                service=ServiceType.parse(row.get('service', '')),
                package=Package.parse(row.get('package', '')),
                quantity_range=quantity_range,
                product_type=ProductType.parse(row.get('product_type', '')),
                rate=rate,
                pack_surcharge=pack_surcharge,
                updated_at=parse_timestamp(row.get('updated_at')),
            )
        except ValueError as e:
            logger.warning("Skipping pricing rule row {}: {}", idx, e)
            return None

    @staticmethod
    def _flat_from_row(row, idx) -> Optional[FlatRatePricing]:
        try:
            owner = str(row.get('owner_id', '')).strip()
            if not owner:
                raise ValueError("missing owner_id")
            price = to_decimal(row.get('price'))
            if price < 0:
                raise ValueError("negative price")
            return FlatRatePricing(
                owner_id=owner,
                kind=FlatRateKind.parse(row.get('kind', '')),
                price=price,
                pallet_count=_positive_int_or_none(row.get('pallet_count')),
                updated_at=parse_timestamp(row.get('updated_at')),
            )
        except ValueError as e:
            logger.warning("Skipping flat pricing row {}: {}", idx, e)
            return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def owners(self) -> list[str]:
        return sorted(set(self._rules) | set(self._flat) | set(self._services))

    def stats(self) -> dict:
        return {
            "owners": len(self.owners),
            "rules": sum(len(v) for v in self._rules.values()),
            "flat_rates": sum(len(v) for v in self._flat.values()),
            "service_price_sets": sum(len(v) for v in self._services.values()),
        }

    def rules_for(self, owner_id: str) -> list[PricingRule]:
        """All stored rule rows for an owner, history included."""
        return list(self._rules.get(str(owner_id).strip(), ()))

    def lookup(
        self,
        owner_id: str,
        service: ServiceType,
        product_type: ProductType,
        quantity: int,
    ) -> Optional[PricingRule]:
        """
        Find the authoritative rule for an owner/service/product type/quantity.

        The package is derived from quantity. If no row carries that package
        but one covers the quantity range, it is used anyway (older rows were
        saved with inconsistent labels). Custom products never match.
        """
        service = ServiceType.parse(service)
        product_type = ProductType.parse(product_type)
        if product_type is ProductType.CUSTOM:
            return None

        package, _ = resolve_tier(service, quantity)
        candidates = [
            rule for rule in self._rules.get(str(owner_id).strip(), ())
            if rule.service is service
            and rule.product_type is product_type
            and quantity_in_range(quantity, rule.quantity_range.label)
        ]
        exact = [rule for rule in candidates if rule.package is package]
        return _latest(exact) or _latest(candidates)

    def require_rule(
        self,
        owner_id: str,
        service: ServiceType,
        product_type: ProductType,
        quantity: int,
    ) -> PricingRule:
        """Like ``lookup`` but raises UnpricedTier when nothing is configured."""
        rule = self.lookup(owner_id, service, product_type, quantity)
        if rule is None:
            raise UnpricedTier(
                owner_id,
                ServiceType.parse(service).value,
                ProductType.parse(product_type).value,
                quantity,
            )
        return rule

    def lookup_flat(self, owner_id: str, kind: FlatRateKind) -> Optional[FlatRatePricing]:
        """Latest flat-rate record of a kind for an owner."""
        kind = FlatRateKind.parse(kind)
        return _latest([
            flat for flat in self._flat.get(str(owner_id).strip(), ())
            if flat.kind is kind
        ])

    def additional_services(self, owner_id: str) -> Optional[AdditionalServicePricing]:
        """Latest per-unit add-on service prices for an owner."""
        return _latest(list(self._services.get(str(owner_id).strip(), ())))

#!/usr/bin/env python
"""
Catalog check - loads the pricing CSVs, reports coverage and runs the tests.

Usage:
    python scripts/check_catalog.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from prep_pricing.catalog import PricingCatalog
from prep_pricing.config.settings import get_settings
from prep_pricing.engine.models import ProductType, ServiceType
from prep_pricing.engine.tier_resolver import TIER_TABLE


def main():
    settings = get_settings()

    print("=" * 60)
    print("PREP PRICING CATALOG CHECK")
    print("=" * 60)
    print()

    print(f"[1/2] Loading catalog from {settings.data_dir}...")
    catalog = PricingCatalog.from_csv_dir(settings.data_dir)
    stats = catalog.stats()
    print(f"  Owners: {stats['owners']}")
    print(f"  Rate rows: {stats['rules']}")
    print(f"  Flat rate rows: {stats['flat_rates']}")

    print()
    print("Tier Coverage:")
    gaps = 0
    for owner in catalog.owners:
        for service, tiers in TIER_TABLE.items():
            for product_type in (ProductType.STANDARD, ProductType.LARGE):
                for package, quantity_range in tiers:
                    probe = max(quantity_range.lower, 1)
                    if catalog.lookup(owner, service, product_type, probe) is None:
                        gaps += 1
                        print(f"  MISSING {owner}: {service.value} / {product_type.value} / {package.value}")
    if not gaps:
        print("  All tiers priced")

    print()
    print("[2/2] Running tests...")
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-q', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ CHECK COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()

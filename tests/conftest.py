import os
import sys

import pandas as pd
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from prep_pricing.catalog import PricingCatalog
from prep_pricing.config.settings import Settings
from prep_pricing.engine import PricingEngine

OWNER = "acme"


def rule_row(service, package, quantity_range, product_type, rate, pack_surcharge, updated_at="2025-01-01T00:00:00Z", owner=OWNER):
    return {
        'owner_id': owner,
        'service': service,
        'package': package,
        'quantity_range': quantity_range,
        'product_type': product_type,
        'rate': rate,
        'pack_surcharge': pack_surcharge,
        'updated_at': updated_at,
    }


@pytest.fixture
def rules_df():
    return pd.DataFrame([
        rule_row("FBA/WFS/TFS", "Starter", "<50", "Standard", "0.10", "1.00"),
        rule_row("FBA/WFS/TFS", "Standard", "50-500", "Standard", "0.08", "0.50"),
        rule_row("FBA/WFS/TFS", "Small Business", "501-1000", "Standard", "0.07", "0.40"),
        rule_row("FBA/WFS/TFS", "Premium", "1001+", "Standard", "0.05", "0.30"),
        rule_row("FBA/WFS/TFS", "Starter", "<50", "Large", "0.50", "2.00"),
        rule_row("FBM", "Starter", "<25", "Standard", "2.50", "0.50"),
        rule_row("FBM", "Standard", "25+", "Standard", "2.25", "0.50"),
        rule_row("FBM", "Small Business", "50+", "Standard", "2.00", "0.40"),
        rule_row("FBM", "Premium", "101+", "Standard", "1.75", "0.30"),
    ])


@pytest.fixture
def flat_df():
    return pd.DataFrame([
        {'owner_id': OWNER, 'kind': 'box_forwarding', 'price': '3.50', 'pallet_count': '', 'updated_at': '2025-01-01T00:00:00Z'},
        {'owner_id': OWNER, 'kind': 'pallet_forwarding', 'price': '25.00', 'pallet_count': '', 'updated_at': '2025-01-01T00:00:00Z'},
        {'owner_id': OWNER, 'kind': 'container_20ft', 'price': '450.00', 'pallet_count': '', 'updated_at': '2025-01-01T00:00:00Z'},
        {'owner_id': OWNER, 'kind': 'container_40ft', 'price': '750.00', 'pallet_count': '', 'updated_at': '2025-01-01T00:00:00Z'},
        {'owner_id': OWNER, 'kind': 'storage_pallet_base', 'price': '30.00', 'pallet_count': '2', 'updated_at': '2025-01-01T00:00:00Z'},
    ])


@pytest.fixture
def services_df():
    return pd.DataFrame([
        {'owner_id': OWNER, 'price_per_foot': '0.50', 'price_per_item': '0.25', 'price_per_label': '0.15', 'updated_at': '2025-01-01T00:00:00Z'},
    ])


@pytest.fixture
def catalog(rules_df, flat_df, services_df):
    return PricingCatalog.from_frames(rules_df, flat_df, services_df)


@pytest.fixture
def settings(tmp_path):
    return Settings(project_root=tmp_path, data_dir=tmp_path)


@pytest.fixture
def engine(catalog, settings):
    return PricingEngine(catalog, settings)

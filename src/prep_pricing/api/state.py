"""
Shared API state - one settings object, catalog store and engine per process.

Routers swap ``engine.catalog`` for a fresh snapshot after every admin write.
"""
from ..catalog import CatalogStore
from ..config.settings import get_settings
from ..engine import PricingEngine
from ..logging_config import setup_logging

settings = get_settings()
setup_logging(settings.log_level)

store = CatalogStore(settings.data_dir)
engine = PricingEngine(store.load(), settings)

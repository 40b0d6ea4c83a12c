"""Catalog subpackage - rate storage and lookup."""
from .pricing_catalog import PricingCatalog
from .csv_store import CatalogStore

__all__ = ['PricingCatalog', 'CatalogStore']

"""
Centralized settings and path configuration for the pricing engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog CSV files live here
    data_dir: Path

    # Shown to the customer for Custom products until an admin prices them
    custom_placeholder_price: Decimal = Decimal("1.00")

    # Printed in place of a tax line; tax is never calculated
    tax_notice: str = "NJ Sales Tax 6.625% - Excluded"

    currency_symbol: str = "$"
    log_level: str = "INFO"

    @property
    def rules_csv(self) -> Path:
        return self.data_dir / 'pricing_rules.csv'

    @property
    def flat_pricing_csv(self) -> Path:
        return self.data_dir / 'flat_pricing.csv'

    @property
    def services_csv(self) -> Path:
        return self.data_dir / 'additional_services.csv'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        data_dir = os.environ.get('PREP_PRICING_DATA_DIR')
        if data_dir:
            data_path = Path(data_dir)
        else:
            data_path = Path(__file__).resolve().parent.parent / 'data'

        return cls(
            project_root=root,
            data_dir=data_path,
            log_level=os.environ.get('PREP_PRICING_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings

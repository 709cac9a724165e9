"""
Storekeeper configuration.

Usage in settings.py:
    STOREKEEPER = {
        "CATALOG_BACKEND": "myshop.catalog.StorekeeperCatalog",
        "DISCOUNT_BACKEND": "storekeeper.adapters.promotions.PromotionDiscount",
        "PERSONAL_PURCHASE_LIMIT": Decimal("10000"),
        "RESERVATION_TTL_MINUTES": 60,
    }
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings


@dataclass
class StorekeeperSettings:
    """Storekeeper configuration settings."""

    # Item lookup backend (dotted path)
    CATALOG_BACKEND: str = ""

    # Per-batch discount backend (dotted path)
    DISCOUNT_BACKEND: str = "storekeeper.adapters.static.NoDiscount"

    # Ceiling on the net total of a personal-purchase POS sale
    PERSONAL_PURCHASE_LIMIT: Decimal = Decimal("10000")

    # Card number the simulated card policy always declines
    DECLINED_CARD_NUMBER: str = "0767600730204128"

    # Location given to received stock when none is passed
    DEFAULT_WAREHOUSE_LOCATION: str = "MAIN-WAREHOUSE"

    # Warehouse reservations older than this are released (0 = never)
    RESERVATION_TTL_MINUTES: int = 0


def get_storekeeper_settings() -> StorekeeperSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOREKEEPER", {})
    return StorekeeperSettings(**{
        k: v for k, v in user_settings.items()
        if k in StorekeeperSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_storekeeper_settings(), name)


storekeeper_settings = _LazySettings()

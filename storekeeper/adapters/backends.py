"""
Backend loading — catalog and discount backends from settings.

Usage:
    from storekeeper.adapters import get_catalog, get_discount_backend

    item = get_catalog().find_by_item_code("MILK-1L")

Settings:
    STOREKEEPER = {
        "CATALOG_BACKEND": "myshop.catalog.StorekeeperCatalog",
        "DISCOUNT_BACKEND": "storekeeper.adapters.promotions.PromotionDiscount",
    }

If CATALOG_BACKEND is not configured, get_catalog() raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from storekeeper.conf import storekeeper_settings
from storekeeper.protocols.catalog import CatalogBackend
from storekeeper.protocols.discount import DiscountBackend

logger = logging.getLogger(__name__)


# Cached backend instances
_lock = threading.Lock()
_catalog: CatalogBackend | None = None
_discount_backend: DiscountBackend | None = None


def _load(setting: str, example: str):
    path = getattr(storekeeper_settings, setting)
    if not path:
        raise ImproperlyConfigured(
            f"STOREKEEPER['{setting}'] must be configured. "
            f"Example: '{example}'"
        )
    try:
        backend_class = import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(
            f"Failed to import {setting.lower()} '{path}': {e}"
        ) from e
    logger.debug("Loaded %s: %s", setting.lower(), path)
    return backend_class()


def get_catalog() -> CatalogBackend:
    """
    Return the configured catalog backend.

    Raises:
        ImproperlyConfigured: If CATALOG_BACKEND is not configured or import fails
    """
    global _catalog

    if _catalog is None:
        with _lock:
            if _catalog is None:  # double-checked
                _catalog = _load(
                    "CATALOG_BACKEND",
                    "storekeeper.adapters.static.StaticCatalog",
                )

    return _catalog


def get_discount_backend() -> DiscountBackend:
    """
    Return the configured discount backend.

    Raises:
        ImproperlyConfigured: If DISCOUNT_BACKEND is empty or import fails
    """
    global _discount_backend

    if _discount_backend is None:
        with _lock:
            if _discount_backend is None:
                _discount_backend = _load(
                    "DISCOUNT_BACKEND",
                    "storekeeper.adapters.promotions.PromotionDiscount",
                )

    return _discount_backend


def reset_backends() -> None:
    """Reset the cached backends. Useful for testing."""
    global _catalog, _discount_backend
    with _lock:
        _catalog = None
        _discount_backend = None

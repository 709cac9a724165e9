"""
Storekeeper Adapters.

Implementations of protocols for external systems.
"""

from storekeeper.adapters.backends import (
    get_catalog,
    get_discount_backend,
    reset_backends,
)
from storekeeper.adapters.static import NoDiscount, StaticCatalog

__all__ = [
    "get_catalog",
    "get_discount_backend",
    "reset_backends",
    "StaticCatalog",
    "NoDiscount",
]

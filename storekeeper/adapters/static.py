"""
Static adapters — in-memory catalog and zero discount.

For development and testing:

    STOREKEEPER = {
        "CATALOG_BACKEND": "storekeeper.adapters.static.StaticCatalog",
        "DISCOUNT_BACKEND": "storekeeper.adapters.static.NoDiscount",
    }

    StaticCatalog.register("MILK-1L", "Milk 1L", "200.00")

WARNING: Do NOT use StaticCatalog in production. Items live in process
memory and vanish on restart.
"""

from __future__ import annotations

import threading

from storekeeper.protocols.catalog import CatalogItem
from storekeeper.values import Money, Quantity


class StaticCatalog:
    """
    Catalog backed by a process-wide dict.

    Items registered with `register()` are visible to every instance, so the
    instance built by get_catalog() sees what tests or fixtures registered.
    Passing `items` gives an instance its own private catalog instead.
    """

    _lock = threading.Lock()
    _registry: dict[str, CatalogItem] = {}

    def __init__(self, items: dict[str, CatalogItem] | None = None):
        self._items = items

    @classmethod
    def register(cls, code: str, name: str, selling_price, item_id: str | None = None) -> CatalogItem:
        item = CatalogItem(
            id=str(item_id or code),
            code=code,
            name=name,
            selling_price=Money.price(selling_price),
        )
        with cls._lock:
            cls._registry[code] = item
        return item

    @classmethod
    def clear(cls) -> None:
        with cls._lock:
            cls._registry.clear()

    def find_by_item_code(self, code: str) -> CatalogItem | None:
        if self._items is not None:
            return self._items.get(code)
        with self._lock:
            return self._registry.get(code)


class NoDiscount:
    """Discount backend that never discounts."""

    def calculate_batch_discount(self, item_id: str, batch_id: int,
                                 unit_price: Money, quantity: Quantity) -> Money:
        return Money.zero()

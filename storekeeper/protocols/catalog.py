"""
Catalog Protocol — Interface for item lookup.

Storekeeper prices and names items through this protocol; the catalog itself
(brands, categories, item master maintenance) lives elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from storekeeper.values import Money


@dataclass(frozen=True)
class CatalogItem:
    """What checkout needs to know about an item."""

    id: str
    code: str
    name: str
    selling_price: Money


@runtime_checkable
class CatalogBackend(Protocol):
    """
    Protocol for item lookup.

    Implementations must return None for unknown codes rather than raising;
    the caller turns that into NotFoundError.
    """

    def find_by_item_code(self, code: str) -> CatalogItem | None:
        """
        Look up an item.

        Args:
            code: Item code as typed at the register or sent by the web store

        Returns:
            CatalogItem or None if not found
        """
        ...

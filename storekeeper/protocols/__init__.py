"""
Storekeeper Protocols.

Defines interfaces for external systems and storage.
"""

from storekeeper.protocols.catalog import CatalogBackend, CatalogItem
from storekeeper.protocols.discount import DiscountBackend
from storekeeper.protocols.repositories import (
    BatchRepository,
    OrderSummary,
    PoolRepository,
    SaleHeader,
    SaleLineData,
    SaleReceipt,
    SaleRepository,
)

__all__ = [
    "CatalogBackend",
    "CatalogItem",
    "DiscountBackend",
    "PoolRepository",
    "BatchRepository",
    "SaleRepository",
    "SaleHeader",
    "SaleLineData",
    "SaleReceipt",
    "OrderSummary",
]

"""
Storekeeper Models.

- Batch: Received lot with expiry
- WarehouseStock, ShelfStock, WebInventory: Per-batch pool ledgers
- StockMove: Immutable ledger of pool changes
- Sale, SaleLine: Completed checkouts
- SaleCounter: Per-channel sale numbering
- Promotion: Item/batch discounts
"""

from storekeeper.models.batch import Batch
from storekeeper.models.enums import Channel, MoveReason, PaymentMethod, Pool, PromotionKind
from storekeeper.models.move import StockMove
from storekeeper.models.promotion import Promotion
from storekeeper.models.sale import Sale, SaleCounter, SaleLine
from storekeeper.models.stock import ShelfStock, WarehouseStock, WebInventory

__all__ = [
    'Pool',
    'MoveReason',
    'Channel',
    'PaymentMethod',
    'PromotionKind',
    'Batch',
    'WarehouseStock',
    'ShelfStock',
    'WebInventory',
    'StockMove',
    'Sale',
    'SaleLine',
    'SaleCounter',
    'Promotion',
]

"""
Storekeeper — multi-channel stock allocation and checkout.

Goods arrive in the warehouse, move to the shelf or the web store, and are
sold at the register (cash) or online (card). Batches are consumed FIFO,
with expiring stock always first.

Usage:
    from storekeeper import StockReceiving, TransferCoordinator, POSCheckout

    StockReceiving.receive("MILK-1L", "LOT-1", 100, user="clerk", expiry_date=...)
    TransferCoordinator().transfer_to_shelf("MILK-1L", "A-01", 20, user="clerk")

    pos = POSCheckout(user="cashier")
    pos.add_line("MILK-1L", 6)
    pos.total()
    pos.pay("2000")
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'allocate':
        from storekeeper.allocation import allocate
        return allocate
    elif name in ('Quantity', 'Money'):
        from storekeeper import values
        return getattr(values, name)
    elif name in ('StoreError', 'ValidationError', 'NotFoundError', 'InsufficientStockError',
                  'LimitExceededError', 'PaymentDeclinedError', 'PersistenceError'):
        from storekeeper import exceptions
        return getattr(exceptions, name)
    elif name in ('StockReceiving', 'TransferCoordinator', 'POSCheckout', 'WebCheckout',
                  'CartStore', 'CANCEL'):
        from storekeeper import services
        return getattr(services, name)
    elif name in ('Batch', 'WarehouseStock', 'ShelfStock', 'WebInventory',
                  'StockMove', 'Sale', 'SaleLine', 'Promotion'):
        from storekeeper import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'allocate',
    'Quantity',
    'Money',
    'StoreError',
    'ValidationError',
    'NotFoundError',
    'InsufficientStockError',
    'LimitExceededError',
    'PaymentDeclinedError',
    'PersistenceError',
    'StockReceiving',
    'TransferCoordinator',
    'POSCheckout',
    'WebCheckout',
    'CartStore',
    'CANCEL',
    'Batch',
    'WarehouseStock',
    'ShelfStock',
    'WebInventory',
    'StockMove',
    'Sale',
    'SaleLine',
    'Promotion',
]

__version__ = '0.1.0'

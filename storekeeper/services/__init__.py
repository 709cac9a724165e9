"""
Storekeeper services — stock movement and checkout orchestration.

    from storekeeper.services import StockReceiving, TransferCoordinator, POSCheckout, WebCheckout
"""

from storekeeper.services.carts import CartStore
from storekeeper.services.payments import SimulatedCardPolicy
from storekeeper.services.pos import CANCEL, CheckoutState, POSCheckout, Receipt, Totals
from storekeeper.services.receiving import StockReceiving
from storekeeper.services.transfers import TransferCoordinator, TransferResult
from storekeeper.services.web import CartView, OrderConfirmation, WebCheckout

__all__ = [
    'StockReceiving',
    'TransferCoordinator',
    'TransferResult',
    'POSCheckout',
    'CheckoutState',
    'CANCEL',
    'Totals',
    'Receipt',
    'WebCheckout',
    'CartStore',
    'CartView',
    'OrderConfirmation',
    'SimulatedCardPolicy',
]

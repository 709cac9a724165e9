"""
Exceptions for Storekeeper.

Every error is a StoreError with a structured code for programmatic handling
and a data dict carrying the item/batch/quantity context of what was attempted.

Usage:
    try:
        pos.add_line('MILK-1L', '6')
    except InsufficientStockError as e:
        print(f"Short by {e.deficit}")
"""

from decimal import Decimal
from typing import Any


class StoreError(Exception):
    """
    Structured exception for stock and checkout operations.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}
    default_code = 'ERROR'

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.data:
            return f"[{self.code}] {self.message}"
        context = ", ".join(f"{k}={v}" for k, v in self.data.items())
        return f"[{self.code}] {self.message} ({context})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class ValidationError(StoreError):
    """Malformed input (quantity, price, cash, card), rejected before any lookup."""

    default_code = 'INVALID_INPUT'
    _default_messages = {
        'INVALID_INPUT': 'Invalid input',
        'INVALID_QUANTITY': 'Invalid quantity',
        'NEGATIVE_QUANTITY': 'Quantity cannot become negative',
        'INVALID_AMOUNT': 'Invalid amount',
        'INVALID_PRICE': 'Price must be positive',
        'NEGATIVE_AMOUNT': 'Amount cannot become negative',
        'INVALID_CARD': 'Card number must have 16 digits',
        'INSUFFICIENT_CASH': 'Cash tendered is less than the net total',
        'USER_REQUIRED': 'Acting user is required',
        'EXPIRED_STOCK': 'Expired stock cannot leave its pool',
        'MIXED_ITEMS': 'Candidates must belong to a single item',
        'EMPTY_CART': 'Cart is empty',
        'INVALID_STATE': 'Operation not allowed in the current checkout state',
        'ALREADY_RESERVED': 'Stock is already reserved',
        'NOT_RESERVED': 'No reservation to cancel',
        'INVALID_BATCH': 'Batch data is inconsistent',
        'INVALID_LEVELS': 'Minimum level cannot exceed maximum level',
        'NOT_IN_CART': 'Item is not in the cart',
    }


class NotFoundError(StoreError):
    """Unknown item code or record."""

    default_code = 'ITEM_NOT_FOUND'
    _default_messages = {
        'ITEM_NOT_FOUND': 'Unknown item code',
        'RECORD_NOT_FOUND': 'Stock record not found',
    }


class InsufficientStockError(StoreError):
    """Not enough eligible stock; carries the deficit."""

    default_code = 'INSUFFICIENT_STOCK'
    _default_messages = {
        'INSUFFICIENT_STOCK': 'Requested quantity unavailable',
        'NO_WAREHOUSE_STOCK': 'No available warehouse stock',
        'INSUFFICIENT_WAREHOUSE_STOCK': 'Insufficient warehouse stock',
        'INSUFFICIENT_SHELF_STOCK': 'Insufficient shelf stock',
        'INSUFFICIENT_WEB_STOCK': 'Insufficient web stock',
        'CONCURRENT_MODIFICATION': 'Stock changed while checking out',
    }

    @property
    def deficit(self) -> Decimal:
        """Shortcut for data['deficit']."""
        return self.data.get('deficit', Decimal('0'))

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))


class LimitExceededError(StoreError):
    """A configured ceiling would be exceeded."""

    default_code = 'LIMIT_EXCEEDED'
    _default_messages = {
        'LIMIT_EXCEEDED': 'Limit exceeded',
        'PERSONAL_PURCHASE_LIMIT': 'Personal purchase total exceeds the allowed ceiling',
        'SHELF_CAPACITY_EXCEEDED': 'Restocking would exceed the maximum shelf level',
    }


class PaymentDeclinedError(StoreError):
    """Card payment was declined."""

    default_code = 'PAYMENT_DECLINED'
    _default_messages = {
        'PAYMENT_DECLINED': 'Payment declined',
    }


class PersistenceError(StoreError):
    """Downstream save failure."""

    default_code = 'PERSISTENCE_FAILED'
    _default_messages = {
        'PERSISTENCE_FAILED': 'Could not persist the transaction',
    }

"""
Cart store — per-customer web carts held in process memory.

A cart is opened when the customer's session starts and closed at logout;
checkout empties it. Carts do not survive a restart.
"""

import threading

from storekeeper.exceptions import ValidationError
from storekeeper.records import require_user
from storekeeper.values import Quantity


class CartStore:
    """Thread-safe map of user → {item_code: Quantity}."""

    def __init__(self):
        self._lock = threading.Lock()
        self._carts: dict[str, dict[str, Quantity]] = {}

    def open(self, user) -> None:
        """Start a cart for `user`; an existing cart is kept."""
        user = require_user(user)
        with self._lock:
            self._carts.setdefault(user, {})

    def get(self, user) -> dict[str, Quantity]:
        """Snapshot of the cart (empty if none is open)."""
        user = require_user(user)
        with self._lock:
            return dict(self._carts.get(user, {}))

    def quantity(self, user, item_code) -> Quantity:
        return self.get(user).get(item_code, Quantity.zero())

    def set(self, user, item_code, quantity) -> None:
        qty = Quantity.positive(quantity)
        user = require_user(user)
        with self._lock:
            self._carts.setdefault(user, {})[item_code] = qty

    def remove(self, user, item_code) -> None:
        user = require_user(user)
        with self._lock:
            cart = self._carts.get(user, {})
            if item_code not in cart:
                raise ValidationError('NOT_IN_CART', item_code=item_code, user=user)
            del cart[item_code]

    def clear(self, user) -> None:
        user = require_user(user)
        with self._lock:
            if user in self._carts:
                self._carts[user] = {}

    def close(self, user) -> None:
        """Forget the cart entirely (logout)."""
        user = require_user(user)
        with self._lock:
            self._carts.pop(user, None)

    def __contains__(self, user) -> bool:
        with self._lock:
            return user in self._carts

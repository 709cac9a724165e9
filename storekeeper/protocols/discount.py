"""
Discount Protocol — Interface for per-batch discount computation.

Called once per allocated (item, batch, quantity) during POS totaling.
Errors raised by an implementation propagate as checkout failures.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from storekeeper.values import Money, Quantity


@runtime_checkable
class DiscountBackend(Protocol):

    def calculate_batch_discount(
        self,
        item_id: str,
        batch_id: int,
        unit_price: Money,
        quantity: Quantity,
    ) -> Money:
        """
        Discount for `quantity` units of one batch sold at `unit_price`.

        Returns:
            Money between zero and unit_price × quantity
        """
        ...

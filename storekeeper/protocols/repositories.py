"""
Repository Protocols — storage contracts used by the checkout services.

The Django implementations live in storekeeper.repositories. Passing
lock=True asks for row locks; callers do that inside transaction.atomic().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar, runtime_checkable

from storekeeper.records import BatchRecord
from storekeeper.values import Money, Quantity

R = TypeVar('R')


@runtime_checkable
class PoolRepository(Protocol[R]):
    """Warehouse, shelf and web repositories share this shape."""

    def find_by_item_code(self, item_code: str, lock: bool = False) -> list[R]:
        """Every row of the item, retired ones included."""
        ...

    def find_available_by_item_code(self, item_code: str, lock: bool = False) -> list[R]:
        """Rows the channel can currently draw from."""
        ...

    def get(self, pk: int, lock: bool = False) -> R:
        """Raises NotFoundError (RECORD_NOT_FOUND)."""
        ...

    def save(self, record: R) -> R:
        """Insert (id is None) or update; returns the record with its id."""
        ...


@runtime_checkable
class BatchRepository(Protocol):

    def get(self, pk: int, lock: bool = False) -> BatchRecord:
        ...

    def save(self, record: BatchRecord) -> BatchRecord:
        ...

    def consume(self, pk: int, quantity: Quantity) -> BatchRecord:
        ...


@dataclass(frozen=True)
class SaleHeader:
    """Header of a checkout about to be persisted."""

    subtotal: Money
    discount_total: Money
    net_total: Money
    created_by: str
    cash_tendered: Money | None = None
    change: Money | None = None
    personal_purchase: bool = False
    customer: str = ''
    card_last4: str = ''


@dataclass(frozen=True)
class SaleLineData:
    item_code: str
    item_id: str
    item_name: str
    batch_id: int
    quantity: Quantity
    unit_price: Money
    discount: Money = field(default_factory=Money.zero)

    @property
    def gross(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def line_total(self) -> Money:
        return self.gross - self.discount


@dataclass(frozen=True)
class SaleReceipt:
    """What persistence hands back: the assigned number."""

    number: int
    sale_id: int
    created_at: datetime


@dataclass(frozen=True)
class OrderSummary:
    """One entry of a customer's web order history."""

    number: int
    customer: str
    created_at: datetime
    lines: tuple[SaleLineData, ...]
    total: Money


@runtime_checkable
class SaleRepository(Protocol):

    def save_pos_checkout(self, header: SaleHeader, lines: list[SaleLineData]) -> SaleReceipt:
        ...

    def save_web_order(self, header: SaleHeader, lines: list[SaleLineData]) -> SaleReceipt:
        ...

    def orders_for_customer(self, customer: str) -> list[OrderSummary]:
        ...

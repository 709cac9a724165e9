"""
Transfers — warehouse stock out to the shelf or the web store.

One call is one transaction: the warehouse rows of the item are locked,
the allocation is planned, and every plan entry is applied, or nothing is.

Usage:
    coordinator = TransferCoordinator()
    result = coordinator.transfer_to_shelf("MILK-1L", "A-01", 20, user="clerk")
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from storekeeper.adapters.backends import get_catalog
from storekeeper.allocation import PlanEntry, allocate
from storekeeper.exceptions import InsufficientStockError, NotFoundError, ValidationError
from storekeeper.models.enums import MoveReason, Pool
from storekeeper.records import ShelfStockRecord, WebInventoryRecord, require_user
from storekeeper.repositories import ShelfRepository, WarehouseRepository, WebRepository
from storekeeper.services.ledger import record_move
from storekeeper.values import Quantity

logger = logging.getLogger('storekeeper')


@dataclass(frozen=True)
class TransferResult:
    """What a transfer did: the plan it applied and the destination rows."""

    item_code: str
    destination: str
    quantity: Quantity
    plan: tuple[PlanEntry, ...]
    records: tuple

    def batch_quantities(self) -> list[tuple]:
        return [(entry.batch_id, entry.quantity) for entry in self.plan]


class TransferCoordinator:
    """
    Moves quantity from the warehouse to a destination pool.

    Destination rows are per batch: the first transfer of a batch creates
    one, later transfers restock it. The shelf maximum level, when set, is
    enforced on transfers too.
    """

    def __init__(self, warehouse=None, shelves=None, web=None, catalog=None):
        self.warehouse = warehouse or WarehouseRepository()
        self.shelves = shelves or ShelfRepository()
        self.web = web or WebRepository()
        self._catalog = catalog

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    def transfer_to_shelf(self, item_code, shelf_code, quantity, user, today=None) -> TransferResult:
        """
        Raises:
            ValidationError: malformed quantity, missing user or shelf code
            NotFoundError: unknown item
            InsufficientStockError: NO_WAREHOUSE_STOCK / INSUFFICIENT_WAREHOUSE_STOCK
            LimitExceededError: shelf maximum would be exceeded
        """
        qty = Quantity.positive(quantity)
        user = require_user(user)
        if not shelf_code or not str(shelf_code).strip():
            raise ValidationError('INVALID_INPUT', reason='shelf code is required', item_code=item_code)
        item = self._item(item_code)

        def apply(entry: PlanEntry):
            source = entry.record
            existing = self.shelves.find_for_batch(source.batch_id, shelf_code, lock=True)
            if existing is not None:
                return self.shelves.save(existing.restock(entry.quantity, user))
            return self.shelves.save(ShelfStockRecord.place(
                item_code=item_code,
                batch_id=source.batch_id,
                shelf_code=shelf_code,
                quantity=entry.quantity,
                unit_price=item.selling_price,
                user=user,
                expiry_date=source.expiry_date,
                max_level=self.shelves.max_level_for(item_code, shelf_code),
            ))

        return self._transfer(item_code, qty, user, Pool.SHELF, apply, shelf_code, today)

    def transfer_to_web(self, item_code, quantity, user, today=None) -> TransferResult:
        """
        Raises:
            ValidationError: malformed quantity or missing user
            NotFoundError: unknown item
            InsufficientStockError: NO_WAREHOUSE_STOCK / INSUFFICIENT_WAREHOUSE_STOCK
        """
        qty = Quantity.positive(quantity)
        user = require_user(user)
        item = self._item(item_code)

        def apply(entry: PlanEntry):
            source = entry.record
            existing = self.web.find_for_batch(source.batch_id, lock=True)
            if existing is not None:
                return self.web.save(existing.restock(entry.quantity, user))
            return self.web.save(WebInventoryRecord.publish(
                item_code=item_code,
                batch_id=source.batch_id,
                quantity=entry.quantity,
                web_price=item.selling_price,
                user=user,
                expiry_date=source.expiry_date,
            ))

        return self._transfer(item_code, qty, user, Pool.WEB, apply, 'web', today)

    # ── internals ──

    def _item(self, item_code):
        item = self.catalog.find_by_item_code(item_code)
        if item is None:
            raise NotFoundError('ITEM_NOT_FOUND', item_code=item_code)
        return item

    def _transfer(self, item_code, qty, user, destination, apply, reference, today) -> TransferResult:
        with transaction.atomic():
            candidates = self.warehouse.find_available_by_item_code(item_code, lock=True)
            if not candidates:
                raise InsufficientStockError(
                    'NO_WAREHOUSE_STOCK',
                    item_code=item_code,
                    requested=qty.value,
                    available=Decimal('0'),
                    deficit=qty.value,
                )

            allocation = allocate(qty, candidates, today=today)
            if not allocation.is_satisfied:
                raise InsufficientStockError(
                    'INSUFFICIENT_WAREHOUSE_STOCK',
                    item_code=item_code,
                    requested=qty.value,
                    available=allocation.allocated.value,
                    deficit=allocation.shortfall.value,
                )

            records = []
            for entry in allocation.plan:
                source = self.warehouse.save(entry.record.transfer(entry.quantity, user, today=today))
                record_move(source, -entry.quantity.value, MoveReason.TRANSFER_OUT, user,
                            reference=reference, destination=str(destination))
                target = apply(entry)
                record_move(target, entry.quantity.value, MoveReason.TRANSFER_IN, user,
                            reference=reference, source=Pool.WAREHOUSE.value)
                records.append(target)

        logger.info(
            "stock.transfer",
            extra={
                "item_code": item_code,
                "destination": str(destination),
                "reference": reference,
                "qty": str(qty),
                "batches": [str(entry.batch_id) for entry in allocation.plan],
                "user": user,
            },
        )
        return TransferResult(
            item_code=item_code,
            destination=str(destination),
            quantity=qty,
            plan=allocation.plan,
            records=tuple(records),
        )

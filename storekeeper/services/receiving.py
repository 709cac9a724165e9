"""
Stock receiving — batches into the warehouse, and warehouse reservations.

All methods use transaction.atomic() with appropriate locking.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from storekeeper.adapters.backends import get_catalog
from storekeeper.conf import storekeeper_settings
from storekeeper.exceptions import NotFoundError, ValidationError
from storekeeper.models.batch import Batch
from storekeeper.models.enums import MoveReason
from storekeeper.records import BatchRecord, WarehouseStockRecord, require_user
from storekeeper.repositories import BatchRepository, WarehouseRepository
from storekeeper.services.ledger import record_move
from storekeeper.values import Quantity

logger = logging.getLogger('storekeeper')


class StockReceiving:
    """Warehouse-side operations."""

    @classmethod
    def receive(cls, item_code, batch_number, quantity, user,
                expiry_date=None, manufacture_date=None, location=None,
                received_at=None, catalog=None) -> WarehouseStockRecord:
        """
        Receive a new batch into the warehouse.

        Creates the Batch, its WarehouseStock row and a `receive` StockMove.

        Raises:
            ValidationError: malformed quantity, missing user, duplicate or
                inconsistent batch (INVALID_BATCH)
            NotFoundError: item code unknown to the catalog

        Concurrency:
            - Runs under transaction.atomic()
            - Duplicate batch numbers are also refused by a unique constraint
        """
        qty = Quantity.positive(quantity)
        user = require_user(user)

        catalog = catalog or get_catalog()
        if catalog.find_by_item_code(item_code) is None:
            raise NotFoundError('ITEM_NOT_FOUND', item_code=item_code)

        batch = BatchRecord.receive(
            item_code=item_code,
            batch_number=batch_number,
            quantity=qty,
            user=user,
            manufacture_date=manufacture_date,
            expiry_date=expiry_date,
            now=received_at,
        )

        with transaction.atomic():
            if Batch.objects.filter(item_code=item_code, batch_number=batch_number).exists():
                raise ValidationError(
                    'INVALID_BATCH',
                    reason='batch number already received',
                    item_code=item_code,
                    batch_number=batch_number,
                )
            batch = BatchRepository().save(batch)
            stock = WarehouseStockRecord.receive(
                batch,
                user,
                location=location or storekeeper_settings.DEFAULT_WAREHOUSE_LOCATION,
                now=received_at,
            )
            stock = WarehouseRepository().save(stock)
            record_move(stock, qty.value, MoveReason.RECEIVE, user, reference=batch_number)

        logger.info(
            "stock.receive",
            extra={
                "item_code": item_code,
                "batch_id": batch.id,
                "batch_number": batch_number,
                "qty": str(qty),
                "location": stock.location,
                "user": user,
            },
        )
        return stock

    @classmethod
    def reserve(cls, pk, quantity, user) -> WarehouseStockRecord:
        """
        Reserve warehouse stock. One reservation per row at a time.

        Reserved rows are skipped by transfers until the reservation is
        cancelled or released.

        Raises:
            ValidationError('ALREADY_RESERVED')
            InsufficientStockError: quantity above what the row holds
        """
        qty = Quantity.positive(quantity)
        user = require_user(user)

        with transaction.atomic():
            repo = WarehouseRepository()
            stock = repo.get(pk, lock=True).reserve(qty, user)
            stock = repo.save(stock)

        logger.info(
            "stock.reserve",
            extra={"stock_id": pk, "item_code": stock.item_code, "qty": str(qty), "user": user},
        )
        return stock

    @classmethod
    def cancel_reservation(cls, pk, user) -> WarehouseStockRecord:
        """
        Raises:
            ValidationError('NOT_RESERVED')
        """
        user = require_user(user)

        with transaction.atomic():
            repo = WarehouseRepository()
            stock = repo.get(pk, lock=True).cancel_reservation(user)
            stock = repo.save(stock)

        logger.info(
            "stock.reservation.cancel",
            extra={"stock_id": pk, "item_code": stock.item_code, "user": user},
        )
        return stock

    @classmethod
    def release_reservations(cls, older_than=None, user='system', dry_run=False) -> list[WarehouseStockRecord]:
        """
        Release reservations made before `older_than`.

        Args:
            older_than: Cutoff datetime. Default: now − RESERVATION_TTL_MINUTES.
                With no cutoff and a TTL of 0, nothing is released.
            user: Recorded as the releasing user
            dry_run: Only report what would be released

        Returns:
            Records that were (or would be) released
        """
        if older_than is None:
            ttl = storekeeper_settings.RESERVATION_TTL_MINUTES
            if not ttl:
                return []
            older_than = timezone.now() - timedelta(minutes=ttl)

        user = require_user(user)
        repo = WarehouseRepository()

        if dry_run:
            return repo.find_reserved_before(older_than)

        released = []
        with transaction.atomic():
            for stock in repo.find_reserved_before(older_than, lock=True):
                released.append(repo.save(stock.cancel_reservation(user)))

        if released:
            logger.info(
                "stock.reservation.release",
                extra={"count": len(released), "cutoff": older_than.isoformat()},
            )
        return released

"""
Django repositories — rows in, immutable records out.

Each pool repository maps its model to the matching record type from
storekeeper.records. Services never touch pool rows directly: they load
records, mutate them (getting new snapshots) and hand them back to save().

Locking:
    with transaction.atomic():
        records = ShelfRepository().find_available_by_item_code(code, lock=True)
        ...

lock=True issues SELECT ... FOR UPDATE and therefore must run inside
transaction.atomic().
"""

import logging

from django.db import DatabaseError, transaction
from django.db.models import F

from storekeeper.exceptions import NotFoundError, PersistenceError
from storekeeper.models.batch import Batch
from storekeeper.models.enums import Channel, PaymentMethod
from storekeeper.models.sale import Sale, SaleCounter, SaleLine
from storekeeper.models.stock import ShelfStock, WarehouseStock, WebInventory
from storekeeper.protocols.repositories import (
    OrderSummary,
    SaleHeader,
    SaleLineData,
    SaleReceipt,
)
from storekeeper.records import (
    BatchRecord,
    ShelfStockRecord,
    WarehouseStockRecord,
    WebInventoryRecord,
)
from storekeeper.values import Money, Quantity

logger = logging.getLogger('storekeeper')


def _optional_quantity(value):
    return None if value is None else Quantity(value)


def _optional_amount(value):
    return None if value is None else value.value


class _PoolRepository:
    """Shared query and save logic; subclasses map fields."""

    model = None

    def _queryset(self, lock: bool):
        qs = self.model.objects.all()
        if lock:
            qs = qs.select_for_update()
        return qs.order_by('pk')

    def _to_record(self, row):
        raise NotImplementedError

    def _to_fields(self, record) -> dict:
        raise NotImplementedError

    def _fetch(self, qs, item_code: str) -> list:
        try:
            return [self._to_record(row) for row in qs]
        except DatabaseError as e:
            raise PersistenceError(
                model=self.model.__name__, item_code=item_code, error=str(e),
            ) from e

    def find_by_item_code(self, item_code: str, lock: bool = False) -> list:
        return self._fetch(self._queryset(lock).for_item(item_code), item_code)

    def find_available_by_item_code(self, item_code: str, lock: bool = False) -> list:
        return self._fetch(self._queryset(lock).for_item(item_code).available(), item_code)

    def get(self, pk: int, lock: bool = False):
        try:
            row = self._queryset(lock).get(pk=pk)
        except self.model.DoesNotExist:
            raise NotFoundError(
                'RECORD_NOT_FOUND', model=self.model.__name__, pk=pk,
            ) from None
        return self._to_record(row)

    def save(self, record):
        fields = self._to_fields(record)
        try:
            if record.id is None:
                row = self.model.objects.create(**fields)
                return self._to_record(row)
            updated = self.model.objects.filter(pk=record.id).update(**fields)
        except DatabaseError as e:
            raise PersistenceError(
                model=self.model.__name__,
                item_code=record.item_code,
                batch_id=record.batch_id,
                error=str(e),
            ) from e
        if not updated:
            raise NotFoundError('RECORD_NOT_FOUND', model=self.model.__name__, pk=record.id)
        return record


class WarehouseRepository(_PoolRepository):
    model = WarehouseStock

    def _to_record(self, row: WarehouseStock) -> WarehouseStockRecord:
        return WarehouseStockRecord(
            id=row.pk,
            item_code=row.item_code,
            batch_id=row.batch_id,
            quantity_received=Quantity(row.quantity_received),
            quantity_available=Quantity(row.quantity_available),
            received_at=row.received_at,
            received_by=row.received_by,
            updated_by=row.updated_by,
            updated_at=row.updated_at,
            expiry_date=row.expiry_date,
            location=row.location,
            is_reserved=row.is_reserved,
            reserved_by=row.reserved_by,
            reserved_at=row.reserved_at,
        )

    def _to_fields(self, record: WarehouseStockRecord) -> dict:
        return {
            'item_code': record.item_code,
            'batch_id': record.batch_id,
            'location': record.location,
            'quantity_received': record.quantity_received.value,
            'quantity_available': record.quantity_available.value,
            'expiry_date': record.expiry_date,
            'received_at': record.received_at,
            'received_by': record.received_by,
            'is_reserved': record.is_reserved,
            'reserved_by': record.reserved_by,
            'reserved_at': record.reserved_at,
            'updated_by': record.updated_by,
            'updated_at': record.updated_at,
        }

    def find_reserved_before(self, cutoff, lock: bool = False) -> list[WarehouseStockRecord]:
        rows = self._queryset(lock).filter(is_reserved=True, reserved_at__lt=cutoff)
        return [self._to_record(row) for row in rows]


class ShelfRepository(_PoolRepository):
    model = ShelfStock

    def _to_record(self, row: ShelfStock) -> ShelfStockRecord:
        return ShelfStockRecord(
            id=row.pk,
            item_code=row.item_code,
            batch_id=row.batch_id,
            shelf_code=row.shelf_code,
            quantity=Quantity(row.quantity),
            unit_price=Money(row.unit_price),
            placed_at=row.placed_at,
            placed_by=row.placed_by,
            updated_by=row.updated_by,
            updated_at=row.updated_at,
            expiry_date=row.expiry_date,
            is_displayed=row.is_displayed,
            display_position=row.display_position,
            min_level=_optional_quantity(row.min_level),
            max_level=_optional_quantity(row.max_level),
        )

    def _to_fields(self, record: ShelfStockRecord) -> dict:
        return {
            'item_code': record.item_code,
            'batch_id': record.batch_id,
            'shelf_code': record.shelf_code,
            'quantity': record.quantity.value,
            'unit_price': record.unit_price.value,
            'expiry_date': record.expiry_date,
            'is_displayed': record.is_displayed,
            'display_position': record.display_position,
            'min_level': _optional_amount(record.min_level),
            'max_level': _optional_amount(record.max_level),
            'placed_at': record.placed_at,
            'placed_by': record.placed_by,
            'updated_by': record.updated_by,
            'updated_at': record.updated_at,
        }

    def find_for_batch(self, batch_id: int, shelf_code: str, lock: bool = False) -> ShelfStockRecord | None:
        row = self._queryset(lock).filter(batch_id=batch_id, shelf_code=shelf_code).first()
        return None if row is None else self._to_record(row)

    def max_level_for(self, item_code: str, shelf_code: str):
        """Capacity configured for an item on a shelf, from any of its rows."""
        value = (
            self.model.objects
            .filter(item_code=item_code, shelf_code=shelf_code, max_level__isnull=False)
            .order_by('-updated_at')
            .values_list('max_level', flat=True)
            .first()
        )
        return _optional_quantity(value)


class WebRepository(_PoolRepository):
    model = WebInventory

    def _to_record(self, row: WebInventory) -> WebInventoryRecord:
        return WebInventoryRecord(
            id=row.pk,
            item_code=row.item_code,
            batch_id=row.batch_id,
            quantity=Quantity(row.quantity),
            web_price=Money(row.web_price),
            added_at=row.added_at,
            added_by=row.added_by,
            updated_by=row.updated_by,
            updated_at=row.updated_at,
            expiry_date=row.expiry_date,
            is_published=row.is_published,
            is_featured=row.is_featured,
            stock_level=row.stock_level,
        )

    def _to_fields(self, record: WebInventoryRecord) -> dict:
        return {
            'item_code': record.item_code,
            'batch_id': record.batch_id,
            'quantity': record.quantity.value,
            'web_price': record.web_price.value,
            'expiry_date': record.expiry_date,
            'is_published': record.is_published,
            'is_featured': record.is_featured,
            'stock_level': record.stock_level,
            'added_at': record.added_at,
            'added_by': record.added_by,
            'updated_by': record.updated_by,
            'updated_at': record.updated_at,
        }

    def find_for_batch(self, batch_id: int, lock: bool = False) -> WebInventoryRecord | None:
        row = self._queryset(lock).filter(batch_id=batch_id).first()
        return None if row is None else self._to_record(row)


class BatchRepository:

    def _to_record(self, row: Batch) -> BatchRecord:
        return BatchRecord(
            id=row.pk,
            item_code=row.item_code,
            batch_number=row.batch_number,
            quantity_received=Quantity(row.quantity_received),
            quantity_available=Quantity(row.quantity_available),
            received_at=row.received_at,
            manufacture_date=row.manufacture_date,
            expiry_date=row.expiry_date,
            received_by=row.received_by,
        )

    def get(self, pk: int, lock: bool = False) -> BatchRecord:
        qs = Batch.objects.select_for_update() if lock else Batch.objects.all()
        try:
            return self._to_record(qs.get(pk=pk))
        except Batch.DoesNotExist:
            raise NotFoundError('RECORD_NOT_FOUND', model='Batch', pk=pk) from None

    def save(self, record: BatchRecord) -> BatchRecord:
        fields = {
            'item_code': record.item_code,
            'batch_number': record.batch_number,
            'quantity_received': record.quantity_received.value,
            'quantity_available': record.quantity_available.value,
            'received_at': record.received_at,
            'manufacture_date': record.manufacture_date,
            'expiry_date': record.expiry_date,
            'received_by': record.received_by,
        }
        try:
            if record.id is None:
                return self._to_record(Batch.objects.create(**fields))
            updated = Batch.objects.filter(pk=record.id).update(**fields)
        except DatabaseError as e:
            raise PersistenceError(
                model='Batch',
                item_code=record.item_code,
                batch_number=record.batch_number,
                error=str(e),
            ) from e
        if not updated:
            raise NotFoundError('RECORD_NOT_FOUND', model='Batch', pk=record.id)
        return record

    def consume(self, pk: int, quantity) -> BatchRecord:
        """Lock the batch, take `quantity` off what the store holds."""
        with transaction.atomic():
            record = self.get(pk, lock=True).consume(quantity)
            return self.save(record)


class SaleRepository:
    """Persists checkouts as Sale + SaleLine rows."""

    def _next_number(self, channel: str) -> int:
        """Bump the channel counter; the row stays locked until the sale commits."""
        counter, _ = SaleCounter.objects.select_for_update().get_or_create(channel=channel)
        SaleCounter.objects.filter(pk=counter.pk).update(last_number=F('last_number') + 1)
        return counter.last_number + 1

    def _save(self, channel, payment_method, header: SaleHeader,
              lines: list[SaleLineData]) -> SaleReceipt:
        try:
            with transaction.atomic():
                sale = Sale.objects.create(
                    channel=channel,
                    number=self._next_number(channel),
                    payment_method=payment_method,
                    subtotal=header.subtotal.value,
                    discount_total=header.discount_total.value,
                    net_total=header.net_total.value,
                    cash_tendered=_optional_amount(header.cash_tendered),
                    change=_optional_amount(header.change),
                    personal_purchase=header.personal_purchase,
                    customer=header.customer,
                    card_last4=header.card_last4,
                    created_by=header.created_by,
                )
                for line in lines:
                    SaleLine.objects.create(
                        sale=sale,
                        batch_id=line.batch_id,
                        item_code=line.item_code,
                        item_id=line.item_id,
                        item_name=line.item_name,
                        quantity=line.quantity.value,
                        unit_price=line.unit_price.value,
                        discount=line.discount.value,
                        line_total=line.line_total.value,
                    )
        except DatabaseError as e:
            raise PersistenceError(channel=channel, lines=len(lines), error=str(e)) from e

        return SaleReceipt(number=sale.number, sale_id=sale.pk, created_at=sale.created_at)

    def save_pos_checkout(self, header: SaleHeader, lines: list[SaleLineData]) -> SaleReceipt:
        return self._save(Channel.POS, PaymentMethod.CASH, header, lines)

    def save_web_order(self, header: SaleHeader, lines: list[SaleLineData]) -> SaleReceipt:
        return self._save(Channel.WEB, PaymentMethod.CARD, header, lines)

    def orders_for_customer(self, customer: str) -> list[OrderSummary]:
        sales = Sale.objects.for_customer(customer).prefetch_related('lines').order_by('number')
        return [
            OrderSummary(
                number=sale.number,
                customer=sale.customer,
                created_at=sale.created_at,
                lines=tuple(
                    SaleLineData(
                        item_code=line.item_code,
                        item_id=line.item_id,
                        item_name=line.item_name,
                        batch_id=line.batch_id,
                        quantity=Quantity(line.quantity),
                        unit_price=Money(line.unit_price),
                        discount=Money(line.discount),
                    )
                    for line in sale.lines.all()
                ),
                total=Money(sale.net_total),
            )
            for sale in sales
        ]

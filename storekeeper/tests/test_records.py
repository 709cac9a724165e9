"""
Tests for the immutable stock records.

These are pure and need no database.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storekeeper.exceptions import InsufficientStockError, LimitExceededError, ValidationError
from storekeeper.records import (
    BatchRecord,
    ShelfStockRecord,
    WarehouseStockRecord,
    WebInventoryRecord,
    initial_stock_level,
)
from storekeeper.values import Money, Quantity

TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def batch(quantity=10, expiry=None, **kwargs):
    return BatchRecord.receive('MILK-1L', 'LOT-1', quantity, 'clerk',
                               expiry_date=expiry, now=NOW, **kwargs)


def warehouse(quantity=10, expiry=None):
    b = BatchRecord(
        id=1, item_code='MILK-1L', batch_number='LOT-1',
        quantity_received=Quantity.parse(quantity),
        quantity_available=Quantity.parse(quantity),
        received_at=NOW, expiry_date=expiry, received_by='clerk',
    )
    return WarehouseStockRecord.receive(b, 'clerk', now=NOW)


def shelf(quantity=10, expiry=None, max_level=None):
    return ShelfStockRecord.place('MILK-1L', 1, 'A-01', quantity, '200', 'clerk',
                                  expiry_date=expiry, max_level=max_level, now=NOW)


def web(quantity=10, expiry=None):
    return WebInventoryRecord.publish('MILK-1L', 1, quantity, '200', 'clerk',
                                      expiry_date=expiry, now=NOW)


class TestBatchRecord:

    def test_receive_sets_both_quantities(self):
        record = batch(10)
        assert record.quantity_received == record.quantity_available == Quantity.parse(10)
        assert record.received_by == 'clerk'

    def test_expiry_must_follow_manufacture(self):
        with pytest.raises(ValidationError) as exc:
            batch(expiry=TODAY, manufacture_date=TODAY)
        assert exc.value.code == 'INVALID_BATCH'

    def test_consume_decrements_available_only(self):
        record = batch(10).consume(4)
        assert record.quantity_available.value == Decimal('6')
        assert record.quantity_received.value == Decimal('10')

    def test_consume_more_than_available(self):
        with pytest.raises(InsufficientStockError) as exc:
            batch(2).consume(5)
        assert exc.value.deficit == Decimal('3')

    def test_expiry_helpers(self):
        record = batch(expiry=TODAY + timedelta(days=3))
        assert record.days_until_expiry(TODAY) == 3
        assert not record.is_expired(TODAY + timedelta(days=3))
        assert record.is_expired(TODAY + timedelta(days=4))
        assert record.is_expiring_soon(TODAY)

    def test_user_required(self):
        with pytest.raises(ValidationError) as exc:
            BatchRecord.receive('MILK-1L', 'LOT-1', 1, '  ')
        assert exc.value.code == 'USER_REQUIRED'


class TestWarehouseStockRecord:

    def test_reserve_once(self):
        record = warehouse().reserve(5, 'manager', now=NOW)
        assert record.is_reserved
        assert record.reserved_by == 'manager'
        assert not record.is_allocatable(TODAY)

        with pytest.raises(ValidationError) as exc:
            record.reserve(1, 'other')
        assert exc.value.code == 'ALREADY_RESERVED'

    def test_reserve_more_than_available(self):
        with pytest.raises(InsufficientStockError):
            warehouse(3).reserve(4, 'manager')

    def test_cancel_without_reservation(self):
        with pytest.raises(ValidationError) as exc:
            warehouse().cancel_reservation('manager')
        assert exc.value.code == 'NOT_RESERVED'

    def test_transfer_clears_reservation(self):
        record = warehouse(10).reserve(5, 'manager').transfer(5, 'clerk', today=TODAY)
        assert record.quantity_available.value == Decimal('5')
        assert not record.is_reserved
        assert record.reserved_at is None

    def test_transfer_of_expired_stock_is_refused(self):
        record = warehouse(expiry=TODAY - timedelta(days=1))
        with pytest.raises(ValidationError) as exc:
            record.transfer(1, 'clerk', today=TODAY)
        assert exc.value.code == 'EXPIRED_STOCK'

    def test_transfer_never_clamps(self):
        with pytest.raises(InsufficientStockError) as exc:
            warehouse(4).transfer(6, 'clerk', today=TODAY)
        assert exc.value.code == 'INSUFFICIENT_WAREHOUSE_STOCK'
        assert exc.value.deficit == Decimal('2')

    def test_empty_row_is_retired(self):
        record = warehouse(2).transfer(2, 'clerk', today=TODAY)
        assert record.is_retired
        assert not record.is_allocatable(TODAY)

    @pytest.mark.parametrize('amount', [0, '-1', 'x'])
    def test_non_positive_movement(self, amount):
        with pytest.raises(ValidationError):
            warehouse().transfer(amount, 'clerk', today=TODAY)


class TestShelfStockRecord:

    def test_sell_stamps_user(self):
        record = shelf(10).sell(3, 'cashier', today=TODAY, now=NOW)
        assert record.quantity.value == Decimal('7')
        assert record.updated_by == 'cashier'

    def test_restock_above_max_level(self):
        record = shelf(8, max_level=Quantity.parse(10))
        with pytest.raises(LimitExceededError) as exc:
            record.restock(3, 'clerk')
        assert exc.value.code == 'SHELF_CAPACITY_EXCEEDED'
        assert record.restock(2, 'clerk').quantity.value == Decimal('10')

    def test_restock_of_expired_record_is_allowed(self):
        """Increments are judged per record; expiry only blocks outbound moves."""
        record = shelf(1, expiry=TODAY - timedelta(days=2))
        assert record.restock(1, 'clerk').quantity.value == Decimal('2')

    def test_hidden_shelf_row_is_not_allocatable(self):
        record = shelf().set_display(False, 'clerk')
        assert not record.is_allocatable(TODAY)

    def test_levels(self):
        record = shelf(4).set_levels(5, 20, 'clerk')
        assert record.needs_restocking
        with pytest.raises(ValidationError) as exc:
            record.set_levels(10, 5, 'clerk')
        assert exc.value.code == 'INVALID_LEVELS'

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            shelf().update_price('0', 'clerk')
        assert exc.value.code == 'INVALID_PRICE'

    def test_total_value_and_expiry_window(self):
        record = shelf(3, expiry=TODAY + timedelta(days=2))
        assert record.total_value == Money.parse('600')
        assert record.is_expiring_soon(TODAY)
        assert not shelf(3, expiry=TODAY + timedelta(days=3)).is_expiring_soon(TODAY)


class TestWebInventoryRecord:

    def test_initial_level_is_clamped(self):
        assert web(250).stock_level == 100
        assert web(40).stock_level == 40
        assert initial_stock_level(Quantity.parse('7.9')) == 7

    def test_level_follows_quantity(self):
        """round(level × new / max(previous, 1))."""
        record = web(40)
        sold = record.sell(30, 'alice', today=TODAY)
        assert sold.stock_level == 10
        assert sold.is_low_stock

        restocked = sold.restock(20, 'clerk')
        assert restocked.stock_level == 30

    def test_unpublished_row_is_not_allocatable(self):
        record = web().set_published(False, 'clerk')
        assert not record.is_allocatable(TODAY)

    def test_sell_more_than_available(self):
        with pytest.raises(InsufficientStockError) as exc:
            web(2).sell(3, 'alice', today=TODAY)
        assert exc.value.code == 'INSUFFICIENT_WEB_STOCK'

    def test_featured_flag(self):
        assert web().set_featured(True, 'clerk').is_featured

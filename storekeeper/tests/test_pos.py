"""
Tests for POSCheckout.
"""

from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from storekeeper import CANCEL, POSCheckout
from storekeeper.adapters import StaticCatalog
from storekeeper.adapters.promotions import PromotionDiscount
from storekeeper.exceptions import (
    InsufficientStockError,
    LimitExceededError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from storekeeper.models import Batch, MoveReason, Promotion, PromotionKind, Sale, StockMove
from storekeeper.repositories import ShelfRepository
from storekeeper.services import CheckoutState

pytestmark = pytest.mark.django_db


class RecordingShelves(ShelfRepository):
    """Remembers which items were read with row locks."""

    def __init__(self):
        self.locked = []

    def find_available_by_item_code(self, item_code, lock=False):
        if lock:
            self.locked.append(item_code)
        return super().find_available_by_item_code(item_code, lock=lock)


class LooseCatalog(StaticCatalog):
    """Catalog that accepts codes in any case, with stray spaces."""

    def find_by_item_code(self, code):
        return super().find_by_item_code(code.strip().upper())


class TestBuildingCart:

    def test_add_line_merges_quantities(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 2)
        line = pos.add_line('MILK-1L', '3')
        assert line.quantity.value == Decimal('5')
        assert len(pos.lines) == 1

    def test_quantity_is_validated_before_lookup(self, db):
        pos = POSCheckout(user='cashier')
        with pytest.raises(ValidationError):
            pos.add_line('NOPE', 'two')

    def test_unknown_item(self, db):
        with pytest.raises(NotFoundError):
            POSCheckout(user='cashier').add_line('NOPE', 1)

    def test_advisory_check_counts_the_cart(self, milk_on_shelf):
        """8 on the shelf: 6 then 3 more is refused, the cart keeps 6."""
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 6)
        with pytest.raises(InsufficientStockError) as exc:
            pos.add_line('MILK-1L', 3)
        assert exc.value.deficit == Decimal('1')
        assert pos.lines[0].quantity.value == Decimal('6')

    def test_codes_are_normalized_by_the_catalog(self, milk_on_shelf):
        pos = POSCheckout(user='cashier', catalog=LooseCatalog())
        pos.add_line('milk-1l', 2)
        pos.add_line(' MILK-1L ', 1)
        assert [(line.item_code, line.quantity.value) for line in pos.lines] == [('MILK-1L', Decimal('3'))]

        pos.total()
        receipt = pos.pay('600')
        assert sum(line.quantity.value for line in receipt.lines) == Decimal('3')

    def test_remove_line_with_catalog_spelling(self, milk_on_shelf):
        pos = POSCheckout(user='cashier', catalog=LooseCatalog())
        pos.add_line('MILK-1L', 1)
        pos.remove_line('milk-1l')
        assert pos.lines == []

    def test_remove_line(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 1)
        pos.remove_line('MILK-1L')
        assert pos.lines == []
        with pytest.raises(ValidationError) as exc:
            pos.remove_line('MILK-1L')
        assert exc.value.code == 'NOT_IN_CART'

    def test_user_required(self):
        with pytest.raises(ValidationError):
            POSCheckout(user='')


class TestTotal:

    def test_empty_cart(self, db):
        with pytest.raises(ValidationError) as exc:
            POSCheckout(user='cashier').total()
        assert exc.value.code == 'EMPTY_CART'

    def test_totals_without_discount(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 6)
        totals = pos.total()

        assert totals.subtotal.value == Decimal('1200.00')
        assert totals.discount_total.is_zero
        assert totals.net_total == totals.subtotal
        assert pos.state == CheckoutState.AWAITING_PAYMENT

    def test_discount_per_batch(self, milk_on_shelf):
        """Only the batch under promotion is discounted."""
        Promotion.objects.create(
            code='MILK-B', name='Milk B clearance', kind=PromotionKind.PERCENTAGE,
            value=Decimal('10'), item_id='MILK-1L', batch_id=milk_on_shelf['B'],
        )
        pos = POSCheckout(user='cashier', discounts=PromotionDiscount())
        pos.add_line('MILK-1L', 6)
        totals = pos.total()

        discounts = {line.batch_id: line.discount.value for line in totals.lines}
        assert discounts == {milk_on_shelf['B']: Decimal('100.00'), milk_on_shelf['A']: Decimal('0.00')}
        assert totals.net_total.value == Decimal('1100.00')

    def test_personal_purchase_limit(self, rice_on_shelf):
        """12 × 1000 is over the 10,000 ceiling; the cart is kept."""
        pos = POSCheckout(user='cashier')
        pos.set_personal_purchase(True)
        pos.add_line('RICE-5KG', 12)

        with pytest.raises(LimitExceededError) as exc:
            pos.total()
        assert exc.value.code == 'PERSONAL_PURCHASE_LIMIT'
        assert pos.state == CheckoutState.BUILDING_CART
        assert pos.lines[0].quantity.value == Decimal('12')

    def test_personal_purchase_gets_no_discount(self, rice_on_shelf):
        Promotion.objects.create(
            code='RICE', name='Rice week', kind=PromotionKind.PERCENTAGE,
            value=Decimal('20'), item_id='rice',
        )
        pos = POSCheckout(user='cashier', discounts=PromotionDiscount())
        pos.set_personal_purchase(True)
        pos.add_line('RICE-5KG', 5)
        totals = pos.total()

        assert totals.discount_total.is_zero
        assert totals.net_total.value == Decimal('5000.00')
        assert totals.personal_purchase

    def test_edit_after_total_drops_totals(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 1)
        pos.total()
        pos.add_line('MILK-1L', 1)
        assert pos.state == CheckoutState.BUILDING_CART
        assert pos.totals is None


class TestPay:

    def test_sale_takes_expiring_batch_first(self, milk_on_shelf, shelf_quantities):
        """6 units: 5 from B (expires first), then 1 from A; 2 stay on the shelf."""
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 6)
        pos.total()
        receipt = pos.pay('1500')

        assert receipt.bill_number == 1
        assert receipt.change.value == Decimal('300.00')
        assert [(line.batch_id, line.quantity.value) for line in receipt.lines] == [
            (milk_on_shelf['B'], Decimal('5')),
            (milk_on_shelf['A'], Decimal('1')),
        ]
        assert shelf_quantities('MILK-1L') == {
            milk_on_shelf['B']: Decimal('0'),
            milk_on_shelf['A']: Decimal('2'),
        }
        assert pos.state == CheckoutState.PERSISTED

    def test_persists_sale_batches_and_moves(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 6)
        pos.total()
        pos.pay('2000')

        sale = Sale.objects.get()
        assert (sale.channel, sale.payment_method, sale.number) == ('pos', 'cash', 1)
        assert sale.net_total == Decimal('1200.00')
        assert sale.cash_tendered == Decimal('2000.00')
        assert sale.change == Decimal('800.00')
        assert sale.lines.count() == 2

        assert Batch.objects.get(pk=milk_on_shelf['B']).quantity_available == Decimal('0')
        assert Batch.objects.get(pk=milk_on_shelf['A']).quantity_available == Decimal('2')

        moves = StockMove.objects.filter(reason=MoveReason.SALE)
        assert sorted(m.delta for m in moves) == [Decimal('-5'), Decimal('-1')]
        assert {m.reference for m in moves} == {'1'}

    def test_bill_numbers_are_sequential(self, milk_on_shelf):
        numbers = []
        for _ in range(2):
            pos = POSCheckout(user='cashier')
            pos.add_line('MILK-1L', 1)
            pos.total()
            numbers.append(pos.pay('200').bill_number)
        assert numbers == [1, 2]

    def test_insufficient_cash_keeps_awaiting_payment(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 2)
        pos.total()

        with pytest.raises(ValidationError) as exc:
            pos.pay('399.99')
        assert exc.value.code == 'INSUFFICIENT_CASH'
        assert pos.state == CheckoutState.AWAITING_PAYMENT
        assert pos.pay('400').change.is_zero

    def test_malformed_cash(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 1)
        pos.total()
        with pytest.raises(ValidationError):
            pos.pay('lots')

    def test_pay_before_total(self, milk_on_shelf):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 1)
        with pytest.raises(ValidationError) as exc:
            pos.pay('200')
        assert exc.value.code == 'INVALID_STATE'

    def test_cancel_sentinel(self, milk_on_shelf, shelf_quantities):
        before = shelf_quantities('MILK-1L')
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 2)
        pos.total()

        assert pos.pay(CANCEL) is None
        assert pos.state == CheckoutState.CANCELLED
        assert shelf_quantities('MILK-1L') == before
        assert not Sale.objects.exists()

        with pytest.raises(ValidationError):
            pos.cancel()

    def test_concurrent_sale_invalidates_the_plan(self, milk_on_shelf, shelf_quantities):
        """Another register empties batch B between totaling and payment."""
        pos = POSCheckout(user='cashier-1')
        pos.add_line('MILK-1L', 2)
        pos.total()

        other = POSCheckout(user='cashier-2')
        other.add_line('MILK-1L', 5)
        other.total()
        other.pay('1000')
        after_other = shelf_quantities('MILK-1L')

        with pytest.raises(InsufficientStockError) as exc:
            pos.pay('400')
        assert exc.value.code == 'CONCURRENT_MODIFICATION'
        assert pos.state == CheckoutState.BUILDING_CART
        assert shelf_quantities('MILK-1L') == after_other
        assert Sale.objects.count() == 1

        # the cashier can re-total and sell from batch A
        pos.total()
        receipt = pos.pay('400')
        assert receipt.lines[0].batch_id == milk_on_shelf['A']

    def test_rows_are_locked_in_item_code_order(self, milk_on_shelf, rice_on_shelf):
        """Two carts with the same items in opposite order lock the same way."""
        orders = []
        for cart in (['MILK-1L', 'RICE-5KG'], ['RICE-5KG', 'MILK-1L']):
            shelves = RecordingShelves()
            pos = POSCheckout(user='cashier', shelves=shelves)
            for code in cart:
                pos.add_line(code, 1)
            pos.total()
            receipt = pos.pay('2000')
            orders.append(shelves.locked)
            # the receipt keeps the cart order
            assert [line.item_code for line in receipt.lines] == cart

        assert orders == [['MILK-1L', 'RICE-5KG'], ['MILK-1L', 'RICE-5KG']]

    def test_database_failure_on_locked_read(self, milk_on_shelf, shelf_quantities):
        before = shelf_quantities('MILK-1L')
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 1)
        pos.total()

        with mock.patch.object(ShelfRepository, '_to_record', side_effect=DatabaseError('deadlock detected')):
            with pytest.raises(PersistenceError) as exc:
                pos.pay('200')

        assert exc.value.code == 'PERSISTENCE_FAILED'
        assert pos.state == CheckoutState.BUILDING_CART
        assert shelf_quantities('MILK-1L') == before
        assert not Sale.objects.exists()

    def test_logs_sale(self, milk_on_shelf, caplog):
        pos = POSCheckout(user='cashier')
        pos.add_line('MILK-1L', 1)
        pos.total()
        with caplog.at_level('INFO', logger='storekeeper'):
            pos.pay('200')
        assert any(r.message == 'pos.sale' and r.bill_number == 1 for r in caplog.records)

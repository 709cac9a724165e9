"""
Tests for WebCheckout.
"""

from decimal import Decimal

import pytest

from storekeeper import POSCheckout, WebCheckout
from storekeeper.exceptions import (
    InsufficientStockError,
    NotFoundError,
    PaymentDeclinedError,
    ValidationError,
)
from storekeeper.adapters import StaticCatalog
from storekeeper.models import Batch, MoveReason, Sale, StockMove, WebInventory
from storekeeper.repositories import WebRepository
from storekeeper.services import SimulatedCardPolicy

pytestmark = pytest.mark.django_db

VALID_CARD = '4111111111111111'
DECLINED_CARD = '0767600730204128'



class RecordingWeb(WebRepository):
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


@pytest.fixture
def rice_on_web(receive, coordinator, clerk):
    stock = receive('RICE-5KG', 'RICE-W', 5)
    coordinator.transfer_to_web('RICE-5KG', 5, clerk)
    return stock.batch_id

@pytest.fixture
def web():
    checkout = WebCheckout()
    checkout.start_session('alice')
    return checkout


class TestCart:

    def test_add_and_view(self, web, milk_on_web):
        assert web.add_to_cart('alice', 'MILK-1L', 2).value == Decimal('2')
        assert web.add_to_cart('alice', 'MILK-1L', 1).value == Decimal('3')

        view = web.view_cart('alice')
        assert [(i.item_code, i.quantity.value) for i in view.items] == [('MILK-1L', Decimal('3'))]
        assert view.total.value == Decimal('600.00')

    def test_add_beyond_web_stock(self, web, milk_on_web):
        web.add_to_cart('alice', 'MILK-1L', 8)
        with pytest.raises(InsufficientStockError) as exc:
            web.add_to_cart('alice', 'MILK-1L', 3)
        assert exc.value.code == 'INSUFFICIENT_WEB_STOCK'
        assert exc.value.deficit == Decimal('1')

    def test_unpublished_stock_is_not_available(self, web, milk_on_web):
        WebInventory.objects.update(is_published=False)
        with pytest.raises(InsufficientStockError):
            web.add_to_cart('alice', 'MILK-1L', 1)

    def test_unknown_item(self, web, db):
        with pytest.raises(NotFoundError):
            web.add_to_cart('alice', 'NOPE', 1)

    def test_update_replaces_quantity(self, web, milk_on_web):
        web.add_to_cart('alice', 'MILK-1L', 2)
        assert web.update_cart('alice', 'MILK-1L', 5).value == Decimal('5')

    @pytest.mark.parametrize('quantity', [0, '-1'])
    def test_update_to_zero_or_less_removes(self, web, milk_on_web, quantity):
        web.add_to_cart('alice', 'MILK-1L', 2)
        assert web.update_cart('alice', 'MILK-1L', quantity) is None
        assert web.view_cart('alice').is_empty

    def test_update_item_not_in_cart(self, web, milk_on_web):
        with pytest.raises(ValidationError) as exc:
            web.update_cart('alice', 'MILK-1L', 1)
        assert exc.value.code == 'NOT_IN_CART'

    def test_codes_are_normalized_by_the_catalog(self, milk_on_web):
        web = WebCheckout(catalog=LooseCatalog())
        web.add_to_cart('alice', 'milk-1l', 2)
        assert web.add_to_cart('alice', ' MILK-1L ', 1).value == Decimal('3')
        assert [i.item_code for i in web.view_cart('alice').items] == ['MILK-1L']

        web.update_cart('alice', 'Milk-1L', 4)
        web.remove_from_cart('alice', 'milk-1l')
        assert web.view_cart('alice').is_empty

    def test_carts_are_per_user(self, web, milk_on_web):
        web.start_session('bob')
        web.add_to_cart('alice', 'MILK-1L', 2)
        assert web.view_cart('bob').is_empty

    def test_end_session_discards_cart(self, web, milk_on_web):
        web.add_to_cart('alice', 'MILK-1L', 2)
        web.end_session('alice')
        assert 'alice' not in web.carts
        assert web.view_cart('alice').is_empty


class TestCheckout:

    def test_empty_cart(self, web, db):
        with pytest.raises(ValidationError) as exc:
            web.checkout('alice', VALID_CARD)
        assert exc.value.code == 'EMPTY_CART'

    @pytest.mark.parametrize('card', ['1234', '411111111111111x', '', None])
    def test_invalid_card(self, web, milk_on_web, card):
        web.add_to_cart('alice', 'MILK-1L', 1)
        with pytest.raises(ValidationError) as exc:
            web.checkout('alice', card)
        assert exc.value.code == 'INVALID_CARD'

    def test_declined_card_sells_nothing(self, web, milk_on_web):
        web.add_to_cart('alice', 'MILK-1L', 2)

        with pytest.raises(PaymentDeclinedError):
            web.checkout('alice', DECLINED_CARD)

        assert WebInventory.objects.get().quantity == Decimal('10')
        assert not Sale.objects.exists()
        assert web.view_cart('alice').items[0].quantity.value == Decimal('2')

    def test_declined_card_is_logged(self, web, milk_on_web, caplog):
        web.add_to_cart('alice', 'MILK-1L', 1)
        with caplog.at_level('WARNING', logger='storekeeper'):
            with pytest.raises(PaymentDeclinedError):
                web.checkout('alice', DECLINED_CARD)
        assert any(r.message == 'web.payment.declined' for r in caplog.records)

    def test_valid_card(self, web, milk_on_web):
        web.add_to_cart('alice', 'MILK-1L', 4)
        order = web.checkout('alice', VALID_CARD)

        assert order.order_number == 1
        assert order.customer == 'alice'
        assert order.card_last4 == '1111'
        assert order.total.value == Decimal('800.00')

        row = WebInventory.objects.get()
        assert row.quantity == Decimal('6')
        assert row.stock_level == 6
        assert Batch.objects.get(pk=milk_on_web).quantity_available == Decimal('6')

        sale = Sale.objects.get()
        assert (sale.channel, sale.payment_method, sale.customer) == ('web', 'card', 'alice')
        assert sale.discount_total == Decimal('0.00')

        move = StockMove.objects.get(reason=MoveReason.SALE)
        assert (move.pool, move.delta, move.reference) == ('web', Decimal('-4'), '1')

        assert web.view_cart('alice').is_empty

    def test_rows_are_locked_in_item_code_order(self, milk_on_web, rice_on_web):
        orders = []
        for customer, cart in (('alice', ['RICE-5KG', 'MILK-1L']), ('bob', ['MILK-1L', 'RICE-5KG'])):
            repo = RecordingWeb()
            checkout = WebCheckout(web=repo)
            for code in cart:
                checkout.add_to_cart(customer, code, 1)
            order = checkout.checkout(customer, VALID_CARD)
            orders.append(repo.locked)
            # order lines keep the cart order
            assert [line.item_code for line in order.lines] == cart

        assert orders == [['MILK-1L', 'RICE-5KG'], ['MILK-1L', 'RICE-5KG']]

    def test_stock_gone_since_cart_was_built(self, web, milk_on_web):
        web.add_to_cart('alice', 'MILK-1L', 4)
        WebInventory.objects.update(quantity=Decimal('3'))

        with pytest.raises(InsufficientStockError) as exc:
            web.checkout('alice', VALID_CARD)
        assert exc.value.deficit == Decimal('1')
        assert not Sale.objects.exists()

    def test_custom_decline_number(self, milk_on_web):
        checkout = WebCheckout(card_policy=SimulatedCardPolicy(declined_number=VALID_CARD))
        checkout.add_to_cart('bob', 'MILK-1L', 1)
        with pytest.raises(PaymentDeclinedError):
            checkout.checkout('bob', VALID_CARD)


class TestOrderHistory:

    def test_history_lists_own_orders(self, web, milk_on_web):
        web.start_session('bob')
        web.add_to_cart('alice', 'MILK-1L', 1)
        web.checkout('alice', VALID_CARD)
        web.add_to_cart('bob', 'MILK-1L', 2)
        web.checkout('bob', VALID_CARD)
        web.add_to_cart('alice', 'MILK-1L', 3)
        web.checkout('alice', VALID_CARD)

        history = web.order_history('alice')
        assert [order.number for order in history] == [1, 3]
        assert history[1].lines[0].quantity.value == Decimal('3')
        assert history[1].total.value == Decimal('600.00')

    def test_pos_sales_are_not_orders(self, web, milk_on_shelf):
        pos = POSCheckout(user='alice')
        pos.add_line('MILK-1L', 1)
        pos.total()
        pos.pay('200')
        assert web.order_history('alice') == []

"""
Web checkout — card sale from web inventory, with a cart per customer.

Usage:
    web = WebCheckout()
    web.start_session("alice")
    web.add_to_cart("alice", "MILK-1L", 2)
    order = web.checkout("alice", "4111111111111111")
    web.order_history("alice")
    web.end_session("alice")

Cart edits are checked against live web availability: the sum of unexpired,
published web rows for the item. Checkout re-allocates on locked rows.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import transaction

from storekeeper.adapters.backends import get_catalog
from storekeeper.allocation import allocate, available_quantity
from storekeeper.exceptions import (
    InsufficientStockError,
    NotFoundError,
    PaymentDeclinedError,
    ValidationError,
)
from storekeeper.models.enums import MoveReason
from storekeeper.protocols.repositories import OrderSummary, SaleHeader, SaleLineData
from storekeeper.records import require_user
from storekeeper.repositories import BatchRepository, SaleRepository, WebRepository
from storekeeper.services.carts import CartStore
from storekeeper.services.ledger import record_move
from storekeeper.services.payments import SimulatedCardPolicy
from storekeeper.values import Money, Quantity, parse_decimal, sum_amounts

logger = logging.getLogger('storekeeper')


@dataclass(frozen=True)
class CartItem:
    item_code: str
    name: str
    quantity: Quantity
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartView:
    items: tuple[CartItem, ...]
    total: Money

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class OrderConfirmation:
    order_number: int
    customer: str
    created_at: datetime
    lines: tuple[SaleLineData, ...]
    total: Money
    card_last4: str


class WebCheckout:
    """Owns the carts of the web store and settles them by card."""

    def __init__(self, carts=None, catalog=None, web=None, batches=None,
                 sales=None, card_policy=None, today=None):
        self.carts = carts or CartStore()
        self._catalog = catalog
        self.web = web or WebRepository()
        self.batches = batches or BatchRepository()
        self.sales = sales or SaleRepository()
        self.card_policy = card_policy or SimulatedCardPolicy()
        self.today = today

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    def _item(self, item_code):
        item = self.catalog.find_by_item_code(item_code)
        if item is None:
            raise NotFoundError('ITEM_NOT_FOUND', item_code=item_code)
        return item

    def _cart_key(self, item_code) -> str:
        """Catalog code for known items, so one item is one cart entry."""
        item = self.catalog.find_by_item_code(item_code)
        return item_code if item is None else item.code

    def _check_available(self, item_code, wanted: Quantity) -> None:
        available = available_quantity(self.web.find_available_by_item_code(item_code), self.today)
        if wanted > available:
            raise InsufficientStockError(
                'INSUFFICIENT_WEB_STOCK',
                item_code=item_code,
                requested=wanted.value,
                available=available.value,
                deficit=(wanted - available).value,
            )

    # ── session ──

    def start_session(self, user) -> None:
        self.carts.open(user)

    def end_session(self, user) -> None:
        """Logout: the cart is discarded."""
        self.carts.close(user)

    # ── cart ──

    def add_to_cart(self, user, item_code, quantity) -> Quantity:
        """
        Add units; returns the new cart quantity for the item.

        Raises:
            ValidationError, NotFoundError, InsufficientStockError
        """
        qty = Quantity.positive(quantity)
        user = require_user(user)
        item_code = self._item(item_code).code

        wanted = self.carts.quantity(user, item_code) + qty
        self._check_available(item_code, wanted)
        self.carts.set(user, item_code, wanted)
        return wanted

    def update_cart(self, user, item_code, quantity) -> Quantity | None:
        """
        Replace the cart quantity. Zero or less removes the item (returns None).

        Raises:
            ValidationError('NOT_IN_CART'), InsufficientStockError
        """
        value = parse_decimal(quantity, 'INVALID_QUANTITY')
        user = require_user(user)
        item_code = self._cart_key(item_code)
        if item_code not in self.carts.get(user):
            raise ValidationError('NOT_IN_CART', item_code=item_code, user=user)

        if value <= 0:
            self.carts.remove(user, item_code)
            return None

        wanted = Quantity(value)
        self._check_available(item_code, wanted)
        self.carts.set(user, item_code, wanted)
        return wanted

    def remove_from_cart(self, user, item_code) -> None:
        self.carts.remove(user, self._cart_key(item_code))

    def view_cart(self, user) -> CartView:
        items = []
        for item_code, quantity in self.carts.get(user).items():
            item = self._item(item_code)
            items.append(CartItem(
                item_code=item_code,
                name=item.name,
                quantity=quantity,
                unit_price=item.selling_price,
            ))
        return CartView(items=tuple(items), total=sum_amounts(i.line_total for i in items))

    # ── checkout ──

    def checkout(self, user, card_number) -> OrderConfirmation:
        """
        Pay the cart by card and take the units out of web inventory.

        Raises:
            ValidationError: EMPTY_CART, INVALID_CARD
            PaymentDeclinedError: the simulated decline number
            InsufficientStockError('INSUFFICIENT_WEB_STOCK'): availability
                changed since the cart was built; nothing is sold
            PersistenceError
        """
        user = require_user(user)
        view = self.view_cart(user)
        if view.is_empty:
            raise ValidationError('EMPTY_CART', user=user)

        try:
            card_last4 = self.card_policy.authorize(card_number, view.total)
        except PaymentDeclinedError as e:
            logger.warning(
                "web.payment.declined",
                extra={"customer": user, "total": str(view.total), "card_last4": e.data.get('card_last4')},
            )
            raise

        with transaction.atomic():
            sold = []
            lines_by_item = {}
            # Rows are locked in item code order; order lines keep the cart order.
            for cart_item in sorted(view.items, key=lambda i: i.item_code):
                records = self.web.find_available_by_item_code(cart_item.item_code, lock=True)
                allocation = allocate(cart_item.quantity, records, self.today)
                if not allocation.is_satisfied:
                    raise InsufficientStockError(
                        'INSUFFICIENT_WEB_STOCK',
                        item_code=cart_item.item_code,
                        requested=cart_item.quantity.value,
                        available=allocation.allocated.value,
                        deficit=allocation.shortfall.value,
                    )
                item = self._item(cart_item.item_code)
                item_lines = lines_by_item.setdefault(cart_item.item_code, [])
                for entry in allocation.plan:
                    record = self.web.save(entry.record.sell(entry.quantity, user, today=self.today))
                    self.batches.consume(entry.batch_id, entry.quantity)
                    sold.append((record, entry.quantity))
                    item_lines.append(SaleLineData(
                        item_code=cart_item.item_code,
                        item_id=item.id,
                        item_name=item.name,
                        batch_id=entry.batch_id,
                        quantity=entry.quantity,
                        unit_price=cart_item.unit_price,
                    ))

            lines = [line for cart_item in view.items for line in lines_by_item[cart_item.item_code]]
            receipt = self.sales.save_web_order(
                SaleHeader(
                    subtotal=view.total,
                    discount_total=Money.zero(),
                    net_total=view.total,
                    created_by=user,
                    customer=user,
                    card_last4=card_last4,
                ),
                lines,
            )
            for record, quantity in sold:
                record_move(record, -quantity.value, MoveReason.SALE, user,
                            reference=receipt.number, channel='web')

        self.carts.clear(user)
        logger.info(
            "web.order",
            extra={
                "order_number": receipt.number,
                "customer": user,
                "lines": len(lines),
                "total": str(view.total),
            },
        )
        return OrderConfirmation(
            order_number=receipt.number,
            customer=user,
            created_at=receipt.created_at,
            lines=tuple(lines),
            total=view.total,
            card_last4=card_last4,
        )

    def order_history(self, user) -> list[OrderSummary]:
        return self.sales.orders_for_customer(require_user(user))

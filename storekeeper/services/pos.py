"""
POS checkout — cash sale from shelf stock.

States:
    BUILDING_CART → TOTALING → AWAITING_PAYMENT → ALLOCATING → PERSISTED
    CANCELLED is reachable from every state before PERSISTED.

Usage:
    pos = POSCheckout(user="cashier-1")
    pos.add_line("MILK-1L", 6)
    totals = pos.total()
    receipt = pos.pay("1500")          # or pos.pay(CANCEL)

Availability checks while building the cart are advisory. The authoritative
check runs at payment, on locked shelf rows, and must reproduce the plan
the discounts were computed from; otherwise the sale is refused whole.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from django.db import transaction

from storekeeper.adapters.backends import get_catalog, get_discount_backend
from storekeeper.allocation import Allocation, allocate
from storekeeper.conf import storekeeper_settings
from storekeeper.exceptions import (
    InsufficientStockError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)
from storekeeper.models.enums import MoveReason
from storekeeper.protocols.catalog import CatalogItem
from storekeeper.protocols.repositories import SaleHeader, SaleLineData
from storekeeper.records import require_user
from storekeeper.repositories import BatchRepository, SaleRepository, ShelfRepository
from storekeeper.services.ledger import record_move
from storekeeper.values import Money, Quantity, sum_amounts

logger = logging.getLogger('storekeeper')


class _Cancel:
    def __repr__(self):
        return 'CANCEL'


CANCEL = _Cancel()
"""Pass to POSCheckout.pay() instead of cash to abort the sale."""


class CheckoutState(str, Enum):
    BUILDING_CART = 'building_cart'
    TOTALING = 'totaling'
    AWAITING_PAYMENT = 'awaiting_payment'
    ALLOCATING = 'allocating'
    PERSISTED = 'persisted'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class CartLine:
    item: CatalogItem
    quantity: Quantity

    @property
    def item_code(self) -> str:
        return self.item.code

    @property
    def gross(self) -> Money:
        return self.item.selling_price * self.quantity


@dataclass(frozen=True)
class Totals:
    subtotal: Money
    discount_total: Money
    net_total: Money
    lines: tuple[SaleLineData, ...]
    personal_purchase: bool = False


@dataclass(frozen=True)
class Receipt:
    bill_number: int
    lines: tuple[SaleLineData, ...]
    totals: Totals
    cash: Money
    change: Money


class POSCheckout:
    """One cash-register sale, driven by one cashier."""

    def __init__(self, user, catalog=None, discounts=None, shelves=None,
                 batches=None, sales=None, today=None):
        self.user = require_user(user)
        self._catalog = catalog
        self._discounts = discounts
        self.shelves = shelves or ShelfRepository()
        self.batches = batches or BatchRepository()
        self.sales = sales or SaleRepository()
        self.today = today

        self.state = CheckoutState.BUILDING_CART
        self.personal_purchase = False
        self.totals: Totals | None = None
        self.receipt: Receipt | None = None
        self._lines: dict[str, CartLine] = {}
        self._plans: dict[str, Allocation] = {}

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    @property
    def discounts(self):
        return self._discounts or get_discount_backend()

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    # ══════════════════════════════════════════════════════════════
    # BUILDING THE CART
    # ══════════════════════════════════════════════════════════════

    def add_line(self, item_code, quantity) -> CartLine:
        """
        Add units of an item (merged with any units already in the cart).

        Raises:
            ValidationError: malformed quantity (checked before the lookup)
            NotFoundError: unknown item code
            InsufficientStockError: shelf cannot cover the cart quantity
        """
        qty = Quantity.positive(quantity)
        self._reopen()

        item = self.catalog.find_by_item_code(item_code)
        if item is None:
            raise NotFoundError('ITEM_NOT_FOUND', item_code=item_code)

        current = self._lines.get(item.code)
        wanted = qty if current is None else current.quantity + qty
        self._check_shelf(item.code, wanted)

        line = CartLine(item=item, quantity=wanted)
        self._lines[item.code] = line
        return line

    def remove_line(self, item_code) -> None:
        self._reopen()
        item = self.catalog.find_by_item_code(item_code)
        code = item_code if item is None else item.code
        if code not in self._lines:
            raise ValidationError('NOT_IN_CART', item_code=item_code)
        del self._lines[code]

    def set_personal_purchase(self, flag: bool) -> None:
        """Personal purchases get no discount and are capped."""
        self._reopen()
        self.personal_purchase = bool(flag)

    def _reopen(self) -> None:
        """Cart edits are allowed while building, or after totaling (totals are dropped)."""
        if self.state == CheckoutState.AWAITING_PAYMENT:
            self._back_to_cart()
        self._require(CheckoutState.BUILDING_CART)

    def _check_shelf(self, item_code, wanted: Quantity) -> None:
        allocation = allocate(wanted, self.shelves.find_available_by_item_code(item_code), self.today)
        if not allocation.is_satisfied:
            raise InsufficientStockError(
                'INSUFFICIENT_SHELF_STOCK',
                item_code=item_code,
                requested=wanted.value,
                available=allocation.allocated.value,
                deficit=allocation.shortfall.value,
            )

    # ══════════════════════════════════════════════════════════════
    # TOTALING
    # ══════════════════════════════════════════════════════════════

    def total(self) -> Totals:
        """
        Price the cart and compute per-batch discounts.

        Raises:
            ValidationError('EMPTY_CART')
            InsufficientStockError: stock left the shelf since the line was added
            LimitExceededError: personal purchase above PERSONAL_PURCHASE_LIMIT

        On failure the cart is kept and the checkout is back to BUILDING_CART.
        """
        self._require(CheckoutState.BUILDING_CART)
        if not self._lines:
            raise ValidationError('EMPTY_CART')

        self.state = CheckoutState.TOTALING
        try:
            plans, lines = self._price_lines()
            subtotal = sum_amounts(line.gross for line in self._lines.values())
            discount_total = sum_amounts(line.discount for line in lines)
            net_total = subtotal - discount_total

            limit = Money.parse(storekeeper_settings.PERSONAL_PURCHASE_LIMIT)
            if self.personal_purchase and net_total > limit:
                raise LimitExceededError(
                    'PERSONAL_PURCHASE_LIMIT',
                    net_total=net_total.value,
                    limit=limit.value,
                )
        except Exception:
            self.state = CheckoutState.BUILDING_CART
            raise

        self._plans = plans
        self.totals = Totals(
            subtotal=subtotal,
            discount_total=discount_total,
            net_total=net_total,
            lines=tuple(lines),
            personal_purchase=self.personal_purchase,
        )
        self.state = CheckoutState.AWAITING_PAYMENT
        return self.totals

    def _price_lines(self):
        plans = {}
        lines = []
        for line in self._lines.values():
            records = self.shelves.find_available_by_item_code(line.item_code)
            allocation = allocate(line.quantity, records, self.today)
            if not allocation.is_satisfied:
                raise InsufficientStockError(
                    'INSUFFICIENT_SHELF_STOCK',
                    item_code=line.item_code,
                    requested=line.quantity.value,
                    available=allocation.allocated.value,
                    deficit=allocation.shortfall.value,
                )
            plans[line.item_code] = allocation
            for entry in allocation.plan:
                lines.append(SaleLineData(
                    item_code=line.item_code,
                    item_id=line.item.id,
                    item_name=line.item.name,
                    batch_id=entry.batch_id,
                    quantity=entry.quantity,
                    unit_price=line.item.selling_price,
                    discount=self._discount_for(line.item, entry.batch_id, entry.quantity),
                ))
        return plans, lines

    def _discount_for(self, item: CatalogItem, batch_id, quantity: Quantity) -> Money:
        if self.personal_purchase:
            return Money.zero()
        discount = Money.parse(self.discounts.calculate_batch_discount(
            item.id, batch_id, item.selling_price, quantity,
        ))
        gross = item.selling_price * quantity
        return discount if discount <= gross else gross

    # ══════════════════════════════════════════════════════════════
    # PAYMENT
    # ══════════════════════════════════════════════════════════════

    def pay(self, cash) -> Receipt | None:
        """
        Settle the sale in cash.

        pay(CANCEL) cancels and returns None.

        Raises:
            ValidationError: malformed cash, or INSUFFICIENT_CASH (the
                checkout stays in AWAITING_PAYMENT so the cashier can retry)
            InsufficientStockError('CONCURRENT_MODIFICATION'): shelf stock
                changed since totaling; nothing was sold, back to BUILDING_CART
        """
        if cash is CANCEL:
            self.cancel()
            return None

        self._require(CheckoutState.AWAITING_PAYMENT)
        cash = Money.parse(cash)
        totals = self.totals
        if cash < totals.net_total:
            raise ValidationError(
                'INSUFFICIENT_CASH',
                cash=cash.value,
                net_total=totals.net_total.value,
            )

        self.state = CheckoutState.ALLOCATING
        try:
            receipt = self._settle(cash, totals)
        except Exception:
            self._back_to_cart()
            raise

        self.receipt = receipt
        self.state = CheckoutState.PERSISTED
        logger.info(
            "pos.sale",
            extra={
                "bill_number": receipt.bill_number,
                "lines": len(receipt.lines),
                "net_total": str(totals.net_total),
                "discount_total": str(totals.discount_total),
                "personal_purchase": totals.personal_purchase,
                "user": self.user,
            },
        )
        return receipt

    def _settle(self, cash: Money, totals: Totals) -> Receipt:
        with transaction.atomic():
            sold = []
            # Rows are locked in item code order whatever the cart order.
            for line in sorted(self._lines.values(), key=lambda cart_line: cart_line.item_code):
                records = self.shelves.find_available_by_item_code(line.item_code, lock=True)
                allocation = allocate(line.quantity, records, self.today)
                planned = self._plans[line.item_code]
                if not allocation.is_satisfied or not allocation.same_plan_as(planned):
                    raise InsufficientStockError(
                        'CONCURRENT_MODIFICATION',
                        item_code=line.item_code,
                        requested=line.quantity.value,
                        available=allocation.allocated.value,
                        deficit=allocation.shortfall.value,
                    )
                for entry in allocation.plan:
                    record = self.shelves.save(entry.record.sell(entry.quantity, self.user, today=self.today))
                    self.batches.consume(entry.batch_id, entry.quantity)
                    sold.append((record, entry.quantity))

            change = cash - totals.net_total
            result = self.sales.save_pos_checkout(
                SaleHeader(
                    subtotal=totals.subtotal,
                    discount_total=totals.discount_total,
                    net_total=totals.net_total,
                    created_by=self.user,
                    cash_tendered=cash,
                    change=change,
                    personal_purchase=totals.personal_purchase,
                ),
                list(totals.lines),
            )
            for record, quantity in sold:
                record_move(record, -quantity.value, MoveReason.SALE, self.user,
                            reference=result.number, channel='pos')

        return Receipt(
            bill_number=result.number,
            lines=totals.lines,
            totals=totals,
            cash=cash,
            change=change,
        )

    # ══════════════════════════════════════════════════════════════
    # STATE
    # ══════════════════════════════════════════════════════════════

    def cancel(self) -> None:
        """Abort the sale. Nothing has been sold before PERSISTED."""
        if self.state in (CheckoutState.PERSISTED, CheckoutState.CANCELLED):
            raise ValidationError('INVALID_STATE', state=self.state.value, action='cancel')
        self.state = CheckoutState.CANCELLED
        self._lines.clear()
        self._plans = {}
        self.totals = None
        logger.info("pos.cancel", extra={"user": self.user})

    def _back_to_cart(self) -> None:
        self.state = CheckoutState.BUILDING_CART
        self._plans = {}
        self.totals = None

    def _require(self, state: CheckoutState) -> None:
        if self.state != state:
            raise ValidationError(
                'INVALID_STATE',
                state=self.state.value,
                expected=state.value,
            )

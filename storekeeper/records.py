"""
Stock records — immutable snapshots of batches and pool rows.

A record never changes in place: every mutation validates, then returns a new
snapshot stamped with the acting user and time. Repositories turn snapshots
into rows and rows back into snapshots.

Pool mutation rules:
- A decrement larger than what is available raises InsufficientStockError.
- Outbound movement (sell/transfer) of an expired record is refused.
- Increments are evaluated per record; other batches' expiry is irrelevant.
- The shelf may cap increments with a maximum level.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from django.utils import timezone

from storekeeper.exceptions import (
    InsufficientStockError,
    LimitExceededError,
    ValidationError,
)
from storekeeper.values import Money, Quantity

DEFAULT_WAREHOUSE_LOCATION = 'MAIN-WAREHOUSE'

WAREHOUSE_EXPIRY_WARNING_DAYS = 7
SHELF_EXPIRY_WARNING_DAYS = 3
WEB_EXPIRY_WARNING_DAYS = 5
WEB_LOW_STOCK_LEVEL = 20


def require_user(user) -> str:
    """Acting users are opaque, but must be present."""
    if user is None or not str(user).strip():
        raise ValidationError('USER_REQUIRED')
    return str(user).strip()


def _today(today: date | None) -> date:
    return today or timezone.localdate()


def _now(now: datetime | None) -> datetime:
    return now or timezone.now()


def _is_expired(expiry_date: date | None, today: date | None) -> bool:
    if expiry_date is None:
        return False
    return _today(today) > expiry_date


def _expiring_within(expiry_date: date | None, days: int, today: date | None) -> bool:
    if expiry_date is None or _is_expired(expiry_date, today):
        return False
    return expiry_date < _today(today) + timedelta(days=days)


def _movement(quantity) -> Quantity:
    return Quantity.positive(quantity)


class PoolRecord:
    """
    Shared behavior of warehouse, shelf and web rows.

    Subclasses expose `available`, `arrived_at`, `expiry_date`, `batch_id`,
    `item_code` and override `is_channel_open()`.
    """

    pool = ''

    def is_expired(self, today: date | None = None) -> bool:
        return _is_expired(self.expiry_date, today)

    def is_channel_open(self) -> bool:
        return True

    def is_allocatable(self, today: date | None = None) -> bool:
        """Can this record take part in an allocation right now?"""
        return (
            not self.available.is_zero
            and not self.is_expired(today)
            and self.is_channel_open()
        )

    @property
    def is_retired(self) -> bool:
        """Empty rows are kept for history, never deleted."""
        return self.available.is_zero

    def _check_outbound(self, quantity: Quantity, today: date | None, code: str) -> None:
        if self.is_expired(today):
            raise ValidationError(
                'EXPIRED_STOCK',
                item_code=self.item_code,
                batch_id=self.batch_id,
                expiry_date=self.expiry_date,
            )
        if quantity > self.available:
            raise InsufficientStockError(
                code,
                item_code=self.item_code,
                batch_id=self.batch_id,
                requested=quantity.value,
                available=self.available.value,
                deficit=(quantity.value - self.available.value),
            )


@dataclass(frozen=True)
class BatchRecord:
    """A discrete received lot of one item."""

    id: int | None
    item_code: str
    batch_number: str
    quantity_received: Quantity
    quantity_available: Quantity
    received_at: datetime
    manufacture_date: date | None = None
    expiry_date: date | None = None
    received_by: str = ''

    def __post_init__(self):
        if not self.batch_number or not self.batch_number.strip():
            raise ValidationError('INVALID_BATCH', reason='batch number is empty')
        if self.quantity_received.is_zero:
            raise ValidationError('INVALID_BATCH', reason='nothing received',
                                  batch_number=self.batch_number)
        if self.quantity_available > self.quantity_received:
            raise ValidationError(
                'INVALID_BATCH',
                reason='available exceeds received',
                batch_number=self.batch_number,
                received=self.quantity_received.value,
                available=self.quantity_available.value,
            )
        if (self.manufacture_date and self.expiry_date
                and self.expiry_date <= self.manufacture_date):
            raise ValidationError(
                'INVALID_BATCH',
                reason='expiry must be after manufacture',
                batch_number=self.batch_number,
                manufacture_date=self.manufacture_date,
                expiry_date=self.expiry_date,
            )

    @classmethod
    def receive(cls, item_code, batch_number, quantity, user,
                manufacture_date=None, expiry_date=None, now=None) -> 'BatchRecord':
        qty = _movement(quantity)
        return cls(
            id=None,
            item_code=item_code,
            batch_number=batch_number,
            quantity_received=qty,
            quantity_available=qty,
            received_at=_now(now),
            manufacture_date=manufacture_date,
            expiry_date=expiry_date,
            received_by=require_user(user),
        )

    def consume(self, quantity) -> 'BatchRecord':
        """Units of this batch left the store."""
        qty = _movement(quantity)
        if qty > self.quantity_available:
            raise InsufficientStockError(
                'INSUFFICIENT_STOCK',
                batch_id=self.id,
                requested=qty.value,
                available=self.quantity_available.value,
                deficit=(qty.value - self.quantity_available.value),
            )
        return replace(self, quantity_available=self.quantity_available - qty)

    def is_expired(self, today: date | None = None) -> bool:
        return _is_expired(self.expiry_date, today)

    def is_expiring_soon(self, today: date | None = None) -> bool:
        return _expiring_within(self.expiry_date, WAREHOUSE_EXPIRY_WARNING_DAYS, today)

    def days_until_expiry(self, today: date | None = None) -> int | None:
        if self.expiry_date is None:
            return None
        return (self.expiry_date - _today(today)).days


@dataclass(frozen=True)
class WarehouseStockRecord(PoolRecord):
    """Stock of one batch held in the warehouse."""

    id: int | None
    item_code: str
    batch_id: int
    quantity_received: Quantity
    quantity_available: Quantity
    received_at: datetime
    received_by: str
    updated_by: str
    updated_at: datetime
    expiry_date: date | None = None
    location: str = DEFAULT_WAREHOUSE_LOCATION
    is_reserved: bool = False
    reserved_by: str = ''
    reserved_at: datetime | None = None

    pool = 'warehouse'

    def __post_init__(self):
        if self.quantity_received.is_zero:
            raise ValidationError('INVALID_QUANTITY', reason='nothing received',
                                  item_code=self.item_code, batch_id=self.batch_id)
        if self.quantity_available > self.quantity_received:
            raise ValidationError(
                'INVALID_QUANTITY',
                reason='available exceeds received',
                item_code=self.item_code,
                batch_id=self.batch_id,
            )
        if self.is_reserved != bool(self.reserved_by and self.reserved_at):
            raise ValidationError(
                'INVALID_INPUT',
                reason='reservation details must match the reservation flag',
                item_code=self.item_code,
                batch_id=self.batch_id,
            )

    @property
    def available(self) -> Quantity:
        return self.quantity_available

    @property
    def arrived_at(self) -> datetime:
        return self.received_at

    def is_channel_open(self) -> bool:
        return not self.is_reserved

    def is_expiring_soon(self, today: date | None = None) -> bool:
        return _expiring_within(self.expiry_date, WAREHOUSE_EXPIRY_WARNING_DAYS, today)

    @classmethod
    def receive(cls, batch: BatchRecord, user, location=None, now=None) -> 'WarehouseStockRecord':
        """New warehouse row for a freshly received batch."""
        user = require_user(user)
        at = _now(now)
        return cls(
            id=None,
            item_code=batch.item_code,
            batch_id=batch.id,
            quantity_received=batch.quantity_received,
            quantity_available=batch.quantity_received,
            received_at=batch.received_at or at,
            received_by=user,
            updated_by=user,
            updated_at=at,
            expiry_date=batch.expiry_date,
            location=location or DEFAULT_WAREHOUSE_LOCATION,
        )

    def reserve(self, quantity, user, now=None) -> 'WarehouseStockRecord':
        qty = _movement(quantity)
        user = require_user(user)
        if self.is_reserved:
            raise ValidationError('ALREADY_RESERVED', item_code=self.item_code,
                                  batch_id=self.batch_id, reserved_by=self.reserved_by)
        if qty > self.available:
            raise InsufficientStockError(
                'INSUFFICIENT_WAREHOUSE_STOCK',
                item_code=self.item_code,
                batch_id=self.batch_id,
                requested=qty.value,
                available=self.available.value,
                deficit=(qty.value - self.available.value),
            )
        at = _now(now)
        return replace(self, is_reserved=True, reserved_by=user, reserved_at=at,
                       updated_by=user, updated_at=at)

    def cancel_reservation(self, user, now=None) -> 'WarehouseStockRecord':
        user = require_user(user)
        if not self.is_reserved:
            raise ValidationError('NOT_RESERVED', item_code=self.item_code,
                                  batch_id=self.batch_id)
        return replace(self, is_reserved=False, reserved_by='', reserved_at=None,
                       updated_by=user, updated_at=_now(now))

    def transfer(self, quantity, user, today=None, now=None) -> 'WarehouseStockRecord':
        """Take units out of the warehouse; clears any reservation."""
        qty = _movement(quantity)
        user = require_user(user)
        self._check_outbound(qty, today, 'INSUFFICIENT_WAREHOUSE_STOCK')
        return replace(
            self,
            quantity_available=self.quantity_available - qty,
            is_reserved=False,
            reserved_by='',
            reserved_at=None,
            updated_by=user,
            updated_at=_now(now),
        )


@dataclass(frozen=True)
class ShelfStockRecord(PoolRecord):
    """Stock of one batch on a store shelf."""

    id: int | None
    item_code: str
    batch_id: int
    shelf_code: str
    quantity: Quantity
    unit_price: Money
    placed_at: datetime
    placed_by: str
    updated_by: str
    updated_at: datetime
    expiry_date: date | None = None
    is_displayed: bool = True
    display_position: str = ''
    min_level: Quantity | None = None
    max_level: Quantity | None = None

    pool = 'shelf'

    def __post_init__(self):
        if not self.shelf_code or not self.shelf_code.strip():
            raise ValidationError('INVALID_INPUT', reason='shelf code is empty',
                                  item_code=self.item_code)
        if self.unit_price.is_zero:
            raise ValidationError('INVALID_PRICE', item_code=self.item_code,
                                  batch_id=self.batch_id)
        if (self.min_level is not None and self.max_level is not None
                and self.min_level > self.max_level):
            raise ValidationError('INVALID_LEVELS', item_code=self.item_code,
                                  shelf_code=self.shelf_code)

    @property
    def available(self) -> Quantity:
        return self.quantity

    @property
    def arrived_at(self) -> datetime:
        return self.placed_at

    def is_channel_open(self) -> bool:
        return self.is_displayed

    @classmethod
    def place(cls, item_code, batch_id, shelf_code, quantity, unit_price, user,
              expiry_date=None, max_level=None, now=None) -> 'ShelfStockRecord':
        """First placement of a batch on a shelf."""
        qty = _movement(quantity)
        user = require_user(user)
        if max_level is not None and qty > max_level:
            raise LimitExceededError(
                'SHELF_CAPACITY_EXCEEDED',
                item_code=item_code,
                shelf_code=shelf_code,
                requested=qty.value,
                max_level=max_level.value,
            )
        at = _now(now)
        return cls(
            id=None,
            item_code=item_code,
            batch_id=batch_id,
            shelf_code=shelf_code,
            quantity=qty,
            unit_price=Money.price(unit_price),
            placed_at=at,
            placed_by=user,
            updated_by=user,
            updated_at=at,
            expiry_date=expiry_date,
            max_level=max_level,
        )

    def sell(self, quantity, user, today=None, now=None) -> 'ShelfStockRecord':
        qty = _movement(quantity)
        user = require_user(user)
        self._check_outbound(qty, today, 'INSUFFICIENT_SHELF_STOCK')
        return replace(self, quantity=self.quantity - qty,
                       updated_by=user, updated_at=_now(now))

    def restock(self, quantity, user, now=None) -> 'ShelfStockRecord':
        qty = _movement(quantity)
        user = require_user(user)
        new_quantity = self.quantity + qty
        if self.max_level is not None and new_quantity > self.max_level:
            raise LimitExceededError(
                'SHELF_CAPACITY_EXCEEDED',
                item_code=self.item_code,
                batch_id=self.batch_id,
                shelf_code=self.shelf_code,
                requested=qty.value,
                on_shelf=self.quantity.value,
                max_level=self.max_level.value,
            )
        return replace(self, quantity=new_quantity,
                       updated_by=user, updated_at=_now(now))

    def update_price(self, price, user, now=None) -> 'ShelfStockRecord':
        return replace(self, unit_price=Money.price(price),
                       updated_by=require_user(user), updated_at=_now(now))

    def set_display(self, displayed: bool, user, position=None, now=None) -> 'ShelfStockRecord':
        return replace(
            self,
            is_displayed=displayed,
            display_position=self.display_position if position is None else position,
            updated_by=require_user(user),
            updated_at=_now(now),
        )

    def set_levels(self, minimum, maximum, user, now=None) -> 'ShelfStockRecord':
        minimum = None if minimum is None else Quantity.parse(minimum)
        maximum = None if maximum is None else Quantity.parse(maximum)
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ValidationError('INVALID_LEVELS', item_code=self.item_code,
                                  shelf_code=self.shelf_code)
        return replace(self, min_level=minimum, max_level=maximum,
                       updated_by=require_user(user), updated_at=_now(now))

    @property
    def needs_restocking(self) -> bool:
        return self.min_level is not None and self.quantity < self.min_level

    def is_expiring_soon(self, today: date | None = None) -> bool:
        return _expiring_within(self.expiry_date, SHELF_EXPIRY_WARNING_DAYS, today)

    @property
    def total_value(self) -> Money:
        return self.unit_price * self.quantity


def initial_stock_level(quantity: Quantity) -> int:
    """Display indicator for a fresh web row: quantity clamped to 0..100."""
    if quantity.value >= 100:
        return 100
    return int(quantity.value.to_integral_value(rounding=ROUND_DOWN))


@dataclass(frozen=True)
class WebInventoryRecord(PoolRecord):
    """Stock of one batch published to the online store."""

    id: int | None
    item_code: str
    batch_id: int
    quantity: Quantity
    web_price: Money
    added_at: datetime
    added_by: str
    updated_by: str
    updated_at: datetime
    expiry_date: date | None = None
    is_published: bool = True
    is_featured: bool = False
    stock_level: int = 50

    pool = 'web'

    def __post_init__(self):
        if self.web_price.is_zero:
            raise ValidationError('INVALID_PRICE', item_code=self.item_code,
                                  batch_id=self.batch_id)
        if not 0 <= self.stock_level <= 100:
            raise ValidationError('INVALID_INPUT', reason='stock level must be within 0..100',
                                  stock_level=self.stock_level)

    @property
    def available(self) -> Quantity:
        return self.quantity

    @property
    def arrived_at(self) -> datetime:
        return self.added_at

    def is_channel_open(self) -> bool:
        return self.is_published

    @classmethod
    def publish(cls, item_code, batch_id, quantity, web_price, user,
                expiry_date=None, now=None) -> 'WebInventoryRecord':
        """First transfer of a batch to the web pool."""
        qty = _movement(quantity)
        user = require_user(user)
        at = _now(now)
        return cls(
            id=None,
            item_code=item_code,
            batch_id=batch_id,
            quantity=qty,
            web_price=Money.price(web_price),
            added_at=at,
            added_by=user,
            updated_by=user,
            updated_at=at,
            expiry_date=expiry_date,
            stock_level=initial_stock_level(qty),
        )

    def _level_for(self, new_quantity: Quantity) -> int:
        # Scale the indicator by how much the quantity moved.
        previous = max(self.quantity.value, Decimal('1'))
        ratio = (new_quantity.value / previous).quantize(Decimal('0.0001'), rounding=ROUND_HALF_UP)
        level = (self.stock_level * ratio).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        return max(0, min(100, int(level)))

    def sell(self, quantity, user, today=None, now=None) -> 'WebInventoryRecord':
        qty = _movement(quantity)
        user = require_user(user)
        self._check_outbound(qty, today, 'INSUFFICIENT_WEB_STOCK')
        new_quantity = self.quantity - qty
        return replace(self, quantity=new_quantity, stock_level=self._level_for(new_quantity),
                       updated_by=user, updated_at=_now(now))

    def restock(self, quantity, user, now=None) -> 'WebInventoryRecord':
        qty = _movement(quantity)
        user = require_user(user)
        new_quantity = self.quantity + qty
        return replace(self, quantity=new_quantity, stock_level=self._level_for(new_quantity),
                       updated_by=user, updated_at=_now(now))

    def update_price(self, price, user, now=None) -> 'WebInventoryRecord':
        return replace(self, web_price=Money.price(price),
                       updated_by=require_user(user), updated_at=_now(now))

    def set_published(self, published: bool, user, now=None) -> 'WebInventoryRecord':
        return replace(self, is_published=published,
                       updated_by=require_user(user), updated_at=_now(now))

    def set_featured(self, featured: bool, user, now=None) -> 'WebInventoryRecord':
        return replace(self, is_featured=featured,
                       updated_by=require_user(user), updated_at=_now(now))

    @property
    def is_low_stock(self) -> bool:
        return self.stock_level <= WEB_LOW_STOCK_LEVEL

    def is_expiring_soon(self, today: date | None = None) -> bool:
        return _expiring_within(self.expiry_date, WEB_EXPIRY_WARNING_DAYS, today)

    @property
    def total_value(self) -> Money:
        return self.web_price * self.quantity

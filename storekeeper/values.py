"""
Value types — Quantity and Money.

Both wrap a non-negative Decimal. Arithmetic that would go below zero is an
error, never a clamp.

Usage:
    qty = Quantity.parse('2.5')       # from user input
    price = Money.price('199.90')     # rejects zero or negative
    total = price * qty               # Money('499.75')
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from storekeeper.exceptions import ValidationError

CENTS = Decimal('0.01')


def parse_decimal(raw, code: str) -> Decimal:
    """Decimal from user input; malformed or non-finite input raises ValidationError(code)."""
    if isinstance(raw, (Quantity, Money)):
        return raw.value
    if isinstance(raw, float):
        raw = repr(raw)
    if isinstance(raw, str):
        raw = raw.strip()
    try:
        value = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(code, value=raw) from None
    if not value.is_finite():
        raise ValidationError(code, value=raw)
    return value


@total_ordering
@dataclass(frozen=True)
class Quantity:
    """Non-negative amount of stock (units, kg, litres)."""

    value: Decimal

    def __post_init__(self):
        value = parse_decimal(self.value, 'INVALID_QUANTITY')
        if value < 0:
            raise ValidationError('INVALID_QUANTITY', value=value)
        object.__setattr__(self, 'value', value)

    @classmethod
    def zero(cls) -> 'Quantity':
        return cls(Decimal('0'))

    @classmethod
    def parse(cls, raw) -> 'Quantity':
        """Build from user input (str, int, Decimal or Quantity)."""
        if isinstance(raw, Quantity):
            return raw
        return cls(parse_decimal(raw, 'INVALID_QUANTITY'))

    @classmethod
    def positive(cls, raw) -> 'Quantity':
        """Like parse(), but zero is rejected too."""
        qty = cls.parse(raw)
        if qty.is_zero:
            raise ValidationError('INVALID_QUANTITY', value=qty.value)
        return qty

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def min(self, other: 'Quantity') -> 'Quantity':
        return self if self <= other else other

    def __add__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(self.value + other.value)

    def __sub__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        result = self.value - other.value
        if result < 0:
            raise ValidationError(
                'NEGATIVE_QUANTITY', minuend=self.value, subtrahend=other.value
            )
        return Quantity(result)

    def __lt__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value < other.value

    def __eq__(self, other):
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __bool__(self) -> bool:
        return not self.is_zero

    def __str__(self) -> str:
        return format(self.value.normalize(), 'f')


@total_ordering
@dataclass(frozen=True)
class Money:
    """Non-negative currency amount, kept at cent precision."""

    value: Decimal

    def __post_init__(self):
        value = parse_decimal(self.value, 'INVALID_AMOUNT')
        if value < 0:
            raise ValidationError('INVALID_AMOUNT', value=value)
        object.__setattr__(self, 'value', value.quantize(CENTS, rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls) -> 'Money':
        return cls(Decimal('0'))

    @classmethod
    def parse(cls, raw) -> 'Money':
        if isinstance(raw, Money):
            return raw
        return cls(parse_decimal(raw, 'INVALID_AMOUNT'))

    @classmethod
    def price(cls, raw) -> 'Money':
        """Parse an amount used as a price: zero or negative is rejected."""
        try:
            amount = cls.parse(raw)
        except ValidationError:
            raise ValidationError('INVALID_PRICE', value=raw) from None
        if amount.is_zero:
            raise ValidationError('INVALID_PRICE', value=raw)
        return amount

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def __add__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.value + other.value)

    def __sub__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        result = self.value - other.value
        if result < 0:
            raise ValidationError(
                'NEGATIVE_AMOUNT', minuend=self.value, subtrahend=other.value
            )
        return Money(result)

    def __mul__(self, factor):
        if isinstance(factor, Quantity):
            factor = factor.value
        elif isinstance(factor, int):
            factor = Decimal(factor)
        if not isinstance(factor, Decimal):
            return NotImplemented
        if factor < 0:
            raise ValidationError('INVALID_AMOUNT', factor=factor)
        return Money(self.value * factor)

    __rmul__ = __mul__

    def __lt__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self.value < other.value

    def __eq__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __str__(self) -> str:
        return f"{self.value:.2f}"


def sum_amounts(amounts) -> Money:
    """Sum an iterable of Money."""
    result = Money.zero()
    for amount in amounts:
        result = result + amount
    return result

"""
wholesale/utils/money.py
------------------------
Fixed-point currency value used by every pricing computation.

Money wraps a Decimal and refuses floats outright. Multiplying by an
integer quantity (or an exact Decimal) never rounds, so
``Money('3.33') * 3 == Money('9.99')`` holds exactly. The only rounding
step is ``percent()``, which quantizes to cents with ROUND_HALF_UP.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from functools import total_ordering
from typing import Iterable, Union


CENT = Decimal('0.01')   # quantize target
HUNDRED = Decimal('100')

Numeric = Union['Money', Decimal, int, str]


def _to_decimal(value) -> Decimal:
    if isinstance(value, Money):
        return value.amount
    if isinstance(value, bool):
        raise TypeError('Money cannot be built from a bool')
    if isinstance(value, float):
        raise TypeError('Money cannot be built from a float; pass a str or Decimal')
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f'Invalid money amount: {value!r}') from None
    raise TypeError(f'Unsupported money operand: {type(value).__name__}')


@total_ordering
class Money:
    """An exact decimal currency amount."""

    __slots__ = ('amount',)

    def __init__(self, value: Numeric = 0):
        amount = _to_decimal(value)
        if not amount.is_finite():
            raise ValueError(f'Money must be finite, got {amount}')
        object.__setattr__(self, 'amount', amount)

    def __setattr__(self, name, value):
        raise AttributeError('Money is immutable')

    # ── Constructors ──────────────────────────────────────────────

    @classmethod
    def zero(cls) -> 'Money':
        return cls(0)

    @classmethod
    def sum(cls, values: Iterable['Money']) -> 'Money':
        total = cls.zero()
        for v in values:
            total = total + v
        return total

    @staticmethod
    def min(a: 'Money', b: 'Money') -> 'Money':
        return a if a <= b else b

    @staticmethod
    def max(a: 'Money', b: 'Money') -> 'Money':
        return a if a >= b else b

    # ── Arithmetic ────────────────────────────────────────────────

    def __add__(self, other) -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + other.amount)

    def __sub__(self, other) -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount - other.amount)

    def __mul__(self, factor) -> 'Money':
        if isinstance(factor, Money) or isinstance(factor, (float, bool)):
            return NotImplemented
        if not isinstance(factor, (int, Decimal)):
            return NotImplemented
        return Money(self.amount * _to_decimal(factor))

    __rmul__ = __mul__

    def percent(self, rate: Numeric) -> 'Money':
        """``self × rate / 100``, rounded to cents."""
        value = self.amount * _to_decimal(rate) / HUNDRED
        return Money(value.quantize(CENT, rounding=ROUND_HALF_UP))

    def quantize(self) -> 'Money':
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    # ── Comparison ────────────────────────────────────────────────

    def __eq__(self, other) -> bool:
        if isinstance(other, Money):
            return self.amount == other.amount
        if isinstance(other, (Decimal, int)) and not isinstance(other, bool):
            return self.amount == other
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, Money):
            return self.amount < other.amount
        if isinstance(other, (Decimal, int)) and not isinstance(other, bool):
            return self.amount < other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.amount)

    def __bool__(self) -> bool:
        return self.amount != 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    # ── Conversion ────────────────────────────────────────────────

    def to_decimal(self) -> Decimal:
        """Amount quantized to cents, ready for a NUMERIC(12, 2) column."""
        return self.amount.quantize(CENT, rounding=ROUND_HALF_UP)

    def __str__(self) -> str:
        return str(self.to_decimal())

    def __repr__(self) -> str:
        return f'Money({str(self.amount)!r})'

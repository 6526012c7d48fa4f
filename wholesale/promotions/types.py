"""
wholesale/promotions/types.py
-----------------------------
Plain, immutable promotion records consumed by the pricing engine.

A promotion is one of two variants:
  FlatDiscount  → non-stackable; the single best one applies per order
  DiscountRule  → thresholds, cap, stackable flag and priority

ORM rows are converted into these with ``to_snapshot()`` so the engine
never touches the database.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Optional, Union

from wholesale.utils.money import Money


class Scope(str, enum.Enum):
    ORDER    = 'ORDER'
    PRODUCT  = 'PRODUCT'
    CATEGORY = 'CATEGORY'
    BRAND    = 'BRAND'
    SUPPLIER = 'SUPPLIER'
    PARENT   = 'PARENT'


class DiscountType(str, enum.Enum):
    PERCENT = 'PERCENT'
    FIXED   = 'FIXED'


class Weekday(str, enum.Enum):
    mon = 'mon'
    tue = 'tue'
    wed = 'wed'
    thu = 'thu'
    fri = 'fri'
    sat = 'sat'
    sun = 'sun'


# datetime.weekday() index → Weekday
WEEKDAYS = (
    Weekday.mon, Weekday.tue, Weekday.wed, Weekday.thu,
    Weekday.fri, Weekday.sat, Weekday.sun,
)


def parse_days(raw) -> FrozenSet[Weekday]:
    """Accept 'mon,sat' or ['mon', 'sat']; unknown tokens are dropped."""
    if not raw:
        return frozenset()
    tokens = raw.split(',') if isinstance(raw, str) else raw
    days = set()
    for token in tokens:
        token = str(token).strip().lower()[:3]
        if token in Weekday.__members__:
            days.add(Weekday(token))
    return frozenset(days)


def parse_skus(raw) -> FrozenSet[str]:
    """Accept 'A-1, b-2' or ['A-1', 'b-2']; SKUs compare case-insensitively."""
    if not raw:
        return frozenset()
    tokens = raw.split(',') if isinstance(raw, str) else raw
    return frozenset(t.strip().casefold() for t in tokens if t and t.strip())


@dataclass(frozen=True)
class _PromotionBase:
    id:          str
    name:        str
    scope:       Scope
    type:        DiscountType
    value:       Money
    target:      str = ''
    active:      bool = True
    start_date:  Optional[date] = None
    end_date:    Optional[date] = None
    days:        FrozenSet[Weekday] = field(default_factory=frozenset)
    time_from:   Optional[time] = None
    time_to:     Optional[time] = None


@dataclass(frozen=True)
class FlatDiscount(_PromotionBase):
    min_spend:   Optional[Money] = None


@dataclass(frozen=True)
class DiscountRule(_PromotionBase):
    min_qty:      Optional[int] = None
    min_spend:    Optional[Money] = None
    max_discount: Optional[Money] = None
    stackable:    bool = False
    priority:     int = 50
    include_skus: FrozenSet[str] = field(default_factory=frozenset)
    exclude_skus: FrozenSet[str] = field(default_factory=frozenset)


Promotion = Union[FlatDiscount, DiscountRule]

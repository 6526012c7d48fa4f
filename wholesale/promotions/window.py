"""
wholesale/promotions/window.py
------------------------------
Decides whether a promotion is live at a given instant.

The caller passes ``now`` once per pricing pass; every promotion in that
pass is judged against the same instant.
"""
from datetime import datetime, time

from wholesale.promotions.types import WEEKDAYS, Weekday


def weekday_of(now: datetime) -> Weekday:
    return WEEKDAYS[now.weekday()]


def _clock(now: datetime) -> time:
    """HH:MM component of ``now``; seconds are ignored."""
    return time(now.hour, now.minute)


def _minute(t: time) -> time:
    return time(t.hour, t.minute)


def is_active(promotion, now: datetime) -> bool:
    """
    True when ``promotion`` is enabled and ``now`` falls inside its window.

    Date bounds are calendar days and both are inclusive. A non-empty
    ``days`` set restricts to those weekdays. ``time_from``/``time_to``
    bound the time of day, open-ended on whichever side is unset.
    """
    if not promotion.active:
        return False

    today = now.date()
    if promotion.start_date and today < promotion.start_date:
        return False
    if promotion.end_date and today > promotion.end_date:
        return False

    if promotion.days and weekday_of(now) not in promotion.days:
        return False

    if promotion.time_from is not None or promotion.time_to is not None:
        clock = _clock(now)
        if promotion.time_from is not None and clock < _minute(promotion.time_from):
            return False
        if promotion.time_to is not None and clock > _minute(promotion.time_to):
            return False

    return True

"""
test_money.py — Tests for the fixed-point Money type.
Run: pytest test_money.py -v
"""
import pytest
from decimal import Decimal

from wholesale.utils.money import Money


def test_line_total_is_exact():
    # 3.33 × 3 must be exactly 9.99, never 9.989999…
    assert Money('3.33') * 3 == Money('9.99')
    assert str(Money('3.33') * 3) == '9.99'


def test_float_is_rejected():
    with pytest.raises(TypeError):
        Money(0.1)
    with pytest.raises(TypeError):
        Money('1.00') * 1.5


def test_invalid_string_is_rejected():
    with pytest.raises(ValueError):
        Money('twelve')


def test_add_and_subtract():
    assert Money('10.10') + Money('0.20') == Money('10.30')
    assert Money('10.00') - Money('2.50') == Money('7.50')


def test_percent_rounds_half_up_to_cents():
    assert Money('100.00').percent(10) == Money('10.00')
    assert Money('33.33').percent(10) == Money('3.33')
    assert Money('0.05').percent(50) == Money('0.03')    # 0.025 → 0.03


def test_min_max_and_ordering():
    a, b = Money('5.00'), Money('20.00')
    assert Money.min(a, b) is a
    assert Money.max(a, b) is b
    assert a < b <= Money('20')
    assert sorted([b, a]) == [a, b]


def test_sum_of_empty_is_zero():
    assert Money.sum([]) == Money.zero()
    assert Money.sum([Money('1.11'), Money('2.22')]) == Money('3.33')


def test_compares_with_int_and_decimal():
    assert Money('0') == 0
    assert Money('2.50') > 0
    assert Money('2.50') == Decimal('2.5')


def test_to_decimal_quantizes_for_storage():
    assert Money('7').to_decimal() == Decimal('7.00')
    assert str(Money('7')) == '7.00'


def test_money_is_immutable():
    m = Money('1.00')
    with pytest.raises(AttributeError):
        m.amount = Decimal('2')

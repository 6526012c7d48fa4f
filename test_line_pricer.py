"""
test_line_pricer.py — Tests for unit price resolution and line totals.
Run: pytest test_line_pricer.py -v
"""
import pytest

from wholesale.catalog.snapshot import ProductSnapshot
from wholesale.exceptions import NotFoundError
from wholesale.orders.pricing import index_products, price_lines, subtotal, total_qty
from wholesale.utils.money import Money


def product(pid, price, sku=None):
    return ProductSnapshot(id=pid, sku=sku or pid.upper(), name=f'Product {pid}',
                           price=Money(price), supplier_id='sup-1')


CATALOG = index_products([
    product('p1', '3.33'),
    product('p2', '12.40'),
    product('p3', '100.00'),
])


def test_catalog_price_used_without_override():
    lines = price_lines([('p2', 2)], CATALOG, {})
    assert lines[0].unit_price == Money('12.40')
    assert lines[0].line_total == Money('24.80')


def test_override_takes_precedence():
    lines = price_lines([('p2', 1), ('p3', 1)], CATALOG, {'p2': Money('9.90')})
    assert lines[0].unit_price == Money('9.90')
    assert lines[1].unit_price == Money('100.00')


def test_override_can_be_higher_than_catalog():
    lines = price_lines([('p1', 1)], CATALOG, {'p1': Money('4.00')})
    assert lines[0].unit_price == Money('4.00')


def test_line_total_exact_decimal():
    lines = price_lines([('p1', 3)], CATALOG, {})
    assert lines[0].line_total == Money('9.99')
    assert lines[0].to_dict()['lineTotal'] == '9.99'


def test_request_order_and_duplicates_kept():
    lines = price_lines([('p3', 1), ('p1', 1), ('p3', 2)], CATALOG, {})
    assert [l.product.id for l in lines] == ['p3', 'p1', 'p3']
    assert subtotal(lines) == Money('303.33')
    assert total_qty(lines) == 4


def test_missing_product_fails_whole_order():
    with pytest.raises(NotFoundError) as exc:
        price_lines([('p1', 1), ('ghost', 1)], CATALOG, {})
    assert exc.value.message == 'Product not found'
    assert exc.value.status_code == 404


def test_line_to_dict_shape():
    d = price_lines([('p2', 1)], CATALOG, {})[0].to_dict()
    assert d == {
        'productId': 'p2', 'sku': 'P2', 'name': 'Product p2', 'qty': 1,
        'unitPrice': '12.40', 'lineTotal': '12.40', 'supplierId': 'sup-1',
    }

"""
test_orders.py — Tests for order creation through the JSON API.
Run: pytest test_orders.py -v
"""
import logging

import pytest
from decimal import Decimal
from datetime import datetime

from sqlalchemy.exc import OperationalError

from wholesale import create_app, db
from wholesale.auth.decorators import Identity
from wholesale.auth.models import User, RoleEnum, Company, CompanyStatus
from wholesale.catalog.models import Category, Supplier, Product, PriceOverride
from wholesale.orders.models import Order, OrderItem, OrderDiscount
from wholesale.orders.service import quote_order
from wholesale.orders.validators import MAX_QTY, validate_order_payload
from wholesale.promotions.models import Discount, PricingRule
from wholesale.promotions.types import Scope, DiscountType


# ── Fixtures ──────────────────────────────────────────────────────

@pytest.fixture(scope='function')
def client():
    app = create_app('testing')
    with app.app_context():
        db.create_all()

        company = Company(id='co-1', name='Bar Centrale', status=CompanyStatus.ACTIVE)
        other   = Company(id='co-2', name='Hotel Lago', status=CompanyStatus.ACTIVE)
        db.session.add_all([company, other])
        db.session.flush()

        for username, role, company_id in [
            ('buyer',   RoleEnum.BUYER,   'co-1'),
            ('buyer2',  RoleEnum.BUYER,   'co-2'),
            ('orphan',  RoleEnum.BUYER,   None),
            ('admin',   RoleEnum.ADMIN,   None),
        ]:
            u = User(id=f'u-{username}', name=username.title(), username=username,
                     role=role, company_id=company_id)
            u.set_password('secret123')
            db.session.add(u)

        snacks   = Category(id='cat-snacks', name='Snacks')
        supplier = Supplier(id='sup-metro', name='Metro Wholesale')
        db.session.add_all([snacks, supplier])
        db.session.commit()

        yield app.test_client()
        db.session.remove()
        db.drop_all()


def login(c, username='buyer'):
    return c.post('/auth/login', json={'username': username, 'password': 'secret123'})


def make_product(sku, price, brand='AcmeCo'):
    p = Product(id=f'p-{sku}', sku=sku, name=f'Product {sku}', price=Decimal(price),
                brand=brand, category_id='cat-snacks', source_supplier_id='sup-metro')
    db.session.add(p)
    db.session.commit()
    return p


def order_body(*pairs):
    return {'items': [{'productId': pid, 'qty': qty} for pid, qty in pairs]}


# ── 1. Happy path ─────────────────────────────────────────────────

def test_create_order_returns_201(client):
    p = make_product('SNK-001', '15.00')
    login(client)
    resp = client.post('/orders/', json=order_body((p.id, 2)))
    assert resp.status_code == 201

    data = resp.get_json()
    assert data['status'] == 'SUBMITTED'
    assert data['companyId'] == 'co-1'
    assert data['createdById'] == 'u-buyer'
    assert data['total'] == '30.00'
    assert data['discountTotal'] == '0.00'
    assert data['items'] == [{
        'productId': 'p-SNK-001', 'sku': 'SNK-001', 'name': 'Product SNK-001',
        'qty': 2, 'unitPrice': '15.00', 'lineTotal': '30.00', 'supplierId': 'sup-metro',
    }]
    assert data['id'] and data['createdAt']

    order = db.session.get(Order, data['id'])
    assert order is not None
    assert len(order.items) == 1


def test_line_total_exact(client):
    p = make_product('DRK-333', '3.33')
    login(client)
    data = client.post('/orders/', json=order_body((p.id, 3))).get_json()
    assert data['items'][0]['lineTotal'] == '9.99'
    assert data['total'] == '9.99'
    assert OrderItem.query.one().line_total == Decimal('9.99')


def test_company_override_price_used(client):
    p = make_product('DRK-001', '6.90')
    db.session.add(PriceOverride(company_id='co-1', product_id=p.id, price=Decimal('5.90')))
    db.session.commit()

    login(client)
    data = client.post('/orders/', json=order_body((p.id, 10))).get_json()
    assert data['items'][0]['unitPrice'] == '5.90'
    assert data['total'] == '59.00'

    # Another company still pays the catalog price
    client.post('/auth/logout')
    login(client, 'buyer2')
    data = client.post('/orders/', json=order_body((p.id, 10))).get_json()
    assert data['items'][0]['unitPrice'] == '6.90'


def test_order_with_promotions(client):
    p = make_product('SNK-100', '100.00')
    db.session.add(Discount(name='Ten off', scope=Scope.ORDER, type=DiscountType.PERCENT,
                            value=Decimal('10')))
    db.session.add(PricingRule(name='Five off', scope=Scope.ORDER, type=DiscountType.FIXED,
                               value=Decimal('5'), min_spend=Decimal('50'), stackable=True))
    db.session.commit()

    login(client)
    data = client.post('/orders/', json=order_body((p.id, 1))).get_json()
    assert data['subtotal'] == '100.00'
    assert data['discountTotal'] == '15.00'
    assert data['total'] == '85.00'
    assert [d['name'] for d in data['discounts']] == ['Ten off', 'Five off']
    assert OrderDiscount.query.count() == 2


# ── 2. Errors ─────────────────────────────────────────────────────

def test_missing_product_creates_nothing(client):
    p = make_product('SNK-001', '15.00')
    login(client)
    resp = client.post('/orders/', json=order_body((p.id, 1), ('does-not-exist', 1)))
    assert resp.status_code == 404
    assert resp.get_json()['message'] == 'Product not found'
    assert Order.query.count() == 0
    assert OrderItem.query.count() == 0


def test_caller_without_company_is_forbidden(client):
    p = make_product('SNK-001', '15.00')
    login(client, 'orphan')
    resp = client.post('/orders/', json=order_body((p.id, 1)))
    assert resp.status_code == 403
    assert Order.query.count() == 0


@pytest.mark.parametrize('body, field', [
    ({}, 'items'),
    ({'items': []}, 'items'),
    ({'items': 'abc'}, 'items'),
    ({'items': [{'productId': 'x'}]}, 'items.0.qty'),
    ({'items': [{'productId': 'x', 'qty': 0}]}, 'items.0.qty'),
    ({'items': [{'productId': 'x', 'qty': -2}]}, 'items.0.qty'),
    ({'items': [{'productId': 'x', 'qty': 1.5}]}, 'items.0.qty'),
    ({'items': [{'productId': 'x', 'qty': True}]}, 'items.0.qty'),
    ({'items': [{'productId': 'x', 'qty': MAX_QTY + 1}]}, 'items.0.qty'),
    ({'items': [{'productId': 'x', 'qty': 2 ** 63}]}, 'items.0.qty'),
    ({'items': [{'qty': 1}]}, 'items.0.productId'),
    ({'items': [{'productId': '  ', 'qty': 1}]}, 'items.0.productId'),
    ({'items': [{'productId': 'x', 'qty': 1}, 'oops']}, 'items.1'),
])
def test_malformed_body_is_400(client, body, field):
    login(client)
    resp = client.post('/orders/', json=body)
    assert resp.status_code == 400
    assert field in resp.get_json()['errors']


def test_validation_runs_before_company_check(client):
    login(client, 'orphan')
    resp = client.post('/orders/', json={'items': []})
    assert resp.status_code == 400


def test_quantity_bound(client):
    errors = validate_order_payload({'items': [{'productId': 'p', 'qty': 10 ** 28 + 1}]})
    assert errors == {'items.0.qty': 'Quantity must be at most 1,000,000.'}

    p = make_product('DRK-333', '3.33')
    login(client)
    resp = client.post('/orders/', json=order_body((p.id, MAX_QTY)))
    assert resp.status_code == 201
    assert resp.get_json()['items'][0]['lineTotal'] == '3330000.00'


def test_rejected_order_logged_once(client, caplog):
    login(client, 'orphan')
    with caplog.at_level(logging.WARNING, logger='wholesale'):
        resp = client.post('/orders/', json=order_body(('x', 1)))
    assert resp.status_code == 403
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert 'Company missing' in warnings[0].getMessage()


def test_unauthenticated_is_401(client):
    resp = client.post('/orders/', json=order_body(('x', 1)))
    assert resp.status_code == 401


def test_persistence_failure_rolls_back(client, monkeypatch):
    p = make_product('SNK-001', '15.00')
    login(client)

    def boom():
        raise OperationalError('INSERT', {}, Exception('disk full'))

    monkeypatch.setattr(db.session, 'commit', boom)
    resp = client.post('/orders/', json=order_body((p.id, 1)))
    monkeypatch.undo()

    assert resp.status_code == 500
    assert Order.query.count() == 0
    assert OrderItem.query.count() == 0


# ── 3. Reading orders ─────────────────────────────────────────────

def test_list_orders_scoped_to_company(client):
    p = make_product('SNK-001', '15.00')
    login(client)
    client.post('/orders/', json=order_body((p.id, 1)))
    client.post('/auth/logout')

    login(client, 'buyer2')
    client.post('/orders/', json=order_body((p.id, 2)))
    own = client.get('/orders/').get_json()
    assert len(own) == 1
    assert own[0]['companyId'] == 'co-2'
    client.post('/auth/logout')

    login(client, 'admin')
    assert len(client.get('/orders/').get_json()) == 2


def test_orphan_user_lists_nothing(client):
    login(client, 'orphan')
    assert client.get('/orders/').get_json() == []


def test_order_detail_hidden_from_other_company(client):
    p = make_product('SNK-001', '15.00')
    login(client)
    order_id = client.post('/orders/', json=order_body((p.id, 1))).get_json()['id']
    assert client.get(f'/orders/{order_id}').status_code == 200
    client.post('/auth/logout')

    login(client, 'buyer2')
    assert client.get(f'/orders/{order_id}').status_code == 404


# ── 4. Quotes ─────────────────────────────────────────────────────

def test_quote_does_not_persist(client):
    p = make_product('SNK-020', '20.00')
    db.session.add(PricingRule(name='Ninety', scope=Scope.ORDER, type=DiscountType.PERCENT,
                               value=Decimal('90')))
    db.session.commit()

    login(client)
    resp = client.post('/orders/quote', json=order_body((p.id, 1)))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['discountTotal'] == '18.00'
    assert data['total'] == '2.00'
    assert data['items'][0]['sku'] == 'SNK-020'
    assert Order.query.count() == 0


def test_quote_with_explicit_now_respects_weekdays(client):
    p = make_product('SNK-001', '50.00')
    db.session.add(PricingRule(name='Weekend', scope=Scope.CATEGORY, target='snacks',
                               type=DiscountType.FIXED, value=Decimal('3'), days='sat,sun'))
    db.session.commit()

    identity = Identity(user_id='u-buyer', company_id='co-1', role='BUYER')
    body = order_body((p.id, 1))
    _, wednesday = quote_order(body, identity, now=datetime(2026, 10, 14, 12, 0))
    _, saturday  = quote_order(body, identity, now=datetime(2026, 10, 17, 12, 0))
    assert str(wednesday.discount_total) == '0.00'
    assert str(saturday.discount_total) == '3.00'


# ── 5. Promotions endpoint ───────────────────────────────────────

def test_active_promotions_staff_only(client):
    db.session.add(Discount(name='Always', scope=Scope.ORDER, type=DiscountType.FIXED,
                            value=Decimal('1')))
    db.session.commit()

    login(client)
    assert client.get('/promotions/active').status_code == 403
    client.post('/auth/logout')

    login(client, 'admin')
    data = client.get('/promotions/active').get_json()
    assert [d['name'] for d in data['discounts']] == ['Always']
    assert data['rules'] == []


# ── 6. CLI ───────────────────────────────────────────────────────

def test_price_check_prints_breakdown(client):
    p = make_product('SNK-001', '15.00')
    runner = client.application.test_cli_runner()
    result = runner.invoke(args=['price-check', 'co-1', f'{p.id}:2'])
    assert result.exit_code == 0, result.output
    assert 'SNK-001' in result.output
    assert 'Subtotal: 30.00  Discount: 0.00  Total: 30.00' in result.output


def test_price_check_defaults_qty_to_one(client):
    p = make_product('SNK-001', '15.00')
    runner = client.application.test_cli_runner()
    result = runner.invoke(args=['price-check', 'co-1', p.id])
    assert result.exit_code == 0, result.output
    assert 'Total: 15.00' in result.output


def test_price_check_rejects_bad_qty(client):
    runner = client.application.test_cli_runner()
    result = runner.invoke(args=['price-check', 'co-1', 'p-SNK-001:two'])
    assert result.exit_code == 2
    assert 'is not PRODUCT_ID:QTY' in result.output
    assert Order.query.count() == 0


def test_price_check_unknown_product(client):
    runner = client.application.test_cli_runner()
    result = runner.invoke(args=['price-check', 'co-1', 'ghost:1'])
    assert result.exit_code == 1
    assert 'Product not found' in result.output

"""
wholesale/orders/service.py
---------------------------
Order assembly: validate → snapshot → price → resolve → persist.

The snapshot is read once at the start; everything after it is pure
computation over plain data, and the final write is a single transaction
so a caller never observes an order without its lines.
"""
from datetime import datetime
from zoneinfo import ZoneInfo

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from wholesale import db
from wholesale.catalog.models import load_overrides, load_products
from wholesale.exceptions import ForbiddenError, NotFoundError, PersistenceError, ValidationError
from wholesale.orders.models import Order, OrderDiscount, OrderItem, OrderStatus
from wholesale.orders.pricing import price_lines
from wholesale.orders.validators import parse_order_payload, validate_order_payload
from wholesale.promotions.engine import resolve
from wholesale.promotions.models import load_promotions


def pricing_now() -> datetime:
    """Current wall-clock time in the merchant's timezone (naive)."""
    tz = ZoneInfo(current_app.config.get('PROMOTIONS_TIMEZONE') or 'UTC')
    return datetime.now(tz).replace(tzinfo=None)


def _require_company(identity) -> None:
    if not identity.company_id or not identity.user_id:
        raise ForbiddenError('Company missing')


def _price(payload, identity, now):
    """Steps shared by quoting and ordering. Returns (lines, result)."""
    errors = validate_order_payload(payload)
    if errors:
        raise ValidationError(errors)
    _require_company(identity)

    requests = parse_order_payload(payload)
    product_ids = [pid for pid, _ in requests]

    # ── Snapshot (read once) ──────────────────────────────────────
    products   = load_products(product_ids)
    overrides  = load_overrides(identity.company_id, product_ids)
    promotions = load_promotions()

    # ── Pure computation ──────────────────────────────────────────
    lines  = price_lines(requests, products, overrides)
    result = resolve(lines, promotions, now or pricing_now())
    return lines, result


def quote_order(payload, identity, now=None):
    """Price an order without persisting it."""
    return _price(payload, identity, now)


def create_order(payload, identity, now=None) -> Order:
    """
    Price and persist a new SUBMITTED order.

    Raises ValidationError, ForbiddenError, NotFoundError before anything is
    written, and PersistenceError if the transaction fails (rolled back).
    """
    lines, result = _price(payload, identity, now)

    order = Order(
        company_id     = identity.company_id,
        created_by_id  = identity.user_id,
        status         = OrderStatus.SUBMITTED,
        subtotal       = result.subtotal.to_decimal(),
        discount_total = result.discount_total.to_decimal(),
        total          = result.total.to_decimal(),
    )
    for position, line in enumerate(lines):
        order.items.append(OrderItem(
            position    = position,
            product_id  = line.product.id,
            sku         = line.product.sku,
            name        = line.product.name,
            qty         = line.qty,
            unit_price  = line.unit_price.to_decimal(),
            line_total  = line.line_total.to_decimal(),
            supplier_id = line.product.supplier_id,
        ))
    for position, applied in enumerate(result.applied):
        order.discounts.append(OrderDiscount(
            position     = position,
            kind         = applied.kind,
            promotion_id = applied.promo_id,
            name         = applied.promo_name,
            amount       = applied.discount_amount.to_decimal(),
            description  = applied.description,
        ))

    try:
        db.session.add(order)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"Order rollback (SQLAlchemyError): {exc}")
        raise PersistenceError() from exc

    current_app.logger.info(
        f"Order {order.id} created by user {identity.user_id} for company {identity.company_id} "
        f"| Subtotal: {result.subtotal} | Discount: {result.discount_total} | Total: {result.total}"
    )
    return order


def list_orders(identity) -> list:
    """Staff see every order; company users only their own, newest first."""
    query = Order.query
    if not identity.is_staff:
        if not identity.company_id:
            return []
        query = query.filter(Order.company_id == identity.company_id)
    return query.order_by(Order.created_at.desc()).all()


def get_order(order_id, identity) -> Order:
    order = db.session.get(Order, order_id)
    if order is None or (not identity.is_staff and order.company_id != identity.company_id):
        raise NotFoundError('Order not found')
    return order

from flask import Blueprint, request, jsonify

from wholesale.auth.decorators import login_required, current_identity
from wholesale.orders import service

orders = Blueprint('orders', __name__)


# ── LIST ──────────────────────────────────────────────────────────

@orders.route('/', methods=['GET'])
@login_required
def index():
    rows = service.list_orders(current_identity())
    return jsonify([o.to_dict() for o in rows])


# ── CREATE ────────────────────────────────────────────────────────

@orders.route('/', methods=['POST'])
@login_required
def create():
    """
    Create a SUBMITTED order for the caller's company.
      201 → the created order
      400 → malformed body (field-level errors)
      403 → caller has no company
      404 → a product id does not resolve
    """
    payload = request.get_json(silent=True)
    order = service.create_order(payload, current_identity())
    return jsonify(order.to_dict()), 201


# ── QUOTE (no write) ──────────────────────────────────────────────

@orders.route('/quote', methods=['POST'])
@login_required
def quote():
    """Price a basket with current promotions without creating an order."""
    payload = request.get_json(silent=True)
    lines, result = service.quote_order(payload, current_identity())
    body = result.to_dict()
    body['items'] = [line.to_dict() for line in lines]
    return jsonify(body)


# ── DETAIL ────────────────────────────────────────────────────────

@orders.route('/<order_id>', methods=['GET'])
@login_required
def detail(order_id):
    order = service.get_order(order_id, current_identity())
    return jsonify(order.to_dict())

"""
wholesale/promotions/routes.py
------------------------------
Read-only promotion endpoints for staff.
Creating and editing promotions belongs to the admin surface.
"""
from flask import Blueprint, jsonify

from wholesale.auth.decorators import staff_required
from wholesale.orders.service import pricing_now
from wholesale.promotions.models import Discount, PricingRule

promotions = Blueprint('promotions', __name__)


@promotions.route('/active')
@staff_required
def active():
    """Promotions live right now, flat discounts first, rules by priority."""
    now   = pricing_now()
    flats = [d for d in Discount.query.filter_by(active=True).order_by(Discount.name).all()
             if d.is_live(now)]
    rules = [r for r in PricingRule.query.filter_by(active=True)
             .order_by(PricingRule.priority.desc(), PricingRule.name).all()
             if r.is_live(now)]
    return jsonify({
        'now':       now.isoformat(timespec='minutes'),
        'discounts': [d.to_dict() for d in flats],
        'rules':     [r.to_dict() for r in rules],
    })

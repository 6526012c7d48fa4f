"""
wholesale/promotions/models.py
------------------------------
Discount (flat) and PricingRule models.

Both share the activation window and scope columns. ``days`` is stored as
a comma-separated list of weekday ids ('mon,sat'); ``include_skus`` and
``exclude_skus`` as comma-separated SKUs. Rows are converted to immutable
snapshots before they reach the pricing engine.
"""
from datetime import datetime
from decimal import Decimal

from wholesale import db, new_id
from wholesale.promotions import types
from wholesale.promotions.types import DiscountType, Scope, parse_days, parse_skus
from wholesale.promotions.window import is_active
from wholesale.utils.money import Money


def _money(value):
    return Money(Decimal(str(value))) if value is not None else None


class PromotionColumns:
    """Columns common to both promotion variants."""
    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    name       = db.Column(db.String(200), nullable=False)
    active     = db.Column(db.Boolean, nullable=False, default=True)
    scope      = db.Column(db.Enum(Scope), nullable=False, default=Scope.ORDER)
    target     = db.Column(db.String(200), nullable=False, default='')
    type       = db.Column(db.Enum(DiscountType), nullable=False, default=DiscountType.PERCENT)
    value      = db.Column(db.Numeric(12, 2), nullable=False)
    start_date = db.Column(db.Date, nullable=True)     # None = always eligible
    end_date   = db.Column(db.Date, nullable=True)     # None = never expires
    days       = db.Column(db.String(40), nullable=True)
    time_from  = db.Column(db.Time, nullable=True)
    time_to    = db.Column(db.Time, nullable=True)
    notes      = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def _common(self) -> dict:
        return dict(
            id=self.id,
            name=self.name,
            active=bool(self.active),
            scope=Scope(self.scope),
            target=self.target or '',
            type=DiscountType(self.type),
            value=_money(self.value),
            start_date=self.start_date,
            end_date=self.end_date,
            days=parse_days(self.days),
            time_from=self.time_from,
            time_to=self.time_to,
        )

    def is_live(self, now: datetime) -> bool:
        """True if enabled and ``now`` is inside the activation window."""
        return is_active(self.to_snapshot(), now)

    def window_dict(self) -> dict:
        return {
            'startDate': self.start_date.isoformat() if self.start_date else None,
            'endDate':   self.end_date.isoformat() if self.end_date else None,
            'days':      sorted(d.value for d in parse_days(self.days)),
            'timeFrom':  self.time_from.strftime('%H:%M') if self.time_from else None,
            'timeTo':    self.time_to.strftime('%H:%M') if self.time_to else None,
        }


class Discount(PromotionColumns, db.Model):
    """A flat, non-stackable discount; at most one applies per order."""
    __tablename__ = 'flat_discounts'

    min_spend  = db.Column(db.Numeric(12, 2), nullable=True)

    __table_args__ = (
        db.CheckConstraint('value >= 0', name='check_discount_value_non_negative'),
    )

    def to_snapshot(self) -> types.FlatDiscount:
        return types.FlatDiscount(min_spend=_money(self.min_spend), **self._common())

    def to_dict(self) -> dict:
        return {
            'kind':     'flat',
            'id':       self.id,
            'name':     self.name,
            'scope':    Scope(self.scope).value,
            'target':   self.target,
            'type':     DiscountType(self.type).value,
            'value':    str(self.value),
            'minSpend': str(self.min_spend) if self.min_spend is not None else None,
            **self.window_dict(),
        }

    def __repr__(self):
        return f'<Discount {self.name!r} {self.type} {self.value}>'


class PricingRule(PromotionColumns, db.Model):
    """
    A discount rule with thresholds and an optional cap.
    Stackable rules are summed; non-stackable ones compete by priority.
    """
    __tablename__ = 'discount_rules'

    min_qty      = db.Column(db.Integer, nullable=True)
    min_spend    = db.Column(db.Numeric(12, 2), nullable=True)
    max_discount = db.Column(db.Numeric(12, 2), nullable=True)    # cap; None = uncapped
    stackable    = db.Column(db.Boolean, nullable=False, default=False)
    priority     = db.Column(db.Integer, nullable=False, default=50)
    include_skus = db.Column(db.Text, nullable=True)
    exclude_skus = db.Column(db.Text, nullable=True)

    __table_args__ = (
        db.CheckConstraint('value >= 0', name='check_rule_value_non_negative'),
    )

    def to_snapshot(self) -> types.DiscountRule:
        return types.DiscountRule(
            min_qty=self.min_qty,
            min_spend=_money(self.min_spend),
            max_discount=_money(self.max_discount),
            stackable=bool(self.stackable),
            priority=self.priority if self.priority is not None else 50,
            include_skus=parse_skus(self.include_skus),
            exclude_skus=parse_skus(self.exclude_skus),
            **self._common(),
        )

    def to_dict(self) -> dict:
        return {
            'kind':        'rule',
            'id':          self.id,
            'name':        self.name,
            'scope':       Scope(self.scope).value,
            'target':      self.target,
            'type':        DiscountType(self.type).value,
            'value':       str(self.value),
            'minQty':      self.min_qty,
            'minSpend':    str(self.min_spend) if self.min_spend is not None else None,
            'maxDiscount': str(self.max_discount) if self.max_discount is not None else None,
            'stackable':   bool(self.stackable),
            'priority':    self.priority,
            'includeSkus': sorted(parse_skus(self.include_skus)),
            'excludeSkus': sorted(parse_skus(self.exclude_skus)),
            **self.window_dict(),
        }

    def __repr__(self):
        return f'<PricingRule {self.name!r} prio={self.priority} stack={self.stackable}>'


# ── Snapshot loader ───────────────────────────────────────────────

def load_promotions() -> list:
    """
    Snapshot of every enabled promotion, flat discounts first.
    Activation windows are checked by the engine against one ``now``.
    """
    flats = Discount.query.filter(Discount.active == True).order_by(Discount.id).all()  # noqa: E712
    rules = PricingRule.query.filter(PricingRule.active == True).order_by(PricingRule.id).all()  # noqa: E712
    return [d.to_snapshot() for d in flats] + [r.to_snapshot() for r in rules]

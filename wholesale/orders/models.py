import enum
from datetime import datetime
from decimal import Decimal
from wholesale import db, new_id


class OrderStatus(enum.Enum):
    DRAFT     = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED  = "APPROVED"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"


def _fmt(value) -> str:
    return str(Decimal(str(value)).quantize(Decimal('0.01')))


class Order(db.Model):
    """
    A submitted wholesale order.
    Written together with its items and discounts in one transaction.
    """
    __tablename__ = 'orders'

    id             = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id     = db.Column(db.String(36), db.ForeignKey('companies.id'), nullable=False, index=True)
    created_by_id  = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    status         = db.Column(db.Enum(OrderStatus), nullable=False, default=OrderStatus.SUBMITTED)
    subtotal       = db.Column(db.Numeric(12, 2), nullable=False)   # sum of line totals
    discount_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total          = db.Column(db.Numeric(12, 2), nullable=False)   # subtotal - discount_total
    created_at     = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        db.CheckConstraint('discount_total >= 0', name='check_order_discount_non_negative'),
        db.CheckConstraint('discount_total <= subtotal', name='check_order_discount_capped'),
        db.CheckConstraint('total >= 0', name='check_order_total_non_negative'),
    )

    # ── Relationships ─────────────────────────────────────────────
    company    = db.relationship('Company', lazy='select')
    created_by = db.relationship('User', lazy='select')
    items      = db.relationship('OrderItem', backref='order', lazy='select',
                                 cascade='all, delete-orphan', order_by='OrderItem.position')
    discounts  = db.relationship('OrderDiscount', backref='order', lazy='select',
                                 cascade='all, delete-orphan', order_by='OrderDiscount.position')

    def to_dict(self) -> dict:
        return {
            'id':            self.id,
            'companyId':     self.company_id,
            'createdById':   self.created_by_id,
            'status':        self.status.value,
            'subtotal':      _fmt(self.subtotal),
            'discountTotal': _fmt(self.discount_total),
            'total':         _fmt(self.total),
            'items':         [i.to_dict() for i in self.items],
            'discounts':     [d.to_dict() for d in self.discounts],
            'createdAt':     self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Order {self.id} company={self.company_id} total={self.total}>"


class OrderItem(db.Model):
    """
    One line of an order.
    Stores a snapshot of SKU, name and unit price at ordering time,
    so later catalog edits don't alter historical orders.
    """
    __tablename__ = 'order_items'

    id          = db.Column(db.String(36), primary_key=True, default=new_id)
    order_id    = db.Column(db.String(36), db.ForeignKey('orders.id'), nullable=False, index=True)
    position    = db.Column(db.Integer, nullable=False, default=0)
    product_id  = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=False)
    sku         = db.Column(db.String(100), nullable=False)
    name        = db.Column(db.String(255), nullable=False)
    qty         = db.Column(db.Integer, nullable=False)
    unit_price  = db.Column(db.Numeric(12, 2), nullable=False)
    line_total  = db.Column(db.Numeric(12, 2), nullable=False)   # qty × unit_price
    supplier_id = db.Column(db.String(36), nullable=True)

    __table_args__ = (
        db.CheckConstraint('qty > 0', name='check_order_item_qty_positive'),
    )

    def to_dict(self) -> dict:
        return {
            'productId':  self.product_id,
            'sku':        self.sku,
            'name':       self.name,
            'qty':        self.qty,
            'unitPrice':  _fmt(self.unit_price),
            'lineTotal':  _fmt(self.line_total),
            'supplierId': self.supplier_id,
        }

    def __repr__(self):
        return f"<OrderItem order={self.order_id} product={self.product_id} qty={self.qty}>"


class OrderDiscount(db.Model):
    """
    Records a promotion that contributed to an order.
    Stores a snapshot of the promotion name so historical records survive
    even if the promotion is later deleted or renamed.
    """
    __tablename__ = 'order_discounts'

    id           = db.Column(db.String(36), primary_key=True, default=new_id)
    order_id     = db.Column(db.String(36), db.ForeignKey('orders.id'), nullable=False, index=True)
    position     = db.Column(db.Integer, nullable=False, default=0)
    kind         = db.Column(db.String(10), nullable=False)        # 'flat' | 'rule'
    promotion_id = db.Column(db.String(36), nullable=True)
    name         = db.Column(db.String(200), nullable=False)       # snapshot
    amount       = db.Column(db.Numeric(12, 2), nullable=False)
    description  = db.Column(db.String(300), nullable=True)

    def to_dict(self) -> dict:
        return {
            'kind':        self.kind,
            'promotionId': self.promotion_id,
            'name':        self.name,
            'amount':      _fmt(self.amount),
            'description': self.description,
        }

    def __repr__(self):
        return f'<OrderDiscount order={self.order_id} {self.name!r} {self.amount}>'

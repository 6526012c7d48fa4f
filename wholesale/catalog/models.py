from datetime import datetime
from decimal import Decimal
from wholesale import db, new_id
from wholesale.catalog.snapshot import ProductSnapshot
from wholesale.utils.money import Money


class Category(db.Model):
    __tablename__ = 'categories'

    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    name       = db.Column(db.String(120), nullable=False, unique=True)

    def __repr__(self):
        return f"<Category {self.name!r}>"


class Supplier(db.Model):
    """A source supplier whose products the merchant resells."""
    __tablename__ = 'suppliers'

    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    name       = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Supplier {self.name!r}>"


class Product(db.Model):
    """A sellable catalog item."""
    __tablename__ = 'products'

    id                 = db.Column(db.String(36), primary_key=True, default=new_id)
    sku                = db.Column(db.String(100), unique=True, nullable=False, index=True)
    name               = db.Column(db.String(255), nullable=False, index=True)
    price              = db.Column(db.Numeric(12, 2), nullable=False)   # catalog price
    brand              = db.Column(db.String(120), nullable=True, index=True)
    category_id        = db.Column(db.String(36), db.ForeignKey('categories.id'), nullable=True)
    source_supplier_id = db.Column(db.String(36), db.ForeignKey('suppliers.id'), nullable=True)
    parent_id          = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=True)
    is_active          = db.Column(db.Boolean, nullable=False, default=True)
    created_at         = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at         = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        db.CheckConstraint('price >= 0', name='check_product_price_non_negative'),
    )

    # ── Relationships ─────────────────────────────────────────────
    category = db.relationship('Category', lazy='joined')
    supplier = db.relationship('Supplier', lazy='joined')
    parent   = db.relationship('Product', remote_side=[id], lazy='select')

    def to_snapshot(self) -> ProductSnapshot:
        """Immutable copy used for the duration of one pricing pass."""
        return ProductSnapshot(
            id=self.id,
            sku=self.sku,
            name=self.name,
            price=Money(Decimal(str(self.price))),
            category_id=self.category_id,
            category_name=self.category.name if self.category else None,
            brand=self.brand,
            supplier_id=self.source_supplier_id,
            supplier_name=self.supplier.name if self.supplier else None,
            parent_id=self.parent_id,
        )

    def __repr__(self):
        return f"<Product {self.sku!r} {self.name!r}>"


class PriceOverride(db.Model):
    """
    Company-specific price list entry.
    At most one row per (company, product); when present it replaces the
    catalog price for that company's orders.
    """
    __tablename__ = 'price_overrides'

    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    company_id = db.Column(db.String(36), db.ForeignKey('companies.id'), nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey('products.id'), nullable=False)
    price      = db.Column(db.Numeric(12, 2), nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('company_id', 'product_id', name='uq_price_override_company_product'),
        db.CheckConstraint('price >= 0', name='check_override_price_non_negative'),
    )

    product = db.relationship('Product', lazy='select')

    def __repr__(self):
        return f"<PriceOverride company={self.company_id} product={self.product_id} {self.price}>"


# ── Snapshot loaders ──────────────────────────────────────────────

def load_products(product_ids) -> dict:
    """{product_id: ProductSnapshot} for the ids that exist."""
    ids = set(product_ids)
    if not ids:
        return {}
    rows = Product.query.filter(Product.id.in_(ids)).all()
    return {p.id: p.to_snapshot() for p in rows}


def load_overrides(company_id, product_ids=None) -> dict:
    """{product_id: Money} override prices for one company."""
    query = PriceOverride.query.filter_by(company_id=company_id)
    if product_ids is not None:
        query = query.filter(PriceOverride.product_id.in_(set(product_ids)))
    return {o.product_id: Money(Decimal(str(o.price))) for o in query.all()}

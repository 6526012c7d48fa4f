import uuid

import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException
from config import config

db = SQLAlchemy()


def new_id() -> str:
    """Primary keys are opaque strings."""
    return str(uuid.uuid4())


def create_app(config_name='default'):
    """Application factory: creates and configures the Flask app."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Logging ───────────────────────────────────────────────────
    from wholesale.utils.logging import setup_logging
    setup_logging(app)

    # ── Extensions ────────────────────────────────────────────────
    db.init_app(app)

    # ── Models (registered with SQLAlchemy) ───────────────────────
    from wholesale.auth import models as _auth_models            # noqa: F401
    from wholesale.catalog import models as _catalog_models      # noqa: F401
    from wholesale.promotions import models as _promo_models     # noqa: F401
    from wholesale.orders import models as _order_models         # noqa: F401

    # ── Blueprints ────────────────────────────────────────────────
    from wholesale.auth.routes import auth as auth_blueprint
    app.register_blueprint(auth_blueprint, url_prefix='/auth')

    from wholesale.orders.routes import orders as orders_blueprint
    app.register_blueprint(orders_blueprint, url_prefix='/orders')

    from wholesale.promotions.routes import promotions as promotions_blueprint
    app.register_blueprint(promotions_blueprint, url_prefix='/promotions')

    # ── Error Handlers ────────────────────────────────────────────
    register_error_handlers(app)

    # ── CLI Commands ──────────────────────────────────────────────
    register_commands(app)

    return app


def register_error_handlers(app):
    """Every error leaves the API as JSON."""
    from wholesale.exceptions import WholesaleError

    @app.errorhandler(WholesaleError)
    def handle_wholesale_error(error):
        if error.status_code >= 500:
            app.logger.error(f"WholesaleError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"WholesaleError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500


def register_commands(app):
    """Register custom Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('✅  Database tables created.')

    @app.cli.command('seed-admin')
    @click.option('--name',     prompt='Full name',  help='Admin full name')
    @click.option('--username', prompt='Username',   help='Admin username')
    @click.option('--password', prompt=True, hide_input=True,
                  confirmation_prompt=True, help='Admin password')
    def seed_admin(name, username, password):
        """Create the initial admin user."""
        from wholesale.auth.models import User, RoleEnum

        if User.query.filter_by(username=username).first():
            click.echo(f'⚠️  User "{username}" already exists.')
            return

        admin = User(name=name, username=username, role=RoleEnum.ADMIN)
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        click.echo(f'✅  Admin user "{username}" created successfully.')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Populate database with a demo company, catalog and promotions."""
        from decimal import Decimal
        from wholesale.auth.models import User, RoleEnum, Company, CompanyStatus
        from wholesale.catalog.models import Category, Supplier, Product, PriceOverride
        from wholesale.promotions.models import Discount, PricingRule
        from wholesale.promotions.types import Scope, DiscountType

        click.echo("🌱 Seeding demo data...")
        db.create_all()

        if User.query.filter_by(username='buyer').first():
            click.echo("ℹ️   Demo data already present.")
            return

        company = Company(name='Bar Centrale S.r.l.', status=CompanyStatus.ACTIVE)
        db.session.add(company)
        db.session.flush()

        admin = User(name='Admin User', username='admin', role=RoleEnum.ADMIN)
        admin.set_password('demo123')
        buyer = User(name='Demo Buyer', username='buyer', role=RoleEnum.BUYER, company_id=company.id)
        buyer.set_password('demo123')
        db.session.add_all([admin, buyer])

        drinks   = Category(name='Drinks')
        snacks   = Category(name='Snacks')
        supplier = Supplier(name='Metro Wholesale')
        db.session.add_all([drinks, snacks, supplier])
        db.session.flush()

        catalog = [
            ('DRK-001', 'Sparkling Water 24x50cl', '6.90',  drinks, 'AcquaViva'),
            ('DRK-002', 'Orange Soda 24x33cl',     '12.40', drinks, 'AcmeCo'),
            ('SNK-001', 'Salted Crisps 30x45g',    '15.00', snacks, 'AcmeCo'),
            ('SNK-002', 'Breadsticks 50x25g',      '9.99',  snacks, 'Forno Rossi'),
        ]
        products = []
        for sku, name, price, category, brand in catalog:
            p = Product(sku=sku, name=name, price=Decimal(price), brand=brand,
                        category_id=category.id, source_supplier_id=supplier.id)
            db.session.add(p)
            products.append(p)
        db.session.flush()

        db.session.add(PriceOverride(company_id=company.id, product_id=products[0].id,
                                     price=Decimal('5.90')))
        db.session.add(Discount(name='Welcome 5%', scope=Scope.ORDER, type=DiscountType.PERCENT,
                                value=Decimal('5'), min_spend=Decimal('50')))
        db.session.add(PricingRule(name='AcmeCo -10%', scope=Scope.BRAND, target='AcmeCo',
                                   type=DiscountType.PERCENT, value=Decimal('10'),
                                   max_discount=Decimal('20'), stackable=True, priority=50))
        db.session.add(PricingRule(name='Weekend snacks', scope=Scope.CATEGORY, target='Snacks',
                                   type=DiscountType.FIXED, value=Decimal('3'),
                                   days='sat,sun', priority=60))
        db.session.commit()
        click.echo("✅ Demo seed complete (admin/demo123, buyer/demo123).")

    @app.cli.command('price-check')
    @click.argument('company_id')
    @click.argument('items', nargs=-1, required=True)
    def price_check(company_id, items):
        """Price a basket without saving it. ITEMS are PRODUCT_ID:QTY pairs."""
        from wholesale.auth.decorators import Identity
        from wholesale.exceptions import WholesaleError
        from wholesale.orders.service import quote_order

        payload = {'items': []}
        for raw in items:
            product_id, _, qty = raw.partition(':')
            if qty and not qty.isdigit():
                raise click.BadParameter(f'"{raw}" is not PRODUCT_ID:QTY', param_hint='ITEMS')
            payload['items'].append({'productId': product_id, 'qty': int(qty or 1)})

        identity = Identity(user_id='cli', company_id=company_id, role='ADMIN')
        try:
            lines, result = quote_order(payload, identity)
        except WholesaleError as exc:
            raise click.ClickException(exc.message)

        click.echo(f'{"SKU":<12} {"Qty":>5} {"Unit":>10} {"Line":>12}')
        click.echo('─' * 42)
        for line in lines:
            click.echo(f'{line.sku:<12} {line.qty:>5} {str(line.unit_price):>10} {str(line.line_total):>12}')
        click.echo('─' * 42)
        for applied in result.applied:
            click.echo(f'  - {applied.promo_name}: {applied.discount_amount} ({applied.description})')
        click.echo(f'Subtotal: {result.subtotal}  Discount: {result.discount_total}  Total: {result.total}')

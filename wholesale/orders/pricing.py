"""
wholesale/orders/pricing.py
---------------------------
Turns requested (product_id, qty) pairs into priced order lines.

Works purely on a product snapshot and the company's override map; the
order service is responsible for loading both.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from wholesale.catalog.snapshot import ProductSnapshot
from wholesale.exceptions import NotFoundError
from wholesale.utils.money import Money


@dataclass(frozen=True)
class PricedLine:
    """One order line with its resolved unit price."""
    product:    ProductSnapshot
    qty:        int
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.qty

    @property
    def sku(self) -> str:
        return self.product.sku

    def to_dict(self) -> dict:
        return {
            'productId':  self.product.id,
            'sku':        self.product.sku,
            'name':       self.product.name,
            'qty':        self.qty,
            'unitPrice':  str(self.unit_price),
            'lineTotal':  str(self.line_total),
            'supplierId': self.product.supplier_id,
        }


def unit_price_for(product: ProductSnapshot, overrides: Mapping[str, Money]) -> Money:
    """Company override when one exists, else the catalog price."""
    override = overrides.get(product.id)
    return override if override is not None else product.price


def price_lines(
    requests: Iterable[Tuple[str, int]],
    products: Mapping[str, ProductSnapshot],
    overrides: Mapping[str, Money],
) -> List[PricedLine]:
    """
    Price every requested line, keeping request order.

    Raises NotFoundError on the first product id missing from the
    snapshot; no lines are returned in that case.
    """
    lines = []
    for product_id, qty in requests:
        product = products.get(product_id)
        if product is None:
            raise NotFoundError('Product not found', payload={'productId': product_id})
        lines.append(PricedLine(
            product=product,
            qty=qty,
            unit_price=unit_price_for(product, overrides),
        ))
    return lines


def subtotal(lines: Iterable[PricedLine]) -> Money:
    return Money.sum(line.line_total for line in lines)


def total_qty(lines: Iterable[PricedLine]) -> int:
    return sum(line.qty for line in lines)


def index_products(snapshots: Iterable[ProductSnapshot]) -> Dict[str, ProductSnapshot]:
    return {p.id: p for p in snapshots}

"""
wholesale/catalog/snapshot.py
-----------------------------
Read-only product view used while pricing one order.

Built once per request from the Product rows so that catalog edits made
while an order is being priced cannot change its outcome.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wholesale.utils.money import Money


@dataclass(frozen=True)
class ProductSnapshot:
    id:            str
    sku:           str
    name:          str
    price:         Money
    category_id:   Optional[str] = None
    category_name: Optional[str] = None
    brand:         Optional[str] = None
    supplier_id:   Optional[str] = None
    supplier_name: Optional[str] = None
    parent_id:     Optional[str] = None

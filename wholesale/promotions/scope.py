"""
wholesale/promotions/scope.py
-----------------------------
Decides whether a promotion targets a given product.

Comparison is case-insensitive and ignores surrounding whitespace. A
promotion with an empty target only ever matches through ORDER scope:
a misconfigured PRODUCT/CATEGORY/... promotion matches nothing rather
than everything.
"""
from typing import Callable, Dict, Iterable, List, Optional

from wholesale.catalog.snapshot import ProductSnapshot
from wholesale.promotions.types import Scope


def _norm(value: Optional[str]) -> str:
    return str(value).strip().casefold() if value is not None else ''


def _any_equals(target: str, *candidates) -> bool:
    return any(_norm(c) == target for c in candidates if _norm(c))


# One predicate per scope kind; ORDER is handled before dispatch.
_MATCHERS: Dict[Scope, Callable[[str, ProductSnapshot], bool]] = {
    Scope.PRODUCT:  lambda t, p: _any_equals(t, p.sku, p.id),
    Scope.CATEGORY: lambda t, p: _any_equals(t, p.category_id, p.category_name),
    Scope.BRAND:    lambda t, p: _any_equals(t, p.brand),
    Scope.SUPPLIER: lambda t, p: _any_equals(t, p.supplier_id, p.supplier_name),
    Scope.PARENT:   lambda t, p: _any_equals(t, p.parent_id),
}


def matches(promotion, product: ProductSnapshot) -> bool:
    """True when ``promotion`` applies to ``product``."""
    if promotion.scope == Scope.ORDER:
        return True

    target = _norm(promotion.target)
    if not target:
        return False

    matcher = _MATCHERS.get(promotion.scope)
    if matcher is None:
        return False
    return matcher(target, product)


def matched_lines(promotion, lines: Iterable) -> List:
    """Subset of priced ``lines`` whose product the promotion targets."""
    return [line for line in lines if matches(promotion, line.product)]

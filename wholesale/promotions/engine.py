"""
wholesale/promotions/engine.py
------------------------------
Pure-Python promotion resolution engine.

Evaluate active promotions against priced order lines and return a
PricingResult with the applied discounts, their descriptions and the
capped order total.

No DB access happens here. The order service loads a snapshot and decides
what to persist.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from wholesale.orders.pricing import PricedLine, subtotal as lines_subtotal, total_qty
from wholesale.promotions.scope import matched_lines
from wholesale.promotions.types import (
    DiscountRule, DiscountType, FlatDiscount, Promotion, Scope,
)
from wholesale.promotions.window import is_active
from wholesale.utils.money import Money


@dataclass
class AppliedDiscount:
    """One promotion that contributed to the order discount."""
    kind:            str          # 'flat' | 'rule'
    promo_id:        str
    promo_name:      str
    discount_amount: Money
    description:     str
    stackable:       bool

    def to_dict(self) -> dict:
        return {
            'kind':        self.kind,
            'promotionId': self.promo_id,
            'name':        self.promo_name,
            'amount':      str(self.discount_amount),
            'description': self.description,
            'stackable':   self.stackable,
        }


@dataclass
class PricingResult:
    """Result of resolving every promotion against the order lines."""
    subtotal:       Money = field(default_factory=Money.zero)
    flat_discount:  Money = field(default_factory=Money.zero)
    stackable_sum:  Money = field(default_factory=Money.zero)
    exclusive:      Money = field(default_factory=Money.zero)
    discount_total: Money = field(default_factory=Money.zero)
    total:          Money = field(default_factory=Money.zero)
    applied:        List[AppliedDiscount] = field(default_factory=list)

    @property
    def rules_total(self) -> Money:
        return self.stackable_sum + self.exclusive

    def to_dict(self) -> dict:
        return {
            'subtotal':      str(self.subtotal),
            'flatDiscount':  str(self.flat_discount),
            'rulesTotal':    str(self.rules_total),
            'discountTotal': str(self.discount_total),
            'total':         str(self.total),
            'discounts':     [a.to_dict() for a in self.applied],
        }


@dataclass(frozen=True)
class Candidate:
    """A qualifying promotion and the amount it would grant."""
    promotion: Promotion
    amount:    Money


# ── Amount helpers ────────────────────────────────────────────────

def _base_amount(promo: Promotion, matched_subtotal: Money) -> Money:
    """PERCENT → share of the matched subtotal; FIXED → face value."""
    if promo.type == DiscountType.PERCENT:
        amount = matched_subtotal.percent(promo.value.amount)
    else:
        amount = promo.value
    return Money.max(amount, Money.zero())


def _is_set(threshold) -> bool:
    """Zero thresholds and caps behave as unset."""
    return threshold is not None and threshold > 0


def _describe(promo: Promotion) -> str:
    if promo.type == DiscountType.PERCENT:
        head = f"{promo.value.amount.normalize():f}% off"
    else:
        head = f"€{promo.value} off"
    if promo.scope == Scope.ORDER:
        return f"{head} entire order"
    return f"{head} {promo.scope.value.lower()} {promo.target}".rstrip()


# ── Individual evaluators ─────────────────────────────────────────

def evaluate_flat_discount(discount: FlatDiscount, lines: Sequence[PricedLine]) -> Optional[Money]:
    """Candidate amount for one flat discount, or None when it does not qualify."""
    matched = matched_lines(discount, lines)
    if not matched:
        return None
    matched_subtotal = lines_subtotal(matched)
    if _is_set(discount.min_spend) and matched_subtotal < discount.min_spend:
        return None
    return _base_amount(discount, matched_subtotal)


def rule_lines(rule: DiscountRule, lines: Sequence[PricedLine]) -> List[PricedLine]:
    """Lines in the rule's scope, narrowed by its SKU include/exclude lists."""
    matched = matched_lines(rule, lines)
    if rule.include_skus:
        matched = [l for l in matched if l.sku.casefold() in rule.include_skus]
    if rule.exclude_skus:
        matched = [l for l in matched if l.sku.casefold() not in rule.exclude_skus]
    return matched


def evaluate_rule(rule: DiscountRule, lines: Sequence[PricedLine]) -> Optional[Money]:
    """Capped amount for one discount rule, or None when it does not qualify."""
    matched = rule_lines(rule, lines)
    if not matched:
        return None
    if _is_set(rule.min_qty) and total_qty(matched) < rule.min_qty:
        return None
    matched_subtotal = lines_subtotal(matched)
    if _is_set(rule.min_spend) and matched_subtotal < rule.min_spend:
        return None

    amount = _base_amount(rule, matched_subtotal)
    if _is_set(rule.max_discount):
        amount = Money.min(amount, rule.max_discount)
    return amount


# ── Selection ─────────────────────────────────────────────────────

def flat_rank(candidate: Candidate) -> Money:
    return candidate.amount


def exclusive_rank(candidate: Candidate) -> Tuple[int, Money]:
    """Higher priority wins; on equal priority the larger amount wins."""
    return (candidate.promotion.priority, candidate.amount)


def pick_best(candidates: Iterable[Candidate], rank) -> Optional[Candidate]:
    """
    Highest-ranked candidate, or None.

    Candidates are visited in ascending promotion id and ``max`` keeps the
    first of equally ranked ones, so full ties go to the lowest id.
    """
    ordered = sorted(candidates, key=lambda c: str(c.promotion.id))
    if not ordered:
        return None
    return max(ordered, key=rank)


def _applied(kind: str, candidate: Candidate, stackable: bool) -> AppliedDiscount:
    return AppliedDiscount(
        kind=kind,
        promo_id=candidate.promotion.id,
        promo_name=candidate.promotion.name,
        discount_amount=candidate.amount,
        description=_describe(candidate.promotion),
        stackable=stackable,
    )


# ── Main public function ──────────────────────────────────────────

def resolve(lines: Sequence[PricedLine], promotions: Iterable[Promotion], now: datetime) -> PricingResult:
    """
    Resolve every promotion live at ``now`` against ``lines``.

    Combination rules:
    1. Flat discounts never stack; only the single largest applies.
    2. Stackable rules all apply, summed without a group cap.
    3. Non-stackable rules compete; one exclusive winner applies.
    4. discount_total = min(subtotal, best flat + stackable sum + exclusive).
    """
    subtotal = lines_subtotal(lines)
    result = PricingResult(subtotal=subtotal, total=subtotal)
    if not lines:
        return result

    flat_candidates: List[Candidate] = []
    stackable: List[Candidate] = []
    exclusive: List[Candidate] = []

    for promo in promotions:
        if not is_active(promo, now):
            continue

        if isinstance(promo, FlatDiscount):
            amount = evaluate_flat_discount(promo, lines)
            if amount is not None:
                flat_candidates.append(Candidate(promo, amount))
        elif isinstance(promo, DiscountRule):
            amount = evaluate_rule(promo, lines)
            if amount is None:
                continue
            if promo.stackable:
                stackable.append(Candidate(promo, amount))
            else:
                exclusive.append(Candidate(promo, amount))

    best_flat = pick_best(flat_candidates, flat_rank)
    best_exclusive = pick_best(exclusive, exclusive_rank)

    result.flat_discount = best_flat.amount if best_flat else Money.zero()
    result.stackable_sum = Money.sum(c.amount for c in stackable)
    result.exclusive = best_exclusive.amount if best_exclusive else Money.zero()

    applied = []
    if best_flat:
        applied.append(_applied('flat', best_flat, stackable=False))
    applied.extend(_applied('rule', c, stackable=True) for c in stackable)
    if best_exclusive:
        applied.append(_applied('rule', best_exclusive, stackable=False))
    result.applied = [a for a in applied if a.discount_amount > 0]

    # Cap against the subtotal so the total never goes negative
    result.discount_total = Money.min(subtotal, result.flat_discount + result.rules_total)
    result.total = subtotal - result.discount_total
    return result

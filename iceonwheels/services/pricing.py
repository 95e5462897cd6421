# iceonwheels/services/pricing.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import FrozenSet, List, Optional, Sequence, Tuple

from ..settings import settings


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class LineItem:
    """
    One product in the cart. All money is integer minor units (paise).
    """
    id: str
    name: str
    unit_price: int
    quantity: int = 1
    size: Optional[str] = None
    toppings: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.unit_price < 0:
            raise ValueError("unit_price must be non-negative")
        if self.quantity < 0:
            raise ValueError("quantity must be non-negative")
        self.toppings = tuple(self.toppings)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    @property
    def customization_labels(self) -> List[str]:
        labels = [self.size] if self.size else []
        return labels + [t for t in self.toppings if t]


@dataclass(frozen=True)
class Promotion:
    code: str
    kind: DiscountKind
    value: Decimal
    minimum_order: Optional[int] = None
    maximum_discount: Optional[int] = None
    applicable_item_ids: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "kind", DiscountKind(self.kind))
        object.__setattr__(self, "value", Decimal(str(self.value)))
        object.__setattr__(self, "applicable_item_ids", frozenset(self.applicable_item_ids or ()))
        if self.value < 0:
            raise ValueError("promotion value must be non-negative")
        if self.kind is DiscountKind.PERCENTAGE and self.value > 100:
            raise ValueError("percentage promotion cannot exceed 100")

    def applies_to(self, items: Sequence[LineItem]) -> bool:
        if not self.applicable_item_ids:
            return True
        return any(i.id in self.applicable_item_ids for i in items)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: int = 0
    discount: int = 0
    total: int = 0


def _percent_of(amount: int, percent: Decimal) -> int:
    return int((Decimal(amount) * percent / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_totals(items: Sequence[LineItem], promotion: Optional[Promotion] = None) -> OrderTotals:
    """
    Recompute subtotal/discount/total from scratch.

    A promotion whose minimum order is not reached yields no discount but is
    not rejected here; rejecting happens when the code is applied
    (see Cart.apply_promo). Zero for minimum_order or maximum_discount
    means "not set".
    """
    subtotal = sum(i.line_total for i in items)
    discount = 0

    if promotion is not None:
        if promotion.minimum_order and subtotal < promotion.minimum_order:
            return OrderTotals(subtotal=subtotal, discount=0, total=subtotal)

        if promotion.kind is DiscountKind.PERCENTAGE:
            discount = _percent_of(subtotal, promotion.value)
            if promotion.maximum_discount and discount > promotion.maximum_discount:
                discount = promotion.maximum_discount
        elif promotion.kind is DiscountKind.FIXED:
            discount = int(promotion.value)
        else:
            raise ValueError(f"unknown discount kind: {promotion.kind!r}")

        discount = max(0, min(discount, subtotal))

    return OrderTotals(subtotal=subtotal, discount=discount, total=subtotal - discount)


def format_amount(minor_units: int, symbol: Optional[str] = None) -> str:
    """12345 -> '₹123.45'"""
    sym = settings.currency_symbol if symbol is None else symbol
    value = (Decimal(minor_units) / 100).quantize(Decimal("0.01"))
    return f"{sym}{value}"

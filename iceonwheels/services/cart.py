# iceonwheels/services/cart.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..errors import InvalidPromo, MinimumOrderNotMet
from ..schemas.promos import AdminPromotion
from .pricing import LineItem, OrderTotals, Promotion, compute_totals, format_amount
from .promos import validate_promo_code

logger = logging.getLogger(__name__)


class Cart:
    """
    Line items plus a single applied-promotion slot.

    Totals are recomputed from scratch after every mutation.
    """

    def __init__(self, items: Iterable[LineItem] = (), promotion: Optional[Promotion] = None):
        self._items: List[LineItem] = []
        self._promotion: Optional[Promotion] = None
        self.totals = OrderTotals()
        for item in items:
            self._merge(item)
        if promotion is not None:
            self.apply_promo(promotion)
        self._recompute()

    @property
    def items(self) -> List[LineItem]:
        return list(self._items)

    @property
    def applied_promo(self) -> Optional[Promotion]:
        return self._promotion

    def _recompute(self) -> None:
        self.totals = compute_totals(self._items, self._promotion)

    def _find(self, item_id: str) -> Optional[LineItem]:
        return next((i for i in self._items if i.id == item_id), None)

    def _merge(self, item: LineItem) -> None:
        if item.quantity <= 0:
            return
        existing = self._find(item.id)
        if existing is None:
            self._items.append(replace(item))
        else:
            existing.quantity += item.quantity

    # --- mutations ------------------------------------------------------------
    def add_item(self, item: LineItem) -> None:
        """Append a new line, or bump an existing line with the same id by one."""
        existing = self._find(item.id)
        if existing is None:
            self._items.append(replace(item, quantity=max(1, item.quantity)))
        else:
            existing.quantity += 1
        self._recompute()

    def remove_item(self, item_id: str) -> None:
        self._items = [i for i in self._items if i.id != item_id]
        self._recompute()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        item = self._find(item_id)
        if item is not None:
            item.quantity = max(0, quantity)
        self._items = [i for i in self._items if i.quantity > 0]
        self._recompute()

    def apply_promo(self, promotion: Promotion) -> None:
        subtotal = compute_totals(self._items).subtotal
        if promotion.minimum_order and subtotal < promotion.minimum_order:
            msg = f"Minimum order of {format_amount(promotion.minimum_order)} required"
            logger.info("promo %s rejected: %s", promotion.code, msg)
            raise MinimumOrderNotMet(promotion.code, promotion.minimum_order, msg)
        self._promotion = promotion
        self._recompute()

    def apply_code(
        self,
        code: str,
        registry: Sequence[AdminPromotion] = (),
        now: Optional[datetime] = None,
    ) -> Promotion:
        promo = validate_promo_code(code, self._items, registry=registry, now=now)
        if promo is None:
            raise InvalidPromo()
        self.apply_promo(promo)
        return promo

    def remove_promo(self) -> None:
        self._promotion = None
        self._recompute()

    def clear(self) -> None:
        self._items = []
        self._promotion = None
        self._recompute()

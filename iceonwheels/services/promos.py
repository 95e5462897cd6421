# iceonwheels/services/promos.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from ..schemas.promos import AdminPromotion
from ..settings import settings
from .firebase import ensure_firestore
from .pricing import DiscountKind, LineItem, Promotion

logger = logging.getLogger(__name__)

# Built-in codes; fixed amounts are in paise.
STATIC_PROMOTIONS: List[Promotion] = [
    Promotion(code="WELCOME10", kind=DiscountKind.PERCENTAGE, value=Decimal(10)),
    Promotion(code="SAVE50", kind=DiscountKind.FIXED, value=Decimal(5000)),
    Promotion(code="ICE20", kind=DiscountKind.PERCENTAGE, value=Decimal(20)),
    Promotion(code="FRESH15", kind=DiscountKind.FIXED, value=Decimal(1500)),
]


# --- REGISTRY -----------------------------------------------------------------
def fetch_promotions() -> List[AdminPromotion]:
    """
    Read every promo code document from the admin registry.
    Documents that fail validation are skipped and logged.
    """
    db = ensure_firestore()
    out: List[AdminPromotion] = []
    for snap in db.collection(settings.promo_collection).stream():
        data = snap.to_dict() or {}
        data["id"] = snap.id
        try:
            out.append(AdminPromotion(**data))
        except ValueError as e:
            logger.warning("skipping malformed promo document %s: %s", snap.id, e)
    return out


# --- MATCHING -----------------------------------------------------------------
def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _registry_match(promo: AdminPromotion, code: str, items: Sequence[LineItem], now: datetime) -> bool:
    if promo.code.lower() != code or not promo.active:
        return False
    if not (_aware(promo.validFrom) <= now <= _aware(promo.validUntil)):
        return False
    if promo.usageLimit and promo.usedCount >= promo.usageLimit:
        return False
    if promo.applicableItems:
        wanted = set(promo.applicableItems)
        if not any(i.id in wanted for i in items):
            return False
    return True


def _paise(rupees: Decimal) -> int:
    return int((Decimal(rupees) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_promotion(promo: AdminPromotion) -> Promotion:
    """Registry amounts are rupees; the pricing engine works in paise."""
    value = promo.discountValue
    if promo.discountType is DiscountKind.FIXED:
        value = Decimal(_paise(value))
    return Promotion(
        code=promo.code,
        kind=promo.discountType,
        value=value,
        minimum_order=_paise(promo.minimumOrder) or None,
        maximum_discount=_paise(promo.maximumDiscount or 0) or None,
        applicable_item_ids=frozenset(promo.applicableItems or ()),
    )


def validate_promo_code(
    code: str,
    items: Sequence[LineItem],
    registry: Sequence[AdminPromotion] = (),
    now: Optional[datetime] = None,
) -> Optional[Promotion]:
    """
    Resolve a user-entered code against the admin registry, then the
    built-in table. A matching registry entry wins over a built-in code of
    the same name; an inactive, expired or used-up one falls through to it.

    Returns None for anything that does not apply; callers show one generic
    message either way. usedCount is never touched here.
    """
    needle = (code or "").strip().lower()
    if not needle:
        return None
    now = _aware(now or datetime.now(timezone.utc))

    for promo in registry:
        if _registry_match(promo, needle, items, now):
            return to_promotion(promo)

    for promo in STATIC_PROMOTIONS:
        if promo.code.lower() == needle and promo.applies_to(items):
            return promo

    logger.info("promo %s not found", needle.upper())
    return None

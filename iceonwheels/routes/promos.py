# iceonwheels/routes/promos.py
from __future__ import annotations
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..schemas.orders import CartLineIn
from ..schemas.promos import AdminPromotion, PromotionOut
from ..services.pricing import Promotion
from ..services.promos import fetch_promotions, validate_promo_code

router = APIRouter(prefix="/promos", tags=["promos"])


class ValidateIn(BaseModel):
    code: str
    items: List[CartLineIn] = []


def promotion_out(promo: Promotion) -> PromotionOut:
    return PromotionOut(
        code=promo.code,
        kind=promo.kind,
        value=promo.value,
        minimumOrder=promo.minimum_order,
        maximumDiscount=promo.maximum_discount,
        applicableItems=sorted(promo.applicable_item_ids),
    )


@router.get("", response_model=List[AdminPromotion])
def list_promos_endpoint():
    """Registry promo codes, as stored by the admin dashboard."""
    return fetch_promotions()


@router.post("/validate", response_model=PromotionOut)
def validate_promo_endpoint(body: ValidateIn):
    items = [line.to_line_item() for line in body.items]
    promo = validate_promo_code(body.code, items, registry=fetch_promotions())
    if promo is None:
        raise HTTPException(
            status_code=404,
            detail="Invalid promo code or not applicable to your order",
        )
    return promotion_out(promo)

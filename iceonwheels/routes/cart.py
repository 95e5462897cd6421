# iceonwheels/routes/cart.py
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..errors import InvalidPromo
from ..schemas.orders import CartLineIn, TotalsOut
from ..schemas.promos import PromotionOut
from ..services.cart import Cart
from ..services.promos import fetch_promotions
from .promos import promotion_out

router = APIRouter(prefix="/cart", tags=["cart"])


class CartIn(BaseModel):
    items: List[CartLineIn]
    promoCode: Optional[str] = None


class CartOut(BaseModel):
    totals: TotalsOut
    appliedPromo: Optional[PromotionOut] = None


@router.post("/totals", response_model=CartOut)
def cart_totals(body: CartIn):
    """Price a cart, optionally applying a promo code."""
    cart = Cart(line.to_line_item() for line in body.items)
    promo = None
    if body.promoCode:
        try:
            promo = cart.apply_code(body.promoCode, registry=fetch_promotions())
        except InvalidPromo as e:
            raise HTTPException(status_code=400, detail=e.message)
    return CartOut(
        totals=TotalsOut.from_totals(cart.totals),
        appliedPromo=promotion_out(promo) if promo else None,
    )

# iceonwheels/routes/orders.py
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import BaseModel

from ..errors import InvalidPromo, OrderNotFound
from ..printer.escpos import encode_receipt
from ..schemas.orders import CartLineIn, CustomerIn, Order, OrderType, PaymentMethod
from ..services.orders import checkout, get_order, list_orders, save_order
from ..services.promos import fetch_promotions

router = APIRouter(prefix="/orders", tags=["orders"])


class CheckoutBody(BaseModel):
    # camelCase to match the frontend JSON exactly
    customer: CustomerIn
    items: List[CartLineIn]
    paymentMethod: PaymentMethod
    orderType: OrderType = OrderType.PICKUP
    promoCode: Optional[str] = None


def _load(order_id: str) -> Order:
    try:
        return get_order(order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="order not found")


@router.post("", response_model=Order)
def place_order(body: CheckoutBody):
    registry = fetch_promotions() if body.promoCode else []
    try:
        order = checkout(
            customer=body.customer,
            items=[line.to_line_item() for line in body.items],
            payment_method=body.paymentMethod,
            order_type=body.orderType,
            promo_code=body.promoCode,
            registry=registry,
        )
    except InvalidPromo as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return save_order(order)


@router.get("", response_model=List[Order])
def list_orders_endpoint(limit: int = Query(200, ge=1, le=500)):
    """Recent orders for the admin UI, newest first."""
    return list_orders(limit=limit)


@router.get("/{order_id}", response_model=Order)
def get_order_endpoint(order_id: str):
    return _load(order_id)


@router.get("/{order_id}/receipt")
def order_receipt(order_id: str):
    """Raw ESC/POS bytes, for printing from a client-side printer link."""
    data = encode_receipt(_load(order_id))
    return Response(content=data, media_type="application/octet-stream")

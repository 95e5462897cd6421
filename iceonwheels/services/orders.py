# iceonwheels/services/orders.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from firebase_admin import firestore

from ..errors import OrderNotFound
from ..schemas.orders import (
    CustomerIn,
    Order,
    OrderLine,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    TotalsOut,
)
from ..schemas.promos import AdminPromotion
from ..settings import settings
from .cart import Cart
from .firebase import ensure_firestore
from .pricing import LineItem

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _oid(now: datetime) -> str:
    return f"ORD{int(now.timestamp() * 1000)}"


def _payment_status(method: PaymentMethod) -> PaymentStatus:
    # UPI is confirmed in the payment app before the order is placed
    if method is PaymentMethod.UPI:
        return PaymentStatus.PAID
    if method is PaymentMethod.CASH:
        return PaymentStatus.PENDING
    raise ValueError(f"unknown payment method: {method!r}")


# --- CHECKOUT -----------------------------------------------------------------
def checkout(
    customer: CustomerIn,
    items: Sequence[LineItem],
    payment_method: PaymentMethod,
    order_type: OrderType = OrderType.PICKUP,
    promo_code: Optional[str] = None,
    registry: Sequence[AdminPromotion] = (),
    now: Optional[datetime] = None,
) -> Order:
    """
    Price the cart, apply the promo code (raising InvalidPromo /
    MinimumOrderNotMet) and freeze everything into an Order.
    """
    if not customer.name.strip() or not customer.phone.strip():
        raise ValueError("customer name and phone are required")

    cart = Cart(items)
    if not cart.items:
        raise ValueError("cart is empty")

    promo = cart.apply_code(promo_code, registry=registry, now=now) if promo_code else None

    now = now or _now()
    return Order(
        orderId=_oid(now),
        customer=customer,
        lines=[OrderLine.from_line_item(i) for i in cart.items],
        totals=TotalsOut.from_totals(cart.totals),
        paymentMethod=payment_method,
        orderType=order_type,
        paymentStatus=_payment_status(payment_method),
        promoCode=promo.code if promo else None,
        notes=f"Promo code applied: {promo.code}" if promo else None,
        timestamp=now,
    )


# --- ORDER SINK ---------------------------------------------------------------
def _doc_to_order(doc_id: str, data: Dict[str, Any]) -> Order:
    data.setdefault("orderId", doc_id)
    return Order(**data)


def save_order(order: Order) -> Order:
    db = ensure_firestore()
    payload = order.model_dump(mode="json", exclude_none=True)
    db.collection(settings.orders_collection).document(order.orderId).set(payload)
    logger.info("saved order %s total=%s", order.orderId, order.totals.total)
    return order


def get_order(order_id: str) -> Order:
    if not order_id:
        raise ValueError("order_id required")
    db = ensure_firestore()
    snap = db.collection(settings.orders_collection).document(order_id).get()
    if not snap.exists:
        raise OrderNotFound(order_id)
    return _doc_to_order(snap.id, snap.to_dict() or {})


def list_orders(limit: int = 200) -> List[Order]:
    """Newest first."""
    db = ensure_firestore()
    q = (
        db.collection(settings.orders_collection)
        .order_by("timestamp", direction=firestore.Query.DESCENDING)
        .limit(limit)
    )
    out: List[Order] = []
    for snap in q.stream():
        try:
            out.append(_doc_to_order(snap.id, snap.to_dict() or {}))
        except ValueError as e:
            logger.warning("skipping malformed order document %s: %s", snap.id, e)
    return out

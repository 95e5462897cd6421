# iceonwheels/schemas/orders.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.pricing import LineItem, OrderTotals


class PaymentMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


class OrderType(str, Enum):
    PICKUP = "pickup"
    DINE_IN = "dinein"

    @property
    def label(self) -> str:
        return _ORDER_TYPE_LABELS[self]


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


_PAYMENT_LABELS = {PaymentMethod.CASH: "Cash", PaymentMethod.UPI: "UPI"}
_ORDER_TYPE_LABELS = {OrderType.PICKUP: "Pickup", OrderType.DINE_IN: "Dine In"}


class CartLineIn(BaseModel):
    id: str
    name: str
    unitPrice: int = Field(..., ge=0, description="Price in paise")
    quantity: int = Field(1, gt=0)
    size: Optional[str] = None
    toppings: List[str] = []

    def to_line_item(self) -> LineItem:
        return LineItem(
            id=self.id,
            name=self.name,
            unit_price=self.unitPrice,
            quantity=self.quantity,
            size=self.size,
            toppings=tuple(self.toppings),
        )


class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unitPrice: int
    quantity: int
    size: Optional[str] = None
    toppings: List[str] = []

    @property
    def lineTotal(self) -> int:
        return self.unitPrice * self.quantity

    @classmethod
    def from_line_item(cls, item: LineItem) -> "OrderLine":
        return cls(
            id=item.id,
            name=item.name,
            unitPrice=item.unit_price,
            quantity=item.quantity,
            size=item.size,
            toppings=list(item.toppings),
        )


class TotalsOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: int
    discount: int
    total: int

    @classmethod
    def from_totals(cls, totals: OrderTotals) -> "TotalsOut":
        return cls(subtotal=totals.subtotal, discount=totals.discount, total=totals.total)


class Order(BaseModel):
    """Snapshot taken once at checkout; read-only afterwards."""
    model_config = ConfigDict(frozen=True)

    orderId: str
    customer: CustomerIn
    lines: List[OrderLine]
    totals: TotalsOut
    paymentMethod: PaymentMethod
    orderType: OrderType
    status: OrderStatus = OrderStatus.PENDING
    paymentStatus: PaymentStatus = PaymentStatus.PENDING
    promoCode: Optional[str] = None
    notes: Optional[str] = None
    timestamp: datetime

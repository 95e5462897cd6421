# iceonwheels/schemas/promos.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..services.pricing import DiscountKind


class AdminPromotion(BaseModel):
    """
    A promo code document in the admin-managed registry (Firestore).

    The dashboard stores amounts in whole rupees; to_promotion() converts
    them to paise.
    """
    id: Optional[str] = None
    code: str
    description: str = ""
    discountType: DiscountKind
    discountValue: Decimal = Field(..., ge=0)
    minimumOrder: Decimal = Field(Decimal(0), ge=0)
    maximumDiscount: Optional[Decimal] = Field(None, ge=0)
    usageLimit: Optional[int] = Field(None, ge=0)
    usedCount: int = Field(0, ge=0)
    validFrom: datetime
    validUntil: datetime
    active: bool = True
    applicableItems: Optional[List[str]] = None

    @model_validator(mode="after")
    def _percentage_in_range(self) -> "AdminPromotion":
        if self.discountType is DiscountKind.PERCENTAGE and self.discountValue > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class PromotionOut(BaseModel):
    code: str
    kind: DiscountKind
    value: Decimal
    minimumOrder: Optional[int] = None
    maximumDiscount: Optional[int] = None
    applicableItems: List[str] = []

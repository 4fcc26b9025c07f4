# laundry_saas/schemas/promotions/evaluation_schemas.py

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from laundry_saas.core.config import DEFAULT_SERVICE_TYPE


# =========================
# ORDER SNAPSHOT
# =========================
class OrderItem(BaseModel):
    service: str
    quantity: int = Field(1, ge=1)
    unit_price: Decimal = Field(Decimal("0"), ge=0)


class OrderSnapshot(BaseModel):
    """Candidate order used only for rule checks. Never persisted."""

    order_value: Decimal = Decimal("0")
    service_type: str = DEFAULT_SERVICE_TYPE
    items: List[OrderItem] = Field(default_factory=list)
    customer_id: Optional[int] = None
    customer_type: Optional[str] = None
    coupon_applied: bool = False

    model_config = {"frozen": True}


# =========================
# REQUESTS
# =========================
class ApplicableDiscountsRequest(BaseModel):
    order_value: Optional[Decimal] = Field(None, ge=0)
    service_type: Optional[str] = None
    items: Optional[List[OrderItem]] = None
    coupon_applied: bool = False


class ApplyDiscountsRequest(BaseModel):
    customer_id: int
    order: ApplicableDiscountsRequest
    record_usage: bool = False


# =========================
# OUT
# =========================
class ApplicableDiscountOut(BaseModel):
    discount_id: int
    name: str
    description: Optional[str]
    rule_type: str
    rule_index: int
    amount: Decimal
    priority: int
    can_stack_with_coupons: bool
    can_stack_with_other_discounts: bool


class DiscountEvaluationOut(BaseModel):
    order_value: Decimal
    applicable_discounts: List[ApplicableDiscountOut]
    total_discount: Decimal
    final_amount: Decimal

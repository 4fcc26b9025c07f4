# laundry_saas/schemas/promotions/discount_schemas.py

from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, FrozenSet, Optional, List

from laundry_saas.schemas.promotions.discount_rule_schemas import DiscountRule, RuleConditions


class DiscountBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    rules: List[DiscountRule] = Field(..., min_length=1)
    priority: int = 0
    can_stack_with_coupons: bool = True
    can_stack_with_other_discounts: bool = False
    start_date: date
    end_date: date
    usage_limit: int = Field(0, ge=0)
    per_user_limit: int = Field(0, ge=0)


class DiscountCreate(DiscountBase):
    is_active: bool = True


class PartialUpdate(BaseModel):
    """PATCH-style payload: omitted fields are untouched, null only clears nullable columns."""

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"description"})

    @model_validator(mode="after")
    def reject_nulls(self):
        nulled = sorted(
            field for field in self.model_fields_set
            if getattr(self, field) is None and field not in self.nullable_fields
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


class DiscountUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    rules: Optional[List[DiscountRule]] = Field(None, min_length=1)
    priority: Optional[int] = None
    can_stack_with_coupons: Optional[bool] = None
    can_stack_with_other_discounts: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    usage_limit: Optional[int] = Field(None, ge=0)
    per_user_limit: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class DiscountOut(BaseModel):
    id: int
    tenancy_id: int
    name: str
    description: Optional[str]
    rules: List[DiscountRule]
    priority: int

    can_stack_with_coupons: bool
    can_stack_with_other_discounts: bool

    start_date: date
    end_date: date
    usage_limit: int
    per_user_limit: int
    used_count: int
    is_active: bool

    total_savings: Decimal
    total_orders: int

    created_at: datetime
    updated_at: Optional[datetime]
    created_by: Optional[int]
    updated_by: Optional[int]


class DiscountListData(BaseModel):
    total: int
    page: int
    pages: int
    items: List[DiscountOut]


# =========================
# STATS / ANALYTICS
# =========================
class DiscountSummary(BaseModel):
    id: int
    name: str
    is_active: bool
    used_count: int
    total_savings: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class DiscountStatsOut(BaseModel):
    total: int
    active: int
    total_savings: Decimal
    total_orders: int
    recent_discounts: List[DiscountSummary]


class DiscountAnalyticsOut(BaseModel):
    total_usage: int
    total_savings: Decimal
    total_orders: int
    average_discount: Decimal
    usage_rate: Decimal
    is_active: bool
    days_active: int
    days_remaining: int


# =========================
# CUSTOMER DISPLAY
# =========================
class ActiveDiscountOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    type: str
    value: Decimal
    conditions: RuleConditions
    valid_until: date


class ActiveDiscountListData(BaseModel):
    discounts: List[ActiveDiscountOut]

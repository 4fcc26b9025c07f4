# laundry_saas/schemas/promotions/campaign_schemas.py

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel, Field, model_validator

from laundry_saas.models.enums.campaign_status import (
    AudienceTarget,
    BudgetType,
    CampaignStatus,
    CampaignTrigger,
    PromotionType,
)
from laundry_saas.schemas.promotions.discount_schemas import PartialUpdate


# =========================
# NESTED
# =========================
class CampaignPromotion(BaseModel):
    type: PromotionType
    discount_id: Optional[int] = None
    # override of the promotion's own value
    value: Optional[Decimal] = Field(None, gt=0)
    max_discount: Optional[Decimal] = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_reference(self):
        if self.type != PromotionType.DISCOUNT and self.discount_id is not None:
            raise ValueError(f"{self.type.value} promotions cannot reference a discount")
        if self.type == PromotionType.DISCOUNT and self.discount_id is None and self.value is None:
            raise ValueError("DISCOUNT promotions need a discount_id or a flat value")
        return self


class CampaignAudience(BaseModel):
    target: AudienceTarget = AudienceTarget.ALL_USERS
    min_order_count: Optional[int] = Field(None, ge=0)
    max_order_count: Optional[int] = Field(None, ge=0)
    min_total_spent: Optional[Decimal] = Field(None, ge=0)
    max_total_spent: Optional[Decimal] = Field(None, ge=0)


class CampaignBudget(BaseModel):
    type: BudgetType = BudgetType.UNLIMITED
    total_amount: Decimal = Field(Decimal("0"), ge=0)

    @model_validator(mode="after")
    def validate_amount(self):
        if self.type == BudgetType.FIXED_AMOUNT and self.total_amount <= 0:
            raise ValueError("FIXED_AMOUNT budgets need a positive total_amount")
        return self


# =========================
# CREATE / UPDATE
# =========================
class CampaignBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_date: date
    end_date: date
    priority: int = Field(0, ge=0, le=100)
    trigger_type: CampaignTrigger = CampaignTrigger.ORDER_CHECKOUT
    min_order_value: Optional[Decimal] = Field(None, ge=0)
    audience: CampaignAudience = Field(default_factory=CampaignAudience)
    promotions: List[CampaignPromotion] = Field(..., min_length=1)
    budget: CampaignBudget = Field(default_factory=CampaignBudget)
    total_usage_limit: int = Field(0, ge=0)


class CampaignCreate(CampaignBase):
    pass


class GlobalCampaignCreate(CampaignBase):
    # empty means every tenancy
    applicable_tenancy_ids: List[int] = Field(default_factory=list)


class CampaignUpdate(PartialUpdate):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"description", "min_order_value"})

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    priority: Optional[int] = Field(None, ge=0, le=100)
    min_order_value: Optional[Decimal] = Field(None, ge=0)
    audience: Optional[CampaignAudience] = None
    promotions: Optional[List[CampaignPromotion]] = Field(None, min_length=1)
    budget: Optional[CampaignBudget] = None
    total_usage_limit: Optional[int] = Field(None, ge=0)


class CampaignStatusUpdate(BaseModel):
    status: CampaignStatus


# =========================
# OUT
# =========================
class CampaignOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    scope: str
    tenancy_id: Optional[int]
    applicable_tenancy_ids: List[int]

    start_date: date
    end_date: date
    priority: int
    status: str

    approval_required: bool
    approved_by: Optional[int]
    approved_at: Optional[datetime]

    trigger_type: str
    min_order_value: Optional[Decimal]
    audience: CampaignAudience
    promotions: List[CampaignPromotion]
    budget: CampaignBudget
    budget_spent: Decimal
    budget_utilization: Decimal

    total_usage_limit: int
    used_count: int
    conversions: int
    total_savings: Decimal
    total_revenue: Decimal

    created_at: datetime
    updated_at: Optional[datetime]


class CampaignListData(BaseModel):
    total: int
    items: List[CampaignOut]


# =========================
# CUSTOMER
# =========================
class CampaignEvaluateRequest(BaseModel):
    order_total: Decimal = Field(Decimal("0"), ge=0)
    trigger_type: CampaignTrigger = CampaignTrigger.ORDER_CHECKOUT


class CampaignEvaluationOut(BaseModel):
    selected_campaign: Optional[CampaignOut]
    benefit: Decimal
    cost: Decimal
    message: str


class CampaignApplyRequest(BaseModel):
    order_total: Decimal = Field(..., ge=0)


class AppliedPromotionOut(BaseModel):
    type: str
    discount_id: Optional[int]
    discount: Decimal
    description: str


class CampaignApplyOut(BaseModel):
    campaign_id: int
    campaign_name: str
    campaign_scope: str
    total_discount: Decimal
    final_amount: Decimal
    applied_promotions: List[AppliedPromotionOut]
    message: str

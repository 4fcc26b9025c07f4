# laundry_saas/schemas/promotions/discount_rule_schemas.py

import re
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from laundry_saas.models.enums.discount_rule_type import CustomerType

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# =========================
# CONDITIONS
# =========================
class TimeOfDay(BaseModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_hhmm(cls, value: str) -> str:
        if not HHMM_PATTERN.match(value):
            raise ValueError("time must be HH:MM in 24h format")
        return value


class RuleConditions(BaseModel):
    time_of_day: Optional[TimeOfDay] = None
    # 0 = Sunday ... 6 = Saturday
    days_of_week: List[int] = Field(default_factory=list)
    user_type: CustomerType = CustomerType.ALL
    min_order_value: Optional[Decimal] = Field(None, ge=0)
    max_order_value: Optional[Decimal] = Field(None, ge=0)
    applicable_services: List[str] = Field(default_factory=list)
    exclude_services: List[str] = Field(default_factory=list)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("days_of_week entries must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_order_value_range(self):
        if (
            self.min_order_value is not None
            and self.max_order_value is not None
            and self.min_order_value > self.max_order_value
        ):
            raise ValueError("min_order_value cannot exceed max_order_value")
        return self


# =========================
# RULE VARIANTS
# =========================
class _RuleBase(BaseModel):
    conditions: RuleConditions = Field(default_factory=RuleConditions)


class PercentageRule(_RuleBase):
    type: Literal["percentage"]
    value: Decimal = Field(..., gt=0, le=100)
    max_discount: Optional[Decimal] = Field(None, gt=0)


class FixedAmountRule(_RuleBase):
    # "flat" is accepted on input and stored as fixed_amount
    type: Literal["fixed_amount", "flat"]
    value: Decimal = Field(..., gt=0)

    @field_validator("type")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        return "fixed_amount"


class DiscountTier(BaseModel):
    min_quantity: int = Field(0, ge=0)
    min_value: Decimal = Field(Decimal("0"), ge=0)
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)

    @model_validator(mode="after")
    def validate_reward(self):
        if self.discount_percentage <= 0 and self.discount_amount <= 0:
            raise ValueError("tier needs a discount_percentage or a discount_amount")
        return self


class TieredRule(_RuleBase):
    type: Literal["tiered"]
    tiers: List[DiscountTier] = Field(..., min_length=1)


class BuyXGetYRule(_RuleBase):
    type: Literal["buy_x_get_y"]
    buy_quantity: int = Field(..., ge=1)
    get_quantity: int = Field(..., ge=1)
    # empty means every order line qualifies
    services: List[str] = Field(default_factory=list)
    reward_percentage: Decimal = Field(Decimal("100"), gt=0, le=100)


DiscountRule = Annotated[
    Union[PercentageRule, FixedAmountRule, TieredRule, BuyXGetYRule],
    Field(discriminator="type"),
]

_rule_list_adapter = TypeAdapter(List[DiscountRule])


def parse_rules(raw) -> list:
    """Validate stored JSON rules back into their tagged variants."""
    return _rule_list_adapter.validate_python(raw or [])


def dump_rules(rules) -> list[dict]:
    return [rule.model_dump(mode="json") for rule in rules]


def rule_headline_value(rule) -> Decimal:
    """Single number shown to customers for a rule."""
    if isinstance(rule, (PercentageRule, FixedAmountRule)):
        return rule.value
    if isinstance(rule, TieredRule):
        best = max(rule.tiers, key=lambda tier: tier.min_value)
        return best.discount_percentage or best.discount_amount
    return rule.reward_percentage

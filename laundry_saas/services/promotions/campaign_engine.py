# laundry_saas/services/promotions/campaign_engine.py
"""
Campaign eligibility, benefit and best-campaign selection.

Campaign rows are read, never written, here. Discounts referenced by
DISCOUNT promotions are passed in as ``DiscountCandidate`` objects keyed by id.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from laundry_saas.core.config import DEFAULT_LOYALTY_POINTS, DEFAULT_WALLET_CREDIT
from laundry_saas.models.enums.campaign_status import (
    AudienceTarget,
    BudgetType,
    CampaignScope,
    CampaignStatus,
    PromotionType,
)
from laundry_saas.schemas.promotions.campaign_schemas import CampaignPromotion
from laundry_saas.schemas.promotions.discount_rule_schemas import PercentageRule, rule_headline_value
from laundry_saas.services.promotions.discount_engine import DiscountCandidate
from laundry_saas.utils.decimal_utils import ZERO, percent_of, remaining_amount, to_decimal

APPROVAL_BUDGET_THRESHOLD = Decimal("1000")
APPROVAL_OVERRIDE_THRESHOLD = Decimal("50")

ALLOWED_TRANSITIONS = {
    CampaignStatus.DRAFT: {CampaignStatus.ACTIVE, CampaignStatus.CANCELLED},
    CampaignStatus.PENDING_APPROVAL: {CampaignStatus.CANCELLED},
    CampaignStatus.ACTIVE: {CampaignStatus.PAUSED, CampaignStatus.COMPLETED, CampaignStatus.CANCELLED},
    CampaignStatus.PAUSED: {CampaignStatus.ACTIVE, CampaignStatus.COMPLETED, CampaignStatus.CANCELLED},
    CampaignStatus.COMPLETED: set(),
    CampaignStatus.CANCELLED: set(),
}


@dataclass(frozen=True)
class CustomerProfile:
    order_count: int
    total_spent: Decimal


@dataclass(frozen=True)
class CampaignOption:
    campaign: object
    benefit: Decimal
    cost: Decimal


@dataclass(frozen=True)
class AppliedPromotion:
    type: str
    discount_id: Optional[int]
    discount: Decimal
    description: str


# =====================================================
# APPROVAL & STATUS
# =====================================================
def requires_approval(scope: str, budget_total, promotions: Sequence[CampaignPromotion]) -> bool:
    if scope == CampaignScope.GLOBAL.value:
        return True
    if to_decimal(budget_total) > APPROVAL_BUDGET_THRESHOLD:
        return True
    return any(p.value is not None and p.value > APPROVAL_OVERRIDE_THRESHOLD for p in promotions)


def resolve_status_change(campaign, requested: CampaignStatus) -> CampaignStatus:
    """
    Status the campaign actually moves to, or ValueError for an illegal move.
    Activation of an unapproved campaign that needs approval parks it in
    PENDING_APPROVAL.
    """
    current = CampaignStatus(campaign.status)
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise ValueError(f"Cannot move campaign from {current.value} to {requested.value}")

    if (
        requested == CampaignStatus.ACTIVE
        and campaign.approval_required
        and campaign.approved_at is None
    ):
        return CampaignStatus.PENDING_APPROVAL
    return requested


# =====================================================
# ELIGIBILITY
# =====================================================
def is_campaign_live(campaign, today: date) -> bool:
    return (
        campaign.status == CampaignStatus.ACTIVE.value
        and not campaign.is_deleted
        and campaign.start_date <= today <= campaign.end_date
    )


def applies_to_tenancy(campaign, tenancy_id: int) -> bool:
    if campaign.scope == CampaignScope.TENANT.value:
        return campaign.tenancy_id == tenancy_id
    targets = campaign.applicable_tenancy_ids or []
    return not targets or tenancy_id in targets


def is_customer_eligible(campaign, customer: CustomerProfile, order_total) -> bool:
    if campaign.total_usage_limit > 0 and campaign.used_count >= campaign.total_usage_limit:
        return False

    if (
        campaign.budget_type != BudgetType.UNLIMITED.value
        and to_decimal(campaign.budget_spent) >= to_decimal(campaign.budget_total)
    ):
        return False

    if campaign.audience_target == AudienceTarget.NEW_USERS.value and customer.order_count > 0:
        return False
    if campaign.audience_target == AudienceTarget.EXISTING_USERS.value and customer.order_count == 0:
        return False

    if campaign.min_order_count is not None and customer.order_count < campaign.min_order_count:
        return False
    if campaign.max_order_count is not None and customer.order_count > campaign.max_order_count:
        return False

    spent = to_decimal(customer.total_spent)
    if campaign.min_total_spent is not None and spent < to_decimal(campaign.min_total_spent):
        return False
    if campaign.max_total_spent is not None and spent > to_decimal(campaign.max_total_spent):
        return False

    if campaign.min_order_value is not None and to_decimal(order_total) < to_decimal(campaign.min_order_value):
        return False

    return True


# =====================================================
# BENEFIT
# =====================================================
def parse_promotions(campaign) -> list[CampaignPromotion]:
    return [CampaignPromotion.model_validate(p) for p in campaign.promotions or []]


def _discount_promotion_amount(
    promotion: CampaignPromotion,
    discounts: Mapping[int, DiscountCandidate],
    order_total: Decimal,
) -> tuple[Decimal, str]:
    if promotion.discount_id is None:
        # platform-funded flat amount
        amount = to_decimal(promotion.value)
        label = f"{amount} off"
    else:
        discount = discounts.get(promotion.discount_id)
        rule = discount.rules[0] if discount and discount.rules else None
        if rule is None:
            return ZERO, "Discount unavailable"

        value = promotion.value if promotion.value is not None else rule_headline_value(rule)
        if isinstance(rule, PercentageRule):
            amount = percent_of(order_total, value)
            label = f"{to_decimal(value)}% off"
        else:
            amount = to_decimal(value)
            label = f"{amount} off"

    if promotion.max_discount is not None:
        amount = min(amount, to_decimal(promotion.max_discount))
    return to_decimal(amount), label


def calculate_benefit(
    campaign,
    discounts: Mapping[int, DiscountCandidate],
    order_total,
) -> Decimal:
    order_total = to_decimal(order_total)
    benefit = ZERO

    for promotion in parse_promotions(campaign):
        if promotion.type == PromotionType.DISCOUNT:
            amount, _ = _discount_promotion_amount(promotion, discounts, order_total)
            benefit += amount
        elif promotion.type == PromotionType.WALLET_CREDIT:
            benefit += to_decimal(promotion.value if promotion.value is not None else DEFAULT_WALLET_CREDIT)

    return to_decimal(benefit)


def calculate_cost(campaign, discounts: Mapping[int, DiscountCandidate], order_total) -> Decimal:
    # platform cost currently mirrors what the customer gains
    return calculate_benefit(campaign, discounts, order_total)


# =====================================================
# SELECTION
# =====================================================
def select_best_campaign(options: Sequence[CampaignOption]) -> Optional[CampaignOption]:
    """TENANT before GLOBAL, then priority, then customer benefit, then lowest cost."""
    if not options:
        return None

    return min(
        options,
        key=lambda o: (
            0 if o.campaign.scope == CampaignScope.TENANT.value else 1,
            -o.campaign.priority,
            -o.benefit,
            o.cost,
            o.campaign.id,
        ),
    )


# =====================================================
# APPLY
# =====================================================
def apply_campaign_promotions(
    campaign,
    discounts: Mapping[int, DiscountCandidate],
    order_total,
) -> tuple[Decimal, list[AppliedPromotion]]:
    order_total = to_decimal(order_total)
    applied: list[AppliedPromotion] = []
    total = ZERO

    for promotion in parse_promotions(campaign):
        if promotion.type == PromotionType.DISCOUNT:
            amount, label = _discount_promotion_amount(promotion, discounts, order_total)
            total += amount
            applied.append(AppliedPromotion(promotion.type.value, promotion.discount_id, amount, label))

        elif promotion.type == PromotionType.WALLET_CREDIT:
            credit = to_decimal(promotion.value if promotion.value is not None else DEFAULT_WALLET_CREDIT)
            applied.append(AppliedPromotion(promotion.type.value, None, ZERO, f"{credit} wallet credit"))

        elif promotion.type == PromotionType.LOYALTY_POINTS:
            points = int(promotion.value) if promotion.value is not None else DEFAULT_LOYALTY_POINTS
            applied.append(AppliedPromotion(promotion.type.value, None, ZERO, f"{points} loyalty points"))

    total = min(to_decimal(total), order_total)
    return total, applied


def final_amount(order_total, total_discount) -> Decimal:
    return remaining_amount(to_decimal(order_total), total_discount)

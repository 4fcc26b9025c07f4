# laundry_saas/services/promotions/discount_engine.py
"""
Discount applicability and stacking evaluation.

Everything in this module is pure: callers load a tenancy's discounts, turn
them into ``DiscountCandidate`` objects and pass the tenancy id and the
current time explicitly. Nothing here reads or writes the database.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from laundry_saas.models.enums.discount_rule_type import CustomerType
from laundry_saas.models.promotions.discount_models import Discount
from laundry_saas.schemas.promotions.discount_rule_schemas import (
    BuyXGetYRule,
    FixedAmountRule,
    PercentageRule,
    RuleConditions,
    TieredRule,
    parse_rules,
)
from laundry_saas.schemas.promotions.evaluation_schemas import OrderSnapshot
from laundry_saas.utils.datetime_utils import sunday_based_weekday
from laundry_saas.utils.decimal_utils import ZERO, percent_of, remaining_amount, to_decimal


# =====================================================
# VALUE OBJECTS
# =====================================================
@dataclass(frozen=True)
class DiscountCandidate:
    id: int
    tenancy_id: int
    name: str
    description: Optional[str]
    priority: int
    rules: tuple
    start_date: date
    end_date: date
    is_active: bool = True
    usage_limit: int = 0
    used_count: int = 0
    can_stack_with_coupons: bool = True
    can_stack_with_other_discounts: bool = False

    @classmethod
    def from_model(cls, discount: Discount) -> "DiscountCandidate":
        return cls(
            id=discount.id,
            tenancy_id=discount.tenancy_id,
            name=discount.name,
            description=discount.description,
            priority=discount.priority or 0,
            rules=tuple(parse_rules(discount.rules)),
            start_date=discount.start_date,
            end_date=discount.end_date,
            is_active=discount.is_active,
            usage_limit=discount.usage_limit or 0,
            used_count=discount.used_count or 0,
            can_stack_with_coupons=discount.can_stack_with_coupons,
            can_stack_with_other_discounts=discount.can_stack_with_other_discounts,
        )


@dataclass(frozen=True)
class AppliedDiscount:
    discount: DiscountCandidate
    rule: object
    rule_index: int
    amount: Decimal


@dataclass(frozen=True)
class DiscountEvaluation:
    order_value: Decimal
    applied: tuple
    total_discount: Decimal
    final_amount: Decimal


# =====================================================
# ELIGIBILITY GATE
# =====================================================
def is_discount_eligible(
    discount: DiscountCandidate,
    *,
    tenancy_id: int,
    today: date,
    coupon_applied: bool = False,
) -> bool:
    if discount.tenancy_id != tenancy_id or not discount.is_active:
        return False
    if not (discount.start_date <= today <= discount.end_date):
        return False
    if discount.usage_limit > 0 and discount.used_count >= discount.usage_limit:
        return False
    if coupon_applied and not discount.can_stack_with_coupons:
        return False
    return True


# =====================================================
# CONDITIONS
# =====================================================
def order_services(order: OrderSnapshot) -> set[str]:
    if order.items:
        return {item.service for item in order.items}
    return {order.service_type}


def _within_time_of_day(conditions: RuleConditions, now: datetime) -> bool:
    window = conditions.time_of_day
    if window is None:
        return True

    current = now.strftime("%H:%M")
    if window.start_time <= window.end_time:
        return window.start_time <= current <= window.end_time
    # overnight window, e.g. 22:00 -> 06:00
    return current >= window.start_time or current <= window.end_time


def conditions_match(conditions: RuleConditions, order: OrderSnapshot, now: datetime) -> bool:
    if not _within_time_of_day(conditions, now):
        return False

    if conditions.days_of_week and sunday_based_weekday(now) not in conditions.days_of_week:
        return False

    if conditions.user_type != CustomerType.ALL:
        if order.customer_type != conditions.user_type.value:
            return False

    order_value = to_decimal(order.order_value)
    if conditions.min_order_value is not None and order_value < conditions.min_order_value:
        return False
    if conditions.max_order_value is not None and order_value > conditions.max_order_value:
        return False

    services = order_services(order)
    if conditions.applicable_services and not services & set(conditions.applicable_services):
        return False
    if conditions.exclude_services and services & set(conditions.exclude_services):
        return False

    return True


# =====================================================
# AMOUNTS
# =====================================================
def _tiered_amount(rule: TieredRule, order: OrderSnapshot) -> Decimal:
    order_value = to_decimal(order.order_value)
    # min_quantity counts order lines, not units
    line_count = len(order.items)

    reachable = [
        tier for tier in rule.tiers
        if order_value >= tier.min_value and line_count >= tier.min_quantity
    ]
    if not reachable:
        return ZERO

    tier = max(reachable, key=lambda t: t.min_value)
    if tier.discount_percentage > 0:
        return percent_of(order_value, tier.discount_percentage)
    return to_decimal(min(tier.discount_amount, order_value))


def _buy_x_get_y_amount(rule: BuyXGetYRule, order: OrderSnapshot) -> Decimal:
    bundle = rule.buy_quantity + rule.get_quantity
    amount = ZERO

    for item in order.items:
        if rule.services and item.service not in rule.services:
            continue
        free_units = (item.quantity // bundle) * rule.get_quantity
        if free_units:
            amount += percent_of(item.unit_price * free_units, rule.reward_percentage)

    return to_decimal(min(amount, to_decimal(order.order_value)))


def calculate_rule_amount(rule, order: OrderSnapshot) -> Decimal:
    order_value = to_decimal(order.order_value)

    if isinstance(rule, PercentageRule):
        amount = percent_of(order_value, rule.value)
        if rule.max_discount is not None:
            amount = min(amount, to_decimal(rule.max_discount))
        return to_decimal(amount)

    if isinstance(rule, FixedAmountRule):
        return to_decimal(min(rule.value, order_value))

    if isinstance(rule, TieredRule):
        return _tiered_amount(rule, order)

    if isinstance(rule, BuyXGetYRule):
        return _buy_x_get_y_amount(rule, order)

    raise ValueError(f"Unsupported discount rule {type(rule).__name__}")


def first_matching_rule(
    discount: DiscountCandidate,
    order: OrderSnapshot,
    now: datetime,
) -> Optional[AppliedDiscount]:
    """Rules are tried in declaration order; the first whose conditions hold wins, even at a zero amount."""
    for index, rule in enumerate(discount.rules):
        if conditions_match(rule.conditions, order, now):
            amount = calculate_rule_amount(rule, order)
            return AppliedDiscount(discount=discount, rule=rule, rule_index=index, amount=amount)
    return None


# =====================================================
# EVALUATION
# =====================================================
def evaluate_discounts(
    discounts: Sequence[DiscountCandidate],
    order: OrderSnapshot,
    *,
    tenancy_id: int,
    now: datetime,
) -> DiscountEvaluation:
    order_value = to_decimal(order.order_value)
    today = now.date()

    # stable: equal priorities keep their incoming order
    ordered = sorted(discounts, key=lambda d: -d.priority)

    applied: list[AppliedDiscount] = []
    running_total = ZERO

    for discount in ordered:
        if not is_discount_eligible(
            discount,
            tenancy_id=tenancy_id,
            today=today,
            coupon_applied=order.coupon_applied,
        ):
            continue

        match = first_matching_rule(discount, order, now)
        if match is None:
            continue

        applied.append(match)
        running_total += match.amount

        if not discount.can_stack_with_other_discounts:
            break

    total_discount = to_decimal(running_total)
    return DiscountEvaluation(
        order_value=order_value,
        applied=tuple(applied),
        total_discount=total_discount,
        final_amount=remaining_amount(order_value, total_discount),
    )

# laundry_saas/services/promotions/customer_discount_service.py

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.schemas.promotions.discount_rule_schemas import RuleConditions, rule_headline_value
from laundry_saas.schemas.promotions.discount_schemas import ActiveDiscountOut, ActiveDiscountListData
from laundry_saas.schemas.promotions.evaluation_schemas import (
    ApplicableDiscountsRequest,
    DiscountEvaluationOut,
)
from laundry_saas.services.promotions.discount_engine import evaluate_discounts
from laundry_saas.services.promotions.discount_service import (
    build_order_snapshot,
    fetch_live_discounts,
    map_evaluation,
)
from laundry_saas.core.exceptions import AppException
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.utils.datetime_utils import promotions_now
from laundry_saas.utils.tenancy_context import TenancyContext
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)


# =====================================================
# APPLICABLE DISCOUNTS FOR A CANDIDATE ORDER
# =====================================================
async def get_applicable_discounts(
    db: AsyncSession,
    ctx: TenancyContext,
    payload: ApplicableDiscountsRequest,
) -> DiscountEvaluationOut:
    now = promotions_now()

    try:
        candidates = await fetch_live_discounts(db, ctx.tenancy_id, now.date())
    except SQLAlchemyError:
        logger.exception("Loading discounts failed", extra={"tenancy_id": ctx.tenancy_id})
        raise AppException(
            500,
            "Failed to fetch applicable discounts",
            ErrorCode.DISCOUNT_FETCH_FAILED,
        )

    order = build_order_snapshot(payload, ctx.user)
    evaluation = evaluate_discounts(candidates, order, tenancy_id=ctx.tenancy_id, now=now)

    logger.info(
        "Applicable discounts evaluated",
        extra={
            "tenancy_id": ctx.tenancy_id,
            "customer_id": ctx.user.id,
            "candidates": len(candidates),
            "applied": len(evaluation.applied),
        },
    )
    return map_evaluation(evaluation)


# =====================================================
# ACTIVE DISCOUNTS (DISPLAY)
# =====================================================
async def list_active_discounts(db: AsyncSession, ctx: TenancyContext) -> ActiveDiscountListData:
    today = promotions_now().date()

    try:
        candidates = await fetch_live_discounts(db, ctx.tenancy_id, today)
    except SQLAlchemyError:
        logger.exception("Loading discounts failed", extra={"tenancy_id": ctx.tenancy_id})
        raise AppException(
            500,
            "Failed to fetch active discounts",
            ErrorCode.DISCOUNT_FETCH_FAILED,
        )

    items = []
    for discount in candidates:
        # customers are shown the headline rule only
        rule = discount.rules[0] if discount.rules else None
        items.append(
            ActiveDiscountOut(
                id=discount.id,
                name=discount.name,
                description=discount.description,
                type=rule.type if rule else "percentage",
                value=rule_headline_value(rule) if rule else 0,
                conditions=rule.conditions if rule else RuleConditions(),
                valid_until=discount.end_date,
            )
        )

    return ActiveDiscountListData(discounts=items)

# laundry_saas/services/promotions/discount_service.py

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update, case, or_

from laundry_saas.models.promotions.discount_models import Discount
from laundry_saas.models.users.user_models import User
from laundry_saas.models.enums.discount_rule_type import CustomerType
from laundry_saas.schemas.promotions.discount_schemas import (
    DiscountCreate,
    DiscountUpdate,
    DiscountOut,
    DiscountListData,
    DiscountStatsOut,
    DiscountSummary,
    DiscountAnalyticsOut,
)
from laundry_saas.schemas.promotions.discount_rule_schemas import parse_rules, dump_rules
from laundry_saas.schemas.promotions.evaluation_schemas import (
    ApplicableDiscountsRequest,
    ApplicableDiscountOut,
    ApplyDiscountsRequest,
    DiscountEvaluationOut,
    OrderSnapshot,
)
from laundry_saas.services.promotions.discount_engine import (
    DiscountCandidate,
    DiscountEvaluation,
    evaluate_discounts,
)
from laundry_saas.core.config import DEFAULT_SERVICE_TYPE
from laundry_saas.core.exceptions import AppException, ConflictError, NotFoundError
from laundry_saas.utils.response import page_count
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.constants.activity_codes import ActivityCode
from laundry_saas.constants.roles import Role
from laundry_saas.utils.activity_helpers import emit_user_activity
from laundry_saas.utils.datetime_utils import promotions_now
from laundry_saas.utils.decimal_utils import ZERO, to_decimal
from laundry_saas.utils.tenancy_context import TenancyContext
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)


# ---------------- MAPPERS ----------------
def _map_discount(discount: Discount) -> DiscountOut:
    return DiscountOut(
        id=discount.id,
        tenancy_id=discount.tenancy_id,
        name=discount.name,
        description=discount.description,
        rules=parse_rules(discount.rules),
        priority=discount.priority,

        can_stack_with_coupons=discount.can_stack_with_coupons,
        can_stack_with_other_discounts=discount.can_stack_with_other_discounts,

        start_date=discount.start_date,
        end_date=discount.end_date,
        usage_limit=discount.usage_limit,
        per_user_limit=discount.per_user_limit,
        used_count=discount.used_count,
        is_active=discount.is_active,

        total_savings=to_decimal(discount.total_savings),
        total_orders=discount.total_orders,

        created_at=discount.created_at,
        updated_at=discount.updated_at,
        created_by=discount.created_by_id,
        updated_by=discount.updated_by_id,
    )


def map_evaluation(evaluation: DiscountEvaluation) -> DiscountEvaluationOut:
    return DiscountEvaluationOut(
        order_value=evaluation.order_value,
        applicable_discounts=[
            ApplicableDiscountOut(
                discount_id=item.discount.id,
                name=item.discount.name,
                description=item.discount.description,
                rule_type=item.rule.type,
                rule_index=item.rule_index,
                amount=item.amount,
                priority=item.discount.priority,
                can_stack_with_coupons=item.discount.can_stack_with_coupons,
                can_stack_with_other_discounts=item.discount.can_stack_with_other_discounts,
            )
            for item in evaluation.applied
        ],
        total_discount=evaluation.total_discount,
        final_amount=evaluation.final_amount,
    )


# ---------------- HELPERS ----------------
def _validate_date_range(start_date: date, end_date: date):
    if start_date >= end_date:
        raise AppException(
            400,
            "End date must be after start date",
            ErrorCode.DISCOUNT_INVALID_RANGE,
        )


async def _get_tenancy_discount(db: AsyncSession, tenancy_id: int, discount_id: int) -> Discount:
    discount = await db.scalar(
        select(Discount).where(
            Discount.id == discount_id,
            Discount.tenancy_id == tenancy_id,
        )
    )
    if not discount:
        raise NotFoundError("Discount", ErrorCode.DISCOUNT_NOT_FOUND)
    return discount


def resolve_customer_type(customer: User) -> str:
    if customer.customer_segment in {CustomerType.VIP.value, CustomerType.SENIOR.value}:
        return customer.customer_segment
    if (customer.order_count or 0) == 0:
        return CustomerType.NEW.value
    return CustomerType.RETURNING.value


def build_order_snapshot(payload: ApplicableDiscountsRequest, customer: User) -> OrderSnapshot:
    return OrderSnapshot(
        order_value=to_decimal(payload.order_value),
        service_type=payload.service_type or DEFAULT_SERVICE_TYPE,
        items=payload.items or [],
        customer_id=customer.id,
        customer_type=resolve_customer_type(customer),
        coupon_applied=payload.coupon_applied,
    )


async def fetch_live_discounts(db: AsyncSession, tenancy_id: int, today: date) -> list[DiscountCandidate]:
    """Active, in-window discounts of one tenancy, highest priority first."""
    result = await db.execute(
        select(Discount)
        .where(
            Discount.tenancy_id == tenancy_id,
            Discount.is_active.is_(True),
            Discount.start_date <= today,
            Discount.end_date >= today,
        )
        .order_by(Discount.priority.desc(), Discount.id.asc())
    )
    return [DiscountCandidate.from_model(d) for d in result.scalars().all()]


# ---------------- CREATE ----------------
async def create_discount(db: AsyncSession, ctx: TenancyContext, payload: DiscountCreate) -> DiscountOut:
    _validate_date_range(payload.start_date, payload.end_date)

    data = payload.model_dump(exclude={"rules"})
    discount = Discount(
        **data,
        rules=dump_rules(payload.rules),
        tenancy_id=ctx.tenancy_id,
        created_by_id=ctx.user.id,
        updated_by_id=ctx.user.id,
    )
    db.add(discount)
    await db.flush()

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.CREATE_DISCOUNT,
        target_name=discount.name,
    )

    await db.commit()
    await db.refresh(discount)

    logger.info("Discount created", extra={"discount_id": discount.id, "tenancy_id": ctx.tenancy_id})
    return _map_discount(discount)


# ---------------- GET ----------------
async def get_discount(db: AsyncSession, tenancy_id: int, discount_id: int) -> DiscountOut:
    discount = await _get_tenancy_discount(db, tenancy_id, discount_id)
    return _map_discount(discount)


# ---------------- LIST ----------------
async def list_discounts(
    *,
    db: AsyncSession,
    tenancy_id: int,
    search: str | None,
    status: str | None,
    rule_type: str | None,
    page: int,
    page_size: int,
) -> DiscountListData:
    query = select(Discount).where(Discount.tenancy_id == tenancy_id)

    if search:
        query = query.where(
            or_(
                Discount.name.icontains(search, autoescape=True),
                Discount.description.icontains(search, autoescape=True),
            )
        )
    if status:
        query = query.where(Discount.is_active.is_(status == "active"))
    if rule_type:
        query = query.where(
            Discount.rule_types.contains(f",{rule_type},", autoescape=True)
        )

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    result = await db.execute(
        query.order_by(Discount.priority.desc(), Discount.created_at.desc(), Discount.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return DiscountListData(
        total=total,
        page=page,
        pages=page_count(total, page_size),
        items=[_map_discount(d) for d in result.scalars().all()],
    )


# ---------------- UPDATE ----------------
async def update_discount(
    db: AsyncSession,
    ctx: TenancyContext,
    discount_id: int,
    payload: DiscountUpdate,
) -> DiscountOut:
    discount = await _get_tenancy_discount(db, ctx.tenancy_id, discount_id)

    data = payload.model_dump(exclude_unset=True, exclude={"rules"})
    if payload.rules is not None:
        data["rules"] = dump_rules(payload.rules)
    if not data:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    _validate_date_range(
        data.get("start_date", discount.start_date),
        data.get("end_date", discount.end_date),
    )

    for field, value in data.items():
        setattr(discount, field, value)
    discount.updated_by_id = ctx.user.id

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.UPDATE_DISCOUNT,
        target_name=discount.name,
        changes=", ".join(data.keys()),
    )

    await db.commit()
    await db.refresh(discount)
    return _map_discount(discount)


# ---------------- DELETE ----------------
async def delete_discount(db: AsyncSession, ctx: TenancyContext, discount_id: int) -> None:
    discount = await _get_tenancy_discount(db, ctx.tenancy_id, discount_id)

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.DELETE_DISCOUNT,
        target_name=discount.name,
    )

    await db.delete(discount)
    await db.commit()


# ---------------- TOGGLE ----------------
async def toggle_discount_status(db: AsyncSession, ctx: TenancyContext, discount_id: int) -> DiscountOut:
    discount = await _get_tenancy_discount(db, ctx.tenancy_id, discount_id)

    discount.is_active = not discount.is_active
    discount.updated_by_id = ctx.user.id

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.TOGGLE_DISCOUNT,
        target_name=discount.name,
        state="activated" if discount.is_active else "deactivated",
    )

    await db.commit()
    await db.refresh(discount)
    return _map_discount(discount)


# ---------------- ANALYTICS ----------------
async def get_discount_analytics(
    db: AsyncSession,
    tenancy_id: int,
    discount_id: int,
) -> DiscountAnalyticsOut:
    discount = await _get_tenancy_discount(db, tenancy_id, discount_id)
    today = promotions_now().date()

    total_savings = to_decimal(discount.total_savings)
    average = (
        to_decimal(total_savings / discount.total_orders)
        if discount.total_orders > 0
        else ZERO
    )
    usage_rate = (
        to_decimal(discount.used_count * 100 / discount.usage_limit)
        if discount.usage_limit > 0
        else ZERO
    )

    return DiscountAnalyticsOut(
        total_usage=discount.used_count,
        total_savings=total_savings,
        total_orders=discount.total_orders,
        average_discount=average,
        usage_rate=usage_rate,
        is_active=discount.is_active,
        days_active=(today - discount.start_date).days,
        days_remaining=(discount.end_date - today).days,
    )


# ---------------- STATS ----------------
async def get_discount_stats(db: AsyncSession, tenancy_id: int) -> DiscountStatsOut:
    row = (
        await db.execute(
            select(
                func.count(Discount.id),
                func.coalesce(func.sum(case((Discount.is_active.is_(True), 1), else_=0)), 0),
                func.coalesce(func.sum(Discount.total_savings), 0),
                func.coalesce(func.sum(Discount.total_orders), 0),
            ).where(Discount.tenancy_id == tenancy_id)
        )
    ).one()

    recent = await db.execute(
        select(Discount)
        .where(Discount.tenancy_id == tenancy_id)
        .order_by(Discount.created_at.desc(), Discount.id.desc())
        .limit(5)
    )

    return DiscountStatsOut(
        total=row[0],
        active=row[1],
        total_savings=to_decimal(row[2]),
        total_orders=row[3],
        recent_discounts=[
            DiscountSummary(
                id=d.id,
                name=d.name,
                is_active=d.is_active,
                used_count=d.used_count,
                total_savings=to_decimal(d.total_savings),
                created_at=d.created_at,
            )
            for d in recent.scalars().all()
        ],
    )


# ---------------- APPLY ----------------
async def record_discount_usage(db: AsyncSession, evaluation: DiscountEvaluation) -> None:
    """
    Counters are bumped in SQL so concurrent checkouts never lose an increment.

    The usage limit is re-checked in the same statement; a discount exhausted
    since evaluation raises 409 and the caller's transaction is not committed.
    """
    for item in evaluation.applied:
        result = await db.execute(
            update(Discount)
            .where(
                Discount.id == item.discount.id,
                or_(Discount.usage_limit == 0, Discount.used_count < Discount.usage_limit),
            )
            .values(
                used_count=Discount.used_count + 1,
                total_orders=Discount.total_orders + 1,
                total_savings=Discount.total_savings + item.amount,
            )
        )
        if result.rowcount == 0:
            logger.warning("Discount usage limit reached", extra={"discount_id": item.discount.id})
            raise ConflictError(
                "Discount usage limit reached",
                ErrorCode.DISCOUNT_LIMIT_REACHED,
                details={"discount_id": item.discount.id},
            )


async def apply_discounts_to_order(
    db: AsyncSession,
    ctx: TenancyContext,
    payload: ApplyDiscountsRequest,
) -> DiscountEvaluationOut:
    customer = await db.scalar(
        select(User).where(
            User.id == payload.customer_id,
            User.tenancy_id == ctx.tenancy_id,
            User.role == Role.CUSTOMER.value,
        )
    )
    if not customer:
        raise NotFoundError("Customer", ErrorCode.NOT_FOUND)

    now = promotions_now()
    candidates = await fetch_live_discounts(db, ctx.tenancy_id, now.date())
    order = build_order_snapshot(payload.order, customer)
    evaluation = evaluate_discounts(candidates, order, tenancy_id=ctx.tenancy_id, now=now)

    if payload.record_usage and evaluation.applied:
        await record_discount_usage(db, evaluation)
        await emit_user_activity(
            db,
            ctx.user,
            ActivityCode.APPLY_DISCOUNTS,
            count=len(evaluation.applied),
            total_discount=evaluation.total_discount,
            customer_id=customer.id,
        )
        await db.commit()

    logger.info(
        "Discounts applied",
        extra={
            "tenancy_id": ctx.tenancy_id,
            "customer_id": customer.id,
            "applied": len(evaluation.applied),
            "recorded": payload.record_usage,
        },
    )
    return map_evaluation(evaluation)

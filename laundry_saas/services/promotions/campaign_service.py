# laundry_saas/services/promotions/campaign_service.py

from datetime import date, datetime, timezone

from sqlalchemy import select, func, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.models.promotions.campaign_models import Campaign
from laundry_saas.models.tenancy.tenancy_models import Tenancy
from laundry_saas.models.users.user_models import User
from laundry_saas.models.enums.campaign_status import (
    BudgetType,
    CampaignScope,
    CampaignStatus,
    PromotionType,
)
from laundry_saas.schemas.promotions.campaign_schemas import (
    AppliedPromotionOut,
    CampaignApplyOut,
    CampaignApplyRequest,
    CampaignAudience,
    CampaignBase,
    CampaignBudget,
    CampaignCreate,
    CampaignEvaluateRequest,
    CampaignEvaluationOut,
    CampaignListData,
    CampaignOut,
    CampaignPromotion,
    CampaignStatusUpdate,
    CampaignUpdate,
    GlobalCampaignCreate,
)
from laundry_saas.services.promotions.campaign_engine import (
    CampaignOption,
    CustomerProfile,
    applies_to_tenancy,
    apply_campaign_promotions,
    calculate_benefit,
    calculate_cost,
    final_amount,
    is_campaign_live,
    is_customer_eligible,
    parse_promotions,
    requires_approval,
    resolve_status_change,
    select_best_campaign,
)
from laundry_saas.services.promotions.discount_service import fetch_live_discounts
from laundry_saas.core.exceptions import AppException, NotFoundError
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.constants.activity_codes import ActivityCode
from laundry_saas.utils.activity_helpers import emit_user_activity
from laundry_saas.utils.datetime_utils import promotions_now
from laundry_saas.utils.decimal_utils import ZERO, HUNDRED, to_decimal
from laundry_saas.utils.tenancy_context import TenancyContext
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)

EDITABLE_STATUSES = {CampaignStatus.DRAFT.value, CampaignStatus.PAUSED.value}


# ---------------- MAPPERS ----------------
def _map_campaign(campaign: Campaign) -> CampaignOut:
    budget_total = to_decimal(campaign.budget_total)
    budget_spent = to_decimal(campaign.budget_spent)
    utilization = (
        to_decimal(budget_spent * HUNDRED / budget_total)
        if campaign.budget_type != BudgetType.UNLIMITED.value and budget_total > 0
        else ZERO
    )

    return CampaignOut(
        id=campaign.id,
        name=campaign.name,
        description=campaign.description,
        scope=campaign.scope,
        tenancy_id=campaign.tenancy_id,
        applicable_tenancy_ids=campaign.applicable_tenancy_ids or [],

        start_date=campaign.start_date,
        end_date=campaign.end_date,
        priority=campaign.priority,
        status=campaign.status,

        approval_required=campaign.approval_required,
        approved_by=campaign.approved_by_id,
        approved_at=campaign.approved_at,

        trigger_type=campaign.trigger_type,
        min_order_value=campaign.min_order_value,
        audience=CampaignAudience(
            target=campaign.audience_target,
            min_order_count=campaign.min_order_count,
            max_order_count=campaign.max_order_count,
            min_total_spent=campaign.min_total_spent,
            max_total_spent=campaign.max_total_spent,
        ),
        promotions=parse_promotions(campaign),
        budget=CampaignBudget(type=campaign.budget_type, total_amount=budget_total),
        budget_spent=budget_spent,
        budget_utilization=utilization,

        total_usage_limit=campaign.total_usage_limit,
        used_count=campaign.used_count,
        conversions=campaign.conversions,
        total_savings=to_decimal(campaign.total_savings),
        total_revenue=to_decimal(campaign.total_revenue),

        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
    )


def _campaign_columns(payload: CampaignBase) -> dict:
    """Flatten the nested request blocks onto campaign columns."""
    return {
        "name": payload.name,
        "description": payload.description,
        "start_date": payload.start_date,
        "end_date": payload.end_date,
        "priority": payload.priority,
        "trigger_type": payload.trigger_type.value,
        "min_order_value": payload.min_order_value,
        "total_usage_limit": payload.total_usage_limit,
        **_audience_columns(payload.audience),
        **_budget_columns(payload.budget),
        "promotions": _dump_promotions(payload.promotions),
    }


def _audience_columns(audience: CampaignAudience) -> dict:
    return {
        "audience_target": audience.target.value,
        "min_order_count": audience.min_order_count,
        "max_order_count": audience.max_order_count,
        "min_total_spent": audience.min_total_spent,
        "max_total_spent": audience.max_total_spent,
    }


def _budget_columns(budget: CampaignBudget) -> dict:
    return {"budget_type": budget.type.value, "budget_total": budget.total_amount}


def _dump_promotions(promotions: list[CampaignPromotion]) -> list[dict]:
    return [p.model_dump(mode="json") for p in promotions]


# ---------------- HELPERS ----------------
def _validate_date_range(start_date: date, end_date: date):
    if start_date >= end_date:
        raise AppException(
            400,
            "End date must be after start date",
            ErrorCode.CAMPAIGN_INVALID_RANGE,
        )


async def _validate_promotions(
    db: AsyncSession,
    promotions: list[CampaignPromotion],
    tenancy_id: int | None,
):
    """
    GLOBAL campaigns cannot reach into a tenancy's discounts, so their DISCOUNT
    promotions must be flat values. TENANT campaigns may only reference their
    own live discounts.
    """
    referenced = {p.discount_id for p in promotions if p.type == PromotionType.DISCOUNT and p.discount_id}

    if tenancy_id is None:
        if referenced:
            raise AppException(
                400,
                "Global campaigns cannot reference tenancy discounts",
                ErrorCode.CAMPAIGN_INVALID_PROMOTION,
            )
        return

    if not referenced:
        return

    live = await fetch_live_discounts(db, tenancy_id, promotions_now().date())
    missing = referenced - {d.id for d in live}
    if missing:
        raise AppException(
            400,
            "Referenced discounts must exist and be active",
            ErrorCode.CAMPAIGN_INVALID_PROMOTION,
            details={"discount_ids": sorted(missing)},
        )


async def _get_tenant_campaign(db: AsyncSession, tenancy_id: int, campaign_id: int) -> Campaign:
    campaign = await db.scalar(
        select(Campaign).where(
            Campaign.id == campaign_id,
            Campaign.scope == CampaignScope.TENANT.value,
            Campaign.tenancy_id == tenancy_id,
            Campaign.is_deleted.is_(False),
        )
    )
    if not campaign:
        raise NotFoundError("Campaign", ErrorCode.CAMPAIGN_NOT_FOUND)
    return campaign


async def _get_campaign(db: AsyncSession, campaign_id: int) -> Campaign:
    campaign = await db.scalar(
        select(Campaign).where(
            Campaign.id == campaign_id,
            Campaign.is_deleted.is_(False),
        )
    )
    if not campaign:
        raise NotFoundError("Campaign", ErrorCode.CAMPAIGN_NOT_FOUND)
    return campaign


def _customer_profile(user: User) -> CustomerProfile:
    return CustomerProfile(
        order_count=user.order_count or 0,
        total_spent=to_decimal(user.total_spent),
    )


async def _discounts_by_id(db: AsyncSession, tenancy_id: int, today: date) -> dict:
    return {d.id: d for d in await fetch_live_discounts(db, tenancy_id, today)}


async def _list_campaigns(db: AsyncSession, query, status: str | None) -> CampaignListData:
    if status:
        query = query.where(Campaign.status == status)

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
    result = await db.execute(
        query.order_by(Campaign.priority.desc(), Campaign.created_at.desc(), Campaign.id.desc())
    )
    return CampaignListData(
        total=total,
        items=[_map_campaign(c) for c in result.scalars().all()],
    )


# =====================================================
# TENANT CAMPAIGNS (ADMIN)
# =====================================================
async def create_tenant_campaign(db: AsyncSession, ctx: TenancyContext, payload: CampaignCreate) -> CampaignOut:
    _validate_date_range(payload.start_date, payload.end_date)
    await _validate_promotions(db, payload.promotions, ctx.tenancy_id)

    campaign = Campaign(
        **_campaign_columns(payload),
        scope=CampaignScope.TENANT.value,
        tenancy_id=ctx.tenancy_id,
        applicable_tenancy_ids=[],
        status=CampaignStatus.DRAFT.value,
        approval_required=requires_approval(
            CampaignScope.TENANT.value,
            payload.budget.total_amount,
            payload.promotions,
        ),
        created_by_id=ctx.user.id,
        updated_by_id=ctx.user.id,
    )
    db.add(campaign)
    await db.flush()

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.CREATE_CAMPAIGN,
        target_name=campaign.name,
        scope="tenant",
    )

    await db.commit()
    await db.refresh(campaign)

    logger.info(
        "Campaign created",
        extra={"campaign_id": campaign.id, "tenancy_id": ctx.tenancy_id, "approval_required": campaign.approval_required},
    )
    return _map_campaign(campaign)


async def list_tenant_campaigns(db: AsyncSession, tenancy_id: int, status: str | None = None) -> CampaignListData:
    query = select(Campaign).where(
        Campaign.scope == CampaignScope.TENANT.value,
        Campaign.tenancy_id == tenancy_id,
        Campaign.is_deleted.is_(False),
    )
    return await _list_campaigns(db, query, status)


async def get_tenant_campaign(db: AsyncSession, tenancy_id: int, campaign_id: int) -> CampaignOut:
    return _map_campaign(await _get_tenant_campaign(db, tenancy_id, campaign_id))


async def update_tenant_campaign(
    db: AsyncSession,
    ctx: TenancyContext,
    campaign_id: int,
    payload: CampaignUpdate,
) -> CampaignOut:
    campaign = await _get_tenant_campaign(db, ctx.tenancy_id, campaign_id)

    if campaign.status not in EDITABLE_STATUSES:
        raise AppException(
            400,
            f"Campaigns can only be edited while DRAFT or PAUSED, not {campaign.status}",
            ErrorCode.CAMPAIGN_NOT_EDITABLE,
        )

    fields = payload.model_dump(exclude_unset=True, exclude={"audience", "budget", "promotions"})
    data = dict(fields)
    if payload.audience is not None:
        data.update(_audience_columns(payload.audience))
    if payload.budget is not None:
        data.update(_budget_columns(payload.budget))
    if payload.promotions is not None:
        await _validate_promotions(db, payload.promotions, ctx.tenancy_id)
        data["promotions"] = _dump_promotions(payload.promotions)

    if not data:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    _validate_date_range(
        data.get("start_date", campaign.start_date),
        data.get("end_date", campaign.end_date),
    )

    for field, value in data.items():
        setattr(campaign, field, value)
    campaign.updated_by_id = ctx.user.id

    needs_approval = requires_approval(
        campaign.scope,
        campaign.budget_total,
        parse_promotions(campaign),
    )
    if needs_approval and not campaign.approval_required:
        # a previous approval does not cover the new terms
        campaign.approved_by_id = None
        campaign.approved_at = None
    campaign.approval_required = needs_approval

    changed = list(fields.keys()) + [
        name for name in ("audience", "budget", "promotions") if getattr(payload, name) is not None
    ]
    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.UPDATE_CAMPAIGN,
        target_name=campaign.name,
        changes=", ".join(changed),
    )

    await db.commit()
    await db.refresh(campaign)
    return _map_campaign(campaign)


async def change_campaign_status(
    db: AsyncSession,
    ctx: TenancyContext,
    campaign_id: int,
    payload: CampaignStatusUpdate,
) -> CampaignOut:
    campaign = await _get_tenant_campaign(db, ctx.tenancy_id, campaign_id)
    old_status = campaign.status

    try:
        new_status = resolve_status_change(campaign, payload.status)
    except ValueError as exc:
        raise AppException(400, str(exc), ErrorCode.CAMPAIGN_INVALID_TRANSITION)

    campaign.status = new_status.value
    campaign.updated_by_id = ctx.user.id

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.CHANGE_CAMPAIGN_STATUS,
        target_name=campaign.name,
        old_status=old_status,
        new_status=new_status.value,
    )

    await db.commit()
    await db.refresh(campaign)

    logger.info(
        "Campaign status changed",
        extra={"campaign_id": campaign.id, "from": old_status, "to": campaign.status},
    )
    return _map_campaign(campaign)


async def delete_tenant_campaign(db: AsyncSession, ctx: TenancyContext, campaign_id: int) -> None:
    campaign = await _get_tenant_campaign(db, ctx.tenancy_id, campaign_id)

    campaign.mark_deleted(ctx.user.id)

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.DELETE_CAMPAIGN,
        target_name=campaign.name,
    )
    await db.commit()


# =====================================================
# GLOBAL CAMPAIGNS (SUPERADMIN)
# =====================================================
async def create_global_campaign(db: AsyncSession, user: User, payload: GlobalCampaignCreate) -> CampaignOut:
    _validate_date_range(payload.start_date, payload.end_date)
    await _validate_promotions(db, payload.promotions, None)

    target_ids = sorted(set(payload.applicable_tenancy_ids))
    if target_ids:
        found = (
            await db.execute(select(Tenancy.id).where(Tenancy.id.in_(target_ids)))
        ).scalars().all()
        missing = set(target_ids) - set(found)
        if missing:
            raise AppException(
                404,
                "Tenancy not found",
                ErrorCode.TENANCY_NOT_FOUND,
                details={"tenancy_ids": sorted(missing)},
            )

    campaign = Campaign(
        **_campaign_columns(payload),
        scope=CampaignScope.GLOBAL.value,
        tenancy_id=None,
        applicable_tenancy_ids=target_ids,
        status=CampaignStatus.DRAFT.value,
        approval_required=True,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    db.add(campaign)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.CREATE_CAMPAIGN,
        target_name=campaign.name,
        scope="global",
    )

    await db.commit()
    await db.refresh(campaign)

    logger.info("Global campaign created", extra={"campaign_id": campaign.id, "tenancies": target_ids})
    return _map_campaign(campaign)


async def list_all_campaigns(
    db: AsyncSession,
    scope: str | None = None,
    status: str | None = None,
) -> CampaignListData:
    query = select(Campaign).where(Campaign.is_deleted.is_(False))
    if scope:
        query = query.where(Campaign.scope == scope)
    return await _list_campaigns(db, query, status)


async def approve_campaign(db: AsyncSession, user: User, campaign_id: int) -> CampaignOut:
    """
    Pending campaigns go live on approval. A GLOBAL draft is approved and
    activated in one step since no tenancy admin manages it.
    """
    campaign = await _get_campaign(db, campaign_id)

    approvable = {CampaignStatus.PENDING_APPROVAL.value}
    if campaign.scope == CampaignScope.GLOBAL.value:
        approvable.add(CampaignStatus.DRAFT.value)

    if campaign.status not in approvable:
        raise AppException(
            400,
            f"Campaign in status {campaign.status} cannot be approved",
            ErrorCode.CAMPAIGN_INVALID_TRANSITION,
        )

    campaign.approved_by_id = user.id
    campaign.approved_at = datetime.now(timezone.utc)
    campaign.status = CampaignStatus.ACTIVE.value
    campaign.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.APPROVE_CAMPAIGN,
        target_name=campaign.name,
    )

    await db.commit()
    await db.refresh(campaign)

    logger.info("Campaign approved", extra={"campaign_id": campaign.id, "approved_by": user.id})
    return _map_campaign(campaign)


# =====================================================
# CUSTOMER: EVALUATE & APPLY
# =====================================================
async def _candidate_campaigns(db: AsyncSession, tenancy_id: int, trigger_type: str, today: date) -> list[Campaign]:
    result = await db.execute(
        select(Campaign).where(
            Campaign.is_deleted.is_(False),
            Campaign.status == CampaignStatus.ACTIVE.value,
            Campaign.trigger_type == trigger_type,
            Campaign.start_date <= today,
            Campaign.end_date >= today,
            or_(
                and_(
                    Campaign.scope == CampaignScope.TENANT.value,
                    Campaign.tenancy_id == tenancy_id,
                ),
                Campaign.scope == CampaignScope.GLOBAL.value,
            ),
        )
    )
    # applicable_tenancy_ids is JSON, so the GLOBAL targeting is filtered here
    return [c for c in result.scalars().all() if applies_to_tenancy(c, tenancy_id)]


async def evaluate_campaigns(
    db: AsyncSession,
    ctx: TenancyContext,
    payload: CampaignEvaluateRequest,
) -> CampaignEvaluationOut:
    today = promotions_now().date()
    customer = _customer_profile(ctx.user)

    campaigns = await _candidate_campaigns(db, ctx.tenancy_id, payload.trigger_type.value, today)
    discounts = await _discounts_by_id(db, ctx.tenancy_id, today)

    options = [
        CampaignOption(
            campaign=c,
            benefit=calculate_benefit(c, discounts, payload.order_total),
            cost=calculate_cost(c, discounts, payload.order_total),
        )
        for c in campaigns
        if is_customer_eligible(c, customer, payload.order_total)
    ]
    best = select_best_campaign(options)

    logger.info(
        "Campaigns evaluated",
        extra={
            "tenancy_id": ctx.tenancy_id,
            "customer_id": ctx.user.id,
            "candidates": len(campaigns),
            "eligible": len(options),
            "selected": best.campaign.id if best else None,
        },
    )

    if best is None:
        return CampaignEvaluationOut(
            selected_campaign=None,
            benefit=ZERO,
            cost=ZERO,
            message="No campaigns available",
        )

    return CampaignEvaluationOut(
        selected_campaign=_map_campaign(best.campaign),
        benefit=best.benefit,
        cost=best.cost,
        message=f"Best offer: {best.campaign.name}",
    )


async def apply_campaign(
    db: AsyncSession,
    ctx: TenancyContext,
    campaign_id: int,
    payload: CampaignApplyRequest,
) -> CampaignApplyOut:
    campaign = await _get_campaign(db, campaign_id)
    today = promotions_now().date()

    if not (
        is_campaign_live(campaign, today)
        and applies_to_tenancy(campaign, ctx.tenancy_id)
        and is_customer_eligible(campaign, _customer_profile(ctx.user), payload.order_total)
    ):
        raise AppException(
            400,
            "Campaign is not applicable to this order",
            ErrorCode.CAMPAIGN_NOT_APPLICABLE,
        )

    discounts = await _discounts_by_id(db, ctx.tenancy_id, today)
    total_discount, applied = apply_campaign_promotions(campaign, discounts, payload.order_total)
    order_total = to_decimal(payload.order_total)

    await db.execute(
        update(Campaign)
        .where(Campaign.id == campaign.id)
        .values(
            used_count=Campaign.used_count + 1,
            conversions=Campaign.conversions + 1,
            budget_spent=Campaign.budget_spent + total_discount,
            total_savings=Campaign.total_savings + total_discount,
            total_revenue=Campaign.total_revenue + order_total,
        )
    )

    await emit_user_activity(
        db,
        ctx.user,
        ActivityCode.APPLY_CAMPAIGN,
        target_name=campaign.name,
        total_discount=total_discount,
    )
    await db.commit()

    offer = "Local Offer" if campaign.scope == CampaignScope.TENANT.value else "Platform Offer"
    logger.info(
        "Campaign applied",
        extra={"campaign_id": campaign.id, "customer_id": ctx.user.id, "total_discount": str(total_discount)},
    )

    return CampaignApplyOut(
        campaign_id=campaign.id,
        campaign_name=campaign.name,
        campaign_scope=campaign.scope,
        total_discount=total_discount,
        final_amount=final_amount(order_total, total_discount),
        applied_promotions=[
            AppliedPromotionOut(
                type=p.type,
                discount_id=p.discount_id,
                discount=p.discount,
                description=p.description,
            )
            for p in applied
        ],
        message=f"Campaign Applied: {campaign.name} ({offer}) - You saved {total_discount}",
    )

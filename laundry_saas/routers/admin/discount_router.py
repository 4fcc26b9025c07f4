# laundry_saas/routers/admin/discount_router.py

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.schemas.promotions.discount_schemas import (
    DiscountCreate,
    DiscountUpdate,
    DiscountListData,
    DiscountOut,
    DiscountStatsOut,
    DiscountAnalyticsOut,
)
from laundry_saas.schemas.promotions.evaluation_schemas import (
    ApplyDiscountsRequest,
    DiscountEvaluationOut,
)
from laundry_saas.services.promotions.discount_service import (
    create_discount,
    list_discounts,
    get_discount,
    update_discount,
    delete_discount,
    toggle_discount_status,
    get_discount_analytics,
    get_discount_stats,
    apply_discounts_to_order,
)
from laundry_saas.models.enums.discount_rule_type import DiscountRuleType
from laundry_saas.utils.tenancy_context import TenancyContext, require_tenancy_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/admin/discounts", tags=["Admin Discounts"])
logger = get_logger(__name__)


@router.get("/", response_model=APIResponse[DiscountListData])
async def list_discounts_api(
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),

    search: str | None = Query(None),
    status: Literal["active", "inactive"] | None = Query(None),
    rule_type: DiscountRuleType | None = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    logger.info("List discounts", extra={"tenancy_id": ctx.tenancy_id})
    data = await list_discounts(
        db=db,
        tenancy_id=ctx.tenancy_id,
        search=search,
        status=status,
        rule_type=rule_type.value if rule_type else None,
        page=page,
        page_size=page_size,
    )
    return success_response("Discounts fetched successfully", data)


# registered before /{discount_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=APIResponse[DiscountStatsOut])
async def discount_stats_api(
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Discount stats", extra={"tenancy_id": ctx.tenancy_id})
    data = await get_discount_stats(db, ctx.tenancy_id)
    return success_response("Discount statistics fetched successfully", data)


@router.post("/apply", response_model=APIResponse[DiscountEvaluationOut])
async def apply_discounts_api(
    payload: ApplyDiscountsRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info(
        "Apply discounts",
        extra={"tenancy_id": ctx.tenancy_id, "customer_id": payload.customer_id},
    )
    data = await apply_discounts_to_order(db, ctx, payload)
    return success_response("Discounts applied successfully", data)


@router.post("/", response_model=APIResponse[DiscountOut], status_code=201)
async def create_discount_api(
    payload: DiscountCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Create discount", extra={"tenancy_id": ctx.tenancy_id, "discount_name": payload.name})
    data = await create_discount(db, ctx, payload)
    return success_response("Discount created successfully", data)


@router.get("/{discount_id}", response_model=APIResponse[DiscountOut])
async def get_discount_api(
    discount_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Get discount", extra={"discount_id": discount_id})
    data = await get_discount(db, ctx.tenancy_id, discount_id)
    return success_response("Discount fetched successfully", data)


@router.put("/{discount_id}", response_model=APIResponse[DiscountOut])
async def update_discount_api(
    discount_id: int,
    payload: DiscountUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Update discount", extra={"discount_id": discount_id})
    data = await update_discount(db, ctx, discount_id, payload)
    return success_response("Discount updated successfully", data)


@router.delete("/{discount_id}", response_model=APIResponse[None])
async def delete_discount_api(
    discount_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Delete discount", extra={"discount_id": discount_id})
    await delete_discount(db, ctx, discount_id)
    return success_response("Discount deleted successfully")


@router.patch("/{discount_id}/toggle", response_model=APIResponse[DiscountOut])
async def toggle_discount_api(
    discount_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Toggle discount", extra={"discount_id": discount_id})
    data = await toggle_discount_status(db, ctx, discount_id)
    state = "activated" if data.is_active else "deactivated"
    return success_response(f"Discount {state} successfully", data)


@router.get("/{discount_id}/analytics", response_model=APIResponse[DiscountAnalyticsOut])
async def discount_analytics_api(
    discount_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Discount analytics", extra={"discount_id": discount_id})
    data = await get_discount_analytics(db, ctx.tenancy_id, discount_id)
    return success_response("Discount analytics fetched successfully", data)

# laundry_saas/routers/customer/discount_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.schemas.promotions.discount_schemas import ActiveDiscountListData
from laundry_saas.schemas.promotions.evaluation_schemas import (
    ApplicableDiscountsRequest,
    DiscountEvaluationOut,
)
from laundry_saas.services.promotions.customer_discount_service import (
    get_applicable_discounts,
    list_active_discounts,
)
from laundry_saas.utils.tenancy_context import TenancyContext, require_tenancy_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/customer/discounts", tags=["Customer Discounts"])
logger = get_logger(__name__)


@router.post("/applicable", response_model=APIResponse[DiscountEvaluationOut])
async def applicable_discounts_api(
    payload: ApplicableDiscountsRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["customer"])),
):
    logger.info(
        "Applicable discounts requested",
        extra={"tenancy_id": ctx.tenancy_id, "customer_id": ctx.user.id},
    )
    data = await get_applicable_discounts(db, ctx, payload)
    return success_response("Applicable discounts fetched successfully", data)


@router.get("/active", response_model=APIResponse[ActiveDiscountListData])
async def active_discounts_api(
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["customer"])),
):
    data = await list_active_discounts(db, ctx)
    return success_response("Active discounts fetched successfully", data)

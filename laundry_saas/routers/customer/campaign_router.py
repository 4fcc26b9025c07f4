# laundry_saas/routers/customer/campaign_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.schemas.promotions.campaign_schemas import (
    CampaignEvaluateRequest,
    CampaignEvaluationOut,
    CampaignApplyRequest,
    CampaignApplyOut,
)
from laundry_saas.services.promotions.campaign_service import (
    evaluate_campaigns,
    apply_campaign,
)
from laundry_saas.utils.tenancy_context import TenancyContext, require_tenancy_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/customer/campaigns", tags=["Customer Campaigns"])
logger = get_logger(__name__)


@router.post("/evaluate", response_model=APIResponse[CampaignEvaluationOut])
async def evaluate_campaigns_api(
    payload: CampaignEvaluateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["customer"])),
):
    data = await evaluate_campaigns(db, ctx, payload)
    return success_response(data.message, data)


@router.post("/{campaign_id}/apply", response_model=APIResponse[CampaignApplyOut])
async def apply_campaign_api(
    campaign_id: int,
    payload: CampaignApplyRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["customer"])),
):
    logger.info("Apply campaign", extra={"campaign_id": campaign_id, "customer_id": ctx.user.id})
    data = await apply_campaign(db, ctx, campaign_id, payload)
    return success_response(data.message, data)

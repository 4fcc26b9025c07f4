# laundry_saas/routers/superadmin/campaign_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.models.enums.campaign_status import CampaignScope, CampaignStatus
from laundry_saas.schemas.promotions.campaign_schemas import (
    GlobalCampaignCreate,
    CampaignOut,
    CampaignListData,
)
from laundry_saas.services.promotions.campaign_service import (
    create_global_campaign,
    list_all_campaigns,
    approve_campaign,
)
from laundry_saas.utils.check_roles import require_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/superadmin/campaigns", tags=["Superadmin Campaigns"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[CampaignOut], status_code=201)
async def create_global_campaign_api(
    payload: GlobalCampaignCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    logger.info("Create global campaign", extra={"campaign_name": payload.name})
    data = await create_global_campaign(db, user, payload)
    return success_response("Global campaign created successfully", data)


@router.get("/", response_model=APIResponse[CampaignListData])
async def list_campaigns_api(
    scope: CampaignScope | None = Query(None),
    status: CampaignStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    data = await list_all_campaigns(
        db,
        scope=scope.value if scope else None,
        status=status.value if status else None,
    )
    return success_response("Campaigns fetched successfully", data)


@router.patch("/{campaign_id}/approve", response_model=APIResponse[CampaignOut])
async def approve_campaign_api(
    campaign_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    logger.info("Approve campaign", extra={"campaign_id": campaign_id, "approved_by": user.id})
    data = await approve_campaign(db, user, campaign_id)
    return success_response("Campaign approved successfully", data)

# laundry_saas/routers/admin/campaign_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.models.enums.campaign_status import CampaignStatus
from laundry_saas.schemas.promotions.campaign_schemas import (
    CampaignCreate,
    CampaignUpdate,
    CampaignStatusUpdate,
    CampaignOut,
    CampaignListData,
)
from laundry_saas.services.promotions.campaign_service import (
    create_tenant_campaign,
    list_tenant_campaigns,
    get_tenant_campaign,
    update_tenant_campaign,
    change_campaign_status,
    delete_tenant_campaign,
)
from laundry_saas.utils.tenancy_context import TenancyContext, require_tenancy_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/admin/campaigns", tags=["Admin Campaigns"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[CampaignOut], status_code=201)
async def create_campaign_api(
    payload: CampaignCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Create campaign", extra={"tenancy_id": ctx.tenancy_id, "campaign_name": payload.name})
    data = await create_tenant_campaign(db, ctx, payload)
    return success_response("Campaign created successfully", data)


@router.get("/", response_model=APIResponse[CampaignListData])
async def list_campaigns_api(
    status: CampaignStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("List campaigns", extra={"tenancy_id": ctx.tenancy_id})
    data = await list_tenant_campaigns(db, ctx.tenancy_id, status.value if status else None)
    return success_response("Campaigns fetched successfully", data)


@router.get("/{campaign_id}", response_model=APIResponse[CampaignOut])
async def get_campaign_api(
    campaign_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    data = await get_tenant_campaign(db, ctx.tenancy_id, campaign_id)
    return success_response("Campaign fetched successfully", data)


@router.put("/{campaign_id}", response_model=APIResponse[CampaignOut])
async def update_campaign_api(
    campaign_id: int,
    payload: CampaignUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Update campaign", extra={"campaign_id": campaign_id})
    data = await update_tenant_campaign(db, ctx, campaign_id, payload)
    return success_response("Campaign updated successfully", data)


@router.patch("/{campaign_id}/status", response_model=APIResponse[CampaignOut])
async def change_campaign_status_api(
    campaign_id: int,
    payload: CampaignStatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info(
        "Change campaign status",
        extra={"campaign_id": campaign_id, "requested": payload.status.value},
    )
    data = await change_campaign_status(db, ctx, campaign_id, payload)

    if data.status == CampaignStatus.PENDING_APPROVAL.value:
        message = "Campaign submitted for approval"
    else:
        message = f"Campaign status changed to {data.status}"
    return success_response(message, data)


@router.delete("/{campaign_id}", response_model=APIResponse[None])
async def delete_campaign_api(
    campaign_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: TenancyContext = Depends(require_tenancy_role(["admin"])),
):
    logger.info("Delete campaign", extra={"campaign_id": campaign_id})
    await delete_tenant_campaign(db, ctx, campaign_id)
    return success_response("Campaign deleted successfully")

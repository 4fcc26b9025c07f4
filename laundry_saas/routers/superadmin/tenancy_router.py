# laundry_saas/routers/superadmin/tenancy_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.schemas.tenancy.tenancy_schemas import (
    TenancyCreate,
    TenancyOut,
    TenancyCreatedOut,
    TenancyListData,
)
from laundry_saas.services.tenancy.tenancy_service import (
    create_tenancy,
    list_tenancies,
    get_tenancy,
    deactivate_tenancy,
)
from laundry_saas.utils.check_roles import require_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/superadmin/tenancies", tags=["Tenancies"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[TenancyCreatedOut], status_code=201)
async def create_tenancy_api(
    payload: TenancyCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    logger.info("Create tenancy", extra={"slug": payload.slug})
    data = await create_tenancy(db, payload, user)
    return success_response("Tenancy created successfully", data)


@router.get("/", response_model=APIResponse[TenancyListData])
async def list_tenancies_api(
    search: str | None = Query(None),
    is_active: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    data = await list_tenancies(db, search=search, is_active=is_active)
    return success_response("Tenancies fetched successfully", data)


@router.get("/{tenancy_id}", response_model=APIResponse[TenancyOut])
async def get_tenancy_api(
    tenancy_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    data = await get_tenancy(db, tenancy_id)
    return success_response("Tenancy fetched successfully", data)


@router.patch("/{tenancy_id}/deactivate", response_model=APIResponse[TenancyOut])
async def deactivate_tenancy_api(
    tenancy_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["superadmin"])),
):
    logger.info("Deactivate tenancy", extra={"tenancy_id": tenancy_id})
    data = await deactivate_tenancy(db, tenancy_id, user)
    return success_response("Tenancy deactivated successfully", data)

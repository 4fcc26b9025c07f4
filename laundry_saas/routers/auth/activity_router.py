# laundry_saas/routers/auth/activity_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.constants.roles import Role
from laundry_saas.schemas.auth.activity_schemas import UserActivityFilters, UserActivityListData
from laundry_saas.services.auth.activity_service import list_user_activities
from laundry_saas.utils.check_roles import require_role
from laundry_saas.utils.response import APIResponse, success_response
from laundry_saas.utils.logger import get_logger

router = APIRouter(prefix="/activities", tags=["User Activities"])
logger = get_logger(__name__)


@router.get("/", response_model=APIResponse[UserActivityListData])
async def list_user_activities_api(
    filters: UserActivityFilters = Depends(),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(["admin", "superadmin"])),
):
    logger.info(
        "List user activities requested",
        extra=filters.model_dump(exclude_none=True),
    )

    # tenant admins only ever see their own tenancy's log
    tenancy_id = None if user.role == Role.SUPERADMIN.value else user.tenancy_id

    result = await list_user_activities(db=db, filters=filters, tenancy_id=tenancy_id)

    return success_response(
        "User activities fetched successfully",
        result,
    )

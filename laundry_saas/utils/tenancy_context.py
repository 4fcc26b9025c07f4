# laundry_saas/utils/tenancy_context.py

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.core.db import get_db
from laundry_saas.core.exceptions import AppException
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.models.tenancy.tenancy_models import Tenancy
from laundry_saas.models.users.user_models import User
from laundry_saas.utils.check_roles import require_role


@dataclass(frozen=True)
class TenancyContext:
    """Caller identity plus the tenancy every query must be scoped to."""

    tenancy_id: int
    user: User


def require_tenancy_role(roles: list[str]):
    async def tenancy_resolver(
        user: User = Depends(require_role(roles)),
        db: AsyncSession = Depends(get_db),
    ) -> TenancyContext:
        if user.tenancy_id is None:
            raise AppException(
                403,
                "User is not attached to a tenancy",
                ErrorCode.TENANCY_REQUIRED,
            )

        tenancy = await db.get(Tenancy, user.tenancy_id)
        if not tenancy or not tenancy.is_active:
            raise AppException(
                403,
                "Tenancy is inactive",
                ErrorCode.TENANCY_INACTIVE,
            )

        return TenancyContext(tenancy_id=tenancy.id, user=user)
    return tenancy_resolver

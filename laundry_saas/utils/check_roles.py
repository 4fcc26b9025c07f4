from fastapi import Depends, HTTPException, status

from laundry_saas.constants.roles import Role
from laundry_saas.models.users.user_models import User
from laundry_saas.utils.get_user import get_current_user
from laundry_saas.utils.logger import get_logger

logger = get_logger("auth.roles")


def require_role(roles: list[Role | str]):
    allowed = {Role(str(getattr(r, "value", r)).lower()).value for r in roles}

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role.lower() not in allowed:
            logger.warning(
                "Role not permitted",
                extra={"user_id": user.id, "role": user.role, "allowed": sorted(allowed)},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied",
            )
        return user
    return role_checker

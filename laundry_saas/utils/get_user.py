from fastapi import Depends, HTTPException, Header, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from laundry_saas.core.db import get_db
from laundry_saas.core.security import decode_access_token
from laundry_saas.models.users.user_models import User
from laundry_saas.utils.logger import get_logger

logger = get_logger("auth.guard")

BEARER_PREFIX = "Bearer "


def _bearer_token(authorization: str) -> str:
    if not authorization.startswith(BEARER_PREFIX):
        logger.warning("Missing bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        )
    return authorization[len(BEARER_PREFIX):].strip()


async def get_current_user(
    authorization: str = Header(...),
    db: AsyncSession = Depends(get_db),
) -> User:
    claims = decode_access_token(_bearer_token(authorization))

    user = await db.scalar(select(User).where(User.username == claims.username))

    if not user:
        logger.warning("Token user not found", extra={"username": claims.username})
        raise HTTPException(status_code=401, detail="User not found")

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": user.id})
        raise HTTPException(status_code=403, detail="User account is inactive")

    # a logout, or a move to another tenancy, retires every earlier token
    if user.token_version != claims.token_version or user.tenancy_id != claims.tenancy_id:
        logger.warning(
            "Stale token rejected",
            extra={"user_id": user.id, "token_tenancy_id": claims.tenancy_id},
        )
        raise HTTPException(status_code=401, detail="Session expired")

    return user

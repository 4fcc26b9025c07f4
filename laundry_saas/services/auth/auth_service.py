from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.models.users.user_models import User
from laundry_saas.models.tenancy.tenancy_models import Tenancy
from laundry_saas.schemas.auth.auth_schemas import AuthTokens, AuthUser, LoginData
from laundry_saas.core.security import verify_password, issue_access_token
from laundry_saas.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
from laundry_saas.core.exceptions import AppException
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.constants.activity_codes import ActivityCode
from laundry_saas.constants.roles import Role
from laundry_saas.utils.activity_helpers import emit_user_activity
from laundry_saas.utils.logger import get_logger

logger = get_logger("auth.service")


def _token_lifetime(user: User) -> timedelta:
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if user.role == Role.CUSTOMER.value else ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
    return timedelta(minutes=minutes)


async def _authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await db.scalar(select(User).where(User.username == email))

    # unknown account and bad password are indistinguishable to the caller
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Rejected credentials", extra={"email": email})
        raise AppException(401, "Invalid credentials", ErrorCode.INVALID_CREDENTIALS)

    if not user.is_active:
        logger.warning("Login attempt on disabled account", extra={"user_id": user.id})
        raise AppException(403, "User account is inactive", ErrorCode.USER_INACTIVE)

    if user.tenancy_id is not None:
        tenancy = await db.get(Tenancy, user.tenancy_id)
        if tenancy is None or not tenancy.is_active:
            logger.warning("Login attempt on inactive tenancy", extra={"user_id": user.id})
            raise AppException(403, "Tenancy is inactive", ErrorCode.TENANCY_INACTIVE)

    return user


async def login_user(db: AsyncSession, email: str, password: str) -> LoginData:
    user = await _authenticate(db, email, password)

    user.last_login = datetime.now(timezone.utc)
    token = issue_access_token(user, expires_delta=_token_lifetime(user))

    await emit_user_activity(db, user, ActivityCode.LOGIN)
    await db.commit()

    logger.info("User logged in", extra={"user_id": user.id, "role": user.role})

    return LoginData(
        auth=AuthTokens(access_token=token),
        user=AuthUser(
            id=user.id,
            username=user.username,
            role=user.role,
            tenancy_id=user.tenancy_id,
        ),
    )


async def logout_user(db: AsyncSession, user: User):
    # every token issued so far stops validating
    user.token_version += 1

    await emit_user_activity(db, user, ActivityCode.LOGOUT)
    await db.commit()

    logger.info("User logged out", extra={"user_id": user.id})

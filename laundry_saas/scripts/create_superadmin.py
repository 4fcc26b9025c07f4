"""Bootstrap the platform superadmin. Run with ``python -m laundry_saas.scripts.create_superadmin``."""

import asyncio
import os

from sqlalchemy import select

from laundry_saas.models.users.user_models import User
from laundry_saas.core.db import session_scope
from laundry_saas.core.security import hash_password
from laundry_saas.core.logging import setup_logging
from laundry_saas.constants.roles import Role
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)


async def create_superadmin():
    email = os.getenv("SUPERADMIN_EMAIL", "superadmin@laundrysaas.com")
    password = os.getenv("SUPERADMIN_PASSWORD")
    if not password:
        raise ValueError("SUPERADMIN_PASSWORD must be set")

    async with session_scope() as session:
        exists = await session.scalar(select(User.id).where(User.username == email))
        if exists:
            logger.info("Superadmin already exists", extra={"email": email})
            return

        session.add(
            User(
                tenancy_id=None,
                username=email,
                password_hash=hash_password(password),
                role=Role.SUPERADMIN.value,
                is_active=True,
            )
        )
        await session.commit()
        logger.info("Superadmin created", extra={"email": email})


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_superadmin())

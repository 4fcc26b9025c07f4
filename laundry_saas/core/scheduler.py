# laundry_saas/core/scheduler.py

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from laundry_saas.core.config import PROMOTIONS_TIMEZONE
from laundry_saas.core.db import session_scope
from laundry_saas.services.promotions.promotion_lifecycle_service import (
    auto_expire_discounts,
    auto_complete_campaigns,
)
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)

# cron runs in the zone promotion windows are defined in
scheduler = AsyncIOScheduler(timezone=PROMOTIONS_TIMEZONE)


@scheduler.scheduled_job(
    "cron",
    hour=0,
    minute=10,
    id="promotion_lifecycle",
    coalesce=True,
    max_instances=1,
)
async def promotion_lifecycle_job():
    async with session_scope() as db:
        expired = await auto_expire_discounts(db)
        completed = await auto_complete_campaigns(db)

    logger.info(
        "Promotion lifecycle run finished",
        extra={"expired_discounts": expired, "completed_campaigns": completed},
    )

from sqlalchemy.ext.asyncio import AsyncSession

from laundry_saas.services.promotions.promotion_lifecycle_core import (
    _expire_discount_stmt,
    _complete_campaign_stmt,
)
from laundry_saas.utils.activity_helpers import emit_system_activity
from laundry_saas.utils.datetime_utils import promotions_now
from laundry_saas.constants.activity_codes import ActivityCode
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)


async def auto_expire_discounts(db: AsyncSession, today=None) -> int:
    today = today or promotions_now().date()

    result = await db.execute(_expire_discount_stmt(today=today))
    expired = result.all()

    if not expired:
        return 0

    for d in expired:
        await emit_system_activity(
            db,
            ActivityCode.EXPIRE_DISCOUNT,
            tenancy_id=d.tenancy_id,
            target_name=d.name,
            changes=f"Expired automatically on {today}",
        )

    await db.commit()
    logger.info("Discounts expired", extra={"count": len(expired)})
    return len(expired)


async def auto_complete_campaigns(db: AsyncSession, today=None) -> int:
    today = today or promotions_now().date()

    result = await db.execute(_complete_campaign_stmt(today=today))
    completed = result.all()

    if not completed:
        return 0

    for c in completed:
        await emit_system_activity(
            db,
            ActivityCode.COMPLETE_CAMPAIGN,
            tenancy_id=c.tenancy_id,
            target_name=c.name,
            changes=f"Completed automatically on {today}",
        )

    await db.commit()
    logger.info("Campaigns completed", extra={"count": len(completed)})
    return len(completed)

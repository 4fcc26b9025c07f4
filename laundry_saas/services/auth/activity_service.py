# laundry_saas/services/auth/activity_service.py

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, asc

from laundry_saas.models.support.activity_models import UserActivity
from laundry_saas.schemas.auth.activity_schemas import (
    UserActivityOut,
    UserActivityFilters,
    UserActivityListData,
)
from laundry_saas.core.exceptions import AppException
from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)

SORTABLE_COLUMNS = {
    "created_at": UserActivity.created_at,
    "username": UserActivity.username_snapshot,
}


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _conditions(filters: UserActivityFilters, tenancy_id: int | None) -> list:
    conditions = []
    if tenancy_id is not None:
        conditions.append(UserActivity.tenancy_id == tenancy_id)
    if filters.user_id:
        conditions.append(UserActivity.user_id == filters.user_id)
    if filters.username:
        conditions.append(UserActivity.username_snapshot.icontains(filters.username, autoescape=True))
    if filters.created_from:
        conditions.append(UserActivity.created_at >= _day_start(filters.created_from))
    if filters.created_to:
        # inclusive of the whole last day
        conditions.append(UserActivity.created_at < _day_start(filters.created_to + timedelta(days=1)))
    return conditions


async def list_user_activities(
    *,
    db: AsyncSession,
    filters: UserActivityFilters,
    tenancy_id: int | None,
) -> UserActivityListData:
    """
    tenancy_id=None lists the whole platform log (superadmin); otherwise only
    that tenancy's entries are visible.
    """
    sort_column = SORTABLE_COLUMNS.get(filters.sort_by)
    if sort_column is None:
        raise AppException(
            400,
            "Invalid sort field",
            ErrorCode.VALIDATION_ERROR,
            details={"allowed": sorted(SORTABLE_COLUMNS)},
        )
    if filters.created_from and filters.created_to and filters.created_from > filters.created_to:
        raise AppException(400, "created_from must not be after created_to", ErrorCode.VALIDATION_ERROR)

    conditions = _conditions(filters, tenancy_id)
    direction = desc if filters.sort_order == "desc" else asc

    total = await db.scalar(select(func.count(UserActivity.id)).where(*conditions)) or 0
    rows = (
        await db.execute(
            select(UserActivity)
            .where(*conditions)
            .order_by(direction(sort_column), direction(UserActivity.id))
            .limit(filters.page_size)
            .offset((filters.page - 1) * filters.page_size)
        )
    ).scalars().all()

    logger.debug(
        "Activity page loaded",
        extra={"total": total, "tenancy_id": tenancy_id, "page": filters.page},
    )

    return UserActivityListData(
        total=total,
        items=[UserActivityOut.model_validate(row) for row in rows],
    )

# laundry_saas/utils/datetime_utils.py

from datetime import datetime
from zoneinfo import ZoneInfo

from laundry_saas.core.config import PROMOTIONS_TIMEZONE


def promotions_now() -> datetime:
    """Current wall-clock time in the zone promotion schedules are written in."""
    return datetime.now(ZoneInfo(PROMOTIONS_TIMEZONE))


def sunday_based_weekday(moment: datetime) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (moment.weekday() + 1) % 7

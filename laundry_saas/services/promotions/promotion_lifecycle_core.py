from sqlalchemy import update
from laundry_saas.models.promotions.discount_models import Discount
from laundry_saas.models.promotions.campaign_models import Campaign
from laundry_saas.models.enums.campaign_status import CampaignStatus


def _expire_discount_stmt(*, today):
    """
    Deactivate active discounts whose end_date < today.
    Idempotent & safe for cron.
    """
    return (
        update(Discount)
        .where(
            Discount.is_active.is_(True),
            Discount.end_date < today,
        )
        .values(
            is_active=False,
        )
        .returning(
            Discount.id,
            Discount.tenancy_id,
            Discount.name,
        )
    )


def _complete_campaign_stmt(*, today):
    """
    Close ACTIVE / PAUSED campaigns whose end_date < today.
    """
    return (
        update(Campaign)
        .where(
            Campaign.is_deleted.is_(False),
            Campaign.status.in_([CampaignStatus.ACTIVE.value, CampaignStatus.PAUSED.value]),
            Campaign.end_date < today,
        )
        .values(
            status=CampaignStatus.COMPLETED.value,
        )
        .returning(
            Campaign.id,
            Campaign.tenancy_id,
            Campaign.name,
        )
    )

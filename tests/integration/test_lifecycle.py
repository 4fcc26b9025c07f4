from datetime import timedelta

from sqlalchemy import select

from laundry_saas.core.scheduler import promotion_lifecycle_job, scheduler
from laundry_saas.models.promotions.campaign_models import Campaign
from laundry_saas.models.support.activity_models import UserActivity
from laundry_saas.services.promotions.promotion_lifecycle_service import (
    auto_complete_campaigns,
    auto_expire_discounts,
)
from tests.conftest import make_discount, today


async def make_campaign(db, tenancy, status, **fields):
    campaign = Campaign(
        name=fields.pop("name", "Spring Refresh"),
        scope="TENANT",
        tenancy_id=tenancy.id,
        applicable_tenancy_ids=[],
        start_date=fields.pop("start_date", today() - timedelta(days=10)),
        end_date=fields.pop("end_date", today() + timedelta(days=10)),
        status=status,
        promotions=[{"type": "DISCOUNT", "value": "5"}],
        **fields,
    )
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)
    return campaign


async def activity_messages(db):
    return (await db.execute(select(UserActivity.message).order_by(UserActivity.id))).scalars().all()


class TestDiscountExpiry:
    async def test_expires_only_past_discounts(self, db_session, tenancy):
        stale = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}], name="Last Month",
            start_date=today() - timedelta(days=40), end_date=today() - timedelta(days=1),
        )
        ends_today = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}], name="Ends Today",
            start_date=today() - timedelta(days=5), end_date=today(),
        )

        assert await auto_expire_discounts(db_session) == 1

        await db_session.refresh(stale)
        await db_session.refresh(ends_today)
        assert stale.is_active is False
        assert ends_today.is_active is True

        messages = await activity_messages(db_session)
        assert messages == [f"System (system) expired discount Last Month: Expired automatically on {today()}"]

    async def test_second_run_is_a_no_op(self, db_session, tenancy):
        await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}],
            start_date=today() - timedelta(days=40), end_date=today() - timedelta(days=1),
        )

        assert await auto_expire_discounts(db_session) == 1
        assert await auto_expire_discounts(db_session) == 0
        assert len(await activity_messages(db_session)) == 1

    async def test_explicit_day(self, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])

        assert await auto_expire_discounts(db_session, today=discount.end_date + timedelta(days=1)) == 1

    async def test_expiry_entry_is_scoped_to_tenancy(self, db_session, tenancy):
        await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}],
            start_date=today() - timedelta(days=40), end_date=today() - timedelta(days=1),
        )

        await auto_expire_discounts(db_session)

        entry = await db_session.scalar(select(UserActivity))
        assert entry.tenancy_id == tenancy.id
        assert entry.user_id is None
        assert entry.username_snapshot == "system"


class TestCampaignCompletion:
    async def test_completes_active_and_paused(self, db_session, tenancy):
        past = today() - timedelta(days=1)
        running = await make_campaign(db_session, tenancy, "ACTIVE", name="Winter Wash", end_date=past)
        paused = await make_campaign(db_session, tenancy, "PAUSED", name="Quiet Week", end_date=past)
        draft = await make_campaign(db_session, tenancy, "DRAFT", name="Never Launched", end_date=past)
        current = await make_campaign(db_session, tenancy, "ACTIVE", name="Still Running")

        assert await auto_complete_campaigns(db_session) == 2

        for campaign in (running, paused, draft, current):
            await db_session.refresh(campaign)
        assert running.status == "COMPLETED"
        assert paused.status == "COMPLETED"
        assert draft.status == "DRAFT"
        assert current.status == "ACTIVE"

    async def test_deleted_campaigns_are_left_alone(self, db_session, tenancy):
        gone = await make_campaign(
            db_session, tenancy, "ACTIVE", end_date=today() - timedelta(days=1), is_deleted=True,
        )

        assert await auto_complete_campaigns(db_session) == 0
        await db_session.refresh(gone)
        assert gone.status == "ACTIVE"

    async def test_completion_is_logged(self, db_session, tenancy):
        await make_campaign(db_session, tenancy, "ACTIVE", name="Winter Wash", end_date=today() - timedelta(days=1))

        await auto_complete_campaigns(db_session)

        assert await activity_messages(db_session) == [
            f"System (system) completed campaign Winter Wash: Completed automatically on {today()}"
        ]


class TestScheduledJob:
    def test_job_is_registered_daily(self):
        job = scheduler.get_job("promotion_lifecycle")

        fields = {f.name: str(f) for f in job.trigger.fields}
        assert fields["hour"] == "0"
        assert fields["minute"] == "10"

    async def test_job_runs_both_sweeps(self, db_session, tenancy):
        past = today() - timedelta(days=1)
        discount = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}],
            start_date=today() - timedelta(days=30), end_date=past,
        )
        campaign = await make_campaign(db_session, tenancy, "ACTIVE", end_date=past)

        await promotion_lifecycle_job()

        await db_session.refresh(discount)
        await db_session.refresh(campaign)
        assert discount.is_active is False
        assert campaign.status == "COMPLETED"

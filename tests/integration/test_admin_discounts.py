"""
Integration tests for tenant admin discount management.

Every request goes through the real FastAPI app against a fresh SQLite schema.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from laundry_saas.core.exceptions import ConflictError
from laundry_saas.models.support.activity_models import UserActivity
from laundry_saas.schemas.promotions.evaluation_schemas import OrderSnapshot
from laundry_saas.services.promotions.discount_engine import evaluate_discounts
from laundry_saas.services.promotions.discount_service import fetch_live_discounts, record_discount_usage
from laundry_saas.utils.datetime_utils import promotions_now
from tests.conftest import auth_headers, make_discount, make_tenancy, make_user, today

BASE = "/admin/discounts/"


def discount_payload(**overrides):
    payload = {
        "name": "Midweek Wash",
        "description": "10% off every Wednesday wash",
        "rules": [{"type": "percentage", "value": 10, "conditions": {"days_of_week": [3]}}],
        "priority": 5,
        "start_date": str(today()),
        "end_date": str(today() + timedelta(days=30)),
    }
    payload.update(overrides)
    return payload


class TestCreateDiscount:
    async def test_create_returns_201_and_scopes_to_tenancy(self, client, admin, tenancy):
        res = await client.post(BASE, json=discount_payload(), headers=auth_headers(admin))

        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["message"] == "Discount created successfully"
        data = body["data"]
        assert data["tenancy_id"] == tenancy.id
        assert data["rules"][0]["type"] == "percentage"
        assert data["rules"][0]["conditions"]["days_of_week"] == [3]
        assert data["is_active"] is True
        assert data["used_count"] == 0
        assert data["created_by"] == admin.id

    async def test_flat_rule_is_normalized(self, client, admin):
        payload = discount_payload(rules=[{"type": "flat", "value": 25}])

        res = await client.post(BASE, json=payload, headers=auth_headers(admin))

        assert res.status_code == 201
        assert res.json()["data"]["rules"][0]["type"] == "fixed_amount"

    async def test_end_date_must_follow_start_date(self, client, admin):
        payload = discount_payload(end_date=str(today()))

        res = await client.post(BASE, json=payload, headers=auth_headers(admin))

        assert res.status_code == 400
        assert res.json()["error_code"] == "DISCOUNT_INVALID_RANGE"

    async def test_malformed_rule_rejected(self, client, admin):
        payload = discount_payload(rules=[{"type": "percentage", "value": 150}])

        res = await client.post(BASE, json=payload, headers=auth_headers(admin))

        assert res.status_code == 422
        body = res.json()
        assert body["success"] is False
        assert body["error_code"] == "VALIDATION_ERROR"

    async def test_creation_is_logged(self, client, admin, db_session):
        await client.post(BASE, json=discount_payload(), headers=auth_headers(admin))

        messages = (await db_session.execute(select(UserActivity.message))).scalars().all()
        assert "Admin (owner@sparklelaundry.com) created discount Midweek Wash" in messages


class TestAccessControl:
    async def test_customer_cannot_manage_discounts(self, client, customer):
        res = await client.get(BASE, headers=auth_headers(customer))

        assert res.status_code == 403
        assert res.json()["error_code"] == "PERMISSION_DENIED"

    async def test_invalid_token_rejected(self, client, admin):
        res = await client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})

        assert res.status_code == 401
        assert res.json()["error_code"] == "UNAUTHORIZED"

    async def test_admin_of_inactive_tenancy_refused(self, client, db_session):
        closed = await make_tenancy(db_session, "closed-laundry", is_active=False)
        owner = await make_user(db_session, "owner@closedlaundry.com", "admin", closed)

        res = await client.get(BASE, headers=auth_headers(owner))

        assert res.status_code == 403
        assert res.json()["error_code"] == "TENANCY_INACTIVE"

    async def test_other_tenancy_discount_is_not_found(self, client, admin, db_session, other_tenancy):
        foreign = await make_discount(db_session, other_tenancy, [{"type": "percentage", "value": 10}])

        res = await client.get(f"{BASE}{foreign.id}", headers=auth_headers(admin))

        assert res.status_code == 404
        assert res.json()["error_code"] == "DISCOUNT_NOT_FOUND"


class TestListDiscounts:
    async def test_filters_and_pagination(self, client, admin, db_session, tenancy, other_tenancy):
        await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}], name="Student Saver", priority=1)
        await make_discount(db_session, tenancy, [{"type": "fixed_amount", "value": 5}], name="Duvet Deal", priority=3)
        await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 20}], name="Old Promo", priority=2, is_active=False
        )
        await make_discount(db_session, other_tenancy, [{"type": "percentage", "value": 10}], name="Student Elsewhere")
        headers = auth_headers(admin)

        everything = (await client.get(BASE, headers=headers)).json()["data"]
        assert everything["total"] == 3
        assert [d["name"] for d in everything["items"]] == ["Duvet Deal", "Old Promo", "Student Saver"]

        searched = (await client.get(BASE, params={"search": "student"}, headers=headers)).json()["data"]
        assert [d["name"] for d in searched["items"]] == ["Student Saver"]

        inactive = (await client.get(BASE, params={"status": "inactive"}, headers=headers)).json()["data"]
        assert [d["name"] for d in inactive["items"]] == ["Old Promo"]

        fixed = (await client.get(BASE, params={"rule_type": "fixed_amount"}, headers=headers)).json()["data"]
        assert [d["name"] for d in fixed["items"]] == ["Duvet Deal"]

        page = (await client.get(BASE, params={"page": 2, "page_size": 2}, headers=headers)).json()["data"]
        assert page["page"] == 2
        assert page["pages"] == 2
        assert [d["name"] for d in page["items"]] == ["Student Saver"]

    async def test_search_treats_wildcards_literally(self, client, admin, db_session, tenancy):
        await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}], name="Student Saver")
        await make_discount(db_session, tenancy, [{"type": "percentage", "value": 50}], name="50% Off Duvets")
        headers = auth_headers(admin)

        res = await client.get(BASE, params={"search": "%"}, headers=headers)

        assert [d["name"] for d in res.json()["data"]["items"]] == ["50% Off Duvets"]

    async def test_rule_type_filter_follows_rule_changes(self, client, admin, db_session, tenancy):
        discount = await make_discount(
            db_session, tenancy,
            [
                {"type": "percentage", "value": 10},
                {"type": "tiered", "tiers": [{"min_value": 500, "discount_percentage": 15}]},
            ],
            name="Bulk Wash",
        )
        headers = auth_headers(admin)

        async def names(rule_type):
            res = await client.get(BASE, params={"rule_type": rule_type}, headers=headers)
            return [d["name"] for d in res.json()["data"]["items"]]

        assert await names("tiered") == ["Bulk Wash"]
        assert await names("fixed_amount") == []

        await client.put(
            f"{BASE}{discount.id}",
            json={"rules": [{"type": "fixed_amount", "value": 20}]},
            headers=headers,
        )

        assert await names("tiered") == []
        assert await names("fixed_amount") == ["Bulk Wash"]


class TestUpdateDeleteToggle:
    async def test_partial_update(self, client, admin, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])

        res = await client.put(f"{BASE}{discount.id}", json={"priority": 9}, headers=auth_headers(admin))

        assert res.status_code == 200
        data = res.json()["data"]
        assert data["priority"] == 9
        assert data["name"] == discount.name

    async def test_empty_update_rejected(self, client, admin, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])

        res = await client.put(f"{BASE}{discount.id}", json={}, headers=auth_headers(admin))

        assert res.status_code == 400
        assert res.json()["message"] == "No changes detected"

    async def test_update_checks_merged_date_range(self, client, admin, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])

        res = await client.put(
            f"{BASE}{discount.id}",
            json={"end_date": str(discount.start_date)},
            headers=auth_headers(admin),
        )

        assert res.status_code == 400
        assert res.json()["error_code"] == "DISCOUNT_INVALID_RANGE"

    async def test_null_for_required_field_rejected(self, client, admin, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])
        headers = auth_headers(admin)

        for body in ({"end_date": None}, {"name": None}, {"rules": None}):
            res = await client.put(f"{BASE}{discount.id}", json=body, headers=headers)
            assert res.status_code == 422
            assert res.json()["error_code"] == "VALIDATION_ERROR"

        await db_session.refresh(discount)
        assert discount.name == "Weekday Saver"

    async def test_description_can_be_cleared(self, client, admin, db_session, tenancy):
        discount = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}], description="Old blurb",
        )

        res = await client.put(f"{BASE}{discount.id}", json={"description": None}, headers=auth_headers(admin))

        assert res.status_code == 200
        assert res.json()["data"]["description"] is None

    async def test_toggle_flips_state(self, client, admin, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])
        headers = auth_headers(admin)

        off = await client.patch(f"{BASE}{discount.id}/toggle", headers=headers)
        on = await client.patch(f"{BASE}{discount.id}/toggle", headers=headers)

        assert off.json()["message"] == "Discount deactivated successfully"
        assert off.json()["data"]["is_active"] is False
        assert on.json()["message"] == "Discount activated successfully"
        assert on.json()["data"]["is_active"] is True

    async def test_delete(self, client, admin, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])
        headers = auth_headers(admin)

        res = await client.delete(f"{BASE}{discount.id}", headers=headers)
        assert res.status_code == 200
        assert res.json()["data"] is None

        assert (await client.get(f"{BASE}{discount.id}", headers=headers)).status_code == 404


class TestStatsAndAnalytics:
    async def test_stats(self, client, admin, db_session, tenancy):
        await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}],
            name="Busy", total_savings=Decimal("120.50"), total_orders=7,
        )
        await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 5}],
            name="Quiet", is_active=False, total_savings=Decimal("9.50"), total_orders=1,
        )

        res = await client.get(f"{BASE}stats", headers=auth_headers(admin))

        assert res.status_code == 200
        data = res.json()["data"]
        assert data["total"] == 2
        assert data["active"] == 1
        assert Decimal(data["total_savings"]) == Decimal("130.00")
        assert data["total_orders"] == 8
        assert {d["name"] for d in data["recent_discounts"]} == {"Busy", "Quiet"}

    async def test_analytics(self, client, admin, db_session, tenancy):
        discount = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}],
            start_date=today() - timedelta(days=4),
            end_date=today() + timedelta(days=6),
            usage_limit=40, used_count=10, total_orders=10, total_savings=Decimal("75"),
        )

        res = await client.get(f"{BASE}{discount.id}/analytics", headers=auth_headers(admin))

        data = res.json()["data"]
        assert data["total_usage"] == 10
        assert Decimal(data["average_discount"]) == Decimal("7.50")
        assert Decimal(data["usage_rate"]) == Decimal("25.00")
        assert data["days_active"] == 4
        assert data["days_remaining"] == 6


class TestApplyDiscounts:
    async def test_apply_records_usage(self, client, admin, customer, db_session, tenancy):
        pct = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}],
            name="Ten Off", priority=10, can_stack_with_other_discounts=True,
        )
        fixed = await make_discount(
            db_session, tenancy, [{"type": "fixed_amount", "value": 50}],
            name="Fifty Off", priority=5, can_stack_with_other_discounts=True,
        )

        res = await client.post(
            f"{BASE}apply",
            json={"customer_id": customer.id, "order": {"order_value": 1000}, "record_usage": True},
            headers=auth_headers(admin),
        )

        assert res.status_code == 200
        data = res.json()["data"]
        assert Decimal(data["total_discount"]) == Decimal("150.00")
        assert Decimal(data["final_amount"]) == Decimal("850.00")

        await db_session.refresh(pct)
        await db_session.refresh(fixed)
        assert (pct.used_count, pct.total_orders, pct.total_savings) == (1, 1, Decimal("100.00"))
        assert (fixed.used_count, fixed.total_orders, fixed.total_savings) == (1, 1, Decimal("50.00"))

    async def test_preview_does_not_record(self, client, admin, customer, db_session, tenancy):
        discount = await make_discount(db_session, tenancy, [{"type": "percentage", "value": 10}])

        res = await client.post(
            f"{BASE}apply",
            json={"customer_id": customer.id, "order": {"order_value": 200}},
            headers=auth_headers(admin),
        )

        assert Decimal(res.json()["data"]["total_discount"]) == Decimal("20.00")
        await db_session.refresh(discount)
        assert discount.used_count == 0

    async def test_customer_of_other_tenancy_not_found(self, client, admin, db_session, other_tenancy):
        stranger = await make_user(db_session, "sam@freshfolds.com", "customer", other_tenancy)

        res = await client.post(
            f"{BASE}apply",
            json={"customer_id": stranger.id, "order": {"order_value": 100}},
            headers=auth_headers(admin),
        )

        assert res.status_code == 404

    async def test_usage_limit_rechecked_when_recording(self, db_session, tenancy):
        discount = await make_discount(
            db_session, tenancy, [{"type": "percentage", "value": 10}], usage_limit=1,
        )
        now = promotions_now()
        candidates = await fetch_live_discounts(db_session, tenancy.id, now.date())

        # two checkouts evaluated before either one is recorded
        first, second = (
            evaluate_discounts(candidates, OrderSnapshot(order_value=Decimal("100")), tenancy_id=tenancy.id, now=now)
            for _ in range(2)
        )

        await record_discount_usage(db_session, first)
        await db_session.commit()

        with pytest.raises(ConflictError) as exc:
            await record_discount_usage(db_session, second)
        await db_session.rollback()

        assert exc.value.error_code == "DISCOUNT_LIMIT_REACHED"
        await db_session.refresh(discount)
        assert (discount.used_count, discount.total_orders) == (1, 1)

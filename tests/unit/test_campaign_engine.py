"""Unit tests for campaign approval, eligibility, benefit and selection."""

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from laundry_saas.models.enums.campaign_status import CampaignStatus
from laundry_saas.schemas.promotions.campaign_schemas import CampaignPromotion
from laundry_saas.schemas.promotions.discount_rule_schemas import parse_rules
from laundry_saas.services.promotions.campaign_engine import (
    CampaignOption,
    CustomerProfile,
    applies_to_tenancy,
    apply_campaign_promotions,
    calculate_benefit,
    is_campaign_live,
    is_customer_eligible,
    requires_approval,
    resolve_status_change,
    select_best_campaign,
)
from laundry_saas.services.promotions.discount_engine import DiscountCandidate

TODAY = date(2026, 3, 4)


def campaign(**overrides):
    fields = dict(
        id=1,
        name="Spring Refresh",
        scope="TENANT",
        tenancy_id=1,
        applicable_tenancy_ids=[],
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 31),
        priority=0,
        status="ACTIVE",
        is_deleted=False,
        approval_required=False,
        approved_at=None,
        min_order_value=None,
        audience_target="ALL_USERS",
        min_order_count=None,
        max_order_count=None,
        min_total_spent=None,
        max_total_spent=None,
        promotions=[{"type": "DISCOUNT", "value": "5"}],
        budget_type="UNLIMITED",
        budget_total=Decimal("0"),
        budget_spent=Decimal("0"),
        total_usage_limit=0,
        used_count=0,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def discount(id, rules):
    return DiscountCandidate(
        id=id,
        tenancy_id=1,
        name=f"Discount {id}",
        description=None,
        priority=0,
        rules=tuple(parse_rules(rules)),
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 31),
    )


REGULAR = CustomerProfile(order_count=4, total_spent=Decimal("320"))
NEWCOMER = CustomerProfile(order_count=0, total_spent=Decimal("0"))


class TestApproval:
    def test_global_always_needs_approval(self):
        assert requires_approval("GLOBAL", 0, [])

    def test_large_budget_needs_approval(self):
        assert requires_approval("TENANT", Decimal("1000.01"), [])
        assert not requires_approval("TENANT", Decimal("1000"), [])

    def test_large_override_needs_approval(self):
        big = CampaignPromotion(type="WALLET_CREDIT", value=Decimal("60"))
        small = CampaignPromotion(type="WALLET_CREDIT", value=Decimal("50"))

        assert requires_approval("TENANT", 0, [big])
        assert not requires_approval("TENANT", 0, [small])


class TestStatusChanges:
    def test_activation_without_approval_goes_pending(self):
        draft = campaign(status="DRAFT", approval_required=True)

        assert resolve_status_change(draft, CampaignStatus.ACTIVE) == CampaignStatus.PENDING_APPROVAL

    def test_approved_campaign_activates(self):
        draft = campaign(
            status="DRAFT",
            approval_required=True,
            approved_at=datetime(2026, 3, 2, tzinfo=timezone.utc),
        )

        assert resolve_status_change(draft, CampaignStatus.ACTIVE) == CampaignStatus.ACTIVE

    def test_pause_and_resume(self):
        assert resolve_status_change(campaign(), CampaignStatus.PAUSED) == CampaignStatus.PAUSED
        assert resolve_status_change(campaign(status="PAUSED"), CampaignStatus.ACTIVE) == CampaignStatus.ACTIVE

    @pytest.mark.parametrize(
        "current,requested",
        [
            ("COMPLETED", CampaignStatus.ACTIVE),
            ("CANCELLED", CampaignStatus.DRAFT),
            ("DRAFT", CampaignStatus.PAUSED),
            ("PENDING_APPROVAL", CampaignStatus.ACTIVE),
        ],
    )
    def test_illegal_transitions(self, current, requested):
        with pytest.raises(ValueError):
            resolve_status_change(campaign(status=current), requested)


class TestEligibility:
    def test_live_requires_active_status_and_window(self):
        assert is_campaign_live(campaign(), TODAY)
        assert not is_campaign_live(campaign(status="PAUSED"), TODAY)
        assert not is_campaign_live(campaign(is_deleted=True), TODAY)
        assert not is_campaign_live(campaign(), date(2026, 4, 1))

    def test_global_targeting(self):
        everyone = campaign(scope="GLOBAL", tenancy_id=None, applicable_tenancy_ids=[])
        targeted = campaign(scope="GLOBAL", tenancy_id=None, applicable_tenancy_ids=[2, 3])

        assert applies_to_tenancy(everyone, 7)
        assert applies_to_tenancy(targeted, 3)
        assert not applies_to_tenancy(targeted, 1)

    def test_tenant_campaign_only_for_owner(self):
        assert applies_to_tenancy(campaign(tenancy_id=1), 1)
        assert not applies_to_tenancy(campaign(tenancy_id=1), 2)

    def test_usage_limit(self):
        assert not is_customer_eligible(campaign(total_usage_limit=5, used_count=5), REGULAR, 100)
        assert is_customer_eligible(campaign(total_usage_limit=5, used_count=4), REGULAR, 100)

    def test_budget_exhausted(self):
        spent = campaign(budget_type="FIXED_AMOUNT", budget_total=Decimal("200"), budget_spent=Decimal("200"))

        assert not is_customer_eligible(spent, REGULAR, 100)

    def test_audience_target(self):
        new_only = campaign(audience_target="NEW_USERS")
        existing_only = campaign(audience_target="EXISTING_USERS")

        assert is_customer_eligible(new_only, NEWCOMER, 100)
        assert not is_customer_eligible(new_only, REGULAR, 100)
        assert is_customer_eligible(existing_only, REGULAR, 100)
        assert not is_customer_eligible(existing_only, NEWCOMER, 100)

    def test_order_count_and_spend_bounds(self):
        loyal = campaign(min_order_count=5)
        modest = campaign(max_total_spent=Decimal("300"))

        assert not is_customer_eligible(loyal, REGULAR, 100)
        assert not is_customer_eligible(modest, REGULAR, 100)
        assert is_customer_eligible(campaign(min_total_spent=Decimal("300")), REGULAR, 100)

    def test_min_order_value(self):
        assert not is_customer_eligible(campaign(min_order_value=Decimal("50")), REGULAR, 49)
        assert is_customer_eligible(campaign(min_order_value=Decimal("50")), REGULAR, 50)


class TestBenefit:
    def test_percentage_discount_reference(self):
        c = campaign(promotions=[{"type": "DISCOUNT", "discount_id": 10}])
        discounts = {10: discount(10, [{"type": "percentage", "value": 20}])}

        assert calculate_benefit(c, discounts, 150) == Decimal("30.00")

    def test_override_value_and_cap(self):
        c = campaign(promotions=[{"type": "DISCOUNT", "discount_id": 10, "value": "30", "max_discount": "25"}])
        discounts = {10: discount(10, [{"type": "percentage", "value": 20}])}

        assert calculate_benefit(c, discounts, 200) == Decimal("25.00")

    def test_fixed_discount_reference(self):
        c = campaign(promotions=[{"type": "DISCOUNT", "discount_id": 11}])
        discounts = {11: discount(11, [{"type": "fixed_amount", "value": 12}])}

        assert calculate_benefit(c, discounts, 200) == Decimal("12.00")

    def test_unavailable_discount_adds_nothing(self):
        c = campaign(promotions=[{"type": "DISCOUNT", "discount_id": 99}])

        assert calculate_benefit(c, {}, 200) == Decimal("0.00")

    def test_wallet_credit_default_and_loyalty_points(self):
        c = campaign(promotions=[{"type": "WALLET_CREDIT"}, {"type": "LOYALTY_POINTS"}])

        assert calculate_benefit(c, {}, 200) == Decimal("10.00")


class TestSelection:
    def option(self, id, scope="TENANT", priority=0, benefit="10"):
        return CampaignOption(
            campaign=campaign(id=id, scope=scope, priority=priority),
            benefit=Decimal(benefit),
            cost=Decimal(benefit),
        )

    def test_empty(self):
        assert select_best_campaign([]) is None

    def test_tenant_beats_global(self):
        best = select_best_campaign([
            self.option(1, scope="GLOBAL", priority=100, benefit="90"),
            self.option(2, scope="TENANT", priority=0, benefit="1"),
        ])

        assert best.campaign.id == 2

    def test_priority_then_benefit(self):
        best = select_best_campaign([
            self.option(1, priority=5, benefit="50"),
            self.option(2, priority=9, benefit="5"),
            self.option(3, priority=9, benefit="8"),
        ])

        assert best.campaign.id == 3

    def test_cost_breaks_remaining_ties(self):
        cheap = CampaignOption(campaign=campaign(id=1), benefit=Decimal("10"), cost=Decimal("4"))
        pricey = CampaignOption(campaign=campaign(id=2), benefit=Decimal("10"), cost=Decimal("9"))

        assert select_best_campaign([pricey, cheap]).campaign.id == 1


class TestApply:
    def test_total_is_capped_at_order_total(self):
        c = campaign(promotions=[
            {"type": "DISCOUNT", "value": "30"},
            {"type": "DISCOUNT", "value": "40"},
        ])

        total, applied = apply_campaign_promotions(c, {}, 50)

        assert total == Decimal("50.00")
        assert [p.discount for p in applied] == [Decimal("30.00"), Decimal("40.00")]

    def test_wallet_and_points_are_described_not_deducted(self):
        c = campaign(promotions=[
            {"type": "WALLET_CREDIT", "value": "15"},
            {"type": "LOYALTY_POINTS"},
        ])

        total, applied = apply_campaign_promotions(c, {}, 80)

        assert total == Decimal("0.00")
        assert [p.description for p in applied] == ["15.00 wallet credit", "100 loyalty points"]

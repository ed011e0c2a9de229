"""
Tests for plan limits and the entitlement gate.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.modules.plant_identification.application.handlers import GetEntitlementHandler
from app.modules.plant_identification.domain.models.entitlement import (
    Account,
    PlanTier,
    SubscriptionStatus,
)
from app.modules.plant_identification.domain.models.tour import Tour
from app.modules.plant_identification.domain.services.entitlement_service import (
    compute_entitlement,
    start_of_day_utc,
)


class TestComputeEntitlement:
    """Tests for the pure limit arithmetic."""

    def test_free_plan_allows_five_identifications_per_day(self):
        assert compute_entitlement(PlanTier.FREE, 4, 0, 0).can_identify
        assert not compute_entitlement(PlanTier.FREE, 5, 0, 0).can_identify

    def test_free_plan_allows_one_private_and_no_public_tour(self):
        fresh = compute_entitlement(PlanTier.FREE, 0, 0, 0)
        used = compute_entitlement(PlanTier.FREE, 0, 1, 0)

        assert fresh.can_create_private_tour
        assert not fresh.can_create_public_tour
        assert not used.can_create_tour(is_public=False)

    def test_pro_plan_caps_public_tours_only(self):
        entitlement = compute_entitlement(PlanTier.PRO, 500, 40, 5)

        assert entitlement.can_identify
        assert entitlement.can_create_private_tour
        assert not entitlement.can_create_public_tour

    def test_premium_is_unlimited(self):
        entitlement = compute_entitlement(PlanTier.PREMIUM, 10_000, 10_000, 10_000)

        assert entitlement.can_identify
        assert entitlement.can_create_tour(is_public=True)
        assert entitlement.limits.daily_identifications is None

    def test_usage_is_reported(self):
        entitlement = compute_entitlement(PlanTier.FREE, 3, 1, 0)

        assert entitlement.usage.daily_identifications == 3
        assert entitlement.plan == PlanTier.FREE


class TestDailyWindow:
    def test_start_of_day_is_utc_midnight(self):
        now = datetime(2025, 6, 2, 23, 59, tzinfo=timezone(timedelta(hours=-5)))

        # 23:59 at UTC-5 is already the next day in UTC
        assert start_of_day_utc(now) == datetime(2025, 6, 3, tzinfo=timezone.utc)

    def test_naive_time_is_treated_as_utc(self):
        assert start_of_day_utc(datetime(2025, 6, 2, 8, 30)) == datetime(2025, 6, 2, tzinfo=timezone.utc)


class TestAccountPlan:
    @pytest.mark.parametrize("status", [SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED])
    def test_lapsed_subscription_falls_back_to_free(self, status):
        account = Account(subscription_plan=PlanTier.PREMIUM, subscription_status=status)

        assert account.effective_plan == PlanTier.FREE

    def test_active_subscription_keeps_plan(self):
        assert Account(subscription_plan=PlanTier.PRO).effective_plan == PlanTier.PRO


class TestGetEntitlementHandler:
    """Tests for usage counted from stored data."""

    @pytest.fixture
    def handler(self, account_repo, sighting_repo, tour_repo):
        return GetEntitlementHandler(account_repo, sighting_repo, tour_repo)

    async def test_counts_todays_sightings_and_tours(self, handler, new_sighting, tour_repo):
        for _ in range(5):
            await new_sighting()
        await tour_repo.create(Tour(user_id="user-1", name="Morning loop"))

        entitlement = await handler.evaluate("user-1")

        assert entitlement.plan == PlanTier.FREE
        assert entitlement.usage.daily_identifications == 5
        assert not entitlement.can_identify
        assert not entitlement.can_create_private_tour

    async def test_yesterdays_sightings_do_not_count(self, handler, new_sighting):
        await new_sighting()

        entitlement = await handler.evaluate("user-1", now=datetime.now(timezone.utc) + timedelta(days=1))

        assert entitlement.usage.daily_identifications == 0

    async def test_read_does_not_provision_account(self, handler, account_repo):
        await handler.evaluate("user-9")

        assert await account_repo.get_by_id("user-9") is None

    async def test_write_path_provisions_account(self, handler, account_repo):
        await handler.evaluate("user-9", provision=True)

        assert (await account_repo.get_by_id("user-9")).subscription_plan == PlanTier.FREE

    async def test_upgraded_account_is_unlimited(self, handler, account_repo, new_sighting):
        await account_repo.get_or_create("user-1")
        await account_repo.update_subscription("user-1", PlanTier.PREMIUM)
        for _ in range(6):
            await new_sighting()

        assert (await handler.evaluate("user-1")).can_identify

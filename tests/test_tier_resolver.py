"""
Tests for tier resolution (fails open) and limit resolution (fails closed).
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update

from queueplan.errors import ErrorKind, RepositoryError
from queueplan.models import SubscriptionPlan


class TestGetTierByProfile:

    @pytest.mark.asyncio
    async def test_no_subscription_is_free(self, service):
        assert await service.get_tier_by_profile("nobody") == "free"

    @pytest.mark.asyncio
    async def test_active_subscription_tier(self, service):
        await service.upgrade_subscription("p1", "enterprise", "yearly")
        assert await service.get_tier_by_profile("p1") == "enterprise"

    @pytest.mark.asyncio
    async def test_cancelled_subscription_is_free(self, service):
        await service.upgrade_subscription("p1", "pro", "monthly")
        await service.cancel_subscription("p1")
        assert await service.get_tier_by_profile("p1") == "free"

    @pytest.mark.asyncio
    async def test_store_failure_is_free(self, service):
        service.subscriptions.get_active_for_profile = AsyncMock(
            side_effect=RepositoryError(ErrorKind.OPERATION_FAILED, "db down", "get_active_for_profile")
        )
        assert await service.get_tier_by_profile("p1") == "free"

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_free(self, service):
        service.plans.get_plan = AsyncMock(side_effect=RuntimeError("boom"))
        await service.upgrade_subscription("p1", "pro", "monthly")
        assert await service.get_tier_by_profile("p1") == "free"

    @pytest.mark.asyncio
    async def test_missing_plan_is_free(self, service):
        await service.upgrade_subscription("p1", "pro", "monthly")
        service.plans.get_plan = AsyncMock(return_value=None)
        assert await service.get_tier_by_profile("p1") == "free"


class TestGetLimitsByTier:

    @pytest.mark.asyncio
    async def test_plan_limits(self, service):
        limits = await service.get_limits_by_tier("pro")
        assert limits.max_shops == 3
        assert limits.max_queues_per_day == 100
        assert limits.has_advanced_reports is True
        assert limits.has_api_access is False

    @pytest.mark.asyncio
    async def test_null_limits_are_unlimited(self, service):
        limits = await service.get_limits_by_tier("enterprise")
        assert limits.max_shops is None
        assert limits.max_free_poster_designs is None
        assert limits.has_api_access is True

    @pytest.mark.asyncio
    async def test_unknown_tier_uses_fallback(self, service):
        limits = await service.get_limits_by_tier("platinum")
        assert limits.max_shops == 1
        assert limits.max_queues_per_day == 50
        assert limits.max_promotions == 0
        assert limits.has_analytics is False

    @pytest.mark.asyncio
    async def test_inactive_plan_uses_fallback(self, service, db):
        await db.execute(
            update(SubscriptionPlan).where(SubscriptionPlan.tier == "pro").values(is_active=False)
        )
        await db.commit()

        limits = await service.get_limits_by_tier("pro")
        assert limits.max_shops == 1
        assert limits.has_advanced_reports is False

    @pytest.mark.asyncio
    async def test_lowest_sort_order_wins(self, service):
        await service.plans.create_plan({
            "tier": "pro", "name": "โปรพิเศษ", "name_en": "Pro Promo",
            "max_shops": 10, "sort_order": 5,
        })
        limits = await service.get_limits_by_tier("pro")
        assert limits.max_shops == 3

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, service):
        service.plans.get_active_plan_by_tier = AsyncMock(
            side_effect=RepositoryError(ErrorKind.OPERATION_FAILED, "db down", "get_active_plan_by_tier")
        )
        with pytest.raises(RepositoryError):
            await service.get_limits_by_tier("pro")

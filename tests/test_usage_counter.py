"""
Tests for usage aggregation windows and the usage stats snapshot.
"""

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest

from queueplan.errors import ErrorKind, RepositoryError
from queueplan.repositories.usage_counter import UsageCounter


TODAY = date(2026, 3, 15)


@pytest.fixture
def counter(db):
    return UsageCounter(db)


class TestAggregationWindows:

    @pytest.mark.asyncio
    async def test_empty_ledger(self, counter):
        usage = await counter.get_current_usage("p1", today=TODAY)
        assert usage.current_shops == 0
        assert usage.today_queues == 0
        assert usage.monthly_sms_sent == 0

    @pytest.mark.asyncio
    async def test_queues_count_today_only(self, counter):
        await counter.record_usage("p1", "queue", 7, usage_date=TODAY)
        await counter.record_usage("p1", "queue", 40, usage_date=TODAY - timedelta(days=1))

        usage = await counter.get_current_usage("p1", today=TODAY)
        assert usage.today_queues == 7

    @pytest.mark.asyncio
    async def test_sms_counts_calendar_month(self, counter):
        await counter.record_usage("p1", "sms", 3, usage_date=date(2026, 3, 1))
        await counter.record_usage("p1", "sms", 2, usage_date=TODAY)
        await counter.record_usage("p1", "sms", 50, usage_date=date(2026, 2, 28))

        usage = await counter.get_current_usage("p1", today=TODAY)
        assert usage.monthly_sms_sent == 5

    @pytest.mark.asyncio
    async def test_other_counters_all_time_with_releases(self, counter):
        await counter.record_usage("p1", "shop", 1, usage_date=date(2025, 1, 1))
        await counter.record_usage("p1", "shop", 1, usage_date=date(2025, 6, 1))
        await counter.record_usage("p1", "shop", -1, usage_date=TODAY)
        await counter.record_usage("p1", "staff", 4, usage_date=date(2025, 6, 1))
        await counter.record_usage("p1", "promotion", 2, usage_date=TODAY)
        await counter.record_usage("p1", "poster_free", 3, usage_date=TODAY)
        await counter.record_usage("p1", "poster_paid", 1, usage_date=TODAY)

        usage = await counter.get_current_usage("p1", today=TODAY)
        assert usage.current_shops == 1
        assert usage.current_staff == 4
        assert usage.active_promotions == 2
        assert usage.used_poster_designs == 3
        assert usage.paid_poster_designs == 1

    @pytest.mark.asyncio
    async def test_counters_never_negative(self, counter):
        await counter.record_usage("p1", "shop", -2, usage_date=TODAY)
        usage = await counter.get_current_usage("p1", today=TODAY)
        assert usage.current_shops == 0

    @pytest.mark.asyncio
    async def test_shop_scope(self, counter):
        await counter.record_usage("p1", "queue", 5, shop_id="shop-a", usage_date=TODAY)
        await counter.record_usage("p1", "queue", 2, shop_id="shop-b", usage_date=TODAY)

        assert (await counter.get_current_usage("p1", today=TODAY)).today_queues == 7
        assert (await counter.get_current_usage("p1", shop_id="shop-a", today=TODAY)).today_queues == 5

    @pytest.mark.asyncio
    async def test_other_profiles_ignored(self, counter):
        await counter.record_usage("p2", "queue", 5, usage_date=TODAY)
        assert (await counter.get_current_usage("p1", today=TODAY)).today_queues == 0

    @pytest.mark.asyncio
    async def test_unknown_usage_type(self, counter):
        with pytest.raises(RepositoryError) as exc_info:
            await counter.record_usage("p1", "rockets", 1)
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR


class TestUsageHistory:

    @pytest.mark.asyncio
    async def test_latest_first_and_paged(self, counter):
        await counter.record_usage("p1", "queue", 1, usage_date=TODAY - timedelta(days=2))
        await counter.record_usage("p1", "sms", 2, usage_date=TODAY)
        await counter.record_usage("p1", "shop", 1, usage_date=TODAY - timedelta(days=1))
        await counter.record_usage("p2", "queue", 9, usage_date=TODAY)

        records, total = await counter.list_usage("p1", per_page=2)
        assert total == 3
        assert [record.usage_date for record in records] == [TODAY, TODAY - timedelta(days=1)]
        assert records[0].usage_type == "sms"
        assert records[0].usage_count == 2

        records, total = await counter.list_usage("p1", page=2, per_page=2)
        assert total == 3
        assert [record.usage_type for record in records] == ["queue"]

    @pytest.mark.asyncio
    async def test_shop_scope(self, counter):
        await counter.record_usage("p1", "queue", 5, shop_id="shop-a", usage_date=TODAY)
        await counter.record_usage("p1", "queue", -1, shop_id="shop-b", usage_date=TODAY)

        records, total = await counter.list_usage("p1", shop_id="shop-b")
        assert total == 1
        assert records[0].shop_id == "shop-b"
        assert records[0].usage_count == -1

    @pytest.mark.asyncio
    async def test_empty(self, counter):
        assert await counter.list_usage("p1") == ([], 0)

    @pytest.mark.asyncio
    async def test_service_passthrough(self, service):
        await service.usage.record_usage("p1", "promotion", 1)
        records, total = await service.list_usage_history("p1")
        assert total == 1
        assert records[0].usage_type == "promotion"


class TestUsageStats:

    @pytest.mark.asyncio
    async def test_stats_include_retention_and_poster_total(self, service):
        await service.upgrade_subscription("p1", "pro", "monthly")
        await service.usage.record_usage("p1", "poster_free", 2)
        await service.usage.record_usage("p1", "poster_paid", 3)

        stats = await service.get_usage_stats("p1")
        assert stats.total_posters == 5
        assert stats.data_retention_months == 12

    @pytest.mark.asyncio
    async def test_stats_zeroed_on_failure(self, service):
        service.usage.get_current_usage = AsyncMock(
            side_effect=RepositoryError(ErrorKind.OPERATION_FAILED, "db down", "get_current_usage")
        )
        stats = await service.get_usage_stats("p1", shop_id="shop-a")
        assert stats.profile_id == "p1"
        assert stats.shop_id == "shop-a"
        assert stats.current_shops == 0
        assert stats.data_retention_months is None

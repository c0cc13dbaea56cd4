"""
Tests for the feature grant store: validation, expiry, revocation and listing.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from queueplan.errors import ErrorKind, RepositoryError
from queueplan.repositories.feature_grants import FeatureGrantStore
from queueplan.utils.clock import utcnow


@pytest.fixture
def grants(db):
    return FeatureGrantStore(db)


class TestGrant:

    @pytest.mark.asyncio
    async def test_grant_is_active(self, grants):
        record = await grants.grant("p1", "poster_design", "poster_007", price=Decimal("49"))
        assert record.is_active is True
        assert record.expires_at is None
        assert record.currency == "THB"
        assert await grants.has_active_grant("p1", "poster_design", "poster_007") is True

    @pytest.mark.asyncio
    async def test_grant_matches_exact_feature_id(self, grants):
        await grants.grant("p1", "poster_design", "poster_007")
        assert await grants.has_active_grant("p1", "poster_design", "poster_7") is False
        assert await grants.has_active_grant("p1", "api_access", "poster_007") is False

    @pytest.mark.asyncio
    async def test_expired_grant_is_inactive(self, grants):
        await grants.grant("p1", "api_access", "api_access", expires_at=utcnow() - timedelta(minutes=1))
        assert await grants.has_active_grant("p1", "api_access", "api_access") is False

    @pytest.mark.asyncio
    async def test_future_expiry_is_active(self, grants):
        await grants.grant("p1", "api_access", "api_access", expires_at=utcnow() + timedelta(days=1))
        assert await grants.has_active_grant("p1", "api_access", "api_access") is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("profile_id,feature_type,feature_id,price", [
        ("", "poster_design", "poster_004", Decimal("0")),
        ("p1", "poster_design", "", Decimal("0")),
        ("p1", "time_travel", "poster_004", Decimal("0")),
        ("p1", "poster_design", "poster_004", Decimal("-1")),
    ])
    async def test_validation(self, grants, profile_id, feature_type, feature_id, price):
        with pytest.raises(RepositoryError) as exc_info:
            await grants.grant(profile_id, feature_type, feature_id, price=price)
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR
        assert exc_info.value.operation == "grant"


class TestRevoke:

    @pytest.mark.asyncio
    async def test_revoke_deactivates_all_matching(self, grants):
        await grants.grant("p1", "poster_design", "poster_004")
        await grants.grant("p1", "poster_design", "poster_004")
        await grants.grant("p1", "poster_design", "poster_005")

        assert await grants.revoke("p1", "poster_design", "poster_004") is True
        assert await grants.has_active_grant("p1", "poster_design", "poster_004") is False
        assert await grants.has_active_grant("p1", "poster_design", "poster_005") is True

    @pytest.mark.asyncio
    async def test_revoke_nothing(self, grants):
        assert await grants.revoke("p1", "poster_design", "poster_004") is False

    @pytest.mark.asyncio
    async def test_revoke_twice(self, grants):
        await grants.grant("p1", "poster_design", "poster_004")
        assert await grants.revoke("p1", "poster_design", "poster_004") is True
        assert await grants.revoke("p1", "poster_design", "poster_004") is False


class TestListGrants:

    @pytest.mark.asyncio
    async def test_filter_and_paginate(self, grants):
        for number in range(5):
            await grants.grant("p1", "poster_design", f"poster_{number:03d}")
        await grants.grant("p1", "api_access", "api_access")
        await grants.grant("p2", "poster_design", "poster_000")

        posters, total = await grants.list_grants("p1", "poster_design", page=1, per_page=2)
        assert total == 5
        assert len(posters) == 2
        assert posters[0].feature_id == "poster_004"

        everything, total = await grants.list_grants("p1")
        assert total == 6
        assert len(everything) == 6

    @pytest.mark.asyncio
    async def test_active_only(self, grants):
        await grants.grant("p1", "poster_design", "poster_004")
        await grants.grant("p1", "poster_design", "poster_005")
        await grants.revoke("p1", "poster_design", "poster_004")

        active, total = await grants.list_grants("p1", active_only=True)
        assert total == 1
        assert active[0].feature_id == "poster_005"

"""
Subscription Service
Caller-facing entitlement engine: tiers, limits, usage, upgrades and feature grants
"""

import logging
from typing import List, Optional, Tuple
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from queueplan.errors import ErrorKind, SubscriptionError
from queueplan.repositories.feature_grants import FeatureGrantStore
from queueplan.repositories.plan_catalog import PlanCatalog
from queueplan.repositories.subscriptions import SubscriptionStore
from queueplan.repositories.usage_counter import UsageCounter
from queueplan.schemas.subscription import (
    FeatureAccessRecord,
    SubscriptionLimits,
    UpgradeOption,
    UsageRecordEntry,
    UsageStats,
    UserSubscription,
)
from queueplan.services.entitlements import EntitlementEvaluator
from queueplan.services.fallbacks import capture, usage_or_zero
from queueplan.services.tier_resolver import TierResolver
from queueplan.services.upgrades import UpgradeOrchestrator, build_user_subscription
from queueplan.utils.database import get_db

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Entitlement engine bound to one database session"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.plans = PlanCatalog(db)
        self.subscriptions = SubscriptionStore(db)
        self.usage = UsageCounter(db)
        self.grants = FeatureGrantStore(db)
        self.resolver = TierResolver(self.plans, self.subscriptions)
        self.evaluator = EntitlementEvaluator(self.resolver, self.usage, self.grants)
        self.orchestrator = UpgradeOrchestrator(self.plans, self.subscriptions, self.grants, self.resolver)

    # Tier & limits

    async def get_tier_by_profile(self, profile_id: str) -> str:
        return await self.resolver.get_tier_by_profile(profile_id)

    async def get_limits_by_tier(self, tier: str) -> SubscriptionLimits:
        return await self.resolver.get_limits_by_tier(tier)

    async def _usage_stats(self, profile_id: str, shop_id: Optional[str]) -> UsageStats:
        counters = await self.usage.get_current_usage(profile_id, shop_id=shop_id)
        tier = await self.resolver.get_tier_by_profile(profile_id)
        limits = await self.resolver.get_limits_by_tier(tier)
        return UsageStats(
            **counters.model_dump(),
            total_posters=counters.used_poster_designs + counters.paid_poster_designs,
            data_retention_months=limits.data_retention_months,
        )

    async def get_usage_stats(self, profile_id: str, shop_id: Optional[str] = None) -> UsageStats:
        """Usage counters with the tier's data retention; zeroed when usage cannot be read"""
        return usage_or_zero(await capture(self._usage_stats(profile_id, shop_id)), profile_id, shop_id)

    async def list_usage_history(
        self,
        profile_id: str,
        shop_id: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[UsageRecordEntry], int]:
        return await self.usage.list_usage(profile_id, shop_id, page, per_page)

    async def get_user_subscription(self, profile_id: str) -> Optional[UserSubscription]:
        """Active subscription with tier and limits, or None"""
        subscription = await self.subscriptions.get_active_for_profile(profile_id)
        if not subscription:
            return None

        plan = await self.plans.get_plan(subscription.plan_id)
        if not plan:
            logger.warning(
                f"Subscription plan missing: profile_id={profile_id}, plan_id={subscription.plan_id}"
            )
            return None

        return build_user_subscription(subscription, plan.tier, await self.resolver.get_limits_by_tier(plan.tier))

    async def cancel_subscription(self, profile_id: str) -> UserSubscription:
        """End the profile's active subscription; the profile falls back to free"""
        subscription = await self.subscriptions.get_active_for_profile(profile_id)
        if not subscription:
            raise SubscriptionError(
                ErrorKind.NOT_FOUND,
                "No active subscription",
                "cancel_subscription",
                {"profile_id": profile_id},
            )

        cancelled = await self.subscriptions.cancel_subscription(subscription.id)
        plan = await self.plans.get_plan(cancelled.plan_id)
        tier = plan.tier if plan else await self.resolver.get_tier_by_profile(profile_id)
        return build_user_subscription(cancelled, tier, await self.resolver.get_limits_by_tier(tier))

    # Entitlements

    async def can_perform_action_by_limits(
        self,
        profile_id: str,
        action: str,
        shop_id: Optional[str] = None,
    ) -> bool:
        return await self.evaluator.can_perform_action(profile_id, action, shop_id)

    async def is_poster_accessible(self, profile_id: str, poster_id: str) -> bool:
        return await self.evaluator.is_poster_accessible(profile_id, poster_id)

    # Upgrades & purchases

    async def get_upgrade_options(self, current_tier: str) -> List[UpgradeOption]:
        return await self.orchestrator.get_upgrade_options(current_tier)

    async def upgrade_subscription(self, profile_id: str, tier: str, billing_period: str) -> UserSubscription:
        return await self.orchestrator.upgrade_subscription(profile_id, tier, billing_period)

    async def purchase_one_time_access(self, profile_id: str, feature: str, duration_days: int) -> bool:
        return await self.orchestrator.purchase_one_time_access(profile_id, feature, duration_days)

    async def purchase_poster_design(self, profile_id: str, poster_id: str) -> bool:
        return await self.orchestrator.purchase_poster_design(profile_id, poster_id)

    # Feature grants

    async def has_feature_access(self, profile_id: str, feature_type: str, feature_id: str) -> bool:
        return await self.grants.has_active_grant(profile_id, feature_type, feature_id)

    async def revoke_feature_access(self, profile_id: str, feature_type: str, feature_id: str) -> bool:
        return await self.grants.revoke(profile_id, feature_type, feature_id)

    async def list_feature_access(
        self,
        profile_id: str,
        feature_type: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[FeatureAccessRecord], int]:
        return await self.grants.list_grants(profile_id, feature_type, page, per_page)


def get_subscription_service(db: AsyncSession = Depends(get_db)) -> SubscriptionService:
    """FastAPI dependency"""
    return SubscriptionService(db)

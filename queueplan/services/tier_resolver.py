"""
Tier & Limits Resolver
Tier lookup fails open to free; limit lookup fails closed
"""

import logging
from typing import Optional
from queueplan.config.plan_limits import get_fallback_limits
from queueplan.repositories.plan_catalog import PlanCatalog
from queueplan.repositories.subscriptions import SubscriptionStore
from queueplan.schemas.subscription import SubscriptionLimits
from queueplan.services.fallbacks import capture, tier_or_default, limits_or_raise

logger = logging.getLogger(__name__)


class TierResolver:
    """Resolves a profile's tier and a tier's limits"""

    def __init__(self, plans: PlanCatalog, subscriptions: SubscriptionStore):
        self.plans = plans
        self.subscriptions = subscriptions

    async def _lookup_tier(self, profile_id: str) -> Optional[str]:
        subscription = await self.subscriptions.get_active_for_profile(profile_id)
        if not subscription:
            return None

        plan = await self.plans.get_plan(subscription.plan_id)
        if not plan:
            logger.warning(
                f"Active subscription references a missing plan: profile_id={profile_id}, "
                f"plan_id={subscription.plan_id}"
            )
            return None
        return plan.tier

    async def get_tier_by_profile(self, profile_id: str) -> str:
        """Tier of the profile's active subscription; free when there is none or lookup fails"""
        return tier_or_default(await capture(self._lookup_tier(profile_id)), profile_id)

    async def _lookup_limits(self, tier: str) -> SubscriptionLimits:
        plan = await self.plans.get_active_plan_by_tier(tier)
        if not plan:
            logger.info(f"No active plan for tier, using fallback limits: tier={tier}")
            return SubscriptionLimits(**get_fallback_limits())
        return plan.limits()

    async def get_limits_by_tier(self, tier: str) -> SubscriptionLimits:
        """Limits of the tier's active plan, or the free-tier fallback; fetch errors propagate"""
        return limits_or_raise(await capture(self._lookup_limits(tier)), tier)

"""
Entitlement Evaluator
Decides whether a profile may perform an action given its tier limits and recorded usage
"""

import logging
from typing import Optional
from queueplan.config.plan_limits import FREE_POSTER_DESIGNS, extract_poster_number
from queueplan.models.feature_access import FeatureType
from queueplan.repositories.feature_grants import FeatureGrantStore
from queueplan.repositories.usage_counter import UsageCounter
from queueplan.services.fallbacks import capture, decision_or_deny
from queueplan.services.tier_resolver import TierResolver

logger = logging.getLogger(__name__)

# action -> (usage counter, limit)
COUNTED_ACTIONS = {
    "create_shop": ("current_shops", "max_shops"),
    "create_queue": ("today_queues", "max_queues_per_day"),
    "add_staff": ("current_staff", "max_staff"),
    "send_sms": ("monthly_sms_sent", "max_sms_per_month"),
    "create_promotion": ("active_promotions", "max_promotions"),
}

# action -> feature flag
FLAG_ACTIONS = {
    "access_advanced_reports": "has_advanced_reports",
    "access_analytics": "has_analytics",
    "access_api": "has_api_access",
    "custom_branding": "has_custom_branding",
    "custom_qr_code": "has_custom_qr_code",
    "priority_support": "has_priority_support",
    "promotion_features": "has_promotion_features",
}


def within_limit(usage: int, limit: Optional[int]) -> bool:
    """None means unlimited"""
    return limit is None or usage < limit


class EntitlementEvaluator:
    """Action and poster entitlement checks"""

    def __init__(self, resolver: TierResolver, usage: UsageCounter, grants: FeatureGrantStore):
        self.resolver = resolver
        self.usage = usage
        self.grants = grants

    async def _evaluate(self, profile_id: str, action: str, shop_id: Optional[str]) -> bool:
        tier = await self.resolver.get_tier_by_profile(profile_id)
        limits = await self.resolver.get_limits_by_tier(tier)
        counters = await self.usage.get_current_usage(profile_id, shop_id=shop_id)

        if action in COUNTED_ACTIONS:
            usage_field, limit_field = COUNTED_ACTIONS[action]
            usage = getattr(counters, usage_field)
            limit = getattr(limits, limit_field)
            allowed = within_limit(usage, limit)
            if not allowed:
                logger.info(
                    f"Limit reached: profile_id={profile_id}, action={action}, tier={tier}, "
                    f"usage={usage}, limit={limit}"
                )
            return allowed

        if action in FLAG_ACTIONS:
            return bool(getattr(limits, FLAG_ACTIONS[action]))

        logger.debug(f"Unknown action allowed: profile_id={profile_id}, action={action}")
        return True

    async def can_perform_action(self, profile_id: str, action: str, shop_id: Optional[str] = None) -> bool:
        """True when the action is within the profile's limits; any failure denies"""
        outcome = await capture(self._evaluate(profile_id, action, shop_id))
        return decision_or_deny(outcome, profile_id=profile_id, action=action, shop_id=shop_id)

    async def _poster_accessible(self, profile_id: str, poster_id: str) -> bool:
        ordinal = extract_poster_number(poster_id)
        if ordinal is not None and ordinal <= FREE_POSTER_DESIGNS:
            return True

        if await self.grants.has_active_grant(profile_id, FeatureType.POSTER_DESIGN.value, poster_id):
            return True

        tier = await self.resolver.get_tier_by_profile(profile_id)
        limits = await self.resolver.get_limits_by_tier(tier)
        quota = limits.max_free_poster_designs
        if quota is None:
            return True
        return ordinal is not None and ordinal <= quota

    async def is_poster_accessible(self, profile_id: str, poster_id: str) -> bool:
        """Purchased, among the first free designs, or within the tier's free quota"""
        outcome = await capture(self._poster_accessible(profile_id, poster_id))
        return decision_or_deny(outcome, profile_id=profile_id, poster_id=poster_id)

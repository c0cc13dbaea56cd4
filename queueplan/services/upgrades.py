"""
Upgrade & Purchase Orchestrator
Upgrade offers, tier upgrades and one-time purchases (entitlement side only, no payment capture)
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import List
from queueplan.config.plan_limits import (
    MAX_ONE_TIME_ACCESS_DAYS,
    ONE_TIME_ACCESS_PRICE,
    POSTER_DESIGN_PRICE,
    RECOMMENDED_TIER,
    calculate_discount_percentage,
    get_billing_period_days,
    get_tier_position,
    resolve_one_time_feature,
)
from queueplan.errors import ErrorKind, PlanNotFoundError, SubscriptionError, UnknownFeatureError
from queueplan.models.feature_access import FeatureType
from queueplan.models.subscription import BillingPeriod
from queueplan.repositories.feature_grants import FeatureGrantStore
from queueplan.repositories.plan_catalog import PlanCatalog
from queueplan.repositories.subscriptions import SubscriptionStore
from queueplan.schemas.subscription import (
    ProfileSubscriptionRecord,
    SubscriptionLimits,
    UpgradeOption,
    UserSubscription,
)
from queueplan.services.fallbacks import capture, options_or_empty, purchase_or_false
from queueplan.services.tier_resolver import TierResolver
from queueplan.utils.clock import utcnow

logger = logging.getLogger(__name__)


def build_user_subscription(
    subscription: ProfileSubscriptionRecord,
    tier: str,
    limits: SubscriptionLimits,
) -> UserSubscription:
    return UserSubscription(
        id=subscription.id,
        profile_id=subscription.profile_id,
        plan_id=subscription.plan_id,
        tier=tier,
        status=subscription.status,
        billing_period=subscription.billing_period,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        auto_renew=subscription.auto_renew,
        price_per_period=subscription.price_per_period,
        currency=subscription.currency,
        limits=limits,
        created_at=subscription.created_at,
        updated_at=subscription.updated_at,
    )


class UpgradeOrchestrator:
    """Upgrade offers, upgrades and one-time purchases"""

    def __init__(
        self,
        plans: PlanCatalog,
        subscriptions: SubscriptionStore,
        grants: FeatureGrantStore,
        resolver: TierResolver,
    ):
        self.plans = plans
        self.subscriptions = subscriptions
        self.grants = grants
        self.resolver = resolver

    async def _build_options(self, current_tier: str) -> List[UpgradeOption]:
        candidates = await self.plans.list_active_plans_above(get_tier_position(current_tier))

        options = []
        for plan in candidates:
            options.append(UpgradeOption(
                tier=plan.tier,
                name=plan.name,
                name_en=plan.name_en,
                description=plan.description,
                description_en=plan.description_en,
                monthly_price=plan.monthly_price,
                yearly_price=plan.yearly_price,
                lifetime_price=plan.lifetime_price,
                currency=plan.currency,
                limits=await self.resolver.get_limits_by_tier(plan.tier),
                features=plan.features,
                features_en=plan.features_en,
                is_recommended=plan.tier == RECOMMENDED_TIER.value,
                discount_percentage=calculate_discount_percentage(plan.monthly_price, plan.yearly_price),
            ))

        options.sort(key=lambda option: get_tier_position(option.tier))
        return options

    async def get_upgrade_options(self, current_tier: str) -> List[UpgradeOption]:
        """Active plans above the current tier, in tier order; empty on failure"""
        return options_or_empty(await capture(self._build_options(current_tier)), current_tier)

    async def upgrade_subscription(self, profile_id: str, tier: str, billing_period: str) -> UserSubscription:
        """Move a profile onto the active plan of a tier; the previous active subscription is ended"""
        try:
            period = BillingPeriod(billing_period)
        except ValueError:
            raise SubscriptionError(
                ErrorKind.VALIDATION_ERROR,
                f"Unsupported billing period '{billing_period}'",
                "upgrade_subscription",
                {"profile_id": profile_id, "billing_period": billing_period},
            )

        plan = await self.plans.get_active_plan_by_tier(tier)
        if not plan:
            raise PlanNotFoundError(tier)

        price = plan.monthly_price if period == BillingPeriod.MONTHLY else plan.yearly_price
        if price is None:
            logger.warning(f"Plan has no price for period: tier={tier}, billing_period={period.value}")
            raise SubscriptionError(
                ErrorKind.VALIDATION_ERROR,
                f"Plan '{tier}' is not offered {period.value}",
                "upgrade_subscription",
                {"profile_id": profile_id, "tier": tier, "billing_period": period.value},
            )

        # Fixed 30/365 day periods, not calendar months
        start_date = utcnow()
        end_date = start_date + timedelta(days=get_billing_period_days(period.value))

        subscription = await self.subscriptions.activate(
            profile_id=profile_id,
            plan_id=plan.id,
            billing_period=period.value,
            price_per_period=Decimal(str(price)),
            start_date=start_date,
            end_date=end_date,
            currency=plan.currency,
        )

        logger.info(
            f"Subscription upgraded: profile_id={profile_id}, tier={tier}, "
            f"billing_period={period.value}, price={price}"
        )
        return build_user_subscription(subscription, plan.tier, await self.resolver.get_limits_by_tier(plan.tier))

    async def _grant_one_time(self, profile_id: str, feature_type: FeatureType, duration_days: int):
        if not 0 < duration_days <= MAX_ONE_TIME_ACCESS_DAYS:
            raise SubscriptionError(
                ErrorKind.VALIDATION_ERROR,
                f"Duration must be between 1 and {MAX_ONE_TIME_ACCESS_DAYS} days",
                "purchase_one_time_access",
                {"profile_id": profile_id, "duration_days": duration_days},
            )

        granted_at = utcnow()
        return await self.grants.grant(
            profile_id,
            feature_type.value,
            feature_type.value,
            price=ONE_TIME_ACCESS_PRICE,
            expires_at=granted_at + timedelta(days=duration_days),
            granted_at=granted_at,
        )

    async def purchase_one_time_access(self, profile_id: str, feature: str, duration_days: int) -> bool:
        """Grant temporary access to a feature; unknown features raise, other failures return False"""
        feature_type = resolve_one_time_feature(feature)
        if feature_type is None:
            raise UnknownFeatureError(feature)

        outcome = await capture(self._grant_one_time(profile_id, feature_type, duration_days))
        return purchase_or_false(
            outcome, profile_id=profile_id, feature_type=feature_type.value, duration_days=duration_days
        )

    async def purchase_poster_design(self, profile_id: str, poster_id: str) -> bool:
        """Permanent access to one poster design"""
        outcome = await capture(self.grants.grant(
            profile_id,
            FeatureType.POSTER_DESIGN.value,
            poster_id,
            price=POSTER_DESIGN_PRICE,
        ))
        return purchase_or_false(outcome, profile_id=profile_id, poster_id=poster_id)

"""
Plan Limits Configuration
Tier ordering, fallback limits and purchase pricing policy for the entitlement engine
"""

import math
import os
import re
from decimal import Decimal
from typing import Dict, Any, Optional
from queueplan.models.plan import SubscriptionTier
from queueplan.models.subscription import BillingPeriod
from queueplan.models.feature_access import FeatureType

# Upgrade order; a tier's position is its index here
TIER_ORDER = [SubscriptionTier.FREE, SubscriptionTier.PRO, SubscriptionTier.ENTERPRISE]

# Used when no active plan exists for a tier (NULL limits would mean unlimited, so every value is set)
FREE_TIER_FALLBACK_LIMITS: Dict[str, Any] = {
    "max_shops": 1,
    "max_queues_per_day": 50,
    "data_retention_months": 1,
    "max_staff": 1,
    "max_sms_per_month": 10,
    "max_promotions": 0,
    "max_free_poster_designs": 3,
    "has_advanced_reports": False,
    "has_custom_qr_code": False,
    "has_api_access": False,
    "has_priority_support": False,
    "has_custom_branding": False,
    "has_analytics": False,
    "has_promotion_features": False,
}

# Posters 1..N are free for every tier, independent of the plan's own quota
FREE_POSTER_DESIGNS = 3

RECOMMENDED_TIER = SubscriptionTier.PRO

# Fixed day offsets, not calendar months/years
BILLING_PERIOD_DAYS = {
    BillingPeriod.MONTHLY: 30,
    BillingPeriod.YEARLY: 365,
}

# One-time purchase pricing (currency-agnostic units)
ONE_TIME_ACCESS_PRICE = Decimal(os.getenv("ONE_TIME_ACCESS_PRICE", "99"))
POSTER_DESIGN_PRICE = Decimal(os.getenv("POSTER_DESIGN_PRICE", "49"))
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "THB")

# Upper bound for purchased temporary access
MAX_ONE_TIME_ACCESS_DAYS = 3650

# Feature names accepted by purchase_one_time_access
ONE_TIME_FEATURE_ALIASES = {
    "api_access": FeatureType.API_ACCESS,
    "api": FeatureType.API_ACCESS,
    "custom_branding": FeatureType.CUSTOM_BRANDING,
    "branding": FeatureType.CUSTOM_BRANDING,
    "priority_support": FeatureType.PRIORITY_SUPPORT,
    "support": FeatureType.PRIORITY_SUPPORT,
}

_NON_DIGITS = re.compile(r"\D")


def get_tier_position(tier: str) -> int:
    """Position of a tier in the upgrade order, -1 when unrecognised"""
    for index, known in enumerate(TIER_ORDER):
        if known.value == tier:
            return index
    return -1


def get_fallback_limits() -> Dict[str, Any]:
    """Fresh copy of the hardcoded free-tier limits"""
    return dict(FREE_TIER_FALLBACK_LIMITS)


def get_billing_period_days(billing_period: str) -> int:
    """Length of a billing period in days"""
    try:
        return BILLING_PERIOD_DAYS[BillingPeriod(billing_period)]
    except ValueError:
        raise ValueError(f"Unsupported billing period: {billing_period}")


def calculate_discount_percentage(monthly_price: Optional[float], yearly_price: Optional[float]) -> int:
    """
    Yearly discount relative to paying monthly for twelve months

    Rounds half up, e.g. monthly 500 / yearly 4800 -> 20
    """
    if not monthly_price or not yearly_price or monthly_price <= 0 or yearly_price <= 0:
        return 0
    raw = (1 - (yearly_price / 12) / monthly_price) * 100
    return int(math.floor(raw + 0.5))


def extract_poster_number(poster_id: str) -> Optional[int]:
    """Ordinal of a poster id ("poster_004" -> 4), None when it carries no digits"""
    digits = _NON_DIGITS.sub("", poster_id or "")
    if not digits:
        return None
    return int(digits)


def resolve_one_time_feature(feature: str) -> Optional[FeatureType]:
    """Canonical feature type for a purchasable feature name"""
    return ONE_TIME_FEATURE_ALIASES.get((feature or "").strip().lower())

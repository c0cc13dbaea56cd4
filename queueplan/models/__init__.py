"""
Model package initialization
"""

from .plan import SubscriptionPlan, SubscriptionTier
from .subscription import ProfileSubscription, SubscriptionStatus, BillingPeriod
from .usage import UsageRecord, UsageType
from .feature_access import FeatureAccess, FeatureType

__all__ = [
    # Core models
    "SubscriptionPlan",
    "ProfileSubscription",
    "UsageRecord",
    "FeatureAccess",

    # Enums
    "SubscriptionTier",
    "SubscriptionStatus",
    "BillingPeriod",
    "UsageType",
    "FeatureType",
]

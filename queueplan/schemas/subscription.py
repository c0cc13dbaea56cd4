"""
Subscription engine records
Plain data returned to callers; ORM rows never leave the repositories
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from queueplan.utils.clock import as_utc


class SubscriptionLimits(BaseModel):
    """Resolved limits and feature flags for a tier (None = unlimited)"""
    model_config = ConfigDict(from_attributes=True)

    max_shops: Optional[int] = None
    max_queues_per_day: Optional[int] = None
    data_retention_months: Optional[int] = None
    max_staff: Optional[int] = None
    max_sms_per_month: Optional[int] = None
    max_promotions: Optional[int] = None
    max_free_poster_designs: Optional[int] = None
    has_advanced_reports: bool = False
    has_custom_qr_code: bool = False
    has_api_access: bool = False
    has_priority_support: bool = False
    has_custom_branding: bool = False
    has_analytics: bool = False
    has_promotion_features: bool = False


class SubscriptionPlanRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tier: str
    name: str
    name_en: str
    description: Optional[str] = None
    description_en: Optional[str] = None
    monthly_price: Optional[float] = None
    yearly_price: Optional[float] = None
    lifetime_price: Optional[float] = None
    currency: str
    max_shops: Optional[int] = None
    max_queues_per_day: Optional[int] = None
    data_retention_months: Optional[int] = None
    max_staff: Optional[int] = None
    max_sms_per_month: Optional[int] = None
    max_promotions: Optional[int] = None
    max_free_poster_designs: Optional[int] = None
    has_advanced_reports: bool = False
    has_custom_qr_code: bool = False
    has_api_access: bool = False
    has_priority_support: bool = False
    has_custom_branding: bool = False
    has_analytics: bool = False
    has_promotion_features: bool = False
    features: List[str] = Field(default_factory=list)
    features_en: List[str] = Field(default_factory=list)
    is_active: bool = True
    sort_order: int = 0
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return as_utc(value)

    def limits(self) -> SubscriptionLimits:
        """Limits/flags block of this plan"""
        return SubscriptionLimits(**{name: getattr(self, name) for name in SubscriptionLimits.model_fields})


class ProfileSubscriptionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: str
    plan_id: UUID
    status: str
    billing_period: str
    price_per_period: float
    currency: str
    auto_renew: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("start_date", "end_date", "cancelled_at", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return as_utc(value)


class UsageCounters(BaseModel):
    """Raw counters read from the usage ledger"""
    profile_id: str
    shop_id: Optional[str] = None
    current_shops: int = 0
    today_queues: int = 0
    current_staff: int = 0
    monthly_sms_sent: int = 0
    active_promotions: int = 0
    used_poster_designs: int = 0
    paid_poster_designs: int = 0


class UsageStats(BaseModel):
    """Usage counters merged with the tier's data retention"""
    profile_id: str
    shop_id: Optional[str] = None
    current_shops: int = 0
    today_queues: int = 0
    current_staff: int = 0
    monthly_sms_sent: int = 0
    active_promotions: int = 0
    used_poster_designs: int = 0
    paid_poster_designs: int = 0
    total_posters: int = 0
    data_retention_months: Optional[int] = None


class UsageRecordEntry(BaseModel):
    """One usage ledger event"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: str
    shop_id: Optional[str] = None
    usage_type: str
    usage_count: int
    usage_date: date
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return as_utc(value)


class FeatureAccessRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: str
    feature_type: str
    feature_id: str
    price: float
    currency: str
    granted_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool

    @field_validator("granted_at", "expires_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return as_utc(value)


class UserSubscription(BaseModel):
    """A profile's active subscription with its tier and limits resolved"""
    id: UUID
    profile_id: str
    plan_id: UUID
    tier: str
    status: str
    billing_period: str
    start_date: datetime
    end_date: Optional[datetime] = None
    auto_renew: bool
    price_per_period: float
    currency: str
    limits: SubscriptionLimits
    created_at: datetime
    updated_at: datetime


class UpgradeOption(BaseModel):
    tier: str
    name: str
    name_en: str
    description: Optional[str] = None
    description_en: Optional[str] = None
    monthly_price: Optional[float] = None
    yearly_price: Optional[float] = None
    lifetime_price: Optional[float] = None
    currency: str
    limits: SubscriptionLimits
    features: List[str] = Field(default_factory=list)
    features_en: List[str] = Field(default_factory=list)
    is_recommended: bool = False
    discount_percentage: int = 0

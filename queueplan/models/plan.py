"""
Subscription plan model - tier pricing, quantitative limits and feature flags
"""

import enum
import uuid
from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, Text, JSON, Uuid
from queueplan.utils.clock import utcnow
from queueplan.utils.database import Base


class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    tier = Column(String(20), nullable=False, index=True)  # free|pro|enterprise
    name = Column(String(100), nullable=False)
    name_en = Column(String(100), nullable=False)
    description = Column(Text)
    description_en = Column(Text)

    # Pricing
    monthly_price = Column(Numeric(10, 2))
    yearly_price = Column(Numeric(10, 2))
    lifetime_price = Column(Numeric(10, 2))
    currency = Column(String(3), nullable=False, default="THB")

    # Limits (NULL means unlimited)
    max_shops = Column(Integer)
    max_queues_per_day = Column(Integer)
    max_staff = Column(Integer)
    data_retention_months = Column(Integer)
    max_sms_per_month = Column(Integer)
    max_promotions = Column(Integer)
    max_free_poster_designs = Column(Integer)

    # Feature flags
    has_advanced_reports = Column(Boolean, nullable=False, default=False)
    has_custom_qr_code = Column(Boolean, nullable=False, default=False)
    has_api_access = Column(Boolean, nullable=False, default=False)
    has_priority_support = Column(Boolean, nullable=False, default=False)
    has_custom_branding = Column(Boolean, nullable=False, default=False)
    has_analytics = Column(Boolean, nullable=False, default=False)
    has_promotion_features = Column(Boolean, nullable=False, default=False)

    # Display metadata
    features = Column(JSON, nullable=False, default=list)
    features_en = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    sort_order = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<SubscriptionPlan(tier='{self.tier}', name='{self.name_en}', active={self.is_active})>"

"""
Profile subscription model - links a profile (shop owner account) to a plan
"""

import enum
import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey, Uuid
from queueplan.utils.clock import utcnow
from queueplan.utils.database import Base


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class BillingPeriod(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ProfileSubscription(Base):
    __tablename__ = "profile_subscriptions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    profile_id = Column(String(64), nullable=False, index=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("subscription_plans.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value, index=True)
    billing_period = Column(String(20), nullable=False, default=BillingPeriod.MONTHLY.value)

    # Price snapshot at purchase time, not the live plan price
    price_per_period = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="THB")
    auto_renew = Column(Boolean, nullable=False, default=True)

    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_date = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<ProfileSubscription(profile_id='{self.profile_id}', plan_id={self.plan_id}, status='{self.status}')>"

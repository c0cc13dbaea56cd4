"""
Usage ledger model - append-only usage events per profile (usage_records table)
Counters such as today's queues or this month's SMS are sums over this ledger
"""

import enum
import uuid
from sqlalchemy import Column, String, Integer, Date, DateTime, Uuid, Index
from queueplan.utils.clock import utcnow
from queueplan.utils.database import Base


class UsageType(str, enum.Enum):
    SHOP = "shop"
    QUEUE = "queue"
    STAFF = "staff"
    SMS = "sms"
    PROMOTION = "promotion"
    POSTER_FREE = "poster_free"
    POSTER_PAID = "poster_paid"


class UsageRecord(Base):
    __tablename__ = "usage_records"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(String(64), nullable=False, index=True)
    shop_id = Column(String(64), index=True)

    usage_type = Column(String(20), nullable=False)
    usage_count = Column(Integer, nullable=False, default=1)  # negative releases capacity
    usage_date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_usage_records_profile_type_date", "profile_id", "usage_type", "usage_date"),
    )

    def __repr__(self):
        return f"<UsageRecord(profile_id='{self.profile_id}', type='{self.usage_type}', count={self.usage_count}, date={self.usage_date})>"

"""
Feature access model - explicit, possibly time-limited feature grants (one-time purchases)
"""

import enum
import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Uuid, Index
from queueplan.utils.clock import utcnow
from queueplan.utils.database import Base


class FeatureType(str, enum.Enum):
    POSTER_DESIGN = "poster_design"
    API_ACCESS = "api_access"
    CUSTOM_BRANDING = "custom_branding"
    PRIORITY_SUPPORT = "priority_support"


class FeatureAccess(Base):
    __tablename__ = "feature_access"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    profile_id = Column(String(64), nullable=False, index=True)
    feature_type = Column(String(30), nullable=False)
    feature_id = Column(String(100), nullable=False)  # opaque, e.g. poster_004

    price = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="THB")

    granted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True))  # NULL never expires
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_feature_access_lookup", "profile_id", "feature_type", "feature_id"),
    )

    def __repr__(self):
        return f"<FeatureAccess(profile_id='{self.profile_id}', type='{self.feature_type}', feature_id='{self.feature_id}')>"

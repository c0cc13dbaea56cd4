"""
Feature Grant Store
One-time feature grants (purchased posters, temporary feature access)
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import select, update, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from queueplan.config.plan_limits import DEFAULT_CURRENCY
from queueplan.errors import ErrorKind, RepositoryError
from queueplan.models.feature_access import FeatureAccess, FeatureType
from queueplan.schemas.subscription import FeatureAccessRecord
from queueplan.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _active_clause(now: datetime):
    return (
        FeatureAccess.is_active.is_(True),
        or_(FeatureAccess.expires_at.is_(None), FeatureAccess.expires_at > now),
    )


class FeatureGrantStore:
    """Feature access grant storage"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(self, operation: str, error: SQLAlchemyError, **context) -> RepositoryError:
        await self.db.rollback()
        logger.error(f"Feature grant store error: operation={operation}, error={error}")
        return RepositoryError(ErrorKind.OPERATION_FAILED, str(error), operation, context)

    async def grant(
        self,
        profile_id: str,
        feature_type: str,
        feature_id: str,
        price: Decimal = Decimal("0"),
        expires_at: Optional[datetime] = None,
        granted_at: Optional[datetime] = None,
        currency: str = DEFAULT_CURRENCY,
    ) -> FeatureAccessRecord:
        """Create an active grant"""
        if not profile_id:
            raise RepositoryError(ErrorKind.VALIDATION_ERROR, "Profile ID is required", "grant")
        if not feature_id:
            raise RepositoryError(ErrorKind.VALIDATION_ERROR, "Feature ID is required", "grant")
        try:
            feature_type = FeatureType(feature_type).value
        except ValueError:
            raise RepositoryError(
                ErrorKind.VALIDATION_ERROR,
                f"Invalid feature type '{feature_type}'",
                "grant",
                {"profile_id": profile_id},
            )
        if price < 0:
            raise RepositoryError(ErrorKind.VALIDATION_ERROR, "Price cannot be negative", "grant")

        access = FeatureAccess(
            profile_id=profile_id,
            feature_type=feature_type,
            feature_id=feature_id,
            price=price,
            currency=currency,
            granted_at=granted_at or utcnow(),
            expires_at=expires_at,
            is_active=True,
        )
        try:
            self.db.add(access)
            await self.db.commit()
            await self.db.refresh(access)
        except SQLAlchemyError as e:
            raise await self._fail("grant", e, profile_id=profile_id, feature_type=feature_type, feature_id=feature_id)

        logger.info(
            f"Feature access granted: profile_id={profile_id}, feature_type={feature_type}, "
            f"feature_id={feature_id}, expires_at={expires_at}"
        )
        return FeatureAccessRecord.model_validate(access)

    async def has_active_grant(self, profile_id: str, feature_type: str, feature_id: str) -> bool:
        query = (
            select(func.count(FeatureAccess.id))
            .where(
                FeatureAccess.profile_id == profile_id,
                FeatureAccess.feature_type == feature_type,
                FeatureAccess.feature_id == feature_id,
                *_active_clause(utcnow()),
            )
        )
        try:
            count = (await self.db.execute(query)).scalar() or 0
        except SQLAlchemyError as e:
            raise await self._fail(
                "has_active_grant", e, profile_id=profile_id, feature_type=feature_type, feature_id=feature_id
            )
        return count > 0

    async def revoke(self, profile_id: str, feature_type: str, feature_id: str) -> bool:
        """Deactivate matching active grants; True when any were deactivated"""
        try:
            result = await self.db.execute(
                update(FeatureAccess)
                .where(
                    FeatureAccess.profile_id == profile_id,
                    FeatureAccess.feature_type == feature_type,
                    FeatureAccess.feature_id == feature_id,
                    FeatureAccess.is_active.is_(True),
                )
                .values(is_active=False, updated_at=utcnow())
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("revoke", e, profile_id=profile_id, feature_type=feature_type, feature_id=feature_id)

        revoked = result.rowcount > 0
        if revoked:
            logger.info(
                f"Feature access revoked: profile_id={profile_id}, feature_type={feature_type}, "
                f"feature_id={feature_id}, rows={result.rowcount}"
            )
        return revoked

    async def list_grants(
        self,
        profile_id: str,
        feature_type: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
        active_only: bool = False,
    ) -> Tuple[List[FeatureAccessRecord], int]:
        """Newest grants first; returns (grants, total)"""
        scope = [FeatureAccess.profile_id == profile_id]
        if feature_type:
            scope.append(FeatureAccess.feature_type == feature_type)
        if active_only:
            scope.extend(_active_clause(utcnow()))

        query = (
            select(FeatureAccess)
            .where(*scope)
            .order_by(FeatureAccess.granted_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        try:
            total = (await self.db.execute(select(func.count(FeatureAccess.id)).where(*scope))).scalar() or 0
            result = await self.db.execute(query)
            grants = result.scalars().all()
        except SQLAlchemyError as e:
            raise await self._fail("list_grants", e, profile_id=profile_id, feature_type=feature_type)

        return [FeatureAccessRecord.model_validate(grant) for grant in grants], total

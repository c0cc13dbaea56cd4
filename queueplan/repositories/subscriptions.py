"""
Subscription store
Profile subscriptions; rows are ended logically, never deleted
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from queueplan.config.plan_limits import DEFAULT_CURRENCY
from queueplan.errors import ErrorKind, RepositoryError
from queueplan.models.subscription import ProfileSubscription, SubscriptionStatus
from queueplan.schemas.subscription import ProfileSubscriptionRecord
from queueplan.utils.clock import utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("status", "billing_period", "price_per_period", "currency", "auto_renew", "end_date")


class SubscriptionStore:
    """Profile subscription storage"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(self, operation: str, error: SQLAlchemyError, **context) -> RepositoryError:
        await self.db.rollback()
        logger.error(f"Subscription store error: operation={operation}, error={error}")
        return RepositoryError(ErrorKind.OPERATION_FAILED, str(error), operation, context)

    async def list_subscriptions(
        self,
        page: int = 1,
        per_page: int = 20,
        profile_id: Optional[str] = None,
    ) -> Tuple[List[ProfileSubscriptionRecord], int]:
        """Newest first; returns (subscriptions, total)"""
        query = select(ProfileSubscription)
        count_query = select(func.count(ProfileSubscription.id))
        if profile_id:
            query = query.where(ProfileSubscription.profile_id == profile_id)
            count_query = count_query.where(ProfileSubscription.profile_id == profile_id)

        query = query.order_by(ProfileSubscription.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        try:
            total = (await self.db.execute(count_query)).scalar() or 0
            result = await self.db.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise await self._fail("list_subscriptions", e, profile_id=profile_id)

        return [ProfileSubscriptionRecord.model_validate(row) for row in rows], total

    async def get_subscription(self, subscription_id: UUID) -> Optional[ProfileSubscriptionRecord]:
        try:
            row = await self.db.get(ProfileSubscription, subscription_id)
        except SQLAlchemyError as e:
            raise await self._fail("get_subscription", e, subscription_id=str(subscription_id))
        return ProfileSubscriptionRecord.model_validate(row) if row else None

    async def get_active_for_profile(self, profile_id: str) -> Optional[ProfileSubscriptionRecord]:
        """The profile's active subscription, most recently started first"""
        query = (
            select(ProfileSubscription)
            .where(
                ProfileSubscription.profile_id == profile_id,
                ProfileSubscription.status == SubscriptionStatus.ACTIVE.value,
            )
            .order_by(ProfileSubscription.start_date.desc())
            .limit(1)
        )
        try:
            result = await self.db.execute(query)
            row = result.scalars().first()
        except SQLAlchemyError as e:
            raise await self._fail("get_active_for_profile", e, profile_id=profile_id)
        return ProfileSubscriptionRecord.model_validate(row) if row else None

    async def activate(
        self,
        profile_id: str,
        plan_id: UUID,
        billing_period: str,
        price_per_period: Decimal,
        start_date: datetime,
        end_date: Optional[datetime],
        currency: str = DEFAULT_CURRENCY,
        auto_renew: bool = True,
    ) -> ProfileSubscriptionRecord:
        """Create an active subscription, ending any previous active one in the same transaction"""
        subscription = ProfileSubscription(
            profile_id=profile_id,
            plan_id=plan_id,
            status=SubscriptionStatus.ACTIVE.value,
            billing_period=billing_period,
            price_per_period=price_per_period,
            currency=currency,
            auto_renew=auto_renew,
            start_date=start_date,
            end_date=end_date,
        )

        try:
            await self.db.execute(
                update(ProfileSubscription)
                .where(
                    ProfileSubscription.profile_id == profile_id,
                    ProfileSubscription.status == SubscriptionStatus.ACTIVE.value,
                )
                .values(
                    status=SubscriptionStatus.CANCELLED.value,
                    end_date=start_date,
                    cancelled_at=start_date,
                    updated_at=start_date,
                )
            )
            self.db.add(subscription)
            await self.db.commit()
            await self.db.refresh(subscription)
        except SQLAlchemyError as e:
            raise await self._fail("activate", e, profile_id=profile_id, plan_id=str(plan_id))

        logger.info(
            f"Subscription activated: profile_id={profile_id}, plan_id={plan_id}, "
            f"billing_period={billing_period}, end_date={end_date}"
        )
        return ProfileSubscriptionRecord.model_validate(subscription)

    async def update_subscription(self, subscription_id: UUID, data: Dict[str, Any]) -> ProfileSubscriptionRecord:
        try:
            row = await self.db.get(ProfileSubscription, subscription_id)
            if not row:
                raise RepositoryError(
                    ErrorKind.NOT_FOUND,
                    "Subscription not found",
                    "update_subscription",
                    {"subscription_id": str(subscription_id)},
                )

            for key, value in data.items():
                if key in UPDATABLE_FIELDS:
                    setattr(row, key, value)

            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            raise await self._fail("update_subscription", e, subscription_id=str(subscription_id))

        return ProfileSubscriptionRecord.model_validate(row)

    async def cancel_subscription(self, subscription_id: UUID) -> ProfileSubscriptionRecord:
        """End a subscription now"""
        now = utcnow()
        try:
            row = await self.db.get(ProfileSubscription, subscription_id)
            if not row:
                raise RepositoryError(
                    ErrorKind.NOT_FOUND,
                    "Subscription not found",
                    "cancel_subscription",
                    {"subscription_id": str(subscription_id)},
                )

            row.status = SubscriptionStatus.CANCELLED.value
            row.cancelled_at = now
            row.end_date = now
            row.auto_renew = False

            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            raise await self._fail("cancel_subscription", e, subscription_id=str(subscription_id))

        logger.info(f"Subscription cancelled: id={subscription_id}, profile_id={row.profile_id}")
        return ProfileSubscriptionRecord.model_validate(row)

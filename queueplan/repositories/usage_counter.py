"""
Usage Counter
Reads a usage snapshot from the usage ledger; writes are made by the external recording path
"""

import logging
from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from queueplan.errors import ErrorKind, RepositoryError
from queueplan.models.usage import UsageRecord, UsageType
from queueplan.schemas.subscription import UsageCounters, UsageRecordEntry
from queueplan.utils.clock import utcnow

logger = logging.getLogger(__name__)

# usage_type -> snapshot field
COUNTER_FIELDS = {
    UsageType.SHOP.value: "current_shops",
    UsageType.QUEUE.value: "today_queues",
    UsageType.STAFF.value: "current_staff",
    UsageType.SMS.value: "monthly_sms_sent",
    UsageType.PROMOTION.value: "active_promotions",
    UsageType.POSTER_FREE.value: "used_poster_designs",
    UsageType.POSTER_PAID.value: "paid_poster_designs",
}


class UsageCounter:
    """Usage ledger access"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_current_usage(
        self,
        profile_id: str,
        shop_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> UsageCounters:
        """
        Current counters for a profile

        Queues count today only, SMS the current calendar month, everything else all time.
        Passing shop_id scopes every counter to that shop.
        """
        today = today or utcnow().date()
        month_start = today.replace(day=1)

        scope = [UsageRecord.profile_id == profile_id, UsageRecord.usage_date <= today]
        if shop_id:
            scope.append(UsageRecord.shop_id == shop_id)

        query = select(
            UsageRecord.usage_type,
            func.coalesce(func.sum(UsageRecord.usage_count), 0),
        ).where(*scope)

        windowed = {
            UsageType.QUEUE.value: today,
            UsageType.SMS.value: month_start,
        }

        counters = UsageCounters(profile_id=profile_id, shop_id=shop_id)
        try:
            # All-time counters in one grouped query
            result = await self.db.execute(
                query.where(UsageRecord.usage_type.notin_(list(windowed))).group_by(UsageRecord.usage_type)
            )
            totals = {usage_type: total for usage_type, total in result.all()}

            for usage_type, since in windowed.items():
                result = await self.db.execute(
                    query.where(UsageRecord.usage_type == usage_type, UsageRecord.usage_date >= since)
                    .group_by(UsageRecord.usage_type)
                )
                totals.update({row_type: total for row_type, total in result.all()})
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Usage lookup failed: profile_id={profile_id}, shop_id={shop_id}, error={e}")
            raise RepositoryError(
                ErrorKind.OPERATION_FAILED,
                str(e),
                "get_current_usage",
                {"profile_id": profile_id, "shop_id": shop_id},
            )

        for usage_type, total in totals.items():
            field = COUNTER_FIELDS.get(usage_type)
            if field:
                setattr(counters, field, max(int(total), 0))

        return counters

    async def list_usage(
        self,
        profile_id: str,
        shop_id: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[UsageRecordEntry], int]:
        """Ledger events, latest usage_date first; returns (records, total)"""
        scope = [UsageRecord.profile_id == profile_id]
        if shop_id:
            scope.append(UsageRecord.shop_id == shop_id)

        query = (
            select(UsageRecord)
            .where(*scope)
            .order_by(UsageRecord.usage_date.desc(), UsageRecord.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        try:
            total = (await self.db.execute(select(func.count(UsageRecord.id)).where(*scope))).scalar() or 0
            result = await self.db.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Usage history failed: profile_id={profile_id}, shop_id={shop_id}, error={e}")
            raise RepositoryError(
                ErrorKind.OPERATION_FAILED,
                str(e),
                "list_usage",
                {"profile_id": profile_id, "shop_id": shop_id},
            )

        return [UsageRecordEntry.model_validate(row) for row in rows], total

    async def record_usage(
        self,
        profile_id: str,
        usage_type: str,
        count: int = 1,
        shop_id: Optional[str] = None,
        usage_date: Optional[date] = None,
    ) -> None:
        """Append a usage event; negative counts release capacity"""
        try:
            usage_type = UsageType(usage_type).value
        except ValueError:
            raise RepositoryError(
                ErrorKind.VALIDATION_ERROR,
                f"Unknown usage type '{usage_type}'",
                "record_usage",
                {"profile_id": profile_id},
            )

        record = UsageRecord(
            profile_id=profile_id,
            shop_id=shop_id,
            usage_type=usage_type,
            usage_count=count,
            usage_date=usage_date or utcnow().date(),
        )
        try:
            self.db.add(record)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Usage record failed: profile_id={profile_id}, usage_type={usage_type}, error={e}")
            raise RepositoryError(
                ErrorKind.OPERATION_FAILED,
                str(e),
                "record_usage",
                {"profile_id": profile_id, "usage_type": usage_type},
            )

        logger.info(
            f"Usage recorded: profile_id={profile_id}, shop_id={shop_id}, "
            f"usage_type={usage_type}, count={count}"
        )

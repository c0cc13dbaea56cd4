"""
Plan Catalog repository
Read access to subscription plans plus admin CRUD
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from queueplan.config.plan_limits import TIER_ORDER
from queueplan.errors import ErrorKind, RepositoryError
from queueplan.models.plan import SubscriptionPlan
from queueplan.models.subscription import ProfileSubscription
from queueplan.schemas.subscription import SubscriptionPlanRecord

logger = logging.getLogger(__name__)

# Columns callers may set through create_plan / update_plan
PLAN_FIELDS = (
    "tier", "name", "name_en", "description", "description_en",
    "monthly_price", "yearly_price", "lifetime_price", "currency",
    "max_shops", "max_queues_per_day", "max_staff", "data_retention_months",
    "max_sms_per_month", "max_promotions", "max_free_poster_designs",
    "has_advanced_reports", "has_custom_qr_code", "has_api_access",
    "has_priority_support", "has_custom_branding", "has_analytics",
    "has_promotion_features", "features", "features_en", "is_active", "sort_order",
)


class PlanCatalog:
    """Subscription plan storage"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(self, operation: str, error: SQLAlchemyError, **context) -> RepositoryError:
        await self.db.rollback()
        logger.error(f"Plan catalog error: operation={operation}, error={error}")
        return RepositoryError(ErrorKind.OPERATION_FAILED, str(error), operation, context)

    async def list_plans(
        self,
        page: int = 1,
        per_page: int = 20,
        active_only: bool = False,
    ) -> Tuple[List[SubscriptionPlanRecord], int]:
        """Page through plans ordered by sort_order; returns (plans, total)"""
        query = select(SubscriptionPlan)
        count_query = select(func.count(SubscriptionPlan.id))
        if active_only:
            query = query.where(SubscriptionPlan.is_active.is_(True))
            count_query = count_query.where(SubscriptionPlan.is_active.is_(True))

        query = query.order_by(SubscriptionPlan.sort_order, SubscriptionPlan.created_at)
        query = query.offset((page - 1) * per_page).limit(per_page)

        try:
            total = (await self.db.execute(count_query)).scalar() or 0
            result = await self.db.execute(query)
            plans = result.scalars().all()
        except SQLAlchemyError as e:
            raise await self._fail("list_plans", e, page=page, per_page=per_page)

        return [SubscriptionPlanRecord.model_validate(plan) for plan in plans], total

    async def get_plan(self, plan_id: UUID) -> Optional[SubscriptionPlanRecord]:
        try:
            plan = await self.db.get(SubscriptionPlan, plan_id)
        except SQLAlchemyError as e:
            raise await self._fail("get_plan", e, plan_id=str(plan_id))
        return SubscriptionPlanRecord.model_validate(plan) if plan else None

    async def get_active_plan_by_tier(self, tier: str) -> Optional[SubscriptionPlanRecord]:
        """Active plan for a tier; lowest sort_order, then oldest, wins when several exist"""
        query = (
            select(SubscriptionPlan)
            .where(SubscriptionPlan.tier == tier, SubscriptionPlan.is_active.is_(True))
            .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.created_at)
            .limit(1)
        )
        try:
            result = await self.db.execute(query)
            plan = result.scalars().first()
        except SQLAlchemyError as e:
            raise await self._fail("get_active_plan_by_tier", e, tier=tier)
        return SubscriptionPlanRecord.model_validate(plan) if plan else None

    async def list_active_plans_above(self, position: int) -> List[SubscriptionPlanRecord]:
        """Active plans whose tier sits strictly above the given position in the upgrade order"""
        tiers = [tier.value for tier in TIER_ORDER[max(position + 1, 0):]]
        if not tiers:
            return []

        query = (
            select(SubscriptionPlan)
            .where(SubscriptionPlan.tier.in_(tiers), SubscriptionPlan.is_active.is_(True))
            .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.created_at)
        )
        try:
            result = await self.db.execute(query)
            plans = result.scalars().all()
        except SQLAlchemyError as e:
            raise await self._fail("list_active_plans_above", e, position=position)
        return [SubscriptionPlanRecord.model_validate(plan) for plan in plans]

    async def create_plan(self, data: Dict[str, Any]) -> SubscriptionPlanRecord:
        plan = SubscriptionPlan(**{key: value for key, value in data.items() if key in PLAN_FIELDS})
        try:
            self.db.add(plan)
            await self.db.commit()
            await self.db.refresh(plan)
        except SQLAlchemyError as e:
            raise await self._fail("create_plan", e, tier=data.get("tier"))

        logger.info(f"Plan created: id={plan.id}, tier={plan.tier}")
        return SubscriptionPlanRecord.model_validate(plan)

    async def update_plan(self, plan_id: UUID, data: Dict[str, Any]) -> SubscriptionPlanRecord:
        try:
            plan = await self.db.get(SubscriptionPlan, plan_id)
            if not plan:
                raise RepositoryError(
                    ErrorKind.NOT_FOUND, "Plan not found", "update_plan", {"plan_id": str(plan_id)}
                )

            for key, value in data.items():
                if key in PLAN_FIELDS:
                    setattr(plan, key, value)

            await self.db.commit()
            await self.db.refresh(plan)
        except SQLAlchemyError as e:
            raise await self._fail("update_plan", e, plan_id=str(plan_id))

        logger.info(f"Plan updated: id={plan.id}, tier={plan.tier}")
        return SubscriptionPlanRecord.model_validate(plan)

    async def delete_plan(self, plan_id: UUID) -> bool:
        """Hard delete; plans still referenced by subscriptions must be deactivated instead"""
        try:
            plan = await self.db.get(SubscriptionPlan, plan_id)
            if not plan:
                return False

            references = (await self.db.execute(
                select(func.count(ProfileSubscription.id)).where(ProfileSubscription.plan_id == plan_id)
            )).scalar() or 0
            if references:
                raise RepositoryError(
                    ErrorKind.VALIDATION_ERROR,
                    f"Plan is referenced by {references} subscription(s); deactivate it instead",
                    "delete_plan",
                    {"plan_id": str(plan_id), "subscriptions": references},
                )

            await self.db.delete(plan)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("delete_plan", e, plan_id=str(plan_id))

        logger.info(f"Plan deleted: id={plan_id}")
        return True

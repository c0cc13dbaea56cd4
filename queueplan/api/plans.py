"""
Plans API endpoints
Public plan catalog, tier limits and upgrade offers
"""

from fastapi import APIRouter, Depends, Query
from typing import List
import logging

from queueplan.schemas.subscription import SubscriptionLimits, SubscriptionPlanRecord, UpgradeOption
from queueplan.services.subscription_service import SubscriptionService, get_subscription_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=List[SubscriptionPlanRecord])
async def list_active_plans(
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Active plans in display order"""
    plans, _ = await service.plans.list_plans(page=1, per_page=100, active_only=True)
    return plans


@router.get("/limits/{tier}", response_model=SubscriptionLimits)
async def get_tier_limits(
    tier: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Limits and feature flags for a tier"""
    return await service.get_limits_by_tier(tier)


@router.get("/upgrade-options", response_model=List[UpgradeOption])
async def get_upgrade_options(
    current_tier: str = Query("free"),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Plans above the current tier"""
    return await service.get_upgrade_options(current_tier)

"""
Subscriptions API endpoints
Per-profile tier, usage, entitlement checks, upgrades and feature purchases
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from queueplan.config.plan_limits import MAX_ONE_TIME_ACCESS_DAYS
from queueplan.models.subscription import BillingPeriod
from queueplan.schemas.subscription import FeatureAccessRecord, UsageRecordEntry, UsageStats, UserSubscription
from queueplan.services.subscription_service import SubscriptionService, get_subscription_service

logger = logging.getLogger(__name__)
router = APIRouter()


# Pydantic models for request/response
class UpgradeRequest(BaseModel):
    tier: str
    billing_period: str = BillingPeriod.MONTHLY.value


class OneTimeAccessRequest(BaseModel):
    feature: str
    duration_days: int = Field(30, gt=0, le=MAX_ONE_TIME_ACCESS_DAYS)


class TierResponse(BaseModel):
    profile_id: str
    tier: str


class DecisionResponse(BaseModel):
    profile_id: str
    action: str
    allowed: bool


class PurchaseResponse(BaseModel):
    success: bool


class PosterAccessResponse(BaseModel):
    profile_id: str
    poster_id: str
    accessible: bool


class GrantListResponse(BaseModel):
    grants: List[FeatureAccessRecord]
    total: int
    page: int
    per_page: int


class UsageHistoryResponse(BaseModel):
    records: List[UsageRecordEntry]
    total: int
    page: int
    per_page: int


@router.get("/{profile_id}", response_model=UserSubscription)
async def get_subscription(
    profile_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Active subscription with resolved limits"""
    subscription = await service.get_user_subscription(profile_id)
    if not subscription:
        raise HTTPException(status_code=404, detail="No active subscription")
    return subscription


@router.get("/{profile_id}/tier", response_model=TierResponse)
async def get_tier(
    profile_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    return TierResponse(profile_id=profile_id, tier=await service.get_tier_by_profile(profile_id))


@router.get("/{profile_id}/usage", response_model=UsageStats)
async def get_usage(
    profile_id: str,
    shop_id: Optional[str] = Query(None),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Current usage counters"""
    return await service.get_usage_stats(profile_id, shop_id)


@router.get("/{profile_id}/usage/history", response_model=UsageHistoryResponse)
async def get_usage_history(
    profile_id: str,
    shop_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Usage ledger events, latest first"""
    records, total = await service.list_usage_history(profile_id, shop_id, page, per_page)
    return UsageHistoryResponse(records=records, total=total, page=page, per_page=per_page)


@router.get("/{profile_id}/can/{action}", response_model=DecisionResponse)
async def can_perform_action(
    profile_id: str,
    action: str,
    shop_id: Optional[str] = Query(None),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Check an action against the profile's limits"""
    allowed = await service.can_perform_action_by_limits(profile_id, action, shop_id)
    return DecisionResponse(profile_id=profile_id, action=action, allowed=allowed)


@router.post("/{profile_id}/upgrade", response_model=UserSubscription)
async def upgrade_subscription(
    profile_id: str,
    request: UpgradeRequest,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Switch the profile to a tier (entitlement only, no payment capture)"""
    return await service.upgrade_subscription(profile_id, request.tier, request.billing_period)


@router.post("/{profile_id}/cancel", response_model=UserSubscription)
async def cancel_subscription(
    profile_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    return await service.cancel_subscription(profile_id)


@router.post("/{profile_id}/one-time-access", response_model=PurchaseResponse)
async def purchase_one_time_access(
    profile_id: str,
    request: OneTimeAccessRequest,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Temporary access to a single feature"""
    success = await service.purchase_one_time_access(profile_id, request.feature, request.duration_days)
    return PurchaseResponse(success=success)


@router.post("/{profile_id}/posters/{poster_id}/purchase", response_model=PurchaseResponse)
async def purchase_poster_design(
    profile_id: str,
    poster_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    return PurchaseResponse(success=await service.purchase_poster_design(profile_id, poster_id))


@router.get("/{profile_id}/posters/{poster_id}/access", response_model=PosterAccessResponse)
async def get_poster_access(
    profile_id: str,
    poster_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    accessible = await service.is_poster_accessible(profile_id, poster_id)
    return PosterAccessResponse(profile_id=profile_id, poster_id=poster_id, accessible=accessible)


@router.get("/{profile_id}/grants", response_model=GrantListResponse)
async def list_grants(
    profile_id: str,
    feature_type: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Feature grants, newest first"""
    grants, total = await service.list_feature_access(profile_id, feature_type, page, per_page)
    return GrantListResponse(grants=grants, total=total, page=page, per_page=per_page)


@router.delete("/{profile_id}/grants/{feature_type}/{feature_id}")
async def revoke_grant(
    profile_id: str,
    feature_type: str,
    feature_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Deactivate a grant"""
    if not await service.revoke_feature_access(profile_id, feature_type, feature_id):
        raise HTTPException(status_code=404, detail="No active grant")
    return {"message": "Feature access revoked"}

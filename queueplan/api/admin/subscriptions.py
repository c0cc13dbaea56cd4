"""
Admin Subscriptions API endpoints
"""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from uuid import UUID

from queueplan.models.subscription import BillingPeriod, SubscriptionStatus
from queueplan.schemas.subscription import ProfileSubscriptionRecord
from queueplan.services.subscription_service import SubscriptionService, get_subscription_service

router = APIRouter()


class SubscriptionUpdateRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: Optional[SubscriptionStatus] = None
    billing_period: Optional[BillingPeriod] = None
    price_per_period: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    auto_renew: Optional[bool] = None
    end_date: Optional[datetime] = None


class SubscriptionListResponse(BaseModel):
    subscriptions: List[ProfileSubscriptionRecord]
    total: int
    page: int
    per_page: int


@router.get("/", response_model=SubscriptionListResponse)
async def list_subscriptions(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    profile_id: Optional[str] = Query(None),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """List subscriptions, newest first (admin only)"""
    subscriptions, total = await service.subscriptions.list_subscriptions(page, per_page, profile_id)
    return SubscriptionListResponse(subscriptions=subscriptions, total=total, page=page, per_page=per_page)


@router.get("/{subscription_id}", response_model=ProfileSubscriptionRecord)
async def get_subscription(
    subscription_id: UUID,
    service: SubscriptionService = Depends(get_subscription_service)
):
    subscription = await service.subscriptions.get_subscription(subscription_id)
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return subscription


@router.patch("/{subscription_id}", response_model=ProfileSubscriptionRecord)
async def update_subscription(
    subscription_id: UUID,
    request: SubscriptionUpdateRequest,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Update only the fields that were sent"""
    return await service.subscriptions.update_subscription(subscription_id, request.model_dump(exclude_unset=True))

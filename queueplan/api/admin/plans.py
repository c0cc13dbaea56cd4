"""
Admin Plans API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID

from queueplan.config.plan_limits import DEFAULT_CURRENCY
from queueplan.models.plan import SubscriptionTier
from queueplan.schemas.subscription import SubscriptionPlanRecord
from queueplan.services.subscription_service import SubscriptionService, get_subscription_service

router = APIRouter()


class PlanCreateRequest(BaseModel):
    tier: SubscriptionTier
    name: str
    name_en: str
    description: Optional[str] = None
    description_en: Optional[str] = None
    monthly_price: Optional[float] = None
    yearly_price: Optional[float] = None
    lifetime_price: Optional[float] = None
    currency: str = DEFAULT_CURRENCY

    # Limits (None = unlimited)
    max_shops: Optional[int] = None
    max_queues_per_day: Optional[int] = None
    max_staff: Optional[int] = None
    data_retention_months: Optional[int] = None
    max_sms_per_month: Optional[int] = None
    max_promotions: Optional[int] = None
    max_free_poster_designs: Optional[int] = None

    has_advanced_reports: bool = False
    has_custom_qr_code: bool = False
    has_api_access: bool = False
    has_priority_support: bool = False
    has_custom_branding: bool = False
    has_analytics: bool = False
    has_promotion_features: bool = False

    features: List[str] = []
    features_en: List[str] = []
    is_active: bool = True
    sort_order: int = 0


class PlanUpdateRequest(BaseModel):
    name: Optional[str] = None
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    monthly_price: Optional[float] = None
    yearly_price: Optional[float] = None
    lifetime_price: Optional[float] = None
    max_shops: Optional[int] = None
    max_queues_per_day: Optional[int] = None
    max_staff: Optional[int] = None
    data_retention_months: Optional[int] = None
    max_sms_per_month: Optional[int] = None
    max_promotions: Optional[int] = None
    max_free_poster_designs: Optional[int] = None
    has_advanced_reports: Optional[bool] = None
    has_custom_qr_code: Optional[bool] = None
    has_api_access: Optional[bool] = None
    has_priority_support: Optional[bool] = None
    has_custom_branding: Optional[bool] = None
    has_analytics: Optional[bool] = None
    has_promotion_features: Optional[bool] = None
    features: Optional[List[str]] = None
    features_en: Optional[List[str]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class PlanListResponse(BaseModel):
    plans: List[SubscriptionPlanRecord]
    total: int
    page: int
    per_page: int


@router.get("/", response_model=PlanListResponse)
async def list_plans(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    active_only: bool = Query(False),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """List all plans (admin only)"""
    plans, total = await service.plans.list_plans(page, per_page, active_only)
    return PlanListResponse(plans=plans, total=total, page=page, per_page=per_page)


@router.get("/{plan_id}", response_model=SubscriptionPlanRecord)
async def get_plan(
    plan_id: UUID,
    service: SubscriptionService = Depends(get_subscription_service)
):
    plan = await service.plans.get_plan(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


@router.post("/", response_model=SubscriptionPlanRecord, status_code=201)
async def create_plan(
    request: PlanCreateRequest,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Create new plan (admin only)"""
    return await service.plans.create_plan(request.model_dump(mode="json"))


@router.patch("/{plan_id}", response_model=SubscriptionPlanRecord)
async def update_plan(
    plan_id: UUID,
    request: PlanUpdateRequest,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Update only the fields that were sent"""
    return await service.plans.update_plan(plan_id, request.model_dump(exclude_unset=True))


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: UUID,
    service: SubscriptionService = Depends(get_subscription_service)
):
    if not await service.plans.delete_plan(plan_id):
        raise HTTPException(status_code=404, detail="Plan not found")
    return {"message": "Plan deleted"}

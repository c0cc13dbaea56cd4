"""
Shared fixtures: a throwaway SQLite database seeded with the free, pro and enterprise plans.
"""

from decimal import Decimal

import pytest_asyncio

from queueplan.models import SubscriptionPlan
from queueplan.services.subscription_service import SubscriptionService
from queueplan.utils.database import Base, build_engine, build_session_factory


PLAN_SEED = [
    dict(
        tier="free", name="ฟรี", name_en="Free", sort_order=0,
        monthly_price=Decimal("0"), yearly_price=Decimal("0"),
        max_shops=1, max_queues_per_day=50, max_staff=1, data_retention_months=1,
        max_sms_per_month=10, max_promotions=0, max_free_poster_designs=3,
        features=["1 ร้าน"], features_en=["1 shop"],
    ),
    dict(
        tier="pro", name="โปร", name_en="Pro", sort_order=1,
        monthly_price=Decimal("299"), yearly_price=Decimal("2990"),
        max_shops=3, max_queues_per_day=100, max_staff=5, data_retention_months=12,
        max_sms_per_month=100, max_promotions=10, max_free_poster_designs=3,
        has_advanced_reports=True, has_custom_qr_code=True, has_analytics=True,
        has_promotion_features=True,
        features=["3 ร้าน"], features_en=["3 shops"],
    ),
    dict(
        tier="enterprise", name="องค์กร", name_en="Enterprise", sort_order=2,
        monthly_price=Decimal("999"), yearly_price=Decimal("9990"),
        max_free_poster_designs=None,
        has_advanced_reports=True, has_custom_qr_code=True, has_api_access=True,
        has_priority_support=True, has_custom_branding=True, has_analytics=True,
        has_promotion_features=True,
        features=["ไม่จำกัด"], features_en=["Unlimited"],
    ),
]


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite so every connection sees the same tables"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'queueplan.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_plans(db):
    """Insert one active plan per tier; returns them keyed by tier"""
    plans = {}
    for data in PLAN_SEED:
        plan = SubscriptionPlan(**data)
        db.add(plan)
        plans[data["tier"]] = plan
    await db.commit()
    return plans


@pytest_asyncio.fixture
async def service(db, seeded_plans):
    return SubscriptionService(db)

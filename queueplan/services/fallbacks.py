"""
Fallback policy
Resolution chains are captured into an Outcome; each operation then applies one named policy
that either returns the value, substitutes its documented default, or re-raises
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, List, Optional, TypeVar
from queueplan.models.plan import SubscriptionTier
from queueplan.schemas.subscription import UsageStats, UpgradeOption

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Tagged result of a resolution chain"""
    ok: bool
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Outcome[T]":
        return cls(ok=False, error=error)


async def capture(awaitable: Awaitable[T]) -> Outcome[T]:
    """Await a chain and tag its result instead of letting it raise"""
    try:
        return Outcome.success(await awaitable)
    except Exception as e:
        return Outcome.failure(e)


def tier_or_default(outcome: Outcome[Optional[str]], profile_id: str) -> str:
    """Fail-open: any failure or missing tier resolves to free"""
    if outcome.ok and outcome.value:
        return outcome.value
    if not outcome.ok:
        logger.warning(f"Tier lookup failed, defaulting to free: profile_id={profile_id}, error={outcome.error}")
    return SubscriptionTier.FREE.value


def limits_or_raise(outcome: Outcome[T], tier: str) -> T:
    """Fail-closed: limit lookup errors propagate to the caller"""
    if outcome.ok:
        return outcome.value
    logger.error(f"Limits lookup failed: tier={tier}, error={outcome.error}")
    raise outcome.error


def usage_or_zero(outcome: Outcome[UsageStats], profile_id: str, shop_id: Optional[str] = None) -> UsageStats:
    """Fail-open: a zeroed snapshot stands in for unreadable usage"""
    if outcome.ok:
        return outcome.value
    logger.warning(f"Usage lookup failed, returning zeroed stats: profile_id={profile_id}, error={outcome.error}")
    return UsageStats(profile_id=profile_id, shop_id=shop_id)


def options_or_empty(outcome: Outcome[List[UpgradeOption]], current_tier: str) -> List[UpgradeOption]:
    """Fail-open: no offers rather than an error"""
    if outcome.ok:
        return outcome.value
    logger.warning(f"Upgrade options failed: current_tier={current_tier}, error={outcome.error}")
    return []


def decision_or_deny(outcome: Outcome[bool], **context: Any) -> bool:
    """Fail-closed: a decision that could not be made is a denial"""
    if outcome.ok:
        return bool(outcome.value)
    details = ", ".join(f"{key}={value}" for key, value in context.items())
    logger.error(f"Entitlement check failed, denying: {details}, error={outcome.error}")
    return False


def purchase_or_false(outcome: Outcome[Any], **context: Any) -> bool:
    """Purchases report failure as False"""
    if outcome.ok:
        return True
    details = ", ".join(f"{key}={value}" for key, value in context.items())
    logger.error(f"Purchase failed: {details}, error={outcome.error}")
    return False

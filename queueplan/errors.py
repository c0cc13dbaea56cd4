"""
Subscription engine errors
Repository failures and rejected operations carry an ErrorKind so callers can map them to defaults or HTTP codes
"""

import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    OPERATION_FAILED = "operation_failed"
    VALIDATION_ERROR = "validation_error"
    INVALID_TIER = "invalid_tier"
    UNKNOWN = "unknown"


class SubscriptionError(Exception):
    """Base error for the subscription engine"""
    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        self.message = message
        self.operation = operation
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self):
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class RepositoryError(SubscriptionError):
    """Raised at the persistence boundary"""


class PlanNotFoundError(SubscriptionError):
    """No active plan exists for the requested tier"""
    def __init__(self, tier: str, operation: str = "upgrade_subscription"):
        super().__init__(
            ErrorKind.INVALID_TIER,
            f"No active plan for tier '{tier}'",
            operation,
            {"tier": tier},
        )


class UnknownFeatureError(SubscriptionError):
    """Feature name is not purchasable as one-time access"""
    def __init__(self, feature: str):
        super().__init__(
            ErrorKind.VALIDATION_ERROR,
            f"Unknown feature '{feature}'",
            "purchase_one_time_access",
            {"feature": feature},
        )

"""
API package initialization
"""

# Import all routers to make them available
from . import plans, subscriptions

__all__ = ["plans", "subscriptions"]

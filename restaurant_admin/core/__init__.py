"""
Core module initialization.
Exports configuration, logging and domain error types.
"""

from restaurant_admin.core.config import get_settings, Settings, EnvironmentMode
from restaurant_admin.core.errors import (
    RestaurantError,
    NotFoundError,
    InvalidTransitionError,
    BusinessRuleError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "RestaurantError",
    "NotFoundError",
    "InvalidTransitionError",
    "BusinessRuleError",
]

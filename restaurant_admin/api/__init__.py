"""
HTTP routers. Each router is a thin layer over its service module.
"""

from restaurant_admin.api import (
    analytics,
    catalog,
    deliveries,
    orders,
    pos,
    realtime,
    restaurant,
    storefront,
)

routers = [
    orders.router,
    pos.router,
    storefront.router,
    deliveries.router,
    catalog.router,
    restaurant.router,
    analytics.router,
    realtime.router,
]

__all__ = ["routers"]

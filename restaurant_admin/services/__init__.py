"""
                        Services Module

Business logic behind the API routers. Routers stay thin: they validate the
request, call a service function and shape the response.

Services:
    - orders: order listing, admin forms, status changes, kanban
    - pos: counter checkout
    - storefront: menu, customer checkout, tracking, receipts
    - deliveries: delivery tracking, drivers and regions
    - catalog: categories, products and addons
    - restaurant: customization, business hours, payment methods
    - analytics: dashboard widgets and sales reports
    - events: realtime order change feed (memory or Redis)
    - report_exporter: Excel/CSV report files with file locking
"""

from restaurant_admin.services.report_exporter import ReportExporter

__all__ = ["ReportExporter"]

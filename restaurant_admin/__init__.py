"""
Restaurant Admin

Management backend for a restaurant: order dashboards, point-of-sale,
delivery tracking, catalog administration and restaurant customization.
"""

__version__ = "1.0.0"

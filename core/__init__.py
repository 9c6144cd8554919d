"""Core module - configuration, errors and observability shared by every component.

Domain components (catalog, pricing, orders, recycling, reporting) depend on
this package; it depends on none of them.
"""

__version__ = "1.0.0"

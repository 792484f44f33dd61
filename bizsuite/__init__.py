"""
BizSuite

Multi-tenant business management backend: inventory, hotel tables and
reservations, expenses and an online store, with per-plan limits and a
platform admin console.
"""

__version__ = "1.0.0"

"""
Bug Tracker Workflow Core
=========================

Role-gated bug status transitions for the multi-tenant bug tracker.
"""

__version__ = "1.0.0"

"""
Model Package Initialization
============================

Usage:
    from bugtracker.models import Role
"""

from .role_enum import Role

__all__ = [
    "Role",
]

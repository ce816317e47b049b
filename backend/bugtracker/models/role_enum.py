"""
Role Enumeration Module
=======================

Defines all valid roles in the system.

Roles do not nest or inherit: each permission check tests
membership of the actor's role explicitly.
"""

from enum import Enum


class Role(str, Enum):
    """
    System-wide allowed roles.
    """

    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    DEVELOPER = "developer"
    QA = "qa"
    TESTER = "tester"
    CLIENT = "client"
    VIEWER = "viewer"

    @property
    def display_name(self) -> str:
        return ROLE_DISPLAY_NAMES[self]

    @property
    def color(self) -> str:
        return ROLE_COLORS[self]


ROLE_DISPLAY_NAMES = {
    Role.ADMIN: "Administrator",
    Role.PROJECT_MANAGER: "Project Manager",
    Role.DEVELOPER: "Developer",
    Role.QA: "QA Engineer",
    Role.TESTER: "Tester",
    Role.CLIENT: "Client",
    Role.VIEWER: "Viewer",
}

ROLE_COLORS = {
    Role.ADMIN: "#d32f2f",
    Role.PROJECT_MANAGER: "#1976d2",
    Role.DEVELOPER: "#388e3c",
    Role.QA: "#f57c00",
    Role.TESTER: "#7b1fa2",
    Role.CLIENT: "#0288d1",
    Role.VIEWER: "#616161",
}

# Roles with authority over every bug lifecycle change
PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.PROJECT_MANAGER})

"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from bugtracker.schemas import BugRecord, StatusTransitionRequest
"""

from bugtracker.schemas.bug import (
    ActorContext,
    ProjectRef,
    BugRecord,
    BugHistoryEntry,
    BugChangeResponse,
    StatusTransitionRequest,
    StatusTransitionResponse,
    TransitionOption,
    AvailableTransitionsResponse,
)

__all__ = [
    "ActorContext",
    "ProjectRef",
    "BugRecord",
    "BugHistoryEntry",
    "BugChangeResponse",
    "StatusTransitionRequest",
    "StatusTransitionResponse",
    "TransitionOption",
    "AvailableTransitionsResponse",
]

"""
Services Package
================

Usage:
    from bugtracker.services import can_transition, available_transitions
"""

from bugtracker.services.transition_policy import (
    TransitionPolicy,
    available_transitions,
    can_transition,
    check_transition,
    get_transition_policy,
)
from bugtracker.services.workflow_service import BugWorkflowService

__all__ = [
    "TransitionPolicy",
    "available_transitions",
    "can_transition",
    "check_transition",
    "get_transition_policy",
    "BugWorkflowService",
]

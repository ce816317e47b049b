"""
Enumeration Module
==================

Defines enumerations used across the application.
"""

from enum import Enum


class BugStatus(str, Enum):
    """Lifecycle statuses for bugs, in the order offered to users."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CODE_REVIEW = "code_review"
    QA_TESTING = "qa_testing"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REOPENED = "reopened"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    BugStatus.OPEN: "Open",
    BugStatus.IN_PROGRESS: "In Progress",
    BugStatus.CODE_REVIEW: "Code Review",
    BugStatus.QA_TESTING: "QA Testing",
    BugStatus.RESOLVED: "Resolved",
    BugStatus.CLOSED: "Closed",
    BugStatus.REOPENED: "Reopened",
    BugStatus.REJECTED: "Rejected",
}

# Status set used by screens that predate code review and QA testing
CORE_STATUSES = frozenset({
    BugStatus.OPEN,
    BugStatus.IN_PROGRESS,
    BugStatus.RESOLVED,
    BugStatus.CLOSED,
    BugStatus.REOPENED,
})


class BugHistoryAction(str, Enum):
    """Kinds of entries recorded in a bug's history."""

    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    QA_ASSIGNED = "qa_assigned"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REOPENED = "reopened"
    BLOCKED = "blocked"
    UNBLOCKED = "unblocked"

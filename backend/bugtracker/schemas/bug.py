"""
Bug Workflow Schemas Module
===========================

Pydantic models exchanged at the boundary of the workflow core.

Every request and response is an explicit structure with its
required and optional fields enumerated, validated on construction.
The acting user is passed in as an ActorContext rather than read
from any ambient session storage.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from bugtracker.core.enums import BugHistoryAction, BugStatus
from bugtracker.models.role_enum import Role


# ==========================
# Context Schemas
# ==========================

class ActorContext(BaseModel):
    """The authenticated user a decision is made for."""

    user_id: int = Field(
        ...,
        description="User ID"
    )
    role: Role = Field(
        ...,
        description="User role"
    )
    organization_id: int = Field(
        ...,
        description="Organization the user is currently acting in"
    )

    model_config = ConfigDict(frozen=True, from_attributes=True)


class ProjectRef(BaseModel):
    """Project fields needed for access decisions."""

    id: int
    organization_id: int
    owner_id: int
    member_ids: List[int] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, from_attributes=True)


class BugRecord(BaseModel):
    """A bug as seen by the workflow core."""

    id: int = Field(
        ...,
        description="Bug ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Bug title"
    )
    status: BugStatus = Field(
        default=BugStatus.OPEN,
        description="Current lifecycle status"
    )
    reporter_id: int = Field(
        ...,
        description="User who reported the bug"
    )
    assignee_id: Optional[int] = Field(
        default=None,
        description="Developer assigned to the bug"
    )
    qa_assignee_id: Optional[int] = Field(
        default=None,
        description="QA engineer assigned to verify the fix"
    )
    project: ProjectRef
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    is_blocking: bool = Field(
        default=False,
        description="Whether work on this bug is held up by another bug"
    )
    blocked_by_bug_id: Optional[int] = Field(
        default=None,
        description="Bug this one is waiting on"
    )

    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 42,
                "title": "Login button unresponsive on Safari",
                "status": "open",
                "reporter_id": 7,
                "assignee_id": 3,
                "qa_assignee_id": None,
                "project": {
                    "id": 5,
                    "organization_id": 1,
                    "owner_id": 2,
                    "member_ids": [3, 7],
                },
                "resolved_at": None,
                "closed_at": None,
                "is_blocking": False,
                "blocked_by_bug_id": None,
            }
        }
    )

    @property
    def organization_id(self) -> int:
        return self.project.organization_id


class BugHistoryEntry(BaseModel):
    """History record produced by a bug change."""

    bug_id: int
    user_id: int
    action: BugHistoryAction
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(frozen=True)


# ==========================
# Request Schemas
# ==========================

class StatusTransitionRequest(BaseModel):
    """Request to move a bug to a new status."""

    bug_id: int = Field(
        ...,
        description="Bug to transition"
    )
    new_status: BugStatus = Field(
        ...,
        description="Requested target status"
    )
    expected_status: Optional[BugStatus] = Field(
        default=None,
        description="Status the caller last saw; the request is refused if it changed"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Optional note stored with the history entry"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "bug_id": 42,
                "new_status": "in_progress",
                "expected_status": "open",
                "notes": "Picking this up",
            }
        }
    )


# ==========================
# Response Schemas
# ==========================

class BugChangeResponse(BaseModel):
    """Updated bug plus the history entry recording the change."""

    message: str
    bug: BugRecord
    history_entry: BugHistoryEntry


class StatusTransitionResponse(BugChangeResponse):
    """Result of a successful status transition."""


class TransitionOption(BaseModel):
    """One entry of a status selection control."""

    value: BugStatus
    label: str


class AvailableTransitionsResponse(BaseModel):
    """Statuses an actor may move a bug to from its current status."""

    bug_id: int
    current_status: BugStatus
    options: List[TransitionOption] = Field(default_factory=list)

    @computed_field
    @property
    def can_change_status(self) -> bool:
        """False means the status control should be hidden or disabled."""
        return bool(self.options)

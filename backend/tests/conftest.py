"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- Settings and policy singletons reset around every test
- Sample organization, project and bug records
- Actor factory for every role
- Fixed clock for timestamp assertions
"""

import os
from datetime import datetime, UTC
from typing import Callable, Generator

import pytest

# Set testing environment before importing application modules
os.environ["BUGTRACKER_ENVIRONMENT"] = "testing"
os.environ["BUGTRACKER_LOG_FORMAT"] = "console"
os.environ.pop("BUGTRACKER_TRANSITION_RULE_SET", None)

from bugtracker.core.config import reset_settings
from bugtracker.core.enums import BugStatus
from bugtracker.models.role_enum import Role
from bugtracker.schemas.bug import ActorContext, BugRecord, ProjectRef
from bugtracker.services.transition_policy import (
    EXTENDED_RULES,
    STANDARD_RULES,
    TransitionPolicy,
    reset_transition_policy,
)
from bugtracker.services.workflow_service import BugWorkflowService


ORGANIZATION_ID = 1
OTHER_ORGANIZATION_ID = 2
FIXED_NOW = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


# =====================================
# Singleton Isolation
# =====================================

@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """
    Rebuild settings and the configured policy for each test.

    Tests that set BUGTRACKER_* variables through monkeypatch see
    them on the next get_settings() call.
    """
    reset_settings()
    reset_transition_policy()
    yield
    reset_settings()
    reset_transition_policy()


# =====================================
# Policy Fixtures
# =====================================

@pytest.fixture
def standard_policy() -> TransitionPolicy:
    """Policy over the standard rule set."""
    return TransitionPolicy(STANDARD_RULES)


@pytest.fixture
def extended_policy() -> TransitionPolicy:
    """Policy over the extended rule set."""
    return TransitionPolicy(EXTENDED_RULES)


# =====================================
# Record Fixtures
# =====================================

@pytest.fixture
def sample_project() -> ProjectRef:
    """
    Create a sample project.

    Returns:
        Project owned by user 2 with members 3 and 4
    """
    return ProjectRef(
        id=10,
        organization_id=ORGANIZATION_ID,
        owner_id=2,
        member_ids=[3, 4],
    )


@pytest.fixture
def open_bug(sample_project: ProjectRef) -> BugRecord:
    """
    Create an open bug reported by user 7 and assigned to user 3.

    Args:
        sample_project: Project fixture

    Returns:
        BugRecord in OPEN status
    """
    return BugRecord(
        id=42,
        title="Login button unresponsive on Safari",
        status=BugStatus.OPEN,
        reporter_id=7,
        assignee_id=3,
        project=sample_project,
    )


@pytest.fixture
def make_bug(open_bug: BugRecord) -> Callable[..., BugRecord]:
    """Factory returning a copy of the sample bug with overrides."""
    def _make(**changes) -> BugRecord:
        return open_bug.model_copy(update=changes)
    return _make


# =====================================
# Actor Fixtures
# =====================================

@pytest.fixture
def make_actor() -> Callable[..., ActorContext]:
    """
    Factory for actor contexts.

    Usage:
        actor = make_actor(Role.DEVELOPER, user_id=3)
    """
    def _make(
        role: Role,
        user_id: int = 100,
        organization_id: int = ORGANIZATION_ID,
    ) -> ActorContext:
        return ActorContext(
            user_id=user_id,
            role=role,
            organization_id=organization_id,
        )
    return _make


@pytest.fixture
def developer(make_actor) -> ActorContext:
    """Developer who is a member of the sample project."""
    return make_actor(Role.DEVELOPER, user_id=3)


@pytest.fixture
def qa_engineer(make_actor) -> ActorContext:
    """QA engineer outside the sample project."""
    return make_actor(Role.QA, user_id=5)


@pytest.fixture
def admin(make_actor) -> ActorContext:
    """Administrator of the sample organization."""
    return make_actor(Role.ADMIN, user_id=1)


# =====================================
# Service Fixtures
# =====================================

@pytest.fixture
def fixed_now() -> datetime:
    """Timestamp returned by the workflow service clock."""
    return FIXED_NOW


@pytest.fixture
def workflow_service(standard_policy: TransitionPolicy) -> BugWorkflowService:
    """Workflow service over the standard policy with a fixed clock."""
    return BugWorkflowService(policy=standard_policy, clock=lambda: FIXED_NOW)

"""
Role Capability Unit Tests
==========================

Tests for role predicates and resource access checks including:
- Capability membership per role
- Unknown roles
- can_access_project
- can_access_bug
- Organization isolation
"""

import pytest
from structlog.testing import capture_logs

from bugtracker.models.role_enum import Role
from bugtracker.services import permissions
from bugtracker.services.permissions import can_access_bug, can_access_project


pytestmark = pytest.mark.unit


CAPABILITIES = {
    "can_manage_users": {Role.ADMIN},
    "can_manage_projects": {Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER},
    "can_create_projects": {Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER, Role.QA, Role.TESTER},
    "can_manage_bugs": {Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER, Role.QA, Role.TESTER},
    "can_create_bugs": {
        Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER, Role.QA, Role.TESTER, Role.CLIENT,
    },
    "can_assign_bugs": {Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER, Role.QA},
    "can_assign_qa": {Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER},
    "can_delete_bugs": {Role.ADMIN, Role.PROJECT_MANAGER},
    "can_view_reports": {Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER, Role.QA},
    "can_view_analytics": {Role.ADMIN, Role.PROJECT_MANAGER},
    "can_manage_workflows": {Role.ADMIN, Role.PROJECT_MANAGER},
    "can_view_sensitive_data": {Role.ADMIN, Role.PROJECT_MANAGER},
    "can_manage_integrations": {Role.ADMIN, Role.PROJECT_MANAGER},
    "can_moderate_comments": {Role.ADMIN, Role.PROJECT_MANAGER, Role.QA},
}


class TestCapabilities:
    """Tests for role capability predicates."""

    @pytest.mark.parametrize("name, allowed", sorted(CAPABILITIES.items()))
    def test_capability_membership(self, name, allowed):
        """Test that each capability is granted to exactly its roles."""
        # Arrange
        check = getattr(permissions, name)

        # Act
        granted = {role for role in Role if check(role)}

        # Assert
        assert granted == allowed

    @pytest.mark.parametrize("name", sorted(CAPABILITIES))
    def test_capability_accepts_role_strings(self, name):
        """Test that plain role strings work like enum members."""
        check = getattr(permissions, name)

        assert check("admin") is check(Role.ADMIN)

    @pytest.mark.parametrize("name", sorted(CAPABILITIES))
    def test_unknown_role_has_no_capability(self, name):
        """Test that unrecognized roles are denied."""
        check = getattr(permissions, name)

        assert check("owner") is False
        assert check(None) is False

    def test_viewer_has_no_capability(self):
        """Test that viewers are read-only."""
        for name in CAPABILITIES:
            assert getattr(permissions, name)(Role.VIEWER) is False


class TestCanAccessProject:
    """Tests for can_access_project."""

    def test_privileged_role_sees_any_project(self, make_actor, sample_project):
        """Test that project managers see projects they are not part of."""
        actor = make_actor(Role.PROJECT_MANAGER, user_id=99)

        assert can_access_project(actor, sample_project) is True

    def test_owner_sees_project(self, make_actor, sample_project):
        """Test that the owner sees their project."""
        actor = make_actor(Role.CLIENT, user_id=sample_project.owner_id)

        assert can_access_project(actor, sample_project) is True

    def test_member_sees_project(self, developer, sample_project):
        """Test that members see the project."""
        assert can_access_project(developer, sample_project) is True

    def test_outsider_does_not_see_project(self, qa_engineer, sample_project):
        """Test that non-members without privilege are denied."""
        assert can_access_project(qa_engineer, sample_project) is False

    def test_admin_of_other_organization_denied(self, make_actor, sample_project):
        """Test that privilege never crosses organizations."""
        # Arrange
        actor = make_actor(Role.ADMIN, user_id=1, organization_id=2)

        # Act
        with capture_logs() as logs:
            result = can_access_project(actor, sample_project)

        # Assert
        assert result is False
        assert logs[0]["event"] == "tenant_isolation_violation"


class TestCanAccessBug:
    """Tests for can_access_bug."""

    def test_reporter_sees_bug(self, make_actor, open_bug):
        """Test that the reporter sees their bug outside the project."""
        actor = make_actor(Role.CLIENT, user_id=open_bug.reporter_id)

        assert can_access_bug(actor, open_bug) is True

    def test_assignee_sees_bug(self, make_actor, make_bug):
        """Test that the assignee sees the bug."""
        bug = make_bug(assignee_id=50)
        actor = make_actor(Role.DEVELOPER, user_id=50)

        assert can_access_bug(actor, bug) is True

    def test_qa_assignee_sees_bug(self, qa_engineer, make_bug):
        """Test that the QA assignee sees the bug."""
        bug = make_bug(qa_assignee_id=qa_engineer.user_id)

        assert can_access_bug(qa_engineer, bug) is True

    def test_project_member_sees_bug(self, make_actor, open_bug):
        """Test that project members see the project's bugs."""
        actor = make_actor(Role.TESTER, user_id=4)

        assert can_access_bug(actor, open_bug) is True

    def test_unrelated_user_denied(self, qa_engineer, open_bug):
        """Test that unrelated users are denied."""
        assert can_access_bug(qa_engineer, open_bug) is False

    def test_reporter_in_other_organization_denied(self, make_actor, open_bug):
        """Test that matching user IDs in another organization do not grant access."""
        actor = make_actor(Role.CLIENT, user_id=open_bug.reporter_id, organization_id=2)

        assert can_access_bug(actor, open_bug) is False

"""
Role Capability Checks
======================

Plain predicates answering "may this role do X" and "may this actor
see this project or bug". Unrecognized roles have no capabilities.

Access checks never cross organizations: an actor acting in one
organization cannot reach another organization's projects, whatever
their role.
"""

from typing import Any

from bugtracker.core.logging import audit_logger
from bugtracker.models.role_enum import PRIVILEGED_ROLES, Role
from bugtracker.schemas.bug import ActorContext, BugRecord, ProjectRef


def _has_role(role: Any, allowed: frozenset[Role]) -> bool:
    try:
        return Role(role) in allowed
    except (ValueError, TypeError):
        return False


_PROJECT_CONTRIBUTORS = frozenset({Role.ADMIN, Role.PROJECT_MANAGER, Role.DEVELOPER})
_BUG_HANDLERS = _PROJECT_CONTRIBUTORS | {Role.QA, Role.TESTER}


def can_manage_users(role: Role | str) -> bool:
    return _has_role(role, frozenset({Role.ADMIN}))


def can_manage_projects(role: Role | str) -> bool:
    return _has_role(role, _PROJECT_CONTRIBUTORS)


def can_create_projects(role: Role | str) -> bool:
    return _has_role(role, _BUG_HANDLERS)


def can_manage_bugs(role: Role | str) -> bool:
    return _has_role(role, _BUG_HANDLERS)


def can_create_bugs(role: Role | str) -> bool:
    return _has_role(role, _BUG_HANDLERS | {Role.CLIENT})


def can_assign_bugs(role: Role | str) -> bool:
    return _has_role(role, _PROJECT_CONTRIBUTORS | {Role.QA})


def can_assign_qa(role: Role | str) -> bool:
    return _has_role(role, _PROJECT_CONTRIBUTORS)


def can_delete_bugs(role: Role | str) -> bool:
    return _has_role(role, PRIVILEGED_ROLES)


def can_view_reports(role: Role | str) -> bool:
    return _has_role(role, _PROJECT_CONTRIBUTORS | {Role.QA})


def can_view_analytics(role: Role | str) -> bool:
    return _has_role(role, PRIVILEGED_ROLES)


def can_manage_workflows(role: Role | str) -> bool:
    return _has_role(role, PRIVILEGED_ROLES)


def can_view_sensitive_data(role: Role | str) -> bool:
    return _has_role(role, PRIVILEGED_ROLES)


def can_manage_integrations(role: Role | str) -> bool:
    return _has_role(role, PRIVILEGED_ROLES)


def can_moderate_comments(role: Role | str) -> bool:
    return _has_role(role, PRIVILEGED_ROLES | {Role.QA})


# =====================================
# Resource Access
# =====================================

def _same_organization(actor: ActorContext, organization_id: int) -> bool:
    if actor.organization_id != organization_id:
        audit_logger.log_cross_tenant_attempt(
            user_id=str(actor.user_id),
            user_tenant=str(actor.organization_id),
            target_tenant=str(organization_id),
        )
        return False
    return True


def can_access_project(actor: ActorContext, project: ProjectRef) -> bool:
    """
    Check whether an actor can see a project.

    Privileged roles see every project in their organization; other
    users see projects they own or are members of.

    Args:
        actor: Current user context
        project: Project to check

    Returns:
        True if access is allowed
    """
    if not _same_organization(actor, project.organization_id):
        return False

    if actor.role in PRIVILEGED_ROLES:
        return True

    return project.owner_id == actor.user_id or actor.user_id in project.member_ids


def can_access_bug(actor: ActorContext, bug: BugRecord) -> bool:
    """
    Check whether an actor can see a bug.

    Reporters and assignees always see their bugs; everyone else
    needs access to the bug's project.

    Args:
        actor: Current user context
        bug: Bug to check

    Returns:
        True if access is allowed
    """
    if not _same_organization(actor, bug.organization_id):
        return False

    if actor.role in PRIVILEGED_ROLES:
        return True

    if actor.user_id in (bug.reporter_id, bug.assignee_id, bug.qa_assignee_id):
        return True

    return can_access_project(actor, bug.project)

"""
Bug Workflow Service
====================

Applies status transitions, QA assignment and blocking to bug records.

The service decides and builds the result; it does not store it.
The caller's store must still guard the write (for example by
updating only where the status is still the one read here), since
two requests can both pass the check against the same old status.

Usage:
    service = BugWorkflowService()
    result = service.transition_bug_status(bug, request, actor)
    store.save(result.bug, expected_status=bug.status)
"""

from datetime import datetime, UTC
from typing import Any, Callable, Optional

from bugtracker.core.enums import BugHistoryAction, BugStatus
from bugtracker.core.exceptions import (
    AuthorizationError,
    InvalidArgumentError,
    StaleStatusError,
    TenantIsolationError,
)
from bugtracker.core.logging import LogContext, audit_logger, get_logger
from bugtracker.schemas.bug import (
    ActorContext,
    AvailableTransitionsResponse,
    BugChangeResponse,
    BugHistoryEntry,
    BugRecord,
    StatusTransitionRequest,
    StatusTransitionResponse,
    TransitionOption,
)
from bugtracker.services.permissions import can_assign_qa, can_manage_bugs
from bugtracker.services.transition_policy import TransitionPolicy, get_transition_policy

# Initialize logger
logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _invalid(field: str, value: Any) -> InvalidArgumentError:
    audit_logger.log_invalid_argument(field, value)
    return InvalidArgumentError(field, value)


class BugWorkflowService:
    """
    Service for bug status changes, QA assignment and blocking.

    Args:
        policy: Transition policy to enforce. Defaults to the configured one.
        clock: Source of timestamps for history and lifecycle fields.
    """

    def __init__(
        self,
        policy: Optional[TransitionPolicy] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.policy = policy or get_transition_policy()
        self.clock = clock

    # =====================================
    # Guards
    # =====================================

    def _is_same_organization(self, bug: BugRecord, actor: ActorContext) -> bool:
        if bug.organization_id == actor.organization_id:
            return True
        audit_logger.log_cross_tenant_attempt(
            user_id=str(actor.user_id),
            user_tenant=str(actor.organization_id),
            target_tenant=str(bug.organization_id),
        )
        return False

    def _ensure_same_organization(self, bug: BugRecord, actor: ActorContext) -> None:
        if not self._is_same_organization(bug, actor):
            raise TenantIsolationError()

    def _ensure_allowed(
        self,
        allowed: bool,
        action: str,
        actor: ActorContext,
        message: str,
    ) -> None:
        if not allowed:
            audit_logger.log_action_denied(
                action=action,
                role=actor.role.value,
                user_id=str(actor.user_id),
            )
            raise AuthorizationError(
                message=message,
                details={"action": action, "role": actor.role.value},
            )

    def _history(
        self,
        bug: BugRecord,
        actor: ActorContext,
        action: BugHistoryAction,
        old_value: Optional[str],
        new_value: Optional[str],
        description: str,
        created_at: datetime,
    ) -> BugHistoryEntry:
        return BugHistoryEntry(
            bug_id=bug.id,
            user_id=actor.user_id,
            action=action,
            old_value=old_value,
            new_value=new_value,
            description=description,
            created_at=created_at,
        )

    # =====================================
    # Status Transitions
    # =====================================

    def get_available_transitions(
        self,
        bug: BugRecord,
        actor: ActorContext,
    ) -> AvailableTransitionsResponse:
        """
        List the statuses an actor may move a bug to.

        Options follow BugStatus declaration order so the control
        renders consistently. Actors outside the bug's organization
        get no options, and the attempt is audit-logged.
        """
        options: list[TransitionOption] = []
        if self._is_same_organization(bug, actor):
            reachable = self.policy.available_transitions(actor.role, bug.status)
            options = [
                TransitionOption(value=status, label=status.label)
                for status in BugStatus
                if status in reachable
            ]

        return AvailableTransitionsResponse(
            bug_id=bug.id,
            current_status=bug.status,
            options=options,
        )

    def transition_bug_status(
        self,
        bug: BugRecord,
        request: StatusTransitionRequest,
        actor: ActorContext,
    ) -> StatusTransitionResponse:
        """
        Move a bug to a new status on behalf of an actor.

        Args:
            bug: Bug as currently stored
            request: Requested change
            actor: User making the change

        Returns:
            Response with the updated bug and its history entry

        Raises:
            InvalidArgumentError: If the request targets a different bug
                or asks for the status the bug already has
            TenantIsolationError: If the bug belongs to another organization
            StaleStatusError: If the bug's status is not the expected one
            PermissionDeniedError: If the actor's role may not make the change
        """
        if request.bug_id != bug.id:
            raise _invalid("bug_id", request.bug_id)

        with LogContext(tenant_id=str(actor.organization_id), bug_id=str(bug.id)):
            self._ensure_same_organization(bug, actor)

            if request.expected_status is not None and request.expected_status != bug.status:
                raise StaleStatusError(request.expected_status, bug.status)

            old_status = bug.status
            new_status = request.new_status
            if new_status == old_status:
                raise _invalid("new_status", new_status.value)
            self.policy.check_transition(actor.role, old_status, new_status, actor.user_id)

            now = self.clock()
            changes: dict = {"status": new_status}
            if new_status == BugStatus.RESOLVED:
                changes["resolved_at"] = now
            elif new_status == BugStatus.CLOSED:
                changes["closed_at"] = now
            updated = bug.model_copy(update=changes)

            entry = self._history(
                bug,
                actor,
                BugHistoryAction.STATUS_CHANGED,
                old_status.value,
                new_status.value,
                request.notes
                or f"Status changed from {old_status.value} to {new_status.value}",
                now,
            )

            logger.info(
                "bug_status_transitioned",
                user_id=actor.user_id,
                role=actor.role.value,
                from_status=old_status.value,
                to_status=new_status.value,
            )

        return StatusTransitionResponse(
            message=f"Bug status updated to {new_status.value}",
            bug=updated,
            history_entry=entry,
        )

    # =====================================
    # QA Assignment
    # =====================================

    def assign_bug_to_qa(
        self,
        bug: BugRecord,
        qa_user_id: int,
        actor: ActorContext,
    ) -> BugChangeResponse:
        """
        Assign a QA engineer to verify a bug.

        Raises:
            TenantIsolationError: If the bug belongs to another organization
            AuthorizationError: If the actor's role may not assign QA
        """
        with LogContext(tenant_id=str(actor.organization_id), bug_id=str(bug.id)):
            self._ensure_same_organization(bug, actor)
            self._ensure_allowed(
                can_assign_qa(actor.role),
                "assign_qa",
                actor,
                "Not authorized to assign QA",
            )

            old_value = str(bug.qa_assignee_id) if bug.qa_assignee_id is not None else "None"
            updated = bug.model_copy(update={"qa_assignee_id": qa_user_id})
            entry = self._history(
                bug,
                actor,
                BugHistoryAction.QA_ASSIGNED,
                old_value,
                str(qa_user_id),
                f"QA assigned to user #{qa_user_id}",
                self.clock(),
            )

            logger.info(
                "bug_qa_assigned",
                user_id=actor.user_id,
                qa_user_id=qa_user_id,
            )

        return BugChangeResponse(
            message=f"QA assigned to user #{qa_user_id}",
            bug=updated,
            history_entry=entry,
        )

    # =====================================
    # Blocking
    # =====================================

    def block_bug(
        self,
        bug: BugRecord,
        blocked_by_bug_id: int,
        actor: ActorContext,
        reason: Optional[str] = None,
    ) -> BugChangeResponse:
        """
        Mark a bug as waiting on another bug.

        Raises:
            InvalidArgumentError: If the bug would block itself
            TenantIsolationError: If the bug belongs to another organization
            AuthorizationError: If the actor's role may not manage bugs
        """
        if blocked_by_bug_id == bug.id:
            raise _invalid("blocked_by_bug_id", blocked_by_bug_id)

        with LogContext(tenant_id=str(actor.organization_id), bug_id=str(bug.id)):
            self._ensure_same_organization(bug, actor)
            self._ensure_allowed(
                can_manage_bugs(actor.role),
                "block",
                actor,
                "Not authorized to block bugs",
            )

            updated = bug.model_copy(
                update={"is_blocking": True, "blocked_by_bug_id": blocked_by_bug_id}
            )
            entry = self._history(
                bug,
                actor,
                BugHistoryAction.BLOCKED,
                "false",
                f"Bug #{blocked_by_bug_id}",
                reason or f"Bug blocked by #{blocked_by_bug_id}",
                self.clock(),
            )

            logger.info(
                "bug_blocked",
                user_id=actor.user_id,
                blocked_by_bug_id=blocked_by_bug_id,
            )

        return BugChangeResponse(
            message=f"Bug blocked by #{blocked_by_bug_id}",
            bug=updated,
            history_entry=entry,
        )

    def unblock_bug(
        self,
        bug: BugRecord,
        actor: ActorContext,
        reason: Optional[str] = None,
    ) -> BugChangeResponse:
        """
        Clear a bug's blocker.

        Raises:
            InvalidArgumentError: If the bug is not blocked
            TenantIsolationError: If the bug belongs to another organization
            AuthorizationError: If the actor's role may not manage bugs
        """
        with LogContext(tenant_id=str(actor.organization_id), bug_id=str(bug.id)):
            self._ensure_same_organization(bug, actor)
            if not bug.is_blocking:
                raise _invalid("is_blocking", bug.is_blocking)
            self._ensure_allowed(
                can_manage_bugs(actor.role),
                "unblock",
                actor,
                "Not authorized to unblock bugs",
            )

            updated = bug.model_copy(update={"is_blocking": False, "blocked_by_bug_id": None})
            entry = self._history(
                bug,
                actor,
                BugHistoryAction.UNBLOCKED,
                f"Bug #{bug.blocked_by_bug_id}",
                "false",
                reason or "Bug unblocked",
                self.clock(),
            )

            logger.info("bug_unblocked", user_id=actor.user_id)

        return BugChangeResponse(
            message="Bug unblocked",
            bug=updated,
            history_entry=entry,
        )

"""
Bug Status Transition Policy
============================

Decides which roles may move a bug between lifecycle statuses.

Statuses are the states of a directed graph; each rule set supplies
the edges, parameterized by role. Every (role, from, to) combination
resolves to a boolean: privileged roles may make any change, other
roles only the explicit pairs listed for them, everything else is
denied.

Usage:
    >>> can_transition(Role.DEVELOPER, BugStatus.OPEN, BugStatus.IN_PROGRESS)
    True
    >>> available_transitions("developer", "open")
    frozenset({<BugStatus.IN_PROGRESS: 'in_progress'>})
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Type, TypeVar

from bugtracker.core.config import get_settings
from bugtracker.core.enums import BugStatus
from bugtracker.core.exceptions import InvalidArgumentError, PermissionDeniedError
from bugtracker.core.logging import audit_logger, get_logger
from bugtracker.models.role_enum import PRIVILEGED_ROLES, Role

# Initialize logger
logger = get_logger(__name__)

E = TypeVar("E", Role, BugStatus)


# =====================================
# Rule Definitions
# =====================================

@dataclass(frozen=True)
class TransitionRule:
    """A single permitted (role, from_status, to_status) edge."""

    role: Role
    from_status: BugStatus
    to_status: BugStatus


@dataclass(frozen=True)
class RuleSet:
    """
    Immutable transition table.

    Attributes:
        name: Identifier used in configuration
        unrestricted_roles: Roles allowed every transition
        rules: Explicit edges for all other roles
    """

    name: str
    unrestricted_roles: frozenset[Role]
    rules: frozenset[TransitionRule]


def _edges(roles: Tuple[Role, ...], *pairs: Tuple[BugStatus, BugStatus]) -> frozenset[TransitionRule]:
    return frozenset(
        TransitionRule(role, from_status, to_status)
        for role in roles
        for from_status, to_status in pairs
    )


_QA_ROLES = (Role.QA, Role.TESTER)

STANDARD_RULES = RuleSet(
    name="standard",
    unrestricted_roles=PRIVILEGED_ROLES,
    rules=(
        _edges(
            (Role.DEVELOPER,),
            (BugStatus.OPEN, BugStatus.IN_PROGRESS),
            (BugStatus.IN_PROGRESS, BugStatus.RESOLVED),
            (BugStatus.REOPENED, BugStatus.IN_PROGRESS),
        )
        | _edges(
            _QA_ROLES,
            (BugStatus.RESOLVED, BugStatus.CLOSED),
            (BugStatus.RESOLVED, BugStatus.REOPENED),
            (BugStatus.CLOSED, BugStatus.REOPENED),
        )
        | _edges(
            (Role.CLIENT,),
            (BugStatus.CLOSED, BugStatus.REOPENED),
        )
    ),
)

# Adds the code review and QA testing stages
EXTENDED_RULES = RuleSet(
    name="extended",
    unrestricted_roles=PRIVILEGED_ROLES,
    rules=(
        STANDARD_RULES.rules
        | _edges(
            (Role.DEVELOPER,),
            (BugStatus.IN_PROGRESS, BugStatus.CODE_REVIEW),
            (BugStatus.CODE_REVIEW, BugStatus.IN_PROGRESS),
            (BugStatus.CODE_REVIEW, BugStatus.QA_TESTING),
            (BugStatus.REJECTED, BugStatus.IN_PROGRESS),
        )
        | _edges(
            _QA_ROLES,
            (BugStatus.CODE_REVIEW, BugStatus.QA_TESTING),
            (BugStatus.QA_TESTING, BugStatus.RESOLVED),
            (BugStatus.QA_TESTING, BugStatus.REOPENED),
        )
    ),
)

RULE_SETS: Mapping[str, RuleSet] = MappingProxyType({
    STANDARD_RULES.name: STANDARD_RULES,
    EXTENDED_RULES.name: EXTENDED_RULES,
})


# =====================================
# Argument Normalization
# =====================================

def _coerce(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Return the enum member for value, or None if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def _require(enum_cls: Type[E], value: Any, field: str) -> E:
    member = _coerce(enum_cls, value)
    if member is None:
        audit_logger.log_invalid_argument(field, value)
        raise InvalidArgumentError(field, value, [m.value for m in enum_cls])
    return member


# =====================================
# Policy
# =====================================

class TransitionPolicy:
    """
    Stateless decision engine over one rule set.

    Instances hold only read-only lookup tables and can be shared
    freely between threads.
    """

    def __init__(self, rule_set: RuleSet = STANDARD_RULES):
        self.rule_set = rule_set

        targets: dict[Tuple[Role, BugStatus], set[BugStatus]] = {}
        for rule in rule_set.rules:
            targets.setdefault((rule.role, rule.from_status), set()).add(rule.to_status)
        self._targets: Mapping[Tuple[Role, BugStatus], frozenset[BugStatus]] = MappingProxyType(
            {key: frozenset(value) for key, value in targets.items()}
        )

    def __repr__(self) -> str:
        return f"<TransitionPolicy(rule_set={self.rule_set.name})>"

    def _allows(self, role: Role, from_status: BugStatus, to_status: BugStatus) -> bool:
        if role in self.rule_set.unrestricted_roles:
            return True
        return to_status in self._targets.get((role, from_status), frozenset())

    def can_transition(
        self,
        role: Role | str,
        from_status: BugStatus | str,
        to_status: BugStatus | str,
    ) -> bool:
        """
        Check whether a role may move a bug from one status to another.

        Unrecognized role or status values are logged and denied.

        Args:
            role: Actor's role
            from_status: Bug's current status
            to_status: Requested status

        Returns:
            True if the transition is allowed
        """
        checked_role = _coerce(Role, role)
        checked_from = _coerce(BugStatus, from_status)
        checked_to = _coerce(BugStatus, to_status)

        if checked_role is None:
            audit_logger.log_invalid_argument("role", role)
        if checked_from is None:
            audit_logger.log_invalid_argument("from_status", from_status)
        if checked_to is None:
            audit_logger.log_invalid_argument("to_status", to_status)
        if checked_role is None or checked_from is None or checked_to is None:
            return False

        return self._allows(checked_role, checked_from, checked_to)

    def available_transitions(
        self,
        role: Role | str,
        from_status: BugStatus | str,
    ) -> frozenset[BugStatus]:
        """
        Get every status the role may move a bug to from from_status.

        The current status itself is never included. An empty set means
        no change is possible and the status control should be hidden.

        Args:
            role: Actor's role
            from_status: Bug's current status

        Returns:
            Frozen set of reachable statuses
        """
        checked_role = _coerce(Role, role)
        checked_from = _coerce(BugStatus, from_status)

        if checked_role is None:
            audit_logger.log_invalid_argument("role", role)
        if checked_from is None:
            audit_logger.log_invalid_argument("from_status", from_status)
        if checked_role is None or checked_from is None:
            return frozenset()

        return frozenset(
            status
            for status in BugStatus
            if status != checked_from and self._allows(checked_role, checked_from, status)
        )

    def check_transition(
        self,
        role: Role | str,
        from_status: BugStatus | str,
        to_status: BugStatus | str,
        user_id: Optional[int] = None,
    ) -> None:
        """
        Enforce the policy before a status write.

        Args:
            role: Actor's role
            from_status: Bug's current status
            to_status: Requested status
            user_id: Actor's ID, recorded in the audit log

        Raises:
            InvalidArgumentError: If role or a status is not recognized
            PermissionDeniedError: If the role may not make this change
        """
        checked_role = _require(Role, role, "role")
        checked_from = _require(BugStatus, from_status, "from_status")
        checked_to = _require(BugStatus, to_status, "to_status")

        if not self._allows(checked_role, checked_from, checked_to):
            audit_logger.log_transition_denied(
                role=checked_role.value,
                from_status=checked_from.value,
                to_status=checked_to.value,
                user_id=str(user_id) if user_id is not None else None,
            )
            raise PermissionDeniedError(checked_role, checked_from, checked_to)

    def allowed_pairs(self, role: Role | str) -> frozenset[Tuple[BugStatus, BugStatus]]:
        """
        Get the role's edges of the status graph, self-loops excluded.

        Args:
            role: Role to inspect

        Returns:
            Frozen set of (from_status, to_status) pairs
        """
        checked_role = _coerce(Role, role)
        if checked_role is None:
            audit_logger.log_invalid_argument("role", role)
            return frozenset()

        return frozenset(
            (from_status, to_status)
            for from_status in BugStatus
            for to_status in BugStatus
            if from_status != to_status and self._allows(checked_role, from_status, to_status)
        )


# =====================================
# Configured Policy
# =====================================

_policy: TransitionPolicy | None = None


def get_transition_policy() -> TransitionPolicy:
    """
    Get the policy for the configured rule set.

    Returns:
        TransitionPolicy singleton
    """
    global _policy
    if _policy is None:
        rule_set = RULE_SETS[get_settings().transition_rule_set]
        _policy = TransitionPolicy(rule_set)
        logger.info("transition_policy_loaded", rule_set=rule_set.name)
    return _policy


def reset_transition_policy() -> None:
    """Drop the cached policy so the next call re-reads settings."""
    global _policy
    _policy = None


def can_transition(
    role: Role | str,
    from_status: BugStatus | str,
    to_status: BugStatus | str,
) -> bool:
    """Check a transition against the configured policy. Never raises."""
    return get_transition_policy().can_transition(role, from_status, to_status)


def available_transitions(
    role: Role | str,
    from_status: BugStatus | str,
) -> frozenset[BugStatus]:
    """Reachable statuses under the configured policy. Never raises."""
    return get_transition_policy().available_transitions(role, from_status)


def check_transition(
    role: Role | str,
    from_status: BugStatus | str,
    to_status: BugStatus | str,
    user_id: Optional[int] = None,
) -> None:
    """Enforce a transition against the configured policy."""
    get_transition_policy().check_transition(role, from_status, to_status, user_id)

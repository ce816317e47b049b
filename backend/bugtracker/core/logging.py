"""
Bug Tracker - Logging Infrastructure

This module provides structured logging with support for:
- JSON formatted logs for production
- Console formatted logs for development
- Context binding for request tracing
- Audit events for refused status transitions
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

import structlog
from structlog.types import Processor

from bugtracker.core.config import get_settings

# Context variables for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
tenant_id_context: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)
bug_id_context: ContextVar[Optional[str]] = ContextVar("bug_id", default=None)


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add context variables to log entries.

    This processor adds request_id, tenant_id, and bug_id from
    context variables to every log entry.
    """
    request_id = request_id_context.get()
    if request_id:
        event_dict["request_id"] = request_id

    tenant_id = tenant_id_context.get()
    if tenant_id:
        event_dict["tenant_id"] = tenant_id

    bug_id = bug_id_context.get()
    if bug_id:
        event_dict["bug_id"] = bug_id

    return event_dict


def get_log_level(settings: Any) -> int:
    """Convert string log level to logging constant."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(settings.log_level.upper(), logging.INFO)


def get_processors(settings: Any) -> list[Processor]:
    """Get structlog processors based on settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    return processors


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    This should be called once at application startup.
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=get_log_level(settings),
    )

    structlog.configure(
        processors=get_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A structlog BoundLogger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("bug_status_transitioned", bug_id=42, new_status="resolved")
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for setting log context variables.

    Example:
        >>> with LogContext(request_id="req-123", tenant_id="org-1", bug_id="42"):
        ...     log.info("transition_requested")
    """

    def __init__(
        self,
        request_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        bug_id: Optional[str] = None,
    ):
        self.request_id = request_id
        self.tenant_id = tenant_id
        self.bug_id = bug_id
        self._tokens: list[tuple[ContextVar[Optional[str]], Token]] = []

    def __enter__(self) -> "LogContext":
        if self.request_id:
            self._tokens.append((request_id_context, request_id_context.set(self.request_id)))
        if self.tenant_id:
            self._tokens.append((tenant_id_context, tenant_id_context.set(self.tenant_id)))
        if self.bug_id:
            self._tokens.append((bug_id_context, bug_id_context.set(self.bug_id)))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()


class AuditLogger:
    """
    Logger for permission-relevant workflow events.

    Denied transitions are expected user-facing outcomes; malformed role or
    status values point at a programming or data error upstream.
    """

    def __init__(self) -> None:
        self.log = get_logger("bugtracker.audit")

    def log_transition_denied(
        self,
        role: str,
        from_status: str,
        to_status: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a status transition refused by the policy."""
        self.log.warning(
            "transition_denied",
            role=role,
            from_status=from_status,
            to_status=to_status,
            user_id=user_id,
        )

    def log_action_denied(
        self,
        action: str,
        role: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a bug change other than a status transition refused for a role."""
        self.log.warning(
            "action_denied",
            action=action,
            role=role,
            user_id=user_id,
        )

    def log_invalid_argument(self, field: str, value: Any) -> None:
        """Log a role or status value outside the known enumeration."""
        self.log.warning(
            "transition_argument_invalid",
            field=field,
            value=repr(value),
        )

    def log_cross_tenant_attempt(
        self,
        user_id: str,
        user_tenant: str,
        target_tenant: str,
    ) -> None:
        """Log an actor reaching for a bug in another organization."""
        self.log.warning(
            "tenant_isolation_violation",
            user_id=user_id,
            user_tenant=user_tenant,
            target_tenant=target_tenant,
        )


audit_logger = AuditLogger()

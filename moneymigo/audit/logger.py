"""
Audit Logger

DESIGN DECISION: Every session transition and sign-in attempt is logged.
This provides:
1. Complete traceability of authentication activity
2. The raw provider error (code + message) for developers
3. A record of why the app fell back to demo mode

The audit logger:
- Is synchronous: provider notifications arrive on plain callbacks
- Never raises into the session flow
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from moneymigo.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from moneymigo.models.auth_error import AuthError, RecoveryAction


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuthAuditLogger:
    """
    Central audit logging for the session engine.

    Writes structured events to the local log. Keeps the last events
    in memory so the settings page can show recent activity.
    """

    def __init__(self, history_size: int = 50):
        self._logger = structlog.get_logger("moneymigo.auth")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest last."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

    def log_session_initialized(
        self,
        mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.session_initialized(mode, correlation_id))

    def log_demo_mode(
        self,
        reason: str,
        error_code: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the fallback to demo mode and why it happened."""
        self.log(AuditEventBuilder.demo_mode_entered(
            reason=reason,
            error_code=error_code,
            correlation_id=correlation_id,
        ))

    def log_identity_changed(self, user_id: Optional[str], mode: str) -> None:
        self.log(AuditEventBuilder.identity_changed(user_id, mode))

    def log_auth_success(
        self,
        method: str,
        user_id: Optional[str],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.auth_succeeded(method, user_id, correlation_id))

    def log_auth_error(
        self,
        method: str,
        error: AuthError,
        action: RecoveryAction,
        correlation_id: UUID,
    ) -> None:
        """
        Log a classified failure.

        Cancellations are logged at info level: they are not failures.
        """
        self.log(AuditEventBuilder.auth_failed(
            method=method,
            kind=error.kind.value,
            action=action.type.value,
            error_code=error.raw_code,
            error_message=error.message,
            correlation_id=correlation_id,
            is_cancellation=error.kind.is_cancellation,
        ))

    def log_auth_unavailable(self, method: str, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.auth_unavailable(method, correlation_id))

    def log_signed_out(self, user_id: Optional[str], correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.signed_out(user_id, correlation_id))

    def log_demo_session_ended(self, correlation_id: UUID) -> None:
        self.log(AuditEventBuilder.demo_session_ended(correlation_id))

    def log_auth_methods_available(self, methods: dict[str, bool]) -> None:
        self.log(AuditEventBuilder.auth_methods_available(methods))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use one per user action (e.g., one sign-in attempt).
    """
    return uuid4()

"""
Audit Models for MoneyMigo Authentication

Every session transition and every sign-in attempt is logged.
This provides:
1. Traceability of who signed in, how, and when
2. Debugging information when the provider is misconfigured
3. The full provider error text, which users never see

DESIGN DECISION: Audit events are append-only and carry the raw provider
code/message. Prompts shown to users are built separately and never
include these fields.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session lifecycle
    SESSION_INITIALIZED = "session_initialized"
    DEMO_MODE_ENTERED = "demo_mode_entered"
    IDENTITY_CHANGED = "identity_changed"
    DEMO_SESSION_ENDED = "demo_session_ended"

    # Sign-in family
    AUTH_SUCCEEDED = "auth_succeeded"
    AUTH_FAILED = "auth_failed"
    AUTH_UNAVAILABLE = "auth_unavailable"
    SIGNED_OUT = "signed_out"

    # Startup diagnostics
    AUTH_METHODS_AVAILABLE = "auth_methods_available"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant session action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who / how
    user_id: Optional[str] = Field(
        default=None,
        description="Identity the event relates to, if any"
    )
    method: Optional[str] = Field(
        default=None,
        description="Sign-in method (email_password, anonymous, ...)"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one sign-in attempt)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "method": self.method,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.auth_succeeded("anonymous", user_id, correlation_id)
        event = AuditEventBuilder.demo_mode_entered("Firebase not configured")
    """

    @staticmethod
    def session_initialized(
        mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_INITIALIZED,
            correlation_id=correlation_id,
            description=f"Session initialized in {mode} mode",
            details={"mode": mode},
        )

    @staticmethod
    def demo_mode_entered(
        reason: str,
        error_code: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEMO_MODE_ENTERED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Running in demo mode - authentication not available",
            details={"reason": reason},
            error_code=error_code,
        )

    @staticmethod
    def identity_changed(
        user_id: Optional[str],
        mode: str,
    ) -> AuditEvent:
        description = (
            f"User logged in: {user_id}" if user_id else "User logged out"
        )
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_CHANGED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description=description,
            details={"mode": mode},
        )

    @staticmethod
    def auth_succeeded(
        method: str,
        user_id: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_SUCCEEDED,
            user_id=user_id,
            method=method,
            correlation_id=correlation_id,
            description=f"Authentication successful via {method}",
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(
        method: str,
        kind: str,
        action: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID,
        is_cancellation: bool = False,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.INFO if is_cancellation else AuditSeverity.ERROR,
            method=method,
            correlation_id=correlation_id,
            description=f"Authentication failed via {method}: {kind}",
            details={
                "kind": kind,
                "recovery_action": action,
            },
            error_code=error_code,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def auth_unavailable(
        method: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_UNAVAILABLE,
            severity=AuditSeverity.WARNING,
            method=method,
            correlation_id=correlation_id,
            description=f"{method} not available in demo mode",
            is_user_action=True,
        )

    @staticmethod
    def signed_out(
        user_id: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_OUT,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Signed out successfully",
            is_user_action=True,
        )

    @staticmethod
    def demo_session_ended(
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEMO_SESSION_ENDED,
            correlation_id=correlation_id,
            description="Demo session ended - session state restarted",
            is_user_action=True,
        )

    @staticmethod
    def auth_methods_available(
        methods: dict[str, bool],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_METHODS_AVAILABLE,
            description="Available authentication methods",
            details={"methods": methods},
        )

"""
Data Models Package

This package contains all Pydantic models used by the MoneyMigo session engine.
All data flowing between the provider, the session manager and the UI
must conform to these schemas.
"""

from moneymigo.models.session import (
    Identity,
    OperatingMode,
    Session,
)
from moneymigo.models.auth_error import (
    AuthError,
    AuthErrorKind,
    ProviderFeature,
    RecoveryAction,
    RecoveryActionType,
    RecoveryContext,
    RecoveryPrompt,
)
from moneymigo.models.outcome import (
    AuthMethod,
    AuthOutcome,
)
from moneymigo.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Session models
    "Identity",
    "OperatingMode",
    "Session",
    # Error / recovery models
    "AuthError",
    "AuthErrorKind",
    "ProviderFeature",
    "RecoveryAction",
    "RecoveryActionType",
    "RecoveryContext",
    "RecoveryPrompt",
    # Outcomes
    "AuthMethod",
    "AuthOutcome",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Authentication Session Engine

- classifier: raw provider code -> AuthErrorKind
- recovery: AuthErrorKind -> RecoveryAction
- prompts: RecoveryAction -> user-facing RecoveryPrompt
- session_manager: owns the Session and runs provider operations
"""

from moneymigo.auth.classifier import classify, normalize_code, to_auth_error
from moneymigo.auth.prompts import (
    DEMO_UNAVAILABLE_PROMPT,
    FEDERATED_UNAVAILABLE_PROMPT,
    ConsoleLinks,
    build_prompt,
)
from moneymigo.auth.recovery import decide
from moneymigo.auth.session_manager import SessionManager

__all__ = [
    "ConsoleLinks",
    "DEMO_UNAVAILABLE_PROMPT",
    "FEDERATED_UNAVAILABLE_PROMPT",
    "SessionManager",
    "build_prompt",
    "classify",
    "decide",
    "normalize_code",
    "to_auth_error",
]

"""Result of one session operation, as handed to the UI layer."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from moneymigo.models.auth_error import AuthError, RecoveryAction, RecoveryPrompt
from moneymigo.models.session import Session


class AuthMethod(str, Enum):
    """Which sign-in family operation was attempted."""
    EMAIL_PASSWORD = "email_password"
    EMAIL_SIGN_UP = "email_sign_up"
    ANONYMOUS = "anonymous"
    FEDERATED = "federated"
    SIGN_OUT = "sign_out"

    @property
    def label(self) -> str:
        return {
            AuthMethod.EMAIL_PASSWORD: "Email/Password",
            AuthMethod.EMAIL_SIGN_UP: "Email/Password (Sign Up)",
            AuthMethod.ANONYMOUS: "Guest/Anonymous",
            AuthMethod.FEDERATED: "Google",
            AuthMethod.SIGN_OUT: "Sign Out",
        }[self]


class AuthOutcome(BaseModel):
    """
    Either the new session, or the session plus one classified error.

    `capability_unavailable` is set when the operation is not possible
    at all in the current mode (demo mode has no provider).
    """
    model_config = ConfigDict(frozen=True)

    method: AuthMethod
    session: Session
    error: Optional[AuthError] = None
    action: Optional[RecoveryAction] = None
    prompt: Optional[RecoveryPrompt] = None
    capability_unavailable: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.capability_unavailable

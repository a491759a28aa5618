"""
Session Data Models for MoneyMigo

A Session is an immutable snapshot of "who is using the app and how".

DESIGN DECISION: Sessions and identities are frozen.
The session manager replaces the whole snapshot on every change,
it never updates fields in place. That way readers can never observe
a half-updated session, and no locks are needed.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OperatingMode(str, Enum):
    """
    How the app is currently operating.

    DEMO_FALLBACK is used when no real identity provider is available;
    the identity is then a local placeholder.
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    DEMO_FALLBACK = "demo_fallback"


class Identity(BaseModel):
    """
    A signed-in user as reported by the identity provider.

    A new sign-in always produces a new Identity.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Provider user ID (uid)"
    )
    display_name: Optional[str] = None
    email: Optional[str] = None
    is_anonymous: bool = False
    email_verified: bool = False

    # Locally synthesized (demo) identities are never provider-issued
    is_placeholder: bool = Field(
        default=False,
        description="True for identities created locally in demo mode"
    )

    @classmethod
    def placeholder(
        cls,
        user_id: str,
        email: Optional[str],
        display_name: Optional[str],
    ) -> "Identity":
        """Build the demo-mode identity."""
        return cls(
            id=user_id,
            email=email,
            display_name=display_name,
            is_anonymous=False,
            email_verified=True,
            is_placeholder=True,
        )


class Session(BaseModel):
    """
    The current session.

    Exactly one is live per process; it is replaced wholesale.
    """
    model_config = ConfigDict(frozen=True)

    identity: Optional[Identity] = None
    mode: OperatingMode = OperatingMode.UNAUTHENTICATED

    @model_validator(mode='after')
    def validate_mode(self) -> 'Session':
        """Identity presence and origin must agree with the mode."""
        if self.mode == OperatingMode.DEMO_FALLBACK:
            if self.identity is None or not self.identity.is_placeholder:
                raise ValueError("Demo sessions require a locally synthesized identity")
        elif self.mode == OperatingMode.AUTHENTICATED:
            if self.identity is None:
                raise ValueError("Authenticated sessions require an identity")
            if self.identity.is_placeholder:
                raise ValueError("Authenticated sessions require a provider-issued identity")
        elif self.identity is not None:
            raise ValueError("Unauthenticated sessions cannot carry an identity")
        return self

    @property
    def is_anonymous(self) -> bool:
        return self.identity is not None and self.identity.is_anonymous

    @property
    def is_demo(self) -> bool:
        return self.mode == OperatingMode.DEMO_FALLBACK

    @property
    def is_signed_in(self) -> bool:
        return self.identity is not None

    @classmethod
    def unauthenticated(cls) -> "Session":
        return cls()

    @classmethod
    def authenticated(cls, identity: Identity) -> "Session":
        return cls(identity=identity, mode=OperatingMode.AUTHENTICATED)

    @classmethod
    def demo(cls, identity: Identity) -> "Session":
        return cls(identity=identity, mode=OperatingMode.DEMO_FALLBACK)

    @classmethod
    def from_identity(cls, identity: Optional[Identity]) -> "Session":
        """Session for a provider state-change notification."""
        if identity is None:
            return cls.unauthenticated()
        return cls.authenticated(identity)

"""
Authentication Error and Recovery Models

Provider error codes are vendor vocabulary. Everything downstream of the
classifier works with the canonical AuthErrorKind instead, so recovery
policy does not depend on any single provider.

DESIGN DECISION: RecoveryAction is one model with an explicit `type`
plus the payload fields some variants carry (domain, provider feature).
Value equality lets callers compare actions directly.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ERROR KINDS
# =============================================================================

class AuthErrorKind(str, Enum):
    """Canonical, provider-independent failure kinds."""
    EMAIL_IN_USE = "email_in_use"
    INVALID_CREDENTIAL = "invalid_credential"
    WEAK_PASSWORD = "weak_password"
    INVALID_EMAIL = "invalid_email"
    TOO_MANY_REQUESTS = "too_many_requests"
    CONFIGURATION_MISSING = "configuration_missing"
    ANONYMOUS_DISABLED = "anonymous_disabled"
    DOMAIN_UNAUTHORIZED = "domain_unauthorized"
    POPUP_BLOCKED = "popup_blocked"
    POPUP_CANCELLED = "popup_cancelled"
    OPERATION_CANCELLED = "operation_cancelled"
    UNKNOWN = "unknown"

    @property
    def is_cancellation(self) -> bool:
        """User-initiated cancellation is not a failure."""
        return self in (AuthErrorKind.POPUP_CANCELLED, AuthErrorKind.OPERATION_CANCELLED)


class AuthError(BaseModel):
    """
    A classified failure of one provider operation.

    Created per failed call, consumed once by the recovery director.
    `message` is the provider's text and is for logs only.
    """
    model_config = ConfigDict(frozen=True)

    kind: AuthErrorKind
    raw_code: str = ""
    message: str = ""


# =============================================================================
# RECOVERY ACTIONS
# =============================================================================

class ProviderFeature(str, Enum):
    """Provider console features a user may need to switch on."""
    ANONYMOUS = "anonymous"
    CONFIGURATION = "configuration"


class RecoveryActionType(str, Enum):
    """The next user-facing step after a classified failure."""
    AUTO_SWITCH_TO_SIGN_IN = "auto_switch_to_sign_in"
    PROMPT_CREATE_ACCOUNT = "prompt_create_account"
    SHOW_DOMAIN_FIX = "show_domain_fix"
    SHOW_PROVIDER_FIX = "show_provider_fix"
    RETRY = "retry"  # not produced by the current policy
    IGNORE = "ignore"
    SHOW_GENERIC_ERROR = "show_generic_error"


class RecoveryAction(BaseModel):
    """A recovery decision, with the payload its variant needs."""
    model_config = ConfigDict(frozen=True)

    type: RecoveryActionType
    domain: Optional[str] = Field(
        default=None,
        description="Domain to authorize (SHOW_DOMAIN_FIX only)"
    )
    provider_feature: Optional[str] = Field(
        default=None,
        description="Console feature to enable (SHOW_PROVIDER_FIX only)"
    )

    @model_validator(mode='after')
    def validate_payload(self) -> 'RecoveryAction':
        if self.type == RecoveryActionType.SHOW_DOMAIN_FIX:
            if self.domain is None:
                raise ValueError("SHOW_DOMAIN_FIX requires a domain")
        elif self.domain is not None:
            raise ValueError(f"{self.type.value} does not carry a domain")

        if self.type == RecoveryActionType.SHOW_PROVIDER_FIX:
            if not self.provider_feature:
                raise ValueError("SHOW_PROVIDER_FIX requires a provider feature")
        elif self.provider_feature is not None:
            raise ValueError(f"{self.type.value} does not carry a provider feature")
        return self

    @classmethod
    def auto_switch_to_sign_in(cls) -> "RecoveryAction":
        return cls(type=RecoveryActionType.AUTO_SWITCH_TO_SIGN_IN)

    @classmethod
    def prompt_create_account(cls) -> "RecoveryAction":
        return cls(type=RecoveryActionType.PROMPT_CREATE_ACCOUNT)

    @classmethod
    def show_domain_fix(cls, domain: str) -> "RecoveryAction":
        return cls(type=RecoveryActionType.SHOW_DOMAIN_FIX, domain=domain)

    @classmethod
    def show_provider_fix(cls, provider_feature: str) -> "RecoveryAction":
        if isinstance(provider_feature, ProviderFeature):
            provider_feature = provider_feature.value
        return cls(
            type=RecoveryActionType.SHOW_PROVIDER_FIX,
            provider_feature=provider_feature,
        )

    @classmethod
    def retry(cls) -> "RecoveryAction":
        return cls(type=RecoveryActionType.RETRY)

    @classmethod
    def ignore(cls) -> "RecoveryAction":
        return cls(type=RecoveryActionType.IGNORE)

    @classmethod
    def show_generic_error(cls) -> "RecoveryAction":
        return cls(type=RecoveryActionType.SHOW_GENERIC_ERROR)

    @property
    def is_console_fix(self) -> bool:
        """Does fixing this require the provider console?"""
        return self.type in (
            RecoveryActionType.SHOW_DOMAIN_FIX,
            RecoveryActionType.SHOW_PROVIDER_FIX,
        )


class RecoveryContext(BaseModel):
    """What the recovery director knows about the failed attempt."""
    model_config = ConfigDict(frozen=True)

    attempted_email: Optional[str] = None
    current_domain: str = Field(..., min_length=1)


class RecoveryPrompt(BaseModel):
    """
    User-facing copy for a recovery action.

    Never contains the raw provider error string.
    """
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    action_label: Optional[str] = None
    link: Optional[str] = None
    severity: str = Field(
        default="error",
        pattern="^(error|info)$",
    )

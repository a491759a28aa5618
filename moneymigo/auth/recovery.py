"""
Recovery Director

Decides the next user-facing step for a classified error.

DESIGN DECISION: The policy is a stateless function of (kind, context).
The "switch to sign-in" signal is returned as AUTO_SWITCH_TO_SIGN_IN
to the caller, instead of being broadcast to whoever is listening.

KNOWN GAP: RecoveryAction.retry() exists but no kind maps to it.
Nothing in the current policy retries a network call automatically.
"""

from moneymigo.models.auth_error import (
    AuthErrorKind,
    ProviderFeature,
    RecoveryAction,
    RecoveryContext,
)


def decide(kind: AuthErrorKind, context: RecoveryContext) -> RecoveryAction:
    """Map an error kind to its recovery action."""
    if kind == AuthErrorKind.EMAIL_IN_USE:
        return RecoveryAction.auto_switch_to_sign_in()
    if kind == AuthErrorKind.INVALID_CREDENTIAL:
        return RecoveryAction.prompt_create_account()
    if kind == AuthErrorKind.ANONYMOUS_DISABLED:
        return RecoveryAction.show_provider_fix(ProviderFeature.ANONYMOUS.value)
    if kind == AuthErrorKind.CONFIGURATION_MISSING:
        return RecoveryAction.show_provider_fix(ProviderFeature.CONFIGURATION.value)
    if kind == AuthErrorKind.DOMAIN_UNAUTHORIZED:
        return RecoveryAction.show_domain_fix(context.current_domain)
    if kind.is_cancellation:
        return RecoveryAction.ignore()

    # POPUP_BLOCKED, WEAK_PASSWORD, INVALID_EMAIL, TOO_MANY_REQUESTS, UNKNOWN
    return RecoveryAction.show_generic_error()

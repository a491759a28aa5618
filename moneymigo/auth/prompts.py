"""
Recovery Prompts

Turns a recovery action into the copy the sign-in page shows.
Prompts are written for users: they never echo the provider's raw error.
"""

from typing import Optional

from moneymigo.models.auth_error import (
    AuthError,
    AuthErrorKind,
    ProviderFeature,
    RecoveryAction,
    RecoveryActionType,
    RecoveryPrompt,
)
from moneymigo.models.outcome import AuthMethod


CONSOLE_ROOT = "https://console.firebase.google.com"


class ConsoleLinks:
    """Firebase console pages a user is sent to for fixes."""

    def __init__(self, project_id: Optional[str] = None):
        self.project_id = project_id

    @property
    def authentication(self) -> str:
        if not self.project_id:
            return f"{CONSOLE_ROOT}/"
        return f"{CONSOLE_ROOT}/project/{self.project_id}/authentication"

    @property
    def sign_in_providers(self) -> str:
        if not self.project_id:
            return self.authentication
        return f"{self.authentication}/providers"

    @property
    def settings(self) -> str:
        if not self.project_id:
            return self.authentication
        return f"{self.authentication}/settings"


# Copy for SHOW_GENERIC_ERROR, by kind
GENERIC_PROMPTS: dict[AuthErrorKind, tuple[str, str]] = {
    AuthErrorKind.POPUP_BLOCKED: (
        "Popup was blocked",
        "Please allow popups for this site and try again",
    ),
    AuthErrorKind.WEAK_PASSWORD: (
        "Weak password",
        "Password should be at least 6 characters.",
    ),
    AuthErrorKind.INVALID_EMAIL: (
        "Invalid email address",
        "Please enter a valid email address.",
    ),
    AuthErrorKind.TOO_MANY_REQUESTS: (
        "Too many failed attempts",
        "Please try again later or reset your password",
    ),
}

# Fallback title when nothing more specific is known
FAILURE_TITLES: dict[AuthMethod, str] = {
    AuthMethod.EMAIL_PASSWORD: "Failed to sign in",
    AuthMethod.EMAIL_SIGN_UP: "Failed to create account",
    AuthMethod.ANONYMOUS: "Failed to sign in as guest",
    AuthMethod.FEDERATED: "Failed to sign in with Google",
    AuthMethod.SIGN_OUT: "Failed to sign out",
}

DEMO_UNAVAILABLE_PROMPT = RecoveryPrompt(
    title="Authentication not available",
    description=(
        "Firebase Authentication needs to be enabled in your Firebase console. "
        "You can keep using the demo."
    ),
)

FEDERATED_UNAVAILABLE_PROMPT = RecoveryPrompt(
    title="Google sign-in not available",
    description=(
        "Google sign-in cannot be completed from this page. "
        "Use email and password, or continue as a guest."
    ),
)


def build_prompt(
    error: AuthError,
    action: RecoveryAction,
    method: AuthMethod,
    links: Optional[ConsoleLinks] = None,
) -> Optional[RecoveryPrompt]:
    """
    Build the prompt for a failed operation.

    Returns None when nothing should be shown (user cancellations).
    """
    links = links or ConsoleLinks()

    if action.type == RecoveryActionType.IGNORE:
        return None

    if action.type == RecoveryActionType.AUTO_SWITCH_TO_SIGN_IN:
        return RecoveryPrompt(
            title="Email already registered",
            description="This email already has an account. We switched you to sign in.",
            action_label="Sign In",
            severity="info",
        )

    if action.type == RecoveryActionType.PROMPT_CREATE_ACCOUNT:
        return RecoveryPrompt(
            title="Invalid email or password",
            description=(
                "No account exists with these credentials. "
                "Create an account, or try Guest mode."
            ),
            action_label="Create Account",
        )

    if action.type == RecoveryActionType.SHOW_DOMAIN_FIX:
        return RecoveryPrompt(
            title="Domain not authorized for Google sign-in",
            description=(
                f'Add "{action.domain}" to Firebase Console > Authentication > '
                "Settings > Authorized domains"
            ),
            action_label="Fix Now",
            link=links.settings,
        )

    if action.type == RecoveryActionType.SHOW_PROVIDER_FIX:
        if action.provider_feature == ProviderFeature.ANONYMOUS.value:
            return RecoveryPrompt(
                title="Guest mode not enabled",
                description="Enable Anonymous authentication in Firebase Console",
                action_label="Fix Now",
                link=links.sign_in_providers,
            )
        return RecoveryPrompt(
            title="Firebase Authentication is not enabled",
            description=(
                "Go to Firebase Console > Authentication > Get Started "
                "to enable auth features"
            ),
            action_label="Open Console",
            link=links.authentication,
        )

    title, description = GENERIC_PROMPTS.get(
        error.kind,
        (FAILURE_TITLES[method], "Please try again."),
    )
    return RecoveryPrompt(title=title, description=description)

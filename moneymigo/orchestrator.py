"""
Main Orchestrator for MoneyMigo Authentication

This module ties together the session engine and the sign-in page:
1. LoginFlow - the state behind the sign-in form (mode, banner, fixes)
2. create_provider, create_app_components - the composition root

DESIGN DECISION: The session is owned by the composition root.
The SessionManager created here is the only writer; the UI reads it
through LoginFlow. There is no global "current user".

The sign-up -> sign-in switch is driven by the AUTO_SWITCH_TO_SIGN_IN
action returned with the outcome. Nothing is broadcast.
"""

from typing import Optional

from moneymigo.audit import AuthAuditLogger
from moneymigo.auth import ConsoleLinks, SessionManager
from moneymigo.config import FirebaseSettings, get_settings
from moneymigo.models.auth_error import (
    AuthErrorKind,
    RecoveryAction,
    RecoveryActionType,
    RecoveryPrompt,
)
from moneymigo.models.outcome import AuthOutcome
from moneymigo.models.session import Session
from moneymigo.services.provider import (
    FederatedPopup,
    IdentityToolkitAdapter,
    ProviderAdapter,
)


class LoginFlow:
    """
    State behind the sign-in form.

    Flow:
    1. User submits the form (sign-in or sign-up, by mode)
    2. SessionManager returns an AuthOutcome
    3. The outcome's action updates the form:
       - AUTO_SWITCH_TO_SIGN_IN flips the form to sign-in
       - IGNORE shows nothing
       - anything else shows the outcome's prompt

    The UI is expected to disable its buttons while a call is running.
    """

    def __init__(self, session_manager: SessionManager):
        self._manager = session_manager
        self.is_sign_up = False
        self.prompt: Optional[RecoveryPrompt] = None
        self.last_outcome: Optional[AuthOutcome] = None
        self._errors_seen: list[AuthErrorKind] = []
        self._actions: dict[AuthErrorKind, RecoveryAction] = {}

    @property
    def session(self) -> Session:
        return self._manager.session

    @property
    def is_demo(self) -> bool:
        return self._manager.is_demo

    @property
    def console_links(self) -> ConsoleLinks:
        return self._manager.console_links

    @property
    def errors_seen(self) -> list[AuthErrorKind]:
        """Distinct error kinds seen on this form, oldest first."""
        return list(self._errors_seen)

    @property
    def pending_fixes(self) -> list[tuple[AuthErrorKind, RecoveryAction]]:
        """Errors that need a change in the provider console."""
        return [
            (kind, self._actions[kind])
            for kind in self._errors_seen
            if self._actions[kind].is_console_fix
        ]

    @property
    def auto_handled(self) -> list[AuthErrorKind]:
        """Errors the form already recovered from on its own."""
        return [
            kind for kind in self._errors_seen
            if self._actions[kind].type == RecoveryActionType.AUTO_SWITCH_TO_SIGN_IN
        ]

    # -------------------------------------------------------------------------
    # Form state
    # -------------------------------------------------------------------------

    def switch_to_sign_up(self) -> None:
        self.is_sign_up = True
        self.prompt = None

    def switch_to_sign_in(self) -> None:
        self.is_sign_up = False
        self.prompt = None

    def toggle_mode(self) -> None:
        if self.is_sign_up:
            self.switch_to_sign_in()
        else:
            self.switch_to_sign_up()

    def dismiss_prompt(self) -> None:
        self.prompt = None

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def submit(self, email: str, password: str) -> AuthOutcome:
        """Sign in or sign up, depending on the form mode."""
        self.prompt = None
        if self.is_sign_up:
            outcome = await self._manager.sign_up(email, password)
        else:
            outcome = await self._manager.sign_in(email, password)
        return self._apply(outcome)

    async def continue_as_guest(self) -> AuthOutcome:
        self.prompt = None
        return self._apply(await self._manager.sign_in_anonymously())

    async def continue_with_federated(self, current_domain: Optional[str] = None) -> AuthOutcome:
        self.prompt = None
        return self._apply(await self._manager.sign_in_federated(current_domain))

    async def sign_out(self) -> AuthOutcome:
        self.prompt = None
        outcome = self._apply(await self._manager.sign_out())
        if outcome.succeeded:
            self.is_sign_up = False
        return outcome

    def _apply(self, outcome: AuthOutcome) -> AuthOutcome:
        self.last_outcome = outcome

        if outcome.error is not None:
            kind = outcome.error.kind
            if kind not in self._errors_seen:
                self._errors_seen.append(kind)
            self._actions[kind] = outcome.action

            if outcome.action.type == RecoveryActionType.AUTO_SWITCH_TO_SIGN_IN:
                self.is_sign_up = False

        self.prompt = outcome.prompt
        return outcome


def create_provider(
    firebase: FirebaseSettings,
    popup: Optional[FederatedPopup] = None,
) -> Optional[ProviderAdapter]:
    """Build the Firebase adapter, or None when Firebase is not configured."""
    if not firebase.is_configured:
        return None
    return IdentityToolkitAdapter(settings=firebase, popup=popup)


def create_app_components(
    use_provider: bool = True,
    popup: Optional[FederatedPopup] = None,
    audit_logger: Optional[AuthAuditLogger] = None,
) -> tuple[LoginFlow, SessionManager, AuthAuditLogger]:
    """
    Create all application components.

    Every call builds a new SessionManager and provider adapter. Both hold
    one user's identity, so a web frontend must call this once per
    browser session and never share the result between sessions.

    The caller must `await session_manager.initialize()` before use.

    Args:
        use_provider: Whether to connect to Firebase at all
        popup: Federated sign-in popup handler, if the UI has one
        audit_logger: Existing logger to keep across restarts

    Returns:
        (login_flow, session_manager, audit_logger)
    """
    settings = get_settings()
    firebase = settings.firebase
    audit_logger = audit_logger or AuthAuditLogger()

    provider = create_provider(firebase, popup) if use_provider else None

    session_manager = SessionManager(
        provider=provider,
        firebase_settings=firebase,
        app_settings=settings.app,
        audit_logger=audit_logger,
    )
    return LoginFlow(session_manager), session_manager, audit_logger

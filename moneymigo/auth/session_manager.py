"""
Session Manager

The single source of truth for the current Session.

Responsibilities:
1. Decide at startup between the real provider and demo mode
2. Subscribe to provider identity changes and replace the session on each
3. Run the sign-in family operations and turn failures into AuthOutcomes

DESIGN DECISION: One writer, many readers.
Only this class assigns the session. Readers get the current snapshot
from `session` or register with `add_listener`. Snapshots are immutable
and replaced by assignment, so no locks are needed.

Concurrent sign-in calls are not deduplicated here; the UI disables
its buttons while a call is in flight.
"""

from typing import Awaitable, Callable, Optional
from uuid import UUID

from moneymigo.audit import AuthAuditLogger, create_correlation_id
from moneymigo.auth.classifier import to_auth_error
from moneymigo.auth.prompts import (
    DEMO_UNAVAILABLE_PROMPT,
    FEDERATED_UNAVAILABLE_PROMPT,
    ConsoleLinks,
    build_prompt,
)
from moneymigo.auth.recovery import decide
from moneymigo.config import AppSettings, FirebaseSettings, get_settings
from moneymigo.models.auth_error import RecoveryContext
from moneymigo.models.outcome import AuthMethod, AuthOutcome
from moneymigo.models.session import Identity, Session
from moneymigo.services.provider import (
    UNSUPPORTED_ENVIRONMENT,
    ProviderAdapter,
    ProviderError,
    Unsubscribe,
)


SessionListener = Callable[[Session], None]
ProviderCall = Callable[[ProviderAdapter], Awaitable[object]]


class SessionManager:
    """
    Owns the live Session and mediates all provider operations.

    Every operation returns an AuthOutcome: the new session, or the
    session plus exactly one classified error and its recovery action.
    """

    def __init__(
        self,
        provider: Optional[ProviderAdapter] = None,
        firebase_settings: Optional[FirebaseSettings] = None,
        app_settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuthAuditLogger] = None,
    ):
        self._provider = provider
        self._firebase = firebase_settings or get_settings().firebase
        self._app = app_settings or get_settings().app
        self._audit = audit_logger or AuthAuditLogger()
        self._links = ConsoleLinks(self._firebase.project_id)

        self._session = Session.unauthenticated()
        self._listeners: list[SessionListener] = []
        self._unsubscribe: Optional[Unsubscribe] = None
        self._initialized = False
        self._loading = True
        self._demo = False

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def loading(self) -> bool:
        """True until the first identity notification (or demo fallback)."""
        return self._loading

    @property
    def is_demo(self) -> bool:
        return self._demo

    @property
    def provider(self) -> Optional[ProviderAdapter]:
        return self._provider

    @property
    def firebase_settings(self) -> FirebaseSettings:
        return self._firebase

    @property
    def console_links(self) -> ConsoleLinks:
        return self._links

    def add_listener(self, callback: SessionListener) -> Unsubscribe:
        """Observe session replacements. Returns the unsubscribe handle."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def available_methods(self) -> dict[str, bool]:
        return {
            "email_password": not self._demo,
            "federated": (
                not self._demo
                and self._provider is not None
                and self._provider.supports_federated
            ),
            "guest": True,
            "demo": self._demo,
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> Session:
        """
        Start the session.

        Falls back to demo mode when auth is disabled, Firebase is not
        configured, or the provider cannot be reached. In demo mode the
        provider is not contacted again until `reconfigure` or a demo
        sign-out runs this decision again.
        """
        correlation_id = create_correlation_id()
        self._teardown_subscription()
        self._initialized = True
        self._loading = True

        if self._provider is None:
            self._enter_demo("No identity provider configured", None, correlation_id)
        elif not self._firebase.auth_enabled:
            self._enter_demo("Authentication disabled in settings", None, correlation_id)
        elif not self._firebase.is_configured:
            self._enter_demo("Firebase API key or project ID missing", None, correlation_id)
        elif not self._firebase.probe_on_startup:
            self._connect(correlation_id)
        else:
            try:
                await self._provider.check_configuration()
            except ProviderError as e:
                self._enter_demo(
                    f"Provider check failed: {e.message}", e.code, correlation_id
                )
            else:
                self._connect(correlation_id)

        self._audit.log_session_initialized(self._session.mode.value, correlation_id)
        self._audit.log_auth_methods_available(self.available_methods())
        return self._session

    def _connect(self, correlation_id: UUID) -> None:
        self._demo = False
        try:
            self._unsubscribe = self._provider.subscribe_to_identity_changes(
                self._on_identity_changed
            )
        except ProviderError as e:
            self._enter_demo(
                f"Could not subscribe to identity changes: {e.message}",
                e.code,
                correlation_id,
            )

    async def reconfigure(
        self,
        provider: Optional[ProviderAdapter],
        firebase_settings: Optional[FirebaseSettings] = None,
    ) -> Session:
        """Switch to a new provider/settings and start over."""
        self._provider = provider
        if firebase_settings is not None:
            self._firebase = firebase_settings
            self._links = ConsoleLinks(firebase_settings.project_id)
        return await self.initialize()

    async def close(self) -> None:
        """Stop receiving provider notifications."""
        self._teardown_subscription()

    def _teardown_subscription(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -------------------------------------------------------------------------
    # Session replacement
    # -------------------------------------------------------------------------

    def _replace(self, session: Session, force_notify: bool = False) -> None:
        changed = session != self._session
        self._session = session
        if changed or force_notify:
            for listener in list(self._listeners):
                listener(session)

    def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        if self._demo:
            return
        self._replace(Session.from_identity(identity))
        self._loading = False
        self._audit.log_identity_changed(
            identity.id if identity else None,
            self._session.mode.value,
        )

    def _demo_identity(self) -> Identity:
        return Identity.placeholder(
            user_id=self._app.demo_user_id,
            email=self._app.demo_email,
            display_name=self._app.demo_display_name,
        )

    def _enter_demo(
        self,
        reason: str,
        error_code: Optional[str],
        correlation_id: UUID,
    ) -> None:
        self._teardown_subscription()
        self._demo = True
        self._replace(Session.demo(self._demo_identity()), force_notify=True)
        self._loading = False
        self._audit.log_demo_mode(reason, error_code, correlation_id)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> AuthOutcome:
        return await self._run(
            AuthMethod.EMAIL_PASSWORD,
            lambda provider: provider.sign_in_with_password(email, password),
            attempted_email=email,
        )

    async def sign_up(self, email: str, password: str) -> AuthOutcome:
        return await self._run(
            AuthMethod.EMAIL_SIGN_UP,
            lambda provider: provider.create_account_with_password(email, password),
            attempted_email=email,
        )

    async def sign_in_anonymously(self) -> AuthOutcome:
        if self._demo:
            # Guest access in demo mode is the demo itself.
            correlation_id = create_correlation_id()
            self._audit.log_auth_success(
                AuthMethod.ANONYMOUS.label,
                self._session.identity.id,
                correlation_id,
            )
            return AuthOutcome(method=AuthMethod.ANONYMOUS, session=self._session)

        return await self._run(
            AuthMethod.ANONYMOUS,
            lambda provider: provider.sign_in_anonymously(),
        )

    async def sign_in_federated(self, current_domain: Optional[str] = None) -> AuthOutcome:
        domain = current_domain or self._app.current_domain
        return await self._run(
            AuthMethod.FEDERATED,
            lambda provider: provider.sign_in_with_federated_popup(domain),
            current_domain=domain,
        )

    async def sign_out(self) -> AuthOutcome:
        correlation_id = create_correlation_id()

        if self._demo:
            # Ending the demo restarts session state: the startup decision
            # runs again against the current provider and settings.
            self._audit.log_demo_session_ended(correlation_id)
            await self.initialize()
            return AuthOutcome(method=AuthMethod.SIGN_OUT, session=self._session)

        self._ensure_initialized()
        user_id = self._session.identity.id if self._session.identity else None
        try:
            await self._provider.sign_out()
        except ProviderError as e:
            return self._failed(AuthMethod.SIGN_OUT, e, correlation_id)

        self._audit.log_signed_out(user_id, correlation_id)
        return AuthOutcome(method=AuthMethod.SIGN_OUT, session=self._session)

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("SessionManager.initialize() must be awaited first")

    async def _run(
        self,
        method: AuthMethod,
        call: ProviderCall,
        attempted_email: Optional[str] = None,
        current_domain: Optional[str] = None,
    ) -> AuthOutcome:
        correlation_id = create_correlation_id()

        if self._demo:
            self._audit.log_auth_unavailable(method.label, correlation_id)
            return AuthOutcome(
                method=method,
                session=self._session,
                prompt=DEMO_UNAVAILABLE_PROMPT,
                capability_unavailable=True,
            )

        self._ensure_initialized()
        try:
            await call(self._provider)
        except ProviderError as e:
            if method == AuthMethod.FEDERATED and e.code == UNSUPPORTED_ENVIRONMENT:
                self._audit.log_auth_unavailable(method.label, correlation_id)
                return AuthOutcome(
                    method=method,
                    session=self._session,
                    prompt=FEDERATED_UNAVAILABLE_PROMPT,
                    capability_unavailable=True,
                )
            return self._failed(
                method, e, correlation_id,
                attempted_email=attempted_email,
                current_domain=current_domain,
            )

        user_id = self._session.identity.id if self._session.identity else None
        self._audit.log_auth_success(method.label, user_id, correlation_id)
        return AuthOutcome(method=method, session=self._session)

    def _failed(
        self,
        method: AuthMethod,
        exc: ProviderError,
        correlation_id: UUID,
        attempted_email: Optional[str] = None,
        current_domain: Optional[str] = None,
    ) -> AuthOutcome:
        """Classify, decide, and report exactly one error."""
        error = to_auth_error(exc.code, exc.message)
        context = RecoveryContext(
            attempted_email=attempted_email,
            current_domain=current_domain or self._app.current_domain,
        )
        action = decide(error.kind, context)
        prompt = build_prompt(error, action, method, self._links)

        self._audit.log_auth_error(method.value, error, action, correlation_id)
        return AuthOutcome(
            method=method,
            session=self._session,
            error=error,
            action=action,
            prompt=prompt,
        )

"""
In-Memory Identity Provider

Keeps accounts in a dict. Used for tests and offline development.
It speaks the same error vocabulary as Firebase, and failures can be
scripted per operation to exercise every recovery path.
"""

from typing import Optional
from uuid import uuid4

from moneymigo.models.session import Identity
from moneymigo.services.provider.interface import (
    IdentityListener,
    ListenerRegistry,
    ProviderAdapter,
    ProviderError,
    ProviderUnavailableError,
    Unsubscribe,
)


MIN_PASSWORD_LENGTH = 6


class InMemoryProviderAdapter(ProviderAdapter):
    """
    Provider adapter backed by process memory.

    Args:
        authorized_domains: Domains allowed for federated sign-in
        anonymous_enabled: Whether guest sign-in is switched on
        reachable: False simulates an unreachable provider
    """

    def __init__(
        self,
        authorized_domains: Optional[list[str]] = None,
        anonymous_enabled: bool = True,
        reachable: bool = True,
    ):
        self._accounts: dict[str, tuple[str, Identity]] = {}
        self._current: Optional[Identity] = None
        self._listeners = ListenerRegistry()
        self._scripted: dict[str, ProviderError] = {}
        self.authorized_domains = authorized_domains or ["localhost"]
        self.anonymous_enabled = anonymous_enabled
        self.reachable = reachable
        self.federated_identity = Identity(
            id="federated-" + uuid4().hex[:12],
            email="federated@example.com",
            display_name="Federated User",
            email_verified=True,
        )
        self.calls: list[str] = []

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def fail_next(self, operation: str, code: str, message: str = "") -> None:
        """Make the next call of `operation` fail with `code`."""
        self._scripted[operation] = ProviderError(code, message)

    def add_account(self, email: str, password: str) -> Identity:
        identity = Identity(id=uuid4().hex, email=email)
        self._accounts[email.lower()] = (password, identity)
        return identity

    def push_identity(self, identity: Optional[Identity]) -> None:
        """Emit a state change as if it came from the provider."""
        self._current = identity
        self._listeners.notify(identity)

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._current

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # -------------------------------------------------------------------------
    # ProviderAdapter
    # -------------------------------------------------------------------------

    def _begin(self, operation: str) -> None:
        self.calls.append(operation)
        if not self.reachable:
            raise ProviderUnavailableError()
        scripted = self._scripted.pop(operation, None)
        if scripted is not None:
            raise scripted

    def _signed_in(self, identity: Identity) -> Identity:
        self.push_identity(identity)
        return identity

    async def check_configuration(self) -> None:
        self._begin("check_configuration")

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        self._begin("sign_in_with_password")
        account = self._accounts.get(email.strip().lower())
        if account is None or account[0] != password:
            raise ProviderError(
                "invalid-credential",
                "The supplied auth credential is incorrect, malformed or has expired.",
            )
        return self._signed_in(account[1])

    async def create_account_with_password(self, email: str, password: str) -> Identity:
        self._begin("create_account_with_password")
        if "@" not in email:
            raise ProviderError("invalid-email", "The email address is badly formatted.")
        if email.strip().lower() in self._accounts:
            raise ProviderError(
                "email-already-in-use",
                "The email address is already in use by another account.",
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ProviderError(
                "weak-password",
                "Password should be at least 6 characters",
            )
        return self._signed_in(self.add_account(email.strip(), password))

    async def sign_in_anonymously(self) -> Identity:
        self._begin("sign_in_anonymously")
        if not self.anonymous_enabled:
            raise ProviderError(
                "admin-restricted-operation",
                "This operation is restricted to administrators only.",
            )
        return self._signed_in(Identity(id=uuid4().hex, is_anonymous=True))

    async def sign_in_with_federated_popup(self, current_domain: str) -> Identity:
        self._begin("sign_in_with_federated_popup")
        if current_domain not in self.authorized_domains:
            raise ProviderError(
                "unauthorized-domain",
                f"{current_domain} is not authorized for OAuth operations.",
            )
        return self._signed_in(self.federated_identity)

    async def sign_out(self) -> None:
        self._begin("sign_out")
        self.push_identity(None)

    def subscribe_to_identity_changes(self, callback: IdentityListener) -> Unsubscribe:
        self.calls.append("subscribe_to_identity_changes")
        if not self.reachable:
            raise ProviderUnavailableError()
        unsubscribe = self._listeners.add(callback)
        callback(self._current)
        return unsubscribe

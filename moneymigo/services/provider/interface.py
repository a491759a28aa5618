"""
Abstract Identity Provider Interface

DESIGN DECISION: The identity provider is an opaque external service.
We define the small set of operations the session engine needs, so that:
1. Firebase can be swapped for another provider
2. An in-memory provider can be used for testing and offline development
3. Provider error vocabularies stay behind this boundary (as codes)

Provider state changes are push-based: the session manager registers a
callback and keeps the returned unsubscribe handle.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from moneymigo.models.session import Identity


IdentityListener = Callable[[Optional[Identity]], None]
Unsubscribe = Callable[[], None]

# Raised when the environment cannot open a federated sign-in popup
UNSUPPORTED_ENVIRONMENT = "operation-not-supported-in-this-environment"


class ProviderError(Exception):
    """
    A failed provider operation.

    `code` uses the Firebase client vocabulary without the `auth/`
    prefix (e.g. "email-already-in-use").
    """

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message or code
        super().__init__(f"{code}: {self.message}")


class ProviderUnavailableError(ProviderError):
    """The provider could not be reached at all."""

    def __init__(self, message: str = "Identity provider unreachable"):
        super().__init__("network-request-failed", message)


class ProviderAdapter(ABC):
    """
    Abstract interface over an external identity service.

    Sign-in operations return the new Identity and also notify
    subscribers; the session manager relies on the notification.
    """

    @property
    def supports_federated(self) -> bool:
        """Whether federated (popup) sign-in can be completed here."""
        return True

    @abstractmethod
    async def check_configuration(self) -> None:
        """
        Verify the provider is reachable and configured.

        Raises:
            ProviderError: If the provider cannot be used
        """
        pass

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        """
        Sign in an existing account.

        Raises:
            ProviderError: e.g. invalid-credential, too-many-requests
        """
        pass

    @abstractmethod
    async def create_account_with_password(self, email: str, password: str) -> Identity:
        """
        Create an account and sign it in.

        Raises:
            ProviderError: e.g. email-already-in-use, weak-password
        """
        pass

    @abstractmethod
    async def sign_in_anonymously(self) -> Identity:
        """
        Create an anonymous (guest) identity.

        Raises:
            ProviderError: e.g. admin-restricted-operation
        """
        pass

    @abstractmethod
    async def sign_in_with_federated_popup(self, current_domain: str) -> Identity:
        """
        Sign in through a federated provider popup.

        Args:
            current_domain: Hostname the request originates from

        Raises:
            ProviderError: e.g. unauthorized-domain, popup-closed-by-user
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign out the current identity."""
        pass

    @abstractmethod
    def subscribe_to_identity_changes(self, callback: IdentityListener) -> Unsubscribe:
        """
        Register for identity changes.

        The callback is called once with the current identity (or None),
        then once per change, in order.

        Returns:
            A function that removes the registration
        """
        pass


class ListenerRegistry:
    """
    Ordered set of identity listeners shared by the adapters.

    Notifications are delivered one at a time, in registration order.
    """

    def __init__(self):
        self._listeners: list[IdentityListener] = []

    def add(self, callback: IdentityListener) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def notify(self, identity: Optional[Identity]) -> None:
        for listener in list(self._listeners):
            listener(identity)

    def __len__(self) -> int:
        return len(self._listeners)

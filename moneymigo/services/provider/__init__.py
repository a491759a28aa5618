"""
Identity Provider Package

Provides the abstract provider interface and concrete implementations.
Firebase (Identity Toolkit REST) is the production backend; the
in-memory provider is for tests and offline development.
"""

from moneymigo.services.provider.interface import (
    IdentityListener,
    ListenerRegistry,
    ProviderAdapter,
    ProviderError,
    ProviderUnavailableError,
    UNSUPPORTED_ENVIRONMENT,
    Unsubscribe,
)
from moneymigo.services.provider.identity_toolkit import (
    FederatedCredential,
    FederatedPopup,
    IdentityToolkitAdapter,
    map_rest_error,
)
from moneymigo.services.provider.memory import InMemoryProviderAdapter

__all__ = [
    # Interface
    "IdentityListener",
    "ListenerRegistry",
    "ProviderAdapter",
    "Unsubscribe",
    # Exceptions
    "ProviderError",
    "ProviderUnavailableError",
    "UNSUPPORTED_ENVIRONMENT",
    # Implementations
    "FederatedCredential",
    "FederatedPopup",
    "IdentityToolkitAdapter",
    "InMemoryProviderAdapter",
    "map_rest_error",
]

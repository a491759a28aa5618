"""Services package."""

from moneymigo.services.provider import (
    FederatedCredential,
    IdentityToolkitAdapter,
    InMemoryProviderAdapter,
    ProviderAdapter,
    ProviderError,
    ProviderUnavailableError,
)

__all__ = [
    "FederatedCredential",
    "IdentityToolkitAdapter",
    "InMemoryProviderAdapter",
    "ProviderAdapter",
    "ProviderError",
    "ProviderUnavailableError",
]

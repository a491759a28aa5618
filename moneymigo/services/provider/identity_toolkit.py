"""
Firebase Authentication via the Identity Toolkit REST API

DESIGN DECISION: We talk to the REST API with httpx rather than an SDK:
1. The Firebase client SDK is browser-only
2. firebase-admin cannot sign users in with a password
3. The REST error strings are stable and easy to map

This adapter handles:
1. Email/password sign-in and sign-up, anonymous sign-in
2. Federated sign-in through an injected popup handler
3. Mapping REST error strings to Firebase client error codes
4. Notifying subscribers of identity changes

IMPORTANT: This adapter never classifies errors or decides what the
user should do. It only reports provider codes.
"""

from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from moneymigo.config import FirebaseSettings, get_settings
from moneymigo.models.session import Identity
from moneymigo.services.provider.interface import (
    IdentityListener,
    ListenerRegistry,
    ProviderAdapter,
    ProviderError,
    ProviderUnavailableError,
    UNSUPPORTED_ENVIRONMENT,
    Unsubscribe,
)


logger = structlog.get_logger("moneymigo.provider")


# REST error message -> Firebase client error code
REST_ERROR_CODES = {
    "EMAIL_EXISTS": "email-already-in-use",
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
    "INVALID_IDP_RESPONSE": "invalid-credential",
    "WEAK_PASSWORD": "weak-password",
    "INVALID_EMAIL": "invalid-email",
    "MISSING_PASSWORD": "missing-password",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
    "CONFIGURATION_NOT_FOUND": "configuration-not-found",
    "ADMIN_ONLY_OPERATION": "admin-restricted-operation",
    "OPERATION_NOT_ALLOWED": "operation-not-allowed",
    "UNAUTHORIZED_DOMAIN": "unauthorized-domain",
    "USER_DISABLED": "user-disabled",
    "API_KEY_INVALID": "invalid-api-key",
    "PROJECT_NOT_FOUND": "configuration-not-found",
}


def map_rest_error(message: str) -> tuple[str, str]:
    """
    Split a REST error message into (client code, detail).

    "WEAK_PASSWORD : Password should be at least 6 characters"
    -> ("weak-password", "Password should be at least 6 characters")
    """
    head, _, detail = (message or "").partition(" : ")
    head = head.strip()
    if not head:
        return "internal-error", detail.strip()
    if head.startswith("API key not valid"):
        return "invalid-api-key", head
    code = REST_ERROR_CODES.get(head, head.lower().replace("_", "-"))
    return code, detail.strip() or head


class FederatedCredential(BaseModel):
    """Token returned by a federated provider popup."""
    id_token: Optional[str] = None
    access_token: Optional[str] = None

    def to_post_body(self, provider_id: str) -> str:
        body = {"providerId": provider_id}
        if self.id_token:
            body["id_token"] = self.id_token
        if self.access_token:
            body["access_token"] = self.access_token
        return urlencode(body)


# (provider_id, request_uri) -> credential.
# Raises ProviderError("popup-blocked" | "popup-closed-by-user" | "cancelled-popup-request").
FederatedPopup = Callable[[str, str], Awaitable[FederatedCredential]]


class IdentityToolkitAdapter(ProviderAdapter):
    """
    Provider adapter for Firebase Authentication.

    Args:
        settings: Firebase settings (defaults to environment)
        popup: Opens the federated sign-in popup; None disables federated sign-in
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        settings: Optional[FirebaseSettings] = None,
        popup: Optional[FederatedPopup] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or get_settings().firebase
        self._popup = popup
        self._transport = transport
        self._listeners = ListenerRegistry()
        self._current: Optional[Identity] = None
        self._authorized_domains: Optional[list[str]] = None

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._current

    @property
    def supports_federated(self) -> bool:
        return self._popup is not None

    @property
    def authorized_domains(self) -> Optional[list[str]]:
        return self._authorized_domains

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            params={"key": self._settings.api_key or ""},
            timeout=self._settings.request_timeout_seconds,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=payload)
        except httpx.TransportError as e:
            raise ProviderUnavailableError(f"Identity provider unreachable: {e}")

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(
                "internal-error",
                f"Unexpected response from identity provider (HTTP {response.status_code})",
            )

        if not isinstance(data, dict):
            raise ProviderError(
                "internal-error",
                f"Unexpected response from identity provider (HTTP {response.status_code})",
            )

        if response.is_error or "error" in data:
            message = (data.get("error") or {}).get("message", "")
            code, detail = map_rest_error(message)
            logger.debug(
                "provider_request_failed",
                path=path,
                status=response.status_code,
                code=code,
            )
            raise ProviderError(code, detail)

        return data

    # -------------------------------------------------------------------------
    # Identity bookkeeping
    # -------------------------------------------------------------------------

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        self._listeners.notify(identity)

    @staticmethod
    def _identity_from(data: dict[str, Any], is_anonymous: bool = False) -> Identity:
        if not data.get("localId"):
            raise ProviderError(
                "internal-error",
                "Identity provider response has no user id",
            )
        return Identity(
            id=data["localId"],
            email=data.get("email") or None,
            display_name=data.get("displayName") or None,
            email_verified=bool(data.get("emailVerified", False)),
            is_anonymous=is_anonymous,
        )

    async def _with_account_info(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Fill in emailVerified for a password sign-in.

        signInWithPassword does not report it; accounts:lookup does.
        """
        if "emailVerified" in data or not data.get("idToken"):
            return data
        info = await self._request("POST", "/accounts:lookup", {"idToken": data["idToken"]})
        users = info.get("users") or [{}]
        return {**data, "emailVerified": bool(users[0].get("emailVerified", False))}

    # -------------------------------------------------------------------------
    # ProviderAdapter
    # -------------------------------------------------------------------------

    @retry(
        retry=retry_if_exception_type(ProviderUnavailableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def check_configuration(self) -> None:
        """
        Fetch the project config (and its authorized domains).

        Transport failures are retried; provider errors are not.
        """
        if not self._settings.is_configured:
            raise ProviderError(
                "configuration-not-found",
                "Firebase API key or project ID missing",
            )
        data = await self._request("GET", "/projects")
        self._authorized_domains = [d.lower() for d in data.get("authorizedDomains", [])]

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        data = await self._request("POST", "/accounts:signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        data = await self._with_account_info(data)
        identity = self._identity_from(data)
        self._set_current(identity)
        return identity

    async def create_account_with_password(self, email: str, password: str) -> Identity:
        data = await self._request("POST", "/accounts:signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        identity = self._identity_from(data)
        self._set_current(identity)
        return identity

    async def sign_in_anonymously(self) -> Identity:
        data = await self._request("POST", "/accounts:signUp", {
            "returnSecureToken": True,
        })
        identity = self._identity_from(data, is_anonymous=True)
        self._set_current(identity)
        return identity

    async def sign_in_with_federated_popup(self, current_domain: str) -> Identity:
        if self._authorized_domains is None:
            await self.check_configuration()
        if current_domain.lower() not in (self._authorized_domains or []):
            raise ProviderError(
                "unauthorized-domain",
                f"{current_domain} is not authorized for OAuth operations",
            )

        if self._popup is None:
            raise ProviderError(
                UNSUPPORTED_ENVIRONMENT,
                "No federated sign-in popup is available",
            )

        provider_id = self._settings.federated_provider_id
        request_uri = f"https://{current_domain}"
        credential = await self._popup(provider_id, request_uri)

        data = await self._request("POST", "/accounts:signInWithIdp", {
            "postBody": credential.to_post_body(provider_id),
            "requestUri": request_uri,
            "returnIdpCredential": True,
            "returnSecureToken": True,
        })
        identity = self._identity_from(data)
        self._set_current(identity)
        return identity

    async def sign_out(self) -> None:
        # Tokens are client-side only; signing out is local.
        self._set_current(None)

    def subscribe_to_identity_changes(self, callback: IdentityListener) -> Unsubscribe:
        unsubscribe = self._listeners.add(callback)
        callback(self._current)
        return unsubscribe

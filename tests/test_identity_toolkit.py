"""
Identity Toolkit Adapter Tests

Uses httpx.MockTransport; no real Firebase calls.
"""

import json

import httpx
import pytest

from moneymigo.auth import FEDERATED_UNAVAILABLE_PROMPT
from moneymigo.models import AuthErrorKind, RecoveryAction
from moneymigo.services.provider import (
    FederatedCredential,
    IdentityToolkitAdapter,
    ProviderError,
    ProviderUnavailableError,
    map_rest_error,
)


class FakeIdentityToolkit:
    """Records requests and answers from a route table."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        status, body = self.routes[endpoint]
        return httpx.Response(status, json=body)

    def body(self, index=-1) -> dict:
        return json.loads(self.requests[index].content)


def error_body(message):
    return {"error": {"code": 400, "message": message, "errors": []}}


def make_adapter(firebase_settings, routes, popup=None):
    fake = FakeIdentityToolkit(routes)
    adapter = IdentityToolkitAdapter(
        settings=firebase_settings,
        popup=popup,
        transport=httpx.MockTransport(fake),
    )
    return adapter, fake


class TestMapRestError:

    @pytest.mark.parametrize("message,code", [
        ("EMAIL_EXISTS", "email-already-in-use"),
        ("EMAIL_NOT_FOUND", "user-not-found"),
        ("INVALID_PASSWORD", "wrong-password"),
        ("INVALID_LOGIN_CREDENTIALS", "invalid-credential"),
        ("TOO_MANY_ATTEMPTS_TRY_LATER", "too-many-requests"),
        ("CONFIGURATION_NOT_FOUND", "configuration-not-found"),
        ("ADMIN_ONLY_OPERATION", "admin-restricted-operation"),
        ("OPERATION_NOT_ALLOWED", "operation-not-allowed"),
        ("SOMETHING_NEW", "something-new"),
    ])
    def test_codes(self, message, code):
        assert map_rest_error(message)[0] == code

    def test_detail_is_split_off(self):
        code, detail = map_rest_error("WEAK_PASSWORD : Password should be at least 6 characters")
        assert code == "weak-password"
        assert detail == "Password should be at least 6 characters"

    def test_empty_message(self):
        assert map_rest_error("")[0] == "internal-error"

    def test_invalid_api_key(self):
        code, _ = map_rest_error("API key not valid. Please pass a valid API key.")
        assert code == "invalid-api-key"


class TestIdentityToolkitAdapter:

    @pytest.mark.asyncio
    async def test_sign_in_with_password(self, firebase_settings):
        adapter, fake = make_adapter(firebase_settings, {
            "accounts:signInWithPassword": (200, {
                "localId": "uid-1",
                "email": "ana@example.com",
                "displayName": "",
                "idToken": "token",
                "registered": True,
            }),
            "accounts:lookup": (200, {
                "users": [{"localId": "uid-1", "emailVerified": True}],
            }),
        })
        seen = []
        adapter.subscribe_to_identity_changes(seen.append)

        identity = await adapter.sign_in_with_password("ana@example.com", "secret1")

        assert identity.id == "uid-1"
        assert identity.email == "ana@example.com"
        assert identity.display_name is None
        assert identity.email_verified is True
        assert seen == [None, identity]
        request = fake.requests[0]
        assert request.url.params["key"] == "test-api-key"
        assert fake.body(0) == {
            "email": "ana@example.com",
            "password": "secret1",
            "returnSecureToken": True,
        }
        assert fake.body() == {"idToken": "token"}

    @pytest.mark.asyncio
    async def test_sign_up_email_exists(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, {
            "accounts:signUp": (400, error_body("EMAIL_EXISTS")),
        })

        with pytest.raises(ProviderError) as exc_info:
            await adapter.create_account_with_password("ana@example.com", "secret1")

        assert exc_info.value.code == "email-already-in-use"
        assert adapter.current_identity is None

    @pytest.mark.asyncio
    async def test_weak_password_detail(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, {
            "accounts:signUp": (400, error_body(
                "WEAK_PASSWORD : Password should be at least 6 characters"
            )),
        })

        with pytest.raises(ProviderError) as exc_info:
            await adapter.create_account_with_password("ana@example.com", "123")

        assert exc_info.value.code == "weak-password"
        assert exc_info.value.message == "Password should be at least 6 characters"

    @pytest.mark.asyncio
    async def test_anonymous_sign_in(self, firebase_settings):
        adapter, fake = make_adapter(firebase_settings, {
            "accounts:signUp": (200, {"localId": "guest-1", "idToken": "token"}),
        })

        identity = await adapter.sign_in_anonymously()

        assert identity.is_anonymous is True
        assert identity.email is None
        assert fake.body() == {"returnSecureToken": True}

    @pytest.mark.asyncio
    async def test_anonymous_disabled(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, {
            "accounts:signUp": (400, error_body("ADMIN_ONLY_OPERATION")),
        })
        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_anonymously()
        assert exc_info.value.code == "admin-restricted-operation"

    @pytest.mark.asyncio
    async def test_check_configuration_loads_domains(self, firebase_settings):
        adapter, fake = make_adapter(firebase_settings, {
            "projects": (200, {
                "projectId": "moneymigo-test",
                "authorizedDomains": ["localhost", "MoneyMigo.app"],
            }),
        })

        await adapter.check_configuration()

        assert adapter.authorized_domains == ["localhost", "moneymigo.app"]
        assert fake.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_check_configuration_requires_settings(self, unconfigured_settings):
        adapter, fake = make_adapter(unconfigured_settings, {})
        with pytest.raises(ProviderError) as exc_info:
            await adapter.check_configuration()
        assert exc_info.value.code == "configuration-not-found"
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_transport_failure_is_unavailable(self, firebase_settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        adapter = IdentityToolkitAdapter(
            settings=firebase_settings,
            transport=httpx.MockTransport(refuse),
        )

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await adapter.sign_in_with_password("ana@example.com", "secret1")
        assert exc_info.value.code == "network-request-failed"

    @pytest.mark.asyncio
    async def test_non_json_response(self, firebase_settings):
        adapter = IdentityToolkitAdapter(
            settings=firebase_settings,
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway")),
        )
        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_anonymously()
        assert exc_info.value.code == "internal-error"

    @pytest.mark.asyncio
    async def test_json_that_is_not_an_object(self, firebase_settings):
        adapter = IdentityToolkitAdapter(
            settings=firebase_settings,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=["unexpected"])),
        )
        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_anonymously()
        assert exc_info.value.code == "internal-error"

    @pytest.mark.asyncio
    async def test_success_without_user_id(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, {
            "accounts:signUp": (200, {"idToken": "token"}),
        })
        seen = []
        adapter.subscribe_to_identity_changes(seen.append)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.create_account_with_password("ana@example.com", "secret1")

        assert exc_info.value.code == "internal-error"
        assert seen == [None]

    @pytest.mark.asyncio
    async def test_sign_out_notifies(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, {
            "accounts:signUp": (200, {"localId": "guest-1"}),
        })
        await adapter.sign_in_anonymously()
        seen = []
        unsubscribe = adapter.subscribe_to_identity_changes(seen.append)

        await adapter.sign_out()
        unsubscribe()
        await adapter.sign_out()

        assert [i.id if i else None for i in seen] == ["guest-1", None]


class TestFederatedSignIn:

    routes = {
        "projects": (200, {"authorizedDomains": ["localhost", "moneymigo.app"]}),
        "accounts:signInWithIdp": (200, {
            "localId": "uid-g",
            "email": "ana@gmail.com",
            "displayName": "Ana",
            "emailVerified": True,
        }),
    }

    @pytest.mark.asyncio
    async def test_authorized_domain(self, firebase_settings):
        opened = []

        async def popup(provider_id, request_uri):
            opened.append((provider_id, request_uri))
            return FederatedCredential(id_token="google-id-token")

        adapter, fake = make_adapter(firebase_settings, self.routes, popup=popup)

        identity = await adapter.sign_in_with_federated_popup("moneymigo.app")

        assert identity.email_verified is True
        assert identity.display_name == "Ana"
        assert opened == [("google.com", "https://moneymigo.app")]
        body = fake.body()
        assert "id_token=google-id-token" in body["postBody"]
        assert "providerId=google.com" in body["postBody"]
        assert body["requestUri"] == "https://moneymigo.app"

    @pytest.mark.asyncio
    async def test_unauthorized_domain_never_opens_popup(self, firebase_settings):
        opened = []

        async def popup(provider_id, request_uri):
            opened.append(provider_id)
            return FederatedCredential(id_token="token")

        adapter, _ = make_adapter(firebase_settings, self.routes, popup=popup)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_with_federated_popup("preview.app.dev")

        assert exc_info.value.code == "unauthorized-domain"
        assert opened == []

    @pytest.mark.asyncio
    async def test_popup_closed(self, firebase_settings):
        async def popup(provider_id, request_uri):
            raise ProviderError("popup-closed-by-user", "The popup has been closed by the user")

        adapter, fake = make_adapter(firebase_settings, self.routes, popup=popup)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_with_federated_popup("localhost")

        assert exc_info.value.code == "popup-closed-by-user"
        assert all(
            not r.url.path.endswith("signInWithIdp") for r in fake.requests
        )

    @pytest.mark.asyncio
    async def test_no_popup_available(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, self.routes)
        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_with_federated_popup("localhost")
        assert exc_info.value.code == "operation-not-supported-in-this-environment"

    @pytest.mark.asyncio
    async def test_domain_is_checked_before_popup_availability(self, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, self.routes)

        assert adapter.supports_federated is False
        with pytest.raises(ProviderError) as exc_info:
            await adapter.sign_in_with_federated_popup("preview.app.dev")
        assert exc_info.value.code == "unauthorized-domain"


class TestSessionManagerOverRest:
    """SessionManager wired to the REST adapter."""

    routes = {
        "projects": (200, {"authorizedDomains": ["localhost"]}),
    }

    @pytest.mark.asyncio
    async def test_unauthorized_domain_without_popup(self, make_manager, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, self.routes)
        manager = make_manager(adapter)
        await manager.initialize()

        outcome = await manager.sign_in_federated("preview.app.dev")

        assert outcome.error.kind == AuthErrorKind.DOMAIN_UNAUTHORIZED
        assert outcome.action == RecoveryAction.show_domain_fix("preview.app.dev")
        assert "preview.app.dev" in outcome.prompt.description

    @pytest.mark.asyncio
    async def test_authorized_domain_without_popup(self, make_manager, firebase_settings):
        adapter, _ = make_adapter(firebase_settings, self.routes)
        manager = make_manager(adapter)
        await manager.initialize()

        outcome = await manager.sign_in_federated("localhost")

        assert outcome.capability_unavailable is True
        assert outcome.error is None
        assert outcome.prompt == FEDERATED_UNAVAILABLE_PROMPT
        assert manager.available_methods()["federated"] is False

    @pytest.mark.asyncio
    async def test_malformed_success_becomes_classified_error(
        self, make_manager, firebase_settings
    ):
        adapter, _ = make_adapter(firebase_settings, {
            **self.routes,
            "accounts:signUp": (200, {"kind": "identitytoolkit#SignupNewUserResponse"}),
        })
        manager = make_manager(adapter)
        await manager.initialize()

        outcome = await manager.sign_in_anonymously()

        assert outcome.succeeded is False
        assert outcome.error.kind == AuthErrorKind.UNKNOWN
        assert outcome.session.identity is None

"""Tests for the recovery policy and the prompts built from it."""

import pytest

from moneymigo.auth import ConsoleLinks, build_prompt, decide, to_auth_error
from moneymigo.models import (
    AuthError,
    AuthErrorKind,
    AuthMethod,
    RecoveryAction,
    RecoveryActionType,
    RecoveryContext,
)


CONTEXTS = [
    RecoveryContext(current_domain="localhost"),
    RecoveryContext(current_domain="app.example.com", attempted_email="ana@example.com"),
    RecoveryContext(current_domain="preview.app.dev", attempted_email=""),
]


class TestDecide:
    """The recovery policy table."""

    @pytest.mark.parametrize("context", CONTEXTS)
    def test_email_in_use_switches_to_sign_in(self, context):
        assert decide(AuthErrorKind.EMAIL_IN_USE, context) == RecoveryAction.auto_switch_to_sign_in()

    @pytest.mark.parametrize("context", CONTEXTS)
    def test_cancellations_are_ignored(self, context):
        assert decide(AuthErrorKind.POPUP_CANCELLED, context) == RecoveryAction.ignore()
        assert decide(AuthErrorKind.OPERATION_CANCELLED, context) == RecoveryAction.ignore()

    def test_invalid_credential_prompts_create_account(self):
        action = decide(AuthErrorKind.INVALID_CREDENTIAL, CONTEXTS[0])
        assert action == RecoveryAction.prompt_create_account()

    def test_anonymous_disabled(self):
        action = decide(AuthErrorKind.ANONYMOUS_DISABLED, CONTEXTS[0])
        assert action == RecoveryAction.show_provider_fix("anonymous")

    def test_configuration_missing(self):
        action = decide(AuthErrorKind.CONFIGURATION_MISSING, CONTEXTS[0])
        assert action == RecoveryAction.show_provider_fix("configuration")

    def test_domain_fix_carries_current_domain(self):
        context = RecoveryContext(current_domain="app.example.com")
        action = decide(AuthErrorKind.DOMAIN_UNAUTHORIZED, context)
        assert action == RecoveryAction.show_domain_fix("app.example.com")

    @pytest.mark.parametrize("kind", [
        AuthErrorKind.POPUP_BLOCKED,
        AuthErrorKind.WEAK_PASSWORD,
        AuthErrorKind.INVALID_EMAIL,
        AuthErrorKind.TOO_MANY_REQUESTS,
        AuthErrorKind.UNKNOWN,
    ])
    def test_generic_errors(self, kind):
        assert decide(kind, CONTEXTS[0]) == RecoveryAction.show_generic_error()

    def test_retry_is_never_produced(self):
        for kind in AuthErrorKind:
            for context in CONTEXTS:
                assert decide(kind, context).type != RecoveryActionType.RETRY

    def test_classified_unauthorized_domain(self):
        error = to_auth_error("auth/unauthorized-domain")
        action = decide(error.kind, RecoveryContext(current_domain="preview.app.dev"))
        assert action == RecoveryAction.show_domain_fix("preview.app.dev")


class TestBuildPrompt:
    """User-facing copy for each action."""

    links = ConsoleLinks("moneymigo-test")

    def _prompt(self, code, method=AuthMethod.EMAIL_PASSWORD, domain="localhost"):
        error = to_auth_error(code, "RAW PROVIDER MESSAGE")
        action = decide(error.kind, RecoveryContext(current_domain=domain))
        return build_prompt(error, action, method, self.links)

    def test_cancellation_has_no_prompt(self):
        assert self._prompt("auth/popup-closed-by-user", AuthMethod.FEDERATED) is None
        assert self._prompt("auth/cancelled-popup-request", AuthMethod.FEDERATED) is None

    def test_email_in_use_is_informational(self):
        prompt = self._prompt("auth/email-already-in-use", AuthMethod.EMAIL_SIGN_UP)
        assert prompt.severity == "info"
        assert prompt.action_label == "Sign In"

    def test_invalid_credential_offers_account_creation(self):
        prompt = self._prompt("auth/user-not-found")
        assert prompt.action_label == "Create Account"

    def test_domain_fix_names_domain_and_links_settings(self):
        prompt = self._prompt("auth/unauthorized-domain", AuthMethod.FEDERATED, "preview.app.dev")
        assert "preview.app.dev" in prompt.description
        assert prompt.link == (
            "https://console.firebase.google.com/project/moneymigo-test/authentication/settings"
        )

    def test_guest_fix_links_providers(self):
        prompt = self._prompt("auth/admin-restricted-operation", AuthMethod.ANONYMOUS)
        assert prompt.title == "Guest mode not enabled"
        assert prompt.link.endswith("/authentication/providers")

    def test_configuration_fix(self):
        prompt = self._prompt("auth/configuration-not-found")
        assert prompt.title == "Firebase Authentication is not enabled"
        assert prompt.link.endswith("/moneymigo-test/authentication")

    def test_popup_blocked_mentions_popups(self):
        prompt = self._prompt("auth/popup-blocked", AuthMethod.FEDERATED)
        assert "popups" in prompt.description

    @pytest.mark.parametrize("method,title", [
        (AuthMethod.EMAIL_PASSWORD, "Failed to sign in"),
        (AuthMethod.EMAIL_SIGN_UP, "Failed to create account"),
        (AuthMethod.ANONYMOUS, "Failed to sign in as guest"),
        (AuthMethod.FEDERATED, "Failed to sign in with Google"),
        (AuthMethod.SIGN_OUT, "Failed to sign out"),
    ])
    def test_unknown_falls_back_to_method_title(self, method, title):
        assert self._prompt("auth/internal-error", method).title == title

    @pytest.mark.parametrize("code", [
        "auth/internal-error",
        "auth/weak-password",
        "auth/invalid-credential",
        "auth/unauthorized-domain",
    ])
    def test_prompt_never_contains_raw_message(self, code):
        prompt = self._prompt(code)
        assert "RAW PROVIDER MESSAGE" not in prompt.title
        assert "RAW PROVIDER MESSAGE" not in (prompt.description or "")

    def test_links_without_project(self):
        links = ConsoleLinks(None)
        assert links.settings == "https://console.firebase.google.com/"

    def test_generic_error_for_explicit_error(self):
        error = AuthError(kind=AuthErrorKind.TOO_MANY_REQUESTS, raw_code="auth/too-many-requests")
        prompt = build_prompt(error, RecoveryAction.show_generic_error(), AuthMethod.EMAIL_PASSWORD)
        assert prompt.title == "Too many failed attempts"

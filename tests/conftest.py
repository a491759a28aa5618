"""Shared fixtures: settings, in-memory provider, session manager factory."""

import pytest

from moneymigo.audit import AuthAuditLogger
from moneymigo.auth import SessionManager
from moneymigo.config import AppSettings, FirebaseSettings
from moneymigo.services.provider import InMemoryProviderAdapter


@pytest.fixture
def firebase_settings():
    return FirebaseSettings(
        api_key="test-api-key",
        project_id="moneymigo-test",
        auth_enabled=True,
        probe_on_startup=True,
    )


@pytest.fixture
def unconfigured_settings():
    return FirebaseSettings(api_key=None, project_id=None)


@pytest.fixture
def app_settings():
    return AppSettings(current_domain="localhost")


@pytest.fixture
def provider():
    return InMemoryProviderAdapter(authorized_domains=["localhost"])


@pytest.fixture
def audit_logger():
    return AuthAuditLogger()


@pytest.fixture
def make_manager(firebase_settings, app_settings, audit_logger):
    """Build a SessionManager; call `await manager.initialize()` in the test."""

    def _make(provider=None, firebase=None):
        return SessionManager(
            provider=provider,
            firebase_settings=firebase or firebase_settings,
            app_settings=app_settings,
            audit_logger=audit_logger,
        )

    return _make

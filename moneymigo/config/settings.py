"""
Configuration Management for MoneyMigo

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Missing Firebase configuration is NOT an error - the app falls back
to demo mode. So Firebase fields are optional and `is_configured`
tells the session layer which mode to start in.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseSettings):
    """Firebase Authentication (identity provider) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Web API key of the Firebase project"
    )
    auth_domain: Optional[str] = Field(
        default=None,
        description="Firebase auth domain (e.g., my-app.firebaseapp.com)"
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Firebase project ID"
    )
    app_id: Optional[str] = Field(
        default=None,
        description="Firebase web app ID"
    )

    # Feature switches
    auth_enabled: bool = Field(
        default=True,
        description="Set to false to force demo mode even when configured"
    )
    probe_on_startup: bool = Field(
        default=True,
        description="Check the provider is reachable before subscribing"
    )

    # Transport
    api_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit REST endpoint"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single provider request"
    )
    federated_provider_id: str = Field(
        default="google.com",
        description="Provider used for federated (popup) sign-in"
    )

    @field_validator('api_key', 'project_id', 'auth_domain', 'app_id')
    @classmethod
    def blank_as_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty/placeholder env values as not configured."""
        if v is None:
            return None
        v = v.strip()
        if not v or v.lower() in ("your-api-key", "changeme", "todo"):
            return None
        return v

    @property
    def is_configured(self) -> bool:
        """Provider can be used only with an API key and a project."""
        return bool(self.api_key and self.project_id)

    @property
    def is_enabled(self) -> bool:
        return self.auth_enabled and self.is_configured


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Where the app is served from (used for domain authorization fixes)
    current_domain: str = Field(
        default="localhost",
        min_length=1,
        description="Hostname the app is served from"
    )

    # Demo identity (used when no provider is available)
    demo_user_id: str = Field(
        default="demo-user-id",
        min_length=1,
    )
    demo_email: str = Field(
        default="demo@moneymigo.app",
    )
    demo_display_name: str = Field(
        default="Demo User",
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with `<name>_error`
    entries describing what is wrong. Useful for the settings page.
    """
    results = {}

    settings = get_settings()

    try:
        firebase = settings.firebase
        results["firebase"] = firebase.is_configured
        if not firebase.is_configured:
            results["firebase_error"] = (
                "FIREBASE_API_KEY and FIREBASE_PROJECT_ID are required "
                "(running in demo mode)"
            )
        elif not firebase.auth_enabled:
            results["firebase"] = False
            results["firebase_error"] = "Authentication disabled (FIREBASE_AUTH_ENABLED=false)"
    except Exception as e:
        results["firebase"] = False
        results["firebase_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results

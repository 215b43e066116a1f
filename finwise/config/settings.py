"""
Configuration Management for FinWise

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external collaborators exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class OpenAISettings(BaseSettings):
    """OpenAI chat completions configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="OpenAI API key"
    )
    model_name: str = Field(
        default="gpt-3.5-turbo",
        description="Chat model to use"
    )
    max_tokens: int = Field(
        default=2000,
        ge=100,
        le=8192,
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
    )
    presence_penalty: float = Field(default=0.1)
    frequency_penalty: float = Field(default=0.1)


class FirebaseSettings(BaseSettings):
    """Firebase Authentication (REST API) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Firebase Web API key"
    )
    auth_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit base URL"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for identity requests"
    )


class OpenBankSettings(BaseSettings):
    """Open Bank Project sandbox configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OPENBANK_",
        extra="ignore"
    )

    base_url: str = Field(
        default="https://apisandbox.openbankproject.com",
        description="Open Bank Project API host"
    )
    api_version: str = Field(
        default="v4.0.0",
    )
    consumer_key: str = Field(
        ...,
        description="Consumer key used for DirectLogin"
    )
    username: str = Field(
        ...,
        description="Sandbox user name"
    )
    password: str = Field(
        ...,
        description="Sandbox user password"
    )
    view_id: str = Field(
        default="owner",
        description="Account view used to read balance and transactions"
    )
    transaction_limit: int = Field(
        default=20,
        ge=1,
        le=200,
        description="How many recent transactions to fetch"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets profile/audit storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    profiles_sheet_name: str = Field(
        default="Profiles",
        description="Name of the sheet for user profiles"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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

    # Collaborator selection
    text_generation_provider: str = Field(
        default="gemini",
        pattern="^(gemini|openai)$",
        description="Which text generation backend the advisor and learn page use"
    )
    use_demo_banking: bool = Field(
        default=True,
        description="Use fixed demo balance/transactions instead of the sandbox"
    )

    # Session
    local_store_path: str = Field(
        default=".finwise/local_store.json",
        description="Where the durable local key-value store lives"
    )
    profile_fetch_timeout_seconds: float = Field(
        default=3.0,
        gt=0,
        le=10.0,
        description="Bound on the remote profile lookup during sign-in"
    )
    default_currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="Currency assigned to new and fallback profiles"
    )

    # Advisory thresholds
    low_balance_threshold: Decimal = Field(
        default=Decimal("1000"),
        description="Balances below this trigger a low-balance warning"
    )
    high_average_transaction_threshold: Decimal = Field(
        default=Decimal("100"),
        description="Mean transaction above this triggers a spending note"
    )

    # Rate limit handling for generated content
    rate_limit_retries: int = Field(
        default=3,
        ge=0,
        le=10,
    )
    rate_limit_backoff_seconds: float = Field(
        default=2.0,
        ge=0.0,
    )

    @property
    def local_store_file(self) -> Path:
        """Get the local store location as a Path."""
        return Path(self.local_store_path).expanduser()


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def openai(self) -> OpenAISettings:
        return OpenAISettings()

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def openbank(self) -> OpenBankSettings:
        return OpenBankSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every block that failed.
    Useful for startup checks and the settings page.
    """
    results = {}
    settings = get_settings()

    for name in ("gemini", "openai", "firebase", "openbank", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

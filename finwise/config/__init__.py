"""Configuration package."""

from finwise.config.settings import (
    AppSettings,
    FirebaseSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    OpenAISettings,
    OpenBankSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "FirebaseSettings",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "OpenAISettings",
    "OpenBankSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]

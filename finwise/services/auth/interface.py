"""
Identity Provider Interface

The gateway only needs four operations from an identity provider.
Provider-specific error codes are carried on AuthError together with the
message shown to the user.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finwise.models.profile import AuthUser


# Provider codes with a dedicated user-facing message
EMAIL_EXISTS = "EMAIL_EXISTS"
WEAK_PASSWORD = "WEAK_PASSWORD"
INVALID_EMAIL = "INVALID_EMAIL"
NETWORK_ERROR = "NETWORK_REQUEST_FAILED"

# Codes raised by the gateway itself
VALIDATION_FAILED = "validation_failed"
PROFILE_WRITE_FAILED = "profile_write_failed"

SIGN_IN = "sign_in"
SIGN_UP = "sign_up"

_MESSAGES = {
    EMAIL_EXISTS: "This email is already registered",
    WEAK_PASSWORD: "Password must be at least 6 characters",
    INVALID_EMAIL: "Please enter a valid email address",
    NETWORK_ERROR: "Network error. Please check your connection.",
}

_DEFAULT_MESSAGES = {
    SIGN_IN: "Login failed. Please check your credentials.",
    SIGN_UP: "Signup failed. Please try again.",
}


def map_auth_error(code: str, operation: str) -> str:
    """User-facing message for a provider error code."""
    if code in _MESSAGES:
        return _MESSAGES[code]
    return _DEFAULT_MESSAGES.get(operation, _DEFAULT_MESSAGES[SIGN_IN])


class AuthError(Exception):
    """Authentication failure with the provider code and a displayable message."""

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or map_auth_error(code, SIGN_IN)
        super().__init__(self.message)


class IdentityProvider(ABC):
    """Email/password identity provider."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthUser:
        """
        Create a new identity.

        Raises:
            AuthError: With the provider's code (EMAIL_EXISTS, ...)
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """
        Raises:
            AuthError: With the provider's code
        """
        pass

    @abstractmethod
    async def sign_out(self, user: AuthUser) -> None:
        """Invalidate the provider session for this user."""
        pass

    @abstractmethod
    async def update_display_name(self, user: AuthUser, display_name: str) -> AuthUser:
        """
        Raises:
            AuthError: If the provider rejects the update
        """
        pass

"""Identity provider services package."""

from finwise.services.auth.interface import (
    EMAIL_EXISTS,
    INVALID_EMAIL,
    NETWORK_ERROR,
    PROFILE_WRITE_FAILED,
    SIGN_IN,
    SIGN_UP,
    VALIDATION_FAILED,
    WEAK_PASSWORD,
    AuthError,
    IdentityProvider,
    map_auth_error,
)
from finwise.services.auth.firebase_service import FirebaseIdentityProvider

__all__ = [
    "EMAIL_EXISTS",
    "INVALID_EMAIL",
    "NETWORK_ERROR",
    "PROFILE_WRITE_FAILED",
    "SIGN_IN",
    "SIGN_UP",
    "VALIDATION_FAILED",
    "WEAK_PASSWORD",
    "AuthError",
    "FirebaseIdentityProvider",
    "IdentityProvider",
    "map_auth_error",
]

"""
Firebase Authentication (Identity Toolkit REST API)

Endpoints used:
- accounts:signUp              create an email/password identity
- accounts:signInWithPassword  authenticate
- accounts:update              set the display name

Errors come back as {"error": {"message": "EMAIL_EXISTS", ...}}; the
message may carry a trailing explanation ("WEAK_PASSWORD : Password should
be at least 6 characters"), so only the leading token is used as the code.
"""

import asyncio
from typing import Optional

import requests
import structlog

from finwise.config import FirebaseSettings, get_settings
from finwise.models.profile import AuthUser
from finwise.services.auth.interface import (
    NETWORK_ERROR,
    SIGN_IN,
    SIGN_UP,
    AuthError,
    IdentityProvider,
    map_auth_error,
)


logger = structlog.get_logger(__name__)


def _error_code(response: requests.Response) -> str:
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP_{response.status_code}"
    return message.split(" ")[0].split(":")[0].strip()


class FirebaseIdentityProvider(IdentityProvider):
    """IdentityProvider backed by Firebase Auth over REST."""

    def __init__(
        self,
        settings: Optional[FirebaseSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().firebase
        self._session = session or requests.Session()

    def _post(self, endpoint: str, payload: dict, operation: str) -> dict:
        url = f"{self._settings.auth_url.rstrip('/')}/accounts:{endpoint}"
        try:
            response = self._session.post(
                url,
                params={"key": self._settings.api_key},
                json=payload,
                timeout=self._settings.request_timeout_seconds,
            )
        except requests.RequestException as e:
            logger.warning("firebase_network_error", endpoint=endpoint, error=str(e))
            raise AuthError(NETWORK_ERROR, map_auth_error(NETWORK_ERROR, operation)) from e

        if not response.ok:
            code = _error_code(response)
            logger.info("firebase_request_rejected", endpoint=endpoint, code=code)
            raise AuthError(code, map_auth_error(code, operation))

        try:
            return response.json()
        except ValueError as e:
            raise AuthError("INVALID_RESPONSE", map_auth_error("INVALID_RESPONSE", operation)) from e

    @staticmethod
    def _to_user(data: dict, fallback: Optional[AuthUser] = None) -> AuthUser:
        return AuthUser(
            uid=data.get("localId") or (fallback.uid if fallback else ""),
            email=data.get("email") or (fallback.email if fallback else None),
            display_name=data.get("displayName") or (fallback.display_name if fallback else None),
            id_token=data.get("idToken") or (fallback.id_token if fallback else None),
            refresh_token=data.get("refreshToken") or (fallback.refresh_token if fallback else None),
        )

    async def sign_up(self, email: str, password: str) -> AuthUser:
        data = await asyncio.to_thread(
            self._post,
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
            SIGN_UP,
        )
        return self._to_user(data)

    async def sign_in(self, email: str, password: str) -> AuthUser:
        data = await asyncio.to_thread(
            self._post,
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
            SIGN_IN,
        )
        return self._to_user(data)

    async def sign_out(self, user: AuthUser) -> None:
        # ID tokens are stateless on the REST API; dropping them ends the session
        logger.info("firebase_signed_out", uid=user.uid)

    async def update_display_name(self, user: AuthUser, display_name: str) -> AuthUser:
        data = await asyncio.to_thread(
            self._post,
            "update",
            {"idToken": user.id_token, "displayName": display_name, "returnSecureToken": False},
            SIGN_UP,
        )
        return self._to_user(data, fallback=user)

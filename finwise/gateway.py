"""
Auth/Profile Gateway

Sign-up, sign-in, sign-out and currency changes over the identity provider
and the remote profile store.

Profile resolution on sign-in, first hit wins:
1. In-memory cache (keyed by uid)
2. Durable local store, if the stored profile belongs to this uid
3. Remote profile store, bounded by a timeout
4. Minimal profile derived from the provider's display name

DESIGN DECISION: The sign-up profile write is awaited. Sign-up does not
return until the profile document is in the remote store; a failed write
fails the sign-up. Every other remote profile write is best-effort.
"""

import asyncio
import re
from typing import Callable, Coroutine, Optional

import structlog

from finwise.audit import AuditLogger
from finwise.config import get_settings
from finwise.currency import is_supported_currency
from finwise.models.finance import utc_now
from finwise.models.profile import AuthSession, AuthUser, UserProfile
from finwise.services.auth import (
    PROFILE_WRITE_FAILED,
    SIGN_IN,
    SIGN_UP,
    VALIDATION_FAILED,
    AuthError,
    IdentityProvider,
    map_auth_error,
)
from finwise.services.storage import NotFoundError, ProfileStoreInterface, StorageError
from finwise.session import AuthStateCallback, AuthStateChannel, SessionContext


logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

# Where a signed-in profile came from
SOURCE_CACHE = "cache"
SOURCE_LOCAL_STORE = "local_store"
SOURCE_REMOTE = "remote"
SOURCE_FALLBACK = "fallback"


def validate_sign_up(first_name: str, last_name: str, email: str, password: str) -> Optional[str]:
    """Return the first validation message, or None if the input is acceptable."""
    if not all(value and value.strip() for value in (first_name, last_name, email, password)):
        return "All fields are required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return "Password must be at least 6 characters"
    if not EMAIL_PATTERN.match(email.strip()):
        return "Please enter a valid email address"
    return None


class AuthGateway:
    """
    Identity and profile operations for the UI.

    Fire-and-forget work (the display-name update) is tracked so callers
    running on a short-lived event loop can drain it with
    wait_for_background() before the loop closes.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        session_context: SessionContext,
        profile_store: Optional[ProfileStoreInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        auth_channel: Optional[AuthStateChannel] = None,
        profile_fetch_timeout: Optional[float] = None,
        default_currency: Optional[str] = None,
    ):
        self._identity = identity_provider
        self._context = session_context
        self._profile_store = profile_store
        self._audit_logger = audit_logger
        self._channel = auth_channel or AuthStateChannel()

        if profile_fetch_timeout is None or default_currency is None:
            app_settings = get_settings().app
            if profile_fetch_timeout is None:
                profile_fetch_timeout = app_settings.profile_fetch_timeout_seconds
            if default_currency is None:
                default_currency = app_settings.default_currency
        self._profile_fetch_timeout = profile_fetch_timeout
        self._default_currency = default_currency

        self._background: set[asyncio.Task] = set()

    @property
    def session(self) -> Optional[AuthSession]:
        return self._context.session

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._context.profile

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        return self._channel.subscribe(callback)

    # -- background work -----------------------------------------------------

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def wait_for_background(self) -> None:
        """Wait for outstanding fire-and-forget tasks."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _update_display_name(self, user: AuthUser, display_name: str) -> None:
        try:
            await self._identity.update_display_name(user, display_name)
        except AuthError as e:
            logger.warning("display_name_update_failed", uid=user.uid, code=e.code)

    # -- sign-up -------------------------------------------------------------

    async def sign_up(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
    ) -> AuthSession:
        """
        Create an identity and its profile document.

        Raises:
            AuthError: validation_failed before the provider is contacted,
                the provider's code if it rejects the identity, or
                profile_write_failed if the profile can't be stored.
        """
        message = validate_sign_up(first_name, last_name, email, password)
        if message:
            await self._audit_auth_failed(SIGN_UP, VALIDATION_FAILED, message)
            raise AuthError(VALIDATION_FAILED, message)

        first_name, last_name, email = first_name.strip(), last_name.strip(), email.strip()

        try:
            user = await self._identity.sign_up(email, password)
        except AuthError as e:
            await self._audit_auth_failed(SIGN_UP, e.code, e.message)
            raise

        display_name = f"{first_name} {last_name}"
        self._spawn(self._update_display_name(user, display_name))
        user = user.model_copy(update={"display_name": display_name})

        now = utc_now()
        profile = UserProfile(
            uid=user.uid,
            first_name=first_name,
            last_name=last_name,
            email=user.email or email,
            currency=self._default_currency,
            created_at=now,
            last_updated=now,
        )

        if self._profile_store is None:
            logger.warning("no_profile_store_configured", uid=user.uid)
        else:
            try:
                saved = await self._profile_store.save_profile(profile)
            except StorageError as e:
                saved = False
                logger.error("profile_write_failed", uid=user.uid, error=str(e))
                if self._audit_logger:
                    await self._audit_logger.log_external_service_error(
                        service="profile_store",
                        error_message=str(e),
                    )
            if not saved:
                message = map_auth_error(PROFILE_WRITE_FAILED, SIGN_UP)
                await self._audit_auth_failed(SIGN_UP, PROFILE_WRITE_FAILED, message)
                raise AuthError(PROFILE_WRITE_FAILED, message)

        session = self._context.start(user, profile)
        self._channel.emit(session)

        if self._audit_logger:
            await self._audit_logger.log_signed_up(user_id=user.uid, email=profile.email)

        return session

    # -- sign-in -------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Authenticate and resolve the profile.

        Profile lookup failures never fail the sign-in.

        Raises:
            AuthError: If the provider rejects the credentials
        """
        if not (email and email.strip()) or not password:
            message = map_auth_error(VALIDATION_FAILED, SIGN_IN)
            await self._audit_auth_failed(SIGN_IN, VALIDATION_FAILED, message)
            raise AuthError(VALIDATION_FAILED, message)

        try:
            user = await self._identity.sign_in(email.strip(), password)
        except AuthError as e:
            await self._audit_auth_failed(SIGN_IN, e.code, e.message)
            raise

        profile, source = await self._resolve_profile(user)
        session = self._context.start(user, profile)
        self._channel.emit(session)

        if self._audit_logger:
            await self._audit_logger.log_signed_in(user_id=user.uid, profile_source=source)

        return session

    async def _resolve_profile(self, user: AuthUser) -> tuple[UserProfile, str]:
        cached = self._context.cached_profile(user.uid)
        if cached is not None:
            return cached, SOURCE_CACHE

        stored = self._context.stored_profile(user.uid)
        if stored is not None:
            return stored, SOURCE_LOCAL_STORE

        if self._profile_store is None:
            reason = "no profile store configured"
        else:
            try:
                remote = await asyncio.wait_for(
                    self._profile_store.get_profile(user.uid),
                    timeout=self._profile_fetch_timeout,
                )
            except asyncio.TimeoutError:
                reason = f"profile fetch timed out after {self._profile_fetch_timeout}s"
            except StorageError as e:
                reason = str(e)
            else:
                if remote is not None:
                    return remote, SOURCE_REMOTE
                reason = "profile document missing"

        logger.warning("profile_fallback_used", uid=user.uid, reason=reason)
        if self._audit_logger:
            await self._audit_logger.log_profile_fallback(user_id=user.uid, reason=reason)

        fallback = UserProfile.from_display_name(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            currency=self._default_currency,
        )
        return fallback, SOURCE_FALLBACK

    # -- sign-out ------------------------------------------------------------

    async def sign_out(self) -> None:
        """End the session. Always succeeds locally."""
        session = self._context.session
        if session is not None:
            try:
                await self._identity.sign_out(session.user)
            except AuthError as e:
                logger.warning("provider_sign_out_failed", uid=session.user.uid, code=e.code)

        self._context.end()
        self._channel.emit(None)

        if self._audit_logger:
            await self._audit_logger.log_signed_out(
                user_id=session.user.uid if session else None
            )

    # -- profile updates -----------------------------------------------------

    async def update_currency(self, currency: str) -> bool:
        """
        Change the active profile's currency.

        Returns False (profile unchanged) for unknown codes, when nobody is
        signed in, or when the remote update fails.
        """
        profile = self._context.profile
        if profile is None or not is_supported_currency(currency):
            return False
        if profile.currency == currency:
            return True

        if self._profile_store is not None:
            try:
                try:
                    await self._profile_store.update_profile(profile.uid, currency=currency)
                except NotFoundError:
                    await self._profile_store.save_profile(profile.touched(currency=currency))
            except StorageError as e:
                logger.error("currency_update_failed", uid=profile.uid, error=str(e))
                if self._audit_logger:
                    await self._audit_logger.log_external_service_error(
                        service="profile_store",
                        error_message=str(e),
                    )
                return False

        updated = profile.touched(currency=currency)
        self._context.remember(updated)
        self._channel.emit(self._context.session)

        if self._audit_logger:
            await self._audit_logger.log_currency_changed(
                user_id=profile.uid,
                old=profile.currency,
                new=currency,
            )
        return True

    async def _audit_auth_failed(self, operation: str, code: str, message: str) -> None:
        if self._audit_logger:
            await self._audit_logger.log_auth_failed(
                operation=operation,
                code=code,
                message=message,
            )

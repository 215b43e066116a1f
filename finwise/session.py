"""
Session Context

Holds everything that lives for the duration of one signed-in session:
- the in-memory profile cache (uid -> last known profile)
- the durable local store (profile survives a restart)
- the active AuthSession

AuthStateChannel is the subscription point for "who is signed in".
It only notifies; it never touches the caches.
"""

from typing import Callable, Optional

import structlog

from finwise.models.profile import AuthSession, AuthUser, UserProfile
from finwise.services.storage import LocalStore


logger = structlog.get_logger(__name__)

AuthStateCallback = Callable[[Optional[AuthSession]], None]


class SessionContext:
    """Profile caches and the active session, with explicit start/end."""

    def __init__(self, local_store: LocalStore):
        self._local_store = local_store
        self._profile_cache: dict[str, UserProfile] = {}
        self._session: Optional[AuthSession] = None

    @property
    def local_store(self) -> LocalStore:
        return self._local_store

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._session.profile if self._session else None

    def cached_profile(self, uid: str) -> Optional[UserProfile]:
        return self._profile_cache.get(uid)

    def stored_profile(self, uid: str) -> Optional[UserProfile]:
        """The durable local profile, only if it belongs to uid."""
        stored = self._local_store.load_profile()
        if stored is not None and stored.uid == uid:
            return stored
        return None

    def remember(self, profile: UserProfile) -> None:
        """Write a profile to the memory cache and the local store."""
        self._profile_cache[profile.uid] = profile
        self._local_store.save_profile(profile)
        if self._session is not None and self._session.user.uid == profile.uid:
            self._session = self._session.model_copy(update={"profile": profile})

    def start(self, user: AuthUser, profile: UserProfile) -> AuthSession:
        self.remember(profile)
        self._session = AuthSession(user=user, profile=profile)
        return self._session

    def end(self) -> None:
        """Tear down the session and forget the cached profile."""
        self._profile_cache.clear()
        self._local_store.clear_profile()
        self._session = None


class AuthStateChannel:
    """Auth-state subscription: emits the current session now and on every change."""

    def __init__(self):
        self._subscribers: list[AuthStateCallback] = []
        self._current: Optional[AuthSession] = None

    @property
    def current(self) -> Optional[AuthSession]:
        return self._current

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        """
        Register a callback.

        The callback is invoked immediately with the current session
        (or None). Returns a callable that removes the subscription.
        """
        self._subscribers.append(callback)
        self._notify(callback, self._current)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, session: Optional[AuthSession]) -> None:
        self._current = session
        for callback in list(self._subscribers):
            self._notify(callback, session)

    @staticmethod
    def _notify(callback: AuthStateCallback, session: Optional[AuthSession]) -> None:
        try:
            callback(session)
        except Exception as e:
            logger.error("auth_state_subscriber_failed", error=str(e))

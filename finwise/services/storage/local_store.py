"""
Durable Local Store

A tiny JSON-file key/value store standing in for the browser's local
storage. It holds the active profile and the dark-mode preference so a
returning user skips the remote profile lookup.

Reads never raise: a missing or corrupt file reads as empty.
Writes are best-effort: failures are logged and reported as False.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from finwise.models.profile import UserProfile


logger = structlog.get_logger(__name__)

PROFILE_KEY = "userProfile"
DARK_MODE_KEY = "darkMode"


class LocalStore:
    """Key/value store persisted as one JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("local_store_read_failed", path=str(self._path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            return True
        except OSError as e:
            logger.warning("local_store_write_failed", path=str(self._path), error=str(e))
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        data = self._read_all()
        data[key] = value
        return self._write_all(data)

    def remove(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return True
        del data[key]
        return self._write_all(data)

    # -- typed accessors -----------------------------------------------------

    def load_profile(self) -> Optional[UserProfile]:
        """The stored profile, or None if absent or unparseable."""
        raw = self.get(PROFILE_KEY)
        if not raw:
            return None
        try:
            return UserProfile.model_validate(raw)
        except ValueError as e:
            logger.warning("stored_profile_invalid", error=str(e))
            return None

    def save_profile(self, profile: UserProfile) -> bool:
        return self.set(PROFILE_KEY, profile.to_document())

    def clear_profile(self) -> bool:
        return self.remove(PROFILE_KEY)

    def get_dark_mode(self) -> bool:
        return self.get(DARK_MODE_KEY) is True

    def set_dark_mode(self, enabled: bool) -> bool:
        return self.set(DARK_MODE_KEY, bool(enabled))

"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for Firestore or a real database later
2. Use in-memory storage for testing
3. Keep the auth gateway decoupled from the storage implementation

The interface is intentionally small - a profile document store keyed by
uid and an append-only audit log.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finwise.models.audit import AuditEvent
from finwise.models.profile import UserProfile


class ProfileStoreInterface(ABC):
    """
    Remote store of user profile documents, keyed by uid.
    """

    @abstractmethod
    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        """
        Fetch a profile document.

        Returns:
            The profile if a document exists, None otherwise

        Raises:
            StorageError: If the store can't be read
        """
        pass

    @abstractmethod
    async def save_profile(self, profile: UserProfile) -> bool:
        """
        Create or replace the profile document for profile.uid.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update_profile(self, uid: str, **fields) -> bool:
        """
        Update selected fields of an existing profile document.

        Raises:
            NotFoundError: If no document exists for uid
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass

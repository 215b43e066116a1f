"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage:
the remote profile store (Google Sheets), the audit log, and the durable
local key/value store.
"""

from finwise.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)
from finwise.services.storage.local_store import (
    DARK_MODE_KEY,
    PROFILE_KEY,
    LocalStore,
)
from finwise.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ProfileStoreInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Local store
    "DARK_MODE_KEY",
    "PROFILE_KEY",
    "LocalStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsProfileStore",
]

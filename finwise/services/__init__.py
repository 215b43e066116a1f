"""Services package."""

from finwise.services.auth import (
    AuthError,
    FirebaseIdentityProvider,
    IdentityProvider,
)
from finwise.services.banking import (
    BankingAuthError,
    BankingClient,
    BankingError,
    DemoBankingClient,
    OpenBankClient,
)
from finwise.services.llm import (
    GeminiTextGenerator,
    OpenAITextGenerator,
    TextGenerationError,
    TextGenerator,
    TextGeneratorNotConfiguredError,
)
from finwise.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStore,
    LocalStore,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)

__all__ = [
    # Identity
    "AuthError",
    "FirebaseIdentityProvider",
    "IdentityProvider",
    # Banking
    "BankingAuthError",
    "BankingClient",
    "BankingError",
    "DemoBankingClient",
    "OpenBankClient",
    # Text generation
    "GeminiTextGenerator",
    "OpenAITextGenerator",
    "TextGenerationError",
    "TextGenerator",
    "TextGeneratorNotConfiguredError",
    # Storage
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsProfileStore",
    "LocalStore",
    "NotFoundError",
    "ProfileStoreInterface",
    "StorageError",
]

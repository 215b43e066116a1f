"""Banking services package."""

from finwise.services.banking.interface import BankingAuthError, BankingClient, BankingError
from finwise.services.banking.openbank_service import DemoBankingClient, OpenBankClient

__all__ = [
    "BankingAuthError",
    "BankingClient",
    "BankingError",
    "DemoBankingClient",
    "OpenBankClient",
]

"""
Banking Interface

The advisor reads a balance and a list of recent transactions.
Any source that can provide both implements BankingClient.
"""

from abc import ABC, abstractmethod

from finwise.models.advisor import AccountBalance, BankTransaction


class BankingClient(ABC):
    """Read-only access to the user's primary account."""

    @abstractmethod
    async def get_account_balance(self) -> AccountBalance:
        """
        Raises:
            BankingError: If the balance can't be retrieved
        """
        pass

    @abstractmethod
    async def get_recent_transactions(self) -> list[BankTransaction]:
        """
        Recent transactions, newest first.

        Raises:
            BankingError: If the transactions can't be retrieved
        """
        pass


class BankingError(Exception):
    """Base exception for banking collaborator failures."""
    pass


class BankingAuthError(BankingError):
    """The direct-login token exchange failed."""
    pass

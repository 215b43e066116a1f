"""
Open Bank Project Sandbox Client

Flow:
1. Exchange username/password/consumer key for a DirectLogin token
2. List the user's accounts and pick the first one
3. Read that account's balance, or its recent transactions

The live responses are parsed and returned as-is. The fixed demo values
live in DemoBankingClient and are never silently substituted here.

requests is synchronous, so every HTTP call runs in a worker thread.
"""

import asyncio
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import requests
import structlog

from finwise.config import OpenBankSettings, get_settings
from finwise.models.advisor import AccountBalance, BankTransaction
from finwise.models.finance import utc_now
from finwise.services.banking.interface import BankingAuthError, BankingClient, BankingError


logger = structlog.get_logger(__name__)


def _parse_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise BankingError(f"Invalid amount in banking response: {value!r}") from e


def _as_dict(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise BankingError(f"Unexpected {what} in banking response: {type(value).__name__}")
    return value


def _as_list(value: Any, what: str) -> list[dict]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise BankingError(f"Unexpected {what} in banking response")
    return value


def _parse_datetime(value: Optional[str]) -> datetime:
    if not value:
        return utc_now()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return utc_now()


class OpenBankClient(BankingClient):
    """BankingClient backed by the Open Bank Project API."""

    def __init__(
        self,
        settings: Optional[OpenBankSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().openbank
        self._session = session or requests.Session()
        self._token: Optional[str] = None

    @property
    def _api_root(self) -> str:
        return f"{self._settings.base_url.rstrip('/')}/obp/{self._settings.api_version}"

    def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = self._session.request(
                method,
                url,
                timeout=self._settings.request_timeout_seconds,
                **kwargs,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise BankingError(f"Open Bank request failed: {e}") from e
        except ValueError as e:
            raise BankingError(f"Open Bank returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise BankingError(f"Open Bank returned {type(data).__name__}, expected an object")
        return data

    def _login(self) -> str:
        """DirectLogin token exchange."""
        header = (
            f'DirectLogin username="{self._settings.username}",'
            f'password="{self._settings.password}",'
            f'consumer_key="{self._settings.consumer_key}"'
        )
        try:
            data = self._request(
                "POST",
                f"{self._settings.base_url.rstrip('/')}/my/logins/direct",
                headers={"Authorization": header, "Content-Type": "application/json"},
                json={},
            )
        except BankingError as e:
            raise BankingAuthError("Failed to authenticate with OpenBank") from e

        token = data.get("token")
        if not token:
            raise BankingAuthError("Failed to authenticate with OpenBank")
        return token

    def _auth_headers(self) -> dict:
        if self._token is None:
            self._token = self._login()
        return {"Authorization": f'DirectLogin token="{self._token}"'}

    def _primary_account(self) -> tuple[str, str]:
        data = self._request("GET", f"{self._api_root}/my/accounts", headers=self._auth_headers())
        accounts = _as_list(data.get("accounts"), "accounts")
        if not accounts:
            raise BankingError("No accounts available for this user")
        first = accounts[0]
        bank_id, account_id = first.get("bank_id"), first.get("id")
        if not bank_id or not account_id:
            raise BankingError("Account listing is missing bank_id/id")
        return bank_id, account_id

    def _fetch_balance(self) -> AccountBalance:
        bank_id, account_id = self._primary_account()
        data = self._request(
            "GET",
            f"{self._api_root}/my/banks/{bank_id}/accounts/{account_id}/account",
            headers=self._auth_headers(),
        )
        balance = _as_dict(data.get("balance"), "balance")
        if "amount" not in balance:
            raise BankingError("Account response has no balance")
        return AccountBalance(
            amount=_parse_decimal(balance["amount"]),
            currency=balance.get("currency") or "USD",
        )

    def _fetch_transactions(self) -> list[BankTransaction]:
        bank_id, account_id = self._primary_account()
        data = self._request(
            "GET",
            f"{self._api_root}/banks/{bank_id}/accounts/{account_id}"
            f"/{self._settings.view_id}/transactions",
            headers=self._auth_headers(),
            params={
                "limit": self._settings.transaction_limit,
                "sort_direction": "DESC",
            },
        )

        transactions = []
        for item in _as_list(data.get("transactions"), "transactions"):
            details = _as_dict(item.get("details"), "transaction details")
            value = _as_dict(details.get("value"), "transaction value")
            if "amount" not in value:
                continue
            transactions.append(
                BankTransaction(
                    id=str(item.get("id", "")),
                    amount=abs(_parse_decimal(value["amount"])),
                    currency=value.get("currency") or "USD",
                    description=details.get("description") or "",
                    date=_parse_datetime(details.get("completed") or details.get("posted")),
                    category=details.get("type"),
                )
            )
        return transactions

    async def get_account_balance(self) -> AccountBalance:
        try:
            return await asyncio.to_thread(self._fetch_balance)
        except BankingError as e:
            logger.warning("openbank_balance_failed", error=str(e))
            raise

    async def get_recent_transactions(self) -> list[BankTransaction]:
        try:
            return await asyncio.to_thread(self._fetch_transactions)
        except BankingError as e:
            logger.warning("openbank_transactions_failed", error=str(e))
            raise


class DemoBankingClient(BankingClient):
    """Fixed demo data for local development and demos."""

    async def get_account_balance(self) -> AccountBalance:
        return AccountBalance(amount=Decimal("5000.00"), currency="USD")

    async def get_recent_transactions(self) -> list[BankTransaction]:
        now = utc_now()
        return [
            BankTransaction(
                id="1", amount=Decimal("150.00"), currency="USD",
                description="Grocery Shopping", date=now, category="Food",
            ),
            BankTransaction(
                id="2", amount=Decimal("45.00"), currency="USD",
                description="Transportation", date=now, category="Transport",
            ),
            BankTransaction(
                id="3", amount=Decimal("200.00"), currency="USD",
                description="Utilities", date=now, category="Bills",
            ),
        ]

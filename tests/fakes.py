"""
Shared fakes for flow tests.

Every fake implements the real service interface, so the code under test
runs unchanged; only the network is missing.
"""

import asyncio
from decimal import Decimal
from typing import Optional

import requests

from finwise.models.advisor import AccountBalance, BankTransaction
from finwise.models.audit import AuditEvent
from finwise.models.profile import AuthUser, UserProfile
from finwise.services.auth import (
    EMAIL_EXISTS,
    SIGN_IN,
    SIGN_UP,
    AuthError,
    IdentityProvider,
    map_auth_error,
)
from finwise.services.banking import BankingClient, BankingError
from finwise.services.llm import TextGenerationError, TextGenerator
from finwise.services.storage import (
    AuditStorageInterface,
    NotFoundError,
    ProfileStoreInterface,
    StorageError,
)


class FakeIdentityProvider(IdentityProvider):
    def __init__(self):
        self.accounts: dict[str, tuple[str, AuthUser]] = {}
        self.display_name_updates: list[tuple[str, str]] = []
        self.signed_out: list[str] = []
        self.sign_up_calls = 0
        self.fail_display_name = False

    def add_account(self, email: str, password: str, uid: str, display_name: Optional[str] = None):
        self.accounts[email] = (
            password,
            AuthUser(uid=uid, email=email, display_name=display_name, id_token=f"token-{uid}"),
        )

    async def sign_up(self, email: str, password: str) -> AuthUser:
        self.sign_up_calls += 1
        if email in self.accounts:
            raise AuthError(EMAIL_EXISTS, map_auth_error(EMAIL_EXISTS, SIGN_UP))
        uid = f"uid-{len(self.accounts) + 1}"
        self.add_account(email, password, uid)
        return self.accounts[email][1]

    async def sign_in(self, email: str, password: str) -> AuthUser:
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            code = "INVALID_LOGIN_CREDENTIALS"
            raise AuthError(code, map_auth_error(code, SIGN_IN))
        return account[1]

    async def sign_out(self, user: AuthUser) -> None:
        self.signed_out.append(user.uid)

    async def update_display_name(self, user: AuthUser, display_name: str) -> AuthUser:
        await asyncio.sleep(0)
        if self.fail_display_name:
            raise AuthError("TOKEN_EXPIRED", "expired")
        self.display_name_updates.append((user.uid, display_name))
        return user.model_copy(update={"display_name": display_name})


class InMemoryProfileStore(ProfileStoreInterface):
    def __init__(self):
        self.documents: dict[str, UserProfile] = {}
        self.reads = 0
        self.fail_reads = False
        self.fail_writes = False
        self.read_delay: float = 0.0

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        self.reads += 1
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.fail_reads:
            raise StorageError("sheet unavailable")
        return self.documents.get(uid)

    async def save_profile(self, profile: UserProfile) -> bool:
        if self.fail_writes:
            raise StorageError("write rejected")
        self.documents[profile.uid] = profile
        return True

    async def update_profile(self, uid: str, **fields) -> bool:
        if self.fail_writes:
            raise StorageError("write rejected")
        if uid not in self.documents:
            raise NotFoundError(f"Profile not found: {uid}")
        self.documents[uid] = self.documents[uid].touched(**fields)
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def types(self) -> list[str]:
        return [e.event_type.value for e in self.events]


class FakeBankingClient(BankingClient):
    def __init__(
        self,
        balance: Decimal = Decimal("5000.00"),
        transactions: Optional[list[BankTransaction]] = None,
        fail: bool = False,
    ):
        self.balance = AccountBalance(amount=balance, currency="USD")
        self.transactions = transactions if transactions is not None else []
        self.fail = fail

    async def get_account_balance(self) -> AccountBalance:
        if self.fail:
            raise BankingError("Failed to authenticate with OpenBank")
        return self.balance

    async def get_recent_transactions(self) -> list[BankTransaction]:
        if self.fail:
            raise BankingError("Failed to authenticate with OpenBank")
        return self.transactions


class FakeTextGenerator(TextGenerator):
    """Replies from a prompt -> text function; records every prompt."""

    name = "fake"

    def __init__(self, reply=None, fail_when=None):
        self.prompts: list[str] = []
        self._reply = reply or (lambda prompt: "generated advice")
        self._fail_when = fail_when or (lambda prompt: False)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._fail_when(prompt):
            raise TextGenerationError("backend unavailable")
        return self._reply(prompt)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Answers requests by URL suffix and records every call."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls: list[dict] = []

    def _answer(self, url: str):
        for suffix, answer in self.routes.items():
            if url.endswith(suffix):
                if isinstance(answer, Exception):
                    raise answer
                return answer
        return FakeResponse(404, {"error": "not found"})

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self._answer(url)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)



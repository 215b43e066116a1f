"""
Tests for the HTTP-backed service clients.

requests sessions, the OpenAI client and the Gemini model are replaced
with small fakes; the request building and response parsing run unchanged.
"""

import asyncio
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest
import requests
from openai import RateLimitError

from finwise.config import FirebaseSettings, GeminiSettings, OpenAISettings, OpenBankSettings
from finwise.services.auth import (
    EMAIL_EXISTS,
    NETWORK_ERROR,
    WEAK_PASSWORD,
    AuthError,
    FirebaseIdentityProvider,
)
from finwise.services.banking import BankingAuthError, BankingError, OpenBankClient
from finwise.services.llm import (
    GeminiTextGenerator,
    OpenAITextGenerator,
    TextGenerationError,
    TextGeneratorNotConfiguredError,
)

from fakes import FakeResponse, FakeSession


OPENBANK_ROUTES = {
    "/my/logins/direct": FakeResponse(201, {"token": "abc123"}),
    "/my/accounts": FakeResponse(200, {"accounts": [
        {"bank_id": "gh.29.uk", "id": "acc-1"},
        {"bank_id": "gh.29.uk", "id": "acc-2"},
    ]}),
    "/my/banks/gh.29.uk/accounts/acc-1/account": FakeResponse(200, {
        "balance": {"amount": "1234.56", "currency": "EUR"},
    }),
    "/banks/gh.29.uk/accounts/acc-1/owner/transactions": FakeResponse(200, {"transactions": [
        {
            "id": "t-1",
            "details": {
                "type": "Food",
                "description": "Market",
                "completed": "2026-10-01T09:30:00Z",
                "value": {"currency": "EUR", "amount": "-42.10"},
            },
        },
        {
            "id": "t-2",
            "details": {
                "description": "Refund",
                "posted": "2026-10-02T12:00:00Z",
                "value": {"currency": "EUR", "amount": "15"},
            },
        },
        {"id": "t-3", "details": {"description": "No value"}},
    ]}),
}


def openbank_settings() -> OpenBankSettings:
    return OpenBankSettings(consumer_key="ck", username="alice", password="s3cret")


class TestOpenBankClient:
    """Tests for OpenBankClient."""

    def test_balance(self):
        session = FakeSession(dict(OPENBANK_ROUTES))
        client = OpenBankClient(openbank_settings(), session)

        balance = asyncio.run(client.get_account_balance())

        assert balance.amount == Decimal("1234.56")
        assert balance.currency == "EUR"

        login = session.calls[0]
        assert login["method"] == "POST"
        assert login["headers"]["Authorization"] == (
            'DirectLogin username="alice",password="s3cret",consumer_key="ck"'
        )
        assert session.calls[1]["headers"]["Authorization"] == 'DirectLogin token="abc123"'

    def test_transactions(self):
        session = FakeSession(dict(OPENBANK_ROUTES))
        client = OpenBankClient(openbank_settings(), session)

        transactions = asyncio.run(client.get_recent_transactions())

        assert [t.id for t in transactions] == ["t-1", "t-2"]
        assert transactions[0].amount == Decimal("42.10")
        assert transactions[0].category == "Food"
        assert transactions[0].description == "Market"
        assert transactions[0].date.day == 1
        assert transactions[1].category == "Uncategorized"
        assert session.calls[-1]["params"] == {"limit": 20, "sort_direction": "DESC"}

    def test_token_is_reused(self):
        session = FakeSession(dict(OPENBANK_ROUTES))
        client = OpenBankClient(openbank_settings(), session)

        asyncio.run(client.get_account_balance())
        asyncio.run(client.get_recent_transactions())

        logins = [c for c in session.calls if c["url"].endswith("/my/logins/direct")]
        assert len(logins) == 1

    def test_login_failure(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/my/logins/direct"] = FakeResponse(401, {"message": "OBP-20004"})
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingAuthError, match="Failed to authenticate with OpenBank"):
            asyncio.run(client.get_account_balance())

    def test_login_without_token(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/my/logins/direct"] = FakeResponse(201, {})
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingAuthError):
            asyncio.run(client.get_recent_transactions())

    def test_http_error(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/my/accounts"] = FakeResponse(500, {"message": "boom"})
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingError, match="Open Bank request failed"):
            asyncio.run(client.get_account_balance())

    def test_no_accounts(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/my/accounts"] = FakeResponse(200, {"accounts": []})
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingError, match="No accounts"):
            asyncio.run(client.get_account_balance())

    def test_account_listing_with_wrong_shape(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/my/accounts"] = FakeResponse(200, {"accounts": ["acc-1"]})
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingError, match="Unexpected accounts"):
            asyncio.run(client.get_account_balance())

    def test_login_returning_a_list(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/my/logins/direct"] = FakeResponse(201, [{"token": "abc123"}])
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingAuthError):
            asyncio.run(client.get_account_balance())

    def test_transaction_details_with_wrong_shape(self):
        routes = dict(OPENBANK_ROUTES)
        routes["/banks/gh.29.uk/accounts/acc-1/owner/transactions"] = FakeResponse(
            200, {"transactions": [{"id": "t-1", "details": "Market"}]}
        )
        client = OpenBankClient(openbank_settings(), FakeSession(routes))

        with pytest.raises(BankingError, match="Unexpected transaction details"):
            asyncio.run(client.get_recent_transactions())


class TestFirebaseIdentityProvider:
    """Tests for FirebaseIdentityProvider."""

    def test_sign_up(self):
        session = FakeSession({"accounts:signUp": FakeResponse(200, {
            "localId": "uid-42",
            "email": "alice@example.com",
            "idToken": "id-token",
            "refreshToken": "refresh-token",
        })})
        provider = FirebaseIdentityProvider(FirebaseSettings(api_key="test"), session)

        user = asyncio.run(provider.sign_up("alice@example.com", "secret1"))

        assert user.uid == "uid-42"
        assert user.email == "alice@example.com"
        assert user.id_token == "id-token"
        assert session.calls[0]["params"] == {"key": "test"}
        assert session.calls[0]["json"]["returnSecureToken"] is True

    def test_email_exists(self):
        session = FakeSession({"accounts:signUp": FakeResponse(400, {
            "error": {"code": 400, "message": "EMAIL_EXISTS"},
        })})
        provider = FirebaseIdentityProvider(FirebaseSettings(api_key="test"), session)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(provider.sign_up("alice@example.com", "secret1"))

        assert exc_info.value.code == EMAIL_EXISTS
        assert exc_info.value.message == "This email is already registered"

    def test_error_message_with_explanation(self):
        session = FakeSession({"accounts:signUp": FakeResponse(400, {
            "error": {"message": "WEAK_PASSWORD : Password should be at least 6 characters"},
        })})
        provider = FirebaseIdentityProvider(FirebaseSettings(api_key="test"), session)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(provider.sign_up("alice@example.com", "123"))

        assert exc_info.value.code == WEAK_PASSWORD

    def test_bad_credentials(self):
        session = FakeSession({"accounts:signInWithPassword": FakeResponse(400, {
            "error": {"message": "INVALID_LOGIN_CREDENTIALS"},
        })})
        provider = FirebaseIdentityProvider(FirebaseSettings(api_key="test"), session)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(provider.sign_in("alice@example.com", "wrong"))

        assert exc_info.value.message == "Login failed. Please check your credentials."

    def test_network_error(self):
        session = FakeSession({
            "accounts:signInWithPassword": requests.ConnectionError("connection refused"),
        })
        provider = FirebaseIdentityProvider(FirebaseSettings(api_key="test"), session)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(provider.sign_in("alice@example.com", "secret1"))

        assert exc_info.value.code == NETWORK_ERROR

    def test_update_display_name_keeps_tokens(self):
        from finwise.models.profile import AuthUser

        session = FakeSession({"accounts:update": FakeResponse(200, {
            "localId": "uid-42",
            "displayName": "Alice Smith",
        })})
        provider = FirebaseIdentityProvider(FirebaseSettings(api_key="test"), session)
        user = AuthUser(uid="uid-42", email="alice@example.com", id_token="id-token")

        updated = asyncio.run(provider.update_display_name(user, "Alice Smith"))

        assert updated.display_name == "Alice Smith"
        assert updated.id_token == "id-token"
        assert session.calls[0]["json"]["idToken"] == "id-token"


def rate_limit_error() -> RateLimitError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return RateLimitError(
        "rate limited",
        response=httpx.Response(429, request=request),
        body=None,
    )


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def create(self, **kwargs):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def openai_generator(outcomes, retries: int = 3):
    completions = FakeCompletions(outcomes)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    generator = OpenAITextGenerator(
        OpenAISettings(api_key="test"),
        rate_limit_retries=retries,
        rate_limit_backoff_seconds=0,
        client=client,
    )
    return generator, completions


class TestOpenAITextGenerator:
    """Tests for OpenAITextGenerator."""

    def test_returns_content(self):
        generator, completions = openai_generator([completion("Budget first.")])
        assert asyncio.run(generator.generate("Tips?")) == "Budget first."
        assert completions.calls == 1

    def test_retries_rate_limits(self):
        generator, completions = openai_generator([
            rate_limit_error(),
            rate_limit_error(),
            completion("Finally."),
        ])

        assert asyncio.run(generator.generate("Tips?")) == "Finally."
        assert completions.calls == 3

    def test_gives_up_after_retries(self):
        generator, completions = openai_generator([rate_limit_error()] * 4, retries=3)

        with pytest.raises(TextGenerationError):
            asyncio.run(generator.generate("Tips?"))
        assert completions.calls == 4

    def test_empty_content(self):
        generator, _ = openai_generator([completion("")])
        with pytest.raises(TextGenerationError, match="Invalid response format"):
            asyncio.run(generator.generate("Tips?"))

    def test_missing_api_key(self):
        with pytest.raises(TextGeneratorNotConfiguredError):
            OpenAITextGenerator(OpenAISettings(api_key=""), client=SimpleNamespace())


class BlockedResponse:
    @property
    def text(self):
        raise ValueError("The response was blocked")


class StubGeminiModel:
    def __init__(self, outcome):
        self.outcome = outcome
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def gemini_generator(outcome):
    generator = GeminiTextGenerator(GeminiSettings(api_key="test"))
    model = StubGeminiModel(outcome)
    generator._model = model
    return generator, model


class TestGeminiTextGenerator:
    """Tests for GeminiTextGenerator."""

    def test_returns_text(self):
        generator, model = gemini_generator(SimpleNamespace(text="Pay yourself first."))
        assert asyncio.run(generator.generate("Tips?")) == "Pay yourself first."
        assert model.prompts == ["Tips?"]

    def test_empty_text(self):
        generator, _ = gemini_generator(SimpleNamespace(text=""))
        with pytest.raises(TextGenerationError, match="Invalid response format"):
            asyncio.run(generator.generate("Tips?"))

    def test_blocked_response(self):
        generator, _ = gemini_generator(BlockedResponse())
        with pytest.raises(TextGenerationError, match="Invalid response format"):
            asyncio.run(generator.generate("Tips?"))

    def test_sdk_error(self):
        generator, _ = gemini_generator(RuntimeError("quota exceeded"))
        with pytest.raises(TextGenerationError, match="Gemini request failed: quota exceeded"):
            asyncio.run(generator.generate("Tips?"))

    def test_missing_api_key(self):
        with pytest.raises(TextGeneratorNotConfiguredError):
            GeminiTextGenerator(GeminiSettings(api_key=""))

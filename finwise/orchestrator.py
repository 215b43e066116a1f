"""
Main Orchestrator for FinWise

Ties the components together:
1. Chat (question -> advice generator -> one bot reply per question)
2. App wiring (settings -> collaborators -> gateway, advisor, loader)

DESIGN DECISION: Collaborators that aren't configured are left out
rather than failing startup. The gateway, advisor and loader each degrade
on their own (fallback profile, apology text, built-in content), so the
app always comes up.
"""

from typing import NamedTuple, Optional

import structlog
from pydantic import ValidationError

from finwise.agents import AdviceGenerator, LearningContentLoader
from finwise.audit import AuditLogger, create_correlation_id
from finwise.config import get_settings
from finwise.gateway import AuthGateway
from finwise.models.advisor import ChatMessage, ChatSender
from finwise.services.auth import FirebaseIdentityProvider
from finwise.services.banking import BankingClient, DemoBankingClient, OpenBankClient
from finwise.services.llm import (
    GeminiTextGenerator,
    OpenAITextGenerator,
    TextGenerator,
    TextGeneratorNotConfiguredError,
)
from finwise.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsProfileStore,
    LocalStore,
    ProfileStoreInterface,
)
from finwise.session import AuthStateChannel, SessionContext


logger = structlog.get_logger(__name__)

GREETING = (
    "Hello! I'm your AI Financial Advisor from FinWise. I can help you with "
    "personalized financial advice based on your transaction history and current "
    "financial status. How can I assist you today?"
)
CONNECTION_ERROR_MESSAGE = (
    "I apologize, but I'm having trouble connecting to the server. Please try again later."
)


class ChatSession:
    """
    Advisor conversation state.

    States:
    - idle: accepts a question
    - awaiting: a question is in flight; further submissions are ignored

    Every accepted question produces exactly one user message followed by
    exactly one bot message.
    """

    def __init__(self, advice_generator: Optional[AdviceGenerator] = None):
        self._advice_generator = advice_generator
        self._messages: list[ChatMessage] = [
            ChatMessage(id=1, text=GREETING, sender=ChatSender.BOT)
        ]
        self._awaiting = False

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def is_awaiting(self) -> bool:
        return self._awaiting

    def _append(self, text: str, sender: ChatSender) -> ChatMessage:
        message = ChatMessage(id=self._messages[-1].id + 1, text=text, sender=sender)
        self._messages.append(message)
        return message

    async def submit(self, text: str) -> Optional[ChatMessage]:
        """
        Ask a question.

        Returns the bot reply, or None if the input was blank or a
        question is already in flight (nothing is appended then).
        """
        if self._awaiting:
            return None
        question = (text or "").strip()
        if not question:
            return None

        self._append(question, ChatSender.USER)
        self._awaiting = True
        correlation_id = create_correlation_id()
        try:
            if self._advice_generator is None:
                reply = CONNECTION_ERROR_MESSAGE
            else:
                reply = await self._advice_generator.get_advice(question, correlation_id)
        except Exception as e:
            logger.error("chat_reply_failed", error=str(e), correlation_id=str(correlation_id))
            reply = CONNECTION_ERROR_MESSAGE
        finally:
            self._awaiting = False

        return self._append(reply, ChatSender.BOT)


class AppComponents(NamedTuple):
    gateway: Optional[AuthGateway]
    advice_generator: Optional[AdviceGenerator]
    content_loader: LearningContentLoader
    local_store: LocalStore


def create_text_generator(provider: str) -> Optional[TextGenerator]:
    """The configured text generator, or None if its API key is missing."""
    try:
        if provider == "openai":
            return OpenAITextGenerator()
        return GeminiTextGenerator()
    except (TextGeneratorNotConfiguredError, ValidationError) as e:
        logger.warning("text_generator_not_configured", provider=provider, error=str(e))
        return None


def create_banking_client(use_demo: bool) -> Optional[BankingClient]:
    if use_demo:
        return DemoBankingClient()
    try:
        return OpenBankClient()
    except ValidationError as e:
        logger.warning("banking_not_configured", error=str(e))
        return None


def create_app_components(use_storage: bool = True) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run without a remote profile store.
    """
    app_settings = get_settings().app

    profile_store: Optional[ProfileStoreInterface] = None
    audit_logger = AuditLogger()  # Local-only logging

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            profile_store = GoogleSheetsProfileStore(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except ValidationError as e:
            logger.warning("storage_not_configured", error=str(e))
            profile_store = None

    local_store = LocalStore(app_settings.local_store_file)

    gateway = None
    try:
        identity_provider = FirebaseIdentityProvider()
    except ValidationError as e:
        logger.warning("identity_provider_not_configured", error=str(e))
    else:
        gateway = AuthGateway(
            identity_provider=identity_provider,
            session_context=SessionContext(local_store),
            profile_store=profile_store,
            audit_logger=audit_logger,
            auth_channel=AuthStateChannel(),
            profile_fetch_timeout=app_settings.profile_fetch_timeout_seconds,
            default_currency=app_settings.default_currency,
        )

    text_generator = create_text_generator(app_settings.text_generation_provider)
    banking_client = create_banking_client(app_settings.use_demo_banking)

    advice_generator = None
    if text_generator is not None and banking_client is not None:
        advice_generator = AdviceGenerator(
            banking_client=banking_client,
            text_generator=text_generator,
            audit_logger=audit_logger,
            low_balance_threshold=app_settings.low_balance_threshold,
            high_average_threshold=app_settings.high_average_transaction_threshold,
        )

    content_loader = LearningContentLoader(
        text_generator=text_generator,
        audit_logger=audit_logger,
    )

    return AppComponents(
        gateway=gateway,
        advice_generator=advice_generator,
        content_loader=content_loader,
        local_store=local_store,
    )

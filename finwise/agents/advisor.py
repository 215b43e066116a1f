"""
Advice Generator

Turns a free-text question into personalized advice:
1. Fetch balance and recent transactions concurrently
2. Build a financial context (balance, per-category spend, rule-based notes)
3. Send context + question to the text generator
4. Return the generated text verbatim

If anything in steps 1-3 fails, the question alone is sent to the text
generator and the answer is prefixed with an apology. A failure of that
fallback call propagates to the caller.
"""

import asyncio
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from finwise.audit import AuditLogger, create_correlation_id
from finwise.config import get_settings
from finwise.currency import DEFAULT_SYMBOL, get_currency_symbol
from finwise.models.advisor import AccountBalance, BankTransaction
from finwise.services.banking import BankingClient
from finwise.services.llm import TextGenerator


logger = structlog.get_logger(__name__)

APOLOGY_PREFIX = (
    "I apologize, but I'm having trouble accessing your financial data at the moment. "
    "Here's some general advice based on your question:\n\n"
)

LOW_BALANCE_NOTE = "⚠️ Your balance is getting low. Consider reducing non-essential expenses.\n\n"
HIGH_AVERAGE_NOTE = (
    "💡 Your average transaction is relatively high. "
    "Look for opportunities to save on regular purchases.\n\n"
)

PROMPT_TEMPLATE = (
    "As an AI financial advisor, please provide advice based on the following "
    "context and user question:\n\n"
    "Financial Context:\n{context}\n\n"
    "User Question:\n{query}\n\n"
    "Please provide specific, actionable advice considering the user's current "
    "financial situation."
)


def analyze_transactions(transactions: list[BankTransaction], symbol: str = DEFAULT_SYMBOL) -> str:
    """Per-category spend breakdown, categories in first-seen order."""
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        totals[transaction.category] = totals.get(transaction.category, Decimal("0")) + transaction.amount

    lines = ["Based on your recent transactions:\n\n"]
    for category, amount in totals.items():
        lines.append(f"- {category}: {symbol}{amount:.2f}\n")
    return "".join(lines)


def advisory_notes(
    balance: AccountBalance,
    transactions: list[BankTransaction],
    low_balance_threshold: Decimal,
    high_average_threshold: Decimal,
) -> str:
    """Rule-based warnings appended to the context."""
    notes = ""
    if balance.amount < low_balance_threshold:
        notes += LOW_BALANCE_NOTE
    if transactions:
        average = sum((t.amount for t in transactions), Decimal("0")) / len(transactions)
        if average > high_average_threshold:
            notes += HIGH_AVERAGE_NOTE
    return notes


def build_prompt(context: str, query: str) -> str:
    return PROMPT_TEMPLATE.format(context=context, query=query)


class AdviceGenerator:
    """Personalized advice from banking data plus a text generator."""

    def __init__(
        self,
        banking_client: BankingClient,
        text_generator: TextGenerator,
        audit_logger: Optional[AuditLogger] = None,
        low_balance_threshold: Optional[Decimal] = None,
        high_average_threshold: Optional[Decimal] = None,
    ):
        self._banking = banking_client
        self._generator = text_generator
        self._audit_logger = audit_logger

        if low_balance_threshold is None or high_average_threshold is None:
            app_settings = get_settings().app
            if low_balance_threshold is None:
                low_balance_threshold = app_settings.low_balance_threshold
            if high_average_threshold is None:
                high_average_threshold = app_settings.high_average_transaction_threshold
        self._low_balance_threshold = low_balance_threshold
        self._high_average_threshold = high_average_threshold

    def build_context(self, balance: AccountBalance, transactions: list[BankTransaction]) -> str:
        context = f"Current balance: {balance.amount} {balance.currency}\n"
        if transactions:
            context += analyze_transactions(transactions, get_currency_symbol(balance.currency))
        context += advisory_notes(
            balance,
            transactions,
            self._low_balance_threshold,
            self._high_average_threshold,
        )
        return context

    async def _personalized_advice(self, query: str, correlation_id: UUID) -> str:
        balance, transactions = await asyncio.gather(
            self._banking.get_account_balance(),
            self._banking.get_recent_transactions(),
        )
        context = self.build_context(balance, transactions)
        advice = await self._generator.generate(build_prompt(context, query))

        if self._audit_logger:
            await self._audit_logger.log_advice_generated(
                query_length=len(query),
                context_lines=context.count("\n"),
                correlation_id=correlation_id,
            )
        return advice

    async def get_advice(self, query: str, correlation_id: Optional[UUID] = None) -> str:
        """
        Advice for a user question.

        Raises:
            TextGenerationError: Only if the general-advice fallback also fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            return await self._personalized_advice(query, correlation_id)
        except Exception as e:
            logger.warning(
                "personalized_advice_failed",
                error=str(e),
                correlation_id=str(correlation_id),
            )
            if self._audit_logger:
                await self._audit_logger.log_advice_fallback(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )

        general = await self._generator.generate(query)
        return APOLOGY_PREFIX + general

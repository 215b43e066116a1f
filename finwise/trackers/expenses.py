"""
Expense Tracker

Owns the session's expenses and computes the spending breakdown.
Nothing is cached: totals and category sums are recomputed on every read.
"""

from decimal import Decimal
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from finwise.models.finance import Expense, ExpenseCategory, utc_now
from finwise.trackers.base import Number, parse_amount


logger = structlog.get_logger(__name__)


class ExpenseTracker:
    """In-memory expense list with derived spending metrics."""

    RECENT_LIMIT = 5

    def __init__(self):
        self._expenses: list[Expense] = []

    @property
    def expenses(self) -> list[Expense]:
        return list(self._expenses)

    def add(
        self,
        amount: Optional[Number],
        category: Union[ExpenseCategory, str, None] = ExpenseCategory.OTHER,
        description: str = "",
    ) -> Optional[Expense]:
        """
        Record an expense.

        Returns the new Expense, or None (and changes nothing) when the
        amount is missing/non-positive or the category is unknown.
        """
        parsed = parse_amount(amount)
        if parsed is None or not category:
            return None
        try:
            category = ExpenseCategory(category)
        except ValueError:
            return None

        try:
            expense = Expense(
                amount=parsed,
                category=category,
                description=description or "",
                date=utc_now(),
            )
        except ValidationError as e:
            logger.debug("expense_rejected", errors=e.error_count())
            return None
        self._expenses.append(expense)
        logger.debug("expense_added", category=category.value, amount=str(parsed))
        return expense

    def reset(self, confirmed: bool) -> bool:
        """Remove every expense. Does nothing unless the user confirmed."""
        if not confirmed:
            return False
        self._expenses.clear()
        logger.info("expenses_reset")
        return True

    @property
    def total(self) -> Decimal:
        return sum((e.amount for e in self._expenses), Decimal("0"))

    @property
    def category_totals(self) -> dict[ExpenseCategory, Decimal]:
        """Per-category sums, ordered by first appearance."""
        totals: dict[ExpenseCategory, Decimal] = {}
        for expense in self._expenses:
            totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
        return totals

    def recent(self, limit: int = RECENT_LIMIT) -> list[Expense]:
        """The latest expenses, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._expenses[-limit:]))

    def chart_series(self) -> tuple[list[str], list[Decimal]]:
        """Labels and values for the category pie chart."""
        totals = self.category_totals
        return [c.value for c in totals], list(totals.values())

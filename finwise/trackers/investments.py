"""Investment overview: holdings by type and their totals."""

from decimal import Decimal
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from finwise.models.finance import Investment, InvestmentType
from finwise.trackers.base import Number, parse_amount


logger = structlog.get_logger(__name__)


class InvestmentPortfolio:
    """In-memory list of investments."""

    def __init__(self):
        self._investments: list[Investment] = []

    @property
    def investments(self) -> list[Investment]:
        return list(self._investments)

    def add(
        self,
        investment_type: Union[InvestmentType, str, None],
        amount: Optional[Number],
    ) -> Optional[Investment]:
        """Record a holding. Returns None for a bad amount or unknown type."""
        parsed = parse_amount(amount)
        if parsed is None or not investment_type:
            return None
        try:
            investment_type = InvestmentType(investment_type)
        except ValueError:
            return None

        try:
            investment = Investment(type=investment_type, amount=parsed)
        except ValidationError as e:
            logger.debug("investment_rejected", errors=e.error_count())
            return None
        self._investments.append(investment)
        logger.debug("investment_added", type=investment_type.value, amount=str(parsed))
        return investment

    def reset(self, confirmed: bool) -> bool:
        if not confirmed:
            return False
        self._investments.clear()
        logger.info("investments_reset")
        return True

    @property
    def total(self) -> Decimal:
        return sum((i.amount for i in self._investments), Decimal("0"))

    @property
    def allocation(self) -> dict[InvestmentType, Decimal]:
        """Per-type sums, ordered by first appearance."""
        totals: dict[InvestmentType, Decimal] = {}
        for investment in self._investments:
            totals[investment.type] = totals.get(investment.type, Decimal("0")) + investment.amount
        return totals

    def chart_series(self) -> tuple[list[str], list[Decimal]]:
        allocation = self.allocation
        return [t.value for t in allocation], list(allocation.values())

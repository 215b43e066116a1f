"""
Emergency Fund Tracker

The fund starts from seed values rather than empty. A reset zeroes the
balance and restores the default target and monthly contribution.
"""

from decimal import Decimal
from typing import Optional

import structlog

from finwise.models.finance import EmergencyFund, utc_now
from finwise.trackers.base import (
    Number,
    clamp_percent,
    months_to_goal,
    parse_amount,
    progress_percent,
)


logger = structlog.get_logger(__name__)

SEED_CURRENT_AMOUNT = Decimal("5000")
DEFAULT_TARGET_AMOUNT = Decimal("15000")
DEFAULT_MONTHLY_CONTRIBUTION = Decimal("500")


def seed_fund() -> EmergencyFund:
    return EmergencyFund(
        current_amount=SEED_CURRENT_AMOUNT,
        target_amount=DEFAULT_TARGET_AMOUNT,
        monthly_contribution=DEFAULT_MONTHLY_CONTRIBUTION,
        last_contribution=utc_now(),
    )


class EmergencyFundTracker:
    """Holds the emergency fund record and its derived metrics."""

    def __init__(self, fund: Optional[EmergencyFund] = None):
        self._fund = fund or seed_fund()

    @property
    def fund(self) -> EmergencyFund:
        return self._fund

    def add_contribution(self) -> EmergencyFund:
        """Add one monthly contribution and stamp the time."""
        self._fund = self._fund.model_copy(
            update={
                "current_amount": self._fund.current_amount + self._fund.monthly_contribution,
                "last_contribution": utc_now(),
            }
        )
        return self._fund

    def adjust_target(self, value: Optional[Number]) -> bool:
        """Set a new target. Non-numeric or non-positive input is ignored."""
        target = parse_amount(value)
        if target is None:
            return False
        self._fund = self._fund.model_copy(update={"target_amount": target})
        logger.debug("emergency_fund_target_adjusted", target=str(target))
        return True

    def reset(self, confirmed: bool) -> bool:
        if not confirmed:
            return False
        self._fund = EmergencyFund(
            current_amount=Decimal("0"),
            target_amount=DEFAULT_TARGET_AMOUNT,
            monthly_contribution=DEFAULT_MONTHLY_CONTRIBUTION,
            last_contribution=utc_now(),
        )
        logger.info("emergency_fund_reset")
        return True

    @property
    def progress(self) -> Decimal:
        return progress_percent(self._fund.current_amount, self._fund.target_amount)

    @property
    def display_progress(self) -> Decimal:
        return clamp_percent(self.progress)

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), self._fund.target_amount - self._fund.current_amount)

    @property
    def months_to_goal(self) -> Optional[int]:
        return months_to_goal(
            self._fund.target_amount,
            self._fund.current_amount,
            self._fund.monthly_contribution,
        )

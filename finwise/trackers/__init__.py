"""Dashboard trackers: per-feature state and derived metrics."""

from finwise.trackers.base import (
    clamp_percent,
    months_to_goal,
    parse_amount,
    progress_percent,
)
from finwise.trackers.emergency_fund import EmergencyFundTracker
from finwise.trackers.expenses import ExpenseTracker
from finwise.trackers.investments import InvestmentPortfolio
from finwise.trackers.savings import SavingsGoalTracker

__all__ = [
    "EmergencyFundTracker",
    "ExpenseTracker",
    "InvestmentPortfolio",
    "SavingsGoalTracker",
    "clamp_percent",
    "months_to_goal",
    "parse_amount",
    "progress_percent",
]

"""
Core Finance Models for FinWise

These models define the records owned by the dashboard trackers:
expenses, savings goals, investments and the emergency fund.

DESIGN DECISION: Records are plain Pydantic models with no behavior.
All derived numbers (totals, progress, months to goal) are computed
by the trackers on every read, never stored on the records.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Timezone-aware 'now' used for every timestamp in the app."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Expense categories offered by the tracker.

    The values double as display labels.
    """
    HOUSING = "Housing"
    TRANSPORTATION = "Transportation"
    FOOD = "Food"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    OTHER = "Other"


class SavingsFrequency(str, Enum):
    """How often a savings contribution is meant to happen."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class InvestmentType(str, Enum):
    """Investment buckets shown in the portfolio overview."""
    SAVINGS = "Savings"
    STOCKS = "Stocks"
    MUTUAL_FUNDS = "Mutual Funds"
    BONDS = "Bonds"
    CRYPTO = "Crypto"


# =============================================================================
# RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense.

    Expenses are never edited once recorded; the only way to
    remove one is a full tracker reset.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent, in the user's currency"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHER,
    )
    description: str = Field(
        default="",
        max_length=200,
    )
    date: datetime = Field(
        default_factory=utc_now,
        description="When the expense was recorded"
    )


class SavingsGoal(BaseModel):
    """
    A savings goal with a fixed per-period contribution.

    current_amount only ever grows, one contribution at a time,
    and may run past target_amount.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    frequency: SavingsFrequency = Field(default=SavingsFrequency.MONTHLY)
    contribution_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount added by one contribution"
    )
    start_date: datetime = Field(default_factory=utc_now)


class Investment(BaseModel):
    """A holding in one of the fixed investment buckets."""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    type: InvestmentType = Field(default=InvestmentType.SAVINGS)
    amount: Decimal = Field(..., gt=0)


class EmergencyFund(BaseModel):
    """State of the emergency fund."""

    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    target_amount: Decimal = Field(..., gt=0)
    monthly_contribution: Decimal = Field(..., ge=0)
    last_contribution: datetime = Field(default_factory=utc_now)

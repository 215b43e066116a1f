"""
Shared helpers for the dashboard trackers.

Form input arrives as strings, floats or Decimals. These helpers turn it
into validated Decimals and compute the progress numbers every tracker
shows. None of them raise on bad input; callers treat None as "refuse
the action".
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[str, int, float, Decimal]

HUNDRED = Decimal("100")


def parse_amount(value: Optional[Number]) -> Optional[Decimal]:
    """
    Parse a user-entered amount.

    Returns None for empty, non-numeric, non-finite or non-positive input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def progress_percent(current: Decimal, target: Decimal) -> Decimal:
    """Raw progress toward a target, in percent. Can exceed 100."""
    if target <= 0:
        return Decimal("0")
    return current / target * HUNDRED


def clamp_percent(value: Decimal) -> Decimal:
    """Clamp a percentage to [0, 100] for display."""
    return max(Decimal("0"), min(HUNDRED, value))


def months_to_goal(
    target: Decimal,
    current: Decimal,
    monthly_contribution: Decimal,
) -> Optional[int]:
    """
    Months of contributions left before current reaches target.

    ceil((target - current) / monthly_contribution). Zero or negative once
    the target is met. None when there is no monthly contribution.
    """
    if monthly_contribution <= 0:
        return None
    return math.ceil((target - current) / monthly_contribution)

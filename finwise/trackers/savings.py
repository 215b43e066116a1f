"""
Savings Goal Tracker

Goals grow one fixed contribution at a time. A goal may be pushed past
its target; only the displayed progress is clamped.
"""

from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from finwise.models.finance import SavingsFrequency, SavingsGoal, utc_now
from finwise.trackers.base import Number, clamp_percent, parse_amount, progress_percent


logger = structlog.get_logger(__name__)


class SavingsGoalTracker:
    """In-memory list of savings goals."""

    def __init__(self):
        self._goals: list[SavingsGoal] = []

    @property
    def goals(self) -> list[SavingsGoal]:
        return list(self._goals)

    def get(self, goal_id: UUID) -> Optional[SavingsGoal]:
        for goal in self._goals:
            if goal.id == goal_id:
                return goal
        return None

    def add(
        self,
        name: Optional[str],
        target_amount: Optional[Number],
        contribution_amount: Optional[Number],
        frequency: Union[SavingsFrequency, str] = SavingsFrequency.MONTHLY,
    ) -> Optional[SavingsGoal]:
        """
        Create a goal starting at zero.

        Returns None when the name is blank, either amount is missing or
        non-positive, or the frequency is unknown.
        """
        name = (name or "").strip()
        target = parse_amount(target_amount)
        contribution = parse_amount(contribution_amount)
        if not name or target is None or contribution is None:
            return None
        try:
            frequency = SavingsFrequency(frequency)
        except ValueError:
            return None

        try:
            goal = SavingsGoal(
                name=name,
                target_amount=target,
                contribution_amount=contribution,
                frequency=frequency,
                start_date=utc_now(),
            )
        except ValidationError as e:
            logger.debug("savings_goal_rejected", errors=e.error_count())
            return None
        self._goals.append(goal)
        logger.debug("savings_goal_added", goal_id=str(goal.id), target=str(target))
        return goal

    def contribute(self, goal_id: UUID) -> Optional[SavingsGoal]:
        """
        Add the goal's contribution amount to its current amount.

        Not capped at the target. Unknown ids change nothing.
        """
        for index, goal in enumerate(self._goals):
            if goal.id == goal_id:
                updated = goal.model_copy(
                    update={"current_amount": goal.current_amount + goal.contribution_amount}
                )
                self._goals[index] = updated
                return updated
        return None

    def reset(self, confirmed: bool) -> bool:
        """Remove every goal. Does nothing unless the user confirmed."""
        if not confirmed:
            return False
        self._goals.clear()
        logger.info("savings_goals_reset")
        return True

    @staticmethod
    def progress(goal: SavingsGoal) -> Decimal:
        """Raw progress in percent; exceeds 100 once the goal is overshot."""
        return progress_percent(goal.current_amount, goal.target_amount)

    @staticmethod
    def display_progress(goal: SavingsGoal) -> Decimal:
        return clamp_percent(SavingsGoalTracker.progress(goal))

    @property
    def total_saved(self) -> Decimal:
        return sum((g.current_amount for g in self._goals), Decimal("0"))

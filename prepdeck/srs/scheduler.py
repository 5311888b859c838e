"""
SM-2 Spaced Repetition Scheduler.

Implements:
- SM-2 algorithm for review intervals
- Due-date helpers used by the queue builder and readiness scoring

Key Formula:
EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
where q is the rating (0-5) and EF is the easiness factor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from .schedule import (
    DEFAULT_EASINESS_FACTOR,
    MIN_EASINESS_FACTOR,
    PASSING_GRADE,
    ScheduleState,
    as_utc,
    next_review_from,
    round_half_up,
    utc_now,
    validate_rating,
)

if TYPE_CHECKING:
    from config import Settings

# =============================================================================
# SM-2 Algorithm
# =============================================================================


@dataclass
class SM2Config:
    """Configuration for SM-2 algorithm."""

    initial_easiness: float = DEFAULT_EASINESS_FACTOR
    minimum_easiness: float = MIN_EASINESS_FACTOR
    first_interval: int = 1  # Days for first review
    second_interval: int = 6  # Days for second review
    passing_grade: int = PASSING_GRADE

    @classmethod
    def from_settings(cls, settings: Settings) -> SM2Config:
        return cls(
            initial_easiness=settings.sm2_initial_easiness,
            minimum_easiness=settings.sm2_minimum_easiness,
            first_interval=settings.sm2_first_interval,
            second_interval=settings.sm2_second_interval,
        )


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    The SuperMemo 2 algorithm calculates review intervals
    based on performance history. Each card has:
    - Easiness Factor (EF): How easy the item is (2.5 default, min 1.3)
    - Interval: Days until next review
    - Repetitions: Consecutive correct recalls
    """

    def __init__(self, config: SM2Config | None = None):
        """
        Initialize SM-2 scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or SM2Config()

    def initial_state(self) -> ScheduleState:
        """State assumed for a card that has never been reviewed."""
        return ScheduleState(
            easiness_factor=self.config.initial_easiness,
            repetition_count=0,
            interval_days=0,
        )

    def update_easiness(self, easiness: float, rating: int) -> float:
        """Apply the SM-2 easiness delta, floored at the configured minimum."""
        delta = 0.1 - (5 - rating) * (0.08 + (5 - rating) * 0.02)
        return max(self.config.minimum_easiness, easiness + delta)

    def calculate_next_review(
        self,
        state: ScheduleState | None,
        rating: int,
        now: datetime | None = None,
    ) -> ScheduleState:
        """
        Calculate the next schedule state after a review.

        Args:
            state: Current state for the card (None for a new card)
            rating: User rating (0-5)
            now: Review time (defaults to the current UTC time)

        Returns:
            New ScheduleState; the input is never modified

        Raises:
            InvalidRating: If rating is outside 0-5
        """
        grade = validate_rating(rating)
        reviewed_at = as_utc(now) if now is not None else utc_now()
        current = state or self.initial_state()

        new_ef = self.update_easiness(current.easiness_factor, grade)

        if grade < self.config.passing_grade:
            # Failed - reset to beginning
            new_repetitions = 0
            new_interval = self.config.first_interval
        else:
            new_repetitions = current.repetition_count + 1

            if new_repetitions == 1:
                new_interval = self.config.first_interval
            elif new_repetitions == 2:
                new_interval = self.config.second_interval
            else:
                new_interval = round_half_up(current.interval_days * new_ef)

        new_state = ScheduleState(
            easiness_factor=new_ef,
            repetition_count=new_repetitions,
            interval_days=new_interval,
            last_reviewed_at=reviewed_at,
            next_review_at=next_review_from(reviewed_at, new_interval),
        )

        logger.debug(
            f"SM-2 update: rating={int(grade)}, reps {current.repetition_count}->{new_repetitions}, "
            f"interval {current.interval_days}->{new_interval}d, EF={new_ef:.2f}"
        )

        return new_state


# =============================================================================
# Due-Date Helpers
# =============================================================================


def is_due(state: ScheduleState | None, now: datetime | None = None) -> bool:
    """New cards are always due; scheduled cards once next_review_at has passed."""
    if state is None or state.next_review_at is None:
        return True
    now = as_utc(now) if now is not None else utc_now()
    return now >= state.next_review_at


def days_until_review(state: ScheduleState | None, now: datetime | None = None) -> int:
    """
    Whole days until the next review, rounded up.

    Negative when overdue, 0 for new cards.
    """
    if state is None or state.next_review_at is None:
        return 0
    now = as_utc(now) if now is not None else utc_now()
    seconds = (state.next_review_at - now).total_seconds()
    return math.ceil(seconds / 86400)


def format_interval(days: int) -> str:
    """Human-readable interval, e.g. '6 days' or '2 months'."""
    if days <= 0:
        return "Now"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    if days < 30:
        weeks = round_half_up(days / 7)
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    if days < 365:
        months = round_half_up(days / 30)
        return "1 month" if months == 1 else f"{months} months"
    years = round_half_up(days / 365)
    return "1 year" if years == 1 else f"{years} years"

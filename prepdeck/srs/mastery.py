"""
Mastery classification for scheduled cards.

Mastery is never stored. It is recomputed from the ScheduleState every time
it is needed so it cannot drift away from the state it summarizes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from .schedule import ScheduleState, utc_now
from .scheduler import is_due

if TYPE_CHECKING:
    from config import Settings


class MasteryLevel(str, Enum):
    """Learning stage of a card."""

    NEW = "new"  # Never reviewed
    LEARNING = "learning"  # Reviewed, no pass since the last lapse
    REVIEWING = "reviewing"  # Building long-term memory
    MASTERED = "mastered"  # Well memorized

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class MasteryPolicy:
    """
    Repetition-count thresholds for the mastery levels.

    A card with repetition_count 0 is LEARNING, at least
    reviewing_min_repetitions is REVIEWING, and at least
    mastered_min_repetitions is MASTERED.
    """

    reviewing_min_repetitions: int = 1
    mastered_min_repetitions: int = 5

    def __post_init__(self) -> None:
        if self.reviewing_min_repetitions < 1:
            raise ValueError("reviewing_min_repetitions must be at least 1")
        if self.mastered_min_repetitions <= self.reviewing_min_repetitions:
            raise ValueError(
                "mastered_min_repetitions must be greater than reviewing_min_repetitions"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> MasteryPolicy:
        return cls(
            reviewing_min_repetitions=settings.mastery_reviewing_min_repetitions,
            mastered_min_repetitions=settings.mastery_mastered_min_repetitions,
        )


DEFAULT_POLICY = MasteryPolicy()


def classify_mastery(
    state: ScheduleState | None,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> MasteryLevel:
    """
    Map a schedule state to its mastery level.

    Args:
        state: The card's state, None if it was never reviewed
        policy: Repetition thresholds

    Returns:
        MasteryLevel
    """
    if state is None:
        return MasteryLevel.NEW

    reps = state.repetition_count
    if reps >= policy.mastered_min_repetitions:
        return MasteryLevel.MASTERED
    if reps >= policy.reviewing_min_repetitions:
        return MasteryLevel.REVIEWING
    return MasteryLevel.LEARNING


def mastery_distribution(
    states: Iterable[ScheduleState | None],
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> dict[MasteryLevel, int]:
    """Count cards per mastery level. Every level is present in the result."""
    counts = {level: 0 for level in MasteryLevel}
    for state in states:
        counts[classify_mastery(state, policy)] += 1
    return counts


@dataclass(frozen=True)
class StudyStats:
    """Deck overview for dashboards."""

    total: int
    new: int
    learning: int
    reviewing: int
    mastered: int
    due_today: int
    overdue: int


def calculate_study_stats(
    states: Iterable[ScheduleState | None],
    now: datetime | None = None,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> StudyStats:
    """
    Summarize a deck by mastery level and due status.

    due_today counts every due card, new cards included. overdue counts
    scheduled cards whose review date is at least a full day in the past.
    """
    now = now or utc_now()
    counts = {level: 0 for level in MasteryLevel}
    total = due_today = overdue = 0

    for state in states:
        total += 1
        counts[classify_mastery(state, policy)] += 1
        if is_due(state, now):
            due_today += 1
            if state is not None and state.days_overdue(now) >= 1:
                overdue += 1

    return StudyStats(
        total=total,
        new=counts[MasteryLevel.NEW],
        learning=counts[MasteryLevel.LEARNING],
        reviewing=counts[MasteryLevel.REVIEWING],
        mastered=counts[MasteryLevel.MASTERED],
        due_today=due_today,
        overdue=overdue,
    )

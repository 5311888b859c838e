"""
Readiness scoring.

Both readiness scores are weighted composites of ratio factors:

    score = sum(weight * numerator / denominator)

A factor whose denominator is zero has nothing to measure. It contributes
weight * empty_credit instead, 0.5 by default, so an empty checklist or an
empty deck reads as "unknown" rather than as perfect or failing.

Scores are always recomputed from their inputs and never stored.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .mastery import DEFAULT_POLICY, MasteryLevel, MasteryPolicy, classify_mastery
from .schedule import ScheduleState, round_half_up, utc_now

# =============================================================================
# Composite Pattern
# =============================================================================


@dataclass(frozen=True)
class ReadinessFactor:
    """One weighted ratio in a readiness score."""

    name: str
    weight: float
    numerator: float
    denominator: float
    empty_credit: float = 0.5

    @property
    def contribution(self) -> float:
        if self.denominator <= 0:
            return self.weight * self.empty_credit
        return self.weight * (self.numerator / self.denominator)


def composite_score(factors: Iterable[ReadinessFactor]) -> int:
    """Sum factor contributions, round half up and clamp to 0-100."""
    total = sum(factor.contribution for factor in factors)
    return min(100, max(0, round_half_up(total)))


# =============================================================================
# Flashcard Readiness
# =============================================================================

# Credit per card by mastery level
MASTERY_CREDIT = {
    MasteryLevel.MASTERED: 1.0,
    MasteryLevel.REVIEWING: 0.7,
    MasteryLevel.LEARNING: 0.4,
    MasteryLevel.NEW: 0.1,
}
OVERDUE_PENALTY_PER_DAY = 0.05
MIN_CARD_CREDIT = 0.1


def card_credit(
    state: ScheduleState | None,
    now: datetime,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> float:
    """
    Readiness credit (0.1-1.0) for a single card.

    Reviewed cards lose credit for every whole day they are overdue.
    """
    level = classify_mastery(state, policy)
    credit = MASTERY_CREDIT[level]

    if state is not None and level is not MasteryLevel.NEW:
        days_overdue = math.floor(state.days_overdue(now))
        if days_overdue > 0:
            credit = max(MIN_CARD_CREDIT, credit - days_overdue * OVERDUE_PENALTY_PER_DAY)

    return credit


def flashcard_readiness(
    states: Iterable[ScheduleState | None],
    now: datetime | None = None,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> int:
    """
    Readiness (0-100) of a deck of flashcards.

    Mastered and reviewing cards carry most of the weight. An empty deck
    scores 50.
    """
    now = now or utc_now()
    states = list(states)
    factor = ReadinessFactor(
        name="mastery",
        weight=100,
        numerator=sum(card_credit(state, now, policy) for state in states),
        denominator=len(states),
    )
    return composite_score([factor])


# =============================================================================
# Interview-Prep Readiness
# =============================================================================


class Priority(str, Enum):
    """Checklist item priority."""

    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


class Likelihood(str, Enum):
    """How likely a predicted question is to come up."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ChecklistItem:
    """A prep checklist entry."""

    label: str
    priority: Priority = Priority.REQUIRED
    completed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChecklistItem:
        """Accepts either a completed flag or a status string ('completed', 'in-progress', ...)."""
        completed = data.get("completed")
        if completed is None:
            completed = data.get("status") == "completed"
        return cls(
            label=data.get("label", ""),
            priority=Priority(data.get("priority", Priority.REQUIRED.value)),
            completed=bool(completed),
        )


@dataclass(frozen=True)
class PredictedQuestion:
    """An interview question expected for an application."""

    question: str
    likelihood: Likelihood = Likelihood.MEDIUM
    is_prepared: bool = False
    practice_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PredictedQuestion:
        return cls(
            question=data.get("question", ""),
            likelihood=Likelihood(data.get("likelihood", Likelihood.MEDIUM.value)),
            is_prepared=bool(data.get("is_prepared", data.get("isPrepared", False))),
            practice_count=int(data.get("practice_count", data.get("practiceCount", 0))),
        )


CHECKLIST_WEIGHT = 50
QUESTION_WEIGHT = 30
PRACTICE_WEIGHT = 20


def interview_prep_factors(
    checklist: Sequence[ChecklistItem],
    questions: Sequence[PredictedQuestion],
) -> list[ReadinessFactor]:
    """
    Build the three interview-prep factors.

    - checklist: completed required items / required items (50%)
    - questions: prepared high-likelihood questions / high-likelihood questions (30%)
    - practice: questions practiced at least once / all questions (20%)

    With no predicted questions at all neither question factor gives
    credit: an empty checklist and an empty question list score 25.
    High-likelihood questions missing from a non-empty list still count as
    neutral.
    """
    required = [item for item in checklist if item.priority is Priority.REQUIRED]
    high = [q for q in questions if q.likelihood is Likelihood.HIGH]

    return [
        ReadinessFactor(
            name="checklist",
            weight=CHECKLIST_WEIGHT,
            numerator=sum(1 for item in required if item.completed),
            denominator=len(required),
        ),
        ReadinessFactor(
            name="questions",
            weight=QUESTION_WEIGHT,
            numerator=sum(1 for q in high if q.is_prepared),
            denominator=len(high),
            empty_credit=0.5 if questions else 0.0,
        ),
        ReadinessFactor(
            name="practice",
            weight=PRACTICE_WEIGHT,
            numerator=sum(1 for q in questions if q.practice_count > 0),
            denominator=len(questions),
            empty_credit=0.0,
        ),
    ]


def interview_prep_readiness(
    checklist: Sequence[ChecklistItem],
    questions: Sequence[PredictedQuestion],
) -> int:
    """Readiness (0-100) for an upcoming interview."""
    return composite_score(interview_prep_factors(checklist, questions))


def interview_prep_breakdown(
    checklist: Sequence[ChecklistItem],
    questions: Sequence[PredictedQuestion],
) -> dict[str, float]:
    """Per-factor contributions, for display next to the score."""
    return {
        factor.name: round(factor.contribution, 1)
        for factor in interview_prep_factors(checklist, questions)
    }

"""
Schedule state and rating scale for reviewable cards.

A card (technical answer, story, flashcard) owns a ScheduleState once it has
been reviewed. Cards without one are "new". The state is immutable: the
scheduler returns a fresh instance after every review and the caller persists it.

Rating Scale (0-5):
0 - Complete blackout, no recall
1 - Incorrect response, but recognized answer when shown
2 - Incorrect response, but recalled easily after seeing answer
3 - Correct response with serious difficulty
4 - Correct response with some hesitation
5 - Perfect response
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import IntEnum
from typing import Any

from loguru import logger

DEFAULT_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
PASSING_GRADE = 3


# =============================================================================
# Ratings
# =============================================================================


class InvalidRating(ValueError):
    """Raised when a rating is outside the 0-5 scale."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Rating must be an integer between 0 and 5, got {rating!r}")


class Rating(IntEnum):
    """SM-2 recall grades."""

    BLACKOUT = 0
    FAILED = 1
    HARD = 2
    GOOD = 3
    EASY = 4
    PERFECT = 5

    @property
    def label(self) -> str:
        return _RATING_LABELS[self]

    @property
    def is_pass(self) -> bool:
        return self >= PASSING_GRADE


_RATING_LABELS = {
    Rating.BLACKOUT: "Complete blank",
    Rating.FAILED: "Incorrect",
    Rating.HARD: "Struggled",
    Rating.GOOD: "Some hesitation",
    Rating.EASY: "Little hesitation",
    Rating.PERFECT: "Instant recall",
}


def validate_rating(rating: object) -> Rating:
    """
    Coerce a raw rating into a Rating.

    Args:
        rating: Value supplied by the caller

    Returns:
        The matching Rating

    Raises:
        InvalidRating: If the value is not an integer in [0, 5]
    """
    # bool is an int subclass; True/False are never valid grades
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(rating)
    if not 0 <= rating <= 5:
        raise InvalidRating(rating)
    return Rating(rating)


# =============================================================================
# Schedule State
# =============================================================================


@dataclass(frozen=True)
class ScheduleState:
    """SM-2 scheduling state for a single card."""

    easiness_factor: float = DEFAULT_EASINESS_FACTOR
    repetition_count: int = 0  # Consecutive passes since the last lapse
    interval_days: int = 0  # Days until next review, as of the last update
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None

    @property
    def is_new(self) -> bool:
        """A state that was never scheduled counts as a new card."""
        return self.next_review_at is None

    def days_overdue(self, now: datetime) -> float:
        """Fractional days past the scheduled review (0 if not yet due)."""
        if self.next_review_at is None:
            return 0.0
        delta = as_utc(now) - self.next_review_at
        return max(0.0, delta.total_seconds() / 86400)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with ISO-8601 timestamps."""
        return {
            "easiness_factor": self.easiness_factor,
            "repetition_count": self.repetition_count,
            "interval_days": self.interval_days,
            "last_reviewed_at": _isoformat(self.last_reviewed_at),
            "next_review_at": _isoformat(self.next_review_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduleState:
        """
        Load a state from a persisted dict.

        Accepts both snake_case keys and the camelCase keys written by the
        browser storage layer (easinessFactor, repetitionCount, interval,
        lastReviewDate, nextReviewDate).
        """
        easiness = _first(data, "easiness_factor", "easinessFactor", default=DEFAULT_EASINESS_FACTOR)
        repetitions = _first(data, "repetition_count", "repetitionCount", default=0)
        interval = _first(data, "interval_days", "intervalDays", "interval", default=0)
        last = _first(data, "last_reviewed_at", "lastReviewedAt", "lastReviewDate")
        nxt = _first(data, "next_review_at", "nextReviewAt", "nextReviewDate")

        easiness = float(easiness)
        if easiness < MIN_EASINESS_FACTOR:
            logger.warning(
                f"Stored easiness factor {easiness} is below {MIN_EASINESS_FACTOR}; clamping"
            )
            easiness = MIN_EASINESS_FACTOR

        repetitions = int(repetitions)
        interval = int(interval)
        if repetitions < 0 or interval < 0:
            logger.warning(
                f"Negative schedule values (repetitions={repetitions}, interval={interval}); "
                "resetting to 0"
            )
            repetitions = max(0, repetitions)
            interval = max(0, interval)

        return cls(
            easiness_factor=easiness,
            repetition_count=repetitions,
            interval_days=interval,
            last_reviewed_at=parse_timestamp(last),
            next_review_at=parse_timestamp(nxt),
        )


def next_review_from(reviewed_at: datetime, interval_days: int) -> datetime:
    """Due timestamp for a review made at reviewed_at."""
    return reviewed_at + timedelta(days=interval_days)


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (round() rounds halves to even)."""
    return math.floor(value + 0.5)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp.

    Naive values are assumed to be UTC so that comparisons with aware
    datetimes never raise.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        # fromisoformat on 3.11+ handles the trailing "Z" written by JS toISOString()
        parsed = datetime.fromisoformat(value)
    return as_utc(parsed)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default

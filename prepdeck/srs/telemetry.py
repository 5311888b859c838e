"""
Study Session Telemetry and Progress.

Tracks per-session metrics while cards are being reviewed:
- Rating distribution and average rating
- Success rate (ratings >= 3)
- Cards reviewed / remaining and session duration

and folds closed sessions into the durable per-profile StudyProgress.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, tzinfo
from typing import Any

from loguru import logger

from .schedule import PASSING_GRADE, as_utc, parse_timestamp, utc_now, validate_rating
from .streaks import calculate_streak

DEFAULT_PROFILE_ID = "default"


class SessionClosedError(RuntimeError):
    """Raised when a closed session is modified."""


# =============================================================================
# Study Session
# =============================================================================


@dataclass
class ReviewEvent:
    """A single review recorded in a session."""

    entity_id: str
    rating: int
    reviewed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "rating": self.rating,
            "reviewed_at": self.reviewed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewEvent:
        return cls(
            entity_id=data["entity_id"],
            rating=int(data["rating"]),
            reviewed_at=parse_timestamp(data["reviewed_at"]),
        )


def _empty_ratings() -> dict[int, int]:
    return {rating: 0 for rating in range(6)}


@dataclass
class StudySession:
    """
    Running aggregate for one study session.

    Mutated once per recorded review; immutable once closed.
    """

    mode: str
    total_cards: int
    started_at: datetime = field(default_factory=utc_now)
    application_id: str | None = None
    profile_id: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    cards_reviewed: int = 0
    cards_remaining: int = -1
    ratings: dict[int, int] = field(default_factory=_empty_ratings)
    average_rating: float = 0.0
    ended_at: datetime | None = None
    abandoned: bool = False
    events: list[ReviewEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.cards_remaining < 0:
            self.cards_remaining = self.total_cards
        # Loaded sessions may omit buckets
        for rating in range(6):
            self.ratings.setdefault(rating, 0)

    # =========================================================================
    # Recording
    # =========================================================================

    def record(self, entity_id: str, rating: int, now: datetime | None = None) -> None:
        """
        Record one review.

        Args:
            entity_id: The reviewed card
            rating: SM-2 rating (0-5)
            now: Review time

        Raises:
            InvalidRating: Rating outside 0-5 (session unchanged)
            SessionClosedError: Session already ended
        """
        grade = validate_rating(rating)
        if self.is_closed:
            raise SessionClosedError(f"Session {self.id} is closed")

        self.ratings[int(grade)] += 1
        self.cards_reviewed += 1
        self.cards_remaining = max(0, self.cards_remaining - 1)
        self.average_rating = self._compute_average()
        reviewed_at = as_utc(now) if now is not None else utc_now()
        self.events.append(ReviewEvent(entity_id, int(grade), reviewed_at))

    def close(self, now: datetime | None = None, abandoned: bool = False) -> None:
        """Mark the session as ended."""
        if self.is_closed:
            raise SessionClosedError(f"Session {self.id} is already closed")
        self.ended_at = as_utc(now) if now is not None else utc_now()
        self.abandoned = abandoned
        logger.info(
            f"Session {self.id} {'abandoned' if abandoned else 'completed'}: "
            f"{self.cards_reviewed}/{self.total_cards} cards, "
            f"avg rating {self.average_rating:.2f}"
        )

    def _compute_average(self) -> float:
        total = self.total_ratings
        if total == 0:
            return 0.0
        rating_sum = sum(rating * count for rating, count in self.ratings.items())
        return round(rating_sum / total, 2)

    # =========================================================================
    # Basic Metrics
    # =========================================================================

    @property
    def is_closed(self) -> bool:
        return self.ended_at is not None

    @property
    def total_ratings(self) -> int:
        return sum(self.ratings.values())

    @property
    def has_ratings(self) -> bool:
        return self.total_ratings > 0

    @property
    def correct_count(self) -> int:
        return sum(count for rating, count in self.ratings.items() if rating >= PASSING_GRADE)

    @property
    def success_rate(self) -> float:
        """
        Percentage of passing ratings.

        0.0 when nothing was rated yet; callers should check has_ratings
        and show that case as neutral rather than as a failure.
        """
        total = self.total_ratings
        if total == 0:
            return 0.0
        return self.correct_count / total * 100

    @property
    def duration_minutes(self) -> int:
        """Whole minutes from start to end (or to now while open)."""
        end = self.ended_at or utc_now()
        return round((end - self.started_at).total_seconds() / 60)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode,
            "application_id": self.application_id,
            "profile_id": self.profile_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "total_cards": self.total_cards,
            "cards_reviewed": self.cards_reviewed,
            "cards_remaining": self.cards_remaining,
            # JSON object keys are strings
            "ratings": {str(rating): count for rating, count in self.ratings.items()},
            "average_rating": self.average_rating,
            "abandoned": self.abandoned,
            "events": [event.to_dict() for event in self.events],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudySession:
        started_at = parse_timestamp(data.get("started_at"))
        return cls(
            id=data.get("id") or uuid.uuid4().hex,
            mode=data.get("mode", "daily"),
            application_id=data.get("application_id"),
            profile_id=data.get("profile_id"),
            started_at=started_at or utc_now(),
            ended_at=parse_timestamp(data.get("ended_at")),
            total_cards=int(data.get("total_cards", 0)),
            cards_reviewed=int(data.get("cards_reviewed", 0)),
            cards_remaining=int(data.get("cards_remaining", -1)),
            ratings={int(k): int(v) for k, v in (data.get("ratings") or {}).items()},
            average_rating=float(data.get("average_rating", 0.0)),
            abandoned=bool(data.get("abandoned", False)),
            events=[ReviewEvent.from_dict(event) for event in data.get("events") or []],
        )


# =============================================================================
# Study Progress
# =============================================================================


@dataclass(frozen=True)
class StudyProgress:
    """Durable study totals for one profile. Updated only at session close."""

    profile_id: str = DEFAULT_PROFILE_ID
    current_streak: int = 0
    longest_streak: int = 0
    total_cards_studied: int = 0
    total_reviews: int = 0
    average_rating: float = 0.0
    sessions_completed: int = 0
    total_study_time_minutes: int = 0
    last_study_date: datetime | None = None
    updated_at: datetime | None = None

    def apply_session(
        self,
        session: StudySession,
        study_dates: Iterable[datetime | date] = (),
        today: date | None = None,
        tz: tzinfo | None = None,
    ) -> StudyProgress:
        """
        Fold a closed session into the totals.

        Args:
            session: The session just ended
            study_dates: Start times of previously completed sessions
            today: Reference day for the streak (defaults to the session end day)
            tz: Timezone for calendar-day bucketing

        Returns:
            New StudyProgress

        Raises:
            SessionClosedError: If the session is still open
        """
        if not session.is_closed:
            raise SessionClosedError("Only closed sessions can be applied to progress")

        ended_at = session.ended_at
        if today is None:
            today = (ended_at.astimezone(tz) if tz is not None else ended_at).date()

        streak = calculate_streak([*study_dates, session.started_at], today=today, tz=tz)

        reviewed = session.cards_reviewed
        combined_reviews = self.total_reviews + reviewed
        if combined_reviews:
            average = (
                self.average_rating * self.total_reviews + session.average_rating * reviewed
            ) / combined_reviews
        else:
            average = self.average_rating

        return replace(
            self,
            current_streak=streak.current,
            longest_streak=max(self.longest_streak, streak.longest),
            total_cards_studied=self.total_cards_studied + reviewed,
            total_reviews=combined_reviews,
            average_rating=round(average, 2),
            sessions_completed=self.sessions_completed + 1,
            total_study_time_minutes=self.total_study_time_minutes + session.duration_minutes,
            last_study_date=ended_at,
            updated_at=ended_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile_id": self.profile_id,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_cards_studied": self.total_cards_studied,
            "total_reviews": self.total_reviews,
            "average_rating": self.average_rating,
            "sessions_completed": self.sessions_completed,
            "total_study_time_minutes": self.total_study_time_minutes,
            "last_study_date": self.last_study_date.isoformat() if self.last_study_date else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

"""
Spaced-repetition scheduling and readiness scoring.

Pure, synchronous building blocks for interview rehearsal. Nothing here
performs I/O; callers persist the states and sessions that come back.

Components:
- SM2Scheduler: Review interval updates
- classify_mastery: Mastery level from schedule state
- build_queue: Due/new study queue under a mode
- calculate_streak: Current and longest study streaks
- StudySession / StudyProgress: Session aggregation and durable totals
- flashcard_readiness / interview_prep_readiness: 0-100 readiness scores
- StudySessionDriver: start/record/end orchestration for a UI
"""

from .mastery import (
    MasteryLevel,
    MasteryPolicy,
    StudyStats,
    calculate_study_stats,
    classify_mastery,
    mastery_distribution,
)
from .queue_builder import QueueCandidate, QueueMode, StudyMode, build_queue, queue_mode_for
from .readiness import (
    ChecklistItem,
    Likelihood,
    PredictedQuestion,
    Priority,
    ReadinessFactor,
    composite_score,
    flashcard_readiness,
    interview_prep_breakdown,
    interview_prep_readiness,
)
from .schedule import InvalidRating, Rating, ScheduleState, validate_rating
from .scheduler import SM2Config, SM2Scheduler, days_until_review, format_interval, is_due
from .session_driver import ActiveStudySession, StudySessionDriver, UnknownCardError
from .streaks import StreakSummary, calculate_streak
from .telemetry import ReviewEvent, SessionClosedError, StudyProgress, StudySession

__all__ = [
    # Schedule state
    "ScheduleState",
    "Rating",
    "InvalidRating",
    "validate_rating",
    # Scheduling
    "SM2Config",
    "SM2Scheduler",
    "is_due",
    "days_until_review",
    "format_interval",
    # Mastery
    "MasteryLevel",
    "MasteryPolicy",
    "StudyStats",
    "classify_mastery",
    "mastery_distribution",
    "calculate_study_stats",
    # Queue
    "QueueCandidate",
    "QueueMode",
    "StudyMode",
    "build_queue",
    "queue_mode_for",
    # Streaks
    "StreakSummary",
    "calculate_streak",
    # Sessions
    "ReviewEvent",
    "StudySession",
    "StudyProgress",
    "SessionClosedError",
    "StudySessionDriver",
    "ActiveStudySession",
    "UnknownCardError",
    # Readiness
    "ReadinessFactor",
    "composite_score",
    "flashcard_readiness",
    "ChecklistItem",
    "PredictedQuestion",
    "Priority",
    "Likelihood",
    "interview_prep_readiness",
    "interview_prep_breakdown",
]

"""
Study queue construction.

Builds ordered review queues by:
1. Restricting the pool to one application (scoped modes only)
2. Splitting cards into overdue, new and not-yet-due
3. Taking the most overdue cards first, then new cards in pool order

Cards that are scheduled but not yet due never enter the queue.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from .schedule import ScheduleState, as_utc, utc_now

if TYPE_CHECKING:
    from config import Settings


class StudyMode(str, Enum):
    """Named study session presets."""

    DAILY = "daily"  # Daily review
    QUICK = "quick"  # 5-minute practice
    ALL_DUE = "all-due"  # Every overdue card, no new ones
    APPLICATION = "application"  # Daily limits, one job application only


@dataclass(frozen=True)
class QueueCandidate:
    """A card offered to the queue builder by the persistence layer."""

    entity_id: str
    state: ScheduleState | None = None
    application_id: str | None = None


@dataclass(frozen=True)
class QueueMode:
    """
    Limits for one queue build.

    max_review=None means no cap on due cards. interleave_every=N mixes one
    new card in after every N review cards instead of appending new cards
    at the end.
    """

    max_new: int
    max_review: int | None
    application_id: str | None = None
    interleave_every: int | None = None

    def __post_init__(self) -> None:
        if self.max_new < 0:
            raise ValueError("max_new cannot be negative")
        if self.max_review is not None and self.max_review < 0:
            raise ValueError("max_review cannot be negative")
        if self.interleave_every is not None and self.interleave_every < 1:
            raise ValueError("interleave_every must be at least 1")

    @property
    def max_cards(self) -> int | None:
        """Upper bound on queue length (None when unbounded)."""
        if self.max_review is None:
            return None
        return self.max_new + self.max_review


def queue_mode_for(
    mode: StudyMode | str,
    application_id: str | None = None,
    settings: Settings | None = None,
) -> QueueMode:
    """
    Resolve a named study mode to concrete queue limits.

    Args:
        mode: Study mode (enum or its string value)
        application_id: Required for application mode, ignored otherwise
        settings: Optional settings overriding the default limits

    Returns:
        QueueMode

    Raises:
        ValueError: Unknown mode, or application mode without an application id
    """
    mode = StudyMode(mode)

    daily_new, daily_review = 10, 50
    quick_new, quick_review = 3, 10
    if settings is not None:
        daily_new, daily_review = settings.daily_max_new, settings.daily_max_review
        quick_new, quick_review = settings.quick_max_new, settings.quick_max_review

    if mode is StudyMode.DAILY:
        return QueueMode(max_new=daily_new, max_review=daily_review)
    if mode is StudyMode.QUICK:
        return QueueMode(max_new=quick_new, max_review=quick_review)
    if mode is StudyMode.ALL_DUE:
        return QueueMode(max_new=0, max_review=None)

    if not application_id:
        raise ValueError("application mode requires an application_id")
    return QueueMode(max_new=daily_new, max_review=daily_review, application_id=application_id)


def build_queue(
    pool: Iterable[QueueCandidate],
    mode: QueueMode,
    now: datetime | None = None,
) -> list[str]:
    """
    Select and order the cards to review now.

    Args:
        pool: Candidate cards with their optional schedule state
        mode: Queue limits and optional application scope
        now: Reference time (defaults to the current UTC time)

    Returns:
        Entity ids, overdue cards (most overdue first) before new cards.
        An empty pool or a scope without matching cards yields [].
    """
    now = as_utc(now) if now is not None else utc_now()
    candidates = list(pool)

    if mode.application_id is not None:
        candidates = [c for c in candidates if c.application_id == mode.application_id]
        if not candidates:
            logger.info(f"No cards found for application {mode.application_id}")
            return []

    overdue: list[tuple[float, int, str]] = []
    new_ids: list[str] = []

    for position, candidate in enumerate(candidates):
        state = candidate.state
        if state is None or state.next_review_at is None:
            new_ids.append(candidate.entity_id)
        elif state.next_review_at <= now:
            lateness = (now - state.next_review_at).total_seconds()
            # position keeps equally-late cards in pool order
            overdue.append((-lateness, position, candidate.entity_id))

    overdue.sort()
    review_ids = [entity_id for _, _, entity_id in overdue]
    if mode.max_review is not None:
        review_ids = review_ids[: mode.max_review]
    new_ids = new_ids[: mode.max_new]

    if mode.interleave_every:
        queue = _interleave(review_ids, new_ids, mode.interleave_every)
    else:
        queue = review_ids + new_ids

    logger.debug(
        f"Queue built: {len(review_ids)} due + {len(new_ids)} new = {len(queue)} cards "
        f"(pool={len(candidates)})"
    )
    return queue


def _interleave(review_ids: list[str], new_ids: list[str], every: int) -> list[str]:
    """Insert one new card after every `every` review cards."""
    result: list[str] = []
    review_index = 0
    new_index = 0

    while review_index < len(review_ids) or new_index < len(new_ids):
        batch = review_ids[review_index : review_index + every]
        result.extend(batch)
        review_index += len(batch)

        if new_index < len(new_ids):
            result.append(new_ids[new_index])
            new_index += 1

    return result

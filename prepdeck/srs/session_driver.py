"""
Study session driver.

Wires the scheduler, queue builder and session telemetry together for a UI:

    driver = StudySessionDriver()
    active = driver.start_session(pool, StudyMode.DAILY, profile_id="alex")
    while (card_id := active.current_entity_id) is not None:
        if user_skipped:
            active.skip()
            continue
        new_state, session = active.record_review(card_id, rating)
        ...persist new_state...
    session, progress = active.end_session(progress, study_dates)

The active session is an explicit handle owned by the caller. Several
handles (one per profile, say) can be open at the same time.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, tzinfo

from loguru import logger

from config import Settings, get_settings

from .mastery import DEFAULT_POLICY, MasteryLevel, MasteryPolicy, classify_mastery
from .queue_builder import QueueCandidate, StudyMode, build_queue, queue_mode_for
from .schedule import ScheduleState, as_utc, utc_now, validate_rating
from .scheduler import SM2Config, SM2Scheduler
from .streaks import resolve_timezone
from .telemetry import DEFAULT_PROFILE_ID, SessionClosedError, StudyProgress, StudySession


class UnknownCardError(LookupError):
    """Raised when a review names a card outside the session pool."""


class ActiveStudySession:
    """Handle for one open study session."""

    def __init__(
        self,
        session: StudySession,
        queue: list[str],
        states: dict[str, ScheduleState | None],
        scheduler: SM2Scheduler,
        policy: MasteryPolicy,
        tz: tzinfo | None = None,
    ):
        self.session = session
        self.queue = queue
        self.states = states
        self.scheduler = scheduler
        self.policy = policy
        self.tz = tz
        self._reviewed: set[str] = set()

    @property
    def current_entity_id(self) -> str | None:
        """First queued card not reviewed yet, None when the queue is done."""
        for entity_id in self.queue:
            if entity_id not in self._reviewed:
                return entity_id
        return None

    def mastery_of(self, entity_id: str) -> MasteryLevel:
        return classify_mastery(self.states.get(entity_id), self.policy)

    def skip(self) -> str | None:
        """
        Move the current card to the back of the queue without rating it.

        Session counters and schedule states are left alone.

        Returns:
            The new current card, None when nothing is left to review
        """
        if self.session.is_closed:
            raise SessionClosedError(f"Session {self.session.id} is closed")
        current = self.current_entity_id
        if current is not None:
            self.queue.remove(current)
            self.queue.append(current)
            logger.debug(f"Skipped {current} in session {self.session.id}")
        return self.current_entity_id

    def record_review(
        self,
        entity_id: str,
        rating: int,
        now: datetime | None = None,
    ) -> tuple[ScheduleState, StudySession]:
        """
        Apply a rating to a card.

        Args:
            entity_id: Card being reviewed (must be in the session pool)
            rating: SM-2 rating (0-5)
            now: Review time

        Returns:
            (new ScheduleState to persist, updated StudySession)

        Raises:
            InvalidRating: Rating outside 0-5; nothing is changed
            UnknownCardError: Card not in the pool
            SessionClosedError: Session already ended
        """
        validate_rating(rating)
        if self.session.is_closed:
            raise SessionClosedError(f"Session {self.session.id} is closed")
        if entity_id not in self.states:
            raise UnknownCardError(entity_id)

        now = as_utc(now) if now is not None else utc_now()
        new_state = self.scheduler.calculate_next_review(self.states[entity_id], rating, now)
        self.session.record(entity_id, rating, now)
        self.states[entity_id] = new_state
        self._reviewed.add(entity_id)

        logger.debug(
            f"Recorded review for {entity_id}: rating={rating}, "
            f"next_review={new_state.next_review_at}, interval={new_state.interval_days}d"
        )
        return new_state, self.session

    def end_session(
        self,
        progress: StudyProgress | None = None,
        study_dates: Iterable[datetime | date] = (),
        now: datetime | None = None,
    ) -> tuple[StudySession, StudyProgress]:
        """
        Close the session and fold it into the profile's progress.

        Args:
            progress: Progress before this session (fresh record for the
                session's profile if None)
            study_dates: Start times of earlier completed sessions
            now: End time

        Returns:
            (closed StudySession, updated StudyProgress)

        Raises:
            ValueError: progress belongs to another profile
        """
        profile_id = self.session.profile_id or DEFAULT_PROFILE_ID
        if progress is not None and progress.profile_id != profile_id:
            raise ValueError(
                f"Progress for profile {progress.profile_id!r} cannot take a session "
                f"for profile {profile_id!r}"
            )
        self.session.close(now)
        progress = progress or StudyProgress(profile_id=profile_id)
        updated = progress.apply_session(self.session, study_dates, tz=self.tz)
        return self.session, updated

    def abandon(self, now: datetime | None = None) -> StudySession:
        """Close the session without counting it towards progress."""
        self.session.close(now, abandoned=True)
        return self.session


class StudySessionDriver:
    """
    Starts study sessions over a card pool.

    Holds configuration only; all session state lives in the returned handles.
    """

    def __init__(
        self,
        scheduler: SM2Scheduler | None = None,
        policy: MasteryPolicy = DEFAULT_POLICY,
        settings: Settings | None = None,
        tz: tzinfo | None = None,
    ):
        self.scheduler = scheduler or SM2Scheduler()
        self.policy = policy
        self.settings = settings
        self.tz = tz

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> StudySessionDriver:
        settings = settings or get_settings()
        return cls(
            scheduler=SM2Scheduler(SM2Config.from_settings(settings)),
            policy=MasteryPolicy.from_settings(settings),
            settings=settings,
            tz=resolve_timezone(settings.study_timezone),
        )

    def start_session(
        self,
        pool: Iterable[QueueCandidate],
        mode: StudyMode | str = StudyMode.DAILY,
        application_id: str | None = None,
        profile_id: str | None = None,
        now: datetime | None = None,
    ) -> ActiveStudySession:
        """
        Build the queue for a mode and open a session sized to it.

        Args:
            pool: All cards the caller can offer
            mode: Study mode
            application_id: Scope for application mode
            profile_id: Profile the session counts towards (default profile if None)
            now: Session start time

        Returns:
            ActiveStudySession handle (its queue may be empty)
        """
        now = as_utc(now) if now is not None else utc_now()
        mode = StudyMode(mode)
        candidates = list(pool)
        queue_mode = queue_mode_for(mode, application_id, self.settings)
        queue = build_queue(candidates, queue_mode, now)

        session = StudySession(
            mode=mode.value,
            application_id=queue_mode.application_id,
            profile_id=profile_id,
            total_cards=len(queue),
            started_at=now,
        )
        logger.info(f"Session {session.id} started: mode={mode.value}, {len(queue)} cards")

        return ActiveStudySession(
            session=session,
            queue=queue,
            states={c.entity_id: c.state for c in candidates},
            scheduler=self.scheduler,
            policy=self.policy,
            tz=self.tz,
        )

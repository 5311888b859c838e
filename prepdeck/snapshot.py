"""
Snapshot loading for the inspection CLI.

A snapshot is a JSON export written by the storage layer:

    {
        "cards": [{"id": "...", "application_id": "...", "schedule": {...} | null}],
        "sessions": [{"started_at": "...", "ended_at": "..." | null}],
        "checklist": [{"label": "...", "priority": "required", "completed": true}],
        "questions": [{"question": "...", "likelihood": "high", "is_prepared": false,
                       "practice_count": 0}]
    }

Every key is optional. The CLI only reads snapshots, it never writes them.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .srs.queue_builder import QueueCandidate
from .srs.readiness import ChecklistItem, PredictedQuestion
from .srs.schedule import ScheduleState, parse_timestamp


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be read or validated."""


class CardRecord(BaseModel):
    """A card as exported by storage."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    application_id: str | None = Field(
        default=None, validation_alias=AliasChoices("application_id", "applicationId")
    )
    schedule: dict[str, Any] | None = Field(
        default=None, validation_alias=AliasChoices("schedule", "srsData", "srs_data")
    )

    def to_candidate(self) -> QueueCandidate:
        state = ScheduleState.from_dict(self.schedule) if self.schedule else None
        return QueueCandidate(entity_id=self.id, state=state, application_id=self.application_id)


class SessionRecord(BaseModel):
    """A past study session (only timing matters here)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    started_at: datetime = Field(validation_alias=AliasChoices("started_at", "startedAt"))
    ended_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("ended_at", "endedAt")
    )

    @property
    def completed(self) -> bool:
        return self.ended_at is not None


class Snapshot(BaseModel):
    """Validated snapshot contents."""

    model_config = ConfigDict(extra="ignore")

    cards: list[CardRecord] = Field(default_factory=list)
    sessions: list[SessionRecord] = Field(default_factory=list)
    checklist: list[dict[str, Any]] = Field(default_factory=list)
    questions: list[dict[str, Any]] = Field(default_factory=list)

    def candidates(self) -> list[QueueCandidate]:
        return [card.to_candidate() for card in self.cards]

    def study_dates(self) -> list[datetime]:
        """Start times of completed sessions."""
        return [parse_timestamp(s.started_at) for s in self.sessions if s.completed]

    def checklist_items(self) -> list[ChecklistItem]:
        return [ChecklistItem.from_dict(item) for item in self.checklist]

    def predicted_questions(self) -> list[PredictedQuestion]:
        return [PredictedQuestion.from_dict(q) for q in self.questions]


def load_snapshot(path: Path) -> Snapshot:
    """
    Read and validate a snapshot file.

    Args:
        path: JSON file path

    Returns:
        Snapshot

    Raises:
        SnapshotError: Missing file, invalid JSON or invalid schema
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e

    try:
        snapshot = Snapshot.model_validate(raw)
        # Force schedule/enum parsing now so errors surface as SnapshotError
        snapshot.candidates()
        snapshot.checklist_items()
        snapshot.predicted_questions()
    except (ValidationError, ValueError, TypeError) as e:
        raise SnapshotError(f"Invalid snapshot {path}: {e}") from e

    logger.debug(
        f"Loaded snapshot {path}: {len(snapshot.cards)} cards, "
        f"{len(snapshot.sessions)} sessions"
    )
    return snapshot

"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from prepdeck.srs import QueueCandidate, ScheduleState  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time so due-date math is deterministic."""
    return datetime(2025, 3, 14, 9, 0, tzinfo=UTC)


def _scheduled(now, days_from_now, repetitions=2, interval=6, easiness=2.5):
    """Build a reviewed state due `days_from_now` days after now (negative = overdue)."""
    next_review = now + timedelta(days=days_from_now)
    return ScheduleState(
        easiness_factor=easiness,
        repetition_count=repetitions,
        interval_days=interval,
        last_reviewed_at=next_review - timedelta(days=interval),
        next_review_at=next_review,
    )


@pytest.fixture
def make_state(now):
    """Factory for reviewed states relative to the fixed now."""
    def factory(days_from_now, **kwargs):
        return _scheduled(now, days_from_now, **kwargs)
    return factory


@pytest.fixture
def sample_pool(now):
    """A mixed pool: overdue, due exactly now, new, and not-yet-due cards."""
    return [
        QueueCandidate("new-1", None, "app-a"),
        QueueCandidate("overdue-2d", _scheduled(now, -2), "app-a"),
        QueueCandidate("future-3d", _scheduled(now, 3), "app-b"),
        QueueCandidate("overdue-5d", _scheduled(now, -5), "app-b"),
        QueueCandidate("due-now", _scheduled(now, 0), "app-a"),
        QueueCandidate("new-2", None, "app-b"),
    ]


@pytest.fixture
def snapshot_file(tmp_path, now):
    """Write a snapshot JSON file like the storage layer exports."""
    data = {
        "cards": [
            {"id": "a1", "application_id": "app-a", "schedule": None},
            {
                "id": "a2",
                "application_id": "app-a",
                "schedule": _scheduled(now, -1, repetitions=5, interval=20).to_dict(),
            },
            {
                "id": "b1",
                "application_id": "app-b",
                "schedule": _scheduled(now, 4, repetitions=1, interval=1).to_dict(),
            },
        ],
        "sessions": [
            {"started_at": (now - timedelta(days=1)).isoformat(),
             "ended_at": (now - timedelta(days=1, minutes=-10)).isoformat()},
            {"started_at": now.isoformat(), "ended_at": None},
        ],
        "checklist": [
            {"label": "Review company research", "priority": "required", "status": "completed"},
            {"label": "Prepare questions", "priority": "required", "status": "not-started"},
        ],
        "questions": [
            {"question": "Design a URL shortener", "likelihood": "high",
             "is_prepared": True, "practice_count": 2},
        ],
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path

"""
Unit tests for snapshot loading.
"""

import json
from datetime import timedelta

import pytest

from prepdeck.snapshot import Snapshot, SnapshotError, load_snapshot
from prepdeck.srs import MasteryLevel, Priority, classify_mastery


class TestLoadSnapshot:
    def test_cards_become_candidates(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        candidates = {c.entity_id: c for c in snapshot.candidates()}

        assert set(candidates) == {"a1", "a2", "b1"}
        assert candidates["a1"].state is None
        assert candidates["a1"].application_id == "app-a"
        assert classify_mastery(candidates["a2"].state) is MasteryLevel.MASTERED

    def test_only_completed_sessions_count_as_study_dates(self, snapshot_file, now):
        snapshot = load_snapshot(snapshot_file)
        dates = snapshot.study_dates()

        assert len(dates) == 1
        assert dates[0].date() == (now - timedelta(days=1)).date()

    def test_checklist_and_questions(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)

        checklist = snapshot.checklist_items()
        questions = snapshot.predicted_questions()

        assert [item.completed for item in checklist] == [True, False]
        assert checklist[0].priority is Priority.REQUIRED
        assert questions[0].is_prepared
        assert questions[0].practice_count == 2

    def test_camel_case_export(self):
        snapshot = Snapshot.model_validate({
            "cards": [{
                "id": "c1",
                "applicationId": "app-x",
                "srsData": {"easinessFactor": 2.3, "repetitionCount": 1, "interval": 1,
                            "nextReviewDate": "2025-03-15T09:00:00.000Z"},
            }],
            "sessions": [{"startedAt": "2025-03-14T08:00:00Z", "endedAt": "2025-03-14T08:20:00Z"}],
        })

        candidate = snapshot.candidates()[0]
        assert candidate.application_id == "app-x"
        assert candidate.state.easiness_factor == 2.3
        assert len(snapshot.study_dates()) == 1

    def test_empty_object_is_valid(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("{}", encoding="utf-8")

        snapshot = load_snapshot(path)

        assert snapshot.candidates() == []
        assert snapshot.study_dates() == []


class TestSnapshotErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="not found"):
            load_snapshot(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SnapshotError, match="Invalid JSON"):
            load_snapshot(path)

    def test_card_without_id(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"cards": [{"schedule": None}]}), encoding="utf-8")

        with pytest.raises(SnapshotError):
            load_snapshot(path)

    def test_unknown_likelihood(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps({"questions": [{"question": "Q", "likelihood": "certain"}]}),
            encoding="utf-8",
        )

        with pytest.raises(SnapshotError):
            load_snapshot(path)

    def test_snapshot_error_is_value_error(self):
        assert issubclass(SnapshotError, ValueError)

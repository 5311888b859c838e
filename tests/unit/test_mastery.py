"""
Unit tests for mastery classification and deck statistics.
"""

import pytest

from prepdeck.srs import (
    MasteryLevel,
    MasteryPolicy,
    ScheduleState,
    SM2Scheduler,
    calculate_study_stats,
    classify_mastery,
    mastery_distribution,
)


class TestClassifyMastery:
    def test_no_state_is_new(self):
        assert classify_mastery(None) is MasteryLevel.NEW

    @pytest.mark.parametrize(
        "repetitions, expected",
        [
            (0, MasteryLevel.LEARNING),
            (1, MasteryLevel.REVIEWING),
            (4, MasteryLevel.REVIEWING),
            (5, MasteryLevel.MASTERED),
            (12, MasteryLevel.MASTERED),
        ],
    )
    def test_levels_by_repetition_count(self, repetitions, expected):
        state = ScheduleState(repetition_count=repetitions, interval_days=1)
        assert classify_mastery(state) is expected

    def test_same_state_same_level(self, make_state):
        state = make_state(-1, repetitions=3)
        assert classify_mastery(state) is classify_mastery(state)

    def test_lapse_drops_back_to_learning(self, now):
        state = ScheduleState(repetition_count=6, interval_days=40)
        lapsed = SM2Scheduler().calculate_next_review(state, 1, now)
        assert classify_mastery(lapsed) is MasteryLevel.LEARNING

    def test_custom_policy(self):
        policy = MasteryPolicy(reviewing_min_repetitions=2, mastered_min_repetitions=8)

        assert classify_mastery(ScheduleState(repetition_count=1), policy) is MasteryLevel.LEARNING
        assert classify_mastery(ScheduleState(repetition_count=5), policy) is MasteryLevel.REVIEWING
        assert classify_mastery(ScheduleState(repetition_count=8), policy) is MasteryLevel.MASTERED

    def test_inconsistent_policy_rejected(self):
        with pytest.raises(ValueError):
            MasteryPolicy(reviewing_min_repetitions=3, mastered_min_repetitions=3)
        with pytest.raises(ValueError):
            MasteryPolicy(reviewing_min_repetitions=0)

    def test_display_name(self):
        assert MasteryLevel.MASTERED.display_name == "Mastered"


class TestMasteryDistribution:
    def test_every_level_present(self):
        counts = mastery_distribution([])
        assert counts == {level: 0 for level in MasteryLevel}

    def test_counts(self):
        states = [
            None,
            None,
            ScheduleState(repetition_count=0),
            ScheduleState(repetition_count=2),
            ScheduleState(repetition_count=7),
        ]
        counts = mastery_distribution(states)

        assert counts[MasteryLevel.NEW] == 2
        assert counts[MasteryLevel.LEARNING] == 1
        assert counts[MasteryLevel.REVIEWING] == 1
        assert counts[MasteryLevel.MASTERED] == 1


class TestStudyStats:
    def test_due_and_overdue_counts(self, make_state, now):
        states = [
            None,  # new, due
            make_state(0),  # due now, not a full day late
            make_state(-3, repetitions=6),  # overdue
            make_state(2),  # not due
        ]
        stats = calculate_study_stats(states, now)

        assert stats.total == 4
        assert stats.new == 1
        assert stats.reviewing == 2
        assert stats.mastered == 1
        assert stats.due_today == 3
        assert stats.overdue == 1

    def test_empty_deck(self, now):
        stats = calculate_study_stats([], now)
        assert stats.total == 0
        assert stats.due_today == 0

"""
Unit tests for settings and their wiring into the engine.
"""

import pytest
from pydantic import ValidationError

from config import Settings
from prepdeck.srs import MasteryPolicy, SM2Config


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.sm2_initial_easiness == 2.5
        assert settings.sm2_minimum_easiness == 1.3
        assert (settings.daily_max_new, settings.daily_max_review) == (10, 50)
        assert settings.study_timezone == "UTC"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PREPDECK_QUICK_MAX_REVIEW", "4")
        monkeypatch.setenv("PREPDECK_LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.quick_max_review == 4
        assert settings.log_level == "DEBUG"

    def test_inconsistent_mastery_thresholds_rejected(self):
        with pytest.raises(ValidationError):
            Settings(mastery_reviewing_min_repetitions=4, mastery_mastered_min_repetitions=2)

    def test_initial_easiness_below_floor_rejected(self):
        with pytest.raises(ValidationError):
            Settings(sm2_initial_easiness=1.1)

    def test_negative_limits_rejected(self):
        with pytest.raises(ValidationError):
            Settings(daily_max_new=-1)


class TestSettingsWiring:
    def test_sm2_config_from_settings(self):
        config = SM2Config.from_settings(Settings(sm2_second_interval=4))
        assert config.second_interval == 4
        assert config.minimum_easiness == 1.3

    def test_mastery_policy_from_settings(self):
        policy = MasteryPolicy.from_settings(Settings(mastery_mastered_min_repetitions=8))
        assert policy.mastered_min_repetitions == 8

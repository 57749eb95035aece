"""Tests for nominal duration parsing and shooting-time estimation."""

import pytest

from shoot_scheduler.config import SchedulerSettings
from shoot_scheduler.duration import DurationEstimator, parse_duration


@pytest.fixture
def estimator(settings):
    return DurationEstimator(settings)


class TestDurationParsing:
    """Test nominal duration extraction."""

    @pytest.mark.parametrize("value, expected", [
        ("5분", 5),
        ("3 min", 3),
        (4, 4),
        ("2.5", 2.5),
        (7.0, 7),
    ])
    def test_parse_extracts_leading_number(self, estimator, value, expected):
        assert estimator.parse(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", 0, -3, True, ["5"]])
    def test_invalid_values_fall_back_to_default(self, estimator, value):
        assert estimator.parse(value) == 5
        assert estimator.is_valid(value) is False

    def test_module_shortcut_uses_given_default(self):
        assert parse_duration("7분") == 7
        assert parse_duration(None, default=3) == 3


class TestShootingDuration:
    """Test nominal-to-actual scaling."""

    def test_default_ratio_is_twenty(self, estimator):
        assert estimator.actual(5) == 100
        assert estimator.actual(2.5) == 50

    def test_estimate_parses_then_scales(self, estimator):
        assert estimator.estimate("3분") == 60
        assert estimator.estimate(None) == 100

    def test_ratio_is_configurable(self):
        estimator = DurationEstimator(SchedulerSettings(_env_file=None, shooting_ratio=10))
        assert estimator.estimate(6) == 60

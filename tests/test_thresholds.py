# tests/test_thresholds.py
#
# Tests for posecore/thresholds.py: fixed difficulty table and verdicts.

import pytest

from posecore.thresholds import (
    DIFFICULTY_THRESHOLDS,
    is_match,
    is_valid_difficulty,
    threshold_for,
)


def test_fixed_threshold_table():
    assert dict(DIFFICULTY_THRESHOLDS) == {"soft": 0.70, "medium": 0.80, "hard": 0.90}


def test_threshold_table_is_read_only():
    with pytest.raises(TypeError):
        DIFFICULTY_THRESHOLDS["soft"] = 0.1


def test_verdict_is_inclusive_at_threshold():
    assert is_match(0.8, "medium")
    assert not is_match(0.7999, "medium")
    assert is_match(0.9, "hard")


@pytest.mark.parametrize("score", [0.0, 0.65, 0.7, 0.75, 0.8, 0.85, 0.9, 0.95, 1.0])
def test_soft_at_least_as_lenient_as_medium_and_hard(score):
    soft, medium, hard = (is_match(score, d) for d in ("soft", "medium", "hard"))
    assert soft >= medium >= hard


def test_unknown_difficulty_rejected():
    assert not is_valid_difficulty("extreme")
    assert not is_valid_difficulty(None)
    with pytest.raises(ValueError, match="Unknown difficulty"):
        threshold_for("extreme")


def test_repeated_calls_are_idempotent():
    assert [is_match(0.85, "medium") for _ in range(5)] == [True] * 5

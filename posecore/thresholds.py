# posecore/thresholds.py
# Centralized thresholds + verdict helpers for pose / movement comparison.

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

# =========================
# Difficulty → threshold
# =========================
# Interpretation: score >= threshold[difficulty] => match.
# Fixed table; callers pick a level, they never pass a number.

DIFFICULTY_THRESHOLDS: Mapping[str, float] = MappingProxyType({
    "soft": 0.70,
    "medium": 0.80,
    "hard": 0.90,
})

DIFFICULTY_LEVELS = tuple(DIFFICULTY_THRESHOLDS)

# =========================
# Scorer constants
# =========================

MAX_EXPECTED_DISTANCE = 0.5      # mean distance at which similarity hits 0
SCORER_MIN_VISIBILITY = 0.3      # pairs below this are ignored by the scorer
KEY_LANDMARK_WEIGHT = 2.0
OTHER_LANDMARK_WEIGHT = 1.0

# =========================
# Feedback constants
# =========================
# Product-tuned values, not derived from a model.

REGION_MIN_VISIBILITY = 0.5      # stricter gate for per-region deltas
REGION_DIFF_TAU = 0.15           # mean region distance above this => flag region
PHASE_SCORE_FLOOR = 0.6          # mean third-of-movement score below this => flag phase
PACE_SHORT_RATIO = 0.8           # current < 80% of recorded frames => "too short"
PACE_LONG_RATIO = 1.2            # current > 120% of recorded frames => "too slow"

# =========================
# Quality-gate constants
# =========================

QUALITY_MIN_VISIBILITY = 0.5
QUALITY_MAX_LOW_VIS_KEYS = 2
MIN_SEQUENCE_DURATION_MS = 1000.0
MIN_SEQUENCE_FRAME_RATE = 10.0
MIN_AVERAGE_CONFIDENCE = 0.5
MAX_FRAME_GAP_MS = 200.0
MAX_GAP_FRACTION = 0.1

# =========================
# Helpers
# =========================

def is_valid_difficulty(value: Any) -> bool:
    return isinstance(value, str) and value in DIFFICULTY_THRESHOLDS


def threshold_for(difficulty: str) -> float:
    """Return the similarity threshold for a difficulty level."""
    if not is_valid_difficulty(difficulty):
        raise ValueError(
            f"Unknown difficulty {difficulty!r}; expected one of {', '.join(DIFFICULTY_LEVELS)}"
        )
    return DIFFICULTY_THRESHOLDS[difficulty]


def is_match(score: float, difficulty: str) -> bool:
    """Stateless verdict: score >= threshold for the level."""
    return float(score) >= threshold_for(difficulty)


__all__ = [
    "DIFFICULTY_THRESHOLDS",
    "DIFFICULTY_LEVELS",
    "MAX_EXPECTED_DISTANCE",
    "SCORER_MIN_VISIBILITY",
    "KEY_LANDMARK_WEIGHT",
    "OTHER_LANDMARK_WEIGHT",
    "REGION_MIN_VISIBILITY",
    "REGION_DIFF_TAU",
    "PHASE_SCORE_FLOOR",
    "PACE_SHORT_RATIO",
    "PACE_LONG_RATIO",
    "QUALITY_MIN_VISIBILITY",
    "QUALITY_MAX_LOW_VIS_KEYS",
    "MIN_SEQUENCE_DURATION_MS",
    "MIN_SEQUENCE_FRAME_RATE",
    "MIN_AVERAGE_CONFIDENCE",
    "MAX_FRAME_GAP_MS",
    "MAX_GAP_FRACTION",
    "is_valid_difficulty",
    "threshold_for",
    "is_match",
]

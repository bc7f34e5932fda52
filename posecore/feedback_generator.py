#!/usr/bin/env python3
"""
posecore feedback_generator.py

Purpose
-------
Turn a comparison (score, threshold, landmark sets or per-frame scores) into
short human-readable feedback and suggestions.

  pose case:      headline + per-region "needs adjustment" lines,
                  per-region corrections + difficulty tone
  movement case:  headline + beginning/middle/end phase lines,
                  pace hints + smoothness/timing tips + difficulty tone

Region and phase checks are independent; several can fire at once.
Nothing here decides the verdict; see posecore.thresholds.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from posecore.similarity import major_differences, region_distances
from posecore.thresholds import (
    PACE_LONG_RATIO,
    PACE_SHORT_RATIO,
    PHASE_SCORE_FLOOR,
    REGION_DIFF_TAU,
)

# --------------------------------------------------------------------------------------
# Message tables
# --------------------------------------------------------------------------------------

REGION_SUGGESTIONS = {
    "arms": "Adjust your arm position to match the target pose",
    "legs": "Check your leg positioning and stance",
    "torso": "Align your torso and spine position",
    "head": "Adjust your head position and gaze direction",
}
SUGGESTION_ORDER = ("arms", "legs", "torso", "head")

POSE_DIFFICULTY_TIPS = {
    "hard": "Focus on precise positioning - small adjustments matter",
    "soft": "Get the general pose shape right - precision will come with practice",
}
GENERIC_POSE_TIP = "Keep practicing to improve your pose accuracy"

PHASE_MESSAGES = {
    "beginning": "Work on your starting position",
    "middle": "Focus on the middle phase of the movement",
    "end": "Pay attention to your ending position",
}

MOVEMENT_SHORT_TIP = "Try to complete the full movement sequence"
MOVEMENT_SLOW_TIP = "The movement seems too slow - try to match the target pace"
MOVEMENT_GENERAL_TIPS = (
    "Focus on smooth, controlled movements",
    "Try to maintain consistent timing throughout the sequence",
)
MOVEMENT_HARD_TIP = "Pay attention to precise timing and form details"


def _pct(v: float) -> str:
    return f"{v * 100.0:.1f}%"

# --------------------------------------------------------------------------------------
# Pose
# --------------------------------------------------------------------------------------

def region_feedback(recorded: Any, current: Any, tau: float = REGION_DIFF_TAU) -> List[str]:
    dists = region_distances(recorded, current)
    return [
        f"{region.capitalize()} positioning needs adjustment"
        for region, d in dists.items()
        if d > tau
    ]


def pose_feedback(recorded: Any, current: Any, score: float, threshold: float) -> List[str]:
    if score >= threshold:
        lines = [f"Great job! Pose similarity: {_pct(score)}"]
    else:
        lines = [f"Pose similarity: {_pct(score)} (target: {_pct(threshold)})"]
    lines.extend(region_feedback(recorded, current))
    return lines


def pose_suggestions(recorded: Any, current: Any, difficulty: str) -> List[str]:
    diffs = major_differences(recorded, current)
    out = [REGION_SUGGESTIONS[r] for r in SUGGESTION_ORDER if diffs.get(r)]
    if not out:
        out.append(GENERIC_POSE_TIP)
    tip = POSE_DIFFICULTY_TIPS.get(difficulty)
    if tip:
        out.append(tip)
    return out

# --------------------------------------------------------------------------------------
# Movement
# --------------------------------------------------------------------------------------

def phase_scores(frame_scores: Sequence[float]) -> Optional[Dict[str, float]]:
    """
    Mean score per third of the movement, or None for fewer than 3 frames.

    With k = n // 3 the thirds are [0,k), [k,2k), [2k,n); any remainder goes
    to the end phase.
    """
    s = np.asarray(list(frame_scores), dtype=np.float64)
    n = s.size
    if n < 3:
        return None
    k = n // 3
    return {
        "beginning": float(np.mean(s[:k])),
        "middle": float(np.mean(s[k:2 * k])),
        "end": float(np.mean(s[2 * k:])),
    }


def phase_feedback(frame_scores: Sequence[float], floor: float = PHASE_SCORE_FLOOR) -> List[str]:
    phases = phase_scores(frame_scores)
    if phases is None:
        return []
    return [PHASE_MESSAGES[name] for name, v in phases.items() if v < floor]


def movement_feedback(frame_scores: Sequence[float], score: float, threshold: float) -> List[str]:
    if score >= threshold:
        lines = [f"Excellent movement! Overall similarity: {_pct(score)}"]
    else:
        lines = [f"Movement similarity: {_pct(score)} (target: {_pct(threshold)})"]
    lines.extend(phase_feedback(frame_scores))
    return lines


def movement_suggestions(recorded_len: int, current_len: int, difficulty: str) -> List[str]:
    out: List[str] = []
    if current_len < recorded_len * PACE_SHORT_RATIO:
        out.append(MOVEMENT_SHORT_TIP)
    elif current_len > recorded_len * PACE_LONG_RATIO:
        out.append(MOVEMENT_SLOW_TIP)
    out.extend(MOVEMENT_GENERAL_TIPS)
    if difficulty == "hard":
        out.append(MOVEMENT_HARD_TIP)
    return out


__all__ = [
    "region_feedback",
    "pose_feedback",
    "pose_suggestions",
    "phase_scores",
    "phase_feedback",
    "movement_feedback",
    "movement_suggestions",
]

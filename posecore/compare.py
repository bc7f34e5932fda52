# posecore/compare.py
# Entry points: score a live pose / movement against a recorded reference.
#
# Both comparisons are pure and synchronous, safe to call from a per-frame
# capture callback. They never raise: bad input and internal failures come
# back as a zero-score ComparisonResult with a fixed message.

from __future__ import annotations

import logging
from typing import Any, List

from posecore.feedback_generator import (
    movement_feedback,
    movement_suggestions,
    pose_feedback,
    pose_suggestions,
)
from posecore.landmarks import ComparisonResult, as_sequence, coerce_landmarks, is_sequence_like
from posecore.sequence import frame_scores, temporal_score
from posecore.similarity import calculate_similarity_score
from posecore.thresholds import is_match, threshold_for

logger = logging.getLogger(__name__)


def _failure(feedback: str, suggestion: str) -> ComparisonResult:
    return ComparisonResult(is_match=False, score=0.0, feedback=[feedback], suggestions=[suggestion])


def compare_poses(recorded: Any, current: Any, difficulty: str) -> ComparisonResult:
    """
    Compare a live landmark set against a recorded one.

    Returns a ComparisonResult with a percentage headline, per-region
    feedback, and suggestions toned by difficulty.
    """
    try:
        if not (is_sequence_like(recorded) and is_sequence_like(current)):
            return _failure("Invalid pose data provided", "Ensure both poses have valid landmark data")
        if len(recorded) == 0 or len(current) == 0:
            return _failure("Missing pose landmarks", "Ensure pose is detected properly")

        rec = coerce_landmarks(recorded)
        cur = coerce_landmarks(current)

        score = calculate_similarity_score(rec, cur)
        threshold = threshold_for(difficulty)

        return ComparisonResult(
            is_match=is_match(score, difficulty),
            score=score,
            feedback=pose_feedback(rec, cur, score, threshold),
            suggestions=pose_suggestions(rec, cur, difficulty),
        )
    except Exception as e:
        logger.warning("pose comparison failed: %s", e)
        return _failure("Error comparing poses", "Try again with better lighting and pose visibility")


def compare_movement_sequence(recorded: Any, current: Any, difficulty: str) -> ComparisonResult:
    """
    Compare a live movement sequence against a recorded one.

    Both sequences are cross-resampled, scored frame by frame, and the frame
    scores are folded with a bell-curve weighting that favours the middle of
    the movement.
    """
    try:
        if not (is_sequence_like(recorded) and is_sequence_like(current)):
            return _failure("Invalid movement data provided", "Ensure both movements have valid sequence data")
        if len(recorded) == 0 or len(current) == 0:
            return _failure("Missing movement data", "Complete the full movement sequence")

        rec = as_sequence(recorded, strict=False)
        cur = as_sequence(current, strict=False)

        scores: List[float] = frame_scores(rec, cur)
        score = temporal_score(scores)
        threshold = threshold_for(difficulty)

        return ComparisonResult(
            is_match=is_match(score, difficulty),
            score=score,
            feedback=movement_feedback(scores, score, threshold),
            suggestions=movement_suggestions(len(rec), len(cur), difficulty),
        )
    except Exception as e:
        logger.warning("movement comparison failed: %s", e)
        return _failure("Error comparing movement sequences", "Try performing the movement more slowly and clearly")


__all__ = [
    "compare_poses",
    "compare_movement_sequence",
    "calculate_similarity_score",
]

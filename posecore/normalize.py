# posecore/normalize.py
"""
Landmark normalization and recording quality gates.

normalize_landmark clamps one raw detector landmark into the value ranges the
rest of posecore assumes (x, y, visibility in [0,1]; z untouched). NaN is
passed through unchanged; the scorer drops NaN pairs on its own.

validate_pose_quality / validate_movement_sequence are advisory: they never
raise, they report issues a caller can show before saving a reference.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

import numpy as np

from posecore.joints import NUM_LANDMARKS, QUALITY_KEY_IDS
from posecore.landmarks import (
    Landmark,
    TimestampedFrame,
    as_frame,
    as_landmark,
    coerce_landmarks,
    is_sequence_like,
)
from posecore.thresholds import (
    MAX_FRAME_GAP_MS,
    MAX_GAP_FRACTION,
    MIN_AVERAGE_CONFIDENCE,
    MIN_SEQUENCE_DURATION_MS,
    MIN_SEQUENCE_FRAME_RATE,
    QUALITY_MAX_LOW_VIS_KEYS,
    QUALITY_MIN_VISIBILITY,
)


@dataclass
class PoseQuality:
    is_valid: bool
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "issues": list(self.issues)}


@dataclass
class SequenceStats:
    total_frames: int = 0
    duration: float = 0.0
    average_confidence: float = 0.0
    frame_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "totalFrames": d["total_frames"],
            "duration": d["duration"],
            "averageConfidence": d["average_confidence"],
            "frameRate": d["frame_rate"],
        }


@dataclass
class SequenceQuality:
    is_valid: bool
    issues: List[str] = field(default_factory=list)
    stats: SequenceStats = field(default_factory=SequenceStats)

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "issues": list(self.issues), "stats": self.stats.to_dict()}


def _clamp01(v: float) -> float:
    # np.clip keeps NaN as NaN; builtin min/max would not
    return float(np.clip(v, 0.0, 1.0))


def normalize_landmark(landmark: Any) -> Landmark:
    lm = as_landmark(landmark)
    if lm is None:
        raise ValueError("normalize_landmark expects numeric x/y/z")
    return Landmark(
        x=_clamp01(lm.x),
        y=_clamp01(lm.y),
        z=lm.z,
        visibility=None if lm.visibility is None else _clamp01(lm.visibility),
    )


def normalize_landmarks(landmarks: Any) -> List[Landmark]:
    return [normalize_landmark(lm) for lm in landmarks]


def pose_confidence(landmarks: Any) -> float:
    """Mean of the visibilities that are present and > 0; 0.0 if none are."""
    if not is_sequence_like(landmarks) or len(landmarks) == 0:
        return 0.0
    vis = [
        lm.visibility
        for lm in coerce_landmarks(landmarks)
        if lm is not None and lm.visibility is not None and lm.visibility > 0
    ]
    if not vis:
        return 0.0
    return float(np.mean(vis))


def validate_pose_quality(landmarks: Any) -> PoseQuality:
    if not is_sequence_like(landmarks) or len(landmarks) == 0:
        return PoseQuality(False, ["No landmarks detected"])

    lms = coerce_landmarks(landmarks)
    issues: List[str] = []

    if len(lms) != NUM_LANDMARKS:
        issues.append(f"Expected {NUM_LANDMARKS} landmarks, got {len(lms)}")

    low_vis = 0
    for idx in QUALITY_KEY_IDS:
        lm = lms[idx] if idx < len(lms) else None
        if lm is None:
            continue
        if lm.visibility is None or lm.visibility < QUALITY_MIN_VISIBILITY:
            low_vis += 1
    if low_vis > QUALITY_MAX_LOW_VIS_KEYS:
        issues.append("Too many key landmarks have low visibility")

    if any(
        lm is not None and (lm.x < 0 or lm.x > 1 or lm.y < 0 or lm.y > 1)
        for lm in lms
    ):
        issues.append("Some landmarks have invalid coordinates")

    return PoseQuality(not issues, issues)


def _frame_confidences(frames: List[TimestampedFrame]) -> np.ndarray:
    return np.array([pose_confidence(f.landmarks) for f in frames], dtype=np.float64)


def validate_movement_sequence(sequence: Any) -> SequenceQuality:
    if not is_sequence_like(sequence) or len(sequence) == 0:
        return SequenceQuality(False, ["No movement data recorded"], SequenceStats())

    try:
        frames = [as_frame(f, strict=False) for f in sequence]
    except ValueError as e:
        return SequenceQuality(False, [str(e)], SequenceStats(total_frames=len(sequence)))
    total = len(frames)
    timestamps = np.array([f.timestamp for f in frames], dtype=np.float64)
    duration = float(timestamps[-1] - timestamps[0])
    frame_rate = total / (duration / 1000.0) if duration > 0 else 0.0
    average_confidence = float(np.mean(_frame_confidences(frames)))

    issues: List[str] = []
    if duration < MIN_SEQUENCE_DURATION_MS:
        issues.append("Movement sequence too short (minimum 1 second)")
    if frame_rate < MIN_SEQUENCE_FRAME_RATE:
        issues.append("Frame rate too low for smooth movement tracking")
    if average_confidence < MIN_AVERAGE_CONFIDENCE:
        issues.append("Average pose confidence too low")

    gaps = int(np.sum(np.diff(timestamps) > MAX_FRAME_GAP_MS))
    if gaps > total * MAX_GAP_FRACTION:
        issues.append("Too many gaps in movement tracking")

    stats = SequenceStats(
        total_frames=total,
        duration=duration,
        average_confidence=average_confidence,
        frame_rate=float(frame_rate),
    )
    return SequenceQuality(not issues, issues, stats)


__all__ = [
    "PoseQuality",
    "SequenceStats",
    "SequenceQuality",
    "normalize_landmark",
    "normalize_landmarks",
    "pose_confidence",
    "validate_pose_quality",
    "validate_movement_sequence",
]

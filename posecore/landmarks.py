# posecore/landmarks.py
# Value types for landmarks, frames and comparison results, plus the runtime
# shape checks applied to data arriving from the detector or the store.
#
# Everything in the engine is a value: functions that cross the engine or
# store boundary return fresh lists, never the caller's containers.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np


@dataclass(frozen=True)
class Landmark:
    """One tracked body point. `visibility` is None when the detector gave none."""
    x: float
    y: float
    z: float
    visibility: Optional[float] = None


@dataclass(frozen=True)
class TimestampedFrame:
    timestamp: float                     # ms, non-decreasing within a sequence
    landmarks: List[Optional[Landmark]] = field(default_factory=list)


@dataclass
class ComparisonResult:
    is_match: bool
    score: float
    feedback: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isMatch": bool(self.is_match),
            "score": float(self.score),
            "feedback": list(self.feedback),
            "suggestions": list(self.suggestions),
        }


# ---------------------------------------------------------------------
# Shape checks
# ---------------------------------------------------------------------

def _is_number(v: Any) -> bool:
    if isinstance(v, (bool, np.bool_)):
        return False
    return isinstance(v, (int, float, np.integer, np.floating))


def is_sequence_like(obj: Any) -> bool:
    """True for list/tuple/ndarray containers (strings and mappings are not)."""
    if isinstance(obj, np.ndarray):
        return obj.ndim >= 1
    return isinstance(obj, (list, tuple))


def as_landmark(obj: Any) -> Optional[Landmark]:
    """
    Best-effort conversion of one detector/store landmark into a Landmark.

    Accepts:
      - Landmark
      - mapping with numeric x/y/z and optional numeric visibility
      - numeric row of length 3 or 4 (x, y, z[, visibility])
      - any object exposing numeric .x/.y/.z (MediaPipe landmark protos)
    Returns None when the shape is wrong.
    """
    if isinstance(obj, Landmark):
        return obj
    if obj is None or isinstance(obj, (str, bytes)):
        return None

    if isinstance(obj, Mapping):
        x, y, z = obj.get("x"), obj.get("y"), obj.get("z")
        vis = obj.get("visibility")
    elif is_sequence_like(obj):
        row = list(np.asarray(obj).ravel()) if isinstance(obj, np.ndarray) else list(obj)
        if len(row) not in (3, 4):
            return None
        x, y, z = row[0], row[1], row[2]
        vis = row[3] if len(row) == 4 else None
    elif all(hasattr(obj, k) for k in ("x", "y", "z")):
        x, y, z = obj.x, obj.y, obj.z
        vis = getattr(obj, "visibility", None)
    else:
        return None

    if not (_is_number(x) and _is_number(y) and _is_number(z)):
        return None
    if vis is not None and not _is_number(vis):
        return None
    return Landmark(float(x), float(y), float(z), None if vis is None else float(vis))


def coerce_landmarks(items: Iterable[Any]) -> List[Optional[Landmark]]:
    """Lenient conversion: malformed entries become None so indices stay aligned."""
    return [as_landmark(item) for item in items]


def as_landmark_set(obj: Any, allow_missing: bool = False) -> List[Optional[Landmark]]:
    """
    Strict conversion of a whole landmark set; raises ValueError on any bad entry.

    With allow_missing=True a None entry (a landmark the detector did not
    report) is kept as None so later indices stay in place.
    """
    if not is_sequence_like(obj):
        raise ValueError(f"Landmark set must be a list, got {type(obj).__name__}")
    out: List[Optional[Landmark]] = []
    for i, item in enumerate(obj):
        if item is None and allow_missing:
            out.append(None)
            continue
        lm = as_landmark(item)
        if lm is None:
            raise ValueError(f"Invalid landmark at index {i}")
        out.append(lm)
    return out


def as_frame(obj: Any, strict: bool = True) -> TimestampedFrame:
    """
    Convert a {timestamp, landmarks} record into a TimestampedFrame.

    None entries are kept as None in both modes. With strict=False, malformed
    landmarks inside the frame also become None instead of raising; the frame
    container itself is always checked.
    """
    if isinstance(obj, TimestampedFrame):
        ts, raw = obj.timestamp, obj.landmarks
    elif isinstance(obj, Mapping):
        ts, raw = obj.get("timestamp"), obj.get("landmarks")
    elif hasattr(obj, "timestamp") and hasattr(obj, "landmarks"):
        ts, raw = obj.timestamp, obj.landmarks
    else:
        raise ValueError("Invalid landmark sequence structure")

    if not _is_number(ts) or not is_sequence_like(raw):
        raise ValueError("Invalid landmark sequence structure")
    landmarks = as_landmark_set(raw, allow_missing=True) if strict else coerce_landmarks(raw)
    return TimestampedFrame(float(ts), list(landmarks))


def as_sequence(obj: Any, strict: bool = True) -> List[TimestampedFrame]:
    if not is_sequence_like(obj):
        raise ValueError(f"Movement sequence must be a list, got {type(obj).__name__}")
    return [as_frame(item, strict=strict) for item in obj]


# ---------------------------------------------------------------------
# Copies / plain views
# ---------------------------------------------------------------------

def clone_landmarks(landmarks: Iterable[Optional[Landmark]]) -> List[Optional[Landmark]]:
    return list(landmarks)


def clone_frame(frame: TimestampedFrame) -> TimestampedFrame:
    return TimestampedFrame(frame.timestamp, clone_landmarks(frame.landmarks))


def clone_sequence(sequence: Iterable[TimestampedFrame]) -> List[TimestampedFrame]:
    return [clone_frame(f) for f in sequence]


def landmark_to_dict(lm: Optional[Landmark]) -> Optional[Dict[str, float]]:
    """Plain dict for JSON; a missing landmark stays None (null) to hold its index."""
    if lm is None:
        return None
    d = {"x": lm.x, "y": lm.y, "z": lm.z}
    if lm.visibility is not None:
        d["visibility"] = lm.visibility
    return d


def frame_to_dict(frame: TimestampedFrame) -> Dict[str, Any]:
    return {
        "timestamp": frame.timestamp,
        "landmarks": [landmark_to_dict(lm) for lm in frame.landmarks],
    }


def landmarks_to_array(landmarks: List[Optional[Landmark]]) -> np.ndarray:
    """(J, 4) float array [x, y, z, visibility]; NaN rows for missing entries, NaN vis for absent."""
    arr = np.full((len(landmarks), 4), np.nan, dtype=np.float64)
    for i, lm in enumerate(landmarks):
        if lm is None:
            continue
        arr[i, 0] = lm.x
        arr[i, 1] = lm.y
        arr[i, 2] = lm.z
        if lm.visibility is not None:
            arr[i, 3] = lm.visibility
    return arr


__all__ = [
    "Landmark",
    "TimestampedFrame",
    "ComparisonResult",
    "is_sequence_like",
    "as_landmark",
    "coerce_landmarks",
    "as_landmark_set",
    "as_frame",
    "as_sequence",
    "clone_landmarks",
    "clone_frame",
    "clone_sequence",
    "landmark_to_dict",
    "frame_to_dict",
    "landmarks_to_array",
]

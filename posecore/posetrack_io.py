# posecore/posetrack_io.py
# Loaders/savers for recorded poses and movement sequences.
#
# Layouts:
#   JSON  - landmark set:  [{"x","y","z","visibility"?}, ...]
#           sequence:      [{"timestamp", "landmarks": [...]}, ...]
#           envelope:      {"type": "pose"|"movement", "landmarks": <either of the above>, ...}
#   NPZ   - P (T,J,3) float32 in normalized image coords (NaN = no detection),
#           V (T,J) float32 visibility, meta_json {"fps": float, ...},
#           optional timestamps_ms (T,). Legacy kps_xyz / visibility accepted.
#
# Used by the CLIs; the comparison engine itself does no IO.

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from posecore.joints import NUM_LANDMARKS
from posecore.landmarks import (
    Landmark,
    TimestampedFrame,
    as_landmark_set,
    as_sequence,
    frame_to_dict,
    landmark_to_dict,
)

Recording = Tuple[str, Any]   # ("pose", List[Landmark]) | ("movement", List[TimestampedFrame])


def _parse_meta_json_like(raw: Any) -> Dict[str, Any]:
    """dict / JSON str / bytes / 0-d array -> dict; anything unreadable -> {}."""
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, np.ndarray) and raw.ndim == 0:
        raw = raw.item()
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return {}
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _coerce_fps(meta: Dict[str, Any], npz: Any) -> float:
    """meta["fps"], then a legacy npz["fps"], else 30.0."""
    candidates = [meta.get("fps")]
    if "fps" in npz.files:
        candidates.append(np.asarray(npz["fps"]).ravel()[0])
    for c in candidates:
        try:
            v = float(c)
        except (TypeError, ValueError):
            continue
        if np.isfinite(v) and v > 1e-3:
            return v
    return 30.0


# ---------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------

def _looks_like_sequence(items: Any) -> bool:
    return isinstance(items, list) and len(items) > 0 and isinstance(items[0], dict) and "timestamp" in items[0]


def load_recording_json(path: str) -> Recording:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Recording not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        obj = json.load(f)

    kind: Optional[str] = None
    if isinstance(obj, dict):
        kind = obj.get("type")
        obj = obj.get("landmarks")
    if not isinstance(obj, list):
        raise ValueError(f"Unrecognized recording layout in '{path}'")

    if kind is None:
        kind = "movement" if _looks_like_sequence(obj) else "pose"
    if kind == "movement":
        return kind, as_sequence(obj)
    if kind == "pose":
        return kind, as_landmark_set(obj, allow_missing=True)
    raise ValueError(f"Unknown recording type {kind!r} in '{path}'")


def load_landmark_set_json(path: str) -> List[Landmark]:
    kind, data = load_recording_json(path)
    if kind != "pose":
        raise ValueError(f"'{path}' holds a {kind} recording, expected pose")
    return data


def load_sequence_json(path: str) -> List[TimestampedFrame]:
    kind, data = load_recording_json(path)
    if kind != "movement":
        raise ValueError(f"'{path}' holds a {kind} recording, expected movement")
    return data


def save_json(path: str, kind: str, data: Any, meta: Optional[Dict[str, Any]] = None) -> str:
    if kind == "movement":
        body = [frame_to_dict(f) for f in data]
    elif kind == "pose":
        body = [landmark_to_dict(lm) for lm in data]
    else:
        raise ValueError(f"Unknown recording type {kind!r}")
    out = dict(meta or {})
    out["type"] = kind
    out["landmarks"] = body
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(out, f, indent=2)
    return path


# ---------------------------------------------------------------------
# NPZ
# ---------------------------------------------------------------------

def load_sequence_npz(path: str) -> List[TimestampedFrame]:
    """
    Build a movement sequence from a pose-track NPZ.

    timestamp = timestamps_ms[t] if stored, else 1000 * t / fps. Frames whose
    coordinates are all NaN (no detection) are dropped.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"PoseTrack NPZ not found: {path}")

    with np.load(path, allow_pickle=False) as d:
        files = set(d.files)
        meta = _parse_meta_json_like(d["meta_json"]) if "meta_json" in files else {}

        if "P" in files:
            P = d["P"].astype(np.float64)
            V = d["V"].astype(np.float64) if "V" in files else None
        elif "kps_xyz" in files:
            P = d["kps_xyz"].astype(np.float64)
            V = d["visibility"].astype(np.float64) if "visibility" in files else None
        else:
            raise KeyError(
                f"Unrecognized pose layout in '{path}'. "
                f"Expected one of: P / (kps_xyz), found {sorted(files)}"
            )

        if P.ndim != 3 or P.shape[2] < 2:
            raise ValueError(f"Invalid P shape in '{path}': {P.shape}")
        T, J, C = P.shape
        if C == 2:
            P = np.dstack([P, np.zeros((T, J))])
        if V is not None and V.shape != (T, J):
            V = None

        fps = _coerce_fps(meta, d)
        if "timestamps_ms" in files and d["timestamps_ms"].shape == (T,):
            ts = d["timestamps_ms"].astype(np.float64)
        else:
            ts = np.arange(T, dtype=np.float64) * 1000.0 / fps

    frames: List[TimestampedFrame] = []
    for t in range(T):
        if np.isnan(P[t, :, :3]).all():
            continue
        lms = []
        for j in range(J):
            vis = None if V is None or not np.isfinite(V[t, j]) else float(np.clip(V[t, j], 0.0, 1.0))
            lms.append(Landmark(float(P[t, j, 0]), float(P[t, j, 1]), float(P[t, j, 2]), vis))
        frames.append(TimestampedFrame(float(ts[t]), lms))
    return frames


def save_sequence_npz(path: str, sequence: List[TimestampedFrame], fps: Optional[float] = None) -> str:
    T = len(sequence)
    J = max([len(f.landmarks) for f in sequence] + [NUM_LANDMARKS])
    P = np.full((T, J, 3), np.nan, dtype=np.float32)
    V = np.full((T, J), np.nan, dtype=np.float32)
    for t, frame in enumerate(sequence):
        for j, lm in enumerate(frame.landmarks):
            if lm is None:
                continue
            P[t, j] = (lm.x, lm.y, lm.z)
            if lm.visibility is not None:
                V[t, j] = lm.visibility
    ts = np.array([f.timestamp for f in sequence], dtype=np.float64)
    if fps is None:
        span = float(ts[-1] - ts[0]) if T > 1 else 0.0
        fps = (T - 1) * 1000.0 / span if span > 0 else 30.0

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    np.savez_compressed(
        path,
        P=P,
        V=V,
        timestamps_ms=ts,
        meta_json=np.array(json.dumps({"fps": float(fps), "coords": "normalized"})),
    )
    return path


def load_recording(path: str) -> Recording:
    """Dispatch on extension: .npz -> movement, anything else -> JSON."""
    if path.lower().endswith(".npz"):
        return "movement", load_sequence_npz(path)
    return load_recording_json(path)


__all__ = [
    "load_recording",
    "load_recording_json",
    "load_landmark_set_json",
    "load_sequence_json",
    "save_json",
    "load_sequence_npz",
    "save_sequence_npz",
]

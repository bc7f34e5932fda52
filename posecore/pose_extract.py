#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CONTRACT (DETECTOR → LANDMARKS ADAPTER)
=======================================
Thin boundary between the pose detector and the comparison engine.

- extract_landmarks(result) turns one detector result into zero-or-one
  landmark set: first detected person only, mapped to Landmark, then run
  through posecore.normalize.normalize_landmarks.
  Accepted result shapes:
    * MediaPipe Tasks PoseLandmarkerResult  (result.pose_landmarks: [[lm, ...], ...])
    * legacy mp.solutions.pose results       (result.pose_landmarks.landmark)
    * a plain list of per-person landmark lists
- PoseDetector wraps MediaPipe Pose (OpenCV for color conversion). Both are
  optional; install with: pip install -e ".[video]"
- record_pose / record_movement_sequence consume any iterable of
  (timestamp_ms, frame) pairs plus anything with a .detect(frame) method, so
  they work with live cameras, video files and fakes alike.

The engine itself never imports cv2/mediapipe.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from posecore.landmarks import Landmark, TimestampedFrame, clone_landmarks, is_sequence_like
from posecore.normalize import normalize_landmarks, pose_confidence

try:
    import cv2
except ImportError:
    cv2 = None

try:
    import mediapipe as mp
except ImportError:
    mp = None

logger = logging.getLogger(__name__)

ProgressFn = Callable[[float, float], None]


class PoseDetectionError(RuntimeError):
    """Raised when the detector fails or returns data that cannot be mapped."""


def _require_video_deps() -> None:
    if cv2 is None or mp is None:
        missing = [n for n, m in [("opencv-python", cv2), ("mediapipe", mp)] if m is None]
        raise ImportError(
            f"Video dependencies not installed: {', '.join(missing)}. "
            'Install them with: pip install -e ".[video]"'
        )


def _first_person(result: Any) -> Optional[Any]:
    if result is None:
        return None

    poses = getattr(result, "pose_landmarks", None)
    if poses is None and isinstance(result, dict):
        poses = result.get("pose_landmarks", result.get("landmarks"))
    if poses is None and is_sequence_like(result):
        poses = result
    if poses is None:
        return None

    # legacy solutions API: a single NormalizedLandmarkList
    if hasattr(poses, "landmark"):
        return poses.landmark

    if is_sequence_like(poses) and len(poses) > 0:
        return poses[0]
    return None


def extract_landmarks(result: Any) -> List[Landmark]:
    """First detected person as a normalized landmark set; [] when nothing was detected."""
    person = _first_person(result)
    if person is None:
        return []

    try:
        return normalize_landmarks(person)
    except ValueError as e:
        raise PoseDetectionError(f"Failed to extract landmarks: {e}") from e


class PoseDetector:
    """
    MediaPipe Pose wrapper returning normalized landmark sets.

    Usage:
        with PoseDetector() as det:
            lms = det.detect(frame_bgr)
    """

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        static_image_mode: bool = False,
    ):
        _require_video_deps()
        self._pose = mp.solutions.pose.Pose(
            static_image_mode=bool(static_image_mode),
            model_complexity=int(model_complexity),
            enable_segmentation=False,
            min_detection_confidence=float(min_detection_confidence),
            min_tracking_confidence=float(min_tracking_confidence),
        )

    def detect(self, frame_bgr: Any) -> List[Landmark]:
        if self._pose is None:
            raise PoseDetectionError("Detector already closed")
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        return extract_landmarks(self._pose.process(rgb))

    def close(self) -> None:
        if self._pose is not None:
            self._pose.close()
            self._pose = None

    def __enter__(self) -> "PoseDetector":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def iter_video_frames(video_path: str, frame_rate: float = 30.0) -> Iterator[Tuple[float, Any]]:
    """
    Yield (timestamp_ms, frame_bgr) from a video file, throttled to `frame_rate`.
    Timestamps come from the frame index and the container fps.
    """
    _require_video_deps()
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Cannot open video: {video_path}")

    fps = float(cap.get(cv2.CAP_PROP_FPS) or 30.0)
    interval = 1000.0 / float(frame_rate) if frame_rate > 0 else 0.0
    last: Optional[float] = None
    idx = 0
    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                break
            ts = idx * 1000.0 / fps
            idx += 1
            if last is not None and ts - last < interval:
                continue
            last = ts
            yield ts, frame
    finally:
        cap.release()


def _detect(detector: Any, frame: Any) -> List[Landmark]:
    try:
        return detector.detect(frame)
    except PoseDetectionError:
        raise
    except Exception as e:
        raise PoseDetectionError(f"Pose detection failed: {e}") from e


def record_pose(
    frames: Iterable[Tuple[float, Any]],
    detector: Any,
    min_pose_confidence: float = 0.5,
) -> List[Landmark]:
    """First landmark set that reaches `min_pose_confidence`; [] if none does."""
    for ts, frame in frames:
        lms = _detect(detector, frame)
        if lms and pose_confidence(lms) >= min_pose_confidence:
            logger.debug("pose captured at %.0f ms", ts)
            return clone_landmarks(lms)
    return []


def record_movement_sequence(
    frames: Iterable[Tuple[float, Any]],
    detector: Any,
    duration_ms: float = 30000.0,
    min_pose_confidence: float = 0.5,
    on_progress: Optional[ProgressFn] = None,
) -> List[TimestampedFrame]:
    """
    Record a movement sequence from (timestamp_ms, frame) pairs.

    Timestamps are re-based to the first frame. Frames without a detection or
    below the confidence floor are dropped. Recording stops once
    `duration_ms` has elapsed.
    """
    sequence: List[TimestampedFrame] = []
    start: Optional[float] = None
    seen = 0
    for ts, frame in frames:
        if start is None:
            start = float(ts)
        elapsed = float(ts) - start
        if elapsed >= duration_ms:
            break
        seen += 1

        lms = _detect(detector, frame)
        if lms and pose_confidence(lms) >= min_pose_confidence:
            sequence.append(TimestampedFrame(elapsed, clone_landmarks(lms)))

        if on_progress is not None:
            on_progress(elapsed, duration_ms)

    logger.debug("recorded %d/%d frames", len(sequence), seen)
    return sequence


__all__ = [
    "PoseDetectionError",
    "PoseDetector",
    "extract_landmarks",
    "iter_video_frames",
    "record_pose",
    "record_movement_sequence",
]

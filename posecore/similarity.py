# posecore/similarity.py
#
# Pose-to-pose similarity over two landmark sets with the same layout.
#
# Responsibilities:
#   - pair landmarks by index over min(len(a), len(b))
#   - drop pairs that are malformed, NaN or poorly visible
#   - weighted mean 3D distance -> similarity in [0, 1]
#   - per-body-region mean distances for feedback
#
# This module is IO-free and never raises on bad landmark data.

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np

from posecore.joints import BODY_REGIONS, KEY_LANDMARK_IDS
from posecore.landmarks import coerce_landmarks, is_sequence_like, landmarks_to_array
from posecore.thresholds import (
    KEY_LANDMARK_WEIGHT,
    MAX_EXPECTED_DISTANCE,
    OTHER_LANDMARK_WEIGHT,
    REGION_DIFF_TAU,
    REGION_MIN_VISIBILITY,
    SCORER_MIN_VISIBILITY,
)


def _is_populated(landmarks: Any) -> bool:
    return landmarks is not None and is_sequence_like(landmarks) and len(landmarks) > 0


def _paired_arrays(a: Any, b: Any) -> Tuple[np.ndarray, np.ndarray]:
    """(n, 4) arrays for both sides, truncated to the shorter set."""
    n = min(len(a), len(b))
    A = landmarks_to_array(coerce_landmarks(a[:n]))
    B = landmarks_to_array(coerce_landmarks(b[:n]))
    return A, B


def _pair_distances(A: np.ndarray, B: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Returns (dist, coords_ok, vis_a, vis_b) per index.
    Absent visibility counts as fully visible.
    """
    coords_ok = ~np.isnan(A[:, :3]).any(axis=1) & ~np.isnan(B[:, :3]).any(axis=1)
    vis_a = np.where(np.isnan(A[:, 3]), 1.0, A[:, 3])
    vis_b = np.where(np.isnan(B[:, 3]), 1.0, B[:, 3])
    with np.errstate(invalid="ignore", over="ignore"):
        dist = np.linalg.norm(A[:, :3] - B[:, :3], axis=1)
    return dist, coords_ok & ~np.isnan(dist), vis_a, vis_b


def landmark_weights(n: int) -> np.ndarray:
    w = np.full(n, OTHER_LANDMARK_WEIGHT, dtype=np.float64)
    key = [i for i in KEY_LANDMARK_IDS if i < n]
    w[key] = KEY_LANDMARK_WEIGHT
    return w


def calculate_similarity_score(a: Any, b: Any) -> float:
    """
    Similarity in [0, 1] between two landmark sets.

    Empty or None on either side is a defined floor of 0.0. Pairs with a
    malformed entry, a NaN coordinate or visibility < 0.3 are skipped; if none
    survive the score is 0.0. Symmetric in a/b.
    """
    if not (_is_populated(a) and _is_populated(b)):
        return 0.0

    A, B = _paired_arrays(a, b)
    dist, ok, vis_a, vis_b = _pair_distances(A, B)
    ok &= (vis_a >= SCORER_MIN_VISIBILITY) & (vis_b >= SCORER_MIN_VISIBILITY)
    if not ok.any():
        return 0.0

    w = landmark_weights(len(dist))[ok]
    average_distance = float(np.sum(dist[ok] * w) / np.sum(w))
    similarity = 1.0 - average_distance / MAX_EXPECTED_DISTANCE
    return float(np.clip(similarity, 0.0, 1.0))


def region_distances(a: Any, b: Any, min_visibility: float = REGION_MIN_VISIBILITY) -> Dict[str, float]:
    """
    Mean unweighted 3D distance per body region (head, arms, torso, legs).

    Only pairs where both visibilities are >= min_visibility count. Regions
    with no usable pair are left out of the result.
    """
    if not (_is_populated(a) and _is_populated(b)):
        return {}

    A, B = _paired_arrays(a, b)
    dist, ok, vis_a, vis_b = _pair_distances(A, B)
    ok &= (vis_a >= min_visibility) & (vis_b >= min_visibility)

    out: Dict[str, float] = {}
    n = len(dist)
    for region, ids in BODY_REGIONS.items():
        idx = [i for i in ids if i < n and ok[i]]
        if idx:
            out[region] = float(np.mean(dist[idx]))
    return out


def major_differences(a: Any, b: Any, tau: float = REGION_DIFF_TAU) -> Dict[str, bool]:
    """Region -> True when its mean distance exceeds tau. Every region is present."""
    dists = region_distances(a, b)
    return {region: dists.get(region, 0.0) > tau for region in BODY_REGIONS}


__all__ = [
    "landmark_weights",
    "calculate_similarity_score",
    "region_distances",
    "major_differences",
]

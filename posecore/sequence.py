# posecore/sequence.py
# Frame alignment + temporal aggregation for movement sequences.
#
# Alignment is zero-order hold: every output slot copies the nearest
# earlier-or-equal source frame (timestamp included). No interpolation.

from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np

from posecore.landmarks import TimestampedFrame, clone_frame, clone_sequence
from posecore.similarity import calculate_similarity_score


def resample_sequence(sequence: Sequence[TimestampedFrame], target_length: int) -> List[TimestampedFrame]:
    """
    Resample to exactly `target_length` frames.

    Output slot i takes source index min(floor(i * len / target), len - 1).
    Equal lengths return a value copy. The result never shares containers
    with the input.
    """
    n = len(sequence)
    target_length = int(target_length)
    if target_length <= 0 or n == 0:
        return []
    if n == target_length:
        return clone_sequence(sequence)

    ratio = n / target_length
    out: List[TimestampedFrame] = []
    for i in range(target_length):
        src = min(int(math.floor(i * ratio)), n - 1)
        out.append(clone_frame(sequence[src]))
    return out


def frame_scores(recorded: Sequence[TimestampedFrame], current: Sequence[TimestampedFrame]) -> List[float]:
    """
    Per-frame similarity after cross-resampling.

    `recorded` is resampled to len(current) and `current` to len(recorded);
    frames are then compared index by index over the shorter result.
    """
    rec = resample_sequence(recorded, len(current))
    cur = resample_sequence(current, len(recorded))
    n = min(len(rec), len(cur))
    return [calculate_similarity_score(rec[i].landmarks, cur[i].landmarks) for i in range(n)]


def gaussian_weights(n: int) -> np.ndarray:
    """Bell-curve weights over frame positions mapped to [-1, 1]; a single frame gets 1."""
    if n <= 0:
        return np.zeros(0, dtype=np.float64)
    if n == 1:
        return np.ones(1, dtype=np.float64)
    pos = np.arange(n, dtype=np.float64) / (n - 1) * 2.0 - 1.0
    return np.exp(-2.0 * pos ** 2)


def temporal_score(scores: Sequence[float]) -> float:
    """
    Gaussian-weighted mean of per-frame scores.

    Start/end frames count less than the middle of the movement.
    Empty input -> 0.0.
    """
    s = np.asarray(list(scores), dtype=np.float64)
    if s.size == 0:
        return 0.0
    w = gaussian_weights(s.size)
    total = float(np.sum(w))
    return float(np.sum(s * w) / total) if total > 0 else 0.0


__all__ = [
    "resample_sequence",
    "frame_scores",
    "gaussian_weights",
    "temporal_score",
]

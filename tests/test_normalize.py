# tests/test_normalize.py
#
# Tests for posecore/normalize.py: clamping and the two quality gates.

import math

import pytest

from conftest import make_pose, make_sequence
from posecore.landmarks import Landmark, TimestampedFrame


def test_normalize_landmark_clamps_xy_and_visibility():
    from posecore.normalize import normalize_landmark
    lm = normalize_landmark(Landmark(-0.2, 1.7, -0.4, 1.3))
    assert lm.x == 0.0
    assert lm.y == 1.0
    assert lm.z == -0.4          # depth is left alone
    assert lm.visibility == 1.0


def test_normalize_landmark_keeps_absent_visibility_absent():
    from posecore.normalize import normalize_landmark
    lm = normalize_landmark({"x": 0.3, "y": 0.4, "z": 0.0})
    assert lm.visibility is None


def test_normalize_landmark_passes_nan_through():
    from posecore.normalize import normalize_landmark
    lm = normalize_landmark(Landmark(float("nan"), 0.5, 0.0))
    assert math.isnan(lm.x)


def test_normalize_landmark_rejects_non_numeric():
    from posecore.normalize import normalize_landmark
    with pytest.raises(ValueError):
        normalize_landmark({"x": "a", "y": 0.1, "z": 0.0})


def test_pose_confidence_ignores_missing_and_zero():
    from posecore.normalize import pose_confidence
    lms = [Landmark(0, 0, 0, 0.8), Landmark(0, 0, 0, None), Landmark(0, 0, 0, 0.0), Landmark(0, 0, 0, 0.4)]
    assert pose_confidence(lms) == pytest.approx(0.6)
    assert pose_confidence([Landmark(0, 0, 0)]) == 0.0
    assert pose_confidence([]) == 0.0


# ===================================================================
# validate_pose_quality
# ===================================================================

def test_pose_quality_full_valid_pose():
    from posecore.normalize import validate_pose_quality
    q = validate_pose_quality(make_pose())
    assert q.is_valid
    assert q.issues == []


def test_pose_quality_empty():
    from posecore.normalize import validate_pose_quality
    q = validate_pose_quality([])
    assert not q.is_valid
    assert q.issues == ["No landmarks detected"]


def test_pose_quality_single_landmark():
    from posecore.normalize import validate_pose_quality
    q = validate_pose_quality([Landmark(0.5, 0.5, 0.0, 0.9)])
    assert not q.is_valid
    assert "Expected 33 landmarks, got 1" in q.issues


def test_pose_quality_low_visibility_keys():
    from posecore.normalize import validate_pose_quality
    lms = make_pose()
    for idx in (0, 11, 12):
        lms[idx] = Landmark(lms[idx].x, lms[idx].y, lms[idx].z, 0.2)
    q = validate_pose_quality(lms)
    assert "Too many key landmarks have low visibility" in q.issues


def test_pose_quality_two_low_keys_is_fine():
    from posecore.normalize import validate_pose_quality
    lms = make_pose()
    lms[23] = Landmark(lms[23].x, lms[23].y, lms[23].z, None)
    lms[24] = Landmark(lms[24].x, lms[24].y, lms[24].z, 0.1)
    assert validate_pose_quality(lms).is_valid


def test_pose_quality_out_of_range_coordinates():
    from posecore.normalize import validate_pose_quality
    lms = make_pose()
    lms[5] = Landmark(1.2, 0.5, 0.0, 0.9)
    q = validate_pose_quality(lms)
    assert not q.is_valid
    assert q.issues == ["Some landmarks have invalid coordinates"]


# ===================================================================
# validate_movement_sequence
# ===================================================================

def test_sequence_quality_empty():
    from posecore.normalize import validate_movement_sequence
    q = validate_movement_sequence([])
    assert not q.is_valid
    assert q.issues == ["No movement data recorded"]
    assert q.stats.total_frames == 0
    assert q.stats.frame_rate == 0.0


def test_sequence_quality_short_sequence():
    from posecore.normalize import validate_movement_sequence
    seq = [TimestampedFrame(0.0, make_pose()), TimestampedFrame(500.0, make_pose())]
    q = validate_movement_sequence(seq)
    assert not q.is_valid
    assert any("too short" in i for i in q.issues)
    assert q.stats.total_frames == 2
    assert q.stats.duration == 500.0


def test_sequence_quality_good_sequence_stats():
    from posecore.normalize import validate_movement_sequence
    seq = make_sequence(n_frames=60, step_ms=33.0)
    q = validate_movement_sequence(seq)
    assert q.is_valid, q.issues
    assert q.stats.total_frames == 60
    assert q.stats.duration == pytest.approx(59 * 33.0)
    assert q.stats.frame_rate == pytest.approx(60 / (59 * 33.0 / 1000.0))
    assert q.stats.average_confidence == pytest.approx(0.9)


def test_sequence_quality_low_frame_rate_and_gaps():
    from posecore.normalize import validate_movement_sequence
    seq = make_sequence(n_frames=8, step_ms=300.0)
    q = validate_movement_sequence(seq)
    assert "Frame rate too low for smooth movement tracking" in q.issues
    assert "Too many gaps in movement tracking" in q.issues


def test_sequence_quality_low_confidence():
    from posecore.normalize import validate_movement_sequence
    seq = make_sequence(n_frames=40, step_ms=33.0, vis=0.3)
    q = validate_movement_sequence(seq)
    assert q.issues == ["Average pose confidence too low"]


def test_sequence_quality_frame_without_visibility_counts_zero():
    from posecore.normalize import validate_movement_sequence
    seq = make_sequence(n_frames=40, step_ms=33.0, vis=None)
    q = validate_movement_sequence(seq)
    assert q.stats.average_confidence == 0.0


def test_sequence_quality_to_dict_uses_wire_keys():
    from posecore.normalize import validate_movement_sequence
    d = validate_movement_sequence(make_sequence()).to_dict()
    assert set(d) == {"isValid", "issues", "stats"}
    assert set(d["stats"]) == {"totalFrames", "duration", "averageConfidence", "frameRate"}


def test_normalize_landmarks_maps_every_entry():
    from posecore.normalize import normalize_landmarks
    out = normalize_landmarks([Landmark(1.5, -0.5, 0.2, 0.5), {"x": 0.3, "y": 0.4, "z": 0.0}])
    assert out == [Landmark(1.0, 0.0, 0.2, 0.5), Landmark(0.3, 0.4, 0.0, None)]
    with pytest.raises(ValueError):
        normalize_landmarks([None])

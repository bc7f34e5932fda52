# tests/test_compare.py
#
# End-to-end checks for posecore/compare.py: verdicts, failure results and
# the shape of feedback for both pose and movement comparisons.

import pytest

from conftest import make_pose, make_sequence
from posecore.compare import compare_movement_sequence, compare_poses
from posecore.landmarks import Landmark, TimestampedFrame


# ===================================================================
# compare_poses
# ===================================================================

def test_identical_pose_matches_medium(pose):
    res = compare_poses(pose, pose, "medium")
    assert res.is_match is True
    assert res.score == pytest.approx(1.0)
    assert res.feedback == ["Great job! Pose similarity: 100.0%"]
    assert res.suggestions == ["Keep practicing to improve your pose accuracy"]


def test_missing_landmarks(pose):
    res = compare_poses([], pose, "medium")
    assert res.is_match is False
    assert res.score == 0.0
    assert res.feedback == ["Missing pose landmarks"]
    assert res.suggestions == ["Ensure pose is detected properly"]


@pytest.mark.parametrize("bad", [None, "not a pose", {"x": 1}, 42])
def test_invalid_pose_data(pose, bad):
    res = compare_poses(bad, pose, "medium")
    assert res.is_match is False
    assert res.score == 0.0
    assert res.feedback == ["Invalid pose data provided"]
    assert res.suggestions == ["Ensure both poses have valid landmark data"]


def test_unknown_difficulty_returns_error_result(pose):
    res = compare_poses(pose, pose, "impossible")
    assert res.is_match is False
    assert res.score == 0.0
    assert res.feedback == ["Error comparing poses"]
    assert res.suggestions == ["Try again with better lighting and pose visibility"]


def test_difficulty_is_monotonic():
    a = make_pose()
    b = make_pose(dx=0.075)   # score 0.85
    verdicts = {d: compare_poses(a, b, d).is_match for d in ("soft", "medium", "hard")}
    assert verdicts == {"soft": True, "medium": True, "hard": False}


def test_score_is_independent_of_difficulty():
    a = make_pose()
    b = make_pose(dx=0.12)
    scores = {compare_poses(a, b, d).score for d in ("soft", "medium", "hard")}
    assert len(scores) == 1


def test_compare_poses_is_idempotent_and_pure():
    a = make_pose()
    b = make_pose(dy=0.2)
    a_copy, b_copy = list(a), list(b)
    first = compare_poses(a, b, "soft")
    second = compare_poses(a, b, "soft")
    assert first == second
    assert a == a_copy and b == b_copy


def test_missed_pose_reports_target_and_regions():
    a = make_pose()
    b = list(a)
    for i in range(23, 33):
        b[i] = Landmark(a[i].x + 0.3, a[i].y, a[i].z, 0.9)
    res = compare_poses(a, b, "hard")
    assert res.is_match is False
    assert res.feedback[0].endswith("(target: 90.0%)")
    assert "Legs positioning needs adjustment" in res.feedback
    assert "Check your leg positioning and stance" in res.suggestions
    assert res.suggestions[-1] == "Focus on precise positioning - small adjustments matter"


def test_malformed_entries_are_skipped_not_fatal(pose):
    cur = list(pose)
    cur[3] = {"x": "bad"}
    cur[4] = None
    res = compare_poses(pose, cur, "medium")
    assert res.is_match is True
    assert res.score == pytest.approx(1.0)


def test_result_to_dict_shape(pose):
    d = compare_poses(pose, pose, "soft").to_dict()
    assert set(d) == {"isMatch", "score", "feedback", "suggestions"}
    assert d["isMatch"] is True


# ===================================================================
# compare_movement_sequence
# ===================================================================

def test_identical_movement_matches(sequence):
    res = compare_movement_sequence(sequence, sequence, "hard")
    assert res.is_match is True
    assert res.score == pytest.approx(1.0)
    assert res.feedback == ["Excellent movement! Overall similarity: 100.0%"]
    assert res.suggestions == [
        "Focus on smooth, controlled movements",
        "Try to maintain consistent timing throughout the sequence",
        "Pay attention to precise timing and form details",
    ]


def test_missing_movement(sequence):
    res = compare_movement_sequence(sequence, [], "soft")
    assert res.feedback == ["Missing movement data"]
    assert res.suggestions == ["Complete the full movement sequence"]
    assert res.score == 0.0


def test_invalid_movement(sequence):
    res = compare_movement_sequence(sequence, "frames", "soft")
    assert res.feedback == ["Invalid movement data provided"]
    assert res.suggestions == ["Ensure both movements have valid sequence data"]


def test_malformed_frame_container_returns_error(sequence):
    res = compare_movement_sequence(sequence, [{"timestamp": "zero"}], "soft")
    assert res.is_match is False
    assert res.feedback == ["Error comparing movement sequences"]
    assert res.suggestions == ["Try performing the movement more slowly and clearly"]


def test_short_attempt_gets_pace_hint():
    rec = make_sequence(n_frames=30)
    cur = make_sequence(n_frames=15)
    res = compare_movement_sequence(rec, cur, "medium")
    assert res.suggestions[0] == "Try to complete the full movement sequence"


def test_slow_attempt_gets_pace_hint():
    rec = make_sequence(n_frames=20)
    cur = make_sequence(n_frames=40)
    res = compare_movement_sequence(rec, cur, "medium")
    assert res.suggestions[0] == "The movement seems too slow - try to match the target pace"


def test_bad_beginning_is_called_out():
    rec = make_sequence(n_frames=30)
    cur = [
        TimestampedFrame(f.timestamp, make_pose(dx=0.5) if i < 10 else list(f.landmarks))
        for i, f in enumerate(rec)
    ]
    res = compare_movement_sequence(rec, cur, "soft")
    assert "Work on your starting position" in res.feedback
    assert "Focus on the middle phase of the movement" not in res.feedback
    assert "Pay attention to your ending position" not in res.feedback


def test_edges_discounted_relative_to_middle():
    rec = make_sequence(n_frames=30)
    bad_edges = [
        TimestampedFrame(f.timestamp, make_pose(dx=0.5) if i < 5 or i >= 25 else list(f.landmarks))
        for i, f in enumerate(rec)
    ]
    bad_middle = [
        TimestampedFrame(f.timestamp, make_pose(dx=0.5) if 10 <= i < 20 else list(f.landmarks))
        for i, f in enumerate(rec)
    ]
    s_edges = compare_movement_sequence(rec, bad_edges, "soft").score
    s_middle = compare_movement_sequence(rec, bad_middle, "soft").score
    assert s_edges > s_middle


def test_movement_accepts_plain_dict_frames(sequence):
    as_dicts = [
        {"timestamp": f.timestamp, "landmarks": [{"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
                                                 for lm in f.landmarks]}
        for f in sequence
    ]
    res = compare_movement_sequence(as_dicts, sequence, "medium")
    assert res.score == pytest.approx(1.0)


def test_two_frame_movement_has_no_phase_lines():
    rec = make_sequence(n_frames=2)
    cur = [TimestampedFrame(f.timestamp, make_pose(dx=0.5)) for f in rec]
    res = compare_movement_sequence(rec, cur, "soft")
    assert res.feedback == ["Movement similarity: 0.0% (target: 70.0%)"]


def test_verdict_comes_from_thresholds(monkeypatch, pose, sequence):
    from posecore import compare
    calls = []

    def fake_is_match(score, difficulty):
        calls.append(difficulty)
        return False

    monkeypatch.setattr(compare, "is_match", fake_is_match)
    assert compare.compare_poses(pose, pose, "soft").is_match is False
    assert compare.compare_movement_sequence(sequence, sequence, "hard").is_match is False
    assert calls == ["soft", "hard"]

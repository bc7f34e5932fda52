# posecore/__init__.py
from .compare import compare_poses, compare_movement_sequence
from .similarity import calculate_similarity_score
from .normalize import validate_pose_quality, validate_movement_sequence
from .landmarks import Landmark, TimestampedFrame, ComparisonResult


def extract_landmarks(*args, **kwargs):
    """Lazy wrapper so posecore can be imported without pulling in cv2/mediapipe."""
    from .pose_extract import extract_landmarks as _extract_landmarks
    return _extract_landmarks(*args, **kwargs)

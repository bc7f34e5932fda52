import sys, os; sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# --- Synthetic landmark data shared by the engine tests ---
import pytest

from posecore.landmarks import Landmark, TimestampedFrame


def make_pose(dx=0.0, dy=0.0, dz=0.0, vis=0.9, n=33):
    """
    33 landmarks around (0.5, 0.5, 0.1) with small per-index offsets,
    shifted by (dx, dy, dz). vis=None leaves visibility absent.
    """
    return [
        Landmark(0.5 + 0.01 * (i % 5) + dx, 0.5 + 0.005 * i + dy, 0.1 + dz, vis)
        for i in range(n)
    ]


def make_sequence(n_frames=30, step_ms=33.0, dx_per_frame=0.0, vis=0.9):
    return [
        TimestampedFrame(i * step_ms, make_pose(dx=dx_per_frame * i, vis=vis))
        for i in range(n_frames)
    ]


@pytest.fixture
def pose():
    return make_pose()


@pytest.fixture
def sequence():
    return make_sequence()

# posecore/activity_store.py
# In-memory store for recorded reference activities.
#
# Goals:
# - create / get / list / delete keyed by activity id
# - ids come from an injected generator (default: "<type>_" + uuid4 hex);
#   the store keeps no global counters
# - every read and write copies the landmark data, so callers can mutate
#   what they pass in or get back without touching stored state

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from posecore.landmarks import (
    Landmark,
    TimestampedFrame,
    as_frame,
    as_landmark_set,
    as_sequence,
    clone_landmarks,
    clone_sequence,
    is_sequence_like,
)

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = ("pose", "movement")
MAX_NAME_LENGTH = 100

ActivityData = Union[List[Landmark], List[TimestampedFrame]]
IdFactory = Callable[[str], str]
Clock = Callable[[], datetime]


class ActivityError(RuntimeError):
    """Store failure with a machine-readable code (e.g. NOT_FOUND)."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


@dataclass
class ActivityMetadata:
    name: str
    type: str
    created_by: str
    is_public: bool
    duration: Optional[float] = None


@dataclass
class Activity:
    id: str
    type: str
    name: str
    created_by: str
    created_at: datetime
    is_public: bool
    landmarks: ActivityData = field(default_factory=list)
    duration: Optional[float] = None


def _nonempty_str(v: Any) -> bool:
    return isinstance(v, str) and len(v.strip()) > 0


def _optional_number(v: Any) -> bool:
    return v is None or (isinstance(v, (int, float)) and not isinstance(v, bool))


def sanitize_activity_name(name: str) -> str:
    return name.strip()[:MAX_NAME_LENGTH]


def validate_activity_metadata(metadata: Any) -> bool:
    return (
        isinstance(metadata, ActivityMetadata)
        and _nonempty_str(metadata.name)
        and metadata.type in ACTIVITY_TYPES
        and _nonempty_str(metadata.created_by)
        and _optional_number(metadata.duration)
        and isinstance(metadata.is_public, bool)
    )


def validate_activity(activity: Any) -> bool:
    return (
        isinstance(activity, Activity)
        and _nonempty_str(activity.id)
        and activity.type in ACTIVITY_TYPES
        and _nonempty_str(activity.name)
        and _nonempty_str(activity.created_by)
        and isinstance(activity.created_at, datetime)
        and _optional_number(activity.duration)
        and isinstance(activity.is_public, bool)
        and isinstance(activity.landmarks, list)
    )


def _copy_data(activity_type: str, data: ActivityData) -> ActivityData:
    if activity_type == "movement":
        return clone_sequence(data)
    return clone_landmarks(data)


def _coerce_data(activity_type: str, data: Any) -> ActivityData:
    """Typed copy of an activity payload; ValueError on malformed landmarks or frames."""
    if activity_type == "movement":
        return as_sequence(data)
    return as_landmark_set(data)


def _copy_activity(activity: Activity) -> Activity:
    return replace(activity, landmarks=_copy_data(activity.type, activity.landmarks))


def _default_id(activity_type: str) -> str:
    return f"{activity_type}_{uuid.uuid4().hex}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityStore:
    """Keyed activity storage. Not thread-safe; callers serialize access."""

    def __init__(self, id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        self._activities: Dict[str, Activity] = {}
        self._id_factory: IdFactory = id_factory or _default_id
        self._clock: Clock = clock or _utcnow

    # ------------------------------------------------------------ create

    def _new_activity(self, activity_type: str, data: ActivityData, metadata: ActivityMetadata) -> str:
        if not validate_activity_metadata(metadata):
            raise ActivityError("Invalid activity metadata", "INVALID_METADATA")
        if metadata.type != activity_type:
            raise ActivityError(
                f'Activity type must be "{activity_type}" for {activity_type} activities', "INVALID_TYPE"
            )

        activity = Activity(
            id=self._id_factory(activity_type),
            type=activity_type,
            name=sanitize_activity_name(metadata.name),
            created_by=metadata.created_by,
            created_at=self._clock(),
            is_public=metadata.is_public,
            landmarks=data,
            duration=metadata.duration if activity_type == "movement" else None,
        )
        if activity.id in self._activities:
            raise ActivityError(f"Duplicate activity id: {activity.id}", "VALIDATION_FAILED")
        self.save_activity(activity)
        logger.debug("created %s activity %s", activity_type, activity.id)
        return activity.id

    def create_pose_activity(self, landmarks: Any, metadata: ActivityMetadata) -> str:
        if not is_sequence_like(landmarks) or len(landmarks) == 0:
            raise ActivityError("Invalid landmarks data", "INVALID_LANDMARKS")
        try:
            data = as_landmark_set(landmarks)
        except ValueError as e:
            raise ActivityError(f"Invalid landmarks data: {e}", "INVALID_LANDMARKS") from e
        return self._new_activity("pose", data, metadata)

    def create_movement_activity(self, sequence: Any, metadata: ActivityMetadata) -> str:
        if not is_sequence_like(sequence) or len(sequence) == 0:
            raise ActivityError("Invalid landmark sequence data", "INVALID_SEQUENCE")
        try:
            data = [as_frame(f) for f in sequence]
        except ValueError as e:
            raise ActivityError("Invalid landmark sequence structure", "INVALID_SEQUENCE_STRUCTURE") from e
        return self._new_activity("movement", data, metadata)

    # ------------------------------------------------------------ read / write

    def save_activity(self, activity: Activity) -> None:
        if not validate_activity(activity):
            raise ActivityError("Activity validation failed", "VALIDATION_FAILED")
        try:
            data = _coerce_data(activity.type, activity.landmarks)
        except ValueError as e:
            raise ActivityError(f"Activity validation failed: {e}", "VALIDATION_FAILED") from e
        self._activities[activity.id] = replace(activity, landmarks=data)

    def get_activity_by_id(self, activity_id: str) -> Activity:
        if not _nonempty_str(activity_id):
            raise ActivityError("Invalid activity ID", "INVALID_ID")
        activity = self._activities.get(activity_id)
        if activity is None:
            raise ActivityError("Activity not found", "NOT_FOUND")
        return _copy_activity(activity)

    def _sorted(self, pred: Callable[[Activity], bool]) -> List[Activity]:
        hits = [a for a in self._activities.values() if pred(a)]
        hits.sort(key=lambda a: a.created_at, reverse=True)
        return [_copy_activity(a) for a in hits]

    def get_activities(self) -> List[Activity]:
        """Public activities, most recent first."""
        return self._sorted(lambda a: a.is_public)

    def get_activities_by_creator(self, created_by: str) -> List[Activity]:
        return self._sorted(lambda a: a.created_by == created_by)

    def get_activities_by_type(self, activity_type: str) -> List[Activity]:
        return self._sorted(lambda a: a.type == activity_type and a.is_public)

    def delete_activity(self, activity_id: str) -> None:
        if not _nonempty_str(activity_id):
            raise ActivityError("Invalid activity ID", "INVALID_ID")
        if activity_id not in self._activities:
            raise ActivityError("Activity not found", "NOT_FOUND")
        del self._activities[activity_id]

    def activity_stats(self) -> Dict[str, int]:
        acts = list(self._activities.values())
        public = sum(1 for a in acts if a.is_public)
        return {
            "total_activities": len(acts),
            "pose_activities": sum(1 for a in acts if a.type == "pose"),
            "movement_activities": sum(1 for a in acts if a.type == "movement"),
            "public_activities": public,
            "private_activities": len(acts) - public,
        }

    def clear(self) -> None:
        self._activities.clear()

    def __len__(self) -> int:
        return len(self._activities)


__all__ = [
    "ACTIVITY_TYPES",
    "ActivityError",
    "ActivityMetadata",
    "Activity",
    "ActivityStore",
    "sanitize_activity_name",
    "validate_activity_metadata",
    "validate_activity",
]

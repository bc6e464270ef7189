from .durations import parse_offset, parse_track_duration
from .planner import (
    DEFAULT_TRACK_DURATION,
    MAX_OFFSET,
    effective_durations,
    plan_timeline,
    plan_timestamps,
)

__all__ = [
    "DEFAULT_TRACK_DURATION",
    "MAX_OFFSET",
    "effective_durations",
    "plan_timeline",
    "plan_timestamps",
    "parse_offset",
    "parse_track_duration",
]

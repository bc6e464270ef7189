from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True)
class Track:
    """A played track as supplied by a track source."""

    artist: str
    track: str
    album: str = ""
    duration: timedelta | None = None


@dataclass(frozen=True, slots=True)
class ScrobbleEntry:
    """A track with the play-start time assigned by the timeline planner."""

    track: Track
    started_at: datetime

    @property
    def ts(self) -> int:
        return int(self.started_at.timestamp())

from datetime import UTC, datetime, timedelta

from ..lastfm import ScrobbleEntry, Track

DEFAULT_TRACK_DURATION = timedelta(minutes=3)

# Last.fm ignores scrobbles older than two weeks
MAX_OFFSET = timedelta(days=14)


def effective_durations(tracks: list[Track], default: timedelta = DEFAULT_TRACK_DURATION) -> list[timedelta]:
    """Durations used for planning; unknown or non-positive ones become ``default``."""
    return [t.duration if t.duration is not None and t.duration > timedelta(0) else default for t in tracks]


def plan_timestamps(start: datetime, durations: list[timedelta]) -> list[datetime]:
    """Contiguous playback from ``start``: item i starts after the first i durations."""
    stamps: list[datetime] = []
    at = start
    for d in durations:
        stamps.append(at)
        at += d
    return stamps


def plan_timeline(
    tracks: list[Track],
    now: datetime,
    offset: timedelta = timedelta(0),
    default_duration: timedelta = DEFAULT_TRACK_DURATION,
) -> list[ScrobbleEntry]:
    """Assign a play-start time to every track of a batch.

    Playback starts at ``now - offset``. When the batch would still be
    playing at ``now`` the start moves back so the last track ends exactly
    at ``now``. ``now`` is the only clock input, so equal inputs always give
    equal plans.
    """
    if offset < timedelta(0):
        raise ValueError("offset must not be negative")
    if offset > MAX_OFFSET:
        raise ValueError(f"offset must not exceed {MAX_OFFSET.days} days")
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    durations = effective_durations(tracks, default_duration)
    total = sum(durations, timedelta(0))
    start = min(now - offset, now - total)

    return [ScrobbleEntry(track=t, started_at=ts) for t, ts in zip(tracks, plan_timestamps(start, durations))]

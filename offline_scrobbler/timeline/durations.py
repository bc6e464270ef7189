import re
from datetime import timedelta

_UNIT_SECONDS = {
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
}

_HUMAN_PART = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]+)")
_CLOCK = re.compile(r"(?:(\d+):)?(\d{1,2}):(\d{2})")
_ISO = re.compile(
    r"P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?",
    re.IGNORECASE,
)
# Bandcamp style: P00H03M45S (no 'T')
_ISO_NO_T = re.compile(r"P(?P<hours>\d+)H(?P<minutes>\d+)M(?P<seconds>\d+(?:\.\d+)?)S", re.IGNORECASE)


def _seconds(value: float, text: str) -> timedelta:
    try:
        return timedelta(seconds=value)
    except OverflowError:
        raise ValueError(f"duration out of range: {text!r}") from None


def parse_offset(text: str) -> timedelta:
    """Parse a human duration like ``90``, ``10m``, ``1h30m`` or ``2h 5m 10s``.

    Raises:
        ValueError: The text is not a non-negative duration
    """
    s = text.strip().lower()
    if not s:
        raise ValueError("empty duration")
    if re.fullmatch(r"\d+(?:\.\d+)?", s):
        return _seconds(float(s), text)

    total = 0.0
    pos = 0
    for m in _HUMAN_PART.finditer(s):
        if s[pos : m.start()].strip():
            raise ValueError(f"invalid duration: {text!r}")
        unit = _UNIT_SECONDS.get(m.group(2))
        if unit is None:
            raise ValueError(f"unknown unit {m.group(2)!r} in duration {text!r}")
        total += float(m.group(1)) * unit
        pos = m.end()

    if pos == 0 or s[pos:].strip():
        raise ValueError(f"invalid duration: {text!r}")
    return _seconds(total, text)


def parse_track_duration(text: str | None) -> timedelta | None:
    """Parse a track length (``3:45``, ``1:02:03``, ``PT3M45S``, ``215``).

    Returns None for missing, zero or unparseable values.
    """
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None

    seconds: float | None = None
    if s.isdigit():
        seconds = float(s)
    elif m := _CLOCK.fullmatch(s):
        hours, minutes, secs = m.groups()
        seconds = int(hours or 0) * 3600 + int(minutes) * 60 + int(secs)
    elif m := _ISO_NO_T.fullmatch(s):
        seconds = int(m["hours"]) * 3600 + int(m["minutes"]) * 60 + float(m["seconds"])
    elif (m := _ISO.fullmatch(s)) and any(m.groupdict().values()):
        seconds = (
            int(m["days"] or 0) * 86400
            + int(m["hours"] or 0) * 3600
            + int(m["minutes"] or 0) * 60
            + float(m["seconds"] or 0)
        )

    if not seconds or seconds <= 0:
        return None
    return timedelta(seconds=seconds)

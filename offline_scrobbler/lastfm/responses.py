"""Typed views over the loosely-shaped JSON returned by Last.fm.

Every parser either returns a fully populated dataclass or raises
``ProtocolError``; nothing downstream has to poke at raw dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any

from ..errors import ProtocolError
from .scrobble import Track

IGNORED_REASONS = {
    "1": "Artist was ignored",
    "2": "Track was ignored",
    "3": "Timestamp was too old",
    "4": "Timestamp was too new",
    "5": "Daily scrobble limit exceeded",
}


@dataclass(frozen=True, slots=True)
class TokenResponse:
    token: str


@dataclass(frozen=True, slots=True)
class SessionResponse:
    key: str
    name: str


class VerdictKind(Enum):
    ACCEPTED = "accepted"
    IGNORED = "ignored"
    MALFORMED = "malformed"


@dataclass(frozen=True, slots=True)
class ScrobbleVerdict:
    """Outcome of one submitted track."""

    index: int
    kind: VerdictKind
    code: str = ""
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.kind is VerdictKind.ACCEPTED

    def describe(self) -> str:
        if self.kind is VerdictKind.ACCEPTED:
            return "accepted"
        if self.kind is VerdictKind.IGNORED:
            return f"ignored ({self.code}: {self.reason})"
        return f"malformed response ({self.reason})"


@dataclass(frozen=True, slots=True)
class SubmissionResponse:
    """Per-track verdicts of one ``track.scrobble`` call."""

    verdicts: tuple[ScrobbleVerdict, ...]
    reported_accepted: int
    reported_ignored: int

    @property
    def accepted_count(self) -> int:
        return sum(1 for v in self.verdicts if v.accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.verdicts) - self.accepted_count


@dataclass(frozen=True, slots=True)
class AlbumInfoResponse:
    artist: str
    album: str
    tracks: tuple[Track, ...]


def _text(value: Any) -> str:
    """Return the text of a plain string or a ``{"#text": ...}`` node."""
    if isinstance(value, dict):
        value = value.get("#text", "")
    if value is None:
        return ""
    return str(value).strip()


def _as_list(value: Any) -> list[Any]:
    # Last.fm collapses single-element lists into the element itself
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _int_attr(attrs: dict[str, Any], name: str) -> int:
    """Read an integer counter from an ``@attr`` node; absent counts as 0."""
    try:
        return int(attrs.get(name, 0))
    except (TypeError, ValueError):
        raise ProtocolError(f"Attribute '{name}' is not an integer: {attrs.get(name)!r}") from None


def parse_token(data: dict[str, Any]) -> TokenResponse:
    """Parse an ``auth.getToken`` response.

    Args:
        data: Decoded JSON body

    Returns:
        TokenResponse holding the request token

    Raises:
        ProtocolError: The body has no usable token
    """
    token = data.get("token")
    if not isinstance(token, str) or not token:
        raise ProtocolError(f"auth.getToken response has no token: {data}")
    return TokenResponse(token=token)


def parse_session(data: dict[str, Any]) -> SessionResponse:
    """Parse an ``auth.getSession`` response.

    Args:
        data: Decoded JSON body

    Returns:
        SessionResponse with the session key and, when present, the user name

    Raises:
        ProtocolError: The body has no session object or the key is empty
    """
    session = data.get("session")
    if not isinstance(session, dict):
        raise ProtocolError(f"auth.getSession response has no session: {data}")
    key = session.get("key")
    if not isinstance(key, str) or not key:
        raise ProtocolError(f"auth.getSession response has no session key: {data}")
    return SessionResponse(key=key, name=_text(session.get("name")))


def _parse_verdict(index: int, item: Any) -> ScrobbleVerdict:
    """Turn one ``scrobble`` entry into a verdict; ignoredMessage code 0 means accepted."""
    if not isinstance(item, dict):
        return ScrobbleVerdict(index, VerdictKind.MALFORMED, reason="missing entry")

    message = item.get("ignoredMessage")
    if not isinstance(message, dict) or "code" not in message:
        return ScrobbleVerdict(index, VerdictKind.MALFORMED, reason="no ignoredMessage")

    code = str(message.get("code")).strip()
    if code == "0":
        return ScrobbleVerdict(index, VerdictKind.ACCEPTED)

    reason = _text(message) or IGNORED_REASONS.get(code, "unknown reason")
    return ScrobbleVerdict(index, VerdictKind.IGNORED, code=code, reason=reason)


def parse_submission(data: dict[str, Any], submitted: int) -> SubmissionResponse:
    """Parse a ``track.scrobble`` response for ``submitted`` tracks.

    Entries are matched to request indices by position. Indices without an
    entry, or with an entry of the wrong shape, get a MALFORMED verdict.

    Args:
        data: Decoded JSON body
        submitted: Number of tracks sent in the request

    Returns:
        SubmissionResponse with one verdict per submitted index

    Raises:
        ProtocolError: The body has no ``scrobbles`` node or no counters
    """
    scrobbles = data.get("scrobbles")
    if not isinstance(scrobbles, dict):
        raise ProtocolError(f"track.scrobble response has no scrobbles: {data}")

    attrs = scrobbles.get("@attr")
    if not isinstance(attrs, dict):
        raise ProtocolError(f"track.scrobble response has no counters: {data}")

    items = _as_list(scrobbles.get("scrobble"))
    verdicts = tuple(
        _parse_verdict(i, items[i] if i < len(items) else None) for i in range(submitted)
    )
    return SubmissionResponse(
        verdicts=verdicts,
        reported_accepted=_int_attr(attrs, "accepted"),
        reported_ignored=_int_attr(attrs, "ignored"),
    )


def _duration(value: Any) -> timedelta | None:
    """Track length from album.getInfo seconds; zero or garbage means unknown."""
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    return timedelta(seconds=seconds) if seconds > 0 else None


def parse_album_info(data: dict[str, Any]) -> AlbumInfoResponse:
    """Parse an ``album.getInfo`` response into tracks in album order.

    Tracks without a name are skipped. A track without its own artist
    inherits the album artist.

    Args:
        data: Decoded JSON body

    Returns:
        AlbumInfoResponse with the album artist, album name and tracks

    Raises:
        ProtocolError: The body has no album or a track entry is not an object
    """
    album = data.get("album")
    if not isinstance(album, dict):
        raise ProtocolError(f"album.getInfo response has no album: {data}")

    album_artist = _text(album.get("artist"))
    album_name = _text(album.get("name"))
    tracks_node = album.get("tracks")
    raw_tracks = _as_list(tracks_node.get("track")) if isinstance(tracks_node, dict) else []

    tracks: list[Track] = []
    for t in raw_tracks:
        if not isinstance(t, dict):
            raise ProtocolError(f"album.getInfo track has unexpected shape: {t!r}")
        name = _text(t.get("name"))
        if not name:
            continue
        artist = t.get("artist")
        artist_name = _text(artist.get("name")) if isinstance(artist, dict) else _text(artist)
        tracks.append(
            Track(
                artist=artist_name or album_artist,
                track=name,
                album=album_name,
                duration=_duration(t.get("duration")),
            )
        )

    return AlbumInfoResponse(artist=album_artist, album=album_name, tracks=tuple(tracks))

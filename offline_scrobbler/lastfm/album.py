import logging

from ..errors import ProtocolError
from .client import LastfmApi
from .responses import parse_album_info
from .scrobble import Track

log = logging.getLogger(__name__)


def fetch_album_tracks(api: LastfmApi, api_key: str, artist: str, album: str) -> list[Track]:
    """Fetch the track list of an album via ``album.getInfo`` (unsigned)."""
    params = {
        "method": "album.getInfo",
        "api_key": api_key,
        "artist": artist,
        "album": album,
        "autocorrect": "1",
    }
    info = parse_album_info(api.get(params))
    if not info.tracks:
        raise ProtocolError(f"Last.fm knows no tracks for album '{album}' by '{artist}'")

    unknown = sum(1 for t in info.tracks if t.duration is None)
    log.info("Found %d tracks on '%s' by %s", len(info.tracks), info.album or album, info.artist or artist)
    if unknown:
        log.debug("%d track(s) without duration", unknown)
    return list(info.tracks)

from ..errors import ConfigurationError
from ..lastfm import LastfmApi, Track, fetch_album_tracks


def single_track(artist: str, track: str) -> list[Track]:
    """A one-track batch from explicit command line values."""
    artist, track = artist.strip(), track.strip()
    if not artist or not track:
        raise ConfigurationError("Both artist and track name are required")
    return [Track(artist=artist, track=track)]


def album_tracks(api: LastfmApi, api_key: str, artist: str, album: str) -> list[Track]:
    """Every track of an album, looked up by artist and album name."""
    artist, album = artist.strip(), album.strip()
    if not artist or not album:
        raise ConfigurationError("Both artist and album name are required")
    return fetch_album_tracks(api, api_key, artist, album)

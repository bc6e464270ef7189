from .page import fetch_page_tracks, tracks_from_page
from .params import album_tracks, single_track

__all__ = [
    "single_track",
    "album_tracks",
    "fetch_page_tracks",
    "tracks_from_page",
]

"""Track lists scraped from public album pages.

Two layouts are understood: pages embedding a schema.org ``MusicAlbum``
JSON-LD block (Bandcamp and most shops), and Last.fm album pages whose
track list is a ``chartlist`` table.
"""

from __future__ import annotations

import json
import logging
import re
import urllib.parse
from html.parser import HTMLParser
from typing import Any

from ..errors import ConfigurationError, ProtocolError
from ..lastfm import LastfmApi, Track
from ..timeline import parse_track_duration

log = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


def _classes(attrs: list[tuple[str, str | None]]) -> set[str]:
    for name, value in attrs:
        if name == "class" and value:
            return set(value.split())
    return set()


def _squash(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class _AlbumPageParser(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.json_ld: list[str] = []
        self.title = ""
        self.artist = ""
        self.rows: list[dict[str, str]] = []
        self._row: dict[str, str] | None = None
        self._capture: str | None = None
        self._depth = 0
        self._buf: list[str] = []

    def _start_capture(self, key: str) -> None:
        self._capture = key
        self._depth = 1
        self._buf = []

    def handle_starttag(self, tag, attrs):
        if self._capture is not None:
            if tag not in VOID_ELEMENTS:
                self._depth += 1
            return

        classes = _classes(attrs)
        if tag == "script" and ("type", "application/ld+json") in attrs:
            self._start_capture("json_ld")
        elif tag == "h1" and "header-new-title" in classes:
            self._start_capture("title")
        elif tag == "a" and "header-new-crumb" in classes:
            self._start_capture("artist")
        elif tag == "tr" and "chartlist-row" in classes:
            self._row = {}
        elif tag == "td" and self._row is not None:
            if "chartlist-name" in classes:
                self._start_capture("name")
            elif "chartlist-duration" in classes:
                self._start_capture("duration")

    def handle_endtag(self, tag):
        if self._capture is not None:
            # <img/> and friends arrive here through handle_startendtag
            if tag in VOID_ELEMENTS:
                return
            self._depth -= 1
            if self._depth == 0:
                self._finish_capture()
            return
        if tag == "tr" and self._row is not None:
            if self._row.get("name"):
                self.rows.append(self._row)
            self._row = None

    def handle_data(self, data):
        if self._capture is not None:
            self._buf.append(data)

    def _finish_capture(self) -> None:
        key, text = self._capture, "".join(self._buf)
        self._capture = None
        if key == "json_ld":
            self.json_ld.append(text)
        elif key == "title":
            self.title = self.title or _squash(text)
        elif key == "artist":
            self.artist = self.artist or _squash(text)
        elif self._row is not None:
            self._row[key] = _squash(text)


def _name_of(node: Any) -> str:
    if isinstance(node, list):
        node = node[0] if node else None
    if isinstance(node, dict):
        return _squash(str(node.get("name", "")))
    if isinstance(node, str):
        return _squash(node)
    return ""


def _find_album(node: Any) -> dict[str, Any] | None:
    if isinstance(node, list):
        for item in node:
            found = _find_album(item)
            if found is not None:
                return found
    elif isinstance(node, dict):
        kind = node.get("@type")
        kinds = kind if isinstance(kind, list) else [kind]
        if "MusicAlbum" in kinds:
            return node
        if "@graph" in node:
            return _find_album(node["@graph"])
    return None


def _tracks_from_json_ld(blocks: list[str]) -> list[Track]:
    for block in blocks:
        try:
            data = json.loads(block)
        except json.JSONDecodeError:
            log.debug("Skipping unparseable JSON-LD block")
            continue

        album = _find_album(data)
        if album is None:
            continue

        album_name = _name_of(album.get("name"))
        album_artist = _name_of(album.get("byArtist"))
        listing = album.get("track")
        if isinstance(listing, dict):
            listing = listing.get("itemListElement", [])
        if not isinstance(listing, list):
            continue

        tracks: list[Track] = []
        for element in listing:
            recording = element.get("item", element) if isinstance(element, dict) else None
            if not isinstance(recording, dict):
                continue
            name = _name_of(recording.get("name"))
            if not name:
                continue
            duration = recording.get("duration")
            tracks.append(
                Track(
                    artist=_name_of(recording.get("byArtist")) or album_artist,
                    track=name,
                    album=album_name,
                    duration=parse_track_duration(duration if isinstance(duration, str) else None),
                )
            )
        if tracks and all(t.artist for t in tracks):
            return tracks
    return []


def _names_from_url(url: str) -> tuple[str, str]:
    """Artist and album from a Last.fm ``/music/<artist>/<album>`` path."""
    parts = [p for p in urllib.parse.urlparse(url).path.split("/") if p]
    if len(parts) >= 3 and parts[0] == "music":
        return urllib.parse.unquote_plus(parts[1]), urllib.parse.unquote_plus(parts[2])
    return "", ""


def tracks_from_page(html: str, url: str) -> list[Track]:
    """Extract the ordered track list of an album page.

    Raises:
        ProtocolError: No track list could be found on the page
    """
    parser = _AlbumPageParser()
    parser.feed(html)
    parser.close()

    tracks = _tracks_from_json_ld(parser.json_ld)
    if tracks:
        log.debug("Read %d tracks from JSON-LD", len(tracks))
        return tracks

    url_artist, url_album = _names_from_url(url)
    artist = parser.artist or url_artist
    album = parser.title or url_album
    if parser.rows and not artist:
        raise ProtocolError(f"Cannot tell the artist of {url}")

    tracks = [
        Track(
            artist=artist,
            track=row["name"],
            album=album,
            duration=parse_track_duration(row.get("duration")),
        )
        for row in parser.rows
    ]
    if not tracks:
        raise ProtocolError(f"No track list found on {url}")
    return tracks


def fetch_page_tracks(api: LastfmApi, url: str) -> list[Track]:
    """Download an album page and scrape its track list."""
    if urllib.parse.urlparse(url).scheme not in {"http", "https"}:
        raise ConfigurationError(f"Not a web page URL: {url}")
    tracks = tracks_from_page(api.fetch_page(url), url)
    log.info("Found %d tracks on %s", len(tracks), url)
    return tracks

import json
from datetime import timedelta

import pytest
from conftest import make_response

from offline_scrobbler.errors import ConfigurationError, ProtocolError
from offline_scrobbler.lastfm import Track
from offline_scrobbler.sources import album_tracks, fetch_page_tracks, single_track, tracks_from_page

LASTFM_PAGE = """
<html><body>
<header>
  <a class="header-new-crumb" href="/music/Radiohead"><span itemprop="name">Radiohead</span></a>
  <h1 class="header-new-title" itemprop="name">OK Computer</h1>
</header>
<section id="tracklist">
<table class="chartlist">
  <tbody>
    <tr class="chartlist-row chartlist-row--with-artist">
      <td class="chartlist-index">1</td>
      <td class="chartlist-name"><a href="/music/Radiohead/_/Airbag" title="Airbag">Airbag</a></td>
      <td class="chartlist-duration">4:44</td>
    </tr>
    <tr class="chartlist-row">
      <td class="chartlist-index">2</td>
      <td class="chartlist-name"><a href="#">Paranoid&nbsp;Android</a><img src="x.png"></td>
      <td class="chartlist-duration">   </td>
    </tr>
  </tbody>
</table>
</section>
</body></html>
"""

JSON_LD = {
    "@context": "https://schema.org",
    "@type": "MusicAlbum",
    "name": "Dummy",
    "byArtist": {"@type": "MusicGroup", "name": "Portishead"},
    "track": {
        "@type": "ItemList",
        "numberOfItems": 2,
        "itemListElement": [
            {"@type": "ListItem", "position": 1, "item": {"@type": "MusicRecording", "name": "Mysterons", "duration": "P00H05M02S"}},
            {"@type": "ListItem", "position": 2, "item": {"@type": "MusicRecording", "name": "Sour Times"}},
        ],
    },
}


def test_single_track_source():
    assert single_track(" Radiohead ", "Airbag") == [Track("Radiohead", "Airbag")]


def test_single_track_requires_names():
    with pytest.raises(ConfigurationError):
        single_track("Radiohead", "  ")


def test_lastfm_album_page():
    tracks = tracks_from_page(LASTFM_PAGE, "https://www.last.fm/music/Radiohead/OK+Computer")
    assert tracks == [
        Track("Radiohead", "Airbag", "OK Computer", timedelta(minutes=4, seconds=44)),
        Track("Radiohead", "Paranoid Android", "OK Computer", None),
    ]


def test_self_closing_tags_inside_cells_keep_the_row():
    html = """
    <a class="header-new-crumb">A</a><h1 class="header-new-title">B</h1>
    <table>
      <tr class="chartlist-row">
        <td class="chartlist-name"><img src="x.png"/><a>One</a><br/></td>
        <td class="chartlist-duration"><br/>3:00</td>
      </tr>
      <tr class="chartlist-row"><td class="chartlist-name"><a>Two</a></td></tr>
    </table>
    """
    tracks = tracks_from_page(html, "https://www.last.fm/music/A/B")
    assert [t.track for t in tracks] == ["One", "Two"]
    assert tracks[0].duration == timedelta(minutes=3)


def test_names_fall_back_to_url_path():
    html = LASTFM_PAGE.replace("header-new-crumb", "crumb").replace("header-new-title", "title")
    tracks = tracks_from_page(html, "https://www.last.fm/music/Massive+Attack/Mezzanine")
    assert tracks[0].artist == "Massive Attack"
    assert tracks[0].album == "Mezzanine"


def test_json_ld_album_wins():
    html = f'<html><head><script type="application/ld+json">{json.dumps(JSON_LD)}</script></head></html>'
    tracks = tracks_from_page(html, "https://portishead.bandcamp.com/album/dummy")
    assert tracks == [
        Track("Portishead", "Mysterons", "Dummy", timedelta(minutes=5, seconds=2)),
        Track("Portishead", "Sour Times", "Dummy", None),
    ]


def test_page_without_tracks_is_protocol_error():
    with pytest.raises(ProtocolError):
        tracks_from_page("<html><body><p>nothing here</p></body></html>", "https://example.com/a")


def test_fetch_page_tracks_uses_session(api, http):
    http.queue(make_response(LASTFM_PAGE))
    tracks = fetch_page_tracks(api, "https://www.last.fm/music/Radiohead/OK+Computer")
    assert len(tracks) == 2
    assert http.calls[0]["url"] == "https://www.last.fm/music/Radiohead/OK+Computer"


def test_fetch_page_missing_page(api, http):
    http.queue(make_response("not found", status=404))
    with pytest.raises(ProtocolError, match="404"):
        fetch_page_tracks(api, "https://www.last.fm/music/Nobody/Nothing")


def test_fetch_page_rejects_non_web_url(api, http):
    with pytest.raises(ConfigurationError):
        fetch_page_tracks(api, "file:///etc/passwd")
    assert http.calls == []


def test_album_lookup(api, http):
    http.queue(
        make_response(
            {
                "album": {
                    "name": "OK Computer",
                    "artist": "Radiohead",
                    "tracks": {
                        "track": [
                            {"name": "Airbag", "duration": 284, "artist": {"name": "Radiohead"}},
                            {"name": "Paranoid Android", "duration": None, "artist": {"name": "Radiohead"}},
                        ]
                    },
                }
            }
        )
    )
    tracks = album_tracks(api, "K", "radiohead", "ok computer")

    assert tracks == [
        Track("Radiohead", "Airbag", "OK Computer", timedelta(seconds=284)),
        Track("Radiohead", "Paranoid Android", "OK Computer", None),
    ]
    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["params"]["method"] == "album.getInfo"
    assert call["params"]["artist"] == "radiohead"
    assert "api_sig" not in call["params"]


def test_album_with_single_track_object(api, http):
    http.queue(
        make_response(
            {"album": {"name": "Single", "artist": "X", "tracks": {"track": {"name": "Only", "duration": "0"}}}}
        )
    )
    assert album_tracks(api, "K", "X", "Single") == [Track("X", "Only", "Single", None)]


def test_unknown_album_is_reported(api, http):
    http.queue(make_response({"error": 6, "message": "Album not found"}, status=404))
    with pytest.raises(ProtocolError, match="Album not found"):
        album_tracks(api, "K", "X", "Nope")


def test_album_without_tracks(api, http):
    http.queue(make_response({"album": {"name": "Empty", "artist": "X"}}))
    with pytest.raises(ProtocolError, match="no tracks"):
        album_tracks(api, "K", "X", "Empty")

from __future__ import annotations

import logging

from ..errors import AUTH_ERROR_CODES, ApiError, AuthenticationError, ConfigurationError
from ..store import AuthConfig
from .client import LastfmApi
from .responses import SubmissionResponse, parse_submission
from .scrobble import ScrobbleEntry

log = logging.getLogger(__name__)

MAX_TRACKS_PER_SCROBBLE = 50


def build_scrobble_params(entries: list[ScrobbleEntry], config: AuthConfig) -> dict[str, str]:
    """Build the unsigned parameter dict of one ``track.scrobble`` call."""
    params: dict[str, str] = {
        "method": "track.scrobble",
        "api_key": config.api_key,
        "sk": config.session_key,
    }
    for i, entry in enumerate(entries):
        params[f"artist[{i}]"] = entry.track.artist
        params[f"track[{i}]"] = entry.track.track
        params[f"timestamp[{i}]"] = str(entry.ts)
        if entry.track.album:
            params[f"album[{i}]"] = entry.track.album
    return params


def submit_scrobbles(api: LastfmApi, config: AuthConfig, entries: list[ScrobbleEntry]) -> SubmissionResponse:
    """Send the whole batch in a single signed request and classify each track.

    Ignored tracks are not an error here; the caller decides what a batch
    with no accepted track means.
    """
    if not entries:
        raise ConfigurationError("Nothing to scrobble: the track list is empty")
    if len(entries) > MAX_TRACKS_PER_SCROBBLE:
        raise ConfigurationError(
            f"Last.fm accepts at most {MAX_TRACKS_PER_SCROBBLE} tracks per submission, got {len(entries)}"
        )

    params = build_scrobble_params(entries, config)
    log.info("Submitting %d scrobble(s)...", len(entries))
    try:
        data = api.post(params, shared_secret=config.secret_key)
    except ApiError as e:
        if e.code in AUTH_ERROR_CODES:
            raise AuthenticationError(f"{e}. Run 'offline-scrobbler auth' again.") from e
        raise

    response = parse_submission(data, len(entries))
    if response.reported_accepted != response.accepted_count:
        log.warning(
            "Last.fm reported %d accepted but %d entries say accepted",
            response.reported_accepted,
            response.accepted_count,
        )
    return response

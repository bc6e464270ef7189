from .album import fetch_album_tracks
from .client import LastfmApi, build_session
from .responses import ScrobbleVerdict, SubmissionResponse, VerdictKind
from .scrobble import ScrobbleEntry, Track
from .session import SessionManager, SessionState
from .signature import compute_signature, sign
from .submit import MAX_TRACKS_PER_SCROBBLE, build_scrobble_params, submit_scrobbles

__all__ = [
    "LastfmApi",
    "build_session",
    "Track",
    "ScrobbleEntry",
    "ScrobbleVerdict",
    "SubmissionResponse",
    "VerdictKind",
    "SessionManager",
    "SessionState",
    "compute_signature",
    "sign",
    "MAX_TRACKS_PER_SCROBBLE",
    "build_scrobble_params",
    "submit_scrobbles",
    "fetch_album_tracks",
]

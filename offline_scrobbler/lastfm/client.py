from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from ..config import LASTFM_API_ROOT
from ..errors import ApiError, NetworkError, ProtocolError
from .signature import sign

log = logging.getLogger(__name__)

USER_AGENT = "offline-scrobbler/0.2 (+https://github.com/theirix/offline-scrobbler)"

_REDACTED = {"api_sig", "sk", "token"}


def _redacted(params: Mapping[str, str]) -> dict[str, str]:
    return {k: ("***" if k in _REDACTED else v) for k, v in params.items()}


def build_session() -> requests.Session:
    """Create the HTTP session shared by every request of a run."""
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


class LastfmApi:
    """Blocking Last.fm web service transport (JSON responses, no retries)."""

    def __init__(
        self,
        api_root: str = LASTFM_API_ROOT,
        timeout: int = 30,
        session: requests.Session | None = None,
    ):
        self.api_root = api_root
        self.timeout = timeout
        self.session = session or build_session()

    def post(self, params: Mapping[str, str], shared_secret: str | None = None) -> dict[str, Any]:
        """POST form-encoded ``params``, signing them when a secret is given."""
        payload = sign(params, shared_secret) if shared_secret is not None else dict(params)
        payload["format"] = "json"
        log.debug("POST %s %s", params.get("method"), _redacted(payload))
        try:
            resp = self.session.post(self.api_root, data=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request to Last.fm failed: {e}") from e
        return self._decode(resp)

    def get(self, params: Mapping[str, str]) -> dict[str, Any]:
        """GET an unsigned, read-only method."""
        query = dict(params)
        query["format"] = "json"
        log.debug("GET %s %s", params.get("method"), _redacted(query))
        try:
            resp = self.session.get(self.api_root, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request to Last.fm failed: {e}") from e
        return self._decode(resp)

    def fetch_page(self, url: str) -> str:
        """Download an arbitrary web page (used for album pages)."""
        log.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ProtocolError(f"Cannot fetch {url}: HTTP {e.response.status_code}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Cannot fetch {url}: {e}") from e
        return resp.text

    def _decode(self, resp: requests.Response) -> dict[str, Any]:
        text = resp.text
        log.debug("Response %d: %s", resp.status_code, text[:2000])
        try:
            data = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and "error" in data:
            try:
                code = int(data["error"])
            except (TypeError, ValueError):
                raise ProtocolError(f"Unrecognized error payload: {text[:500]}") from None
            raise ApiError(code, str(data.get("message", "")))

        if not resp.ok:
            raise ProtocolError(f"Unexpected HTTP status {resp.status_code}: {text[:500]}")

        if not isinstance(data, dict):
            raise ProtocolError(f"Response is not a JSON object: {text[:500]}")

        return data

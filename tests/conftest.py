import json
from datetime import UTC, datetime

import pytest
import requests

from offline_scrobbler.config import Settings
from offline_scrobbler.context import RuntimeContext
from offline_scrobbler.lastfm import LastfmApi
from offline_scrobbler.store import AuthConfig, ConfigStore

API_ROOT = "https://lastfm.test/2.0/"

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def make_response(payload, status: int = 200) -> requests.Response:
    """Build a real requests.Response carrying ``payload`` (JSON or raw text)."""
    resp = requests.Response()
    resp.status_code = status
    body = payload if isinstance(payload, str) else json.dumps(payload)
    resp._content = body.encode("utf-8")
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Stands in for requests.Session; replays queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []
        self.headers: dict[str, str] = {}

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    def _next(self):
        if not self.responses:
            raise AssertionError("unexpected HTTP request")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, data=None, timeout=None):
        self.calls.append({"method": "POST", "url": url, "data": dict(data or {}), "timeout": timeout})
        return self._next()

    def get(self, url, params=None, timeout=None):
        self.calls.append({"method": "GET", "url": url, "params": dict(params or {}), "timeout": timeout})
        return self._next()


@pytest.fixture
def http() -> FakeSession:
    return FakeSession()


@pytest.fixture
def api(http) -> LastfmApi:
    return LastfmApi(API_ROOT, timeout=10, session=http)


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    return ConfigStore(tmp_path / "config.json")


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(api_key="K", secret_key="S", session_key="SK")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(config_dir=str(tmp_path), api_root=API_ROOT, http_timeout=10)


@pytest.fixture
def ctx(settings, api) -> RuntimeContext:
    return RuntimeContext.build(settings, api=api)


def scrobble_payload(*codes: str, reasons: dict[int, str] | None = None) -> dict:
    """A track.scrobble JSON response with one entry per ignoredMessage code."""
    reasons = reasons or {}
    items = [
        {
            "artist": {"corrected": "0", "#text": f"Artist {i}"},
            "track": {"corrected": "0", "#text": f"Track {i}"},
            "ignoredMessage": {"code": code, "#text": reasons.get(i, "")},
        }
        for i, code in enumerate(codes)
    ]
    accepted = sum(1 for c in codes if c == "0")
    return {
        "scrobbles": {
            "scrobble": items[0] if len(items) == 1 else items,
            "@attr": {"accepted": accepted, "ignored": len(codes) - accepted},
        }
    }

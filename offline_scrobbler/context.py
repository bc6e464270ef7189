from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .lastfm import LastfmApi, SessionManager
from .store import ConfigStore

if TYPE_CHECKING:
    from .config import Settings


@dataclass
class RuntimeContext:
    """Runtime context containing all shared dependencies of one invocation."""

    settings: Settings
    api: LastfmApi
    store: ConfigStore
    sessions: SessionManager

    @staticmethod
    def build(settings: Settings, api: LastfmApi | None = None) -> "RuntimeContext":
        api = api or LastfmApi(settings.api_root, timeout=settings.http_timeout)
        store = ConfigStore(settings.config_file)
        return RuntimeContext(
            settings=settings,
            api=api,
            store=store,
            sessions=SessionManager(api, store, auth_url=settings.auth_url),
        )

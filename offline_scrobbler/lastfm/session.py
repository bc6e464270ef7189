from __future__ import annotations

import logging
import urllib.parse
import webbrowser
from collections.abc import Callable
from enum import Enum

from ..config import LASTFM_AUTH_URL
from ..errors import AuthenticationError, ConfigurationError, ScrobblerError
from ..store import AuthConfig, ConfigStore
from .client import LastfmApi
from .responses import parse_session, parse_token

log = logging.getLogger(__name__)


class SessionState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    TOKEN_OBTAINED = "token_obtained"
    AUTHENTICATED = "authenticated"


def _wait_for_enter(url: str) -> None:
    log.info("Open this URL and click 'Yes, allow access':\n%s", url)
    try:
        input("After approving, press Enter to continue...")
    except EOFError:
        log.debug("stdin is closed, continuing without confirmation")


class SessionManager:
    """Owns the API key/secret -> token -> session key lifecycle.

    The session key is persisted through ``store`` only once the whole
    exchange succeeded, so an interrupted or failed ``auth`` leaves the
    previous config untouched.
    """

    def __init__(
        self,
        api: LastfmApi,
        store: ConfigStore,
        auth_url: str = LASTFM_AUTH_URL,
    ):
        self.api = api
        self.store = store
        self.auth_url = auth_url
        self.state = SessionState.UNAUTHENTICATED
        self.config: AuthConfig | None = None
        self._api_key: str | None = None
        self._token: str | None = None

    def load(self) -> SessionState:
        """Load a previously saved session; skips the token exchange entirely."""
        config = self.store.load()
        if config is not None:
            self.config = config
            self.state = SessionState.AUTHENTICATED
            log.debug("Loaded session for API key %s", config.api_key)
        return self.state

    def require_session(self) -> AuthConfig:
        """Return the stored credentials or fail with an instruction to run auth."""
        if self.state is not SessionState.AUTHENTICATED:
            self.load()
        if self.config is None:
            raise ConfigurationError(
                f"No Last.fm session found in {self.store.config_file}. Run 'offline-scrobbler auth' first."
            )
        return self.config

    def request_token(self, api_key: str) -> str:
        """UNAUTHENTICATED -> TOKEN_OBTAINED. ``auth.getToken`` is sent unsigned."""
        try:
            data = self.api.post({"method": "auth.getToken", "api_key": api_key})
            token = parse_token(data).token
        except ScrobblerError as e:
            raise AuthenticationError(f"Cannot obtain request token: {e}") from e

        self._api_key = api_key
        self._token = token
        self.state = SessionState.TOKEN_OBTAINED
        log.debug("Obtained request token")
        return token

    def authorization_url(self) -> str:
        if self._api_key is None or self._token is None:
            raise AuthenticationError("No request token; call request_token() first")
        query = urllib.parse.urlencode({"api_key": self._api_key, "token": self._token})
        return f"{self.auth_url}?{query}"

    def exchange_token(self, secret_key: str) -> AuthConfig:
        """TOKEN_OBTAINED -> AUTHENTICATED via a signed ``auth.getSession``.

        The token must already have been approved by the user in the browser.
        """
        if self.state is not SessionState.TOKEN_OBTAINED or self._api_key is None or self._token is None:
            raise AuthenticationError("No request token; call request_token() first")

        params = {"method": "auth.getSession", "api_key": self._api_key, "token": self._token}
        try:
            data = self.api.post(params, shared_secret=secret_key)
            session = parse_session(data)
        except ScrobblerError as e:
            raise AuthenticationError(f"Cannot obtain session key: {e}") from e

        config = AuthConfig(api_key=self._api_key, secret_key=secret_key, session_key=session.key)
        self.store.save(config)

        self.config = config
        self.state = SessionState.AUTHENTICATED
        self._token = None
        if session.name:
            log.info("Authenticated as %s", session.name)
        return config

    def authenticate(
        self,
        api_key: str,
        secret_key: str,
        confirm: Callable[[str], None] = _wait_for_enter,
        open_browser: bool = True,
    ) -> AuthConfig:
        """Run the whole interactive flow and persist the resulting session key."""
        log.info("Requesting authorization token...")
        self.request_token(api_key)
        url = self.authorization_url()
        if open_browser:
            try:
                webbrowser.open(url)
            except webbrowser.Error as e:
                log.debug("Cannot open browser: %s", e)
        confirm(url)
        log.info("Exchanging token for session key...")
        return self.exchange_token(secret_key)

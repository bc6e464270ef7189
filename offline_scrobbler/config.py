import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")

APP_NAME = "offline-scrobbler"

LASTFM_API_ROOT = "https://ws.audioscrobbler.com/2.0/"

LASTFM_AUTH_URL = "https://www.last.fm/api/auth/"


def _str_to_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except Exception:
        return default


def _default_config_dir() -> Path:
    explicit = os.getenv("OFFLINE_SCROBBLER_CONFIG_DIR", "").strip()
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.getenv("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_NAME


@dataclass(frozen=True)
class Settings:
    """Application configuration loaded from environment variables."""

    config_dir: str
    api_root: str = LASTFM_API_ROOT
    auth_url: str = LASTFM_AUTH_URL
    http_timeout: int = 30
    default_track_duration: int = 180
    log_level: str = "INFO"

    @property
    def config_file(self) -> Path:
        """Return the path of the persisted auth config record."""
        return Path(self.config_dir) / "config.json"

    @staticmethod
    def from_env() -> "Settings":
        """Load settings from environment variables."""
        api_root = os.getenv("LASTFM_API_ROOT", LASTFM_API_ROOT).strip() or LASTFM_API_ROOT
        auth_url = os.getenv("LASTFM_AUTH_URL", LASTFM_AUTH_URL).strip() or LASTFM_AUTH_URL

        http_timeout = _str_to_int(os.getenv("HTTP_TIMEOUT"), 30)
        if http_timeout <= 0:
            http_timeout = 30

        default_track_duration = _str_to_int(os.getenv("DEFAULT_TRACK_DURATION"), 180)
        if default_track_duration <= 0:
            default_track_duration = 180

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            log_level = "INFO"

        return Settings(
            config_dir=str(_default_config_dir()),
            api_root=api_root,
            auth_url=auth_url,
            http_timeout=http_timeout,
            default_track_duration=default_track_duration,
            log_level=log_level,
        )


def configure_logging(level: str) -> None:
    """Configure logging with the specified level."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(levelname)s: %(message)s",
    )

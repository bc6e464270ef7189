from __future__ import annotations

import fcntl
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from .errors import ConfigurationError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Credentials plus the session key issued by Last.fm."""

    api_key: str
    secret_key: str
    session_key: str


class ConfigStore:
    """JSON file holding the auth config, written atomically under a file lock."""

    def __init__(self, config_file: str | Path, enable_locking: bool = True):
        """Initialize the store with a file path.

        Args:
            config_file: Path to the JSON config record
            enable_locking: Enable file locking while reading and writing
        """
        self.config_file = Path(config_file)
        self.enable_locking = enable_locking

    def load(self) -> AuthConfig | None:
        """Read the config record.

        Returns:
            The stored AuthConfig, or None when no record exists yet

        Raises:
            ConfigurationError: The file exists but cannot be read or is incomplete
        """
        if not self.config_file.exists():
            log.debug("No config found at %s", self.config_file)
            return None

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                if self.enable_locking:
                    fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = json.load(f)
                finally:
                    if self.enable_locking:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Corrupted config file {self.config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.config_file} does not hold an object")

        values = {}
        for field in ("api_key", "secret_key", "session_key"):
            value = data.get(field)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"Config file {self.config_file} has no '{field}'")
            values[field] = value

        log.debug("Loaded config from %s", self.config_file)
        return AuthConfig(**values)

    def save(self, config: AuthConfig) -> None:
        """Write the config record atomically (temp file, then rename).

        The temp file is created owner-only since it holds the shared secret,
        and is removed again if anything fails before the rename.

        Raises:
            ConfigurationError: The record could not be written
        """
        temp_file = self.config_file.with_suffix(".tmp")
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            temp_file.unlink(missing_ok=True)
            fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)

            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if self.enable_locking:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    json.dump(asdict(config), f, indent=2)
                finally:
                    if self.enable_locking:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)

            temp_file.replace(self.config_file)
        except OSError as e:
            temp_file.unlink(missing_ok=True)
            log.error("Cannot write config file %s: %s", self.config_file, e)
            raise ConfigurationError(f"Cannot write config file {self.config_file}: {e}") from e

        log.info("Saved auth config to %s", self.config_file)

import json
import stat
from pathlib import Path

import pytest

from offline_scrobbler.errors import ConfigurationError
from offline_scrobbler.store import AuthConfig, ConfigStore


def test_missing_file_loads_as_none(store):
    assert store.load() is None


def test_save_then_load(store, auth_config):
    store.save(auth_config)
    assert ConfigStore(store.config_file).load() == auth_config
    assert json.loads(store.config_file.read_text()) == {
        "api_key": "K",
        "secret_key": "S",
        "session_key": "SK",
    }


def test_save_creates_directory_and_leaves_no_temp_file(tmp_path, auth_config):
    store = ConfigStore(tmp_path / "nested" / "dir" / "config.json")
    store.save(auth_config)
    assert store.config_file.exists()
    assert not store.config_file.with_suffix(".tmp").exists()


def test_save_replaces_previous_record(store, auth_config):
    store.save(auth_config)
    store.save(AuthConfig(api_key="K2", secret_key="S2", session_key="SK2"))
    assert store.load().session_key == "SK2"


def test_corrupted_file_is_a_configuration_error(store):
    store.config_file.write_text("{not json")
    with pytest.raises(ConfigurationError, match="Corrupted"):
        store.load()


@pytest.mark.parametrize("payload", [[], {"api_key": "K", "secret_key": "S"}, {"api_key": "K", "secret_key": "S", "session_key": ""}])
def test_incomplete_record_is_a_configuration_error(store, payload):
    store.config_file.write_text(json.dumps(payload))
    with pytest.raises(ConfigurationError):
        store.load()


def test_saved_record_is_owner_only(store, auth_config):
    store.save(auth_config)
    assert stat.S_IMODE(store.config_file.stat().st_mode) == 0o600


def test_stale_temp_file_does_not_leak_its_mode(store, auth_config):
    temp_file = store.config_file.with_suffix(".tmp")
    temp_file.write_text("stale")
    temp_file.chmod(0o644)
    store.save(auth_config)
    assert stat.S_IMODE(store.config_file.stat().st_mode) == 0o600


def test_failed_rename_removes_temp_file(store, auth_config, monkeypatch):
    def fail(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", fail)
    with pytest.raises(ConfigurationError, match="disk full"):
        store.save(auth_config)
    assert not store.config_file.with_suffix(".tmp").exists()
    assert not store.config_file.exists()

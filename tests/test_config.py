"""Tests for scanner config loading."""

import os
import tempfile

import pytest

from pantrypal.scanner.config import ScannerConfig, load_config


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for var in ("GEMINI_API_KEY", "ANTHROPIC_API_KEY", "PANTRYPAL_SECRET_KEY"):
        monkeypatch.delenv(var, raising=False)


def _load_toml(content: bytes) -> ScannerConfig:
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(content)
        f.flush()
        name = f.name
    try:
        return load_config(name)
    finally:
        os.unlink(name)


def test_load_config_defaults():
    """Loading with no path returns all defaults."""
    config = load_config()
    assert isinstance(config, ScannerConfig)
    assert config.camera.indices == [0]
    assert config.vision.backend == "gemini"
    assert config.vision.min_confidence == 0.3
    assert config.vision.timeout == 30.0
    assert config.vision.gemini.api_key == ""
    assert config.household.currency == "USD"
    assert config.scheduler.expiry_schedule == "0 0 * * *"
    assert config.scheduler.expiring_soon_days == 3
    assert config.secrets.key == ""


def test_missing_keys_are_not_an_error():
    """No API key anywhere is a valid configuration."""
    config = load_config()
    assert config.vision.system_api_key == ""


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.camera.indices == [0]


def test_load_config_from_toml():
    """Loading a valid TOML file populates config."""
    config = _load_toml(b"""\
[camera]
indices = [1, 2]
save_dir = "/var/pantrypal"

[vision]
backend = "claude"
min_confidence = 0.5
timeout = 12.5

[vision.claude]
api_key = "test-key-123"
model = "claude-test"

[database]
path = "/data/pantry.db"

[household]
currency = "EUR"

[scheduler]
expiry_schedule = "30 6 * * *"
expiring_soon_days = 2
""")
    assert config.camera.indices == [1, 2]
    assert config.camera.save_dir == "/var/pantrypal"
    assert config.vision.backend == "claude"
    assert config.vision.min_confidence == 0.5
    assert config.vision.timeout == 12.5
    assert config.vision.claude.api_key == "test-key-123"
    assert config.vision.claude.model == "claude-test"
    assert config.vision.system_api_key == "test-key-123"
    assert config.database.path == "/data/pantry.db"
    assert config.household.currency == "EUR"
    assert config.scheduler.expiry_schedule == "30 6 * * *"
    assert config.scheduler.expiring_soon_days == 2


def test_load_config_env_override(monkeypatch):
    """Environment variables fill empty keys."""
    monkeypatch.setenv("GEMINI_API_KEY", "env-gemini-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-anthropic-key")
    monkeypatch.setenv("PANTRYPAL_SECRET_KEY", "env-secret")

    config = load_config()
    assert config.vision.gemini.api_key == "env-gemini-key"
    assert config.vision.claude.api_key == "env-anthropic-key"
    assert config.vision.system_api_key == "env-gemini-key"
    assert config.secrets.key == "env-secret"


def test_load_config_file_key_takes_precedence(monkeypatch):
    """Config file API key takes precedence over env var."""
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    config = _load_toml(b"""\
[vision.gemini]
api_key = "file-key"
""")
    assert config.vision.gemini.api_key == "file-key"


def test_load_config_partial_toml():
    """Partial TOML uses defaults for missing sections."""
    config = _load_toml(b"""\
[camera]
indices = [3]
""")
    assert config.camera.indices == [3]
    assert config.vision.backend == "gemini"
    assert config.household.currency == "USD"


def test_load_config_rejects_bad_min_confidence():
    with pytest.raises(ValueError, match="min_confidence"):
        _load_toml(b"""\
[vision]
min_confidence = 1.5
""")


def test_system_api_key_unknown_backend():
    config = load_config()
    config.vision.backend = "other"
    assert config.vision.system_api_key == ""

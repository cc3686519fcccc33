"""Settings validation."""

import pytest
from pydantic import ValidationError

from keyforge.core.config import Settings


def test_defaults():
    app_settings = Settings(_env_file=None)
    assert app_settings.KEY_STORE == "memory"
    assert app_settings.KEY_PREFIX == "tvly-"
    assert app_settings.KEY_BYTES == 16
    assert app_settings.SEED_DEFAULT_KEY is False


def test_database_store_requires_url():
    with pytest.raises(ValidationError):
        Settings(KEY_STORE="database", DATABASE_URL=None, _env_file=None)


def test_key_bytes_floor():
    with pytest.raises(ValidationError):
        Settings(KEY_BYTES=8, _env_file=None)


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("KEY_PREFIX", "sk_")
    monkeypatch.setenv("SEED_DEFAULT_KEY", "true")
    app_settings = Settings(_env_file=None)
    assert app_settings.KEY_PREFIX == "sk_"
    assert app_settings.SEED_DEFAULT_KEY is True

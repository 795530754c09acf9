"""Tests for configuration validation."""

import logging
from types import SimpleNamespace

import pytest

from creatorhub.core.config import Settings, get_database_url, validate_config


def make_settings(**overrides):
    defaults = dict(
        ENV="development",
        CONFIG_STRICT=False,
        DATABASE_URL="sqlite:///./creatorhub.db",
        TEST_DATABASE_URL=None,
        JWT_SECRET="secret",
    )
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def test_complete_config_passes_strict():
    assert validate_config(strict=True, settings_obj=make_settings()) is True


def test_missing_secret_raises_in_strict_mode():
    with pytest.raises(RuntimeError) as exc:
        validate_config(strict=True, settings_obj=make_settings(JWT_SECRET=None))
    assert "JWT_SECRET" in str(exc.value)


def test_missing_keys_only_warn_when_not_strict(caplog):
    logger = logging.getLogger("creatorhub.test_config")
    with caplog.at_level(logging.WARNING, logger="creatorhub.test_config"):
        validate_config(strict=False, settings_obj=make_settings(JWT_SECRET=None, DATABASE_URL=""), logger=logger)
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "JWT_SECRET" in messages
    assert "DATABASE_URL" in messages


def test_secret_values_are_never_logged(caplog):
    logger = logging.getLogger("creatorhub.test_config")
    with caplog.at_level(logging.WARNING, logger="creatorhub.test_config"):
        validate_config(strict=False, settings_obj=make_settings(DATABASE_URL="postgresql://u:hunter2@db/x", JWT_SECRET=None), logger=logger)
    assert "hunter2" not in caplog.text


def test_test_database_url_takes_precedence():
    cfg = make_settings(TEST_DATABASE_URL="sqlite://")
    assert get_database_url(cfg) == "sqlite://"
    assert get_database_url(make_settings()) == "sqlite:///./creatorhub.db"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com")
    cfg = Settings(_env_file=None)
    assert cfg.JWT_ACCESS_TOKEN_EXPIRE_MINUTES == 15
    assert cfg.cors_origins_list == ["https://a.example.com", "https://b.example.com"]

"""Tests for environment-driven configuration."""

import dataclasses

import pytest

import config as config_module
from config import load_config
from core.exceptions import ConfigurationError
from utils.timeutils import resolve_timezone
from web.app import create_app

ENV_KEYS = (
    "ADMIN_USERNAME", "ADMIN_PASSWORD", "ENVIRONMENT", "DEBUG", "WEB_PORT",
    "DATABASE_PATH", "SESSION_COUNT", "SESSION_TIMEZONE", "STATS_CACHE_TTL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = load_config()

    assert config.admin_username == "admin"
    assert config.web_port == 5000
    assert config.debug is False
    assert config.database_path == "data/backoffice.sqlite"
    assert config.session_count == 30
    assert config.session_timezone == "Asia/Ho_Chi_Minh"
    assert config.max_upload_size == 5 * 1024 * 1024


def test_environment_overrides(clean_env):
    clean_env.setenv("WEB_PORT", "8080")
    clean_env.setenv("DEBUG", "yes")
    clean_env.setenv("SESSION_COUNT", "12")
    clean_env.setenv("SESSION_TIMEZONE", "UTC")

    config = load_config()

    assert config.web_port == 8080
    assert config.debug is True
    assert config.session_count == 12
    assert config.session_timezone == "UTC"


def test_invalid_integer_falls_back(clean_env):
    clean_env.setenv("WEB_PORT", "eighty")
    assert load_config().web_port == 5000
    assert config_module._env_number("STATS_CACHE_TTL", 30) == 30


def test_resolve_timezone():
    assert resolve_timezone("Asia/Ho_Chi_Minh").key == "Asia/Ho_Chi_Minh"
    with pytest.raises(ConfigurationError):
        resolve_timezone("Mars/Olympus_Mons")


def test_unknown_timezone_fails_app_creation(config):
    with pytest.raises(ConfigurationError):
        create_app(dataclasses.replace(config, session_timezone="Nowhere/City"), testing=True)


def test_testing_app_settings(app, config):
    assert app.testing
    assert app.config["DATABASE_PATH"] == config.database_path
    assert app.config["WTF_CSRF_ENABLED"] is False
    assert app.config["SESSION_TIMEZONE"].key == "Asia/Ho_Chi_Minh"


def test_out_of_range_number_is_rejected(clean_env):
    clean_env.setenv("SESSION_COUNT", "-5")
    with pytest.raises(ConfigurationError):
        load_config()


def test_insecure_settings(clean_env):
    clean_env.delenv("SECRET_KEY", raising=False)
    config = load_config()
    assert config.insecure_settings() == ["ADMIN_USERNAME/ADMIN_PASSWORD", "SECRET_KEY"]

    hardened = dataclasses.replace(config, admin_password="long-random-value", secret_key="x" * 32)
    assert hardened.insecure_settings() == []

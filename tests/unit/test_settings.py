"""Settings resolution tests."""

from __future__ import annotations

import os
from pathlib import Path

from cdr_discovery.config.settings import load_settings, resolve_http_timeout


def test_defaults_without_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_settings()
    assert settings.base_url == "https://ns-api.com"
    assert settings.access_token == ""
    assert settings.http_timeout_seconds == 30.0
    assert settings.default_limit == 100
    assert settings.results_ttl_seconds == 3600.0
    assert settings.results_max_sessions is None
    assert settings.persistence_enabled is True
    assert settings.debug_logging is True


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NETSAPIENS_BASE_URL", "https://pbx.example.com/")
    monkeypatch.setenv("NETSAPIENS_ACCESS_TOKEN", "abc123")
    monkeypatch.setenv("CDR_DEFAULT_LIMIT", "250")
    monkeypatch.setenv("CDR_RESULTS_TTL_SECONDS", "90")
    monkeypatch.setenv("CDR_RESULTS_MAX_SESSIONS", "500")
    monkeypatch.setenv("CDR_PERSISTENCE_ENABLED", "off")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "x.sqlite3"))
    monkeypatch.setenv("CDR_DEBUG_LOGGING", "0")

    settings = load_settings()
    assert settings.base_url == "https://pbx.example.com"
    assert settings.access_token == "abc123"
    assert settings.default_limit == 250
    assert settings.results_ttl_seconds == 90.0
    assert settings.results_max_sessions == 500
    assert settings.persistence_enabled is False
    assert settings.database_path == Path(tmp_path / "x.sqlite3")
    assert settings.debug_logging is False


def test_invalid_numbers_fall_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CDR_DEFAULT_LIMIT", "lots")
    monkeypatch.setenv("CDR_RESULTS_TTL_SECONDS", "-5")
    monkeypatch.setenv("CDR_RESULTS_MAX_SESSIONS", "0")
    settings = load_settings()
    assert settings.default_limit == 100
    assert settings.results_ttl_seconds == 3600.0
    assert settings.results_max_sessions is None


def test_http_timeout_is_clamped(monkeypatch):
    monkeypatch.setenv("CDR_HTTP_TIMEOUT_SECONDS", "600")
    assert resolve_http_timeout() == 120.0
    monkeypatch.setenv("CDR_HTTP_TIMEOUT_SECONDS", "0.1")
    assert resolve_http_timeout() == 1.0
    monkeypatch.setenv("CDR_HTTP_TIMEOUT_SECONDS", "abc")
    assert resolve_http_timeout() == 30.0


def test_env_file_is_loaded_without_overriding_process_env(tmp_path, monkeypatch):
    env_file = tmp_path / "discovery.env"
    env_file.write_text("NETSAPIENS_ACCESS_TOKEN=from-file\nCDR_DEFAULT_LIMIT=42\n", encoding="utf-8")
    monkeypatch.setenv("CDR_DEFAULT_LIMIT", "7")
    try:
        settings = load_settings(env_file)
        assert settings.access_token == "from-file"
        assert settings.default_limit == 7
    finally:
        os.environ.pop("NETSAPIENS_ACCESS_TOKEN", None)

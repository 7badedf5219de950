"""Discovery settings resolved from the environment."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}

_DEFAULT_BASE_URL = "https://ns-api.com"
_DEFAULT_DB_PATH = Path("data") / "cdr_discovery.sqlite3"
_TIMEOUT_FLOOR_SECONDS = 1.0
_TIMEOUT_CAP_SECONDS = 120.0


def _is_enabled(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


class DiscoverySettings(BaseModel):
    base_url: str = Field(default=_DEFAULT_BASE_URL)
    access_token: str = Field(default="")
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    default_limit: int = Field(default=100, ge=1)
    results_ttl_seconds: float = Field(default=3600.0, gt=0)
    results_max_sessions: int | None = Field(default=None, ge=1)
    persistence_enabled: bool = Field(default=True)
    database_path: Path = Field(default=_DEFAULT_DB_PATH)
    debug_logging: bool = Field(default=True)


def resolve_http_timeout() -> float:
    raw = _env_float("CDR_HTTP_TIMEOUT_SECONDS", 30.0)
    return max(_TIMEOUT_FLOOR_SECONDS, min(raw, _TIMEOUT_CAP_SECONDS))


def load_settings(env_file: str | Path | None = None) -> DiscoverySettings:
    """Read settings from the process environment, after an optional .env file."""
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    limit = _env_int("CDR_DEFAULT_LIMIT", 100)
    ttl = _env_float("CDR_RESULTS_TTL_SECONDS", 3600.0)
    max_sessions = _env_int("CDR_RESULTS_MAX_SESSIONS", 0)
    return DiscoverySettings(
        base_url=_env_str("NETSAPIENS_BASE_URL", _DEFAULT_BASE_URL).rstrip("/"),
        access_token=_env_str("NETSAPIENS_ACCESS_TOKEN", ""),
        http_timeout_seconds=resolve_http_timeout(),
        default_limit=limit if limit > 0 else 100,
        results_ttl_seconds=ttl if ttl > 0 else 3600.0,
        results_max_sessions=max_sessions if max_sessions > 0 else None,
        persistence_enabled=_is_enabled(os.getenv("CDR_PERSISTENCE_ENABLED"), True),
        database_path=Path(_env_str("DATABASE_PATH", str(_DEFAULT_DB_PATH))),
        debug_logging=_is_enabled(os.getenv("CDR_DEBUG_LOGGING"), True),
    )


__all__ = [
    "DiscoverySettings",
    "load_settings",
    "resolve_http_timeout",
]

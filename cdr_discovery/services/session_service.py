"""Read-only access to cached and stored discovery sessions."""

from __future__ import annotations

from cdr_discovery.application.context import DiscoveryContext
from cdr_discovery.discovery.contracts import DiscoveryResult, raw_data_summary
from cdr_discovery.persistence.models import (
    DiscoveryAnalytic,
    SessionRecordRow,
    SessionSummaryItem,
    StoredDiscoverySession,
)


def get_cached_result(*, ctx: DiscoveryContext, session_id: str) -> DiscoveryResult | None:
    """None means the session is unknown or expired."""
    return ctx.results_cache.get(session_id)


def get_raw_data_summary(*, ctx: DiscoveryContext, session_id: str) -> dict[str, bool] | None:
    result = ctx.results_cache.get(session_id)
    if result is None:
        return None
    return raw_data_summary(result)


def get_stored_session(*, ctx: DiscoveryContext, session_id: str) -> StoredDiscoverySession | None:
    repo = ctx.persistence_repo
    fetch = getattr(repo, "get_session", None)
    if not callable(fetch):
        return None
    return fetch(session_id)


def list_sessions(*, ctx: DiscoveryContext, limit: int = 20) -> list[SessionSummaryItem]:
    repo = ctx.persistence_repo
    fetch = getattr(repo, "list_sessions", None)
    if not callable(fetch):
        return []
    safe_limit = max(1, min(limit, 100))
    return list(fetch(safe_limit))


def list_session_records(*, ctx: DiscoveryContext, session_id: str) -> list[SessionRecordRow]:
    repo = ctx.persistence_repo
    fetch = getattr(repo, "list_session_records", None)
    if not callable(fetch):
        return []
    return list(fetch(session_id))


def list_top_analytics(*, ctx: DiscoveryContext, limit: int = 20) -> list[DiscoveryAnalytic]:
    repo = ctx.persistence_repo
    fetch = getattr(repo, "list_top_analytics", None)
    if not callable(fetch):
        return []
    safe_limit = max(1, min(limit, 100))
    return list(fetch(safe_limit))


__all__ = [
    "get_cached_result",
    "get_raw_data_summary",
    "get_stored_session",
    "list_session_records",
    "list_sessions",
    "list_top_analytics",
]

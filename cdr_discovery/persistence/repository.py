"""Persistence repository interface and factory."""

from __future__ import annotations

from typing import Protocol

from cdr_discovery.config.settings import DiscoverySettings
from cdr_discovery.discovery.contracts import DiscoveryResult
from cdr_discovery.persistence.models import (
    CompositeReport,
    DiscoveryAnalytic,
    EndpointResultRow,
    SessionRecordRow,
    SessionSummaryItem,
    StoredCompositeReport,
    StoredDiscoverySession,
)
from cdr_discovery.persistence.sqlite_repository import SQLiteDiscoveryRepository


class DiscoveryPersistenceRepository(Protocol):
    backend: str

    def save_session(self, result: DiscoveryResult) -> None: ...

    def save_composite_report(self, session_id: str, report: CompositeReport) -> None: ...

    def get_session(self, session_id: str) -> StoredDiscoverySession | None: ...

    def list_sessions(self, limit: int = 20) -> list[SessionSummaryItem]: ...

    def list_endpoint_results(self, session_id: str) -> list[EndpointResultRow]: ...

    def list_session_records(self, session_id: str) -> list[SessionRecordRow]: ...

    def list_composite_reports(self, session_id: str) -> list[StoredCompositeReport]: ...

    def list_top_analytics(self, limit: int = 20) -> list[DiscoveryAnalytic]: ...


class NoopDiscoveryRepository:
    backend = "noop"

    def save_session(self, result: DiscoveryResult) -> None:
        _ = result

    def save_composite_report(self, session_id: str, report: CompositeReport) -> None:
        _ = (session_id, report)

    def get_session(self, session_id: str) -> StoredDiscoverySession | None:
        _ = session_id
        return None

    def list_sessions(self, limit: int = 20) -> list[SessionSummaryItem]:
        _ = limit
        return []

    def list_endpoint_results(self, session_id: str) -> list[EndpointResultRow]:
        _ = session_id
        return []

    def list_session_records(self, session_id: str) -> list[SessionRecordRow]:
        _ = session_id
        return []

    def list_composite_reports(self, session_id: str) -> list[StoredCompositeReport]:
        _ = session_id
        return []

    def list_top_analytics(self, limit: int = 20) -> list[DiscoveryAnalytic]:
        _ = limit
        return []


def get_discovery_persistence(settings: DiscoverySettings) -> DiscoveryPersistenceRepository:
    if not settings.persistence_enabled:
        return NoopDiscoveryRepository()
    return SQLiteDiscoveryRepository(settings.database_path)


__all__ = [
    "DiscoveryPersistenceRepository",
    "NoopDiscoveryRepository",
    "get_discovery_persistence",
]

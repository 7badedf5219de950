"""Persistence package exports."""

from cdr_discovery.persistence.analytics import AnalyticsTracker, discovery_value
from cdr_discovery.persistence.migration_runner import MigrationReport, apply_sqlite_migrations
from cdr_discovery.persistence.models import (
    CompositeReport,
    DiscoveryAnalytic,
    EndpointResultRow,
    SessionRecordRow,
    SessionSummaryItem,
    StoredCompositeReport,
    StoredDiscoverySession,
)
from cdr_discovery.persistence.repository import (
    DiscoveryPersistenceRepository,
    NoopDiscoveryRepository,
    get_discovery_persistence,
)
from cdr_discovery.persistence.sqlite_repository import SQLiteDiscoveryRepository

__all__ = [
    "AnalyticsTracker",
    "CompositeReport",
    "DiscoveryAnalytic",
    "DiscoveryPersistenceRepository",
    "EndpointResultRow",
    "NoopDiscoveryRepository",
    "SQLiteDiscoveryRepository",
    "SessionRecordRow",
    "SessionSummaryItem",
    "StoredCompositeReport",
    "StoredDiscoverySession",
    "MigrationReport",
    "apply_sqlite_migrations",
    "discovery_value",
    "get_discovery_persistence",
]

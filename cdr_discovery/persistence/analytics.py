"""Discovery analytics: per (parameter combination, endpoint) productivity.

Every successful endpoint query that returned records bumps one row keyed by
the serialized search criteria and the endpoint name. The row accumulates the
success count, records found and query time; ``discovery_value`` is records
found per second of query time across all of those runs.

The upsert is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement, so two
sessions hitting the same key never lose an increment. Nothing reads these
rows back into endpoint selection.
"""

from __future__ import annotations

import sqlite3

from cdr_discovery.discovery.contracts import DiscoveryResult, EndpointResult

# Floor for elapsed time so a sub-millisecond query cannot divide by zero.
_MIN_QUERY_TIME_MS = 1.0

_UPSERT_SQL = """
INSERT INTO discovery_analytics (
    parameter_combination, endpoint_name, success_count, total_cdrs_found,
    total_query_time_ms, avg_query_time_ms, last_successful_use, discovery_value,
    created_at, updated_at
) VALUES (?, ?, 1, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(parameter_combination, endpoint_name) DO UPDATE SET
    success_count = success_count + 1,
    total_cdrs_found = total_cdrs_found + excluded.total_cdrs_found,
    total_query_time_ms = total_query_time_ms + excluded.total_query_time_ms,
    avg_query_time_ms = (total_query_time_ms + excluded.total_query_time_ms) / (success_count + 1),
    last_successful_use = excluded.last_successful_use,
    discovery_value = (total_cdrs_found + excluded.total_cdrs_found) * 1000.0
        / MAX(total_query_time_ms + excluded.total_query_time_ms, ?),
    updated_at = excluded.updated_at
"""


def discovery_value(records_found: int, query_time_ms: float) -> float:
    """Records found per second of query time."""
    return records_found * 1000.0 / max(query_time_ms, _MIN_QUERY_TIME_MS)


def is_tracked(result: EndpointResult) -> bool:
    return result.success and result.record_count > 0


class AnalyticsTracker:
    """Writes analytics rows inside the caller's session transaction."""

    def record_session(self, conn: sqlite3.Connection, result: DiscoveryResult, *, now: str) -> int:
        """Upsert one row per productive endpoint; return how many were written."""
        combination = result.search_criteria.serialize()
        written = 0
        for endpoint_result in result.endpoint_results:
            if not is_tracked(endpoint_result):
                continue
            elapsed_ms = endpoint_result.query_time_seconds * 1000.0
            conn.execute(
                _UPSERT_SQL,
                (
                    combination,
                    endpoint_result.endpoint_name,
                    endpoint_result.record_count,
                    elapsed_ms,
                    elapsed_ms,
                    now,
                    discovery_value(endpoint_result.record_count, elapsed_ms),
                    now,
                    now,
                    _MIN_QUERY_TIME_MS,
                ),
            )
            written += 1
        return written


__all__ = ["AnalyticsTracker", "discovery_value", "is_tracked"]

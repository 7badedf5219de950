"""SQLite implementation of discovery session persistence."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from cdr_discovery.discovery.contracts import DiscoveryResult, EndpointResult
from cdr_discovery.persistence.analytics import AnalyticsTracker
from cdr_discovery.persistence.migration_runner import apply_sqlite_migrations
from cdr_discovery.persistence.models import (
    CompositeReport,
    DiscoveryAnalytic,
    EndpointResultRow,
    SessionRecordRow,
    SessionSummaryItem,
    StoredCompositeReport,
    StoredDiscoverySession,
)
from cdr_discovery.records.record import Record
from cdr_discovery.shared.exceptions import PersistenceError

_logger = logging.getLogger("cdr-discovery.persistence")


def _to_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def _from_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utc_now() -> str:
    return _iso(datetime.now(timezone.utc))


class SQLiteDiscoveryRepository:
    backend = "sqlite"

    def __init__(self, db_path: str | Path, *, analytics: AnalyticsTracker | None = None) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._analytics = analytics or AnalyticsTracker()
        self._lock = threading.Lock()
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def schema_version(self) -> str:
        return self._schema_version

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back on any exception, always close."""
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self._transaction() as conn:
            report = apply_sqlite_migrations(conn)
        self._schema_version = report.schema_version

    # Writes

    def save_session(self, result: DiscoveryResult) -> None:
        """
        Store the session, its endpoint results, its records and analytics in
        one transaction. Storing the same session id again replaces the
        session row and its endpoint/record rows.
        """
        now = _utc_now()
        try:
            with self._transaction() as conn:
                self._upsert_session(conn, result, now)
                conn.execute("DELETE FROM endpoint_results WHERE session_id = ?", (result.session_id,))
                conn.execute("DELETE FROM session_records WHERE session_id = ?", (result.session_id,))
                for endpoint_result in result.endpoint_results:
                    self._insert_endpoint_result(conn, result.session_id, endpoint_result, now)
                for endpoint_name, records in result.records_by_endpoint.items():
                    for record in records:
                        self._insert_session_record(conn, result.session_id, endpoint_name, record, now)
                self._analytics.record_session(conn, result, now=now)
        except sqlite3.Error as exc:
            _logger.warning("persisting session %s failed: %s", result.session_id, exc)
            raise PersistenceError(result.session_id, str(exc)) from exc

    def _upsert_session(self, conn: sqlite3.Connection, result: DiscoveryResult, now: str) -> None:
        conn.execute(
            """
            INSERT INTO discovery_sessions (
                session_id, search_criteria, start_time, end_time, total_cdrs, unique_cdrs,
                endpoints_queried, successful_endpoints, failed_endpoints, total_query_time_ms,
                raw_data_used, errors, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET
                search_criteria=excluded.search_criteria,
                start_time=excluded.start_time,
                end_time=excluded.end_time,
                total_cdrs=excluded.total_cdrs,
                unique_cdrs=excluded.unique_cdrs,
                endpoints_queried=excluded.endpoints_queried,
                successful_endpoints=excluded.successful_endpoints,
                failed_endpoints=excluded.failed_endpoints,
                total_query_time_ms=excluded.total_query_time_ms,
                raw_data_used=excluded.raw_data_used,
                errors=excluded.errors
            """,
            (
                result.session_id,
                result.search_criteria.serialize(),
                _iso(result.start_time),
                _iso(result.end_time),
                result.total_records,
                result.unique_records,
                len(result.endpoint_results),
                result.successful_endpoints,
                result.failed_endpoints,
                result.total_query_time_ms,
                int(result.raw_data_used),
                _to_json(list(result.errors)),
                now,
            ),
        )

    def _insert_endpoint_result(
        self, conn: sqlite3.Connection, session_id: str, result: EndpointResult, now: str
    ) -> None:
        conn.execute(
            """
            INSERT INTO endpoint_results (
                session_id, endpoint_name, endpoint_url, record_count, success,
                error_message, query_time_ms, http_status, raw_data_used, parameter_count,
                discovered_data, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session_id,
                result.endpoint_name,
                result.url,
                result.record_count,
                int(result.success),
                result.error or None,
                result.query_time_ms,
                result.http_status or None,
                int(result.raw_data_used),
                result.parameter_count,
                int(result.discovered_data),
                now,
            ),
        )

    def _insert_session_record(
        self, conn: sqlite3.Connection, session_id: str, endpoint_name: str, record: Record, now: str
    ) -> None:
        conn.execute(
            """
            INSERT OR IGNORE INTO session_records (
                session_id, record_id, endpoint_source, raw_json, field_count, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                session_id,
                record.record_id,
                endpoint_name,
                _to_json(record.to_dict()),
                len(record.field_names),
                now,
            ),
        )

    def save_composite_report(self, session_id: str, report: CompositeReport) -> None:
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO composite_reports (
                        session_id, report_name, report_type, selected_fields, filter_criteria,
                        output_format, report_data, record_count, file_size_bytes,
                        generation_time_ms, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        session_id,
                        report.name,
                        report.report_type,
                        _to_json(report.selected_fields),
                        _to_json(report.filter_criteria),
                        report.output_format,
                        report.data,
                        report.record_count,
                        len(report.data.encode("utf-8")),
                        report.generation_time_ms,
                        _utc_now(),
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(session_id, f"report {report.name!r}: {exc}") from exc

    # Reads

    def get_session(self, session_id: str) -> StoredDiscoverySession | None:
        with self._transaction() as conn:
            row = conn.execute(
                """
                SELECT
                    session_id, search_criteria, start_time, end_time, total_cdrs, unique_cdrs,
                    endpoints_queried, successful_endpoints, failed_endpoints,
                    total_query_time_ms, raw_data_used, errors, created_at
                FROM discovery_sessions
                WHERE session_id = ?
                """,
                (session_id,),
            ).fetchone()
        if row is None:
            return None
        return StoredDiscoverySession(
            session_id=row[0],
            search_criteria=_from_json(row[1], {}),
            start_time=row[2],
            end_time=row[3],
            total_cdrs=row[4],
            unique_cdrs=row[5],
            endpoints_queried=row[6],
            successful_endpoints=row[7],
            failed_endpoints=row[8],
            total_query_time_ms=row[9],
            raw_data_used=bool(row[10]),
            errors=_from_json(row[11], []),
            created_at=row[12],
        )

    def list_sessions(self, limit: int = 20) -> list[SessionSummaryItem]:
        safe_limit = max(1, min(limit, 100))
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT session_id, start_time, total_cdrs, unique_cdrs, failed_endpoints
                FROM discovery_sessions
                ORDER BY start_time DESC, rowid DESC
                LIMIT ?
                """,
                (safe_limit,),
            ).fetchall()
        return [
            SessionSummaryItem(
                session_id=row[0],
                start_time=row[1],
                total_cdrs=row[2],
                unique_cdrs=row[3],
                failed_endpoints=row[4],
            )
            for row in rows
        ]

    def list_endpoint_results(self, session_id: str) -> list[EndpointResultRow]:
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT
                    session_id, endpoint_name, endpoint_url, record_count, success,
                    error_message, query_time_ms, http_status, raw_data_used,
                    parameter_count, discovered_data, created_at
                FROM endpoint_results
                WHERE session_id = ?
                ORDER BY id ASC
                """,
                (session_id,),
            ).fetchall()
        return [
            EndpointResultRow(
                session_id=row[0],
                endpoint_name=row[1],
                endpoint_url=row[2],
                record_count=row[3],
                success=bool(row[4]),
                error_message=row[5] or "",
                query_time_ms=row[6],
                http_status=row[7],
                raw_data_used=bool(row[8]),
                parameter_count=row[9],
                discovered_data=bool(row[10]),
                created_at=row[11],
            )
            for row in rows
        ]

    def list_session_records(self, session_id: str) -> list[SessionRecordRow]:
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT record_id, endpoint_source, raw_json, field_count, created_at
                FROM session_records
                WHERE session_id = ?
                ORDER BY id ASC
                """,
                (session_id,),
            ).fetchall()
        return [
            SessionRecordRow(
                record_id=row[0],
                endpoint_source=row[1],
                raw_json=_from_json(row[2], {}),
                field_count=row[3],
                created_at=row[4],
            )
            for row in rows
        ]

    def list_composite_reports(self, session_id: str) -> list[StoredCompositeReport]:
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT
                    session_id, report_name, report_type, selected_fields, filter_criteria,
                    output_format, report_data, record_count, file_size_bytes,
                    generation_time_ms, created_at
                FROM composite_reports
                WHERE session_id = ?
                ORDER BY id ASC
                """,
                (session_id,),
            ).fetchall()
        return [
            StoredCompositeReport(
                session_id=row[0],
                name=row[1],
                report_type=row[2],
                selected_fields=_from_json(row[3], []),
                filter_criteria=_from_json(row[4], {}),
                output_format=row[5],
                data=row[6],
                record_count=row[7],
                file_size_bytes=row[8],
                generation_time_ms=row[9],
                created_at=row[10],
            )
            for row in rows
        ]

    def list_top_analytics(self, limit: int = 20) -> list[DiscoveryAnalytic]:
        safe_limit = max(1, min(limit, 100))
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT
                    parameter_combination, endpoint_name, success_count, total_cdrs_found,
                    avg_query_time_ms, last_successful_use, discovery_value
                FROM discovery_analytics
                ORDER BY discovery_value DESC, success_count DESC
                LIMIT ?
                """,
                (safe_limit,),
            ).fetchall()
        return [
            DiscoveryAnalytic(
                parameter_combination=_from_json(row[0], {}),
                endpoint_name=row[1],
                success_count=row[2],
                total_cdrs_found=row[3],
                avg_query_time_ms=row[4],
                last_successful_use=row[5],
                discovery_value=row[6],
            )
            for row in rows
        ]


__all__ = ["SQLiteDiscoveryRepository"]

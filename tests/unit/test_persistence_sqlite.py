"""SQLite discovery repository tests."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from cdr_discovery.discovery.contracts import DiscoveryResult, EndpointResult, SearchCriteria
from cdr_discovery.persistence.analytics import AnalyticsTracker, discovery_value
from cdr_discovery.persistence.models import CompositeReport
from cdr_discovery.persistence.sqlite_repository import SQLiteDiscoveryRepository
from cdr_discovery.records.record import Record
from cdr_discovery.shared.exceptions import PersistenceError


def _records(*ids: str) -> tuple[Record, ...]:
    return tuple(Record({"id": rid, "domain": "a.com"}) for rid in ids)


def _result(session_id: str = "cdr_session_1", *, criteria: SearchCriteria | None = None) -> DiscoveryResult:
    started = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    global_records = _records("a", "b")
    domain_records = _records("b", "c")
    return DiscoveryResult(
        session_id=session_id,
        search_criteria=criteria or SearchCriteria(domain="a.com", limit=100, raw=True),
        start_time=started,
        end_time=started + timedelta(seconds=1),
        total_records=4,
        unique_records=3,
        endpoint_results=(
            EndpointResult(
                endpoint_name="global_cdrs",
                url="https://api.test/ns-api/v2/cdrs?limit=100&raw=yes",
                record_count=2,
                success=True,
                query_time_seconds=0.2,
                http_status=200,
                raw_data_used=True,
                parameter_count=2,
                records=global_records,
            ),
            EndpointResult(
                endpoint_name="domain_cdrs",
                url="https://api.test/ns-api/v2/domains/a.com/cdrs?limit=100&raw=yes",
                record_count=2,
                success=True,
                query_time_seconds=0.1,
                http_status=200,
                raw_data_used=True,
                parameter_count=2,
                records=domain_records,
            ),
            EndpointResult(
                endpoint_name="user_cdrs",
                url="https://api.test/x",
                success=False,
                error="HTTP 500: 500 Internal Server Error",
                query_time_seconds=0.05,
                http_status=500,
            ),
        ),
        all_records=_records("a", "b", "c"),
        records_by_endpoint={"global_cdrs": global_records, "domain_cdrs": domain_records},
        errors=("user_cdrs: HTTP 500: 500 Internal Server Error",),
    )


def test_save_session_roundtrip(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    repo.save_session(_result())

    stored = repo.get_session("cdr_session_1")
    assert stored is not None
    assert stored.total_cdrs == 4
    assert stored.unique_cdrs == 3
    assert stored.endpoints_queried == 3
    assert stored.successful_endpoints == 2
    assert stored.failed_endpoints == 1
    assert stored.raw_data_used is True
    assert stored.search_criteria["domain"] == "a.com"
    assert stored.errors == ["user_cdrs: HTTP 500: 500 Internal Server Error"]
    assert stored.start_time.startswith("2024-05-01T12:00:00")

    endpoints = repo.list_endpoint_results("cdr_session_1")
    assert [row.endpoint_name for row in endpoints] == ["global_cdrs", "domain_cdrs", "user_cdrs"]
    assert endpoints[0].query_time_ms == 200
    assert endpoints[0].discovered_data is True
    assert endpoints[2].success is False
    assert endpoints[2].http_status == 500
    assert endpoints[2].error_message.startswith("HTTP 500")

    rows = repo.list_session_records("cdr_session_1")
    assert [(row.endpoint_source, row.record_id) for row in rows] == [
        ("global_cdrs", "a"),
        ("global_cdrs", "b"),
        ("domain_cdrs", "b"),
        ("domain_cdrs", "c"),
    ]
    assert rows[0].raw_json == {"id": "a", "domain": "a.com"}
    assert rows[0].field_count == 2


def test_unknown_session_is_none(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    assert repo.get_session("missing") is None
    assert repo.list_session_records("missing") == []


def test_saving_same_session_twice_replaces_child_rows(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    repo.save_session(_result())
    repo.save_session(_result())

    assert len(repo.list_sessions()) == 1
    assert len(repo.list_endpoint_results("cdr_session_1")) == 3
    assert len(repo.list_session_records("cdr_session_1")) == 4


def test_list_sessions_newest_first(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    repo.save_session(_result("cdr_session_1"))
    later = _result("cdr_session_2").model_copy(
        update={"start_time": datetime(2024, 5, 2, tzinfo=timezone.utc)}
    )
    repo.save_session(later)

    sessions = repo.list_sessions(limit=10)
    assert [s.session_id for s in sessions] == ["cdr_session_2", "cdr_session_1"]
    assert len(repo.list_sessions(limit=1)) == 1


def test_analytics_accumulate_per_criteria_and_endpoint(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    repo.save_session(_result("cdr_session_1"))
    repo.save_session(_result("cdr_session_2"))

    rows = {row.endpoint_name: row for row in repo.list_top_analytics()}
    assert set(rows) == {"global_cdrs", "domain_cdrs"}

    global_row = rows["global_cdrs"]
    assert global_row.success_count == 2
    assert global_row.total_cdrs_found == 4
    assert global_row.avg_query_time_ms == pytest.approx(200.0)
    assert global_row.discovery_value == pytest.approx(discovery_value(4, 400.0))
    assert global_row.parameter_combination["domain"] == "a.com"

    domain_row = rows["domain_cdrs"]
    assert domain_row.discovery_value == pytest.approx(20.0)
    ordered = repo.list_top_analytics()
    assert ordered[0].endpoint_name == "domain_cdrs"


def test_analytics_keys_differ_by_criteria(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    repo.save_session(_result("cdr_session_1"))
    repo.save_session(_result("cdr_session_2", criteria=SearchCriteria(domain="b.com", limit=100, raw=True)))
    assert len(repo.list_top_analytics()) == 4


def test_discovery_value_floors_elapsed_time():
    assert discovery_value(5, 0.0) == pytest.approx(5000.0)
    assert discovery_value(10, 2000.0) == pytest.approx(5.0)


class _FailingAnalytics(AnalyticsTracker):
    def record_session(self, conn, result, *, now):
        raise sqlite3.OperationalError("disk I/O error")


def test_failed_save_rolls_back_everything(tmp_path):
    db_path = tmp_path / "cdr.sqlite3"
    repo = SQLiteDiscoveryRepository(db_path, analytics=_FailingAnalytics())

    with pytest.raises(PersistenceError, match="cdr_session_1"):
        repo.save_session(_result())

    assert repo.get_session("cdr_session_1") is None
    assert repo.list_endpoint_results("cdr_session_1") == []
    assert repo.list_session_records("cdr_session_1") == []


def test_composite_report_roundtrip(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    repo.save_session(_result())
    report = CompositeReport(
        name="daily",
        report_type="call_summary",
        output_format="csv",
        data="id,domain\na,a.com\n",
        selected_fields=["id", "domain"],
        filter_criteria={"domain": "a.com"},
        record_count=1,
        generation_time_ms=3,
    )
    repo.save_composite_report("cdr_session_1", report)

    stored = repo.list_composite_reports("cdr_session_1")
    assert len(stored) == 1
    assert stored[0].name == "daily"
    assert stored[0].selected_fields == ["id", "domain"]
    assert stored[0].filter_criteria == {"domain": "a.com"}
    assert stored[0].file_size_bytes == len(report.data.encode("utf-8"))


def test_composite_report_for_unknown_session_fails(tmp_path):
    repo = SQLiteDiscoveryRepository(tmp_path / "cdr.sqlite3")
    report = CompositeReport(name="r", report_type="t", output_format="json", data="{}")
    with pytest.raises(PersistenceError):
        repo.save_composite_report("missing", report)

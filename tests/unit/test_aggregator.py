"""Record union and deduplication tests."""

from __future__ import annotations

from cdr_discovery.discovery.aggregator import aggregate, deduplicate_records
from cdr_discovery.discovery.contracts import EndpointResult
from cdr_discovery.records.record import Record


def _ok(name: str, *ids: str) -> EndpointResult:
    records = tuple(Record({"id": rid, "source": name}) for rid in ids)
    return EndpointResult(endpoint_name=name, success=True, record_count=len(records), records=records)


def test_deduplicate_keeps_first_occurrence():
    first = Record({"id": "rec-1", "source": "a"})
    second = Record({"id": "rec-1", "source": "b"})
    unique = deduplicate_records([first, second, Record({"id": "rec-2"})])
    assert [r.record_id for r in unique] == ["rec-1", "rec-2"]
    assert unique[0].get_str("source") == "a"


def test_deduplicate_uses_legacy_id_and_drops_records_without_identity():
    unique = deduplicate_records([Record({"cdr_id": "x"}), Record({"id": "x"}), Record({"domain": "d"})])
    assert [r.record_id for r in unique] == ["x"]


def test_deduplicate_is_idempotent():
    records = [Record({"id": "a"}), Record({"id": "b"}), Record({"id": "a"})]
    once = deduplicate_records(records)
    assert deduplicate_records(once) == once


def test_same_record_from_two_endpoints_counts_once_in_unique():
    summary = aggregate([_ok("global_cdrs", "rec-1"), _ok("domain_cdrs", "rec-1")])
    assert summary.total_records == 2
    assert summary.unique_records == 1
    assert summary.duplicates_removed == 1
    assert summary.all_records[0].get_str("source") == "global_cdrs"
    assert set(summary.records_by_endpoint) == {"global_cdrs", "domain_cdrs"}


def test_failed_and_empty_endpoints_contribute_nothing():
    failed = EndpointResult(endpoint_name="user_cdrs", success=False, error="HTTP 500: 500 Internal Server Error")
    summary = aggregate([_ok("global_cdrs", "a", "b"), _ok("domain_cdrs"), failed])
    assert summary.total_records == 2
    assert summary.unique_records == 2
    assert list(summary.records_by_endpoint) == ["global_cdrs"]


def test_aggregate_of_nothing_is_empty():
    summary = aggregate([])
    assert summary.total_records == 0
    assert summary.unique_records == 0
    assert summary.all_records == ()
    assert summary.records_by_endpoint == {}

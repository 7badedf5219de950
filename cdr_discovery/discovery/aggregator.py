"""Union and deduplicate records collected from several endpoints."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from cdr_discovery.discovery.contracts import EndpointResult
from cdr_discovery.records.record import Record


@dataclass(frozen=True)
class AggregateSummary:
    all_records: tuple[Record, ...] = ()
    records_by_endpoint: dict[str, tuple[Record, ...]] = field(default_factory=dict)
    total_records: int = 0
    unique_records: int = 0
    duplicates_removed: int = 0


def deduplicate_records(records: Iterable[Record]) -> list[Record]:
    """Keep the first record per identity; records without an identity are dropped."""
    seen: set[str] = set()
    unique: list[Record] = []
    for record in records:
        record_id = record.record_id
        if not record_id or record_id in seen:
            continue
        seen.add(record_id)
        unique.append(record)
    return unique


def aggregate(endpoint_results: Sequence[EndpointResult]) -> AggregateSummary:
    """
    Successful endpoints contribute their records in iteration order; the
    total counts every successful endpoint's records, duplicates included.
    """
    merged: list[Record] = []
    by_endpoint: dict[str, tuple[Record, ...]] = {}
    total = 0
    for result in endpoint_results:
        if not result.success:
            continue
        total += result.record_count
        if result.records:
            by_endpoint[result.endpoint_name] = by_endpoint.get(result.endpoint_name, ()) + result.records
            merged.extend(result.records)

    unique = deduplicate_records(merged)
    return AggregateSummary(
        all_records=tuple(unique),
        records_by_endpoint=by_endpoint,
        total_records=total,
        unique_records=len(unique),
        duplicates_removed=len(merged) - len(unique),
    )


__all__ = ["AggregateSummary", "aggregate", "deduplicate_records"]

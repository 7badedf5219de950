"""Discovery request/response contracts."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cdr_discovery.records.record import Record


class SearchCriteria(BaseModel):
    """Caller-supplied search filters; every field is optional."""

    model_config = ConfigDict(frozen=True)

    domain: str = ""
    user: str = ""
    site: str = ""
    call_id: str = ""
    originating_number: str = ""
    terminating_number: str = ""
    any_phone_number: str = ""
    start_date: date | None = None
    end_date: date | None = None
    start: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)
    raw: bool = False

    def path_params(self) -> dict[str, str]:
        return {"domain": self.domain, "user": self.user, "site": self.site}

    def serialize(self) -> str:
        """Stable JSON form, used as the analytics parameter-combination key."""
        return json.dumps(
            self.model_dump(mode="json"),
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        )


class EndpointConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url_template: str
    required_params: tuple[str, ...] = ()
    optional_params: tuple[str, ...] = ()
    supports_raw: bool = False
    description: str = ""

    @property
    def is_count_endpoint(self) -> bool:
        return "count" in self.name


class EndpointResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoint_name: str
    url: str = ""
    record_count: int = 0
    success: bool = False
    error: str = ""
    query_time_seconds: float = 0.0
    http_status: int = 0
    raw_data_used: bool = False
    parameter_count: int = 0
    records: tuple[Record, ...] = ()

    @property
    def query_time_ms(self) -> int:
        return int(self.query_time_seconds * 1000)

    @property
    def discovered_data(self) -> bool:
        return self.success and self.record_count > 0


class DiscoveryResult(BaseModel):
    """Frozen outcome of one discovery run."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    search_criteria: SearchCriteria
    start_time: datetime
    end_time: datetime
    total_records: int = 0
    unique_records: int = 0
    endpoint_results: tuple[EndpointResult, ...] = ()
    all_records: tuple[Record, ...] = ()
    records_by_endpoint: dict[str, tuple[Record, ...]] = Field(default_factory=dict)
    errors: tuple[str, ...] = ()

    @property
    def successful_endpoints(self) -> int:
        return sum(1 for item in self.endpoint_results if item.success)

    @property
    def failed_endpoints(self) -> int:
        return len(self.endpoint_results) - self.successful_endpoints

    @property
    def total_query_time_ms(self) -> int:
        return sum(item.query_time_ms for item in self.endpoint_results)

    @property
    def raw_data_used(self) -> bool:
        return any(item.raw_data_used for item in self.endpoint_results)

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def summary(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "total_records": self.total_records,
            "unique_records": self.unique_records,
            "endpoints_queried": len(self.endpoint_results),
            "successful_endpoints": self.successful_endpoints,
            "failed_endpoints": self.failed_endpoints,
            "errors": len(self.errors),
            "records_by_endpoint": {name: len(items) for name, items in self.records_by_endpoint.items()},
        }


def raw_data_summary(result: DiscoveryResult) -> dict[str, bool]:
    """Endpoint name -> whether raw mode was applied for that query."""
    return {item.endpoint_name: item.raw_data_used for item in result.endpoint_results}


__all__ = [
    "DiscoveryResult",
    "EndpointConfig",
    "EndpointResult",
    "SearchCriteria",
    "raw_data_summary",
]

"""Persistence-layer record schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class StoredDiscoverySession(BaseModel):
    session_id: str
    search_criteria: dict[str, Any] = Field(default_factory=dict)
    start_time: str
    end_time: str | None = None
    total_cdrs: int = 0
    unique_cdrs: int = 0
    endpoints_queried: int = 0
    successful_endpoints: int = 0
    failed_endpoints: int = 0
    total_query_time_ms: int = 0
    raw_data_used: bool = False
    errors: list[str] = Field(default_factory=list)
    created_at: str


class SessionSummaryItem(BaseModel):
    session_id: str
    start_time: str
    total_cdrs: int
    unique_cdrs: int
    failed_endpoints: int


class EndpointResultRow(BaseModel):
    session_id: str
    endpoint_name: str
    endpoint_url: str
    record_count: int = 0
    success: bool = False
    error_message: str = ""
    query_time_ms: int = 0
    http_status: int | None = None
    raw_data_used: bool = False
    parameter_count: int = 0
    discovered_data: bool = False
    created_at: str


class SessionRecordRow(BaseModel):
    record_id: str
    endpoint_source: str
    raw_json: dict[str, Any] = Field(default_factory=dict)
    field_count: int = 0
    created_at: str


class CompositeReport(BaseModel):
    name: str
    report_type: str
    output_format: str
    data: str
    selected_fields: list[str] = Field(default_factory=list)
    filter_criteria: dict[str, Any] = Field(default_factory=dict)
    record_count: int = 0
    generation_time_ms: int = 0


class StoredCompositeReport(CompositeReport):
    session_id: str
    file_size_bytes: int = 0
    created_at: str


class DiscoveryAnalytic(BaseModel):
    parameter_combination: dict[str, Any] = Field(default_factory=dict)
    endpoint_name: str
    success_count: int = 0
    total_cdrs_found: int = 0
    avg_query_time_ms: float = 0.0
    last_successful_use: str | None = None
    discovery_value: float = 0.0


__all__ = [
    "CompositeReport",
    "DiscoveryAnalytic",
    "EndpointResultRow",
    "SessionRecordRow",
    "SessionSummaryItem",
    "StoredCompositeReport",
    "StoredDiscoverySession",
]

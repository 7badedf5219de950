"""Build, send and decode one endpoint query."""

from __future__ import annotations

import re
import time
from urllib.parse import quote

import httpx

from cdr_discovery.discovery.contracts import EndpointConfig, EndpointResult, SearchCriteria
from cdr_discovery.infrastructure.http_client import EndpointHttpClient
from cdr_discovery.infrastructure.logging import StructuredLogger
from cdr_discovery.records.decoder import RecordFormatError, decode_response
from cdr_discovery.shared.exceptions import (
    EndpointError,
    HTTPStatusError,
    ResponseDecodeError,
    URLBuildError,
)

_PLACEHOLDER_RE = re.compile(r"\{([a-z_]+)\}")
_DATE_FORMAT = "%Y-%m-%d"


def build_query_params(endpoint: EndpointConfig, criteria: SearchCriteria) -> list[tuple[str, str]]:
    """
    Query parameters sorted by name; values sharing a name keep insertion
    order. ``start`` carries both the pagination offset and the range start
    date when both are set.
    """
    params: list[tuple[str, str]] = []
    if criteria.start > 0:
        params.append(("start", str(criteria.start)))
    if criteria.limit > 0:
        params.append(("limit", str(criteria.limit)))
    if endpoint.supports_raw and criteria.raw:
        params.append(("raw", "yes"))
    if criteria.start_date is not None:
        params.append(("start", criteria.start_date.strftime(_DATE_FORMAT)))
    if criteria.end_date is not None:
        params.append(("end", criteria.end_date.strftime(_DATE_FORMAT)))
    if criteria.call_id:
        params.append(("call_id", criteria.call_id))
    if criteria.originating_number:
        params.append(("orig_number", criteria.originating_number))
    if criteria.terminating_number:
        params.append(("term_number", criteria.terminating_number))
    return sorted(params, key=lambda item: item[0])


def build_endpoint_path(endpoint: EndpointConfig, criteria: SearchCriteria) -> str:
    values = criteria.path_params()

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        value = str(values.get(name, "") or "").strip()
        if not value:
            raise URLBuildError(endpoint.name, f"URL build error: no value for path parameter '{name}'")
        return quote(value, safe="@")

    return _PLACEHOLDER_RE.sub(substitute, endpoint.url_template)


def build_endpoint_url(endpoint: EndpointConfig, criteria: SearchCriteria, base_url: str) -> tuple[str, int]:
    """Return the full request URL and the number of query parameters it carries."""
    path = build_endpoint_path(endpoint, criteria)
    params = build_query_params(endpoint, criteria)
    try:
        url = httpx.URL(base_url.rstrip("/") + path, params=params)
    except httpx.InvalidURL as exc:
        raise URLBuildError(endpoint.name, f"URL build error: {exc}") from None
    return str(url), len(params)


class QueryExecutor:
    """Runs endpoint queries for one discovery run; every failure becomes a failed result."""

    def __init__(
        self,
        http_client: EndpointHttpClient,
        *,
        base_url: str,
        access_token: str,
        logger: StructuredLogger | None = None,
    ):
        self._http = http_client
        self._base_url = base_url
        self._token = access_token
        self._logger = logger

    def execute(self, endpoint: EndpointConfig, criteria: SearchCriteria) -> EndpointResult:
        started = time.perf_counter()
        raw_used = endpoint.supports_raw and criteria.raw
        url = ""
        param_count = 0
        status = 0
        elapsed: float | None = None

        try:
            url, param_count = build_endpoint_url(endpoint, criteria, self._base_url)
            if self._logger is not None:
                self._logger.endpoint_start(endpoint.name, url=url, raw=raw_used)
            try:
                resp = self._http.get(endpoint.name, url, token=self._token)
            finally:
                elapsed = time.perf_counter() - started
            status = resp.status_code
            try:
                payload = resp.json()
            except (ValueError, RecursionError) as exc:
                raise ResponseDecodeError(endpoint.name, f"JSON decode error: {exc}") from None
            try:
                records = decode_response(payload)
            except (RecordFormatError, RecursionError) as exc:
                raise ResponseDecodeError(endpoint.name, f"record conversion error: {exc}") from None
        except EndpointError as exc:
            if isinstance(exc, HTTPStatusError):
                status = exc.status_code
            result = EndpointResult(
                endpoint_name=endpoint.name,
                url=url,
                success=False,
                error=exc.detail,
                query_time_seconds=elapsed if elapsed is not None else time.perf_counter() - started,
                http_status=status,
                raw_data_used=raw_used if url else False,
                parameter_count=param_count,
            )
            if self._logger is not None:
                self._logger.endpoint_end(endpoint.name, success=False, error=exc.detail, http_status=status)
            return result

        result = EndpointResult(
            endpoint_name=endpoint.name,
            url=url,
            record_count=len(records),
            success=True,
            query_time_seconds=elapsed,
            http_status=status,
            raw_data_used=raw_used,
            parameter_count=param_count,
            records=tuple(records),
        )
        if self._logger is not None:
            sample = records[0].record_id if records else ""
            self._logger.endpoint_end(
                endpoint.name,
                success=True,
                record_count=result.record_count,
                http_status=status,
                sample_id=sample,
            )
        return result


__all__ = [
    "QueryExecutor",
    "build_endpoint_path",
    "build_endpoint_url",
    "build_query_params",
]

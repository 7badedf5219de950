"""Endpoint URL building and query execution tests."""

from __future__ import annotations

import io
import json
from datetime import date

import httpx
import pytest

from cdr_discovery.discovery.catalog import find_endpoint
from cdr_discovery.discovery.contracts import EndpointConfig, SearchCriteria
from cdr_discovery.discovery.executor import (
    QueryExecutor,
    build_endpoint_path,
    build_endpoint_url,
    build_query_params,
)
from cdr_discovery.infrastructure.logging import StructuredLogger
from cdr_discovery.shared.exceptions import URLBuildError

BASE_URL = "https://api.test"
TOKEN = "tok-secret-123"


def test_query_params_include_raw_only_when_supported_and_requested():
    records = find_endpoint("global_cdrs")
    count = find_endpoint("global_count")
    raw = SearchCriteria(raw=True)

    assert ("raw", "yes") in build_query_params(records, raw)
    assert ("raw", "yes") not in build_query_params(records, SearchCriteria(raw=False))
    assert ("raw", "yes") not in build_query_params(count, raw)


def test_query_params_are_sorted_by_name():
    criteria = SearchCriteria(
        limit=50,
        raw=True,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        call_id="abc",
        originating_number="1001",
        terminating_number="1002",
    )
    params = build_query_params(find_endpoint("global_cdrs"), criteria)
    assert params == [
        ("call_id", "abc"),
        ("end", "2024-01-31"),
        ("limit", "50"),
        ("orig_number", "1001"),
        ("raw", "yes"),
        ("start", "2024-01-01"),
        ("term_number", "1002"),
    ]


def test_offset_and_start_date_share_the_start_parameter():
    criteria = SearchCriteria(start=200, start_date=date(2024, 2, 1))
    params = build_query_params(find_endpoint("global_count"), criteria)
    assert params == [("start", "200"), ("start", "2024-02-01")]


def test_zero_offset_and_limit_are_omitted():
    assert build_query_params(find_endpoint("global_count"), SearchCriteria()) == []


def test_path_substitution_escapes_values():
    endpoint = find_endpoint("user_cdrs")
    path = build_endpoint_path(endpoint, SearchCriteria(domain="acme.com", user="jo doe@x"))
    assert path == "/ns-api/v2/domains/acme.com/users/jo%20doe@x/cdrs"


def test_missing_path_value_is_a_url_build_error():
    with pytest.raises(URLBuildError, match="URL build error"):
        build_endpoint_path(find_endpoint("domain_cdrs"), SearchCriteria())


def test_build_endpoint_url_reports_parameter_count():
    endpoint = find_endpoint("domain_cdrs")
    url, count = build_endpoint_url(endpoint, SearchCriteria(domain="a.com", limit=100, raw=True), BASE_URL + "/")
    assert url == "https://api.test/ns-api/v2/domains/a.com/cdrs?limit=100&raw=yes"
    assert count == 2


def _executor(client, output=None) -> QueryExecutor:
    logger = StructuredLogger(trace_id="t", output=output or io.StringIO())
    return QueryExecutor(client, base_url=BASE_URL, access_token=TOKEN, logger=logger)


def test_execute_success_collects_records(make_client):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"id": "a"}, {"id": "b"}]})

    result = _executor(make_client(handler)).execute(
        find_endpoint("domain_cdrs"), SearchCriteria(domain="a.com", limit=10, raw=True)
    )

    assert result.success is True
    assert result.error == ""
    assert result.record_count == 2
    assert [r.record_id for r in result.records] == ["a", "b"]
    assert result.http_status == 200
    assert result.raw_data_used is True
    assert result.parameter_count == 2
    assert result.query_time_seconds >= 0
    assert result.discovered_data is True

    request = seen[0]
    assert request.headers["Authorization"] == f"Bearer {TOKEN}"
    assert request.headers["Accept"] == "application/json"
    assert request.url.path == "/ns-api/v2/domains/a.com/cdrs"
    assert request.url.params.get("raw") == "yes"


def test_execute_empty_list_is_success_without_data(make_client):
    result = _executor(make_client(lambda request: httpx.Response(200, json=[]))).execute(
        find_endpoint("global_cdrs"), SearchCriteria()
    )
    assert result.success is True
    assert result.record_count == 0
    assert result.discovered_data is False


def test_execute_http_error_status_is_captured(make_client):
    result = _executor(make_client(lambda request: httpx.Response(503))).execute(
        find_endpoint("global_cdrs"), SearchCriteria(raw=True)
    )
    assert result.success is False
    assert result.http_status == 503
    assert result.error == "HTTP 503: 503 Service Unavailable"
    assert result.record_count == 0
    assert result.records == ()


def test_execute_timeout_is_a_transport_failure(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = _executor(make_client(handler, timeout=2.0)).execute(find_endpoint("global_cdrs"), SearchCriteria())
    assert result.success is False
    assert result.http_status == 0
    assert result.error == "HTTP request error: timed out after 2s"


def test_execute_invalid_json_is_a_decode_failure(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>nope</html>")

    result = _executor(make_client(handler)).execute(find_endpoint("global_cdrs"), SearchCriteria())
    assert result.success is False
    assert result.http_status == 200
    assert result.error.startswith("JSON decode error:")


def test_execute_unexpected_shape_is_a_conversion_failure(make_client):
    result = _executor(make_client(lambda request: httpx.Response(200, json="hello"))).execute(
        find_endpoint("global_cdrs"), SearchCriteria()
    )
    assert result.success is False
    assert result.error.startswith("record conversion error:")


def test_execute_url_build_failure_never_sends_a_request(make_client):
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    endpoint = EndpointConfig(name="broken", url_template="/d/{domain}", supports_raw=True)
    result = _executor(make_client(handler)).execute(endpoint, SearchCriteria(raw=True))

    assert calls == []
    assert result.success is False
    assert result.url == ""
    assert result.raw_data_used is False
    assert result.error.startswith("URL build error")


def test_execute_logs_never_contain_the_token(make_client):
    output = io.StringIO()
    _executor(make_client(lambda request: httpx.Response(401)), output=output).execute(
        find_endpoint("global_cdrs"), SearchCriteria()
    )
    lines = [json.loads(line) for line in output.getvalue().splitlines()]
    assert [line["event"] for line in lines] == ["endpoint_start", "endpoint_end"]
    assert lines[-1]["success"] is False
    assert TOKEN not in output.getvalue()


def test_execute_deeply_nested_body_is_a_decode_failure(make_client):
    body = b"[" * 200_000 + b"]" * 200_000
    result = _executor(make_client(lambda request: httpx.Response(200, content=body))).execute(
        find_endpoint("global_cdrs"), SearchCriteria()
    )
    assert result.success is False
    assert result.http_status == 200
    assert result.error.startswith("JSON decode error:")


def test_execute_follows_redirects_to_final_status(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/ns-api/v2/cdrs":
            return httpx.Response(302, headers={"Location": "https://api.test/moved"})
        return httpx.Response(200, json=[{"id": "a"}])

    result = _executor(make_client(handler)).execute(find_endpoint("global_cdrs"), SearchCriteria())
    assert result.success is True
    assert result.http_status == 200
    assert result.record_count == 1

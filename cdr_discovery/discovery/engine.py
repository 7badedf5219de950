"""Discovery run orchestration: select, query, aggregate."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from datetime import datetime, timezone

from cdr_discovery.discovery.aggregator import aggregate
from cdr_discovery.discovery.catalog import ENDPOINT_CATALOG
from cdr_discovery.discovery.contracts import DiscoveryResult, EndpointConfig, EndpointResult, SearchCriteria
from cdr_discovery.discovery.executor import QueryExecutor
from cdr_discovery.discovery.selector import select_endpoints
from cdr_discovery.infrastructure.http_client import EndpointHttpClient
from cdr_discovery.infrastructure.logging import StructuredLogger, make_logger

SESSION_PREFIX = "cdr_session_"
DEFAULT_LIMIT = 100

_session_lock = threading.Lock()
_last_session_ns = 0


def generate_session_id() -> str:
    """``cdr_session_<ns>``; strictly increasing within the process."""
    global _last_session_ns
    with _session_lock:
        now = time.time_ns()
        if now <= _last_session_ns:
            now = _last_session_ns + 1
        _last_session_ns = now
    return f"{SESSION_PREFIX}{now}"


def prepare_criteria(criteria: SearchCriteria, *, default_limit: int = DEFAULT_LIMIT) -> SearchCriteria:
    """Apply the run-level overrides: default page size and forced raw mode."""
    return criteria.model_copy(
        update={
            "limit": criteria.limit or default_limit,
            # Bulk discovery always asks for full-fidelity records.
            "raw": True,
        }
    )


class DiscoveryEngine:
    """Queries every eligible endpoint sequentially and assembles a DiscoveryResult."""

    def __init__(
        self,
        http_client: EndpointHttpClient,
        *,
        base_url: str,
        access_token: str = "",
        catalog: Sequence[EndpointConfig] = ENDPOINT_CATALOG,
        default_limit: int = DEFAULT_LIMIT,
        logger: StructuredLogger | None = None,
    ):
        self._http = http_client
        self._base_url = base_url
        self._token = access_token
        self._catalog = tuple(catalog)
        self._default_limit = default_limit
        self._logger = logger or make_logger()
        self._logger.register_secret(access_token)

    @property
    def catalog(self) -> tuple[EndpointConfig, ...]:
        return self._catalog

    def run(self, criteria: SearchCriteria, *, access_token: str | None = None) -> DiscoveryResult:
        token = self._token if access_token is None else access_token
        session_id = generate_session_id()
        logger = self._logger.bind(session_id)
        logger.register_secret(token)

        started_at = datetime.now(timezone.utc)
        effective = prepare_criteria(criteria, default_limit=self._default_limit)
        logger.session_start(criteria=effective.model_dump(mode="json"), raw=effective.raw)

        endpoints = select_endpoints(effective, self._catalog)
        logger.debug(
            "endpoints_selected",
            count=len(endpoints),
            endpoints=[{"name": ep.name, "description": ep.description} for ep in endpoints],
        )

        executor = QueryExecutor(self._http, base_url=self._base_url, access_token=token, logger=logger)
        endpoint_results: list[EndpointResult] = []
        errors: list[str] = []
        for endpoint in endpoints:
            result = executor.execute(endpoint, effective)
            endpoint_results.append(result)
            if not result.success:
                errors.append(f"{endpoint.name}: {result.error}")

        summary = aggregate(endpoint_results)
        logger.debug(
            "dedup",
            before=summary.unique_records + summary.duplicates_removed,
            unique=summary.unique_records,
            duplicates_removed=summary.duplicates_removed,
        )

        result = DiscoveryResult(
            session_id=session_id,
            search_criteria=effective,
            start_time=started_at,
            end_time=datetime.now(timezone.utc),
            total_records=summary.total_records,
            unique_records=summary.unique_records,
            endpoint_results=tuple(endpoint_results),
            all_records=summary.all_records,
            records_by_endpoint=summary.records_by_endpoint,
            errors=tuple(errors),
        )
        logger.summary(**result.summary())
        return result


__all__ = [
    "DEFAULT_LIMIT",
    "DiscoveryEngine",
    "SESSION_PREFIX",
    "generate_session_id",
    "prepare_criteria",
]

"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cdr_discovery.config.settings import DiscoverySettings, load_settings
from cdr_discovery.discovery.catalog import ENDPOINT_CATALOG
from cdr_discovery.discovery.contracts import EndpointConfig
from cdr_discovery.infrastructure.http_client import EndpointHttpClient
from cdr_discovery.infrastructure.logging import StructuredLogger, make_logger
from cdr_discovery.infrastructure.results_cache import ResultsCache
from cdr_discovery.persistence.repository import get_discovery_persistence


@dataclass
class DiscoveryContext:
    settings: DiscoverySettings
    results_cache: ResultsCache
    http_client: EndpointHttpClient
    persistence_repo: Any = None
    logger: StructuredLogger | None = None
    catalog: tuple[EndpointConfig, ...] = field(default=ENDPOINT_CATALOG)

    def close(self) -> None:
        self.results_cache.stop_sweeper()
        self.http_client.close()


def make_discovery_context(
    settings: DiscoverySettings | None = None,
    *,
    sweep_interval: float | None = None,
) -> DiscoveryContext:
    resolved = settings or load_settings()
    cache = ResultsCache(
        ttl=resolved.results_ttl_seconds,
        max_sessions=resolved.results_max_sessions,
    )
    if sweep_interval is not None:
        cache.start_sweeper(sweep_interval)
    return DiscoveryContext(
        settings=resolved,
        results_cache=cache,
        http_client=EndpointHttpClient(timeout=resolved.http_timeout_seconds),
        persistence_repo=get_discovery_persistence(resolved),
        logger=make_logger(debug=resolved.debug_logging),
    )


__all__ = ["DiscoveryContext", "make_discovery_context"]

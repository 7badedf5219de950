"""Infrastructure services and cross-cutting utilities."""

from cdr_discovery.infrastructure.http_client import EndpointHttpClient
from cdr_discovery.infrastructure.logging import StructuredLogger, make_logger
from cdr_discovery.infrastructure.results_cache import ReadWriteLock, ResultsCache

__all__ = [
    "EndpointHttpClient",
    "ReadWriteLock",
    "ResultsCache",
    "StructuredLogger",
    "make_logger",
]

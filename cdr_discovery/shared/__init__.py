"""Shared cross-layer types and exceptions."""

from cdr_discovery.shared.exceptions import (
    EndpointError,
    HTTPStatusError,
    MigrationError,
    PersistenceError,
    ResponseDecodeError,
    TransportError,
    URLBuildError,
)

__all__ = [
    "EndpointError",
    "HTTPStatusError",
    "MigrationError",
    "PersistenceError",
    "ResponseDecodeError",
    "TransportError",
    "URLBuildError",
]

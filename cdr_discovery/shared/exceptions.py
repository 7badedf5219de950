"""Shared (non-domain) exceptions."""


class EndpointError(Exception):
    """Querying a single endpoint failed."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        self.detail = message
        super().__init__(f"[{endpoint}] {message}")


class URLBuildError(EndpointError):
    """The endpoint URL could not be assembled from the criteria."""


class TransportError(EndpointError):
    """The request never produced an HTTP response (timeout, DNS, refused)."""


class HTTPStatusError(EndpointError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, endpoint: str, status_code: int, reason: str):
        self.status_code = status_code
        self.reason = reason
        super().__init__(endpoint, f"HTTP {status_code}: {status_code} {reason}".rstrip())


class ResponseDecodeError(EndpointError):
    """The response body was not a usable record payload."""


class PersistenceError(Exception):
    """Storing a discovery session failed and was rolled back."""

    def __init__(self, session_id: str, message: str):
        self.session_id = session_id
        super().__init__(f"session {session_id} not persisted: {message}")


class MigrationError(RuntimeError):
    """An applied schema migration no longer matches its source file."""

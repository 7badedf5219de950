"""Bearer-authenticated HTTP client used for every endpoint query.

Responsibilities:
  1. one bounded timeout for every request (no retries, redirects followed)
  2. bearer credential and JSON accept headers
  3. map httpx failures onto the endpoint error taxonomy
  4. keep the caller's token out of every error message
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cdr_discovery.security.redact import redact_sensitive
from cdr_discovery.shared.exceptions import HTTPStatusError, TransportError, URLBuildError

_logger = logging.getLogger("cdr-discovery.http")

DEFAULT_TIMEOUT_SECONDS = 30.0


class EndpointHttpClient:
    """Thin wrapper over :class:`httpx.Client` for record endpoints."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._timeout = float(timeout)
        self._client = httpx.Client(
            timeout=httpx.Timeout(self._timeout),
            transport=transport,
            follow_redirects=True,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    def get(self, endpoint: str, url: str, *, token: str) -> httpx.Response:
        """
        GET ``url`` and return the response when its status is 2xx.

        Raises URLBuildError, TransportError or HTTPStatusError; the token is
        passed through verbatim and scrubbed from any error text.
        """
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        try:
            resp = self._client.get(url, headers=headers)
        except httpx.InvalidURL as e:
            raise URLBuildError(endpoint, f"URL build error: {redact_sensitive(str(e), token)}") from None
        except httpx.UnsupportedProtocol as e:
            raise URLBuildError(endpoint, f"URL build error: {redact_sensitive(str(e), token)}") from None
        except httpx.TimeoutException:
            raise TransportError(
                endpoint, f"HTTP request error: timed out after {self._timeout:g}s"
            ) from None
        except httpx.HTTPError as e:
            safe_msg = redact_sensitive(str(e), token)
            raise TransportError(endpoint, f"HTTP request error: {safe_msg}") from None

        if not resp.is_success:
            _logger.debug("endpoint %s answered HTTP %s", endpoint, resp.status_code)
            raise HTTPStatusError(endpoint, resp.status_code, resp.reason_phrase)
        return resp

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "EndpointHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "EndpointHttpClient"]

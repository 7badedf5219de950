"""Structured discovery logging: one JSON object per line, credentials scrubbed."""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional, TextIO

from cdr_discovery.security.redact import redact_sensitive


class StructuredLogger:
    """JSON line logger for a single discovery run.

    ``trace_id`` is the discovery session id once the run has one. Every line
    passes through :func:`redact_sensitive` plus any secrets registered with
    :meth:`register_secret`, so bearer tokens never reach the output stream.
    """

    def __init__(
        self,
        trace_id: Optional[str] = None,
        output: Optional[TextIO] = None,
        *,
        debug: bool = True,
    ):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self.debug_enabled = debug
        self._output = output or sys.stderr
        self._timers: dict[str, float] = {}
        self._secrets: list[str] = []

    def bind(self, trace_id: str) -> "StructuredLogger":
        """Return a logger for ``trace_id`` writing to the same stream."""
        child = StructuredLogger(trace_id=trace_id, output=self._output, debug=self.debug_enabled)
        child._secrets = list(self._secrets)
        return child

    def register_secret(self, secret: str) -> None:
        if secret and secret not in self._secrets:
            self._secrets.append(secret)

    def _scrub(self, text: str) -> str:
        return redact_sensitive(text, *self._secrets)

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        try:
            line = json.dumps(data, ensure_ascii=False, default=str)
            line = self._scrub(line)
            self._output.write(line + "\n")
            self._output.flush()
        except Exception as exc:
            # Last-resort fallback to avoid silent logger failures.
            try:
                fallback = {
                    "event": "logger_internal_error",
                    "trace_id": self.trace_id,
                    "timestamp": time.time(),
                    "error": str(exc),
                }
                sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")
                sys.stderr.flush()
            except Exception:
                return

    def session_start(self, **extra: Any) -> None:
        self._timers["session"] = time.time()
        self._emit({"event": "session_start", **extra})

    def endpoint_start(self, endpoint: str, **extra: Any) -> None:
        self._timers[endpoint] = time.time()
        if self.debug_enabled:
            self._emit({"event": "endpoint_start", "endpoint": endpoint, **extra})

    def endpoint_end(self, endpoint: str, *, success: bool, record_count: int = 0, **extra: Any) -> None:
        start = self._timers.pop(endpoint, time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({
            "event": "endpoint_end",
            "endpoint": endpoint,
            "success": success,
            "record_count": record_count,
            "duration_ms": duration_ms,
            **extra,
        })

    def debug(self, event: str, **extra: Any) -> None:
        if self.debug_enabled:
            self._emit({"event": event, **extra})

    def error(self, component: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "component": component, "error": self._scrub(error), **extra})

    def warning(self, component: str, message: str, **extra: Any) -> None:
        self._emit({"event": "warning", "component": component, "message": self._scrub(message), **extra})

    def summary(self, **extra: Any) -> None:
        start = self._timers.pop("session", None)
        if start is not None:
            extra.setdefault("duration_ms", round((time.time() - start) * 1000, 1))
        self._emit({"event": "summary", **extra})


def make_logger(output: Optional[TextIO] = None, *, debug: bool = True) -> StructuredLogger:
    return StructuredLogger(output=output, debug=debug)


__all__ = ["StructuredLogger", "make_logger"]

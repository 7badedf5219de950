"""Credential redaction helpers."""

from cdr_discovery.security.redact import redact_sensitive

__all__ = ["redact_sensitive"]

"""Decode endpoint response bodies into records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cdr_discovery.records.record import Record

_logger = logging.getLogger("cdr-discovery.decoder")

DATA_KEY = "data"


class RecordFormatError(ValueError):
    """A response body is neither a record, a list of records, nor a data wrapper."""


def decode_record(item: Any) -> Record:
    """Build a Record from one JSON object; raise RecordFormatError otherwise."""
    if not isinstance(item, Mapping):
        raise RecordFormatError(f"record must be an object, got {type(item).__name__}")
    return Record(item)


def decode_response(payload: Any) -> list[Record]:
    """
    Accepts a list of record objects, one record object, or ``{"data": ...}``
    wrapping either (unwrapped recursively). Malformed list items are skipped;
    an unusable top-level shape raises RecordFormatError.
    """
    if isinstance(payload, list):
        records: list[Record] = []
        skipped = 0
        for item in payload:
            try:
                records.append(decode_record(item))
            except RecordFormatError:
                skipped += 1
        if skipped:
            _logger.debug("skipped %d malformed record(s) of %d", skipped, len(payload))
        return records

    if isinstance(payload, Mapping):
        if DATA_KEY in payload:
            return decode_response(payload[DATA_KEY])
        return [decode_record(payload)]

    raise RecordFormatError(f"unexpected API response format: {type(payload).__name__}")


__all__ = ["DATA_KEY", "RecordFormatError", "decode_record", "decode_response"]

"""Schema-less call detail record with best-effort typed field access."""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

FieldValue = Union[str, int, float, bool, None, list, dict]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_TRUE_STRINGS = {"true", "1", "yes"}

ID_FIELD = "id"
LEGACY_ID_FIELD = "cdr_id"

# Report fields every call summary looks for, in display order.
ESSENTIAL_FIELDS = (
    "id",
    "domain",
    "call-direction",
    "call-start-datetime",
    "call-total-duration-seconds",
    "call-orig-user",
    "call-term-user",
    "call-disconnect-reason-text",
    "call-orig-caller-id",
    "call-term-caller-id",
)


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _parse_time(raw: str) -> Optional[datetime]:
    text = raw.strip()
    # "2024-01-15T10:30:00Z[UTC]": zone label after the Z designator.
    if text.endswith("]") and "[" in text:
        text = text[: text.rindex("[")]
    for fmt in ("%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        iso = text[:-1] + "+00:00" if text.endswith("Z") else text
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        return None
    if "T" not in text or parsed.tzinfo is None:
        # RFC 3339 requires both the T separator and an offset.
        return None
    return parsed


class Record(Mapping[str, FieldValue]):
    """Immutable field -> value envelope for one external record.

    ``field_names`` keeps the order in which fields arrived. Typed accessors
    never raise: a missing field or an unconvertible value yields the zero
    value for the requested type (``""``, ``0``, ``0.0``, ``False``, ``None``).
    """

    __slots__ = ("_data", "_fields")

    def __init__(self, data: Mapping[str, Any]):
        copied = {str(key): value for key, value in data.items()}
        self._data = MappingProxyType(copied)
        self._fields = tuple(copied.keys())

    # Mapping protocol

    def __getitem__(self, key: str) -> FieldValue:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return dict(self._data) == dict(other._data)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.record_id, frozenset(self._fields)))

    def __repr__(self) -> str:
        return f"Record(id={self.record_id!r}, fields={len(self._fields)})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda record: record.to_dict(), when_used="json"
            ),
        )

    @classmethod
    def _coerce(cls, value: Any) -> "Record":
        if isinstance(value, Record):
            return value
        if isinstance(value, Mapping):
            return cls(value)
        raise ValueError(f"record must be an object, got {type(value).__name__}")

    @property
    def field_names(self) -> tuple[str, ...]:
        return self._fields

    def has_field(self, field: str) -> bool:
        return field in self._data

    def raw(self, field: str) -> FieldValue:
        return self._data.get(field)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # Typed accessors

    def get_str(self, field: str) -> str:
        value = self._data.get(field)
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return _format_scalar(value)

    def get_int(self, field: str) -> int:
        value = self._data.get(field)
        if value is None or isinstance(value, bool):
            return 0
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else 0
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return 0
        return 0

    def get_int64(self, field: str) -> int:
        value = self.get_int(field)
        if _INT64_MIN <= value <= _INT64_MAX:
            return value
        return 0

    def get_float(self, field: str) -> float:
        value = self._data.get(field)
        if value is None or isinstance(value, bool):
            return 0.0
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return 0.0
        return 0.0

    def get_bool(self, field: str) -> bool:
        value = self._data.get(field)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return False

    def get_time(self, field: str) -> Optional[datetime]:
        """Parse ``field`` against the known timestamp formats, or return None."""
        raw = self.get_str(field)
        if not raw:
            return None
        return _parse_time(raw)

    # Call detail conveniences

    @property
    def record_id(self) -> str:
        return self.get_str(ID_FIELD) or self.get_str(LEGACY_ID_FIELD)

    @property
    def domain(self) -> str:
        return self.get_str("domain")

    @property
    def call_direction(self) -> int:
        return self.get_int("call-direction")

    @property
    def call_start_time(self) -> Optional[datetime]:
        return self.get_time("call-start-datetime")

    @property
    def call_duration(self) -> int:
        duration = self.get_int("call-total-duration-seconds")
        if duration > 0:
            return duration
        return self.get_int("duration")

    @property
    def orig_caller_id(self) -> int:
        return self.get_int64("call-orig-caller-id")

    @property
    def term_caller_id(self) -> int:
        return self.get_int64("call-term-caller-id")

    @property
    def orig_user(self) -> str:
        return self.get_str("call-orig-user")

    @property
    def term_user(self) -> str:
        return self.get_str("call-term-user")

    @property
    def disconnect_reason(self) -> str:
        return self.get_str("call-disconnect-reason-text")

    @property
    def has_transcription_data(self) -> bool:
        return self.has_field("call-intelligence-job-id")

    @property
    def has_sentiment_data(self) -> bool:
        return self.has_field("call-intelligence-percent-positive")

    def available_report_fields(self) -> list[str]:
        return [name for name in ESSENTIAL_FIELDS if name in self._data]

    def to_key_value_pairs(self) -> list[tuple[str, str]]:
        return [
            (name, "null" if self._data[name] is None else self.get_str(name))
            for name in self._fields
        ]

    def to_call_summary(self) -> list[tuple[str, str]]:
        started = self.call_start_time
        return [
            ("Field", "Value"),
            ("Call ID", self.record_id),
            ("Domain", self.domain),
            ("Direction", str(self.call_direction)),
            ("Start Time", started.strftime("%Y-%m-%d %H:%M:%S") if started else ""),
            ("Duration (seconds)", str(self.call_duration)),
            ("Origin User", self.orig_user),
            ("Term User", self.term_user),
            ("Disconnect Reason", self.disconnect_reason),
            ("Field Count", str(len(self._fields))),
        ]


__all__ = ["ESSENTIAL_FIELDS", "FieldValue", "ID_FIELD", "LEGACY_ID_FIELD", "Record"]

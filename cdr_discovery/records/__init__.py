"""Schema-less record envelope and response decoding."""

from cdr_discovery.records.decoder import RecordFormatError, decode_record, decode_response
from cdr_discovery.records.record import ESSENTIAL_FIELDS, FieldValue, Record

__all__ = [
    "ESSENTIAL_FIELDS",
    "FieldValue",
    "Record",
    "RecordFormatError",
    "decode_record",
    "decode_response",
]

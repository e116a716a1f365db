"""
Harmony domain - key notation and Camelot wheel ordering.
"""

from .exceptions import InvalidCamelotCode, KeyNotationError, UnrecognizedKeyString
from .notation import (
    UNKNOWN_WEIGHT,
    Key,
    Mode,
    camelot_ordinal,
    camelot_to_internal,
    free_text_to_internal,
    internal_to_camelot,
    parse_key,
    sort_weight,
)

__all__ = [
    "InvalidCamelotCode",
    "KeyNotationError",
    "UnrecognizedKeyString",
    "UNKNOWN_WEIGHT",
    "Key",
    "Mode",
    "camelot_ordinal",
    "camelot_to_internal",
    "free_text_to_internal",
    "internal_to_camelot",
    "parse_key",
    "sort_weight",
]

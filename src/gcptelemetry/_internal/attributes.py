"""Attribute coercion and truncation shared by the trace and metric translators.

Cloud Trace only stores string, int64 and bool attribute values, and both
backends cap the number and size of attributes/labels. The helpers here
apply those limits the same way everywhere:

1. keys are renamed through the attribute mapping,
2. values are coerced to bool, int64 or str,
3. fixed attributes are merged in (fixed values win on conflict),
4. keys are truncated and the count is capped, keeping the first entries
   in encounter order while leaving room for every fixed key. Excess
   entries are dropped and only counted.
"""

from __future__ import annotations

from itertools import islice
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

CoercedValue = Union[bool, int, str]

MAX_ATTR_KEY_BYTES = 128
MAX_ATTR_VAL_BYTES = 16 * 1024

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def truncate_str(value: str, limit: int) -> tuple[str, int]:
    """Truncate a string to at most `limit` UTF-8 bytes.

    Multi-byte characters are never split.

    Returns:
        The truncated string and the number of bytes removed.
    """
    encoded = value.encode("utf-8")
    if len(encoded) <= limit:
        return value, 0
    truncated = encoded[:limit].decode("utf-8", errors="ignore")
    return truncated, len(encoded) - len(truncated.encode("utf-8"))


def coerce_value(value: Any) -> CoercedValue:
    """Coerce an OpenTelemetry attribute value to a backend-native type.

    Floats and out-of-range integers have no native representation and are
    sent as strings. Floats use the shortest round-trip form, so 3.14
    becomes "3.14". Sequences are joined with commas.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if INT64_MIN <= value <= INT64_MAX:
            return value
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, Sequence):
        return ",".join(stringify_value(item) for item in value)
    return str(value)


def stringify_value(value: Any) -> str:
    """Coerce a value and render it as a string (used for metric labels)."""
    coerced = coerce_value(value)
    if isinstance(coerced, bool):
        return "true" if coerced else "false"
    return str(coerced)


def collect_attributes(
    attributes: Mapping[str, Any] | None,
    max_count: int,
    mapping: Mapping[str, str] = _EMPTY,
    fixed: Mapping[str, Any] = _EMPTY,
    max_key_bytes: int = MAX_ATTR_KEY_BYTES,
) -> tuple[dict[str, CoercedValue], int]:
    """Apply mapping, coercion, fixed attributes and limits to an attribute map.

    Fixed attributes always fit: record attributes are cut first so that
    `max_count` leaves one slot for every fixed key.

    Args:
        attributes: Record attributes in encounter order.
        max_count: Maximum number of attributes to keep.
        mapping: Key renames applied before anything else.
        fixed: Attributes merged into the result; they override record
            values with the same key.
        max_key_bytes: Maximum UTF-8 length of a key.

    Returns:
        The kept attributes (ordered) and the number of dropped attributes.
    """
    fixed_values = {
        truncate_str(key, max_key_bytes)[0]: coerce_value(value)
        for key, value in fixed.items()
    }
    room = max(max_count - len(fixed_values), 0)
    kept: dict[str, CoercedValue] = {}
    seen = 0
    own = 0

    for key, value in (attributes or {}).items():
        seen += 1
        key, _ = truncate_str(mapping.get(key, key), max_key_bytes)
        if key in kept:
            continue
        if key in fixed_values:
            kept[key] = fixed_values[key]
        elif own < room:
            kept[key] = coerce_value(value)
            own += 1

    for key, value in fixed_values.items():
        if key not in kept:
            seen += 1
            kept[key] = value

    kept = dict(islice(kept.items(), max_count))
    return kept, seen - len(kept)

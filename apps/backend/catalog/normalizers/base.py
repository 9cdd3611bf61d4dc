"""Coercion helpers shared by the per-source normalizers.

Every helper is total: malformed input degrades to the field's default.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

_FRACTION = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def _pad_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def as_int(value: Any) -> int:
    """Non-negative integer, 0 for missing or unparseable values."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return number if number > 0 else 0


def as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def as_optional_str(value: Any) -> Optional[str]:
    text = as_str(value).strip()
    return text or None


def as_str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in (as_optional_str(v) for v in value) if item]


def as_datetime(value: Any) -> Optional[datetime]:
    """Timezone-aware UTC datetime from a datetime or ISO-8601 string."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # fromisoformat before 3.11 only takes 3 or 6 fractional digits
        text = _FRACTION.sub(_pad_fraction, text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def first_datetime(values: Iterable[Any]) -> Optional[datetime]:
    for value in values:
        parsed = as_datetime(value)
        if parsed is not None:
            return parsed
    return None


def first_mapping(value: Any) -> Mapping[str, Any]:
    """First element of a list when it is a mapping, else an empty mapping."""
    if isinstance(value, (list, tuple)) and value:
        return as_mapping(value[0])
    return {}

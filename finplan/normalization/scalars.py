"""
Scalar Utilities

Safe coercion helpers shared by every normalizer and computation.
None of these raise: unusable input resolves to the fallback.
"""

import json
import math
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from dateutil.relativedelta import relativedelta

# Widest epoch-millisecond range a stored timestamp may carry
MAX_TIMESTAMP_MS = 8_640_000_000_000_000

_CYCLE_KEY_RE = re.compile(r"^\d{4}-\d{2}$")
_LOCALE_RE = re.compile(r"^([A-Za-z]{2,3})(?:[-_]([A-Za-z]{4}))?(?:[-_]([A-Za-z]{2}|\d{3}))?$")


def is_record(value: Any) -> bool:
    """True for mapping-like JSON objects."""
    return isinstance(value, Mapping)


def number_or(value: Any, fallback: float = 0.0) -> float:
    """
    Coerce to a finite float.

    None, blank or non-numeric strings, NaN and infinities resolve
    to the fallback. Booleans count as 0/1.
    """
    if value is None:
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    return numeric if math.isfinite(numeric) else fallback


def clamp_int(value: float, minimum: int, maximum: int) -> int:
    """Truncate toward zero, then clamp. Non-finite values give the minimum."""
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return minimum
    return max(minimum, min(maximum, math.trunc(value)))


def round_half_up(value: float) -> int:
    """Round with .5 going up, matching the score rounding shown to users."""
    return math.floor(value + 0.5)


def whole_months(amount: float, monthly: float) -> Optional[int]:
    """Months of `monthly` needed to cover `amount`, rounded up; None when it never covers."""
    if monthly <= 0:
        return None
    ratio = amount / monthly
    return math.ceil(ratio) if math.isfinite(ratio) else None


def optional_string(value: Any) -> Optional[str]:
    """Trimmed string, or None for non-strings and blanks."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def parse_json_object(value: Any) -> Optional[dict]:
    """
    Parse a JSON object.

    Strings are decoded; mappings pass through. Malformed JSON and
    non-object documents return None.
    """
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None
    if is_record(value):
        return dict(value)
    return None


def stringify_json_object(value: Mapping) -> str:
    """Canonical JSON text for an object; '{}' when it cannot be encoded."""
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return "{}"


def resolve(
    row: Mapping,
    payload: Mapping,
    key: str,
    default: Any = None,
    aliases: Iterable[str] = (),
) -> Any:
    """
    Ordered field lookup.

    Precedence: row[key], row[alias...], payload[key], payload[alias...],
    default. A value of None counts as absent.
    """
    keys = (key, *aliases)
    for source in (row, payload):
        for name in keys:
            value = source.get(name)
            if value is not None:
                return value
    return default


def resolve_text(
    row: Mapping,
    payload: Mapping,
    key: str,
    default: Optional[str] = None,
    aliases: Iterable[str] = (),
) -> Optional[str]:
    """Like resolve, but blank or non-string values also count as absent."""
    keys = (key, *aliases)
    for source in (row, payload):
        for name in keys:
            value = optional_string(source.get(name))
            if value is not None:
                return value
    return default


def normalize_currency_code(value: Any, fallback: str = "USD") -> str:
    """Upper-cased currency code; blank resolves to the fallback."""
    candidate = optional_string(value)
    return candidate.upper() if candidate else fallback.strip().upper()


def sanitize_locale(value: Any, fallback: str = "en-US") -> str:
    """
    Canonical BCP-47 casing for simple language[-Script][-REGION] tags.

    Anything that does not look like such a tag resolves to the fallback.
    """
    candidate = optional_string(value)
    match = _LOCALE_RE.match(candidate) if candidate else None
    if not match:
        return fallback
    language, script, region = match.groups()
    parts = [language.lower()]
    if script:
        parts.append(script.title())
    if region:
        parts.append(region.upper())
    return "-".join(parts)


# =============================================================================
# CYCLE KEYS & TIME
# =============================================================================

def normalize_cycle_key(value: Any) -> Optional[str]:
    """A YYYY-MM cycle key, or None."""
    candidate = optional_string(value)
    if candidate and _CYCLE_KEY_RE.match(candidate):
        return candidate
    return None


def timestamp_ms(value: float) -> int:
    """Whole epoch milliseconds, clamped to the stored timestamp range."""
    return clamp_int(value, -MAX_TIMESTAMP_MS, MAX_TIMESTAMP_MS)


def _utc(ms: float) -> Optional[datetime]:
    """UTC datetime, or None outside the years datetime can hold."""
    try:
        return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def _cycle_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def cycle_key_from_ms(now_ms: int) -> Optional[str]:
    """UTC cycle key containing the timestamp, or None when it has no calendar date."""
    moment = _utc(now_ms)
    return _cycle_key(moment) if moment else None


def build_default_cycle_keys(now_ms: int, before: int = 3, after: int = 9) -> list[str]:
    """Cycle keys from `before` months ago to `after` months ahead, ascending."""
    moment = _utc(now_ms)
    if moment is None:
        return []
    first_of_month = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    keys = []
    for offset in range(-before, after + 1):
        try:
            keys.append(_cycle_key(first_of_month + relativedelta(months=offset)))
        except (ValueError, OverflowError):
            continue
    return keys


def month_offset_ms(start_ms: int, months: int) -> Optional[int]:
    """
    Advance a timestamp by calendar months in UTC.

    Day of month is clamped to 28 so every month can hold it; the time of
    day is kept and milliseconds are dropped. Returns None when either end
    falls outside the calendar range.
    """
    start = _utc(start_ms)
    if start is None:
        return None
    try:
        moment = start.replace(day=min(start.day, 28), microsecond=0) + relativedelta(months=months)
    except (ValueError, OverflowError):
        return None
    return int(moment.timestamp()) * 1000


# =============================================================================
# RECENCY
# =============================================================================

def timestamp_of(row: Mapping) -> float:
    """updatedAt, then createdAt, then the storage creation time."""
    value = resolve(row, {}, "updatedAt", aliases=("createdAt", "_creationTime"))
    return number_or(value)


def sort_most_recent_first(rows: Iterable[Mapping]) -> list:
    """Stable sort, newest first."""
    return sorted(rows, key=timestamp_of, reverse=True)

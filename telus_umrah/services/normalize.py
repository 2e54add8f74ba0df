"""Identifier, timestamp and scalar coercions shared by the sanitizers and serializers."""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def pick(record, key: str, attr: str | None = None, default=None):
    """Read a field from a mapping (camelCase, then snake_case key) or an ORM row."""
    attr = attr or snake_case(key)
    if isinstance(record, Mapping):
        value = record.get(key)
        if value is None:
            value = record.get(attr)
    else:
        value = getattr(record, attr, None)
    return default if value is None else value


def normalize_id(value) -> str:
    """Any identifier (str, UUID, ObjectId-like, raw 12-byte id) as a string. Never raises."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    try:
        return str(value)
    except Exception:
        return ""


def parse_datetime(value) -> datetime | None:
    """datetime, date or ISO-8601 string -> aware UTC datetime; None if unparsable."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_timestamp(value, default=""):
    """Emit YYYY-MM-DDTHH:MM:SS.mmmZ for anything date-like; `default` when missing.

    Strings that do not parse are passed through unchanged.
    """
    if value is None or value == "":
        return default
    try:
        if isinstance(value, str):
            dt = parse_datetime(value)
            return _iso(dt) if dt else value
        if isinstance(value, (datetime, date)):
            return _iso(parse_datetime(value))
        isoformat = getattr(value, "isoformat", None)
        if callable(isoformat):
            return normalize_timestamp(str(isoformat()), default)
        return str(value)
    except Exception:
        return default


def as_bool(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return True
    return bool(value)


def parse_number(value) -> float:
    """int/float/numeric string -> float; NaN for anything else (booleans included)."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def as_number(value, default=0):
    """Best-effort number: int when integral, float otherwise, `default` when unusable."""
    if isinstance(value, bool):
        return int(value)
    n = parse_number(value)
    if not math.isfinite(n):
        return default
    return int(n) if n.is_integer() else n

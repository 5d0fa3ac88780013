from __future__ import annotations

"""Timestamp helpers.

Engine operations take `now` from the caller so they stay deterministic given
their inputs. This module is the only place allowed to read the host clock
(see tools/check_no_os_time.py); callers that have no clock of their own use
`utc_now()`.
"""

import datetime as _dt
from typing import Any, Optional


def utc_now() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0)


def resolve_now(now: Optional[_dt.datetime]) -> _dt.datetime:
    """Use the caller's clock when given, else the host clock (UTC)."""
    if now is None:
        return utc_now()
    return require_aware(now, field="now")


def require_aware(value: Any, *, field: str = "timestamp") -> _dt.datetime:
    """
    Ensure value is a timezone-aware datetime and return it in UTC.
    Naive datetimes are rejected: mixing them with stored UTC stamps silently
    shifts expiries.
    """
    if not isinstance(value, _dt.datetime):
        raise ValueError(f"{field} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{field} must be timezone-aware: {value!r}")
    return value.astimezone(_dt.timezone.utc)


def to_iso(value: Optional[_dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    return require_aware(value).isoformat().replace("+00:00", "Z")


def parse_iso(value: Any, *, field: str = "timestamp") -> Optional[_dt.datetime]:
    """Parse a stored ISO timestamp. Fail-loud on malformed input."""
    if value is None:
        return None
    s = str(value).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        parsed = _dt.datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"Invalid {field}: {value!r}") from exc
    return require_aware(parsed, field=field)

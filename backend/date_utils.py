"""Shared timestamp normalization helpers."""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Seconds fraction of any length; fromisoformat wants exactly 3 or 6 digits before 3.11.
_FRACTION_RE = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")
# Postgres renders whole-hour offsets as "+00".
_SHORT_OFFSET_RE = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?[+-]\d{2})$")
_SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _normalize_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def _parse_datetime_token(token: str) -> datetime | None:
    cleaned = token.strip()
    if not cleaned:
        return None
    try:
        iso_text = _FRACTION_RE.sub(_normalize_fraction, cleaned.replace("Z", "+00:00"), count=1)
        iso_text = _SHORT_OFFSET_RE.sub(r"\1:00", iso_text)
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass
    for fmt in ("%Y/%m/%d", "%m/%d/%Y", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(cleaned, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Convert mixed timestamp inputs (ISO text, date, datetime) into aware UTC datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        token = value.strip()
        if not token:
            return None
        if _DATE_ONLY_RE.match(token):
            try:
                parsed = date.fromisoformat(token)
            except ValueError:
                return None
            return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
        parsed_dt = _parse_datetime_token(token)
        return _as_utc(parsed_dt) if parsed_dt else None
    return None


def timestamp_text(value: Any) -> str:
    if isinstance(value, datetime):
        return _as_utc(value).isoformat().replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    return str(value or "")


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Whole elapsed days, floored."""
    elapsed = (_as_utc(later) - _as_utc(earlier)).total_seconds()
    return int(elapsed // _SECONDS_PER_DAY)

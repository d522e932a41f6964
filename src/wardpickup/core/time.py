"""
Time parsing and day arithmetic.

All stored timestamps are timezone-aware UTC datetimes; naive values coming from
old records or CLI input get `UTC` attached (or a configured zone) so schedule math
never mixes naive and aware datetimes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from wardpickup.core.geo import round_half_away

MS_PER_DAY = 86_400_000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_tz(dt: datetime, tz: str = "UTC") -> datetime:
    """Ensure `dt` has tzinfo; attach `tz` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(tz))
    return dt


def parse_datetime(value: str, tz: str = "UTC") -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Notes:
    - Accepts a trailing `Z` (UTC) and converts it to `+00:00` for `fromisoformat`.
    - If the parsed value is naive, the provided `tz` is attached.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_tz(datetime.fromisoformat(value), tz)


def diff_days(start: datetime, end: datetime) -> int:
    """Whole days from `start` to `end`, rounded half away from zero on the ms difference."""
    ms = (end - start).total_seconds() * 1000
    return round_half_away(ms / MS_PER_DAY)


def start_of_day(dt: datetime, tz: str) -> datetime:
    """Midnight of `dt`'s calendar day in `tz`."""
    local = dt.astimezone(ZoneInfo(tz))
    return local.replace(hour=0, minute=0, second=0, microsecond=0)

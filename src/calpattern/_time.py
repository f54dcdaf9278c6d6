from __future__ import annotations

import calendar
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from ._error import PatternError

MIN_VALUE = datetime.min
MAX_VALUE = datetime.max

# =============================================================================
# Search Limits
# =============================================================================
# Every per-unit search advances its container (year, month, day, hour or
# minute) one step at a time. The number of containers between MIN_VALUE and
# MAX_VALUE caps those loops, so a search terminates even if the bound check
# never fires.
# =============================================================================

_SPAN = MAX_VALUE - MIN_VALUE

MAX_YEAR_STEPS = MAX_VALUE.year - MIN_VALUE.year + 1
MAX_MONTH_STEPS = MAX_YEAR_STEPS * 12
MAX_DAY_STEPS = _SPAN.days + 1
MAX_HOUR_STEPS = _SPAN // timedelta(hours=1) + 1
MAX_MINUTE_STEPS = _SPAN // timedelta(minutes=1) + 1

# --- Timezone resolution ---


def resolve_tz(tz: tzinfo | str | None) -> tzinfo:
    """Resolve an IANA key or tzinfo. There is no default zone."""
    if tz is None:
        raise PatternError.argument("tz")
    if isinstance(tz, str):
        return ZoneInfo(tz)
    if isinstance(tz, tzinfo):
        return tz
    raise PatternError.unsupported("tz", tz)


def to_zone(dt: datetime, tz: tzinfo) -> datetime:
    """Express `dt` in `tz`. Naive values are taken as wall-clock time in `tz`."""
    if not isinstance(dt, datetime):
        raise PatternError.argument("dt", f"expected a datetime, got {type(dt).__name__}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def to_wall(dt: datetime, tz: tzinfo) -> datetime:
    """Naive wall-clock reading of `dt` in `tz`."""
    return to_zone(dt, tz).replace(tzinfo=None)


def is_invalid_time(wall: datetime, tz: tzinfo) -> bool:
    """Whether a wall-clock time falls into a gap (spring forward) of `tz`.

    Inside a gap fold=0 resolves with the offset before the transition and
    fold=1 with the offset after it, so the offsets differ and grow.
    """
    aware = wall.replace(tzinfo=tz)
    before = aware.replace(fold=0).utcoffset()
    after = aware.replace(fold=1).utcoffset()
    return before is not None and after is not None and before < after


# --- Calendar arithmetic ---


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def replace_clamped(dt: datetime, *, year: int | None = None, month: int | None = None) -> datetime:
    """Replace year and/or month, clamping the day to the resulting month's length."""
    year = dt.year if year is None else year
    month = dt.month if month is None else month
    if not MIN_VALUE.year <= year <= MAX_VALUE.year:
        raise ValueError(f"year {year} is out of range")
    return dt.replace(year=year, month=month, day=min(dt.day, days_in_month(year, month)))


def add_years(dt: datetime, years: int) -> datetime:
    return replace_clamped(dt, year=dt.year + years)


def add_months(dt: datetime, months: int) -> datetime:
    year, month0 = divmod(dt.year * 12 + dt.month - 1 + months, 12)
    return replace_clamped(dt, year=year, month=month0 + 1)

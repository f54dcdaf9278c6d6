from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from calpattern import (
    DateTimePattern,
    DayOfWeekPattern,
    DayPattern,
    HourPattern,
    MinutePattern,
    MonthPattern,
    SecondPattern,
    YearPattern,
)

UTC = ZoneInfo("UTC")
BERLIN = ZoneInfo("Europe/Berlin")

_PATTERN_KINDS: dict[str, type[DateTimePattern]] = {
    "year": YearPattern,
    "month": MonthPattern,
    "day": DayPattern,
    "day_of_week": DayOfWeekPattern,
    "hour": HourPattern,
    "minute": MinutePattern,
    "second": SecondPattern,
}


def parse_zoned(s: str) -> datetime:
    """Parse '2026-02-06T12:00:00+00:00[UTC]' into a timezone-aware datetime."""
    # Extract the IANA timezone name from brackets
    m = re.match(r"^(.+)\[(.+)\]$", s)
    if not m:
        raise ValueError(f"expected format 'ISO[TZ]', got: {s}")
    iso_part, tz_name = m.group(1), m.group(2)
    tz = ZoneInfo(tz_name)
    dt = datetime.fromisoformat(iso_part)
    # Convert to the named timezone
    return dt.astimezone(tz)


def format_zoned(dt: datetime) -> str:
    """Format a timezone-aware datetime as '2026-02-06T12:00:00+00:00[TZ]'."""
    tz = dt.tzinfo
    if tz is None:
        raise ValueError("datetime must be timezone-aware")
    # Get the IANA key
    tz_name = tz.key if hasattr(tz, "key") else str(tz)
    iso = dt.isoformat()
    return f"{iso}[{tz_name}]"


def make_pattern(entry: dict[str, Any]) -> DateTimePattern:
    """Build a pattern from {"kind": "month", "value": 2}."""
    return _PATTERN_KINDS[entry["kind"]](entry["value"])


def load_scenarios(name: str) -> dict[str, Any]:
    path = Path(__file__).parent / "data" / f"{name}.json"
    with open(path) as f:
        return json.load(f)

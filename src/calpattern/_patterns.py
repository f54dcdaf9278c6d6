from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum

from ._bounds import (
    align_to_edge,
    comply_with_bound,
    complies_with_lower_bound,
    complies_with_upper_bound,
    set_component,
)
from ._error import PatternError
from ._rank import (
    RANKS,
    DateTimeComponent,
    RangeEdge,
    SearchDirection,
    component_value,
    lower_ranked,
)
from ._time import (
    MAX_DAY_STEPS,
    MAX_HOUR_STEPS,
    MAX_MINUTE_STEPS,
    MAX_MONTH_STEPS,
    MAX_VALUE,
    MAX_YEAR_STEPS,
    MIN_VALUE,
    add_months,
    add_years,
    days_in_month,
    is_invalid_time,
    resolve_tz,
    to_wall,
)


class Weekday(Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def number(self) -> int:
        """ISO 8601 day number: Monday=1, Sunday=7."""
        return _WEEKDAY_NUMBERS[self]

    @classmethod
    def from_number(cls, n: int) -> Weekday | None:
        return _NUMBER_TO_WEEKDAY.get(n)

    @classmethod
    def try_parse(cls, s: str) -> Weekday | None:
        return _WEEKDAY_PARSE.get(s.lower())

    def __str__(self) -> str:
        return self.value


_WEEKDAY_NUMBERS = {
    Weekday.MONDAY: 1,
    Weekday.TUESDAY: 2,
    Weekday.WEDNESDAY: 3,
    Weekday.THURSDAY: 4,
    Weekday.FRIDAY: 5,
    Weekday.SATURDAY: 6,
    Weekday.SUNDAY: 7,
}

_NUMBER_TO_WEEKDAY = {v: k for k, v in _WEEKDAY_NUMBERS.items()}

_WEEKDAY_PARSE: dict[str, Weekday] = {
    **{wd.value: wd for wd in Weekday},
    **{wd.value[:3]: wd for wd in Weekday},
}


def _check_range(name: str, value: object, low: int, high: int) -> None:
    # bool is an int subclass but never a calendar value.
    if not isinstance(value, int) or isinstance(value, bool):
        raise PatternError.range(name, f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise PatternError.range(name, f"{name} must be within {low}..{high}, got {value}")


# =============================================================================
# Patterns
# =============================================================================


class DateTimePattern:
    """A single calendar constraint: one component must take one value.

    `next`/`previous` always move strictly away from the reference, in
    whole units of the pattern's component, and return None when no such
    instant exists between datetime.min and datetime.max.
    """

    __slots__ = ()

    @property
    def component(self) -> DateTimeComponent:
        return _component_of(self)

    @property
    def value(self) -> int:
        return _value_of(self)

    def matches(self, dt: datetime) -> bool:
        """Compare against the fields of `dt` as given; no time zone conversion."""
        return _matches(self, dt)

    def next(self, reference: datetime, tz: tzinfo | str) -> datetime | None:
        return _search(self, reference, resolve_tz(tz), SearchDirection.NEXT)

    def previous(self, reference: datetime, tz: tzinfo | str) -> datetime | None:
        return _search(self, reference, resolve_tz(tz), SearchDirection.PREVIOUS)


@dataclass(frozen=True, slots=True)
class YearPattern(DateTimePattern):
    year: int

    def __post_init__(self) -> None:
        _check_range("year", self.year, MIN_VALUE.year, MAX_VALUE.year)


@dataclass(frozen=True, slots=True)
class MonthPattern(DateTimePattern):
    month: int

    def __post_init__(self) -> None:
        _check_range("month", self.month, 1, 12)


@dataclass(frozen=True, slots=True)
class DayPattern(DateTimePattern):
    """Day of the month."""

    day: int

    def __post_init__(self) -> None:
        _check_range("day", self.day, 1, 31)


@dataclass(frozen=True, slots=True)
class DayOfWeekPattern(DateTimePattern):
    """Day of the week; accepts a Weekday, its ISO number or its name."""

    weekday: Weekday

    def __post_init__(self) -> None:
        weekday: object = self.weekday
        if isinstance(weekday, str):
            weekday = Weekday.try_parse(weekday)
        elif isinstance(weekday, int) and not isinstance(weekday, bool):
            weekday = Weekday.from_number(weekday)
        if not isinstance(weekday, Weekday):
            raise PatternError.range("weekday", f"undefined weekday: {self.weekday!r}")
        object.__setattr__(self, "weekday", weekday)


@dataclass(frozen=True, slots=True)
class HourPattern(DateTimePattern):
    hour: int

    def __post_init__(self) -> None:
        _check_range("hour", self.hour, 0, 23)


@dataclass(frozen=True, slots=True)
class MinutePattern(DateTimePattern):
    minute: int

    def __post_init__(self) -> None:
        _check_range("minute", self.minute, 0, 59)


@dataclass(frozen=True, slots=True)
class SecondPattern(DateTimePattern):
    second: int

    def __post_init__(self) -> None:
        _check_range("second", self.second, 0, 59)


def _component_of(pattern: DateTimePattern) -> DateTimeComponent:
    match pattern:
        case YearPattern():
            return DateTimeComponent.YEAR
        case MonthPattern():
            return DateTimeComponent.MONTH
        case DayPattern() | DayOfWeekPattern():
            return DateTimeComponent.DAY
        case HourPattern():
            return DateTimeComponent.HOUR
        case MinutePattern():
            return DateTimeComponent.MINUTE
        case SecondPattern():
            return DateTimeComponent.SECOND
    raise PatternError.unsupported("pattern", pattern)  # pragma: no cover


def _value_of(pattern: DateTimePattern) -> int:
    match pattern:
        case YearPattern(year=v) | MonthPattern(month=v) | DayPattern(day=v):
            return v
        case HourPattern(hour=v) | MinutePattern(minute=v) | SecondPattern(second=v):
            return v
        case DayOfWeekPattern(weekday=wd):
            return wd.number
    raise PatternError.unsupported("pattern", pattern)  # pragma: no cover


def _matches(pattern: DateTimePattern, dt: datetime) -> bool:
    match pattern:
        case DayOfWeekPattern(weekday=weekday):
            return dt.isoweekday() == weekday.number
    return component_value(dt, pattern.component) == pattern.value


# =============================================================================
# Per-unit search
# =============================================================================
# All searches run on naive wall-clock readings in the target zone; the zone
# is attached to the result only. A calendar unit is searched by stepping
# its container (month -> year, day -> month, hour -> day, minute -> hour,
# second -> minute) until the unit can take the target value:
#
#   - on the first step, only if the reference has not yet passed the value
#     (so the result always moves away from the reference),
#   - only if the container is long enough (day 31 in a 30-day month),
#   - only if the slot's first instant exists in the zone (DST gaps).
#
# The result is the slot's first instant for NEXT and its last instant for
# PREVIOUS.
# =============================================================================


def _search(
    pattern: DateTimePattern,
    reference: datetime,
    tz: tzinfo,
    direction: SearchDirection,
) -> datetime | None:
    try:
        wall = to_wall(reference, tz)
        match pattern:
            case YearPattern(year=year):
                found = _seek_year(wall, year, direction)
            case DayOfWeekPattern(weekday=weekday):
                found = _seek_weekday(wall, weekday, direction)
            case _:
                found = _seek_unit(wall, tz, pattern.component, pattern.value, direction)
    except (ValueError, OverflowError):
        # Out of range while building a candidate: no occurrence.
        return None
    return None if found is None else found.replace(tzinfo=tz)


_LOWER = {component: lower_ranked([component]) for component in RANKS}


def _slot(dt: datetime, component: DateTimeComponent, value: int, edge: RangeEdge) -> datetime:
    return align_to_edge(set_component(dt, component, value), edge, _LOWER[component])


def _edge_for(direction: SearchDirection) -> RangeEdge:
    return RangeEdge.BEGINNING if direction is SearchDirection.NEXT else RangeEdge.END


def _seek_year(wall: datetime, year: int, direction: SearchDirection) -> datetime | None:
    candidate = datetime(year, 1, 1)
    if direction is SearchDirection.NEXT:
        if not comply_with_bound(candidate, MAX_VALUE, DateTimeComponent.YEAR, year, direction):
            return None
        if wall.year >= year:
            return None
    else:
        if not comply_with_bound(candidate, MIN_VALUE, DateTimeComponent.YEAR, year, direction):
            return None
        if wall.year <= year:
            return None
    return _slot(candidate, DateTimeComponent.YEAR, year, _edge_for(direction))


def _container_step(dt: datetime, component: DateTimeComponent, step: int) -> datetime:
    match component:
        case DateTimeComponent.MONTH:
            return add_years(dt, step)
        case DateTimeComponent.DAY:
            return add_months(dt, step)
        case DateTimeComponent.HOUR:
            return dt + timedelta(days=step)
        case DateTimeComponent.MINUTE:
            return dt + timedelta(hours=step)
        case DateTimeComponent.SECOND:
            return dt + timedelta(minutes=step)
    raise PatternError.unsupported("component", component)


_STEP_LIMITS = {
    DateTimeComponent.MONTH: MAX_YEAR_STEPS,
    DateTimeComponent.DAY: MAX_MONTH_STEPS,
    DateTimeComponent.HOUR: MAX_DAY_STEPS,
    DateTimeComponent.MINUTE: MAX_HOUR_STEPS,
    DateTimeComponent.SECOND: MAX_MINUTE_STEPS,
}


def _fits(dt: datetime, component: DateTimeComponent, value: int) -> bool:
    if component is DateTimeComponent.DAY:
        return value <= days_in_month(dt.year, dt.month)
    return True


def _seek_unit(
    wall: datetime,
    tz: tzinfo,
    component: DateTimeComponent,
    value: int,
    direction: SearchDirection,
) -> datetime | None:
    forward = direction is SearchDirection.NEXT
    bound = MAX_VALUE if forward else MIN_VALUE
    step = 1 if forward else -1

    candidate = wall
    for attempt in range(_STEP_LIMITS[component]):
        if not comply_with_bound(candidate, bound, component, value, direction):
            return None

        current = component_value(candidate, component)
        passed = current >= value if forward else current <= value
        if (
            (attempt == 0 and passed)
            or not _fits(candidate, component, value)
            or is_invalid_time(_slot(candidate, component, value, RangeEdge.BEGINNING), tz)
        ):
            candidate = _container_step(candidate, component, step)
            continue

        return _slot(candidate, component, value, _edge_for(direction))
    return None


def _seek_weekday(wall: datetime, weekday: Weekday, direction: SearchDirection) -> datetime | None:
    # Always move by 1..7 days, never stay on the reference day.
    if direction is SearchDirection.NEXT:
        days = (weekday.number - wall.isoweekday()) % 7 or 7
        if not complies_with_upper_bound(wall, days, MAX_VALUE):
            return None
        target = wall + timedelta(days=days)
    else:
        days = (wall.isoweekday() - weekday.number) % 7 or 7
        if not complies_with_lower_bound(wall, days, MIN_VALUE):
            return None
        target = wall - timedelta(days=days)
    return align_to_edge(target, _edge_for(direction), _LOWER[DateTimeComponent.DAY])

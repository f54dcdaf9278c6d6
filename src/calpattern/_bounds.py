from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from ._error import PatternError
from ._rank import (
    RANKS,
    DateTimeComponent,
    RangeEdge,
    SearchDirection,
    component_value,
    higher_ranked,
)
from ._time import MAX_VALUE, MIN_VALUE, days_in_month, days_in_year, replace_clamped

# =============================================================================
# Bound Compliance
# =============================================================================
# A search must never build a datetime beyond MIN_VALUE/MAX_VALUE: the target
# value may not even form a valid date yet (Feb 31 or Feb 29 in a common
# year). Instead the last valid candidate is compared rank by rank against
# the bound, and only the target component is compared as an isolated number.
#
# The check may report compliance for candidates that a more specific
# pattern later rejects. It never reports a compliant candidate as failing.
# =============================================================================

_HIGHER = {rank: higher_ranked([rank]) for rank in RANKS}


def comply_with_bound(
    dt: datetime,
    bound: datetime,
    component: DateTimeComponent,
    value: int,
    direction: SearchDirection,
) -> bool:
    """Whether `dt` with `component` set to `value` can stay within `bound`.

    `dt` and `bound` must be wall-clock readings in the same time zone.
    """
    if direction not in (SearchDirection.NEXT, SearchDirection.PREVIOUS):
        raise PatternError.unsupported("direction", direction)
    if component not in _HIGHER:
        raise PatternError.unsupported("component", component)
    forward = direction is SearchDirection.NEXT

    for rank in _HIGHER[component]:
        current = component_value(dt, rank)
        limit = component_value(bound, rank)
        if current == limit:
            continue
        # Room to spare on a higher rank makes lower ranks irrelevant.
        return current < limit if forward else current > limit

    limit = component_value(bound, component)
    return value <= limit if forward else value >= limit


def complies_with_upper_bound(dt: datetime, days: int, bound: datetime = MAX_VALUE) -> bool:
    """Whether `dt` plus `days` (at most one year) stays at or below `bound`.

    Both are compared as wall-clock readings; any tzinfo is ignored.
    """
    dt, bound = dt.replace(tzinfo=None), bound.replace(tzinfo=None)
    if dt.timetuple().tm_yday + days <= days_in_year(dt.year) or dt.year < MAX_VALUE.year:
        return dt + timedelta(days=days) <= bound
    # Crossing into the year after MAX_VALUE.
    return False


def complies_with_lower_bound(dt: datetime, days: int, bound: datetime = MIN_VALUE) -> bool:
    """Whether `dt` minus `days` (at most one year) stays at or above `bound`."""
    dt, bound = dt.replace(tzinfo=None), bound.replace(tzinfo=None)
    if dt.timetuple().tm_yday - days >= 1 or dt.year > MIN_VALUE.year:
        return dt - timedelta(days=days) >= bound
    # Crossing into the year before MIN_VALUE.
    return False


# =============================================================================
# Edge Alignment
# =============================================================================


def _edge_value(edge: RangeEdge, dt: datetime, component: DateTimeComponent) -> int:
    beginning = edge is RangeEdge.BEGINNING
    match component:
        case DateTimeComponent.YEAR:
            return MIN_VALUE.year if beginning else MAX_VALUE.year
        case DateTimeComponent.MONTH:
            return 1 if beginning else 12
        case DateTimeComponent.DAY:
            return 1 if beginning else days_in_month(dt.year, dt.month)
        case DateTimeComponent.HOUR:
            return 0 if beginning else 23
        case DateTimeComponent.MINUTE | DateTimeComponent.SECOND:
            return 0 if beginning else 59
        case DateTimeComponent.FRACTION | DateTimeComponent.TICK:
            return 0 if beginning else 999
    raise PatternError.unsupported("component", component)


def set_component(dt: datetime, component: DateTimeComponent, value: int) -> datetime:
    """Replace a single rank. Year and month changes clamp the day."""
    match component:
        case DateTimeComponent.YEAR:
            return replace_clamped(dt, year=value)
        case DateTimeComponent.MONTH:
            return replace_clamped(dt, month=value)
        case DateTimeComponent.DAY:
            return dt.replace(day=value)
        case DateTimeComponent.HOUR:
            return dt.replace(hour=value)
        case DateTimeComponent.MINUTE:
            return dt.replace(minute=value)
        case DateTimeComponent.SECOND:
            return dt.replace(second=value)
        case DateTimeComponent.FRACTION:
            return dt.replace(microsecond=value * 1000 + dt.microsecond % 1000)
        case DateTimeComponent.TICK:
            return dt.replace(microsecond=dt.microsecond // 1000 * 1000 + value)
    raise PatternError.unsupported("component", component)


def align_to_edge(
    dt: datetime,
    edge: RangeEdge,
    components: Iterable[DateTimeComponent] | None,
) -> datetime:
    """Set each of `components` to its minimum (BEGINNING) or maximum (END).

    Components are applied from the highest rank down, so the last day of the
    month is taken from the already aligned year and month. The tzinfo of `dt`
    is kept.
    """
    if components is None:
        raise PatternError.argument("components")
    if not isinstance(edge, RangeEdge):
        raise PatternError.unsupported("edge", edge)

    ordered: set[DateTimeComponent] = set()
    for component in components:
        if component not in RANKS:
            raise PatternError.unsupported("component", component)
        ordered.add(component)

    for component in sorted(ordered, key=lambda c: c.rank):
        dt = set_component(dt, component, _edge_value(edge, dt, component))
    return dt

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum, Flag

from ._error import PatternError


class DateTimeComponent(Flag):
    """Date & time components ordered by descending rank (YEAR is the highest)."""

    NONE = 0
    YEAR = 1 << 0
    MONTH = 1 << 1
    DAY = 1 << 2
    HOUR = 1 << 3
    MINUTE = 1 << 4
    SECOND = 1 << 5
    FRACTION = 1 << 6
    TICK = 1 << 7
    ANY = YEAR | MONTH | DAY | HOUR | MINUTE | SECOND | FRACTION | TICK

    @property
    def rank(self) -> int:
        """Position in RANKS: 0 for YEAR up to 7 for TICK."""
        try:
            return RANKS.index(self)
        except ValueError:
            raise PatternError.unsupported("component", self) from None


RANKS: tuple[DateTimeComponent, ...] = (
    DateTimeComponent.YEAR,
    DateTimeComponent.MONTH,
    DateTimeComponent.DAY,
    DateTimeComponent.HOUR,
    DateTimeComponent.MINUTE,
    DateTimeComponent.SECOND,
    DateTimeComponent.FRACTION,
    DateTimeComponent.TICK,
)


class SearchDirection(Enum):
    NEXT = "next"
    PREVIOUS = "previous"

    def __str__(self) -> str:
        return self.value


class RangeEdge(Enum):
    """Which extreme unconstrained components are aligned to.

    BEGINNING of "March" is March 1st 00:00, END is March 31st 23:59:59.999999.
    """

    BEGINNING = "beginning"
    END = "end"

    def __str__(self) -> str:
        return self.value


def _present_ranks(used: Iterable[DateTimeComponent] | None) -> list[DateTimeComponent]:
    if used is None:
        raise PatternError.argument("used")
    present: set[DateTimeComponent] = set()
    for component in used:
        if not isinstance(component, DateTimeComponent):
            raise PatternError.unsupported("component", component)
        present.update(rank for rank in RANKS if rank in component)
    return sorted(present, key=RANKS.index)


def lower_ranked(used: Iterable[DateTimeComponent] | None) -> tuple[DateTimeComponent, ...]:
    """All ranks strictly below the finest rank in `used`.

    Composite flags are split into single ranks; NONE contributes nothing.
    Without any rank in `used` every rank is returned.
    """
    present = _present_ranks(used)
    if not present:
        return RANKS
    return RANKS[RANKS.index(present[-1]) + 1 :]


def higher_ranked(used: Iterable[DateTimeComponent] | None) -> tuple[DateTimeComponent, ...]:
    """All ranks strictly above the coarsest rank in `used`, highest first."""
    present = _present_ranks(used)
    if not present:
        return RANKS
    return RANKS[: RANKS.index(present[0])]


def component_value(dt: datetime, component: DateTimeComponent) -> int:
    match component:
        case DateTimeComponent.YEAR:
            return dt.year
        case DateTimeComponent.MONTH:
            return dt.month
        case DateTimeComponent.DAY:
            return dt.day
        case DateTimeComponent.HOUR:
            return dt.hour
        case DateTimeComponent.MINUTE:
            return dt.minute
        case DateTimeComponent.SECOND:
            return dt.second
        case DateTimeComponent.FRACTION:
            return dt.microsecond // 1000
        case DateTimeComponent.TICK:
            return dt.microsecond % 1000
    raise PatternError.unsupported("component", component)

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from itertools import takewhile
from typing import ClassVar

from loguru import logger

from ._bounds import align_to_edge
from ._error import PatternError
from ._patterns import DateTimePattern
from ._rank import RangeEdge, SearchDirection, lower_ranked
from ._time import MIN_VALUE, resolve_tz, to_zone

# =============================================================================
# Convergence
# =============================================================================
# 1. Every pattern searches from the start instant; the nearest result is
#    the first candidate. Starting from all patterns guarantees the result
#    moves away from the start even if the start already matches.
# 2. While some patterns do not match the candidate, only those search from
#    the candidate and the nearest of their results becomes the candidate.
# 3. Once all patterns match, components ranked below every pattern's
#    component are optionally aligned to a range edge.
#
# Each round moves the candidate strictly in the search direction, and every
# per-unit search fails cleanly at datetime.min/max, so the loop ends.
# Ties between equally near results keep the first pattern in input order.
# =============================================================================


@dataclass(frozen=True, slots=True)
class PatternAlternative:
    pattern: DateTimePattern
    dt: datetime | None
    distance: timedelta | None


@dataclass(frozen=True, slots=True)
class IterationTrace:
    """One convergence round as passed to a calculator's `on_iteration` hook."""

    direction: SearchDirection
    reference: datetime
    alternatives: tuple[PatternAlternative, ...]
    chosen: int

    @property
    def chosen_alternative(self) -> PatternAlternative:
        return self.alternatives[self.chosen]


IterationCallback = Callable[[IterationTrace], None]


def _check_search(edge: RangeEdge | None, direction: SearchDirection) -> None:
    if edge is not None and not isinstance(edge, RangeEdge):
        raise PatternError.unsupported("edge", edge)
    if direction not in (SearchDirection.NEXT, SearchDirection.PREVIOUS):
        raise PatternError.unsupported("direction", direction)


def _check_patterns(patterns: Iterable[DateTimePattern] | None) -> tuple[DateTimePattern, ...]:
    if patterns is None:
        raise PatternError.argument("patterns")
    checked = tuple(patterns)
    if not checked:
        raise PatternError.range("patterns", "at least one pattern is required")
    for p in checked:
        if not isinstance(p, DateTimePattern):
            raise PatternError.unsupported("pattern", p)
    return checked


class Calculator:
    """Finds the nearest instant at which all patterns hold at once.

    Without an edge, components below the patterns' ranks keep whatever the
    last advancing pattern produced, which aligns only that pattern's own
    sub-range. With an edge, all of them are aligned. The two calls therefore
    differ whenever a pattern ranks above the finest component. From
    2000-06-14, MonthPattern(2) alone yields 2001-02-01 00:00 without an edge
    but 2001-02-28 23:59:59.999999 with RangeEdge.END.

    A combination that never occurs, such as February 30, is only rejected
    once the search runs past datetime.max or datetime.min. Each round only
    advances to the nearest partial match, so for February 30 the search
    takes one round per remaining year and can run for seconds.
    """

    default: ClassVar[Calculator]

    def __init__(self, on_iteration: IterationCallback | None = None) -> None:
        self._on_iteration = on_iteration

    def next(
        self,
        patterns: Iterable[DateTimePattern],
        start: datetime,
        tz: tzinfo | str,
        edge: RangeEdge | None = None,
    ) -> datetime | None:
        """The nearest instant strictly after `start` matching all `patterns`, or None."""
        return self._find(patterns, start, tz, edge, SearchDirection.NEXT)

    def previous(
        self,
        patterns: Iterable[DateTimePattern],
        start: datetime,
        tz: tzinfo | str,
        edge: RangeEdge | None = None,
    ) -> datetime | None:
        """The nearest instant strictly before `start` matching all `patterns`, or None."""
        return self._find(patterns, start, tz, edge, SearchDirection.PREVIOUS)

    def occurrences(
        self,
        patterns: Iterable[DateTimePattern],
        start: datetime,
        tz: tzinfo | str,
        edge: RangeEdge | None = None,
        direction: SearchDirection = SearchDirection.NEXT,
    ) -> Iterator[datetime]:
        """Returns a lazy iterator of matches, each searched from the previous one.

        The iterator stops once no further match exists before datetime.max
        (or after datetime.min for PREVIOUS).
        """
        checked = _check_patterns(patterns)
        _check_search(edge, direction)
        return self._walk(checked, start, resolve_tz(tz), edge, direction)

    def between(
        self,
        patterns: Iterable[DateTimePattern],
        start: datetime,
        end: datetime,
        tz: tzinfo | str,
        edge: RangeEdge | None = None,
    ) -> Iterator[datetime]:
        """Returns a bounded iterator of matches where `start < match <= end`."""
        zone = resolve_tz(tz)
        matches = self.occurrences(patterns, start, zone, edge)
        try:
            limit = to_zone(end, zone)
        except OverflowError:
            # `end` lies outside what the zone can express.
            if end.year == MIN_VALUE.year:
                return iter(())
            return matches
        return takewhile(lambda dt: dt <= limit, matches)

    def _walk(
        self,
        patterns: tuple[DateTimePattern, ...],
        start: datetime,
        tz: tzinfo,
        edge: RangeEdge | None,
        direction: SearchDirection,
    ) -> Iterator[datetime]:
        current: datetime | None = start
        while current is not None:
            current = self._find(patterns, current, tz, edge, direction)
            if current is not None:
                yield current

    def _find(
        self,
        patterns: Iterable[DateTimePattern],
        start: datetime,
        tz: tzinfo | str,
        edge: RangeEdge | None,
        direction: SearchDirection,
    ) -> datetime | None:
        checked = _check_patterns(patterns)
        zone = resolve_tz(tz)
        _check_search(edge, direction)

        try:
            reference = to_zone(start, zone)
        except OverflowError:
            logger.debug("Start is not representable in the time zone", start=start, tz=zone)
            return None

        # Seed round: every pattern advances, even those already matching.
        candidate = self._nearest(checked, reference, zone, direction)
        rounds = 1
        while candidate is not None:
            failing = tuple(p for p in checked if not p.matches(candidate))
            if not failing:
                break
            candidate = self._nearest(failing, candidate, zone, direction)
            rounds += 1

        if candidate is None:
            logger.debug("No match exists", direction=str(direction), start=start, rounds=rounds)
            return None

        logger.debug("Converged", direction=str(direction), result=candidate, rounds=rounds)
        if edge is not None:
            lower = lower_ranked(p.component for p in checked)
            candidate = align_to_edge(candidate, edge, lower)
        return candidate

    def _nearest(
        self,
        patterns: tuple[DateTimePattern, ...],
        reference: datetime,
        tz: tzinfo,
        direction: SearchDirection,
    ) -> datetime | None:
        alternatives: list[PatternAlternative] = []
        for p in patterns:
            if direction is SearchDirection.NEXT:
                dt = p.next(reference, tz)
                distance = None if dt is None else dt - reference
            else:
                dt = p.previous(reference, tz)
                distance = None if dt is None else reference - dt
            alternatives.append(PatternAlternative(p, dt, distance))

        reachable = [(a.distance, i) for i, a in enumerate(alternatives) if a.distance is not None]
        if not reachable:
            return None

        # Equal distances fall back to the index, i.e. input order.
        _, chosen = min(reachable)
        nearest = alternatives[chosen]
        logger.debug(
            "Convergence round",
            direction=str(direction),
            reference=reference,
            alternatives=len(alternatives),
            chosen=nearest.dt,
        )
        if self._on_iteration is not None:
            self._on_iteration(IterationTrace(direction, reference, tuple(alternatives), chosen))
        return nearest.dt


Calculator.default = Calculator()


def next_match(
    patterns: Iterable[DateTimePattern],
    start: datetime,
    tz: tzinfo | str,
    edge: RangeEdge | None = None,
) -> datetime | None:
    return Calculator.default.next(patterns, start, tz, edge)


def previous_match(
    patterns: Iterable[DateTimePattern],
    start: datetime,
    tz: tzinfo | str,
    edge: RangeEdge | None = None,
) -> datetime | None:
    return Calculator.default.previous(patterns, start, tz, edge)

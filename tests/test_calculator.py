"""Calculator convergence, edge alignment, iteration hook and logging."""

from __future__ import annotations

from datetime import datetime

import pytest
from loguru import logger

from calpattern import (
    Calculator,
    DateTimeComponent,
    DayOfWeekPattern,
    DayPattern,
    HourPattern,
    IterationTrace,
    MinutePattern,
    MonthPattern,
    PatternError,
    RangeEdge,
    SearchDirection,
    SecondPattern,
    Weekday,
    YearPattern,
    next_match,
    previous_match,
)
from tests.conftest import BERLIN, UTC

MIN_UTC = datetime.min.replace(tzinfo=UTC)
MAX_UTC = datetime.max.replace(tzinfo=UTC)

MAX_PATTERNS = [
    YearPattern(9999),
    MonthPattern(12),
    DayPattern(31),
    HourPattern(23),
    MinutePattern(59),
    SecondPattern(59),
]
MIN_PATTERNS = [
    YearPattern(1),
    MonthPattern(1),
    DayPattern(1),
    HourPattern(0),
    MinutePattern(0),
    SecondPattern(0),
]


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


# =============================================================================
# Next
# =============================================================================


class TestNext:
    def test_full_date(self) -> None:
        patterns = [YearPattern(2000), MonthPattern(5), DayPattern(12)]
        result = next_match(patterns, _utc(1999, 7, 1), UTC, RangeEdge.BEGINNING)
        assert result == _utc(2000, 5, 12)

    def test_friday_the_13th(self) -> None:
        patterns = [DayOfWeekPattern(Weekday.FRIDAY), DayPattern(13)]
        assert next_match(patterns, _utc(2022, 1, 1), UTC) == _utc(2022, 5, 13)

    def test_leap_day(self) -> None:
        patterns = [MonthPattern(2), DayPattern(29)]
        assert next_match(patterns, _utc(2020, 2, 29), UTC) == _utc(2024, 2, 29)

    def test_impossible_date(self) -> None:
        assert next_match([MonthPattern(2), DayPattern(31)], _utc(2000, 1, 1), UTC) is None

    def test_strictly_after_matching_start(self) -> None:
        patterns = [HourPattern(12), MinutePattern(0)]
        assert next_match(patterns, _utc(2000, 6, 1, 12), UTC) == _utc(2000, 6, 2, 12)

    def test_all_maximum_values_with_beginning_edge(self) -> None:
        result = next_match(MAX_PATTERNS, MIN_UTC, UTC, RangeEdge.BEGINNING)
        assert result == _utc(9999, 12, 31, 23, 59, 59)

    def test_all_maximum_values_with_end_edge(self) -> None:
        assert next_match(MAX_PATTERNS, _utc(2000, 6, 14), UTC, RangeEdge.END) == MAX_UTC

    def test_all_minimum_values(self) -> None:
        assert next_match(MIN_PATTERNS, MIN_UTC, UTC) is None

    def test_start_outside_zone_range(self) -> None:
        # datetime.max in UTC is already past the end of the range in Berlin.
        assert next_match([HourPattern(1)], MAX_UTC, BERLIN) is None

    def test_dst_gap(self) -> None:
        patterns = [MonthPattern(3), HourPattern(2), MinutePattern(30)]
        start = datetime(2022, 3, 26, 12, tzinfo=BERLIN)
        assert next_match(patterns, start, BERLIN) == datetime(2022, 3, 28, 2, 30, tzinfo=BERLIN)


class TestPrevious:
    def test_leap_day_with_end_edge(self) -> None:
        patterns = [MonthPattern(2), DayPattern(29)]
        result = previous_match(patterns, _utc(2024, 3, 1), UTC, RangeEdge.END)
        assert result == _utc(2024, 2, 29, 23, 59, 59, 999999)

    def test_all_minimum_values_with_beginning_edge(self) -> None:
        assert previous_match(MIN_PATTERNS, MAX_UTC, UTC, RangeEdge.BEGINNING) == MIN_UTC

    def test_all_maximum_values(self) -> None:
        assert previous_match(MAX_PATTERNS, MAX_UTC, UTC) is None

    def test_strictly_before_start(self) -> None:
        patterns = [HourPattern(12), MinutePattern(30)]
        result = previous_match(patterns, _utc(2000, 6, 1, 12, 30, 30), UTC)
        assert result == _utc(2000, 5, 31, 12, 30, 59, 999999)

    def test_friday_the_13th(self) -> None:
        patterns = [DayOfWeekPattern(Weekday.FRIDAY), DayPattern(13)]
        result = previous_match(patterns, _utc(2022, 5, 1), UTC, RangeEdge.BEGINNING)
        assert result == _utc(2021, 8, 13)


# =============================================================================
# Edge alignment
# =============================================================================


class TestEdge:
    _start = _utc(2000, 6, 14, 10, 20, 30, 400500)

    @pytest.mark.parametrize(
        "pattern,beginning,end",
        [
            (YearPattern(2001), _utc(2001, 1, 1), _utc(2001, 12, 31, 23, 59, 59, 999999)),
            (MonthPattern(8), _utc(2000, 8, 1), _utc(2000, 8, 31, 23, 59, 59, 999999)),
            (DayPattern(20), _utc(2000, 6, 20), _utc(2000, 6, 20, 23, 59, 59, 999999)),
            (HourPattern(12), _utc(2000, 6, 14, 12), _utc(2000, 6, 14, 12, 59, 59, 999999)),
            (MinutePattern(40), _utc(2000, 6, 14, 10, 40), _utc(2000, 6, 14, 10, 40, 59, 999999)),
            (SecondPattern(50), _utc(2000, 6, 14, 10, 20, 50), _utc(2000, 6, 14, 10, 20, 50, 999999)),
        ],
    )
    def test_single_pattern_edges(self, pattern: object, beginning: datetime, end: datetime) -> None:
        calc = Calculator()
        assert calc.next([pattern], self._start, UTC, RangeEdge.BEGINNING) == beginning  # type: ignore[list-item]
        assert calc.next([pattern], self._start, UTC, RangeEdge.END) == end  # type: ignore[list-item]

    def test_without_edge_keeps_last_advance(self) -> None:
        assert next_match([MonthPattern(2)], _utc(2000, 1, 14), UTC) == _utc(2000, 2, 1)

    def test_end_edge_covers_whole_month(self) -> None:
        result = next_match([MonthPattern(2)], _utc(2000, 1, 14), UTC, RangeEdge.END)
        assert result == _utc(2000, 2, 29, 23, 59, 59, 999999)

    def test_edge_only_touches_ranks_below_all_patterns(self) -> None:
        patterns = [MonthPattern(2), HourPattern(6)]
        result = next_match(patterns, _utc(2000, 1, 14), UTC, RangeEdge.END)
        assert result == _utc(2000, 2, 1, 6, 59, 59, 999999)


# =============================================================================
# Iteration hook
# =============================================================================


class TestIterationHook:
    def test_reports_each_round(self) -> None:
        traces: list[IterationTrace] = []
        calc = Calculator(on_iteration=traces.append)
        patterns = [YearPattern(2000), MonthPattern(5), DayPattern(12)]
        result = calc.next(patterns, _utc(1999, 7, 1), UTC)

        assert result == _utc(2000, 5, 12)
        assert traces
        assert traces[0].reference == _utc(1999, 7, 1)
        assert len(traces[0].alternatives) == 3
        assert traces[-1].chosen_alternative.dt == result
        assert all(t.direction is SearchDirection.NEXT for t in traces)

    def test_round_references_advance(self) -> None:
        traces: list[IterationTrace] = []
        Calculator(on_iteration=traces.append).next(
            [DayOfWeekPattern(Weekday.FRIDAY), DayPattern(13)], _utc(2022, 1, 1), UTC
        )
        references = [t.reference for t in traces]
        assert references == sorted(references)
        assert len(set(references)) == len(references)

    def test_ties_keep_input_order(self) -> None:
        start = _utc(2000, 2, 15)
        for patterns in ([MonthPattern(3), DayPattern(1)], [DayPattern(1), MonthPattern(3)]):
            traces: list[IterationTrace] = []
            result = Calculator(on_iteration=traces.append).next(patterns, start, UTC)
            assert result == _utc(2000, 3, 1)
            assert len(traces) == 1
            assert traces[0].chosen == 0
            assert traces[0].chosen_alternative.pattern == patterns[0]

    def test_unreachable_alternatives_are_reported(self) -> None:
        traces: list[IterationTrace] = []
        calc = Calculator(on_iteration=traces.append)
        result = calc.next([YearPattern(1999), MonthPattern(3)], _utc(2000, 2, 15), UTC)

        assert result is None
        assert len(traces) == 1
        assert traces[0].chosen == 1
        assert traces[0].alternatives[0].dt is None
        assert traces[0].alternatives[0].distance is None

    def test_previous_distances_are_positive(self) -> None:
        traces: list[IterationTrace] = []
        Calculator(on_iteration=traces.append).previous([HourPattern(3)], _utc(2000, 6, 1, 12), UTC)
        (trace,) = traces
        assert trace.direction is SearchDirection.PREVIOUS
        distance = trace.chosen_alternative.distance
        assert distance is not None and distance.total_seconds() > 0


# =============================================================================
# Argument validation
# =============================================================================


class TestErrors:
    def test_none_patterns(self) -> None:
        with pytest.raises(PatternError) as exc:
            next_match(None, _utc(2000, 1, 1), UTC)  # type: ignore[arg-type]
        assert exc.value.kind == "argument"

    def test_empty_patterns(self) -> None:
        with pytest.raises(PatternError) as exc:
            next_match([], _utc(2000, 1, 1), UTC)
        assert exc.value.kind == "range"

    def test_foreign_pattern(self) -> None:
        with pytest.raises(PatternError) as exc:
            previous_match([DateTimeComponent.DAY], _utc(2000, 1, 1), UTC)  # type: ignore[list-item]
        assert exc.value.kind == "unsupported"

    def test_none_time_zone(self) -> None:
        with pytest.raises(PatternError) as exc:
            next_match([DayPattern(1)], _utc(2000, 1, 1), None)  # type: ignore[arg-type]
        assert exc.value.kind == "argument"

    def test_unsupported_edge(self) -> None:
        with pytest.raises(PatternError) as exc:
            next_match([DayPattern(1)], _utc(2000, 1, 1), UTC, "end")  # type: ignore[arg-type]
        assert exc.value.kind == "unsupported"

    def test_start_must_be_datetime(self) -> None:
        with pytest.raises(PatternError) as exc:
            next_match([DayPattern(1)], None, UTC)  # type: ignore[arg-type]
        assert exc.value.kind == "argument"

    def test_display_rich(self) -> None:
        with pytest.raises(PatternError) as exc:
            next_match([], _utc(2000, 1, 1), UTC)
        assert exc.value.display_rich().startswith("error[range]:")
        assert "(argument: patterns)" in exc.value.display_rich()


# =============================================================================
# Calculator instances
# =============================================================================


class TestInstances:
    def test_default_instance(self) -> None:
        assert isinstance(Calculator.default, Calculator)
        patterns = [HourPattern(6)]
        start = _utc(2000, 1, 1)
        assert Calculator.default.next(patterns, start, UTC) == next_match(patterns, start, UTC)

    def test_accepts_iterables(self) -> None:
        result = next_match((p for p in [HourPattern(6)]), _utc(2000, 1, 1), UTC)
        assert result == _utc(2000, 1, 1, 6)

    def test_zone_name(self) -> None:
        result = next_match([HourPattern(6)], _utc(2000, 1, 1), "Europe/Berlin")
        assert result == datetime(2000, 1, 1, 6, tzinfo=BERLIN)


# =============================================================================
# Logging
# =============================================================================


class TestLogging:
    def test_silent_by_default(self) -> None:
        messages: list[str] = []
        sink = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            next_match([HourPattern(6)], _utc(2000, 1, 1), UTC)
        finally:
            logger.remove(sink)
        assert messages == []

    def test_debug_rounds_when_enabled(self) -> None:
        messages: list[str] = []
        logger.enable("calpattern")
        sink = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            next_match([YearPattern(1999), MonthPattern(3)], _utc(2000, 2, 15), UTC)
            next_match([HourPattern(6)], _utc(2000, 1, 1), UTC)
        finally:
            logger.remove(sink)
            logger.disable("calpattern")
        text = "".join(messages)
        assert "Convergence round" in text
        assert "No match exists" in text
        assert "Converged" in text

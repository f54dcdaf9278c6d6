from __future__ import annotations

from loguru import logger

from ._bounds import (
    align_to_edge,
    comply_with_bound,
    complies_with_lower_bound,
    complies_with_upper_bound,
)
from ._calculator import (
    Calculator,
    IterationCallback,
    IterationTrace,
    PatternAlternative,
    next_match,
    previous_match,
)
from ._error import PatternError, PatternErrorKind
from ._patterns import (
    DateTimePattern,
    DayOfWeekPattern,
    DayPattern,
    HourPattern,
    MinutePattern,
    MonthPattern,
    SecondPattern,
    Weekday,
    YearPattern,
)
from ._rank import (
    RANKS,
    DateTimeComponent,
    RangeEdge,
    SearchDirection,
    component_value,
    higher_ranked,
    lower_ranked,
)
from ._time import MAX_VALUE, MIN_VALUE, days_in_year

# Silent unless the application calls logger.enable("calpattern").
logger.disable(__name__)

__all__ = [
    "Calculator",
    "IterationCallback",
    "IterationTrace",
    "PatternAlternative",
    "next_match",
    "previous_match",
    "PatternError",
    "PatternErrorKind",
    "DateTimePattern",
    "YearPattern",
    "MonthPattern",
    "DayPattern",
    "DayOfWeekPattern",
    "HourPattern",
    "MinutePattern",
    "SecondPattern",
    "Weekday",
    "DateTimeComponent",
    "RANKS",
    "RangeEdge",
    "SearchDirection",
    "lower_ranked",
    "higher_ranked",
    "component_value",
    "comply_with_bound",
    "complies_with_upper_bound",
    "complies_with_lower_bound",
    "align_to_edge",
    "days_in_year",
    "MIN_VALUE",
    "MAX_VALUE",
]

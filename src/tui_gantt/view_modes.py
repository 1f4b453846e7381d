"""View modes: the step/column-width table and per-mode layout rules.

Each mode group has one rules class. ``rules_for`` is the single place that
maps a ViewMode onto its rules, so a new mode cannot be added without
deciding its padding, tick step, labels and thick-tick behaviour.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from tui_gantt import date_utils
from tui_gantt.date_utils import DAY, HOUR, MONTH, YEAR


class ViewMode(Enum):
    """Time granularity of the chart columns."""

    EIGHTH_DAY = "eighth-day"
    SIXTH_DAY = "sixth-day"
    QUARTER_DAY = "quarter-day"
    HALF_DAY = "half-day"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: str | ViewMode) -> ViewMode:
        """Accept enum members, values ("half-day") or names ("HALF_DAY", "Half Day")."""
        if isinstance(value, ViewMode):
            return value
        key = str(value).strip().lower().replace("_", "-").replace(" ", "-")
        return cls(key)


VIEW_MODES: list[ViewMode] = list(ViewMode)

# Hours represented by one column.
STEP_HOURS: dict[ViewMode, int] = {
    ViewMode.EIGHTH_DAY: 24 // 8,
    ViewMode.SIXTH_DAY: 24 // 6,
    ViewMode.QUARTER_DAY: 24 // 4,
    ViewMode.HALF_DAY: 24 // 2,
    ViewMode.DAY: 24,
    ViewMode.WEEK: 24 * 7,
    ViewMode.MONTH: 24 * 30,
    ViewMode.YEAR: 24 * 365,
}

DEFAULT_COLUMN_WIDTHS: dict[ViewMode, int] = {
    ViewMode.EIGHTH_DAY: 38,
    ViewMode.SIXTH_DAY: 38,
    ViewMode.QUARTER_DAY: 38,
    ViewMode.HALF_DAY: 38,
    ViewMode.DAY: 38,
    ViewMode.WEEK: 140,
    ViewMode.MONTH: 120,
    ViewMode.YEAR: 120,
}

VIEW_MODE_LABELS: dict[ViewMode, str] = {
    ViewMode.EIGHTH_DAY: "3h",
    ViewMode.SIXTH_DAY: "4h",
    ViewMode.QUARTER_DAY: "6h",
    ViewMode.HALF_DAY: "12h",
    ViewMode.DAY: "D",
    ViewMode.WEEK: "W",
    ViewMode.MONTH: "M",
    ViewMode.YEAR: "Y",
}

SUB_DAY_MODES = frozenset(
    {ViewMode.EIGHTH_DAY, ViewMode.SIXTH_DAY, ViewMode.QUARTER_DAY, ViewMode.HALF_DAY}
)


class ModeRules:
    """Layout behaviour shared by a group of view modes."""

    # Upper label is centred over this many columns.
    upper_span_cols: int = 1
    # Lower label sits in the middle of its column instead of at its left edge.
    lower_centered: bool = False

    def __init__(self, mode: ViewMode) -> None:
        self.mode = mode
        self.step_hours = STEP_HOURS[mode]

    def pad_range(self, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        return date_utils.add(start, -1, MONTH), date_utils.add(end, 1, MONTH)

    def next_tick(self, d: datetime) -> datetime:
        return date_utils.add(d, self.step_hours, HOUR)

    def labels(self, d: datetime, prev: datetime | None, locale: str) -> tuple[str, str]:
        """Return ``(lower, upper)`` header text for the tick at *d*."""
        raise NotImplementedError

    def is_thick(self, d: datetime) -> bool:
        return False

    def has_gridline(self, d: datetime) -> bool:
        return True

    def lower_offset(self, column_width: float) -> float:
        return column_width / 2 if self.lower_centered else 0

    def upper_offset(self, column_width: float) -> float:
        return column_width * self.upper_span_cols / 2

    def tick_advance(self, d: datetime, column_width: float) -> float:
        """Horizontal distance from the tick at *d* to the next one."""
        return column_width


def _day_changed(d: datetime, prev: datetime | None) -> bool:
    return prev is None or d.day != prev.day


def _month_changed(d: datetime, prev: datetime | None) -> bool:
    return prev is None or d.month != prev.month


def _year_changed(d: datetime, prev: datetime | None) -> bool:
    return prev is None or d.year != prev.year


class SubDayRules(ModeRules):
    """Eighth, sixth, quarter and half day: hour columns."""

    _SPANS = {
        ViewMode.EIGHTH_DAY: 8,
        ViewMode.SIXTH_DAY: 6,
        ViewMode.QUARTER_DAY: 4,
        ViewMode.HALF_DAY: 2,
    }

    def __init__(self, mode: ViewMode) -> None:
        super().__init__(mode)
        self.upper_span_cols = self._SPANS[mode]

    def pad_range(self, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        return date_utils.add(start, -7, DAY), date_utils.add(end, 7, DAY)

    def labels(self, d: datetime, prev: datetime | None, locale: str) -> tuple[str, str]:
        lower = date_utils.format(d, "HH", locale)
        upper = ""
        if _day_changed(d, prev):
            if self.mode == ViewMode.HALF_DAY and not _month_changed(d, prev):
                upper = date_utils.format(d, "D", locale)
            else:
                upper = date_utils.format(d, "D MMM", locale)
        return lower, upper

    def is_thick(self, d: datetime) -> bool:
        return d.hour == 0

    def has_gridline(self, d: datetime) -> bool:
        return d.hour == 0


class DayRules(ModeRules):
    upper_span_cols = 30
    lower_centered = True

    def labels(self, d: datetime, prev: datetime | None, locale: str) -> tuple[str, str]:
        lower = date_utils.format(d, "D", locale) if _day_changed(d, prev) else ""
        upper = date_utils.format(d, "MMMM", locale) if _month_changed(d, prev) else ""
        return lower, upper

    def is_thick(self, d: datetime) -> bool:
        return d.day == 1


class WeekRules(ModeRules):
    upper_span_cols = 4

    def labels(self, d: datetime, prev: datetime | None, locale: str) -> tuple[str, str]:
        if _month_changed(d, prev):
            return date_utils.format(d, "D MMM", locale), date_utils.format(d, "MMMM", locale)
        return date_utils.format(d, "D", locale), ""

    def is_thick(self, d: datetime) -> bool:
        return 1 <= d.day < 8


class MonthRules(ModeRules):
    upper_span_cols = 12
    lower_centered = True

    def pad_range(self, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        return date_utils.start_of(start, YEAR), date_utils.add(end, 1, YEAR)

    def next_tick(self, d: datetime) -> datetime:
        return date_utils.add(d, 1, MONTH)

    def labels(self, d: datetime, prev: datetime | None, locale: str) -> tuple[str, str]:
        lower = date_utils.format(d, "MMMM", locale)
        upper = date_utils.format(d, "YYYY", locale) if _year_changed(d, prev) else ""
        return lower, upper

    def is_thick(self, d: datetime) -> bool:
        # quarter boundaries: Jan, Apr, Jul, Oct
        return (d.month - 1) % 3 == 0

    def tick_advance(self, d: datetime, column_width: float) -> float:
        return date_utils.days_in_month(d) * column_width / 30


class YearRules(ModeRules):
    upper_span_cols = 30
    lower_centered = True

    def pad_range(self, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        return date_utils.add(start, -2, YEAR), date_utils.add(end, 2, YEAR)

    def next_tick(self, d: datetime) -> datetime:
        return date_utils.add(d, 1, YEAR)

    def labels(self, d: datetime, prev: datetime | None, locale: str) -> tuple[str, str]:
        lower = date_utils.format(d, "YYYY", locale)
        upper = date_utils.format(d, "YYYY", locale) if _year_changed(d, prev) else ""
        return lower, upper


def rules_for(mode: ViewMode) -> ModeRules:
    if mode in SUB_DAY_MODES:
        return SubDayRules(mode)
    if mode == ViewMode.DAY:
        return DayRules(mode)
    if mode == ViewMode.WEEK:
        return WeekRules(mode)
    if mode == ViewMode.MONTH:
        return MonthRules(mode)
    if mode == ViewMode.YEAR:
        return YearRules(mode)
    raise ValueError(f"Unknown view mode: {mode!r}")

"""Timeline layout engine.

Turns normalized tasks plus a view mode into a chart range, header ticks and
bar rectangles in pixel space. Layout happens in two phases:

1. ``render`` computes everything that does not depend on text metrics and
   places every bar label provisionally at the centre of its bar.
2. ``finalize_labels`` runs once the caller can measure text. It moves or
   hides labels wider than their bars and drops header labels that would
   overflow the grid.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any

from rich.cells import cell_len

from tui_gantt import date_utils
from tui_gantt.date_utils import DAY, HOUR, MINUTE, SECOND
from tui_gantt.errors import EmptyTaskListError
from tui_gantt.models import (
    LABEL_OUTSIDE_GAP,
    UPPER_LABEL_RISE,
    BarGeometry,
    ChartRange,
    GanttOptions,
    GridRow,
    Highlight,
    LabelMode,
    LabelOverflow,
    Layout,
    Task,
    Tick,
    center_x,
    center_y,
    end_x,
)
from tui_gantt.tasks import normalize_tasks, row_count
from tui_gantt.view_modes import STEP_HOURS, ViewMode, rules_for

LOGGER = logging.getLogger(__name__)

Measure = Callable[[str], float]
ViewChangeListener = Callable[[ViewMode], None]


# ── Range ─────────────────────────────────────────────────────────

def resolve_range(tasks: Sequence[Task], mode: ViewMode) -> ChartRange:
    """Span of all tasks, snapped to days and padded for the view mode."""
    if not tasks:
        raise EmptyTaskListError()
    start = date_utils.start_of(min(t.start for t in tasks), DAY)
    end = date_utils.start_of(max(t.end for t in tasks), DAY)
    start, end = rules_for(mode).pad_range(start, end)
    return ChartRange(start=start, end=end)


# ── Ticks ─────────────────────────────────────────────────────────

def generate_ticks(
    chart_range: ChartRange, mode: ViewMode, options: GanttOptions
) -> tuple[Tick, ...]:
    """Ticks from the range start until the first one at or past its end."""
    rules = rules_for(mode)
    cw = options.column_width(mode)
    lower_y = options.header_height
    upper_y = options.header_height - UPPER_LABEL_RISE

    ticks: list[Tick] = []
    prev: datetime | None = None
    cur = chart_range.start
    x = 0.0
    while True:
        lower, upper = rules.labels(cur, prev, options.language)
        base_x = len(ticks) * cw
        ticks.append(Tick(
            date=cur,
            x=x,
            lower_text=lower,
            upper_text=upper,
            lower_x=base_x + rules.lower_offset(cw),
            upper_x=base_x + rules.upper_offset(cw),
            lower_y=lower_y,
            upper_y=upper_y,
            thick=rules.is_thick(cur),
            gridline=rules.has_gridline(cur),
        ))
        if cur >= chart_range.end:
            break
        x += rules.tick_advance(cur, cw)
        prev = cur
        cur = rules.next_tick(cur)
    return tuple(ticks)


# ── Bars ──────────────────────────────────────────────────────────

def _span_px(later: datetime, earlier: datetime, mode: ViewMode, cw: int) -> float:
    if mode == ViewMode.MONTH:
        # Month columns are not uniform; approximate with 30-day months.
        return date_utils.diff(later, earlier, DAY) * cw / 30
    return date_utils.diff(later, earlier, MINUTE) / (STEP_HOURS[mode] * 60) * cw


def bar_y(row_index: int, options: GanttOptions) -> float:
    return options.header_height + options.padding + row_index * (
        options.bar_height + options.padding
    )


def resolve_bar(
    task: Task, chart_range: ChartRange, mode: ViewMode, options: GanttOptions
) -> BarGeometry:
    cw = options.column_width(mode)
    x = _span_px(task.start, chart_range.start, mode, cw)
    width = _span_px(task.end, task.start, mode, cw)
    y = bar_y(task.row_index, options)
    height = options.bar_height
    return BarGeometry(
        task_id=task.id,
        x=x,
        y=y,
        width=width,
        height=height,
        corner_radius=options.bar_corner_radius,
        label=task.name,
        label_x=x + width / 2,
        label_y=y + height / 2,
        invalid=task.invalid,
        custom_class=task.custom_class,
    )


def resolve_bars(
    tasks: Iterable[Task], chart_range: ChartRange, mode: ViewMode, options: GanttOptions
) -> tuple[BarGeometry, ...]:
    return tuple(resolve_bar(t, chart_range, mode, options) for t in tasks)


def place_label(bar: BarGeometry, label_width: float, overflow: LabelOverflow) -> BarGeometry:
    """Final label placement for a bar once the label's width is known."""
    if label_width > bar.width:
        if overflow == LabelOverflow.HIDE:
            return replace(bar, label_mode=LabelMode.HIDDEN)
        return replace(
            bar,
            label_mode=LabelMode.OUTSIDE,
            label_x=end_x(bar) + LABEL_OUTSIDE_GAP,
            label_y=center_y(bar),
        )
    return replace(
        bar, label_mode=LabelMode.CENTER, label_x=center_x(bar), label_y=center_y(bar)
    )


def drop_overflowing_labels(
    ticks: Iterable[Tick], grid_width: float, measure: Measure
) -> tuple[Tick, ...]:
    """Remove upper labels whose right edge passes the end of the grid."""
    result: list[Tick] = []
    for tick in ticks:
        if tick.upper_text and tick.upper_x + measure(tick.upper_text) / 2 > grid_width:
            tick = replace(tick, upper_text="")
        result.append(tick)
    return tuple(result)


def finalize_labels(layout: Layout, measure: Measure, overflow: LabelOverflow) -> Layout:
    bars = tuple(place_label(b, measure(b.label), overflow) for b in layout.bars)
    ticks = drop_overflowing_labels(layout.ticks, layout.grid_width, measure)
    return replace(layout, bars=bars, ticks=ticks, finalized=True)


def text_measure(options: GanttOptions) -> Measure:
    """Width of text in px, assuming a fixed-width font of ``char_width`` per cell."""
    return lambda text: cell_len(text) * options.char_width


# ── Grid ──────────────────────────────────────────────────────────

def grid_rows(rows: int, grid_width: float, options: GanttOptions) -> tuple[GridRow, ...]:
    row_height = options.bar_height + options.padding
    top = options.header_height + options.padding / 2
    return tuple(
        GridRow(index=i, y=top + i * row_height, width=grid_width, height=row_height)
        for i in range(rows)
    )


def grid_height(rows: int, options: GanttOptions) -> float:
    return options.header_height + options.padding + (options.bar_height + options.padding) * rows


def today_highlight(
    today: datetime, chart_range: ChartRange, mode: ViewMode, rows: int, options: GanttOptions
) -> Highlight | None:
    """Column rectangle behind today's date; only drawn in day mode."""
    if mode != ViewMode.DAY:
        return None
    cw = options.column_width(mode)
    x = date_utils.diff(today, chart_range.start, HOUR) / STEP_HOURS[mode] * cw
    height = (
        (options.bar_height + options.padding) * rows
        + options.header_height
        + options.padding / 2
    )
    return Highlight(x=x, y=0, width=cw, height=height)


def scroll_position(
    oldest_start: datetime, chart_range: ChartRange, mode: ViewMode, options: GanttOptions
) -> float:
    """Horizontal scroll that puts the earliest task one column from the left edge."""
    cw = options.column_width(mode)
    hours = date_utils.diff(oldest_start, chart_range.start, HOUR)
    return hours / STEP_HOURS[mode] * cw - cw


def task_date_label(task: Task, locale: str = "en") -> str:
    """``"Jan 5 - Jan 9"``; an end at the last instant of a day shows that day."""
    start = date_utils.format(task.start, "MMM D", locale)
    end = date_utils.format(date_utils.add(task.end, -1, SECOND), "MMM D", locale)
    return f"{start} - {end}"


# ── Engine ────────────────────────────────────────────────────────

class TimelineLayout:
    """Holds tasks and options and rebuilds the whole Layout on every change."""

    def __init__(
        self,
        tasks: Iterable[Mapping[str, Any]],
        options: GanttOptions | None = None,
        today: datetime | None = None,
        on_view_change: ViewChangeListener | None = None,
    ) -> None:
        self.options = options or GanttOptions()
        self._today = today
        self._listeners: list[ViewChangeListener] = []
        if on_view_change is not None:
            self._listeners.append(on_view_change)
        self._generation = 0
        self.tasks: list[Task] = []
        self.rows = 1
        self.layout: Layout | None = None
        self.setup_tasks(tasks)
        self.change_view_mode()

    @property
    def today(self) -> datetime:
        return self._today or date_utils.today()

    @property
    def view_mode(self) -> ViewMode:
        return self.options.view_mode

    def setup_tasks(self, records: Iterable[Mapping[str, Any]]) -> None:
        self.tasks = normalize_tasks(records, self.today)
        self.rows = row_count(self.tasks)

    def refresh(self, records: Iterable[Mapping[str, Any]]) -> Layout:
        """Replace all tasks and re-render."""
        self.setup_tasks(records)
        return self.change_view_mode()

    def add_listener(self, listener: ViewChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ViewChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def change_view_mode(self, mode: ViewMode | str | None = None) -> Layout:
        self.options.view_mode = ViewMode.parse(mode if mode is not None else self.options.view_mode)
        layout = self.render()
        LOGGER.info("View changed to %s", self.options.view_mode.value)
        for listener in list(self._listeners):
            listener(self.options.view_mode)
        return layout

    def change_column_width(self, column_width: int) -> Layout:
        """Override the column width of the current view mode."""
        if column_width <= 0:
            raise ValueError(f"Column width must be positive, got {column_width}")
        self.options.column_widths[self.options.view_mode] = int(column_width)
        return self.change_view_mode()

    def render(self) -> Layout:
        """Phase one: compute a fresh Layout with provisional bar labels."""
        mode = self.options.view_mode
        options = self.options
        cw = options.column_width(mode)

        chart_range = resolve_range(self.tasks, mode)
        ticks = generate_ticks(chart_range, mode, options)
        grid_width = len(ticks) * cw

        self._generation += 1
        self.layout = Layout(
            view_mode=mode,
            column_width=cw,
            step_hours=STEP_HOURS[mode],
            chart_range=chart_range,
            ticks=ticks,
            bars=resolve_bars(self.tasks, chart_range, mode, options),
            grid_rows=grid_rows(self.rows, grid_width, options),
            grid_width=grid_width,
            grid_height=grid_height(self.rows, options),
            header_height=options.header_height,
            rows=self.rows,
            today_highlight=today_highlight(self.today, chart_range, mode, self.rows, options),
            scroll_x=scroll_position(self.oldest_start(), chart_range, mode, options),
            generation=self._generation,
        )
        return self.layout

    def finalize_labels(self, layout: Layout, measure: Measure | None = None) -> Layout | None:
        """Phase two: place labels using *measure* (text -> px).

        Returns None when *layout* has been superseded by a later render.
        """
        if layout.generation != self._generation:
            LOGGER.debug(
                "Ignoring label placement for stale layout %d (current %d)",
                layout.generation,
                self._generation,
            )
            return None
        measure = measure or text_measure(self.options)
        self.layout = finalize_labels(layout, measure, self.options.label_overflow)
        return self.layout

    def get_bar(self, task_id: str) -> BarGeometry | None:
        if self.layout is None:
            return None
        return self.layout.get_bar(task_id)

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def oldest_start(self) -> datetime:
        if not self.tasks:
            raise EmptyTaskListError()
        return min(t.start for t in self.tasks)

"""Data models for TUI Gantt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from tui_gantt.view_modes import DEFAULT_COLUMN_WIDTHS, ViewMode


class LabelOverflow(Enum):
    """What to do with a bar label wider than its bar."""

    HIDE = "hide"
    RENDER_OUTSIDE = "render-outside"


class LabelMode(Enum):
    """Final placement of a bar label."""

    CENTER = "center"
    OUTSIDE = "outside"
    HIDDEN = "hidden"


LABEL_OUTSIDE_GAP = 5  # px between a bar's right edge and an outside label
UPPER_LABEL_RISE = 25  # px between the lower and upper header label baselines


@dataclass
class GanttOptions:
    """Chart options; every field has a usable default."""

    view_mode: ViewMode = ViewMode.DAY
    column_widths: dict[ViewMode, int] = field(
        default_factory=lambda: dict(DEFAULT_COLUMN_WIDTHS)
    )
    header_height: int = 50
    bar_height: int = 20
    bar_corner_radius: int = 3
    padding: int = 18
    language: str = "en"
    label_overflow: LabelOverflow = LabelOverflow.RENDER_OUTSIDE
    char_width: float = 7.0  # px per terminal cell

    def column_width(self, mode: ViewMode | None = None) -> int:
        mode = mode or self.view_mode
        return self.column_widths.get(mode, DEFAULT_COLUMN_WIDTHS[mode])


@dataclass(frozen=True)
class Task:
    """A normalized task. Always has a start before its end."""

    id: str
    name: str
    start: datetime
    end: datetime
    row_index: int = 0
    invalid: bool = False
    custom_class: str = ""


@dataclass(frozen=True)
class ChartRange:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Tick:
    """One column boundary on the date axis, with its header labels."""

    date: datetime
    x: float
    lower_text: str
    upper_text: str
    lower_x: float
    upper_x: float
    lower_y: float
    upper_y: float
    thick: bool = False
    gridline: bool = True


@dataclass(frozen=True)
class BarGeometry:
    """Pixel rectangle and label placement for one task."""

    task_id: str
    x: float
    y: float
    width: float
    height: float
    corner_radius: float
    label: str
    label_x: float
    label_y: float
    label_mode: LabelMode = LabelMode.CENTER
    invalid: bool = False
    custom_class: str = ""


def end_x(bar: BarGeometry) -> float:
    return bar.x + bar.width


def center_x(bar: BarGeometry) -> float:
    return bar.x + bar.width / 2


def center_y(bar: BarGeometry) -> float:
    return bar.y + bar.height / 2


@dataclass(frozen=True)
class GridRow:
    """Background stripe behind one row of bars."""

    index: int
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Highlight:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Layout:
    """Everything one render pass produces. Never patched, only replaced."""

    view_mode: ViewMode
    column_width: int
    step_hours: int
    chart_range: ChartRange
    ticks: tuple[Tick, ...]
    bars: tuple[BarGeometry, ...]
    grid_rows: tuple[GridRow, ...]
    grid_width: float
    grid_height: float
    header_height: float
    rows: int
    today_highlight: Highlight | None = None
    scroll_x: float = 0
    generation: int = 0
    finalized: bool = False

    def get_bar(self, task_id: str) -> BarGeometry | None:
        for bar in self.bars:
            if bar.task_id == task_id:
                return bar
        return None

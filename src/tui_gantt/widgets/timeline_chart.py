"""Timeline chart widget: draws a computed Layout in terminal cells.

One terminal cell is ``char_width`` layout pixels wide and each chart row is
one terminal line. No date arithmetic happens here.
"""

from __future__ import annotations

import math

from textual.app import ComposeResult
from textual.containers import Container
from textual.geometry import Size
from textual.message import Message
from textual.scroll_view import ScrollView
from textual.strip import Strip
from textual.widget import Widget

from rich.cells import cell_len
from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from tui_gantt import theme
from tui_gantt.layout import TimelineLayout
from tui_gantt.models import BarGeometry, LabelMode, Layout, Tick
from tui_gantt.view_modes import VIEW_MODE_LABELS, VIEW_MODES, ViewMode

BAR_CHAR = "█"
INVALID_BAR_CHAR = "░"
TICK_CHAR = "│"
THICK_TICK_CHAR = "┃"


def px_to_cell(px: float, char_width: float) -> int:
    return int(math.floor(px / char_width))


def bar_cells(bar: BarGeometry, char_width: float) -> tuple[int, int]:
    """(first cell, cell count) covered by a bar; at least one cell."""
    start = px_to_cell(bar.x, char_width)
    end = int(math.ceil((bar.x + bar.width) / char_width))
    return start, max(1, end - start)


def bar_row(bar: BarGeometry, layout: Layout) -> int:
    """Row index of a bar, recovered from its y position."""
    if not layout.grid_rows:
        return 0
    first = layout.grid_rows[0]
    return int((bar.y - first.y) // first.height)


def gridline_cells(ticks: tuple[Tick, ...], char_width: float) -> dict[int, bool]:
    """Cell -> thick flag for every tick that draws a gridline."""
    cells: dict[int, bool] = {}
    for tick in ticks:
        if tick.gridline:
            col = px_to_cell(tick.x, char_width)
            cells[col] = cells.get(col, False) or tick.thick
    return cells


def _place_centered(line: list[str], text: str, center_col: int) -> None:
    start = center_col - cell_len(text) // 2
    for i, ch in enumerate(text):
        col = start + i
        if 0 <= col < len(line):
            line[col] = ch


def header_lines(layout: Layout, char_width: float, width: int) -> tuple[str, str]:
    """Upper and lower header text, labels centred on their anchor points."""
    upper = [" "] * width
    lower = [" "] * width
    for tick in layout.ticks:
        if tick.upper_text:
            _place_centered(upper, tick.upper_text, px_to_cell(tick.upper_x, char_width))
        if tick.lower_text:
            _place_centered(lower, tick.lower_text, px_to_cell(tick.lower_x, char_width))
    return "".join(upper), "".join(lower)


def _is_dark(widget: Widget) -> bool:
    try:
        return widget.app.current_theme.dark
    except Exception:
        return True


class GanttToolbar(Widget):
    """1-line toolbar with clickable view-mode buttons."""

    class ViewModeChanged(Message):
        def __init__(self, mode: ViewMode) -> None:
            super().__init__()
            self.mode = mode

    DEFAULT_CSS = """
    GanttToolbar {
        height: 1;
        background: $background;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._mode: ViewMode = ViewMode.DAY
        self._button_regions: list[tuple[int, int, ViewMode]] = []

    @property
    def mode(self) -> ViewMode:
        return self._mode

    def update_toolbar(self, mode: ViewMode) -> None:
        self._mode = mode
        self.refresh()

    def render(self) -> Text:
        dark = _is_dark(self)
        text = Text()
        text.append("View ", Style(bold=True))
        text.append("│ ", Style(dim=True))

        self._button_regions = []
        for i, mode in enumerate(VIEW_MODES):
            label = VIEW_MODE_LABELS[mode]
            start = len(text)
            if mode == self._mode:
                text.append(
                    f" {label} ",
                    Style(bold=True, reverse=True, color=theme.TOOLBAR_ACTIVE.resolve(dark)),
                )
            else:
                text.append(f" {label} ", Style(dim=True))
            self._button_regions.append((start, len(text), mode))
            if i < len(VIEW_MODES) - 1:
                text.append("│", Style(dim=True))
        return text

    def on_click(self, event) -> None:
        for start, end, mode in self._button_regions:
            if start <= event.x < end:
                if mode != self._mode:
                    self.post_message(self.ViewModeChanged(mode))
                return


class TimelineHeader(Widget):
    """Two header lines: coarse (upper) and fine (lower) date labels."""

    DEFAULT_CSS = """
    TimelineHeader {
        height: 2;
        background: $background;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._layout: Layout | None = None
        self._char_width: float = 7.0
        self.scroll_x_offset: int = 0

    def update_header(self, layout: Layout, char_width: float) -> None:
        self._layout = layout
        self._char_width = char_width
        self.refresh()

    def render_line(self, y: int) -> Strip:
        if self._layout is None or y > 1:
            return Strip.blank(self.size.width)
        dark = _is_dark(self)
        width = max(self.size.width, px_to_cell(self._layout.grid_width, self._char_width) + 1)
        upper, lower = header_lines(self._layout, self._char_width, width)
        if y == 0:
            style = Style(bold=True, color=theme.GANTT_UPPER_HEADER.resolve(dark))
            strip = Strip([Segment(upper, style)])
        else:
            style = Style(color=theme.GANTT_HEADER.resolve(dark))
            strip = Strip([Segment(lower, style)])
        return strip.crop(self.scroll_x_offset, self.scroll_x_offset + self.size.width)


class TimelineView(ScrollView):
    """Renders one terminal line per chart row."""

    class ScrollXChanged(Message):
        """Emitted when horizontal scroll position changes."""

        def __init__(self, scroll_x: float) -> None:
            super().__init__()
            self.scroll_x = scroll_x

    DEFAULT_CSS = """
    TimelineView {
        height: 1fr;
        background: $background;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._layout: Layout | None = None
        self._char_width: float = 7.0
        self._selected_id: str | None = None

    def update_view(self, layout: Layout, char_width: float, selected_id: str | None = None) -> None:
        self._layout = layout
        self._char_width = char_width
        self._selected_id = selected_id
        cells = px_to_cell(layout.grid_width, char_width) + 1
        self.virtual_size = Size(cells, layout.rows)
        self.refresh()

    def watch_scroll_x(self, old: float, new: float) -> None:
        super().watch_scroll_x(old, new)
        self.post_message(self.ScrollXChanged(new))

    def render_line(self, y: int) -> Strip:
        layout = self._layout
        if layout is None:
            if y == 0:
                return Strip([Segment("  No tasks", Style(dim=True))])
            return Strip.blank(self.size.width)

        row = y + int(self.scroll_y)
        scroll_x = int(self.scroll_x)
        width = max(self.size.width + scroll_x, self.virtual_size.width)
        if row >= layout.rows:
            return Strip.blank(self.size.width)
        strip = Strip(self._row_segments(row, width))
        return strip.crop(scroll_x, scroll_x + self.size.width)

    def _row_segments(self, row: int, width: int) -> list[Segment]:
        layout = self._layout
        cw = self._char_width
        dark = _is_dark(self)

        row_bg = theme.GANTT_ROW_ALT_BG if row % 2 else theme.GANTT_ROW_BG
        base = Style(bgcolor=row_bg.resolve(dark))
        chars = [" "] * width
        styles = [base] * width

        highlight = layout.today_highlight
        if highlight is not None:
            today_style = Style(bgcolor=theme.GANTT_TODAY_BG.resolve(dark))
            first = px_to_cell(highlight.x, cw)
            last = px_to_cell(highlight.x + highlight.width, cw)
            for col in range(max(0, first), min(width, max(first + 1, last))):
                styles[col] = today_style

        thin = Style(color=theme.GANTT_TICK.resolve(dark))
        thick = Style(color=theme.GANTT_TICK_THICK.resolve(dark), bold=True)
        for col, is_thick in gridline_cells(layout.ticks, cw).items():
            if 0 <= col < width:
                chars[col] = THICK_TICK_CHAR if is_thick else TICK_CHAR
                styles[col] = styles[col] + (thick if is_thick else thin)

        for bar in layout.bars:
            if bar_row(bar, layout) == row:
                self._draw_bar(bar, chars, styles, dark)

        return [Segment(ch, style) for ch, style in zip(chars, styles)]

    def _draw_bar(self, bar: BarGeometry, chars: list[str], styles: list[Style], dark: bool) -> None:
        cw = self._char_width
        width = len(chars)
        start, length = bar_cells(bar, cw)
        color = theme.bar_color(bar.custom_class, bar.invalid).resolve(dark)
        bar_style = Style(color=color, bold=bar.task_id == self._selected_id)
        fill = INVALID_BAR_CHAR if bar.invalid else BAR_CHAR
        for col in range(max(0, start), min(width, start + length)):
            chars[col] = fill
            styles[col] = bar_style

        if bar.label_mode == LabelMode.HIDDEN or not bar.label:
            return
        if bar.label_mode == LabelMode.OUTSIDE:
            label_style = Style(color=theme.GANTT_LABEL_OUTSIDE.resolve(dark))
            first = px_to_cell(bar.label_x, cw)
        else:
            label_style = Style(color=theme.GANTT_LABEL.resolve(dark), bgcolor=color, bold=True)
            first = px_to_cell(bar.label_x, cw) - cell_len(bar.label) // 2
        for i, ch in enumerate(bar.label):
            col = first + i
            if 0 <= col < width:
                chars[col] = ch
                styles[col] = label_style


class TimelineChart(Container):
    """Header plus scrollable rows for a TimelineLayout engine."""

    DEFAULT_CSS = """
    TimelineChart {
        width: 1fr;
        height: 1fr;
    }
    TimelineChart #timeline-header {
        height: 2;
    }
    TimelineChart #timeline-view {
        height: 1fr;
    }
    """

    class LabelsPlaced(Message):
        """Emitted when the label pass for a layout has been applied."""

        def __init__(self, layout: Layout) -> None:
            super().__init__()
            self.layout = layout

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._engine: TimelineLayout | None = None
        self._layout: Layout | None = None
        self.selected_id: str | None = None

    @property
    def layout(self) -> Layout | None:
        return self._layout

    def compose(self) -> ComposeResult:
        yield TimelineHeader(id="timeline-header")
        yield TimelineView(id="timeline-view")

    def show(self, engine: TimelineLayout) -> None:
        """Draw the engine's current layout, then place labels after this refresh."""
        self._engine = engine
        layout = engine.layout
        if layout is None:
            return
        self._layout = layout
        self._push_to_view()
        self.call_after_refresh(self._place_labels, layout)

    def _place_labels(self, layout: Layout) -> None:
        if self._engine is None:
            return
        char_width = self._engine.options.char_width
        final = self._engine.finalize_labels(
            layout, lambda text: cell_len(text) * char_width
        )
        if final is None:
            return  # superseded by a newer render
        self._layout = final
        self._push_to_view()
        self.post_message(self.LabelsPlaced(final))

    def select(self, task_id: str | None) -> None:
        self.selected_id = task_id
        self._push_to_view()

    def scroll_to_first_task(self) -> None:
        if self._layout is None or self._engine is None:
            return
        view = self.query_one("#timeline-view", TimelineView)
        cells = px_to_cell(max(0.0, self._layout.scroll_x), self._engine.options.char_width)
        view.scroll_to(x=cells, animate=False)

    def on_timeline_view_scroll_x_changed(self, event: TimelineView.ScrollXChanged) -> None:
        header = self.query_one("#timeline-header", TimelineHeader)
        header.scroll_x_offset = int(event.scroll_x)
        header.refresh()

    def _push_to_view(self) -> None:
        if self._layout is None or self._engine is None:
            return
        char_width = self._engine.options.char_width
        view = self.query_one("#timeline-view", TimelineView)
        header = self.query_one("#timeline-header", TimelineHeader)
        view.update_view(self._layout, char_width, self.selected_id)
        header.update_header(self._layout, char_width)

"""Main Textual App for TUI Gantt."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from rich.text import Text

from tui_gantt import theme
from tui_gantt.errors import EmptyTaskListError, TaskFileError
from tui_gantt.layout import TimelineLayout, task_date_label
from tui_gantt.loader import load_tasks
from tui_gantt.models import GanttOptions
from tui_gantt.view_modes import VIEW_MODES, ViewMode
from tui_gantt.widgets.timeline_chart import GanttToolbar, TimelineChart

LOGGER = logging.getLogger(__name__)

COLUMN_WIDTH_STEP = 1.25
MIN_COLUMN_WIDTH = 10


class GanttApp(App):
    """TUI Gantt Application."""

    TITLE = "TUI Gantt"
    CSS = """
    #chart {
        height: 1fr;
        border: round $surface-lighten-2;
        border-title-align: left;
    }
    #status-bar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("1", "view_mode('eighth-day')", show=False),
        Binding("2", "view_mode('sixth-day')", show=False),
        Binding("3", "view_mode('quarter-day')", show=False),
        Binding("4", "view_mode('half-day')", show=False),
        Binding("5", "view_mode('day')", show=False),
        Binding("6", "view_mode('week')", show=False),
        Binding("7", "view_mode('month')", show=False),
        Binding("8", "view_mode('year')", show=False),
        Binding("left_square_bracket", "prev_view", "Prev View"),
        Binding("right_square_bracket", "next_view", "Next View"),
        Binding("plus", "wider", "Wider"),
        Binding("minus", "narrower", "Narrower"),
        Binding("j", "next_task", show=False),
        Binding("k", "prev_task", show=False),
        Binding("t", "first_task", "First Task"),
        Binding("r", "reload", "Reload"),
    ]

    def __init__(
        self,
        tasks_path: Path,
        options: GanttOptions | None = None,
        project_dir: Path | None = None,
        today: datetime | None = None,
    ) -> None:
        super().__init__()
        self.tasks_path = tasks_path
        self.options = options or GanttOptions()
        self.project_dir = project_dir
        self._today = today
        self.engine: TimelineLayout | None = None
        self.load_warnings: list[str] = []
        self.status_line: str = ""
        theme.load_theme(project_dir)

    def compose(self) -> ComposeResult:
        yield Header()
        yield GanttToolbar(id="toolbar")
        yield TimelineChart(id="chart")
        yield Static("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#chart", TimelineChart).border_title = self.tasks_path.name
        self._load()

    # ── Loading ───────────────────────────────────────────────────

    def _load(self) -> None:
        try:
            task_file = load_tasks(self.tasks_path)
        except TaskFileError as e:
            self.engine = None
            self._set_status(str(e))
            return
        self.load_warnings = [str(w) for w in task_file.warnings]

        try:
            if self.engine is not None:
                self.engine.refresh(task_file.records)
                return
            engine = TimelineLayout(task_file.records, self.options, today=self._today)
        except EmptyTaskListError:
            self.engine = None
            self._set_status(f"No tasks in {self.tasks_path.name}")
            return
        engine.add_listener(self._on_view_change)
        self.engine = engine
        self._on_view_change(engine.view_mode)

    def _on_view_change(self, mode: ViewMode) -> None:
        if self.engine is None:
            return
        self.query_one("#toolbar", GanttToolbar).update_toolbar(mode)
        self.query_one("#chart", TimelineChart).show(self.engine)
        self._set_status()

    # ── Status bar ────────────────────────────────────────────────

    def _set_status(self, message: str = "") -> None:
        self.status_line = message or self._status_summary()
        style = ""
        if message or self.load_warnings:
            style = theme.STATUSBAR_WARNING.resolve(self.current_theme.dark)
        self.query_one("#status-bar", Static).update(Text(self.status_line, style=style))

    def _status_summary(self) -> str:
        engine = self.engine
        if engine is None:
            return ""
        invalid = sum(1 for t in engine.tasks if t.invalid)
        parts = [
            f"{engine.view_mode.value}",
            f"col {engine.options.column_width()}px",
            f"{len(engine.tasks)} tasks",
        ]
        if invalid:
            parts.append(f"{invalid} invalid")
        if self.load_warnings:
            parts.append(f"{len(self.load_warnings)} warnings")
        selected = self.query_one("#chart", TimelineChart).selected_id
        task = engine.get_task(selected) if selected else None
        if task is not None:
            parts.append(f"{task.name}: {task_date_label(task, engine.options.language)}")
        return " │ ".join(parts)

    # ── Actions ───────────────────────────────────────────────────

    def action_view_mode(self, mode: str) -> None:
        if self.engine is not None:
            self.engine.change_view_mode(ViewMode.parse(mode))

    def _step_view(self, delta: int) -> None:
        if self.engine is None:
            return
        index = VIEW_MODES.index(self.engine.view_mode)
        self.engine.change_view_mode(VIEW_MODES[(index + delta) % len(VIEW_MODES)])

    def action_prev_view(self) -> None:
        self._step_view(-1)

    def action_next_view(self) -> None:
        self._step_view(1)

    def action_wider(self) -> None:
        if self.engine is not None:
            width = self.engine.options.column_width()
            self.engine.change_column_width(max(width + 1, int(width * COLUMN_WIDTH_STEP)))

    def action_narrower(self) -> None:
        if self.engine is not None:
            width = self.engine.options.column_width()
            self.engine.change_column_width(max(MIN_COLUMN_WIDTH, int(width / COLUMN_WIDTH_STEP)))

    def _interactive_ids(self) -> list[str]:
        if self.engine is None:
            return []
        tasks = sorted(
            (t for t in self.engine.tasks if not t.invalid),
            key=lambda t: (t.row_index, t.start),
        )
        return [t.id for t in tasks]

    def _step_task(self, delta: int) -> None:
        ids = self._interactive_ids()
        if not ids:
            return
        chart = self.query_one("#chart", TimelineChart)
        if chart.selected_id in ids:
            index = (ids.index(chart.selected_id) + delta) % len(ids)
        else:
            index = 0 if delta > 0 else len(ids) - 1
        chart.select(ids[index])
        self._set_status()

    def action_next_task(self) -> None:
        self._step_task(1)

    def action_prev_task(self) -> None:
        self._step_task(-1)

    def action_first_task(self) -> None:
        self.query_one("#chart", TimelineChart).scroll_to_first_task()

    def action_reload(self) -> None:
        self._load()

    def on_gantt_toolbar_view_mode_changed(self, event: GanttToolbar.ViewModeChanged) -> None:
        if self.engine is not None:
            self.engine.change_view_mode(event.mode)

    def on_timeline_chart_labels_placed(self, event: TimelineChart.LabelsPlaced) -> None:
        LOGGER.debug("Labels placed for layout %d", event.layout.generation)

"""Tests for the timeline chart widget and the app."""

from datetime import datetime

import pytest

from tui_gantt.app import GanttApp
from tui_gantt.layout import TimelineLayout
from tui_gantt.models import BarGeometry
from tui_gantt.view_modes import ViewMode
from tui_gantt.widgets.timeline_chart import (
    GanttToolbar,
    TimelineChart,
    bar_cells,
    bar_row,
    gridline_cells,
    header_lines,
    px_to_cell,
)


PAUSE = 0.15
TODAY = datetime(2024, 1, 2)

RECORDS = [
    {"id": "a", "name": "Design", "start": "2024-01-01", "end": "2024-01-03"},
    {"id": "b", "name": "Build", "start": "2024-01-04", "end": "2024-01-10", "row_index": 1},
    {"id": "c", "name": "Loose", "row_index": 2},
]


@pytest.fixture
def tasks_file(tmp_path):
    path = tmp_path / "tasks.yaml"
    path.write_text(
        "tasks:\n"
        "  - id: a\n"
        "    name: Design\n"
        "    start: 2024-01-01\n"
        "    end: 2024-01-03\n"
        "  - id: b\n"
        "    name: Build\n"
        "    start: 2024-01-04\n"
        "    end: 2024-01-10\n"
        "    row_index: 1\n"
        "  - id: c\n"
        "    name: Loose\n"
        "    row_index: 2\n",
        encoding="utf-8",
    )
    return path


def _bar(x: float, width: float, y: float = 68) -> BarGeometry:
    return BarGeometry(
        task_id="x", x=x, y=y, width=width, height=20, corner_radius=3,
        label="", label_x=x + width / 2, label_y=y + 10,
    )


class TestCellHelpers:
    def test_px_to_cell(self):
        assert px_to_cell(0, 7) == 0
        assert px_to_cell(13.9, 7) == 1
        assert px_to_cell(14, 7) == 2

    def test_bar_cells(self):
        assert bar_cells(_bar(14, 21), 7) == (2, 3)
        assert bar_cells(_bar(14, 22), 7) == (2, 4)

    def test_zero_width_bar_still_drawn(self):
        assert bar_cells(_bar(14, 0), 7) == (2, 1)

    def test_bar_row(self):
        layout = TimelineLayout(RECORDS, today=TODAY).layout
        assert [bar_row(b, layout) for b in layout.bars] == [0, 1, 2]

    def test_gridline_cells(self):
        layout = TimelineLayout(RECORDS, today=TODAY).layout
        cells = gridline_cells(layout.ticks, 7)
        assert len(cells) == len(layout.ticks)
        # Dec 1 is the first tick and the first of a month
        assert cells[0] is True
        assert cells[px_to_cell(38, 7)] is False

    def test_header_lines(self):
        layout = TimelineLayout(RECORDS, today=TODAY).layout
        upper, lower = header_lines(layout, 7, 400)
        assert len(upper) == len(lower) == 400
        assert "December" in upper
        assert "January" in upper
        # lower labels centred in their 38px columns
        assert lower[px_to_cell(19, 7)] == "1"


@pytest.mark.asyncio
async def test_app_starts(tasks_file):
    app = GanttApp(tasks_path=tasks_file, today=TODAY)
    async with app.run_test(size=(120, 30)) as pilot:
        await pilot.pause(delay=PAUSE)
        assert app.engine is not None
        assert app.engine.view_mode == ViewMode.DAY
        chart = app.query_one("#chart", TimelineChart)
        assert chart.layout is not None
        assert chart.layout.finalized
        assert "3 tasks" in app.status_line
        assert "1 invalid" in app.status_line


@pytest.mark.asyncio
async def test_view_mode_keys(tasks_file):
    app = GanttApp(tasks_path=tasks_file, today=TODAY)
    async with app.run_test(size=(120, 30)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("6")
        await pilot.pause(delay=PAUSE)
        assert app.engine.view_mode == ViewMode.WEEK
        assert app.query_one("#toolbar", GanttToolbar).mode == ViewMode.WEEK
        chart = app.query_one("#chart", TimelineChart)
        assert chart.layout.view_mode == ViewMode.WEEK
        assert chart.layout.finalized

        await pilot.press("right_square_bracket")
        await pilot.pause(delay=PAUSE)
        assert app.engine.view_mode == ViewMode.MONTH

        await pilot.press("left_square_bracket", "left_square_bracket")
        await pilot.pause(delay=PAUSE)
        assert app.engine.view_mode == ViewMode.DAY


@pytest.mark.asyncio
async def test_column_width_keys(tasks_file):
    app = GanttApp(tasks_path=tasks_file, today=TODAY)
    async with app.run_test(size=(120, 30)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("plus")
        await pilot.pause(delay=PAUSE)
        assert app.engine.options.column_width() == 47
        await pilot.press("minus")
        await pilot.pause(delay=PAUSE)
        assert app.engine.options.column_width() == 37


@pytest.mark.asyncio
async def test_task_selection_skips_invalid(tasks_file):
    app = GanttApp(tasks_path=tasks_file, today=TODAY)
    async with app.run_test(size=(120, 30)) as pilot:
        await pilot.pause(delay=PAUSE)
        chart = app.query_one("#chart", TimelineChart)
        await pilot.press("j")
        await pilot.pause(delay=PAUSE)
        assert chart.selected_id == "a"
        assert "Design: Jan 1 - Jan 3" in app.status_line
        await pilot.press("j")
        await pilot.pause(delay=PAUSE)
        assert chart.selected_id == "b"
        await pilot.press("j")
        await pilot.pause(delay=PAUSE)
        assert chart.selected_id == "a"
        await pilot.press("k")
        await pilot.pause(delay=PAUSE)
        assert chart.selected_id == "b"


@pytest.mark.asyncio
async def test_reload_picks_up_changes(tasks_file):
    app = GanttApp(tasks_path=tasks_file, today=TODAY)
    async with app.run_test(size=(120, 30)) as pilot:
        await pilot.pause(delay=PAUSE)
        tasks_file.write_text("- id: z\n  name: Only\n  start: 2024-02-01\n  end: 2024-02-02\n", encoding="utf-8")
        await pilot.press("r")
        await pilot.pause(delay=PAUSE)
        assert [t.id for t in app.engine.tasks] == ["z"]
        assert app.query_one("#chart", TimelineChart).layout.get_bar("z") is not None


@pytest.mark.asyncio
async def test_empty_task_file(tmp_path):
    path = tmp_path / "tasks.yaml"
    path.write_text("tasks: []\n", encoding="utf-8")
    app = GanttApp(tasks_path=path, today=TODAY)
    async with app.run_test(size=(120, 30)) as pilot:
        await pilot.pause(delay=PAUSE)
        assert app.engine is None
        assert app.status_line == "No tasks in tasks.yaml"
        await pilot.press("6")
        await pilot.pause(delay=PAUSE)
        assert app.engine is None

"""Export a computed layout to JSON and CSV."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import TextIO

from tui_gantt import date_utils
from tui_gantt.models import BarGeometry, Layout, Tick


def _tick_to_dict(tick: Tick) -> dict:
    return {
        "date": date_utils.to_string(tick.date, with_time=True),
        "x": tick.x,
        "lower_text": tick.lower_text,
        "upper_text": tick.upper_text,
        "lower_x": tick.lower_x,
        "upper_x": tick.upper_x,
        "lower_y": tick.lower_y,
        "upper_y": tick.upper_y,
        "thick": tick.thick,
        "gridline": tick.gridline,
    }


def _bar_to_dict(bar: BarGeometry) -> dict:
    return {
        "task_id": bar.task_id,
        "label": bar.label,
        "x": bar.x,
        "y": bar.y,
        "width": bar.width,
        "height": bar.height,
        "corner_radius": bar.corner_radius,
        "label_x": bar.label_x,
        "label_y": bar.label_y,
        "label_mode": bar.label_mode.value,
        "invalid": bar.invalid,
        "custom_class": bar.custom_class,
    }


def layout_to_dict(layout: Layout) -> dict:
    data = {
        "view_mode": layout.view_mode.value,
        "column_width": layout.column_width,
        "step_hours": layout.step_hours,
        "range": {
            "start": date_utils.to_string(layout.chart_range.start, with_time=True),
            "end": date_utils.to_string(layout.chart_range.end, with_time=True),
        },
        "grid": {
            "width": layout.grid_width,
            "height": layout.grid_height,
            "header_height": layout.header_height,
            "rows": layout.rows,
        },
        "scroll_x": layout.scroll_x,
        "ticks": [_tick_to_dict(t) for t in layout.ticks],
        "bars": [_bar_to_dict(b) for b in layout.bars],
    }
    if layout.today_highlight is not None:
        h = layout.today_highlight
        data["today_highlight"] = {"x": h.x, "y": h.y, "width": h.width, "height": h.height}
    return data


def export_json(layout: Layout, output_path: Path) -> None:
    """Export the whole layout to a JSON file."""
    output_path.write_text(
        json.dumps(layout_to_dict(layout), indent=2, ensure_ascii=False), encoding="utf-8"
    )


BAR_CSV_HEADERS = [
    "task_id", "label", "x", "y", "width", "height", "corner_radius",
    "label_x", "label_y", "label_mode", "invalid", "custom_class",
]


def write_bars_csv(layout: Layout, f: TextIO) -> None:
    """Write bar geometry, one row per task, as CSV to an open text file."""
    writer = csv.DictWriter(f, fieldnames=BAR_CSV_HEADERS)
    writer.writeheader()
    writer.writerows(_bar_to_dict(b) for b in layout.bars)


def export_csv(layout: Layout, output_path: Path) -> None:
    """Export bar geometry to a CSV file."""
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        write_bars_csv(layout, f)

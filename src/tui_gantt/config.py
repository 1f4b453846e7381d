"""Chart options stored in .tui-gantt/config.toml, read and written with tomlkit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import tomlkit

from tui_gantt.models import GanttOptions, LabelOverflow
from tui_gantt.view_modes import ViewMode

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = ".tui-gantt"
CONFIG_FILE = "config.toml"


def get_config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_DIR / CONFIG_FILE


def _positive_int(section: Any, key: str, default: int) -> int:
    try:
        value = int(section.get(key, default))
    except (TypeError, ValueError):
        LOGGER.warning("config: invalid %s, using %d", key, default)
        return default
    return value if value > 0 else default


def load_options(project_dir: Path) -> GanttOptions:
    """Load chart options from .tui-gantt/config.toml, falling back to defaults."""
    config_path = get_config_path(project_dir)
    options = GanttOptions()

    if not config_path.exists():
        return options

    try:
        content = config_path.read_text(encoding="utf-8")
        doc = tomlkit.parse(content)
    except Exception:
        LOGGER.warning("config: could not read %s, using defaults", config_path)
        return options

    return parse_options(doc)


def parse_options(doc: Any) -> GanttOptions:
    """Build GanttOptions from a parsed TOML document, field by field."""
    options = GanttOptions()

    # Parse [chart] section
    chart = doc.get("chart", {})
    if "view_mode" in chart:
        try:
            options.view_mode = ViewMode.parse(str(chart["view_mode"]))
        except ValueError:
            LOGGER.warning("config: unknown view_mode %r", chart["view_mode"])

    options.header_height = _positive_int(chart, "header_height", options.header_height)
    options.bar_height = _positive_int(chart, "bar_height", options.bar_height)
    options.padding = _positive_int(chart, "padding", options.padding)
    try:
        options.bar_corner_radius = max(0, int(chart.get("bar_corner_radius", options.bar_corner_radius)))
    except (TypeError, ValueError):
        LOGGER.warning("config: invalid bar_corner_radius")

    if "language" in chart:
        options.language = str(chart["language"])

    if "label_overflow" in chart:
        try:
            options.label_overflow = LabelOverflow(str(chart["label_overflow"]))
        except ValueError:
            LOGGER.warning("config: unknown label_overflow %r", chart["label_overflow"])

    try:
        char_width = float(chart.get("char_width", options.char_width))
        if char_width > 0:
            options.char_width = char_width
    except (TypeError, ValueError):
        LOGGER.warning("config: invalid char_width")

    # Parse [column_widths]
    widths = doc.get("column_widths", {})
    if isinstance(widths, dict):
        for key, value in widths.items():
            try:
                mode = ViewMode.parse(str(key))
                width = int(value)
            except (TypeError, ValueError):
                LOGGER.warning("config: ignoring column width %r = %r", key, value)
                continue
            if width > 0:
                options.column_widths[mode] = width

    return options


def save_options(project_dir: Path, options: GanttOptions) -> Path:
    """Save chart options to .tui-gantt/config.toml and return its path."""
    config_path = get_config_path(project_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()

    # [chart]
    chart_table = tomlkit.table()
    chart_table.add("view_mode", options.view_mode.value)
    chart_table.add("header_height", options.header_height)
    chart_table.add("bar_height", options.bar_height)
    chart_table.add("bar_corner_radius", options.bar_corner_radius)
    chart_table.add("padding", options.padding)
    chart_table.add("language", options.language)
    chart_table.add("label_overflow", options.label_overflow.value)
    chart_table.add("char_width", float(options.char_width))
    doc.add("chart", chart_table)

    # [column_widths]
    widths_table = tomlkit.table()
    for mode, width in options.column_widths.items():
        widths_table.add(mode.value, width)
    doc.add("column_widths", widths_table)

    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    return config_path

"""YAML-based colour system for the terminal chart.

Loads colours from default_theme.yaml and optionally merges
project-level overrides from {project_dir}/.tui-gantt/theme.yaml.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import NamedTuple

import yaml


class ColorPair(NamedTuple):
    """A pair of colours for dark and light themes."""

    dark: str
    light: str

    def resolve(self, is_dark: bool) -> str:
        return self.dark if is_dark else self.light


# ── Module-level variables (populated by _apply) ──────────────────

GANTT_HEADER: ColorPair
GANTT_UPPER_HEADER: ColorPair
GANTT_TICK: ColorPair
GANTT_TICK_THICK: ColorPair
GANTT_BAR: ColorPair
GANTT_BAR_INVALID: ColorPair
GANTT_LABEL: ColorPair
GANTT_LABEL_OUTSIDE: ColorPair
GANTT_TODAY_BG: ColorPair
GANTT_ROW_BG: ColorPair
GANTT_ROW_ALT_BG: ColorPair

CUSTOM_BARS: dict[str, ColorPair]

TOOLBAR_ACTIVE: ColorPair
STATUSBAR_WARNING: ColorPair


# ── Internal helpers ──────────────────────────────────────────────

def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return a dict (empty dict on error)."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (returns a new dict)."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _pair(d: object) -> ColorPair:
    """Convert a {dark: ..., light: ...} dict to a ColorPair."""
    if not isinstance(d, dict):
        d = {}
    return ColorPair(str(d.get("dark", "white")), str(d.get("light", "black")))


def _apply(data: dict) -> None:
    """Map parsed YAML data onto module-level constants."""
    mod = sys.modules[__name__]

    gantt = data.get("gantt", {})
    mod.GANTT_HEADER = _pair(gantt.get("header"))
    mod.GANTT_UPPER_HEADER = _pair(gantt.get("upper_header"))
    mod.GANTT_TICK = _pair(gantt.get("tick"))
    mod.GANTT_TICK_THICK = _pair(gantt.get("tick_thick"))
    mod.GANTT_BAR = _pair(gantt.get("bar"))
    mod.GANTT_BAR_INVALID = _pair(gantt.get("bar_invalid"))
    mod.GANTT_LABEL = _pair(gantt.get("label"))
    mod.GANTT_LABEL_OUTSIDE = _pair(gantt.get("label_outside"))
    mod.GANTT_TODAY_BG = _pair(gantt.get("today_bg"))
    mod.GANTT_ROW_BG = _pair(gantt.get("row_bg"))
    mod.GANTT_ROW_ALT_BG = _pair(gantt.get("row_alt_bg"))

    custom = data.get("custom", {})
    mod.CUSTOM_BARS = {
        str(name): _pair(colors) for name, colors in custom.items()
    } if isinstance(custom, dict) else {}

    ui = data.get("ui", {})
    mod.TOOLBAR_ACTIVE = _pair(ui.get("toolbar_active"))
    mod.STATUSBAR_WARNING = _pair(ui.get("statusbar_warning"))


# ── Public API ────────────────────────────────────────────────────

def bar_color(custom_class: str, invalid: bool) -> ColorPair:
    """Colour of a bar: invalid first, then its custom class, then the default."""
    if invalid:
        return GANTT_BAR_INVALID
    return CUSTOM_BARS.get(custom_class, GANTT_BAR)


def init_theme(project_dir: Path) -> Path:
    """Copy default_theme.yaml → {project_dir}/.tui-gantt/theme.yaml.

    Raises FileExistsError if the destination already exists.
    """
    dest = project_dir / ".tui-gantt" / "theme.yaml"
    if dest.exists():
        raise FileExistsError(str(dest))
    dest.parent.mkdir(parents=True, exist_ok=True)
    src = Path(__file__).parent / "default_theme.yaml"
    shutil.copy2(src, dest)
    return dest


def load_theme(project_dir: Path | None = None) -> None:
    """Load the default theme and optionally merge project overrides."""
    default_path = Path(__file__).parent / "default_theme.yaml"
    data = _load_yaml(default_path)

    if project_dir is not None:
        override_path = project_dir / ".tui-gantt" / "theme.yaml"
        if override_path.is_file():
            override = _load_yaml(override_path)
            if override:
                data = _deep_merge(data, override)

    _apply(data)


# Apply default theme on module import
load_theme()

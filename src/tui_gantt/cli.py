"""CLI entry point using Click."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from tui_gantt.view_modes import VIEW_MODES

VIEW_MODE_CHOICE = click.Choice([m.value for m in VIEW_MODES], case_sensitive=False)


def _load_options(project_dir: Path, view_mode: str | None, column_width: int | None):
    from tui_gantt.config import load_options
    from tui_gantt.view_modes import ViewMode

    options = load_options(project_dir)
    if view_mode:
        options.view_mode = ViewMode.parse(view_mode)
    if column_width is not None:
        if column_width <= 0:
            raise click.BadParameter("must be positive", param_hint="--column-width")
        options.column_widths[options.view_mode] = column_width
    return options


@click.group()
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug)")
@click.version_option(package_name="tui-gantt")
@click.pass_context
def main(ctx, verbose: int) -> None:
    """TUI Gantt - timeline charts for task lists."""
    ctx.ensure_object(dict)
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("tasks_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--view-mode", "-m", type=VIEW_MODE_CHOICE, default=None, help="Initial view mode")
def run(tasks_file: Path, view_mode: str | None) -> None:
    """Open TASKS_FILE in the terminal chart."""
    from tui_gantt.app import GanttApp

    project_dir = tasks_file.resolve().parent
    options = _load_options(project_dir, view_mode, None)
    GanttApp(tasks_path=tasks_file, options=options, project_dir=project_dir).run()


@main.command("layout")
@click.argument("tasks_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--view-mode", "-m", type=VIEW_MODE_CHOICE, default=None, help="View mode")
@click.option("--column-width", "-w", type=int, default=None, help="Column width in px")
@click.option(
    "--format", "fmt",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    show_default=True,
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
def layout_cmd(
    tasks_file: Path,
    view_mode: str | None,
    column_width: int | None,
    fmt: str,
    output: Path | None,
) -> None:
    """Compute the chart layout for TASKS_FILE and print or export it."""
    from tui_gantt.errors import EmptyTaskListError, TaskFileError
    from tui_gantt.layout import TimelineLayout
    from tui_gantt.loader import load_tasks

    options = _load_options(tasks_file.resolve().parent, view_mode, column_width)
    try:
        task_file = load_tasks(tasks_file)
        engine = TimelineLayout(task_file.records, options)
    except (TaskFileError, EmptyTaskListError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    layout = engine.finalize_labels(engine.layout)

    if fmt == "table":
        if output is not None:
            raise click.UsageError("--output needs --format json or csv")
        _print_tables(layout, engine)
        return

    from tui_gantt.export import export_csv, export_json, layout_to_dict, write_bars_csv

    if output is None:
        if fmt == "json":
            import json

            click.echo(json.dumps(layout_to_dict(layout), indent=2, ensure_ascii=False))
        else:
            import io

            buf = io.StringIO()
            write_bars_csv(layout, buf)
            click.echo(buf.getvalue(), nl=False)
        return

    if fmt == "json":
        export_json(layout, output)
    else:
        export_csv(layout, output)
    click.echo(f"Wrote {output}")


def _print_tables(layout, engine) -> None:
    from rich.console import Console
    from rich.table import Table

    from tui_gantt import date_utils

    console = Console()
    start = date_utils.to_string(layout.chart_range.start)
    end = date_utils.to_string(layout.chart_range.end)
    console.print(
        f"[bold]{layout.view_mode.value}[/bold]  {start} → {end}  "
        f"grid {layout.grid_width:g}×{layout.grid_height:g}px  "
        f"{len(layout.ticks)} ticks"
    )

    bars = Table(title="Bars")
    for column in ("task", "row", "x", "y", "width", "label", "state"):
        bars.add_column(column)
    for task, bar in zip(engine.tasks, layout.bars):
        bars.add_row(
            task.name or task.id,
            str(task.row_index),
            f"{bar.x:.1f}",
            f"{bar.y:.1f}",
            f"{bar.width:.1f}",
            bar.label_mode.value,
            "invalid" if bar.invalid else "ok",
        )
    console.print(bars)

    ticks = Table(title="Header")
    for column in ("date", "x", "upper", "lower", "tick"):
        ticks.add_column(column)
    for tick in layout.ticks:
        if not (tick.upper_text or tick.lower_text):
            continue
        ticks.add_row(
            date_utils.to_string(tick.date, with_time=True),
            f"{tick.x:.1f}",
            tick.upper_text,
            tick.lower_text,
            "thick" if tick.thick else ("" if tick.gridline else "-"),
        )
    console.print(ticks)


@main.command("init")
@click.argument("path", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--view-mode", "-m", type=VIEW_MODE_CHOICE, default="day", show_default=True)
def init_cmd(path: Path, view_mode: str) -> None:
    """Create .tui-gantt/config.toml and a sample tasks.yaml in PATH."""
    from tui_gantt import date_utils
    from tui_gantt.config import get_config_path, save_options
    from tui_gantt.loader import sample_tasks_yaml
    from tui_gantt.models import GanttOptions
    from tui_gantt.view_modes import ViewMode

    project_dir = path.resolve()
    tasks_path = project_dir / "tasks.yaml"
    if tasks_path.exists() or get_config_path(project_dir).exists():
        click.echo(f"Already initialized: {project_dir}", err=True)
        raise SystemExit(1)

    project_dir.mkdir(parents=True, exist_ok=True)
    config_path = save_options(project_dir, GanttOptions(view_mode=ViewMode.parse(view_mode)))
    click.echo(f"Created {config_path}")

    tasks_path.write_text(
        sample_tasks_yaml(date_utils.to_string(date_utils.today())), encoding="utf-8"
    )
    click.echo(f"Created {tasks_path}")
    click.echo(f"\nRun 'tui-gantt run {tasks_path}' to open the chart.")


@main.command("init-theme")
@click.argument("path", default=".", type=click.Path(file_okay=False, path_type=Path))
def init_theme_cmd(path: Path) -> None:
    """Copy the default theme to .tui-gantt/theme.yaml for customization."""
    from tui_gantt.theme import init_theme

    try:
        dest = init_theme(path.resolve())
    except FileExistsError as e:
        click.echo(f"Already exists: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Created {dest}")

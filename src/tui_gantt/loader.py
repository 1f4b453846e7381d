"""Task file loading: YAML, TOML and JSON task lists."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError as TomlParseError
import yaml

from tui_gantt.errors import TaskFileError

LOGGER = logging.getLogger(__name__)

TASK_FIELDS = ("id", "name", "start", "end", "row_index", "custom_class")
SUPPORTED_SUFFIXES = (".yaml", ".yml", ".toml", ".json")

YAML_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class TaskYamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates as strings.

    A bad date then invalidates only its own task instead of failing the load.
    """


TaskYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != YAML_TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class LoadWarning:
    """A problem with one entry of a task file."""

    file_path: str
    entry: int
    message: str

    def __str__(self) -> str:
        return f"{self.file_path}[{self.entry}]: {self.message}"


@dataclass
class TaskFile:
    """Raw task records read from a file, ready for normalization."""

    path: Path
    records: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[LoadWarning] = field(default_factory=list)


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        return yaml.load(text, Loader=TaskYamlLoader)
    if suffix == ".toml":
        return tomlkit.parse(text).unwrap()
    if suffix == ".json":
        return json.loads(text)
    raise TaskFileError(f"Unsupported task file type: {path.name}")


def _task_entries(data: Any, path: Path) -> list[Any]:
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("tasks", [])
    if not isinstance(data, list):
        raise TaskFileError(f"{path.name}: expected a list of tasks")
    return data


def load_tasks(path: Path) -> TaskFile:
    """Read task records from *path*.

    Unknown keys are dropped; entries that are not mappings are skipped with a
    warning. Raises TaskFileError when the file itself cannot be used.
    """
    path = Path(path)
    try:
        data = _read_document(path)
    except TaskFileError:
        raise
    except (OSError, ValueError, yaml.YAMLError, TomlParseError) as e:
        raise TaskFileError(f"Cannot read {path}: {e}") from e

    result = TaskFile(path=path)
    for i, entry in enumerate(_task_entries(data, path)):
        if not isinstance(entry, dict):
            result.warnings.append(LoadWarning(str(path), i, f"not a task mapping: {entry!r}"))
            continue
        record = {key: entry[key] for key in TASK_FIELDS if key in entry}
        if "name" not in record:
            result.warnings.append(LoadWarning(str(path), i, "task has no name"))
        result.records.append(record)

    for warning in result.warnings:
        LOGGER.warning("%s", warning)
    return result


def sample_tasks_yaml(start: str) -> str:
    """A small example task file starting at *start* (``YYYY-MM-DD``)."""
    return f"""\
# Task list for tui-gantt.
# Dates: YYYY-MM-DD or "YYYY-MM-DD HH:mm:ss". A bare end date covers that whole day.
tasks:
  - id: design
    name: Design
    start: {start}
    end: {start}
    row_index: 0
  - id: build
    name: Build
    start: {start} 09:00:00
    row_index: 1
  - id: review
    name: Review
    row_index: 2
    custom_class: review
"""

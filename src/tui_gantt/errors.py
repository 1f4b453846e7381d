"""Exception taxonomy for TUI Gantt."""

from __future__ import annotations


class GanttError(Exception):
    """Base class for all errors raised by tui_gantt."""


class FormatError(GanttError, ValueError):
    """A date string could not be parsed."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid date: {value!r}")
        self.value = value


class EmptyTaskListError(GanttError):
    """No tasks were supplied, so no chart range can be derived."""

    def __init__(self) -> None:
        super().__init__("Cannot lay out a chart without tasks")


class InvalidSpanError(GanttError):
    """A task spans more than ten years.

    Caught during normalization; the task is flagged invalid instead.
    """


class TaskFileError(GanttError):
    """A task file could not be read or has an unsupported format."""

"""Task normalization: raw records to validated Task values."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from tui_gantt import date_utils
from tui_gantt.date_utils import DAY, MILLISECOND, YEAR
from tui_gantt.errors import FormatError, InvalidSpanError
from tui_gantt.models import Task

LOGGER = logging.getLogger(__name__)

DEFAULT_SPAN_DAYS = 2
MAX_SPAN_YEARS = 10


def generate_id(name: str) -> str:
    """``name_<random>``; not stable across runs, supply ids where that matters."""
    return f"{name}_{uuid.uuid4().hex[:10]}"


def _parse_optional(value: Any, task_name: str, field_name: str) -> datetime | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return date_utils.parse(value)
    except FormatError:
        LOGGER.warning("Task %r: invalid %s date %r", task_name, field_name, value)
        return None


def _row_index(value: Any, task_name: str) -> int:
    if value is None or value == "":
        return 0
    try:
        index = int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Task %r: invalid row_index %r, using 0", task_name, value)
        return 0
    if index < 0:
        LOGGER.warning("Task %r: negative row_index %d, using 0", task_name, index)
        return 0
    return index


def _check_span(start: datetime, end: datetime) -> None:
    years = date_utils.diff(end, start, YEAR)
    if years > MAX_SPAN_YEARS:
        raise InvalidSpanError(f"span of {years} years exceeds {MAX_SPAN_YEARS}")


def _through_end_of_day(d: datetime) -> datetime:
    """A bare date as the end means the whole of that day."""
    if d != date_utils.start_of(d, DAY):
        return d
    return date_utils.add(date_utils.add(d, 1, DAY), -1, MILLISECOND)


def normalize_task(record: Mapping[str, Any], today: datetime | None = None) -> Task:
    """Build a Task from a raw record, defaulting and flagging bad dates.

    Never raises for bad dates: the task comes back with ``invalid=True``.
    """
    name = str(record.get("name") or "")
    start = _parse_optional(record.get("start"), name, "start")
    end = _parse_optional(record.get("end"), name, "end")
    invalid = start is None or end is None

    if start is not None and end is not None:
        try:
            _check_span(start, end)
        except InvalidSpanError as e:
            LOGGER.warning("Task %r: %s", name, e)
            end = None
            invalid = True

    if start is None and end is None:
        start = today or date_utils.today()
        end = date_utils.add(start, DEFAULT_SPAN_DAYS, DAY)
    elif start is None:
        start = date_utils.add(end, -DEFAULT_SPAN_DAYS, DAY)
    elif end is None:
        end = date_utils.add(start, DEFAULT_SPAN_DAYS, DAY)

    end = _through_end_of_day(end)
    if end <= start:
        LOGGER.warning("Task %r ends before it starts", name)
        end = _through_end_of_day(date_utils.add(start, DEFAULT_SPAN_DAYS, DAY))
        invalid = True

    task_id = record.get("id")
    return Task(
        id=str(task_id) if task_id else generate_id(name),
        name=name,
        start=start,
        end=end,
        row_index=_row_index(record.get("row_index"), name),
        invalid=invalid,
        custom_class=str(record.get("custom_class") or ""),
    )


def normalize_tasks(
    records: Iterable[Mapping[str, Any]], today: datetime | None = None
) -> list[Task]:
    """Normalize every record; an empty input gives an empty list."""
    today = today or date_utils.today()
    tasks = [normalize_task(record, today) for record in records]
    invalid = sum(1 for t in tasks if t.invalid)
    if invalid:
        LOGGER.info("%d of %d tasks are invalid", invalid, len(tasks))
    return tasks


def row_count(tasks: Iterable[Task]) -> int:
    """``max(row_index) + 1``; gaps in row indices become blank rows."""
    return max((t.row_index for t in tasks), default=0) + 1

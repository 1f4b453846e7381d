"""Tests for task normalization."""

import logging
from datetime import datetime

from tui_gantt import date_utils
from tui_gantt.tasks import generate_id, normalize_task, normalize_tasks, row_count


TODAY = datetime(2024, 6, 10)
END_OF_DAY = (23, 59, 59, 999000)


def _time(d: datetime) -> tuple:
    return (d.hour, d.minute, d.second, d.microsecond)


class TestDefaults:
    def test_both_dates_missing(self):
        task = normalize_task({"name": "Loose"}, TODAY)
        assert task.invalid
        assert task.start == TODAY
        assert task.end == datetime(2024, 6, 12, 23, 59, 59, 999000)

    def test_start_only(self):
        task = normalize_task({"name": "A", "start": "2024-01-01"}, TODAY)
        assert task.invalid
        assert task.start == datetime(2024, 1, 1)
        assert task.end.date() == datetime(2024, 1, 3).date()
        assert _time(task.end) == END_OF_DAY

    def test_end_only(self):
        task = normalize_task({"name": "A", "end": "2024-01-10 12:00"}, TODAY)
        assert task.invalid
        assert task.start == datetime(2024, 1, 8, 12)
        assert task.end == datetime(2024, 1, 10, 12)

    def test_unparseable_date_is_missing(self, caplog):
        with caplog.at_level(logging.WARNING):
            task = normalize_task({"name": "A", "start": "soon", "end": "2024-01-10"}, TODAY)
        assert task.invalid
        assert task.start == datetime(2024, 1, 8)
        assert "invalid start date" in caplog.text

    def test_empty_string_is_missing(self):
        task = normalize_task({"name": "A", "start": "", "end": "2024-01-10"}, TODAY)
        assert task.invalid


class TestEndOfDay:
    def test_bare_end_date_covers_whole_day(self):
        task = normalize_task({"name": "A", "start": "2024-01-01", "end": "2024-01-03"}, TODAY)
        assert not task.invalid
        assert task.end == datetime(2024, 1, 3, 23, 59, 59, 999000)

    def test_single_day_task_is_valid(self):
        task = normalize_task({"name": "A", "start": "2024-01-01", "end": "2024-01-01"}, TODAY)
        assert not task.invalid
        assert task.end > task.start

    def test_end_with_time_unchanged(self):
        task = normalize_task({"name": "A", "start": "2024-01-01", "end": "2024-01-03 12:00"}, TODAY)
        assert task.end == datetime(2024, 1, 3, 12)


class TestInvalidSpans:
    def test_end_before_start(self):
        task = normalize_task({"name": "A", "start": "2024-01-05", "end": "2024-01-01 10:00"}, TODAY)
        assert task.invalid
        assert task.end > task.start
        assert task.end == datetime(2024, 1, 7, 23, 59, 59, 999000)

    def test_span_over_ten_years(self):
        task = normalize_task({"name": "A", "start": "2000-01-01", "end": "2015-01-01"}, TODAY)
        assert task.invalid
        assert task.end == datetime(2000, 1, 3, 23, 59, 59, 999000)

    def test_span_of_ten_years_is_allowed(self):
        task = normalize_task({"name": "A", "start": "2000-01-01", "end": "2009-12-01"}, TODAY)
        assert not task.invalid


class TestFields:
    def test_supplied_id_kept(self):
        assert normalize_task({"id": "t1", "name": "A"}, TODAY).id == "t1"

    def test_generated_id(self):
        task = normalize_task({"name": "Design"}, TODAY)
        assert task.id.startswith("Design_")
        assert len(task.id) == len("Design_") + 10

    def test_generated_ids_differ(self):
        assert generate_id("A") != generate_id("A")

    def test_row_index(self):
        assert normalize_task({"name": "A"}, TODAY).row_index == 0
        assert normalize_task({"name": "A", "row_index": "3"}, TODAY).row_index == 3
        assert normalize_task({"name": "A", "row_index": -1}, TODAY).row_index == 0
        assert normalize_task({"name": "A", "row_index": "x"}, TODAY).row_index == 0

    def test_custom_class(self):
        task = normalize_task({"name": "A", "custom_class": "critical"}, TODAY)
        assert task.custom_class == "critical"
        assert normalize_task({"name": "A"}, TODAY).custom_class == ""

    def test_native_dates(self):
        task = normalize_task(
            {"name": "A", "start": datetime(2024, 1, 1, 8), "end": datetime(2024, 1, 2, 8)}, TODAY
        )
        assert not task.invalid
        assert task.start == datetime(2024, 1, 1, 8)


class TestNormalizeTasks:
    def test_every_span_is_positive(self):
        records = [
            {"name": "a"},
            {"name": "b", "start": "2024-01-01"},
            {"name": "c", "end": "2024-01-01"},
            {"name": "d", "start": "2024-01-05", "end": "2024-01-01"},
            {"name": "e", "start": "2024-01-01", "end": "2024-01-01"},
            {"name": "f", "start": "1990-01-01", "end": "2024-01-01"},
        ]
        for task in normalize_tasks(records, TODAY):
            assert date_utils.diff(task.end, task.start, "minute") > 0

    def test_empty(self):
        assert normalize_tasks([], TODAY) == []

    def test_row_count(self):
        tasks = normalize_tasks([{"name": "a"}, {"name": "b", "row_index": 3}], TODAY)
        assert row_count(tasks) == 4

    def test_row_count_empty(self):
        assert row_count([]) == 1

"""Tests for src.core.normalizer — the defaulting table and id assignment."""

from datetime import datetime

import pytest

from src.core.normalizer import Normalizer
from src.data.models import EventKind, Modality, Priority, Task, TaskStatus


class TestTaskDefaults:
    def test_all_fields_missing(self, normalizer):
        task = normalizer.task({}, set())
        assert task.name == "Untitled task"
        assert task.start_date == "2026-03-02"
        assert task.due_date == "2026-03-02"
        assert task.criticality == 5
        assert task.priority is Priority.MEDIUM
        assert task.created_at == "2026-03-02T09:30:15"
        assert task.status is TaskStatus.PENDING
        assert task.id == "id-1"

    def test_given_values_kept(self, normalizer):
        task = normalizer.task({
            "name": "History essay", "start_date": "2026-03-03",
            "due_date": "2026-03-09", "criticality": 8, "priority": "High",
        }, set())
        assert task.name == "History essay"
        assert task.start_date == "2026-03-03"
        assert task.due_date == "2026-03-09"
        assert task.criticality == 8
        assert task.priority is Priority.HIGH

    def test_criticality_not_clamped(self, normalizer):
        assert normalizer.task({"criticality": 42}, set()).criticality == 42
        assert normalizer.task({"criticality": 0}, set()).criticality == 0
        assert normalizer.task({"criticality": 7.5}, set()).criticality == 7.5

    def test_criticality_numeric_string_parsed(self, normalizer):
        assert normalizer.task({"criticality": "9"}, set()).criticality == 9

    @pytest.mark.parametrize("bad", [None, "very", True, [], {}])
    def test_criticality_invalid_defaults(self, normalizer, bad):
        assert normalizer.task({"criticality": bad}, set()).criticality == 5

    def test_empty_and_blank_name_use_placeholder(self, normalizer):
        assert normalizer.task({"name": ""}, set()).name == "Untitled task"
        assert normalizer.task({"name": "   "}, set()).name == "Untitled task"

    def test_name_stripped(self, normalizer):
        assert normalizer.task({"name": "  Lab report "}, set()).name == "Lab report"

    def test_invalid_priority_defaults_to_medium(self, normalizer):
        assert normalizer.task({"priority": "Urgent"}, set()).priority is Priority.MEDIUM

    def test_payload_cannot_forge_id_status_or_timestamp(self, normalizer):
        task = normalizer.task({
            "id": "forged", "status": "Done", "created_at": "1999-01-01T00:00:00",
        }, set())
        assert task.id != "forged"
        assert task.status is TaskStatus.PENDING
        assert task.created_at == "2026-03-02T09:30:15"

    def test_bare_string_item_is_the_name(self, normalizer):
        assert normalizer.task("Read chapter 3", set()).name == "Read chapter 3"

    def test_non_object_item_uses_defaults(self, normalizer):
        assert normalizer.task(17, set()).name == "Untitled task"


class TestScheduleEventDefaults:
    def test_all_fields_missing(self, normalizer):
        event = normalizer.schedule_event({}, set())
        assert event.day == "Monday"
        assert event.start_time == "09:30"
        assert event.end_time == "09:30"
        assert event.activity == "Untitled activity"
        assert event.kind is EventKind.CLASS
        assert event.modality is None

    def test_given_values_kept(self, normalizer):
        event = normalizer.schedule_event({
            "day": "Tuesday", "start_time": "14:00", "end_time": "16:00",
            "activity": "Biology lab", "kind": "study", "modality": "Hybrid",
        }, set())
        assert event.day == "Tuesday"
        assert event.activity == "Biology lab"
        assert event.kind is EventKind.STUDY
        assert event.modality is Modality.HYBRID

    def test_invalid_modality_dropped(self, normalizer):
        assert normalizer.schedule_event({"modality": "Remote"}, set()).modality is None


class TestNoteAndHobby:
    def test_note(self, normalizer):
        note = normalizer.note("Pay rent", set())
        assert note.content == "Pay rent"
        assert note.created_at == "2026-03-02T09:30:15"

    def test_note_missing_text(self, normalizer):
        assert normalizer.note("", set()).content == "Untitled note"
        assert normalizer.note(None, set()).content == "Untitled note"

    def test_hobby(self, normalizer):
        hobby = normalizer.hobby("Football", set())
        assert hobby.name == "Football"
        assert hobby.completed is False

    def test_hobby_missing_text(self, normalizer):
        assert normalizer.hobby({"name": "x"}, set()).name == "Untitled hobby"


class TestClockReads:
    @staticmethod
    def _midnight_clock():
        ticks = iter([datetime(2026, 3, 1, 23, 59, 59), datetime(2026, 3, 2, 0, 0, 1)])
        return lambda: next(ticks)

    def test_task_dates_from_one_instant(self):
        norm = Normalizer(clock=self._midnight_clock())
        task = norm.task({}, set())
        assert task.start_date == task.due_date == "2026-03-01"
        assert task.created_at == "2026-03-01T23:59:59"

    def test_event_day_and_times_from_one_instant(self):
        norm = Normalizer(clock=self._midnight_clock())
        event = norm.schedule_event({}, set())
        assert (event.day, event.start_time, event.end_time) == ("Sunday", "23:59", "23:59")

    def test_each_item_reads_the_clock(self):
        norm = Normalizer(clock=self._midnight_clock())
        first, second = norm.tasks([{}, {}], [])
        assert first.due_date == "2026-03-01"
        assert second.due_date == "2026-03-02"


class TestIdentifiers:
    def test_ids_unique_within_batch_and_against_existing(self):
        ids = iter(["a", "a", "b", "c"])
        norm = Normalizer(id_factory=lambda: next(ids))
        existing = [Task(id="b", name="x", start_date="", due_date="")]
        tasks = norm.tasks([{}, {}], existing)
        assert [t.id for t in tasks] == ["a", "c"]

    def test_default_ids_are_uuids(self):
        norm = Normalizer()
        first = norm.note("x", set())
        second = norm.note("y", set())
        assert len(first.id) == 36
        assert first.id != second.id

    def test_batch_preserves_order(self, normalizer):
        notes = normalizer.notes(["first", "second", "third"], [])
        assert [n.content for n in notes] == ["first", "second", "third"]

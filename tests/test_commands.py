"""Tests for src.core.commands — raw command validation."""

import pytest

from src.core.commands import (
    COMMAND_TYPES,
    AddHobbies,
    AddNotes,
    AddScheduleEvents,
    AddTasks,
    RemoveScheduleEvents,
    RemoveTasks,
    command_name,
    parse_command,
)


class TestParseCommand:
    def test_add_tasks(self):
        cmd = parse_command({"name": "add_tasks", "args": {"items": [{"name": "Essay"}]}})
        assert isinstance(cmd, AddTasks)
        assert cmd.kind == "add_tasks"
        assert cmd.items == [{"name": "Essay"}]

    def test_remove_schedule_events(self):
        cmd = parse_command({
            "name": "remove_schedule_events",
            "args": {"criteria": [{"day": "Monday", "activity": "Algebra"}]},
        })
        assert isinstance(cmd, RemoveScheduleEvents)
        assert cmd.criteria == [{"day": "Monday", "activity": "Algebra"}]

    def test_items_of_any_shape_accepted(self):
        cmd = parse_command({"name": "add_notes", "args": {"items": ["a", 3, None, {"x": 1}]}})
        assert isinstance(cmd, AddNotes)
        assert len(cmd.items) == 4

    def test_empty_items_is_valid(self):
        assert isinstance(parse_command({"name": "add_hobbies", "args": {"items": []}}), AddHobbies)

    def test_every_kind_registered(self):
        assert set(COMMAND_TYPES) == {
            "add_tasks", "remove_tasks",
            "add_schedule_events", "remove_schedule_events",
            "add_notes", "remove_notes",
            "add_hobbies", "remove_hobbies",
        }

    def test_payload_cannot_change_kind(self):
        cmd = parse_command({"name": "remove_tasks", "args": {"criteria": ["x"], "kind": "add_tasks"}})
        assert isinstance(cmd, RemoveTasks)
        assert cmd.kind == "remove_tasks"

    def test_extra_args_ignored(self):
        cmd = parse_command({"name": "add_schedule_events", "args": {"items": [], "note": "hi"}})
        assert isinstance(cmd, AddScheduleEvents)


class TestRejectedCommands:
    def test_unknown_name(self):
        assert parse_command({"name": "delete_everything", "args": {}}) is None

    def test_missing_name(self):
        assert parse_command({"args": {"items": []}}) is None

    @pytest.mark.parametrize("raw", [None, "add_tasks", 42, ["add_tasks"]])
    def test_non_object(self, raw):
        assert parse_command(raw) is None

    def test_missing_required_list(self):
        assert parse_command({"name": "add_tasks", "args": {}}) is None
        assert parse_command({"name": "remove_notes"}) is None

    def test_null_args_treated_as_empty(self):
        assert parse_command({"name": "add_notes", "args": None}) is None

    def test_list_field_wrong_type(self):
        assert parse_command({"name": "add_tasks", "args": {"items": "Essay"}}) is None
        assert parse_command({"name": "remove_hobbies", "args": {"criteria": {"name": "x"}}}) is None

    def test_args_not_object(self):
        assert parse_command({"name": "add_tasks", "args": ["Essay"]}) is None


class TestCommandName:
    def test_from_dict(self):
        assert command_name({"name": "add_tasks"}) == "add_tasks"

    def test_from_model(self):
        assert command_name(AddNotes(items=[])) == "add_notes"

    def test_unknown(self):
        assert command_name("garbage") == "unknown"
        assert command_name({"name": 7}) == "unknown"

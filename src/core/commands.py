"""
Agenda Assistant — Command Vocabulary.

The closed set of commands the assistant may emit. Each raw command is a
dict {"name": <kind>, "args": {...}} as produced by the model; it is
validated into one of the typed models below, or rejected (None).

A rejected command is a no-op: the rest of the batch still runs.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Command models, one per kind
# ---------------------------------------------------------------------------
#
# Item and criterion lists are typed loosely (list[Any]): the list shape is
# the only hard requirement. Individual entries are defaulted by the
# Normalizer or filtered by the Matcher.


class AddTasks(BaseModel):
    """JSON example:
    {"name": "add_tasks", "args": {"items": [
        {"name": "History essay", "start_date": "2026-03-01",
         "due_date": "2026-03-05", "criticality": 7, "priority": "High"}
    ]}}
    """
    kind: str = "add_tasks"
    items: list[Any]


class RemoveTasks(BaseModel):
    """JSON example: {"name": "remove_tasks", "args": {"criteria": ["history"]}}"""
    kind: str = "remove_tasks"
    criteria: list[Any]


class AddScheduleEvents(BaseModel):
    """JSON example:
    {"name": "add_schedule_events", "args": {"items": [
        {"day": "Monday", "start_time": "08:00", "end_time": "10:00",
         "activity": "Algebra", "kind": "class", "modality": "In-person"}
    ]}}
    """
    kind: str = "add_schedule_events"
    items: list[Any]


class RemoveScheduleEvents(BaseModel):
    """JSON example:
    {"name": "remove_schedule_events", "args": {"criteria": [
        {"day": "Monday", "activity": "Algebra"}
    ]}}
    """
    kind: str = "remove_schedule_events"
    criteria: list[Any]


class AddNotes(BaseModel):
    """JSON example: {"name": "add_notes", "args": {"items": ["Pay rent on Friday"]}}"""
    kind: str = "add_notes"
    items: list[Any]


class RemoveNotes(BaseModel):
    """JSON example: {"name": "remove_notes", "args": {"criteria": ["rent"]}}"""
    kind: str = "remove_notes"
    criteria: list[Any]


class AddHobbies(BaseModel):
    """JSON example: {"name": "add_hobbies", "args": {"items": ["Football"]}}"""
    kind: str = "add_hobbies"
    items: list[Any]


class RemoveHobbies(BaseModel):
    """JSON example: {"name": "remove_hobbies", "args": {"criteria": ["foot"]}}"""
    kind: str = "remove_hobbies"
    criteria: list[Any]


Command = (
    AddTasks | RemoveTasks
    | AddScheduleEvents | RemoveScheduleEvents
    | AddNotes | RemoveNotes
    | AddHobbies | RemoveHobbies
)

COMMAND_TYPES: dict[str, type[BaseModel]] = {
    "add_tasks": AddTasks,
    "remove_tasks": RemoveTasks,
    "add_schedule_events": AddScheduleEvents,
    "remove_schedule_events": RemoveScheduleEvents,
    "add_notes": AddNotes,
    "remove_notes": RemoveNotes,
    "add_hobbies": AddHobbies,
    "remove_hobbies": RemoveHobbies,
}


# ---------------------------------------------------------------------------
# Error Handling Functions
# ---------------------------------------------------------------------------

def _handle_unknown_kind(name: Any) -> None:
    """Log commands whose name is not in the vocabulary."""
    logger.warning("Assistant emitted unknown command: '%s'", name)


def _handle_invalid_args(name: str, exc: ValidationError) -> None:
    """Log commands whose arguments failed validation."""
    logger.warning(
        "Skipping '%s' command with invalid arguments: %s",
        name, exc.errors(include_url=False),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def command_name(raw: Any) -> str:
    """Best-effort name of a raw command, for reporting."""
    if isinstance(raw, BaseModel):
        return getattr(raw, "kind", type(raw).__name__)
    if isinstance(raw, dict) and isinstance(raw.get("name"), str):
        return raw["name"]
    return "unknown"


def parse_command(raw: Any) -> Command | None:
    """Validate a single raw command into its typed model, or None if unusable.

    Never raises: unknown names, non-object args and missing or mistyped
    required arguments all yield None.
    """
    if not isinstance(raw, dict):
        logger.warning("Skipping non-object command: %r", raw)
        return None

    name = raw.get("name")
    model = COMMAND_TYPES.get(name) if isinstance(name, str) else None
    if model is None:
        _handle_unknown_kind(name)
        return None

    args = raw.get("args", {})
    if args is None:
        args = {}
    if not isinstance(args, dict):
        logger.warning("Skipping '%s' command: args is %s, not an object", name, type(args).__name__)
        return None

    # "kind" is fixed by the command name, never by the payload
    payload = {k: v for k, v in args.items() if k != "kind"}
    try:
        command = model(**payload)
    except ValidationError as exc:
        _handle_invalid_args(name, exc)
        return None

    logger.debug("Validated command %s", name)
    return command

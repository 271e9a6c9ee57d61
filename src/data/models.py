"""
Agenda Assistant — Data Models.

The planner state: tasks, weekly schedule blocks, notes and hobbies.
Entities are immutable; every change produces a new PlannerState that the
StateContainer commits.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In-Progress"
    DONE = "Done"


class EventKind(str, Enum):
    CLASS = "class"
    STUDY = "study"
    BREAK = "break"


class Modality(str, Enum):
    VIRTUAL = "Virtual"
    HYBRID = "Hybrid"
    IN_PERSON = "In-person"


# Placeholders used when an item arrives without its text field
UNTITLED_TASK = "Untitled task"
UNTITLED_ACTIVITY = "Untitled activity"
UNTITLED_NOTE = "Untitled note"
UNTITLED_HOBBY = "Untitled hobby"


def coerce_enum(enum_cls: type[Enum], value: Any, default: Enum | None) -> Enum | None:
    """Case-insensitive lookup of an enum member by value, or `default`."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted:
                return member
    return default


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Task:
    """A planned piece of work with a recommended start and a due date."""

    id: str
    name: str
    start_date: str                   # ISO date YYYY-MM-DD (recommended start)
    due_date: str                     # ISO date YYYY-MM-DD
    criticality: int | float = 5      # intended 1-10, not enforced
    priority: Priority = Priority.MEDIUM
    created_at: str = ""              # ISO date-time
    status: TaskStatus = TaskStatus.PENDING


@dataclass(frozen=True)
class ScheduleEvent:
    """A recurring weekly block, e.g. a class every Monday 08:00-10:00."""

    id: str
    day: str                          # full weekday name, e.g. "Monday"
    start_time: str                   # HH:MM
    end_time: str                     # HH:MM
    activity: str
    kind: EventKind = EventKind.CLASS
    modality: Modality | None = None


@dataclass(frozen=True)
class Note:
    id: str
    content: str
    created_at: str = ""


@dataclass(frozen=True)
class Hobby:
    id: str
    name: str
    completed: bool = False


@dataclass(frozen=True)
class PlannerState:
    """Snapshot of all four collections.

    Collections are tuples and always present; use dataclasses.replace()
    to derive a new snapshot.
    """

    tasks: tuple[Task, ...] = field(default_factory=tuple)
    schedule_events: tuple[ScheduleEvent, ...] = field(default_factory=tuple)
    notes: tuple[Note, ...] = field(default_factory=tuple)
    hobbies: tuple[Hobby, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Serialize to the persisted JSON shape (enum members become strings)."""
        return {
            "tasks": [_entity_to_dict(t) for t in self.tasks],
            "schedule_events": [_entity_to_dict(e) for e in self.schedule_events],
            "notes": [_entity_to_dict(n) for n in self.notes],
            "hobbies": [_entity_to_dict(h) for h in self.hobbies],
        }

    @classmethod
    def from_dict(cls, data: Any) -> PlannerState:
        """Defensive decode of a persisted blob.

        A missing or non-list collection becomes empty; the others are kept.
        Non-object items are skipped, missing fields get their defaults and
        duplicate ids keep only the first occurrence.
        """
        if not isinstance(data, dict):
            logger.warning("Persisted state is %s, not an object — starting empty", type(data).__name__)
            return cls()

        return cls(
            tasks=_decode_collection(data, "tasks", _task_from_dict),
            schedule_events=_decode_collection(data, "schedule_events", _event_from_dict),
            notes=_decode_collection(data, "notes", _note_from_dict),
            hobbies=_decode_collection(data, "hobbies", _hobby_from_dict),
        )


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------


def _entity_to_dict(entity: Any) -> dict:
    d = asdict(entity)
    for key, value in d.items():
        if isinstance(value, Enum):
            d[key] = value.value
    return d


def _text(raw: dict, key: str, default: str) -> str:
    value = raw.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return default


def _decode_collection(data: dict, key: str, decode_item) -> tuple:
    raw_items = data.get(key)
    if not isinstance(raw_items, list):
        if raw_items is not None:
            logger.warning("Persisted '%s' is %s, not a list — using empty", key, type(raw_items).__name__)
        return ()

    seen: set[str] = set()
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object item in '%s': %r", key, raw)
            continue
        item = decode_item(raw)
        if item.id in seen:
            logger.warning("Dropping duplicate id %s in '%s'", item.id, key)
            continue
        seen.add(item.id)
        items.append(item)
    return tuple(items)


def _decode_id(raw: dict) -> str:
    value = raw.get("id")
    if isinstance(value, str) and value:
        return value
    return str(uuid.uuid4())


def _task_from_dict(raw: dict) -> Task:
    criticality = raw.get("criticality")
    if isinstance(criticality, bool) or not isinstance(criticality, (int, float)):
        criticality = 5
    return Task(
        id=_decode_id(raw),
        name=_text(raw, "name", UNTITLED_TASK),
        start_date=_text(raw, "start_date", ""),
        due_date=_text(raw, "due_date", ""),
        criticality=criticality,
        priority=coerce_enum(Priority, raw.get("priority"), Priority.MEDIUM),
        created_at=_text(raw, "created_at", ""),
        status=coerce_enum(TaskStatus, raw.get("status"), TaskStatus.PENDING),
    )


def _event_from_dict(raw: dict) -> ScheduleEvent:
    return ScheduleEvent(
        id=_decode_id(raw),
        day=_text(raw, "day", ""),
        start_time=_text(raw, "start_time", ""),
        end_time=_text(raw, "end_time", ""),
        activity=_text(raw, "activity", UNTITLED_ACTIVITY),
        kind=coerce_enum(EventKind, raw.get("kind"), EventKind.CLASS),
        modality=coerce_enum(Modality, raw.get("modality"), None),
    )


def _note_from_dict(raw: dict) -> Note:
    return Note(
        id=_decode_id(raw),
        content=_text(raw, "content", UNTITLED_NOTE),
        created_at=_text(raw, "created_at", ""),
    )


def _hobby_from_dict(raw: dict) -> Hobby:
    return Hobby(
        id=_decode_id(raw),
        name=_text(raw, "name", UNTITLED_HOBBY),
        completed=raw.get("completed") is True,
    )

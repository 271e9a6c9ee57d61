"""
Agenda Assistant — Direct Edits.

Pure state transitions for user-initiated edits (task form, status changes,
per-item deletes, hobby toggles). Callers apply them through
StateContainer.update(), e.g.:

    container.update(lambda s: edits.set_task_status(s, task_id, TaskStatus.DONE))

Edits that target an unknown id are no-ops.
"""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any

from src.core.normalizer import Normalizer
from src.data.models import (
    EventKind,
    Hobby,
    Modality,
    Note,
    PlannerState,
    Priority,
    Task,
    TaskStatus,
    coerce_enum,
)

_TASK_FIELDS = {f.name for f in fields(Task)}
_IMMUTABLE_TASK_FIELDS = {"id", "created_at"}


def _normalizer(normalizer: Normalizer | None) -> Normalizer:
    return normalizer or Normalizer()


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def add_task(
    state: PlannerState,
    name: str,
    start_date: str,
    due_date: str,
    criticality: int = 5,
    priority: Priority | str = Priority.MEDIUM,
    normalizer: Normalizer | None = None,
) -> PlannerState:
    """Append a task from the task form. Id, created_at and status are assigned here."""
    norm = _normalizer(normalizer)
    task = norm.task(
        {
            "name": name,
            "start_date": start_date,
            "due_date": due_date,
            "criticality": criticality,
            "priority": priority.value if isinstance(priority, Priority) else priority,
        },
        {t.id for t in state.tasks},
    )
    return replace(state, tasks=state.tasks + (task,))


def update_task(state: PlannerState, task_id: str, **changes: Any) -> PlannerState:
    """Field-level update of one task.

    Raises:
        ValueError: On an unknown field, or an attempt to change id/created_at.
    """
    unknown = set(changes) - _TASK_FIELDS
    if unknown:
        raise ValueError(f"Unknown task field(s): {', '.join(sorted(unknown))}")
    frozen = set(changes) & _IMMUTABLE_TASK_FIELDS
    if frozen:
        raise ValueError(f"Task field(s) cannot be changed: {', '.join(sorted(frozen))}")

    if "status" in changes:
        status = coerce_enum(TaskStatus, changes["status"], None)
        if status is None:
            raise ValueError(f"Invalid task status: {changes['status']!r}")
        changes["status"] = status
    if "priority" in changes:
        priority = coerce_enum(Priority, changes["priority"], None)
        if priority is None:
            raise ValueError(f"Invalid task priority: {changes['priority']!r}")
        changes["priority"] = priority

    return replace(
        state,
        tasks=tuple(replace(t, **changes) if t.id == task_id else t for t in state.tasks),
    )


def set_task_status(state: PlannerState, task_id: str, status: TaskStatus | str) -> PlannerState:
    # Any status may follow any other; Done can be re-opened.
    return update_task(state, task_id, status=status)


def remove_task(state: PlannerState, task_id: str) -> PlannerState:
    return replace(state, tasks=tuple(t for t in state.tasks if t.id != task_id))


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


def add_schedule_event(
    state: PlannerState,
    day: str,
    start_time: str,
    end_time: str,
    activity: str,
    kind: EventKind | str = EventKind.CLASS,
    modality: Modality | str | None = None,
    normalizer: Normalizer | None = None,
) -> PlannerState:
    norm = _normalizer(normalizer)
    event = norm.schedule_event(
        {
            "day": day,
            "start_time": start_time,
            "end_time": end_time,
            "activity": activity,
            "kind": kind.value if isinstance(kind, EventKind) else kind,
            "modality": modality.value if isinstance(modality, Modality) else modality,
        },
        {e.id for e in state.schedule_events},
    )
    return replace(state, schedule_events=state.schedule_events + (event,))


def remove_schedule_event(state: PlannerState, event_id: str) -> PlannerState:
    return replace(
        state,
        schedule_events=tuple(e for e in state.schedule_events if e.id != event_id),
    )


def clear_schedule(state: PlannerState) -> PlannerState:
    return replace(state, schedule_events=())


# ---------------------------------------------------------------------------
# Notes & hobbies
# ---------------------------------------------------------------------------


def add_note(state: PlannerState, content: str, normalizer: Normalizer | None = None) -> PlannerState:
    note: Note = _normalizer(normalizer).note(content, {n.id for n in state.notes})
    return replace(state, notes=state.notes + (note,))


def remove_note(state: PlannerState, note_id: str) -> PlannerState:
    return replace(state, notes=tuple(n for n in state.notes if n.id != note_id))


def add_hobby(state: PlannerState, name: str, normalizer: Normalizer | None = None) -> PlannerState:
    hobby: Hobby = _normalizer(normalizer).hobby(name, {h.id for h in state.hobbies})
    return replace(state, hobbies=state.hobbies + (hobby,))


def toggle_hobby(state: PlannerState, hobby_id: str) -> PlannerState:
    return replace(
        state,
        hobbies=tuple(
            replace(h, completed=not h.completed) if h.id == hobby_id else h
            for h in state.hobbies
        ),
    )


def remove_hobby(state: PlannerState, hobby_id: str) -> PlannerState:
    return replace(state, hobbies=tuple(h for h in state.hobbies if h.id != hobby_id))


def reset_state(state: PlannerState | None = None) -> PlannerState:
    """Drop everything. Takes (and ignores) the prior state so it can be passed to update()."""
    return PlannerState()

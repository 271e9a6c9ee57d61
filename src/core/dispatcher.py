"""
Agenda Assistant — Command Dispatcher.

Applies a batch of assistant commands, in order, to a StateContainer.

apply_command() is a pure reducer: (state, command) -> new state, touching
only the one collection the command targets. dispatch() folds a batch
through StateContainer.update(), so each command starts from the most
recently committed state (including user edits that landed while the
model call was in flight), and command i+1 sees the effect of command i.

Malformed or unknown commands are skipped; their siblings still run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Iterable

from pydantic import BaseModel

from src.core.commands import (
    AddHobbies,
    AddNotes,
    AddScheduleEvents,
    AddTasks,
    Command,
    RemoveHobbies,
    RemoveNotes,
    RemoveScheduleEvents,
    RemoveTasks,
    command_name,
    parse_command,
)
from src.core.matcher import partition_by_fragment, partition_events
from src.core.normalizer import Normalizer
from src.data.models import PlannerState

if TYPE_CHECKING:
    from src.core.state_container import StateContainer

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one command within a batch."""
    kind: str            # command name, e.g. "add_tasks"
    applied: bool        # False when the command was skipped as malformed/unknown
    added: int = 0
    removed: int = 0
    collection: str = ""  # "tasks" | "schedule_events" | "notes" | "hobbies"


# ---------------------------------------------------------------------------
# Pure reducer
# ---------------------------------------------------------------------------


def apply_command(
    state: PlannerState, command: Command, normalizer: Normalizer | None = None,
) -> PlannerState:
    """Return the state that results from applying one validated command."""
    normalizer = normalizer or Normalizer()

    if isinstance(command, AddTasks):
        new = normalizer.tasks(command.items, state.tasks)
        return replace(state, tasks=state.tasks + tuple(new))
    if isinstance(command, RemoveTasks):
        kept, _ = partition_by_fragment(state.tasks, command.criteria, lambda t: t.name)
        return replace(state, tasks=kept)

    if isinstance(command, AddScheduleEvents):
        new = normalizer.schedule_events(command.items, state.schedule_events)
        return replace(state, schedule_events=state.schedule_events + tuple(new))
    if isinstance(command, RemoveScheduleEvents):
        kept, _ = partition_events(state.schedule_events, command.criteria)
        return replace(state, schedule_events=kept)

    if isinstance(command, AddNotes):
        new = normalizer.notes(command.items, state.notes)
        return replace(state, notes=state.notes + tuple(new))
    if isinstance(command, RemoveNotes):
        kept, _ = partition_by_fragment(state.notes, command.criteria, lambda n: n.content)
        return replace(state, notes=kept)

    if isinstance(command, AddHobbies):
        new = normalizer.hobbies(command.items, state.hobbies)
        return replace(state, hobbies=state.hobbies + tuple(new))
    if isinstance(command, RemoveHobbies):
        kept, _ = partition_by_fragment(state.hobbies, command.criteria, lambda h: h.name)
        return replace(state, hobbies=kept)

    logger.warning("No reducer for command type %s", type(command).__name__)
    return state


_TARGETS = {
    "add_tasks": "tasks",
    "remove_tasks": "tasks",
    "add_schedule_events": "schedule_events",
    "remove_schedule_events": "schedule_events",
    "add_notes": "notes",
    "remove_notes": "notes",
    "add_hobbies": "hobbies",
    "remove_hobbies": "hobbies",
}


def _describe(kind: str, before: PlannerState, after: PlannerState) -> CommandResult:
    """Count added/removed entities in the collection the command targets."""
    target = _TARGETS.get(kind)
    if target is None:
        return CommandResult(kind=kind, applied=True)
    old_ids = {e.id for e in getattr(before, target)}
    new_ids = {e.id for e in getattr(after, target)}
    return CommandResult(
        kind=kind,
        applied=True,
        added=len(new_ids - old_ids),
        removed=len(old_ids - new_ids),
        collection=target,
    )


# ---------------------------------------------------------------------------
# Batch dispatch
# ---------------------------------------------------------------------------


def dispatch(
    container: StateContainer,
    calls: Iterable[Any],
    normalizer: Normalizer | None = None,
) -> list[CommandResult]:
    """Validate and apply each call in order through the container.

    Args:
        container: Owner of the state to mutate.
        calls: Raw command dicts ({"name", "args"}) or already-validated
            command models, in the order the model emitted them.
        normalizer: Defaulting/ID policy. Defaults to wall clock + uuid4.

    Returns one CommandResult per call, in order. Never raises for bad input.
    """
    normalizer = normalizer or Normalizer()
    results: list[CommandResult] = []

    for raw in calls:
        command = raw if isinstance(raw, BaseModel) else parse_command(raw)
        if command is None:
            results.append(CommandResult(kind=command_name(raw), applied=False))
            continue

        outcome: list[CommandResult] = []

        def _transition(state: PlannerState, command: Command = command) -> PlannerState:
            new_state = apply_command(state, command, normalizer)
            outcome.append(_describe(command.kind, state, new_state))
            return new_state

        container.update(_transition)
        result = outcome[0]
        logger.info(
            "Applied %s: +%d / -%d", result.kind, result.added, result.removed,
        )
        results.append(result)

    skipped = sum(1 for r in results if not r.applied)
    if skipped:
        logger.warning("Skipped %d of %d commands in batch", skipped, len(results))
    return results

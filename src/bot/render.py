"""
Agenda Assistant — Text Views.

Markdown listings of the planner collections for Telegram replies.
User-provided text is escaped; numbering is 1-based and matches the
indices accepted by /deltask, /delnote, etc.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from telegram.helpers import escape_markdown

from src.data.models import TaskStatus

if TYPE_CHECKING:
    from src.core.dispatcher import CommandResult
    from src.data.models import PlannerState

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_STATUS_ICONS = {
    TaskStatus.PENDING: "⏳",
    TaskStatus.IN_PROGRESS: "🔄",
    TaskStatus.DONE: "✅",
}

_NOUNS = {
    "tasks": ("task", "tasks"),
    "schedule_events": ("schedule block", "schedule blocks"),
    "notes": ("note", "notes"),
    "hobbies": ("hobby", "hobbies"),
}


def _md(text: str) -> str:
    return escape_markdown(text, version=1)


def render_tasks(state: PlannerState) -> str:
    if not state.tasks:
        return "No tasks yet. Use /addtask or just tell me what you need to do."
    lines = ["*Tasks:*\n"]
    for i, t in enumerate(state.tasks, start=1):
        icon = _STATUS_ICONS.get(t.status, "•")
        lines.append(
            f"`{i}` {icon} {_md(t.name)} — due {_md(t.due_date)} "
            f"(start {_md(t.start_date)}, {t.priority.value}, criticality {t.criticality})"
        )
    return "\n".join(lines)


def _weekday_order(day: str) -> int:
    try:
        return WEEKDAYS.index(day)
    except ValueError:
        return len(WEEKDAYS)


def render_schedule(state: PlannerState) -> str:
    """Schedule grouped by weekday; numbering follows stored order."""
    if not state.schedule_events:
        return "Your weekly schedule is empty."

    numbered = list(enumerate(state.schedule_events, start=1))
    numbered.sort(key=lambda pair: (_weekday_order(pair[1].day), pair[1].start_time))

    lines = ["*Weekly schedule:*"]
    current_day = None
    for i, e in numbered:
        if e.day != current_day:
            current_day = e.day
            lines.append(f"\n*{_md(e.day or '(no day)')}*")
        extra = e.kind.value
        if e.modality is not None:
            extra += f", {e.modality.value}"
        lines.append(f"`{i}` {_md(e.start_time)}-{_md(e.end_time)} {_md(e.activity)} ({extra})")
    return "\n".join(lines)


def render_notes(state: PlannerState) -> str:
    if not state.notes:
        return "No notes."
    lines = ["*Notes:*\n"]
    for i, n in enumerate(state.notes, start=1):
        lines.append(f"`{i}` {_md(n.content)}")
    return "\n".join(lines)


def render_hobbies(state: PlannerState) -> str:
    if not state.hobbies:
        return "No hobbies."
    lines = ["*Hobbies:*\n"]
    for i, h in enumerate(state.hobbies, start=1):
        mark = "☑️" if h.completed else "⬜"
        lines.append(f"`{i}` {mark} {_md(h.name)}")
    return "\n".join(lines)


def _count(n: int, collection: str) -> str:
    singular, plural = _NOUNS[collection]
    return f"{n} {singular if n == 1 else plural}"


def render_batch_summary(results: list[CommandResult]) -> str:
    """One line per applied change, e.g. '➕ 2 tasks added'. Empty if nothing changed."""
    lines = []
    for r in results:
        if not r.applied:
            continue
        collection = r.collection
        if collection not in _NOUNS:
            continue
        if r.added:
            lines.append(f"➕ {_count(r.added, collection)} added")
        if r.removed:
            lines.append(f"➖ {_count(r.removed, collection)} removed")
    return "\n".join(lines)

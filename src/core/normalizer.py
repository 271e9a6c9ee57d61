"""
Agenda Assistant — Normalizer.

Turns raw add-command items into complete entities. Every field has an
explicit default (see _defaults below); identifiers, creation timestamps and
task status are always set here and never taken from the payload.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Iterable

from src.data.models import (
    UNTITLED_ACTIVITY,
    UNTITLED_HOBBY,
    UNTITLED_NOTE,
    UNTITLED_TASK,
    EventKind,
    Hobby,
    Modality,
    Note,
    Priority,
    ScheduleEvent,
    Task,
    TaskStatus,
    coerce_enum,
)

logger = logging.getLogger(__name__)

DEFAULT_CRITICALITY = 5
DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_EVENT_KIND = EventKind.CLASS


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Normalizer:
    """Applies the defaulting table to raw items.

    Args:
        clock: Returns "now". Injected so tests can pin dates.
        id_factory: Returns a fresh identifier string.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_uuid,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Field defaults
    # ------------------------------------------------------------------

    def fresh_id(self, taken: set[str]) -> str:
        """Generate an id not present in `taken`, and reserve it."""
        new_id = self._id_factory()
        while not new_id or new_id in taken:
            new_id = self._id_factory()
        taken.add(new_id)
        return new_id

    def today(self, now: datetime | None = None) -> str:
        return (now or self._clock()).date().isoformat()

    def current_time(self, now: datetime | None = None) -> str:
        return (now or self._clock()).strftime("%H:%M")

    def timestamp(self, now: datetime | None = None) -> str:
        return (now or self._clock()).isoformat(timespec="seconds")

    def weekday(self, now: datetime | None = None) -> str:
        return (now or self._clock()).strftime("%A")

    # ------------------------------------------------------------------
    # Per-entity normalization
    # ------------------------------------------------------------------

    def task(self, raw: Any, taken: set[str]) -> Task:
        raw = _as_item(raw, "name")
        now = self._clock()
        return Task(
            id=self.fresh_id(taken),
            name=_text(raw.get("name"), UNTITLED_TASK),
            start_date=_text(raw.get("start_date"), self.today(now)),
            due_date=_text(raw.get("due_date"), self.today(now)),
            criticality=_criticality(raw.get("criticality")),
            priority=coerce_enum(Priority, raw.get("priority"), DEFAULT_PRIORITY),
            created_at=self.timestamp(now),
            status=TaskStatus.PENDING,
        )

    def schedule_event(self, raw: Any, taken: set[str]) -> ScheduleEvent:
        raw = _as_item(raw, "activity")
        now = self._clock()
        return ScheduleEvent(
            id=self.fresh_id(taken),
            day=_text(raw.get("day"), self.weekday(now)),
            start_time=_text(raw.get("start_time"), self.current_time(now)),
            end_time=_text(raw.get("end_time"), self.current_time(now)),
            activity=_text(raw.get("activity"), UNTITLED_ACTIVITY),
            kind=coerce_enum(EventKind, raw.get("kind"), DEFAULT_EVENT_KIND),
            modality=coerce_enum(Modality, raw.get("modality"), None),
        )

    def note(self, raw: Any, taken: set[str]) -> Note:
        return Note(
            id=self.fresh_id(taken),
            content=_text(raw, UNTITLED_NOTE),
            created_at=self.timestamp(),
        )

    def hobby(self, raw: Any, taken: set[str]) -> Hobby:
        return Hobby(
            id=self.fresh_id(taken),
            name=_text(raw, UNTITLED_HOBBY),
            completed=False,
        )

    # ------------------------------------------------------------------
    # Batch helpers (item order is preserved)
    # ------------------------------------------------------------------

    def tasks(self, items: Iterable[Any], existing: Iterable[Task]) -> list[Task]:
        taken = {t.id for t in existing}
        return [self.task(item, taken) for item in items]

    def schedule_events(self, items: Iterable[Any], existing: Iterable[ScheduleEvent]) -> list[ScheduleEvent]:
        taken = {e.id for e in existing}
        return [self.schedule_event(item, taken) for item in items]

    def notes(self, items: Iterable[Any], existing: Iterable[Note]) -> list[Note]:
        taken = {n.id for n in existing}
        return [self.note(item, taken) for item in items]

    def hobbies(self, items: Iterable[Any], existing: Iterable[Hobby]) -> list[Hobby]:
        taken = {h.id for h in existing}
        return [self.hobby(item, taken) for item in items]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_item(raw: Any, text_key: str) -> dict:
    """Objects pass through; a bare string becomes the item's text field."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        return {text_key: raw}
    logger.debug("Normalizing non-object item %r from defaults", raw)
    return {}


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _criticality(value: Any) -> int | float:
    """Numbers are kept as given (no clamping); numeric strings are parsed."""
    if isinstance(value, bool):
        return DEFAULT_CRITICALITY
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
        try:
            return float(value.strip())
        except ValueError:
            return DEFAULT_CRITICALITY
    return DEFAULT_CRITICALITY

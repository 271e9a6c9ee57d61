"""
Agenda Assistant — Matcher.

Resolves removal criteria against the current collections.

Fragment match (tasks, notes, hobbies): an entity matches if ANY criterion is
a case-insensitive substring of its text field, so "math" matches
"Mathematics Homework".

Paired match (schedule events): an entity matches if ANY criterion has an
exactly equal day AND an activity that is a case-insensitive substring of the
entity's activity.

Matching nothing is a valid result, not an error.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

from src.data.models import ScheduleEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")


def clean_fragments(criteria: Iterable[Any]) -> list[str]:
    """Keep usable string criteria, lowercased.

    Non-strings and blank strings are dropped: a blank fragment would be a
    substring of everything.
    """
    fragments = []
    for criterion in criteria:
        if not isinstance(criterion, str):
            logger.debug("Ignoring non-string criterion: %r", criterion)
            continue
        if not criterion.strip():
            logger.debug("Ignoring blank criterion")
            continue
        fragments.append(criterion.lower())
    return fragments


def clean_pairs(criteria: Iterable[Any]) -> list[tuple[str, str]]:
    """Keep (day, lowercased activity) pairs with both fields as non-blank strings."""
    pairs = []
    for criterion in criteria:
        if not isinstance(criterion, dict):
            logger.debug("Ignoring non-object schedule criterion: %r", criterion)
            continue
        day = criterion.get("day")
        activity = criterion.get("activity")
        if not isinstance(day, str) or not isinstance(activity, str) or not activity.strip():
            logger.debug("Ignoring incomplete schedule criterion: %r", criterion)
            continue
        pairs.append((day, activity.lower()))
    return pairs


def fragment_matches(text: str, fragments: list[str]) -> bool:
    lowered = text.lower()
    return any(fragment in lowered for fragment in fragments)


def event_matches(event: ScheduleEvent, pairs: list[tuple[str, str]]) -> bool:
    activity = event.activity.lower()
    return any(event.day == day and fragment in activity for day, fragment in pairs)


def partition_by_fragment(
    entities: Iterable[T], criteria: Iterable[Any], field: Callable[[T], str],
) -> tuple[tuple[T, ...], tuple[T, ...]]:
    """Split entities into (kept, removed) by fragment match on `field(entity)`."""
    fragments = clean_fragments(criteria)
    kept: list[T] = []
    removed: list[T] = []
    for entity in entities:
        if fragments and fragment_matches(field(entity), fragments):
            removed.append(entity)
        else:
            kept.append(entity)
    return tuple(kept), tuple(removed)


def partition_events(
    events: Iterable[ScheduleEvent], criteria: Iterable[Any],
) -> tuple[tuple[ScheduleEvent, ...], tuple[ScheduleEvent, ...]]:
    """Split schedule events into (kept, removed) by paired match."""
    pairs = clean_pairs(criteria)
    kept: list[ScheduleEvent] = []
    removed: list[ScheduleEvent] = []
    for event in events:
        if pairs and event_matches(event, pairs):
            removed.append(event)
        else:
            kept.append(event)
    return tuple(kept), tuple(removed)

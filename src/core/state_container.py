"""
Agenda Assistant — State Container.

The single owner of a user's PlannerState. Every mutation, whether from the
assistant's dispatcher or a direct user edit, goes through update(), which
reads the latest committed state, applies a pure transition and commits.

update() never suspends, so on the single event-loop thread it is atomic:
a transition can never start from a snapshot that was captured before an
await and has since gone stale.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import TYPE_CHECKING, Callable

from src.data.models import PlannerState

if TYPE_CHECKING:
    from src.data.db import StateDB

logger = logging.getLogger(__name__)

Transition = Callable[[PlannerState], PlannerState]
Listener = Callable[[PlannerState], None]


class StateContainer:
    """Holds the canonical PlannerState and its read-modify-write primitive."""

    def __init__(self, initial: PlannerState | None = None) -> None:
        self._state = initial if initial is not None else PlannerState()
        self._version = 0
        self._listeners: list[Listener] = []

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def version(self) -> int:
        """Number of commits since construction."""
        return self._version

    def subscribe(self, listener: Listener) -> None:
        """Call `listener(new_state)` after every commit."""
        self._listeners.append(listener)

    def update(self, transition: Transition) -> PlannerState:
        """Apply `transition` to the latest state and commit the result.

        Raises:
            TypeError: If the transition does not return a PlannerState.
                The committed state is left unchanged.
        """
        new_state = transition(self._state)
        if not isinstance(new_state, PlannerState):
            raise TypeError(
                f"State transition returned {type(new_state).__name__}, expected PlannerState"
            )

        self._state = new_state
        self._version += 1

        for listener in self._listeners:
            try:
                listener(new_state)
            except Exception as exc:
                logger.error("State listener failed after commit #%d: %s", self._version, exc)

        return new_state


# ---------------------------------------------------------------------------
# Per-user registry with deferred persistence
# ---------------------------------------------------------------------------


class ContainerRegistry:
    """One StateContainer per user, loaded from and saved to StateDB.

    Saves are coalesced and deferred to the next event-loop turn, so a batch
    of commands is never held up by disk writes; the latest snapshot is the
    one written.
    """

    def __init__(self, state_db: StateDB) -> None:
        self._db = state_db
        self._containers: dict[int, StateContainer] = {}
        self._pending: dict[int, PlannerState] = {}

    def get(self, user_id: int) -> StateContainer:
        container = self._containers.get(user_id)
        if container is None:
            container = StateContainer(self._db.load(user_id))
            container.subscribe(lambda state, uid=user_id: self._schedule_save(uid, state))
            self._containers[user_id] = container
            logger.info("State container created for user %d", user_id)
        return container

    def _schedule_save(self, user_id: int, state: PlannerState) -> None:
        already_scheduled = user_id in self._pending
        self._pending[user_id] = state
        if already_scheduled:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush(user_id)
            return
        loop.call_soon(self.flush, user_id)

    def flush(self, user_id: int) -> None:
        """Write the latest pending snapshot for `user_id`, if any."""
        state = self._pending.pop(user_id, None)
        if state is None:
            return
        try:
            self._db.save(user_id, state)
        except sqlite3.Error as exc:
            logger.error("Failed to persist state for user %d: %s", user_id, exc)

    def flush_all(self) -> None:
        for user_id in list(self._pending):
            self.flush(user_id)

"""
Agenda Assistant — State Database.

Persists each user's planner as a single JSON blob in SQLite, surviving bot
restarts. Loading never fails: a corrupted blob is recovered to whatever
can be salvaged (see PlannerState.from_dict), or an empty state.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from src.data.models import PlannerState

logger = logging.getLogger(__name__)


class StateDB:
    """SQLite-backed storage for per-user planner state blobs."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        # an in-memory database lives only as long as its connection
        self._memory_conn: sqlite3.Connection | None = None
        if db_path == ":memory:":
            self._memory_conn = self._open()
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _connect(self) -> sqlite3.Connection:
        # `with conn:` commits or rolls back; it never closes
        if self._memory_conn is not None:
            return self._memory_conn
        return self._open()

    def _init_db(self) -> None:
        """Create the planner_state table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS planner_state (
                    user_id    INTEGER PRIMARY KEY,
                    blob       TEXT    NOT NULL,
                    updated_at TEXT    NOT NULL
                )
            """)
        logger.debug("planner_state table initialized at %s", self._db_path)

    def load_raw(self, user_id: int) -> str | None:
        """Return the stored blob text for a user, or None if never saved."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT blob FROM planner_state WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None:
            return None
        return row["blob"]

    def load(self, user_id: int) -> PlannerState:
        """Load and defensively decode a user's state.

        Missing rows, invalid JSON and malformed collections all recover to
        empty collections instead of raising.
        """
        try:
            blob = self.load_raw(user_id)
        except sqlite3.Error as exc:
            logger.warning("Couldn't read state for user %d, starting empty: %s", user_id, exc)
            return PlannerState()

        if blob is None:
            return PlannerState()

        try:
            data = json.loads(blob)
        except json.JSONDecodeError as exc:
            logger.warning("Corrupted state blob for user %d, starting empty: %s", user_id, exc)
            return PlannerState()

        state = PlannerState.from_dict(data)
        logger.info(
            "Loaded state for user %d: %d tasks, %d schedule events, %d notes, %d hobbies",
            user_id, len(state.tasks), len(state.schedule_events),
            len(state.notes), len(state.hobbies),
        )
        return state

    def save_raw(self, user_id: int, blob: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO planner_state (user_id, blob, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    blob = excluded.blob,
                    updated_at = excluded.updated_at
                """,
                (user_id, blob, datetime.now().isoformat(timespec="seconds")),
            )

    def save(self, user_id: int, state: PlannerState) -> None:
        """Serialize and upsert a user's state."""
        self.save_raw(user_id, json.dumps(state.to_dict(), ensure_ascii=False))
        logger.debug("State saved for user %d", user_id)


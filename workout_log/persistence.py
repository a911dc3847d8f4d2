"""Saving logged sessions.

A save is two steps: upsert the session row for ``(user_id, date)`` and then
insert every set. The session must exist before its sets are written. If the
sets fail after the session was stored, the session row is left behind and
:class:`~workout_log.errors.PartialPersistenceError` is raised so the caller
keeps its queue and can retry.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from core import DEFAULT_DB_PATH, SCHEMA_PATH
from workout_log.catalog import DEFAULT_MEASUREMENT_TYPE, MeasurementType
from workout_log.errors import PartialPersistenceError, PersistenceError
from workout_log.reducer import PersistedSet, reduce_queue
from workout_log.session_queue import QueueEntry
from workout_log.validation import normalize_date

# Values stored in ``workout_sessions.mode``
MODE_TIMED = "timed"
MODE_HISTORY_ENTRY = "history_entry"

_SET_COLUMNS = (
    "session_id",
    "exercise_id",
    "set_order",
    "weight_kg",
    "reps",
    "duration_seconds",
    "distance_meters",
    "action_time_seconds",
    "rest_time_seconds",
)


@dataclass(frozen=True)
class SavedSet:
    """A stored set read back for review, with its row id and exercise."""

    id: int
    set_order: int
    exercise_id: int
    exercise_name: str
    measurement_type: MeasurementType
    weight_kg: float | None
    reps: int | None
    duration_seconds: int | None
    distance_meters: float | None
    action_time_seconds: int | None
    rest_time_seconds: int


class SessionPersistenceGateway:
    """Storage for sessions and their sets."""

    def upsert_session(
        self, user_id: str, date: str, title: str, mode: str = MODE_TIMED
    ) -> int:  # pragma: no cover - interface
        """Create or update the session for ``(user_id, date)`` and return its id."""
        raise NotImplementedError

    def insert_sets(
        self, session_id: int, sets: list[PersistedSet]
    ) -> None:  # pragma: no cover - interface
        """Store ``sets`` for ``session_id`` all at once."""
        raise NotImplementedError


def init_db(db_path: Path = DEFAULT_DB_PATH, schema_path: Path = SCHEMA_PATH) -> Path:
    """Create the tables in ``db_path`` if they don't exist yet."""

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with open(schema_path, "r", encoding="utf-8") as fh:
        schema = fh.read()
    with sqlite3.connect(str(db_path)) as conn:
        conn.executescript(schema)
    return db_path


class SQLiteSessionGateway(SessionPersistenceGateway):
    """Gateway writing to the ``workout_sessions`` and ``workout_sets`` tables."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def upsert_session(
        self, user_id: str, date: str, title: str, mode: str = MODE_TIMED
    ) -> int:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO workout_sessions (user_id, date, title, mode)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(user_id, date)
                    DO UPDATE SET title = excluded.title, mode = excluded.mode
                    """,
                    (user_id, date, title, mode),
                )
                cursor.execute(
                    "SELECT id FROM workout_sessions WHERE user_id = ? AND date = ?",
                    (user_id, date),
                )
                return cursor.fetchone()[0]
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not save session: {exc}") from exc

    def insert_sets(self, session_id: int, sets: list[PersistedSet]) -> None:
        placeholders = ", ".join("?" for _ in _SET_COLUMNS)
        rows = [tuple(getattr(s, col) for col in _SET_COLUMNS) for s in sets]
        try:
            with self._connect() as conn:
                conn.executemany(
                    f"INSERT INTO workout_sets ({', '.join(_SET_COLUMNS)}) "
                    f"VALUES ({placeholders})",
                    rows,
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not save sets: {exc}") from exc

    # --------------------------------------------------------------
    # Read back
    # --------------------------------------------------------------

    def list_sessions(self, user_id: str, limit: int | None = None) -> list[dict]:
        """Return sessions of ``user_id`` with the most recent date first."""

        with self._connect() as conn:
            cursor = conn.cursor()
            query = (
                "SELECT s.id, s.date, s.title, s.mode, COUNT(ws.id) "
                "FROM workout_sessions s "
                "LEFT JOIN workout_sets ws ON ws.session_id = s.id "
                "WHERE s.user_id = ? "
                "GROUP BY s.id ORDER BY s.date DESC"
            )
            if limit is not None:
                cursor.execute(query + " LIMIT ?", (user_id, limit))
            else:
                cursor.execute(query, (user_id,))
            rows = cursor.fetchall()
        return [
            {"id": sid, "date": date, "title": title, "mode": mode, "set_count": count}
            for sid, date, title, mode, count in rows
        ]

    def get_session_sets(self, session_id: int) -> list[PersistedSet]:
        """Return the stored sets of ``session_id`` ordered by ``set_order``."""

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {', '.join(_SET_COLUMNS)} FROM workout_sets "
                "WHERE session_id = ? ORDER BY set_order, id",
                (session_id,),
            )
            rows = cursor.fetchall()
        return [PersistedSet(*row) for row in rows]

    def get_session_detail(self, session_id: int) -> list[SavedSet]:
        """Return the sets of ``session_id`` with exercise names, in set order."""

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT ws.id, ws.set_order, ws.exercise_id, e.name, t.code,
                       ws.weight_kg, ws.reps, ws.duration_seconds,
                       ws.distance_meters, ws.action_time_seconds,
                       ws.rest_time_seconds
                  FROM workout_sets ws
                  JOIN exercises e ON e.id = ws.exercise_id
                  LEFT JOIN exercise_types t ON t.id = e.type_id
                 WHERE ws.session_id = ?
                 ORDER BY ws.set_order, ws.id
                """,
                (session_id,),
            )
            rows = cursor.fetchall()
        return [
            SavedSet(
                id=row[0],
                set_order=row[1],
                exercise_id=row[2],
                exercise_name=row[3],
                measurement_type=MeasurementType(row[4] or DEFAULT_MEASUREMENT_TYPE),
                weight_kg=row[5],
                reps=row[6],
                duration_seconds=row[7],
                distance_meters=row[8],
                action_time_seconds=row[9],
                rest_time_seconds=row[10],
            )
            for row in rows
        ]

    # --------------------------------------------------------------
    # Deletion
    # --------------------------------------------------------------

    def delete_session(self, session_id: int) -> bool:
        """Remove ``session_id`` and all of its sets.

        Returns ``False`` when no such session exists.
        """

        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM workout_sets WHERE session_id = ?", (session_id,))
                cursor = conn.execute(
                    "DELETE FROM workout_sessions WHERE id = ?", (session_id,)
                )
                deleted = cursor.rowcount > 0
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not delete session: {exc}") from exc
        if deleted:
            logging.info("Deleted session %s", session_id)
        return deleted

    def delete_set(self, set_id: int) -> bool:
        """Remove one saved set and close the gap in its session's set order.

        Returns ``False`` when no such set exists.
        """

        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT session_id, set_order FROM workout_sets WHERE id = ?",
                    (set_id,),
                )
                row = cursor.fetchone()
                if row is None:
                    return False
                session_id, set_order = row
                cursor.execute("DELETE FROM workout_sets WHERE id = ?", (set_id,))
                cursor.execute(
                    "UPDATE workout_sets SET set_order = set_order - 1 "
                    "WHERE session_id = ? AND set_order > ?",
                    (session_id, set_order),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not delete set: {exc}") from exc
        logging.info("Deleted set %s from session %s", set_id, session_id)
        return True


def save_queue(
    gateway: SessionPersistenceGateway,
    queue: Iterable[QueueEntry],
    *,
    user_id: str,
    date: str,
    title: str,
    mode: str = MODE_TIMED,
) -> int:
    """Persist ``queue`` as the session of ``user_id`` on ``date``.

    Returns the session id. Raises :class:`PersistenceError` when the session
    cannot be stored and :class:`PartialPersistenceError` when only the sets
    failed. ``date`` is normalized to ``YYYY-MM-DD`` first so the same
    day always maps to one session.
    """

    date = normalize_date(date)
    entries = list(queue)
    try:
        session_id = gateway.upsert_session(user_id, date, title, mode)
    except PersistenceError:
        logging.exception("Session upsert failed for %s on %s", user_id, date)
        raise
    except Exception as exc:
        logging.exception("Session upsert failed for %s on %s", user_id, date)
        raise PersistenceError(str(exc)) from exc

    sets = reduce_queue(entries, session_id)
    try:
        gateway.insert_sets(session_id, sets)
    except Exception as exc:
        logging.error(
            "Orphaned session %s: stored for %s on %s but its %d sets were not",
            session_id,
            user_id,
            date,
            len(sets),
        )
        raise PartialPersistenceError(str(exc), session_id) from exc
    logging.info("Saved session %s with %d sets", session_id, len(sets))
    return session_id

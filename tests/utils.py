from pathlib import Path
import sqlite3

from workout_log.errors import PersistenceError
from workout_log.persistence import SessionPersistenceGateway


class VirtualEvent:
    def __init__(self, clock, callback, interval):
        self.clock = clock
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True
        if self in self.clock.events:
            self.clock.events.remove(self)


class VirtualClock:
    """Stand-in for ``kivy.clock.Clock`` that only ticks when advanced."""

    def __init__(self):
        self.events: list[VirtualEvent] = []

    def schedule_interval(self, callback, interval):
        event = VirtualEvent(self, callback, interval)
        self.events.append(event)
        return event

    def advance(self, seconds: int) -> None:
        """Fire every scheduled interval once per elapsed second."""
        for _ in range(seconds):
            for event in list(self.events):
                event.callback(event.interval)


def create_sample_db(db_path: Path) -> None:
    """Populate ``db_path`` with one exercise of each measurement type."""
    conn = sqlite3.connect(str(db_path))
    cur = conn.cursor()

    cur.executemany(
        "INSERT INTO muscles (id, name, common_name) VALUES (?, ?, ?)",
        [
            (1, "Pectoralis Major", "Chest"),
            (2, "Rectus Abdominis", None),
            (3, "Quadriceps", "Quads"),
        ],
    )

    def type_id(code):
        return cur.execute(
            "SELECT id FROM exercise_types WHERE code = ?", (code,)
        ).fetchone()[0]

    cur.executemany(
        "INSERT INTO exercises (id, name, type_id, is_archived) VALUES (?, ?, ?, ?)",
        [
            (1, "Bench Press", type_id("weight_reps"), 0),
            (2, "Push-up", type_id("bodyweight_reps"), 0),
            (3, "Plank", type_id("duration"), 0),
            (4, "Running", type_id("distance_duration"), 0),
            (5, "Mystery Move", None, 0),
            (6, "Old Machine Fly", type_id("weight_reps"), 1),
        ],
    )

    cur.executemany(
        "INSERT INTO exercise_muscles (exercise_id, muscle_id, role) VALUES (?, ?, ?)",
        [
            (1, 1, "Primary"),
            (2, 1, "Secondary"),
            (3, 2, "Primary"),
            (4, 3, "Primary"),
        ],
    )
    conn.commit()
    conn.close()


class RecordingGateway(SessionPersistenceGateway):
    """In-memory gateway that records calls and can be told to fail."""

    def __init__(self, fail_upsert=False, fail_insert=False):
        self.fail_upsert = fail_upsert
        self.fail_insert = fail_insert
        self.sessions = {}
        self.modes = {}
        self.sets = {}
        self.calls = []

    def upsert_session(self, user_id, date, title, mode="timed"):
        self.calls.append("upsert_session")
        if self.fail_upsert:
            raise PersistenceError("session store unavailable")
        key = (user_id, date)
        if key not in self.sessions:
            self.sessions[key] = len(self.sessions) + 1
        self.modes[self.sessions[key]] = mode
        return self.sessions[key]

    def insert_sets(self, session_id, sets):
        self.calls.append("insert_sets")
        if self.fail_insert:
            raise PersistenceError("set store unavailable")
        self.sets.setdefault(session_id, []).extend(sets)

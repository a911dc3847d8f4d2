"""Workout logging logic shared by the KivyMD screens.

Nothing in this package imports Kivy at module level, so it can be used and
tested on its own.
"""

from __future__ import annotations

from workout_log.catalog import (
    ExerciseCatalog,
    ExerciseDescriptor,
    MeasurementType,
    SQLiteExerciseCatalog,
)
from workout_log.engine import LoggerState, SaveOutcome, SessionQueueEngine
from workout_log.errors import (
    PartialPersistenceError,
    PersistenceError,
    StateError,
    ValidationError,
)
from workout_log.history import HistoryLog
from workout_log.persistence import SQLiteSessionGateway, SessionPersistenceGateway
from workout_log.reducer import PersistedSet, reduce_queue
from workout_log.session_queue import RestEntry, SessionQueue, SetEntry
from workout_log.timer import IntervalTimer, TimerMode

__all__ = [
    "ExerciseCatalog",
    "ExerciseDescriptor",
    "HistoryLog",
    "IntervalTimer",
    "LoggerState",
    "MeasurementType",
    "PartialPersistenceError",
    "PersistedSet",
    "PersistenceError",
    "RestEntry",
    "SQLiteExerciseCatalog",
    "SQLiteSessionGateway",
    "SaveOutcome",
    "SessionPersistenceGateway",
    "SessionQueue",
    "SessionQueueEngine",
    "SetEntry",
    "StateError",
    "TimerMode",
    "ValidationError",
    "reduce_queue",
]

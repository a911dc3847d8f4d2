"""Exercise catalog lookups.

Exercises are defined in the backing database and are read-only while a
workout is being logged. Each exercise carries exactly one
:class:`MeasurementType` which decides the inputs a set needs.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from core import DEFAULT_DB_PATH


class MeasurementType(str, Enum):
    """How sets of an exercise are measured."""

    WEIGHT_REPS = "weight_reps"
    BODYWEIGHT_REPS = "bodyweight_reps"
    DURATION = "duration"
    DISTANCE_DURATION = "distance_duration"


# Used when an exercise has no type assigned in the database
DEFAULT_MEASUREMENT_TYPE = MeasurementType.WEIGHT_REPS

# Label used when an exercise has no primary muscle
DEFAULT_PRIMARY_MUSCLE = "Other"


@dataclass(frozen=True)
class ExerciseDescriptor:
    id: int
    name: str
    measurement_type: MeasurementType
    primary_muscle: str = DEFAULT_PRIMARY_MUSCLE


class ExerciseCatalog:
    """Read-only source of exercise definitions."""

    def list(self) -> list[ExerciseDescriptor]:  # pragma: no cover - interface
        raise NotImplementedError

    def get(self, exercise_id: int) -> ExerciseDescriptor | None:
        for exercise in self.list():
            if exercise.id == exercise_id:
                return exercise
        return None


class SQLiteExerciseCatalog(ExerciseCatalog):
    """Catalog backed by the ``exercises`` tables of ``db_path``."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)

    def list(self) -> list[ExerciseDescriptor]:
        """Return all non-archived exercises ordered by name."""

        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT e.id,
                       e.name,
                       t.code,
                       (
                           SELECT COALESCE(m.common_name, m.name)
                             FROM exercise_muscles em
                             JOIN muscles m ON m.id = em.muscle_id
                            WHERE em.exercise_id = e.id AND em.role = 'Primary'
                            ORDER BY em.id
                            LIMIT 1
                       )
                  FROM exercises e
                  LEFT JOIN exercise_types t ON t.id = e.type_id
                 WHERE e.is_archived = 0
                 ORDER BY e.name
                """
            )
            rows = cursor.fetchall()

        return [
            ExerciseDescriptor(
                id=ex_id,
                name=name,
                measurement_type=_measurement_type(code),
                primary_muscle=muscle or DEFAULT_PRIMARY_MUSCLE,
            )
            for ex_id, name, code, muscle in rows
        ]


def _measurement_type(code: str | None) -> MeasurementType:
    if not code:
        return DEFAULT_MEASUREMENT_TYPE
    return MeasurementType(code)


def search_exercises(
    exercises: list[ExerciseDescriptor], text: str
) -> list[ExerciseDescriptor]:
    """Return ``exercises`` whose name contains ``text`` (case-insensitive)."""

    needle = text.strip().lower()
    if not needle:
        return list(exercises)
    return [ex for ex in exercises if needle in ex.name.lower()]

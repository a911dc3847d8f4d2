"""Untimed entry of past workouts.

Sets are typed in after the fact, so there is no timer and no rest tracking.
Sets are stored in the order they were added.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import asdict

from core import DEFAULT_SESSION_TITLE, DEFAULT_WEIGHT_UNIT
from workout_log.auth import UserContext
from workout_log.catalog import ExerciseCatalog, ExerciseDescriptor, search_exercises
from workout_log.errors import StateError, ValidationError
from workout_log.persistence import MODE_HISTORY_ENTRY, SessionPersistenceGateway, save_queue
from workout_log.session_queue import SessionQueue, SetEntry
from workout_log.validation import RawInputSet, normalize_date, validate_set


class HistoryLog:
    def __init__(
        self,
        user: UserContext,
        catalog: ExerciseCatalog | list[ExerciseDescriptor],
        *,
        unit: str = DEFAULT_WEIGHT_UNIT,
        date: str | None = None,
        title: str = DEFAULT_SESSION_TITLE,
    ):
        self.user = user
        exercises = catalog.list() if isinstance(catalog, ExerciseCatalog) else catalog
        self.exercises = list(exercises)
        self._exercise_map = {ex.id: ex for ex in self.exercises}
        self.unit = unit
        self.date = normalize_date(date) if date else datetime.date.today().isoformat()
        self.title = title
        self.queue = SessionQueue()
        self.raw = RawInputSet()
        self.selected: ExerciseDescriptor | None = None
        self.warning = ""
        self.saving = False

    def search(self, text: str) -> list[ExerciseDescriptor]:
        return search_exercises(self.exercises, text)

    def select_exercise(self, exercise_id: int) -> ExerciseDescriptor:
        if self.saving:
            raise StateError("Cannot change exercise while saving")
        exercise = self._exercise_map.get(exercise_id)
        if exercise is None:
            raise KeyError(f"Unknown exercise {exercise_id}")
        self.selected = exercise
        self.raw.clear()
        self.warning = ""
        return exercise

    def clear_selection(self) -> None:
        self.selected = None
        self.raw.clear()
        self.warning = ""

    @property
    def can_edit(self) -> bool:
        return not self.saving

    @property
    def can_add(self) -> bool:
        if self.selected is None or self.saving:
            return False
        return validate_set(self.selected.measurement_type, self.raw, self.unit).is_complete

    @property
    def can_save(self) -> bool:
        return self.queue.has_sets() and not self.saving

    def add_set(self) -> SetEntry | None:
        """Add the typed set to the list. The input stays for quick repeats."""

        if self.saving:
            raise StateError("Save in progress")
        if self.selected is None:
            raise StateError("Select an exercise first")
        result = validate_set(self.selected.measurement_type, self.raw, self.unit)
        if not result.is_complete:
            self.warning = result.warning
            return None
        entry = SetEntry(
            exercise_id=self.selected.id,
            exercise_name=self.selected.name,
            measurement_type=self.selected.measurement_type,
            **asdict(result.fields),
        )
        self.queue.append_set(entry)
        self.warning = ""
        return entry

    def delete_set(self, entry_id: str) -> None:
        if self.saving:
            raise StateError("Cannot delete while saving")
        self.queue.delete_set(entry_id)

    def save(self, gateway: SessionPersistenceGateway) -> int:
        """Store the listed sets and clear them. Returns the session id."""

        if self.saving:
            raise StateError("Save already in progress")
        if not self.queue.has_sets():
            raise StateError("No sets to save")
        try:
            self.date = normalize_date(self.date)
        except ValidationError as exc:
            self.warning = str(exc)
            raise
        self.saving = True
        try:
            session_id = save_queue(
                gateway,
                self.queue,
                user_id=self.user.user_id,
                date=self.date,
                title=self.title,
                mode=MODE_HISTORY_ENTRY,
            )
        finally:
            self.saving = False
        logging.info("History entry saved for %s", self.date)
        self.queue.clear()
        self.clear_selection()
        return session_id

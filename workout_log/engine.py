"""State machine behind the timed workout logger.

The logger alternates between an *action* interval, while a set is being
performed, and a *rest* interval between sets. A single control drives it:

* With an exercise selected and the action timer idle, the control starts
  the action timer.
* While the action timer runs, the control validates the typed input,
  records the set with the elapsed action time and starts the rest timer.
* While the rest timer runs, the control records the rest (zero-length rests
  are skipped) and starts the next action timer.

Selecting another exercise discards whatever interval was being timed and
returns to the armed state. Nothing is persisted until :meth:`save`.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable

from core import DEFAULT_SESSION_TITLE, DEFAULT_WEIGHT_UNIT
from workout_log.auth import UserContext
from workout_log.catalog import ExerciseCatalog, ExerciseDescriptor, search_exercises
from workout_log.errors import PersistenceError, StateError, ValidationError
from workout_log.persistence import MODE_TIMED, SessionPersistenceGateway, save_queue
from workout_log.session_queue import QueueEntry, RestEntry, SessionQueue, SetEntry
from workout_log.timer import IntervalTimer, TimerMode
from workout_log.units import WEIGHT_UNITS
from workout_log.validation import RawInputSet, normalize_date, validate_set


class LoggerState(str, Enum):
    IDLE = "idle"
    ACTION_ARMED = "action_armed"
    ACTION_RUNNING = "action_running"
    REST_RUNNING = "rest_running"


@dataclass(frozen=True)
class SaveRequest:
    """Snapshot of what will be written by a save."""

    user_id: str
    date: str
    title: str
    entries: tuple[QueueEntry, ...]


@dataclass(frozen=True)
class SaveOutcome:
    session_id: int
    set_count: int
    discarded_seconds: int = 0


class SessionQueueEngine:
    """Drive the timer and build the queue for one logging session.

    ``catalog`` is read once when the engine is created. ``user`` is the
    identity sessions are saved under. ``clock`` is handed to the
    :class:`~workout_log.timer.IntervalTimer`; ``on_tick`` is called with the
    elapsed seconds on every tick.
    """

    def __init__(
        self,
        user: UserContext,
        catalog: ExerciseCatalog | list[ExerciseDescriptor],
        *,
        unit: str = DEFAULT_WEIGHT_UNIT,
        clock: Any = None,
        on_tick: Callable[[int], None] | None = None,
        date: str | None = None,
        title: str = DEFAULT_SESSION_TITLE,
    ):
        if unit not in WEIGHT_UNITS:
            raise ValueError(f"Unknown weight unit '{unit}'")
        self.user = user
        exercises = catalog.list() if isinstance(catalog, ExerciseCatalog) else catalog
        self.exercises: list[ExerciseDescriptor] = list(exercises)
        self._exercise_map = {ex.id: ex for ex in self.exercises}
        self.unit = unit
        self.date = normalize_date(date) if date else datetime.date.today().isoformat()
        self.title = title

        self.queue = SessionQueue()
        self.raw = RawInputSet()
        self.timer = IntervalTimer(clock, on_tick=on_tick)
        self.selected: ExerciseDescriptor | None = None
        # message shown next to the input form after a rejected commit
        self.warning: str = ""
        # set while a save is in flight; blocks commits and a second save
        self.saving: bool = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> TimerMode:
        return self.timer.mode

    @property
    def state(self) -> LoggerState:
        if self.selected is None:
            return LoggerState.IDLE
        if self.timer.mode == TimerMode.REST:
            return LoggerState.REST_RUNNING
        if self.timer.running:
            return LoggerState.ACTION_RUNNING
        return LoggerState.ACTION_ARMED

    @property
    def can_edit(self) -> bool:
        """Whether exercises may be picked and logged sets deleted."""
        return not self.saving

    @property
    def can_commit(self) -> bool:
        return self.selected is not None and not self.saving

    @property
    def can_save(self) -> bool:
        return self.queue.has_sets() and not self.saving

    def search(self, text: str) -> list[ExerciseDescriptor]:
        return search_exercises(self.exercises, text)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def select_exercise(self, exercise_id: int) -> ExerciseDescriptor:
        """Make ``exercise_id`` the current exercise and arm the action timer."""

        if self.saving:
            raise StateError("Cannot change exercise while saving")
        exercise = self._exercise_map.get(exercise_id)
        if exercise is None:
            raise KeyError(f"Unknown exercise {exercise_id}")
        if self.timer.running:
            logging.info(
                "Discarding %d unrecorded %s seconds",
                self.timer.elapsed_seconds,
                self.timer.mode.value,
            )
        self.raw.clear()
        self.timer.reset()
        self.timer.mode = TimerMode.ACTION
        self.selected = exercise
        self.warning = ""
        logging.info("Selected exercise %s (%s)", exercise.name, exercise.id)
        return exercise

    def commit(self) -> QueueEntry | None:
        """Press the log/switch control.

        Returns the entry appended to the queue, or ``None`` when nothing was
        recorded (timer started, input rejected or zero-length rest).
        """

        if self.saving:
            raise StateError("Save in progress")
        if self.selected is None:
            raise StateError("Select an exercise first")

        if self.timer.mode == TimerMode.ACTION:
            if not self.timer.running:
                self.timer.start()
                return None
            return self._commit_set()
        return self._commit_rest()

    def _commit_set(self) -> SetEntry | None:
        exercise = self.selected
        result = validate_set(exercise.measurement_type, self.raw, self.unit)
        if not result.is_complete:
            self.warning = result.warning
            logging.info("Set for %s rejected: %s", exercise.name, result.warning)
            return None

        self.timer.stop()
        action_seconds = self.timer.elapsed_seconds
        entry = SetEntry(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            measurement_type=exercise.measurement_type,
            action_time_seconds=action_seconds,
            **asdict(result.fields),
        )
        self.queue.append_set(entry)
        self.raw.clear()
        self.warning = ""
        self.timer.reset()
        self.timer.mode = TimerMode.REST
        self.timer.start()
        logging.info(
            "Logged set %d of %s after %ds",
            self.queue.set_order_for(entry.id),
            exercise.name,
            action_seconds,
        )
        return entry

    def _commit_rest(self) -> RestEntry | None:
        self.timer.stop()
        rest_seconds = self.timer.elapsed_seconds
        entry = None
        if rest_seconds > 0:
            entry = RestEntry(rest_seconds=rest_seconds)
            self.queue.append_rest(entry)
            logging.info("Logged %ds rest", rest_seconds)
        self.timer.reset()
        self.timer.mode = TimerMode.ACTION
        self.timer.start()
        return entry

    def delete_set(self, entry_id: str) -> list[QueueEntry]:
        """Remove a logged set and the rest recorded before it."""

        if self.saving:
            raise StateError("Cannot delete while saving")
        removed = self.queue.delete_set(entry_id)
        logging.info("Deleted %d queue entries", len(removed))
        return removed

    def update_entry(self, entry_id: str, **changes) -> QueueEntry:
        """Correct numeric values of a logged set or rest."""

        if self.saving:
            raise StateError("Cannot edit while saving")
        return self.queue.update_entry(entry_id, **changes)

    def set_order_for(self, entry_id: str) -> int:
        return self.queue.set_order_for(entry_id)

    def cancel(self) -> None:
        """Throw away the queue and timer without saving."""

        if self.saving:
            raise StateError("Cannot cancel while saving")
        self._reset()
        logging.info("Logging session cancelled")

    def close(self) -> None:
        """Stop the timer when the owning screen goes away."""
        self.timer.close()

    def _reset(self) -> None:
        self.timer.reset()
        self.timer.mode = TimerMode.ACTION
        self.queue.clear()
        self.raw.clear()
        self.selected = None
        self.warning = ""

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def begin_save(self) -> SaveRequest:
        """Lock the engine for saving and return what should be written.

        Must be followed by :meth:`finish_save` or :meth:`abort_save`. A date
        that cannot be read raises :class:`~workout_log.errors.ValidationError`
        and leaves the engine unlocked with the message in :attr:`warning`.
        """

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
        logging.info("Saving %d sets for %s", len(self.queue.sets()), self.date)
        return SaveRequest(
            user_id=self.user.user_id,
            date=self.date,
            title=self.title,
            entries=tuple(self.queue),
        )

    def finish_save(self, session_id: int) -> SaveOutcome:
        """Clear the logger after a successful save."""

        discarded = self.timer.elapsed_seconds if self.timer.running else 0
        if discarded:
            logging.warning(
                "Timer stopped by save; %ds of unrecorded %s time discarded",
                discarded,
                self.timer.mode.value,
            )
        set_count = len(self.queue.sets())
        self.saving = False
        self._reset()
        return SaveOutcome(session_id, set_count, discarded)

    def abort_save(self) -> None:
        """Unlock the engine after a failed save, keeping all logged data."""
        self.saving = False

    def save(self, gateway: SessionPersistenceGateway) -> SaveOutcome:
        """Write the session through ``gateway``.

        On failure the :class:`~workout_log.errors.PersistenceError` is
        re-raised and the queue is kept for another attempt.
        """

        request = self.begin_save()
        try:
            session_id = save_queue(
                gateway,
                request.entries,
                user_id=request.user_id,
                date=request.date,
                title=request.title,
                mode=MODE_TIMED,
            )
        except PersistenceError:
            self.abort_save()
            raise
        return self.finish_save(session_id)

"""Exception types raised by the workout logger."""

from __future__ import annotations


class WorkoutLogError(Exception):
    """Base class for all workout logger errors."""


class ValidationError(WorkoutLogError, ValueError):
    """Raw set input is incomplete or malformed for its measurement type."""


class StateError(WorkoutLogError, RuntimeError):
    """Operation is not valid in the logger's current state."""


class PersistenceError(WorkoutLogError):
    """Saving the session or its sets failed."""


class PartialPersistenceError(PersistenceError):
    """The session row was written but its sets were not.

    ``session_id`` identifies the orphaned session so it can be reported.
    """

    def __init__(self, message: str, session_id: int):
        super().__init__(message)
        self.session_id = session_id

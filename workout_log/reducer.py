"""Flattening of a finished session queue into rows for storage."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from workout_log.session_queue import QueueEntry, RestEntry, SetEntry


@dataclass(frozen=True)
class PersistedSet:
    session_id: int
    exercise_id: int
    set_order: int
    weight_kg: float | None
    reps: int | None
    duration_seconds: int | None
    distance_meters: float | None
    action_time_seconds: int | None
    rest_time_seconds: int

    def to_row(self) -> dict:
        return asdict(self)


def reduce_queue(queue: Iterable[QueueEntry], session_id: int) -> list[PersistedSet]:
    """Return one :class:`PersistedSet` per set in ``queue``.

    Sets are numbered 1..N in queue order. A set's rest time is the length of
    the rest directly before it, or 0 when a set comes first. Rests produce no
    rows of their own.
    """

    rows: list[PersistedSet] = []
    previous: QueueEntry | None = None
    order = 0
    for entry in queue:
        if isinstance(entry, SetEntry):
            order += 1
            rest = previous.rest_seconds if isinstance(previous, RestEntry) else 0
            rows.append(
                PersistedSet(
                    session_id=session_id,
                    exercise_id=entry.exercise_id,
                    set_order=order,
                    weight_kg=entry.weight_kg,
                    reps=entry.reps,
                    duration_seconds=entry.duration_seconds,
                    distance_meters=entry.distance_meters,
                    action_time_seconds=entry.action_time_seconds,
                    rest_time_seconds=rest,
                )
            )
        previous = entry
    return rows

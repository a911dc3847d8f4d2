"""In-memory record of a workout being logged.

The queue holds committed sets and the rests between them in the order they
happened. Insertion order is chronological order and also the order sets are
saved in. A rest always directly follows a set: it is never first and never
next to another rest.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field

from workout_log.catalog import MeasurementType
from workout_log.validation import PRODUCED_FIELDS


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class SetEntry:
    exercise_id: int
    exercise_name: str
    measurement_type: MeasurementType
    weight_kg: float | None = None
    reps: int | None = None
    duration_seconds: int | None = None
    distance_meters: float | None = None
    action_time_seconds: int | None = None
    id: str = field(default_factory=_new_id)

    kind = "set"


@dataclass
class RestEntry:
    rest_seconds: int
    id: str = field(default_factory=_new_id)

    kind = "rest"


QueueEntry = SetEntry | RestEntry

_INT_FIELDS = {"reps", "duration_seconds", "action_time_seconds", "rest_seconds"}


def _check_number(name: str, value, positive: bool) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field '{name}' must be numeric")
    if not math.isfinite(value) or value < 0 or (positive and value == 0):
        limit = "greater than zero" if positive else "zero or more"
        raise ValueError(f"Field '{name}' must be {limit}")
    if name in _INT_FIELDS:
        if not float(value).is_integer():
            raise ValueError(f"Field '{name}' must be a whole number")
        return int(value)
    return float(value)


class SessionQueue:
    """Ordered list of :class:`SetEntry` and :class:`RestEntry` items."""

    def __init__(self) -> None:
        self._entries: list[QueueEntry] = []

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> QueueEntry:
        return self._entries[index]

    @property
    def entries(self) -> list[QueueEntry]:
        """Return a copy of the current entries."""
        return list(self._entries)

    def sets(self) -> list[SetEntry]:
        return [e for e in self._entries if isinstance(e, SetEntry)]

    def has_sets(self) -> bool:
        return any(isinstance(e, SetEntry) for e in self._entries)

    def index_of(self, entry_id: str) -> int:
        for idx, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return idx
        raise KeyError(entry_id)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append_set(self, entry: SetEntry) -> None:
        self._entries.append(entry)

    def append_rest(self, entry: RestEntry) -> None:
        """Append ``entry`` after the last set.

        Raises :class:`ValueError` if the queue is empty or already ends in a
        rest.
        """
        if not self._entries or isinstance(self._entries[-1], RestEntry):
            raise ValueError("A rest must follow a set")
        self._entries.append(entry)

    def delete_set(self, entry_id: str) -> list[QueueEntry]:
        """Remove the set ``entry_id`` together with the rest before it.

        When the first set is removed and a rest follows it, that rest is
        dropped as well so the queue never starts with a rest. Returns the
        removed entries in queue order.
        """

        index = self.index_of(entry_id)
        if not isinstance(self._entries[index], SetEntry):
            raise KeyError(entry_id)
        start, end = index, index + 1
        if index > 0 and isinstance(self._entries[index - 1], RestEntry):
            start = index - 1
        elif (
            index == 0
            and len(self._entries) > 1
            and isinstance(self._entries[1], RestEntry)
        ):
            end = 2
        removed = self._entries[start:end]
        del self._entries[start:end]
        return removed

    def update_entry(self, entry_id: str, **changes) -> QueueEntry:
        """Correct numeric fields of the entry ``entry_id`` in place.

        A set accepts the fields its measurement type fills in plus
        ``action_time_seconds``; a rest accepts ``rest_seconds``. Measured
        values must stay greater than zero and counts must be whole numbers.
        Nothing is changed unless every value is accepted.
        """

        entry = self._entries[self.index_of(entry_id)]
        if isinstance(entry, SetEntry):
            measured = PRODUCED_FIELDS[MeasurementType(entry.measurement_type)]
            allowed = set(measured) | {"action_time_seconds"}
        else:
            measured = ("rest_seconds",)
            allowed = {"rest_seconds"}

        cleaned = {}
        for name, value in changes.items():
            if name not in allowed:
                raise ValueError(f"Field '{name}' cannot be updated on this {entry.kind}")
            if value is None:
                if name in measured:
                    raise ValueError(f"Field '{name}' is required")
                cleaned[name] = None
                continue
            cleaned[name] = _check_number(name, value, positive=name in measured)
        for name, value in cleaned.items():
            setattr(entry, name, value)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def set_order_for(self, entry_id: str) -> int:
        """Return the 1-based position of set ``entry_id`` among all sets."""

        order = 0
        for entry in self._entries:
            if isinstance(entry, SetEntry):
                order += 1
                if entry.id == entry_id:
                    return order
        raise KeyError(entry_id)

    def is_well_formed(self) -> bool:
        """Return ``True`` if no rest is first or adjacent to another rest."""

        previous = None
        for entry in self._entries:
            if isinstance(entry, RestEntry) and not isinstance(previous, SetEntry):
                return False
            previous = entry
        return True

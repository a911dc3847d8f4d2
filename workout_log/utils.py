"""Formatting helpers used by the logger screens."""

from __future__ import annotations

from workout_log.catalog import MeasurementType
from workout_log.engine import LoggerState
from workout_log.persistence import SavedSet
from workout_log.session_queue import SetEntry
from workout_log.timer import TimerMode
from workout_log.units import format_weight, unit_label
from workout_log.validation import REQUIRED_FIELDS


def format_time(total_seconds: int | float | None) -> str:
    """Return ``total_seconds`` as ``MM:SS``."""

    minutes, seconds = divmod(int(total_seconds or 0), 60)
    return f"{minutes:02d}:{seconds:02d}"


def describe_set(entry: SetEntry | SavedSet, unit: str) -> str:
    """Return the one-line summary shown for a logged set."""

    mtype = MeasurementType(entry.measurement_type)
    if mtype == MeasurementType.WEIGHT_REPS:
        return f"{format_weight(entry.weight_kg, unit)} {unit_label(unit)} × {entry.reps} reps"
    if mtype == MeasurementType.BODYWEIGHT_REPS:
        return f"Bodyweight × {entry.reps} reps"
    if mtype == MeasurementType.DURATION:
        return f"{entry.duration_seconds} sec"
    return f"{entry.distance_meters:.1f} m / {entry.duration_seconds} sec"


_FIELD_HINTS = {
    "weight": "Weight ({unit})",
    "reps": "Reps",
    "duration": "Duration (sec)",
    "distance": "Distance (m)",
}


def field_hints(measurement_type: MeasurementType, unit: str) -> list[tuple[str, str]]:
    """Return ``(field, hint)`` pairs for the inputs of ``measurement_type``."""

    return [
        (name, _FIELD_HINTS[name].format(unit=unit_label(unit)))
        for name in REQUIRED_FIELDS[MeasurementType(measurement_type)]
    ]


def timer_caption(mode: TimerMode) -> str:
    return "ACTION TIME" if mode == TimerMode.ACTION else "REST TIME"


def control_caption(state: LoggerState, elapsed_seconds: int = 0) -> str:
    """Return the text of the log/switch button for ``state``."""

    if state == LoggerState.IDLE:
        return "Select an exercise"
    if state == LoggerState.ACTION_ARMED:
        return "Start set"
    if state == LoggerState.ACTION_RUNNING:
        return "Log set / start rest"
    return f"Log rest ({format_time(elapsed_seconds)}) / start next set"


def saved_set_caption(saved: SavedSet, unit: str) -> str:
    """Return the summary of a stored set with its action and rest times."""

    parts = [describe_set(saved, unit)]
    if saved.action_time_seconds:
        parts.append(f"action {format_time(saved.action_time_seconds)}")
    if saved.rest_time_seconds:
        parts.append(f"rest {format_time(saved.rest_time_seconds)}")
    return "  ·  ".join(parts)

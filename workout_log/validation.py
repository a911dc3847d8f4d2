"""Validation of raw set input.

The input form shows different fields depending on the selected exercise's
:class:`~workout_log.catalog.MeasurementType`. :func:`validate_set` checks the
fields that type requires and converts them into canonical numbers. Failures
are reported through :attr:`ValidationResult.warning` and never raised to the
caller.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field

from workout_log.catalog import MeasurementType
from workout_log.errors import ValidationError
from workout_log.units import to_canonical


@dataclass
class RawInputSet:
    """Strings typed into the set form for the selected exercise."""

    weight: str = ""
    reps: str = ""
    duration: str = ""
    distance: str = ""

    def clear(self) -> None:
        self.weight = ""
        self.reps = ""
        self.duration = ""
        self.distance = ""


@dataclass
class SetFields:
    """Canonical numbers for a committed set. Unused fields stay ``None``."""

    weight_kg: float | None = None
    reps: int | None = None
    duration_seconds: int | None = None
    distance_meters: float | None = None


@dataclass
class ValidationResult:
    fields: SetFields | None = None
    warning: str = ""
    missing: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.fields is not None


# Raw fields each measurement type needs, in form order
REQUIRED_FIELDS: dict[MeasurementType, tuple[str, ...]] = {
    MeasurementType.WEIGHT_REPS: ("weight", "reps"),
    MeasurementType.BODYWEIGHT_REPS: ("reps",),
    MeasurementType.DURATION: ("duration",),
    MeasurementType.DISTANCE_DURATION: ("distance", "duration"),
}

# Canonical set fields each measurement type fills in
PRODUCED_FIELDS: dict[MeasurementType, tuple[str, ...]] = {
    MeasurementType.WEIGHT_REPS: ("weight_kg", "reps"),
    MeasurementType.BODYWEIGHT_REPS: ("reps",),
    MeasurementType.DURATION: ("duration_seconds",),
    MeasurementType.DISTANCE_DURATION: ("distance_meters", "duration_seconds"),
}


def _parse_number(name: str, text: str) -> float:
    text = (text or "").strip()
    if not text:
        raise ValidationError(f"Enter {name}")
    try:
        value = float(text)
    except ValueError:
        raise ValidationError(f"{name.capitalize()} must be a number") from None
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{name.capitalize()} must be greater than zero")
    return value


def _parse_count(name: str, text: str) -> int:
    value = _parse_number(name, text)
    if not value.is_integer():
        raise ValidationError(f"{name.capitalize()} must be a whole number")
    return int(value)


def _weight_reps(raw: RawInputSet, unit: str) -> SetFields:
    weight = _parse_number("weight", raw.weight)
    reps = _parse_count("reps", raw.reps)
    return SetFields(weight_kg=to_canonical(weight, unit), reps=reps)


def _bodyweight_reps(raw: RawInputSet, unit: str) -> SetFields:
    return SetFields(weight_kg=0.0, reps=_parse_count("reps", raw.reps))


def _duration(raw: RawInputSet, unit: str) -> SetFields:
    return SetFields(duration_seconds=_parse_count("duration", raw.duration))


def _distance_duration(raw: RawInputSet, unit: str) -> SetFields:
    distance = _parse_number("distance", raw.distance)
    duration = _parse_count("duration", raw.duration)
    return SetFields(distance_meters=distance, duration_seconds=duration)


_BUILDERS = {
    MeasurementType.WEIGHT_REPS: _weight_reps,
    MeasurementType.BODYWEIGHT_REPS: _bodyweight_reps,
    MeasurementType.DURATION: _duration,
    MeasurementType.DISTANCE_DURATION: _distance_duration,
}


def missing_fields(measurement_type: MeasurementType, raw: RawInputSet) -> list[str]:
    """Return names of required fields left empty in ``raw``."""

    return [
        name
        for name in REQUIRED_FIELDS[MeasurementType(measurement_type)]
        if not (getattr(raw, name) or "").strip()
    ]


def validate_set(
    measurement_type: MeasurementType, raw: RawInputSet, unit: str
) -> ValidationResult:
    """Check ``raw`` against ``measurement_type`` and build canonical fields.

    ``unit`` is the display unit the weight was typed in.
    """

    builder = _BUILDERS[MeasurementType(measurement_type)]
    missing = missing_fields(measurement_type, raw)
    try:
        fields = builder(raw, unit)
    except ValidationError as exc:
        return ValidationResult(warning=str(exc), missing=missing)
    return ValidationResult(fields=fields)


def normalize_date(text: str | None) -> str:
    """Return ``text`` as an ISO ``YYYY-MM-DD`` date.

    Month and day may be typed without their leading zero, so ``2025-3-1``
    and ``2025-03-01`` name the same session day.
    """

    try:
        parsed = datetime.datetime.strptime((text or "").strip(), "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Enter the date as YYYY-MM-DD, not '{text}'") from None
    return parsed.date().isoformat()


def is_complete(measurement_type: MeasurementType, raw: RawInputSet, unit: str) -> bool:
    """Return ``True`` when ``raw`` can be committed."""

    return validate_set(measurement_type, raw, unit).is_complete

"""Conversion between stored kilograms and the user's display unit.

Weights are always stored in kilograms. The display unit is a user setting
and only affects what is typed in and shown back.
"""

from __future__ import annotations

KG_TO_LBS = 2.20462262

WEIGHT_UNITS = ("kg", "lbs")


def _check_unit(unit: str) -> None:
    if unit not in WEIGHT_UNITS:
        raise ValueError(f"Unknown weight unit '{unit}'")


def to_canonical(value: float | str | None, unit: str) -> float:
    """Return ``value`` entered in ``unit`` as kilograms.

    Empty input converts to ``0.0``.
    """

    _check_unit(unit)
    if value is None or value == "":
        return 0.0
    val = float(value)
    if unit == "kg":
        return val
    return val / KG_TO_LBS


def to_display(kg_value: float | None, unit: str) -> float:
    """Return ``kg_value`` expressed in ``unit``."""

    _check_unit(unit)
    if kg_value is None:
        return 0.0
    if unit == "kg":
        return float(kg_value)
    return float(kg_value) * KG_TO_LBS


def format_weight(kg_value: float | None, unit: str) -> str:
    """Return ``kg_value`` in ``unit`` formatted with one decimal place."""

    return f"{to_display(kg_value, unit):.1f}"


def unit_label(unit: str) -> str:
    return "kg" if unit == "kg" else "lbs"

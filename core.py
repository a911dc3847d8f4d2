from __future__ import annotations

from pathlib import Path

# Default path to the local SQLite database standing in for the hosted backend
DEFAULT_DB_PATH = Path(__file__).resolve().parent / "data" / "workout_log.db"

# Schema used to create a fresh database on first launch
SCHEMA_PATH = Path(__file__).resolve().parent / "data" / "workout_log_schema.sql"

# Unit weights are shown in until the user picks another one
DEFAULT_WEIGHT_UNIT = "lbs"

# Title given to a new session when the user doesn't change it
DEFAULT_SESSION_TITLE = "Strength Training"

# Seconds between timer ticks
TICK_INTERVAL = 1.0

__all__ = [
    "DEFAULT_DB_PATH",
    "SCHEMA_PATH",
    "DEFAULT_WEIGHT_UNIT",
    "DEFAULT_SESSION_TITLE",
    "TICK_INTERVAL",
]

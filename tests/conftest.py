from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from core import SCHEMA_PATH  # noqa: E402
from workout_log import settings  # noqa: E402
from workout_log.auth import UserContext  # noqa: E402
from workout_log.catalog import ExerciseDescriptor, MeasurementType  # noqa: E402
from workout_log.persistence import init_db  # noqa: E402
from utils import RecordingGateway, VirtualClock, create_sample_db  # noqa: E402


@pytest.fixture
def sample_db(tmp_path: Path) -> Path:
    """Create a temporary database with one exercise of each type."""
    db_path = tmp_path / "workout_log.db"
    init_db(db_path, SCHEMA_PATH)
    create_sample_db(db_path)
    return db_path


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep tests from reading or writing the real settings file."""
    monkeypatch.setattr(settings, "SETTINGS_PATH", tmp_path / "settings.json")
    settings.clear_cache()
    yield tmp_path / "settings.json"
    settings.clear_cache()


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def user() -> UserContext:
    return UserContext(user_id="user-1")


@pytest.fixture
def exercises() -> list[ExerciseDescriptor]:
    return [
        ExerciseDescriptor(1, "Bench Press", MeasurementType.WEIGHT_REPS, "Chest"),
        ExerciseDescriptor(2, "Push-up", MeasurementType.BODYWEIGHT_REPS),
        ExerciseDescriptor(3, "Plank", MeasurementType.DURATION, "Rectus Abdominis"),
        ExerciseDescriptor(4, "Running", MeasurementType.DISTANCE_DURATION, "Quads"),
    ]


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()

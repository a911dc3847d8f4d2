"""Identity of the user logging workouts."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from workout_log import settings


@dataclass(frozen=True)
class UserContext:
    user_id: str
    display_name: str = ""


def get_current_user() -> UserContext:
    """Return the signed-in user.

    The id is read from the ``user_id`` setting. A new local id is generated
    and stored on first use.
    """

    user_id = settings.get_value("user_id")
    if not user_id:
        user_id = uuid.uuid4().hex
        settings.set_value("user_id", user_id)
        logging.info("Created local user %s", user_id)
    return UserContext(user_id=str(user_id))

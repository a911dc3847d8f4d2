import logging
import os
import sys
from pathlib import Path

from kivy.core.window import Window
from kivy.lang import Builder
from kivymd.app import MDApp

from core import DEFAULT_DB_PATH, SCHEMA_PATH
from ui.screens import HistoryEntryScreen, HomeScreen, LoggerScreen, SessionDetailScreen  # noqa: F401
from ui.set_form import SetForm  # noqa: F401
from workout_log import settings
from workout_log.auth import get_current_user
from workout_log.catalog import SQLiteExerciseCatalog
from workout_log.engine import SessionQueueEngine
from workout_log.history import HistoryLog
from workout_log.persistence import SQLiteSessionGateway, init_db


if os.name == "nt" or sys.platform.startswith("win"):
    Window.size = (280, 280 * (20 / 9))


class WorkoutLoggerApp(MDApp):
    catalog: SQLiteExerciseCatalog | None = None
    gateway: SQLiteSessionGateway | None = None
    user = None

    def build(self):
        if not DEFAULT_DB_PATH.exists():
            init_db(DEFAULT_DB_PATH, SCHEMA_PATH)
            logging.info("Created database at %s", DEFAULT_DB_PATH)
        self.catalog = SQLiteExerciseCatalog(DEFAULT_DB_PATH)
        self.gateway = SQLiteSessionGateway(DEFAULT_DB_PATH)
        self.user = get_current_user()
        return Builder.load_file(str(Path(__file__).with_name("main.kv")))

    def open_logger(self):
        """Start a timed session and show the logger screen.

        The exercise catalog is read once here so nothing touches the
        database while the workout is in progress.
        """

        engine = SessionQueueEngine(
            self.user, self.catalog, unit=settings.get_weight_unit()
        )
        screen = self.root.get_screen("logger")
        screen.start_session(engine, self.gateway)
        self.root.current = "logger"

    def open_history_entry(self):
        history = HistoryLog(self.user, self.catalog, unit=settings.get_weight_unit())
        screen = self.root.get_screen("history_entry")
        screen.start_entry(history, self.gateway)
        self.root.current = "history_entry"

    def open_session(self, session_id: int, title: str = ""):
        self.root.get_screen("session_detail").show_session(session_id, title)

    def on_workout_saved(self, session_id: int):
        logging.info("Workout %s saved", session_id)
        self.root.get_screen("home").populate()


if __name__ == "__main__":
    WorkoutLoggerApp().run()

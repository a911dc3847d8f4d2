"""UI screen modules for the workout logger."""

from .home_screen import HomeScreen
from .history_entry_screen import HistoryEntryScreen
from .logger_screen import LoggerScreen
from .session_detail_screen import SessionDetailScreen

__all__ = [
    "HistoryEntryScreen",
    "HomeScreen",
    "LoggerScreen",
    "SessionDetailScreen",
]

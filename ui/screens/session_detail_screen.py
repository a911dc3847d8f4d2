from __future__ import annotations

from kivy.metrics import dp
from kivy.properties import StringProperty
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton
from kivymd.uix.list import MDList, OneLineListItem, TwoLineListItem
from kivymd.uix.screen import MDScreen

from ui.dialogs import confirm, show_message
from workout_log import settings
from workout_log.errors import PersistenceError
from workout_log.utils import saved_set_caption


class SessionDetailScreen(MDScreen):
    """Display the sets of a saved workout and allow deleting them."""

    session_id: int | None = None
    heading = StringProperty("Workout")
    return_to = StringProperty("home")

    def on_pre_enter(self, *args):
        if self.session_id is not None:
            self.populate()
        return super().on_pre_enter(*args)

    def show_session(self, session_id: int, heading: str = "") -> None:
        """Load ``session_id`` and switch to this screen."""
        self.session_id = session_id
        self.heading = heading or "Workout"
        if self.manager:
            self.manager.current = self.name

    def go_back(self) -> None:
        if self.manager:
            self.manager.current = self.return_to

    def populate(self) -> None:
        app = MDApp.get_running_app()
        lst: MDList = self.ids.get("details_list")  # type: ignore[assignment]
        if not lst:
            return
        lst.clear_widgets()
        sets = app.gateway.get_session_detail(self.session_id)
        if not sets:
            lst.add_widget(OneLineListItem(text="No sets recorded"))
            return
        unit = settings.get_weight_unit()
        for saved in sets:
            row = MDBoxLayout(size_hint_y=None, height=dp(72))
            row.add_widget(
                TwoLineListItem(
                    text=f"{saved.set_order}. {saved.exercise_name}",
                    secondary_text=saved_set_caption(saved, unit),
                )
            )
            row.add_widget(
                MDFlatButton(
                    text="Delete",
                    on_release=lambda _btn, sid=saved.id: self.confirm_delete_set(sid),
                )
            )
            lst.add_widget(row)

    def confirm_delete_set(self, set_id: int) -> None:
        confirm("Delete set?", "This set will be removed.", lambda: self._delete_set(set_id), "Delete")

    def _delete_set(self, set_id: int) -> None:
        try:
            MDApp.get_running_app().gateway.delete_set(set_id)
        except PersistenceError as exc:
            show_message("Delete failed", str(exc))
        self.populate()

    def confirm_delete_session(self) -> None:
        if self.session_id is None:
            return
        confirm(
            "Delete workout?",
            "The workout and all its sets will be removed.",
            self._delete_session,
            confirm_text="Delete",
        )

    def _delete_session(self) -> None:
        app = MDApp.get_running_app()
        try:
            app.gateway.delete_session(self.session_id)
        except PersistenceError as exc:
            show_message("Delete failed", str(exc))
            return
        self.session_id = None
        self.go_back()

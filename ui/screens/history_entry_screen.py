from kivy.metrics import dp
from kivy.properties import BooleanProperty, ObjectProperty, StringProperty
from kivymd.app import MDApp
from kivymd.toast import toast
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton
from kivymd.uix.list import TwoLineListItem
from kivymd.uix.screen import MDScreen

from ui.dialogs import show_message
from workout_log.errors import PersistenceError, ValidationError
from workout_log.history import HistoryLog
from workout_log.utils import describe_set


class HistoryEntryScreen(MDScreen):
    """Enter a past workout set by set, without timing."""

    history = ObjectProperty(None, allownone=True)
    warning_text = StringProperty("")
    save_disabled = BooleanProperty(True)
    form_locked = BooleanProperty(False)
    return_to = StringProperty("home")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gateway = None

    def start_entry(self, history: HistoryLog, gateway) -> None:
        self.history = history
        self.gateway = gateway
        self.ids.date_field.text = history.date
        self.ids.title_field.text = history.title
        self.ids.form.set_exercises(history.exercises)
        self.ids.form.show_inputs(None, history.unit)
        self.refresh()

    def go_back(self):
        if self.history is not None and self.history.saving:
            return
        if self.manager:
            self.manager.current = self.return_to

    def select_exercise(self, exercise) -> None:
        history = self.history
        if history is None or not history.can_edit:
            return
        history.select_exercise(exercise.id)
        self.ids.form.show_inputs(exercise, history.unit)
        self.refresh()

    def add_set(self) -> None:
        history = self.history
        if history is None or history.selected is None or not history.can_edit:
            return
        self.ids.form.read_into(history.raw)
        history.add_set()
        self.refresh()

    def delete_entry(self, entry_id: str) -> None:
        if self.history is None or not self.history.can_edit:
            return
        self.history.delete_set(entry_id)
        self.refresh()

    def save(self) -> None:
        history = self.history
        if history is None or not history.can_save:
            return
        history.date = self.ids.date_field.text.strip() or history.date
        history.title = self.ids.title_field.text.strip() or history.title
        try:
            session_id = history.save(self.gateway)
        except ValidationError:
            self.refresh()
            return
        except PersistenceError as exc:
            show_message("Save failed", str(exc))
            self.refresh()
            return
        toast("Workout saved")
        app = MDApp.get_running_app()
        if app is not None and hasattr(app, "on_workout_saved"):
            app.on_workout_saved(session_id)
        self.go_back()

    def refresh(self) -> None:
        history = self.history
        if history is None:
            return
        self.warning_text = history.warning
        self.save_disabled = not history.can_save
        self.form_locked = not history.can_edit
        lst = self.ids.set_list
        lst.clear_widgets()
        for order, entry in enumerate(history.queue, 1):
            row = MDBoxLayout(size_hint_y=None, height=dp(72))
            row.add_widget(
                TwoLineListItem(
                    text=f"{order}. {entry.exercise_name}",
                    secondary_text=describe_set(entry, history.unit),
                )
            )
            row.add_widget(
                MDFlatButton(
                    text="Delete",
                    disabled=self.form_locked,
                    on_release=lambda _btn, eid=entry.id: self.delete_entry(eid),
                )
            )
            lst.add_widget(row)

import logging
import threading

from kivy.clock import Clock
from kivy.metrics import dp
from kivy.properties import BooleanProperty, ObjectProperty, StringProperty
from kivymd.app import MDApp
from kivymd.toast import toast
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton
from kivymd.uix.list import OneLineListItem, TwoLineListItem
from kivymd.uix.screen import MDScreen

from ui.dialogs import confirm, show_message
from workout_log.engine import LoggerState, SaveRequest, SessionQueueEngine
from workout_log.errors import PartialPersistenceError, PersistenceError, ValidationError
from workout_log.persistence import MODE_TIMED, save_queue
from workout_log.session_queue import RestEntry
from workout_log.utils import control_caption, describe_set, format_time, timer_caption


class LoggerScreen(MDScreen):
    """Timed logging of the current workout.

    The screen only forwards user actions to a :class:`SessionQueueEngine`
    and redraws from its state. Saving runs on a worker thread; the result is
    handed back to the UI thread with ``Clock.schedule_once``. While a save
    is in flight the form is locked.
    """

    engine = ObjectProperty(None, allownone=True)
    timer_text = StringProperty("00:00")
    caption_text = StringProperty("ACTION TIME")
    control_text = StringProperty("Select an exercise")
    warning_text = StringProperty("")
    save_text = StringProperty("Finish workout")
    commit_disabled = BooleanProperty(True)
    save_disabled = BooleanProperty(True)
    form_locked = BooleanProperty(False)
    return_to = StringProperty("home")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gateway = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self, engine: SessionQueueEngine, gateway) -> None:
        """Show a fresh logging session driven by ``engine``."""

        if self.engine is not None:
            self.engine.close()
        self.engine = engine
        self.gateway = gateway
        engine.timer.on_tick = self._on_tick
        self.ids.date_field.text = engine.date
        self.ids.title_field.text = engine.title
        self.ids.form.set_exercises(engine.exercises)
        self.ids.form.show_inputs(None, engine.unit)
        self.refresh()

    def on_leave(self, *args):
        if self.engine is not None and not self.engine.saving:
            self.engine.close()
        return super().on_leave(*args)

    def _leave(self):
        if self.manager:
            self.manager.current = self.return_to

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def select_exercise(self, exercise) -> None:
        engine = self.engine
        if engine is None or not engine.can_edit:
            return
        engine.select_exercise(exercise.id)
        self.ids.form.show_inputs(exercise, engine.unit)
        self.refresh()

    def log_and_switch(self) -> None:
        engine = self.engine
        if engine is None or not engine.can_commit:
            return
        form = self.ids.form
        form.read_into(engine.raw)
        entry = engine.commit()
        if entry is not None and not isinstance(entry, RestEntry):
            form.clear_inputs()
        self.refresh()

    def delete_entry(self, entry_id: str) -> None:
        if self.engine is None or not self.engine.can_edit:
            return
        self.engine.delete_set(entry_id)
        self.refresh()

    def confirm_cancel(self) -> None:
        if self.engine is None or self.engine.saving:
            return
        if not len(self.engine.queue):
            self.engine.cancel()
            self._leave()
            return

        def do_cancel():
            self.engine.cancel()
            self._leave()

        confirm(
            "Discard workout?",
            "Logged sets will be lost.",
            do_cancel,
            confirm_text="Discard",
        )

    def save(self) -> None:
        engine = self.engine
        if engine is None or not engine.can_save:
            return
        engine.date = self.ids.date_field.text.strip() or engine.date
        engine.title = self.ids.title_field.text.strip() or engine.title
        try:
            request = engine.begin_save()
        except ValidationError:
            self.refresh()
            return
        self.refresh()
        threading.Thread(target=self._save_worker, args=(request,), daemon=True).start()

    def _save_worker(self, request: SaveRequest) -> None:
        try:
            session_id = save_queue(
                self.gateway,
                request.entries,
                user_id=request.user_id,
                date=request.date,
                title=request.title,
                mode=MODE_TIMED,
            )
        except PersistenceError as exc:
            Clock.schedule_once(lambda _dt, err=exc: self._on_save_failed(err))
            return
        Clock.schedule_once(lambda _dt: self._on_saved(session_id))

    def _on_saved(self, session_id: int) -> None:
        outcome = self.engine.finish_save(session_id)
        if outcome.discarded_seconds:
            toast("Timer stopped; unrecorded time was discarded")
        else:
            toast(f"Saved {outcome.set_count} sets")
        self.refresh()
        app = MDApp.get_running_app()
        if app is not None and hasattr(app, "on_workout_saved"):
            app.on_workout_saved(session_id)
        self._leave()

    def _on_save_failed(self, exc: PersistenceError) -> None:
        self.engine.abort_save()
        if isinstance(exc, PartialPersistenceError):
            logging.error("Save left session %s without sets", exc.session_id)
        show_message("Save failed", str(exc))
        self.refresh()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _on_tick(self, elapsed: int) -> None:
        self.timer_text = format_time(elapsed)
        if self.engine is not None and self.engine.state == LoggerState.REST_RUNNING:
            self.control_text = control_caption(self.engine.state, elapsed)

    def refresh(self) -> None:
        engine = self.engine
        if engine is None:
            return
        self.timer_text = format_time(engine.timer.elapsed_seconds)
        self.caption_text = timer_caption(engine.mode)
        self.control_text = control_caption(engine.state, engine.timer.elapsed_seconds)
        self.warning_text = engine.warning
        self.commit_disabled = not engine.can_commit
        self.save_disabled = not engine.can_save
        self.form_locked = not engine.can_edit
        self.save_text = "Saving..." if engine.saving else "Finish workout"
        self._populate_queue()

    def _populate_queue(self) -> None:
        lst = self.ids.queue_list
        lst.clear_widgets()
        order = 0
        for entry in self.engine.queue:
            if isinstance(entry, RestEntry):
                lst.add_widget(OneLineListItem(text=f"Rest  {format_time(entry.rest_seconds)}"))
                continue
            order += 1
            row = MDBoxLayout(size_hint_y=None, height=dp(72))
            row.add_widget(
                TwoLineListItem(
                    text=f"{order}. {entry.exercise_name}",
                    secondary_text=(
                        f"{describe_set(entry, self.engine.unit)}"
                        f"  ·  {format_time(entry.action_time_seconds)}"
                    ),
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

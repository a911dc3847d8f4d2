from kivy.properties import StringProperty
from kivymd.app import MDApp
from kivymd.uix.list import MDList, TwoLineListItem
from kivymd.uix.screen import MDScreen

from workout_log import settings
from workout_log.units import WEIGHT_UNITS


class HomeScreen(MDScreen):
    """Entry point listing recent sessions and the ways to log a workout."""

    unit_text = StringProperty("")

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def toggle_unit(self) -> None:
        current = settings.get_weight_unit()
        index = WEIGHT_UNITS.index(current)
        settings.set_value("weight_unit", WEIGHT_UNITS[(index + 1) % len(WEIGHT_UNITS)])
        self.populate()

    def populate(self) -> None:
        self.unit_text = f"Units: {settings.get_weight_unit()}"
        app = MDApp.get_running_app()
        lst: MDList = self.ids.get("session_list")  # type: ignore[assignment]
        if not lst:
            return
        lst.clear_widgets()
        if app is None or getattr(app, "gateway", None) is None:
            return
        for session in app.gateway.list_sessions(app.user.user_id, limit=30):
            title = session["title"] or "Workout"
            lst.add_widget(
                TwoLineListItem(
                    text=title,
                    secondary_text=f"{session['date']} · {session['set_count']} sets",
                    on_release=lambda _item, sid=session["id"], t=title: app.open_session(sid, t),
                )
            )

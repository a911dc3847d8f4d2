"""Exercise picker and set inputs shared by the logger screens."""

from __future__ import annotations

from kivy.properties import ListProperty
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.list import TwoLineListItem
from kivymd.uix.textfield import MDTextField

from workout_log.catalog import ExerciseDescriptor, search_exercises
from workout_log.utils import field_hints
from workout_log.validation import RawInputSet


class SetForm(MDBoxLayout):
    """Search field, matching exercises and the inputs for the chosen one.

    Dispatches ``on_select`` with the picked :class:`ExerciseDescriptor`.
    The layout is declared in ``main.kv``.
    """

    exercises = ListProperty([])

    __events__ = ("on_select",)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.inputs: dict[str, MDTextField] = {}

    def on_select(self, exercise: ExerciseDescriptor) -> None:
        pass

    def set_exercises(self, exercises: list[ExerciseDescriptor]) -> None:
        self.exercises = list(exercises)
        self.show_matches(self.ids.search_field.text)

    def show_matches(self, text: str) -> None:
        lst = self.ids.get("match_list")
        if not lst:
            return
        lst.clear_widgets()
        for exercise in search_exercises(self.exercises, text):
            lst.add_widget(
                TwoLineListItem(
                    text=exercise.name,
                    secondary_text=exercise.primary_muscle,
                    on_release=lambda _item, ex=exercise: self._pick(ex),
                )
            )
        if not lst.children:
            lst.add_widget(
                TwoLineListItem(
                    text="No exercise found",
                    secondary_text="Add it in the exercise library first",
                )
            )

    def _pick(self, exercise: ExerciseDescriptor) -> None:
        if self.disabled:
            return
        self.ids.search_field.text = exercise.name
        self.dispatch("on_select", exercise)

    def show_inputs(self, exercise: ExerciseDescriptor | None, unit: str) -> None:
        """Rebuild the input fields for ``exercise``'s measurement type."""

        box = self.ids.input_box
        box.clear_widgets()
        self.inputs = {}
        self.ids.placeholder.opacity = 1 if exercise is None else 0
        if exercise is None:
            return
        for name, hint in field_hints(exercise.measurement_type, unit):
            field = MDTextField(hint_text=hint, input_filter="float")
            self.inputs[name] = field
            box.add_widget(field)

    def read_into(self, raw: RawInputSet) -> RawInputSet:
        """Copy the typed values into ``raw``."""

        raw.clear()
        for name, field in self.inputs.items():
            setattr(raw, name, field.text)
        return raw

    def clear_inputs(self) -> None:
        for field in self.inputs.values():
            field.text = ""

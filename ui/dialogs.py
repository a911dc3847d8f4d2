"""Small dialog helpers used by the logger screens."""

from __future__ import annotations

from kivymd.uix.button import MDFlatButton
from kivymd.uix.dialog import MDDialog


def show_message(title: str, text: str) -> MDDialog:
    """Open a dialog showing ``text`` with a single OK button."""

    dialog = None

    def close_dialog(*_):
        dialog.dismiss()

    dialog = MDDialog(
        title=title,
        text=text,
        buttons=[MDFlatButton(text="OK", on_release=close_dialog)],
    )
    dialog.open()
    return dialog


def confirm(title: str, text: str, on_confirm, confirm_text: str = "Confirm") -> MDDialog:
    """Ask the user to confirm an action before calling ``on_confirm``."""

    dialog = None

    def do_confirm(*_):
        dialog.dismiss()
        on_confirm()

    dialog = MDDialog(
        title=title,
        text=text,
        buttons=[
            MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
            MDFlatButton(text=confirm_text, on_release=do_confirm),
        ],
    )
    dialog.open()
    return dialog

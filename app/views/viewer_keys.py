"""Keyboard mapping for the picture viewer.

Translates Qt key codes into explicit `ViewerInput` values so key presses are
plain inputs of the navigator state machine rather than widget side effects.
"""

from __future__ import annotations

from PySide6.QtCore import Qt

from core.services.viewer_navigator import ViewerInput, ViewerNavigator

KEY_BINDINGS: dict[int, ViewerInput] = {
    int(Qt.Key.Key_Escape.value): ViewerInput.CLOSE,
    int(Qt.Key.Key_Left.value): ViewerInput.PREVIOUS,
    int(Qt.Key.Key_Right.value): ViewerInput.NEXT,
    int(Qt.Key.Key_I.value): ViewerInput.TOGGLE_INFO,
    int(Qt.Key.Key_Delete.value): ViewerInput.REQUEST_DELETE,
}


def input_for_key(key: int | Qt.Key, delete_dialog_open: bool) -> ViewerInput | None:
    """Return the viewer input bound to `key`, or None when unbound.

    Escape cancels the delete dialog while it is open instead of closing the
    viewer.
    """
    action = KEY_BINDINGS.get(int(getattr(key, "value", key)))
    if action is ViewerInput.CLOSE and delete_dialog_open:
        return ViewerInput.CANCEL
    return action


def dispatch_key(navigator: ViewerNavigator, key: int | Qt.Key) -> bool:
    """Feed a key press to `navigator`. Returns True if it changed state."""
    action = input_for_key(key, navigator.delete_dialog_open)
    if action is None:
        return False
    return navigator.handle_input(action)

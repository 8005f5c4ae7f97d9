"""Cursor management for the single-picture viewer.

The navigator is either closed or open over a non-empty sequence. Keyboard
and button inputs arrive as `ViewerInput` values through `handle_input`;
while the delete dialog is open every input except `CANCEL` is ignored. The
transition methods themselves are unguarded so the dialog's own buttons and
programmatic callers can always drive the state.
"""

from __future__ import annotations

from enum import Enum

from core.models import Picture
from core.removal import cursor_after_removal, remove_by_key


class ViewerInput(str, Enum):
    CLOSE = "close"
    PREVIOUS = "previous"
    NEXT = "next"
    TOGGLE_INFO = "toggle_info"
    REQUEST_DELETE = "request_delete"
    CANCEL = "cancel"


class ViewerNavigator:
    """Closed/Open state machine with wraparound navigation."""

    def __init__(self) -> None:
        self._sequence: list[Picture] = []
        self._cursor = 0
        self._open = False
        self.info_visible = True
        self.delete_dialog_open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def sequence(self) -> tuple[Picture, ...]:
        return tuple(self._sequence)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> Picture | None:
        return self._sequence[self._cursor] if self._open else None

    def position_label(self) -> str:
        """Counter shown over the picture, e.g. ``3 / 12``."""
        if not self._open:
            return ""
        return f"{self._cursor + 1} / {len(self._sequence)}"

    def open(self, sequence: list[Picture], start_index: int = 0) -> None:
        if not sequence:
            raise ValueError("cannot open the viewer on an empty sequence")
        if not 0 <= start_index < len(sequence):
            raise IndexError(f"start index {start_index} out of range 0..{len(sequence) - 1}")
        self._sequence = list(sequence)
        self._cursor = start_index
        self._open = True
        self.info_visible = True
        self.delete_dialog_open = False

    def close(self) -> None:
        self._sequence = []
        self._cursor = 0
        self._open = False
        self.delete_dialog_open = False

    def next(self) -> None:
        if self._open and len(self._sequence) > 1:
            self._cursor = (self._cursor + 1) % len(self._sequence)

    def previous(self) -> None:
        if self._open and len(self._sequence) > 1:
            self._cursor = (self._cursor - 1) % len(self._sequence)

    def toggle_info(self) -> None:
        if self._open:
            self.info_visible = not self.info_visible

    def request_delete(self) -> None:
        if self._open:
            self.delete_dialog_open = True

    def cancel_delete(self) -> None:
        self.delete_dialog_open = False

    def remove_path(self, path: str) -> bool:
        """Drop `path` from the sequence, keeping the cursor valid.

        Removing the current item lands on the following one, or on the new
        tail when the tail was removed. The viewer closes once empty.
        """
        if not self._open:
            return False
        kept, removed_at = remove_by_key(self._sequence, path, lambda p: p.path)
        if removed_at is None:
            return False
        cursor = cursor_after_removal(self._cursor, removed_at, len(kept))
        if cursor is None:
            self.close()
            return True
        self._sequence = kept
        self._cursor = cursor
        return True

    def remove_current(self) -> Picture | None:
        """Drop the current item after a confirmed delete and close the dialog."""
        current = self.current
        if current is None:
            return None
        self.delete_dialog_open = False
        self.remove_path(current.path)
        return current

    def replace_item(self, picture: Picture) -> None:
        """Swap in a refreshed copy of a picture already in the sequence."""
        self._sequence = [picture if p.path == picture.path else p for p in self._sequence]

    def handle_input(self, action: ViewerInput) -> bool:
        """Apply a keyboard/button input. Returns False if it was ignored."""
        if not self._open:
            return False
        if self.delete_dialog_open:
            if action is ViewerInput.CANCEL:
                self.cancel_delete()
                return True
            return False
        if action is ViewerInput.CLOSE:
            self.close()
        elif action is ViewerInput.PREVIOUS:
            self.previous()
        elif action is ViewerInput.NEXT:
            self.next()
        elif action is ViewerInput.TOGGLE_INFO:
            self.toggle_info()
        elif action is ViewerInput.REQUEST_DELETE:
            self.request_delete()
        else:
            return False
        return True

"""Keystroke handling for the input line.

The editor has two states: it accumulates characters until a submit key
arrives, then holds the finished line until the input loop takes it.
"""
from __future__ import annotations

import dataclasses
import enum
from typing import Optional


class KeyKind(enum.Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    SUBMIT = "submit"
    NEXT_PAGE = "next_page"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


@dataclasses.dataclass(frozen=True)
class KeyPress:
    kind: KeyKind
    char: str = ""


# Terminal key names (as Textual reports them) for the control keys.
CONTROL_KEYS = {
    "enter": KeyKind.SUBMIT,
    "tab": KeyKind.NEXT_PAGE,
    "up": KeyKind.SCROLL_UP,
    "pageup": KeyKind.SCROLL_UP,
    "down": KeyKind.SCROLL_DOWN,
    "pagedown": KeyKind.SCROLL_DOWN,
    "backspace": KeyKind.BACKSPACE,
}


def translate_key(key: str, character: Optional[str]) -> Optional[KeyPress]:
    """Map a terminal key event to a ``KeyPress``, or None for keys we ignore."""
    kind = CONTROL_KEYS.get(key)
    if kind is not None:
        return KeyPress(kind)
    if character and len(character) == 1 and character.isprintable():
        return KeyPress(KeyKind.CHAR, character)
    return None


class EditorState(enum.Enum):
    ACCUMULATING = "accumulating"
    SUBMITTED = "submitted"


class LineEditor:
    def __init__(self) -> None:
        self.buffer = ""
        self.state = EditorState.ACCUMULATING

    def feed(self, key: KeyPress) -> Optional[KeyKind]:
        """Apply one key. Returns the key kind when the caller has to act on it."""
        if self.state is EditorState.SUBMITTED:
            raise RuntimeError("take() the submitted line before feeding more keys")

        if key.kind is KeyKind.CHAR:
            self.buffer += key.char
            return None
        if key.kind is KeyKind.BACKSPACE:
            self.buffer = self.buffer[:-1]
            return None
        if key.kind is KeyKind.SUBMIT:
            self.state = EditorState.SUBMITTED
        return key.kind

    def take(self) -> str:
        line = self.buffer
        self.buffer = ""
        self.state = EditorState.ACCUMULATING
        return line

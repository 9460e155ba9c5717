from __future__ import annotations

from typing import Tuple

CHROME_LINES = 2  # border + prompt


def visible_range(chat_len: int, screen_len: int, scroll: int) -> Tuple[range, int]:
    """Return ``(lines to draw, clamped scroll)`` for a viewport of ``screen_len`` rows.

    ``scroll`` counts lines up from the bottom. It is clamped first so a
    value left over from a taller terminal can't push the window out of
    bounds after a resize.
    """
    screen_len = max(screen_len, CHROME_LINES)
    overflow = chat_len + CHROME_LINES - screen_len

    if overflow < 0:
        scroll = 0
    elif scroll > overflow:
        scroll = overflow
    scroll = max(scroll, 0)

    if overflow >= 0 and overflow >= scroll:
        return range(overflow - scroll, chat_len - scroll), scroll
    return range(0, chat_len), scroll

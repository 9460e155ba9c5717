"""Shared helpers: sender color palette and per-line markup."""
from __future__ import annotations

import re
import zlib

from rich.markup import escape as markup_escape


# ---------------------------------------------------------------------------
# Per-sender color palette
# ---------------------------------------------------------------------------

_SENDER_COLORS = [
    "cyan", "yellow", "magenta", "bright_cyan",
    "bright_yellow", "bright_magenta", "orange1", "hot_pink",
    "chartreuse3", "cornflower_blue", "salmon1", "sky_blue2",
]


def _sender_color(name: str) -> str:
    """Return a Rich color name for *name* that is stable across runs."""
    return _SENDER_COLORS[zlib.crc32(name.encode("utf-8")) % len(_SENDER_COLORS)]


# ---------------------------------------------------------------------------
# Chat line → Rich markup
# ---------------------------------------------------------------------------

_INCOMING_RE = re.compile(r"^\[([^\]\n]+)\]: ")
_OWN_RE = re.compile(r"^\(([^)\n]+)\)> ")


def _render_line(line: str) -> str:
    """Escape *line* and color its attribution prefix, if it has one.

    ``[ERR]: ...`` lines are red, ``[alice]: ...`` lines get alice's color and
    the user's own ``(bob)> ...`` echoes are bold magenta.
    """
    if line.startswith("[ERR]: "):
        return f"[bold red]{markup_escape(line)}[/bold red]"

    m = _INCOMING_RE.match(line)
    if m:
        sender = markup_escape(m.group(1))
        color = _sender_color(m.group(1))
        return f"[bold {color}]\\[{sender}][/bold {color}]: {markup_escape(line[m.end():])}"

    m = _OWN_RE.match(line)
    if m:
        prefix = markup_escape(m.group(0))
        return f"[bold bright_magenta]{prefix}[/bold bright_magenta]{markup_escape(line[m.end():])}"

    return markup_escape(line)

"""Single-screen chat view: page list, conversation, roster and prompt."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from rich.markup import escape as markup_escape
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Static

from pagechat.instance import SharedInstance
from pagechat.keys import KeyPress, translate_key
from pagechat.loops import handle_network, handle_user
from pagechat.models import RosterState, Snapshot

from ._utils import _render_line

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Drawing a frame failed; the session can't continue."""


class ChatScreen(Screen):
    """Main chat interface. Owns the input and network loop tasks."""

    # Tab would otherwise move widget focus.
    BINDINGS = [Binding("tab", "feed_key('tab')", "Next page", show=False, priority=True)]

    DEFAULT_CSS = """
    ChatScreen {
        layout: vertical;
    }
    #chat-body {
        height: 1fr;
    }
    #page-list {
        width: 22;
        height: 1fr;
        border-right: solid $primary-darken-2;
        padding: 0 1;
    }
    #chat-log {
        width: 1fr;
        height: 1fr;
        border: round $primary-darken-2;
        padding: 0 1;
    }
    #roster {
        width: 20%;
        height: 1fr;
        border-left: solid $primary-darken-2;
        padding: 0 1;
    }
    #prompt {
        dock: bottom;
        height: 2;
        border-top: solid $primary-darken-2;
    }
    """

    def __init__(self, username: str, shared: SharedInstance, client, sender, **kwargs) -> None:
        super().__init__(**kwargs)
        self.username = username
        self.shared = shared
        self.client = client
        self.sender = sender
        self._keys: asyncio.Queue[KeyPress] = asyncio.Queue()
        self._input_task: Optional[asyncio.Task] = None
        self._network_task: Optional[asyncio.Task] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="chat-body"):
            yield Static(id="page-list")
            yield Static(id="chat-log")
            yield Static(id="roster")
        yield Static(id="prompt")

    async def on_mount(self) -> None:
        self._input_task = asyncio.create_task(self._run_input())
        self._network_task = asyncio.create_task(self._run_network())

    async def on_unmount(self) -> None:
        for task in (self._input_task, self._network_task):
            if task and task is not asyncio.current_task():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    # ── Loops ────────────────────────────────────────────────────────────────

    async def _run_input(self) -> None:
        try:
            await handle_user(self.username, self.shared, self.sender, self._keys, self.redraw)
        except RenderError as e:
            logger.exception("unable to draw TUI")
            self.app.exit(return_code=1, message=f"Fatal error, unable to draw TUI: {e}")
            return
        self.app.exit()

    async def _run_network(self) -> None:
        try:
            await handle_network(self.client, self.shared)
        except Exception:
            logger.exception("network loop failed")
            await self.shared.add_err("Connection handler stopped; see the log file.")

    # ── Drawing ──────────────────────────────────────────────────────────────

    async def redraw(self, buffer: str) -> None:
        try:
            # The window reserves two rows, which are the pane's top and bottom border.
            chat_log = self.query_one("#chat-log", Static)
            snap = await self.shared.snapshot(chat_log.outer_size.height)
            self._paint(snap, buffer)
        except Exception as e:
            raise RenderError(f"{type(e).__name__}: {e}") from e

    def _paint(self, snap: Snapshot, buffer: str) -> None:
        pages = []
        for i, name in enumerate(snap.names):
            label = markup_escape(f"{i} {name}")
            if i == snap.current:
                pages.append(f"[bold magenta underline]>{label}[/bold magenta underline]")
            else:
                pages.append(f" {label}")
        self.query_one("#page-list", Static).update("\n".join(pages))

        chat_log = self.query_one("#chat-log", Static)
        if 0 <= snap.current < len(snap.names):
            chat_log.border_title = markup_escape(snap.names[snap.current])
        chat_log.update("\n".join(_render_line(line) for line in snap.lines))

        roster = self.query_one("#roster", Static)
        state = snap.roster_state
        roster.display = state is not RosterState.ABSENT
        if state is RosterState.POPULATED:
            roster.update("\n".join(markup_escape(member) for member in snap.roster))
        elif state is RosterState.EMPTY:
            roster.update("[dim](nobody online)[/dim]")

        self.query_one("#prompt", Static).update(
            f"[bold bright_magenta]({markup_escape(self.username)})> [/bold bright_magenta]"
            f"{markup_escape(buffer)}▌"
        )

    # ── Keys ─────────────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        press = translate_key(event.key, event.character)
        if press is not None:
            event.stop()
            event.prevent_default()
            self._keys.put_nowait(press)

    def action_feed_key(self, key: str) -> None:
        press = translate_key(key, None)
        if press is not None:
            self._keys.put_nowait(press)

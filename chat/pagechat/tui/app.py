"""Top-level Textual application."""
from __future__ import annotations

from textual.app import App
from textual.binding import Binding

from pagechat.instance import SharedInstance

from .chat_screen import ChatScreen


class PagechatApp(App):
    """pagechat terminal UI application."""

    TITLE = "pagechat"
    BINDINGS = [Binding("ctrl+q", "quit", "Quit")]

    def __init__(self, username: str, shared: SharedInstance, client, sender, **kwargs) -> None:
        super().__init__(**kwargs)
        self.username = username
        self.shared = shared
        self.client = client
        self.sender = sender

    def on_mount(self) -> None:
        self.push_screen(ChatScreen(self.username, self.shared, self.client, self.sender))

    async def on_unmount(self) -> None:
        await self.client.close()

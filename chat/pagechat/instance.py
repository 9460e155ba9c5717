from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator, Iterable, List, Optional, Set

from pagechat.config import HOME_PAGE_NAME, WELCOME_BANNER
from pagechat.errors import DuplicateName, IndexOutOfRange, PermissionDenied
from pagechat.models import Page, Snapshot, is_group
from pagechat.window import visible_range

HOME_INDEX = 0


class Instance:
    """The open pages of a session plus the index of the one on screen.

    Not safe to share between tasks on its own; go through ``SharedInstance``.
    """

    def __init__(self, pages: Optional[List[Page]] = None, current: int = 0) -> None:
        self.pages: List[Page] = list(pages or [])
        self.current = current

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.pages):
            raise IndexOutOfRange("The given index is not a valid index. Number too large.")

    def _find(self, name: str) -> Optional[int]:
        for i, page in enumerate(self.pages):
            if page.name == name:
                return i
        return None

    def _current_page(self) -> Page:
        return self.pages[self.current]

    # ── Pages ────────────────────────────────────────────────────────────────

    def add(self, page: Page) -> None:
        if self._find(page.name) is not None:
            raise DuplicateName(f"Already joined {page.name}")
        self.pages.append(page)

    def names(self) -> List[str]:
        if not self.pages:
            return [""]
        return [page.name for page in self.pages]

    def get_chat(self) -> List[str]:
        return list(self._current_page().lines)

    def get_name(self) -> str:
        return self._current_page().name

    def get_roster(self) -> Optional[List[str]]:
        roster = self._current_page().roster
        return None if roster is None else sorted(roster)

    def set_current(self, index: int) -> None:
        self._check_index(index)
        self.current = index

    def get_current(self) -> int:
        return self.current

    def next_page(self) -> None:
        if len(self.pages) > 1:
            self.current = (self.current + 1) % len(self.pages)

    def remove_current(self) -> str:
        """Close the current page and return its name.

        The home page can't be closed; quitting is ``:exit``.
        """
        index = self.current
        if index == HOME_INDEX:
            raise PermissionDenied("The home page cannot be closed. Use :exit to quit.")
        self.next_page()
        removed = self.pages.pop(index)
        if self.current > index:
            self.current -= 1
        return removed.name

    # ── Lines ────────────────────────────────────────────────────────────────

    def append_line(self, index: Optional[int], text: str) -> None:
        if index is None:
            index = self.current
        self._check_index(index)
        self.pages[index].lines.extend(text.splitlines() or [""])

    def add_err(self, error: str) -> None:
        self.append_line(None, f"[ERR]: {error}")

    def route_incoming(self, sender: str, target: str, text: str) -> None:
        """File an inbound message under its group, or under the sender for DMs."""
        name = target if is_group(target) else sender
        formatted = f"[{sender}]: {text}"
        index = self._find(name)
        if index is None:
            page = Page(name)
            page.lines.extend(formatted.splitlines())
            self.add(page)
        else:
            self.append_line(index, formatted)

    # ── Rosters ──────────────────────────────────────────────────────────────

    def add_roster_members(self, page_name: str, members: Iterable[str]) -> None:
        index = self._find(page_name)
        if index is None:
            return
        page = self.pages[index]
        if page.roster is None:
            page.roster = set()
        page.roster.update(members)

    def remove_roster_members(self, page_name: str, members: Iterable[str]) -> None:
        index = self._find(page_name)
        if index is None:
            return
        roster: Optional[Set[str]] = self.pages[index].roster
        if roster is not None:
            roster.difference_update(members)

    # ── Scrolling ────────────────────────────────────────────────────────────

    def scroll_up(self) -> None:
        self._current_page().scroll += 1

    def scroll_down(self) -> None:
        page = self._current_page()
        if page.scroll > 0:
            page.scroll -= 1

    def scroll_zero(self) -> None:
        self._current_page().scroll = 0

    def display_range(self, screen_len: int) -> range:
        """Clamp the current page's scroll for ``screen_len`` rows and return the lines to show."""
        page = self._current_page()
        shown, page.scroll = visible_range(len(page.lines), screen_len, page.scroll)
        return shown


def new_instance(home_name: str = HOME_PAGE_NAME) -> Instance:
    """A store holding only the home page, which is current."""
    instance = Instance()
    instance.add(Page(home_name, list(WELCOME_BANNER)))
    instance.set_current(HOME_INDEX)
    return instance


class SharedInstance:
    """Serialises access to an ``Instance`` shared by the input and network loops.

    Each coroutine holds the lock for one store operation only; nothing here
    awaits I/O while holding it.
    """

    def __init__(self, instance: Instance) -> None:
        self._instance = instance
        self._lock = asyncio.Lock()

    @contextlib.asynccontextmanager
    async def locked(self) -> AsyncIterator[Instance]:
        async with self._lock:
            yield self._instance

    async def add(self, page: Page) -> None:
        async with self._lock:
            self._instance.add(page)

    async def names(self) -> List[str]:
        async with self._lock:
            return self._instance.names()

    async def get_chat(self) -> List[str]:
        async with self._lock:
            return self._instance.get_chat()

    async def get_name(self) -> str:
        async with self._lock:
            return self._instance.get_name()

    async def get_roster(self) -> Optional[List[str]]:
        async with self._lock:
            return self._instance.get_roster()

    async def get_current(self) -> int:
        async with self._lock:
            return self._instance.get_current()

    async def set_current(self, index: int) -> None:
        async with self._lock:
            self._instance.set_current(index)

    async def next_page(self) -> None:
        async with self._lock:
            self._instance.next_page()

    async def remove_current(self) -> str:
        async with self._lock:
            return self._instance.remove_current()

    async def append_line(self, index: Optional[int], text: str) -> None:
        async with self._lock:
            self._instance.append_line(index, text)

    async def add_err(self, error: str) -> None:
        async with self._lock:
            self._instance.add_err(error)

    async def route_incoming(self, sender: str, target: str, text: str) -> None:
        async with self._lock:
            self._instance.route_incoming(sender, target, text)

    async def add_roster_members(self, page_name: str, members: Iterable[str]) -> None:
        async with self._lock:
            self._instance.add_roster_members(page_name, members)

    async def remove_roster_members(self, page_name: str, members: Iterable[str]) -> None:
        async with self._lock:
            self._instance.remove_roster_members(page_name, members)

    async def scroll_up(self) -> None:
        async with self._lock:
            self._instance.scroll_up()

    async def scroll_down(self) -> None:
        async with self._lock:
            self._instance.scroll_down()

    async def scroll_zero(self) -> None:
        async with self._lock:
            self._instance.scroll_zero()

    async def display_range(self, screen_len: int) -> range:
        async with self._lock:
            return self._instance.display_range(screen_len)

    async def snapshot(self, screen_len: int) -> Snapshot:
        """Gather what one frame needs through separate short reads.

        The current page may change between reads; the next frame corrects it.
        """
        lines = await self.get_chat()
        names = await self.names()
        current = await self.get_current()
        roster = await self.get_roster()
        shown = await self.display_range(screen_len)
        return Snapshot(names=names, current=current, lines=lines[shown.start:shown.stop], roster=roster)

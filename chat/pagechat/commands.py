"""User directives: parsing typed lines and running them against the session."""
from __future__ import annotations

import dataclasses
import logging
from typing import Union

from pagechat.errors import DuplicateName, PagechatError, TransportUnavailable
from pagechat.instance import HOME_INDEX, SharedInstance
from pagechat.models import Page, is_group
from pagechat.protocol import Join as JoinIntent
from pagechat.protocol import Leave, ListUsr, Msg

logger = logging.getLogger(__name__)

JOIN_PREFIX = ":join "


@dataclasses.dataclass(frozen=True)
class Message:
    text: str


@dataclasses.dataclass(frozen=True)
class ChangePage:
    index: int


@dataclasses.dataclass(frozen=True)
class Join:
    name: str


@dataclasses.dataclass(frozen=True)
class Close:
    pass


@dataclasses.dataclass(frozen=True)
class Exit:
    pass


@dataclasses.dataclass(frozen=True)
class Unknown:
    text: str


UserCommand = Union[Message, ChangePage, Join, Close, Exit, Unknown]


def parse_command(text: str) -> UserCommand:
    """Map one submitted input line to a command. Never raises."""
    if text.startswith(":exit"):
        return Exit()

    if text.startswith(JOIN_PREFIX) and len(text) > len(JOIN_PREFIX):
        return Join(text[len(JOIN_PREFIX):])

    if text in (":q", ":close"):
        return Close()

    if text.startswith(":"):
        number = text.strip(":")
        if number.isascii() and number.isdigit():
            return ChangePage(int(number))
        return Unknown(text)

    return Message(text)


async def run_command(
    username: str,
    command: UserCommand,
    shared: SharedInstance,
    sender,
) -> bool:
    """Apply ``command``; returns False when the session should end.

    ``sender`` is the outbound handle from ``Client.log_in``. Failures are
    reported as error lines on whichever page is current when they happen.
    """
    if isinstance(command, Exit):
        return False

    if isinstance(command, Message):
        await _send_message(username, command.text, shared, sender)

    elif isinstance(command, ChangePage):
        try:
            await shared.set_current(command.index)
        except PagechatError as e:
            await shared.add_err(str(e))

    elif isinstance(command, Join):
        await _join(command.name, shared, sender)

    elif isinstance(command, Close):
        try:
            name = await shared.remove_current()
            sender.send(Leave(name))
        except PagechatError as e:
            await shared.add_err(str(e))

    elif isinstance(command, Unknown):
        await shared.add_err(f"Unknown command: {command.text}")

    return True


async def _send_message(username: str, text: str, shared: SharedInstance, sender) -> None:
    async with shared.locked() as instance:
        on_home = instance.get_current() == HOME_INDEX
        target = instance.get_name()

    echo = f"({username})> {text}"
    # The home page is a local scratch area; nothing typed there leaves the client.
    if on_home or not text:
        await shared.append_line(None, echo)
        return

    try:
        sender.send(Msg(username, target, text))
    except TransportUnavailable as e:
        await shared.add_err(str(e))
        return
    logger.debug("queued message for %s", target)
    async with shared.locked() as instance:
        instance.append_line(None, echo)
        instance.scroll_zero()


async def _join(name: str, shared: SharedInstance, sender) -> None:
    try:
        sender.send(JoinIntent(name))
    except TransportUnavailable as e:
        await shared.add_err(f"Join command error: {e}")
        return

    if is_group(name):
        # The server answers a roster query with the group's online members.
        try:
            sender.send(ListUsr(name))
        except TransportUnavailable as e:
            await shared.add_err(f"ListUsr command error: {e}")

    try:
        await shared.add(Page(name, [f"Joined {name}!"]))
    except DuplicateName as e:
        await shared.add_err(str(e))

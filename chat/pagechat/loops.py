"""The two drivers of a session: keyboard input and the server connection."""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterable, Awaitable, Callable

from pagechat.commands import parse_command, run_command
from pagechat.config import INPUT_POLL_S
from pagechat.instance import SharedInstance
from pagechat.keys import KeyKind, KeyPress, LineEditor
from pagechat.protocol import ListUsr, ListUsrOperation, Msg, split_users
from pagechat.transport import Message, Received, ToSend

logger = logging.getLogger(__name__)

Redraw = Callable[[str], Awaitable[None]]


async def handle_user(
    username: str,
    shared: SharedInstance,
    sender,
    keys: "asyncio.Queue[KeyPress]",
    redraw: Redraw,
    poll_s: float = INPUT_POLL_S,
) -> None:
    """Run the input loop until the user exits.

    Waits at most ``poll_s`` for a key so the screen is redrawn regularly even
    when the user is idle. ``redraw`` receives the current input buffer;
    exceptions it raises end the loop.
    """
    editor = LineEditor()

    while True:
        try:
            key = await asyncio.wait_for(keys.get(), timeout=poll_s)
        except asyncio.TimeoutError:
            key = None

        if key is not None:
            kind = editor.feed(key)
            if kind is KeyKind.SUBMIT:
                command = parse_command(editor.take())
                logger.debug("user command %r", command)
                if not await run_command(username, command, shared, sender):
                    return
            elif kind is KeyKind.NEXT_PAGE:
                await shared.next_page()
            elif kind is KeyKind.SCROLL_UP:
                await shared.scroll_up()
            elif kind is KeyKind.SCROLL_DOWN:
                await shared.scroll_down()

        await redraw(editor.buffer)


async def handle_network(client: AsyncIterable[Message], shared: SharedInstance) -> None:
    """Apply server traffic to the pages until the connection closes."""
    async for message in client:
        if isinstance(message, ToSend):
            try:
                await client.send_cmd(message.command)
            except (OSError, ValueError) as e:
                logger.warning("send failed: %s", e)
                await shared.add_err(f"[✗] SERVER: {e}")
            continue

        if not isinstance(message, Received):
            continue
        cmd = message.command

        if isinstance(cmd, Msg):
            await shared.route_incoming(cmd.sender, cmd.target, cmd.text)

        elif isinstance(cmd, ListUsr):
            users = split_users(cmd.users)
            if cmd.op is ListUsrOperation.ADD:
                await shared.add_roster_members(cmd.group, users)
            else:
                await shared.remove_roster_members(cmd.group, users)

        else:
            await shared.append_line(None, str(cmd))

    await shared.add_err("Disconnected from server.")

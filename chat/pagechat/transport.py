from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import json
import logging
from typing import Any, Dict, Optional, Tuple, Union

from pagechat.config import LOGIN_TIMEOUT_S, MSG_MAX
from pagechat.errors import LoginFailed, TransportUnavailable
from pagechat.protocol import Command, decode_command, encode_command

logger = logging.getLogger(__name__)


def parse_hostport(s: str) -> Tuple[str, int]:
    if ":" not in s:
        raise ValueError("Expected host:port")
    host, port_s = s.rsplit(":", 1)
    return host, int(port_s)


async def write_frame(writer: asyncio.StreamWriter, obj: Dict[str, Any]) -> None:
    raw = (json.dumps(obj, separators=(",", ":")) + "\n").encode("utf-8")
    if len(raw) > MSG_MAX:
        raise ValueError("Frame too large")
    writer.write(raw)
    await writer.drain()


async def read_frame(reader: asyncio.StreamReader, timeout: Optional[float] = None) -> Dict[str, Any]:
    if timeout is None:
        line = await reader.readline()
    else:
        line = await asyncio.wait_for(reader.readline(), timeout=timeout)
    if not line:
        raise EOFError
    if len(line) > MSG_MAX:
        raise ValueError("Frame too large")
    data = json.loads(line.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Frame is not an object")
    return data


@dataclasses.dataclass(frozen=True)
class ToSend:
    """A command queued by the user side, waiting to be written to the server."""
    command: Command


@dataclasses.dataclass(frozen=True)
class Received:
    command: Command


Message = Union[ToSend, Received]


class Sender:
    """Outbound handle. ``send`` only queues; the network loop does the writing."""

    def __init__(self, queue: "asyncio.Queue[Optional[Message]]") -> None:
        self._queue = queue
        self._closed = False

    def send(self, command: Command) -> None:
        if self._closed:
            raise TransportUnavailable("Client died, nothing to do")
        self._queue.put_nowait(ToSend(command))

    def close(self) -> None:
        self._closed = True


class Client:
    """A logged-in server connection.

    Iterating the client yields, in arrival order, commands queued through the
    ``Sender`` and commands received from the server. Iteration ends when the
    server closes the connection.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, username: str) -> None:
        self.username = username
        self._reader = reader
        self._writer = writer
        self._queue: asyncio.Queue[Optional[Message]] = asyncio.Queue()
        self.sender = Sender(self._queue)
        self._read_task: Optional[asyncio.Task] = None

    @classmethod
    async def log_in(cls, username: str, password: str, addr: str) -> Tuple[Client, Sender]:
        host, port = parse_hostport(addr)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=LOGIN_TIMEOUT_S
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise LoginFailed(f"cannot connect to {addr}: {e}") from e

        try:
            await write_frame(writer, {"t": "LOGIN", "user": username, "password": password})
            reply = await read_frame(reader, timeout=LOGIN_TIMEOUT_S)
        except (OSError, EOFError, ValueError, asyncio.TimeoutError) as e:
            writer.close()
            raise LoginFailed(f"no login reply from {addr}: {type(e).__name__}") from e

        if reply.get("t") != "OK":
            writer.close()
            raise LoginFailed(str(reply.get("err", "login rejected")))

        client = cls(reader, writer, username)
        client.start()
        logger.info("logged in as %s at %s", username, addr)
        return client, client.sender

    def start(self) -> None:
        if self._read_task is None:
            self._read_task = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        try:
            while True:
                frame = await read_frame(self._reader)
                self._queue.put_nowait(Received(decode_command(frame)))
        except EOFError:
            logger.info("server closed the connection")
        except (OSError, ValueError) as e:
            logger.warning("connection lost: %s", e)
        finally:
            self.sender.close()
            self._queue.put_nowait(None)

    def __aiter__(self) -> Client:
        return self

    async def __anext__(self) -> Message:
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def send_cmd(self, command: Command) -> None:
        await write_frame(self._writer, encode_command(command))

    async def close(self) -> None:
        self.sender.close()
        if self._read_task:
            self._read_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._read_task
        self._writer.close()
        with contextlib.suppress(OSError):
            await self._writer.wait_closed()

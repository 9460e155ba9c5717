"""Wire intents exchanged with the server and their JSON frame encoding."""
from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any, Dict, List, Union


class ListUsrOperation(enum.Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclasses.dataclass(frozen=True)
class Msg:
    sender: str
    target: str
    text: str


@dataclasses.dataclass(frozen=True)
class Join:
    name: str

    def __str__(self) -> str:
        return f"{self.name} joined"


@dataclasses.dataclass(frozen=True)
class Leave:
    name: str

    def __str__(self) -> str:
        return f"{self.name} left"


@dataclasses.dataclass(frozen=True)
class ListUsr:
    # As a request only ``group`` matters; the server answers with ``users``
    # as a newline-delimited list.
    group: str
    op: ListUsrOperation = ListUsrOperation.ADD
    users: str = ""


@dataclasses.dataclass(frozen=True)
class Info:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclasses.dataclass(frozen=True)
class ServerError:
    err: str

    def __str__(self) -> str:
        return f"SERVER ERROR: {self.err}"


Command = Union[Msg, Join, Leave, ListUsr, Info, ServerError]


def encode_command(cmd: Command) -> Dict[str, Any]:
    if isinstance(cmd, Msg):
        return {"t": "MSG", "from": cmd.sender, "to": cmd.target, "text": cmd.text}
    if isinstance(cmd, Join):
        return {"t": "JOIN", "name": cmd.name}
    if isinstance(cmd, Leave):
        return {"t": "LEAVE", "name": cmd.name}
    if isinstance(cmd, ListUsr):
        return {"t": "LISTUSR", "group": cmd.group, "op": cmd.op.value, "users": cmd.users}
    if isinstance(cmd, Info):
        return {"t": "INFO", "text": cmd.text}
    if isinstance(cmd, ServerError):
        return {"t": "ERROR", "err": cmd.err}
    raise TypeError(f"Not a protocol command: {cmd!r}")


def decode_command(data: Dict[str, Any]) -> Command:
    """Turn a received frame into a command; unrecognised frames become ``Info``."""
    kind = data.get("t")
    if kind == "MSG":
        return Msg(str(data.get("from", "")), str(data.get("to", "")), str(data.get("text", "")))
    if kind == "JOIN":
        return Join(str(data.get("name", "")))
    if kind == "LEAVE":
        return Leave(str(data.get("name", "")))
    if kind == "LISTUSR":
        try:
            op = ListUsrOperation(str(data.get("op", "add")))
        except ValueError:
            return Info(json.dumps(data, separators=(",", ":"), sort_keys=True))
        return ListUsr(str(data.get("group", "")), op, str(data.get("users", "")))
    if kind == "INFO":
        return Info(str(data.get("text", "")))
    if kind == "ERROR":
        return ServerError(str(data.get("err", "")))
    return Info(json.dumps(data, separators=(",", ":"), sort_keys=True))


def split_users(users: str) -> List[str]:
    """Split a newline-delimited member list, dropping empty segments."""
    return [u for u in users.split("\n") if u]

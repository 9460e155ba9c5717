from __future__ import annotations

import dataclasses
import enum
from typing import Collection, List, Optional, Set

from pagechat.config import GROUP_PREFIX


def is_group(name: str) -> bool:
    return name.startswith(GROUP_PREFIX)


class RosterState(enum.Enum):
    ABSENT = "absent"        # not a group, or never queried
    EMPTY = "empty"
    POPULATED = "populated"

    @classmethod
    def of(cls, roster: Optional[Collection[str]]) -> "RosterState":
        if roster is None:
            return cls.ABSENT
        return cls.POPULATED if roster else cls.EMPTY


@dataclasses.dataclass
class Page:
    name: str
    lines: List[str] = dataclasses.field(default_factory=list)
    scroll: int = 0  # lines scrolled up from the bottom; 0 = pinned to latest
    roster: Optional[Set[str]] = None

    @property
    def roster_state(self) -> RosterState:
        return RosterState.of(self.roster)


@dataclasses.dataclass
class Snapshot:
    """One frame's worth of store state, gathered through separate reads."""
    names: List[str]
    current: int
    lines: List[str]
    roster: Optional[List[str]]

    @property
    def roster_state(self) -> RosterState:
        return RosterState.of(self.roster)

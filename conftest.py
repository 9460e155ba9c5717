"""Shared fixtures for pagechat tests."""

import pytest

from pagechat.errors import TransportUnavailable
from pagechat.instance import SharedInstance, new_instance
from pagechat.models import Page


class FakeSender:
    """Records outbound commands; raises like a dead client when ``fail`` is set."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, command):
        if self.fail:
            raise TransportUnavailable("Client died, nothing to do")
        self.sent.append(command)


class FakeClient:
    """Stands in for ``transport.Client``: yields queued messages, records writes."""

    def __init__(self, messages=(), fail_writes=False):
        self._messages = list(messages)
        self.written = []
        self.fail_writes = fail_writes
        self.closed = False

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for message in self._messages:
            yield message

    async def send_cmd(self, command):
        if self.fail_writes:
            raise OSError("broken pipe")
        self.written.append(command)

    async def close(self):
        self.closed = True


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def instance():
    return new_instance()


@pytest.fixture
def shared(instance):
    return SharedInstance(instance)


def make_instance(*names):
    """Home page plus one page per name, home current."""
    inst = new_instance()
    for name in names:
        inst.add(Page(name))
    return inst


@pytest.fixture
def three_pages():
    return make_instance("alice", "#team")

"""Shared fixtures for Arena tests."""

import random

import pytest

from arena.core import protocol
from arena.core.context import ServerContext
from arena.utils.config import Config


class FakeConnection:
    """Stands in for a client socket and records everything sent to it."""

    def __init__(self):
        self.received = bytearray()
        self.closed = False
        self.broken = False

    def send(self, data: bytes) -> None:
        if not self.closed:
            self.received += data

    def close(self) -> None:
        self.closed = True

    @property
    def text(self) -> str:
        return self.received.decode("utf-8")

    def take(self) -> str:
        """Return everything received so far and forget it."""
        text = self.text
        self.received.clear()
        return text


class FailingConnection(FakeConnection):
    """A connection whose writes always fail."""

    def send(self, data: bytes) -> None:
        raise ConnectionResetError("peer reset")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedRandom(random.Random):
    """Returns queued values from randint, then the low end of each range."""

    def __init__(self, *values: int):
        super().__init__(0)
        self.queue = list(values)

    def push(self, *values: int) -> None:
        self.queue.extend(values)

    def randint(self, a: int, b: int) -> int:
        if self.queue:
            value = self.queue.pop(0)
            assert a <= value <= b, f"scripted {value} outside [{a}, {b}]"
            return value
        return a


# Core fixtures
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def config():
    return Config(tick_seconds=None)


@pytest.fixture
def ctx(config, clock, rng):
    """A server context with a fake clock and scripted dice."""
    return ServerContext(config=config, clock=clock, rng=rng)


@pytest.fixture
def feed(ctx):
    """Type text into a session one byte at a time."""

    def _feed(session, text: str) -> None:
        for byte in text.encode("utf-8"):
            protocol.handle_byte(ctx, session, byte)

    return _feed


@pytest.fixture
def connect(ctx):
    """Open a new fake connection and return (session, connection)."""

    def _connect(peer: str = "127.0.0.1:40000"):
        connection = FakeConnection()
        session = protocol.connect(ctx, connection, peer)
        return session, connection

    return _connect


@pytest.fixture
def join(connect, feed):
    """Connect and enter a name, returning (session, connection)."""

    def _join(name: str):
        session, connection = connect()
        feed(session, name + "\n")
        return session, connection

    return _join


@pytest.fixture
def battle(join):
    """Ann waits, Bo joins and is matched with her. With default dice Bo goes first.

    Both start with 20 hitpoints and 1 power move. Output buffers are cleared.
    """
    ann, ann_conn = join("Ann")
    bo, bo_conn = join("Bo")
    ann_conn.take()
    bo_conn.take()
    return ann, ann_conn, bo, bo_conn

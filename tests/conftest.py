"""Shared fixtures: in-memory peer channel, SFR bank and SPI device."""

from collections import deque
from collections.abc import Callable

import pytest

from simio.core.sfr import SfrBank
from simio.devices.spi import SPI


class FakeChannel:
    """In-memory request-reply channel.

    Each send() queues a request; each receive() answers the oldest
    queued request through ``peer``. Receiving with no request queued
    fails the test, since a real REQ socket would block forever.
    """

    def __init__(self, peer: Callable[[int], int] = lambda b: b,
                 endpoint: str = "inproc://fake") -> None:
        self.peer = peer
        self.endpoint = endpoint
        self.pending: deque[int] = deque()
        self.sent: list[int] = []
        self.receives = 0
        self.released = False
        self.unreachable: set[str] = {"bad://uri"}

    def send(self, value: int) -> None:
        assert not self.released
        self.sent.append(value)
        self.pending.append(value)

    def receive(self) -> int:
        assert not self.released
        assert self.pending, "receive() without an outstanding request"
        self.receives += 1
        return self.peer(self.pending.popleft()) & 0xFF

    def reconfigure(self, endpoint: str) -> bool:
        if endpoint in self.unreachable:
            return False
        self.endpoint = endpoint
        self.pending.clear()
        return True

    def describe(self) -> str:
        return self.endpoint

    def release(self) -> None:
        self.released = True


@pytest.fixture
def sfr() -> SfrBank:
    return SfrBank()


@pytest.fixture
def channel() -> FakeChannel:
    """Channel whose peer answers 0x5A to every request."""
    return FakeChannel(peer=lambda b: 0x5A)


@pytest.fixture
def spi(sfr: SfrBank, channel: FakeChannel) -> SPI:
    return SPI(sfr, channel)


@pytest.fixture
def make_channel():
    """Factory fixture: returns a function that builds a FakeChannel."""
    def _make(peer: Callable[[int], int] = lambda b: b,
              endpoint: str = "inproc://fake") -> FakeChannel:
        return FakeChannel(peer=peer, endpoint=endpoint)
    return _make

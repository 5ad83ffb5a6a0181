"""Reference SPI peer: answers single-byte requests on a ZeroMQ REP socket."""

from __future__ import annotations

from collections.abc import Callable
from itertools import cycle

import zmq
from rich.console import Console

Responder = Callable[[int], int]


def echo(value: int) -> int:
    """Reply with the request byte."""
    return value


def invert(value: int) -> int:
    """Reply with the bitwise complement of the request byte."""
    return ~value & 0xFF


def scripted(replies: bytes) -> Responder:
    """Reply with the given bytes in order, repeating from the start."""
    if not replies:
        raise ValueError("scripted responder needs at least one reply byte")
    source = cycle(replies)
    return lambda _value: next(source)


def serve(sock: zmq.Socket, responder: Responder, count: int | None = None,
          console: Console | None = None) -> int:
    """Answer requests on a bound REP socket.

    Args:
        sock: A REP socket that is already bound or connected.
        responder: Maps each request byte to its reply byte.
        count: Stop after this many exchanges (None runs forever).
        console: Optional console to log each exchange on.

    Returns:
        The number of exchanges served.

    Raises:
        ValueError: If a request frame is not exactly one byte.
    """
    served = 0
    while count is None or served < count:
        frame = sock.recv()
        if len(frame) != 1:
            raise ValueError(f"expected a 1-byte request, got {len(frame)} bytes")
        reply = responder(frame[0]) & 0xFF
        sock.send(bytes([reply]))
        served += 1
        if console is not None:
            console.print(f"0x{frame[0]:02x} -> 0x{reply:02x}")
    return served


def run_peer(endpoint: str, responder: Responder, count: int | None = None,
             console: Console | None = None) -> int:
    """Bind a REP socket at endpoint and serve requests until count is reached."""
    context = zmq.Context.instance()
    sock = context.socket(zmq.REP)
    sock.setsockopt(zmq.LINGER, 0)
    try:
        sock.bind(endpoint)
        return serve(sock, responder, count, console)
    finally:
        sock.close()

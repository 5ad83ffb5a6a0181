"""Request-reply byte channel to an external peer process.

The production channel is a ZeroMQ REQ socket. Every send() is one
request frame holding a single byte; every receive() consumes the
single-byte reply frame. Both calls block without a timeout, so a
silent peer stalls the simulator until it answers.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import zmq

DEFAULT_CHANNEL = "UCB0"


class TransportError(OSError):
    """The peer channel could not be opened or failed mid-exchange."""


def default_endpoint(channel: str) -> str:
    """Return the IPC endpoint used for a logical channel name."""
    return f"ipc:///tmp/simio_{channel}.sock"


@runtime_checkable
class Channel(Protocol):
    """Duplex request-reply channel carrying one byte per message."""

    def send(self, value: int) -> None:
        """Send one request byte. Does not wait for the reply."""
        ...

    def receive(self) -> int:
        """Block until the reply to the last request arrives."""
        ...

    def reconfigure(self, endpoint: str) -> bool:
        """Switch to a new endpoint. Returns False and keeps the old one on failure."""
        ...

    def describe(self) -> str:
        """Return the endpoint the channel is attached to."""
        ...

    def release(self) -> None:
        """Close the channel."""
        ...


def _open_req(context: zmq.Context, endpoint: str) -> zmq.Socket:
    """Create a REQ socket attached to endpoint.

    The endpoint may list several addresses separated by commas. Each
    address may be prefixed with '@' to bind or '>' to connect; plain
    addresses connect.

    Raises:
        TransportError: If the socket cannot be attached.
    """
    addresses = [a.strip() for a in endpoint.split(",") if a.strip()]
    if not addresses:
        raise TransportError(f"empty endpoint: '{endpoint}'")

    sock = context.socket(zmq.REQ)
    sock.setsockopt(zmq.LINGER, 0)
    # A request abandoned by a reset must not wedge the socket, and the
    # stale reply to it must not be read as the answer to a later request.
    sock.setsockopt(zmq.REQ_RELAXED, 1)
    sock.setsockopt(zmq.REQ_CORRELATE, 1)
    try:
        for addr in addresses:
            if addr.startswith("@"):
                sock.bind(addr[1:])
            elif addr.startswith(">"):
                sock.connect(addr[1:])
            else:
                sock.connect(addr)
    except zmq.ZMQError as e:
        sock.close()
        raise TransportError(f"cannot attach to '{endpoint}': {e}") from e
    return sock


class ZmqChannel:
    """Channel backed by a ZeroMQ REQ socket."""

    def __init__(self, endpoint: str, context: zmq.Context | None = None) -> None:
        self._context = context if context is not None else zmq.Context.instance()
        self._sock: zmq.Socket | None = _open_req(self._context, endpoint)
        self._endpoint = endpoint

    def _socket(self) -> zmq.Socket:
        if self._sock is None:
            raise TransportError("channel has been released")
        return self._sock

    def send(self, value: int) -> None:
        """Send a single byte as one request frame."""
        sock = self._socket()
        try:
            sock.send(bytes([value & 0xFF]))
        except zmq.ZMQError as e:
            raise TransportError(f"send to '{self._endpoint}' failed: {e}") from e

    def receive(self) -> int:
        """Receive the single-byte reply frame."""
        sock = self._socket()
        try:
            frame = sock.recv()
        except zmq.ZMQError as e:
            raise TransportError(f"receive from '{self._endpoint}' failed: {e}") from e
        if len(frame) != 1:
            raise TransportError(
                f"expected a 1-byte reply from '{self._endpoint}', got {len(frame)} bytes"
            )
        return frame[0]

    def reconfigure(self, endpoint: str) -> bool:
        """Attach to a new endpoint, closing the old socket only on success."""
        try:
            new_sock = _open_req(self._context, endpoint)
        except TransportError:
            return False
        if self._sock is not None:
            self._sock.close()
        self._sock = new_sock
        self._endpoint = endpoint
        return True

    def describe(self) -> str:
        return self._endpoint

    def release(self) -> None:
        """Close the socket. Further calls are no-ops."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

"""Thin non-blocking socket wrappers."""

from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)


def create_listener(host: str, port: int, backlog: int = 5) -> socket.socket:
    """Bind a non-blocking listening socket. Raises OSError on failure."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    sock.setblocking(False)
    return sock


def format_peer(addr) -> str:
    if isinstance(addr, tuple) and len(addr) >= 2:
        return f"{addr[0]}:{addr[1]}"
    return str(addr)


class Connection:
    """One client socket with a buffered, never-blocking writer.

    Writes that the kernel can't take right away stay in ``outbox`` until the
    event loop sees the socket writable. A failed write marks the connection
    ``broken``; the loop disconnects broken connections at the end of the
    round rather than in the middle of whatever was sending.
    """

    def __init__(self, sock: socket.socket, peer: str = "") -> None:
        sock.setblocking(False)
        self.sock = sock
        self.peer = peer
        self.outbox = bytearray()
        self.broken = False
        self.closed = False
        self.events = 0  # selector interest currently registered

    def fileno(self) -> int:
        return self.sock.fileno()

    @property
    def wants_write(self) -> bool:
        return bool(self.outbox) and not self.broken and not self.closed

    def send(self, data: bytes) -> None:
        if self.closed or self.broken:
            return
        self.outbox += data
        self.flush()

    def flush(self) -> None:
        """Write as much of the outbox as the socket accepts without blocking."""
        while self.outbox and not self.broken:
            try:
                sent = self.sock.send(self.outbox)
            except (BlockingIOError, InterruptedError):
                return
            except OSError as exc:
                logger.warning("Write to %s failed: %s", self.peer, exc)
                self.broken = True
                self.outbox.clear()
                return
            del self.outbox[:sent]

    def recv_byte(self) -> bytes | None:
        """Read a single byte.

        Returns ``b""`` on a clean close and None when nothing is ready.
        Other socket errors propagate.
        """
        try:
            return self.sock.recv(1)
        except (BlockingIOError, InterruptedError):
            return None

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.outbox.clear()
        self.sock.close()

"""Single-threaded readiness loop.

Every round waits on the listener and all client sockets, then does a
bounded amount of work for each ready one: accept a connection, read exactly
one byte, or flush pending output. One chatty client therefore can't starve
the others, and no lock is ever needed because nothing else touches the
sessions.
"""

from __future__ import annotations

import logging
import selectors
import socket

from arena.core import protocol
from arena.core.context import ServerContext
from arena.core.session import Session
from arena.core.timer import sweep
from arena.server.transport import Connection, format_peer

logger = logging.getLogger(__name__)


class EventLoop:
    """Multiplexes the listener and every client connection."""

    def __init__(self, ctx: ServerContext, listener: socket.socket) -> None:
        self.ctx = ctx
        self.listener = listener
        self.selector = selectors.DefaultSelector()
        self.selector.register(listener, selectors.EVENT_READ, data=None)
        self.running = False
        self._closed = False

    def run(self) -> None:
        """Serve until interrupted, then close everything."""
        self.running = True
        try:
            while self.running:
                self.step(self.ctx.config.tick_seconds)
        except KeyboardInterrupt:
            logger.info("Shutting down")
        finally:
            self.close()

    def stop(self) -> None:
        self.running = False

    def step(self, timeout: float | None = None) -> int:
        """Run one readiness round. Returns the number of ready sockets handled."""
        events = self.selector.select(timeout)
        for key, mask in events:
            if key.data is None:
                self._accept()
                continue
            session: Session = key.data
            if session.sid not in self.ctx.registry:
                continue  # dropped earlier in this round
            if mask & selectors.EVENT_READ:
                self._read(session)
            if mask & selectors.EVENT_WRITE and session.connection is not None:
                session.connection.flush()

        if self.ctx.config.tick_seconds is not None:
            fired = sweep(self.ctx)
            if fired:
                logger.debug("Expired %d idle turn(s)", fired)

        self._reap_broken()
        self._update_interest()
        return len(events)

    def _accept(self) -> None:
        try:
            sock, addr = self.listener.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            logger.warning("Accept failed: %s", exc)
            return

        connection = Connection(sock, format_peer(addr))
        session = protocol.connect(self.ctx, connection, connection.peer)
        connection.events = selectors.EVENT_READ
        self.selector.register(sock, connection.events, data=session)

    def _read(self, session: Session) -> None:
        connection = session.connection
        try:
            data = connection.recv_byte()
        except OSError as exc:
            logger.warning("Read from %s failed: %s", session.peer, exc)
            self.drop(session)
            return
        if data is None:
            return
        if not data:
            self.drop(session)
            return
        protocol.handle_byte(self.ctx, session, data[0])

    def drop(self, session: Session) -> None:
        """Unregister a session's socket and run the disconnect protocol."""
        connection = session.connection
        if connection is not None and not connection.closed:
            try:
                self.selector.unregister(connection.sock)
            except (KeyError, ValueError):
                pass
        protocol.disconnect(self.ctx, session)

    def _reap_broken(self) -> None:
        # Dropping one player can make writes to others fail, so repeat
        while True:
            broken = [
                s for s in self.ctx.registry
                if s.connection is not None and s.connection.broken
            ]
            if not broken:
                return
            for session in broken:
                if session.sid in self.ctx.registry:
                    self.drop(session)

    def _update_interest(self) -> None:
        for session in self.ctx.registry:
            connection = session.connection
            if connection is None or connection.closed:
                continue
            events = selectors.EVENT_READ
            if connection.wants_write:
                events |= selectors.EVENT_WRITE
            if events != connection.events:
                self.selector.modify(connection.sock, events, data=session)
                connection.events = events

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for session in self.ctx.registry:
            connection = session.connection
            if connection is None:
                continue
            try:
                self.selector.unregister(connection.sock)
            except (KeyError, ValueError):
                pass
            connection.close()
            self.ctx.registry.remove(session.sid)
        try:
            self.selector.unregister(self.listener)
        except (KeyError, ValueError):
            pass
        self.selector.close()
        self.listener.close()

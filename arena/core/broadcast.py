"""Arena-wide announcements."""

from __future__ import annotations

import logging

from arena.core.registry import Registry
from arena.core.session import Session

logger = logging.getLogger(__name__)


def broadcast(registry: Registry, message: str, exclude: Session | None = None) -> int:
    """Send ``message`` to every named session with a live connection.

    A failing recipient is logged and skipped; the rest still get the
    message. Returns the number of sessions the message was queued for.
    """
    delivered = 0
    for session in registry.named():
        if exclude is not None and session.sid == exclude.sid:
            continue
        if session.connection is None:
            continue
        try:
            session.send(message)
        except OSError as exc:
            logger.warning("Broadcast to %s failed: %s", session.name, exc)
            continue
        delivered += 1
    return delivered

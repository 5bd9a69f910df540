"""Opponent selection."""

from __future__ import annotations

from arena.core.registry import Registry
from arena.core.session import Session


def is_eligible(player: Session, candidate: Session) -> bool:
    """Whether ``candidate`` may be paired with ``player`` right now.

    Players who just fought each other are never re-paired immediately, in
    either direction, even when nobody else is around.
    """
    return (
        candidate.sid != player.sid
        and not candidate.in_battle
        and candidate.name_confirmed
        and player.last_opponent != candidate.sid
        and candidate.last_opponent != player.sid
    )


def find_opponent(registry: Registry, player: Session) -> Session | None:
    """Return the first eligible opponent in registry order, or None."""
    for candidate in registry:
        if is_eligible(player, candidate):
            return candidate
    return None

"""Turn deadlines.

Deadlines are polled, never pushed: they are checked whenever either
participant's input is processed, and by ``sweep`` when the event loop wakes
up on its tick. Only the active player carries a deadline, so an expiry can
fire at most once per turn no matter which side notices it.
"""

from __future__ import annotations

import logging

from arena.core import messages
from arena.core.battle import BattleEngine
from arena.core.context import ServerContext
from arena.core.session import Session

logger = logging.getLogger(__name__)


def check_expiry(ctx: ServerContext, session: Session) -> bool:
    """Force a turn switch if the active player of ``session``'s battle ran out of time."""
    if not session.in_battle:
        return False
    opponent = ctx.opponent_of(session)
    if opponent is None:
        return False
    active, waiting = (session, opponent) if session.is_turn else (opponent, session)
    if not active.turn_expired(ctx.now()):
        return False
    force_switch(ctx, active, waiting)
    return True


def force_switch(ctx: ServerContext, expired: Session, following: Session) -> None:
    """Give the turn away with zero damage dealt."""
    expired.send(messages.times_up_self())
    following.send(messages.times_up_opponent(expired.name))
    expired.clear_chat()
    logger.debug("%s ran out of time, turn passes to %s", expired.name, following.name)
    BattleEngine.pass_turn(ctx, expired, following)


def sweep(ctx: ServerContext) -> int:
    """Expire every overdue turn in the arena. Returns how many fired."""
    fired = 0
    for session in ctx.registry:
        if session.in_battle and session.is_turn and check_expiry(ctx, session):
            fired += 1
    return fired

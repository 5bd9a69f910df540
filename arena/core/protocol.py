"""Per-byte protocol dispatch.

The protocol is character oriented: every byte a client sends is handled on
its own, so many half-typed names and messages can be in flight at once.
Bytes that make no sense in the current state are silently ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from arena.core import messages
from arena.core.battle import CR, LF, AttackKind, BattleEngine
from arena.core.broadcast import broadcast
from arena.core.context import ServerContext
from arena.core.session import Session, SessionState
from arena.core.timer import check_expiry

logger = logging.getLogger(__name__)

ATTACK = ord("a")
POWER_MOVE = ord("p")
SPEAK = ord("s")
TIME_LEFT = ord("t")


def connect(ctx: ServerContext, connection: Any, peer: str = "") -> Session:
    """Register a new connection and greet it."""
    session = ctx.new_session(connection, peer)
    session.send(messages.WELCOME)
    logger.info("New connection from %s", peer or "unknown peer")
    return session


def handle_byte(ctx: ServerContext, session: Session, byte: int) -> None:
    """Feed one byte of client input into the session's state machine."""
    if session.state == SessionState.AWAITING_NAME:
        _handle_name_byte(ctx, session, byte)
    elif session.state == SessionState.IN_BATTLE:
        _handle_battle_byte(ctx, session, byte)
    # Waiting players have nothing to say


def _handle_name_byte(ctx: ServerContext, session: Session, byte: int) -> None:
    if byte == CR:
        return
    if byte != LF:
        session.add_name_byte(byte, ctx.config.max_name_len)
        return

    name = session.pending_name()
    if not name:
        session.name_buffer = b""
        session.send(messages.NAME_EMPTY)
        return
    if ctx.registry.find_by_name(name) is not None:
        session.name_buffer = b""
        session.send(messages.NAME_TAKEN)
        return

    # Announce before confirming so the newcomer doesn't hear about themselves
    broadcast(ctx.registry, messages.entered_arena(name))
    session.confirm_name()
    logger.info("%s (%s) has joined the arena", session.name, session.peer)
    BattleEngine.seek_match(ctx, session)


def _handle_battle_byte(ctx: ServerContext, session: Session, byte: int) -> None:
    if check_expiry(ctx, session):
        return
    if session.chat_mode:
        BattleEngine.chat_byte(ctx, session, byte)
        return
    if byte == TIME_LEFT:
        BattleEngine.query_time(ctx, session)
        return
    if not session.is_turn:
        return

    if byte == ATTACK:
        BattleEngine.resolve_attack(ctx, session, AttackKind.BASIC)
    elif byte == POWER_MOVE:
        BattleEngine.resolve_attack(ctx, session, AttackKind.POWER)
    elif byte == SPEAK:
        BattleEngine.enter_chat(ctx, session)


def disconnect(ctx: ServerContext, session: Session) -> None:
    """Tear down a session whose connection went away.

    A battle in progress is forfeited to the opponent, who is then rematched
    straight away if anyone is free.
    """
    logger.info("Connection from %s disconnected", session.peer or session.sid)
    survivor = BattleEngine.forfeit(ctx, session)

    if session.name_confirmed:
        broadcast(ctx.registry, messages.left_arena(session.name), exclude=session)

    for other in ctx.registry:
        if other.last_opponent == session.sid:
            other.last_opponent = None
    ctx.registry.remove(session.sid)

    connection, session.connection = session.connection, None
    if connection is not None:
        connection.close()

    if survivor is not None and survivor.sid in ctx.registry:
        BattleEngine.seek_match(ctx, survivor)

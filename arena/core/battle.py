"""Turn-based battle state machine.

Handles the full lifecycle of a battle between two sessions:
    match -> alternate turns -> defeat or forfeit -> back to the lobby

A battle has no object of its own; its state lives on the two paired
sessions (hitpoints, power moves, whose turn it is and the turn deadline).
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel

from arena.core import messages
from arena.core.broadcast import broadcast
from arena.core.context import ServerContext
from arena.core.matchmaker import find_opponent
from arena.core.session import Session, SessionState

logger = logging.getLogger(__name__)

CR = 0x0D
LF = 0x0A


class AttackKind(str, Enum):
    """Offensive actions a player can take on their turn."""

    BASIC = "basic"
    POWER = "power"


class AttackResult(BaseModel):
    """Outcome of a single attack, mostly for callers and tests."""

    kind: AttackKind
    damage: int = 0
    missed: bool = False
    refused: bool = False  # Power move with none left, nothing happened
    winner_sid: int | None = None
    loser_sid: int | None = None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class BattleEngine:
    """Stateless battle rules. Every method mutates the sessions it is given."""

    @staticmethod
    def roll_damage(ctx: ServerContext, kind: AttackKind) -> int:
        """Roll damage for an attack.

        Basic attacks deal 2-6. Power moves hit on a coin flip for three
        times that (6-18) and deal nothing otherwise.
        """
        low, high = ctx.config.attack_damage_range
        if kind == AttackKind.BASIC:
            return ctx.rng.randint(low, high)
        if ctx.rng.randint(0, 1) == 0:
            return ctx.config.power_multiplier * ctx.rng.randint(low, high)
        return 0

    # -- matchmaking --------------------------------------------------------

    @staticmethod
    def start_match(ctx: ServerContext, first: Session, second: Session) -> None:
        """Pair two sessions and give one of them (at random) the first turn."""
        cfg = ctx.config
        for player, other in ((first, second), (second, first)):
            player.reset_for_battle(
                hitpoints=ctx.rng.randint(*cfg.hitpoints_range),
                powermoves=ctx.rng.randint(*cfg.powermoves_range),
                opponent=other.sid,
            )

        starter = first if ctx.rng.randint(0, 1) == 0 else second
        starter.begin_turn(ctx.now(), cfg.turn_seconds)

        notice = messages.match_started(cfg.turn_seconds)
        first.send(notice)
        second.send(notice)
        for player, other in ((first, second), (second, first)):
            player.send(messages.matched_with(other.name, first=player is starter))
        for player, other in ((first, second), (second, first)):
            player.send(messages.status_prompt(player.hitpoints, player.powermoves, other.hitpoints))

        logger.info(
            "Match started: %s (%d hp) vs %s (%d hp), %s goes first",
            first.name, first.hitpoints, second.name, second.hitpoints, starter.name,
        )

    @staticmethod
    def seek_match(ctx: ServerContext, player: Session) -> Session | None:
        """Start a match for ``player`` if anyone is eligible, else park them."""
        opponent = find_opponent(ctx.registry, player)
        if opponent is None:
            player.state = SessionState.WAITING
            player.send(messages.AWAITING_OPPONENT)
            return None
        BattleEngine.start_match(ctx, player, opponent)
        return opponent

    # -- turns --------------------------------------------------------------

    @staticmethod
    def pass_turn(ctx: ServerContext, current: Session, following: Session) -> None:
        """Hand the turn from ``current`` to ``following`` and prompt both."""
        current.end_turn()
        following.begin_turn(ctx.now(), ctx.config.turn_seconds)
        following.send(
            messages.turn_prompt(
                following.hitpoints, following.powermoves, current.name, current.hitpoints
            )
        )
        current.send(messages.waiting_for(following.name))

    @staticmethod
    def resolve_attack(ctx: ServerContext, actor: Session, kind: AttackKind) -> AttackResult:
        """Resolve ``actor``'s attack against their opponent.

        Either ends the battle or passes the turn. A power move with none
        left only sends a refusal and keeps the turn.
        """
        opponent = ctx.opponent_of(actor)
        if opponent is None or not actor.is_turn:
            return AttackResult(kind=kind, refused=True)

        if kind == AttackKind.POWER:
            if actor.powermoves <= 0:
                actor.send(messages.NO_POWER_MOVES)
                return AttackResult(kind=kind, refused=True)
            actor.powermoves -= 1

        damage = opponent.take_damage(BattleEngine.roll_damage(ctx, kind))
        actor.send(messages.you_attacked(opponent.name, damage))
        opponent.send(messages.attacked_you(actor.name, damage))

        missed = kind == AttackKind.POWER and damage == 0
        if missed:
            actor.send(messages.YOUR_POWER_MOVE_MISSED)
            opponent.send(messages.power_move_missed(actor.name))

        result = AttackResult(kind=kind, damage=damage, missed=missed)

        loser = None
        if opponent.is_defeated:
            loser, winner = opponent, actor
        elif actor.is_defeated:
            loser, winner = actor, opponent
        if loser is not None:
            result.winner_sid = winner.sid
            result.loser_sid = loser.sid
            BattleEngine.end_battle(ctx, winner, loser, actor)
            return result

        BattleEngine.pass_turn(ctx, actor, opponent)
        return result

    @staticmethod
    def end_battle(ctx: ServerContext, winner: Session, loser: Session, actor: Session) -> None:
        """Announce the result, send both back to the lobby and rematch them.

        The two never get paired with each other again right away; each looks
        for a different opponent, the acting player first.
        """
        winner.send(messages.you_defeated(loser.name))
        loser.send(messages.defeated_you(winner.name))

        winner.leave_battle(last_opponent=loser.sid)
        loser.leave_battle(last_opponent=winner.sid)
        logger.info("%s defeated %s", winner.name, loser.name)

        broadcast(ctx.registry, messages.entered_arena(loser.name))
        broadcast(ctx.registry, messages.entered_arena(winner.name))

        other = loser if actor is winner else winner
        for player in (actor, other):
            if not player.in_battle:
                BattleEngine.seek_match(ctx, player)

    @staticmethod
    def forfeit(ctx: ServerContext, leaver: Session) -> Session | None:
        """End ``leaver``'s battle in their opponent's favour.

        The survivor does not remember the leaver as last opponent. Returns
        the survivor so the caller can rematch them once the leaver is gone.
        """
        if not leaver.in_battle:
            return None
        survivor = ctx.opponent_of(leaver)
        leaver.leave_battle(last_opponent=None)
        if survivor is None:
            return None
        survivor.send(messages.opponent_dropped(leaver.name))
        survivor.leave_battle(last_opponent=None)
        logger.info("%s wins by forfeit against %s", survivor.name, leaver.name)
        return survivor

    # -- chat and time ------------------------------------------------------

    @staticmethod
    def enter_chat(ctx: ServerContext, player: Session) -> bool:
        """Switch ``player`` into chat mode. Only allowed on their own turn."""
        if not player.in_battle or not player.is_turn or player.chat_mode:
            return False
        player.start_chat()
        player.send(messages.SPEAK_PROMPT.format(limit=ctx.config.max_message_len))
        return True

    @staticmethod
    def chat_byte(ctx: ServerContext, player: Session, byte: int) -> None:
        """Feed one byte of a chat message; a newline sends it."""
        if byte == CR:
            return
        if byte != LF:
            if player.add_chat_byte(byte, ctx.config.max_message_len):
                player.send(messages.MESSAGE_OVERFLOW)
            return

        opponent = ctx.opponent_of(player)
        if player.chat_overflow:
            player.send(messages.MESSAGE_TOO_LONG)
        elif not player.chat_message():
            player.send(messages.MESSAGE_EMPTY)
        elif opponent is not None:
            opponent.send(messages.says(player.name, player.chat_message()))
        player.clear_chat()

        # Chatting never costs the turn
        if opponent is not None:
            player.send(messages.status_prompt(player.hitpoints, player.powermoves, opponent.hitpoints))

    @staticmethod
    def query_time(ctx: ServerContext, player: Session) -> int:
        """Tell ``player`` how long the current turn has left, whoever's it is."""
        opponent = ctx.opponent_of(player)
        active = player if player.is_turn else opponent
        seconds = active.seconds_left(ctx.now()) if active is not None else 0
        player.send(messages.remaining_time(seconds))
        return seconds

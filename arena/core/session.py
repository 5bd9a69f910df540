"""Per-connection session state.

A session is created when a client connects and lives until the connection
goes away. It walks through name entry, then any number of waiting/battle
cycles. Opponent links are stored as session ids and resolved through the
registry, so a session never holds another session directly.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """Protocol state of a connected player."""

    AWAITING_NAME = "awaiting_name"  # Typing a name, not yet in the arena
    WAITING = "waiting"  # In the arena, no opponent
    IN_BATTLE = "in_battle"  # Paired with an opponent


class Session(BaseModel):
    """Server-side state for one connected player."""

    # Identity
    sid: int
    peer: str = ""
    connection: Any = Field(default=None, exclude=True, repr=False)

    # Name entry
    name: str = ""
    name_buffer: bytes = b""
    name_confirmed: bool = False

    state: SessionState = SessionState.AWAITING_NAME

    # Pairing (session ids)
    opponent: int | None = None
    last_opponent: int | None = None

    # Battle-scoped stats, reset at every match start
    hitpoints: int = 0
    powermoves: int = 0

    # Turn tracking
    is_turn: bool = False
    turn_deadline: float | None = None

    # Chat sub-mode
    chat_mode: bool = False
    chat_buffer: bytes = b""
    chat_overflow: bool = False

    @property
    def in_battle(self) -> bool:
        return self.state == SessionState.IN_BATTLE

    @property
    def is_defeated(self) -> bool:
        return self.hitpoints <= 0

    def send(self, text: str) -> None:
        """Queue text for the client. No-op once the connection is gone."""
        if self.connection is not None:
            self.connection.send(text.encode("utf-8"))

    # -- name entry ---------------------------------------------------------

    def add_name_byte(self, byte: int, limit: int) -> None:
        """Append one byte of the name being typed, dropping anything past ``limit``."""
        if len(self.name_buffer) < limit:
            self.name_buffer += bytes([byte])

    def pending_name(self) -> str:
        """The typed name as text. Invalid or cut-off UTF-8 sequences are dropped,
        so the result never encodes to more bytes than were typed."""
        return self.name_buffer.decode("utf-8", errors="ignore")

    def confirm_name(self) -> None:
        self.name = self.pending_name()
        self.name_buffer = b""
        self.name_confirmed = True
        self.state = SessionState.WAITING

    # -- battle -------------------------------------------------------------

    def reset_for_battle(self, hitpoints: int, powermoves: int, opponent: int) -> None:
        """Prepare for a new match against ``opponent``."""
        self.state = SessionState.IN_BATTLE
        self.opponent = opponent
        self.last_opponent = opponent
        self.hitpoints = hitpoints
        self.powermoves = powermoves
        self.is_turn = False
        self.turn_deadline = None
        self.clear_chat()

    def begin_turn(self, now: float, seconds: float) -> None:
        self.is_turn = True
        self.turn_deadline = now + seconds

    def end_turn(self) -> None:
        self.is_turn = False
        self.turn_deadline = None

    def turn_expired(self, now: float) -> bool:
        return self.is_turn and self.turn_deadline is not None and now >= self.turn_deadline

    def seconds_left(self, now: float) -> int:
        """Whole seconds left on this session's turn, floored at 0."""
        if self.turn_deadline is None:
            return 0
        return max(0, math.floor(self.turn_deadline - now))

    def take_damage(self, amount: int) -> int:
        """Apply damage and return the amount dealt. Hitpoints may go negative."""
        self.hitpoints -= amount
        return amount

    def leave_battle(self, last_opponent: int | None) -> None:
        """Drop back to the lobby, remembering ``last_opponent`` for rematch avoidance."""
        self.state = SessionState.WAITING
        self.opponent = None
        self.last_opponent = last_opponent
        self.end_turn()
        self.clear_chat()

    # -- chat ---------------------------------------------------------------

    def start_chat(self) -> None:
        self.chat_mode = True
        self.chat_buffer = b""
        self.chat_overflow = False

    def clear_chat(self) -> None:
        self.chat_mode = False
        self.chat_buffer = b""
        self.chat_overflow = False

    def add_chat_byte(self, byte: int, limit: int) -> bool:
        """Buffer one chat byte.

        Returns True only on the byte that first overflows ``limit``; bytes
        after that are dropped.
        """
        if self.chat_overflow:
            return False
        if len(self.chat_buffer) < limit:
            self.chat_buffer += bytes([byte])
            return False
        self.chat_overflow = True
        return True

    def chat_message(self) -> str:
        return self.chat_buffer.decode("utf-8", errors="ignore")

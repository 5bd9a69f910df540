"""Ordered collection of live sessions."""

from __future__ import annotations

from collections.abc import Iterator

from arena.core.session import Session


class Registry:
    """Insertion-ordered sessions keyed by session id.

    Iteration walks a snapshot, so sessions may be removed (or added) while a
    caller is looping without skipping or revisiting anyone.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}

    def add(self, session: Session) -> None:
        if session.sid in self._sessions:
            raise ValueError(f"session {session.sid} already registered")
        self._sessions[session.sid] = session

    def remove(self, sid: int) -> Session | None:
        return self._sessions.pop(sid, None)

    def get(self, sid: int | None) -> Session | None:
        if sid is None:
            return None
        return self._sessions.get(sid)

    def find_by_name(self, name: str) -> Session | None:
        """Find a confirmed session by exact name."""
        for session in self:
            if session.name_confirmed and session.name == name:
                return session
        return None

    def named(self) -> list[Session]:
        """Confirmed sessions in registry order."""
        return [s for s in self if s.name_confirmed]

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sid: object) -> bool:
        return sid in self._sessions

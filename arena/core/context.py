"""Process-wide server state, passed explicitly to every component."""

from __future__ import annotations

import itertools
import random
import time
from collections.abc import Callable
from typing import Any

from arena.core.registry import Registry
from arena.core.session import Session
from arena.utils.config import Config, config as default_config


class ServerContext:
    """Holds the registry plus the config, clock and random source.

    Created once at startup. Tests build their own with a fake clock and a
    scripted random source.
    """

    def __init__(
        self,
        config: Config | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or default_config
        self.clock = clock
        self.rng = rng or random.Random()
        self.registry = Registry()
        self._sids = itertools.count(1)

    def now(self) -> float:
        return self.clock()

    def new_session(self, connection: Any, peer: str = "") -> Session:
        """Create and register a session for a freshly accepted connection."""
        session = Session(sid=next(self._sids), peer=peer, connection=connection)
        self.registry.add(session)
        return session

    def opponent_of(self, session: Session) -> Session | None:
        return self.registry.get(session.opponent)

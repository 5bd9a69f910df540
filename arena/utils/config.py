"""Configuration management for Arena."""

import os

from pydantic import BaseModel


class Config(BaseModel):
    """Server configuration."""

    # Network
    host: str = "0.0.0.0"
    port: int = 51621
    backlog: int = 5

    # Protocol limits
    max_name_len: int = 20
    max_message_len: int = 20

    # Battle settings
    turn_seconds: float = 30
    hitpoints_range: tuple[int, int] = (20, 30)
    powermoves_range: tuple[int, int] = (1, 3)
    attack_damage_range: tuple[int, int] = (2, 6)
    power_multiplier: int = 3

    # Event loop wake-up for expiring idle turns (None = only on input)
    tick_seconds: float | None = 1.0

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a config, letting ARENA_* environment variables override defaults."""
        overrides: dict = {}
        if host := os.getenv("ARENA_HOST"):
            overrides["host"] = host
        if port := os.getenv("ARENA_PORT"):
            overrides["port"] = int(port)
        if turn := os.getenv("ARENA_TURN_SECONDS"):
            overrides["turn_seconds"] = float(turn)
        if tick := os.getenv("ARENA_TICK_SECONDS"):
            overrides["tick_seconds"] = float(tick) if float(tick) > 0 else None
        if level := os.getenv("ARENA_LOG_LEVEL"):
            overrides["log_level"] = level.upper()
        return cls(**overrides)


# Global config instance
config = Config.from_env()

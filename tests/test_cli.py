"""Tests for the CLI and configuration."""

import socket

from typer.testing import CliRunner

from arena import __version__
from arena.cli import app as app_module
from arena.cli.app import app
from arena.utils.config import Config

runner = CliRunner()


class TestConfig:
    """Tests for Config."""

    def test_defaults(self):
        cfg = Config()
        assert cfg.port == 51621
        assert cfg.turn_seconds == 30
        assert cfg.max_name_len == 20
        assert cfg.max_message_len == 20
        assert cfg.hitpoints_range == (20, 30)
        assert cfg.powermoves_range == (1, 3)
        assert cfg.attack_damage_range == (2, 6)
        assert cfg.power_multiplier == 3

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ARENA_HOST", "127.0.0.1")
        monkeypatch.setenv("ARENA_PORT", "6000")
        monkeypatch.setenv("ARENA_TURN_SECONDS", "10")
        monkeypatch.setenv("ARENA_TICK_SECONDS", "0")
        monkeypatch.setenv("ARENA_LOG_LEVEL", "debug")
        cfg = Config.from_env()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 6000
        assert cfg.turn_seconds == 10
        assert cfg.tick_seconds is None
        assert cfg.log_level == "DEBUG"

    def test_from_env_without_overrides(self, monkeypatch):
        for var in ("ARENA_HOST", "ARENA_PORT", "ARENA_TURN_SECONDS", "ARENA_TICK_SECONDS", "ARENA_LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        assert Config.from_env() == Config()


class TestCli:
    """Tests for the arena command."""

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_serve_port_in_use(self):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]
        try:
            result = runner.invoke(app, ["serve", "--host", "127.0.0.1", "--port", str(port)])
        finally:
            blocker.close()
        assert result.exit_code == 1
        assert "Could not listen" in result.output

    def test_serve_runs_loop_with_overrides(self, monkeypatch):
        seen = {}

        class StubLoop:
            def __init__(self, ctx, listener):
                seen["config"] = ctx.config
                listener.close()

            def run(self):
                seen["ran"] = True

        monkeypatch.setattr(app_module, "EventLoop", StubLoop)
        result = runner.invoke(
            app,
            ["serve", "--host", "127.0.0.1", "--port", "0", "--turn-seconds", "15", "--tick", "0"],
        )
        assert result.exit_code == 0, result.output
        assert seen["ran"] is True
        assert seen["config"].turn_seconds == 15
        assert seen["config"].tick_seconds is None
        assert "Arena v" in result.output

    def test_serve_negative_tick_disables_sweep(self, monkeypatch):
        seen = {}

        class StubLoop:
            def __init__(self, ctx, listener):
                seen["config"] = ctx.config
                listener.close()

            def run(self):
                pass

        monkeypatch.setattr(app_module, "EventLoop", StubLoop)
        result = runner.invoke(app, ["serve", "--host", "127.0.0.1", "--port", "0", "--tick=-1"])
        assert result.exit_code == 0, result.output
        assert seen["config"].tick_seconds is None

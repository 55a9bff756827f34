"""Shared fixtures for the Print Bridge test suite."""

import os
import subprocess
from dataclasses import dataclass
from typing import Callable

import httpx
import pytest

from print_bridge.config.settings import Settings, get_settings
from print_bridge.main import create_app


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test in an empty working directory with no bridge env vars.

    The config file lives at a fixed path relative to the working directory,
    so this keeps tests from reading or writing a real one.
    """
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("PRINT_BRIDGE_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set PRINT_BRIDGE_* env vars and clear settings cache.

    Usage:
        override_settings(API_TOKEN="s3cret", RATE_LIMIT_PER_MINUTE="5")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(f"PRINT_BRIDGE_{key.upper()}", str(value))
        get_settings.cache_clear()

    yield _override

    get_settings.cache_clear()


@pytest.fixture
def make_client():
    """Factory fixture: httpx AsyncClient wired to an app built from Settings(**overrides)."""
    def _make(**overrides) -> httpx.AsyncClient:
        app = create_app(Settings(**overrides))
        transport = httpx.ASGITransport(app=app)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    return _make


@dataclass
class Reply:
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    raises: BaseException | None = None
    side_effect: Callable[[list[str]], None] | None = None


class FakeRun:
    """Stand-in for subprocess.run that answers by command prefix.

    The longest registered prefix wins; unregistered commands behave like a
    missing executable.
    """

    def __init__(self):
        self.calls: list[list[str]] = []
        self._replies: list[tuple[tuple[str, ...], Reply]] = []

    def on(self, *prefix: str, **reply) -> None:
        self._replies.append((prefix, Reply(**reply)))

    def commands(self, program: str) -> list[list[str]]:
        return [call for call in self.calls if call[0] == program]

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)

        best: Reply | None = None
        best_len = -1
        for prefix, reply in self._replies:
            if tuple(argv[:len(prefix)]) == prefix and len(prefix) >= best_len:
                best, best_len = reply, len(prefix)

        if best is None:
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        if best.side_effect is not None:
            best.side_effect(argv)
        if best.raises is not None:
            raise best.raises
        return subprocess.CompletedProcess(argv, best.returncode, best.stdout, best.stderr)


@pytest.fixture
def fake_run(monkeypatch) -> FakeRun:
    fake = FakeRun()
    monkeypatch.setattr("print_bridge.printing.process.subprocess.run", fake)
    return fake

from __future__ import annotations

import io
import threading

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep the user's config and SLCANTERM_* variables out of the tests."""
    for name in ("SLCANTERM_DEVICE", "SLCANTERM_INIT", "SLCANTERM_RECORD", "SLCANTERM_CONFIG_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


class GatedInput:
    """stdin stand-in that holds back its text until a gate event is set."""

    def __init__(self, text: str, gate: threading.Event, timeout: float = 5.0) -> None:
        self._buf = io.StringIO(text)
        self._gate = gate
        self._timeout = timeout

    def read(self, n: int = 1) -> str:
        self._gate.wait(self._timeout)
        return self._buf.read(n)

    def isatty(self) -> bool:
        return False


class WatchedOutput(io.StringIO):
    """stdout stand-in that sets an event once a marker string has been written."""

    def __init__(self, marker: str, event: threading.Event) -> None:
        super().__init__()
        self._marker = marker
        self._event = event

    def write(self, s: str) -> int:
        n = super().write(s)
        if self._marker in s:
            self._event.set()
        return n

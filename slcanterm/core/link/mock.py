from __future__ import annotations

import threading

from slcanterm.core.link.base import LinkClosedError, LinkWriteError, SerialLink
from slcanterm.core.slcan.commands import COMMAND_TERMINATOR

DEFAULT_REPLIES: dict[str, str] = {
    "V": "V1013\r",
    "v": "v1013\r",
    "N": "NA0001\r",
    "F": "F00\r",
}


class MockLink(SerialLink):
    """In-memory adapter used for local development and deterministic testing.

    Each complete command written to the link is answered from the reply
    table (exact command match); transmitted frames get ``z``/``Z`` like a
    real adapter and anything else gets the default reply.
    """

    def __init__(
        self,
        replies: dict[str, str] | None = None,
        *,
        default_reply: str = "\r",
        read_timeout_s: float = 0.01,
        name: str = "mock",
    ) -> None:
        self.name = name
        self._replies = dict(DEFAULT_REPLIES if replies is None else replies)
        self._default_reply = default_reply
        self._read_timeout_s = float(read_timeout_s)
        self._cond = threading.Condition()
        self._pending = bytearray()
        self._partial = ""
        self._written: list[bytes] = []
        self._open = False
        self.fail_writes = False
        self.open_count = 0
        self.close_count = 0

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def written(self) -> list[bytes]:
        with self._cond:
            return list(self._written)

    @property
    def commands(self) -> list[str]:
        return [chunk.decode("ascii", errors="replace") for chunk in self.written]

    def open(self) -> None:
        self._open = True
        self.open_count += 1

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self.close_count += 1

    def inject(self, data: str | bytes) -> None:
        """Queue unsolicited adapter output (received frames, error reports)."""
        raw = data.encode("ascii") if isinstance(data, str) else bytes(data)
        with self._cond:
            self._pending.extend(raw)
            self._cond.notify_all()

    def read(self, max_bytes: int) -> bytes:
        if not self._open:
            raise LinkClosedError(f"{self.name}: link is not open")
        with self._cond:
            if not self._pending:
                self._cond.wait(self._read_timeout_s)
            out = bytes(self._pending[:max_bytes])
            del self._pending[: len(out)]
            return out

    def write(self, data: bytes) -> int:
        if not self._open:
            raise LinkClosedError(f"{self.name}: link is not open")
        if self.fail_writes:
            raise LinkWriteError(f"{self.name}: simulated write failure")
        with self._cond:
            self._written.append(bytes(data))
            self._partial += bytes(data).decode("ascii", errors="replace")
            *complete, self._partial = self._partial.split(COMMAND_TERMINATOR)
            for command in complete:
                self._pending.extend(self._reply_for(command).encode("ascii"))
            if complete:
                self._cond.notify_all()
        return len(data)

    def _reply_for(self, command: str) -> str:
        if command in self._replies:
            return self._replies[command]
        if command[:1] in ("t", "r", "d", "b"):
            return "z\r"
        if command[:1] in ("T", "R", "D", "B"):
            return "Z\r"
        return self._default_reply

"""Interactive SLCAN session.

Two threads share one link:

- the interactive loop (caller's thread) reads lines from the console,
  translates shorthand frames and writes commands;
- the receiver thread polls the link, splits replies on ``\\r`` and prints
  them with a decoded annotation.

The receiver is cooperative: it checks the running flag on every poll, so
shutdown takes at most one poll interval plus one link read timeout. Both
values are constructor parameters; shorter intervals mean lower latency and
more wakeups.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Iterable

from slcanterm.core.console import PROMPT, Console, LineEditor
from slcanterm.core.link.base import LinkError, SerialLink
from slcanterm.core.slcan import describe_reply, ensure_terminated, split_messages, translate_shorthand
from slcanterm.logging import TRACE_LEVEL


log = logging.getLogger(__name__)

QUIT_WORDS = frozenset({"quit", "exit"})

READ_CHUNK = 255
POLL_INTERVAL_S = 0.01
INIT_SETTLE_S = 0.05
INIT_RESPONSE_WAIT_S = 0.05

CLEAR_LINE = "\r\x1b[K"


class SessionState(enum.Enum):
    IDLE = "idle"
    OPEN = "open"
    RUNNING = "running"
    CLOSED = "closed"


class SessionStateError(RuntimeError):
    pass


def format_reply(message: str) -> str:
    """Reply text without trailing line feeds, followed by its annotation if any."""
    description = describe_reply(message)
    text = message.rstrip("\n")
    if description:
        return f"{text} ({description})"
    return text


class Session:
    def __init__(
        self,
        link: SerialLink,
        console: Console | None = None,
        *,
        poll_interval_s: float = POLL_INTERVAL_S,
        init_settle_s: float = INIT_SETTLE_S,
        init_response_wait_s: float = INIT_RESPONSE_WAIT_S,
        read_chunk: int = READ_CHUNK,
    ) -> None:
        self._link = link
        self._console = console or Console()
        self._poll_interval_s = float(poll_interval_s)
        self._init_settle_s = float(init_settle_s)
        self._init_response_wait_s = float(init_response_wait_s)
        self._read_chunk = int(read_chunk)
        self._running = threading.Event()
        self._receiver: threading.Thread | None = None
        self._state = SessionState.OPEN if link.is_open else SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def open(self) -> None:
        self._expect(SessionState.IDLE, "open")
        self._link.open()
        self._state = SessionState.OPEN

    def stop(self) -> None:
        """Ask both loops to finish. Safe from signal handlers and other threads."""
        self._running.clear()

    def send(self, text: str, *, echo: bool = True) -> str | None:
        """Translate and write one command; returns the wire command or None if the write failed."""
        command = ensure_terminated(translate_shorthand(text))
        try:
            self._link.write(command.encode("ascii", errors="replace"))
        except LinkError as exc:
            log.error("write failed: %s", exc, extra={"device": self._link.name})
            return None
        log.debug("TX", extra={"device": self._link.name, "command": command})
        if echo:
            self._console.write(f"[TX] {command}\n")
        return command

    def run_init_commands(self, commands: Iterable[str]) -> None:
        """Send each command and show its replies, strictly one after another."""
        self._expect(SessionState.OPEN, "run init commands")
        commands = list(commands)
        if not commands:
            return

        self._console.write("\n=== Sending initialization commands ===\n")
        for cmd in commands:
            self._console.write(f"[INIT] {cmd}\n")
            log.info("Init command", extra={"device": self._link.name, "command": cmd})
            self.send(cmd, echo=False)
            time.sleep(self._init_settle_s)
            time.sleep(self._init_response_wait_s)
            try:
                data = self._link.read(self._read_chunk)
            except LinkError as exc:
                log.warning("init read failed: %s", exc, extra={"device": self._link.name})
                continue
            for message in split_messages(_decode(data)):
                self._console.write(f"[RESP] {format_reply(message)}\n")
        self._console.write("=== Initialization complete ===\n\n")

    def run_interactive(self) -> None:
        self._expect(SessionState.OPEN, "start the terminal")
        self._state = SessionState.RUNNING
        self._running.set()
        self._receiver = threading.Thread(target=self._receive_loop, name="slcan-rx", daemon=True)
        self._receiver.start()
        try:
            with self._console.raw_mode():
                self._print_banner()
                self._command_loop()
        finally:
            self._running.clear()
            self._receiver.join()
            self._receiver = None
            self._state = SessionState.CLOSED
            self._console.write("\nTerminal closed.\n")

    def _command_loop(self) -> None:
        editor = LineEditor(self._console)
        while self._running.is_set():
            self._console.write(PROMPT)
            line = editor.read_line()
            if line.eof and line.text and line.text not in QUIT_WORDS and self._running.is_set():
                # A last line without a terminator is still a command.
                self.send(line.text)
            if line.interrupted or line.eof:
                log.debug("Input ended", extra={"interrupted": line.interrupted})
                break
            if not self._running.is_set():
                break
            if not line.text:
                continue
            if line.text in QUIT_WORDS:
                break
            self.send(line.text)
        self._running.clear()

    def _receive_loop(self) -> None:
        failing = False
        while self._running.is_set():
            try:
                data = self._link.read(self._read_chunk)
            except LinkError as exc:
                # Only the first failure of a streak reaches the console.
                if failing:
                    log.debug("read still failing: %s", exc, extra={"device": self._link.name})
                else:
                    log.warning("read failed: %s", exc, extra={"device": self._link.name})
                    failing = True
                data = b""
            else:
                if failing:
                    log.info("read recovered", extra={"device": self._link.name})
                    failing = False
            if data:
                if log.isEnabledFor(TRACE_LEVEL):
                    log.trace("RX", extra={"device": self._link.name, "data": data})  # type: ignore[attr-defined]
                for message in split_messages(_decode(data)):
                    self._console.write(f"{CLEAR_LINE}[RX] {format_reply(message)}\n")
                self._console.write(PROMPT)
            time.sleep(self._poll_interval_s)

    def _print_banner(self) -> None:
        self._console.write(
            "\n=== SLCAN Terminal ===\n"
            f"Connected to: {self._link.name}\n"
            "Commands: Enter SLCAN commands (e.g., 'V' for version, 'O' to open)\n"
            "Special: 'quit' or 'exit' to close, Ctrl+C to abort\n"
            "======================\n\n"
        )

    def _expect(self, state: SessionState, action: str) -> None:
        if self._state is not state:
            raise SessionStateError(f"cannot {action} in state {self._state.value}")


def _decode(data: bytes) -> str:
    return data.decode("ascii", errors="replace")

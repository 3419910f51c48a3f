from __future__ import annotations

import contextlib
import sys
import termios
from dataclasses import dataclass
from typing import Iterator, TextIO

PROMPT = "> "

CTRL_C = "\x03"
BACKSPACE = "\x08"
DELETE = "\x7f"


class Console:
    """Shared display surface plus character input.

    Output is written by both the interactive loop and the receiver thread
    without a lock; each write call is flushed on its own.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout

    def write(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()

    def read_char(self) -> str:
        return self._stdin.read(1)

    def is_tty(self) -> bool:
        return bool(getattr(self._stdin, "isatty", lambda: False)())

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Character-at-a-time input without echo; Ctrl+C arrives as a character."""
        if not self.is_tty():
            yield
            return
        fd = self._stdin.fileno()
        saved = termios.tcgetattr(fd)
        attrs = termios.tcgetattr(fd)
        attrs[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
        attrs[6][termios.VMIN] = 1
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, attrs)
        try:
            yield
        finally:
            termios.tcsetattr(fd, termios.TCSANOW, saved)


@dataclass(frozen=True)
class LineResult:
    text: str = ""
    interrupted: bool = False
    eof: bool = False


class LineEditor:
    def __init__(self, console: Console) -> None:
        self._console = console

    def read_line(self) -> LineResult:
        buffer: list[str] = []
        while True:
            ch = self._console.read_char()
            if not ch:
                return LineResult(text="".join(buffer), eof=True)
            if ch in ("\r", "\n"):
                self._console.write("\n")
                return LineResult(text="".join(buffer))
            if ch in (DELETE, BACKSPACE):
                if buffer:
                    buffer.pop()
                    self._console.write("\b \b")
            elif ch == CTRL_C:
                return LineResult(text="".join(buffer), interrupted=True)
            elif " " <= ch <= "~":
                buffer.append(ch)
                self._console.write(ch)

from __future__ import annotations

import json
import threading
from typing import TextIO

from slcanterm.core.link.base import LinkConfigError, SerialLink


class RecordingLink(SerialLink):
    """Wraps a link and appends every tx/rx chunk to a JSONL file.

    The record file is opened before the inner link, so an unwritable path
    fails ``open()`` without touching the device.
    """

    def __init__(self, inner: SerialLink, path: str) -> None:
        self.name = inner.name
        self._inner = inner
        self._path = path
        self._tick = 0
        # The receiver thread records rx while the main thread records tx.
        self._lock = threading.Lock()
        self._file: TextIO | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._inner.is_open

    def open(self) -> None:
        with self._lock:
            if self._file is None:
                try:
                    self._file = open(self._path, "a", encoding="utf-8")
                except OSError as exc:
                    raise LinkConfigError(f"{self._path}: cannot open record file ({exc.strerror or exc})") from exc
        try:
            self._inner.open()
        except BaseException:
            self._close_file()
            raise

    def read(self, max_bytes: int) -> bytes:
        data = self._inner.read(max_bytes)
        if data:
            self._write_event("rx", data)
        return data

    def write(self, data: bytes) -> int:
        written = self._inner.write(data)
        self._write_event("tx", data)
        return written

    def close(self) -> None:
        try:
            self._inner.close()
        finally:
            self._close_file()

    def _close_file(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def _write_event(self, direction: str, data: bytes) -> None:
        with self._lock:
            if self._file is None:
                return
            event = {
                "t": self._tick,
                "dir": direction,
                "data": data.decode("ascii", errors="backslashreplace"),
            }
            self._tick += 1
            self._file.write(json.dumps(event, separators=(",", ":")) + "\n")
            self._file.flush()

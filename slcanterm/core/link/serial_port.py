from __future__ import annotations

import errno
import fcntl
import logging
import os
import stat
import termios
from typing import Any

import serial

from slcanterm.core.link.base import (
    DeviceBusyError,
    DeviceNotFoundError,
    LinkClosedError,
    LinkConfigError,
    LinkError,
    LinkReadError,
    LinkWriteError,
    NotACharacterDeviceError,
    NotATerminalError,
    SerialLink,
)


log = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200
# Read returns as soon as one byte is there, but never waits longer than this.
DEFAULT_READ_TIMEOUT_S = 0.1

_BUSY_ERRNOS = {errno.EBUSY, errno.EAGAIN, errno.EWOULDBLOCK}


class PySerialLink(SerialLink):
    """SLCAN adapter on a tty, configured raw 8N1 without flow control.

    The tty attributes found before opening are restored on close, so the
    device is left the way we found it.
    """

    def __init__(
        self,
        path: str,
        *,
        baudrate: int = DEFAULT_BAUDRATE,
        read_timeout_s: float = DEFAULT_READ_TIMEOUT_S,
    ) -> None:
        self.name = path
        self._path = path
        self._baudrate = int(baudrate)
        self._read_timeout_s = float(read_timeout_s)
        self._serial: serial.Serial | None = None
        self._saved_attrs: list[Any] | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._serial is not None

    def open(self) -> None:
        if self._serial is not None:
            return
        self._check_device_node()
        self._saved_attrs = self._probe_attributes()

        port = serial.Serial()
        port.port = self._path
        port.baudrate = self._baudrate
        port.bytesize = serial.EIGHTBITS
        port.parity = serial.PARITY_NONE
        port.stopbits = serial.STOPBITS_ONE
        port.xonxoff = False
        port.rtscts = False
        port.dsrdtr = False
        port.timeout = self._read_timeout_s
        port.exclusive = True
        try:
            port.open()
        except serial.SerialException as exc:
            raise self._classify_open_error(exc) from exc

        try:
            # Also refuse other openers that do not honour flock().
            fcntl.ioctl(port.fileno(), termios.TIOCEXCL)
        except OSError as exc:
            port.close()
            raise DeviceBusyError(f"{self._path}: cannot get exclusive access (port already in use?)") from exc

        port.reset_input_buffer()
        port.reset_output_buffer()
        self._serial = port
        log.info("Device opened", extra={"device": self._path, "baudrate": self._baudrate})

    def read(self, max_bytes: int) -> bytes:
        port = self._require_open()
        if max_bytes <= 0:
            return b""
        try:
            data = port.read(1)
            if data and max_bytes > 1:
                waiting = port.in_waiting
                if waiting:
                    data += port.read(min(waiting, max_bytes - 1))
        except (serial.SerialException, OSError) as exc:
            raise LinkReadError(f"{self._path}: {exc}") from exc
        return data

    def write(self, data: bytes) -> int:
        port = self._require_open()
        try:
            written = port.write(data)
        except (serial.SerialException, OSError) as exc:
            raise LinkWriteError(f"{self._path}: {exc}") from exc
        return int(written or 0)

    def close(self) -> None:
        port = self._serial
        if port is None:
            return
        self._serial = None
        try:
            if self._saved_attrs is not None:
                try:
                    termios.tcsetattr(port.fileno(), termios.TCSANOW, self._saved_attrs)
                except (termios.error, OSError, serial.SerialException) as exc:
                    log.warning("Could not restore tty settings", extra={"device": self._path, "error": str(exc)})
        finally:
            port.close()
            self._saved_attrs = None
            log.info("Device closed", extra={"device": self._path})

    def _require_open(self) -> serial.Serial:
        if self._serial is None:
            raise LinkClosedError(f"{self._path}: link is not open")
        return self._serial

    def _check_device_node(self) -> None:
        try:
            st = os.stat(self._path)
        except FileNotFoundError as exc:
            raise DeviceNotFoundError(f"{self._path}: No such file or directory") from exc
        except OSError as exc:
            raise LinkConfigError(f"{self._path}: {exc.strerror or exc}") from exc
        if not stat.S_ISCHR(st.st_mode):
            raise NotACharacterDeviceError(f"{self._path} is not a character device")

    def _probe_attributes(self) -> list[Any]:
        # Capture the attributes before pyserial reconfigures the port.
        try:
            fd = os.open(self._path, os.O_RDWR | os.O_NOCTTY | os.O_NONBLOCK)
        except OSError as exc:
            raise self._classify_errno(exc.errno, str(exc)) from exc
        try:
            return termios.tcgetattr(fd)
        except termios.error as exc:
            raise NotATerminalError(f"{self._path} - cannot get terminal attributes (not a TTY?)") from exc
        finally:
            os.close(fd)

    def _classify_open_error(self, exc: serial.SerialException) -> LinkError:
        return self._classify_errno(getattr(exc, "errno", None), str(exc))

    def _classify_errno(self, code: int | None, message: str) -> LinkError:
        if code in _BUSY_ERRNOS:
            return DeviceBusyError(f"{self._path}: device is busy ({message})")
        if code == errno.ENOENT:
            return DeviceNotFoundError(f"{self._path}: No such file or directory")
        return LinkConfigError(f"{self._path}: {message}")

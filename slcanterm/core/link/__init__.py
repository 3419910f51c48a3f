from __future__ import annotations

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
from slcanterm.core.link.discovery import find_slcan_device
from slcanterm.core.link.mock import MockLink
from slcanterm.core.link.recorder import RecordingLink
from slcanterm.core.link.serial_port import PySerialLink

__all__ = [
    "DeviceBusyError",
    "DeviceNotFoundError",
    "LinkClosedError",
    "LinkConfigError",
    "LinkError",
    "LinkReadError",
    "LinkWriteError",
    "MockLink",
    "NotACharacterDeviceError",
    "NotATerminalError",
    "PySerialLink",
    "RecordingLink",
    "SerialLink",
    "find_slcan_device",
]

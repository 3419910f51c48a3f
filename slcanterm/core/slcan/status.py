"""Adapter error report (``E`` followed by 8 hex digits).

Digit layout::

    E  B  P  FF  TT  RR
       |  |  |   |   +-- rx error counter (hex byte)
       |  |  |   +------ tx error counter (hex byte)
       |  |  +---------- firmware error flags (hex byte)
       |  +------------- last protocol error
       +---------------- bus status
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag

from slcanterm.core.slcan.shorthand import is_hex

ERROR_MARKER = "E"
ERROR_REPORT_DIGITS = 8


class BusStatus(Enum):
    ACTIVE = "Bus Active"
    WARNING_LEVEL = "Warning Level"
    BUS_PASSIVE = "Bus Passive"
    BUS_OFF = "Bus Off"
    UNKNOWN = "Unknown Bus Status"


class ProtocolError(Enum):
    NONE = "No error"
    BIT_STUFFING = "Bit stuffing error"
    FRAME_FORMAT = "Frame format error"
    NO_ACK = "No ACK received"
    RECESSIVE_BIT = "Recessive bit error"
    DOMINANT_BIT = "Dominant bit error"
    CRC = "CRC error"
    UNKNOWN = "Unknown protocol error"


class FirmwareFlags(IntFlag):
    NONE = 0
    RX_FAILED = 0x01
    TX_FAILED = 0x02
    TX_BUFFER_OVERFLOW = 0x04
    USB_IN_OVERFLOW = 0x08
    TX_TIMEOUT = 0x10


_BUS_STATUS = {
    "0": BusStatus.ACTIVE,
    "1": BusStatus.WARNING_LEVEL,
    "2": BusStatus.BUS_PASSIVE,
    "3": BusStatus.BUS_OFF,
}

_PROTOCOL_ERRORS = {
    "0": ProtocolError.NONE,
    "1": ProtocolError.BIT_STUFFING,
    "2": ProtocolError.FRAME_FORMAT,
    "3": ProtocolError.NO_ACK,
    "4": ProtocolError.RECESSIVE_BIT,
    "5": ProtocolError.DOMINANT_BIT,
    "6": ProtocolError.CRC,
}

# Display order and names for the firmware flag bits.
_FLAG_NAMES = [
    (FirmwareFlags.RX_FAILED, "Rx Failed"),
    (FirmwareFlags.TX_FAILED, "Tx Failed"),
    (FirmwareFlags.TX_BUFFER_OVERFLOW, "CAN Tx buffer overflow"),
    (FirmwareFlags.USB_IN_OVERFLOW, "USB IN buffer overflow"),
    (FirmwareFlags.TX_TIMEOUT, "Tx Timeout"),
]


@dataclass(frozen=True)
class ErrorReport:
    bus_status: BusStatus
    protocol_error: ProtocolError
    firmware_flags: FirmwareFlags
    tx_error_count: int
    rx_error_count: int
    raw: str

    @property
    def flag_names(self) -> list[str]:
        return [name for flag, name in _FLAG_NAMES if self.firmware_flags & flag]

    def describe(self) -> str:
        parts = [self.bus_status.value]
        if self.protocol_error is not ProtocolError.NONE:
            parts.append(self.protocol_error.value)
        if self.flag_names:
            parts.append("+".join(self.flag_names))
        parts.append(f"Tx Errors: {self.tx_error_count}")
        parts.append(f"Rx Errors: {self.rx_error_count}")
        return ", ".join(parts)


def decode_error(response: str) -> ErrorReport | None:
    pos = response.find(ERROR_MARKER)
    if pos < 0:
        return None
    start = pos + 1
    # The window must fit entirely inside the response.
    if len(response) - start < ERROR_REPORT_DIGITS:
        return None
    code = response[start : start + ERROR_REPORT_DIGITS]
    if not is_hex(code):
        return None
    return ErrorReport(
        bus_status=_BUS_STATUS.get(code[0], BusStatus.UNKNOWN),
        protocol_error=_PROTOCOL_ERRORS.get(code[1], ProtocolError.UNKNOWN),
        # Unassigned bits (0x20..0x80) are dropped.
        firmware_flags=FirmwareFlags(int(code[2:4], 16) & 0x1F),
        tx_error_count=int(code[4:6], 16),
        rx_error_count=int(code[6:8], 16),
        raw=code,
    )

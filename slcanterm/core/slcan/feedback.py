from __future__ import annotations

from enum import Enum

FEEDBACK_MARKER = "#"


class FeedbackCode(Enum):
    """Adapter feedback codes sent as ``#`` followed by one status character."""

    SUCCESS = "\r"
    INVALID_COMMAND = "1"
    INVALID_PARAMETER = "2"
    ADAPTER_MUST_BE_OPEN = "3"
    ADAPTER_MUST_BE_CLOSED = "4"
    HAL_ERROR = "5"
    NOT_SUPPORTED = "6"
    TX_BUFFER_FULL = "7"
    BUS_OFF = "8"
    SILENT_MODE_TX_REJECTED = "9"
    BAUDRATE_NOT_SET = ":"
    FLASH_PROGRAMMING_FAILED = ";"
    HARDWARE_RESET_REQUIRED = "<"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_char(cls, ch: str) -> FeedbackCode | None:
        if ch == "\n":
            return cls.SUCCESS
        try:
            return cls(ch)
        except ValueError:
            return None


_DESCRIPTIONS: dict[FeedbackCode, str] = {
    FeedbackCode.SUCCESS: "Success",
    FeedbackCode.INVALID_COMMAND: "Invalid command",
    FeedbackCode.INVALID_PARAMETER: "Invalid parameter",
    FeedbackCode.ADAPTER_MUST_BE_OPEN: "Adapter must be open",
    FeedbackCode.ADAPTER_MUST_BE_CLOSED: "Adapter must be closed",
    FeedbackCode.HAL_ERROR: "HAL error from ST Microelectronics",
    FeedbackCode.NOT_SUPPORTED: "Feature not supported/implemented",
    FeedbackCode.TX_BUFFER_FULL: "CAN Tx buffer full - no ACK, 67 packets waiting",
    FeedbackCode.BUS_OFF: "CAN bus off - severe error occurred",
    FeedbackCode.SILENT_MODE_TX_REJECTED: "Sending not possible in silent mode",
    FeedbackCode.BAUDRATE_NOT_SET: "Baudrate not set",
    FeedbackCode.FLASH_PROGRAMMING_FAILED: "Flash Option Bytes programming failed",
    FeedbackCode.HARDWARE_RESET_REQUIRED: "Hardware reset required - reconnect USB",
}


def decode_feedback(response: str) -> FeedbackCode | None:
    pos = response.find(FEEDBACK_MARKER)
    if pos < 0 or pos + 1 >= len(response):
        return None
    return FeedbackCode.from_char(response[pos + 1])

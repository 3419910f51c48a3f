from __future__ import annotations

from slcanterm.core.slcan.commands import ensure_terminated, split_command_list, split_messages
from slcanterm.core.slcan.dlc import InvalidLengthError, encode_length
from slcanterm.core.slcan.feedback import FeedbackCode, decode_feedback
from slcanterm.core.slcan.shorthand import (
    DataTooLongError,
    IdTooLongError,
    InvalidHexError,
    InvalidPacketTypeError,
    OddLengthError,
    ShorthandError,
    ShorthandFrame,
    parse_shorthand,
    translate_shorthand,
)
from slcanterm.core.slcan.status import BusStatus, ErrorReport, FirmwareFlags, ProtocolError, decode_error


def describe_reply(message: str) -> str | None:
    """Human readable annotation for one adapter reply, or None if nothing is recognised."""
    feedback = decode_feedback(message)
    if feedback is not None:
        return feedback.description
    report = decode_error(message)
    if report is not None:
        return report.describe()
    return None


__all__ = [
    "BusStatus",
    "DataTooLongError",
    "ErrorReport",
    "FeedbackCode",
    "FirmwareFlags",
    "IdTooLongError",
    "InvalidHexError",
    "InvalidLengthError",
    "InvalidPacketTypeError",
    "OddLengthError",
    "ProtocolError",
    "ShorthandError",
    "ShorthandFrame",
    "decode_error",
    "decode_feedback",
    "describe_reply",
    "encode_length",
    "ensure_terminated",
    "parse_shorthand",
    "split_command_list",
    "split_messages",
    "translate_shorthand",
]

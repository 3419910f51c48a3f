"""Shorthand CAN frame syntax (``<type><id>#<data>``) and its SLCAN translation.

The shorthand follows ``cansend`` conventions::

    t123#DEADBEEF      -> t1234DEADBEEF
    t7E0#11.22.33.44   -> t7E0411223344
    T18AABBCC#112233   -> T18AABBCC3112233
    r123#              -> r1230

Packet types: ``t``/``T`` classic data, ``r``/``R`` remote, ``d``/``D`` CAN-FD,
``b``/``B`` CAN-FD with bit rate switch. Upper case means a 29-bit id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import can

from slcanterm.core.slcan.dlc import MAX_PAYLOAD_LEN, encode_length
from slcanterm.logging import TRACE_LEVEL


log = logging.getLogger(__name__)

PACKET_TYPES = "tTrRdDbB"
EXTENDED_TYPES = "TRDB"
SHORTHAND_SEPARATOR = "#"
DATA_SEPARATORS = ". "

STANDARD_ID_WIDTH = 3
EXTENDED_ID_WIDTH = 8

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class ShorthandError(ValueError):
    pass


class InvalidPacketTypeError(ShorthandError):
    pass


class InvalidHexError(ShorthandError):
    pass


class OddLengthError(ShorthandError):
    pass


class DataTooLongError(ShorthandError):
    pass


class IdTooLongError(ShorthandError):
    pass


def is_hex(text: str) -> bool:
    return all(ch in _HEX_DIGITS for ch in text)


@dataclass(frozen=True)
class ShorthandFrame:
    packet_type: str
    id_text: str
    data_text: str

    @property
    def extended(self) -> bool:
        return self.packet_type in EXTENDED_TYPES

    @property
    def remote(self) -> bool:
        return self.packet_type in "rR"

    @property
    def fd(self) -> bool:
        return self.packet_type in "dDbB"

    @property
    def bitrate_switch(self) -> bool:
        return self.packet_type in "bB"

    @property
    def id_width(self) -> int:
        return EXTENDED_ID_WIDTH if self.extended else STANDARD_ID_WIDTH

    @property
    def dlc(self) -> int:
        return len(self.data_text) // 2

    def to_slcan(self) -> str:
        return self.packet_type + self.id_text.zfill(self.id_width) + encode_length(self.dlc) + self.data_text

    def to_message(self) -> can.Message:
        return can.Message(
            arbitration_id=int(self.id_text or "0", 16),
            is_extended_id=self.extended,
            is_remote_frame=self.remote,
            is_fd=self.fd,
            bitrate_switch=self.bitrate_switch,
            data=bytes.fromhex(self.data_text),
        )


def parse_shorthand(text: str) -> ShorthandFrame:
    """Parse a shorthand frame, raising a ShorthandError subclass when malformed."""
    hash_pos = text.find(SHORTHAND_SEPARATOR)
    if hash_pos < 0:
        raise ShorthandError(f"not a shorthand frame (missing '{SHORTHAND_SEPARATOR}'): {text}")

    packet_type = text[0]
    if packet_type not in PACKET_TYPES:
        raise InvalidPacketTypeError(f"Invalid packet type '{packet_type}' (use t,T,r,R,d,D,b,B)")

    id_text = text[1:hash_pos]
    data_text = text[hash_pos + 1 :]
    clean_data = "".join(ch for ch in data_text if ch not in DATA_SEPARATORS)

    if not is_hex(clean_data):
        raise InvalidHexError(f"Invalid hex data: {clean_data}")
    if len(clean_data) % 2 != 0:
        raise OddLengthError("Data must have even number of hex digits")
    if len(clean_data) // 2 > MAX_PAYLOAD_LEN:
        raise DataTooLongError(f"Data too long (max {MAX_PAYLOAD_LEN} bytes)")

    frame = ShorthandFrame(packet_type=packet_type, id_text=id_text, data_text=clean_data)
    if len(id_text) > frame.id_width:
        kind = "Extended" if frame.extended else "Standard"
        raise IdTooLongError(f"{kind} CAN ID too long (max {frame.id_width} hex digits)")
    if not is_hex(id_text):
        raise InvalidHexError(f"Invalid CAN ID (must be hex): {id_text}")
    return frame


def translate_shorthand(text: str, on_error: Callable[[ShorthandError], None] | None = None) -> str:
    """Translate shorthand to SLCAN wire syntax.

    Text without ``#`` is assumed to be raw SLCAN already and is returned
    unchanged. Malformed shorthand is reported (to ``on_error`` when given,
    otherwise to the log) and the input is returned unmodified.
    """
    if SHORTHAND_SEPARATOR not in text:
        return text
    try:
        frame = parse_shorthand(text)
    except ShorthandError as exc:
        if on_error is not None:
            on_error(exc)
        else:
            log.error("Error: %s", exc, extra={"input": text})
        return text

    wire = frame.to_slcan()
    if log.isEnabledFor(TRACE_LEVEL):
        msg = frame.to_message()
        log.trace(  # type: ignore[attr-defined]
            "Shorthand translated",
            extra={
                "input": text,
                "wire": wire,
                "can_id": f"0x{msg.arbitration_id:X}",
                "extended": msg.is_extended_id,
                "fd": msg.is_fd,
                "dlc": msg.dlc,
            },
        )
    return wire

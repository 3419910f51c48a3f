from __future__ import annotations

from can.util import len2dlc

MAX_PAYLOAD_LEN = 64


class InvalidLengthError(ValueError):
    pass


def encode_length(byte_count: int) -> str:
    """Return the single SLCAN length character for a payload of ``byte_count`` bytes.

    Classic lengths 0..8 map to ``0``..``8``; CAN-FD lengths round up to the
    next FD bucket (12, 16, 20, 24, 32, 48, 64) and map to ``9``..``F``.
    """
    count = int(byte_count)
    if count < 0 or count > MAX_PAYLOAD_LEN:
        raise InvalidLengthError(f"payload length must be 0..{MAX_PAYLOAD_LEN} bytes, got {count}")
    return f"{len2dlc(count):X}"

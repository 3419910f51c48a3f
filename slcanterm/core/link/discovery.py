from __future__ import annotations

import logging
import os

log = logging.getLogger(__name__)

SERIAL_BY_ID_DIR = "/dev/serial/by-id"
DEVICE_NAME_MARKER = "slcan"


def find_slcan_device(by_id_dir: str = SERIAL_BY_ID_DIR, *, dev_dir: str = "/dev") -> str | None:
    """Return the first adapter whose by-id symlink name mentions "slcan".

    Symlink targets like ``../../ttyACM0`` are mapped to ``/dev/ttyACM0``.
    Candidates are sorted so that the lowest numbered device wins.
    """
    try:
        names = os.listdir(by_id_dir)
    except OSError:
        log.debug("No serial by-id directory", extra={"path": by_id_dir})
        return None

    candidates: list[str] = []
    for name in names:
        if DEVICE_NAME_MARKER not in name.lower():
            continue
        link_path = os.path.join(by_id_dir, name)
        try:
            target = os.readlink(link_path)
        except OSError:
            continue
        dev_name = os.path.basename(target)
        if dev_name:
            candidates.append(os.path.join(dev_dir, dev_name))

    candidates.sort()
    log.debug("SLCAN device candidates", extra={"candidates": candidates})
    return candidates[0] if candidates else None

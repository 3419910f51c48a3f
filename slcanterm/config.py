from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from slcanterm.core.slcan.commands import split_command_list


log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "slcanterm.json"


@dataclass(frozen=True)
class Settings:
    config_dir: Path
    device: str | None = None
    init_commands: tuple[str, ...] = field(default_factory=tuple)
    record_path: str | None = None

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME


def _xdg_config_home() -> Path:
    env = (os.getenv("XDG_CONFIG_HOME", "") or "").strip()
    if env:
        return Path(env).expanduser()
    return Path("~/.config").expanduser()


def _env(name: str) -> str | None:
    value = (os.getenv(name, "") or "").strip()
    return value or None


def _init_from_value(value: Any) -> tuple[str, ...] | None:
    # The file may hold either a JSON list or the same comma string as --init.
    if isinstance(value, str):
        return tuple(split_command_list(value))
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(v.strip() for v in value if v.strip())
    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        obj = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("Ignoring unreadable config file", extra={"path": str(path), "error": str(exc)})
        return {}
    if not isinstance(obj, dict):
        log.warning("Ignoring config file without a JSON object", extra={"path": str(path)})
        return {}
    return obj


def load_settings(
    *,
    config_dir: str | Path | None = None,
    device: str | None = None,
    init: str | None = None,
    record: str | None = None,
) -> Settings:
    """Resolve terminal settings.

    Precedence (highest to lowest):
    1) explicit parameters (typically CLI)
    2) env vars SLCANTERM_DEVICE, SLCANTERM_INIT, SLCANTERM_RECORD
    3) config file slcanterm.json in the config dir
    4) defaults (no device: discovery decides; no init commands; no recording)

    The config dir itself comes from the parameter, SLCANTERM_CONFIG_DIR or
    $XDG_CONFIG_HOME/slcanterm.
    """

    if config_dir is not None:
        cfg = Path(config_dir).expanduser()
    else:
        env = _env("SLCANTERM_CONFIG_DIR")
        cfg = Path(env).expanduser() if env else _xdg_config_home() / "slcanterm"

    obj = _read_config_file(cfg / CONFIG_FILE_NAME)

    resolved_device: str | None = None
    file_device = obj.get("device")
    if isinstance(file_device, str) and file_device.strip():
        resolved_device = file_device.strip()
    resolved_device = _env("SLCANTERM_DEVICE") or resolved_device
    if device:
        resolved_device = device

    init_commands = _init_from_value(obj.get("init")) or ()
    env_init = _env("SLCANTERM_INIT")
    if env_init is not None:
        init_commands = tuple(split_command_list(env_init))
    if init is not None:
        init_commands = tuple(split_command_list(init))

    resolved_record: str | None = None
    file_record = obj.get("record")
    if isinstance(file_record, str) and file_record.strip():
        resolved_record = file_record.strip()
    resolved_record = _env("SLCANTERM_RECORD") or resolved_record
    if record:
        resolved_record = record

    return Settings(
        config_dir=cfg,
        device=resolved_device,
        init_commands=init_commands,
        record_path=resolved_record,
    )


def write_default_config(path: Path, *, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, sort_keys=True, indent=2) + "\n", encoding="utf-8")

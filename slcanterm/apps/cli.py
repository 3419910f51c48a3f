from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Any

from slcanterm.config import load_settings, write_default_config
from slcanterm.core.console import Console
from slcanterm.core.link import LinkError, MockLink, PySerialLink, RecordingLink, SerialLink, find_slcan_device
from slcanterm.core.session import Session
from slcanterm.logging import TRACE_LEVEL, parse_log_level, setup_logging


log = logging.getLogger(__name__)

EPILOG = """\
If no tty_device is given, the first device in /dev/serial/by-id whose name
contains 'slcan' is used.

Examples:
  slcanterm                          (auto-detect SLCAN device)
  slcanterm /dev/ttyUSB0             (specify device)
  slcanterm -i "C,S6,O"              (auto-detect + init commands)
  slcanterm --init "C,V,S6,ON" /dev/ttyS1
  slcanterm -i 's"1,119,40,40"'      (custom bitrate with quoted commas)

Common SLCAN commands:
  V       - Get version and serial number
  S0-S8   - Set CAN speed (0=10k, 4=125k, 6=500k, 8=1000k)
  O       - Open channel (normal mode)
  ON      - Open channel (normal mode, SLCAN 2.5)
  OS      - Open channel (silent mode)
  L       - Open channel (listen-only mode)
  C       - Close channel
  F       - Read status flags

Sending CAN frames (shorthand with #, DLC computed, dots allowed):
  Packet types: t/T (classic), r/R (RTR), d/D (FD), b/B (FD+BRS)
    t123#DEADBEEF       -> t1234DEADBEEF
    t7E0#11.22.33.44    -> t7E0411223344
    T18AABBCC#112233    -> T18AABBCC3112233
    r123#               -> r1230 (RTR with DLC=0)

Raw SLCAN format:
  tiiildd          - Transmit standard CAN frame
  Tiiiiiiiildd     - Transmit extended CAN frame
  riiil            - Transmit standard RTR frame
  Riiiiiiiil       - Transmit extended RTR frame
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slcanterm",
        description="Interactive terminal for SLCAN serial communication.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("device", nargs="?", default=None, help="tty device of the adapter (e.g. /dev/ttyACM0)")
    parser.add_argument(
        "-i",
        "--init",
        default=None,
        help='Initialization commands (comma-separated); use double quotes to protect commas within commands',
    )
    parser.add_argument("--record", default=None, help="Append tx/rx traffic to this JSONL file")
    parser.add_argument("--mock", action="store_true", help="Use a simulated adapter instead of a device")
    parser.add_argument("--config-dir", default=None, help="Config directory (default: ~/.config/slcanterm)")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Store the resolved device and init commands in the config file and exit",
    )
    _add_logging_args(parser)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level_name: str | None = getattr(args, "log_level", None)
    if getattr(args, "trace", False):
        level = TRACE_LEVEL
    elif getattr(args, "verbose", False):
        level = logging.DEBUG
    else:
        level = parse_log_level(level_name)

    setup_logging(
        level=level,
        log_format=str(getattr(args, "log_format", "pretty") or "pretty"),
        log_file=getattr(args, "log_file", None),
        no_color=bool(getattr(args, "no_color", False)),
    )

    settings = load_settings(config_dir=args.config_dir, device=args.device, init=args.init, record=args.record)
    log.debug(
        "Settings resolved",
        extra={"device": settings.device, "init": list(settings.init_commands), "record": settings.record_path},
    )

    if args.save_config:
        write_default_config(settings.config_file, data=_config_payload(settings.device, settings.init_commands))
        print(f"Saved {settings.config_file}")
        raise SystemExit(0)

    if args.init is not None:
        print(f"command string: {args.init}")

    device = settings.device
    if args.mock:
        device = device or "mock"
    elif device is None:
        print("No TTY device specified, searching for SLCAN device...")
        device = find_slcan_device()
        if device is None:
            print("Error: No SLCAN device found in /dev\n", file=sys.stderr)
            print("Please specify a TTY device manually.\n", file=sys.stderr)
            parser.print_help(sys.stderr)
            raise SystemExit(1)
        print(f"Found SLCAN device: {device}")

    link = _build_link(device, mock=bool(args.mock), record=settings.record_path)
    try:
        link.open()
    except LinkError as exc:
        log.error("Error: %s", exc, extra={"device": device})
        print(f"Failed to open device: {device}", file=sys.stderr)
        link.close()
        raise SystemExit(1)

    with link:
        session = Session(link, Console())
        _install_signal_handlers(session)
        if settings.init_commands:
            session.run_init_commands(settings.init_commands)
        session.run_interactive()


def _build_link(device: str, *, mock: bool, record: str | None) -> SerialLink:
    link: SerialLink = MockLink(name=device) if mock else PySerialLink(device)
    if record:
        link = RecordingLink(link, record)
    return link


def _install_signal_handlers(session: Session) -> None:
    def _terminate(signum: int, frame: Any) -> None:
        log.info("Termination requested", extra={"signal": signum})
        session.stop()
        raise SystemExit(128 + signum)

    signal.signal(signal.SIGTERM, _terminate)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, _terminate)


def _config_payload(device: str | None, init_commands: tuple[str, ...]) -> dict[str, Any]:
    payload: dict[str, Any] = {"init": list(init_commands)}
    if device:
        payload["device"] = device
    return payload


def _add_logging_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        choices=["error", "warning", "info", "debug", "trace"],
        default=None,
        help="Logging level (default: warning)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Alias for --log-level=debug")
    parser.add_argument("--trace", action="store_true", help="Alias for --log-level=trace")
    parser.add_argument("--log-file", default=None, help="Optional log file path")
    parser.add_argument("--log-format", choices=["pretty", "json"], default="pretty")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors in pretty logs")


if __name__ == "__main__":
    main()

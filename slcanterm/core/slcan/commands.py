from __future__ import annotations

COMMAND_TERMINATOR = "\r"
MESSAGE_SEPARATOR = "\r"

_TRIM = " \t"


def ensure_terminated(command: str) -> str:
    if command.endswith(COMMAND_TERMINATOR):
        return command
    return command + COMMAND_TERMINATOR


def split_messages(text: str) -> list[str]:
    # Several replies can arrive in one read; empty pieces are separators only.
    return [part for part in text.split(MESSAGE_SEPARATOR) if part]


def split_command_list(text: str) -> list[str]:
    """Split a comma-separated command list such as ``C,s"1,119,40,40",ON``.

    Double quotes protect commas and are themselves dropped. Each command is
    trimmed of spaces and tabs; empty commands are skipped.
    """
    commands: list[str] = []
    current: list[str] = []
    in_quotes = False

    for ch in text:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            _append_trimmed(commands, current)
            current = []
        else:
            current.append(ch)

    _append_trimmed(commands, current)
    return commands


def _append_trimmed(commands: list[str], chars: list[str]) -> None:
    cmd = "".join(chars).strip(_TRIM)
    if cmd:
        commands.append(cmd)

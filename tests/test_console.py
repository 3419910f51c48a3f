"""Tests for the console and the local line editor."""

import io
import os
import termios

import pytest

from slcanterm.core.console import Console, LineEditor


def _editor(text):
    out = io.StringIO()
    return LineEditor(Console(io.StringIO(text), out)), out


def test_submit_on_carriage_return_or_newline():
    editor, out = _editor("abc\rdef\n")
    assert editor.read_line().text == "abc"
    assert editor.read_line().text == "def"
    assert out.getvalue() == "abc\ndef\n"


def test_backspace_and_delete_edit_the_line():
    editor, out = _editor("Vx\x7fy\x08\r")
    line = editor.read_line()
    assert line.text == "V"
    assert "\b \b" in out.getvalue()


def test_backspace_on_empty_line_is_ignored():
    editor, out = _editor("\x7f\x7fV\r")
    assert editor.read_line().text == "V"
    assert "\b" not in out.getvalue()


def test_ctrl_c_interrupts():
    editor, _ = _editor("qu\x03it\r")
    line = editor.read_line()
    assert line.interrupted
    assert line.text == "qu"


def test_end_of_input():
    editor, _ = _editor("V")
    line = editor.read_line()
    assert line.eof
    assert line.text == "V"


def test_control_characters_are_dropped():
    editor, out = _editor("a\x01\x1bb\tc\r")
    assert editor.read_line().text == "abc"
    assert out.getvalue() == "abc\n"


def test_raw_mode_is_a_no_op_without_a_tty():
    console = Console(io.StringIO(""), io.StringIO())
    assert not console.is_tty()
    with console.raw_mode():
        console.write("x")


def test_write_flushes_each_call():
    class FlushCounter(io.StringIO):
        flushes = 0

        def flush(self):
            FlushCounter.flushes += 1
            super().flush()

    out = FlushCounter()
    console = Console(io.StringIO(""), out)
    console.write("a")
    console.write("b")
    assert out.getvalue() == "ab"
    assert FlushCounter.flushes >= 2


@pytest.fixture
def tty_console():
    try:
        master, slave = os.openpty()
    except OSError as exc:
        pytest.skip(f"no pseudo terminals available: {exc}")
    stdin = os.fdopen(slave, "r", closefd=False)
    yield Console(stdin, io.StringIO()), slave
    stdin.close()
    os.close(master)
    os.close(slave)


def test_raw_mode_on_a_tty_clears_line_discipline(tty_console):
    console, fd = tty_console
    before = termios.tcgetattr(fd)
    assert console.is_tty()

    with console.raw_mode():
        during = termios.tcgetattr(fd)
        assert not during[3] & termios.ICANON
        assert not during[3] & termios.ECHO
        assert not during[3] & termios.ISIG
        assert during[6][termios.VMIN] in (1, b"\x01")
        assert during[6][termios.VTIME] in (0, b"\x00")

    assert termios.tcgetattr(fd) == before


def test_raw_mode_restores_attributes_after_an_exception(tty_console):
    console, fd = tty_console
    before = termios.tcgetattr(fd)

    with pytest.raises(RuntimeError):
        with console.raw_mode():
            raise RuntimeError("boom")

    assert termios.tcgetattr(fd) == before

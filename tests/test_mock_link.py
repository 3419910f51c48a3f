"""Tests for the in-memory simulated adapter."""

import pytest

from slcanterm.core.link import LinkClosedError, LinkWriteError, MockLink


@pytest.fixture
def link():
    link = MockLink(read_timeout_s=0.0)
    link.open()
    yield link
    link.close()


def test_known_commands_use_the_reply_table(link):
    link.write(b"V\r")
    assert link.read(255) == b"V1013\r"


def test_frames_are_acknowledged(link):
    link.write(b"t1234DEADBEEF\r")
    link.write(b"T18AABBCC3112233\r")
    assert link.read(255) == b"z\rZ\r"


def test_unknown_commands_get_default_reply():
    link = MockLink(replies={}, default_reply="#\n", read_timeout_s=0.0)
    link.open()
    link.write(b"O\r")
    assert link.read(255) == b"#\n"


def test_partial_writes_are_joined(link):
    link.write(b"V")
    assert link.read(255) == b""
    link.write(b"\r")
    assert link.read(255) == b"V1013\r"


def test_read_respects_max_bytes(link):
    link.inject("E00000000\r")
    assert link.read(4) == b"E000"
    assert link.read(255) == b"00000\r"


def test_written_commands_are_kept(link):
    link.write(b"C\r")
    link.write(b"S6\r")
    assert link.commands == ["C\r", "S6\r"]


def test_simulated_write_failure(link):
    link.fail_writes = True
    with pytest.raises(LinkWriteError):
        link.write(b"V\r")
    assert link.written == []


def test_closed_link_refuses_io():
    link = MockLink()
    with pytest.raises(LinkClosedError):
        link.read(1)
    with pytest.raises(LinkClosedError):
        link.write(b"V\r")


def test_context_manager_opens_and_closes():
    link = MockLink()
    with link as opened:
        assert opened is link
        assert link.is_open
    assert not link.is_open
    assert link.open_count == 1
    assert link.close_count == 1
    link.close()
    assert link.close_count == 1

import io
import json
import signal

import pytest

from slcanterm.apps import cli


@pytest.fixture(autouse=True)
def _quiet_cli(monkeypatch):
    """Leave pytest's log capture alone and restore signal handlers afterwards."""
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGTERM, signal.SIGHUP)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


def _stdin(monkeypatch, text):
    monkeypatch.setattr("sys.stdin", io.StringIO(text))


def test_mock_session_with_init_commands(monkeypatch, capsys, tmp_path):
    _stdin(monkeypatch, "t123#DEADBEEF\rquit\r")
    cli.main(["--mock", "-i", "V,S6", "--config-dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert "command string: V,S6" in out
    assert "[INIT] V\n[RESP] V1013\n" in out
    assert "[INIT] S6\n" in out
    assert "Connected to: mock" in out
    assert "[TX] t1234DEADBEEF\r\n" in out
    assert out.endswith("Terminal closed.\n")


def test_mock_session_uses_configured_init_commands(monkeypatch, capsys, tmp_path):
    (tmp_path / "slcanterm.json").write_text(json.dumps({"init": ["V"]}), encoding="utf-8")
    _stdin(monkeypatch, "quit\r")
    cli.main(["--mock", "--config-dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert "command string:" not in out
    assert "[INIT] V\n" in out


def test_missing_device_fails_to_open(monkeypatch, capsys, tmp_path):
    _stdin(monkeypatch, "")
    missing = str(tmp_path / "ttyACM9")
    with pytest.raises(SystemExit) as exc:
        cli.main([missing, "--config-dir", str(tmp_path)])

    assert exc.value.code == 1
    assert f"Failed to open device: {missing}" in capsys.readouterr().err


def test_no_device_found(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr(cli, "find_slcan_device", lambda: None)
    with pytest.raises(SystemExit) as exc:
        cli.main(["--config-dir", str(tmp_path)])

    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert "searching for SLCAN device" in captured.out
    assert "Error: No SLCAN device found in /dev" in captured.err
    assert "Please specify a TTY device manually." in captured.err
    assert "usage: slcanterm" in captured.err


def test_discovered_device_is_opened(monkeypatch, capsys, tmp_path):
    missing = str(tmp_path / "ttyACM7")
    monkeypatch.setattr(cli, "find_slcan_device", lambda: missing)
    with pytest.raises(SystemExit):
        cli.main(["--config-dir", str(tmp_path)])

    captured = capsys.readouterr()
    assert f"Found SLCAN device: {missing}" in captured.out
    assert f"Failed to open device: {missing}" in captured.err


def test_save_config(capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["/dev/ttyACM0", "-i", 'C,s"1,119,40,40",O', "--save-config", "--config-dir", str(tmp_path)])

    assert exc.value.code == 0
    path = tmp_path / "slcanterm.json"
    assert f"Saved {path}" in capsys.readouterr().out
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "device": "/dev/ttyACM0",
        "init": ["C", "s1,119,40,40", "O"],
    }


def test_record_writes_traffic(monkeypatch, tmp_path):
    record = tmp_path / "session.jsonl"
    _stdin(monkeypatch, "quit\r")
    cli.main(["--mock", "-i", "V", "--record", str(record), "--config-dir", str(tmp_path)])

    events = [json.loads(line) for line in record.read_text(encoding="utf-8").splitlines()]
    assert {"t": 0, "dir": "tx", "data": "V\r"} in events
    assert any(e["dir"] == "rx" and e["data"] == "V1013\r" for e in events)


def test_unwritable_record_path_fails_like_an_open_error(monkeypatch, capsys, caplog, tmp_path):
    _stdin(monkeypatch, "quit\r")
    record = tmp_path / "missing-dir" / "session.jsonl"
    with pytest.raises(SystemExit) as exc:
        cli.main(["--mock", "--record", str(record), "--config-dir", str(tmp_path)])

    assert exc.value.code == 1
    assert "Failed to open device: mock" in capsys.readouterr().err
    assert "cannot open record file" in caplog.text
    assert not record.exists()


def test_invalid_log_level_is_rejected(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--log-level", "loud"])
    assert exc.value.code == 2


def test_signal_handler_stops_session():
    class _Session:
        stopped = False

        def stop(self):
            self.stopped = True

    session = _Session()
    cli._install_signal_handlers(session)
    handler = signal.getsignal(signal.SIGTERM)

    with pytest.raises(SystemExit) as exc:
        handler(signal.SIGTERM, None)

    assert exc.value.code == 128 + signal.SIGTERM
    assert session.stopped
    assert signal.getsignal(signal.SIGHUP) is handler

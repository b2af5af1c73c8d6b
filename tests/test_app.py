from __future__ import annotations

from pathlib import Path

import pytest

from dlmmbot import app
from dlmmbot.errors import SessionExit


class _Engine:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.ran = False

    def run(self) -> None:
        self.ran = True
        if self.error is not None:
            raise self.error


@pytest.fixture()
def launch(isolated_home: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(isolated_home)
    monkeypatch.setattr(app.logging, "shutdown", lambda: None)

    def _launch(engine: _Engine) -> int:
        monkeypatch.setattr(app, "build_engine", lambda settings, *, console, sink: engine)
        return app.main([])

    return _launch


def test_clean_exit(launch) -> None:
    engine = _Engine()
    assert launch(engine) == 0
    assert engine.ran


def test_session_exit_is_success(launch, isolated_home: Path) -> None:
    assert launch(_Engine(SessionExit())) == 0
    log = (isolated_home.resolve() / "logs" / "terminal.log").read_text(encoding="utf-8")
    assert "Session closed" in log


def test_interrupt_returns_130(launch) -> None:
    assert launch(_Engine(KeyboardInterrupt())) == 130


def test_unexpected_error_is_logged(launch, isolated_home: Path, capsys) -> None:
    assert launch(_Engine(RuntimeError("disk on fire"))) == 1

    log = (isolated_home.resolve() / "logs" / "terminal.log").read_text(encoding="utf-8")
    assert "RuntimeError: disk on fire" in log
    assert "Unexpected error" in capsys.readouterr().out


def test_missing_dependencies_abort(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(app, "_missing_ui_dependencies", lambda: ["rich"])

    assert app.main([]) == 1
    assert "rich" in capsys.readouterr().err


def test_build_engine_wires_settings(isolated_home: Path) -> None:
    from io import StringIO

    from rich.console import Console

    from dlmmbot.config import Settings
    from dlmmbot.utils.logbook import LogSink

    settings = Settings.from_env({"DLMMBOT_HOME": str(isolated_home), "DLMMBOT_PROBE_TIMEOUT_MS": "900"})
    engine = app.build_engine(settings, console=Console(file=StringIO()), sink=LogSink())

    assert engine.parameters.path == settings.parameters_path
    assert engine.secrets.path == settings.secrets_path
    assert engine.probe_timeout_ms == 900
    assert engine.session.key is None

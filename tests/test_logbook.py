from __future__ import annotations

import json
import logging
from io import StringIO
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console

from dlmmbot.utils.logbook import LOGGER_NAME, LogSink, configure_logging


def _records(path: Path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.startswith("{")]


def test_emit_writes_json_line(log_file: Path) -> None:
    LogSink().success("Wallet Trading added successfully!", entry_id="abc")

    record = _records(log_file)[-1]
    assert record["level"] == "success"
    assert record["message"] == "Wallet Trading added successfully!"
    assert record["entry_id"] == "abc"
    assert isinstance(record["ts"], float)


def test_console_output_is_escaped(log_file: Path) -> None:
    buffer = StringIO()
    sink = LogSink(console=Console(file=buffer, width=120))

    sink.error("Invalid name [bold]x[/bold]")

    assert "Invalid name [bold]x[/bold]" in buffer.getvalue()


def test_sink_without_console_is_silent(log_file: Path, capsys) -> None:
    LogSink().warning("quiet")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert _records(log_file)[-1]["message"] == "quiet"


def test_exception_records_traceback(log_file: Path) -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError as exc:
        LogSink().exception("Unexpected error", exc)

    content = log_file.read_text(encoding="utf-8")
    assert "Unexpected error" in content
    assert "Traceback" in content
    assert "RuntimeError: boom" in content


def test_reconfigure_replaces_file_handler(tmp_path: Path) -> None:
    configure_logging(tmp_path / "first.log")
    configure_logging(tmp_path / "second.log")

    handlers = [h for h in logging.getLogger(LOGGER_NAME).handlers if isinstance(h, RotatingFileHandler)]
    assert len(handlers) == 1
    assert Path(handlers[0].baseFilename) == (tmp_path / "second.log").resolve()

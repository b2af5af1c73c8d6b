"""Application entry point launching the dlmmbot parameter console."""

from __future__ import annotations

import argparse
import importlib.util
import logging
import sys
from textwrap import dedent
from typing import Optional, Sequence

from rich.console import Console

from . import __version__
from .config import Settings
from .core.parameter_store import ParameterStore
from .core.validation import passphrase
from .errors import SessionExit
from .security.keyfile import KeyFile, SessionContext
from .security.secret_store import SecretStore
from .utils.logbook import LogSink, configure_logging


def _missing_ui_dependencies() -> list[str]:
    """Return a list of third-party packages required for the console."""

    required = ("prompt_toolkit", "rich", "requests")
    return [name for name in required if importlib.util.find_spec(name) is None]


def _print_dependency_error(missing: list[str]) -> None:
    message = dedent(
        f"""
        dlmmbot could not start because the following Python packages are missing:
            {', '.join(sorted(missing))}

        Install the project dependencies before launching the console, e.g.:
            python -m pip install -e .
        """
    ).strip()
    print(message, file=sys.stderr)


def _render_splash(console: Console, settings: Settings) -> None:
    console.print(f"[#00B7FF bold]DLMM Bot parameter console v{__version__}[/]")
    console.print(f"[dim]State directory: {settings.home}[/]")


def build_engine(settings: Settings, *, console: Console, sink: LogSink):
    """Wire the stores, the key session and the prompt layer into a menu engine."""

    from .ui import MenuEngine, Prompter

    prompter = Prompter(console=console)
    key_file = KeyFile(
        settings.key_path,
        passphrase_resolver=lambda message: prompter.ask(
            message, validator=passphrase, secret=True, strip=False
        ),
        confirm=settings.confirm_passphrase,
        iterations=settings.kdf_iterations,
        sink=sink,
    )
    return MenuEngine(
        prompter=prompter,
        parameters=ParameterStore(settings.parameters_path, sink=sink),
        secrets=SecretStore(settings.secrets_path, sink=sink),
        session=SessionContext.from_key_file(key_file),
        sink=sink,
        probe_timeout_ms=settings.probe_timeout_ms,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the interactive console; return the process exit status."""

    parser = argparse.ArgumentParser(
        prog="dlmmbot",
        description="Interactive editor for DLMM position checker parameters",
    )
    parser.parse_args(list(argv) if argv is not None else None)

    missing = _missing_ui_dependencies()
    if missing:
        _print_dependency_error(missing)
        return 1

    settings = Settings.from_env()
    configure_logging(settings.log_path)
    console = Console(highlight=False)
    sink = LogSink(console=console)
    for issue in settings.issues:
        sink.warning(issue)

    _render_splash(console, settings)
    sink.emit("debug", "session start", version=__version__)
    try:
        build_engine(settings, console=console, sink=sink).run()
    except SessionExit:
        sink.info("Session closed")
    except KeyboardInterrupt:
        sink.warning("Interrupted")
        return 130
    except Exception as exc:
        sink.exception("Unexpected error", exc)
        return 1
    finally:
        logging.shutdown()
    return 0


__all__ = ["build_engine", "main"]

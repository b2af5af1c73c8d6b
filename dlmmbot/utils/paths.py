"""Filesystem path helpers for dlmmbot state."""

from __future__ import annotations

import os
from pathlib import Path

HOME_ENV = "DLMMBOT_HOME"

PARAMETERS_FILENAME = "parameters.json"
SECRETS_FILENAME = "secrets.json.enc"
KEY_FILENAME = "encryption_key.json"
LOG_FILENAME = "terminal.log"


def state_dir() -> Path:
    """Return the directory used for persistent dlmmbot state.

    The location defaults to ``~/.dlmmbot`` but can be overridden via the
    ``DLMMBOT_HOME`` environment variable. The path is expanded and resolved
    so callers always receive an absolute location.
    """

    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / ".dlmmbot"


def log_dir(base: Path | None = None) -> Path:
    return (base or state_dir()) / "logs"


__all__ = [
    "HOME_ENV",
    "KEY_FILENAME",
    "LOG_FILENAME",
    "PARAMETERS_FILENAME",
    "SECRETS_FILENAME",
    "log_dir",
    "state_dir",
]

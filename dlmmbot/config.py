"""Runtime settings resolved from the environment and an optional ``.env``."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from .utils.paths import (
    HOME_ENV,
    KEY_FILENAME,
    LOG_FILENAME,
    PARAMETERS_FILENAME,
    SECRETS_FILENAME,
    log_dir,
    state_dir,
)

PROBE_TIMEOUT_ENV = "DLMMBOT_PROBE_TIMEOUT_MS"
CONFIRM_PASSPHRASE_ENV = "DLMMBOT_CONFIRM_PASSPHRASE"
KDF_ITERATIONS_ENV = "DLMMBOT_KDF_ITERATIONS"

DEFAULT_PROBE_TIMEOUT_MS = 3000
DEFAULT_KDF_ITERATIONS = 200_000

_FALSE_VALUES = {"0", "false", "no", "off"}
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Locations and policies used by one dlmmbot session."""

    home: Path
    probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS
    confirm_passphrase: bool = True
    kdf_iterations: int = DEFAULT_KDF_ITERATIONS
    issues: List[str] = field(default_factory=list)

    @property
    def parameters_path(self) -> Path:
        return self.home / PARAMETERS_FILENAME

    @property
    def secrets_path(self) -> Path:
        return self.home / SECRETS_FILENAME

    @property
    def key_path(self) -> Path:
        return self.home / KEY_FILENAME

    @property
    def log_path(self) -> Path:
        return log_dir(self.home) / LOG_FILENAME

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[Path] = None,
    ) -> "Settings":
        """Build settings from ``environ`` (``os.environ`` after loading ``.env``).

        Malformed values never abort start-up: the default is kept and a
        human readable note is appended to :attr:`issues` so the caller can
        report it once a log sink exists.
        """

        if environ is None:
            load_dotenv(dotenv_path=dotenv_path or Path.cwd() / ".env", override=False)
            environ = os.environ
        issues: List[str] = []
        probe_timeout = _positive_int(
            environ.get(PROBE_TIMEOUT_ENV), DEFAULT_PROBE_TIMEOUT_MS, PROBE_TIMEOUT_ENV, issues
        )
        iterations = _positive_int(
            environ.get(KDF_ITERATIONS_ENV), DEFAULT_KDF_ITERATIONS, KDF_ITERATIONS_ENV, issues
        )
        confirm = _flag(environ.get(CONFIRM_PASSPHRASE_ENV), True, CONFIRM_PASSPHRASE_ENV, issues)
        override = environ.get(HOME_ENV)
        home = Path(override).expanduser().resolve() if override else state_dir()
        return cls(
            home=home,
            probe_timeout_ms=probe_timeout,
            confirm_passphrase=confirm,
            kdf_iterations=iterations,
            issues=issues,
        )


def _positive_int(raw: Optional[str], default: int, name: str, issues: List[str]) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        issues.append(f"{name}={raw!r} is not an integer; using {default}")
        return default
    if value < 1:
        issues.append(f"{name}={raw!r} must be at least 1; using {default}")
        return default
    return value


def _flag(raw: Optional[str], default: bool, name: str, issues: List[str]) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    issues.append(f"{name}={raw!r} is not a boolean; using {default}")
    return default


__all__ = [
    "CONFIRM_PASSPHRASE_ENV",
    "DEFAULT_KDF_ITERATIONS",
    "DEFAULT_PROBE_TIMEOUT_MS",
    "KDF_ITERATIONS_ENV",
    "PROBE_TIMEOUT_ENV",
    "Settings",
]

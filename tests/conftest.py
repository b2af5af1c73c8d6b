from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dlmmbot.core.parameter_store import ParameterStore  # noqa: E402
from dlmmbot.security.keyfile import SessionContext  # noqa: E402
from dlmmbot.security.secret_store import EncryptionKey, SecretStore, derive_key  # noqa: E402
from dlmmbot.ui.menu import MenuEngine  # noqa: E402
from dlmmbot.utils.logbook import LogSink, configure_logging  # noqa: E402

WALLET_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
OTHER_ADDRESS = "So11111111111111111111111111111111111111112"
RPC_URL = "https://api.mainnet-beta.solana.com"


class ScriptedPrompter:
    """Prompter stand-in replaying a fixed list of answers.

    ``choose`` answers match an option value, an exact label, or a label
    prefix (in that order). ``ask`` answers are strings, ``""`` meaning a
    blank line. ``confirm`` and ``confirm_exit`` answers are booleans.
    """

    def __init__(self, script: Iterable[Any]) -> None:
        self.script: List[Any] = list(script)
        self.menus: List[Tuple[str, List[str]]] = []
        self.asked: List[str] = []
        self.confirms: List[str] = []
        self.exits = 0

    def _next(self) -> Any:
        if not self.script:
            raise AssertionError("prompt script exhausted")
        return self.script.pop(0)

    def choose(self, title: str, options: Sequence[Tuple[str, Any]], *, subtitle: Optional[str] = None) -> Any:
        labels = [label for label, _ in options]
        self.menus.append((title, labels))
        answer = self._next()
        for label, value in options:
            if answer == value or answer == label:
                return value
        for label, value in options:
            if label.startswith(answer):
                return value
        raise AssertionError(f"{answer!r} is not offered in {title!r}: {labels}")

    def ask(
        self,
        message: str,
        *,
        current: Optional[object] = None,
        default: str = "",
        validator: Optional[Callable[[str], Any]] = None,
        secret: bool = False,
    ) -> Optional[str]:
        self.asked.append(message)
        answer = self._next()
        assert isinstance(answer, str), f"expected text for {message!r}, got {answer!r}"
        return answer.strip() or None

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self.confirms.append(message)
        answer = self._next()
        assert isinstance(answer, bool), f"expected y/n for {message!r}, got {answer!r}"
        return answer

    def confirm_exit(self) -> bool:
        self.exits += 1
        answer = self._next()
        assert isinstance(answer, bool), f"expected y/n for the exit confirmation, got {answer!r}"
        return answer

    def labels(self, title: str) -> List[str]:
        """Return the labels of the most recent menu rendered with *title*."""

        for menu_title, labels in reversed(self.menus):
            if menu_title == title:
                return labels
        raise AssertionError(f"menu {title!r} was never shown")


@pytest.fixture()
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("DLMMBOT_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture()
def log_file(tmp_path: Path) -> Path:
    path = tmp_path / "logs" / "terminal.log"
    configure_logging(path)
    return path


@pytest.fixture()
def sink(log_file: Path) -> LogSink:
    return LogSink()


@pytest.fixture()
def key() -> EncryptionKey:
    return derive_key("correct horse battery", b"\x01" * 16, iterations=1_000)


@pytest.fixture()
def other_key() -> EncryptionKey:
    return derive_key("another passphrase", b"\x02" * 16, iterations=1_000)


@pytest.fixture()
def parameter_store(tmp_path: Path, sink: LogSink) -> ParameterStore:
    return ParameterStore(tmp_path / "parameters.json", sink=sink)


@pytest.fixture()
def secret_store(tmp_path: Path, sink: LogSink) -> SecretStore:
    return SecretStore(tmp_path / "secrets.json.enc", sink=sink)


@pytest.fixture()
def make_engine(parameter_store: ParameterStore, secret_store: SecretStore, sink: LogSink, key: EncryptionKey):
    def _factory(
        script: Iterable[Any],
        *,
        probe: Callable[[str, int], bool] = lambda _url, _timeout: True,
        session: Optional[SessionContext] = None,
    ) -> Tuple[MenuEngine, ScriptedPrompter]:
        prompter = ScriptedPrompter(script)
        engine = MenuEngine(
            prompter=prompter,  # type: ignore[arg-type]
            parameters=parameter_store,
            secrets=secret_store,
            session=session or SessionContext(lambda: key),
            sink=sink,
            probe=probe,
            probe_timeout_ms=50,
        )
        return engine, prompter

    return _factory

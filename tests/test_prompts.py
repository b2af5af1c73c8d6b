from __future__ import annotations

from io import StringIO
from typing import Any, Dict, List, Tuple

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError as PromptValidationError
from rich.console import Console

from dlmmbot.core.validation import positive_int
from dlmmbot.errors import SessionExit
from dlmmbot.ui.prompts import MASK, ChoiceValidator, FieldValidator, Prompter


class FakeReader:
    """Replay answers to ``Prompter``; exception classes are raised instead."""

    def __init__(self, *answers: Any) -> None:
        self.answers: List[Any] = list(answers)
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, message: str, **kwargs: Any) -> str:
        self.calls.append((message, kwargs))
        answer = self.answers.pop(0)
        if isinstance(answer, type) and issubclass(answer, BaseException):
            raise answer()
        return answer


def _prompter(*answers: Any) -> Tuple[Prompter, FakeReader, StringIO]:
    buffer = StringIO()
    reader = FakeReader(*answers)
    return Prompter(console=Console(file=buffer, width=100), reader=reader), reader, buffer


def test_choose_returns_selected_value() -> None:
    prompter, reader, buffer = _prompter("2")

    value = prompter.choose("Parameters Menu", [("Wallets", "w"), ("RPC URLs", "r")])

    assert value == "r"
    assert "Parameters Menu" in buffer.getvalue()
    assert "RPC URLs" in buffer.getvalue()
    message, kwargs = reader.calls[0]
    assert message == "Select option: "
    assert isinstance(kwargs["validator"], ChoiceValidator)


def test_ask_blank_means_cancel() -> None:
    prompter, _, _ = _prompter("   ")
    assert prompter.ask("Enter Wallet Name") is None


def test_ask_strips_and_shows_current() -> None:
    prompter, reader, _ = _prompter("  45 ")

    assert prompter.ask("Enter Timeout in Seconds", current=20, validator=positive_int) == "45"
    message, kwargs = reader.calls[0]
    assert message == "Enter Timeout in Seconds [20] (blank to cancel): "
    assert isinstance(kwargs["validator"], FieldValidator)
    assert kwargs["is_password"] is False


def test_secret_ask_is_masked() -> None:
    prompter, reader, _ = _prompter("https://rpc.example")

    prompter.ask("Enter RPC URL (secret)", current="https://old.example", secret=True)

    message, kwargs = reader.calls[0]
    assert MASK in message
    assert "old.example" not in message
    assert kwargs["is_password"] is True


@pytest.mark.parametrize(("answer", "default", "expected"), [("y", False, True), ("no", True, False), ("", True, True)])
def test_confirm(answer: str, default: bool, expected: bool) -> None:
    prompter, _, _ = _prompter(answer)
    assert prompter.confirm("Delete?", default=default) is expected


def test_declined_exit_asks_again() -> None:
    prompter, reader, buffer = _prompter(KeyboardInterrupt, "n", "cold")

    assert prompter.ask("Enter Wallet Name") == "cold"
    assert [message for message, _ in reader.calls][1] == "Exit now? (y/N): "
    assert "Unsaved changes will be lost" in buffer.getvalue()


@pytest.mark.parametrize("answers", [(KeyboardInterrupt, "y"), (EOFError, "yes"), (KeyboardInterrupt, EOFError)])
def test_confirmed_exit_raises_session_exit(answers) -> None:
    prompter, _, _ = _prompter(*answers)
    with pytest.raises(SessionExit):
        prompter.ask("Enter Wallet Name")


def test_field_validator() -> None:
    validator = FieldValidator(lambda text: positive_int(text, label="Timeout"))

    validator.validate(Document("5"))
    validator.validate(Document("  "))
    with pytest.raises(PromptValidationError) as excinfo:
        validator.validate(Document("abc"))
    assert excinfo.value.message == "Timeout must be a whole number"


def test_choice_validator_bounds() -> None:
    validator = ChoiceValidator(3)
    validator.validate(Document("3"))
    for text in ("0", "4", "x", ""):
        with pytest.raises(PromptValidationError):
            validator.validate(Document(text))


def test_unstripped_answer_matches_what_was_validated() -> None:
    prompter, _, _ = _prompter("  abcdefg ", "   ")

    assert prompter.ask("Enter encryption key", secret=True, strip=False) == "  abcdefg "
    assert prompter.ask("Enter encryption key", secret=True, strip=False) is None


def test_confirm_exit_is_public() -> None:
    prompter, reader, _ = _prompter("y")
    assert prompter.confirm_exit() is True
    assert reader.calls[0][0] == "Exit now? (y/N): "

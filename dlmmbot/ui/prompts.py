"""Terminal primitives used by the menu engine.

Menus are rendered with Rich and answers are read with Prompt Toolkit. Every
text prompt carries a validator so invalid input is refused in place with
the reason shown under the prompt line.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError as PromptValidationError
from prompt_toolkit.validation import Validator
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.validation import reason
from ..errors import SessionExit

T = TypeVar("T")

MASK = "******"

Option = Tuple[str, T]


class FieldValidator(Validator):
    """Adapt a dlmmbot validator to Prompt Toolkit; blank input is always accepted."""

    def __init__(self, check: Callable[[str], Any]) -> None:
        self.check = check

    def validate(self, document: Document) -> None:
        text = document.text
        if not text.strip():
            return
        message = reason(self.check, text)
        if message:
            raise PromptValidationError(message=message, cursor_position=len(text))


class ChoiceValidator(Validator):
    def __init__(self, count: int) -> None:
        self.count = count

    def validate(self, document: Document) -> None:
        text = document.text.strip()
        if text.isdigit() and 1 <= int(text) <= self.count:
            return
        raise PromptValidationError(
            message=f"Enter a number between 1 and {self.count}",
            cursor_position=len(document.text),
        )


class Prompter:
    """Interactive prompt surface backed by Rich and Prompt Toolkit."""

    def __init__(
        self,
        *,
        console: Optional[Console] = None,
        reader: Callable[..., str] = pt_prompt,
    ) -> None:
        self.console = console or Console(highlight=False)
        self.reader = reader

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def choose(self, title: str, options: Sequence[Option[T]], *, subtitle: Optional[str] = None) -> T:
        """Render a numbered menu and return the value of the selected option."""

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold cyan", justify="right")
        table.add_column()
        for index, (label, _value) in enumerate(options, start=1):
            table.add_row(f"{index}", label)
        self.console.clear()
        self.console.print(Panel(table, title=title, subtitle=subtitle, title_align="left"))
        answer = self._read("Select option: ", validator=ChoiceValidator(len(options)))
        return options[int(answer.strip()) - 1][1]

    def ask(
        self,
        message: str,
        *,
        current: Optional[object] = None,
        default: str = "",
        validator: Optional[Callable[[str], Any]] = None,
        secret: bool = False,
        strip: bool = True,
    ) -> Optional[str]:
        """Return the operator's answer, or ``None`` when the line is left blank.

        *current* is only displayed (masked for secrets); *default* pre-fills
        the input line. With ``strip=False`` the answer is returned exactly as
        typed, which is what the validator saw.
        """

        shown = MASK if secret else ("" if current is None else current)
        label = f"{message} [{shown}] (blank to cancel): "
        answer = self._read(
            label,
            default=default,
            validator=FieldValidator(validator) if validator else None,
            is_password=secret,
        )
        if not answer.strip():
            return None
        return answer.strip() if strip else answer

    def confirm(self, message: str, *, default: bool = False) -> bool:
        suffix = " (Y/n): " if default else " (y/N): "
        yes_no = Validator.from_callable(
            lambda text: text.strip().lower() in {"", "y", "yes", "n", "no"},
            error_message="Answer y or n",
        )
        answer = self._read(message + suffix, validator=yes_no).strip().lower()
        if not answer:
            return default
        return answer in {"y", "yes"}

    def confirm_exit(self) -> bool:
        """Ask whether to end the session after an interrupt; Ctrl-C again means yes."""

        self.console.print(Text("Exit? Unsaved changes will be lost.", style="yellow"))
        try:
            answer = self.reader("Exit now? (y/N): ")
        except (KeyboardInterrupt, EOFError):
            return True
        return answer.strip().lower() in {"y", "yes"}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _read(self, message: str, **kwargs: Any) -> str:
        while True:
            try:
                return self.reader(message, validate_while_typing=False, **kwargs)
            except (KeyboardInterrupt, EOFError):
                if self.confirm_exit():
                    raise SessionExit() from None


__all__ = ["ChoiceValidator", "FieldValidator", "MASK", "Prompter"]

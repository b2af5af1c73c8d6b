"""Field validators shared by the menus and the stores.

Each validator returns the normalised value or raises
:class:`~dlmmbot.errors.ValidationError` with a reason fit for the operator.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, TypeVar

from ..errors import ValidationError

T = TypeVar("T")

_BASE58_ADDRESS = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
_RPC_URL = re.compile(r"^https?://[^\s/]+\S*$")


def positive_int(text: str, *, label: str = "Value") -> int:
    try:
        value = int(text.strip())
    except (AttributeError, ValueError):
        raise ValidationError(f"{label} must be a whole number") from None
    if value < 1:
        raise ValidationError(f"{label} must be at least 1")
    return value


def entry_name(text: str, taken: Iterable[str]) -> str:
    name = text.strip()
    if not name:
        raise ValidationError("Name must not be empty")
    if name in set(taken):
        raise ValidationError(f"Name {name!r} is already in use")
    return name


def solana_address(text: str) -> str:
    value = text.strip()
    if not _BASE58_ADDRESS.match(value):
        raise ValidationError("Invalid Solana wallet address")
    return value


def rpc_url(text: str) -> str:
    value = text.strip()
    if not _RPC_URL.match(value):
        raise ValidationError("Invalid URL format (expected http:// or https://)")
    return value


def passphrase(text: str, *, minimum: int = 8) -> str:
    if len(text) < minimum:
        raise ValidationError(f"Key must be at least {minimum} characters")
    return text


def reason(validator: Callable[[str], T], text: str) -> str | None:
    """Return the rejection reason for *text*, or ``None`` when it is valid."""

    try:
        validator(text)
    except ValidationError as exc:
        return str(exc)
    return None


__all__ = [
    "entry_name",
    "passphrase",
    "positive_int",
    "reason",
    "rpc_url",
    "solana_address",
]

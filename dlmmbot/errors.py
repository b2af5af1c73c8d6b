"""Exception taxonomy shared by the dlmmbot components."""

from __future__ import annotations


class DlmmBotError(RuntimeError):
    """Base class for expected, recoverable dlmmbot failures."""


class ValidationError(DlmmBotError, ValueError):
    """Raised when input or a document violates a schema or business rule."""


class DecryptionError(DlmmBotError):
    """Raised when a stored secret cannot be authenticated or decoded."""


class KeyInitializationError(DlmmBotError):
    """Raised when no usable encryption key can be established."""


class PersistenceError(DlmmBotError):
    """Raised when a state file cannot be written."""


class SessionExit(Exception):
    """Raised when the operator confirms leaving the interactive session."""


__all__ = [
    "DecryptionError",
    "DlmmBotError",
    "KeyInitializationError",
    "PersistenceError",
    "SessionExit",
    "ValidationError",
]

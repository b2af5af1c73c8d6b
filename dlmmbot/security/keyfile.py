"""Encryption key establishment and the session context that caches it."""

from __future__ import annotations

import base64
import binascii
import json
import os
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..errors import KeyInitializationError
from ..utils.logbook import LogSink
from ..utils.paths import KEY_FILENAME, state_dir
from .secret_store import EncryptionKey, derive_key

MIN_PASSPHRASE_LENGTH = 8
SALT_BYTES = 16

PassphraseResolver = Callable[[str], Optional[str]]


class KeyFile:
    """Load the passphrase from ``encryption_key.json`` or ask the operator for one.

    The file holds the passphrase in the clear together with the KDF salt,
    so it must stay out of version control. Its presence skips the prompt on
    later runs; deleting it forces a new passphrase (and makes previously
    stored secrets unreadable).
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        passphrase_resolver: PassphraseResolver,
        confirm: bool = True,
        iterations: int = 200_000,
        max_attempts: int = 3,
        sink: Optional[LogSink] = None,
    ) -> None:
        self.path = path or (state_dir() / KEY_FILENAME)
        self.passphrase_resolver = passphrase_resolver
        self.confirm = confirm
        self.iterations = iterations
        self.max_attempts = max_attempts
        self.sink = sink or LogSink()

    def get_or_create_key(self) -> EncryptionKey:
        stored = self._load()
        if stored is not None:
            passphrase, salt = stored
            if salt is None:
                salt = os.urandom(SALT_BYTES)
                self._persist(passphrase, salt)
            return derive_key(passphrase, salt, iterations=self.iterations)

        passphrase = self._ask_passphrase()
        salt = os.urandom(SALT_BYTES)
        self._persist(passphrase, salt)
        self.sink.success("Encryption key set. Back it up: losing it makes stored secrets unreadable.")
        return derive_key(passphrase, salt, iterations=self.iterations)

    # -- helpers --------------------------------------------------------
    def _load(self) -> Optional[Tuple[str, Optional[bytes]]]:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.sink.warning(f"Key file is unreadable ({exc}); a new key is required")
            return None
        key = payload.get("key") if isinstance(payload, dict) else None
        if not isinstance(key, str) or len(key) < MIN_PASSPHRASE_LENGTH:
            self.sink.warning(f"Invalid key in {self.path.name}; a new key is required")
            return None
        raw_salt = payload.get("salt")
        salt: Optional[bytes] = None
        if isinstance(raw_salt, str):
            try:
                salt = base64.b64decode(raw_salt, validate=True) or None
            except (binascii.Error, ValueError):
                salt = None
        if salt is None:
            self.sink.warning(
                f"Missing or invalid salt in {self.path.name}; a new salt is generated and "
                "secrets stored under the previous one can no longer be decrypted"
            )
        return key, salt

    def _ask_passphrase(self) -> str:
        for _ in range(self.max_attempts):
            first = self.passphrase_resolver(
                f"Enter encryption key (minimum {MIN_PASSPHRASE_LENGTH} characters)"
            )
            if first is None:
                raise KeyInitializationError("encryption key entry was abandoned")
            if len(first) < MIN_PASSPHRASE_LENGTH:
                self.sink.warning(f"Key must be at least {MIN_PASSPHRASE_LENGTH} characters")
                continue
            if not self.confirm:
                return first
            second = self.passphrase_resolver("Confirm encryption key")
            if second is None:
                raise KeyInitializationError("encryption key entry was abandoned")
            if second != first:
                self.sink.warning("Keys do not match")
                continue
            return first
        raise KeyInitializationError("no valid encryption key was provided")

    def _persist(self, passphrase: str, salt: bytes) -> None:
        payload = {"key": passphrase, "salt": base64.b64encode(salt).decode("ascii")}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload), encoding="utf-8")
            os.chmod(self.path, 0o600)
        except OSError as exc:
            self.sink.warning(f"Could not save the key file ({exc}); the key is kept for this session only")


class SessionContext:
    """Session-scoped holder for the encryption key.

    The key is established on first use and reused afterwards. A failure is
    remembered: secret operations stay disabled for the rest of the session
    while non-secret editing carries on.
    """

    def __init__(self, key_source: Callable[[], EncryptionKey]) -> None:
        self._key_source = key_source
        self._key: Optional[EncryptionKey] = None
        self._failure: Optional[str] = None

    @classmethod
    def from_key_file(cls, key_file: KeyFile) -> "SessionContext":
        return cls(key_file.get_or_create_key)

    @property
    def key(self) -> Optional[EncryptionKey]:
        return self._key

    @property
    def failure(self) -> Optional[str]:
        return self._failure

    def ensure_key(self) -> EncryptionKey:
        if self._key is not None:
            return self._key
        if self._failure is not None:
            raise KeyInitializationError(self._failure)
        try:
            self._key = self._key_source()
        except KeyInitializationError as exc:
            self._failure = str(exc)
            raise
        return self._key


__all__ = ["KeyFile", "MIN_PASSPHRASE_LENGTH", "PassphraseResolver", "SessionContext"]

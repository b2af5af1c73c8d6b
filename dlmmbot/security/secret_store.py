"""Per-entry secret persistence backed by AES-GCM."""

from __future__ import annotations

import base64
import binascii
import json
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..errors import DecryptionError, PersistenceError
from ..utils.logbook import LogSink
from ..utils.paths import SECRETS_FILENAME, state_dir

NONCE_BYTES = 12
TAG_BYTES = 16
KEY_BYTES = 32


@dataclass(frozen=True)
class EncryptionKey:
    """AES-256 key material held for the lifetime of one session."""

    material: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.material) != KEY_BYTES:
            raise ValueError(f"encryption key must be {KEY_BYTES} bytes")

    def __repr__(self) -> str:
        return "EncryptionKey(***)"


def derive_key(passphrase: str, salt: bytes, *, iterations: int = 200_000) -> EncryptionKey:
    """Derive an :class:`EncryptionKey` from *passphrase* with PBKDF2-HMAC-SHA256."""

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_BYTES,
        salt=salt,
        iterations=iterations,
    )
    return EncryptionKey(kdf.derive(passphrase.encode("utf-8")))


def encrypt(plaintext: str, key: EncryptionKey) -> str:
    """Seal *plaintext* and return ``"<nonce>:<ciphertext>:<tag>"`` in base64 parts.

    Every call draws a fresh random nonce, so encrypting the same value twice
    yields different records.
    """

    nonce = secrets.token_bytes(NONCE_BYTES)
    sealed = AESGCM(key.material).encrypt(nonce, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
    return ":".join(base64.b64encode(part).decode("ascii") for part in (nonce, ciphertext, tag))


def decrypt(record: str, key: EncryptionKey) -> str:
    """Open a record produced by :func:`encrypt`; raise :class:`DecryptionError` otherwise."""

    if not isinstance(record, str):
        raise DecryptionError("secret record must be a string")
    parts = record.split(":")
    if len(parts) != 3:
        raise DecryptionError("invalid ciphertext format")
    try:
        nonce, ciphertext, tag = (base64.b64decode(part, validate=True) for part in parts)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("ciphertext is not valid base64") from exc
    if len(nonce) != NONCE_BYTES or len(tag) != TAG_BYTES:
        raise DecryptionError("invalid nonce or tag length")
    try:
        plaintext = AESGCM(key.material).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as exc:
        raise DecryptionError("decryption failed (invalid tag)") from exc
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("decrypted secret is not valid UTF-8") from exc


class SecretStore:
    """Flat ``secret key -> sealed record`` mapping stored as JSON.

    The whole mapping is read, modified and rewritten on every change. Entries
    are keyed by strings such as ``wallet-secret:<id>`` so each parameter
    entry owns exactly one record.
    """

    def __init__(self, path: Optional[Path] = None, *, sink: Optional[LogSink] = None) -> None:
        self.path = path or (state_dir() / SECRETS_FILENAME)
        self.sink = sink or LogSink()

    # -- public API -----------------------------------------------------
    encrypt = staticmethod(encrypt)
    decrypt = staticmethod(decrypt)

    def store(self, secret_key: str, value: str, key: EncryptionKey) -> None:
        mapping = self._load_mapping()
        mapping[secret_key] = encrypt(value, key)
        self._save_mapping(mapping)
        self.sink.emit("debug", "secret stored", secret_key=secret_key)

    def retrieve(self, secret_key: str, key: EncryptionKey) -> Optional[str]:
        """Return the plaintext for *secret_key* or ``None`` when it is not available.

        A missing or unparsable file and a missing key look the same to the
        caller. A record that fails authentication raises
        :class:`DecryptionError` for this key only.
        """

        record = self._load_mapping().get(secret_key)
        if record is None:
            return None
        return decrypt(record, key)

    def delete(self, secret_key: str) -> None:
        mapping = self._load_mapping()
        if mapping.pop(secret_key, None) is None:
            return
        self._save_mapping(mapping)
        self.sink.emit("debug", "secret deleted", secret_key=secret_key)

    def keys(self) -> List[str]:
        return sorted(self._load_mapping())

    def record(self, secret_key: str) -> Optional[str]:
        """Return the sealed record for *secret_key* without decrypting it."""

        return self._load_mapping().get(secret_key)

    def restore(self, secret_key: str, record: Optional[str]) -> None:
        """Put back a record returned by :meth:`record`; ``None`` removes the entry."""

        if record is None:
            self.delete(secret_key)
            return
        mapping = self._load_mapping()
        mapping[secret_key] = record
        self._save_mapping(mapping)
        self.sink.emit("debug", "secret restored", secret_key=secret_key)

    # -- helpers --------------------------------------------------------
    def _load_mapping(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.sink.emit("warning", f"Secrets file is unreadable: {exc}", path=str(self.path))
            return {}
        if not isinstance(payload, dict):
            return {}
        return dict(payload)

    def _save_mapping(self, mapping: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(mapping, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"could not write {self.path}: {exc}") from exc
        try:
            os.chmod(self.path, 0o600)
        except OSError:  # pragma: no cover - permission handling best effort
            pass


def wallet_secret_key(entry_id: str) -> str:
    return f"wallet-secret:{entry_id}"


def rpc_url_key(entry_id: str) -> str:
    return f"rpc-url:{entry_id}"


__all__ = [
    "EncryptionKey",
    "SecretStore",
    "decrypt",
    "derive_key",
    "encrypt",
    "rpc_url_key",
    "wallet_secret_key",
]

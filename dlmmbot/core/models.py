"""Typed representation of the persisted parameter document."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ValidationError

DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_ATTEMPTS = 3
DEFAULT_WALLET_NAME = "Main Wallet"
# Deterministic so that two default documents compare equal.
DEFAULT_WALLET_ID = str(uuid.uuid5(uuid.NAMESPACE_URL, "dlmmbot/default-wallet"))

WALLETS = "wallets"
RPC_ENDPOINTS = "rpc_endpoints"

_COLLECTION_KEYS = {WALLETS: "wallets", RPC_ENDPOINTS: "rpcEndpoints"}


def new_entry_id() -> str:
    """Return a fresh identifier for a :class:`NamedEntry`."""

    return str(uuid.uuid4())


def is_entry_id(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class CodeSettings:
    """Execution settings shared by the position checker."""

    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    attempts: int = DEFAULT_ATTEMPTS

    def to_dict(self) -> Dict[str, int]:
        return {"timeoutSeconds": self.timeout_seconds, "attempts": self.attempts}

    @classmethod
    def from_dict(cls, payload: object) -> "CodeSettings":
        if not isinstance(payload, dict):
            raise ValidationError("codeSettings must be an object")
        settings = cls(
            timeout_seconds=payload.get("timeoutSeconds"),  # type: ignore[arg-type]
            attempts=payload.get("attempts"),  # type: ignore[arg-type]
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not _is_int(self.timeout_seconds) or self.timeout_seconds < 1:
            raise ValidationError("timeoutSeconds must be an integer of at least 1")
        if not _is_int(self.attempts) or self.attempts < 1:
            raise ValidationError("attempts must be an integer of at least 1")


@dataclass
class NamedEntry:
    """A named, ordered record whose sensitive value lives in the secret store."""

    id: str
    name: str
    order: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "order": self.order}

    @classmethod
    def from_dict(cls, payload: object) -> "NamedEntry":
        if not isinstance(payload, dict):
            raise ValidationError("entries must be objects")
        entry = cls(
            id=payload.get("id"),  # type: ignore[arg-type]
            name=payload.get("name"),  # type: ignore[arg-type]
            order=payload.get("order"),  # type: ignore[arg-type]
        )
        entry.validate()
        return entry

    def validate(self) -> None:
        if not is_entry_id(self.id):
            raise ValidationError(f"entry id {self.id!r} is not a valid identifier")
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError(f"entry {self.id} must have a non-empty name")
        if not _is_int(self.order) or self.order < 1:
            raise ValidationError(f"entry {self.name!r} must have an order greater than 0")


@dataclass
class ConfigDocument:
    """Non-secret configuration persisted in ``parameters.json``."""

    code_settings: CodeSettings = field(default_factory=CodeSettings)
    wallets: List[NamedEntry] = field(default_factory=list)
    rpc_endpoints: List[NamedEntry] = field(default_factory=list)

    # -- serialisation --------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "codeSettings": self.code_settings.to_dict(),
            "wallets": [entry.to_dict() for entry in self.wallets],
            "rpcEndpoints": [entry.to_dict() for entry in self.rpc_endpoints],
        }

    @classmethod
    def from_dict(cls, payload: object) -> "ConfigDocument":
        """Build a document from decoded JSON, enforcing the structural schema."""

        if not isinstance(payload, dict):
            raise ValidationError("parameters document must be an object")
        collections: Dict[str, List[NamedEntry]] = {}
        for attribute, key in _COLLECTION_KEYS.items():
            raw = payload.get(key, [])
            if not isinstance(raw, list):
                raise ValidationError(f"{key} must be a list")
            collections[attribute] = [NamedEntry.from_dict(item) for item in raw]
        document = cls(
            code_settings=CodeSettings.from_dict(payload.get("codeSettings")),
            wallets=collections[WALLETS],
            rpc_endpoints=collections[RPC_ENDPOINTS],
        )
        document.validate()
        return document

    # -- validation -----------------------------------------------------
    def validate(self) -> None:
        """Check structural rules; cross-entry ordering rules live in :mod:`.ordering`."""

        self.code_settings.validate()
        for attribute, key in _COLLECTION_KEYS.items():
            seen: set[str] = set()
            for entry in self.collection(attribute):
                entry.validate()
                if entry.id in seen:
                    raise ValidationError(f"duplicate id {entry.id} in {key}")
                seen.add(entry.id)

    # -- helpers --------------------------------------------------------
    def collection(self, kind: str) -> List[NamedEntry]:
        if kind not in _COLLECTION_KEYS:
            raise KeyError(f"unknown collection {kind!r}")
        return getattr(self, kind)

    def replace_collection(self, kind: str, entries: List[NamedEntry]) -> None:
        if kind not in _COLLECTION_KEYS:
            raise KeyError(f"unknown collection {kind!r}")
        setattr(self, kind, list(entries))

    def find(self, kind: str, entry_id: str) -> Optional[NamedEntry]:
        for entry in self.collection(kind):
            if entry.id == entry_id:
                return entry
        return None

    def copy(self) -> "ConfigDocument":
        return copy.deepcopy(self)

    def default_wallet(self) -> Optional[NamedEntry]:
        return _first_by_order(self.wallets)

    def default_rpc_endpoint(self) -> Optional[NamedEntry]:
        return _first_by_order(self.rpc_endpoints)


def _first_by_order(entries: List[NamedEntry]) -> Optional[NamedEntry]:
    if not entries:
        return None
    return min(entries, key=lambda entry: entry.order)


def default_document() -> ConfigDocument:
    """Return the baseline document used when nothing valid is on disk."""

    return ConfigDocument(
        code_settings=CodeSettings(),
        wallets=[NamedEntry(id=DEFAULT_WALLET_ID, name=DEFAULT_WALLET_NAME, order=1)],
        rpc_endpoints=[],
    )


__all__ = [
    "CodeSettings",
    "ConfigDocument",
    "DEFAULT_ATTEMPTS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_WALLET_ID",
    "DEFAULT_WALLET_NAME",
    "NamedEntry",
    "RPC_ENDPOINTS",
    "WALLETS",
    "default_document",
    "is_entry_id",
    "new_entry_id",
]

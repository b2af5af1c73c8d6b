"""Hierarchical parameter menus with staged edits and a single commit point."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional, Tuple

from ..core.models import RPC_ENDPOINTS, WALLETS, ConfigDocument, NamedEntry, new_entry_id
from ..core.ordering import check_collection, is_default, reindex, sorted_entries
from ..core.parameter_store import ParameterStore
from ..core.validation import entry_name, positive_int, rpc_url, solana_address
from ..errors import (
    DecryptionError,
    KeyInitializationError,
    PersistenceError,
    SessionExit,
    ValidationError,
)
from ..rpc.health import DEFAULT_TIMEOUT_MS
from ..rpc.health import probe as rpc_probe
from ..security.keyfile import SessionContext
from ..security.secret_store import EncryptionKey, SecretStore, rpc_url_key, wallet_secret_key
from ..utils.logbook import LogSink
from .prompts import MASK, Prompter

BACK = "back"
ROOT = "root"
ADD = "add"

UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CollectionMenu:
    """Describe how one ordered collection is presented and validated."""

    kind: str
    title: str
    noun: str
    secret_label: str
    default_marker: str
    secret_key: Callable[[str], str]
    secret_validator: Callable[[str], str]
    probe_required: bool = False


WALLET_MENU = CollectionMenu(
    kind=WALLETS,
    title="Wallets",
    noun="Wallet",
    secret_label="Solana Wallet Address",
    default_marker=" (default wallet)",
    secret_key=wallet_secret_key,
    secret_validator=solana_address,
)

RPC_MENU = CollectionMenu(
    kind=RPC_ENDPOINTS,
    title="RPC URLs",
    noun="RPC URL",
    secret_label="RPC URL",
    default_marker=" (default)",
    secret_key=rpc_url_key,
    secret_validator=rpc_url,
    probe_required=True,
)


class MenuEngine:
    """Drive one interactive editing session.

    The parameter document is read when the parameters menu opens. Every
    editor works on a staged copy (code settings, a single entry and its
    pending secret); only "Save and Back" reaches the stores, and "Cancel"
    drops the staged copy, secret included. Add and Delete commit at once.
    """

    def __init__(
        self,
        *,
        prompter: Prompter,
        parameters: ParameterStore,
        secrets: SecretStore,
        session: SessionContext,
        sink: LogSink,
        probe: Callable[[str, int], bool] = rpc_probe,
        probe_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.prompter = prompter
        self.parameters = parameters
        self.secrets = secrets
        self.session = session
        self.sink = sink
        self.probe = probe
        self.probe_timeout_ms = probe_timeout_ms

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Show the root menu until the operator picks Exit."""

        while True:
            choice = self.prompter.choose(
                "Welcome to DLMM Bot",
                [("Set Parameters", "parameters"), ("Exit", "exit")],
            )
            if choice == "exit":
                return
            self.parameters_menu()

    def parameters_menu(self) -> None:
        document = self.parameters.read()
        self._establish_key()
        while True:
            choice = self.prompter.choose(
                "Parameters Menu",
                [
                    ("General Settings (timeout etc)", "code"),
                    ("Wallets", WALLETS),
                    ("RPC URLs", RPC_ENDPOINTS),
                    ("Back to menu", BACK),
                ],
            )
            if choice == BACK:
                return
            if choice == "code":
                self.edit_code_settings(document)
                continue
            menu = WALLET_MENU if choice == WALLETS else RPC_MENU
            if self.browse(document, menu) == ROOT:
                return

    def edit_code_settings(self, document: ConfigDocument) -> None:
        staged = replace(document.code_settings)
        while True:
            choice = self.prompter.choose(
                "General Settings",
                [
                    (f"Timeout in Seconds (Current: {staged.timeout_seconds})", "timeout"),
                    (f"Number of Attempts (Current: {staged.attempts})", "attempts"),
                    ("Cancel", "cancel"),
                    ("Save and Back", "save"),
                ],
            )
            if choice == "cancel":
                self.sink.info("Changes discarded")
                return
            if choice == "save":
                candidate = document.copy()
                candidate.code_settings = replace(staged)
                if self._persist(candidate):
                    document.code_settings = candidate.code_settings
                    self.sink.success("Parameters saved successfully!")
                    return
                continue
            if choice == "timeout":
                value = self._ask(
                    "Enter Timeout in Seconds",
                    lambda text: positive_int(text, label="Timeout"),
                    current=staged.timeout_seconds,
                )
                if value is not None:
                    staged.timeout_seconds = value
            elif choice == "attempts":
                value = self._ask(
                    "Enter Number of Attempts",
                    lambda text: positive_int(text, label="Attempts"),
                    current=staged.attempts,
                )
                if value is not None:
                    staged.attempts = value

    def browse(self, document: ConfigDocument, menu: CollectionMenu) -> str:
        """List a collection; return :data:`BACK` or :data:`ROOT`."""

        while True:
            entries = sorted_entries(document.collection(menu.kind))
            options: List[Tuple[str, str]] = [(f"Add New {menu.noun}", ADD)]
            for entry in entries:
                marker = menu.default_marker if is_default(entry, entries) else ""
                options.append((f"Edit {menu.noun} {entry.name}{marker}", entry.id))
            options.extend([("Back", BACK), ("Back to menu", ROOT)])

            choice = self.prompter.choose(menu.title, options)
            if choice in (BACK, ROOT):
                return choice
            if choice == ADD:
                self.add_entry(document, menu)
                continue
            entry = document.find(menu.kind, choice)
            if entry is not None:
                self.edit_entry(document, menu, entry)

    def add_entry(self, document: ConfigDocument, menu: CollectionMenu) -> Optional[NamedEntry]:
        try:
            key = self._ensure_key()
        except KeyInitializationError as exc:
            self.sink.error(f"Cannot add a {menu.noun}: secrets are unavailable ({exc})")
            return None

        taken = [entry.name for entry in document.collection(menu.kind)]
        name = self._ask(f"Enter {menu.noun} Name", lambda text: entry_name(text, taken))
        if name is None:
            return None
        secret = self._ask_secret(menu)
        if secret is None:
            return None
        order = self._ask(
            "Enter Order (number > 0)",
            lambda text: positive_int(text, label="Order"),
            default="1",
        )
        if order is None:
            return None

        entry = NamedEntry(id=new_entry_id(), name=name, order=order)
        while not self._commit(document, menu, entry, secret, key):
            if not self.prompter.confirm(f"Retry saving {menu.noun} {name}?", default=True):
                return None
        self.sink.success(f"{menu.noun} {name} added successfully!", entry_id=entry.id)
        return document.find(menu.kind, entry.id)

    def edit_entry(self, document: ConfigDocument, menu: CollectionMenu, entry: NamedEntry) -> None:
        staged = replace(entry)
        pending_secret: Optional[str] = None
        while True:
            if pending_secret is not None:
                secret_status = f"{MASK} (unsaved)"
            else:
                secret_status = self._secret_status(menu, entry.id)
            choice = self.prompter.choose(
                f"Edit {menu.noun} {entry.name}",
                [
                    (f"{menu.secret_label} (secret) (Current: {secret_status})", "secret"),
                    (f"{menu.noun} Name (Current: {staged.name})", "name"),
                    (f"Order (Current: {staged.order})", "order"),
                    (f"Delete {menu.noun}", "delete"),
                    ("Cancel", "cancel"),
                    ("Save and Back", "save"),
                ],
            )
            if choice == "cancel":
                self.sink.info("Changes discarded")
                return
            if choice == "save":
                key = self.session.key if pending_secret is not None else None
                if self._commit(document, menu, staged, pending_secret, key):
                    self.sink.success(f"{menu.noun} updated successfully!", entry_id=entry.id)
                    return
                continue
            if choice == "delete":
                if self.delete_entry(document, menu, entry):
                    return
                continue

            if choice == "secret":
                try:
                    self._ensure_key()
                except KeyInitializationError as exc:
                    self.sink.error(f"Secrets are unavailable: {exc}")
                    continue
                value = self._ask_secret(menu)
                if value is not None:
                    pending_secret = value
            elif choice == "name":
                taken = [other.name for other in document.collection(menu.kind) if other.id != entry.id]
                value = self._ask(
                    f"Enter {menu.noun} Name",
                    lambda text: entry_name(text, taken),
                    current=staged.name,
                )
                if value is not None:
                    staged.name = value
            elif choice == "order":
                value = self._ask(
                    "Enter Order (number > 0)",
                    lambda text: positive_int(text, label="Order"),
                    current=staged.order,
                )
                if value is not None:
                    staged.order = value

    def delete_entry(self, document: ConfigDocument, menu: CollectionMenu, entry: NamedEntry) -> bool:
        if not self.prompter.confirm(
            f"Do you confirm deletion of {menu.noun} {entry.name}?", default=False
        ):
            return False
        remaining = reindex(other for other in document.collection(menu.kind) if other.id != entry.id)
        candidate = document.copy()
        candidate.replace_collection(menu.kind, remaining)
        if not self._persist(candidate):
            return False
        document.replace_collection(menu.kind, remaining)
        try:
            self.secrets.delete(menu.secret_key(entry.id))
        except PersistenceError as exc:
            self.sink.warning(f"The stored secret of {entry.name} could not be removed: {exc}")
        self.sink.success(f"{menu.noun} deleted successfully!", entry_id=entry.id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _interrupted(self) -> None:
        """Handle Ctrl-C outside a prompt: end the session or carry on."""

        if self.prompter.confirm_exit():
            raise SessionExit()

    def _ensure_key(self) -> EncryptionKey:
        try:
            return self.session.ensure_key()
        except KeyboardInterrupt:
            self._interrupted()
            raise KeyInitializationError("encryption key setup was interrupted") from None

    def _establish_key(self) -> None:
        try:
            self._ensure_key()
        except KeyInitializationError as exc:
            self.sink.warning(
                f"Secrets are unavailable ({exc}); non-secret parameters can still be edited"
            )

    def _ask(
        self,
        message: str,
        validator: Callable[[str], Any],
        *,
        current: Optional[object] = None,
        default: str = "",
        secret: bool = False,
    ) -> Any:
        """Prompt until *validator* accepts the answer; ``None`` when left blank."""

        while True:
            text = self.prompter.ask(
                message, current=current, default=default, validator=validator, secret=secret
            )
            if text is None:
                return None
            try:
                return validator(text)
            except ValidationError as exc:
                self.sink.error(str(exc))

    def _ask_secret(self, menu: CollectionMenu) -> Optional[str]:
        while True:
            value = self._ask(
                f"Enter {menu.secret_label} (secret)", menu.secret_validator, secret=True
            )
            if value is None or not menu.probe_required:
                return value
            self.sink.info("Testing RPC URL...")
            try:
                healthy = self.probe(value, self.probe_timeout_ms)
            except KeyboardInterrupt:
                self._interrupted()
                healthy = False
            if healthy:
                self.sink.success("RPC URL test passed successfully!")
                return value
            if not self.prompter.confirm("RPC provided is not responding, retry?", default=True):
                return None

    def _secret_status(self, menu: CollectionMenu, entry_id: str) -> str:
        key = self.session.key
        if key is None:
            return UNAVAILABLE
        try:
            value = self.secrets.retrieve(menu.secret_key(entry_id), key)
        except DecryptionError as exc:
            self.sink.emit("warning", f"Stored {menu.secret_label} is unreadable: {exc}", entry_id=entry_id)
            return UNAVAILABLE
        return MASK if value else "None"

    def _commit(
        self,
        document: ConfigDocument,
        menu: CollectionMenu,
        entry: NamedEntry,
        secret: Optional[str],
        key: Optional[EncryptionKey],
    ) -> bool:
        """Rank *entry* into its collection and persist; return ``True`` on success.

        The secret goes first and is put back to its previous record when the
        config write fails, so the stores never disagree after a failed save.
        """

        pool = [other for other in document.collection(menu.kind) if other.id != entry.id]
        ranked = reindex(pool + [entry], edited_id=entry.id)
        try:
            check_collection(ranked, label=menu.title)
        except ValidationError as exc:
            self.sink.error(f"Save failed: {exc}")
            return False

        secret_key = menu.secret_key(entry.id)
        previous: Optional[str] = None
        if secret is not None:
            if key is None:
                self.sink.error("Save failed: secrets are unavailable")
                return False
            try:
                previous = self.secrets.record(secret_key)
                self.secrets.store(secret_key, secret, key)
            except PersistenceError as exc:
                self.sink.error(f"Save failed: {exc}")
                return False

        candidate = document.copy()
        candidate.replace_collection(menu.kind, ranked)
        if not self._persist(candidate):
            if secret is not None:
                self._rollback_secret(secret_key, previous)
            return False
        document.replace_collection(menu.kind, ranked)
        return True

    def _rollback_secret(self, secret_key: str, previous: Optional[str]) -> None:
        try:
            self.secrets.restore(secret_key, previous)
        except PersistenceError as exc:
            self.sink.warning(f"The previous secret could not be restored: {exc}", secret_key=secret_key)

    def _persist(self, candidate: ConfigDocument) -> bool:
        try:
            self.parameters.write(candidate)
        except (ValidationError, PersistenceError) as exc:
            self.sink.error(f"Failed to save parameters, please try again: {exc}")
            return False
        return True


__all__ = ["ADD", "BACK", "CollectionMenu", "MenuEngine", "RPC_MENU", "ROOT", "WALLET_MENU"]

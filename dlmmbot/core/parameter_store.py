"""Persistence for the non-secret parameter document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..errors import PersistenceError, ValidationError
from ..utils.logbook import LogSink
from ..utils.paths import PARAMETERS_FILENAME, state_dir
from .models import ConfigDocument, default_document


class ParameterStore:
    """Read and write ``parameters.json``.

    Reading never fails: a missing, unreadable or invalid file is reported
    through the sink and replaced by :func:`default_document`. Writing
    validates the document structurally first so invalid state cannot reach
    the disk.
    """

    def __init__(self, path: Optional[Path] = None, *, sink: Optional[LogSink] = None) -> None:
        self.path = path or (state_dir() / PARAMETERS_FILENAME)
        self.sink = sink or LogSink()

    def read(self) -> ConfigDocument:
        if not self.path.exists():
            self.sink.info("No parameters file found, using defaults", path=str(self.path))
            return self.default_document()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return ConfigDocument.from_dict(payload)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            self.sink.error(
                f"Failed to read parameters, using defaults: {exc}",
                path=str(self.path),
                error=type(exc).__name__,
            )
            return self.default_document()

    def write(self, document: ConfigDocument) -> None:
        document.validate()
        encoded = json.dumps(document.to_dict(), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(encoded + "\n", encoding="utf-8")
        except OSError as exc:
            self.sink.error(f"Failed to save parameters: {exc}", path=str(self.path))
            raise PersistenceError(f"could not write {self.path}: {exc}") from exc
        self.sink.emit(
            "debug",
            "parameters written",
            path=str(self.path),
            wallets=len(document.wallets),
            rpc_endpoints=len(document.rpc_endpoints),
        )

    @staticmethod
    def default_document() -> ConfigDocument:
        return default_document()


__all__ = ["ParameterStore"]

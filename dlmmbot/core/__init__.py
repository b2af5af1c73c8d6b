"""Parameter document, ordering rules and persistence."""

from .models import CodeSettings, ConfigDocument, NamedEntry, RPC_ENDPOINTS, WALLETS, default_document
from .ordering import check_collection, reindex, sorted_entries
from .parameter_store import ParameterStore

__all__ = [
    "CodeSettings",
    "ConfigDocument",
    "NamedEntry",
    "ParameterStore",
    "RPC_ENDPOINTS",
    "WALLETS",
    "check_collection",
    "default_document",
    "reindex",
    "sorted_entries",
]

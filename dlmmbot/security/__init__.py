"""Security primitives used by dlmmbot."""

from .keyfile import KeyFile, SessionContext
from .secret_store import EncryptionKey, SecretStore, derive_key, rpc_url_key, wallet_secret_key

__all__ = [
    "EncryptionKey",
    "KeyFile",
    "SecretStore",
    "SessionContext",
    "derive_key",
    "rpc_url_key",
    "wallet_secret_key",
]

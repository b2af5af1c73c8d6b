"""Solana RPC helpers."""

from .health import probe

__all__ = ["probe"]

"""Ranking rules for ordered wallet and RPC collections."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional

from ..errors import ValidationError
from .models import NamedEntry


def sorted_entries(entries: Iterable[NamedEntry]) -> List[NamedEntry]:
    """Return *entries* in display order (stable on equal order values)."""

    return sorted(entries, key=lambda entry: entry.order)


def reindex(entries: Iterable[NamedEntry], edited_id: Optional[str] = None) -> List[NamedEntry]:
    """Return copies of *entries* renumbered to a contiguous ``1..N`` sequence.

    When *edited_id* names an entry, its declared order is treated as a
    request for that rank: every other entry keeps its relative position and
    the edited entry is inserted at the requested rank (clamped to ``1..N``),
    so it wins any tie and the entries at or after that rank move down by one.
    Only one entry's priority is resolved per call.
    """

    pool = list(entries)
    edited = next((entry for entry in pool if entry.id == edited_id), None) if edited_id else None
    others = sorted_entries(entry for entry in pool if edited is None or entry.id != edited.id)
    if edited is None:
        ranked = others
    else:
        position = min(max(edited.order, 1), len(others) + 1)
        ranked = others[: position - 1] + [edited] + others[position - 1 :]
    return [replace(entry, order=rank) for rank, entry in enumerate(ranked, start=1)]


def check_collection(entries: Iterable[NamedEntry], *, label: str = "entries") -> None:
    """Enforce the business rules a collection must satisfy before it is saved."""

    pool = list(entries)
    names: set[str] = set()
    for entry in pool:
        if not entry.name:
            raise ValidationError(f"{label} must have non-empty names")
        if entry.name in names:
            raise ValidationError(f"name {entry.name!r} is used by more than one of the {label}")
        names.add(entry.name)
    orders = sorted(entry.order for entry in pool)
    if orders != list(range(1, len(pool) + 1)):
        raise ValidationError(f"{label} order values must run 1..{len(pool)} without gaps")


def is_default(entry: NamedEntry, entries: Iterable[NamedEntry]) -> bool:
    """Return ``True`` when *entry* is the default (lowest ranked) of *entries*."""

    ranked = sorted_entries(entries)
    return bool(ranked) and ranked[0].id == entry.id


__all__ = ["check_collection", "is_default", "reindex", "sorted_entries"]

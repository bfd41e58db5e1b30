"""
Editing operations on the schedule (the list of ClassEntry objects).

All functions take the current list and return a new one; persisting the
result is up to the caller (see classgrid.storage).
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Iterable

from classgrid.model import ALL_DAYS, WEEKDAYS, ClassEntry


def add_entry(entries: list[ClassEntry], entry: ClassEntry) -> list[ClassEntry]:
    if any(e.id == entry.id for e in entries):
        raise ValueError(f"Duplicate entry id: {entry.id}")
    return [*entries, entry]


def find_entry(entries: list[ClassEntry], id_or_prefix: str) -> ClassEntry:
    """
    Look up an entry by its full id or by a unique id prefix.
    """
    key = (id_or_prefix or "").strip()
    if not key:
        raise KeyError("empty id")
    for e in entries:
        if e.id == key:
            return e
    matches = [e for e in entries if e.id.startswith(key)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise KeyError(f"No class with id {key!r}")
    raise KeyError(f"Ambiguous id prefix {key!r} ({len(matches)} matches)")


def update_entry(entries: list[ClassEntry], entry_id: str, **changes: Any) -> list[ClassEntry]:
    """
    Replace fields of one entry (everything but its id).
    """
    target = find_entry(entries, entry_id)
    updated = target.with_changes(**changes)
    return [updated if e.id == target.id else e for e in entries]


def remove_entry(entries: list[ClassEntry], entry_id: str) -> list[ClassEntry]:
    target = find_entry(entries, entry_id)
    return [e for e in entries if e.id != target.id]


def clear_entries() -> list[ClassEntry]:
    return []


def import_entries(entries: list[ClassEntry], shared: Iterable[ClassEntry]) -> list[ClassEntry]:
    """
    Append shared entries as new classes: each one gets a fresh id.
    """
    out = list(entries)
    for e in shared:
        out.append(replace(e, id=str(uuid.uuid4()), days=list(e.days)))
    return out


def visible_days(entries: list[ClassEntry], show_weekend: bool = False) -> list[str]:
    """
    Columns of the week grid: Mon-Fri, or all seven days when the weekend is
    requested or some entry meets on Sat/Sun.
    """
    if show_weekend or any(d not in WEEKDAYS for e in entries for d in e.days):
        return list(ALL_DAYS)
    return list(WEEKDAYS)

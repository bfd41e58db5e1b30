"""
Conflict detection.

Given the entries of a weekly schedule, detect entries that overlap in time
on a shared weekday. Overlap rule (half-open intervals):
    start < other_end AND other_start < end

Back-to-back classes (end == other start) do not conflict.
The conflict set is always recomputed from the current entry list.
"""

from __future__ import annotations

from classgrid.model import ALL_DAYS, ClassEntry


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def shared_days(a: ClassEntry, b: ClassEntry) -> list[str]:
    """
    Weekdays both entries meet on, in Mon..Sun order.
    """
    common = set(a.days) & set(b.days)
    return [d for d in ALL_DAYS if d in common]


def has_conflict(a: ClassEntry, b: ClassEntry) -> bool:
    """
    True if a and b share a weekday and their time ranges overlap.
    An entry never conflicts with itself.
    """
    if a.id == b.id:
        return False
    if not shared_days(a, b):
        return False
    return _overlaps(a.start_minutes, a.end_minutes, b.start_minutes, b.end_minutes)


def find_conflict_pairs(entries: list[ClassEntry]) -> list[tuple[ClassEntry, ClassEntry]]:
    """
    Find overlapping entry pairs (A,B), each pair appears once (i<j).
    """
    conflicts: list[tuple[ClassEntry, ClassEntry]] = []

    # O(n^2) is fine for one person's weekly course load
    for i in range(len(entries)):
        for j in range(i + 1, len(entries)):
            if has_conflict(entries[i], entries[j]):
                conflicts.append((entries[i], entries[j]))

    return conflicts


def detect_conflicts(entries: list[ClassEntry]) -> set[str]:
    """
    Return the ids of all entries involved in at least one conflict.
    """
    ids: set[str] = set()
    for a, b in find_conflict_pairs(entries):
        ids.add(a.id)
        ids.add(b.id)
    return ids

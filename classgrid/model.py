"""
Central data model definitions used across the project.

This module defines the canonical structure of a ClassEntry so that:
- the schedule, storage, share-link and export layers share the same fields
- the JSON form (camelCase keys) stays identical everywhere it is written
- input validation happens once, when an entry is built
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional


ALL_DAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
WEEKDAYS: tuple[str, ...] = ALL_DAYS[:5]

# name -> HSL triple ("hue sat% light%"), used only for rendering
CLASS_COLORS: tuple[tuple[str, str], ...] = (
    ("Blue", "220 90% 56%"),
    ("Rose", "350 80% 55%"),
    ("Emerald", "160 84% 39%"),
    ("Amber", "38 92% 50%"),
    ("Violet", "270 76% 53%"),
    ("Cyan", "190 90% 45%"),
    ("Orange", "25 95% 53%"),
    ("Teal", "174 72% 40%"),
)

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"(\d{2}):(\d{2})", re.ASCII)


class ValidationError(ValueError):
    """
    Raised when user input cannot become a valid entry or group request.
    """


def time_to_minutes(hhmm: str) -> int:
    """
    Convert zero-padded 24h 'HH:MM' to minutes since midnight.
    Raises ValidationError for any other format or an out-of-range value.
    """
    match = _TIME_RE.fullmatch(str(hhmm).strip())
    if match is None:
        raise ValidationError(f"Invalid time format: {hhmm!r}")
    h = int(match.group(1))
    m = int(match.group(2))
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValidationError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def minutes_to_time(minutes: int) -> str:
    h, m = divmod(int(minutes), 60)
    return f"{h:02d}:{m:02d}"


def format_time(hhmm: str) -> str:
    """
    Display form of a time, e.g. '13:05' -> '1:05 PM'.
    """
    h, m = divmod(time_to_minutes(hhmm), 60)
    ampm = "PM" if h >= 12 else "AM"
    hour = h % 12 or 12
    return f"{hour}:{m:02d} {ampm}"


def normalize_days(days: Iterable[str]) -> list[str]:
    """
    Return the given weekday tags deduplicated, in Mon..Sun order.

    Accepts any capitalisation ('mon', 'MON'); unknown tags raise ValidationError.
    """
    wanted: set[str] = set()
    for d in days:
        tag = str(d).strip().capitalize()[:3]
        if tag not in ALL_DAYS:
            raise ValidationError(f"Unknown day: {d!r}")
        wanted.add(tag)
    return [d for d in ALL_DAYS if d in wanted]


def color_by_name(name_or_value: str) -> str:
    """
    Resolve a palette color by name ('blue') or by value ('220 90% 56%').
    """
    key = str(name_or_value).strip()
    for cname, value in CLASS_COLORS:
        if key.lower() == cname.lower() or key == value:
            return value
    raise ValidationError(f"Unknown color: {name_or_value!r}")


def color_name(value: str) -> str:
    for cname, cvalue in CLASS_COLORS:
        if cvalue == value:
            return cname
    return value


def next_color(used: Iterable[str]) -> str:
    """
    First palette color not yet used by any entry (falls back to the first one).
    """
    used_set = set(used)
    for _, value in CLASS_COLORS:
        if value not in used_set:
            return value
    return CLASS_COLORS[0][1]


def _clean_optional(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    cleaned = str(text).strip()
    return cleaned or None


def validate_entry_fields(name: str, days: Iterable[str], start_time: str, end_time: str) -> tuple[str, list[str]]:
    """
    Check the user-editable fields of an entry.

    Returns the trimmed name and the normalized day list.
    End-before-start is accepted; only the format of each time is checked.
    """
    clean_name = str(name or "").strip()
    if not clean_name:
        raise ValidationError("Class name is required.")
    clean_days = normalize_days(days)
    if not clean_days:
        raise ValidationError("Select at least one day.")
    time_to_minutes(start_time)
    time_to_minutes(end_time)
    return clean_name, clean_days


@dataclass(frozen=True)
class ClassEntry:
    """
    One scheduled class or activity.

    `id` is assigned once (see new_entry) and never changes; edits produce a
    new ClassEntry with the same id.
    """

    id: str
    name: str
    days: list[str] = field(hash=False)
    start_time: str
    end_time: str
    color: str
    instructor: Optional[str] = None
    location: Optional[str] = None

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.instructor is not None:
            out["instructor"] = self.instructor
        if self.location is not None:
            out["location"] = self.location
        out["days"] = list(self.days)
        out["startTime"] = self.start_time
        out["endTime"] = self.end_time
        out["color"] = self.color
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ClassEntry":
        """
        Build an entry from its JSON form, validating every field.
        """
        if not isinstance(data, dict):
            raise ValidationError("Entry must be an object.")
        entry_id = data.get("id")
        if not isinstance(entry_id, str) or not entry_id.strip():
            raise ValidationError("Entry id is missing.")
        days = data.get("days")
        if not isinstance(days, list):
            raise ValidationError("Entry days must be a list.")
        start_time = str(data.get("startTime", ""))
        end_time = str(data.get("endTime", ""))
        name, clean_days = validate_entry_fields(str(data.get("name") or ""), days, start_time, end_time)
        color = data.get("color")
        if not isinstance(color, str) or not color.strip():
            raise ValidationError("Entry color is missing.")
        color = color_by_name(color)
        return cls(
            id=entry_id,
            name=name,
            days=clean_days,
            start_time=start_time.strip(),
            end_time=end_time.strip(),
            color=color,
            instructor=_clean_optional(data.get("instructor")),
            location=_clean_optional(data.get("location")),
        )

    def with_changes(self, **changes: Any) -> "ClassEntry":
        """
        Return a validated copy with some fields replaced. `id` cannot change.
        """
        if "id" in changes:
            raise ValidationError("Entry id is immutable.")
        updated = replace(self, **changes)
        name, days = validate_entry_fields(updated.name, updated.days, updated.start_time, updated.end_time)
        return replace(
            updated,
            name=name,
            days=days,
            start_time=updated.start_time.strip(),
            end_time=updated.end_time.strip(),
            color=color_by_name(updated.color) if "color" in changes else updated.color,
            instructor=_clean_optional(updated.instructor),
            location=_clean_optional(updated.location),
        )


def new_entry(
    name: str,
    days: Iterable[str],
    start_time: str,
    end_time: str,
    color: str,
    instructor: Optional[str] = None,
    location: Optional[str] = None,
) -> ClassEntry:
    """
    Create a new entry from form input and assign it a fresh id.
    """
    clean_name, clean_days = validate_entry_fields(name, days, start_time, end_time)
    return ClassEntry(
        id=str(uuid.uuid4()),
        name=clean_name,
        days=clean_days,
        start_time=start_time.strip(),
        end_time=end_time.strip(),
        color=color_by_name(color),
        instructor=_clean_optional(instructor),
        location=_clean_optional(location),
    )

"""
Persistent storage for the user's schedule and pair history.

This module manages two files inside the data directory:

    schedule.json       the list of class entries
    pair_history.json   pairs of the last HISTORY_WINDOW generated group sets

Data directory lookup order:
- explicit `path` argument (mainly for tests) or the CLI --data-dir option
- the CLASSGRID_DATA_DIR environment variable
- ~/.classgrid

Loading is deliberately defensive: a missing or corrupted file never crashes
the application, it simply yields an empty list.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Sequence

from classgrid.groups import HISTORY_WINDOW
from classgrid.model import ClassEntry, ValidationError

logger = logging.getLogger(__name__)

ENV_DATA_DIR = "CLASSGRID_DATA_DIR"
SCHEDULE_FILE = "schedule.json"
HISTORY_FILE = "pair_history.json"

_data_dir_override: Path | None = None


def set_data_dir(path: str | Path | None) -> None:
    """
    Override the data directory for this process (used by the --data-dir flag).
    """
    global _data_dir_override
    _data_dir_override = Path(path).expanduser() if path is not None else None


def default_data_dir() -> Path:
    if _data_dir_override is not None:
        return _data_dir_override
    env = os.environ.get(ENV_DATA_DIR, "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".classgrid"


def _schedule_path(path: str | Path | None) -> Path:
    return Path(path) if path is not None else default_data_dir() / SCHEDULE_FILE


def _history_path(path: str | Path | None) -> Path:
    return Path(path) if path is not None else default_data_dir() / HISTORY_FILE


def _read_json_list(p: Path) -> list[Any]:
    # First run: file does not exist yet -> nothing stored
    if not p.exists():
        return []
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable file %s: %s", p, e)
        return []
    if not isinstance(data, list):
        logger.warning("Ignoring %s: expected a JSON list", p)
        return []
    return data


def _write_json(p: Path, payload: Any) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def load_entries(path: str | Path | None = None) -> list[ClassEntry]:
    """
    Load the saved schedule.

    Returns an empty list if the file does not exist or is invalid.
    Malformed or duplicate-id entries are skipped.
    """
    p = _schedule_path(path)
    out: list[ClassEntry] = []
    seen: set[str] = set()
    for raw in _read_json_list(p):
        try:
            entry = ClassEntry.from_dict(raw)
        except ValidationError as e:
            logger.warning("Skipping invalid entry in %s: %s", p, e)
            continue
        if entry.id in seen:
            logger.warning("Skipping duplicate entry id %s in %s", entry.id, p)
            continue
        seen.add(entry.id)
        out.append(entry)
    return out


def save_entries(entries: Iterable[ClassEntry], path: str | Path | None = None) -> None:
    """
    Save the schedule, creating parent directories if needed.
    """
    _write_json(_schedule_path(path), [e.to_dict() for e in entries])


def load_history(path: str | Path | None = None) -> list[list[list[str]]]:
    """
    Load the pair history (oldest record first).

    Returns an empty list if the file does not exist or is invalid;
    records that are not lists of name pairs are skipped.
    """
    history: list[list[list[str]]] = []
    for record in _read_json_list(_history_path(path)):
        if not isinstance(record, list):
            continue
        pairs: list[list[str]] = []
        for pair in record:
            if isinstance(pair, list) and len(pair) == 2 and all(isinstance(x, str) for x in pair):
                pairs.append([pair[0], pair[1]])
        history.append(pairs)
    return history


def save_history(history: Sequence[Iterable[Sequence[str]]], path: str | Path | None = None) -> None:
    """
    Save the pair history, keeping only the most recent HISTORY_WINDOW records.
    """
    records = [[list(p) for p in record] for record in history]
    _write_json(_history_path(path), records[-HISTORY_WINDOW:])


def clear_history(path: str | Path | None = None) -> None:
    p = _history_path(path)
    try:
        p.unlink()
    except FileNotFoundError:
        pass

"""
Group export: clipboard text and CSV.

Clipboard text:

    Group 1:
    Alice
    Bob

    Group 2:
    ...

CSV: one column per group with a "Group N" header; shorter groups are padded
with empty cells.
"""

from __future__ import annotations

import csv
import io
import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


def groups_to_text(groups: Sequence[Sequence[str]]) -> str:
    return "\n\n".join(
        f"Group {i}:\n" + "\n".join(g) if g else f"Group {i}:" for i, g in enumerate(groups, start=1)
    )


def groups_to_csv(groups: Sequence[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([f"Group {i}" for i in range(1, len(groups) + 1)])
    max_len = max((len(g) for g in groups), default=0)
    for r in range(max_len):
        writer.writerow([g[r] if r < len(g) else "" for g in groups])
    return buf.getvalue().rstrip("\n")


def write_groups_csv(groups: Sequence[Sequence[str]], out_path: str | Path) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(groups_to_csv(groups) + "\n", encoding="utf-8")
    return out


def _clipboard_command() -> list[str] | None:
    if sys.platform == "darwin":
        return ["pbcopy"]
    if sys.platform.startswith("win"):
        return ["clip"]
    for cmd in (["wl-copy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]):
        if shutil.which(cmd[0]):
            return cmd
    return None


def copy_to_clipboard(text: str) -> bool:
    """
    Put text on the system clipboard. Returns False if that is not possible.
    """
    cmd = _clipboard_command()
    if cmd is None:
        logger.debug("No clipboard command available")
        return False
    try:
        proc = subprocess.run(cmd, input=text, text=True, check=False, timeout=5)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Clipboard command %s failed: %s", cmd[0], e)
        return False
    return proc.returncode == 0

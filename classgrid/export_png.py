"""
PNG export of the weekly grid.

Draws the same layout as the terminal week view: one column per day, one row
band per hour between start_hour and end_hour, and a colored block for every
class on every day it meets. Entries involved in a conflict get a red outline.
"""

from __future__ import annotations

import colorsys
import logging
from pathlib import Path
from typing import Optional, Sequence

from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from classgrid.conflicts import detect_conflicts
from classgrid.model import ClassEntry, format_time
from classgrid.schedule import visible_days

logger = logging.getLogger(__name__)

START_HOUR = 7
END_HOUR = 22
BASE_DPI = 100
CONFLICT_COLOR = "#dc2626"


def hsl_to_rgb(value: str) -> tuple[float, float, float]:
    """
    Convert a palette value like '220 90% 56%' to an RGB tuple in [0, 1].
    Unparseable values fall back to a neutral grey.
    """
    try:
        h_s, s_s, l_s = value.replace("%", "").split()
        h, s, light = float(h_s) / 360.0, float(s_s) / 100.0, float(l_s) / 100.0
    except ValueError:
        return (0.5, 0.5, 0.5)
    # colorsys uses HLS order
    return colorsys.hls_to_rgb(h, light, s)


def _hour_label(h: int) -> str:
    if h == 0 or h == 24:
        return "12 AM"
    if h < 12:
        return f"{h} AM"
    if h == 12:
        return "12 PM"
    return f"{h - 12} PM"


def _block_span(entry: ClassEntry, start_hour: int, end_hour: int) -> Optional[tuple[int, int]]:
    """
    Vertical extent of an entry's block in minutes, clamped to the grid.
    None when the class lies entirely before or after the visible hours.
    """
    if entry.start_minutes >= end_hour * 60 or entry.end_minutes <= start_hour * 60:
        return None
    top = max(entry.start_minutes, start_hour * 60)
    bottom = min(entry.end_minutes, end_hour * 60)
    # minimum block height so very short classes stay readable
    return top, max(bottom, top + 20)


def export_schedule_png(
    entries: list[ClassEntry],
    out_path: str | Path,
    days: Optional[Sequence[str]] = None,
    transparent: bool = True,
    scale: float = 2.0,
    start_hour: int = START_HOUR,
    end_hour: int = END_HOUR,
) -> Path:
    """
    Render the schedule grid to a PNG file and return its path.

    `scale` multiplies the base resolution (2.0 -> 200 dpi); `transparent`
    leaves the background see-through.
    """
    if not (0 <= start_hour < end_hour <= 24):
        raise ValueError(f"Invalid hour range: {start_hour}-{end_hour}")
    if scale <= 0:
        raise ValueError(f"Invalid scale: {scale}")

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    cols = list(days) if days else visible_days(entries)
    conflicts = detect_conflicts(entries)
    hours = end_hour - start_hour

    fig = Figure(figsize=(1.0 + 1.8 * len(cols), 0.55 * hours + 0.8))
    ax = fig.add_subplot(1, 1, 1)
    ax.set_xlim(0, len(cols))
    # y axis is minutes since midnight, top of the image = start_hour
    ax.set_ylim(end_hour * 60, start_hour * 60)

    ax.set_xticks([i + 0.5 for i in range(len(cols))])
    ax.set_xticklabels(cols, fontweight="bold")
    ax.xaxis.tick_top()
    ax.set_yticks([h * 60 for h in range(start_hour, end_hour + 1)])
    ax.set_yticklabels([_hour_label(h) for h in range(start_hour, end_hour + 1)], fontsize=8)
    ax.tick_params(length=0)

    for h in range(start_hour, end_hour + 1):
        ax.axhline(h * 60, color="#d4d4d8", linewidth=0.6, zorder=0)
    for i in range(1, len(cols)):
        ax.axvline(i, color="#d4d4d8", linewidth=0.8, zorder=0)

    for entry in entries:
        span = _block_span(entry, start_hour, end_hour)
        if span is None:
            continue
        top, bottom = span

        rgb = hsl_to_rgb(entry.color)
        is_conflict = entry.id in conflicts
        lines = [entry.name, f"{format_time(entry.start_time)} - {format_time(entry.end_time)}"]
        if entry.location:
            lines.append(entry.location)

        for day in entry.days:
            if day not in cols:
                continue
            x = cols.index(day)
            block = Rectangle(
                (x + 0.05, top + 1),
                0.9,
                bottom - top - 2,
                facecolor=(*rgb, 0.9),
                edgecolor=CONFLICT_COLOR if is_conflict else rgb,
                linewidth=2.0 if is_conflict else 0.5,
                zorder=2,
            )
            ax.add_patch(block)
            ax.text(
                x + 0.1,
                top + 4,
                "\n".join(lines),
                fontsize=7,
                color="white",
                va="top",
                ha="left",
                clip_on=True,
                zorder=3,
            )

    for spine in ax.spines.values():
        spine.set_visible(False)

    fig.subplots_adjust(left=0.1, right=0.98, top=0.94, bottom=0.02)
    fig.savefig(out, format="png", dpi=BASE_DPI * scale, transparent=transparent)
    logger.debug("Exported %d entries to %s", len(entries), out)
    return out

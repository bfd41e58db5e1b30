"""
Terminal rendering (rich) for the week grid and generated groups.
"""

from __future__ import annotations

from typing import Sequence

from rich import box
from rich.markup import escape
from rich.table import Table

from classgrid.model import ClassEntry, color_name, format_time


def entry_label(entry: ClassEntry, with_days: bool = False) -> str:
    bits = [f"{entry.start_time}-{entry.end_time}", entry.name]
    if with_days:
        bits.insert(0, ",".join(entry.days))
    if entry.instructor:
        bits.append(entry.instructor)
    if entry.location:
        bits.append(f"@ {entry.location}")
    return " | ".join(bits)


def _cell(entry: ClassEntry, conflict: bool) -> str:
    text = f"[bold]{escape(entry.name)}[/]\n{format_time(entry.start_time)} - {format_time(entry.end_time)}"
    if entry.location:
        text += f"\n{escape(entry.location)}"
    if conflict:
        return f"[red]! {text}[/]"
    return text


def build_week_table(entries: list[ClassEntry], days: Sequence[str], conflicts: set[str]) -> Table:
    """
    One column per visible day; each column lists that day's classes by start time.
    Classes involved in a conflict are shown in red with a '!' marker.
    """
    table = Table(box=box.SIMPLE, title="Weekly schedule", show_lines=True)
    for day in days:
        table.add_column(day)

    buckets: dict[str, list[ClassEntry]] = {d: [] for d in days}
    for e in sorted(entries, key=lambda x: (x.start_minutes, x.end_minutes, x.name)):
        for d in e.days:
            if d in buckets:
                buckets[d].append(e)

    max_len = max((len(v) for v in buckets.values()), default=0)
    for r in range(max_len):
        row = []
        for d in days:
            row.append(_cell(buckets[d][r], buckets[d][r].id in conflicts) if r < len(buckets[d]) else "")
        table.add_row(*row)
    return table


def build_entries_table(entries: list[ClassEntry], conflicts: set[str]) -> Table:
    table = Table(box=box.SIMPLE, title="Classes")
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Class")
    table.add_column("Days")
    table.add_column("Time")
    table.add_column("Color")
    for i, e in enumerate(entries, start=1):
        name = f"[red]{escape(e.name)} (conflict)[/]" if e.id in conflicts else escape(e.name)
        table.add_row(
            str(i),
            f"[cyan]{e.id[:8]}[/]",
            name,
            ",".join(e.days),
            f"{e.start_time}-{e.end_time}",
            color_name(e.color),
        )
    return table


def build_groups_table(groups: Sequence[Sequence[str]]) -> Table:
    table = Table(box=box.SIMPLE, title="Groups")
    for i, g in enumerate(groups, start=1):
        table.add_column(f"Group {i} ({len(g)} member{'s' if len(g) != 1 else ''})")
    max_len = max((len(g) for g in groups), default=0)
    for r in range(max_len):
        table.add_row(*[f"{r + 1}. {escape(g[r])}" if r < len(g) else "" for g in groups])
    return table

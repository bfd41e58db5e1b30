"""
CLI (Command Line Interface).

This module provides quick terminal commands, e.g.:

    classgrid add "Calculus II" --days Mon Wed --start 09:00 --end 10:15
    classgrid list
    classgrid conflicts
    classgrid week --weekend
    classgrid share
    classgrid open-share "https://classgrid.app/builder?s=..."
    classgrid export-png schedule.png
    classgrid groups names.txt --groups 4 --csv groups.csv
    classgrid interactive

Note:
- The interactive UI lives in classgrid/interactive.py
- Most commands print plain text so they can be scripted; `week` and
  `groups` draw rich tables
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from classgrid import groups as grp
from classgrid.conflicts import detect_conflicts, find_conflict_pairs, shared_days
from classgrid.export_groups import copy_to_clipboard, groups_to_text, write_groups_csv
from classgrid.export_png import END_HOUR, START_HOUR, export_schedule_png
from classgrid.model import CLASS_COLORS, ValidationError, new_entry, next_color
from classgrid.render import build_groups_table, build_week_table, entry_label
from classgrid.schedule import add_entry, remove_entry, update_entry, visible_days
from classgrid.share import DEFAULT_BASE_URL, build_share_url, load_shared
from classgrid.storage import (
    clear_history,
    load_entries,
    load_history,
    save_entries,
    save_history,
    set_data_dir,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _cmd_list(args: argparse.Namespace) -> int:
    """
    Print all classes, marking those involved in a conflict.
    """
    entries = load_entries()
    if not entries:
        print("No classes yet.")
        return 0

    conflicts = detect_conflicts(entries)
    for e in entries:
        mark = "  (conflict)" if e.id in conflicts else ""
        print(f"{e.id[:8]} | {entry_label(e, with_days=True)}{mark}")
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    entries = load_entries()
    color = args.color or next_color(e.color for e in entries)
    try:
        entry = new_entry(
            name=args.name,
            days=args.days,
            start_time=args.start,
            end_time=args.end,
            color=color,
            instructor=args.instructor,
            location=args.location,
        )
    except ValidationError as e:
        print(f"Invalid class: {e}")
        return 1

    entries = add_entry(entries, entry)
    save_entries(entries)
    print(f"Added: {entry.name} ({entry.id[:8]})")
    if entry.id in detect_conflicts(entries):
        print("Warning: this class overlaps another class.")
    return 0


def _cmd_edit(args: argparse.Namespace) -> int:
    entries = load_entries()
    changes: dict[str, object] = {}
    for attr, field_name in (
        ("name", "name"),
        ("days", "days"),
        ("start", "start_time"),
        ("end", "end_time"),
        ("color", "color"),
        ("instructor", "instructor"),
        ("location", "location"),
    ):
        value = getattr(args, attr)
        if value is not None:
            changes[field_name] = value

    if not changes:
        print("Nothing to change.")
        return 1

    try:
        entries = update_entry(entries, args.entry_id, **changes)
    except KeyError as e:
        print(e.args[0] if e.args else "Unknown class.")
        return 1
    except ValidationError as e:
        print(f"Invalid class: {e}")
        return 1

    save_entries(entries)
    print("Class updated.")
    return 0


def _cmd_remove(args: argparse.Namespace) -> int:
    entries = load_entries()
    try:
        remaining = remove_entry(entries, args.entry_id)
    except KeyError as e:
        print(e.args[0] if e.args else "Unknown class.")
        return 1

    save_entries(remaining)
    print(f"Removed (classes left: {len(remaining)})")
    return 0


def _cmd_clear(args: argparse.Namespace) -> int:
    save_entries([])
    print("All classes removed.")
    return 0


def _cmd_conflicts(args: argparse.Namespace) -> int:
    """
    Print all overlapping class pairs.
    """
    entries = load_entries()
    pairs = find_conflict_pairs(entries)
    if not pairs:
        print("No conflicts found.")
        return 0

    print(f"Conflicts found: {len(pairs)}")
    for a, b in pairs:
        days = ",".join(shared_days(a, b))
        print(f"- {days}: {a.name} {a.start_time}-{a.end_time}  <->  {b.name} {b.start_time}-{b.end_time}")
    return 0


def _cmd_week(args: argparse.Namespace) -> int:
    entries = load_entries()
    if not entries:
        print("No classes yet.")
        return 0

    conflicts = detect_conflicts(entries)
    console = Console()
    console.print(build_week_table(entries, visible_days(entries, args.weekend), conflicts))
    if conflicts:
        console.print("[red]You have overlapping classes. Check your schedule for time conflicts.[/]")
    return 0


def _cmd_share(args: argparse.Namespace) -> int:
    entries = load_entries()
    if not entries:
        print("No classes to share.")
        return 1

    print(build_share_url(entries, args.base_url))
    return 0


def _cmd_open_share(args: argparse.Namespace) -> int:
    entries = load_entries()
    updated, message = load_shared(entries, args.link)
    print(message)
    if updated is entries:
        return 1
    save_entries(updated)
    return 0


def _cmd_export_png(args: argparse.Namespace) -> int:
    entries = load_entries()
    if not entries:
        print("No classes to export.")
        return 1

    out_path = Path(args.out)
    if out_path.suffix.lower() != ".png":
        out_path = out_path.with_suffix(".png")

    try:
        path = export_schedule_png(
            entries,
            out_path,
            days=visible_days(entries, args.weekend),
            transparent=not args.opaque,
            scale=args.scale,
            start_hour=args.start_hour,
            end_hour=args.end_hour,
        )
    except (OSError, ValueError) as e:
        logger.debug("PNG export failed", exc_info=True)
        print(f"Export failed: {e}")
        return 1

    print(f"Schedule exported as PNG: {path}")
    return 0


def _read_names(source: str) -> list[str]:
    if source == "-":
        return grp.parse_names(sys.stdin.read())
    return grp.parse_names(Path(source).read_text(encoding="utf-8"))


def _cmd_groups(args: argparse.Namespace) -> int:
    """
    Split a roster into random groups and remember the pairs for next time.
    """
    try:
        names = _read_names(args.names)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read names: {e}")
        return 1

    if len(names) < 2:
        print("Enter at least 2 names.")
        return 1

    mode = grp.MODE_PER_GROUP if args.per_group is not None else grp.MODE_GROUPS
    requested = args.per_group if args.per_group is not None else args.groups
    try:
        count = grp.compute_group_count(mode, requested, len(names))
    except ValidationError as e:
        print(str(e))
        return 1

    history = [] if args.no_history else load_history()
    rng = random.Random(args.seed) if args.seed is not None else None
    result = grp.partition(names, count, history, rng=rng)

    if not args.no_history:
        save_history(grp.record_history(history, result))

    Console().print(build_groups_table(result))

    if args.csv:
        try:
            path = write_groups_csv(result, args.csv)
            print(f"CSV written: {path}")
        except OSError as e:
            print(f"CSV export failed: {e}")
    if args.copy:
        if copy_to_clipboard(groups_to_text(result)):
            print("Results copied to clipboard")
        else:
            print("Could not copy to clipboard.")
    return 0


def _cmd_clear_history(args: argparse.Namespace) -> int:
    clear_history()
    print("Pair history cleared")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="classgrid", description="ClassGrid schedule builder and group generator")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory for schedule and history files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    color_names = [name for name, _ in CLASS_COLORS]

    sub.add_parser("list", help="List classes")

    p_add = sub.add_parser("add", help="Add a class")
    p_add.add_argument("name", type=str, help="Class name (e.g. 'Calculus II')")
    p_add.add_argument("--days", nargs="+", required=True, help="Days, e.g. Mon Wed")
    p_add.add_argument("--start", required=True, help="Start time HH:MM")
    p_add.add_argument("--end", required=True, help="End time HH:MM")
    p_add.add_argument("--color", default=None, help=f"One of {', '.join(color_names)}")
    p_add.add_argument("--instructor", default=None)
    p_add.add_argument("--location", default=None)

    p_edit = sub.add_parser("edit", help="Edit a class by id (or id prefix)")
    p_edit.add_argument("entry_id", type=str)
    p_edit.add_argument("--name", default=None)
    p_edit.add_argument("--days", nargs="+", default=None)
    p_edit.add_argument("--start", default=None)
    p_edit.add_argument("--end", default=None)
    p_edit.add_argument("--color", default=None)
    p_edit.add_argument("--instructor", default=None)
    p_edit.add_argument("--location", default=None)

    p_remove = sub.add_parser("remove", help="Remove a class by id (or id prefix)")
    p_remove.add_argument("entry_id", type=str)

    sub.add_parser("clear", help="Remove all classes")
    sub.add_parser("conflicts", help="Show overlapping classes")

    p_week = sub.add_parser("week", help="Show the weekly grid")
    p_week.add_argument("--weekend", action="store_true", help="Include Sat/Sun")

    p_share = sub.add_parser("share", help="Print a shareable link")
    p_share.add_argument("--base-url", default=DEFAULT_BASE_URL)

    p_open = sub.add_parser("open-share", help="Load a shared schedule (link or token)")
    p_open.add_argument("link", type=str)

    p_png = sub.add_parser("export-png", help="Export the weekly grid as PNG")
    p_png.add_argument("out", type=str, help="Output file (e.g. my-schedule.png)")
    p_png.add_argument("--opaque", action="store_true", help="White background instead of transparent")
    p_png.add_argument("--scale", type=float, default=2.0, help="Resolution multiplier")
    p_png.add_argument("--weekend", action="store_true")
    p_png.add_argument("--start-hour", type=int, default=START_HOUR)
    p_png.add_argument("--end-hour", type=int, default=END_HOUR)

    p_groups = sub.add_parser("groups", help="Split names into random groups")
    p_groups.add_argument("names", type=str, help="File with one name per line ('-' = stdin)")
    mode = p_groups.add_mutually_exclusive_group()
    mode.add_argument("--groups", type=int, default=2, help="Number of groups")
    mode.add_argument("--per-group", type=int, default=None, help="People per group (at most)")
    p_groups.add_argument("--no-history", action="store_true", help="Ignore and do not record pair history")
    p_groups.add_argument("--seed", type=int, default=None, help="Seed for reproducible groups")
    p_groups.add_argument("--csv", type=str, default=None, help="Write groups to a CSV file")
    p_groups.add_argument("--copy", action="store_true", help="Copy results to the clipboard")

    sub.add_parser("clear-history", help="Forget previous group pairings")
    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


_HANDLERS = {
    "list": _cmd_list,
    "add": _cmd_add,
    "edit": _cmd_edit,
    "remove": _cmd_remove,
    "clear": _cmd_clear,
    "conflicts": _cmd_conflicts,
    "week": _cmd_week,
    "share": _cmd_share,
    "open-share": _cmd_open_share,
    "export-png": _cmd_export_png,
    "groups": _cmd_groups,
    "clear-history": _cmd_clear_history,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    set_data_dir(args.data_dir)

    if args.command == "interactive":
        from classgrid.interactive import run_interactive

        run_interactive()
        raise SystemExit(0)

    handler = _HANDLERS.get(args.command)
    if handler is None:
        raise SystemExit(2)
    raise SystemExit(handler(args))

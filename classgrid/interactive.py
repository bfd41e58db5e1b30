from __future__ import annotations

import random
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from classgrid import groups as grp
from classgrid.conflicts import detect_conflicts, find_conflict_pairs, shared_days
from classgrid.export_groups import copy_to_clipboard, groups_to_text, write_groups_csv
from classgrid.export_png import export_schedule_png, hsl_to_rgb
from classgrid.model import CLASS_COLORS, ALL_DAYS, ClassEntry, ValidationError, color_name, new_entry, next_color
from classgrid.render import build_entries_table, build_groups_table, build_week_table, entry_label
from classgrid.schedule import add_entry, remove_entry, update_entry, visible_days
from classgrid.share import build_share_url, load_shared
from classgrid.storage import clear_history, load_entries, load_history, save_entries, save_history

console = Console()


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    # prompts are plain text; "[y/N]" and entry names must not parse as markup
    return console.input(escape(msg))


def run_interactive() -> None:
    """
    Interactive menu loop. The schedule is reloaded from storage on every
    iteration and saved right after each change.
    """
    show_weekend = False
    while True:
        entries = load_entries()
        conflicts = detect_conflicts(entries)

        _println("\n=== ClassGrid (interactive) ===")
        _println(f"Classes: {len(entries)} | In conflict: {len(conflicts)}")

        choice = _prompt(
            "\n[1] Add class\n"
            "[2] Edit class\n"
            "[3] Remove class\n"
            "[4] Week view\n"
            "[5] Show conflicts\n"
            "[6] Share link\n"
            "[7] Open shared link\n"
            "[8] Export PNG\n"
            "[9] Group generator\n"
            "[w] Toggle weekend columns\n"
            "[c] Clear all classes\n"
            "[0] Exit\n"
            "Select: "
        ).strip().lower()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_add(entries)
        elif choice == "2":
            _flow_edit(entries)
        elif choice == "3":
            _flow_remove(entries)
        elif choice == "4":
            _flow_week(entries, show_weekend)
        elif choice == "5":
            _flow_conflicts(entries)
        elif choice == "6":
            _flow_share(entries)
        elif choice == "7":
            _flow_open_share(entries)
        elif choice == "8":
            _flow_export_png(entries, show_weekend)
        elif choice == "9":
            _flow_groups()
        elif choice == "w":
            show_weekend = not show_weekend
            _println(f"Weekend columns: {'on' if show_weekend else 'off'}")
        elif choice == "c":
            if _prompt("Remove ALL classes? [y/N]: ").strip().lower() == "y":
                save_entries([])
                _println("All classes removed.")
        else:
            _println("Invalid choice.")


def _ask_days(default: Optional[list[str]] = None) -> list[str]:
    hint = " ".join(default) if default else "e.g. Mon Wed"
    raw = _prompt(f"Days ({'/'.join(ALL_DAYS)}) [{hint}]: ").strip()
    if not raw and default:
        return list(default)
    return raw.replace(",", " ").split()


def _ask_color(default: str) -> str:
    table = Table(box=box.SIMPLE, title="Colors")
    table.add_column("#", justify="right")
    table.add_column("Color")
    for i, (name, value) in enumerate(CLASS_COLORS, start=1):
        table.add_row(str(i), f"[{_rich_color(value)}]■[/] {name}")
    console.print(table)

    pick = _prompt(f"Color number [{color_name(default)}]: ").strip()
    if pick.isdigit() and 1 <= int(pick) <= len(CLASS_COLORS):
        return CLASS_COLORS[int(pick) - 1][1]
    return default


def _rich_color(value: str) -> str:
    r, g, b = (int(round(c * 255)) for c in hsl_to_rgb(value))
    return f"rgb({r},{g},{b})"


def _flow_add(entries: list[ClassEntry]) -> None:
    name = _prompt("Class name: ").strip()
    instructor = _prompt("Instructor [blank = none]: ").strip()
    location = _prompt("Location [blank = none]: ").strip()
    days = _ask_days()
    start = _prompt("Start time [09:00]: ").strip() or "09:00"
    end = _prompt("End time [10:00]: ").strip() or "10:00"
    color = _ask_color(next_color(e.color for e in entries))

    try:
        entry = new_entry(name, days, start, end, color, instructor or None, location or None)
    except ValidationError as e:
        _println(f"[red]{escape(str(e))}[/]")
        return

    entries = add_entry(entries, entry)
    save_entries(entries)
    _println("Class added")
    if entry.id in detect_conflicts(entries):
        _println("[yellow]This class overlaps another class.[/]")


def _pick_entry(entries: list[ClassEntry], title: str) -> Optional[ClassEntry]:
    if not entries:
        _println("No classes yet.")
        return None

    console.print(build_entries_table(entries, detect_conflicts(entries)))
    pick = _prompt(f"{title} - enter number (blank = cancel): ").strip()
    if not pick:
        return None
    if not pick.isdigit() or not (1 <= int(pick) <= len(entries)):
        _println("Out of range.")
        return None
    return entries[int(pick) - 1]


def _flow_edit(entries: list[ClassEntry]) -> None:
    entry = _pick_entry(entries, "Edit class")
    if entry is None:
        return

    name = _prompt(f"Class name [{entry.name}]: ").strip() or entry.name
    instructor = _prompt(f"Instructor [{entry.instructor or ''}] ('-' = none): ").strip()
    location = _prompt(f"Location [{entry.location or ''}] ('-' = none): ").strip()
    days = _ask_days(entry.days)
    start = _prompt(f"Start time [{entry.start_time}]: ").strip() or entry.start_time
    end = _prompt(f"End time [{entry.end_time}]: ").strip() or entry.end_time
    color = _ask_color(entry.color)

    def _keep_or_clear(value: str, current: Optional[str]) -> Optional[str]:
        if value == "-":
            return None
        return value or current

    try:
        updated = update_entry(
            entries,
            entry.id,
            name=name,
            instructor=_keep_or_clear(instructor, entry.instructor),
            location=_keep_or_clear(location, entry.location),
            days=days,
            start_time=start,
            end_time=end,
            color=color,
        )
    except ValidationError as e:
        _println(f"[red]{escape(str(e))}[/]")
        return

    save_entries(updated)
    _println("Class updated")


def _flow_remove(entries: list[ClassEntry]) -> None:
    entry = _pick_entry(entries, "Remove class")
    if entry is None:
        return
    save_entries(remove_entry(entries, entry.id))
    _println(f"Class removed: {escape(entry.name)}")


def _flow_week(entries: list[ClassEntry], show_weekend: bool) -> None:
    if not entries:
        _println("No classes yet.")
        return
    conflicts = detect_conflicts(entries)
    console.print(build_week_table(entries, visible_days(entries, show_weekend), conflicts))
    if conflicts:
        _println("[red]You have overlapping classes. Check your schedule for time conflicts.[/]")


def _flow_conflicts(entries: list[ClassEntry]) -> None:
    pairs = find_conflict_pairs(entries)
    if not pairs:
        _println("No conflicts found.")
        return

    table = Table(box=box.SIMPLE, title=f"Conflicts ({len(pairs)})")
    table.add_column("Days")
    table.add_column("Class")
    table.add_column("")
    table.add_column("Class")
    for a, b in pairs:
        table.add_row(",".join(shared_days(a, b)), escape(entry_label(a)), "↔", escape(entry_label(b)))
    console.print(table)


def _flow_share(entries: list[ClassEntry]) -> None:
    if not entries:
        _println("No classes to share.")
        return
    url = build_share_url(entries)
    _println(escape(url))
    if copy_to_clipboard(url):
        _println("Shareable link copied to clipboard!")


def _flow_open_share(entries: list[ClassEntry]) -> None:
    link = _prompt("Paste link or token: ").strip()
    if not link:
        return
    updated, message = load_shared(entries, link)
    _println(escape(message))
    if updated is not entries:
        save_entries(updated)


def _flow_export_png(entries: list[ClassEntry], show_weekend: bool) -> None:
    if not entries:
        _println("No classes to export.")
        return

    downloads = Path.home() / "Downloads"
    default_name = "my-schedule.png"
    out_in = _prompt(f"File name [{default_name}]: ").strip()
    out_path = downloads / (out_in or default_name)
    if out_path.suffix.lower() != ".png":
        out_path = out_path.with_suffix(".png")
    transparent = _prompt("Transparent background? [Y/n]: ").strip().lower() != "n"

    try:
        path = export_schedule_png(
            entries, out_path, days=visible_days(entries, show_weekend), transparent=transparent
        )
    except (OSError, ValueError) as e:
        _println(f"[red]Export failed: {escape(str(e))}[/]")
        return
    _println(f"Schedule exported as PNG: {escape(str(path.resolve()))}")


def _flow_groups() -> None:
    """
    Group generator: paste names, choose the mode, generate and post-edit.
    """
    _println("Paste names, one per line. Finish with an empty line.")
    lines: list[str] = []
    while True:
        line = _prompt("")
        if not line.strip():
            break
        lines.append(line)
    names = grp.parse_names("\n".join(lines))
    _println(f"{len(names)} name{'s' if len(names) != 1 else ''} detected")
    if len(names) < 2:
        _println("[red]Enter at least 2 names[/]")
        return

    mode_in = _prompt("[1] Number of groups  [2] People per group: ").strip()
    mode = grp.MODE_PER_GROUP if mode_in == "2" else grp.MODE_GROUPS
    count_in = _prompt("Count [2]: ").strip()
    requested = int(count_in) if count_in.isdigit() else 2
    try:
        group_count = grp.compute_group_count(mode, requested, len(names))
    except ValidationError as e:
        _println(f"[red]{escape(str(e))}[/]")
        return

    rng = random.Random()
    result = _generate(names, group_count, rng)

    while True:
        choice = _prompt(
            "\n[1] Regenerate  [2] Move member  [3] Copy  [4] CSV  [5] Clear pair history  [0] Back\nSelect: "
        ).strip()
        if choice in ("0", ""):
            return
        if choice == "1":
            result = _generate(names, group_count, rng)
        elif choice == "2":
            result = _move_member(result)
        elif choice == "3":
            if copy_to_clipboard(groups_to_text(result)):
                _println("Results copied to clipboard")
            else:
                _println("[yellow]Clipboard not available; here is the text:[/]")
                _println(escape(groups_to_text(result)))
        elif choice == "4":
            out = Path.home() / "Downloads" / "groups.csv"
            try:
                _println(f"CSV downloaded: {escape(str(write_groups_csv(result, out)))}")
            except OSError as e:
                _println(f"[red]CSV export failed: {escape(str(e))}[/]")
        elif choice == "5":
            clear_history()
            _println("Pair history cleared")
        else:
            _println("Invalid choice.")


def _generate(names: list[str], group_count: int, rng: random.Random) -> grp.Groups:
    history = load_history()
    result = grp.partition(names, group_count, history, rng=rng)
    save_history(grp.record_history(history, result))
    console.print(build_groups_table(result))
    return result


def _move_member(groups: grp.Groups) -> grp.Groups:
    raw = _prompt("Move: <group> <position> to <group> [position] (e.g. '1 2 3'): ").split()
    if len(raw) < 3 or not all(x.isdigit() for x in raw):
        _println("Expected numbers.")
        return groups

    src_g, src_i, dst_g = int(raw[0]) - 1, int(raw[1]) - 1, int(raw[2]) - 1
    dst_i = int(raw[3]) - 1 if len(raw) > 3 else len(groups[dst_g]) if 0 <= dst_g < len(groups) else 0
    try:
        moved = grp.move_member(groups, src_g, src_i, dst_g, dst_i)
    except IndexError:
        _println("Out of range.")
        return groups

    console.print(build_groups_table(moved))
    return moved

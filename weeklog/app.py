from __future__ import annotations

import argparse
import sys
from datetime import date, datetime
from pathlib import Path

from . import __version__
from .database import JournalDatabase
from .errors import InvalidTransitionError, JournalError
from .keys import activity_key
from .models import COLOR_PALETTE, EntryDraft, EntryStatus, SaveIntent
from .log_setup import setup_logger
from .paths import data_directory, database_path, ensure_directories, exports_directory, log_path
from .report import entry_summary, save_week_snapshot, week_markdown
from .settings import load_settings, save_setting
from .slots import (
    DAY_ABBREVIATIONS,
    DAY_NAMES,
    day_index,
    format_short_date,
    slot_catalog,
    slot_index,
    week_offset_of,
    week_range_label,
)
from .store import EntryStore
from .transfer import import_file, write_export
from .workflow import Journal

STATUS_MARKERS = {
    EntryStatus.PLANNED: "[planned]",
    EntryStatus.NEEDS_REVIEW: "[review!]",
    EntryStatus.COMPLETED: "[done]",
    EntryStatus.INCOMPLETE: "[missed]",
}


def _parse_slot(value: str) -> int:
    text = value.strip()
    if text.isdigit():
        hour = int(text)
        if 0 <= hour <= 23:
            return hour
        raise argparse.ArgumentTypeError(f"hour must be 0-23: {value}")
    try:
        return slot_index(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"unknown slot {value!r}; use an hour 0-23 or a label like '10-11 am'") from None


def _parse_day(value: str) -> int:
    text = value.strip()
    if text.isdigit() and 0 <= int(text) <= 6:
        return int(text)
    lowered = text.lower()
    for index, (abbreviation, name) in enumerate(zip(DAY_ABBREVIATIONS, DAY_NAMES)):
        if lowered in {abbreviation.lower(), name.lower(), name[:3].lower()}:
            return index
    raise argparse.ArgumentTypeError(f"unknown day {value!r}; use 0-6 (Monday=0) or a day name")


def _parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"--now must be ISO-8601, got {value!r}") from None


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"--date must be YYYY-MM-DD, got {value!r}") from None


def _add_day_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--week", type=int, default=0, help="Week offset from this week (negative = past)")
    parser.add_argument("--day", type=_parse_day, default=None, help="Day 0-6 (Monday=0) or a day name; defaults to today")
    parser.add_argument("--date", type=_parse_date, default=None, help="Calendar date; overrides --week and --day")


def _add_position_arguments(parser: argparse.ArgumentParser, slot_required: bool = True) -> None:
    _add_day_arguments(parser)
    parser.add_argument("--slot", type=_parse_slot, required=slot_required, default=None, help="Hour 0-23 or slot label")


def _show_day(journal: Journal, args: argparse.Namespace) -> None:
    if args.date is not None:
        journal.show(week_offset_of(args.date, journal.now().date()), day_index(args.date))
    else:
        journal.show(args.week, args.day)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weeklog", description="Weekly activity and mood journal")
    parser.add_argument("--version", action="store_true", help="Print app version and exit")
    parser.add_argument("--data-dir", default=None, help="Directory holding the journal database")
    parser.add_argument("--now", type=_parse_now, default=None, help="Evaluate statuses as of this ISO-8601 time")
    parser.add_argument("--verbose", action="store_true", help="Also log to stderr")
    commands = parser.add_subparsers(dest="command")

    day = commands.add_parser("day", help="Show the hourly slots of one day")
    _add_day_arguments(day)

    week = commands.add_parser("week", help="Show all entries of a week")
    week.add_argument("--week", type=int, default=0)

    commands.add_parser("pending", help="List plans that need review")

    add = commands.add_parser("add", help="Add or edit an entry (defaults to the current hour)")
    _add_position_arguments(add, slot_required=False)
    add.add_argument("text", help="What you did or plan to do")
    add.add_argument("--pleasure", type=int, default=None)
    add.add_argument("--mastery", type=int, default=None)
    add.add_argument("--color", choices=COLOR_PALETTE, default="")
    add.add_argument("--edit", action="store_true", help="Edit the stored entry instead of logging a replacement")

    review = commands.add_parser("review", help="Reconcile a plan whose time has passed")
    _add_position_arguments(review)
    review.add_argument("answer", choices=("yes", "no"))
    review.add_argument("--pleasure", type=int, default=None)
    review.add_argument("--mastery", type=int, default=None)
    review.add_argument("--instead", default=None, help="What you did instead (with 'no')")

    delete = commands.add_parser("delete", help="Delete an entry and its replacement")
    _add_position_arguments(delete)

    mood = commands.add_parser("mood", help="Rate the mood of a day (1-10)")
    mood.add_argument("rating", type=int)
    _add_day_arguments(mood)

    export = commands.add_parser("export", help="Export activities and moods as JSON")
    export.add_argument("--output", default=None, help="File or directory to write")

    import_parser = commands.add_parser("import", help="Replace all data with an exported JSON file")
    import_parser.add_argument("file")

    report = commands.add_parser("report", help="Render a week as Markdown")
    report.add_argument("--week", type=int, default=0)
    report.add_argument("--output", default=None)

    snapshot = commands.add_parser("snapshot", help="Render a printable week grid (.png or .pdf)")
    snapshot.add_argument("output")
    snapshot.add_argument("--week", type=int, default=0)

    clear = commands.add_parser("clear", help="Delete all activities and moods")
    clear.add_argument("--yes", action="store_true", help="Confirm deleting everything")

    settings = commands.add_parser("settings", help="List or change settings")
    settings.add_argument("key", nargs="?")
    settings.add_argument("value", nargs="?")
    return parser


def _command_day(journal: Journal, args: argparse.Namespace) -> int:
    _show_day(journal, args)
    day_date = journal.week_dates()[journal.day]
    header = f"{week_range_label(journal.week, journal.now().date())} | {DAY_NAMES[journal.day]} {format_short_date(day_date)}"
    mood = journal.mood(journal.week, journal.day)
    if mood is not None:
        header += f" | Mood: {mood}"
    print(header)
    labels = slot_catalog()
    for key, entry in journal.day_rows():
        line = f"{labels[key.slot]:>12}  "
        if entry is not None:
            marker = STATUS_MARKERS.get(entry.status, "") if entry.status else ""
            line += f"{marker} {entry_summary(entry)}".strip()
        print(line.rstrip())
    return 0


def _command_week(journal: Journal, args: argparse.Namespace) -> int:
    journal.show(args.week)
    print(week_markdown(journal.store, journal.week, journal.now().date()))
    return 0


def _command_pending(journal: Journal, args: argparse.Namespace) -> int:
    labels = slot_catalog()
    pending = [(key, entry) for key, entry in journal.store.items() if entry.status is EntryStatus.NEEDS_REVIEW]
    if not pending:
        print("Nothing to review.")
        return 0
    for key, entry in pending:
        print(f"week {key.week:+d} {DAY_NAMES[key.day]} {labels[key.slot]}: {entry.activity}")
    return 0


def _command_add(journal: Journal, args: argparse.Namespace) -> int:
    _show_day(journal, args)
    if args.slot is None:
        form = journal.quick_add()
    else:
        form = journal.open_entry(activity_key(journal.week, journal.day, args.slot))
    intent = SaveIntent.EDIT_ENTRY if args.edit else form.intent
    if intent is None:
        raise InvalidTransitionError("This plan needs review first: run `weeklog review ... yes|no`.")
    base = form.draft
    if intent is SaveIntent.EDIT_ENTRY and form.intent is not SaveIntent.EDIT_ENTRY:
        stored = journal.store.get(form.key)
        if stored is not None:
            base = EntryDraft(stored.activity, stored.pleasure, stored.mastery, stored.color)
    # Options left out keep what is already stored at the slot.
    draft = EntryDraft(
        activity=args.text,
        pleasure=base.pleasure if args.pleasure is None else args.pleasure,
        mastery=base.mastery if args.mastery is None else args.mastery,
        color=args.color or base.color,
    )
    entry = journal.save_entry(form.key, draft, intent)
    print(f"Saved {slot_catalog()[form.key.slot]} on {DAY_NAMES[form.key.day]}: {entry_summary(entry)}")
    return 0


def _command_review(journal: Journal, args: argparse.Namespace) -> int:
    _show_day(journal, args)
    key = activity_key(journal.week, journal.day, args.slot)
    if args.answer == "yes":
        entry = journal.confirm_completed(key, args.pleasure, args.mastery)
        print(f"Completed: {entry_summary(entry)}")
        return 0

    form = journal.mark_incomplete(key)
    print(f"Marked incomplete: {form.planned_activity}")
    if args.instead:
        entry = journal.save_entry(key, EntryDraft(activity=args.instead), form.intent)
        print(f"Logged instead: {entry.replacement.activity}")
    return 0


def _command_delete(journal: Journal, args: argparse.Namespace) -> int:
    _show_day(journal, args)
    key = activity_key(journal.week, journal.day, args.slot)
    if not journal.delete_entry(key):
        print("No entry at that slot.")
        return 1
    print("Deleted.")
    return 0


def _command_mood(journal: Journal, args: argparse.Namespace) -> int:
    _show_day(journal, args)
    rating = journal.save_mood(journal.week, journal.day, args.rating)
    print(f"Mood for {DAY_NAMES[journal.day]}: {rating}")
    return 0


def _command_export(journal: Journal, args: argparse.Namespace, base: Path) -> int:
    target = Path(args.output) if args.output else (journal.settings.export_directory or exports_directory(base))
    path = write_export(journal.store, target, journal.now())
    print(f"Exported to {path}")
    return 0


def _command_import(journal: Journal, args: argparse.Namespace) -> int:
    activities, moods = import_file(journal.store, Path(args.file))
    journal.refresh()
    print(f"Data imported successfully: {activities} activities, {moods} moods.")
    return 0


def _command_report(journal: Journal, args: argparse.Namespace) -> int:
    journal.show(args.week)
    text = week_markdown(journal.store, journal.week, journal.now().date())
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(text)
    return 0


def _command_snapshot(journal: Journal, args: argparse.Namespace) -> int:
    journal.show(args.week)
    path = save_week_snapshot(journal.store, journal.week, Path(args.output), journal.now().date())
    print(f"Wrote {path}")
    return 0


def _command_clear(journal: Journal, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear data without --yes.", file=sys.stderr)
        return 1
    journal.clear()
    print("All activities and moods deleted.")
    return 0


def _command_settings(db: JournalDatabase, args: argparse.Namespace) -> int:
    if args.key is None:
        for key, value in sorted(db.list_settings().items()):
            print(f"{key}={value}")
        return 0
    if args.value is None:
        print(db.get_setting(args.key, "") or "")
        return 0
    save_setting(db, args.key, args.value)
    print(f"{args.key}={args.value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        return 0
    if args.command is None:
        args = parser.parse_args([*(argv if argv is not None else sys.argv[1:]), "day"])

    base = Path(args.data_dir) if args.data_dir else data_directory()
    ensure_directories(base)
    setup_logger(log_path(base), verbose=args.verbose)
    db = JournalDatabase(database_path(base))

    try:
        if args.command == "settings":
            return _command_settings(db, args)

        now = args.now
        journal = Journal(EntryStore(db), load_settings(db), clock=(lambda: now) if now else None)
        journal.load()

        if args.command == "export":
            return _command_export(journal, args, base)
        handlers = {
            "day": _command_day,
            "week": _command_week,
            "pending": _command_pending,
            "add": _command_add,
            "review": _command_review,
            "delete": _command_delete,
            "mood": _command_mood,
            "import": _command_import,
            "report": _command_report,
            "snapshot": _command_snapshot,
            "clear": _command_clear,
        }
        return handlers[args.command](journal, args)
    except (JournalError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

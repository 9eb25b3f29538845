"""Command line entry point for inspecting and maintaining learning data."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from learninghub.core.catalog import UnitCatalog
from learninghub.core.errors import SnapshotError
from learninghub.core.formatting import format_date, format_duration, format_relative_time
from learninghub.core.hub import LearningHub


def configure_logging(verbose: bool = False) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="learninghub", description=__doc__)
    parser.add_argument("--data-dir", type=Path, default=None, help="state directory")
    parser.add_argument("--catalog", type=Path, default=None, help="catalog YAML file")
    parser.add_argument("-v", "--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("summary", help="show study analytics")

    export = commands.add_parser("export", help="write a backup file")
    export.add_argument("directory", nargs="?", type=Path, default=Path("."))

    import_ = commands.add_parser("import", help="load a backup file")
    import_.add_argument("file", type=Path)
    import_.add_argument("--replace", action="store_true", help="replace instead of merge")

    reset = commands.add_parser("reset", help="erase all learning data")
    reset.add_argument("--yes", action="store_true", help="confirm the reset")

    complete = commands.add_parser("complete", help="mark a unit as completed")
    complete.add_argument("unit")

    bookmarks = commands.add_parser("bookmarks", help="list or search bookmarks")
    bookmarks.add_argument("query", nargs="?", default="")
    return parser


def _print_summary(hub: LearningHub) -> None:
    report = hub.stats.analytics()
    now = hub.context.now_ms()
    print(f"Completed:   {report.completed_modules}/{report.total_modules} ({report.completion_rate}%)")
    print(f"Time spent:  {format_duration(report.total_time_spent)}")
    print(f"Streak:      {report.study_streak} day(s), last on {report.last_study_date or '-'}")
    print(f"Bookmarks:   {report.bookmarks_count}")
    for entry in report.recent_activity:
        print(f"  {format_relative_time(entry.timestamp, now):>16}  {entry.description} ({entry.unit_id})")


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    catalog = UnitCatalog.from_file(args.catalog) if args.catalog else UnitCatalog.default()
    hub = LearningHub.open(args.data_dir, catalog=catalog)

    if args.command == "summary":
        _print_summary(hub)
    elif args.command == "export":
        target = hub.snapshots.export_snapshot().write_to(args.directory)
        print(target)
    elif args.command == "import":
        try:
            asyncio.run(hub.snapshots.import_file(args.file, merge=not args.replace))
        except SnapshotError as e:
            logging.error("Import failed: %s", e)
            return 1
        _print_summary(hub)
    elif args.command == "reset":
        if not args.yes:
            logging.error("Refusing to reset without --yes")
            return 1
        hub.reset_all()
    elif args.command == "complete":
        if args.unit not in catalog:
            logging.warning("Unit %s is not in the catalog", args.unit)
        hub.progress.mark_complete(args.unit)
        _print_summary(hub)
    elif args.command == "bookmarks":
        found = hub.bookmarks.search(args.query) if args.query else hub.bookmarks.list()
        for bookmark in found:
            print(f"{format_date(bookmark.created_at)}\t{bookmark.unit_id}\t{bookmark.title}\t{bookmark.path}")
    return 0


if __name__ == "__main__":
    sys.exit(run())

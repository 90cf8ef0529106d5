#!/usr/bin/env python3
"""Migrate the grouped Firebase export into the Supabase schema.

This script:
- Empties auth.users, channels, user_channel, tracks and channel_track
- Inserts every user, with their channel and tracks, one user at a time
- Writes a report listing which source users were migrated and which failed

Usage:
    # Full migration
    python scripts/migrate_firebase.py --input exports/entities.json

    # Against another database, with a progress bar
    python scripts/migrate_firebase.py --input exports/entities.json \\
        --database-url "postgresql+asyncpg://..." --progress-bar

Environment variables:
    DATABASE_URL: Destination PostgreSQL URL
    INSERT_CONCURRENCY: Sibling inserts in flight per user
    REPORT_DIR: Where run reports are written
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from channel_migrator.config import get_settings
from channel_migrator.core import MigrationError, configure_logging
from channel_migrator.db import check_connection, close_engine, create_engine
from channel_migrator.runner import run_migration, save_summary
from channel_migrator.schemas import RunSummary
from channel_migrator.services import LogProgressObserver, TqdmProgressObserver, load_export


def print_summary(summary: RunSummary, report_path: Path) -> None:
    """Print migration summary."""
    result = summary.result
    print("\n" + "=" * 60)
    print("MIGRATION SUMMARY")
    print("=" * 60)
    print(f"Entities:  {result.total}")
    print(f"OK:        {len(result.ok)}")
    print(f"Failed:    {len(result.failed)}")
    print(f"Rejected:  {len(summary.rejected)} invalid export records")
    for table, count in summary.row_counts.items():
        print(f"  {table:<16} {count} rows")
    if result.failed:
        print("\nFailed source users:")
        for user_id in result.failed[:10]:
            print(f"  - {user_id}")
        if len(result.failed) > 10:
            print(f"  ... and {len(result.failed) - 10} more")
    if summary.rejected:
        print("\nRejected export records:")
        for record in summary.rejected[:10]:
            print(f"  - #{record.position} {record.user_id or '(no user id)'}: {record.errors[0]}")
    print(f"\nReport: {report_path}")
    print("=" * 60)


async def main(
    input_path: Path,
    database_url: str | None = None,
    report_dir: Path | None = None,
    progress_bar: bool = False,
    concurrency: int | None = None,
) -> int:
    """Main migration function."""
    settings = get_settings()
    if concurrency is not None:
        settings = settings.model_copy(update={"insert_concurrency": concurrency})
    configure_logging(settings)

    try:
        export = load_export(input_path)
    except MigrationError as e:
        print(f"Cannot load export: {e}")
        return 2

    observer = TqdmProgressObserver() if progress_bar else LogProgressObserver()
    engine = create_engine(settings, database_url)

    try:
        await check_connection(engine)
        summary = await run_migration(
            engine, export.entities, settings, observer, rejected=export.rejected
        )
    except MigrationError as e:
        print(f"Migration aborted: {e}")
        return 2
    finally:
        await close_engine(engine)

    report_path = save_summary(summary, report_dir or settings.report_dir)
    print_summary(summary, report_path)
    return 0 if not (summary.result.failed or summary.rejected) else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Migrate grouped Firebase users, channels and tracks to Supabase"
    )
    parser.add_argument(
        "--input",
        required=True,
        type=Path,
        help="Grouped export file (JSON array of {user, channel, tracks})",
    )
    parser.add_argument(
        "--database-url",
        help="Destination database URL (overrides DATABASE_URL)",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        help="Directory for the run report (overrides REPORT_DIR)",
    )
    parser.add_argument(
        "--progress-bar",
        action="store_true",
        help="Show a progress bar instead of one log line per user",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Sibling inserts in flight per user (overrides INSERT_CONCURRENCY)",
    )

    args = parser.parse_args()

    exit_code = asyncio.run(main(
        input_path=args.input,
        database_url=args.database_url,
        report_dir=args.report_dir,
        progress_bar=args.progress_bar,
        concurrency=args.concurrency,
    ))
    sys.exit(exit_code)

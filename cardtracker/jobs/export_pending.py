"""
Export pending changes to a file for the desktop app to merge.

Writes one export document covering every pending entry. Nothing is
removed from the ledger; clear it separately once the desktop app has
merged the file.

Usage:
    python -m cardtracker.jobs.export_pending [--output DIR]
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from cardtracker.config import settings
from cardtracker.core.ledger import export_filename
from cardtracker.db.database import async_session_factory, init_db
from cardtracker.db.store import DurableStore, SqlAlchemyStore
from cardtracker.logging_setup import configure_logging
from cardtracker.models.failure import EmptyExportError, KnownError
from cardtracker.services.tracker import CardTracker

logger = logging.getLogger(__name__)


async def run_export(
    output_dir: Path,
    store: DurableStore | None = None,
    now: datetime | None = None,
) -> Path:
    """
    Write the export document into output_dir.

    Args:
        output_dir: Directory to write into (created if missing)
        store: Store to read from. Defaults to the configured database.
        now: Export timestamp. Defaults to the current time.

    Returns:
        Path of the written file

    Raises:
        EmptyExportError: If there is nothing pending
    """
    if store is None:
        await init_db()
        store = SqlAlchemyStore(async_session_factory)

    tracker = CardTracker(store)
    await tracker.ledger.load()
    document = tracker.export(now=now)

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(len(document.changes), document.exported_at)
    path.write_text(document.model_dump_json(indent=2), encoding="utf-8")

    logger.info(
        "pending_export_written",
        extra={"changes": len(document.changes), "path": str(path)},
    )
    return path


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Export pending changes.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(settings.export_dir),
        help=f"Directory to write into (default: {settings.export_dir})",
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    try:
        asyncio.run(run_export(args.output))
    except EmptyExportError as e:
        logger.warning("pending_export_empty", extra={"error_message": e.message})
        sys.exit(1)
    except KnownError as e:
        logger.error(
            "pending_export_failed",
            extra={"kind": e.kind.value, "error_message": e.message, "detail": e.detail},
        )
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Import a catalog document exported by the desktop app.

Validates the file, stores it as the active catalog and logs the load
summary. Pending entries are untouched.

Usage:
    python -m cardtracker.jobs.import_catalog path/to/catalog.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from cardtracker.config import settings
from cardtracker.db.database import async_session_factory, init_db
from cardtracker.db.store import DurableStore, SqlAlchemyStore
from cardtracker.logging_setup import configure_logging
from cardtracker.models.failure import KnownError, ValidationError
from cardtracker.services.catalog_browse import CatalogSummary
from cardtracker.services.tracker import CardTracker

logger = logging.getLogger(__name__)


def read_catalog_file(path: Path) -> dict:
    """
    Read and parse a catalog file.

    Raises:
        ValidationError: If the file is not a JSON object
    """
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(
            message="Catalog file is not valid JSON.",
            detail=f"{path}: {e}",
        ) from e
    if not isinstance(document, dict):
        raise ValidationError(
            message="Invalid catalog file. Expected products and tags.",
            detail=f"{path}: top level is {type(document).__name__}",
        )
    return document


async def run_import(path: Path, store: DurableStore | None = None) -> CatalogSummary:
    """
    Load the catalog at path into the store.

    Args:
        path: Catalog JSON file
        store: Store to write to. Defaults to the configured database.

    Returns:
        Summary of the loaded catalog
    """
    if store is None:
        await init_db()
        store = SqlAlchemyStore(async_session_factory)

    document = read_catalog_file(path)
    tracker = CardTracker(store)
    summary = await tracker.load_catalog(document)
    logger.info(
        "catalog_imported",
        extra={
            "path": str(path),
            "products": summary.products,
            "cards": summary.cards,
            "tags": summary.tags,
            "owned": summary.owned,
        },
    )
    return summary


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Import a catalog document.")
    parser.add_argument("path", type=Path, help="Catalog JSON file")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    try:
        asyncio.run(run_import(args.path))
    except OSError as e:
        logger.error("catalog_read_failed", extra={"path": str(args.path), "error": str(e)})
        sys.exit(1)
    except KnownError as e:
        logger.error(
            "catalog_import_failed",
            extra={"kind": e.kind.value, "error_message": e.message, "detail": e.detail},
        )
        sys.exit(1)


if __name__ == "__main__":
    main()

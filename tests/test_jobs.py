"""Tests for the catalog import and pending export jobs."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from cardtracker.core.ledger import PendingLedger
from cardtracker.db.store import SqlAlchemyStore
from cardtracker.jobs import export_pending, import_catalog
from cardtracker.jobs.export_pending import run_export
from cardtracker.jobs.import_catalog import read_catalog_file, run_import
from cardtracker.models.failure import EmptyExportError, InvalidCatalogError, ValidationError
from cardtracker.models.pending import EntryTags, PendingDraft


@pytest.fixture
def catalog_file(tmp_path: Path, catalog_document) -> Path:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_document), encoding="utf-8")
    return path


class TestImportCatalog:
    async def test_run_import_stores_catalog(
        self, catalog_file: Path, store: SqlAlchemyStore, catalog_document, caplog
    ) -> None:
        """The file is validated, stored, summarized and logged."""
        with caplog.at_level(logging.INFO, logger="cardtracker.jobs.import_catalog"):
            summary = await run_import(catalog_file, store=store)

        assert summary.products == 3
        assert await store.get_catalog() == catalog_document
        (record,) = [r for r in caplog.records if r.getMessage() == "catalog_imported"]
        assert record.products == 3
        assert record.path == str(catalog_file)

    async def test_invalid_catalog_not_stored(
        self, tmp_path: Path, store: SqlAlchemyStore
    ) -> None:
        """A document missing tags is refused before anything is written."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"products": []}), encoding="utf-8")

        with pytest.raises(InvalidCatalogError):
            await run_import(path, store=store)

        assert await store.get_catalog() is None

    async def test_import_rejects_malformed_product(self, tmp_path: Path, store) -> None:
        """A product entry that is not an object fails validation, not with a crash."""
        path = tmp_path / "malformed.json"
        path.write_text(json.dumps({"products": ["oops"], "tags": {}}), encoding="utf-8")

        with pytest.raises(ValidationError):
            await run_import(path, store=store)

        assert await store.get_catalog() is None

    def test_read_rejects_bad_json(self, tmp_path: Path) -> None:
        """Unparseable files are a validation error."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValidationError):
            read_catalog_file(path)

    def test_read_rejects_non_object(self, tmp_path: Path) -> None:
        """A top-level array is not a catalog."""
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ValidationError):
            read_catalog_file(path)

    def test_main_exits_nonzero_on_failure(self, catalog_file: Path) -> None:
        """The CLI exits 1 when the import is refused."""
        with patch.object(
            import_catalog,
            "run_import",
            AsyncMock(side_effect=InvalidCatalogError(["tags"])),
        ):
            with pytest.raises(SystemExit) as exc_info:
                import_catalog.main([str(catalog_file)])

        assert exc_info.value.code == 1


class TestExportPending:
    async def test_run_export_writes_file(
        self, tmp_path: Path, store: SqlAlchemyStore, caplog
    ) -> None:
        """Every pending row is written; the ledger is kept."""
        ledger = PendingLedger(store)
        for number in ("1", "2"):
            await ledger.append(
                PendingDraft(
                    product="2024 Topps",
                    set="Base",
                    card_number=number,
                    parallel="Base",
                    player="",
                    team="",
                    tags=EntryTags(location="Box A"),
                )
            )

        with caplog.at_level(logging.INFO, logger="cardtracker.jobs.export_pending"):
            path = await run_export(
                tmp_path / "out", store=store, now=datetime(2024, 6, 1, 9, 5, tzinfo=UTC)
            )

        assert path.name == "cards_2024-06-01_0905_2ch.json"
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["format_version"] == 1
        assert [c["card_number"] for c in document["changes"]] == ["1", "2"]
        assert len(await store.get_all_pending()) == 2
        (record,) = [r for r in caplog.records if r.getMessage() == "pending_export_written"]
        assert record.changes == 2
        assert record.path == str(path)

    async def test_run_export_empty(self, tmp_path: Path, store: SqlAlchemyStore) -> None:
        """Nothing pending means no file."""
        with pytest.raises(EmptyExportError):
            await run_export(tmp_path, store=store)

        assert list(tmp_path.iterdir()) == []

    def test_main_exits_nonzero_when_empty(self, tmp_path: Path) -> None:
        """The CLI exits 1 when there is nothing to export."""
        with patch.object(
            export_pending,
            "run_export",
            AsyncMock(side_effect=EmptyExportError()),
        ):
            with pytest.raises(SystemExit) as exc_info:
                export_pending.main(["--output", str(tmp_path)])

        assert exc_info.value.code == 1

"""Tests for pending ledger endpoints."""

import pytest
from httpx import AsyncClient


@pytest.fixture
async def captured_client(loaded_client: AsyncClient) -> AsyncClient:
    """Client with three pending captures: #1 Base, #2 Base, #1 Gold."""
    await loaded_client.post(
        "/session/configure",
        json={
            "product": "2024 Topps",
            "sets": ["Base"],
            "parallels": ["Base", "Gold"],
            "location": "Box A",
        },
    )
    await loaded_client.post("/session/start")
    await loaded_client.post("/session/tap", json={"card_number": "1"})
    await loaded_client.post("/session/tap", json={"card_number": "2"})
    await loaded_client.post("/session/active-parallel", json={"name": "Gold"})
    await loaded_client.post("/session/tap", json={"card_number": "1"})
    return loaded_client


class TestListPending:
    async def test_empty(self, client: AsyncClient) -> None:
        """Nothing pending at first."""
        response = await client.get("/pending")

        assert response.json()["data"] == {"count": 0, "entries": []}

    async def test_entries_oldest_first(self, captured_client: AsyncClient) -> None:
        """Entries are listed in capture order."""
        response = await captured_client.get("/pending")

        entries = response.json()["data"]["entries"]
        assert [(e["card_number"], e["parallel"]) for e in entries] == [
            ("1", "Base"),
            ("2", "Base"),
            ("1", "Gold"),
        ]


class TestDeletePending:
    async def test_delete_one(self, captured_client: AsyncClient) -> None:
        """Deleting removes only that entry."""
        entries = (await captured_client.get("/pending")).json()["data"]["entries"]

        response = await captured_client.delete(f"/pending/{entries[1]['id']}")

        assert response.json()["data"]["deleted"] is True
        remaining = (await captured_client.get("/pending")).json()["data"]["entries"]
        assert [e["id"] for e in remaining] == [entries[0]["id"], entries[2]["id"]]

    async def test_delete_unknown_id(self, client: AsyncClient) -> None:
        """Deleting an unknown id is a no-op."""
        response = await client.delete("/pending/999")

        assert response.status_code == 200
        assert response.json()["data"]["deleted"] is False

    async def test_clear(self, captured_client: AsyncClient) -> None:
        """DELETE /pending wipes every entry."""
        response = await captured_client.delete("/pending")

        assert response.json()["data"]["cleared"] == 3
        assert (await captured_client.get("/pending")).json()["data"]["count"] == 0


class TestExport:
    async def test_export_document(self, captured_client: AsyncClient) -> None:
        """Export returns every entry in order, plus a file name."""
        response = await captured_client.post("/pending/export")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["filename"].startswith("cards_")
        assert data["filename"].endswith("_3ch.json")
        document = data["document"]
        assert document["format_version"] == 1
        assert document["export_id"]
        assert [c["parallel"] for c in document["changes"]] == ["Base", "Base", "Gold"]
        assert document["changes"][0]["tags"] == {"location": "Box A"}

    async def test_export_keeps_entries(self, captured_client: AsyncClient) -> None:
        """Exporting does not clear the ledger."""
        await captured_client.post("/pending/export")

        assert (await captured_client.get("/pending")).json()["data"]["count"] == 3

    async def test_export_empty(self, client: AsyncClient) -> None:
        """Exporting nothing is refused."""
        response = await client.post("/pending/export")

        assert response.status_code == 400
        failure = response.json()["failure"]
        assert failure["kind"] == "empty_result"
        assert failure["message"] == "No pending changes to export."

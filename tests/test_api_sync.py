"""Tests for inventory sync endpoints."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.db.operations import create_sync_run, finish_sync_run
from cardsurfer.jobs.sync_inventory import get_syncer
from cardsurfer.main import app
from cardsurfer.models.inventory import SyncResult, SyncStatus


@pytest.fixture
def syncer() -> Iterator[MagicMock]:
    """Stand-in syncer injected in place of the process-wide one."""
    fake = MagicMock()
    fake.is_running = False
    fake.sync_inventory = AsyncMock(
        return_value=SyncResult(
            product_count=1, variant_count=1, removed_count=0, elapsed_seconds=0.1
        )
    )
    app.dependency_overrides[get_syncer] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_syncer, None)


class TestSyncStatus:
    async def test_never_synced(self, client: AsyncClient) -> None:
        response = await client.get("/api/sync/status")

        assert response.status_code == 200
        assert response.json() == {"status": "never_synced"}

    async def test_latest_run_and_inventory(
        self, client: AsyncClient, session: AsyncSession, seed
    ) -> None:
        await seed(1, "Sol Ring", "Commander Masters", [(11, "Near Mint", "1.00", 3)])
        run = await create_sync_run(session)
        await finish_sync_run(
            session, run.id, SyncStatus.COMPLETED, products_synced=1, variants_synced=1
        )
        await session.commit()

        response = await client.get("/api/sync/status")

        data = response.json()
        assert data["lastSync"]["status"] == "completed"
        assert data["lastSync"]["productsSynced"] == 1
        assert data["lastSync"]["finishedAt"] is not None
        assert data["inventory"] == {"productCount": 1, "variantCount": 1, "totalStock": 3}
        assert "status" not in data

    async def test_failed_run_shows_error(self, client: AsyncClient, session: AsyncSession) -> None:
        run = await create_sync_run(session)
        await finish_sync_run(session, run.id, SyncStatus.FAILED, error_message="token rejected")
        await session.commit()

        response = await client.get("/api/sync/status")

        last_sync = response.json()["lastSync"]
        assert last_sync["status"] == "failed"
        assert last_sync["errorMessage"] == "token rejected"


class TestSyncTrigger:
    async def test_trigger_starts_background_sync(
        self, client: AsyncClient, syncer: MagicMock
    ) -> None:
        response = await client.post("/api/sync/trigger")

        assert response.status_code == 200
        assert response.json() == {"message": "Sync started"}
        syncer.sync_inventory.assert_awaited_once()

    async def test_trigger_while_running(self, client: AsyncClient, syncer: MagicMock) -> None:
        syncer.is_running = True

        response = await client.post("/api/sync/trigger")

        assert response.status_code == 200
        assert response.json() == {"message": "Sync already in progress"}
        syncer.sync_inventory.assert_not_awaited()

"""Tests for the scheduled inventory sync job."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from cardsurfer.jobs.sync_inventory import (
    build_syncer,
    run_cli_sync,
    run_periodic_sync,
    run_sync_guarded,
    run_sync_once,
)
from cardsurfer.models.failure import SyncError, SyncInProgressError
from cardsurfer.models.inventory import SyncResult


@pytest.fixture
def sync_result() -> SyncResult:
    return SyncResult(product_count=10, variant_count=25, removed_count=1, elapsed_seconds=1.2)


def mock_syncer(**kwargs) -> MagicMock:
    syncer = MagicMock()
    syncer.sync_inventory = AsyncMock(**kwargs)
    return syncer


class TestRunSyncOnce:
    @pytest.mark.asyncio
    async def test_success(self, sync_result: SyncResult):
        """Returns the sync result."""
        syncer = mock_syncer(return_value=sync_result)

        result = await run_sync_once(syncer, source="manual")

        assert result == sync_result
        syncer.sync_inventory.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        """Sync failures don't propagate to the scheduler."""
        syncer = mock_syncer(side_effect=SyncError("Shopify down", sync_run_id=3))

        result = await run_sync_once(syncer, source="scheduled")

        assert result is None
        assert "Shopify down" in caplog.text

    @pytest.mark.asyncio
    async def test_overlap_skipped(self):
        syncer = mock_syncer(side_effect=SyncInProgressError())

        assert await run_sync_once(syncer) is None


class TestRunSyncGuarded:
    @pytest.mark.asyncio
    async def test_unexpected_error_logged(self, caplog):
        syncer = mock_syncer(side_effect=RuntimeError("db down"))

        assert await run_sync_guarded(syncer, source="scheduled") is None
        assert "Unexpected sync error" in caplog.text


class TestRunPeriodicSync:
    @pytest.mark.asyncio
    async def test_runs_immediately_then_on_interval(self, sync_result: SyncResult):
        syncer = mock_syncer(return_value=sync_result)
        sleeps = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            if len(sleeps) == 2:
                raise asyncio.CancelledError

        with (
            patch("cardsurfer.jobs.sync_inventory.asyncio.sleep", side_effect=fake_sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_periodic_sync(syncer, interval_minutes=15)

        assert sleeps == [900, 900]
        assert syncer.sync_inventory.await_count == 2

    @pytest.mark.asyncio
    async def test_delayed_first_run(self, sync_result: SyncResult):
        syncer = mock_syncer(return_value=sync_result)

        with (
            patch(
                "cardsurfer.jobs.sync_inventory.asyncio.sleep",
                new_callable=AsyncMock,
                side_effect=asyncio.CancelledError,
            ),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_periodic_sync(syncer, interval_minutes=5, run_immediately=False)

        syncer.sync_inventory.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_keeps_running_after_failure(self, sync_result: SyncResult):
        syncer = mock_syncer(side_effect=[SyncError("first failed"), sync_result])
        calls = 0

        async def fake_sleep(_seconds: float) -> None:
            nonlocal calls
            calls += 1
            if calls == 2:
                raise asyncio.CancelledError

        with (
            patch("cardsurfer.jobs.sync_inventory.asyncio.sleep", side_effect=fake_sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_periodic_sync(syncer, interval_minutes=1)

        assert syncer.sync_inventory.await_count == 2

    @pytest.mark.asyncio
    async def test_keeps_running_after_unexpected_error(self, sync_result: SyncResult):
        """A database outage on one tick does not end the schedule."""
        db_down = OperationalError("INSERT INTO sync_log", {}, Exception("db down"))
        syncer = mock_syncer(side_effect=[db_down, sync_result])
        sleeps = 0

        async def fake_sleep(_seconds: float) -> None:
            nonlocal sleeps
            sleeps += 1
            if sleeps == 2:
                raise asyncio.CancelledError

        with (
            patch("cardsurfer.jobs.sync_inventory.asyncio.sleep", side_effect=fake_sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_periodic_sync(syncer, interval_minutes=1)

        assert syncer.sync_inventory.await_count == 2


class TestBuildSyncer:
    def test_wires_settings(self):
        with patch("cardsurfer.jobs.sync_inventory.settings") as mock_settings:
            mock_settings.shopify_client_id = "id"
            mock_settings.shopify_client_secret = "secret"
            mock_settings.shopify_store_domain = "cardsurfer.myshopify.com"
            mock_settings.shopify_api_version = "2026-01"
            mock_settings.sync_page_delay_seconds = 0.25
            mock_settings.token_refresh_margin_seconds = 120
            mock_settings.storefront_url = ""

            syncer = build_syncer()

        assert syncer.storefront_url == "https://cardsurfer.com"
        assert syncer.client.page_delay == 0.25
        assert syncer.client.token_cache.refresh_margin == timedelta(seconds=120)
        assert syncer.client.graphql_url == (
            "https://cardsurfer.myshopify.com/admin/api/2026-01/graphql.json"
        )


class TestRunCliSync:
    @pytest.mark.asyncio
    async def test_failures_propagate(self):
        syncer = mock_syncer(side_effect=SyncError("boom"))

        with (
            patch("cardsurfer.jobs.sync_inventory.init_db", new_callable=AsyncMock),
            patch("cardsurfer.jobs.sync_inventory.get_syncer", return_value=syncer),
            pytest.raises(SyncError),
        ):
            await run_cli_sync()

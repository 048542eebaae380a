"""
Tests for OperationalMonitor: combined fetch, polling and trigger guard.
"""
import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.domain.job_board_entities import (
    JobStats,
    ScraperLogEntry,
    ScraperLogPage,
    ScraperStatus,
)
from src.domain.job_board_value_objects import ScraperRunStatus
from src.gui.application.operational_monitor import (
    MonitorSnapshot,
    OperationalMonitor,
)
from src.infrastructure.adapters.job_board_errors import (
    AuthorizationError,
    TransportError,
    ValidationError,
)

POLL = 0.01


def _status(running: bool) -> ScraperStatus:
    return ScraperStatus(is_running=running)


def _apis(statuses):
    """Job and admin API mocks; scraper_status yields ``statuses`` then repeats the last."""
    sequence = list(statuses)

    async def scraper_status():
        return _status(sequence.pop(0) if len(sequence) > 1 else sequence[0])

    job_api = MagicMock()
    job_api.stats = AsyncMock(return_value=JobStats(total_jobs=10))
    admin_api = MagicMock()
    admin_api.scraper_status = AsyncMock(side_effect=scraper_status)
    admin_api.scraper_logs = AsyncMock(return_value=ScraperLogPage(
        entries=(ScraperLogEntry(id=1, started_at=None, status=ScraperRunStatus.COMPLETED),),
    ))
    admin_api.trigger_scraper = AsyncMock(return_value={"message": "started"})
    return job_api, admin_api


class TestMonitorSnapshot:
    """Tests for MonitorSnapshot."""

    def test_defaults(self):
        snapshot = MonitorSnapshot()
        assert not snapshot.is_running
        assert snapshot.can_trigger

    def test_cannot_trigger_while_running(self):
        assert not MonitorSnapshot(status=_status(True)).can_trigger

    def test_cannot_trigger_while_triggering(self):
        assert not MonitorSnapshot(triggering=True).can_trigger


class TestActivate:
    """Tests for the initial combined fetch."""

    @pytest.mark.asyncio
    async def test_fetches_all_three(self):
        job_api, admin_api = _apis([False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        snapshot = await monitor.activate()

        assert snapshot.stats.total_jobs == 10
        assert not snapshot.is_running
        assert len(snapshot.logs) == 1
        admin_api.scraper_logs.assert_awaited_once_with(page=1)
        assert not monitor.is_polling
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_activate_twice_fetches_once(self):
        job_api, admin_api = _apis([False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.activate()
        await monitor.activate()

        assert job_api.stats.await_count == 1
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_notifies_observer(self):
        job_api, admin_api = _apis([False])
        snapshots = []
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL, on_change=snapshots.append)

        await monitor.activate()

        assert snapshots[0].loading
        assert not snapshots[-1].loading
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_failing_observer_is_ignored(self):
        job_api, admin_api = _apis([False])
        monitor = OperationalMonitor(
            job_api, admin_api, poll_interval=POLL, on_change=MagicMock(side_effect=RuntimeError)
        )

        snapshot = await monitor.activate()

        assert snapshot.stats is not None
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_error_recorded(self):
        job_api, admin_api = _apis([False])
        job_api.stats.side_effect = TransportError("HTTP 500", status_code=500)
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        snapshot = await monitor.activate()

        assert snapshot.error == "HTTP 500"
        assert not snapshot.loading
        assert monitor.is_active
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_unauthorized_deactivates(self):
        job_api, admin_api = _apis([True])
        admin_api.scraper_logs.side_effect = AuthorizationError()
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.activate()

        assert not monitor.is_active
        assert not monitor.is_polling


class TestPolling:
    """Tests for polling while the scraper runs."""

    @pytest.mark.asyncio
    async def test_polls_until_idle(self):
        """running, running, idle: two polls after the initial fetch, then stop."""
        job_api, admin_api = _apis([True, True, False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.activate()
        assert monitor.is_polling
        await asyncio.wait_for(monitor.join(), timeout=2)

        assert admin_api.scraper_status.await_count == 3
        assert not monitor.is_polling
        assert not monitor.snapshot.is_running

        await asyncio.sleep(POLL * 5)
        assert admin_api.scraper_status.await_count == 3

    @pytest.mark.asyncio
    async def test_deactivate_stops_polling(self):
        job_api, admin_api = _apis([True])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.activate()
        monitor.deactivate()
        calls = admin_api.scraper_status.await_count
        await asyncio.sleep(POLL * 5)

        assert admin_api.scraper_status.await_count == calls
        assert not monitor.is_polling

    @pytest.mark.asyncio
    async def test_no_polling_when_idle(self):
        job_api, admin_api = _apis([False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.activate()
        await asyncio.sleep(POLL * 5)

        assert admin_api.scraper_status.await_count == 1
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_refresh_without_activation_does_not_poll(self):
        job_api, admin_api = _apis([True])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.refresh()

        assert not monitor.is_polling

    @pytest.mark.asyncio
    async def test_reactivation_after_deactivate_is_ignored(self):
        """A deactivated monitor neither fetches nor polls when activated again."""
        job_api, admin_api = _apis([True])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        await monitor.activate()
        monitor.deactivate()
        await monitor.activate()
        await asyncio.sleep(POLL * 5)

        assert admin_api.scraper_status.await_count == 1
        assert monitor.is_closed
        assert not monitor.is_active
        assert not monitor.is_polling

    @pytest.mark.asyncio
    async def test_refresh_after_deactivate_makes_no_call(self):
        job_api, admin_api = _apis([False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)
        await monitor.activate()
        monitor.deactivate()

        snapshot = await monitor.refresh()

        assert snapshot is monitor.snapshot
        assert job_api.stats.await_count == 1
        assert admin_api.scraper_logs.await_count == 1


class TestTrigger:
    """Tests for trigger."""

    @pytest.mark.asyncio
    async def test_trigger_then_refresh(self):
        job_api, admin_api = _apis([False, True, False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)
        await monitor.activate()

        result = await monitor.trigger()

        assert result.success
        admin_api.trigger_scraper.assert_awaited_once_with(None)
        assert monitor.snapshot.is_running
        assert not monitor.snapshot.triggering
        assert monitor.is_polling
        await asyncio.wait_for(monitor.join(), timeout=2)
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_concurrent_triggers_send_one_request(self):
        job_api, admin_api = _apis([False])
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_trigger(data):
            started.set()
            await release.wait()
            return {"message": "started"}

        admin_api.trigger_scraper.side_effect = slow_trigger
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)
        await monitor.activate()

        first = asyncio.create_task(monitor.trigger())
        await started.wait()
        second = await monitor.trigger()
        release.set()
        first_result = await first

        assert admin_api.trigger_scraper.await_count == 1
        assert second.skipped
        assert first_result.success
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_skipped_while_running(self):
        job_api, admin_api = _apis([True])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)
        await monitor.activate()

        result = await monitor.trigger()

        assert result.skipped
        admin_api.trigger_scraper.assert_not_called()
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_failure_resets_flag(self):
        job_api, admin_api = _apis([False])
        admin_api.trigger_scraper.side_effect = ValidationError("Scraper is already running", status_code=409)
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)
        await monitor.activate()

        result = await monitor.trigger({"max_videos": 3})

        assert not result.success
        assert result.error == "Scraper is already running"
        assert not monitor.snapshot.triggering
        assert monitor.snapshot.can_trigger
        monitor.deactivate()

    @pytest.mark.asyncio
    async def test_skipped_after_deactivate(self):
        job_api, admin_api = _apis([False])
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)
        await monitor.activate()
        monitor.deactivate()

        result = await monitor.trigger()

        assert result.skipped
        assert result.error == "Monitor is closed"
        admin_api.trigger_scraper.assert_not_called()


class TestUnexpectedResponses:
    """Tests for malformed successful responses."""

    @pytest.mark.asyncio
    async def test_unexpected_format_recorded(self):
        job_api, admin_api = _apis([False])
        admin_api.scraper_status.side_effect = TransportError(
            "Unexpected response format", payload=["unexpected"]
        )
        monitor = OperationalMonitor(job_api, admin_api, poll_interval=POLL)

        snapshot = await monitor.activate()

        assert snapshot.error == "Unexpected response format"
        assert not snapshot.loading
        assert monitor.is_active
        monitor.deactivate()

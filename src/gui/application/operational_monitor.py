"""
Operational monitor for the admin dashboard.

Fetches job statistics, scraper status and the latest scraper log page
together, keeps polling them while the server reports a running scraper,
and issues the guarded "trigger scraper" request.

Lifecycle:
    monitor = OperationalMonitor(job_api, admin_api, on_change=render)
    await monitor.activate()    # first fetch, polling starts if running
    result = await monitor.trigger()
    monitor.deactivate()        # polling stops for good
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Tuple

from src.domain.job_board_entities import JobStats, ScraperLogEntry, ScraperStatus
from src.infrastructure.adapters.job_board_api import AdminApi, JobApi
from src.infrastructure.adapters.job_board_errors import ApiError, AuthorizationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorSnapshot:
    """
    Immutable state of the admin dashboard.

    Represents what the dashboard shows at a point in time.
    """
    stats: Optional[JobStats] = None
    status: Optional[ScraperStatus] = None
    logs: Tuple[ScraperLogEntry, ...] = ()
    loading: bool = False
    triggering: bool = False
    error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.status is not None and self.status.is_running

    @property
    def can_trigger(self) -> bool:
        return not self.triggering and not self.is_running


@dataclass(frozen=True)
class TriggerResult:
    """Result of a trigger request."""
    success: bool
    error: Optional[str] = None
    skipped: bool = False


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class OperationalMonitor:
    """
    Polls scraper state for the admin dashboard.

    Args:
        job_api: Job endpoints (statistics)
        admin_api: Scraper administration endpoints
        poll_interval: Seconds between polls while the scraper runs
        on_change: Called with every new MonitorSnapshot
    """

    DEFAULT_POLL_INTERVAL = 10.0

    def __init__(
        self,
        job_api: JobApi,
        admin_api: AdminApi,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_change: Optional[Callable[[MonitorSnapshot], Any]] = None,
    ):
        self._job_api = job_api
        self._admin_api = admin_api
        self._poll_interval = poll_interval
        self._on_change = on_change
        self._snapshot = MonitorSnapshot()
        self._active = False
        self._closed = False
        self._poll_task: Optional[asyncio.Task] = None

    @property
    def snapshot(self) -> MonitorSnapshot:
        return self._snapshot

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def activate(self) -> MonitorSnapshot:
        """
        Fetch the dashboard data and start polling if the scraper runs.

        A deactivated monitor stays closed: its last snapshot is returned
        and nothing is fetched.
        """
        if not self._active and not self._closed:
            self._active = True
            await self.refresh()
        return self._snapshot

    def deactivate(self) -> None:
        """Stop polling immediately. The monitor never polls again."""
        self._active = False
        self._closed = True
        task, self._poll_task = self._poll_task, None
        # A poll task deactivating itself exits on its own once _active is False
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        logger.debug("Monitor deactivated")

    async def join(self) -> None:
        """Wait until the current polling task has ended."""
        task = self._poll_task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def refresh(self) -> MonitorSnapshot:
        """
        Fetch statistics, scraper status and log page 1 concurrently.

        Errors are recorded on the snapshot. An AuthorizationError also
        deactivates the monitor since the session is gone.
        """
        if self._closed:
            return self._snapshot

        self._update(loading=True)
        try:
            stats, status, logs = await asyncio.gather(
                self._job_api.stats(),
                self._admin_api.scraper_status(),
                self._admin_api.scraper_logs(page=1),
            )
        except AuthorizationError as e:
            self._update(loading=False, error=str(e))
            self.deactivate()
            return self._snapshot
        except ApiError as e:
            logger.error("Error fetching dashboard data: %s", e)
            self._update(loading=False, error=str(e))
            return self._snapshot

        self._update(
            stats=stats,
            status=status,
            logs=logs.entries,
            loading=False,
            error=None,
        )
        self._schedule_polling()
        return self._snapshot

    async def trigger(self, data: Optional[Dict[str, Any]] = None) -> TriggerResult:
        """
        Ask the server to start a scraper run.

        Skipped without a request while another trigger is in flight,
        while the scraper is reported running, or once the monitor has
        been deactivated. Nothing is rolled back on failure.
        """
        if self._closed:
            return TriggerResult(success=False, skipped=True, error="Monitor is closed")
        if self._snapshot.triggering:
            return TriggerResult(
                success=False, skipped=True, error="A trigger request is already in progress"
            )
        if self._snapshot.is_running:
            return TriggerResult(success=False, skipped=True, error="Scraper is already running")

        self._update(triggering=True)
        try:
            await self._admin_api.trigger_scraper(data)
        except ApiError as e:
            logger.error("Error triggering scraper: %s", e)
            return TriggerResult(success=False, error=str(e) or "Failed to trigger scraper")
        finally:
            self._update(triggering=False)

        logger.info("Scraper started")
        await self.refresh()
        return TriggerResult(success=True)

    def _schedule_polling(self) -> None:
        if self._active and not self._closed and self._snapshot.is_running and not self.is_polling:
            logger.debug("Scraper running, polling every %.1fs", self._poll_interval)
            self._poll_task = asyncio.create_task(self._poll_loop())

    async def _poll_loop(self) -> None:
        try:
            while self._active:
                await asyncio.sleep(self._poll_interval)
                if not self._active:
                    break
                await self.refresh()
                if not self._snapshot.is_running:
                    logger.info("Scraper idle, polling stopped")
                    break
        finally:
            if self._poll_task is _current_task():
                self._poll_task = None

    def _update(self, **changes: Any) -> None:
        self._snapshot = replace(self._snapshot, **changes)
        if self._on_change:
            try:
                self._on_change(self._snapshot)
            except Exception:
                logger.exception("Monitor change callback failed")

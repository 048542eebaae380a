"""
Filtered job list for the job seeker dashboard.

Every filter change re-fetches the list. Responses are numbered in issue
order and only the latest one is applied, so a slow response to an old
filter cannot overwrite the results of a newer one.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from src.domain.job_board_entities import JobFilter, JobListPage, JobRecord
from src.infrastructure.adapters.job_board_api import JobApi
from src.infrastructure.adapters.job_board_errors import ApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobListState:
    """Immutable state of the job seeker's list view."""
    filter: JobFilter = field(default_factory=JobFilter)
    page: Optional[JobListPage] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def jobs(self):
        return self.page.results if self.page else ()


class JobFilterEngine:
    """
    Owns the JobFilter and the job list fetched with it.

    Args:
        job_api: Job endpoints
        initial_filter: Starting filter (default: all jobs)
        on_change: Called with every new JobListState
    """

    def __init__(
        self,
        job_api: JobApi,
        initial_filter: Optional[JobFilter] = None,
        on_change: Optional[Callable[[JobListState], Any]] = None,
    ):
        self._job_api = job_api
        self._on_change = on_change
        self._state = JobListState(filter=initial_filter or JobFilter())
        self._sequence = 0

    @property
    def state(self) -> JobListState:
        return self._state

    @property
    def filter(self) -> JobFilter:
        return self._state.filter

    async def update(self, **changes: Any) -> Optional[JobListPage]:
        """
        Replace filter fields and re-fetch.

        Example:
            await engine.update(date_filter="today", search="python")

        Raises:
            ValueError: On an unknown field or invalid value (nothing is fetched)
        """
        new_filter = self._state.filter.with_changes(**changes)
        self._set(filter=new_filter)
        return await self.refresh()

    async def refresh(self) -> Optional[JobListPage]:
        """
        Fetch the list for the current filter.

        Returns:
            The fetched page, or None if it failed or a newer fetch was
            issued while this one was pending
        """
        self._sequence += 1
        sequence = self._sequence
        self._set(loading=True)

        try:
            page = await self._job_api.list_jobs(self._state.filter)
        except ApiError as e:
            if sequence != self._sequence:
                return None
            logger.error("Error fetching jobs: %s", e)
            self._set(loading=False, error=str(e) or "Failed to fetch jobs")
            return None

        if sequence != self._sequence:
            logger.debug("Discarding stale job list response #%d (latest #%d)", sequence, self._sequence)
            return None

        self._set(page=page, loading=False, error=None)
        return page

    async def toggle_check(self, job_id: Any, next_state: bool, notes: str = "") -> Optional[JobListPage]:
        """
        Set a job's checked state, then re-fetch the whole list.

        The local list is never patched; the re-fetched page is the
        authoritative state.

        Raises:
            ApiError: If the mutation fails (the list is left unchanged)
        """
        try:
            await self._job_api.toggle_check(job_id, next_state, notes)
        except ApiError as e:
            logger.error("Error toggling check for job %s: %s", job_id, e)
            self._set(error=str(e) or "Failed to update job status")
            raise
        return await self.refresh()

    async def job_detail(self, job_id: Any) -> JobRecord:
        return await self._job_api.job_detail(job_id)

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        if self._on_change:
            try:
                self._on_change(self._state)
            except Exception:
                logger.exception("Job list change callback failed")

"""
Endpoint facades for the job board API.

One method per REST endpoint, grouped the way the server groups them:
authentication, job seeker job operations and scraper administration.
Methods return domain entities where the payload has a stable shape and
the decoded JSON otherwise.
"""
import logging
from typing import Any, Dict, Optional

from src.domain.job_board_entities import (
    Credentials,
    JobFilter,
    JobListPage,
    JobRecord,
    JobStats,
    RegistrationForm,
    ScraperLogPage,
    ScraperStatus,
)
from src.infrastructure.adapters.http_client import JobBoardHttpClient
from src.infrastructure.adapters.job_board_errors import TransportError

logger = logging.getLogger(__name__)


def _expect_object(data: Any, endpoint: str) -> Dict[str, Any]:
    """
    Return a decoded body that must be a JSON object.

    Raises:
        TransportError: If the server answered 2xx with anything else
            (an HTML maintenance page, a list, a bare string)
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error("Unexpected response format from %s: %s", endpoint, type(data).__name__)
        raise TransportError("Unexpected response format", payload=data)
    return data


class AuthApi:
    """Authentication endpoints."""

    def __init__(self, http: JobBoardHttpClient):
        self._http = http

    async def register(self, form: RegistrationForm) -> Dict[str, Any]:
        """Create a job seeker account. Returns the raw auth response."""
        return await self._http.post("/auth/register/", json=form.to_payload())

    async def login(self, credentials: Credentials) -> Dict[str, Any]:
        """Authenticate. Returns the raw auth response."""
        return await self._http.post("/auth/login/", json=credentials.to_payload())

    async def logout(self, refresh_token: str) -> Any:
        """Invalidate a refresh token on the server."""
        return await self._http.post("/auth/logout/", json={"refresh_token": refresh_token})

    async def current_user(self) -> Dict[str, Any]:
        return await self._http.get("/auth/me/")


class JobApi:
    """Job listing endpoints used by job seekers."""

    def __init__(self, http: JobBoardHttpClient):
        self._http = http

    async def list_jobs(self, job_filter: Optional[JobFilter] = None) -> JobListPage:
        """
        Get the job list matching a filter.

        Args:
            job_filter: Filter serialized as query parameters (default: all jobs)

        Returns:
            JobListPage with results and the list's stats block
        """
        params = (job_filter or JobFilter()).to_query_params()
        data = await self._http.get("/jobs/list/", params=params)
        return JobListPage.from_dict(_expect_object(data, "/jobs/list/"))

    async def job_detail(self, job_id: Any) -> JobRecord:
        data = await self._http.get(f"/jobs/detail/{job_id}/")
        return JobRecord.from_dict(_expect_object(data, "/jobs/detail/"))

    async def toggle_check(self, job_id: Any, is_checked: bool, notes: str = "") -> Any:
        """Set the checked state of a job."""
        return await self._http.post(
            "/jobs/toggle-check/",
            json={"job_id": job_id, "is_checked": is_checked, "notes": notes},
        )

    async def my_applications(self, page: int = 1) -> Dict[str, Any]:
        """Get the jobs the current user has checked."""
        return await self._http.get("/jobs/my-applications/", params={"page": page})

    async def stats(self) -> JobStats:
        data = await self._http.get("/jobs/stats/")
        return JobStats.from_dict(_expect_object(data, "/jobs/stats/"))


class AdminApi:
    """Scraper administration endpoints."""

    def __init__(self, http: JobBoardHttpClient):
        self._http = http

    async def trigger_scraper(self, data: Optional[Dict[str, Any]] = None) -> Any:
        """Ask the server to start a scraper run."""
        logger.info("Triggering scraper run")
        return await self._http.post("/jobs/trigger-scraper/", json=data or {})

    async def scraper_status(self) -> ScraperStatus:
        data = await self._http.get("/jobs/scraper-status/")
        return ScraperStatus.from_dict(_expect_object(data, "/jobs/scraper-status/"))

    async def scraper_logs(self, page: int = 1) -> ScraperLogPage:
        data = await self._http.get("/jobs/scraper-logs/", params={"page": page})
        return ScraperLogPage.from_dict(_expect_object(data, "/jobs/scraper-logs/"), page=page)

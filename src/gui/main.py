"""
Job Board Client - Application Root

JobBoardApp wires the session store, the HTTP client, the endpoint
facades and the application services together, and owns navigation.
When the HTTP client reports an invalidated session the app tears down
the admin monitor and moves to the login route.
"""
import logging
from typing import Any, Callable, Optional

import httpx

from src.domain.job_board_entities import (
    Credentials,
    JobFilter,
    RegistrationForm,
    Session,
)
from src.domain.job_board_events import SessionInvalidatedEvent
from src.gui.application import route_guard
from src.gui.application.auth_gateway import AuthGateway, LoginResult, RegistrationResult
from src.gui.application.job_filter_engine import JobFilterEngine, JobListState
from src.gui.application.operational_monitor import MonitorSnapshot, OperationalMonitor
from src.gui.application.route_guard import ADMIN_ROUTE, DEFAULT_ROUTE, LOGIN_ROUTE
from src.infrastructure.adapters.http_client import JobBoardHttpClient
from src.infrastructure.adapters.job_board_api import AdminApi, AuthApi, JobApi
from src.infrastructure.adapters.job_board_errors import AccessDeniedError
from src.infrastructure.adapters.session_store import FileSessionStore, SessionStore
from src.infrastructure.job_board_settings import ClientSettings

logger = logging.getLogger(__name__)


class JobBoardApp:
    """
    Application root of the job board client.

    Coordinates authentication, navigation and the two dashboards.

    Args:
        settings: Client settings
        session_store: Session store (default: FileSessionStore at settings.session_path)
        transport: Optional httpx transport, for tests
        on_navigate: Called with the new route after every navigation
    """

    def __init__(
        self,
        settings: ClientSettings,
        session_store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_navigate: Optional[Callable[[str], Any]] = None,
    ):
        self._settings = settings
        self._store = session_store or FileSessionStore(settings.session_path)
        self._http = JobBoardHttpClient(settings, self._store, transport=transport)
        self._on_navigate = on_navigate
        self._monitor: Optional[OperationalMonitor] = None

        self.auth_api = AuthApi(self._http)
        self.job_api = JobApi(self._http)
        self.admin_api = AdminApi(self._http)
        self.auth = AuthGateway(self.auth_api, self._store)

        self._unsubscribe = self._http.subscribe(self._on_session_invalidated)
        self._current_route = landing_route_for(self._store.read())

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def session_store(self) -> SessionStore:
        return self._store

    @property
    def session(self) -> Optional[Session]:
        return self._store.read()

    @property
    def current_route(self) -> str:
        return self._current_route

    def navigate(self, path: str) -> str:
        """
        Navigate to a path through the route table and guard.

        Returns:
            The route actually shown
        """
        target = route_guard.resolve(path, self._store.read())
        if target != path:
            logger.info("Navigation to %s redirected to %s", path, target)
        if target != ADMIN_ROUTE:
            self._close_monitor()
        self._set_route(target)
        return target

    async def login(self, credentials: Credentials) -> LoginResult:
        result = await self.auth.login(credentials)
        self.navigate(result.destination)
        return result

    async def register(self, form: RegistrationForm) -> RegistrationResult:
        result = await self.auth.register(form)
        if result.success:
            self.navigate(result.destination)
        return result

    async def logout(self) -> None:
        await self.auth.logout()
        self.navigate(LOGIN_ROUTE)

    def open_admin_dashboard(
        self,
        on_change: Optional[Callable[[MonitorSnapshot], Any]] = None,
    ) -> OperationalMonitor:
        """
        Navigate to the admin dashboard and create its monitor.

        The caller activates the returned monitor. Leaving the dashboard
        (navigation, logout, invalidated session) deactivates it.

        Raises:
            AccessDeniedError: If the guard redirected elsewhere
        """
        target = self.navigate(ADMIN_ROUTE)
        if target != ADMIN_ROUTE:
            raise AccessDeniedError(ADMIN_ROUTE, target)
        self._close_monitor()
        self._monitor = OperationalMonitor(
            self.job_api,
            self.admin_api,
            poll_interval=self._settings.poll_interval,
            on_change=on_change,
        )
        return self._monitor

    def open_job_dashboard(
        self,
        initial_filter: Optional[JobFilter] = None,
        on_change: Optional[Callable[[JobListState], Any]] = None,
    ) -> JobFilterEngine:
        """
        Navigate to the job seeker dashboard and create its list engine.

        Raises:
            AccessDeniedError: If the guard redirected elsewhere
        """
        target = self.navigate(DEFAULT_ROUTE)
        if target != DEFAULT_ROUTE:
            raise AccessDeniedError(DEFAULT_ROUTE, target)
        return JobFilterEngine(self.job_api, initial_filter=initial_filter, on_change=on_change)

    def _on_session_invalidated(self, event: SessionInvalidatedEvent) -> None:
        logger.warning("Session invalidated by %s %s, returning to login", event.method, event.path)
        self._close_monitor()
        self._set_route(LOGIN_ROUTE)

    def _close_monitor(self) -> None:
        if self._monitor is not None:
            self._monitor.deactivate()
            self._monitor = None

    def _set_route(self, route: str) -> None:
        self._current_route = route
        if self._on_navigate:
            self._on_navigate(route)

    async def aclose(self) -> None:
        self._close_monitor()
        self._unsubscribe()
        await self._http.aclose()

    async def __aenter__(self) -> "JobBoardApp":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def landing_route_for(session: Optional[Session]) -> str:
    """Start route: the role's dashboard when a session survived, else login."""
    if session is None:
        return LOGIN_ROUTE
    return route_guard.landing_route(session.role)

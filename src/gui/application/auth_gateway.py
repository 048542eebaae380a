"""
Authentication flows: login, register, logout.

The gateway is the only writer of the session besides the HTTP client's
401 handling. A session is stored only after the server accepted the
credentials, and removed on logout whether or not the server could be
told about it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from src.domain.job_board_entities import Credentials, RegistrationForm, Session
from src.domain.job_board_value_objects import UserRole
from src.gui.application.route_guard import DEFAULT_ROUTE, landing_route
from src.infrastructure.adapters.job_board_api import AuthApi
from src.infrastructure.adapters.job_board_errors import (
    ApiError,
    InvalidCredentialsError,
    PasswordMismatchError,
    ValidationError,
)
from src.infrastructure.adapters.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_ERROR = "Invalid username or password"
DEFAULT_REGISTRATION_ERROR = "Registration failed. Please try again."


def _rejection_message(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    for key in ("error", "detail", "message"):
        if payload.get(key):
            return str(payload[key])
    return None


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login."""
    session: Session
    destination: str

    @property
    def role(self) -> UserRole:
        return self.session.role


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration attempt."""
    success: bool
    session: Optional[Session] = None
    destination: Optional[str] = None
    field_errors: Dict[str, Any] = field(default_factory=dict)


class AuthGateway:
    """
    Login, register and logout against the job board API.

    Args:
        auth_api: Authentication endpoint facade
        session_store: Store receiving the session
    """

    def __init__(self, auth_api: AuthApi, session_store: SessionStore):
        self._auth_api = auth_api
        self._store = session_store

    async def login(self, credentials: Credentials) -> LoginResult:
        """
        Authenticate and persist the session.

        Returns:
            LoginResult whose destination is the admin dashboard for
            admins and the default dashboard for everyone else

        Raises:
            InvalidCredentialsError: The server rejected the credentials (4xx)
            TransportError: The server could not be reached or failed (5xx)
            MalformedSessionError: The response lacked tokens or the user
        """
        try:
            response = await self._auth_api.login(credentials)
        except ApiError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                message = _rejection_message(e.payload) or DEFAULT_LOGIN_ERROR
                logger.info("Login rejected for %s", credentials.username)
                raise InvalidCredentialsError(
                    message, status_code=e.status_code, payload=e.payload
                ) from e
            raise

        session = self._store.save(response)
        return LoginResult(session=session, destination=landing_route(session.role))

    async def register(self, form: RegistrationForm) -> RegistrationResult:
        """
        Create a job seeker account and persist its session.

        Returns:
            RegistrationResult; on a validation rejection ``field_errors``
            holds the server's messages keyed by field

        Raises:
            PasswordMismatchError: password and password2 differ (no request made)
            TransportError: The server could not be reached or failed (5xx)
        """
        if not form.passwords_match:
            raise PasswordMismatchError()

        try:
            response = await self._auth_api.register(form)
        except ValidationError as e:
            errors = e.field_errors or {"general": DEFAULT_REGISTRATION_ERROR}
            logger.info("Registration rejected: %s", ", ".join(sorted(errors)))
            return RegistrationResult(success=False, field_errors=errors)

        session = self._store.save(response)
        return RegistrationResult(success=True, session=session, destination=DEFAULT_ROUTE)

    async def logout(self) -> None:
        """
        Log out locally, telling the server on a best-effort basis.

        A failing logout request is logged and ignored; the local session
        is cleared in every case.
        """
        session = self._store.read()
        if session is not None:
            try:
                await self._auth_api.logout(session.refresh_token)
            except ApiError as e:
                logger.warning("Server logout failed, clearing local session anyway: %s", e)
        self._store.clear()

    async def current_user(self) -> Dict[str, Any]:
        return await self._auth_api.current_user()

"""
Async HTTP transport for the job board API.

Every server call goes through JobBoardHttpClient. It attaches the
bearer token of the stored session and, when the server answers 401,
clears the session, publishes a SessionInvalidatedEvent and raises
AuthorizationError. That handling cannot be switched off per call.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from src.domain.job_board_events import SessionInvalidatedEvent
from src.infrastructure.adapters.job_board_errors import (
    ApiError,
    AuthorizationError,
    TransportError,
    ValidationError,
)
from src.infrastructure.adapters.session_store import SessionStore
from src.infrastructure.job_board_settings import ClientSettings
from src.infrastructure.logging.client_logger import TimedOperation

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionInvalidatedEvent], Any]


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("error", "detail", "message"):
            value = payload.get(key)
            if value:
                return str(value)
    elif isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return default


class JobBoardHttpClient:
    """
    Single HTTP client wrapping all job board API calls.

    Usage:
        async with JobBoardHttpClient(settings, store) as http:
            http.subscribe(on_session_invalidated)
            stats = await http.get("/jobs/stats/")
    """

    DEFAULT_HEADERS = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    def __init__(
        self,
        settings: ClientSettings,
        session_store: SessionStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Client settings (base URL, timeout)
            session_store: Store consulted for the bearer token on every call
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._session_store = session_store
        self._listeners: List[SessionListener] = []
        self._client = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.timeout,
            headers=self.DEFAULT_HEADERS,
            transport=transport,
        )

    @property
    def session_store(self) -> SessionStore:
        return self._session_store

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a callback for SessionInvalidatedEvent.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST)
            path: Endpoint path relative to the API base (e.g. /jobs/stats/)
            json: JSON body for POST requests
            params: Query parameters

        Returns:
            Decoded JSON body (None for an empty body)

        Raises:
            AuthorizationError: On 401, after the session has been cleared
            ValidationError: On any other 4xx
            TransportError: On 5xx, redirects or network failures
        """
        method = method.upper()
        headers = {}
        session = self._session_store.read()
        if session is not None:
            headers["Authorization"] = f"Bearer {session.access_token}"

        try:
            with TimedOperation(logger, method, path) as call:
                response = await self._client.request(
                    method,
                    path,
                    json=json,
                    params=params,
                    headers=headers,
                )
                call.status_code = response.status_code
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._status_error(method, path, e.response) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}") from e

        return _decode_body(response)

    def _status_error(self, method: str, path: str, response: httpx.Response) -> ApiError:
        status = response.status_code
        payload = _decode_body(response)
        message = _error_message(payload, f"HTTP {status}")

        if status == 401:
            self._invalidate_session(method, path, message)
            return AuthorizationError(message, payload=payload)
        if 400 <= status < 500:
            return ValidationError(message, status_code=status, payload=payload)
        return TransportError(message, status_code=status, payload=payload)

    def _invalidate_session(self, method: str, path: str, detail: str) -> None:
        logger.warning("%s %s unauthorized, clearing session", method, path)
        self._session_store.clear()
        event = SessionInvalidatedEvent(method=method, path=path, detail=detail)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "JobBoardHttpClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

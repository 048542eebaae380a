"""
Job board client error hierarchy.

Server failures (ApiError and subclasses) carry the HTTP status and the
decoded response body. Client-side checks (PreconditionError) never reach
the network.
"""
from typing import Any, Dict, Optional


class JobBoardClientError(Exception):
    """Base class for job board client errors."""
    pass


class ApiError(JobBoardClientError):
    """The job board API rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class AuthorizationError(ApiError):
    """401 from the server. The session has already been cleared."""

    def __init__(self, message: str = "Unauthorized", payload: Any = None):
        super().__init__(message, status_code=401, payload=payload)


class ValidationError(ApiError):
    """4xx rejection, usually with per-field messages."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        payload: Any = None,
    ):
        super().__init__(message, status_code=status_code, payload=payload)

    @property
    def field_errors(self) -> Dict[str, Any]:
        """Field-keyed messages exactly as sent by the server."""
        if isinstance(self.payload, dict):
            return dict(self.payload)
        return {}


class InvalidCredentialsError(ValidationError):
    """Login rejected."""
    pass


class TransportError(ApiError):
    """Network failure, timeout or 5xx response."""
    pass


class PreconditionError(JobBoardClientError):
    """A client-side check failed before any request was made."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    @property
    def field_errors(self) -> Dict[str, Any]:
        return {self.field or "general": str(self)}


class PasswordMismatchError(PreconditionError):
    """The two password fields of the registration form differ."""

    def __init__(self, message: str = "Passwords don't match"):
        super().__init__(message, field="password2")


class MalformedSessionError(JobBoardClientError):
    """A session lacked a token or the user object."""
    pass


class AccessDeniedError(JobBoardClientError):
    """The route guard redirected away from the requested view."""

    def __init__(self, requested: str, redirect: str):
        super().__init__(f"Access to {requested} denied, redirected to {redirect}")
        self.requested = requested
        self.redirect = redirect

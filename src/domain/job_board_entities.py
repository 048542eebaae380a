"""
Job Board Domain Entities

Immutable representations of the objects exchanged with the job board
API: the authenticated session, job records, filters, statistics and
scraper run history.

Every entity exposes a ``from_dict`` (or equivalent) factory that reads
the server's JSON field names, so the rest of the client never touches
raw payloads.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from src.domain.job_board_value_objects import (
    CheckStatus,
    DateFilter,
    ScraperRunStatus,
    UserRole,
)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the API, tolerating a trailing Z."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class UserProfile:
    """Identity of the logged-in user."""
    id: Any
    username: str
    role: UserRole
    profile: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        extra = {
            key: value
            for key, value in data.items()
            if key not in ("id", "username", "role", "tokens")
        }
        return cls(
            id=data.get("id"),
            username=data.get("username", ""),
            role=UserRole.parse(data.get("role")),
            profile=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.profile)
        data.update(id=self.id, username=self.username, role=self.role.value)
        return data


@dataclass(frozen=True)
class Session:
    """
    Tokens plus user identity held while logged in.

    Both tokens are required; a session never exists with only one of
    them. The role is fixed for the lifetime of the session.
    """
    access_token: str
    refresh_token: str
    user: UserProfile

    def __post_init__(self):
        if not self.access_token or not self.refresh_token:
            raise ValueError("session requires both access and refresh tokens")
        if self.user is None:
            raise ValueError("session requires a user")

    @property
    def role(self) -> UserRole:
        return self.user.role

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin

    @classmethod
    def from_auth_response(cls, payload: Mapping[str, Any]) -> "Session":
        """
        Build a session from a login/register response.

        The server answers ``{message, user: {..., tokens: {access, refresh}}}``.

        Raises:
            ValueError: If the user object or either token is missing
        """
        if not isinstance(payload, Mapping):
            raise ValueError("auth response must be a JSON object")
        user = payload.get("user")
        if not isinstance(user, Mapping):
            raise ValueError("auth response has no user object")
        tokens = user.get("tokens")
        if not isinstance(tokens, Mapping):
            raise ValueError("auth response has no tokens")
        return cls(
            access_token=tokens.get("access") or "",
            refresh_token=tokens.get("refresh") or "",
            user=UserProfile.from_dict(user),
        )


@dataclass(frozen=True)
class Credentials:
    """Username/password pair submitted to the login endpoint."""
    username: str
    password: str

    def to_payload(self) -> Dict[str, str]:
        return {"username": self.username, "password": self.password}


@dataclass(frozen=True)
class RegistrationForm:
    """Fields of the job seeker registration form."""
    username: str
    email: str
    password: str
    password2: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""

    @property
    def passwords_match(self) -> bool:
        return self.password == self.password2

    def to_payload(self) -> Dict[str, str]:
        return {
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "password": self.password,
            "password2": self.password2,
        }


@dataclass(frozen=True)
class JobRecord:
    """A job link discovered by the scraper."""
    id: Any
    link: str
    date_found: str
    is_checked: bool
    search_query: Optional[str] = None
    video_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobRecord":
        return cls(
            id=data.get("id"),
            link=data.get("link", ""),
            date_found=data.get("date_found", ""),
            is_checked=bool(data.get("is_checked", False)),
            search_query=data.get("search_query") or None,
            video_url=data.get("video_url") or None,
        )


@dataclass(frozen=True)
class JobFilter:
    """
    Query used by the job seeker's list.

    date_filter and check_status are always sent; search only when not
    empty; ordering and page only when set.
    """
    date_filter: DateFilter = DateFilter.ALL
    check_status: CheckStatus = CheckStatus.ALL
    search: str = ""
    ordering: Optional[str] = None
    page: Optional[int] = None

    def with_changes(self, **changes: Any) -> "JobFilter":
        """
        Return a new filter with the given fields replaced.

        String values for date_filter and check_status are converted to
        their enums.

        Raises:
            ValueError: On an unknown field or an invalid enum value
        """
        unknown = set(changes) - {"date_filter", "check_status", "search", "ordering", "page"}
        if unknown:
            raise ValueError(f"Unknown filter fields: {', '.join(sorted(unknown))}")
        if "date_filter" in changes:
            changes["date_filter"] = DateFilter(changes["date_filter"])
        if "check_status" in changes:
            changes["check_status"] = CheckStatus(changes["check_status"])
        if "search" in changes and changes["search"] is None:
            changes["search"] = ""
        return replace(self, **changes)

    def to_query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "date_filter": self.date_filter.value,
            "check_status": self.check_status.value,
        }
        if self.search:
            params["search"] = self.search
        if self.ordering:
            params["ordering"] = self.ordering
        if self.page:
            params["page"] = self.page
        return params


@dataclass(frozen=True)
class JobListPage:
    """One page of the filtered job list."""
    results: Tuple[JobRecord, ...] = ()
    stats: Optional[Dict[str, Any]] = None
    count: Optional[int] = None
    next: Optional[str] = None
    previous: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobListPage":
        return cls(
            results=tuple(JobRecord.from_dict(item) for item in data.get("results") or []),
            stats=data.get("stats") or None,
            count=data.get("count"),
            next=data.get("next"),
            previous=data.get("previous"),
        )


@dataclass(frozen=True)
class JobStats:
    """Aggregate counters shown on the admin dashboard."""
    total_jobs: int = 0
    total_checked: int = 0
    today_total: int = 0
    yesterday_total: int = 0
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobStats":
        overview = data.get("overview") or {}
        return cls(
            total_jobs=overview.get("total_jobs", 0),
            total_checked=overview.get("total_checked", 0),
            today_total=(data.get("today") or {}).get("total", 0),
            yesterday_total=(data.get("yesterday") or {}).get("total", 0),
            raw=dict(data),
        )


@dataclass(frozen=True)
class ScraperRun:
    """The most recent scraper run reported with the status."""
    started_at: Optional[datetime]
    id: Any = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScraperRun":
        return cls(
            started_at=_parse_timestamp(data.get("started_at")),
            id=data.get("id"),
            raw=dict(data),
        )


@dataclass(frozen=True)
class ScraperStatus:
    """Server-side run state of the scraper. Observed, never mutated."""
    is_running: bool = False
    last_run: Optional[ScraperRun] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScraperStatus":
        last_run = data.get("scraper")
        return cls(
            is_running=bool(data.get("is_running", False)),
            last_run=ScraperRun.from_dict(last_run) if isinstance(last_run, Mapping) else None,
        )


@dataclass(frozen=True)
class ScraperLogEntry:
    """One row of the scraper run history."""
    id: Any
    started_at: Optional[datetime]
    status: ScraperRunStatus
    videos_scraped: int = 0
    links_found: int = 0
    new_links: int = 0
    triggered_by: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScraperLogEntry":
        try:
            status = ScraperRunStatus(data.get("status"))
        except ValueError:
            status = ScraperRunStatus.FAILED
        return cls(
            id=data.get("id"),
            started_at=_parse_timestamp(data.get("started_at")),
            status=status,
            videos_scraped=data.get("total_videos_scraped", 0) or 0,
            links_found=data.get("total_links_found", 0) or 0,
            new_links=data.get("new_links_added", 0) or 0,
            triggered_by=data.get("triggered_by_username") or None,
        )


@dataclass(frozen=True)
class ScraperLogPage:
    """A page of scraper run history."""
    entries: Tuple[ScraperLogEntry, ...] = ()
    page: int = 1
    count: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], page: int = 1) -> "ScraperLogPage":
        return cls(
            entries=tuple(ScraperLogEntry.from_dict(item) for item in data.get("logs") or []),
            page=page,
            count=data.get("count"),
        )

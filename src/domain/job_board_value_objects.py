"""
Job Board Value Objects

Enumerations shared by the job board client. Values match the
strings used on the wire by the job board API.
"""
from enum import Enum


class UserRole(Enum):
    """Role attached to an authenticated user."""
    ADMIN = "admin"
    JOB_SEEKER = "job_seeker"

    @classmethod
    def parse(cls, value) -> "UserRole":
        """
        Map a server role string to a UserRole.

        Unknown roles fall back to JOB_SEEKER so they are routed to the
        default surface, never to the admin one.
        """
        for role in cls:
            if role.value == value:
                return role
        return cls.JOB_SEEKER


class DateFilter(Enum):
    """Date window for the job list."""
    ALL = "all"
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_WEEK = "last_week"

    @property
    def display_name(self) -> str:
        names = {
            "all": "All Time",
            "today": "Today",
            "yesterday": "Yesterday",
            "last_week": "Last Week",
        }
        return names[self.value]


class CheckStatus(Enum):
    """Checked-state filter for the job list."""
    ALL = "all"
    CHECKED = "checked"
    UNCHECKED = "unchecked"

    @property
    def display_name(self) -> str:
        names = {
            "all": "All Jobs",
            "checked": "Checked",
            "unchecked": "Unchecked",
        }
        return names[self.value]


class ScraperRunStatus(Enum):
    """Outcome of a single scraper run."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RouteDecision(Enum):
    """Result of guarding a protected route."""
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_DEFAULT = "redirect_default"

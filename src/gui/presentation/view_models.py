"""
Job Board View Models

View models translate domain entities into display-ready values.
They contain display logic but no business logic.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from src.domain.job_board_entities import (
    JobRecord,
    JobStats,
    ScraperLogEntry,
    ScraperStatus,
)
from src.domain.job_board_value_objects import ScraperRunStatus
from src.gui.application.operational_monitor import MonitorSnapshot


RUN_STATUS_COLORS = {
    ScraperRunStatus.RUNNING: "#ffc107",
    ScraperRunStatus.COMPLETED: "#28a745",
    ScraperRunStatus.FAILED: "#dc3545",
}

SCRAPER_STATE_COLORS = {
    True: "#ffc107",
    False: "#28a745",
}


def _format_datetime(dt: Optional[datetime]) -> str:
    """Format datetime for display."""
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class StatCardViewModel:
    """One counter card of the admin dashboard."""
    label: str
    value: int


def stat_cards(stats: Optional[JobStats]) -> Tuple[StatCardViewModel, ...]:
    """Cards shown above the scraper logs, empty until stats are loaded."""
    if stats is None:
        return ()
    return (
        StatCardViewModel("Total Jobs", stats.total_jobs),
        StatCardViewModel("Today's Jobs", stats.today_total),
        StatCardViewModel("Yesterday's Jobs", stats.yesterday_total),
        StatCardViewModel("Total Checked", stats.total_checked),
    )


JOB_LIST_STAT_LABELS = (
    ("total", "Total Jobs"),
    ("today", "Today"),
    ("yesterday", "Yesterday"),
    ("checked", "Checked"),
    ("unchecked", "Unchecked"),
)


def job_list_stat_cards(stats: Optional[Mapping[str, Any]]) -> Tuple[StatCardViewModel, ...]:
    """Cards above the job seeker's list, from the list response's stats block."""
    if not stats:
        return ()
    return tuple(
        StatCardViewModel(label, stats.get(key) or 0)
        for key, label in JOB_LIST_STAT_LABELS
    )


@dataclass(frozen=True)
class ScraperControlViewModel:
    """View model for the scraper control card."""
    status_display: str
    status_color: str
    last_run_display: str
    button_label: str
    button_enabled: bool

    @classmethod
    def from_snapshot(cls, snapshot: MonitorSnapshot) -> 'ScraperControlViewModel':
        status = snapshot.status or ScraperStatus()
        if snapshot.triggering:
            label = "Starting..."
        elif status.is_running:
            label = "Scraper Running..."
        else:
            label = "Trigger Scraper"

        last_run = ""
        if status.last_run is not None and status.last_run.started_at is not None:
            last_run = f"Last run: {_format_datetime(status.last_run.started_at)}"

        return cls(
            status_display="Running" if status.is_running else "Idle",
            status_color=SCRAPER_STATE_COLORS[status.is_running],
            last_run_display=last_run,
            button_label=label,
            button_enabled=snapshot.can_trigger,
        )


@dataclass(frozen=True)
class ScraperLogViewModel:
    """View model for one scraper log row."""
    id: str
    started_at_display: str
    status_display: str
    status_color: str
    videos: int
    links_found: int
    new_links: int
    triggered_by: str

    @classmethod
    def from_domain(cls, entry: ScraperLogEntry) -> 'ScraperLogViewModel':
        """Create view model from domain entity."""
        return cls(
            id=str(entry.id),
            started_at_display=_format_datetime(entry.started_at),
            status_display=entry.status.value,
            status_color=RUN_STATUS_COLORS.get(entry.status, "#dc3545"),
            videos=entry.videos_scraped,
            links_found=entry.links_found,
            new_links=entry.new_links,
            triggered_by=entry.triggered_by or "Automated",
        )


@dataclass(frozen=True)
class JobRowViewModel:
    """View model for one job in the job seeker's list."""
    id: str
    date_found: str
    link: str
    checked_badge: str
    action_label: str
    query_display: str
    video_url: str

    @classmethod
    def from_domain(cls, job: JobRecord) -> 'JobRowViewModel':
        """Create view model from domain entity."""
        return cls(
            id=f"#{job.id}",
            date_found=job.date_found,
            link=job.link,
            checked_badge="✓ Checked" if job.is_checked else "",
            action_label="Uncheck" if job.is_checked else "Mark as Checked",
            query_display=f"Query: {job.search_query}" if job.search_query else "",
            video_url=job.video_url or "",
        )

"""
Tests for job board view models.
"""
from datetime import datetime

from src.domain.job_board_entities import (
    JobRecord,
    JobStats,
    ScraperLogEntry,
    ScraperRun,
    ScraperStatus,
)
from src.domain.job_board_value_objects import ScraperRunStatus
from src.gui.application.operational_monitor import MonitorSnapshot
from src.gui.presentation.view_models import (
    RUN_STATUS_COLORS,
    JobRowViewModel,
    ScraperControlViewModel,
    ScraperLogViewModel,
    job_list_stat_cards,
    stat_cards,
)


class TestStatCards:
    """Tests for stat_cards."""

    def test_no_stats(self):
        assert stat_cards(None) == ()

    def test_card_order(self):
        cards = stat_cards(JobStats(total_jobs=100, total_checked=40, today_total=5, yesterday_total=8))
        assert [(c.label, c.value) for c in cards] == [
            ("Total Jobs", 100),
            ("Today's Jobs", 5),
            ("Yesterday's Jobs", 8),
            ("Total Checked", 40),
        ]


class TestJobListStatCards:
    """Tests for job_list_stat_cards."""

    def test_no_stats(self):
        assert job_list_stat_cards(None) == ()
        assert job_list_stat_cards({}) == ()

    def test_labels_and_values(self):
        cards = job_list_stat_cards({"total": 12, "today": 3, "yesterday": 4, "checked": 5, "unchecked": 7})
        assert [(c.label, c.value) for c in cards] == [
            ("Total Jobs", 12),
            ("Today", 3),
            ("Yesterday", 4),
            ("Checked", 5),
            ("Unchecked", 7),
        ]

    def test_missing_counts_are_zero(self):
        cards = job_list_stat_cards({"total": 2, "checked": None})
        assert [c.value for c in cards] == [2, 0, 0, 0, 0]


class TestScraperControlViewModel:
    """Tests for ScraperControlViewModel."""

    def test_idle(self):
        vm = ScraperControlViewModel.from_snapshot(MonitorSnapshot(status=ScraperStatus(is_running=False)))
        assert vm.status_display == "Idle"
        assert vm.button_label == "Trigger Scraper"
        assert vm.button_enabled
        assert vm.last_run_display == ""

    def test_running(self):
        status = ScraperStatus(
            is_running=True,
            last_run=ScraperRun(started_at=datetime(2024, 5, 1, 8, 30)),
        )
        vm = ScraperControlViewModel.from_snapshot(MonitorSnapshot(status=status))
        assert vm.status_display == "Running"
        assert vm.button_label == "Scraper Running..."
        assert not vm.button_enabled
        assert vm.last_run_display == "Last run: 2024-05-01 08:30:00"

    def test_triggering(self):
        vm = ScraperControlViewModel.from_snapshot(MonitorSnapshot(triggering=True))
        assert vm.button_label == "Starting..."
        assert not vm.button_enabled


class TestScraperLogViewModel:
    """Tests for ScraperLogViewModel."""

    def test_from_domain(self):
        entry = ScraperLogEntry(
            id=3,
            started_at=datetime(2024, 5, 1, 8, 30),
            status=ScraperRunStatus.COMPLETED,
            videos_scraped=12,
            links_found=6,
            new_links=2,
            triggered_by="admin",
        )
        vm = ScraperLogViewModel.from_domain(entry)
        assert vm.id == "3"
        assert vm.started_at_display == "2024-05-01 08:30:00"
        assert vm.status_display == "completed"
        assert vm.status_color == RUN_STATUS_COLORS[ScraperRunStatus.COMPLETED]
        assert vm.triggered_by == "admin"

    def test_automated_run(self):
        entry = ScraperLogEntry(id=4, started_at=None, status=ScraperRunStatus.FAILED)
        vm = ScraperLogViewModel.from_domain(entry)
        assert vm.triggered_by == "Automated"
        assert vm.started_at_display == ""


class TestJobRowViewModel:
    """Tests for JobRowViewModel."""

    def test_unchecked(self):
        vm = JobRowViewModel.from_domain(
            JobRecord(id=5, link="https://example.com/5", date_found="2024-05-01", is_checked=False, search_query="python")
        )
        assert vm.id == "#5"
        assert vm.checked_badge == ""
        assert vm.action_label == "Mark as Checked"
        assert vm.query_display == "Query: python"

    def test_checked(self):
        vm = JobRowViewModel.from_domain(
            JobRecord(id=6, link="l", date_found="d", is_checked=True)
        )
        assert vm.checked_badge == "✓ Checked"
        assert vm.action_label == "Uncheck"
        assert vm.query_display == ""
        assert vm.video_url == ""

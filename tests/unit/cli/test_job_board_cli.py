"""
Tests for the job board CLI.

Commands run through main_async against a FakeJobBoardServer; the
session lives in an InMemorySessionStore shared with the test.
"""
import argparse
import logging
import pytest

from src.gui.main import JobBoardApp
from src.infrastructure.adapters.session_store import InMemorySessionStore
from src.infrastructure.cli.job_board_cli import (
    EXIT_DENIED,
    EXIT_FAILURE,
    EXIT_OK,
    create_parser,
    main_async,
    parse_args,
)
from src.infrastructure.logging.client_logger import ROOT_LOGGER_NAME
from tests.utils.job_board_fakes import (
    FakeJobBoardServer,
    auth_response,
    job_payload,
    list_payload,
    logs_payload,
    make_settings,
    stats_payload,
    status_payload,
)


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    monkeypatch.delenv("JOB_BOARD_API_URL", raising=False)
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def server():
    return FakeJobBoardServer()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def run(server, store):
    """Run the CLI against the fake server."""

    async def _run(*argv):
        def factory(settings):
            return JobBoardApp(make_settings(), session_store=store, transport=server.transport)

        return await main_async(list(argv), app_factory=factory)

    return _run


def _admin_dashboard(server, running=(False,)):
    server.reply("GET", "/jobs/stats/", 200, stats_payload())
    for is_running in running:
        server.reply("GET", "/jobs/scraper-status/", 200, status_payload(is_running))
    server.reply("GET", "/jobs/scraper-logs/", 200, logs_payload("completed"))


class TestCreateParser:
    """Tests for create_parser function."""

    def test_returns_argument_parser(self):
        assert isinstance(create_parser(), argparse.ArgumentParser)

    def test_jobs_defaults(self):
        args = parse_args(["jobs"])
        assert args.command == "jobs"
        assert args.date_filter == "all"
        assert args.check_status == "all"
        assert args.search == ""
        assert args.page is None

    def test_jobs_filters(self):
        args = parse_args(["jobs", "--date-filter", "last_week", "--check-status", "checked", "--page", "2"])
        assert args.date_filter == "last_week"
        assert args.check_status == "checked"
        assert args.page == 2

    def test_invalid_date_filter(self):
        with pytest.raises(SystemExit):
            parse_args(["jobs", "--date-filter", "tomorrow"])

    def test_toggle_requires_state(self):
        with pytest.raises(SystemExit):
            parse_args(["toggle", "5"])

    def test_toggle_unchecked(self):
        args = parse_args(["toggle", "5", "--unchecked", "--notes", "spam"])
        assert args.job_id == "5"
        assert args.is_checked is False
        assert args.notes == "spam"

    def test_login_requires_username(self):
        with pytest.raises(SystemExit):
            parse_args(["login"])

    def test_verbose_flag(self):
        assert parse_args(["-v", "whoami"]).verbose


class TestNoCommand:
    """Tests for running without a command."""

    @pytest.mark.asyncio
    async def test_prints_help(self, capsys):
        assert await main_async([]) == EXIT_OK
        assert "usage:" in capsys.readouterr().out


class TestSessionCommands:
    """Tests for login, logout and whoami."""

    @pytest.mark.asyncio
    async def test_login_admin(self, run, server, store, capsys):
        server.reply("POST", "/auth/login/", 200, auth_response(username="admin", role="admin"))

        code = await run("login", "-u", "admin", "-p", "secret")

        assert code == EXIT_OK
        assert store.is_admin()
        out = capsys.readouterr().out
        assert "Welcome, admin! (admin)" in out
        assert "/admin/dashboard" in out

    @pytest.mark.asyncio
    async def test_login_rejected(self, run, server, store, capsys):
        server.reply("POST", "/auth/login/", 401, {"error": "Invalid credentials"})

        code = await run("login", "-u", "bob", "-p", "wrong")

        assert code == EXIT_FAILURE
        assert store.read() is None
        assert "Login failed: Invalid credentials" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_login_without_tokens(self, run, server, store, capsys):
        server.reply("POST", "/auth/login/", 200, {"user": {"username": "bob"}})

        code = await run("login", "-u", "bob", "-p", "pw")

        assert code == EXIT_FAILURE
        assert store.read() is None
        assert "Error: Invalid authentication response" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_login_prompts_for_password(self, run, server, monkeypatch):
        monkeypatch.setattr("getpass.getpass", lambda prompt="": "prompted")
        server.reply("POST", "/auth/login/", 200, auth_response())

        await run("login", "-u", "bob")

        assert FakeJobBoardServer.body(server.requests[0])["password"] == "prompted"

    @pytest.mark.asyncio
    async def test_logout(self, run, server, store):
        store.save(auth_response(refresh="R"))
        server.reply("POST", "/auth/logout/", 200, {"message": "ok"})

        assert await run("logout") == EXIT_OK

        assert FakeJobBoardServer.body(server.requests[0]) == {"refresh_token": "R"}
        assert store.read() is None

    @pytest.mark.asyncio
    async def test_whoami_logged_out(self, run, capsys):
        assert await run("whoami") == EXIT_DENIED
        assert "Not logged in." in capsys.readouterr().out


class TestRegisterCommand:
    """Tests for the register command."""

    @pytest.mark.asyncio
    async def test_password_mismatch_makes_no_request(self, run, server, capsys):
        code = await run(
            "register", "--username", "bob", "--email", "b@example.com",
            "--password", "one", "--password2", "two",
        )

        assert code == EXIT_FAILURE
        assert server.requests == []
        assert "Passwords don't match" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_field_errors_printed(self, run, server, capsys):
        server.reply("POST", "/auth/register/", 400, {"username": ["A user with that username already exists."]})

        code = await run(
            "register", "--username", "bob", "--email", "b@example.com",
            "--password", "pw", "--password2", "pw",
        )

        assert code == EXIT_FAILURE
        assert "username: A user with that username already exists." in capsys.readouterr().out


class TestJobCommands:
    """Tests for jobs and toggle."""

    @pytest.mark.asyncio
    async def test_jobs_requires_login(self, run, server, capsys):
        assert await run("jobs") == EXIT_DENIED
        assert server.requests == []
        assert "Not logged in" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_jobs_lists_results(self, run, server, store, capsys):
        store.save(auth_response())
        server.reply("GET", "/jobs/list/", 200, list_payload(job_payload(1), job_payload(2, is_checked=True)))

        code = await run("jobs", "--date-filter", "today", "--search", "django")

        assert code == EXIT_OK
        params = server.requests[0].url.params
        assert params["date_filter"] == "today"
        assert params["search"] == "django"
        out = capsys.readouterr().out
        assert "Total Jobs: 2  Today: 0" in out
        assert "Job Listings (2)" in out
        assert "https://example.com/jobs/2" in out

    @pytest.mark.asyncio
    async def test_toggle_refetches(self, run, server, store):
        store.save(auth_response())
        server.reply("POST", "/jobs/toggle-check/", 200, {"message": "ok"})
        server.reply("GET", "/jobs/list/", 200, list_payload(job_payload(5, is_checked=True)))

        assert await run("toggle", "5", "--checked") == EXIT_OK

        assert [r.method for r in server.requests] == ["POST", "GET"]
        assert FakeJobBoardServer.body(server.requests[0])["is_checked"] is True


class TestAdminCommands:
    """Tests for admin-only commands."""

    @pytest.mark.asyncio
    async def test_stats_forbidden_for_job_seeker(self, run, server, store, capsys):
        store.save(auth_response(role="job_seeker"))

        assert await run("stats") == EXIT_DENIED

        assert server.requests == []
        assert "requires an admin account" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_stats(self, run, server, store, capsys):
        store.save(auth_response(role="admin"))
        server.reply("GET", "/jobs/stats/", 200, stats_payload(total=120))

        assert await run("stats") == EXIT_OK
        assert "Total Jobs: 120" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_expired_session(self, run, server, store, capsys):
        store.save(auth_response(role="admin"))
        server.reply("GET", "/jobs/stats/", 401, {"detail": "Token is invalid or expired"})

        assert await run("stats") == EXIT_DENIED

        assert store.read() is None
        assert "Session expired" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_trigger(self, run, server, store, capsys):
        store.save(auth_response(role="admin"))
        _admin_dashboard(server, running=(False, True))
        server.reply("POST", "/jobs/trigger-scraper/", 200, {"message": "started"})

        assert await run("trigger", "--yes") == EXIT_OK

        assert len(server.calls("POST", "/jobs/trigger-scraper/")) == 1
        assert "Scraper started successfully!" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_trigger_cancelled(self, run, server, store, monkeypatch):
        store.save(auth_response(role="admin"))
        _admin_dashboard(server)
        monkeypatch.setattr("builtins.input", lambda prompt="": "n")

        assert await run("trigger") == EXIT_OK

        assert server.calls("POST", "/jobs/trigger-scraper/") == []

    @pytest.mark.asyncio
    async def test_trigger_while_running(self, run, server, store, capsys):
        store.save(auth_response(role="admin"))
        _admin_dashboard(server, running=(True,))

        assert await run("trigger", "--yes") == EXIT_FAILURE

        assert server.calls("POST", "/jobs/trigger-scraper/") == []
        assert "already running" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_monitor_polls_until_idle(self, run, server, store, capsys):
        store.save(auth_response(role="admin"))
        _admin_dashboard(server, running=(True, True, False))

        assert await run("monitor") == EXIT_OK

        assert len(server.calls("GET", "/jobs/scraper-status/")) == 3
        assert "Status: Idle" in capsys.readouterr().out


class TestConfigCommand:
    """Tests for the config command."""

    @pytest.mark.asyncio
    async def test_show(self, run, capsys):
        assert await run("config", "--show") == EXIT_OK
        out = capsys.readouterr().out
        assert "api_url: https://jobs.test/api" in out

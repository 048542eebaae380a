"""
Job Board Command-Line Interface.

Provides commands for:
- login / register / logout / whoami: Session management
- jobs / job / toggle: Job seeker dashboard
- stats / scraper-status / scraper-logs / trigger / monitor: Admin dashboard
- config: Show configuration
"""
import argparse
import asyncio
import getpass
import logging
import sys
from typing import Awaitable, Callable, Dict, List, Optional

from src.domain.job_board_entities import Credentials, JobFilter, RegistrationForm
from src.domain.job_board_value_objects import CheckStatus, DateFilter
from src.gui.application.operational_monitor import MonitorSnapshot
from src.gui.application.route_guard import ADMIN_ROUTE, LOGIN_ROUTE
from src.gui.main import JobBoardApp
from src.gui.presentation.view_models import (
    JobRowViewModel,
    ScraperControlViewModel,
    ScraperLogViewModel,
    job_list_stat_cards,
    stat_cards,
)
from src.infrastructure.adapters.job_board_errors import (
    AccessDeniedError,
    ApiError,
    AuthorizationError,
    InvalidCredentialsError,
    JobBoardClientError,
    PreconditionError,
)
from src.infrastructure.job_board_settings import ClientSettings
from src.infrastructure.logging.client_logger import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_DENIED = 2

DATE_FILTERS = [f.value for f in DateFilter]
CHECK_STATUSES = [s.value for s in CheckStatus]


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the job board CLI."""
    parser = argparse.ArgumentParser(
        prog="job-board",
        description="Job Board Client - Browse scraped job links and control the scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s login -u admin
  %(prog)s jobs --date-filter today --check-status unchecked
  %(prog)s toggle 42 --checked --notes "applied"
  %(prog)s trigger --yes
  %(prog)s monitor
  %(prog)s logout
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Login command
    login_parser = subparsers.add_parser("login", help="Log in and store the session")
    login_parser.add_argument("-u", "--username", type=str, required=True, help="Username")
    login_parser.add_argument(
        "-p", "--password",
        type=str,
        help="Password (prompted when omitted)",
    )

    # Register command
    register_parser = subparsers.add_parser("register", help="Create a job seeker account")
    register_parser.add_argument("--username", type=str, required=True)
    register_parser.add_argument("--email", type=str, required=True)
    register_parser.add_argument("--first-name", type=str, default="")
    register_parser.add_argument("--last-name", type=str, default="")
    register_parser.add_argument("--phone", type=str, default="")
    register_parser.add_argument("--password", type=str, help="Password (prompted when omitted)")
    register_parser.add_argument("--password2", type=str, help="Password confirmation (prompted when omitted)")

    subparsers.add_parser("logout", help="Log out and clear the stored session")
    subparsers.add_parser("whoami", help="Show the current user")

    # Jobs command
    jobs_parser = subparsers.add_parser("jobs", help="List jobs")
    _add_filter_arguments(jobs_parser)

    job_parser = subparsers.add_parser("job", help="Show a single job")
    job_parser.add_argument("job_id", type=str, help="Job ID")

    # Toggle command
    toggle_parser = subparsers.add_parser("toggle", help="Mark a job as checked or unchecked")
    toggle_parser.add_argument("job_id", type=str, help="Job ID")
    state_group = toggle_parser.add_mutually_exclusive_group(required=True)
    state_group.add_argument("--checked", dest="is_checked", action="store_true")
    state_group.add_argument("--unchecked", dest="is_checked", action="store_false")
    toggle_parser.add_argument("--notes", type=str, default="", help="Optional notes")
    _add_filter_arguments(toggle_parser)

    # Admin commands
    subparsers.add_parser("stats", help="Show job statistics (admin)")
    subparsers.add_parser("scraper-status", help="Show scraper status (admin)")

    logs_parser = subparsers.add_parser("scraper-logs", help="Show scraper run history (admin)")
    logs_parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number (default: 1)",
    )

    trigger_parser = subparsers.add_parser("trigger", help="Start a scraper run (admin)")
    trigger_parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )

    subparsers.add_parser(
        "monitor",
        help="Show the admin dashboard and keep polling while the scraper runs",
    )

    config_parser = subparsers.add_parser("config", help="Show configuration")
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    """Add job list filter arguments."""
    parser.add_argument(
        "--date-filter",
        type=str,
        choices=DATE_FILTERS,
        default=DateFilter.ALL.value,
        help=f"Date window: {', '.join(DATE_FILTERS)} (default: all)",
    )

    parser.add_argument(
        "--check-status",
        type=str,
        choices=CHECK_STATUSES,
        default=CheckStatus.ALL.value,
        help=f"Checked state: {', '.join(CHECK_STATUSES)} (default: all)",
    )

    parser.add_argument("--search", type=str, default="", help="Search term")
    parser.add_argument("--ordering", type=str, help="Server ordering field, e.g. -date_found")
    parser.add_argument("--page", type=int, help="Page number")


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = create_parser()
    return parser.parse_args(args)


def _filter_from_args(args: argparse.Namespace) -> JobFilter:
    return JobFilter().with_changes(
        date_filter=args.date_filter,
        check_status=args.check_status,
        search=args.search,
        ordering=args.ordering,
        page=args.page,
    )


def _print_snapshot(snapshot: MonitorSnapshot) -> None:
    control = ScraperControlViewModel.from_snapshot(snapshot)
    print(f"Status: {control.status_display}")
    if control.last_run_display:
        print(control.last_run_display)
    for card in stat_cards(snapshot.stats):
        print(f"  {card.label}: {card.value}")
    if snapshot.error:
        print(f"Error: {snapshot.error}")
    _print_logs(snapshot)


def _print_logs(snapshot: MonitorSnapshot) -> None:
    if not snapshot.logs:
        print("No scraper logs found.")
        return
    for entry in snapshot.logs:
        row = ScraperLogViewModel.from_domain(entry)
        print(
            f"  {row.id:>5}  {row.started_at_display:19}  {row.status_display:9}  "
            f"videos={row.videos} links={row.links_found} new={row.new_links}  "
            f"{row.triggered_by}"
        )


def _require_route(app: JobBoardApp, path: str) -> bool:
    target = app.navigate(path)
    if target == path:
        return True
    if target == LOGIN_ROUTE:
        print("Not logged in. Run 'job-board login' first.")
    else:
        print("This command requires an admin account.")
    return False


async def run_login(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the login command."""
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    try:
        result = await app.login(Credentials(username=args.username, password=password))
    except InvalidCredentialsError as e:
        print(f"Login failed: {e}")
        return EXIT_FAILURE

    print(f"Welcome, {result.session.user.username}! ({result.role.value})")
    print(f"Dashboard: {result.destination}")
    return EXIT_OK


async def run_register(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the register command."""
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    password2 = args.password2 if args.password2 is not None else getpass.getpass("Confirm password: ")
    form = RegistrationForm(
        username=args.username,
        email=args.email,
        password=password,
        password2=password2,
        first_name=args.first_name,
        last_name=args.last_name,
        phone=args.phone,
    )

    result = await app.register(form)
    if not result.success:
        print("Registration failed:")
        for field_name, messages in result.field_errors.items():
            if isinstance(messages, list):
                messages = ", ".join(str(m) for m in messages)
            print(f"  {field_name}: {messages}")
        return EXIT_FAILURE

    print(f"Account created. Welcome, {result.session.user.username}!")
    return EXIT_OK


async def run_logout(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the logout command."""
    await app.logout()
    print("Logged out.")
    return EXIT_OK


async def run_whoami(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the whoami command."""
    session = app.session
    if session is None:
        print("Not logged in.")
        return EXIT_DENIED
    user = await app.auth.current_user()
    print(f"{user.get('username', session.user.username)} ({user.get('role', session.role.value)})")
    return EXIT_OK


async def run_jobs(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the jobs command."""
    engine = app.open_job_dashboard(initial_filter=_filter_from_args(args))
    page = await engine.refresh()
    if page is None:
        print(f"Failed to fetch jobs: {engine.state.error}")
        return EXIT_FAILURE

    cards = job_list_stat_cards(page.stats)
    if cards:
        print("  ".join(f"{card.label}: {card.value}" for card in cards))
    print(f"Job Listings ({len(page.results)})")
    if not page.results:
        print("No jobs found matching your filters.")
    for job in page.results:
        row = JobRowViewModel.from_domain(job)
        print(f"{row.id:>6}  {row.date_found}  {row.checked_badge:10}  {row.link}")
        if row.query_display:
            print(f"        {row.query_display}")
    return EXIT_OK


async def run_job(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the job command."""
    engine = app.open_job_dashboard()
    job = await engine.job_detail(args.job_id)
    row = JobRowViewModel.from_domain(job)
    print(f"{row.id}  {row.date_found}  {row.checked_badge}")
    print(f"  {row.link}")
    if row.query_display:
        print(f"  {row.query_display}")
    if row.video_url:
        print(f"  Video: {row.video_url}")
    return EXIT_OK


async def run_toggle(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the toggle command."""
    engine = app.open_job_dashboard(initial_filter=_filter_from_args(args))
    page = await engine.toggle_check(args.job_id, args.is_checked, args.notes)
    state = "checked" if args.is_checked else "unchecked"
    print(f"Job #{args.job_id} marked as {state}.")
    if page is not None:
        print(f"{len(page.results)} job(s) match the current filter.")
    return EXIT_OK


async def run_stats(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the stats command."""
    if not _require_route(app, ADMIN_ROUTE):
        return EXIT_DENIED
    stats = await app.job_api.stats()
    for card in stat_cards(stats):
        print(f"{card.label}: {card.value}")
    return EXIT_OK


async def run_scraper_status(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the scraper-status command."""
    if not _require_route(app, ADMIN_ROUTE):
        return EXIT_DENIED
    status = await app.admin_api.scraper_status()
    control = ScraperControlViewModel.from_snapshot(MonitorSnapshot(status=status))
    print(f"Status: {control.status_display}")
    if control.last_run_display:
        print(control.last_run_display)
    return EXIT_OK


async def run_scraper_logs(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the scraper-logs command."""
    if not _require_route(app, ADMIN_ROUTE):
        return EXIT_DENIED
    logs = await app.admin_api.scraper_logs(page=args.page)
    _print_logs(MonitorSnapshot(logs=logs.entries))
    return EXIT_OK


async def run_trigger(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the trigger command."""
    monitor = app.open_admin_dashboard()
    await monitor.activate()
    try:
        if not monitor.snapshot.can_trigger:
            print("Scraper is already running.")
            return EXIT_FAILURE
        if not args.yes:
            answer = input("Are you sure you want to trigger the scraper? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                print("Cancelled.")
                return EXIT_OK

        result = await monitor.trigger()
        if not result.success:
            print(f"Failed to trigger scraper: {result.error}")
            return EXIT_FAILURE
        print("Scraper started successfully!")
        return EXIT_OK
    finally:
        monitor.deactivate()


async def run_monitor(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the monitor command."""

    def on_change(snapshot: MonitorSnapshot) -> None:
        if not snapshot.loading:
            _print_snapshot(snapshot)
            print()

    monitor = app.open_admin_dashboard(on_change=on_change)
    try:
        await monitor.activate()
        await monitor.join()
    finally:
        monitor.deactivate()
    return EXIT_FAILURE if monitor.snapshot.error else EXIT_OK


async def run_config(args: argparse.Namespace, app: JobBoardApp) -> int:
    """Execute the config command."""
    if args.show:
        print("Current configuration:")
        for key, value in app.settings.to_dict().items():
            print(f"  {key}: {value}")
    else:
        print("Use --show to see the current configuration")
    return EXIT_OK


CommandHandler = Callable[[argparse.Namespace, JobBoardApp], Awaitable[int]]

COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "login": run_login,
    "register": run_register,
    "logout": run_logout,
    "whoami": run_whoami,
    "jobs": run_jobs,
    "job": run_job,
    "toggle": run_toggle,
    "stats": run_stats,
    "scraper-status": run_scraper_status,
    "scraper-logs": run_scraper_logs,
    "trigger": run_trigger,
    "monitor": run_monitor,
    "config": run_config,
}


async def main_async(
    args: Optional[List[str]] = None,
    app_factory: Optional[Callable[[ClientSettings], JobBoardApp]] = None,
) -> int:
    """Async main entry point."""
    parsed_args = parse_args(args)

    if not parsed_args.command:
        create_parser().print_help()
        return EXIT_OK

    try:
        settings = ClientSettings.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return EXIT_FAILURE

    if parsed_args.verbose:
        level = "DEBUG"
    elif parsed_args.quiet:
        level = "WARNING"
    else:
        level = settings.log_level
    configure_logging(level=level, json_output=settings.log_json)

    handler = COMMAND_HANDLERS[parsed_args.command]
    factory = app_factory or JobBoardApp

    async with factory(settings) as app:
        try:
            return await handler(parsed_args, app)
        except AuthorizationError:
            print("Session expired. Please log in again.")
            return EXIT_DENIED
        except AccessDeniedError as e:
            if e.redirect == LOGIN_ROUTE:
                print("Not logged in. Run 'job-board login' first.")
            else:
                print("This command requires an admin account.")
            return EXIT_DENIED
        except PreconditionError as e:
            print(f"{e.field or 'error'}: {e}")
            return EXIT_FAILURE
        except ApiError as e:
            logger.debug("Command %s failed", parsed_args.command, exc_info=True)
            print(f"Request failed: {e}")
            return EXIT_FAILURE
        except JobBoardClientError as e:
            logger.debug("Command %s failed", parsed_args.command, exc_info=True)
            print(f"Error: {e}")
            return EXIT_FAILURE


def main(args: Optional[List[str]] = None) -> int:
    """Synchronous main entry point."""
    return asyncio.run(main_async(args))


if __name__ == "__main__":
    sys.exit(main())

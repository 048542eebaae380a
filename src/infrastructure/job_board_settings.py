"""
Job Board Client Settings

Configuration for connecting the client to the job board API.

Usage:
    settings = ClientSettings.from_env()
    async with JobBoardHttpClient(settings, store) as client:
        ...
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

DEFAULT_API_URL = "https://rohannso-django-job-scraper.hf.space/api"
DEFAULT_SESSION_FILE = "~/.job_board/session.json"


@dataclass(frozen=True)
class ClientSettings:
    """
    Configuration settings for the job board client.

    Attributes:
        api_url: Base URL of the API, including the /api prefix
        session_file: Where the session is persisted between runs
        timeout: Request timeout in seconds
        poll_interval: Seconds between scraper status polls
        log_level: Logging level name
        log_json: Emit JSON log lines instead of human-readable ones
        allow_insecure: Allow plain HTTP URLs (for local development)
    """

    api_url: str = DEFAULT_API_URL
    session_file: str = DEFAULT_SESSION_FILE
    timeout: float = 30.0
    poll_interval: float = 10.0
    log_level: str = "INFO"
    log_json: bool = False
    allow_insecure: bool = False

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if not self.allow_insecure and not self.api_url.startswith("https://"):
            raise ValueError(
                f"JOB_BOARD_API_URL must use HTTPS (got: {self.api_url}). "
                "Set JOB_BOARD_ALLOW_INSECURE=true for local development."
            )

    @classmethod
    def from_env(cls, dotenv: bool = True) -> ClientSettings:
        """
        Load settings from environment variables.

        Optional environment variables:
            - JOB_BOARD_API_URL (default: hosted API)
            - JOB_BOARD_SESSION_FILE (default: ~/.job_board/session.json)
            - JOB_BOARD_TIMEOUT (default: 30)
            - JOB_BOARD_POLL_INTERVAL (default: 10)
            - JOB_BOARD_LOG_LEVEL (default: INFO)
            - JOB_BOARD_LOG_JSON (default: false)
            - JOB_BOARD_ALLOW_INSECURE (default: false)

        Raises:
            ValueError: If a numeric variable is invalid or the URL is not HTTPS
        """
        if dotenv:
            load_dotenv()

        try:
            timeout = float(os.environ.get("JOB_BOARD_TIMEOUT", "30"))
            poll_interval = float(os.environ.get("JOB_BOARD_POLL_INTERVAL", "10"))
        except ValueError as exc:
            raise ValueError(
                "JOB_BOARD_TIMEOUT and JOB_BOARD_POLL_INTERVAL must be numbers"
            ) from exc

        return cls(
            api_url=os.environ.get("JOB_BOARD_API_URL", DEFAULT_API_URL).rstrip("/"),
            session_file=os.environ.get("JOB_BOARD_SESSION_FILE", DEFAULT_SESSION_FILE),
            timeout=timeout,
            poll_interval=poll_interval,
            log_level=os.environ.get("JOB_BOARD_LOG_LEVEL", "INFO").upper(),
            log_json=os.environ.get("JOB_BOARD_LOG_JSON", "false").lower() == "true",
            allow_insecure=(
                os.environ.get("JOB_BOARD_ALLOW_INSECURE", "false").lower() == "true"
            ),
        )

    @property
    def session_path(self) -> Path:
        return Path(self.session_file).expanduser()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "api_url": self.api_url,
            "session_file": str(self.session_path),
            "timeout": self.timeout,
            "poll_interval": self.poll_interval,
            "log_level": self.log_level,
            "log_json": self.log_json,
            "allow_insecure": self.allow_insecure,
        }

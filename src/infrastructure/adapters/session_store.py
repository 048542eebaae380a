"""
Session store for the authenticated identity.

The store is the only owner of the session. It always writes or clears
the access token, refresh token and user profile together.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from src.domain.job_board_entities import Session, UserProfile
from src.infrastructure.adapters.job_board_errors import MalformedSessionError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_KEY = "user"


def _to_session(session: Union[Session, Mapping[str, Any]]) -> Session:
    if isinstance(session, Session):
        return session
    try:
        return Session.from_auth_response(session)
    except ValueError as e:
        raise MalformedSessionError(f"Invalid authentication response: {e}") from e


class SessionStore(ABC):
    """
    Holder of the current session.

    Subclasses only implement raw persistence of the three keyed entries;
    validation and the derived predicates live here.
    """

    def save(self, session: Union[Session, Mapping[str, Any]]) -> Session:
        """
        Persist a session, replacing any previous one.

        Args:
            session: A Session, or a raw login/register response

        Returns:
            The stored Session

        Raises:
            MalformedSessionError: If a token or the user object is missing
        """
        session = _to_session(session)
        self._write({
            ACCESS_TOKEN_KEY: session.access_token,
            REFRESH_TOKEN_KEY: session.refresh_token,
            USER_KEY: session.user.to_dict(),
        })
        logger.info("Session saved for %s (%s)", session.user.username, session.role.value)
        return session

    def read(self) -> Optional[Session]:
        """Return the stored session, or None if absent or unreadable."""
        entries = self._read()
        if not entries:
            return None
        user = entries.get(USER_KEY)
        if not isinstance(user, Mapping):
            return None
        try:
            return Session(
                access_token=entries.get(ACCESS_TOKEN_KEY) or "",
                refresh_token=entries.get(REFRESH_TOKEN_KEY) or "",
                user=UserProfile.from_dict(user),
            )
        except ValueError:
            logger.warning("Ignoring partial session in storage")
            return None

    def clear(self) -> None:
        self._delete()
        logger.info("Session cleared")

    def is_authenticated(self) -> bool:
        return self.read() is not None

    def is_admin(self) -> bool:
        session = self.read()
        return session is not None and session.is_admin

    @abstractmethod
    def _read(self) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def _write(self, entries: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _delete(self) -> None:
        ...


class InMemorySessionStore(SessionStore):
    """Non-durable store, for tests and one-shot scripts."""

    def __init__(self):
        self._entries: Optional[Dict[str, Any]] = None

    def _read(self) -> Optional[Dict[str, Any]]:
        return dict(self._entries) if self._entries else None

    def _write(self, entries: Dict[str, Any]) -> None:
        self._entries = dict(entries)

    def _delete(self) -> None:
        self._entries = None


class FileSessionStore(SessionStore):
    """
    Durable store backed by a JSON file.

    The file is replaced atomically (temp file + rename), so a reader
    never sees a half-written session.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            path: JSON file holding the session
        """
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Optional[Dict[str, Any]]:
        if not self._path.exists():
            return None
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read session file %s: %s", self._path, e)
            return None
        return data if isinstance(data, dict) else None

    def _write(self, entries: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=".session-", suffix=".json", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _delete(self) -> None:
        self._path.unlink(missing_ok=True)

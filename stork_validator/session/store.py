"""
Durable per-account session slots.

Each account owns one JSON file ``tokens_<sanitized username>.json`` so
concurrent accounts never contend for the same file.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

import orjson

from ..data.models import sanitize_username
from ..errors import PersistenceError
from ..logging.config import get_logger
from .models import Session


class SessionStore:
    """File-based session persistence keyed by sanitized username."""

    def __init__(self, directory: Union[str, Path] = "."):
        self.directory = Path(directory)
        self.logger = get_logger("session.store")
        self._lock = threading.Lock()

    def path_for(self, account_key: str) -> Path:
        """Session file path for an account key (sanitized again for safety)."""
        return self.directory / f"tokens_{sanitize_username(account_key)}.json"

    def load(self, account_key: str) -> Optional[Session]:
        """
        Load the last persisted session.

        Missing, unreadable or malformed files load as no session.
        """
        path = self.path_for(account_key)

        with self._lock:
            if not path.exists():
                return None

            try:
                record = orjson.loads(path.read_bytes())
            except (OSError, orjson.JSONDecodeError) as e:
                self.logger.warning(
                    "Ignoring unreadable session file",
                    account_key=account_key,
                    path=str(path),
                    error=str(e)
                )
                return None

        if not isinstance(record, dict):
            self.logger.warning("Ignoring malformed session file", account_key=account_key, path=str(path))
            return None

        return Session.from_record(record)

    def save(self, account_key: str, session: Session) -> None:
        """
        Persist a session atomically.

        Raises:
            PersistenceError: If the file cannot be written
        """
        path = self.path_for(account_key)
        data = orjson.dumps(session.to_record(), option=orjson.OPT_INDENT_2)

        with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=path.name, suffix=".tmp")
                try:
                    with os.fdopen(fd, "wb") as f:
                        f.write(data)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise PersistenceError(
                    f"Failed to save session: {e}",
                    operation="save",
                    target=str(path)
                ) from e

    def invalidate(self, account_key: str) -> bool:
        """
        Delete the persisted session.

        Returns:
            True if a file was removed

        Raises:
            PersistenceError: If an existing file cannot be removed
        """
        path = self.path_for(account_key)

        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                raise PersistenceError(
                    f"Failed to delete session: {e}",
                    operation="invalidate",
                    target=str(path)
                ) from e

        self.logger.info("Session file deleted", account_key=account_key, path=str(path))
        return True

"""Saved connection sessions for nativeftp.

Connections are stored as the records produced by
``Connection.to_dict()``, keyed by a session name, in one JSON file.
Passwords can be kept in the system keyring instead of the file.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from nativeftp.config.credentials import CredentialManager
from nativeftp.config.paths import get_sessions_path
from nativeftp.config.settings import read_json, write_json
from nativeftp.ftp.connection import Connection
from nativeftp.ftp.transport import Transport

logger = logging.getLogger("nativeftp.sessions")


class SessionStore:
    """Persists Connection records by name."""

    def __init__(
        self,
        path: Optional[Path] = None,
        use_keyring: bool = False,
        credentials: Optional[CredentialManager] = None
    ):
        """
        Initialize the store.

        Args:
            path: Optional custom file, defaults to platform standard
            use_keyring: Keep passwords in the system keyring
            credentials: Credential manager to use with the keyring
        """
        self._path = path or get_sessions_path()
        self._use_keyring = use_keyring
        self._credentials = credentials or CredentialManager()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, dict]:
        return read_json(self._path) or {}

    def names(self) -> List[str]:
        """Names of all saved sessions, sorted."""
        return sorted(self._read())

    def get_record(self, name: str) -> Optional[dict]:
        """Stored record for ``name`` as written to the file."""
        return self._read().get(name)

    def save(self, name: str, connection: Connection) -> dict:
        """
        Save a connection under ``name``, replacing any previous record.

        Returns:
            The record written to the file
        """
        record = connection.to_dict()
        authentication = connection.authentication
        if self._use_keyring and authentication is not None:
            if self._credentials.save_authentication(connection.host, authentication):
                record["authentication"] = dict(record["authentication"], password=None)
            else:
                logger.warning(f"Keyring unavailable, storing password for session '{name}' in file")

        sessions = self._read()
        sessions[name] = record
        write_json(self._path, sessions)
        logger.debug(f"Saved session '{name}'")
        return record

    def load(
        self,
        name: str,
        transport_factory: Callable[[], Transport] = Transport
    ) -> Connection:
        """
        Restore the connection saved under ``name``.

        The connection opens its transport on first use.

        Raises:
            KeyError: If no session has that name
        """
        record = self.get_record(name)
        if record is None:
            raise KeyError(f"No saved session named '{name}'")

        record = dict(record)
        auth_record = record.get("authentication")
        if auth_record and auth_record.get("password") is None:
            password = self._credentials.get_password(record["host"], auth_record["username"])
            if password is None:
                logger.warning(f"No saved password for session '{name}', restoring without login")
                record["authentication"] = None
            else:
                record["authentication"] = dict(auth_record, password=password)

        return Connection.from_dict(record, transport_factory=transport_factory)

    def delete(self, name: str) -> bool:
        """
        Remove a saved session and its keyring password.

        Returns:
            True if the session existed
        """
        sessions = self._read()
        record = sessions.pop(name, None)
        if record is None:
            return False

        auth_record = record.get("authentication")
        if self._use_keyring and auth_record:
            self._credentials.delete_password(record["host"], auth_record["username"])

        write_json(self._path, sessions)
        return True

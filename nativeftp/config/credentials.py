"""Secure credential storage for nativeftp.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) to store FTP passwords outside of session files.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from nativeftp.ftp.authentication import Authentication

logger = logging.getLogger("nativeftp.credentials")


class CredentialManager:
    """Secure credential storage using system keyring."""

    SERVICE_NAME = "nativeftp"

    def __init__(self, service_name: str = SERVICE_NAME):
        self._service_name = service_name

    @staticmethod
    def _make_key(host: str, username: str) -> str:
        return f"{host}:{username}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Save an FTP password.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self._service_name, self._make_key(host, username), password)
            return True
        except KeyringError as e:
            logger.warning(f"Could not save password for {username}@{host}: {e}")
            return False

    def get_password(self, host: str, username: str) -> Optional[str]:
        """
        Retrieve a saved password.

        Returns:
            Password string or None if not found
        """
        try:
            return keyring.get_password(self._service_name, self._make_key(host, username))
        except KeyringError as e:
            logger.warning(f"Could not read password for {username}@{host}: {e}")
            return None

    def delete_password(self, host: str, username: str) -> bool:
        """
        Remove a saved password.

        Returns:
            True if deleted, False if missing or the keyring failed
        """
        try:
            keyring.delete_password(self._service_name, self._make_key(host, username))
            return True
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            logger.warning(f"Could not delete password for {username}@{host}: {e}")
            return False

    def has_password(self, host: str, username: str) -> bool:
        return self.get_password(host, username) is not None

    def save_authentication(self, host: str, authentication: Authentication) -> bool:
        """Store the password of ``authentication`` for ``host``."""
        return self.save_password(host, authentication.username, authentication.password)

    def get_authentication(self, host: str, username: str) -> Optional[Authentication]:
        """
        Build an Authentication from a saved password.

        Returns:
            Authentication, or None if no password is saved
        """
        password = self.get_password(host, username)
        if password is None:
            return None
        return Authentication(username, password)

"""Unit tests for SessionStore."""

import json

import pytest
from unittest.mock import MagicMock

from nativeftp.config.credentials import CredentialManager
from nativeftp.config.sessions import SessionStore
from nativeftp.ftp.authentication import Authentication
from nativeftp.ftp.connection import Connection, ConnectionState


@pytest.fixture
def sessions_path(tmp_path):
    return tmp_path / "sessions.json"


@pytest.fixture
def credentials():
    return MagicMock(spec=CredentialManager)


class TestSessionStore:
    """Tests for saving and restoring connections."""

    def test_save_writes_connection_record(self, sessions_path, logged_in):
        store = SessionStore(path=sessions_path)

        store.save("work", logged_in)

        data = json.loads(sessions_path.read_text())
        assert data == {"work": logged_in.to_dict()}
        assert store.names() == ["work"]

    def test_load_restores_lazily(self, sessions_path, logged_in, transport):
        store = SessionStore(path=sessions_path)
        store.save("work", logged_in)
        factory = MagicMock(return_value=transport)

        restored = store.load("work", transport_factory=factory)

        assert isinstance(restored, Connection)
        assert restored.state == ConnectionState.AUTHENTICATED
        assert restored.authentication == logged_in.authentication
        factory.assert_not_called()

    def test_load_unknown_session(self, sessions_path):
        with pytest.raises(KeyError):
            SessionStore(path=sessions_path).load("missing")

    def test_keyring_keeps_password_out_of_file(self, sessions_path, logged_in, credentials):
        credentials.save_authentication.return_value = True
        credentials.get_password.return_value = "testpass"
        store = SessionStore(path=sessions_path, use_keyring=True, credentials=credentials)

        record = store.save("work", logged_in)

        assert record["authentication"] == {"username": "testuser", "password": None}
        assert "testpass" not in sessions_path.read_text()
        credentials.save_authentication.assert_called_once_with("127.0.0.1", logged_in.authentication)

        restored = store.load("work")
        assert restored.authentication == Authentication("testuser", "testpass")
        credentials.get_password.assert_called_once_with("127.0.0.1", "testuser")

    def test_keyring_failure_keeps_password_in_file(self, sessions_path, logged_in, credentials):
        credentials.save_authentication.return_value = False
        store = SessionStore(path=sessions_path, use_keyring=True, credentials=credentials)

        record = store.save("work", logged_in)

        assert record["authentication"]["password"] == "testpass"

    def test_missing_keyring_password_restores_without_login(
        self, sessions_path, logged_in, credentials
    ):
        credentials.save_authentication.return_value = True
        credentials.get_password.return_value = None
        store = SessionStore(path=sessions_path, use_keyring=True, credentials=credentials)
        store.save("work", logged_in)

        restored = store.load("work")

        assert restored.authentication is None
        assert restored.state == ConnectionState.OPEN

    def test_delete(self, sessions_path, logged_in, credentials):
        credentials.save_authentication.return_value = True
        store = SessionStore(path=sessions_path, use_keyring=True, credentials=credentials)
        store.save("work", logged_in)
        store.save("home", logged_in)

        assert store.delete("work") is True
        assert store.delete("work") is False
        assert store.names() == ["home"]
        credentials.delete_password.assert_called_once_with("127.0.0.1", "testuser")

    def test_save_before_login(self, sessions_path, connection):
        record = SessionStore(path=sessions_path).save("anon", connection)

        assert record["authentication"] is None

"""Pytest configuration and shared fixtures for nativeftp tests."""

from typing import List, Tuple
from unittest.mock import MagicMock

import pytest

from nativeftp.ftp.authentication import Authentication
from nativeftp.ftp.connection import Connection
from nativeftp.ftp.transport import Transport


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_PORT = 2121
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


@pytest.fixture
def transport() -> MagicMock:
    """Transport double whose primitives all succeed by default."""
    mock = MagicMock(spec=Transport)
    mock.last_error = None
    mock.last_exception = None
    mock.connect.return_value = True
    mock.login.return_value = True
    mock.set_passive.return_value = True
    mock.pwd.return_value = "/"
    mock.mkdir.side_effect = lambda directory: directory
    for name in ("chdir", "cdup", "rmdir", "delete", "rename", "chmod",
                 "put", "append", "get", "fget"):
        getattr(mock, name).return_value = True
    mock.stat.return_value = None
    return mock


@pytest.fixture
def authentication() -> Authentication:
    return Authentication(TEST_FTP_USER, TEST_FTP_PASS)


@pytest.fixture
def connection(transport) -> Connection:
    """Open, not yet authenticated connection over the transport double."""
    return Connection(TEST_FTP_HOST, TEST_FTP_PORT, False, 30, transport)


@pytest.fixture
def logged_in(connection, authentication) -> Connection:
    """Authenticated connection over the transport double."""
    return connection.login(authentication)


def transport_calls(transport: MagicMock) -> List[Tuple]:
    """Primitive calls made on a transport double, as (name, args) tuples."""
    return [(name, args) for name, args, _ in transport.mock_calls]

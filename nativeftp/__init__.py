"""nativeftp - object-oriented FTP/FTPS sessions on top of ftplib."""

__version__ = "1.0.0"

from nativeftp.ftp.authentication import Authentication
from nativeftp.ftp.command import Command
from nativeftp.ftp.connection import Connection, ConnectionState, ListEntry, RemoteStat
from nativeftp.ftp.connector import Connector
from nativeftp.ftp.exceptions import (
    FTPAuthenticationError,
    FTPConnectionError,
    FTPError,
    FTPOperationError,
    FTPPreconditionError,
    FTPTimeoutError,
)
from nativeftp.ftp.transport import ModeType, Transport

__all__ = [
    "Authentication",
    "Command",
    "Connection",
    "ConnectionState",
    "Connector",
    "FTPAuthenticationError",
    "FTPConnectionError",
    "FTPError",
    "FTPOperationError",
    "FTPPreconditionError",
    "FTPTimeoutError",
    "ListEntry",
    "ModeType",
    "RemoteStat",
    "Transport",
]

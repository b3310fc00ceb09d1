"""FTP connection management for nativeftp.

Provides ConnectionState enum, ListEntry and RemoteStat dataclasses,
and the Connection class that owns one FTP control channel.
"""

import logging
import os
import socket
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence

from nativeftp.ftp.authentication import Authentication
from nativeftp.ftp.command import Command
from nativeftp.ftp.escaping import join_command_line
from nativeftp.ftp.exceptions import (
    FTPConnectionError,
    FTPError,
    FTPOperationError,
    FTPPreconditionError,
    FTPTimeoutError,
)
from nativeftp.ftp.transport import ModeType, Transport

logger = logging.getLogger("nativeftp.connection")

DEFAULT_PORT = 21
DEFAULT_TIMEOUT = 90

DIRECTORY_TYPES = ("dir", "cdir", "pdir")


class ConnectionState(Enum):
    """FTP session state."""
    OPEN = "open"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


def parse_modify_time(value: Optional[str]) -> Optional[int]:
    """Convert an MLSx ``modify`` fact (YYYYMMDDHHMMSS, UTC) to a Unix timestamp."""
    if not value:
        return None
    try:
        parsed = datetime.strptime(value[:14], "%Y%m%d%H%M%S")
    except ValueError:
        return None
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def _parse_size(facts: dict) -> Optional[int]:
    # Directories report "sizd" on some servers
    value = facts.get("size", facts.get("sizd"))
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass
class ListEntry:
    """One entry of a directory listing."""
    name: str
    modify_time: Optional[int]
    size: Optional[int]
    mode: Optional[str]
    type: Optional[str]

    @classmethod
    def from_facts(cls, name: str, facts: dict) -> "ListEntry":
        """Create an entry from MLSD facts."""
        return cls(
            name=name,
            modify_time=parse_modify_time(facts.get("modify")),
            size=_parse_size(facts),
            mode=facts.get("unix.mode"),
            type=facts.get("type"),
        )


@dataclass
class RemoteStat:
    """Status of a remote path."""
    path: str
    type: str
    size: Optional[int] = None
    modify_time: Optional[int] = None
    mode: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.type in DIRECTORY_TYPES

    @property
    def is_file(self) -> bool:
        return self.type == "file"


class Connection:
    """
    One FTP session over a single control channel.

    A connection starts OPEN, becomes AUTHENTICATED after ``login()`` and
    ends CLOSED after ``close()``. A Connection is not thread-safe: FTP
    control channels are strictly sequential, so callers must not use one
    Connection from several threads at once.
    """

    @staticmethod
    def create_transport(
        host: str,
        port: int = DEFAULT_PORT,
        is_ssl: bool = False,
        timeout: Optional[int] = DEFAULT_TIMEOUT,
        transport_factory: Callable[[], Transport] = Transport
    ) -> Transport:
        """
        Open a new control channel.

        Raises:
            FTPTimeoutError: If connecting timed out
            FTPConnectionError: If the channel could not be opened
        """
        timeout = DEFAULT_TIMEOUT if timeout is None else timeout
        transport = transport_factory()
        if not transport.connect(host, port, is_ssl, timeout):
            if isinstance(transport.last_exception, socket.timeout):
                raise FTPTimeoutError.from_last_error(transport, host, port, is_ssl, timeout)
            raise FTPConnectionError.from_last_error(transport, host, port, is_ssl, timeout)
        return transport

    def __init__(
        self,
        host: str,
        port: int,
        is_ssl: bool,
        timeout: Optional[int],
        transport: Optional[Transport],
        passive: bool = False,
        transport_factory: Callable[[], Transport] = Transport
    ):
        """
        Initialize the connection.

        Args:
            host: Server host
            port: Server port
            is_ssl: True for FTPS
            timeout: Connect timeout in seconds
            transport: Open transport, or None to open one on first use
            passive: Switch to passive mode right after login
            transport_factory: Creates transports when (re)opening

        Raises:
            FTPPreconditionError: If ``transport`` is not a Transport
        """
        if transport is not None and not isinstance(transport, Transport):
            raise FTPPreconditionError(
                transport,
                f"transport [{type(transport).__name__}] is unsupported, "
                f"only {Transport.__name__} is supported"
            )

        self._host = host
        self._port = port
        self._is_ssl = is_ssl
        self._timeout = timeout
        self._transport = transport
        self._transport_factory = transport_factory
        self._is_passive = passive
        self._authentication: Optional[Authentication] = None
        self._closed = False

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self):
        if getattr(self, "_transport", None) is not None:
            self.close()

    def __repr__(self) -> str:
        return (
            f"Connection(host={self._host!r}, port={self._port}, "
            f"is_ssl={self._is_ssl}, state={self.state.value})"
        )

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def is_ssl(self) -> bool:
        return self._is_ssl

    @property
    def timeout(self) -> Optional[int]:
        return self._timeout

    @property
    def is_passive(self) -> bool:
        """True if passive mode is requested for data transfers."""
        return self._is_passive

    @property
    def authentication(self) -> Optional[Authentication]:
        """Identity resolved by the last successful login."""
        return self._authentication

    @property
    def state(self) -> ConnectionState:
        """Current session state."""
        if self._closed:
            return ConnectionState.CLOSED
        if self._authentication is not None:
            return ConnectionState.AUTHENTICATED
        return ConnectionState.OPEN

    @property
    def last_error(self) -> Optional[str]:
        """Last error reported by the transport."""
        if self._transport is None:
            return None
        return self._transport.last_error

    @property
    def transport(self) -> Transport:
        """
        The open transport.

        A connection restored without a transport opens (and logs in
        again) on first access.

        Raises:
            FTPPreconditionError: If the connection is closed
        """
        if self._closed:
            raise FTPPreconditionError(self, "resource already closed")
        if self._transport is None:
            self._reopen()
        return self._transport

    def _reopen(self) -> None:
        logger.info(f"Reopening connection to {self._host}:{self._port}")
        transport = self.create_transport(
            self._host, self._port, self._is_ssl, self._timeout, self._transport_factory
        )
        self._transport = transport
        if self._authentication is None:
            return
        try:
            self._authentication.authenticate(self)
            if self._is_passive:
                self.set_passive(True)
        except FTPError:
            # Only a fully replayed session is kept
            self._transport = None
            transport.close()
            raise

    def _error(self, operation: str) -> FTPOperationError:
        error = FTPOperationError.from_last_error(self, operation, self._transport)
        logger.warning(str(error))
        return error

    def _require_identity(self) -> Authentication:
        if self._authentication is None:
            raise FTPPreconditionError(self, "you must login before doing this action")
        return self._authentication

    def set_passive(self, passive: bool) -> None:
        """
        Turn passive mode on or off.

        Raises:
            FTPPreconditionError: If called before login
            FTPOperationError: If the transport rejects the change
        """
        if self._authentication is None:
            raise FTPPreconditionError(
                self, "can not change passive mode of connection before login"
            )
        if not self.transport.set_passive(passive):
            raise self._error("PASV")
        self._is_passive = passive

    def login(self, authentication: Authentication) -> "Connection":
        """
        Authenticate the session.

        Passive mode requested at construction is applied right after a
        successful login.

        Raises:
            FTPAuthenticationError: If the server rejects the credentials
        """
        self._authentication = authentication.authenticate(self)
        logger.info(f"Logged in to {self._host}:{self._port} as '{authentication.username}'")
        if self._is_passive:
            self.set_passive(self._is_passive)
        return self

    def execute(self, command_line: Sequence) -> Command:
        """
        Send a raw command built from ``command_line``.

        A negative server reply is reported through the returned
        Command, not raised.

        Raises:
            FTPOperationError: If the command could not be transmitted
        """
        line = join_command_line(command_line)
        logger.debug(f"Raw command: {line}")
        result = self.transport.raw_command(line)
        if result is None:
            raise self._error("raw command")

        is_error = result[-1][:1] in ("4", "5")
        return Command(self, "\n".join(result), is_error)

    def close(self) -> None:
        """Close the control channel. Safe to call more than once."""
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
            logger.info(f"Closed connection to {self._host}:{self._port}")
        self._closed = True

    @contextmanager
    def _staging_file(self) -> Iterator[str]:
        """Yield the path of a temporary local file, removed on exit."""
        fd, path = tempfile.mkstemp(prefix="nativeftp_")
        os.close(fd)
        try:
            yield path
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass

    def append(self, remote_file_name: str, local_file_name: str,
               mode: ModeType = ModeType.BINARY) -> "Connection":
        """Append a local file's contents to a remote file."""
        if not self.transport.append(remote_file_name, str(local_file_name), mode):
            raise self._error("APPE")
        return self

    def put(self, remote_file_name: str, data: bytes, append: bool = False,
            mode: ModeType = ModeType.BINARY) -> "Connection":
        """
        Write ``data`` to a remote file.

        Args:
            remote_file_name: Remote path
            data: Bytes to write
            append: Append to the remote file instead of replacing it
            mode: Transfer mode
        """
        with self._staging_file() as local:
            with open(local, "wb") as fp:
                fp.write(data)

            if append:
                self.append(remote_file_name, local, mode)
            elif not self.transport.put(remote_file_name, local, mode):
                raise self._error("STOR")
        return self

    def get(self, remote_file_name: str, mode: ModeType = ModeType.BINARY,
            length: Optional[int] = None) -> bytes:
        """
        Read a remote file.

        Args:
            remote_file_name: Remote path
            mode: Transfer mode
            length: Maximum number of bytes to return, None for all

        Returns:
            File contents
        """
        if length is not None and length < 0:
            raise ValueError(f"length must be non-negative, got {length}")

        with self._staging_file() as local:
            if not self.transport.get(local, remote_file_name, mode):
                raise self._error("RETR")
            with open(local, "rb") as fp:
                return fp.read() if length is None else fp.read(length)

    def mkdir(self, directory: str, recursive: bool = False) -> "Connection":
        """
        Create a remote directory.

        With ``recursive``, each missing path segment is created in turn
        and the working directory is restored afterwards, also on failure.
        """
        if not recursive:
            self._mkdir(directory)
            return self

        cwd = self.pwd()
        try:
            if directory.startswith("/"):
                self.chdir("/")
            for part in directory.split("/"):
                if not part:
                    continue
                if not self.is_dir(part):
                    self._mkdir(part)
                self.chdir(part)
        except Exception:
            # Keep the segment failure as the raised error
            try:
                self.chdir(cwd)
            except FTPError as restore_error:
                logger.warning(f"Could not return to {cwd} after failed mkdir: {restore_error}")
            raise
        self.chdir(cwd)
        return self

    def _mkdir(self, directory: str) -> str:
        result = self.transport.mkdir(directory)
        if result is None:
            raise self._error("MKD")
        return result

    def nlist(self, dirname: str) -> List[str]:
        """
        List names in a remote directory.

        Returns:
            Entry names relative to ``dirname``, without ``.`` and ``..``
        """
        result = self.transport.nlist(dirname)
        if result is None:
            raise self._error("NLST")

        prefix = dirname.rstrip("/") + "/"
        names = [path[len(prefix):] if path.startswith(prefix) else path for path in result]
        return [name for name in names if name not in (".", "..")]

    def ls(self, dirname: str) -> List[ListEntry]:
        """List a remote directory with per-entry metadata."""
        result = self.transport.mlsd(dirname)
        if result is None:
            raise self._error("MLSD")

        return [
            ListEntry.from_facts(name, facts)
            for name, facts in result
            if name not in (".", "..") and facts.get("type") not in ("cdir", "pdir")
        ]

    def pwd(self) -> str:
        result = self.transport.pwd()
        if result is None:
            raise self._error("PWD")
        return result

    def rename(self, source: str, destination: str) -> "Connection":
        if not self.transport.rename(source, destination):
            raise self._error("RNFR/RNTO")
        return self

    def rmdir(self, directory: str) -> "Connection":
        if not self.transport.rmdir(directory):
            raise self._error("RMD")
        return self

    def delete(self, filename: str) -> "Connection":
        if not self.transport.delete(filename):
            raise self._error("DELE")
        return self

    def chdir(self, directory: str) -> "Connection":
        if not self.transport.chdir(directory):
            raise self._error("CWD")
        return self

    def cdup(self) -> "Connection":
        if not self.transport.cdup():
            raise self._error("CDUP")
        return self

    def chmod(self, filename: str, permission: int) -> "Connection":
        """Set permissions (e.g. ``0o644``) on a remote file."""
        if not self.transport.chmod(permission, filename):
            raise self._error("SITE CHMOD")
        return self

    def size(self, filename: str) -> int:
        """
        Size of a remote file in bytes.

        Raises:
            FTPOperationError: If the size is unknown
        """
        result = self.transport.size(filename)
        if result == -1:
            raise self._error("SIZE")
        return result

    def stat(self, path: str) -> RemoteStat:
        """
        Status of a remote path.

        Raises:
            FTPPreconditionError: If called before login
            FTPOperationError: If the path does not exist
        """
        self._require_identity()
        facts = self.transport.stat(path)
        if facts is None:
            raise self._error("STAT")
        return RemoteStat(
            path=path,
            type=facts.get("type", "file"),
            size=_parse_size(facts),
            modify_time=parse_modify_time(facts.get("modify")),
            mode=facts.get("unix.mode"),
        )

    def _probe(self, path: str) -> Optional[dict]:
        self._require_identity()
        return self.transport.stat(path)

    def is_file(self, path: str) -> bool:
        facts = self._probe(path)
        return facts is not None and facts.get("type") == "file"

    def is_dir(self, path: str) -> bool:
        facts = self._probe(path)
        return facts is not None and facts.get("type") in DIRECTORY_TYPES

    def file_exists(self, path: str) -> bool:
        return self._probe(path) is not None

    def upload(self, local_file_name: str, remote: str) -> "Connection":
        """Upload a local file as-is."""
        if not self.transport.put(remote, str(local_file_name), ModeType.BINARY):
            raise self._error("STOR")
        return self

    def download(self, remote: str, local_file_name: str) -> "Connection":
        """Download a remote file into a local file."""
        transport = self.transport
        with open(local_file_name, "wb") as fp:
            if not transport.fget(fp, remote, ModeType.BINARY):
                raise self._error("RETR")
        return self

    def to_dict(self) -> dict:
        """Convert the connection to a persistable record."""
        return {
            "host": self._host,
            "port": self._port,
            "timeout": self._timeout,
            "isSSL": self._is_ssl,
            "isPassive": self._is_passive,
            "authentication": (
                self._authentication.to_dict() if self._authentication else None
            ),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        transport_factory: Callable[[], Transport] = Transport
    ) -> "Connection":
        """
        Restore a connection from a record written by ``to_dict``.

        The transport is opened, and the stored credentials replayed, on
        first use.
        """
        connection = cls(
            host=data["host"],
            port=data.get("port", DEFAULT_PORT),
            is_ssl=data.get("isSSL", False),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            transport=None,
            passive=data.get("isPassive", False),
            transport_factory=transport_factory,
        )
        if data.get("authentication"):
            connection._authentication = Authentication.from_dict(data["authentication"])
        return connection

"""Connection factory for nativeftp."""

import ftplib
import logging
from typing import Callable, Optional

from nativeftp.ftp.connection import DEFAULT_PORT, DEFAULT_TIMEOUT, Connection
from nativeftp.ftp.exceptions import FTPPreconditionError
from nativeftp.ftp.transport import Transport
from nativeftp.utils.validators import validate_host, validate_port, validate_timeout

logger = logging.getLogger("nativeftp.connector")


class Connector:
    """Opens Connections after checking the environment can support them."""

    def __init__(self, transport_factory: Callable[[], Transport] = Transport):
        """
        Initialize the connector.

        Args:
            transport_factory: Creates the transport for each connection

        Raises:
            FTPPreconditionError: If FTP support is unavailable
        """
        if not hasattr(ftplib, "FTP"):
            raise FTPPreconditionError(self, "ftplib FTP support is required to use this connector")
        self._transport_factory = transport_factory

    @property
    def supports_ssl(self) -> bool:
        """True if FTPS connections can be made."""
        return hasattr(ftplib, "FTP_TLS")

    def connect(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        is_ssl: bool = False,
        timeout: Optional[int] = DEFAULT_TIMEOUT,
        passive: bool = False
    ) -> Connection:
        """
        Open a connection.

        Args:
            host: Server host
            port: Server port
            is_ssl: Use explicit FTPS
            timeout: Connect timeout in seconds
            passive: Switch to passive mode after login

        Returns:
            Connection in the OPEN state

        Raises:
            ValueError: If host, port or timeout is invalid
            FTPPreconditionError: If FTPS is requested but unsupported
            FTPConnectionError: If the control channel cannot be opened
        """
        for is_valid, error in (
            validate_host(host),
            validate_port(port),
            validate_timeout(timeout) if timeout is not None else (True, None),
        ):
            if not is_valid:
                raise ValueError(error)

        if is_ssl and not self.supports_ssl:
            raise FTPPreconditionError(self, "ssl support is required for FTPS connections")

        host = host.strip()
        logger.info(f"Connecting to {host}:{port} (ssl={is_ssl})")
        transport = Connection.create_transport(
            host, port, is_ssl, timeout, self._transport_factory
        )
        return Connection(
            host, port, is_ssl, timeout, transport,
            passive=passive,
            transport_factory=self._transport_factory,
        )

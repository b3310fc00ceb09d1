"""Login credentials for nativeftp connections."""

import logging
from dataclasses import dataclass, field

from nativeftp.ftp.exceptions import FTPAuthenticationError, FTPPreconditionError

logger = logging.getLogger("nativeftp.authentication")


@dataclass(frozen=True)
class Authentication:
    """
    Username/password credentials.

    One instance can be reused for any number of connections and
    reconnects.
    """
    username: str
    password: str = field(repr=False)

    def authenticate(self, connection) -> "Authentication":
        """
        Log in on the connection's control channel.

        Args:
            connection: Connection to log in on

        Returns:
            This Authentication, for the connection to keep as its identity

        Raises:
            FTPPreconditionError: If ``connection`` is not a Connection
            FTPAuthenticationError: If the server rejects the login
        """
        # Imported here, connection imports this module
        from nativeftp.ftp.connection import Connection

        if not isinstance(connection, Connection):
            raise FTPPreconditionError(
                connection,
                f"connection [{type(connection).__name__}] is unsupported, "
                f"only {Connection.__name__} is supported"
            )

        transport = connection.transport
        logger.debug(f"Logging in as '{self.username}' on {connection.host}:{connection.port}")
        if not transport.login(self.username, self.password):
            raise FTPAuthenticationError.from_last_error(self, transport)

        return self

    def to_dict(self) -> dict:
        """Convert credentials to a persistable record."""
        return {
            "username": self.username,
            "password": self.password,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Authentication":
        """Create credentials from a record written by ``to_dict``."""
        return cls(username=data["username"], password=data["password"])

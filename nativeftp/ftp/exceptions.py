"""FTP-specific exceptions for nativeftp.

Every error carries the object the failing operation worked on
(``target``) and a message taken from the transport's last error, so
callers always know what failed and on what.
"""

from typing import Any, Optional


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(
        self,
        message: str = "",
        target: Any = None,
        original_error: Exception = None
    ):
        super().__init__(message)
        self.message = message
        self.target = target
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """Failed to open the FTP control connection."""

    def __init__(
        self,
        host: str,
        port: int,
        is_ssl: bool = False,
        timeout: Optional[int] = None,
        reason: Optional[str] = None,
        original_error: Exception = None
    ):
        self.host = host
        self.port = port
        self.is_ssl = is_ssl
        self.timeout = timeout
        self.reason = reason
        message = f"Failed to connect to {host}:{port}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, self.parameters, original_error)

    @property
    def parameters(self) -> dict:
        """Connection parameters that were attempted."""
        return {
            "hostname": self.host,
            "port": self.port,
            "is_ssl": self.is_ssl,
            "timeout": self.timeout,
        }

    @classmethod
    def from_last_error(cls, transport, host: str, port: int,
                        is_ssl: bool = False, timeout: Optional[int] = None):
        """Build the error from the transport's last reported failure."""
        return cls(
            host, port, is_ssl, timeout,
            reason=transport.last_error,
            original_error=transport.last_exception,
        )


class FTPTimeoutError(FTPConnectionError):
    """Opening the control connection timed out."""

    def __init__(
        self,
        host: str,
        port: int,
        is_ssl: bool = False,
        timeout: Optional[int] = None,
        reason: Optional[str] = None,
        original_error: Exception = None
    ):
        super().__init__(host, port, is_ssl, timeout, reason, original_error)
        self.message = f"Connection to {host}:{port} timed out after {timeout} seconds"


class FTPAuthenticationError(FTPError):
    """FTP authentication (login) failed."""

    def __init__(self, authentication, reason: Optional[str] = None):
        self.username = authentication.username
        self.reason = reason
        message = f"Authentication failed for user '{self.username}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, authentication)

    @classmethod
    def from_last_error(cls, authentication, transport) -> "FTPAuthenticationError":
        return cls(authentication, transport.last_error)


class FTPOperationError(FTPError):
    """A protocol operation (chdir, put, get, mkdir, ...) failed."""

    def __init__(
        self,
        target,
        operation: str,
        reason: Optional[str] = None,
        original_error: Exception = None
    ):
        self.operation = operation
        self.reason = reason
        message = f"FTP {operation} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, target, original_error)

    @classmethod
    def from_last_error(cls, target, operation: str, transport=None) -> "FTPOperationError":
        """
        Build the error from the last transport failure.

        Args:
            target: Object the operation was running on
            operation: Operation name, used in the message
            transport: Transport to read the last error from (defaults
                to the target's transport when it has one)
        """
        if transport is None:
            transport = getattr(target, "_transport", None)
        if transport is None:
            return cls(target, operation)
        return cls(target, operation, transport.last_error)


class FTPPreconditionError(FTPError):
    """Local misuse of a connection; never touches the network."""

    def __init__(self, target, message: str):
        super().__init__(message, target)

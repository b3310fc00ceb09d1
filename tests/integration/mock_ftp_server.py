"""Local pyftpdlib server for integration tests.

The served root is a temporary directory seeded with a small tree:

    /pub/readme.txt        b"hello world\\n"
    /pub/docs/guide.txt    b"guide"
    /upload/               empty, writable
"""

import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import FTPServer

SEED_FILES: Dict[str, bytes] = {
    "pub/readme.txt": b"hello world\n",
    "pub/docs/guide.txt": b"guide",
}
SEED_DIRS = ("upload",)

# Read, write, SITE CHMOD and MFMT for the test user
FULL_PERMISSIONS = "elradfmwMT"


class MockFTPServer:
    """
    FTP server on 127.0.0.1 running in a daemon thread.

    Usage:
        with MockFTPServer(port=21211) as server:
            Connector().connect(server.host, server.port)
    """

    DEFAULT_USER = "testuser"
    DEFAULT_PASS = "testpass"

    host = "127.0.0.1"

    def __init__(
        self,
        port: int = 2121,
        username: str = DEFAULT_USER,
        password: str = DEFAULT_PASS,
    ):
        self.port = port
        self.username = username
        self.password = password

        self._server: Optional[FTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._temp_dir: Optional[tempfile.TemporaryDirectory] = None

    @property
    def root_dir(self) -> Path:
        """Served filesystem root."""
        if self._temp_dir is None:
            raise RuntimeError("Server not started")
        return Path(self._temp_dir.name)

    def _seed(self) -> None:
        for name in SEED_DIRS:
            (self.root_dir / name).mkdir(parents=True)
        for name, data in SEED_FILES.items():
            path = self.root_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

    def _handler(self) -> type:
        authorizer = DummyAuthorizer()
        authorizer.add_user(self.username, self.password, str(self.root_dir), perm=FULL_PERMISSIONS)

        # Per-server subclass, handler settings are class attributes
        handler = type("MockFTPHandler", (FTPHandler,), {})
        handler.authorizer = authorizer
        handler.passive_ports = range(60000, 60100)
        handler.auth_failed_timeout = 0.1
        return handler

    def start(self) -> None:
        """Seed the root and start serving; returns once the socket listens."""
        self._temp_dir = tempfile.TemporaryDirectory(prefix="nativeftp_srv_")
        self._seed()

        self._server = FTPServer((self.host, self.port), self._handler())
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"timeout": 0.1},
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop serving and remove the served root."""
        if self._server is not None:
            self._server.close_all()
        if self._thread is not None:
            self._thread.join(timeout=5)
        if self._temp_dir is not None:
            self._temp_dir.cleanup()

        self._server = None
        self._thread = None
        self._temp_dir = None

    def __enter__(self) -> "MockFTPServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

"""ftplib-backed transport for nativeftp.

Transport exposes the raw FTP primitives a Connection is built on. It
never raises for FTP-level failures: each primitive reports failure by
its return value and records the reason in ``last_error`` so the caller
can decide how to surface it.
"""

import logging
from enum import Enum
from ftplib import FTP, FTP_TLS, all_errors, error_perm, error_proto
from typing import BinaryIO, Callable, List, Optional, Tuple

logger = logging.getLogger("nativeftp.transport")

# Replies meaning the server does not implement a command
NOT_IMPLEMENTED_CODES = ("500", "502", "504")

# Facts requested from MLSD/MLST
MLSX_FACTS = ["type", "size", "sizd", "modify", "unix.mode"]

# Errors a primitive turns into a failure result
TRANSPORT_ERRORS = all_errors + (EOFError,)


class ModeType(Enum):
    """Transfer mode for file transfers."""
    ASCII = "ascii"
    BINARY = "binary"


def parse_mlsx_line(line: str) -> Tuple[str, dict]:
    """
    Parse one MLST/MLSD fact line.

    Args:
        line: Line like ``type=file;size=3; name``

    Returns:
        Tuple of (name, facts) with lowercased fact names
    """
    facts_found, _, name = line.strip().partition(" ")
    facts = {}
    for fact in facts_found.rstrip(";").split(";"):
        key, _, value = fact.partition("=")
        if key:
            facts[key.lower()] = value
    return name, facts


class Transport:
    """Primitive FTP operations over one control channel."""

    def __init__(self):
        """Initialize an unconnected transport."""
        self._ftp: Optional[FTP] = None
        self.last_error: Optional[str] = None
        self.last_exception: Optional[BaseException] = None

    @property
    def is_open(self) -> bool:
        """True while the control channel is open."""
        return self._ftp is not None

    @property
    def is_ssl(self) -> bool:
        """True if the channel is FTPS."""
        return isinstance(self._ftp, FTP_TLS)

    def _reset_error(self) -> None:
        self.last_error = None
        self.last_exception = None

    def _fail(self, error: BaseException) -> None:
        self.last_exception = error
        self.last_error = str(error) or error.__class__.__name__
        logger.debug(f"Transport failure: {self.last_error}")

    def _attempt(self, func: Callable, *args, failure=False):
        """
        Run an ftplib call, recording any failure.

        Returns:
            The call's result, or ``failure`` if it raised
        """
        self._reset_error()
        if self._ftp is None:
            self.last_error = "FTP control connection is not open"
            return failure
        try:
            return func(*args)
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return failure

    def connect(self, host: str, port: int = 21, ssl: bool = False,
                timeout: Optional[int] = 90) -> bool:
        """
        Open the control channel.

        Args:
            host: Server host
            port: Server port
            ssl: Use explicit FTPS (AUTH TLS)
            timeout: Connect timeout in seconds

        Returns:
            True on success
        """
        self._reset_error()
        ftp = FTP_TLS() if ssl else FTP()
        ftp.set_debuglevel(0)
        try:
            ftp.connect(host=host, port=port, timeout=timeout)
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return False

        self._ftp = ftp
        logger.debug(f"Control channel open to {host}:{port} (ssl={ssl})")
        return True

    def login(self, username: str, password: str) -> bool:
        def login():
            self._ftp.login(user=username, passwd=password)
            if isinstance(self._ftp, FTP_TLS):
                # Protect the data channel as well
                self._ftp.prot_p()
            return True

        return self._attempt(login)

    def set_passive(self, passive: bool) -> bool:
        def set_pasv():
            self._ftp.set_pasv(passive)
            return True

        return self._attempt(set_pasv)

    def raw_command(self, line: str) -> Optional[List[str]]:
        """
        Send a raw command line and collect the reply.

        Negative replies are returned like positive ones and also
        recorded in ``last_error``.

        Returns:
            Reply lines, or None if the command could not be sent
        """
        def raw():
            try:
                self._ftp.putcmd(line)
            except ValueError as e:
                # ftplib refuses CR or LF inside a command line
                raise error_proto(str(e)) from e
            return self._ftp.getmultiline()

        reply = self._attempt(raw, failure=None)
        if reply is None:
            return None
        if reply[:1] in ("4", "5"):
            self.last_error = reply
        return reply.split("\n")

    def close(self) -> None:
        """Close the control channel, sending QUIT when possible."""
        if self._ftp is None:
            return
        ftp, self._ftp = self._ftp, None
        try:
            ftp.quit()
        except TRANSPORT_ERRORS:
            ftp.close()

    def _store(self, verb: str, remote: str, local: str, mode: ModeType) -> bool:
        def store():
            with open(local, "rb") as fp:
                if mode == ModeType.ASCII:
                    self._ftp.storlines(f"{verb} {remote}", fp)
                else:
                    self._ftp.storbinary(f"{verb} {remote}", fp)
            return True

        return self._attempt(store)

    def put(self, remote: str, local: str, mode: ModeType = ModeType.BINARY) -> bool:
        return self._store("STOR", remote, local, mode)

    def append(self, remote: str, local: str, mode: ModeType = ModeType.BINARY) -> bool:
        return self._store("APPE", remote, local, mode)

    def fget(self, fp: BinaryIO, remote: str, mode: ModeType = ModeType.BINARY) -> bool:
        """Download ``remote`` into the already open binary file ``fp``."""
        def retrieve():
            if mode == ModeType.ASCII:
                encoding = self._ftp.encoding
                self._ftp.retrlines(
                    f"RETR {remote}",
                    lambda line: fp.write(line.encode(encoding) + b"\n")
                )
            else:
                self._ftp.retrbinary(f"RETR {remote}", fp.write)
            return True

        return self._attempt(retrieve)

    def get(self, local: str, remote: str, mode: ModeType = ModeType.BINARY) -> bool:
        self._reset_error()
        try:
            fp = open(local, "wb")
        except OSError as e:
            self._fail(e)
            return False
        with fp:
            return self.fget(fp, remote, mode)

    def mkdir(self, directory: str) -> Optional[str]:
        return self._attempt(lambda: self._ftp.mkd(directory), failure=None)

    def rmdir(self, directory: str) -> bool:
        return self._attempt(self._void(lambda: self._ftp.rmd(directory)))

    def delete(self, filename: str) -> bool:
        return self._attempt(self._void(lambda: self._ftp.delete(filename)))

    def rename(self, source: str, destination: str) -> bool:
        return self._attempt(self._void(lambda: self._ftp.rename(source, destination)))

    def chdir(self, directory: str) -> bool:
        return self._attempt(self._void(lambda: self._ftp.cwd(directory)))

    def cdup(self) -> bool:
        return self._attempt(self._void(lambda: self._ftp.voidcmd("CDUP")))

    def chmod(self, mode: int, filename: str) -> bool:
        return self._attempt(
            self._void(lambda: self._ftp.voidcmd(f"SITE CHMOD {mode:o} {filename}"))
        )

    def size(self, filename: str) -> int:
        """Size of a remote file, or -1 when unknown."""
        def size():
            # Many servers refuse SIZE in ASCII mode
            self._ftp.voidcmd("TYPE I")
            result = self._ftp.size(filename)
            return -1 if result is None else result

        return self._attempt(size, failure=-1)

    def pwd(self) -> Optional[str]:
        return self._attempt(lambda: self._ftp.pwd(), failure=None)

    def nlist(self, dirname: str) -> Optional[List[str]]:
        return self._attempt(lambda: self._ftp.nlst(dirname), failure=None)

    def mlsd(self, dirname: str) -> Optional[List[Tuple[str, dict]]]:
        return self._attempt(
            lambda: list(self._ftp.mlsd(dirname, facts=MLSX_FACTS)),
            failure=None
        )

    def stat(self, path: str) -> Optional[dict]:
        """
        Look up the facts of a remote path.

        Uses MLST when the server supports it, otherwise probes the path
        with CWD (directories) and SIZE/MDTM (files). The working
        directory is restored after a CWD probe.

        Returns:
            Facts dict with at least ``type``, or None if the path does
            not exist or the lookup failed
        """
        self._reset_error()
        if self._ftp is None:
            self.last_error = "FTP control connection is not open"
            return None

        try:
            reply = self._ftp.sendcmd(f"MLST {path}")
        except error_perm as e:
            if not str(e).startswith(NOT_IMPLEMENTED_CODES):
                self._fail(e)
                return None
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return None
        else:
            lines = reply.split("\n")
            if len(lines) < 2:
                self.last_error = f"Malformed MLST reply: {reply}"
                return None
            _, facts = parse_mlsx_line(lines[1])
            return facts

        return self._probe(path)

    def _probe(self, path: str) -> Optional[dict]:
        try:
            cwd = self._ftp.pwd()
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return None

        try:
            self._ftp.cwd(path)
        except error_perm:
            pass
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return None
        else:
            try:
                self._ftp.cwd(cwd)
            except TRANSPORT_ERRORS as e:
                self._fail(e)
                return None
            return {"type": "dir"}

        try:
            self._ftp.voidcmd("TYPE I")
            size = self._ftp.size(path)
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return None

        facts = {"type": "file"}
        if size is not None:
            facts["size"] = str(size)
        try:
            reply = self._ftp.sendcmd(f"MDTM {path}")
        except error_perm:
            return facts
        except TRANSPORT_ERRORS as e:
            self._fail(e)
            return None
        if reply.startswith("213"):
            facts["modify"] = reply[3:].strip()
        return facts

    @staticmethod
    def _void(call: Callable) -> Callable:
        def run():
            call()
            return True
        return run

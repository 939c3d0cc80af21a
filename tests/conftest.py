import io
import logging
from unittest.mock import MagicMock

import pytest

from harvestlib.io.ftp import TrackedFTP

# Canned server replies, keyed by command verb.
REPLIES = {
    "USER": "331 Password required",
    "PASS": "230 Logged in",
    "ACCT": "230 Account accepted",
    "CWD": "250 Directory changed",
    "CDUP": "250 Directory changed",
    "TYPE": "200 Type set",
    "PWD": '257 "/" is the current directory',
    "SIZE": "213 5",
    "QUIT": "221 Goodbye",
    "RETR": "226 Transfer complete",
    "NLST": "226 Transfer complete",
}


class FakeDataConnection:
    """Stand-in for the data socket returned by ``transfercmd``."""

    def __init__(self, payload: bytes):
        self._chunks = [payload, b""]

    def recv(self, blocksize):
        return self._chunks.pop(0) if self._chunks else b""

    def makefile(self, mode, encoding=None):
        return io.StringIO(self._chunks[0].decode(encoding or "utf-8"))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        return False


class FakeFTP(TrackedFTP):
    """
    TrackedFTP whose socket layer is replaced by canned replies.

    Everything above ``putline``/``getresp``/``transfercmd`` is the real
    ftplib and TrackedFTP code. ``faults`` is a shared list of
    ``(verb, exception)`` pairs; the next line sent with that verb raises it
    after having been recorded.
    """

    faults: list = []
    instances: list = []
    remote_files: dict = {}

    def __init__(self, *args, **kwargs):
        self.commands = []
        self.closed = False
        type(self).instances.append(self)
        super().__init__(*args, **kwargs)

    def connect(self, host="", port=0, timeout=-999, source_address=None):
        self.host = host
        self.sock = MagicMock()
        self.file = None
        self.welcome = "220 Fake FTP ready"
        return self.welcome

    def putline(self, line):
        super().putline(line)
        self.commands.append(line)
        faults = type(self).faults
        if faults and line.split(" ", 1)[0].upper() == faults[0][0]:
            raise faults.pop(0)[1]

    def getresp(self):
        verb = (self.last_cmd or "").split(" ", 1)[0].upper()
        return REPLIES.get(verb, "200 OK")

    def transfercmd(self, cmd, rest=None):
        self.putline(cmd)
        verb, _, arg = cmd.partition(" ")
        if verb.upper() == "NLST":
            return FakeDataConnection("\r\n".join(sorted(type(self).remote_files)).encode() + b"\r\n")
        return FakeDataConnection(type(self).remote_files[arg])

    def close(self):
        self.closed = True
        super().close()


@pytest.fixture
def fake_ftp_class():
    """A fresh FakeFTP subclass so faults and instances never leak between tests."""
    return type(
        "FakeFTP",
        (FakeFTP,),
        {"faults": [], "instances": [], "remote_files": {"file.txt": b"hello", "other.txt": b"world"}},
    )


@pytest.fixture
def session_logger():
    """Logger injected into sessions; propagates so caplog sees it."""
    logger = logging.getLogger("tests.harvest")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def fake_session(fake_ftp_class, session_logger, tmp_path):
    """A connected, not yet logged in, fake session rooted in tmp_path."""
    return fake_ftp_class("ftp.example.com", "user", "secret", root_path=tmp_path, logger=session_logger)

# -*- coding: utf-8 -*-
"""FTP session that remembers enough of its own state to be rebuilt."""

import ftplib
import logging
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Tuple, Union

from harvestlib import config

from .ftp import FTPActionError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def join_remote_path(base: PurePosixPath, segment: str) -> PurePosixPath:
    """
    Join a ``cwd`` argument onto an accumulated remote path.

    Behaves like a path join: "a" then "b" gives "a/b", an absolute segment
    replaces the path and ".." steps back up when there is a name to drop.
    """
    path = base
    for part in PurePosixPath(segment).parts:
        if part == "/":
            path = PurePosixPath("/")
        elif part == "..":
            if path.name not in ("", ".."):
                path = path.parent
            elif path != PurePosixPath("/"):
                path = path / ".."
        else:
            path = path / part
    return path


def build_local_path(root_path: PathLike, working_path: PurePosixPath, remotefile: str) -> Path:
    """
    Build the local cache path of a remote file.

    Raises FTPActionError when the result would leave ``root_path``, i.e.
    when the file name is absolute or either part climbs with "..".

    Example:
        build_local_path("/data", PurePosixPath("a/b"), "file.txt")
        -> Path("/data/a/b/file.txt")
    """
    # an absolute working path still lands under root_path
    relative = PurePosixPath(*working_path.parts[1:]) if working_path.is_absolute() else working_path
    name = PurePosixPath(remotefile)
    if name.is_absolute() or ".." in name.parts or ".." in relative.parts:
        raise FTPActionError(f"{relative / name} escapes {root_path}")
    return Path(root_path).joinpath(*relative.parts, *name.parts)


class TrackedFTP(ftplib.FTP):
    """
    ``ftplib.FTP`` that records its connection parameters, the directory
    reached through ``cwd`` and the last line sent to the server.

    The constructor connects when a host is given but never logs in, so the
    caller decides when credentials go on the wire.

    Example:
        >>> ftp = TrackedFTP("ftp.example.com", "user", "pass", root_path="./downloads")
        >>> ftp.login()
        >>> ftp.cwd("pub")
        >>> ftp.cwd("2024")
        >>> ftp.last_dir
        PurePosixPath('pub/2024')
        >>> with ftp.download("index.txt") as fh:
        ...     data = fh.read()
    """

    def __init__(
        self,
        host: str = "",
        user: str = "",
        passwd: str = "",
        acct: str = "",
        timeout: Optional[float] = None,
        root_path: Optional[PathLike] = None,
        logger: Optional[logging.Logger] = None,
    ):
        # Stored so an equivalent session can be created after a failure.
        self.initialize_args: Tuple[str, str, str, str] = (host, user, passwd, acct)
        self.initialize_timeout = timeout
        self.root_path = Path(root_path if root_path is not None else config.get("ROOT_DOWNLOAD_PATH"))
        self.logger = logger or logging.getLogger(__name__)
        self.last_dir = PurePosixPath("")
        self.last_cmd: Optional[str] = None

        if timeout is None:
            super().__init__(host)
        else:
            super().__init__(host, timeout=timeout)

    def login(self, user: Optional[str] = None, passwd: Optional[str] = None, acct: Optional[str] = None) -> str:
        """Log in, defaulting to the credentials given at construction."""
        _, init_user, init_passwd, init_acct = self.initialize_args
        return super().login(
            init_user if user is None else user,
            init_passwd if passwd is None else passwd,
            init_acct if acct is None else acct,
        )

    def cwd(self, dirname: str) -> str:
        """Change directory and remember it so a new session can resume there."""
        resp = super().cwd(dirname)
        self.last_dir = join_remote_path(self.last_dir, dirname)
        return resp

    def putline(self, line: str) -> None:
        # Stored before sending so a failure can report the command in flight.
        self.last_cmd = line
        super().putline(line)

    def local_path(self, remotefile: str) -> Path:
        """Local cache path of ``remotefile`` in the current directory."""
        return build_local_path(self.root_path, self.last_dir, remotefile)

    def download(self, remotefile: str) -> BinaryIO:
        """
        Download a remote file from the current directory.

        In development mode an already downloaded file is returned as is,
        without touching the network.

        Args:
            remotefile: Name of the remote file

        Returns:
            The local copy, opened for binary reading. The caller closes it.
        """
        self.logger.info(f"get {remotefile}")

        path = self.local_path(remotefile)

        if config.is_development() and path.exists():
            return open(path, "rb")

        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, "wb") as local_file:
                self.retrbinary(f"RETR {remotefile}", local_file.write)
        except BaseException:
            # never leave a truncated file where a complete one is expected
            path.unlink(missing_ok=True)
            raise
        return open(path, "rb")

# -*- coding: utf-8 -*-
"""
FTP session holder that survives misbehaving servers.

Some servers intermittently advertise a wrong passive-mode address, stall
on reads or drop the control connection. Reusing the connection after that
rarely works, so on a transient fault the whole session is rebuilt: the
broken one is closed, a new one is connected with the same credentials,
logged in and sent back to the directory the old one had reached, and the
failed command is then issued again.
"""

import ftplib
import logging
import time
from pathlib import Path, PurePosixPath
from typing import Any, BinaryIO, Callable, List, Optional, Tuple, Type, Union

from harvestlib import config

from .ftp import TRANSIENT_ERRORS, SessionRecoveryError, mask_command, retry_call
from .session import PathLike, TrackedFTP

Operation = Union[str, Callable[..., Any]]


def _list_mlsd(ftp: TrackedFTP, path: str, facts: List[str]) -> List[Tuple[str, dict]]:
    # mlsd() is a generator; consume it inside the retried call
    return list(ftp.mlsd(path, facts))


class ResilientFTP:
    """
    Owns the active :class:`TrackedFTP` and retries operations against it.

    Callers only talk to the holder. Each operation is forwarded to the
    active session; when it raises one of ``transient_errors`` the session is
    rebuilt and the operation restarted from the beginning, up to
    ``max_attempts`` calls in total. Any other exception propagates untouched.

    Example:
        >>> with ResilientFTP.connect("ftp.example.com", "user", "pass", root_path="./downloads") as ftp:
        ...     ftp.login()
        ...     ftp.cwd("pub")
        ...     ftp.cwd("2024")
        ...     with ftp.download("index.txt") as fh:
        ...         data = fh.read()
    """

    def __init__(
        self,
        session: TrackedFTP,
        transient_errors: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        recovery_max_attempts: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            session: The initial session, already connected
            transient_errors: Exception classes that trigger a session rebuild
            max_attempts: Calls per operation, first one included
            base_delay: First backoff delay in seconds
            max_delay: Cap for the backoff delay
            recovery_max_attempts: Tries at rebuilding a session during one recovery
            logger: Logger for failures and recovery steps, defaults to the session's
            sleep: Function used to wait between attempts
        """
        self.session = session
        self.transient_errors = tuple(transient_errors)
        self.max_attempts = max_attempts if max_attempts is not None else config.get("RETRY_MAX_ATTEMPTS")
        self.base_delay = base_delay if base_delay is not None else config.get("RETRY_BASE_DELAY")
        self.max_delay = max_delay if max_delay is not None else config.get("RETRY_MAX_DELAY")
        self.recovery_max_attempts = (
            recovery_max_attempts if recovery_max_attempts is not None else config.get("RECOVERY_MAX_ATTEMPTS")
        )
        self.logger = logger or session.logger
        self._sleep = sleep

    @classmethod
    def connect(
        cls,
        host: str,
        user: str = "",
        passwd: str = "",
        acct: str = "",
        timeout: Optional[float] = None,
        root_path: Optional[PathLike] = None,
        logger: Optional[logging.Logger] = None,
        **kwargs: Any,
    ) -> "ResilientFTP":
        """Open a :class:`TrackedFTP` to ``host`` and wrap it. Does not log in."""
        session = TrackedFTP(host, user, passwd, acct, timeout=timeout, root_path=root_path, logger=logger)
        session.set_pasv(True)
        return cls(session, logger=logger, **kwargs)

    # ----------------------
    # Context Manager
    # ----------------------
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.quit()

    # ----------------------
    # Session state
    # ----------------------
    @property
    def last_dir(self) -> PurePosixPath:
        return self.session.last_dir

    @property
    def last_cmd(self) -> Optional[str]:
        return self.session.last_cmd

    @property
    def root_path(self) -> Path:
        return self.session.root_path

    # ----------------------
    # Forwarded operations
    # ----------------------
    def execute(self, operation: Operation, *args: Any, **kwargs: Any) -> Any:
        """
        Run ``operation`` against the active session, rebuilding it on transient faults.

        ``operation`` is either the name of a session method or a callable
        taking the session as first argument. It is resolved against
        ``self.session`` on every attempt so a retry runs against the session
        installed by the recovery.
        """
        if callable(operation):
            name = getattr(operation, "__name__", repr(operation))
        else:
            name = operation

        def attempt():
            if callable(operation):
                return operation(self.session, *args, **kwargs)
            return getattr(self.session, operation)(*args, **kwargs)

        try:
            return retry_call(
                attempt,
                self.transient_errors,
                on_retry=self._recover,
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                sleep=self._sleep,
            )
        except Exception as e:
            self.logger.error(f"{name} failed: {e!r} on {mask_command(self.session.last_cmd)}")
            raise

    def login(self, user: Optional[str] = None, passwd: Optional[str] = None, acct: Optional[str] = None) -> str:
        return self.execute("login", user, passwd, acct)

    def cwd(self, dirname: str) -> str:
        return self.execute("cwd", dirname)

    def pwd(self) -> str:
        return self.execute("pwd")

    def nlst(self, *args: str) -> List[str]:
        return self.execute("nlst", *args)

    def mlsd(self, path: str = "", facts: Optional[List[str]] = None) -> List[Tuple[str, dict]]:
        return self.execute(_list_mlsd, path, facts or [])

    def size(self, filename: str) -> Optional[int]:
        return self.execute("size", filename)

    def sendcmd(self, cmd: str) -> str:
        return self.execute("sendcmd", cmd)

    def voidcmd(self, cmd: str) -> str:
        return self.execute("voidcmd", cmd)

    def retrlines(self, cmd: str, callback: Optional[Callable[[str], Any]] = None) -> str:
        return self.execute("retrlines", cmd, callback)

    def retrbinary(self, cmd: str, callback: Callable[[bytes], Any], blocksize: int = 8192) -> str:
        """Note that a retried transfer feeds ``callback`` again from the first byte."""
        return self.execute("retrbinary", cmd, callback, blocksize)

    def download(self, remotefile: str) -> BinaryIO:
        return self.execute("download", remotefile)

    def quit(self) -> None:
        """End the logical session, closing the socket if QUIT itself fails."""
        if self.session.sock is None:
            # already closed, e.g. after a recovery that could not finish
            return
        try:
            self.session.quit()
        except ftplib.all_errors:
            self.session.close()
        self.logger.info("FTP connection closed")

    def close(self) -> None:
        self.session.close()

    # ----------------------
    # Recovery
    # ----------------------
    def _recover(self, exc: BaseException, attempt: int, delay: float) -> None:
        """Replace the broken session by an equivalent one. Runs before each retry."""
        broken = self.session
        self.logger.error(f"{exc!r} on {mask_command(broken.last_cmd)}")
        broken.close()

        last_error: Optional[BaseException] = None
        for recovery_attempt in range(1, self.recovery_max_attempts + 1):
            fresh, last_error = self._rebuild(broken)
            if fresh is not None:
                self.session = fresh
                return
            self.logger.error(
                f"Session rebuild {recovery_attempt}/{self.recovery_max_attempts} failed: {last_error!r}"
            )

        host = broken.initialize_args[0]
        raise SessionRecoveryError(
            f"Could not rebuild FTP session to '{host}' after {self.recovery_max_attempts} attempts: {last_error!r}"
        ) from last_error

    def _rebuild(self, broken: TrackedFTP) -> Tuple[Optional[TrackedFTP], Optional[BaseException]]:
        """
        Build a session equivalent to ``broken``: same parameters, logged in,
        in the same directory.

        Returns ``(session, None)`` on success and ``(None, error)`` when a
        transient fault interrupted it. Other faults propagate.
        """
        fresh = None
        try:
            fresh = type(broken)(
                *broken.initialize_args,
                timeout=broken.initialize_timeout,
                root_path=broken.root_path,
                logger=broken.logger,
            )
            fresh.set_pasv(True)

            self.logger.info("login")
            fresh.login()

            self.logger.info(f"chdir {broken.last_dir}")
            fresh.cwd(str(broken.last_dir))
            return fresh, None
        except self.transient_errors as e:
            if fresh is not None:
                fresh.close()
            return None, e
        except Exception:
            if fresh is not None:
                fresh.close()
            raise

# -*- coding: utf-8 -*-
"""Base class for harvesting jobs."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from harvestlib import config
from harvestlib.io.ftp import ResilientFTP
from harvestlib.io.http import build_client
from harvestlib.utils.log_utils import LogDev, get_logger


class Processor:
    """
    Shared plumbing of a harvesting job: a ``"harvest"`` logger, an HTTP
    client and the output directory, created on construction.

    Passing ``cache_dir`` gives the HTTP client an on-disk response cache
    whose entries expire after ``expires_in`` seconds.

    Example:
        >>> class MyJob(Processor):
        ...     def run(self):
        ...         html = self.get("https://example.com/list")
        ...         self.assert_("empty listing", bool(html))
        ...         with self.ftp() as ftp:
        ...             ftp.login()
        ...             ftp.cwd("pub")
        ...             ftp.download("data.csv").close()
        >>> MyJob("./output").run()
    """

    def __init__(
        self,
        output_dir: Union[str, Path, None] = None,
        level: Union[str, int, None] = None,
        logdev: LogDev = None,
        client: Optional[httpx.Client] = None,
        cache_dir: Union[str, Path, None] = None,
        expires_in: Optional[float] = None,
    ):
        level = level if level is not None else config.get("LOG_LEVEL")
        self.logger = get_logger("harvest", level, logdev)
        if client is None:
            client = build_client(level, logdev, cache_dir=cache_dir, expires_in=expires_in)
        self.client = client

        self.output_dir = Path(output_dir if output_dir is not None else config.get("ROOT_OUTPUT_PATH"))
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def debug(self, msg: str, *args: Any) -> None:
        self.logger.debug(msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        self.logger.info(msg, *args)

    def warning(self, msg: str, *args: Any) -> None:
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self.logger.error(msg, *args)

    def critical(self, msg: str, *args: Any) -> None:
        self.logger.critical(msg, *args)

    def get(self, url: str, **kwargs: Any) -> str:
        """Fetch ``url`` and return the response body as text."""
        return self.client.get(url, **kwargs).text

    def assert_(self, message: str, condition: bool) -> bool:
        """Log ``message`` as an error unless ``condition`` holds. Does not raise."""
        if not condition:
            self.error(message)
        return condition

    def now(self) -> str:
        """Return the present UTC time in ISO 8601 format."""
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def ftp(
        self,
        host: Optional[str] = None,
        user: Optional[str] = None,
        passwd: Optional[str] = None,
        acct: Optional[str] = None,
        root_path: Union[str, Path, None] = None,
        **kwargs: Any,
    ) -> ResilientFTP:
        """
        Connect a :class:`ResilientFTP` that logs through this job's logger.

        Missing connection parameters come from the FTP_* settings and
        downloads land under ``root_path`` (ROOT_DOWNLOAD_PATH by default).
        """
        return ResilientFTP.connect(
            host if host is not None else config.get("FTP_HOST"),
            user if user is not None else config.get("FTP_USER"),
            passwd if passwd is not None else config.get("FTP_PASS"),
            acct if acct is not None else config.get("FTP_ACCT"),
            timeout=kwargs.pop("timeout", config.get("FTP_TIMEOUT")),
            root_path=root_path,
            logger=self.logger,
            **kwargs,
        )

# -*- coding: utf-8 -*-
"""HTTP client that logs every request and response of a harvesting job."""

from pathlib import Path
from typing import Optional, Union

import hishel
import httpx

from harvestlib import config
from harvestlib.utils.log_utils import LogDev, get_logger


def build_client(
    level: Union[str, int] = "INFO",
    logdev: LogDev = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.BaseTransport] = None,
    cache_dir: Union[str, Path, None] = None,
    expires_in: Optional[float] = None,
) -> httpx.Client:
    """
    Build the ``httpx.Client`` used to fetch web pages.

    Requests and response statuses are logged at INFO, headers at DEBUG,
    through an ``"http"`` logger writing to ``logdev``. Form bodies are
    sent url-encoded by passing ``data=`` as usual with httpx.

    When ``cache_dir`` is given, responses are stored on disk under it and
    served from there until they are ``expires_in`` seconds old, whatever
    cache headers the server sends.

    Args:
        level: Level of the ``"http"`` logger
        logdev: File path or stream for the logger, stderr when None
        timeout: Request timeout in seconds, defaults to HTTP_TIMEOUT
        transport: Optional transport, e.g. ``httpx.MockTransport`` in tests
        cache_dir: Directory of the response cache, no caching when None
        expires_in: Cache lifetime in seconds, defaults to HTTP_CACHE_EXPIRES_IN
    """
    logger = get_logger("http", level, logdev)

    def log_request(request: httpx.Request) -> None:
        logger.info(f"{request.method} {request.url}")
        logger.debug(f"request headers: {dict(request.headers)}")

    def log_response(response: httpx.Response) -> None:
        logger.info(f"Status {response.status_code} {response.request.url}")
        logger.debug(f"response headers: {dict(response.headers)}")

    if cache_dir is not None:
        ttl = expires_in if expires_in is not None else config.get("HTTP_CACHE_EXPIRES_IN")
        logger.debug(f"caching responses in {cache_dir} for {ttl}s")
        transport = hishel.CacheTransport(
            transport=transport if transport is not None else httpx.HTTPTransport(),
            storage=hishel.FileStorage(base_path=Path(cache_dir), ttl=ttl),
            controller=hishel.Controller(force_cache=True),
        )

    return httpx.Client(
        timeout=timeout if timeout is not None else config.get("HTTP_TIMEOUT"),
        event_hooks={"request": [log_request], "response": [log_response]},
        transport=transport,
    )

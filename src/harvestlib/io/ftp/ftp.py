# -*- coding: utf-8 -*-
"""
Low-level helpers shared by the FTP session classes.

Exceptions, the default transient-fault classification and the retry
policy used by :class:`~harvestlib.io.ftp.resilient.ResilientFTP`.
"""

import logging
import random
import socket
import time
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)

# Faults that a fresh connection is expected to cure: connect/read timeouts
# and a control connection closed under our feet.
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (TimeoutError, socket.timeout, EOFError)


class FTPActionError(Exception):
    """Base class for errors raised by harvestlib around an FTP session."""

    pass


class SessionRecoveryError(FTPActionError):
    """Raised when a broken session could not be rebuilt."""

    pass


SECRET_COMMANDS = ("PASS ", "ACCT ")


def mask_command(line: Optional[str]) -> Optional[str]:
    """Hide the argument of a ``PASS`` or ``ACCT`` line so it can be logged."""
    if line and line[:5].upper() in SECRET_COMMANDS:
        return line[:5] + "*" * len(line[5:])
    return line


def retry_call(
    func: Callable[[], Any],
    exceptions: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
    on_retry: Optional[Callable[[BaseException, int, float], None]] = None,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """
    Call ``func`` and retry it with exponential backoff on ``exceptions``.

    ``on_retry`` runs before every retry, after the backoff delay has been
    computed and before sleeping. Exceptions not listed in ``exceptions``
    propagate at once. Once ``max_attempts`` calls have failed the last
    exception is re-raised unchanged.

    :param func: callable with no args (bind arguments via lambda or partial)
    :param exceptions: exception classes that trigger a retry
    :param on_retry: callback receiving (exception, attempt, delay)
    :param max_attempts: total number of attempts before raising
    :param base_delay: first delay in seconds
    :param max_delay: maximum cap for delay
    :param sleep: function used to wait between attempts
    """
    attempt = 0
    while True:
        try:
            return func()
        except exceptions as e:
            attempt += 1
            if attempt >= max_attempts:
                raise

            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            # add jitter so multiple jobs don't hammer the server in sync
            delay += random.uniform(0, delay / 4)
            logger.warning(f"Attempt {attempt}/{max_attempts} failed: {e!r}. Retrying in {delay:.1f} seconds...")
            if on_retry is not None:
                on_retry(e, attempt, delay)
            sleep(delay)

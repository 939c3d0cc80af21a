"""
FTP module for long-running harvesting sessions.

``TrackedFTP`` is an ``ftplib.FTP`` that remembers how to rebuild itself and
``ResilientFTP`` rebuilds it transparently when the server misbehaves.
"""

from .ftp import TRANSIENT_ERRORS, FTPActionError, SessionRecoveryError, mask_command, retry_call
from .resilient import ResilientFTP
from .session import TrackedFTP, build_local_path, join_remote_path

__all__ = [
    # Sessions
    "ResilientFTP",
    "TrackedFTP",
    # Helpers
    "build_local_path",
    "join_remote_path",
    "mask_command",
    "retry_call",
    "TRANSIENT_ERRORS",
    # Exceptions
    "FTPActionError",
    "SessionRecoveryError",
]

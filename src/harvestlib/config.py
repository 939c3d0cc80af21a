"""Simple configuration loader for harvestlib.

Load order:
1. File pointed to by HARVESTLIB_CONFIG env var (if set).
2. Environment variables named after individual keys.
3. Built-in defaults.

Config file format: JSON dictionary, e.g. {"FTP_HOST": "ftp.example.com", "RETRY_MAX_ATTEMPTS": 5}
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

# workspace root/project path, two levels up from the package.
root_project = os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", ".."))
root_data = os.path.join(root_project, "data")

ENV_VAR = "HARVESTLIB_ENV"
CONFIG_VAR = "HARVESTLIB_CONFIG"

DEFAULTS: Dict[str, Any] = {
    "FTP_HOST": "ftp.example.com",
    "FTP_USER": "anonymous",
    "FTP_PASS": "",
    "FTP_ACCT": "",
    "FTP_TIMEOUT": 60.0,
    "ROOT_OUTPUT_PATH": os.path.join(root_data, "output"),
    "ROOT_DOWNLOAD_PATH": os.path.join(root_data, "downloads"),
    "LOG_LEVEL": "INFO",
    "HTTP_TIMEOUT": 30.0,
    "HTTP_CACHE_EXPIRES_IN": 3600.0,
    "RETRY_MAX_ATTEMPTS": 3,
    "RETRY_BASE_DELAY": 1.0,
    "RETRY_MAX_DELAY": 60.0,
    "RECOVERY_MAX_ATTEMPTS": 2,
}

_config: Dict[str, Any] = DEFAULTS.copy()


def _try_load_file(path: str) -> bool:
    try:
        with open(path, "r", encoding="utf8") as fh:
            data = json.load(fh)
        if isinstance(data, dict):
            _config.update(data)
            return True
    except FileNotFoundError:
        return False
    except (OSError, ValueError):
        # unreadable or malformed file, keep defaults
        return False
    return False


def _auto_load() -> None:
    # 1) explicit env var
    env_path = os.environ.get(CONFIG_VAR)
    if env_path and _try_load_file(env_path):
        return

    # Override with environment variables if they exist
    for key in _config.keys():
        env_val = os.environ.get(key)
        if env_val is not None:
            # Try to preserve type from defaults
            default_val = DEFAULTS.get(key)
            if isinstance(default_val, bool):
                _config[key] = env_val.lower() in ("true", "1", "yes")
            elif isinstance(default_val, (int, float)):
                try:
                    _config[key] = type(default_val)(env_val)
                except ValueError:
                    pass
            else:
                _config[key] = env_val


_auto_load()


def get(key: str, default: Any = None) -> Any:
    return _config.get(key, default)


def is_development() -> bool:
    """Return True when the job runs in development mode.

    Read from the environment on every call so a running job can be
    switched by its harness without reloading the module.
    """
    return os.environ.get(ENV_VAR) == "development"


# convenience attributes
FTP_HOST: str = get("FTP_HOST")
FTP_USER: str = get("FTP_USER")
FTP_PASS: str = get("FTP_PASS")
FTP_ACCT: str = get("FTP_ACCT")
FTP_TIMEOUT: float = get("FTP_TIMEOUT")
ROOT_OUTPUT_PATH: str = get("ROOT_OUTPUT_PATH")
ROOT_DOWNLOAD_PATH: str = get("ROOT_DOWNLOAD_PATH")
LOG_LEVEL: str = get("LOG_LEVEL")
HTTP_TIMEOUT: float = get("HTTP_TIMEOUT")
HTTP_CACHE_EXPIRES_IN: float = get("HTTP_CACHE_EXPIRES_IN")
RETRY_MAX_ATTEMPTS: int = get("RETRY_MAX_ATTEMPTS")
RETRY_BASE_DELAY: float = get("RETRY_BASE_DELAY")
RETRY_MAX_DELAY: float = get("RETRY_MAX_DELAY")
RECOVERY_MAX_ATTEMPTS: int = get("RECOVERY_MAX_ATTEMPTS")


def reload(path: Optional[str] = None) -> None:
    """Force reload configuration. If path is provided, try it first."""
    global _config
    _config = DEFAULTS.copy()
    if path:
        _try_load_file(path)
    _auto_load()

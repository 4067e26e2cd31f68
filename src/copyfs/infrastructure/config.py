"""Configuration constants and .env overrides."""

from __future__ import annotations

import os
from pathlib import Path


def read_env_file(keys: list[str]) -> dict[str, str]:
    """Parse a .env file in the working directory and return values for requested keys.

    Values are returned, not exported into os.environ.
    """
    env_file = Path.cwd() / ".env"
    try:
        content = env_file.read_text()
    except OSError:
        return {}

    result: dict[str, str] = {}
    wanted = set(keys)

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, value = trimmed.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key not in wanted:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        if value:
            result[key] = value

    return result


def _int_setting(raw: str | None, default: int) -> int:
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


_env_config = read_env_file(["COPYFS_LOG_LEVEL", "COPYFS_BUFFER_SIZE"])

LOG_LEVEL: str = (os.environ.get("COPYFS_LOG_LEVEL") or _env_config.get("COPYFS_LOG_LEVEL", "INFO")).upper()

COPY_BUFFER_SIZE: int = max(
    1,
    _int_setting(os.environ.get("COPYFS_BUFFER_SIZE") or _env_config.get("COPYFS_BUFFER_SIZE"), 64 * 1024),
)

# Mode for destination directories while they are being populated.
STAGING_DIR_MODE: int = 0o700
PERM_MASK: int = 0o777

"""Environment configuration and ``.vale.ini`` discovery."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

_LOG = logging.getLogger(__name__)

CONFIG_PATH_ENV = "VALE_CONFIG_PATH"
COMMAND_TIMEOUT_ENV = "VALE_MCP_COMMAND_TIMEOUT"
VALE_BINARY_ENV = "VALE_MCP_VALE_BINARY"
LOG_LEVEL_ENV = "VALE_MCP_LOG_LEVEL"

CONFIG_FILENAME = ".vale.ini"
"""Conventional Vale configuration filename looked up in the working directory."""

DEFAULT_VALE_BINARY = "vale"
DEFAULT_LOG_LEVEL = "INFO"


def _env_str(name: str) -> str | None:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return None
    return raw.strip()


def _env_seconds(name: str) -> float | None:
    """Return a positive number of seconds, or None when unset or invalid."""

    raw = _env_str(name)
    if raw is None:
        return None
    try:
        parsed = float(raw)
    except ValueError:
        return None
    if parsed <= 0:
        return None
    return parsed


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide settings read once at startup."""

    config_path: str | None = None
    command_timeout: float | None = None
    vale_binary: str = DEFAULT_VALE_BINARY
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create a config using the current environment."""

        return cls(
            config_path=_env_str(CONFIG_PATH_ENV),
            command_timeout=_env_seconds(COMMAND_TIMEOUT_ENV),
            vale_binary=_env_str(VALE_BINARY_ENV) or DEFAULT_VALE_BINARY,
            log_level=(_env_str(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper(),
        )


def is_readable_file(path: str | Path) -> bool:
    """Probe for a readable regular file without raising."""

    try:
        candidate = Path(path)
        return candidate.is_file() and os.access(candidate, os.R_OK)
    except OSError:
        return False


def resolve_path(path: str | Path, cwd: str | Path | None = None) -> Path:
    """Resolve ``path`` against ``cwd`` (default: the process directory)."""

    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    base = Path(cwd) if cwd is not None else Path.cwd()
    return (base / candidate).resolve()


def find_config_in_dir(directory: str | Path | None = None) -> Path | None:
    """Return ``.vale.ini`` inside ``directory`` if it is readable."""

    base = Path(directory) if directory is not None else Path.cwd()
    candidate = base / CONFIG_FILENAME
    if is_readable_file(candidate):
        return candidate
    return None


def resolve_vale_config(
    server_config: ServerConfig,
    explicit: str | None = None,
    cwd: str | Path | None = None,
) -> str | None:
    """Pick the config file passed to Vale via ``--config``.

    Priority: an explicit per-call path, then ``VALE_CONFIG_PATH`` when it
    points at a readable file, then ``.vale.ini`` in the working directory.
    ``None`` lets Vale search upward from the linted file's directory.
    """

    if explicit:
        return str(resolve_path(explicit, cwd))

    if server_config.config_path:
        resolved = resolve_path(server_config.config_path, cwd)
        if is_readable_file(resolved):
            _LOG.info("Using Vale config from %s: %s", CONFIG_PATH_ENV, resolved)
            return str(resolved)
        _LOG.warning(
            "%s points to a missing or unreadable file: %s",
            CONFIG_PATH_ENV,
            server_config.config_path,
        )

    found = find_config_in_dir(cwd)
    if found is not None:
        _LOG.info("Using %s from working directory: %s", CONFIG_FILENAME, found)
        return str(found)

    return None

"""Failure taxonomy for Vale invocations."""

from __future__ import annotations

import re

from ..mcp import reason_codes

STYLES_ERROR_PATTERN = re.compile(r"E100|does not exist|Runtime error", re.IGNORECASE)
"""Heuristic signature of Vale failing because its styles were never synced."""


class ValeError(Exception):
    """Base class for every failure surfaced by the Vale services."""

    reason = reason_codes.INTERNAL_ERROR


class ValeNotInstalledError(ValeError):
    """Raised when the Vale binary cannot be spawned."""

    reason = reason_codes.VALE_NOT_INSTALLED


class ValeFileNotFoundError(ValeError):
    """Raised when the file to lint is missing or unreadable."""

    reason = reason_codes.FILE_NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found or not readable: {path}")
        self.path = path


class ValeExecutionError(ValeError):
    """Raised when Vale produced no usable output."""

    reason = reason_codes.VALE_EXECUTION_FAILED


class MissingStylesError(ValeExecutionError):
    """Execution failure caused by an unsynced styles directory."""

    reason = reason_codes.MISSING_STYLES


class MalformedValeOutputError(ValeError, ValueError):
    """Raised when Vale's JSON output cannot be decoded."""

    reason = reason_codes.MALFORMED_VALE_OUTPUT

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to parse Vale JSON output: {detail}")
        self.detail = detail


def is_styles_error(message: str) -> bool:
    """Return True when ``message`` looks like a missing styles failure."""

    return bool(STYLES_ERROR_PATTERN.search(message))


def classify_failure(exc: BaseException) -> BaseException:
    """Promote recognizable styles failures to :class:`MissingStylesError`."""

    if isinstance(exc, MissingStylesError):
        return exc
    if is_styles_error(str(exc)):
        promoted = MissingStylesError(str(exc))
        promoted.__cause__ = exc
        return promoted
    return exc

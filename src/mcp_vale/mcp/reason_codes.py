"""Reason codes attached to error payloads returned by the Vale tools."""

from __future__ import annotations

INVALID_INPUT = "invalid_input"
"""A required tool argument was missing or empty."""

VALE_NOT_INSTALLED = "vale_not_installed"
"""The Vale binary is not installed or not on PATH."""

FILE_NOT_FOUND = "file_not_found"
"""The file to lint is missing or unreadable."""

VALE_EXECUTION_FAILED = "vale_execution_failed"
"""Vale exited without writing anything to stdout."""

MISSING_STYLES = "missing_styles"
"""Vale's styles directory is missing; ``vale_sync`` should be run."""

MALFORMED_VALE_OUTPUT = "malformed_vale_output"
"""Vale's output was not a JSON document."""

UNKNOWN_TOOL = "unknown_tool"
"""The client asked for a tool this server does not expose."""

RESPONSE_VALIDATION_FAILED = "response_validation_failed"
"""The service produced output that violated the public response schema."""

INTERNAL_ERROR = "internal_error"
"""Any other failure caught at the dispatch boundary."""

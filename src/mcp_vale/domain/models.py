"""Core entities without I/O for the Vale MCP server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SEVERITIES = ("error", "warning", "suggestion")
"""Vale's documented severities, most important first."""


@dataclass(frozen=True)
class Issue:
    """One alert Vale raised against a checked document."""

    line: int
    span: tuple[int, int]
    check: str
    message: str
    severity: str
    link: str | None = None
    match: str | None = None

    def to_mapping(self) -> dict[str, Any]:
        mapping: dict[str, Any] = {
            "line": self.line,
            "span": list(self.span),
            "check": self.check,
            "message": self.message,
            "severity": self.severity,
        }
        if self.link:
            mapping["link"] = self.link
        if self.match:
            mapping["match"] = self.match
        return mapping


@dataclass(frozen=True)
class Summary:
    """Counts derived from a set of issues."""

    total: int = 0
    errors: int = 0
    warnings: int = 0
    suggestions: int = 0

    def to_mapping(self) -> dict[str, int]:
        return {
            "total": self.total,
            "errors": self.errors,
            "warnings": self.warnings,
            "suggestions": self.suggestions,
        }


@dataclass(frozen=True)
class CheckResult:
    """Outcome of linting a single file."""

    file: str
    issues: tuple[Issue, ...]
    summary: Summary
    formatted: str

    def structured_payload(self) -> dict[str, Any]:
        """Return the machine-readable view sent next to the report text."""

        return {
            "file": self.file,
            "issues": [issue.to_mapping() for issue in self.issues],
            "summary": self.summary.to_mapping(),
        }


@dataclass(frozen=True)
class InstallationStatus:
    """Whether the Vale binary answered its version query."""

    installed: bool
    version: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a ``vale sync`` run."""

    success: bool
    message: str
    output: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ToolResponse:
    """Text returned to the MCP client plus an optional structured payload."""

    text: str
    structured: dict[str, Any] | None = field(default=None)

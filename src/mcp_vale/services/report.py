"""Markdown rendering of Vale results."""

from __future__ import annotations

from typing import Sequence

from ..domain.models import SEVERITIES, Issue, Summary

NO_ISSUES_MESSAGE = (
    "✅ **No style issues found!**\n\n"
    "The text looks good according to Vale style rules."
)

SEVERITY_EMOJI = {
    "error": "🔴",
    "warning": "🟡",
    "suggestion": "💡",
}


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def summary_line(summary: Summary) -> str:
    """Return the ``**Summary:**`` line without a trailing newline."""

    line = f"**Summary:** {_plural(summary.total, 'issue')} found"
    parts = [
        _plural(count, noun)
        for count, noun in (
            (summary.errors, "error"),
            (summary.warnings, "warning"),
            (summary.suggestions, "suggestion"),
        )
        if count > 0
    ]
    if parts:
        line += f" ({', '.join(parts)})"
    return line


def _format_issue(issue: Issue) -> str:
    lines = [
        f"{SEVERITY_EMOJI[issue.severity]} **Line {issue.line}** "
        f"({issue.severity.upper()}): {issue.message}"
    ]
    if issue.match:
        lines.append(f'   ↳ Found: "{issue.match}"')
    lines.append(f"   ↳ Rule: `{issue.check}`")
    if issue.link:
        lines.append(f"   ↳ [More info]({issue.link})")
    return "\n".join(lines) + "\n\n"


def format_results(
    issues: Sequence[Issue], summary: Summary, context: str | None = None
) -> str:
    """Render issues grouped by severity as a markdown report."""

    if not issues:
        return NO_ISSUES_MESSAGE

    output = "## Vale Linting Results\n\n"
    if context:
        output += f"**Context:** {context}\n\n"
    output += summary_line(summary) + "\n\n"
    output += "### Issues\n\n"

    for severity in SEVERITIES:
        for issue in issues:
            if issue.severity == severity:
                output += _format_issue(issue)

    return output

"""Turn Vale's ``--output=JSON`` document into normalized issues."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping

from ..domain.models import Issue, Summary
from .errors import MalformedValeOutputError

_FENCE_OPEN = re.compile(r"^```json\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")

_SEVERITY_FIELDS = {
    "error": "errors",
    "warning": "warnings",
    "suggestion": "suggestions",
}


def strip_code_fence(output: str) -> str:
    """Remove a single markdown ```json fence around ``output``."""

    stripped = _FENCE_OPEN.sub("", output.strip(), count=1)
    stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


def parse_vale_output(output: str) -> dict[str, Any]:
    """Decode Vale's output into a mapping of file path to raw alerts."""

    cleaned = strip_code_fence(output)
    if not cleaned:
        return {}
    try:
        document = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedValeOutputError(str(exc)) from exc
    if not isinstance(document, dict):
        raise MalformedValeOutputError(
            f"expected a JSON object keyed by file, got {type(document).__name__}"
        )
    return document


def _span(raw: Any) -> tuple[int, int]:
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return int(raw[0]), int(raw[1])
    return 0, 0


def _optional_text(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


def _to_issue(alert: Mapping[str, Any]) -> Issue:
    return Issue(
        line=int(alert.get("Line", 0)),
        span=_span(alert.get("Span")),
        check=str(alert.get("Check", "")),
        message=str(alert.get("Message", "")),
        severity=str(alert.get("Severity", "")),
        link=_optional_text(alert.get("Link")),
        match=_optional_text(alert.get("Match")),
    )


def normalize_issues(raw: Mapping[str, Any]) -> list[Issue]:
    """Flatten every file's alerts, keeping Vale's order."""

    issues: list[Issue] = []
    for alerts in raw.values():
        if not isinstance(alerts, list):
            continue
        try:
            issues.extend(
                _to_issue(alert) for alert in alerts if isinstance(alert, Mapping)
            )
        except (TypeError, ValueError) as exc:
            raise MalformedValeOutputError(f"invalid alert field: {exc}") from exc
    return issues


def summarize(issues: Iterable[Issue]) -> Summary:
    """Count issues by severity; unknown severities only count toward total."""

    counts = {"total": 0, "errors": 0, "warnings": 0, "suggestions": 0}
    for issue in issues:
        counts["total"] += 1
        bucket = _SEVERITY_FIELDS.get(issue.severity)
        if bucket is not None:
            counts[bucket] += 1
    return Summary(**counts)

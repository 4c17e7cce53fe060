"""Static Vale installation guidance keyed by host platform."""

from __future__ import annotations

import sys
from typing import Any

DOCUMENTATION_URL = "https://vale.sh/docs/vale-cli/installation/"
RELEASES_URL = "https://github.com/errata-ai/vale/releases"

_DOWNLOAD = {
    "name": "Download binary",
    "command": "Download from GitHub releases",
    "url": RELEASES_URL,
}

_METHODS: dict[str, list[dict[str, str]]] = {
    "darwin": [
        {"name": "Homebrew (recommended)", "command": "brew install vale"},
        _DOWNLOAD,
    ],
    "linux": [
        {"name": "Snap", "command": "sudo snap install vale"},
        {
            "name": "Download binary",
            "command": "Download from GitHub releases and add to PATH",
            "url": RELEASES_URL,
        },
    ],
    "win32": [
        {"name": "Chocolatey", "command": "choco install vale"},
        {"name": "Scoop", "command": "scoop install vale"},
        _DOWNLOAD,
    ],
}


def host_platform() -> str:
    """Return the platform key used for the lookup (``sys.platform``)."""

    return sys.platform


def installation_instructions(platform: str | None = None) -> dict[str, Any]:
    """Return install methods for ``platform`` (defaults to the host)."""

    key = platform or host_platform()
    methods = _METHODS.get(key, [_DOWNLOAD])
    return {
        "platform": key,
        "methods": [dict(method) for method in methods],
        "documentation": DOCUMENTATION_URL,
    }


def installation_lines(platform: str | None = None) -> list[str]:
    """Flatten the instructions into log-friendly lines."""

    instructions = installation_instructions(platform)
    lines = []
    for method in instructions["methods"]:
        lines.append(f"  {method['name']}: {method['command']}")
        if method.get("url"):
            lines.append(f"    {method['url']}")
    lines.append(f"Documentation: {instructions['documentation']}")
    return lines

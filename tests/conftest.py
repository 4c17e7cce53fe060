"""Shared fakes for the Vale service and server tests."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Mapping, Sequence

import pytest

from mcp_vale.services.command_runner import CommandOutput
from mcp_vale.services.errors import ValeNotInstalledError

VALE_VERSION = "vale version 3.7.1"

SAMPLE_OUTPUT = (
    '{"a.md":[{"Line":3,"Span":[1,5],"Check":"Vale.Spelling",'
    '"Message":"Typo","Severity":"error"}]}'
)


class FakeCommandRunner:
    """Scripted CommandRunner keyed by the first Vale argument."""

    def __init__(
        self,
        responses: Mapping[str, CommandOutput | BaseException] | None = None,
        *,
        installed: bool = True,
    ) -> None:
        self.responses = dict(responses or {})
        self.installed = installed
        self.calls: list[tuple[list[str], str | None]] = []

    async def run(
        self, argv: Sequence[str], cwd: str | Path | None = None
    ) -> CommandOutput:
        self.calls.append((list(argv), str(cwd) if cwd is not None else None))
        if not self.installed:
            raise ValeNotInstalledError("vale not found in PATH")
        key = argv[1]
        response = self.responses.get(key)
        if isinstance(response, BaseException):
            raise response
        if response is None:
            if key == "--version":
                return CommandOutput(stdout=f"{VALE_VERSION}\n", stderr="", exit_code=0)
            return CommandOutput(stdout="", stderr="", exit_code=0)
        return response

    def calls_for(self, key: str) -> list[tuple[list[str], str | None]]:
        return [call for call in self.calls if call[0][1] == key]


FAKE_VALE_SCRIPT = """#!/bin/sh
case "$1" in
  --version)
    echo "vale version 3.7.1"
    ;;
  sync)
    echo "Downloading packages"
    echo "fetched write-good" 1>&2
    ;;
  *)
    cat <<'JSON'
{"doc.md":[{"Line":1,"Span":[1,4],"Check":"Vale.Spelling","Message":"Did you really mean 'Thsi'?","Severity":"error","Match":"Thsi","Link":""}]}
JSON
    exit 1
    ;;
esac
"""


@pytest.fixture
def fake_vale_bin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Put a shell-script ``vale`` first on PATH and return its directory."""

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "vale"
    script.write_text(FAKE_VALE_SCRIPT, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir


@pytest.fixture
def clean_vale_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop every server setting so ServerConfig.from_env sees defaults."""

    for name in (
        "VALE_CONFIG_PATH",
        "VALE_MCP_COMMAND_TIMEOUT",
        "VALE_MCP_VALE_BINARY",
        "VALE_MCP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

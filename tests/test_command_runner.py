"""Subprocess runner tests against a fake ``vale`` executable."""

from __future__ import annotations

import asyncio
import json
import stat
from pathlib import Path

import pytest

from mcp_vale.services.command_runner import SubprocessCommandRunner
from mcp_vale.services.errors import ValeExecutionError, ValeNotInstalledError
from mcp_vale.services.vale_runner import ValeRunner


@pytest.mark.asyncio
async def test_captures_stdout_and_exit_code(fake_vale_bin: Path, tmp_path: Path) -> None:
    output = await SubprocessCommandRunner().run(
        ["vale", "--output=JSON", "doc.md"], cwd=tmp_path
    )

    assert output.exit_code == 1
    assert not output.ok
    assert json.loads(output.stdout)["doc.md"][0]["Check"] == "Vale.Spelling"


@pytest.mark.asyncio
async def test_missing_binary_is_not_installed(tmp_path: Path) -> None:
    with pytest.raises(ValeNotInstalledError):
        await SubprocessCommandRunner().run([str(tmp_path / "no-such-vale"), "--version"])


@pytest.mark.asyncio
async def test_timeout_kills_the_process(tmp_path: Path) -> None:
    slow = tmp_path / "slow-vale"
    slow.write_text("#!/bin/sh\nexec sleep 5\n", encoding="utf-8")
    slow.chmod(slow.stat().st_mode | stat.S_IXUSR)

    with pytest.raises(ValeExecutionError) as excinfo:
        await SubprocessCommandRunner(timeout=0.2).run([str(slow), "--version"])

    assert "did not finish" in str(excinfo.value)


@pytest.mark.asyncio
async def test_runner_end_to_end_with_fake_vale(
    fake_vale_bin: Path, tmp_path: Path
) -> None:
    doc = tmp_path / "doc.md"
    doc.write_text("Thsi is wrong.\n", encoding="utf-8")
    runner = ValeRunner(SubprocessCommandRunner())

    status = await runner.probe()
    result = await runner.check_file(str(doc))
    synced = await runner.sync()

    assert status.installed
    assert status.version == "vale version 3.7.1"
    assert result.summary.errors == 1
    assert result.issues[0].match == "Thsi"
    assert result.issues[0].link is None
    assert synced.success
    assert synced.output == "Downloading packages\n\nfetched write-good"


@pytest.mark.asyncio
async def test_missing_working_directory_is_not_a_missing_binary(
    fake_vale_bin: Path, tmp_path: Path
) -> None:
    with pytest.raises(ValeExecutionError) as excinfo:
        await SubprocessCommandRunner().run(
            ["vale", "--version"], cwd=tmp_path / "gone"
        )

    assert "Working directory is missing" in str(excinfo.value)


class _HangingProcess:
    returncode = None

    def __init__(self) -> None:
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        await asyncio.Event().wait()
        return b"", b""

    def kill(self) -> None:
        self.killed = True


@pytest.mark.asyncio
async def test_cancellation_kills_the_child(monkeypatch: pytest.MonkeyPatch) -> None:
    process = _HangingProcess()

    async def fake_exec(*args, **kwargs):
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    task = asyncio.create_task(SubprocessCommandRunner().run(["vale", "--version"]))
    for _ in range(3):
        await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert process.killed

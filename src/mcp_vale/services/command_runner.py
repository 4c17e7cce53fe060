"""Process boundary used to run the Vale binary.

Callers depend on the :class:`CommandRunner` protocol so normalization and
formatting can be exercised against canned outputs. The production
implementation never goes through a shell and never treats a non-zero exit
status as an error: interpreting the exit code is left to the caller.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from .errors import ValeExecutionError, ValeNotInstalledError

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of a finished command."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Protocol describing something that can run an argv to completion."""

    async def run(
        self, argv: Sequence[str], cwd: str | Path | None = None
    ) -> CommandOutput:  # pragma: no cover - trivial
        ...


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()


class SubprocessCommandRunner:
    """Runner backed by :func:`asyncio.create_subprocess_exec`."""

    __slots__ = ("timeout",)

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def run(
        self, argv: Sequence[str], cwd: str | Path | None = None
    ) -> CommandOutput:
        _LOG.debug("Running %s (cwd=%s)", " ".join(argv), cwd or ".")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd) if cwd is not None else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            if cwd is not None and not Path(cwd).is_dir():
                raise ValeExecutionError(
                    f"Working directory is missing: {cwd}"
                ) from exc
            raise ValeNotInstalledError(
                f"{argv[0]} not found in PATH. To install Vale, go to "
                "https://vale.sh/docs/vale-cli/installation/"
            ) from exc
        except PermissionError as exc:
            raise ValeNotInstalledError(f"{argv[0]} is not executable: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            _kill(process)
            await process.wait()
            raise ValeExecutionError(
                f"{argv[0]} did not finish within {self.timeout:g} seconds"
            ) from exc
        except asyncio.CancelledError:
            _kill(process)
            raise

        return CommandOutput(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=process.returncode if process.returncode is not None else -1,
        )

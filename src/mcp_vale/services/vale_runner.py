"""Invoke the Vale binary and turn its output into check results.

Vale exits non-zero whenever it reports alerts while still writing a usable
JSON document to stdout. :meth:`ValeRunner.run` therefore treats the presence
of stdout, not the exit status, as the success discriminant; empty stdout is
only accepted from a clean exit.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..domain.models import CheckResult, InstallationStatus, SyncResult
from .command_runner import CommandRunner, SubprocessCommandRunner
from .errors import ValeError, ValeExecutionError, ValeFileNotFoundError
from .report import format_results
from .vale_config import DEFAULT_VALE_BINARY, is_readable_file, resolve_path
from .vale_output import normalize_issues, parse_vale_output, summarize

_LOG = logging.getLogger(__name__)

DEFAULT_NOT_FOUND_MESSAGE = (
    "Vale not found in PATH. To install Vale, go to "
    "https://vale.sh/docs/vale-cli/installation/"
)


class InstallationCache:
    """Process-lifetime cache of the ``vale --version`` probe."""

    __slots__ = ("_runner", "_binary", "_status")

    def __init__(
        self, runner: CommandRunner, binary: str = DEFAULT_VALE_BINARY
    ) -> None:
        self._runner = runner
        self._binary = binary
        self._status: InstallationStatus | None = None

    @property
    def checked(self) -> bool:
        return self._status is not None

    async def probe(self) -> InstallationStatus:
        """Return the cached status, running the version query once."""

        if self._status is None:
            self._status = await self._query()
        return self._status

    def invalidate(self) -> None:
        """Forget the cached status so the next probe re-runs Vale."""

        self._status = None

    async def _query(self) -> InstallationStatus:
        try:
            output = await self._runner.run([self._binary, "--version"])
        except ValeError as exc:
            _LOG.debug("Vale version probe failed: %s", exc)
            return InstallationStatus(installed=False, error=str(exc))

        version = output.stdout.strip()
        if output.ok and version:
            return InstallationStatus(installed=True, version=version)
        error = output.stderr.strip() or DEFAULT_NOT_FOUND_MESSAGE
        return InstallationStatus(installed=False, error=error)


class ValeRunner:
    """Builds Vale command lines and executes them through a runner."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        binary: str = DEFAULT_VALE_BINARY,
        cache: InstallationCache | None = None,
    ) -> None:
        self.runner = runner or SubprocessCommandRunner()
        self.binary = binary
        self.cache = cache or InstallationCache(self.runner, binary)

    async def probe(self) -> InstallationStatus:
        return await self.cache.probe()

    async def sync(self, config_path: str | None = None) -> SyncResult:
        """Run ``vale sync``; failures are reported, never raised."""

        argv = [self.binary, "sync"]
        cwd: Path | None = None
        if config_path:
            if is_readable_file(config_path):
                # Resolved before the child changes into the config directory.
                config = resolve_path(config_path)
                cwd = config.parent
                argv.append(f"--config={config}")
            else:
                _LOG.warning("Config path %s is not accessible", config_path)

        _LOG.info("Running %s (cwd=%s)", " ".join(argv), cwd or Path.cwd())
        try:
            output = await self.runner.run(argv, cwd=cwd)
        except ValeError as exc:
            return SyncResult(
                success=False, message="Failed to sync Vale styles", error=str(exc)
            )

        if not output.ok:
            error = output.stderr.strip() or output.stdout.strip()
            return SyncResult(
                success=False,
                message="Failed to sync Vale styles",
                error=error or f"vale sync exited with status {output.exit_code}",
            )

        combined = output.stdout
        if output.stderr:
            combined += f"\n{output.stderr}"
        return SyncResult(
            success=True,
            message="Vale styles synchronized successfully",
            output=combined.strip(),
        )

    async def run(self, file_path: str, config_path: str | None = None) -> str:
        """Lint ``file_path`` and return Vale's raw stdout."""

        if not is_readable_file(file_path):
            raise ValeFileNotFoundError(file_path)

        absolute = resolve_path(file_path)
        argv = [self.binary, "--output=JSON"]
        if config_path:
            argv.append(f"--config={config_path}")
            _LOG.debug("Using explicit config: %s", config_path)
        else:
            _LOG.debug("Letting Vale search for config from: %s", absolute.parent)
        argv.append(str(absolute))

        # Vale searches upward for .vale.ini from its working directory.
        output = await self.runner.run(argv, cwd=absolute.parent)
        if output.stdout.strip() or output.ok:
            return output.stdout

        message = output.stderr.strip() or f"exit status {output.exit_code}"
        raise ValeExecutionError(f"Vale execution failed: {message}")

    async def check_file(
        self, file_path: str, config_path: str | None = None
    ) -> CheckResult:
        """Lint a file and build the normalized result with its report."""

        raw_output = await self.run(file_path, config_path)
        absolute = str(resolve_path(file_path))
        issues = tuple(normalize_issues(parse_vale_output(raw_output)))
        summary = summarize(issues)
        return CheckResult(
            file=absolute,
            issues=issues,
            summary=summary,
            formatted=format_results(issues, summary, absolute),
        )

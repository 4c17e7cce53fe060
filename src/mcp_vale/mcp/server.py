"""MCP server exposing the Vale prose linter over stdio."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import traceback
from dataclasses import dataclass
from typing import Any, Mapping

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..domain.models import ToolResponse
from ..services.command_runner import SubprocessCommandRunner
from ..services.errors import MissingStylesError, classify_failure
from ..services.install_guide import (
    host_platform,
    installation_instructions,
    installation_lines,
)
from ..services.vale_config import ServerConfig, resolve_vale_config
from ..services.vale_runner import ValeRunner
from . import reason_codes, schema_registry
from .schema_registry import SchemaValidationError

SERVER_NAME = "vale-mcp-server"
SERVER_VERSION = "0.1.0"

STATUS_RESPONSE_SCHEMA = "vale_status_response_v0.1"
NOT_INSTALLED_SCHEMA = "vale_not_installed_response_v0.1"
CHECK_FILE_STRUCTURED_SCHEMA = "check_file_structured_v0.1"
ERROR_RESPONSE_SCHEMA = "error_response_v0.1"

PACKAGES_DOC_URL = "https://vale.sh/docs/topics/packages/"

_LOG = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """State shared by every tool for the lifetime of the process."""

    runner: ValeRunner
    server_config: ServerConfig
    config_path: str | None = None
    """Server-wide ``.vale.ini`` resolved at startup."""

    @classmethod
    def from_config(cls, server_config: ServerConfig) -> "ToolContext":
        runner = ValeRunner(
            SubprocessCommandRunner(timeout=server_config.command_timeout),
            binary=server_config.vale_binary,
        )
        return cls(runner=runner, server_config=server_config)


def _json_text(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _error_payload(
    reason: str, error: str, details: str | None = None
) -> dict[str, str]:
    payload = {"error": error, "reason": reason}
    if details:
        payload["details"] = details
    return payload


def _contract_violation(
    schema_name: str, payload: Mapping[str, Any]
) -> dict[str, str] | None:
    """Return an error payload when ``payload`` cannot be shown to meet its schema.

    A missing or unreadable schema file counts as a violation so that the
    error path itself never raises.
    """

    try:
        schema_registry.validate(schema_name, payload)
    except SchemaValidationError as exc:
        _LOG.error("Response violated %s: %s", schema_name, exc.message)
    except (OSError, ValueError) as exc:
        _LOG.error("Schema %s could not be loaded: %s", schema_name, exc)
    else:
        return None
    return _error_payload(
        reason_codes.RESPONSE_VALIDATION_FAILED,
        "Service output did not meet the public contract.",
    )


def _validated(
    schema_name: str, payload: Mapping[str, Any]
) -> Mapping[str, Any]:
    return _contract_violation(schema_name, payload) or payload


def _json_response(schema_name: str, payload: Mapping[str, Any]) -> ToolResponse:
    return ToolResponse(text=_json_text(_validated(schema_name, payload)))


def error_response(
    reason: str, error: str, details: str | None = None
) -> ToolResponse:
    """Return a generic error payload with a stable reason code."""

    return _json_response(ERROR_RESPONSE_SCHEMA, _error_payload(reason, error, details))


def not_installed_response() -> ToolResponse:
    """Uniform answer for every gated tool when Vale is unavailable."""

    payload = {
        "error": "Vale is not installed or not found in PATH",
        "reason": reason_codes.VALE_NOT_INSTALLED,
        "vale_required": True,
        "installation_instructions": installation_instructions(),
        "message": (
            "Please install Vale to use this feature. "
            "Vale is a command-line tool for prose linting."
        ),
    }
    return _json_response(NOT_INSTALLED_SCHEMA, payload)


def styles_guidance(message: str) -> str:
    """Markdown telling the client to run ``vale_sync``."""

    return f"""❌ **Vale Configuration Error**

{message}

This error indicates that Vale's styles directory is missing or the configured packages haven't been downloaded yet.

**Solution:**
Run the `vale_sync` tool to download the required style packages:

```
vale_sync
```

This will:
1. Read your .vale.ini configuration
2. Download all configured style packages
3. Create the necessary styles directory

After running `vale_sync`, you can try `check_file` again.

For more information, see: {PACKAGES_DOC_URL}"""


class ValeStatusResource:
    """Report whether Vale is installed and how to install it otherwise."""

    __slots__ = ("context",)

    tool = Tool(
        name="vale_status",
        description=(
            "Check if Vale (vale.sh) is installed and accessible. Use this first "
            "if other Vale tools fail. Returns installation status, version if "
            "available, and installation instructions for the current platform."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "refresh": {
                    "type": "boolean",
                    "description": (
                        "Discard the cached installation check and query Vale again."
                    ),
                },
            },
        },
    )

    def __init__(self, context: ToolContext) -> None:
        self.context = context

    async def __call__(self, arguments: Mapping[str, Any]) -> ToolResponse:
        if arguments.get("refresh"):
            self.context.runner.cache.invalidate()

        status = await self.context.runner.probe()
        _LOG.debug("Vale installed: %s, version: %s", status.installed, status.version)

        payload: dict[str, Any] = {
            "installed": status.installed,
            "platform": host_platform(),
        }
        if status.installed:
            payload["version"] = status.version
            payload["message"] = (
                f"Vale is installed and ready to use ({status.version})"
            )
        else:
            payload["installation_instructions"] = installation_instructions()
            payload["message"] = (
                "Vale is not installed. Please install it to use Vale linting tools."
            )
        return _json_response(STATUS_RESPONSE_SCHEMA, payload)


class ValeSyncResource:
    """Download the style packages listed in ``.vale.ini``."""

    __slots__ = ("context",)

    tool = Tool(
        name="vale_sync",
        description=(
            "Download Vale styles and packages by running 'vale sync'. Use this "
            "when you see errors about missing styles directories (E100 errors "
            "like 'The path does not exist'). This command reads the .vale.ini "
            "configuration and downloads the required style packages."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "config_path": {
                    "type": "string",
                    "description": (
                        "Optional path to .vale.ini file. If not provided, uses the "
                        "server's configured path or searches in the current directory."
                    ),
                },
            },
        },
    )

    def __init__(self, context: ToolContext) -> None:
        self.context = context

    async def __call__(self, arguments: Mapping[str, Any]) -> ToolResponse:
        status = await self.context.runner.probe()
        if not status.installed:
            return not_installed_response()

        config_path = arguments.get("config_path") or self.context.config_path
        result = await self.context.runner.sync(config_path)
        _LOG.debug("vale_sync result - success: %s", result.success)

        if result.success:
            output = (
                f"**Output:**\n```\n{result.output}\n```" if result.output else ""
            )
            return ToolResponse(
                text=f"""✅ **Vale Sync Successful**

{result.message}

{output}

The styles have been downloaded and are ready to use. You can now run `check_file` again."""
            )

        error = f"**Error:**\n```\n{result.error}\n```" if result.error else ""
        return ToolResponse(
            text=f"""❌ **Vale Sync Failed**

{result.message}

{error}

Please check your .vale.ini configuration and ensure:
1. The StylesPath is correct
2. Packages are properly defined
3. You have internet connectivity to download packages

See Vale documentation: {PACKAGES_DOC_URL}"""
        )


class CheckFileResource:
    """Lint one file and return a markdown report plus structured issues."""

    __slots__ = ("context",)

    tool = Tool(
        name="check_file",
        description=(
            "Lint a file at a specific path against Vale style rules. Returns "
            "issues found with their locations and severity. If Vale is not "
            "installed, returns error with installation guidance."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": (
                        "Absolute or relative path to the file to check (required)"
                    ),
                },
            },
        },
    )

    def __init__(self, context: ToolContext) -> None:
        self.context = context

    async def __call__(self, arguments: Mapping[str, Any]) -> ToolResponse:
        file_path = arguments.get("path")
        if not file_path or not isinstance(file_path, str):
            return error_response(
                reason_codes.INVALID_INPUT, "Missing required parameter: path"
            )

        status = await self.context.runner.probe()
        if not status.installed:
            return not_installed_response()

        result = await self.context.runner.check_file(
            file_path, self.context.config_path
        )
        summary = result.summary
        _LOG.debug(
            "check_file result - file: %s, issues: %d, errors: %d, "
            "warnings: %d, suggestions: %d",
            result.file,
            summary.total,
            summary.errors,
            summary.warnings,
            summary.suggestions,
        )

        structured = result.structured_payload()
        violation = _contract_violation(CHECK_FILE_STRUCTURED_SCHEMA, structured)
        if violation is not None:
            return ToolResponse(text=_json_text(violation))
        return ToolResponse(text=result.formatted, structured=structured)


def build_tool_registry(context: ToolContext) -> dict[str, Any]:
    """Return the tool resources keyed by their MCP tool name."""

    resources = (
        ValeStatusResource(context),
        ValeSyncResource(context),
        CheckFileResource(context),
    )
    return {resource.tool.name: resource for resource in resources}


async def dispatch(
    registry: Mapping[str, Any], name: str, arguments: Mapping[str, Any] | None
) -> ToolResponse:
    """Run a tool by name; every failure becomes a response payload."""

    _LOG.debug("Tool called: %s %s", name, json.dumps(arguments or {}))
    resource = registry.get(name)
    if resource is None:
        return error_response(reason_codes.UNKNOWN_TOOL, f"Unknown tool: {name}")

    try:
        return await resource(arguments or {})
    except Exception as exc:
        failure = classify_failure(exc)
        if isinstance(failure, MissingStylesError):
            _LOG.warning("Vale styles are missing: %s", exc)
            return ToolResponse(text=styles_guidance(str(exc)))

        _LOG.error("Tool %s failed: %s", name, exc)
        return error_response(
            getattr(failure, "reason", reason_codes.INTERNAL_ERROR),
            str(exc) or "Unknown error",
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )


def create_server(context: ToolContext | None = None) -> Server:
    """Return an MCP server with the Vale tools registered."""

    context = context or ToolContext.from_config(ServerConfig.from_env())
    registry = build_tool_registry(context)
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [resource.tool for resource in registry.values()]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> Any:
        response = await dispatch(registry, name, arguments)
        content = [TextContent(type="text", text=response.text)]
        if response.structured is not None:
            return content, response.structured
        return content

    return server


async def initialize(context: ToolContext) -> None:
    """Probe Vale and pick the server-wide config before serving.

    The config path is resolved even when Vale is missing, so a later
    ``vale_status {"refresh": true}`` picks up the same ``.vale.ini``.
    """

    status = await context.runner.probe()
    if status.installed:
        _LOG.info("Vale version: %s", status.version)
    else:
        _LOG.warning(
            "Vale is not installed or not in PATH. The server will start, but "
            "linting tools will not work until Vale is installed."
        )
        for line in installation_lines():
            _LOG.warning(line)
        _LOG.warning(
            "Use the 'vale_status' tool to check installation status after installing."
        )

    context.config_path = resolve_vale_config(context.server_config)
    if context.config_path is None:
        _LOG.warning(
            "No .vale.ini file found in the current working directory; Vale will "
            "use default settings or search parent directories. Example .vale.ini:"
            "\n  StylesPath = styles\n  Packages = write-good, proselint\n\n  [*]"
            "\n  BasedOnStyles = write-good, proselint"
        )


async def serve(server_config: ServerConfig) -> None:
    """Initialize Vale and serve MCP requests on stdio."""

    context = ToolContext.from_config(server_config)
    await initialize(context)
    server = create_server(context)
    async with stdio_server() as (read_stream, write_stream):
        _LOG.info("%s v%s running on stdio", SERVER_NAME, SERVER_VERSION)
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    """Console entry point; logs go to stderr since stdout carries MCP."""

    server_config = ServerConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, server_config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        asyncio.run(serve(server_config))
    except Exception:
        _LOG.exception("Failed to start server")
        sys.exit(1)


if __name__ == "__main__":
    main()

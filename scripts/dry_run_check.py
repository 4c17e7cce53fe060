"""LOCAL-only CLI to lint a file with Vale and print the structured result."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT.parent / "src"))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run check_file against a document without an MCP client.",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Path to the document to lint.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Explicit .vale.ini to pass to Vale (default: usual discovery).",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print the markdown report instead of the JSON payload.",
    )
    return parser.parse_args()


async def run_check(path: Path, config: str | None) -> dict[str, object]:
    from mcp_vale.mcp.server import ToolContext, initialize
    from mcp_vale.services.vale_config import ServerConfig, resolve_vale_config

    server_config = ServerConfig.from_env()
    context = ToolContext.from_config(server_config)
    await initialize(context)
    status = await context.runner.probe()
    if not status.installed:
        raise SystemExit(f"Vale is not available: {status.error}")
    if config:
        context.config_path = resolve_vale_config(server_config, explicit=config)

    result = await context.runner.check_file(str(path), context.config_path)
    return {"formatted": result.formatted, **result.structured_payload()}


def main() -> None:
    args = parse_args()
    result = asyncio.run(run_check(args.path, args.config))
    if args.report:
        sys.stdout.write(str(result["formatted"]))
        return

    result.pop("formatted")
    sys.stdout.write(json.dumps(result, ensure_ascii=False))


if __name__ == "__main__":
    main()

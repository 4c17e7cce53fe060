"""Smoke test for the local dry-run check CLI."""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path


def test_dry_run_check_outputs_structured_payload(
    fake_vale_bin: Path, tmp_path: Path
) -> None:
    doc = tmp_path / "doc.md"
    doc.write_text("Thsi is wrong.\n", encoding="utf-8")
    env = dict(os.environ)
    for name in ("VALE_CONFIG_PATH", "VALE_MCP_VALE_BINARY", "VALE_MCP_COMMAND_TIMEOUT"):
        env.pop(name, None)

    result = subprocess.run(
        [
            sys.executable,
            str(Path(__file__).resolve().parents[1] / "scripts" / "dry_run_check.py"),
            str(doc),
        ],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )

    payload = json.loads(result.stdout)
    assert payload["file"] == str(doc)
    assert payload["summary"] == {
        "total": 1,
        "errors": 1,
        "warnings": 0,
        "suggestions": 0,
    }
    assert payload["issues"][0]["check"] == "Vale.Spelling"

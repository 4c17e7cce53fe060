"""Priority and environment tests for .vale.ini discovery."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mcp_vale.services.vale_config import (
    CONFIG_FILENAME,
    ServerConfig,
    find_config_in_dir,
    is_readable_file,
    resolve_vale_config,
)


def _write_ini(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("StylesPath = styles\n", encoding="utf-8")
    return path


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return Path.cwd()


def test_explicit_path_beats_server_override(tmp_path: Path, workdir: Path) -> None:
    override = _write_ini(tmp_path / "env" / ".vale.ini")
    explicit = _write_ini(tmp_path / "call" / ".vale.ini")
    _write_ini(workdir / CONFIG_FILENAME)

    resolved = resolve_vale_config(
        ServerConfig(config_path=str(override)), explicit=str(explicit)
    )

    assert resolved == str(explicit)


def test_relative_explicit_path_resolves_against_cwd(workdir: Path) -> None:
    resolved = resolve_vale_config(ServerConfig(), explicit="conf/custom.ini")

    assert resolved == str((workdir / "conf" / "custom.ini").resolve())


def test_server_override_used_when_readable(tmp_path: Path, workdir: Path) -> None:
    override = _write_ini(tmp_path / "env" / "team.ini")
    _write_ini(workdir / CONFIG_FILENAME)

    assert resolve_vale_config(ServerConfig(config_path=str(override))) == str(
        override
    )


def test_relative_server_override_resolves_against_cwd(workdir: Path) -> None:
    _write_ini(workdir / "cfg" / "vale.ini")

    resolved = resolve_vale_config(ServerConfig(config_path="cfg/vale.ini"))

    assert resolved == str((workdir / "cfg" / "vale.ini").resolve())


def test_missing_override_falls_through_to_working_dir(
    tmp_path: Path, workdir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    local = _write_ini(workdir / CONFIG_FILENAME)
    missing = tmp_path / "nope" / ".vale.ini"

    caplog.set_level(logging.WARNING)
    resolved = resolve_vale_config(ServerConfig(config_path=str(missing)))

    assert resolved == str(local)
    assert any(str(missing) in record.getMessage() for record in caplog.records)


def test_nothing_found_returns_none(workdir: Path) -> None:
    assert resolve_vale_config(ServerConfig()) is None
    assert find_config_in_dir(workdir) is None


def test_directory_is_not_a_readable_config(workdir: Path) -> None:
    (workdir / CONFIG_FILENAME).mkdir()

    assert not is_readable_file(workdir / CONFIG_FILENAME)
    assert resolve_vale_config(ServerConfig()) is None


def test_server_config_defaults(clean_vale_env: None) -> None:
    config = ServerConfig.from_env()

    assert config == ServerConfig()
    assert config.vale_binary == "vale"
    assert config.command_timeout is None
    assert config.log_level == "INFO"


def test_server_config_reads_environment(
    clean_vale_env: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("VALE_CONFIG_PATH", " /etc/vale/.vale.ini ")
    monkeypatch.setenv("VALE_MCP_COMMAND_TIMEOUT", "2.5")
    monkeypatch.setenv("VALE_MCP_VALE_BINARY", "/opt/vale/bin/vale")
    monkeypatch.setenv("VALE_MCP_LOG_LEVEL", "debug")

    config = ServerConfig.from_env()

    assert config.config_path == "/etc/vale/.vale.ini"
    assert config.command_timeout == 2.5
    assert config.vale_binary == "/opt/vale/bin/vale"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["", "   ", "soon", "0", "-3"])
def test_invalid_timeout_means_no_timeout(
    clean_vale_env: None, monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("VALE_MCP_COMMAND_TIMEOUT", raw)

    assert ServerConfig.from_env().command_timeout is None

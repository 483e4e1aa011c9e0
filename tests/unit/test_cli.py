"""Tests for the Typer CLI."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from repopilot.agents.types import Finding, WorkflowResult
from repopilot.cli.app import app
from repopilot.cli.runners import run_agents_cli
from repopilot.config import ServerConfig

runner = CliRunner()


def test_roles_lists_catalog():
    result = runner.invoke(app, ["roles"])
    assert result.exit_code == 0
    assert "Research Agent" in result.output
    assert "Testing Agent" in result.output


def test_roles_single_id():
    result = runner.invoke(app, ["roles", "--id", "QA"])
    assert result.exit_code == 0
    assert "Quality Agent" in result.output
    assert "Research Agent" not in result.output


def test_roles_unknown_id():
    result = runner.invoke(app, ["roles", "--id", "wizard"])
    assert result.exit_code == 1
    assert "research" in result.output


def test_serve_uses_config_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("REPOPILOT_HOST", raising=False)
    monkeypatch.delenv("REPOPILOT_PORT", raising=False)
    (tmp_path / ".repopilot.yml").write_text("host: 0.0.0.0\nport: 9123\n")
    with (
        patch("uvicorn.run") as mock_run,
        patch("repopilot.cli.app._first_open_port", side_effect=lambda host, port: port),
    ):
        result = runner.invoke(app, ["serve", "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert mock_run.call_args.args[0] == "repopilot.server.app:app"
    assert mock_run.call_args.kwargs["host"] == "0.0.0.0"
    assert mock_run.call_args.kwargs["port"] == 9123


def test_serve_flag_beats_config(tmp_path):
    (tmp_path / ".repopilot.yml").write_text("port: 9123\n")
    with (
        patch("uvicorn.run") as mock_run,
        patch("repopilot.cli.app._first_open_port", side_effect=lambda host, port: port + 1),
    ):
        result = runner.invoke(app, ["serve", "--cwd", str(tmp_path), "--port", "7000"])

    assert result.exit_code == 0
    assert mock_run.call_args.kwargs["port"] == 7001
    assert "busy" in result.output


def test_agents_invalid_policy(tmp_path):
    result = runner.invoke(
        app, ["agents", "o", "r", "do it", "--policy", "retry", "--cwd", str(tmp_path)]
    )
    assert result.exit_code == 2


def test_agents_passes_options(tmp_path):
    with patch("repopilot.cli.runners.run_agents_cli", new_callable=AsyncMock) as mock_run:
        mock_run.return_value = 0
        result = runner.invoke(
            app,
            [
                "agents",
                "octo",
                "demo",
                "Add a y export",
                "-f",
                "src/index.ts",
                "-f",
                "README.md",
                "--ref",
                "dev",
                "--timeout",
                "5",
                "--cwd",
                str(tmp_path),
            ],
        )

    assert result.exit_code == 0
    cfg = mock_run.call_args.args[0]
    kwargs = mock_run.call_args.kwargs
    assert cfg.agent_timeout == 5.0
    assert kwargs["file_paths"] == ["src/index.ts", "README.md"]
    assert kwargs["ref"] == "dev"
    assert kwargs["user_prompt"] == "Add a y export"


async def _run(monkeypatch, result: WorkflowResult) -> int:
    monkeypatch.setenv("GITHUB_TOKEN", "gh")
    monkeypatch.setenv("OPENAI_API_KEY", "sk")
    with patch(
        "repopilot.agents.workflow.run_agent_workflow", new_callable=AsyncMock
    ) as mock_workflow:
        mock_workflow.return_value = result
        return await run_agents_cli(
            ServerConfig(),
            owner="o",
            repo="r",
            ref="main",
            file_paths=[],
            user_prompt="p",
        )



@pytest.mark.asyncio
async def test_runner_exit_code_achieved(monkeypatch):
    result = WorkflowResult(agents=[Finding(role="Research Agent", confidence=0.9)])
    assert await _run(monkeypatch, result) == 0


@pytest.mark.asyncio
async def test_runner_exit_code_partial(monkeypatch):
    result = WorkflowResult(
        agents=[Finding(role="Research Agent", error="down")], status="partial"
    )
    assert await _run(monkeypatch, result) == 1


@pytest.mark.asyncio
async def test_runner_missing_credentials(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk")
    code = await run_agents_cli(
        ServerConfig(), owner="o", repo="r", ref="main", file_paths=[], user_prompt="p"
    )
    assert code == 1

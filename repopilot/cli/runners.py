"""Async runners behind the CLI commands."""

from __future__ import annotations

import json
import os
import time

from rich.console import Console
from rich.panel import Panel

from repopilot.agents.types import WorkflowResult
from repopilot.config import ServerConfig

console = Console()


def _confidence_color(confidence: float) -> str:
    if confidence >= 0.7:
        return "green"
    if confidence >= 0.4:
        return "yellow"
    return "red"


def render_workflow_result(result: WorkflowResult, elapsed: float) -> None:
    console.print("\n[bold blue]Agent Findings:[/bold blue]")
    for finding in result.agents:
        icon = "❌" if finding.failed else "✅"
        color = _confidence_color(finding.confidence)
        console.print(
            f"  {icon} [bold]{finding.role}[/bold] "
            f"[{color}]confidence={finding.confidence:.2f}[/{color}]"
        )
        if finding.summary:
            console.print(f"     [dim]{finding.summary[:200]}[/dim]")
        for change in finding.proposed_changes:
            console.print(f"     • [cyan]{change.path}[/cyan]: {change.summary}")
        for risk in finding.risks:
            console.print(f"     [yellow]risk:[/yellow] {risk}")

    if result.recommended_tests:
        console.print("\n[bold blue]Recommended Tests:[/bold blue]")
        for i, test in enumerate(result.recommended_tests, 1):
            console.print(f"  {i}. {test}")

    status_color = {
        "achieved": "green",
        "partial": "yellow",
        "failed": "red",
    }.get(result.status, "red")

    notes = "\n".join(f"• {n}" for n in result.notes)
    console.print(
        Panel(
            f"[bold {status_color}]{result.status.upper()}[/bold {status_color}]\n\n"
            f"{notes}\n\n"
            f"Agents: [bold]{len(result.agents)}[/bold]  ·  "
            f"Tests: [bold]{len(result.recommended_tests)}[/bold]  ·  "
            f"Time: [bold]{elapsed:.1f}s[/bold]",
            border_style=status_color,
            title="[bold]Agent Workflow Complete[/bold]",
        )
    )


async def run_agents_cli(
    cfg: ServerConfig,
    *,
    owner: str,
    repo: str,
    ref: str,
    file_paths: list[str],
    user_prompt: str,
    as_json: bool = False,
) -> int:
    """Run the agent workflow with credentials from the environment."""
    from repopilot.agents.workflow import AgentWorkflowRequest, run_agent_workflow
    from repopilot.errors import RepopilotError
    from repopilot.github.client import GitHubClient
    from repopilot.llm.completion import LiteLLMCompletionClient

    token = os.environ.get("GITHUB_TOKEN")
    api_key = os.environ.get("OPENAI_API_KEY")
    if not token or not api_key:
        missing = "GITHUB_TOKEN" if not token else "OPENAI_API_KEY"
        console.print(f"[red]{missing} is not set[/red]")
        return 1

    request = AgentWorkflowRequest(
        owner=owner,
        repo=repo,
        base_branch=ref,
        user_prompt=user_prompt,
        file_paths=file_paths,
    )
    completion = LiteLLMCompletionClient(
        model_name=cfg.model_name,
        api_key=api_key,
        temperature=cfg.temperature,
    )

    if not as_json:
        console.print(
            f"\n[bold blue]Running {owner}/{repo}@{ref}[/bold blue] "
            f"[dim]model={cfg.model_name}  policy={cfg.failure_policy}[/dim]"
        )
    started_at = time.time()

    try:
        async with GitHubClient(
            token, api_base=cfg.github_api_base, timeout=cfg.github_timeout
        ) as github:
            result = await run_agent_workflow(
                request, github=github, completion=completion, config=cfg
            )
    except RepopilotError as e:
        console.print(f"\n[red]Agent workflow failed ({e.status_code}): {e.message}[/red]")
        return 1

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        render_workflow_result(result, time.time() - started_at)

    return 0 if result.status == "achieved" else 1

"""Typer CLI for repopilot."""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()
app = typer.Typer(
    name="repopilot",
    help="Multi-agent change review for GitHub repositories.",
    add_completion=False,
    no_args_is_help=True,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def _first_open_port(host: str, preferred: int, attempts: int = 20) -> int:
    """Return *preferred* or the first port after it that can be bound."""
    import socket

    for candidate in range(preferred, preferred + attempts):
        try:
            sock = socket.create_server((host, candidate))
        except OSError:
            continue
        sock.close()
        return candidate
    raise RuntimeError(f"Ports {preferred}-{preferred + attempts - 1} on {host} are all taken")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Host to bind to (default from config)"),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port to listen on (default from config)"
    ),
    reload: bool = typer.Option(False, "--reload", help="Reload on source changes"),
    cwd: str = typer.Option(".", "--cwd", "-C", help="Directory holding .repopilot.yml"),
) -> None:
    """Start the repopilot HTTP API.

    Host and port default to the ``host``/``port`` settings of
    .repopilot.yml or REPOPILOT_HOST / REPOPILOT_PORT.
    """
    from repopilot.config import resolve_config

    _configure_logging(verbose=True)

    try:
        cfg = resolve_config(cwd, host=host, port=port)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from e

    import uvicorn

    bind_port = _first_open_port(cfg.host, cfg.port)
    if bind_port != cfg.port:
        console.print(f"[yellow]Port {cfg.port} is busy, serving on {bind_port}.[/yellow]")

    console.print(
        Panel(
            f"[bold cyan]repopilot API[/bold cyan] on [bold]http://{cfg.host}:{bind_port}[/bold]\n"
            f"[dim]model={cfg.model_name}  policy={cfg.failure_policy}[/dim]",
            border_style="cyan",
        )
    )
    uvicorn.run(
        "repopilot.server.app:app",
        host=cfg.host,
        port=bind_port,
        reload=reload,
        log_level="info",
    )


@app.command()
def agents(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    prompt: str = typer.Argument(..., help="Change request in plain language"),
    ref: str = typer.Option("main", "--ref", "-r", help="Branch or commit to read files from"),
    files: list[str] | None = typer.Option(
        None, "--file", "-f", help="Repository file to include as context (repeatable)"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="LLM model"),
    policy: str | None = typer.Option(
        None, "--policy", help="Failure policy: isolate | fail_fast"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", help="Seconds per agent (0 = no limit)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON report"),
    cwd: str = typer.Option(".", "--cwd", "-C", help="Directory holding .repopilot.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    """Run the six review agents over selected repository files.

    Credentials are read from GITHUB_TOKEN and OPENAI_API_KEY.

    Examples:
        repopilot agents octo demo "Add a y export" -f src/index.ts
        repopilot agents octo demo "Harden input parsing" --policy fail_fast --json
    """
    from repopilot.config import resolve_config

    _configure_logging(verbose)

    try:
        cfg = resolve_config(
            cwd,
            model_name=model,
            failure_policy=policy,
            agent_timeout=timeout,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from e

    from repopilot.cli.runners import run_agents_cli

    exit_code = asyncio.run(
        run_agents_cli(
            cfg,
            owner=owner,
            repo=repo,
            ref=ref,
            file_paths=list(files or []),
            user_prompt=prompt,
            as_json=as_json,
        )
    )
    raise typer.Exit(code=exit_code)


@app.command()
def roles(
    task_id: str | None = typer.Option(None, "--id", help="Show a single role by id"),
) -> None:
    """List the agent roles dispatched by every workflow run."""
    from repopilot.agents.catalog import AGENT_TASKS, get_task, list_task_ids

    tasks = AGENT_TASKS
    if task_id is not None:
        task = get_task(task_id)
        if task is None:
            console.print(
                f"[red]Unknown role id: '{task_id}'. Available: {', '.join(list_task_ids())}[/red]"
            )
            raise typer.Exit(code=1)
        tasks = (task,)

    table = Table(title="Agent roles")
    table.add_column("#", style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Role", style="bold", no_wrap=True)
    table.add_column("Objective")
    for task in tasks:
        table.add_row(str(AGENT_TASKS.index(task) + 1), task.id, task.role, task.objective)
    console.print(table)

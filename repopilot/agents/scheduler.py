"""Fan-out scheduler: runs every agent task concurrently over a shared context."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Literal

from repopilot.agents.catalog import AGENT_TASKS, SUPPORTED_LANGUAGES
from repopilot.agents.prompts import AGENT_USER_MESSAGE, build_agent_prompt
from repopilot.agents.types import Finding, Task
from repopilot.agents.validator import parse_finding
from repopilot.errors import AdapterError
from repopilot.llm.completion import CompletionClient

logger = logging.getLogger(__name__)

FailurePolicy = Literal["isolate", "fail_fast"]
FAILURE_POLICIES: tuple[str, ...] = ("isolate", "fail_fast")


async def run_agent_task(
    client: CompletionClient,
    task: Task,
    context: str,
    user_prompt: str,
    languages: Sequence[str] = SUPPORTED_LANGUAGES,
    timeout: float | None = None,
) -> Finding:
    """Run a single agent task and validate its reply."""
    prompt = build_agent_prompt(task, languages, user_prompt, context)
    started = time.time()

    call = client.complete(prompt, AGENT_USER_MESSAGE)
    if timeout:
        try:
            raw = await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            raise AdapterError(f"{task.role} timed out after {timeout:g}s") from e
    else:
        raw = await call

    finding = parse_finding(raw, task)
    logger.info(
        "%s finished in %.1fs (confidence=%.2f)",
        task.role,
        time.time() - started,
        finding.confidence,
    )
    return finding


def degraded_finding(task: Task, error: BaseException) -> Finding:
    """Build the placeholder finding reported for a failed task."""
    reason = str(error) or type(error).__name__
    return Finding(
        role=task.role,
        summary=f"agent failed: {reason}",
        confidence=0.0,
        error=reason,
    )


async def run_agents(
    client: CompletionClient,
    context: str,
    user_prompt: str,
    tasks: Sequence[Task] = AGENT_TASKS,
    *,
    languages: Sequence[str] = SUPPORTED_LANGUAGES,
    timeout: float | None = None,
    failure_policy: FailurePolicy = "isolate",
) -> list[Finding]:
    """Dispatch every task concurrently and wait for all of them.

    Findings are returned in the order of *tasks*, whatever order the
    underlying calls complete in.

    With ``failure_policy="isolate"`` a failing task is reported as a
    degraded finding and the others are kept. With ``"fail_fast"`` the first
    failure cancels the remaining tasks and is re-raised.
    """
    if failure_policy not in FAILURE_POLICIES:
        raise ValueError(f"Unknown failure policy: {failure_policy!r}")

    coros = [
        run_agent_task(client, task, context, user_prompt, languages, timeout)
        for task in tasks
    ]

    if failure_policy == "fail_fast":
        pending = [asyncio.ensure_future(c) for c in coros]
        try:
            return list(await asyncio.gather(*pending))
        except BaseException:
            for fut in pending:
                fut.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise

    results = await asyncio.gather(*coros, return_exceptions=True)

    findings: list[Finding] = []
    for task, result in zip(tasks, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning("%s failed: %s", task.role, result)
            findings.append(degraded_finding(task, result))
        else:
            findings.append(result)
    return findings

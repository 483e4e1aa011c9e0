"""End-to-end multi-agent workflow: context → fan-out → aggregation."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from repopilot.agents.aggregator import aggregate
from repopilot.agents.catalog import AGENT_TASKS, SUPPORTED_LANGUAGES
from repopilot.agents.scheduler import run_agents
from repopilot.agents.types import WorkflowResult
from repopilot.config import ServerConfig
from repopilot.context import FileFetcher, assemble_context
from repopilot.errors import InvalidRequest
from repopilot.llm.completion import CompletionClient

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "owner, repo, baseBranch, userPrompt, and filePaths are required"


@dataclass
class AgentWorkflowRequest:
    """Parameters of one workflow run, as posted by the control panel."""

    owner: str
    repo: str
    base_branch: str
    user_prompt: str
    file_paths: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> AgentWorkflowRequest:
        """Read the camelCase request body. Missing fields fail validation."""
        if not isinstance(payload, dict):
            raise InvalidRequest(REQUIRED_FIELDS_MESSAGE)
        file_paths = payload.get("filePaths")
        request = cls(
            owner=payload.get("owner"),  # type: ignore[arg-type]
            repo=payload.get("repo"),  # type: ignore[arg-type]
            base_branch=payload.get("baseBranch"),  # type: ignore[arg-type]
            user_prompt=payload.get("userPrompt"),  # type: ignore[arg-type]
            file_paths=[] if file_paths is None else file_paths,
        )
        request.validate()
        return request

    def validate(self) -> None:
        for value in (self.owner, self.repo, self.base_branch, self.user_prompt):
            if not isinstance(value, str) or not value.strip():
                raise InvalidRequest(REQUIRED_FIELDS_MESSAGE)
        if not isinstance(self.file_paths, list) or not all(
            isinstance(p, str) and p for p in self.file_paths
        ):
            raise InvalidRequest(REQUIRED_FIELDS_MESSAGE)


async def run_agent_workflow(
    request: AgentWorkflowRequest,
    *,
    github: FileFetcher,
    completion: CompletionClient,
    config: ServerConfig | None = None,
) -> WorkflowResult:
    """Run every agent over the selected files and aggregate their findings."""
    config = config or ServerConfig()
    request.validate()

    run_id = uuid.uuid4().hex[:8]
    started = time.time()
    logger.info(
        "[%s] Agent workflow for %s/%s@%s with %d file(s)",
        run_id,
        request.owner,
        request.repo,
        request.base_branch,
        len(request.file_paths),
    )

    context = await assemble_context(
        github,
        request.owner,
        request.repo,
        request.base_branch,
        request.file_paths,
    )

    findings = await run_agents(
        completion,
        context,
        request.user_prompt,
        AGENT_TASKS,
        languages=SUPPORTED_LANGUAGES,
        timeout=config.timeout_or_none,
        failure_policy=config.failure_policy,  # type: ignore[arg-type]
    )
    result = aggregate(findings)

    logger.info(
        "[%s] Agent workflow %s in %.1fs (%d recommended tests)",
        run_id,
        result.status,
        time.time() - started,
        len(result.recommended_tests),
    )
    return result

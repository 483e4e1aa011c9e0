"""
repopilot HTTP API: FastAPI application

Endpoints:
- POST /api/agent-workflow   run the six review agents over selected files
- POST /api/generate-change  single-shot change-set proposal
- POST /api/list-files       browse a repository directory
- POST /api/list-repos       repositories of the authenticated user
- GET  /api/agents           the agent catalog
- GET  /health               liveness check
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from repopilot.agents.catalog import get_all_tasks_info
from repopilot.agents.workflow import AgentWorkflowRequest, run_agent_workflow
from repopilot.changes import generate_change
from repopilot.config import ServerConfig, resolve_config
from repopilot.errors import InvalidRequest, RepopilotError
from repopilot.github.client import GitHubClient
from repopilot.llm.completion import CompletionClient, LiteLLMCompletionClient
from repopilot.server.auth import require_github_token, require_openai_api_key

logger = logging.getLogger(__name__)

GitHubFactory = Callable[[str], GitHubClient]
CompletionFactory = Callable[[str], CompletionClient]


@lru_cache(maxsize=1)
def get_config() -> ServerConfig:
    return resolve_config()


def get_github_factory(config: ServerConfig = Depends(get_config)) -> GitHubFactory:
    def factory(token: str) -> GitHubClient:
        return GitHubClient(
            token,
            api_base=config.github_api_base,
            timeout=config.github_timeout,
        )

    return factory


def get_completion_factory(
    config: ServerConfig = Depends(get_config),
) -> CompletionFactory:
    def factory(api_key: str) -> CompletionClient:
        return LiteLLMCompletionClient(
            model_name=config.model_name,
            api_key=api_key,
            temperature=config.temperature,
        )

    return factory


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    config = get_config()
    logger.info("Starting repopilot API...")
    logger.info("Model: %s", config.model_name)
    logger.info(
        "Failure policy: %s, agent timeout: %s",
        config.failure_policy,
        f"{config.agent_timeout:g}s" if config.agent_timeout else "none",
    )
    yield
    logger.info("Shutting down repopilot API...")


app = FastAPI(title="repopilot", lifespan=lifespan)


@app.exception_handler(RepopilotError)
async def repopilot_error_handler(request: Request, exc: RepopilotError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s rejected (%d): %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _read_body(request: Request, message: str) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise InvalidRequest(message) from e
    if not isinstance(body, dict):
        raise InvalidRequest(message)
    return body


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/agents")
async def list_agents() -> list[dict[str, Any]]:
    return get_all_tasks_info()


@app.post("/api/agent-workflow")
async def agent_workflow(
    request: Request,
    config: ServerConfig = Depends(get_config),
    github_factory: GitHubFactory = Depends(get_github_factory),
    completion_factory: CompletionFactory = Depends(get_completion_factory),
) -> dict[str, Any]:
    body = await _read_body(request, "owner, repo, baseBranch, userPrompt, and filePaths are required")
    workflow_request = AgentWorkflowRequest.from_payload(body)

    token = require_github_token(request, config)
    api_key = require_openai_api_key(request, config)

    async with github_factory(token) as github:
        result = await run_agent_workflow(
            workflow_request,
            github=github,
            completion=completion_factory(api_key),
            config=config,
        )
    return result.to_dict()


@app.post("/api/generate-change")
async def generate_change_endpoint(
    request: Request,
    config: ServerConfig = Depends(get_config),
    github_factory: GitHubFactory = Depends(get_github_factory),
    completion_factory: CompletionFactory = Depends(get_completion_factory),
) -> dict[str, Any]:
    body = await _read_body(request, "owner, repo, baseBranch, userPrompt, and filePaths are required")
    change_request = AgentWorkflowRequest.from_payload(body)

    token = require_github_token(request, config)
    api_key = require_openai_api_key(request, config)

    async with github_factory(token) as github:
        change_set = await generate_change(
            change_request,
            github=github,
            completion=completion_factory(api_key),
        )
    return change_set.to_dict()


@app.post("/api/list-files")
async def list_files(
    request: Request,
    config: ServerConfig = Depends(get_config),
    github_factory: GitHubFactory = Depends(get_github_factory),
) -> list[dict[str, Any]]:
    body = await _read_body(request, "owner and repo are required")
    owner, repo = body.get("owner"), body.get("repo")
    if not isinstance(owner, str) or not owner or not isinstance(repo, str) or not repo:
        raise InvalidRequest("owner and repo are required")
    path = body.get("path") or ""
    ref = body.get("ref") or None

    token = require_github_token(request, config)
    async with github_factory(token) as github:
        return await github.list_files(owner, repo, str(path), ref)


@app.post("/api/list-repos")
async def list_repos(
    request: Request,
    config: ServerConfig = Depends(get_config),
    github_factory: GitHubFactory = Depends(get_github_factory),
) -> list[dict[str, Any]]:
    token = require_github_token(request, config)
    async with github_factory(token) as github:
        return await github.list_repos()
